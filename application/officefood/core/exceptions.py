"""
Domain errors raised by services and rendered by middlewares.handlers
"""
from fastapi import status


class OfficeFoodError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(OfficeFoodError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class InvalidInput(OfficeFoodError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class InvalidState(OfficeFoodError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Operation not allowed in the current state"


class Unauthorized(OfficeFoodError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(OfficeFoodError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class RateLimited(OfficeFoodError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many attempts, try again later"
