"""
Core constants for the OfficeFood application

Order statuses, user roles and other shared values.
"""

class OrderStatus:
    """Order lifecycle statuses as stored in the database"""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    ALL = (PENDING, CONFIRMED, PREPARING, READY, DELIVERED, CANCELLED)

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in cls.ALL


class UserRole:
    ADMIN = "ADMIN"
    USER = "USER"


class TokenType:
    ACCESS = "access"
    REFRESH = "refresh"


class ExportFormat:
    """Billing export formats mapped to file extension and content type"""

    PDF = "pdf"
    EXCEL = "excel"

    EXTENSIONS = {
        PDF: "pdf",
        EXCEL: "xlsx",
    }
    CONTENT_TYPES = {
        PDF: "application/pdf",
        EXCEL: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }


# Public API paths that skip bearer authentication
PUBLIC_AUTH_PATHS = (
    "/auth/send-otp",
    "/auth/verify-otp",
    "/auth/refresh",
)

OTP_SENT_MESSAGE = "OTP sent successfully"
LOGOUT_MESSAGE = "Logged out successfully"
