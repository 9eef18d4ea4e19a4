from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.responses import JSONResponse
from typing import Any
from officefood.config.sentry import capture_exception, add_breadcrumb
from officefood.core.exceptions import OfficeFoodError
from officefood.logging.utils import get_app_logger
from officefood.middlewares.request_context import request_context

logger = get_app_logger(__name__)

# Settings
from officefood.config.settings import OfficeFoodConfigs
configs = OfficeFoodConfigs()


def _generic_message(status_code: int) -> str:
    if status_code == 404:
        return "Resource not found"
    if status_code == 403:
        return "Access denied"
    if status_code == 401:
        return "Authentication required"
    if 400 <= status_code < 500:
        return "Invalid request"
    return "Something went wrong"


async def _domain_exception_handler(request: Request, exc: OfficeFoodError):
    """Render service errors; their messages are safe to show in production"""
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"domain_error | method={request.method} path={request.url.path} type={type(exc).__name__} status_code={exc.status_code} message={exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"validation_error | method={request.method} path={request.url.path} errors={exc.errors()}")

    add_breadcrumb(
        message=f"Validation error on {request.method} {request.url.path}",
        category="validation",
        level="warning",
        data={"errors": str(exc.errors())}
    )

    if not configs.DEBUG:
        payload = {"message": "Invalid request data"}
    else:
        # "field -> path: message" per error
        error_messages = []
        for err in exc.errors():
            field_path = " -> ".join(str(loc) for loc in err.get("loc", []))
            error_messages.append(f"{field_path}: {err.get('msg', 'Invalid input')}")

        if len(error_messages) == 1:
            payload = {"message": error_messages[0]}
        else:
            payload = {"message": "Validation errors", "errors": error_messages}

    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)


async def _http_exception_handler(request: Request, exc: Any):
    """Handle HTTP exceptions with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    status_code = getattr(exc, 'status_code', status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail = getattr(exc, 'detail', str(exc))
    if status_code >= 500:
        logger.error(f"http_exception | method={request.method} path={request.url.path} status_code={status_code} detail={detail}", exc_info=True)
        add_breadcrumb(
            message=f"HTTP {status_code} error on {request.method} {request.url.path}",
            category="http",
            level="error",
            data={"status_code": status_code, "detail": str(detail)}
        )
        capture_exception(exc)
    else:
        logger.warning(f"http_exception | method={request.method} path={request.url.path} status_code={status_code} detail={detail}")

    message = detail if configs.DEBUG else _generic_message(status_code)
    return JSONResponse(status_code=status_code, content={"message": message}, headers=getattr(exc, 'headers', None))


async def _general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    logger.error(
        f"unhandled_exception | method={request.method} path={request.url.path} exception_type={type(exc).__name__} exception_message={str(exc)}",
        exc_info=True,
    )

    add_breadcrumb(
        message=f"Unhandled exception on {request.method} {request.url.path}",
        category="exception",
        level="error",
        data={"exception_type": type(exc).__name__, "exception_message": str(exc)}
    )
    capture_exception(exc)

    if not configs.DEBUG:
        payload = {"message": "Something went wrong"}
    else:
        payload = {"message": f"Internal server error: {str(exc)}"}

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the given FastAPI instance."""
    app.add_exception_handler(OfficeFoodError, _domain_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _general_exception_handler)
