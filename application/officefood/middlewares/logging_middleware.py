"""
Audit and request logging middleware built on Starlette's BaseHTTPMiddleware
"""
import json
import socket
import time
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from officefood.logging.utils import get_app_logger, init_audit_logger
from officefood.logging.config import LoggingConfig
from officefood.middlewares.request_context import create_request_id, request_context, clear_request_context

# Settings
from officefood.config.settings import OfficeFoodConfigs
configs = OfficeFoodConfigs()

MASKED_HEADERS = ('authorization', 'cookie')
MASKED_BODY_FIELDS = ('code', 'refreshToken')


class AuditMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.logger = get_app_logger('officefood.requests')
        self.exclude_audit_paths = exclude_paths or ['/health', '/docs', '/redoc', '/openapi.json']
        self.hostname = socket.gethostname()
        self.app_name = configs.APP_NAME
        self.version = configs.APP_VERSION

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        clear_request_context()
        request_id = create_request_id()
        start_time = time.time()
        timestamp = datetime.now(timezone.utc).isoformat()

        request_context.request_method = request.method
        request_context.request_path = request.url.path
        request_context.app_version = request.headers.get('x-app-version', '')

        should_audit = LoggingConfig.AUDIT_LOGGING_ENABLED and not any(
            request.url.path.startswith(p) for p in self.exclude_audit_paths
        )
        body_bytes = await request.body() if should_audit else b''

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = (time.time() - start_time) * 1000
            self.logger.error(
                f"request_failed | method={request.method} path={request.url.path} exception_type={exc.__class__.__name__} duration_ms={duration:.0f}",
                exc_info=True,
            )
            if should_audit:
                audit_data = self._build_audit_data(request, Response(status_code=500), body_bytes, duration, request_id, timestamp)
                audit_data['exception'] = exc.__class__.__name__
                init_audit_logger(request.method).info("Audit log (exception)", extra=audit_data)
            raise

        duration = (time.time() - start_time) * 1000
        response.headers['X-Request-ID'] = request_id
        self.logger.info(f"request_completed | method={request.method} path={request.url.path} status_code={response.status_code} duration_ms={duration:.0f}")
        if should_audit:
            audit_data = self._build_audit_data(request, response, body_bytes, duration, request_id, timestamp)
            init_audit_logger(request.method).info("Audit log", extra=audit_data)
        return response

    @staticmethod
    def _mask_headers(headers) -> dict:
        return {k: ('****' if k.lower() in MASKED_HEADERS else v) for k, v in headers.items()}

    @staticmethod
    def _parse_body(request: Request, body_bytes: bytes):
        if not body_bytes:
            return {}
        if 'application/json' not in request.headers.get('content-type', ''):
            return body_bytes.decode('utf-8', errors='replace')[:1000]
        try:
            body = json.loads(body_bytes)
        except ValueError:
            return body_bytes.decode('utf-8', errors='replace')[:1000]
        if isinstance(body, dict):
            body = {k: ('****' if k in MASKED_BODY_FIELDS else v) for k, v in body.items()}
        return body

    def _build_audit_data(self, request: Request, response: Response, body_bytes: bytes,
                          duration: float, request_id: str, timestamp: str) -> dict:
        status_code = getattr(response, 'status_code', 0)
        response_data = ''
        body = getattr(response, 'body', None)
        # streamed responses cannot be read here
        if LoggingConfig.CAPTURE_RESPONSE_BODY and not 200 <= status_code < 300 and body:
            response_data = body.decode('utf-8', errors='replace')[:1000]

        return {
            'duration': round(duration, 2),
            'hostname': self.hostname,
            'app_name': self.app_name,
            'module_name': request_context.module_name,
            'request': {
                "GET": dict(request.query_params),
                "BODY": self._parse_body(request, body_bytes),
                "HEADERS": self._mask_headers(dict(request.headers)),
            },
            'request_id': request_id,
            'request_method': request.method,
            'request_path': request.url.path,
            'response': response_data,
            'size_in_bytes': int(response.headers.get('content-length', 0) or 0),
            'status_code': status_code,
            'timestamp': timestamp,
            'version': self.version,
            'user_id': request_context.user_id or '',
        }
