import re
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from officefood.config.settings import OfficeFoodConfigs
from officefood.connections.database import get_db_session
from officefood.core.constants import PUBLIC_AUTH_PATHS, TokenType
from officefood.core.exceptions import Forbidden, Unauthorized
from officefood.core.permissions import require_admin
from officefood.logging.utils import get_app_logger
from officefood.middlewares.request_context import request_context
from officefood.services.auth_service import AuthService
from officefood.services.token_service import TokenService

logger = get_app_logger(__name__)
configs = OfficeFoodConfigs()

# (methods, path pattern relative to the API prefix) that require ADMIN
ADMIN_RULES = (
    ({"POST", "PUT", "PATCH", "DELETE"}, re.compile(r"^/menu(/.*)?$")),
    ({"POST", "PUT", "PATCH", "DELETE"}, re.compile(r"^/orders/sessions(/[^/]+)?$")),
    ({"GET"}, re.compile(r"^/billing(/.*)?$")),
)


def extract_bearer_token(auth_header: str | None) -> str | None:
    if not auth_header:
        return None
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def requires_admin(method: str, path: str) -> bool:
    return any(method in methods and pattern.match(path) for methods, pattern in ADMIN_RULES)


class JWTAuthMiddleware(BaseHTTPMiddleware):
    """Validate bearer access tokens and attach the caller's claims to `request.state.user`."""

    def __init__(self, app, include_path_start: str = configs.API_PREFIX):
        super().__init__(app)
        self.include_path_start = include_path_start
        self.public_paths = {f"{include_path_start}{path}" for path in PUBLIC_AUTH_PATHS}
        self.tokens = TokenService()

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path.rstrip("/") or "/"
        if not path.startswith(self.include_path_start) or path in self.public_paths:
            return await call_next(request)

        token = extract_bearer_token(request.headers.get("authorization"))
        if not token:
            return JSONResponse(status_code=401, content={"message": "Unauthorized"})

        try:
            claims = self.tokens.decode(token, TokenType.ACCESS)
            with get_db_session(read_only=True) as db:
                user = AuthService(db).validate(claims)
        except Unauthorized as e:
            logger.warning(f"auth_rejected | path={path} reason={e.message}")
            return JSONResponse(status_code=401, content={"message": e.message})

        relative_path = path[len(self.include_path_start):]
        if requires_admin(request.method, relative_path):
            try:
                require_admin(user)
            except Forbidden as e:
                logger.warning(f"auth_forbidden | path={path} user_id={user['id']} role={user['role']}")
                return JSONResponse(status_code=e.status_code, content={"message": e.message})

        request.state.user = user
        request.state.user_id = user["id"]
        request_context.user_id = user["id"]
        request_context.company_id = user.get("companyId") or ""
        return await call_next(request)


def get_current_user(request: Request) -> dict:
    """FastAPI dependency returning the claims stored by JWTAuthMiddleware."""
    user = getattr(request.state, "user", None)
    if user is None:
        raise Unauthorized("Unauthorized")
    return user
