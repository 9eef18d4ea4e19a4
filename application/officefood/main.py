from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from officefood.connections.database import close_db_pool
from officefood.logging.utils import initialize_logging, get_app_logger
from officefood.middlewares.logging_middleware import AuditMiddleware

# Settings
from officefood.config.settings import OfficeFoodConfigs
configs = OfficeFoodConfigs()

# Initialize Sentry before the app is built
from officefood.config.sentry import init_sentry
init_sentry()

initialize_logging()
logger = get_app_logger('officefood.main')

logger.info(f"Running in {'debug' if configs.DEBUG else 'production'} mode | environment={configs.ENVIRONMENT}")


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info("Starting OfficeFood API")
    yield
    logger.info("Shutting down OfficeFood API")
    close_db_pool()

# Disable docs in production (when DEBUG=false)
docs_url = "/docs" if configs.DEBUG else None
redoc_url = "/redoc" if configs.DEBUG else None

app = FastAPI(
    title="OfficeFood API",
    version=configs.APP_VERSION,
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url
)

if configs.ALLOWED_ORIGINS:
    origins = [origin.strip() for origin in configs.ALLOWED_ORIGINS.split(",")]
else:
    origins = ["*"]

# Middlewares run in reverse order of registration: audit wraps auth
from officefood.middlewares.jwt_auth import JWTAuthMiddleware
app.add_middleware(JWTAuthMiddleware)
app.add_middleware(AuditMiddleware)

logger.info(f"Configuring CORS with allowed origins: {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register custom exception handlers
from officefood.middlewares.handlers import register_exception_handlers
register_exception_handlers(app)


# Routes
from officefood.routes.app import app_router
from officefood.routes.auth_otp import router as auth_otp_router
from officefood.routes.health import router as health_router

app.include_router(auth_otp_router, prefix=f"{configs.API_PREFIX}/auth")
app.include_router(app_router, prefix=configs.API_PREFIX)
app.include_router(health_router, tags=["health"])
