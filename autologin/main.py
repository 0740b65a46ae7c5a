import logging
from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from autologin.api.autologin import router as autologin_router
from autologin.api.backoffice import router as backoffice_router
from autologin.core.config import settings
from autologin.core.database import engine
from autologin.core.exceptions import ConfigurationError, StorageError
from autologin.models import Base

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(),
    ],
)

# Completely disable SQLAlchemy logging
logging.getLogger("sqlalchemy").setLevel(logging.CRITICAL)
logging.getLogger("sqlalchemy.engine").setLevel(logging.CRITICAL)
logging.getLogger("sqlalchemy.pool").setLevel(logging.CRITICAL)

logger = logging.getLogger(__name__)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up Autologin application...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(
        f"Database URL: {settings.DATABASE_URL.split('@')[-1] if '@' in settings.DATABASE_URL else 'local'}"
    )
    logger.info(f"App Domain: {settings.APP_DOMAIN}")

    # Fail fast on unusable token settings
    settings.autologin_config()

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")
    except Exception as e:
        logger.error(f"Database initialization failed: {str(e)}")
        raise

    # Initialize scheduler
    try:
        from autologin.core.scheduler import setup_scheduler

        await setup_scheduler()
    except Exception as e:
        logger.error(f"Scheduler initialization failed: {str(e)}")
        # Don't raise - links are still swept on issue when AUTOLOGIN_REMOVE_EXPIRED is set

    yield

    logger.info("Shutting down Autologin application...")

    try:
        from autologin.core.scheduler import shutdown_scheduler

        await shutdown_scheduler()
    except Exception as e:
        logger.error(f"Scheduler shutdown failed: {str(e)}")


app = FastAPI(
    title="Autologin API", lifespan=lifespan, docs_url=None, redoc_url=None
)

# configure logfire only if token exists and not using fake token
if settings.LOGFIRE_TOKEN and settings.LOGFIRE_TOKEN != "fake-token-for-testing":
    try:
        logfire.configure(token=settings.LOGFIRE_TOKEN)
        logfire.instrument_fastapi(app, excluded_urls="/healthz")
        # Instrument SQLAlchemy (async engine) so query spans are captured
        logfire.instrument_sqlalchemy(engine)
    except Exception as e:
        logger.warning(f"Failed to configure Logfire: {e}")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Security middleware
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["Strict-Transport-Security"] = (
        "max-age=31536000; includeSubDomains"
    )
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    # Autologin URLs carry a credential, keep them out of Referer headers
    response.headers["Referrer-Policy"] = "no-referrer"
    return response


app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    max_age=31536000,  # 1 year (365 days * 24 hours * 60 minutes * 60 seconds)
    same_site="lax",  # The session must survive the redirect after following an emailed link
    https_only=(settings.ENVIRONMENT == "production"),
)

# Include API routers
app.include_router(autologin_router)
app.include_router(backoffice_router)


@app.get("/healthz", include_in_schema=False)
async def healthz():
    return {"status": "ok"}
