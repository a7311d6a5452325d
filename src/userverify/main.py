"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from userverify import __version__
from userverify.api.router import api_router
from userverify.config import settings
from userverify.database import close_db
from userverify.logging import setup_logging

logger = logging.getLogger(__name__)

setup_logging()

# Initialize Sentry for error tracking
if settings.sentry_dsn:
    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    yield
    await close_db()


app = FastAPI(
    title="User Verification API",
    description="Email verification links for user accounts",
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug_enabled else None,
    redoc_url="/api/redoc" if settings.debug_enabled else None,
    openapi_url="/api/openapi.json" if settings.debug_enabled else None,
)

app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    from userverify.logging import get_uvicorn_log_config

    uvicorn.run(
        "userverify.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_config=get_uvicorn_log_config(),
    )
