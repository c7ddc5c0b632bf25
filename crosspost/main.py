from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from .config import settings
from .infrastructure.logging import configure_logging
from .presentation.api.dependencies import get_database
from .presentation.api.errors import register_exception_handlers
from .presentation.api.v1 import connections, health, publish
from .presentation.middleware import (
    CorrelationIdMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)

VERSION = "0.1.0"

configure_logging(settings.service_name, debug=settings.debug)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Crosspost starting",
        version=VERSION,
        db_host=settings.db_host,
        oauth_providers=settings.configured_providers(),
        publish_concurrency=settings.publish_concurrency,
    )
    if not settings.auth_enabled:
        logger.warning("Authentication disabled, every token maps to the dev user")
    if settings.secret_key == "change-me-in-production":
        logger.warning("OAuth state is signed with the default secret_key")

    # Schema is managed by Alembic
    yield

    await get_database().close()
    logger.info("Crosspost stopped")


app = FastAPI(
    title="Crosspost API",
    description="Connect social accounts and publish to many of them at once",
    version=VERSION,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Starlette runs the last-added middleware outermost
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.max_request_bytes)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(health.router)
app.include_router(connections.router, prefix="/api/v1")
app.include_router(publish.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
def root() -> dict:
    return {"service": settings.service_name, "version": VERSION, "docs": "/docs"}
