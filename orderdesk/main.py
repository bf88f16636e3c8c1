"""
OrderDesk API application.

Order management service: place orders, track their status, take
payment and handle cancellations.

Run locally with ``python -m orderdesk.main`` or
``uvicorn orderdesk.main:app``.
"""
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orderdesk.core.config import settings
from orderdesk.core.database import close_db, init_db
from orderdesk.core.logging import configure_logging, get_logger
from orderdesk.middleware import (
    ErrorHandlerMiddleware,
    RequestContextMiddleware,
    register_exception_handlers,
)
from orderdesk.routers import health_router, orders_router
from orderdesk.services.payment_service import PaymentService

configure_logging()
logger = get_logger(__name__)


def _init_sentry() -> None:
    if not settings.sentry_dsn:
        return

    import sentry_sdk

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"orderdesk@{settings.app_version}",
        traces_sample_rate=0.1,
    )
    logger.info("Sentry initialized", environment=settings.environment)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "Starting application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )
    await init_db()
    _init_sentry()

    try:
        yield
    finally:
        logger.info("Shutting down application")
        await close_db()


def _add_middleware(app: FastAPI) -> None:
    # Last added runs first: CORS -> request context -> error handler -> routes
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )


def create_app(payment_service: PaymentService | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        payment_service: Gateway shared by all requests. Built from
            settings when omitted.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Order management API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.started_at = time.monotonic()
    app.state.payment_service = payment_service or PaymentService.from_settings(settings)

    _add_middleware(app)
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(orders_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "orderdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
