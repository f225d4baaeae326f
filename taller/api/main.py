"""
ASGI entry point for the pipeline API.

Run with ``uvicorn taller.api.main:app`` or ``python -m taller.api.main``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taller.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from taller.api.middleware.error_handler import setup_exception_handlers
from taller.api.routes import (
    folios_router,
    health_router,
    inventory_router,
    pipeline_router,
)
from taller.config import configure_logging, get_logger, get_settings
from taller.infrastructure.storage.sqlite import close_pool, get_pool, reset_uow_factory
from taller.infrastructure.storage.sqlite.migrations import initialize_database

logger = get_logger(__name__)


async def _open_database() -> None:
    results = await initialize_database()
    failed = [r for r in results if not r.success]
    if failed:
        raise RuntimeError(f"migration v{failed[0].version} failed: {failed[0].error}")
    logger.info("database_ready", migrations_applied=len(results))
    await get_pool()


async def _close_database() -> None:
    await close_pool()
    reset_uow_factory()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Migrate and open the pool before serving; close the pool afterwards."""
    settings = get_settings()
    logger.info(
        "application_starting",
        environment=settings.environment,
        host=settings.api.host,
        port=settings.api.port,
    )

    try:
        await _open_database()
    except Exception as e:
        logger.error("database_unavailable", error=str(e))
        raise

    yield

    try:
        await _close_database()
    except Exception as e:
        logger.warning("database_close_failed", error=str(e))
    logger.info("application_stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Quotation to work order to dispatch to invoice, per tenant",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Outermost last: CORS, then error capture, then request logging
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    setup_exception_handlers(app)

    for router in (health_router, pipeline_router, folios_router, inventory_router):
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def root_health() -> dict[str, str]:
        """Liveness probe for container orchestrators."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "taller.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
