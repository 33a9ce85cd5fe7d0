"""FastAPI application factory and lifespan management."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from contact_index import __version__
from contact_index.config import Settings
from contact_index.contacts.repository import JsonContactRepository, RepositoryError
from contact_index.contacts.service import ContactService
from contact_index.middleware.logging import RequestLoggingMiddleware
from contact_index.routes import contacts, health, search
from contact_index.search.manager import IndexManager

logger = structlog.get_logger()


def build_service(settings: Settings) -> ContactService:
    """Wire a contact service from configuration.

    Args:
        settings: Configuration providing the data path and id range.

    Returns:
        Uninitialized contact service.
    """
    repository = JsonContactRepository(settings.data_path)
    manager = IndexManager(
        id_min=settings.id_min,
        id_max=settings.id_max,
        max_attempts=settings.id_max_attempts,
    )
    return ContactService(repository, manager)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle events.

    Loads the persisted contact set and builds the indexes on startup.
    Saves the contact set on shutdown when configured to.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    logger.info("api_startup", host=settings.host, port=settings.port)

    service = build_service(settings)
    count = await asyncio.to_thread(service.initialize)
    logger.info("contact_index_ready", contact_count=count)

    app.state.contact_service = service

    try:
        yield
    finally:
        if settings.save_on_shutdown:
            try:
                saved = await asyncio.to_thread(service.save_changes)
                logger.info("contacts_saved_on_shutdown", count=saved)
            except RepositoryError as e:
                logger.error("contacts_save_on_shutdown_failed", path=e.path, error=str(e))
        logger.info("api_shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory function to create configured FastAPI application.

    Args:
        settings: Configuration instance. Creates default if None.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Contact Index API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/v1/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/api/v1/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(contacts.router, prefix="/api/v1")
    app.include_router(search.router, prefix="/api/v1")

    return app
