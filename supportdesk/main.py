"""
SupportDesk Service - Main application entry point.

FastAPI adapter over the concurrency layer: record writes, curator
notifications and versioned profiles.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from supportdesk.api.v1.routers import (
    curators_router,
    profile_sync_router,
    health_router,
    notifications_router,
    profile_router,
    records_router,
)
from supportdesk.core.config import AppConfig, logger, settings
from supportdesk.core.container import ServiceContainer
from supportdesk.infrastructure.storage import KeyValueStore


def create_app(config: Optional[AppConfig] = None, store: Optional[KeyValueStore] = None) -> FastAPI:
    """
    Build the application with its own service container.

    Args:
        config: Settings (module settings by default)
        store: Pre-built key-value store (by config.storage_backend otherwise)
    """
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info("Starting SupportDesk...")
        logger.info(f"Version: {config.version}, storage: {config.storage_backend}")

        container = ServiceContainer(config, store=store)
        app.state.container = container
        await container.start()

        yield

        logger.info("Shutting down SupportDesk...")
        await container.stop()

    application = FastAPI(
        title="SupportDesk Service",
        version=config.version,
        description="Support session journal with real-time curator notifications",
        lifespan=lifespan,
    )

    application.include_router(health_router)
    application.include_router(records_router)
    application.include_router(notifications_router)
    application.include_router(profile_router)
    application.include_router(curators_router)
    application.include_router(profile_sync_router)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "supportdesk.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
    )
