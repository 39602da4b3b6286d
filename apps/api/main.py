"""FastAPI application entrypoint for the pet hotel reservation service."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from apps.api.deps import ServiceContainer, build_container
from apps.api.routers import admin, chatbot, reservations
from core.config import settings
from core.logging import setup_logging
from db.session import AsyncSessionLocal, close_db, init_db


logger = logging.getLogger(__name__)


def create_app(
    services: Optional[ServiceContainer] = None,
    bind: Optional[AsyncEngine] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        services: Pre-wired services (tests); built from settings when omitted
        bind: Engine behind ``services``; defaults to the global engine

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.
        Handles startup and shutdown events.
        """
        setup_logging()
        logger.info(f"Starting {settings.app_name}...")

        try:
            await init_db(bind)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

        app.state.services.realtime.start()
        logger.info("Application startup complete")

        yield

        logger.info(f"Shutting down {settings.app_name}...")
        await app.state.services.realtime.stop()
        await close_db(bind)

    app = FastAPI(
        title=settings.app_name,
        description="Pet hotel reservation lifecycle and synchronization service",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services or build_container(AsyncSessionLocal)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(reservations.router, prefix=settings.api_v1_prefix)
    app.include_router(admin.router, prefix=settings.api_v1_prefix)
    app.include_router(chatbot.router, prefix=settings.api_v1_prefix)

    @app.get("/")
    async def root():
        """Root endpoint - health check."""
        return {
            "app": settings.app_name,
            "status": "running",
            "version": "1.0.0",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        container: ServiceContainer = app.state.services
        return {
            "status": "healthy",
            "realtime_subscribers": container.store.channel.subscriber_count,
            "bus_subscribers": container.bus.subscriber_count,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "apps.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
