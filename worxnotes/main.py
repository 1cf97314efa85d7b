"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from worxnotes.config import Settings, get_settings
from worxnotes.database import init_db
from worxnotes.dependencies import build_services
from worxnotes.logging_config import configure_logging
from worxnotes.routers import notifications, repairs, suggestions

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application. Missing backend configuration fails here."""
    settings = settings or get_settings()
    services = build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan events for the application.
        Handles startup and shutdown events.
        """
        # Startup
        configure_logging(settings.log_level)
        logger.info("Starting %s %s", settings.app_name, settings.app_version)
        await init_db(services.engine)
        services.toasts.mount()
        logger.info("Record store ready, API available at %s", settings.api_v1_prefix)

        yield

        # Shutdown
        services.toasts.unmount()
        await services.engine.dispose()
        logger.info("Shut down %s", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
    ## Worx Notes API

    Repair sheets for the shop floor: tire tread, brake pads, tire pressure,
    customer and RO details, and an optional diagnostic text file.

    ### Entities:
    * **Repair sheets**: create, browse, edit, print and delete
    * **Notifications**: the toasts currently on screen
    * **Suggestions**: feedback forwarded by email
    """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.services = services

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(repairs.router, prefix=settings.api_v1_prefix)
    app.include_router(notifications.router, prefix=settings.api_v1_prefix)
    app.include_router(repairs.ws_router)
    app.include_router(suggestions.router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "new_repair": f"{settings.api_v1_prefix}/repairs/new",
            "view_repairs": f"{settings.api_v1_prefix}/repairs",
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.app_version,
        }

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "worxnotes.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
