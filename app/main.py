"""
FastAPI application for the slot booking service

Providers publish services and time slots, clients book them; every booking
change is fanned out to connected dashboards.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from app.api.v1.router import api_v1_router
from app.config.database import create_tables
from app.config.settings import Settings, get_settings
from app.core.exceptions import register_exception_handlers
from app.core.middleware import correlation_id_middleware, request_logging_middleware
from app.core.monitoring import health_router
from app.services.notification.notification_service import LocalBroadcaster, create_notifier
from app.utils.my_logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(
        app_settings: Optional[Settings] = None,
        notifier: Optional[LocalBroadcaster] = None,
) -> FastAPI:
    """Create and configure FastAPI application"""
    app_settings = app_settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: the notifier lives exactly as long as the process serves"""
        setup_logging()
        logger.info(f"{app_settings.APP_NAME} starting up...")

        if app_settings.AUTO_CREATE_TABLES:
            create_tables()

        app.state.notifier = notifier or create_notifier(app_settings)
        app.state.notifier.start()

        routes = sorted(
            (route.path, ",".join(sorted(route.methods)))
            for route in app.routes if isinstance(route, APIRoute)
        )
        logger.info(f"{len(routes)} routes registered")
        for path, methods in routes:
            logger.debug(f"  {methods:20} {path}")

        yield

        # Shutdown
        app.state.notifier.close()
        if app_settings.NOTIFICATION_BACKEND.lower() == "redis":
            from app.config.redis import close_redis_pool
            close_redis_pool()
        logger.info(f"{app_settings.APP_NAME} shutting down...")

    app = FastAPI(
        title=app_settings.APP_NAME,
        description="Time-slot allocation and booking lifecycle",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if app_settings.DEBUG else None,
        redoc_url="/redoc" if app_settings.DEBUG else None,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # Add custom middleware (last registered runs first)
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": app_settings.APP_NAME,
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api/v1/",
                "health": "/health",
                "docs": "/docs" if app_settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
