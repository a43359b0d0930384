import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from rbac_admin import __version__
from rbac_admin.api.middleware.request_logging import RequestLoggingMiddleware
from rbac_admin.api.middleware.security_headers import SecurityHeadersMiddleware
from rbac_admin.api.routers import analytics, auth, health, menus, permissions, roles, system_menus, users
from rbac_admin.core.config import Settings, get_settings
from rbac_admin.core.logger import configure_logging
from rbac_admin.db.analytics import AnalyticsDatabase
from rbac_admin.db.session import Database

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    analytics_db: Optional[AnalyticsDatabase] = None,
) -> FastAPI:
    """
    Build the application.

    Database handles default to ones built from settings; both are
    initialized on startup and shut down on exit.
    """
    settings = settings or get_settings()
    database = database or Database.from_settings(settings)
    analytics_db = analytics_db or AnalyticsDatabase.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        database.init()
        analytics_db.init()
        logger.info("%s %s started", settings.app_name, __version__)
        try:
            yield
        finally:
            analytics_db.shutdown()
            database.shutdown()
            logger.info("%s stopped", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        description="Role-based admin panel with a sales analytics dashboard",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.analytics_db = analytics_db

    app.add_middleware(SecurityHeadersMiddleware, debug=settings.debug)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Database error"})

    app.include_router(auth.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(roles.router, prefix="/api")
    app.include_router(permissions.router, prefix="/api")
    app.include_router(menus.router, prefix="/api")
    app.include_router(system_menus.router, prefix="/api")
    app.include_router(analytics.router, prefix="/api")
    app.include_router(health.router)

    @app.get("/")
    def root():
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs" if settings.debug else None,
        }

    return app


app = create_app()
