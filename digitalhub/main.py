import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from digitalhub import __version__
from digitalhub.core.config import Settings
from digitalhub.core.errors import HubError, hub_error_handler
from digitalhub.core.logging import RequestLoggingMiddleware, configure_logging
from digitalhub.db import Database
from digitalhub.routers.account import api as account_api
from digitalhub.routers.admin import api as admin_api
from digitalhub.routers.catalog import api as catalog_api
from digitalhub.routers.payments import api as payments_api

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    owns_database = app.state.database is None
    if owns_database:
        settings: Settings = app.state.settings
        app.state.database = Database(settings.database_url, echo=settings.db_echo)

    logger.info("Olamco Digital Hub API started successfully")
    logger.info("=== Registered Routes ===")
    for route in app.routes:
        if isinstance(route, APIRoute):
            methods = ",".join(sorted(route.methods))
            logger.info(f"{methods:8} {route.path}")
    logger.info("=== End of Routes ===")

    try:
        yield
    finally:
        if owns_database:
            await app.state.database.dispose()
            app.state.database = None
        logger.info("Olamco Digital Hub API stopped")


def create_app(
    settings: Optional[Settings] = None, database: Optional[Database] = None
) -> FastAPI:
    """
    Build the application.

    Without ``database`` the engine is created on startup and disposed on
    shutdown; a caller that passes one keeps ownership of it.
    """
    settings = settings or Settings.from_env()
    configure_logging(environment=settings.environment, log_level=settings.log_level)

    app = FastAPI(
        title="Olamco Digital Hub API",
        description="Digital product marketplace: catalog, commissions, referrals and Paystack payouts",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    app.add_exception_handler(HubError, hub_error_handler)

    # Add request logging middleware (before CORS so it logs all requests)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(account_api.router, prefix="/api")
    app.include_router(catalog_api.router, prefix="/api")
    app.include_router(payments_api.router, prefix="/api")
    app.include_router(admin_api.router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint for monitoring.
        """
        return {"status": "healthy", "version": __version__}

    return app
