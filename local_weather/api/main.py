from typing import Optional

import time
from contextlib import asynccontextmanager
from fastapi import FastAPI
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError

import structlog

from ..config import AppSettings
from ..estimation.errors import EstimationError
from ..ingestion.run import client_from_settings, refresh_database
from ..logging import init_logging
from ..services.database import Database
from ..services.estimation_service import EstimationService
from ..services.refresh_service import RefreshService
from .middleware import (
    RequestIDMiddleware,
    estimation_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .routes import health, heat_index

logger = structlog.get_logger()


def _make_refresh_service(settings: AppSettings, database: Database) -> Optional[RefreshService]:
    if not settings.aemet_api_key:
        logger.warning("refresh_disabled", reason="APP_AEMET_API_KEY is not set")
        return None
    client = client_from_settings(settings)
    return RefreshService(
        job=lambda: refresh_database(database.open(), client),
        interval_s=settings.refresh_interval_s,
        run_immediately=settings.refresh_on_startup,
    )


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    settings = settings or AppSettings()
    init_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.database.open()
        refresh = _make_refresh_service(settings, app.state.database)
        if refresh is not None:
            refresh.start()
        app.state.refresh_service = refresh
        try:
            yield
        finally:
            if refresh is not None:
                refresh.stop()
            app.state.database.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "health", "description": "Service health and uptime"},
            {"name": "estimation", "description": "Local weather estimated from nearby stations"},
        ],
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(EstimationError, estimation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(heat_index.router, prefix="/api", tags=["estimation"])

    app.state.settings = settings
    app.state.start_time = time.time()
    # Database opens lazily so tests without lifespan still work
    app.state.database = Database(settings.database_url)
    app.state.estimation_service = EstimationService(settings, app.state.database)
    app.state.refresh_service = None

    return app


if __name__ == "__main__":
    import uvicorn

    s = AppSettings()
    uvicorn.run(create_app(s), host=s.host, port=s.port)
