from __future__ import annotations

import logging

from fastapi import FastAPI

from app.config import get_api_settings
from app.schemas.kpi import HealthResponse
from kpi.call_center import CALL_CENTER_METRICS


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = get_api_settings().log_level
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()
    settings = get_api_settings()

    application = FastAPI(
        title=settings.title,
        version=settings.version,
    )

    from app.api.routers import kpi_router

    application.include_router(kpi_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(metrics_available=len(CALL_CENTER_METRICS))

    logging.getLogger(__name__).info(
        "API configured with %d call-center metrics", len(CALL_CENTER_METRICS)
    )
    return application


app = create_app()
