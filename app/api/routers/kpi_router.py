"""
app/api/routers/kpi_router.py

Call-center KPI catalog and calculation endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas.kpi import (
    KPICalculationRequest,
    KPIResultResponse,
    MetricDefinitionResponse,
)
from app.services.kpi_service import (
    CallCenterKPIService,
    MetricArityError,
    UnknownMetricError,
    get_kpi_service,
)
from kpi.base import MetricDefinition

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kpi/call-center", tags=["kpi"])


def _get_definition(service: CallCenterKPIService, metric_id: str) -> MetricDefinition:
    try:
        return service.get_metric(metric_id)
    except UnknownMetricError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.get("/metrics", response_model=list[MetricDefinitionResponse])
def list_metrics(
    service: CallCenterKPIService = Depends(get_kpi_service),
) -> list[MetricDefinitionResponse]:
    """
    Return every catalog entry in catalog order.
    """
    return [
        MetricDefinitionResponse.from_definition(definition)
        for definition in service.list_metrics()
    ]


@router.get("/metrics/{metric_id}", response_model=MetricDefinitionResponse)
def get_metric(
    metric_id: str,
    service: CallCenterKPIService = Depends(get_kpi_service),
) -> MetricDefinitionResponse:
    """
    Return one catalog entry. Raises HTTP 404 for an unknown id.
    """
    return MetricDefinitionResponse.from_definition(_get_definition(service, metric_id))


@router.post(
    "/metrics/{metric_id}/calculate",
    response_model=KPIResultResponse,
    status_code=status.HTTP_200_OK,
)
def calculate_metric(
    metric_id: str,
    body: KPICalculationRequest,
    service: CallCenterKPIService = Depends(get_kpi_service),
) -> KPIResultResponse:
    """
    Calculate one KPI from pre-aggregated inputs.

    A zero divisor is not an error: the response carries ``value=0`` and
    ``guarded=true``.

    Raises HTTP 404 for an unknown ``metric_id``.
    Raises HTTP 422 when the inputs do not match the metric's signature.
    """
    try:
        if body.args is not None:
            result = service.calculate(metric_id, *body.args)
        else:
            result = service.calculate_named(metric_id, body.inputs or {})
    except UnknownMetricError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except MetricArityError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    logger.info("KPI calculated metric=%s guarded=%s", result.metric, result.guarded)
    return KPIResultResponse.from_result(result)
