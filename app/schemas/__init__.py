"""
app/schemas package marker.
"""

from app.schemas.kpi import (
    HealthResponse,
    KPICalculationRequest,
    KPIResultResponse,
    MetricDefinitionResponse,
)

__all__ = [
    "HealthResponse",
    "KPICalculationRequest",
    "KPIResultResponse",
    "MetricDefinitionResponse",
]
