"""
app/services package marker.
"""

from app.services.kpi_service import (
    CallCenterKPIService,
    KPIResult,
    KPIServiceError,
    MetricArityError,
    UnknownMetricError,
    get_kpi_service,
)

__all__ = [
    "CallCenterKPIService",
    "KPIResult",
    "KPIServiceError",
    "MetricArityError",
    "UnknownMetricError",
    "get_kpi_service",
]
