"""
app/schemas/kpi.py

Request and response schemas for call-center KPI endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.services.kpi_service import KPIResult
from kpi.base import MetricDefinition


class MetricDefinitionResponse(BaseModel):
    """
    API response model for one catalog entry.
    """

    id: str
    name: str
    description: str
    inputs: list[str]
    unit: str
    divisor: str | None = None

    @classmethod
    def from_definition(cls, definition: MetricDefinition) -> "MetricDefinitionResponse":
        return cls(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            inputs=list(definition.inputs),
            unit=definition.unit,
            divisor=definition.divisor,
        )


class KPICalculationRequest(BaseModel):
    """
    Aggregates for one calculation, given either positionally or by name.
    """

    model_config = ConfigDict(extra="forbid")

    args: list[float] | None = None
    inputs: dict[str, float] | None = None

    @model_validator(mode="after")
    def _exactly_one_form(self) -> "KPICalculationRequest":
        if (self.args is None) == (self.inputs is None):
            raise ValueError("Provide exactly one of 'args' or 'inputs'.")
        return self


class KPIResultResponse(BaseModel):
    """
    API response model for a computed KPI.
    """

    metric: str
    value: float | None
    unit: str
    computed_at: datetime
    guarded: bool = False
    error: str | None = None

    @classmethod
    def from_result(cls, result: KPIResult) -> "KPIResultResponse":
        return cls(
            metric=result.metric,
            value=result.value,
            unit=result.unit,
            computed_at=result.computed_at,
            guarded=result.guarded,
            error=result.error,
        )


class HealthResponse(BaseModel):
    status: str = Field(default="ok")
    metrics_available: int = Field(..., ge=0)
