"""
app/services/kpi_service.py

Call-center KPI calculation service.

Thin lookup layer over :data:`kpi.call_center.CALL_CENTER_METRICS`.
Callers pass pre-aggregated counters and time sums, either positionally in
the documented order or by input name, and receive a :class:`KPIResult`.

No aggregation happens here: building the aggregates from call records is
the caller's responsibility.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Mapping

from app.config import KPISettings, get_kpi_settings
from app.logging_utils import log_event
from kpi.base import MetricDefinition
from kpi.call_center import CALL_CENTER_METRICS, get_metric

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class KPIServiceError(Exception):
    """Base error for KPI lookup and call-shape problems."""


class UnknownMetricError(KPIServiceError, LookupError):
    """Raised when a metric id is not in the catalog."""

    def __init__(self, metric_id: str) -> None:
        super().__init__(f"Unknown metric id: {metric_id!r}")
        self.metric_id = metric_id


class MetricArityError(KPIServiceError, ValueError):
    """Raised when the supplied inputs do not match a metric's signature."""


# ---------------------------------------------------------------------------
# Output dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KPIResult:
    """
    Structured result returned by every KPI calculation method.

    ``value`` is ``None`` only when strict input checking rejected the
    inputs. Inspect ``error`` for the reason. A zero divisor is not an
    error: the value is ``0.0`` and ``guarded`` is ``True``.
    """

    metric: str
    """Catalog id of the KPI (e.g. ``"AHT"``, ``"FCR"``)."""

    value: float | None
    """Computed KPI value, or ``None`` if the inputs were rejected."""

    unit: str
    """Unit of measurement (e.g. ``"percent"``, ``"duration"``, ``"ratio"``)."""

    computed_at: datetime = field(
        default_factory=lambda: datetime.now(tz=timezone.utc)
    )
    """UTC timestamp of when the result was produced."""

    guarded: bool = False
    """True when the divisor was zero and the guard value was returned."""

    error: str | None = None
    """Populated with a short description when ``value`` is ``None``."""


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CallCenterKPIService:
    """
    Stateless, deterministic call-center KPI engine.

    Usage::

        service = CallCenterKPIService()
        result = service.calculate("FCR", 75, 100)
        print(result.value)  # 75.0
    """

    def __init__(self, settings: KPISettings | None = None) -> None:
        self._settings = settings or get_kpi_settings()

    @property
    def settings(self) -> KPISettings:
        return self._settings

    def list_metrics(self) -> list[MetricDefinition]:
        return list(CALL_CENTER_METRICS.values())

    def get_metric(self, metric_id: str) -> MetricDefinition:
        """
        Return the catalog entry for *metric_id*.

        Raises UnknownMetricError when the id is not in the catalog.
        """
        definition = get_metric(metric_id)
        if definition is None:
            logger.warning("KPI lookup failed: unknown metric id %r.", metric_id)
            raise UnknownMetricError(metric_id)
        return definition

    # ------------------------------------------------------------------
    # Calculation
    # ------------------------------------------------------------------

    def calculate(self, metric_id: str, *args: float) -> KPIResult:
        """
        Calculate *metric_id* from positional aggregates.

        Parameters
        ----------
        metric_id:
            Catalog id, e.g. ``"AHT"``.
        *args:
            Aggregates in the order given by the metric's ``inputs``.

        Returns
        -------
        KPIResult

        Raises
        ------
        UnknownMetricError
            *metric_id* is not in the catalog.
        MetricArityError
            ``len(args)`` differs from the metric's arity.
        """
        definition = self.get_metric(metric_id)
        if len(args) != definition.arity:
            raise MetricArityError(
                f"{metric_id} expects {definition.arity} inputs "
                f"({', '.join(definition.inputs)}), got {len(args)}."
            )
        return self._evaluate(definition, tuple(args))

    def calculate_named(self, metric_id: str, inputs: Mapping[str, float]) -> KPIResult:
        """
        Calculate *metric_id* from aggregates keyed by input name.

        Every declared input must be present and no others may be given.
        """
        definition = self.get_metric(metric_id)
        missing = [name for name in definition.inputs if name not in inputs]
        unexpected = sorted(set(inputs) - set(definition.inputs))
        if missing or unexpected:
            problems = []
            if missing:
                problems.append(f"missing inputs: {', '.join(missing)}")
            if unexpected:
                problems.append(f"unexpected inputs: {', '.join(unexpected)}")
            raise MetricArityError(f"{metric_id}: {'; '.join(problems)}.")
        return self._evaluate(
            definition, tuple(inputs[name] for name in definition.inputs)
        )

    def _evaluate(self, definition: MetricDefinition, args: tuple[float, ...]) -> KPIResult:
        if self._settings.strict_inputs:
            rejected = _rejected_inputs(definition, args)
            if rejected:
                logger.warning(
                    "KPI %s skipped: invalid inputs %s.", definition.id, ", ".join(rejected)
                )
                return KPIResult(
                    metric=definition.id,
                    value=None,
                    unit=definition.unit,
                    error=f"Inputs must be finite and non-negative: {', '.join(rejected)}.",
                )

        guarded = (
            definition.divisor is not None
            and args[definition.inputs.index(definition.divisor)] == 0
        )
        value = definition.calculate(*args)

        if guarded and self._settings.log_guard_events:
            log_event(
                logger,
                logging.DEBUG,
                "kpi_divisor_guard",
                metric=definition.id,
                divisor=definition.divisor,
            )
        logger.debug("KPI %s computed: %r from %r", definition.id, value, args)
        return KPIResult(
            metric=definition.id,
            value=value,
            unit=definition.unit,
            guarded=guarded,
        )


def _rejected_inputs(definition: MetricDefinition, args: tuple[float, ...]) -> list[str]:
    """Names of inputs that are negative, NaN, or infinite."""
    return [
        name
        for name, arg in zip(definition.inputs, args)
        if (isinstance(arg, float) and not math.isfinite(arg)) or arg < 0
    ]


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_kpi_service() -> CallCenterKPIService:
    """
    Build and cache the KPI service with env-driven settings.
    """
    return CallCenterKPIService(settings=get_kpi_settings())
