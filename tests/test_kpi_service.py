"""
tests/test_kpi_service.py

Pytest unit tests for CallCenterKPIService.

All tests are pure Python: no I/O, mock inputs only.

Coverage
--------
- KPIResult structure contracts
- Positional and named calculation
- Divisor guard reported as a guarded result, not an error
- Unknown metric and arity errors
- Strict input policy
- Guard event logging
- Statelessness across multiple calls
"""

from __future__ import annotations

import logging
import math

import pytest

from app.config import KPISettings
from app.services.kpi_service import (
    CallCenterKPIService,
    KPIResult,
    KPIServiceError,
    MetricArityError,
    UnknownMetricError,
)

_SERVICE_LOGGER = "app.services.kpi_service"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def svc() -> CallCenterKPIService:
    """Fresh service with default (lenient) settings for each test."""
    return CallCenterKPIService(settings=KPISettings())


@pytest.fixture()
def strict_svc() -> CallCenterKPIService:
    return CallCenterKPIService(settings=KPISettings(strict_inputs=True))


# ---------------------------------------------------------------------------
# KPIResult contract
# ---------------------------------------------------------------------------


class TestKPIResultContract:
    def test_is_frozen(self) -> None:
        result = KPIResult(metric="FCR", value=75.0, unit="percent")
        with pytest.raises((AttributeError, TypeError)):
            result.value = 10.0  # type: ignore[misc]

    def test_defaults(self) -> None:
        result = KPIResult(metric="FCR", value=75.0, unit="percent")
        assert result.error is None
        assert result.guarded is False
        assert result.computed_at is not None


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class TestLookup:
    def test_list_metrics_follows_catalog_order(self, svc: CallCenterKPIService) -> None:
        metrics = svc.list_metrics()
        assert len(metrics) == 38
        assert metrics[0].id == "AHT"

    def test_get_metric(self, svc: CallCenterKPIService) -> None:
        assert svc.get_metric("NPS").name == "Net Promoter Score (NPS)"

    def test_unknown_metric_raises(self, svc: CallCenterKPIService) -> None:
        with pytest.raises(UnknownMetricError) as exc_info:
            svc.get_metric("Bogus")
        assert exc_info.value.metric_id == "Bogus"
        assert isinstance(exc_info.value, LookupError)
        assert isinstance(exc_info.value, KPIServiceError)

    def test_calculate_unknown_metric_raises(self, svc: CallCenterKPIService) -> None:
        with pytest.raises(UnknownMetricError):
            svc.calculate("Bogus", 1, 2)


# ---------------------------------------------------------------------------
# Positional calculation
# ---------------------------------------------------------------------------


class TestCalculate:
    def test_fcr(self, svc: CallCenterKPIService) -> None:
        result = svc.calculate("FCR", 75, 100)
        assert result.metric == "FCR"
        assert result.value == pytest.approx(75.0)
        assert result.unit == "percent"
        assert result.guarded is False
        assert result.error is None

    def test_aht(self, svc: CallCenterKPIService) -> None:
        result = svc.calculate("AHT", 300, 60, 40, 10)
        assert result.value == pytest.approx(40.0)
        assert result.unit == "duration"

    def test_nps_zero_inputs_not_guarded(self, svc: CallCenterKPIService) -> None:
        result = svc.calculate("NPS", 0, 0)
        assert result.value == 0
        assert result.guarded is False

    def test_zero_divisor_is_guarded_not_error(self, svc: CallCenterKPIService) -> None:
        result = svc.calculate("CostPerCall", 5000, 0)
        assert result.value == 0
        assert result.guarded is True
        assert result.error is None

    @pytest.mark.parametrize("args", [(75,), (75, 100, 3)])
    def test_wrong_arity_raises(self, svc: CallCenterKPIService, args: tuple) -> None:
        with pytest.raises(MetricArityError) as exc_info:
            svc.calculate("FCR", *args)
        assert "calls_resolved_first_contact" in str(exc_info.value)
        assert isinstance(exc_info.value, ValueError)

    def test_negative_inputs_propagate_by_default(self, svc: CallCenterKPIService) -> None:
        result = svc.calculate("FCR", -10, 100)
        assert result.value == pytest.approx(-10.0)
        assert result.error is None

    def test_stateless_across_calls(self, svc: CallCenterKPIService) -> None:
        first = svc.calculate("HoldTimeRatio", 120, 600)
        svc.calculate("HoldTimeRatio", 0, 0)
        second = svc.calculate("HoldTimeRatio", 120, 600)
        assert first.value == second.value == pytest.approx(0.2)


# ---------------------------------------------------------------------------
# Named calculation
# ---------------------------------------------------------------------------


class TestCalculateNamed:
    def test_named_inputs(self, svc: CallCenterKPIService) -> None:
        result = svc.calculate_named(
            "AgentUtilization",
            {
                "total_scheduled_time": 500,
                "total_time_on_calls": 300,
                "total_after_call_work_time": 100,
            },
        )
        assert result.value == pytest.approx(80.0)

    def test_missing_input_raises(self, svc: CallCenterKPIService) -> None:
        with pytest.raises(MetricArityError, match="missing inputs: total_calls"):
            svc.calculate_named("FCR", {"calls_resolved_first_contact": 75})

    def test_unexpected_input_raises(self, svc: CallCenterKPIService) -> None:
        with pytest.raises(MetricArityError, match="unexpected inputs: extra"):
            svc.calculate_named(
                "FCR",
                {"calls_resolved_first_contact": 75, "total_calls": 100, "extra": 1},
            )

    def test_named_zero_divisor_is_guarded(self, svc: CallCenterKPIService) -> None:
        result = svc.calculate_named(
            "AbandonmentRate", {"abandoned_calls": 4, "total_incoming_calls": 0}
        )
        assert result.value == 0
        assert result.guarded is True


# ---------------------------------------------------------------------------
# Strict input policy
# ---------------------------------------------------------------------------


class TestStrictInputs:
    def test_negative_input_rejected(self, strict_svc: CallCenterKPIService) -> None:
        result = strict_svc.calculate("FCR", -10, 100)
        assert result.value is None
        assert "calls_resolved_first_contact" in (result.error or "")

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_input_rejected(
        self, strict_svc: CallCenterKPIService, bad: float
    ) -> None:
        result = strict_svc.calculate("ASA", bad, 10)
        assert result.value is None
        assert result.error is not None

    def test_valid_inputs_still_computed(self, strict_svc: CallCenterKPIService) -> None:
        assert strict_svc.calculate("FCR", 75, 100).value == pytest.approx(75.0)

    def test_zero_divisor_still_guarded(self, strict_svc: CallCenterKPIService) -> None:
        result = strict_svc.calculate("FCR", 75, 0)
        assert result.value == 0
        assert result.error is None

    def test_huge_integer_is_accepted_and_saturates(
        self, strict_svc: CallCenterKPIService
    ) -> None:
        result = strict_svc.calculate("FCR", 10**400, 3)
        assert result.value == math.inf
        assert result.error is None

    def test_huge_negative_integer_rejected(self, strict_svc: CallCenterKPIService) -> None:
        result = strict_svc.calculate("FCR", -(10**400), 3)
        assert result.value is None


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class TestGuardLogging:
    def test_guard_event_logged(
        self, svc: CallCenterKPIService, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger=_SERVICE_LOGGER):
            svc.calculate("ASA", 30, 0)
        assert any("kpi_divisor_guard" in record.getMessage() for record in caplog.records)

    def test_guard_event_can_be_disabled(self, caplog: pytest.LogCaptureFixture) -> None:
        quiet = CallCenterKPIService(settings=KPISettings(log_guard_events=False))
        with caplog.at_level(logging.DEBUG, logger=_SERVICE_LOGGER):
            quiet.calculate("ASA", 30, 0)
        assert not any("kpi_divisor_guard" in record.getMessage() for record in caplog.records)

    def test_strict_rejection_logs_warning(
        self, strict_svc: CallCenterKPIService, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger=_SERVICE_LOGGER):
            strict_svc.calculate("FCR", -1, 10)
        assert any(record.levelno == logging.WARNING for record in caplog.records)
