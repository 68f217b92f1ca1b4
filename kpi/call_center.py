"""
kpi/call_center.py

Call-center KPI catalog.

Every metric is a pure function of pre-aggregated counters or time sums.
Argument order is part of the public contract and is recorded by name in
each entry's ``inputs`` tuple.

Formulas
--------
AHT                       = (talk + hold + after_call_work) / calls_handled
FCR                       = resolved_first_contact / total_calls * 100
Service Level             = answered_within_threshold / total_incoming * 100
Abandonment Rate          = abandoned / total_incoming * 100
Occupancy Rate            = time_on_calls / logged_in_time * 100
Agent Utilization         = (time_on_calls + after_call_work) / scheduled_time * 100
CSAT                      = sum_ratings / responses * 100
NPS                       = promoters_pct - detractors_pct
ASA                       = wait_time_answered / answered_calls
Hold Time Ratio           = total_hold / total_call_duration   (not x100)
... and the remaining count or time ratios listed in CALL_CENTER_METRICS.

Division-by-zero cases return 0 for the affected metric. Inputs are not
checked for sign or finiteness: negative or NaN values propagate through
the arithmetic unchanged. Integers beyond float range saturate to an
infinity (or to 0 when they only appear as a divisor) instead of raising.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Mapping

from kpi.base import (
    BaseKPIFormula,
    MetricDefinition,
    guarded_divide,
    guarded_percentage,
    saturating_sum,
)

# Unit labels. Durations and currency follow whatever unit the caller
# aggregates in.
PERCENT = "percent"
DURATION = "duration"
CURRENCY = "currency"
SCORE = "score"
RATIO = "ratio"
POINTS = "points"


# ---------------------------------------------------------------------------
# Pure formula functions
# ---------------------------------------------------------------------------


def _average_handle_time(
    total_talk_time: float,
    total_hold_time: float,
    total_after_call_work_time: float,
    total_calls_handled: float,
) -> float:
    """(talk + hold + after-call work) / calls handled."""
    handled_time = saturating_sum(
        total_talk_time, total_hold_time, total_after_call_work_time
    )
    return guarded_divide(handled_time, total_calls_handled)


def _agent_utilization(
    total_time_on_calls: float,
    total_after_call_work_time: float,
    total_scheduled_time: float,
) -> float:
    """(time on calls + after-call work) / scheduled time * 100."""
    return guarded_percentage(
        saturating_sum(total_time_on_calls, total_after_call_work_time),
        total_scheduled_time,
    )


def _net_promoter_score(promoters_pct: float, detractors_pct: float) -> float:
    """
    Promoters % minus detractors %.

    Plain subtraction, so there is no divisor to guard.
    """
    return saturating_sum(promoters_pct, -detractors_pct)


def _percentage(numerator: float, divisor: float) -> float:
    return guarded_percentage(numerator, divisor)


def _average(total: float, divisor: float) -> float:
    return guarded_divide(total, divisor)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


def _define(
    metric_id: str,
    name: str,
    description: str,
    inputs: tuple[str, ...],
    unit: str,
    calculate: Callable[..., float],
    guarded: bool = True,
) -> tuple[str, MetricDefinition]:
    # Guarded formulas always divide by their last input.
    return metric_id, MetricDefinition(
        id=metric_id,
        name=name,
        description=description,
        inputs=inputs,
        unit=unit,
        divisor=inputs[-1] if guarded else None,
        calculate=calculate,
    )


_ENTRIES: tuple[tuple[str, MetricDefinition], ...] = (
    _define(
        "AHT",
        "Average Handle Time (AHT)",
        "The average time an agent spends handling a call (talk time, hold time, and after-call work).",
        (
            "total_talk_time",
            "total_hold_time",
            "total_after_call_work_time",
            "total_calls_handled",
        ),
        DURATION,
        _average_handle_time,
    ),
    _define(
        "FCR",
        "First Call Resolution (FCR)",
        "The percentage of customer calls resolved on the first contact without follow-up.",
        ("calls_resolved_first_contact", "total_calls"),
        PERCENT,
        _percentage,
    ),
    _define(
        "ServiceLevel",
        "Service Level",
        "The percentage of calls answered within a predefined threshold (e.g., 20 seconds).",
        ("calls_answered_within_threshold", "total_incoming_calls"),
        PERCENT,
        _percentage,
    ),
    _define(
        "AbandonmentRate",
        "Abandonment Rate",
        "The percentage of callers who hang up before reaching an agent.",
        ("abandoned_calls", "total_incoming_calls"),
        PERCENT,
        _percentage,
    ),
    _define(
        "OccupancyRate",
        "Occupancy Rate",
        "The percentage of time agents are actively handling calls versus idle time.",
        ("total_time_on_calls", "total_logged_in_time"),
        PERCENT,
        _percentage,
    ),
    _define(
        "AgentUtilization",
        "Agent Utilization",
        "The percentage of scheduled time that agents spend on call-related activities.",
        ("total_time_on_calls", "total_after_call_work_time", "total_scheduled_time"),
        PERCENT,
        _agent_utilization,
    ),
    _define(
        "CSAT",
        "Customer Satisfaction Score (CSAT)",
        "A measure of customer satisfaction immediately after a call.",
        ("sum_csat_ratings", "csat_responses"),
        SCORE,
        _percentage,
    ),
    _define(
        "NPS",
        "Net Promoter Score (NPS)",
        "A measure of customer loyalty, calculated as the difference between promoters and detractors.",
        ("promoters_pct", "detractors_pct"),
        POINTS,
        _net_promoter_score,
        guarded=False,
    ),
    _define(
        "ASA",
        "Average Speed of Answer (ASA)",
        "The average time it takes to answer incoming calls.",
        ("total_wait_time_answered", "answered_calls"),
        DURATION,
        _average,
    ),
    _define(
        "CallQualityScore",
        "Call Quality Score",
        "An evaluation of how well agents perform on calls according to quality standards.",
        ("sum_quality_scores", "calls_quality_evaluated"),
        SCORE,
        _average,
    ),
    _define(
        "TransferRate",
        "Transfer Rate",
        "The percentage of calls that are transferred to another agent or department.",
        ("transferred_calls", "total_calls_handled"),
        PERCENT,
        _percentage,
    ),
    _define(
        "EscalationRate",
        "Escalation Rate",
        "The percentage of calls that require escalation to higher-level support.",
        ("escalated_calls", "total_calls_handled"),
        PERCENT,
        _percentage,
    ),
    _define(
        "AverageAfterCallWorkTime",
        "Average After-Call Work Time",
        "The average time agents spend on wrap-up tasks after a call.",
        ("total_after_call_work_time", "total_calls_handled"),
        DURATION,
        _average,
    ),
    _define(
        "RepeatCallRate",
        "Repeat Call Rate",
        "The percentage of customers who must call back regarding the same issue.",
        ("repeat_calls", "total_calls"),
        PERCENT,
        _percentage,
    ),
    _define(
        "AgentAdherenceToSchedule",
        "Agent Adherence to Schedule",
        "The percentage of time agents stick to their assigned schedules.",
        ("time_adhering_to_schedule", "total_scheduled_time"),
        PERCENT,
        _percentage,
    ),
    _define(
        "AgentTurnoverRate",
        "Agent Turnover Rate",
        "The percentage of agents leaving the call center during a given period.",
        ("agents_left", "average_agents"),
        PERCENT,
        _percentage,
    ),
    _define(
        "CostPerCall",
        "Cost per Call",
        "The average cost incurred for handling each call.",
        ("total_operating_costs", "total_calls_handled"),
        CURRENCY,
        _average,
    ),
    _define(
        "CostPerResolution",
        "Cost per Resolution",
        "The average cost incurred for resolving a customer issue.",
        ("total_operating_costs", "resolved_cases"),
        CURRENCY,
        _average,
    ),
    _define(
        "AverageWaitTime",
        "Average Wait Time",
        "The average time a customer waits in the queue before the call is answered.",
        ("total_wait_time", "total_calls"),
        DURATION,
        _average,
    ),
    _define(
        "CallAbandonmentTime",
        "Call Abandonment Time",
        "The average wait time before a caller abandons the call.",
        ("total_wait_time_abandoned", "abandoned_calls"),
        DURATION,
        _average,
    ),
    _define(
        "AgentSatisfactionScore",
        "Agent Satisfaction Score",
        "A measure of agent satisfaction based on survey feedback.",
        ("sum_agent_satisfaction_scores", "agent_responses"),
        SCORE,
        _average,
    ),
    _define(
        "AverageCallDuration",
        "Average Call Duration",
        "The average length of a call from start to finish.",
        ("total_call_duration", "total_calls"),
        DURATION,
        _average,
    ),
    _define(
        "CallResolutionRate",
        "Call Resolution Rate",
        "The percentage of calls that are successfully resolved.",
        ("resolved_calls", "total_calls_handled"),
        PERCENT,
        _percentage,
    ),
    _define(
        "IVRContainmentRate",
        "IVR Containment Rate",
        "The percentage of calls handled completely by the Interactive Voice Response system.",
        ("calls_resolved_via_ivr", "total_incoming_calls"),
        PERCENT,
        _percentage,
    ),
    _define(
        "CallbackCompletionRate",
        "Callback Completion Rate",
        "The percentage of callback requests that are completed successfully.",
        ("completed_callbacks", "callback_requests"),
        PERCENT,
        _percentage,
    ),
    _define(
        "HoldTimeRatio",
        "Hold Time Ratio",
        "The ratio of hold time to the total call duration.",
        ("total_hold_time", "total_call_duration"),
        RATIO,
        _average,
    ),
    _define(
        "ScriptComplianceRate",
        "Script Compliance Rate",
        "The percentage of calls in which agents follow the prescribed script.",
        ("script_compliant_calls", "calls_monitored"),
        PERCENT,
        _percentage,
    ),
    _define(
        "AbandonedCallRateThreshold",
        "Abandoned Call Rate (Threshold)",
        "The percentage of calls abandoned after exceeding a specific wait time threshold.",
        ("calls_abandoned_after_threshold", "total_incoming_calls"),
        PERCENT,
        _percentage,
    ),
    _define(
        "CallTransferSuccessRate",
        "Call Transfer Success Rate",
        "The percentage of transferred calls that result in a successful resolution.",
        ("successful_transfers", "transferred_calls"),
        PERCENT,
        _percentage,
    ),
    _define(
        "SupervisorEscalationRate",
        "Supervisor Escalation Rate",
        "The percentage of calls escalated to a supervisor.",
        ("supervisor_escalations", "total_calls_handled"),
        PERCENT,
        _percentage,
    ),
    _define(
        "RepeatContactRate",
        "Repeat Contact Rate",
        "The percentage of customers who need to contact the center more than once for the same issue.",
        ("repeat_contacts", "total_contacts"),
        PERCENT,
        _percentage,
    ),
    _define(
        "AgentErrorRate",
        "Agent Error Rate",
        "The percentage of calls in which agents make errors.",
        ("calls_with_errors", "total_calls_handled"),
        PERCENT,
        _percentage,
    ),
    _define(
        "RevenuePerCall",
        "Revenue per Call",
        "The average revenue generated per call (useful in sales environments).",
        ("total_revenue", "total_calls"),
        CURRENCY,
        _average,
    ),
    _define(
        "UpsellCrossSellConversionRate",
        "Upsell/Cross-sell Conversion Rate",
        "The percentage of calls that lead to upsell or cross-sell opportunities.",
        ("upsell_conversions", "upsell_opportunities"),
        PERCENT,
        _percentage,
    ),
    _define(
        "ComplianceRate",
        "Compliance Rate",
        "The percentage of calls that meet regulatory or internal standards.",
        ("compliant_calls", "calls_compliance_evaluated"),
        PERCENT,
        _percentage,
    ),
    _define(
        "AbandonedCallRecoveryRate",
        "Abandoned Call Recovery Rate",
        "The percentage of abandoned calls that are later recovered.",
        ("recovered_abandoned_calls", "abandoned_calls"),
        PERCENT,
        _percentage,
    ),
    _define(
        "AgentShrinkageRate",
        "Agent Shrinkage Rate",
        "The percentage of scheduled time lost due to breaks, training, or absenteeism.",
        ("total_shrinkage_time", "total_scheduled_time"),
        PERCENT,
        _percentage,
    ),
    _define(
        "CallDistributionRate",
        "Call Distribution Rate",
        "The percentage distribution of calls handled by individual agents or teams.",
        ("calls_handled_by_agent", "total_calls_handled"),
        PERCENT,
        _percentage,
    ),
)

CALL_CENTER_METRICS: Mapping[str, MetricDefinition] = MappingProxyType(dict(_ENTRIES))
"""Read-only registry of every call-center metric, keyed by stable id."""


def get_metric(metric_id: str) -> MetricDefinition | None:
    """
    Return the catalog entry for *metric_id*, or ``None`` when absent.
    """
    return CALL_CENTER_METRICS.get(metric_id)


def metric_ids() -> tuple[str, ...]:
    return tuple(CALL_CENTER_METRICS)


class CallCenterKPIFormula(BaseKPIFormula):
    """
    Compute every catalog metric that *inputs* has enough data for.

    Input names are shared across metrics, so one dictionary of aggregates
    (e.g. ``total_incoming_calls``) feeds every metric that uses it.
    Metrics with any missing input are left out of the result.

    All arithmetic is self-contained.  No I/O, no logging, no side effects.
    """

    def calculate(self, inputs: dict[str, Any]) -> dict[str, float]:
        results: dict[str, float] = {}
        for metric_id, definition in CALL_CENTER_METRICS.items():
            if all(name in inputs for name in definition.inputs):
                results[metric_id] = definition.calculate_from(inputs)
        return results
