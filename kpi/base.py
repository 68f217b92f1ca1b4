"""
kpi/base.py

Shared building blocks for KPI formula implementations.
"""

from __future__ import annotations

import math
import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from fractions import Fraction
from functools import reduce
from typing import Any, Callable, Mapping

_GUARDED_RESULT = 0.0  # value returned when a divisor is exactly zero


def _as_float(value: float) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def _ratio(numerator: float, divisor: float) -> float:
    """
    numerator / divisor, saturating to an infinity instead of raising
    OverflowError when integer operands leave the float range.
    """
    try:
        return numerator / divisor
    except OverflowError:
        if isinstance(numerator, float) or isinstance(divisor, float):
            return _as_float(numerator) / _as_float(divisor)
        exact = Fraction(numerator) / Fraction(divisor)
        try:
            return float(exact)
        except OverflowError:
            return math.inf if exact > 0 else -math.inf


def saturating_sum(*values: float) -> float:
    """
    Sum of *values*, saturating instead of raising when a float meets an
    integer beyond float range.
    """
    try:
        return reduce(operator.add, values)
    except OverflowError:
        return reduce(operator.add, (_as_float(value) for value in values))


def guarded_divide(numerator: float, divisor: float) -> float:
    """
    numerator / divisor, or ``0.0`` when *divisor* is exactly zero.
    """
    if divisor == 0:
        return _GUARDED_RESULT
    return _ratio(numerator, divisor)


def guarded_percentage(numerator: float, divisor: float) -> float:
    """
    (numerator / divisor) * 100, or ``0.0`` when *divisor* is exactly zero.
    """
    if divisor == 0:
        return _GUARDED_RESULT
    return _ratio(numerator, divisor) * 100


@dataclass(frozen=True)
class MetricDefinition:
    """
    One catalog entry: metadata plus a pure calculation.

    ``inputs`` names the positional arguments of ``calculate`` in order.
    ``divisor`` is the input whose zero value triggers the guard, or
    ``None`` for formulas that never divide.
    """

    id: str
    name: str
    description: str
    inputs: tuple[str, ...]
    unit: str
    divisor: str | None
    calculate: Callable[..., float]

    @property
    def arity(self) -> int:
        return len(self.inputs)

    def calculate_from(self, values: Mapping[str, float]) -> float:
        """
        Call ``calculate`` with *values* looked up by input name.

        Raises KeyError when a required input is missing.
        """
        return self.calculate(*(values[name] for name in self.inputs))


class BaseKPIFormula(ABC):
    """
    Contract for bulk KPI formula implementations.

    Subclasses receive a plain dictionary of pre-aggregated numerical inputs
    and return a plain dictionary of computed metric values.

    No I/O, no logging, and no side effects are permitted inside
    :meth:`calculate`.
    """

    @abstractmethod
    def calculate(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """
        Compute KPI metrics from *inputs* and return a result dictionary.

        Parameters
        ----------
        inputs:
            Aggregate values keyed by input name.

        Returns
        -------
        dict[str, Any]
            Computed metrics keyed by metric id.
        """
