"""
EcoAI — Threshold Evaluator

Compares a current metric value with a configured AlertThreshold:

    percent_of_threshold = round4(current / threshold) × 100
    is_triggered         = current <op> threshold
    included             = percent ≥ inclusion band (80) OR is_triggered

The two conditions are independent on purpose: a GREATER_THAN 1000 threshold
at 850 is not triggered but is still surfaced as a near miss.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict

from ..models import AlertThreshold, ThresholdOperator
from .config import AlertsConfig, Severity

logger = logging.getLogger("ecoai.alerts.threshold")

FOUR_DP = Decimal("0.0001")
HUNDRED = Decimal("100")

_OPERATORS: Dict[ThresholdOperator, Callable[[Decimal, Decimal], bool]] = {
    ThresholdOperator.GREATER_THAN: lambda current, limit: current > limit,
    ThresholdOperator.GREATER_THAN_OR_EQUALS: lambda current, limit: current >= limit,
    ThresholdOperator.LESS_THAN: lambda current, limit: current < limit,
    ThresholdOperator.LESS_THAN_OR_EQUALS: lambda current, limit: current <= limit,
    ThresholdOperator.EQUALS: lambda current, limit: current == limit,
}


@dataclass(slots=True)
class ThresholdEvaluation:
    """Outcome of checking one threshold against one value."""
    current_value: Decimal
    percent_of_threshold: Decimal
    is_triggered: bool
    severity: Severity
    included: bool


def is_triggered(operator: ThresholdOperator, current: Decimal, limit: Decimal) -> bool:
    return _OPERATORS[operator](current, limit)


def percent_of_threshold(current: Decimal, limit: Decimal) -> Decimal:
    """Zero when the threshold itself is zero."""
    if limit == 0:
        return Decimal("0")
    return (current / limit).quantize(FOUR_DP, ROUND_HALF_UP) * HUNDRED


def classify(percent: Decimal, config: AlertsConfig) -> Severity:
    if percent >= config.critical_percent:
        return Severity.CRITICAL
    if percent >= config.warning_percent:
        return Severity.WARNING
    return Severity.INFO


def evaluate(
    threshold: AlertThreshold,
    current_value: Decimal,
    config: AlertsConfig,
) -> ThresholdEvaluation:
    operator = threshold.operator or ThresholdOperator.GREATER_THAN
    percent = percent_of_threshold(current_value, threshold.threshold_value)
    triggered = is_triggered(operator, current_value, threshold.threshold_value)

    return ThresholdEvaluation(
        current_value=current_value,
        percent_of_threshold=percent,
        is_triggered=triggered,
        severity=classify(percent, config),
        included=percent >= config.inclusion_percent or triggered,
    )
