"""
EcoAI — Alerts Configuration

Severity bands, inclusion cutoff and display text for threshold alerts.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ..config import settings
from ..models import MetricType


class Severity(str, Enum):
    """
    Alert severity, from percent of threshold:

        ≥ 100 %  CRITICAL
        ≥  90 %  WARNING
        below    INFO
    """
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.CRITICAL: 3,
    Severity.WARNING: 2,
    Severity.INFO: 1,
}


class InsightPriority(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass
class AlertsConfig:
    """Tuning parameters for threshold evaluation and insights."""

    # Near-miss band: an alert is surfaced from this percent of threshold
    # even when the configured operator has not fired yet.
    inclusion_percent: Decimal = settings.ALERT_INCLUSION_PERCENT

    critical_percent: Decimal = Decimal("100")
    warning_percent: Decimal = Decimal("90")

    # Month-to-date AI kWh above which the load-spreading insight is raised
    high_volume_ai_kwh: Decimal = settings.HIGH_VOLUME_AI_KWH

    # Regions whose grid intensity warrants the relocation insight
    high_intensity_regions: frozenset = frozenset({"IN", "AU", "CN"})


METRIC_TITLES = {
    MetricType.AI_USAGE_KWH: "AI Energy Usage",
    MetricType.TOTAL_ENERGY_KWH: "Total Energy",
    MetricType.CARBON_EMISSION_KG: "Carbon Emission",
    MetricType.MONTHLY_COST: "Monthly Cost",
}


def alert_title(metric_type: MetricType, is_triggered: bool) -> str:
    status = "Threshold Exceeded" if is_triggered else "Approaching Threshold"
    prefix = METRIC_TITLES.get(metric_type)
    return f"{prefix} {status}" if prefix else f"Alert: {status}"


def default_message(metric_type: MetricType, percent_of_threshold: Decimal) -> str:
    metric = metric_type.value.replace("_", " ").lower()
    return f"Current {metric} is at {percent_of_threshold:.1f}% of the configured threshold."
