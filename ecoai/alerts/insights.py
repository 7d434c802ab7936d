"""
EcoAI — Optimization Insights

Deterministic rule list, evaluated in order against a snapshot of the
company's current metrics. Each rule is an independent predicate → insight
pair; add or remove a rule without touching the others.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional

from .config import AlertsConfig, InsightPriority


@dataclass(frozen=True)
class MetricsSnapshot:
    """Inputs the rules are allowed to look at."""
    region: Optional[str]
    month_to_date_ai_kwh: Optional[Decimal]


@dataclass(frozen=True)
class Insight:
    category: str
    title: str
    description: str
    impact: str
    priority: InsightPriority
    actionable: str


@dataclass(frozen=True)
class InsightRule:
    name: str
    predicate: Callable[[MetricsSnapshot, AlertsConfig], bool]
    insight: Insight


def _always(_snapshot: MetricsSnapshot, _config: AlertsConfig) -> bool:
    return True


def _high_intensity_region(snapshot: MetricsSnapshot, config: AlertsConfig) -> bool:
    return snapshot.region is not None and snapshot.region.upper() in config.high_intensity_regions


def _high_ai_volume(snapshot: MetricsSnapshot, config: AlertsConfig) -> bool:
    return (
        snapshot.month_to_date_ai_kwh is not None
        and snapshot.month_to_date_ai_kwh > config.high_volume_ai_kwh
    )


DEFAULT_RULES: tuple[InsightRule, ...] = (
    InsightRule(
        name="region",
        predicate=_high_intensity_region,
        insight=Insight(
            category="REGION",
            title="Consider Greener Regions",
            description=(
                "Your workloads are running in a high carbon-intensity region. "
                "Moving to EU or Nordic regions could significantly reduce emissions."
            ),
            impact="Up to 60% carbon reduction possible",
            priority=InsightPriority.HIGH,
            actionable="Evaluate moving non-latency-critical workloads to EU-NORTH or NO regions",
        ),
    ),
    InsightRule(
        name="batching",
        predicate=_always,
        insight=Insight(
            category="BATCHING",
            title="Batch AI Workloads",
            description=(
                "Running AI tasks in batches during off-peak hours can improve "
                "efficiency and potentially reduce costs."
            ),
            impact="10-20% cost savings possible",
            priority=InsightPriority.MEDIUM,
            actionable="Schedule batch inference jobs during night hours (10 PM - 6 AM)",
        ),
    ),
    InsightRule(
        name="model_efficiency",
        predicate=_always,
        insight=Insight(
            category="EFFICIENCY",
            title="Model Optimization",
            description=(
                "Optimizing AI models through quantization, pruning, or distillation "
                "can reduce energy consumption while maintaining accuracy."
            ),
            impact="15-30% energy reduction per inference",
            priority=InsightPriority.MEDIUM,
            actionable="Review top energy-consuming models for optimization opportunities",
        ),
    ),
    InsightRule(
        name="peak_spreading",
        predicate=_high_ai_volume,
        insight=Insight(
            category="SCHEDULING",
            title="Spread Peak Loads",
            description=(
                "High AI energy usage detected. Distributing workloads more evenly "
                "across time can reduce peak demand charges."
            ),
            impact="5-10% cost reduction on peak charges",
            priority=InsightPriority.LOW,
            actionable="Implement workload queue with rate limiting",
        ),
    ),
    InsightRule(
        name="carbon_budget",
        predicate=_always,
        insight=Insight(
            category="CARBON_BUDGET",
            title="Set Carbon Budgets",
            description=(
                "Establishing monthly carbon budgets per department helps track "
                "and manage environmental impact systematically."
            ),
            impact="Improved ESG reporting and accountability",
            priority=InsightPriority.MEDIUM,
            actionable="Define monthly CO₂e limits for each department",
        ),
    ),
)


def evaluate_rules(
    snapshot: MetricsSnapshot,
    config: AlertsConfig,
    rules: tuple[InsightRule, ...] = DEFAULT_RULES,
) -> List[Insight]:
    return [rule.insight for rule in rules if rule.predicate(snapshot, config)]
