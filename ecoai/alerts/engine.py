"""
EcoAI — Alerts Engine (orchestrator)

Evaluates each active threshold of a company against the month-to-date value
of its metric and returns the alerts worth surfacing, most severe first.
Also owns threshold configuration (one per metric per company) and the
optimization insights.

    Threshold config ──▶ current metric (MTD) ──▶ Threshold Evaluator ──▶ Alert
                                                        │
                                     Insight rules ◀────┘ (same snapshot date)
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from ..exceptions import NotFoundError
from ..models import (
    AlertThreshold, MetricType, ThresholdOperator,
    get_company, get_threshold_for_metric, get_thresholds,
    sum_ai_kwh, sum_co2e_kg, sum_cost, sum_total_kwh,
)
from .config import AlertsConfig, Severity, alert_title, default_message
from .insights import Insight, MetricsSnapshot, evaluate_rules
from .threshold import evaluate

logger = logging.getLogger("ecoai.alerts.engine")


# Metrics with a direct month-to-date source. AI_PERCENTAGE and
# ENERGY_GROWTH_RATE are ratios with no stored source and are skipped.
_METRIC_SOURCES = {
    MetricType.AI_USAGE_KWH: sum_ai_kwh,
    MetricType.TOTAL_ENERGY_KWH: sum_total_kwh,
    MetricType.CARBON_EMISSION_KG: sum_co2e_kg,
    MetricType.MONTHLY_COST: sum_cost,
}


@dataclass
class Alert:
    """A threshold that is triggered or inside the near-miss band."""
    id: uuid.UUID
    company_id: uuid.UUID
    metric_type: MetricType
    operator: ThresholdOperator
    alert_title: Optional[str]
    alert_message: Optional[str]
    threshold_value: Decimal
    current_value: Optional[Decimal]
    percent_of_threshold: Optional[Decimal]
    severity: Severity
    is_triggered: bool
    triggered_at: Optional[datetime]
    active: bool


class AlertsEngine:

    def __init__(
        self,
        session: Session,
        config: Optional[AlertsConfig] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.session = session
        self.config = config or AlertsConfig()
        self.today = today

    # ── Threshold configuration ──────────────────────────────────────────

    def configure_threshold(
        self,
        company_id: uuid.UUID,
        metric_type: MetricType,
        threshold_value: Decimal,
        operator: Optional[ThresholdOperator] = None,
        message: Optional[str] = None,
    ) -> Alert:
        """
        Create the company's threshold for a metric, or overwrite the existing
        one in place. There is never more than one per (company, metric).
        """
        if get_company(self.session, company_id) is None:
            raise NotFoundError("Company", company_id)

        threshold = get_threshold_for_metric(self.session, company_id, metric_type)
        if threshold is None:
            threshold = AlertThreshold(
                company_id=company_id,
                metric_type=metric_type,
                operator=operator or ThresholdOperator.GREATER_THAN,
                active=True,
            )
            self.session.add(threshold)
        elif operator is not None:
            threshold.operator = operator

        threshold.threshold_value = threshold_value
        threshold.alert_message = message
        self.session.flush()

        logger.info(
            "Threshold %s %s %s configured for company %s",
            metric_type.value, threshold.operator.value, threshold_value, company_id,
        )
        return self._threshold_view(threshold)

    def get_all_thresholds(self, company_id: uuid.UUID) -> List[Alert]:
        return [self._threshold_view(t) for t in get_thresholds(self.session, company_id)]

    def set_threshold_active(self, threshold_id: uuid.UUID, active: bool) -> Alert:
        threshold = self._get_threshold(threshold_id)
        threshold.active = active
        self.session.flush()
        return self._threshold_view(threshold)

    def delete_threshold(self, threshold_id: uuid.UUID) -> None:
        self.session.delete(self._get_threshold(threshold_id))
        self.session.flush()

    def _get_threshold(self, threshold_id: uuid.UUID) -> AlertThreshold:
        threshold = self.session.get(AlertThreshold, threshold_id)
        if threshold is None:
            raise NotFoundError("AlertThreshold", threshold_id)
        return threshold

    # ── Evaluation ───────────────────────────────────────────────────────

    def current_metric_value(
        self, company_id: uuid.UUID, metric_type: MetricType,
    ) -> Optional[Decimal]:
        """
        Month-to-date value. None for metrics without a direct source and for
        months with no usage yet; either way the threshold is not evaluated.
        """
        source = _METRIC_SOURCES.get(metric_type)
        if source is None:
            return None
        today = self.today()
        return source(self.session, company_id, today.replace(day=1), today)

    def check_thresholds(self, company_id: uuid.UUID) -> List[Alert]:
        """Active thresholds that are triggered or ≥ 80 %, most severe first."""
        alerts = []
        now = datetime.now(timezone.utc)

        for threshold in get_thresholds(self.session, company_id, active_only=True):
            current_value = self.current_metric_value(company_id, threshold.metric_type)
            if current_value is None:
                continue

            result = evaluate(threshold, current_value, self.config)
            if not result.included:
                continue

            alerts.append(Alert(
                id=threshold.id,
                company_id=company_id,
                metric_type=threshold.metric_type,
                operator=threshold.operator,
                alert_title=alert_title(threshold.metric_type, result.is_triggered),
                alert_message=(
                    threshold.alert_message
                    or default_message(threshold.metric_type, result.percent_of_threshold)
                ),
                threshold_value=threshold.threshold_value,
                current_value=result.current_value,
                percent_of_threshold=result.percent_of_threshold,
                severity=result.severity,
                is_triggered=result.is_triggered,
                triggered_at=now,
                active=True,
            ))

        # Stable: equal severities keep threshold order
        alerts.sort(key=lambda a: a.severity.rank, reverse=True)

        if alerts:
            logger.info(
                "Company %s: %d alerts (%d critical)",
                company_id, len(alerts),
                sum(1 for a in alerts if a.severity is Severity.CRITICAL),
            )
        return alerts

    # ── Insights ─────────────────────────────────────────────────────────

    def get_optimization_suggestions(self, company_id: uuid.UUID) -> List[Insight]:
        company = get_company(self.session, company_id)
        if company is None:
            raise NotFoundError("Company", company_id)

        today = self.today()
        snapshot = MetricsSnapshot(
            region=company.region,
            month_to_date_ai_kwh=sum_ai_kwh(self.session, company_id, today.replace(day=1), today),
        )
        return evaluate_rules(snapshot, self.config)

    @staticmethod
    def _threshold_view(threshold: AlertThreshold) -> Alert:
        return Alert(
            id=threshold.id,
            company_id=threshold.company_id,
            metric_type=threshold.metric_type,
            operator=threshold.operator,
            alert_title=None,
            alert_message=threshold.alert_message,
            threshold_value=threshold.threshold_value,
            current_value=None,
            percent_of_threshold=None,
            severity=Severity.INFO,
            is_triggered=False,
            triggered_at=None,
            active=threshold.active,
        )
