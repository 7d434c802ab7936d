"""Tests for threshold evaluation, alert ordering and optimization insights."""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from ecoai.alerts import AlertsConfig, AlertsEngine, MetricsSnapshot, Severity
from ecoai.alerts.insights import evaluate_rules
from ecoai.alerts.threshold import classify, evaluate, percent_of_threshold
from ecoai.exceptions import NotFoundError
from ecoai.models import AlertThreshold, MetricType, ThresholdOperator
from ecoai.tracking import EnergyTracker


@pytest.fixture
def alerts(session, clock):
    return AlertsEngine(session, today=clock)


@pytest.fixture
def tracker(session):
    return EnergyTracker(session)


def _threshold(value, operator=ThresholdOperator.GREATER_THAN):
    return AlertThreshold(
        metric_type=MetricType.AI_USAGE_KWH,
        threshold_value=Decimal(value),
        operator=operator,
    )


class TestThresholdEvaluation:

    def test_exceeded_threshold_is_critical(self):
        result = evaluate(_threshold("1000"), Decimal("1050"), AlertsConfig())
        assert result.is_triggered
        assert result.percent_of_threshold == Decimal("105.00")
        assert result.severity is Severity.CRITICAL
        assert result.included

    def test_near_miss_is_included_without_triggering(self):
        result = evaluate(_threshold("1000"), Decimal("850"), AlertsConfig())
        assert not result.is_triggered
        assert result.percent_of_threshold == Decimal("85.00")
        assert result.severity is Severity.INFO
        assert result.included

    def test_below_inclusion_band_is_dropped(self):
        result = evaluate(_threshold("1000"), Decimal("700"), AlertsConfig())
        assert not result.included

    def test_severity_bands(self):
        config = AlertsConfig()
        assert classify(Decimal("100"), config) is Severity.CRITICAL
        assert classify(Decimal("95"), config) is Severity.WARNING
        assert classify(Decimal("90"), config) is Severity.WARNING
        assert classify(Decimal("89.99"), config) is Severity.INFO

    def test_zero_threshold_gives_zero_percent(self):
        assert percent_of_threshold(Decimal("10"), Decimal("0")) == Decimal("0")

    @pytest.mark.parametrize("operator, current, triggered", [
        (ThresholdOperator.GREATER_THAN, "1000", False),
        (ThresholdOperator.GREATER_THAN_OR_EQUALS, "1000", True),
        (ThresholdOperator.LESS_THAN, "850", True),
        (ThresholdOperator.LESS_THAN_OR_EQUALS, "1000", True),
        (ThresholdOperator.EQUALS, "1000", True),
        (ThresholdOperator.EQUALS, "999", False),
    ])
    def test_operators(self, operator, current, triggered):
        result = evaluate(_threshold("1000", operator), Decimal(current), AlertsConfig())
        assert result.is_triggered is triggered

    def test_triggered_below_band_is_still_included(self):
        result = evaluate(_threshold("1000", ThresholdOperator.LESS_THAN), Decimal("100"), AlertsConfig())
        assert result.is_triggered
        assert result.included
        assert result.severity is Severity.INFO


class TestCheckThresholds:

    def test_ai_usage_threshold_exceeded(self, company, alerts, tracker):
        alerts.configure_threshold(company.id, MetricType.AI_USAGE_KWH, Decimal("1000"))
        tracker.record_energy_usage(company.id, Decimal("3500"), date(2026, 10, 3))

        result = alerts.check_thresholds(company.id)

        assert len(result) == 1
        alert = result[0]
        assert alert.current_value == Decimal("1050")
        assert alert.percent_of_threshold == Decimal("105")
        assert alert.severity is Severity.CRITICAL
        assert alert.is_triggered
        assert alert.alert_title == "AI Energy Usage Threshold Exceeded"
        assert alert.alert_message == "Current ai usage kwh is at 105.0% of the configured threshold."

    def test_near_miss_uses_custom_message(self, company, alerts, tracker):
        alerts.configure_threshold(
            company.id, MetricType.TOTAL_ENERGY_KWH, Decimal("1000"), message="Energy budget close",
        )
        tracker.record_energy_usage(company.id, Decimal("850"), date(2026, 10, 3))

        [alert] = alerts.check_thresholds(company.id)

        assert alert.severity is Severity.INFO
        assert not alert.is_triggered
        assert alert.alert_title == "Total Energy Approaching Threshold"
        assert alert.alert_message == "Energy budget close"

    def test_only_month_to_date_counts(self, company, alerts, tracker):
        alerts.configure_threshold(company.id, MetricType.TOTAL_ENERGY_KWH, Decimal("1000"))
        tracker.record_energy_usage(company.id, Decimal("5000"), date(2026, 9, 30))
        tracker.record_energy_usage(company.id, Decimal("100"), date(2026, 10, 1))

        assert alerts.check_thresholds(company.id) == []

    def test_most_severe_first(self, company, alerts, tracker):
        alerts.configure_threshold(company.id, MetricType.TOTAL_ENERGY_KWH, Decimal("1050"))
        alerts.configure_threshold(
            company.id, MetricType.AI_USAGE_KWH, Decimal("300"), ThresholdOperator.GREATER_THAN_OR_EQUALS,
        )
        alerts.configure_threshold(company.id, MetricType.MONTHLY_COST, Decimal("130"))
        tracker.record_energy_usage(company.id, Decimal("1000"), date(2026, 10, 3))

        result = alerts.check_thresholds(company.id)

        assert [a.severity for a in result] == [Severity.CRITICAL, Severity.WARNING, Severity.WARNING]
        assert result[0].metric_type is MetricType.AI_USAGE_KWH
        assert {a.metric_type for a in result[1:]} == {MetricType.TOTAL_ENERGY_KWH, MetricType.MONTHLY_COST}

    def test_carbon_threshold(self, company, alerts, tracker):
        alerts.configure_threshold(company.id, MetricType.CARBON_EMISSION_KG, Decimal("100"))
        tracker.record_energy_usage(company.id, Decimal("1000"), date(2026, 10, 3))

        [alert] = alerts.check_thresholds(company.id)
        assert alert.current_value == Decimal("115.8")
        assert alert.severity is Severity.CRITICAL

    def test_metrics_without_source_are_skipped(self, company, alerts, tracker):
        alerts.configure_threshold(company.id, MetricType.AI_PERCENTAGE, Decimal("0"))
        alerts.configure_threshold(company.id, MetricType.ENERGY_GROWTH_RATE, Decimal("0"))
        tracker.record_energy_usage(company.id, Decimal("1000"), date(2026, 10, 3))

        assert alerts.check_thresholds(company.id) == []

    def test_inactive_thresholds_are_ignored(self, company, alerts, tracker):
        threshold = alerts.configure_threshold(company.id, MetricType.AI_USAGE_KWH, Decimal("10"))
        tracker.record_energy_usage(company.id, Decimal("1000"), date(2026, 10, 3))

        alerts.set_threshold_active(threshold.id, False)
        assert alerts.check_thresholds(company.id) == []

        alerts.set_threshold_active(threshold.id, True)
        assert len(alerts.check_thresholds(company.id)) == 1

    def test_month_without_usage_raises_nothing(self, company, alerts, tracker):
        alerts.configure_threshold(
            company.id, MetricType.AI_USAGE_KWH, Decimal("100"), ThresholdOperator.LESS_THAN,
        )
        alerts.configure_threshold(
            company.id, MetricType.MONTHLY_COST, Decimal("0"), ThresholdOperator.EQUALS,
        )
        tracker.record_energy_usage(company.id, Decimal("1000"), date(2026, 9, 15))

        assert alerts.current_metric_value(company.id, MetricType.AI_USAGE_KWH) is None
        assert alerts.check_thresholds(company.id) == []


class TestThresholdConfiguration:

    def test_one_threshold_per_metric(self, company, alerts):
        first = alerts.configure_threshold(company.id, MetricType.AI_USAGE_KWH, Decimal("1000"))
        second = alerts.configure_threshold(
            company.id, MetricType.AI_USAGE_KWH, Decimal("2000"), ThresholdOperator.LESS_THAN, "changed",
        )

        thresholds = alerts.get_all_thresholds(company.id)
        assert len(thresholds) == 1
        assert first.id == second.id
        assert thresholds[0].threshold_value == Decimal("2000")
        assert thresholds[0].operator is ThresholdOperator.LESS_THAN
        assert thresholds[0].alert_message == "changed"

    def test_operator_kept_when_not_given(self, company, alerts):
        alerts.configure_threshold(company.id, MetricType.AI_USAGE_KWH, Decimal("1"), ThresholdOperator.EQUALS)
        updated = alerts.configure_threshold(company.id, MetricType.AI_USAGE_KWH, Decimal("2"))
        assert updated.operator is ThresholdOperator.EQUALS

    def test_delete_threshold(self, company, alerts):
        threshold = alerts.configure_threshold(company.id, MetricType.AI_USAGE_KWH, Decimal("1"))
        alerts.delete_threshold(threshold.id)
        assert alerts.get_all_thresholds(company.id) == []

        with pytest.raises(NotFoundError):
            alerts.delete_threshold(threshold.id)

    def test_unknown_company(self, alerts):
        with pytest.raises(NotFoundError):
            alerts.configure_threshold(uuid.uuid4(), MetricType.AI_USAGE_KWH, Decimal("1"))


class TestInsights:

    def test_standing_recommendations_only(self, company, alerts):
        insights = alerts.get_optimization_suggestions(company.id)
        assert [i.category for i in insights] == ["BATCHING", "EFFICIENCY", "CARBON_BUDGET"]

    def test_high_intensity_region_and_high_volume(self, companies, alerts, tracker):
        company = companies.create_company("Mumbai Models", region="IN")
        tracker.record_energy_usage(company.id, Decimal("20000"), date(2026, 10, 2))

        insights = alerts.get_optimization_suggestions(company.id)

        assert [i.category for i in insights] == [
            "REGION", "BATCHING", "EFFICIENCY", "SCHEDULING", "CARBON_BUDGET",
        ]
        assert insights[0].title == "Consider Greener Regions"

    def test_volume_rule_is_strictly_greater(self):
        config = AlertsConfig()
        at_limit = MetricsSnapshot(region="US", month_to_date_ai_kwh=Decimal("5000"))
        above = MetricsSnapshot(region="US", month_to_date_ai_kwh=Decimal("5000.01"))
        assert "SCHEDULING" not in [i.category for i in evaluate_rules(at_limit, config)]
        assert "SCHEDULING" in [i.category for i in evaluate_rules(above, config)]

    def test_unknown_company(self, alerts):
        with pytest.raises(NotFoundError):
            alerts.get_optimization_suggestions(uuid.uuid4())
