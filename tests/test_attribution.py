"""Tests for the AI energy attribution formula and per-department rollups."""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from ecoai.attribution import AttributionEngine, calculate_ai_attribution, explain_attribution
from ecoai.exceptions import NotFoundError
from ecoai.tracking import EnergyTracker


class TestCalculateAiAttribution:

    def test_formula_with_department_weight(self):
        result = calculate_ai_attribution(Decimal("1000"), Decimal("0.30"), Decimal("0.80"))
        assert result == Decimal("240.0000")

    def test_missing_department_uses_whole_company_share(self):
        assert calculate_ai_attribution(Decimal("1000"), Decimal("0.30"), None) == Decimal("300")

    def test_missing_company_percentage_defaults_to_thirty_percent(self):
        assert calculate_ai_attribution(Decimal("500"), None, Decimal("0.5")) == Decimal("75")

    def test_missing_total_is_zero(self):
        assert calculate_ai_attribution(None, Decimal("0.30"), Decimal("0.80")) == Decimal("0")

    def test_rounds_half_up_to_four_places(self):
        assert calculate_ai_attribution(Decimal("1"), Decimal("0.00005"), None) == Decimal("0.0001")
        assert calculate_ai_attribution(Decimal("1"), Decimal("0.33333"), None) == Decimal("0.3333")

    def test_result_has_four_decimal_places(self):
        result = calculate_ai_attribution(Decimal("123.45"), Decimal("0.35"), Decimal("0.85"))
        assert result == Decimal("36.7264")
        assert result.as_tuple().exponent == -4

    def test_explanation_shows_every_factor(self):
        text = explain_attribution(Decimal("1000"), Decimal("0.30"), Decimal("0.80"), Decimal("240"))
        assert "1,000.00 kWh" in text
        assert "30.0%" in text
        assert "80.0%" in text
        assert "240.00 kWh" in text


class TestAttributeRecord:

    def test_reads_factors_from_company_and_department(self, session, company, ml_department):
        engine = AttributionEngine(session)
        assert engine.attribute_record(Decimal("1000"), company, ml_department) == Decimal("240")
        assert engine.attribute_record(Decimal("1000"), company) == Decimal("300")


class TestAttributionByDepartment:

    def test_breakdown_sorted_by_ai_energy(self, session, companies, company, ml_department, hr_department):
        idle = companies.create_department(company.id, "Quiet Team", ai_usage_weight=Decimal("0.5"))
        tracker = EnergyTracker(session)
        tracker.record_energy_usage(company.id, Decimal("1000"), date(2026, 10, 1), department_id=hr_department.id)
        tracker.record_energy_usage(company.id, Decimal("1000"), date(2026, 10, 1), department_id=ml_department.id)

        breakdown = AttributionEngine(session).get_attribution_by_department(company.id)

        assert [b.department_id for b in breakdown] == [ml_department.id, hr_department.id, idle.id]
        assert breakdown[0].ai_energy_kwh == Decimal("240")
        assert breakdown[0].percentage == Decimal("88.89")
        assert breakdown[1].ai_energy_kwh == Decimal("30")
        assert breakdown[1].percentage == Decimal("11.11")
        assert breakdown[2].ai_energy_kwh == Decimal("0")
        assert breakdown[2].percentage == Decimal("0")

    def test_records_without_department_are_not_counted(self, session, company, ml_department):
        tracker = EnergyTracker(session)
        tracker.record_energy_usage(company.id, Decimal("1000"), date(2026, 10, 1))
        tracker.record_energy_usage(company.id, Decimal("500"), date(2026, 10, 1), department_id=ml_department.id)

        breakdown = AttributionEngine(session).get_attribution_by_department(company.id)

        assert len(breakdown) == 1
        assert breakdown[0].ai_energy_kwh == Decimal("120")
        assert breakdown[0].percentage == Decimal("100")

    def test_no_usage_gives_zero_shares(self, session, company, ml_department, hr_department):
        breakdown = AttributionEngine(session).get_attribution_by_department(company.id)
        assert [b.percentage for b in breakdown] == [Decimal("0"), Decimal("0")]
        # ties keep department order
        assert [b.department_id for b in breakdown] == [ml_department.id, hr_department.id]

    def test_unknown_company(self, session):
        with pytest.raises(NotFoundError):
            AttributionEngine(session).get_attribution_by_department(uuid.uuid4())
