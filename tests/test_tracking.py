"""Tests for energy usage ingestion, CSV import and record queries."""

import logging
import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from ecoai.exceptions import NotFoundError
from ecoai.models import CarbonEmission, DataSource, EnergyUsage, PeriodType
from ecoai.tracking import EnergyTracker


@pytest.fixture
def tracker(session):
    return EnergyTracker(session)


class TestRecordEnergyUsage:

    def test_derived_fields(self, company, ml_department, tracker):
        usage = tracker.record_energy_usage(
            company.id, Decimal("1000"), date(2026, 10, 1), department_id=ml_department.id,
        )

        assert usage.ai_attributed_kwh == Decimal("240")
        assert usage.cost == Decimal("120.00")
        assert usage.region == "US"
        assert usage.currency == "USD"
        assert usage.period_type is PeriodType.DAILY
        assert usage.data_source is DataSource.MANUAL
        assert usage.carbon_emission.co2e_kg == Decimal("92.64")
        assert usage.carbon_emission.carbon_intensity_used == Decimal("386")

    def test_explicit_region_and_currency(self, company, tracker):
        usage = tracker.record_energy_usage(
            company.id, Decimal("100"), date(2026, 10, 1),
            period_type=PeriodType.MONTHLY, region="EU-NORTH", currency="EUR",
        )
        assert usage.region == "EU-NORTH"
        assert usage.currency == "EUR"
        assert usage.period_type is PeriodType.MONTHLY
        assert usage.carbon_emission.co2e_kg == Decimal("1.35")

    def test_unknown_department(self, company, tracker):
        with pytest.raises(NotFoundError):
            tracker.record_energy_usage(
                company.id, Decimal("1"), date(2026, 10, 1), department_id=uuid.uuid4(),
            )

    def test_department_of_another_company(self, companies, company, tracker):
        other = companies.create_company("Other Co", region="US")
        foreign = companies.create_department(other.id, "Research", ai_usage_weight=Decimal("1"))

        with pytest.raises(NotFoundError):
            tracker.record_energy_usage(
                company.id, Decimal("1"), date(2026, 10, 1), department_id=foreign.id,
            )

    def test_unknown_company(self, tracker):
        with pytest.raises(NotFoundError):
            tracker.record_energy_usage(uuid.uuid4(), Decimal("1"), date(2026, 10, 1))


class TestCsvImport:

    CSV = [
        "date,total_kwh,department,region",
        "2026-10-01,1000,machine learning,EU-NORTH",
        "2026-10-02,500",
        "not-a-date,100",
        "2026-10-03,abc",
        "2026-10-05,Infinity",
        "2026-10-06,NaN",
        "2026-10-07,-50",
        "2026-10-04",
    ]

    def test_imports_good_rows_and_skips_bad_ones(self, company, ml_department, tracker, caplog):
        with caplog.at_level(logging.WARNING, logger="ecoai.tracking"):
            stats = tracker.import_from_csv(company.id, self.CSV)

        assert stats.rows_read == 8
        assert stats.rows_imported == 2
        assert stats.rows_skipped == 6

        first, second = stats.records
        assert first.department_id == ml_department.id
        assert first.region == "EU-NORTH"
        assert first.ai_attributed_kwh == Decimal("240")
        assert first.data_source is DataSource.CSV_IMPORT
        assert second.department_id is None
        assert second.region == "US"
        assert second.ai_attributed_kwh == Decimal("150")

        assert "CSV row 4 skipped" in caplog.text
        assert "CSV row 5 skipped" in caplog.text
        assert "CSV row 6 skipped" in caplog.text
        assert "CSV row 7 skipped" in caplog.text
        assert "CSV row 8 skipped" in caplog.text

    def test_rows_after_a_rejected_total_still_import(self, company, tracker):
        stats = tracker.import_from_csv(
            company.id, ["date,total_kwh", "2026-10-01,100", "2026-10-02,Infinity", "2026-10-03,200"],
        )

        assert [u.total_kwh for u in stats.records] == [Decimal("100"), Decimal("200")]
        assert stats.rows_skipped == 1
        assert len(tracker.get_all_usage(company.id)) == 2

    def test_row_failing_on_write_is_rolled_back_alone(self, company, tracker, monkeypatch):
        calculate = tracker.carbon.calculate_and_save_emission

        def emission_or_fail(usage):
            if usage.total_kwh == Decimal("13"):
                raise SQLAlchemyError("emission insert failed")
            return calculate(usage)

        monkeypatch.setattr(tracker.carbon, "calculate_and_save_emission", emission_or_fail)
        stats = tracker.import_from_csv(
            company.id, ["date,total_kwh", "2026-10-01,100", "2026-10-02,13", "2026-10-03,200"],
        )

        assert stats.rows_imported == 2
        assert stats.rows_skipped == 1
        assert sorted(u.total_kwh for u in tracker.get_all_usage(company.id)) == [Decimal("100"), Decimal("200")]

    def test_unmatched_department_falls_back_to_company_share(self, company, tracker):
        stats = tracker.import_from_csv(company.id, ["date,kwh,dept", "2026-10-01,100,Nobody"])
        assert stats.records[0].department_id is None
        assert stats.records[0].ai_attributed_kwh == Decimal("30")

    def test_header_only(self, company, tracker):
        stats = tracker.import_from_csv(company.id, ["date,total_kwh"])
        assert stats.rows_read == 0
        assert stats.records == []


class TestQueries:

    def test_all_usage_newest_first(self, company, tracker):
        for day in (1, 5, 3):
            tracker.record_energy_usage(company.id, Decimal("10"), date(2026, 10, day))

        dates = [u.usage_date.day for u in tracker.get_all_usage(company.id)]
        assert dates == [5, 3, 1]

    def test_by_region_is_case_insensitive(self, company, tracker):
        tracker.record_energy_usage(company.id, Decimal("10"), date(2026, 10, 1), region="EU-NORTH")
        tracker.record_energy_usage(company.id, Decimal("10"), date(2026, 10, 2))

        found = tracker.get_usage_by_region(company.id, "eu-north")
        assert [u.region for u in found] == ["EU-NORTH"]

    def test_by_date_range_is_inclusive(self, company, tracker):
        for day in (1, 10, 20):
            tracker.record_energy_usage(company.id, Decimal("10"), date(2026, 9, day))

        found = tracker.get_usage_by_date_range(company.id, date(2026, 9, 1), date(2026, 9, 10))
        assert [u.usage_date.day for u in found] == [1, 10]


class TestDeletion:

    def test_delete_usage_removes_emission(self, session, company, tracker):
        usage = tracker.record_energy_usage(company.id, Decimal("10"), date(2026, 10, 1))
        emission_id = usage.carbon_emission.id

        tracker.delete_usage(usage.id)

        assert session.get(EnergyUsage, usage.id) is None
        assert session.get(CarbonEmission, emission_id) is None
        with pytest.raises(NotFoundError):
            tracker.delete_usage(usage.id)

    def test_deleting_company_removes_its_usage(self, session, companies, company, tracker):
        usage = tracker.record_energy_usage(company.id, Decimal("10"), date(2026, 10, 1))
        usage_id, emission_id = usage.id, usage.carbon_emission.id

        companies.delete_company(company.id)

        assert session.get(EnergyUsage, usage_id) is None
        assert session.get(CarbonEmission, emission_id) is None
