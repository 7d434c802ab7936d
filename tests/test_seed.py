"""Tests for the sample data seeder."""

from datetime import date

from sqlalchemy import func, select

from ecoai.models import AlertThreshold, DataSource, Department, EnergyUsage
from ecoai.seed import seed_sample_data

SEED_DAY = date(2026, 10, 19)


def _count(session, column, *where):
    return session.execute(select(func.count(column)).where(*where)).scalar()


def test_seeds_six_months_for_every_department(session):
    company = seed_sample_data(session, today=SEED_DAY)

    assert company.name == "TechCorp AI Solutions"
    assert company.region == "US"
    assert _count(session, Department.id, Department.company_id == company.id) == 4
    # May 1 .. Oct 19 is 172 days, four departments each
    assert _count(session, EnergyUsage.id, EnergyUsage.company_id == company.id) == 688
    assert _count(session, EnergyUsage.id, EnergyUsage.data_source != DataSource.SAMPLE_DATA) == 0
    assert _count(session, AlertThreshold.id, AlertThreshold.company_id == company.id) == 2


def test_every_record_has_an_emission(session):
    company = seed_sample_data(session, today=SEED_DAY)
    usages = session.execute(
        select(EnergyUsage).where(EnergyUsage.company_id == company.id)
    ).scalars().all()

    assert all(u.carbon_emission is not None for u in usages)
    assert min(u.usage_date for u in usages) == date(2026, 5, 1)
    assert max(u.usage_date for u in usages) == SEED_DAY


def test_skips_non_empty_database(session, company):
    assert seed_sample_data(session, today=SEED_DAY) is None
