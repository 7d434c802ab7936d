"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database (StaticPool keeps the one
connection alive across threads so the FastAPI TestClient sees the same data)
and a fixed reporting date.
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.pool import StaticPool

from ecoai.companies import CompanyService
from ecoai.database import create_schema, make_engine, make_session_factory

TODAY = date(2026, 10, 19)


@pytest.fixture
def engine():
    engine = make_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    session = make_session_factory(engine)()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def clock():
    """Fixed 'today' for month-to-date and trailing windows."""
    return lambda: TODAY


@pytest.fixture
def companies(session):
    return CompanyService(session)


@pytest.fixture
def company(companies):
    """US company, 30 % AI share, $0.12/kWh."""
    return companies.create_company(
        name="Acme Analytics",
        region="US",
        base_ai_percentage=Decimal("0.30"),
        electricity_cost_per_kwh=Decimal("0.12"),
        currency="USD",
    )


@pytest.fixture
def ml_department(companies, company):
    return companies.create_department(company.id, "Machine Learning", ai_usage_weight=Decimal("0.80"))


@pytest.fixture
def hr_department(companies, company, ml_department):
    return companies.create_department(company.id, "People Ops", ai_usage_weight=Decimal("0.10"))
