"""
EcoAI — Sample Data
====================
Populates an empty database with one demo company. Each of its four
departments gets six months of daily usage with a weekend dip and ~3%
monthly growth; the company also gets two alert thresholds. Random values
come from a fixed seed, so every run on the same day produces the same
numbers.

Does nothing when any company already exists.

Usage:
  export DATABASE_URL=sqlite:///./ecoai.db      # or DB_HOST / DB_NAME / ...
  python -m ecoai.seed
  python -m ecoai.seed --seed 7 --log-level DEBUG
"""

import argparse
import logging
import random
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .alerts import AlertsEngine
from .analytics import month_start, shift_months
from .companies import CompanyService
from .config import settings
from .database import create_schema, make_engine, make_session_factory, session_scope
from .models import Company, DataSource, MetricType
from .tracking import EnergyTracker

logger = logging.getLogger("ecoai.seed")

HISTORY_MONTHS = 6
MONTHLY_GROWTH = 0.03
WEEKEND_FACTOR = 0.4

# name, team, product, ai weight, (base kWh, random spread)
DEPARTMENTS = [
    ("Machine Learning", "ML Engineering", "AI Platform", "0.85", (250, 100)),
    ("Data Science", "Analytics", "Insights Engine", "0.65", (150, 60)),
    ("Software Development", "Platform", "Core Product", "0.30", (100, 40)),
    ("Operations", "Infrastructure", None, "0.20", (80, 30)),
]

THRESHOLDS = [
    (MetricType.AI_USAGE_KWH, "15000", "Monthly AI energy usage approaching limit"),
    (MetricType.CARBON_EMISSION_KG, "6000", "Monthly carbon emissions near budget"),
]


def seed_sample_data(
    session: Session,
    today: Optional[date] = None,
    seed: int = 42,
) -> Optional[Company]:
    """Create the demo company. Returns None when the database is not empty."""
    if session.execute(select(func.count(Company.id))).scalar():
        logger.info("Sample data already exists, skipping")
        return None

    today = today or date.today()
    rng = random.Random(seed)

    companies = CompanyService(session)
    company = companies.create_company(
        name="TechCorp AI Solutions",
        industry="Technology",
        country="United States",
        region="US",
        base_ai_percentage=Decimal("0.35"),
        electricity_cost_per_kwh=Decimal("0.12"),
        currency="USD",
    )

    departments = []
    for name, team, product, weight, usage_profile in DEPARTMENTS:
        dept = companies.create_department(
            company.id, name,
            ai_usage_weight=Decimal(weight),
            team=team,
            product=product,
            employee_count=10 + rng.randrange(40),
        )
        departments.append((dept, usage_profile))

    tracker = EnergyTracker(session)
    records = 0
    for month in range(HISTORY_MONTHS - 1, -1, -1):
        growth = 1.0 + (HISTORY_MONTHS - 1 - month) * MONTHLY_GROWTH
        day = month_start(shift_months(today, -month))
        next_month = month_start(shift_months(day, 1))

        while day < next_month and day <= today:
            for dept, (base, spread) in departments:
                usage = (base + rng.random() * spread) * growth * (0.9 + rng.random() * 0.2)
                if day.weekday() >= 5:
                    usage *= WEEKEND_FACTOR

                tracker.record_energy_usage(
                    company.id,
                    Decimal(str(usage)).quantize(Decimal("0.01"), ROUND_HALF_UP),
                    day,
                    department_id=dept.id,
                    data_source=DataSource.SAMPLE_DATA,
                )
                records += 1
            day += timedelta(days=1)

    alerts = AlertsEngine(session)
    for metric_type, value, message in THRESHOLDS:
        alerts.configure_threshold(company.id, metric_type, Decimal(value), message=message)

    logger.info("Seeded company %s with %d usage records", company.id, records)
    return company


# ─── Main ──────────────────────────────────────────────────────────────────

def main() -> None:
    parser = argparse.ArgumentParser(description="EcoAI sample data seeder")
    parser.add_argument("--database-url", type=str, default=None,
                        help="Overrides DATABASE_URL / DB_* settings")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--log-level", type=str, default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    )

    engine = make_engine(args.database_url)
    create_schema(engine)
    try:
        with session_scope(make_session_factory(engine)) as session:
            company = seed_sample_data(session, seed=args.seed)
            if company is not None:
                print(f"Company ID: {company.id}")
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
