"""
EcoAI — Data Model + Storage Queries
=====================================
SQLAlchemy ORM models for companies, departments, energy usage records and the
values derived from them (carbon emissions), plus carbon-intensity overrides,
alert thresholds and saved simulation scenarios.

Tables:
  companies, departments, energy_usage, carbon_emissions, carbon_configs,
  alert_thresholds, simulation_scenarios

Company is the aggregate root: everything else is owned by exactly one company
and is removed with it.

The query helpers at the bottom are the only storage access the engines use
(range queries, group-by sums, point lookups).
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean, Date, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String,
    Text, UniqueConstraint, Uuid, func, select,
)
from sqlalchemy.orm import (
    DeclarativeBase, Mapped, Session, mapped_column, relationship,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ─────────────────────────────────────────────
# Base
# ─────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ─────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────

class PeriodType(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class DataSource(str, enum.Enum):
    MANUAL = "MANUAL"
    CSV_IMPORT = "CSV_IMPORT"
    SAMPLE_DATA = "SAMPLE_DATA"


class MetricType(str, enum.Enum):
    AI_USAGE_KWH = "AI_USAGE_KWH"
    TOTAL_ENERGY_KWH = "TOTAL_ENERGY_KWH"
    CARBON_EMISSION_KG = "CARBON_EMISSION_KG"
    MONTHLY_COST = "MONTHLY_COST"
    AI_PERCENTAGE = "AI_PERCENTAGE"
    ENERGY_GROWTH_RATE = "ENERGY_GROWTH_RATE"


class ThresholdOperator(str, enum.Enum):
    GREATER_THAN = "GREATER_THAN"
    LESS_THAN = "LESS_THAN"
    EQUALS = "EQUALS"
    GREATER_THAN_OR_EQUALS = "GREATER_THAN_OR_EQUALS"
    LESS_THAN_OR_EQUALS = "LESS_THAN_OR_EQUALS"


class SimulationType(str, enum.Enum):
    GROWTH = "GROWTH"
    REGION_CHANGE = "REGION_CHANGE"
    EFFICIENCY = "EFFICIENCY"
    CUSTOM = "CUSTOM"


# ─────────────────────────────────────────────
# Models
# ─────────────────────────────────────────────

class Company(Base):
    """An organisation whose electricity usage is tracked."""
    __tablename__ = "companies"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    industry: Mapped[str | None] = mapped_column(String(128), nullable=True)
    country: Mapped[str | None] = mapped_column(String(128), nullable=True)
    region: Mapped[str | None] = mapped_column(
        String(50), nullable=True, comment="Grid region code, e.g. US, EU-NORTH",
    )
    base_ai_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 4), default=Decimal("0.30"),
        comment="Share of total energy attributed to AI as decimal (0.30 = 30%)",
    )
    electricity_cost_per_kwh: Mapped[Decimal] = mapped_column(
        Numeric(10, 4), default=Decimal("0.12"),
    )
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
    )

    # Relationships
    departments: Mapped[List[Department]] = relationship(
        back_populates="company", cascade="all, delete-orphan", order_by="Department.created_at",
    )
    energy_usages: Mapped[List[EnergyUsage]] = relationship(
        back_populates="company", cascade="all, delete-orphan",
    )
    carbon_configs: Mapped[List[CarbonConfig]] = relationship(
        back_populates="company", cascade="all, delete-orphan",
    )
    alert_thresholds: Mapped[List[AlertThreshold]] = relationship(
        back_populates="company", cascade="all, delete-orphan",
    )
    scenarios: Mapped[List[SimulationScenario]] = relationship(
        back_populates="company", cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Company id={self.id} name={self.name!r} region={self.region!r}>"


class Department(Base):
    """A team or product line inside a company, weighted by how AI-heavy it is."""
    __tablename__ = "departments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    team: Mapped[str | None] = mapped_column(String(256), nullable=True)
    product: Mapped[str | None] = mapped_column(String(256), nullable=True)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    ai_usage_weight: Mapped[Decimal] = mapped_column(
        Numeric(5, 4), default=Decimal("0.50"),
        comment="Multiplier on the company AI share (0.8 for ML, 0.1 for HR)",
    )
    employee_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    company: Mapped[Company] = relationship(back_populates="departments")
    energy_usages: Mapped[List[EnergyUsage]] = relationship(back_populates="department")

    __table_args__ = (
        Index("ix_departments_company", "company_id"),
    )

    def __repr__(self) -> str:
        return f"<Department id={self.id} name={self.name!r} weight={self.ai_usage_weight}>"


class EnergyUsage(Base):
    """
    One electricity consumption record.

    ai_attributed_kwh and cost are computed once at ingestion and are not
    recomputed on read.
    """
    __tablename__ = "energy_usage"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), nullable=False,
    )
    department_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"), nullable=True,
    )
    total_kwh: Mapped[Decimal] = mapped_column(Numeric(15, 4), nullable=False)
    ai_attributed_kwh: Mapped[Decimal | None] = mapped_column(Numeric(15, 4), nullable=True)
    cost: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    usage_date: Mapped[date] = mapped_column(Date, nullable=False)
    period_type: Mapped[PeriodType] = mapped_column(
        Enum(PeriodType, name="period_type"), default=PeriodType.DAILY,
    )
    region: Mapped[str | None] = mapped_column(String(50), nullable=True)
    data_source: Mapped[DataSource] = mapped_column(
        Enum(DataSource, name="data_source"), default=DataSource.MANUAL,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    company: Mapped[Company] = relationship(back_populates="energy_usages")
    department: Mapped[Optional[Department]] = relationship(back_populates="energy_usages")
    carbon_emission: Mapped[Optional[CarbonEmission]] = relationship(
        back_populates="energy_usage", uselist=False,
        cascade="all, delete-orphan", lazy="selectin",
    )

    __table_args__ = (
        Index("ix_energy_usage_company_date", "company_id", "usage_date"),
        Index("ix_energy_usage_company_region", "company_id", "region"),
    )

    def __repr__(self) -> str:
        return f"<EnergyUsage id={self.id} date={self.usage_date} total_kwh={self.total_kwh}>"


class CarbonEmission(Base):
    """
    CO2e derived from one usage record. The intensity and region actually used
    are stored so later config changes do not rewrite history.
    """
    __tablename__ = "carbon_emissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    energy_usage_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("energy_usage.id", ondelete="CASCADE"), unique=True, nullable=False,
    )
    co2e_grams: Mapped[Decimal] = mapped_column(Numeric(18, 4), nullable=False)
    co2e_kg: Mapped[Decimal] = mapped_column(Numeric(15, 4), nullable=False)
    carbon_intensity_used: Mapped[Decimal] = mapped_column(
        Numeric(10, 4), nullable=False, comment="gCO2/kWh",
    )
    region_used: Mapped[str | None] = mapped_column(String(50), nullable=True)
    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    energy_usage: Mapped[EnergyUsage] = relationship(back_populates="carbon_emission")

    def __repr__(self) -> str:
        return f"<CarbonEmission usage={self.energy_usage_id} co2e_kg={self.co2e_kg}>"


class CarbonConfig(Base):
    """Company-specific carbon intensity for a region (overrides the defaults)."""
    __tablename__ = "carbon_configs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), nullable=False,
    )
    region: Mapped[str] = mapped_column(String(50), nullable=False)
    carbon_intensity: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), default="gCO2/kWh")
    valid_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    company: Mapped[Company] = relationship(back_populates="carbon_configs")

    __table_args__ = (
        UniqueConstraint("company_id", "region", name="uq_carbon_config_company_region"),
    )


class AlertThreshold(Base):
    """A monitored limit on one metric; at most one per (company, metric)."""
    __tablename__ = "alert_thresholds"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), nullable=False,
    )
    metric_type: Mapped[MetricType] = mapped_column(
        Enum(MetricType, name="metric_type"), nullable=False,
    )
    threshold_value: Mapped[Decimal] = mapped_column(Numeric(15, 4), nullable=False)
    operator: Mapped[ThresholdOperator] = mapped_column(
        Enum(ThresholdOperator, name="threshold_operator"),
        default=ThresholdOperator.GREATER_THAN,
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    alert_message: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    company: Mapped[Company] = relationship(back_populates="alert_thresholds")

    __table_args__ = (
        UniqueConstraint("company_id", "metric_type", name="uq_alert_threshold_company_metric"),
    )

    def __repr__(self) -> str:
        return (
            f"<AlertThreshold {self.metric_type.value} {self.operator.value} "
            f"{self.threshold_value} active={self.active}>"
        )


class SimulationScenario(Base):
    """
    Saved what-if run. parameters / baseline_values / results are JSON
    documents written once at save time and returned verbatim.
    """
    __tablename__ = "simulation_scenarios"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("companies.id", ondelete="CASCADE"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    simulation_type: Mapped[SimulationType] = mapped_column(
        Enum(SimulationType, name="simulation_type"), nullable=False,
    )
    parameters: Mapped[str | None] = mapped_column(Text, nullable=True)
    baseline_values: Mapped[str | None] = mapped_column(Text, nullable=True)
    results: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    company: Mapped[Company] = relationship(back_populates="scenarios")

    __table_args__ = (
        Index("ix_simulation_scenarios_company_created", "company_id", "created_at"),
    )


# ─────────────────────────────────────────────
# Query helpers
# ─────────────────────────────────────────────

def get_company(session: Session, company_id: uuid.UUID) -> Optional[Company]:
    return session.get(Company, company_id)


def get_departments(session: Session, company_id: uuid.UUID) -> List[Department]:
    q = (
        select(Department)
        .where(Department.company_id == company_id)
        .order_by(Department.created_at, Department.name)
    )
    return list(session.execute(q).scalars().all())


def get_usage_in_range(
    session: Session,
    company_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> List[EnergyUsage]:
    """Usage records for a company with usage_date in [start_date, end_date]."""
    q = (
        select(EnergyUsage)
        .where(
            EnergyUsage.company_id == company_id,
            EnergyUsage.usage_date >= start_date,
            EnergyUsage.usage_date <= end_date,
        )
        .order_by(EnergyUsage.usage_date)
    )
    return list(session.execute(q).scalars().all())


def get_all_usage(session: Session, company_id: uuid.UUID) -> List[EnergyUsage]:
    """Every usage record of a company, newest first."""
    q = (
        select(EnergyUsage)
        .where(EnergyUsage.company_id == company_id)
        .order_by(EnergyUsage.usage_date.desc(), EnergyUsage.created_at.desc())
    )
    return list(session.execute(q).scalars().all())


def get_usage_by_region(session: Session, company_id: uuid.UUID, region: str) -> List[EnergyUsage]:
    q = (
        select(EnergyUsage)
        .where(
            EnergyUsage.company_id == company_id,
            func.upper(EnergyUsage.region) == region.strip().upper(),
        )
        .order_by(EnergyUsage.usage_date)
    )
    return list(session.execute(q).scalars().all())


def find_department_by_name(
    session: Session, company_id: uuid.UUID, name: str,
) -> Optional[Department]:
    """Case-insensitive name match within one company."""
    q = (
        select(Department)
        .where(
            Department.company_id == company_id,
            func.lower(Department.name) == name.strip().lower(),
        )
        .order_by(Department.created_at)
    )
    return session.execute(q).scalars().first()


def sum_ai_kwh(
    session: Session, company_id: uuid.UUID, start_date: date, end_date: date,
) -> Optional[Decimal]:
    """SUM(ai_attributed_kwh) over a date range. None when no records match."""
    q = select(func.sum(EnergyUsage.ai_attributed_kwh)).where(
        EnergyUsage.company_id == company_id,
        EnergyUsage.usage_date >= start_date,
        EnergyUsage.usage_date <= end_date,
    )
    return session.execute(q).scalar()


def sum_total_kwh(
    session: Session, company_id: uuid.UUID, start_date: date, end_date: date,
) -> Optional[Decimal]:
    q = select(func.sum(EnergyUsage.total_kwh)).where(
        EnergyUsage.company_id == company_id,
        EnergyUsage.usage_date >= start_date,
        EnergyUsage.usage_date <= end_date,
    )
    return session.execute(q).scalar()


def sum_cost(
    session: Session, company_id: uuid.UUID, start_date: date, end_date: date,
) -> Optional[Decimal]:
    q = select(func.sum(EnergyUsage.cost)).where(
        EnergyUsage.company_id == company_id,
        EnergyUsage.usage_date >= start_date,
        EnergyUsage.usage_date <= end_date,
    )
    return session.execute(q).scalar()


def sum_co2e_kg(
    session: Session, company_id: uuid.UUID, start_date: date, end_date: date,
) -> Optional[Decimal]:
    q = (
        select(func.sum(CarbonEmission.co2e_kg))
        .join(EnergyUsage, CarbonEmission.energy_usage_id == EnergyUsage.id)
        .where(
            EnergyUsage.company_id == company_id,
            EnergyUsage.usage_date >= start_date,
            EnergyUsage.usage_date <= end_date,
        )
    )
    return session.execute(q).scalar()


def count_usage_records(
    session: Session, company_id: uuid.UUID, start_date: date, end_date: date,
) -> int:
    q = select(func.count(EnergyUsage.id)).where(
        EnergyUsage.company_id == company_id,
        EnergyUsage.usage_date >= start_date,
        EnergyUsage.usage_date <= end_date,
    )
    return session.execute(q).scalar() or 0


def sum_ai_kwh_by_department(session: Session, company_id: uuid.UUID) -> dict[uuid.UUID, Decimal]:
    """{department_id: SUM(ai_attributed_kwh)} for records tied to a department."""
    q = (
        select(EnergyUsage.department_id, func.sum(EnergyUsage.ai_attributed_kwh))
        .where(
            EnergyUsage.company_id == company_id,
            EnergyUsage.department_id.is_not(None),
        )
        .group_by(EnergyUsage.department_id)
    )
    return {
        dept_id: total if total is not None else Decimal("0")
        for dept_id, total in session.execute(q).all()
    }


def sum_kwh_by_region(session: Session, company_id: uuid.UUID) -> List[tuple]:
    """[(region, SUM(total_kwh), SUM(ai_attributed_kwh)), ...] ordered by region."""
    q = (
        select(
            EnergyUsage.region,
            func.sum(EnergyUsage.total_kwh),
            func.sum(EnergyUsage.ai_attributed_kwh),
        )
        .where(EnergyUsage.company_id == company_id)
        .group_by(EnergyUsage.region)
        .order_by(EnergyUsage.region)
    )
    return [tuple(row) for row in session.execute(q).all()]


def sum_co2e_by_region(session: Session, company_id: uuid.UUID) -> dict[str | None, Decimal]:
    q = (
        select(CarbonEmission.region_used, func.sum(CarbonEmission.co2e_kg))
        .join(EnergyUsage, CarbonEmission.energy_usage_id == EnergyUsage.id)
        .where(EnergyUsage.company_id == company_id)
        .group_by(CarbonEmission.region_used)
    )
    return {region: total for region, total in session.execute(q).all()}


def get_carbon_config(
    session: Session, company_id: uuid.UUID, region: str,
) -> Optional[CarbonConfig]:
    """Company override for a region. Region match is case-insensitive."""
    q = select(CarbonConfig).where(
        CarbonConfig.company_id == company_id,
        func.upper(CarbonConfig.region) == region.strip().upper(),
    )
    return session.execute(q).scalars().first()


def get_carbon_configs(session: Session, company_id: uuid.UUID) -> List[CarbonConfig]:
    q = (
        select(CarbonConfig)
        .where(CarbonConfig.company_id == company_id)
        .order_by(CarbonConfig.region)
    )
    return list(session.execute(q).scalars().all())


def get_thresholds(
    session: Session, company_id: uuid.UUID, active_only: bool = False,
) -> List[AlertThreshold]:
    q = (
        select(AlertThreshold)
        .where(AlertThreshold.company_id == company_id)
        .order_by(AlertThreshold.created_at)
    )
    if active_only:
        q = q.where(AlertThreshold.active.is_(True))
    return list(session.execute(q).scalars().all())


def get_threshold_for_metric(
    session: Session, company_id: uuid.UUID, metric_type: MetricType,
) -> Optional[AlertThreshold]:
    q = select(AlertThreshold).where(
        AlertThreshold.company_id == company_id,
        AlertThreshold.metric_type == metric_type,
    )
    return session.execute(q).scalars().first()


def get_scenarios(session: Session, company_id: uuid.UUID) -> List[SimulationScenario]:
    """Saved scenarios, newest first."""
    q = (
        select(SimulationScenario)
        .where(SimulationScenario.company_id == company_id)
        .order_by(SimulationScenario.created_at.desc())
    )
    return list(session.execute(q).scalars().all())
