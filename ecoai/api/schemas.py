"""
EcoAI API — Request / Response Schemas

Pydantic models for every endpoint. Responses read straight off ORM rows and
engine dataclasses (from_attributes). Decimal values are serialized as JSON
strings so no precision is lost on the wire.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..alerts import InsightPriority, Severity
from ..models import DataSource, MetricType, PeriodType, SimulationType, ThresholdOperator


# ── Companies ────────────────────────────────────────────────────────────

class CompanyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    industry: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = Field(default=None, max_length=50, description="Grid region code, e.g. US, EU-NORTH")
    base_ai_percentage: Optional[Decimal] = Field(default=None, ge=0, le=1)
    electricity_cost_per_kwh: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=256)
    industry: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = Field(default=None, max_length=50)
    base_ai_percentage: Optional[Decimal] = Field(default=None, ge=0, le=1)
    electricity_cost_per_kwh: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class CompanyResponse(BaseModel):
    id: UUID
    name: str
    industry: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    base_ai_percentage: Decimal
    electricity_cost_per_kwh: Decimal
    currency: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ── Departments ──────────────────────────────────────────────────────────

class DepartmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    team: Optional[str] = None
    product: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    ai_usage_weight: Optional[Decimal] = Field(default=None, ge=0)
    employee_count: Optional[int] = Field(default=None, ge=0)


class DepartmentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=256)
    team: Optional[str] = None
    product: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    ai_usage_weight: Optional[Decimal] = Field(default=None, ge=0)
    employee_count: Optional[int] = Field(default=None, ge=0)


class DepartmentResponse(BaseModel):
    id: UUID
    company_id: UUID
    name: str
    team: Optional[str] = None
    product: Optional[str] = None
    description: Optional[str] = None
    ai_usage_weight: Decimal
    employee_count: Optional[int] = None

    model_config = {"from_attributes": True}


class DepartmentBreakdownResponse(BaseModel):
    department_id: UUID
    department_name: str
    team: Optional[str] = None
    ai_energy_kwh: Decimal
    percentage: Decimal
    ai_usage_weight: Optional[Decimal] = None

    model_config = {"from_attributes": True}


# ── Energy usage ─────────────────────────────────────────────────────────

class EnergyUsageCreate(BaseModel):
    total_kwh: Decimal = Field(ge=0)
    usage_date: date
    department_id: Optional[UUID] = None
    period_type: Optional[PeriodType] = None
    region: Optional[str] = Field(default=None, max_length=50)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class EnergyUsageResponse(BaseModel):
    id: UUID
    company_id: UUID
    department_id: Optional[UUID] = None
    total_kwh: Decimal
    ai_attributed_kwh: Optional[Decimal] = None
    cost: Optional[Decimal] = None
    currency: str
    usage_date: date
    period_type: PeriodType
    region: Optional[str] = None
    data_source: DataSource
    co2e_grams: Optional[Decimal] = None
    co2e_kg: Optional[Decimal] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_usage(cls, usage) -> "EnergyUsageResponse":
        emission = usage.carbon_emission
        return cls(
            id=usage.id,
            company_id=usage.company_id,
            department_id=usage.department_id,
            total_kwh=usage.total_kwh,
            ai_attributed_kwh=usage.ai_attributed_kwh,
            cost=usage.cost,
            currency=usage.currency,
            usage_date=usage.usage_date,
            period_type=usage.period_type,
            region=usage.region,
            data_source=usage.data_source,
            co2e_grams=emission.co2e_grams if emission is not None else None,
            co2e_kg=emission.co2e_kg if emission is not None else None,
        )


class CsvImportResponse(BaseModel):
    rows_read: int
    rows_imported: int
    rows_skipped: int
    records: List[EnergyUsageResponse]


class AttributionPreview(BaseModel):
    total_kwh: Decimal
    company_ai_percentage: Decimal
    department_weight: Decimal
    ai_kwh: Decimal
    explanation: str


# ── Carbon ───────────────────────────────────────────────────────────────

class CarbonConfigRequest(BaseModel):
    region: str = Field(min_length=1, max_length=50)
    carbon_intensity: Decimal = Field(ge=0, description="gCO2/kWh")
    valid_year: Optional[int] = None


class CarbonIntensityResponse(BaseModel):
    region: str
    region_name: str
    carbon_intensity: Decimal
    unit: str
    valid_year: Optional[int] = None
    is_default: bool

    model_config = {"from_attributes": True}


class EffectiveIntensityResponse(BaseModel):
    region: Optional[str] = None
    carbon_intensity: Decimal
    unit: str = "gCO2/kWh"


class RecalculationResponse(BaseModel):
    company_id: UUID
    records_updated: int


# ── Analytics ────────────────────────────────────────────────────────────

class TrendPointResponse(BaseModel):
    date: date
    period: str
    total_energy_kwh: Decimal
    ai_energy_kwh: Decimal
    co2e_kg: Decimal
    cost: Decimal

    model_config = {"from_attributes": True}


class ForecastPointResponse(BaseModel):
    date: date
    period: str
    predicted_ai_kwh: Decimal
    predicted_co2e_kg: Decimal
    predicted_cost: Decimal
    confidence_low: Decimal
    confidence_high: Decimal
    is_projection: bool = True

    model_config = {"from_attributes": True}


class YearOverYearResponse(BaseModel):
    this_year_ai_kwh: Decimal
    this_year_total_kwh: Decimal
    last_year_ai_kwh: Decimal
    last_year_total_kwh: Decimal
    ai_kwh_change_percent: Decimal
    total_kwh_change_percent: Decimal
    period: str

    model_config = {"from_attributes": True}


# ── Alerts ───────────────────────────────────────────────────────────────

class ThresholdRequest(BaseModel):
    metric_type: MetricType
    threshold_value: Decimal = Field(ge=0)
    operator: Optional[ThresholdOperator] = None
    alert_message: Optional[str] = Field(default=None, max_length=500)


class ThresholdActiveRequest(BaseModel):
    active: bool


class AlertResponse(BaseModel):
    id: UUID
    company_id: UUID
    metric_type: MetricType
    operator: ThresholdOperator
    alert_title: Optional[str] = None
    alert_message: Optional[str] = None
    threshold_value: Decimal
    current_value: Optional[Decimal] = None
    percent_of_threshold: Optional[Decimal] = None
    severity: Severity
    is_triggered: bool
    triggered_at: Optional[datetime] = None
    active: bool

    model_config = {"from_attributes": True}


class InsightResponse(BaseModel):
    category: str
    title: str
    description: str
    impact: str
    priority: InsightPriority
    actionable: str

    model_config = {"from_attributes": True}


# ── Simulations ──────────────────────────────────────────────────────────

class GrowthRequest(BaseModel):
    growth_percent: Decimal
    months_ahead: Optional[int] = Field(default=None, ge=1, le=120)


class RegionChangeRequest(BaseModel):
    from_region: str = Field(min_length=1, max_length=50)
    to_region: str = Field(min_length=1, max_length=50)


class EfficiencyRequest(BaseModel):
    efficiency_percent: Decimal = Field(ge=0, le=100)


class CustomSimulationRequest(BaseModel):
    description: str = Field(min_length=1, max_length=500)
    projected_ai_kwh: Decimal = Field(ge=0)
    parameters: Dict[str, Any] = Field(default_factory=dict)


class SimulationResultSchema(BaseModel):
    simulation_type: SimulationType
    name: str
    description: str
    baseline_ai_kwh: Decimal
    baseline_co2e_kg: Decimal
    baseline_cost: Decimal
    projected_ai_kwh: Decimal
    projected_co2e_kg: Decimal
    projected_cost: Decimal
    energy_delta_kwh: Decimal
    carbon_delta_kg: Decimal
    cost_delta: Decimal
    percent_change: Decimal
    parameters: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"from_attributes": True}


class SaveScenarioRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=256)
    result: SimulationResultSchema


class SavedScenarioId(BaseModel):
    id: UUID


class ScenarioResponse(BaseModel):
    id: UUID
    company_id: UUID
    name: str
    description: Optional[str] = None
    simulation_type: SimulationType
    parameters: Dict[str, Any]
    baseline_values: Dict[str, Any]
    results: Dict[str, Any]
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Dashboard ────────────────────────────────────────────────────────────

class ExecutiveSummaryResponse(BaseModel):
    total_energy_kwh: Decimal
    ai_energy_kwh: Decimal
    ai_percentage: Decimal
    total_co2e_kg: Decimal
    ai_co2e_kg: Decimal
    total_cost: Decimal
    ai_cost: Decimal
    currency: str
    energy_change_percent: Decimal
    carbon_change_percent: Decimal
    cost_change_percent: Decimal
    period_type: str
    department_count: int
    data_point_count: int

    model_config = {"from_attributes": True}


class RegionBreakdownResponse(BaseModel):
    region: Optional[str] = None
    region_name: str
    total_kwh: Decimal
    ai_kwh: Decimal
    co2e_kg: Decimal

    model_config = {"from_attributes": True}


class DashboardResponse(BaseModel):
    summary: ExecutiveSummaryResponse
    department_breakdown: List[DepartmentBreakdownResponse]
    trends: List[TrendPointResponse]
    forecasts: List[ForecastPointResponse]
    alerts: List[AlertResponse]
    insights: List[InsightResponse]
    region_breakdown: List[RegionBreakdownResponse]

    model_config = {"from_attributes": True}


# ── Health ───────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    version: str
    db_connected: bool
    uptime_seconds: float
