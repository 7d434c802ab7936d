"""
EcoAI — What-If Simulation Engine
==================================
Projects the company's recent AI energy use under a hypothesis and reports
the deltas against the baseline.

Baseline: SUM(ai_attributed_kwh) over the trailing 30 days (1000 kWh when
the company has no data yet, so demos still show numbers).

    GROWTH         projected = baseline × (1 + g/100) ^ months    (compounded)
    REGION_CHANGE  projected = baseline; only the intensity differs
    EFFICIENCY     projected = baseline × (1 − e/100)             (one-shot)

Each leg is converted to CO2e (kWh × intensity / 1000) and cost
(kWh × cost_per_kwh), both at 2 dp. Saved scenarios are JSON snapshots
returned as stored, never recomputed.

Usage:
    sim = SimulationEngine(session)
    result = sim.simulate_growth(company_id, Decimal("20"), months_ahead=12)
    scenario_id = sim.save_scenario(company_id, result)
"""

from __future__ import annotations

import enum
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from . import intensity as defaults
from .carbon import CarbonCalculator
from .config import settings
from .exceptions import NotFoundError, ScenarioSaveError
from .models import (
    Company, SimulationScenario, SimulationType,
    get_company, get_scenarios, sum_ai_kwh,
)

logger = logging.getLogger("ecoai.simulation")

SCHEMA_VERSION = 1

TWO_DP = Decimal("0.01")
FOUR_DP = Decimal("0.0001")
HUNDRED = Decimal("100")
GRAMS_PER_KG = Decimal("1000")
ZERO = Decimal("0")


# ─────────────────────────────────────────────
# Data classes
# ─────────────────────────────────────────────

@dataclass
class SimulationResult:
    """Baseline and projected legs of one what-if run, plus the deltas."""
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
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SavedScenario:
    id: uuid.UUID
    company_id: uuid.UUID
    name: str
    description: Optional[str]
    simulation_type: SimulationType
    parameters: Dict[str, Any]
    baseline_values: Dict[str, Any]
    results: Dict[str, Any]
    created_at: datetime


def build_result(
    simulation_type: SimulationType,
    description: str,
    baseline: tuple[Decimal, Decimal, Decimal],
    projected: tuple[Decimal, Decimal, Decimal],
    parameters: Optional[Dict[str, Any]] = None,
) -> SimulationResult:
    """
    Assemble a result from (kWh, CO2e kg, cost) legs.

    percent_change is on energy: round4(delta / baseline) × 100, zero when the
    baseline is zero.
    """
    baseline_kwh, baseline_co2e, baseline_cost = baseline
    projected_kwh, projected_co2e, projected_cost = projected

    energy_delta = projected_kwh - baseline_kwh
    if baseline_kwh > 0:
        percent = (energy_delta / baseline_kwh).quantize(FOUR_DP, ROUND_HALF_UP) * HUNDRED
    else:
        percent = ZERO

    return SimulationResult(
        simulation_type=simulation_type,
        name=f"{simulation_type.value} Simulation",
        description=description,
        baseline_ai_kwh=baseline_kwh,
        baseline_co2e_kg=baseline_co2e,
        baseline_cost=baseline_cost,
        projected_ai_kwh=projected_kwh,
        projected_co2e_kg=projected_co2e,
        projected_cost=projected_cost,
        energy_delta_kwh=energy_delta,
        carbon_delta_kg=projected_co2e - baseline_co2e,
        cost_delta=projected_cost - baseline_cost,
        percent_change=percent,
        parameters=dict(parameters or {}),
    )


def co2e_kg(kwh: Decimal, carbon_intensity: Decimal) -> Decimal:
    return (kwh * carbon_intensity / GRAMS_PER_KG).quantize(TWO_DP, ROUND_HALF_UP)


def cost_of(kwh: Decimal, cost_per_kwh: Decimal) -> Decimal:
    return (kwh * cost_per_kwh).quantize(TWO_DP, ROUND_HALF_UP)


# ─────────────────────────────────────────────
# Scenario payload encoding
# ─────────────────────────────────────────────

def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def encode_document(payload: Dict[str, Any]) -> str:
    """Versioned JSON document. Decimals are written as strings to keep every digit."""
    return json.dumps({"schema_version": SCHEMA_VERSION, **payload}, default=_json_default)


def decode_document(raw: Optional[str]) -> Dict[str, Any]:
    return json.loads(raw) if raw else {}


# ─────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────

class SimulationEngine:

    def __init__(self, session: Session, today: Callable[[], date] = date.today):
        self.session = session
        self.today = today
        self.carbon = CarbonCalculator(session)

    def _company(self, company_id: uuid.UUID) -> Company:
        company = get_company(self.session, company_id)
        if company is None:
            raise NotFoundError("Company", company_id)
        return company

    def baseline_ai_kwh(self, company_id: uuid.UUID) -> Decimal:
        end_date = self.today()
        start_date = end_date - timedelta(days=settings.SIMULATION_BASELINE_DAYS)
        baseline = sum_ai_kwh(self.session, company_id, start_date, end_date)
        if baseline is None:
            logger.debug("No usage in baseline window for %s, using demo default", company_id)
            return settings.SIMULATION_BASELINE_DEFAULT_KWH
        return baseline

    # ── Scenarios ────────────────────────────────────────────────────────

    def simulate_growth(
        self,
        company_id: uuid.UUID,
        growth_percent: Decimal,
        months_ahead: Optional[int] = None,
    ) -> SimulationResult:
        company = self._company(company_id)
        if months_ahead is None:
            months_ahead = settings.SIMULATION_DEFAULT_MONTHS

        baseline = self.baseline_ai_kwh(company_id)
        multiplier = Decimal("1") + (growth_percent / HUNDRED).quantize(FOUR_DP, ROUND_HALF_UP)
        projected = (baseline * multiplier ** months_ahead).quantize(TWO_DP, ROUND_HALF_UP)

        carbon_intensity = self.carbon.get_effective_carbon_intensity(company_id, company.region)
        cost_per_kwh = company.electricity_cost_per_kwh

        return build_result(
            SimulationType.GROWTH,
            f"AI Growth Simulation ({growth_percent}% over {months_ahead} months)",
            baseline=(baseline, co2e_kg(baseline, carbon_intensity), cost_of(baseline, cost_per_kwh)),
            projected=(projected, co2e_kg(projected, carbon_intensity), cost_of(projected, cost_per_kwh)),
            parameters={"growth_percent": growth_percent, "months_ahead": months_ahead},
        )

    def simulate_region_change(
        self,
        company_id: uuid.UUID,
        from_region: str,
        to_region: str,
    ) -> SimulationResult:
        """
        Same energy and cost, different grid. Both intensities come from the
        default table; company overrides are ignored here.
        """
        company = self._company(company_id)
        ai_kwh = self.baseline_ai_kwh(company_id)

        from_intensity = defaults.get_intensity(from_region)
        to_intensity = defaults.get_intensity(to_region)
        cost = cost_of(ai_kwh, company.electricity_cost_per_kwh)

        description = (
            f"Region Change: {defaults.get_region_name(from_region)} → "
            f"{defaults.get_region_name(to_region)} "
            f"(Carbon intensity: {from_intensity:.0f} → {to_intensity:.0f} gCO₂/kWh)"
        )

        return build_result(
            SimulationType.REGION_CHANGE,
            description,
            baseline=(ai_kwh, co2e_kg(ai_kwh, from_intensity), cost),
            projected=(ai_kwh, co2e_kg(ai_kwh, to_intensity), cost),
            parameters={"from_region": from_region, "to_region": to_region},
        )

    def simulate_efficiency(
        self,
        company_id: uuid.UUID,
        efficiency_percent: Decimal,
    ) -> SimulationResult:
        company = self._company(company_id)

        baseline = self.baseline_ai_kwh(company_id)
        multiplier = Decimal("1") - (efficiency_percent / HUNDRED).quantize(FOUR_DP, ROUND_HALF_UP)
        projected = (baseline * multiplier).quantize(TWO_DP, ROUND_HALF_UP)

        carbon_intensity = self.carbon.get_effective_carbon_intensity(company_id, company.region)
        cost_per_kwh = company.electricity_cost_per_kwh

        return build_result(
            SimulationType.EFFICIENCY,
            f"Efficiency Improvement Simulation ({efficiency_percent}% reduction)",
            baseline=(baseline, co2e_kg(baseline, carbon_intensity), cost_of(baseline, cost_per_kwh)),
            projected=(projected, co2e_kg(projected, carbon_intensity), cost_of(projected, cost_per_kwh)),
            parameters={"efficiency_percent": efficiency_percent},
        )

    def simulate_custom(
        self,
        company_id: uuid.UUID,
        description: str,
        projected_ai_kwh: Decimal,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> SimulationResult:
        """Caller-supplied projection against the usual baseline."""
        company = self._company(company_id)

        baseline = self.baseline_ai_kwh(company_id)
        projected = projected_ai_kwh.quantize(TWO_DP, ROUND_HALF_UP)
        carbon_intensity = self.carbon.get_effective_carbon_intensity(company_id, company.region)
        cost_per_kwh = company.electricity_cost_per_kwh

        return build_result(
            SimulationType.CUSTOM,
            description,
            baseline=(baseline, co2e_kg(baseline, carbon_intensity), cost_of(baseline, cost_per_kwh)),
            projected=(projected, co2e_kg(projected, carbon_intensity), cost_of(projected, cost_per_kwh)),
            parameters=parameters,
        )

    # ── Persistence ──────────────────────────────────────────────────────

    def save_scenario(
        self,
        company_id: uuid.UUID,
        result: SimulationResult,
        name: Optional[str] = None,
    ) -> uuid.UUID:
        """
        Persist a result as a snapshot and return its id.

        All three documents are encoded before anything touches the session,
        so a ScenarioSaveError leaves nothing behind.
        """
        self._company(company_id)

        try:
            parameters = encode_document(result.parameters)
            baseline_values = encode_document({
                "ai_kwh": result.baseline_ai_kwh,
                "co2e_kg": result.baseline_co2e_kg,
                "cost": result.baseline_cost,
            })
            results = encode_document({
                "projected_ai_kwh": result.projected_ai_kwh,
                "projected_co2e_kg": result.projected_co2e_kg,
                "projected_cost": result.projected_cost,
                "energy_delta_kwh": result.energy_delta_kwh,
                "carbon_delta_kg": result.carbon_delta_kg,
                "cost_delta": result.cost_delta,
                "percent_change": result.percent_change,
            })
        except (TypeError, ValueError) as e:
            logger.error("Scenario for company %s not saved: %s", company_id, e)
            raise ScenarioSaveError("Failed to save scenario") from e

        scenario = SimulationScenario(
            company_id=company_id,
            name=name or result.name,
            description=result.description,
            simulation_type=result.simulation_type,
            parameters=parameters,
            baseline_values=baseline_values,
            results=results,
        )
        self.session.add(scenario)
        self.session.flush()

        logger.info("Saved %s scenario %s for company %s", result.simulation_type.value, scenario.id, company_id)
        return scenario.id

    def get_saved_scenarios(self, company_id: uuid.UUID) -> List[SavedScenario]:
        return [self._saved(s) for s in get_scenarios(self.session, company_id)]

    def get_scenario(self, scenario_id: uuid.UUID) -> SavedScenario:
        return self._saved(self._get_scenario_row(scenario_id))

    def delete_scenario(self, scenario_id: uuid.UUID) -> None:
        self.session.delete(self._get_scenario_row(scenario_id))
        self.session.flush()

    def _get_scenario_row(self, scenario_id: uuid.UUID) -> SimulationScenario:
        scenario = self.session.get(SimulationScenario, scenario_id)
        if scenario is None:
            raise NotFoundError("SimulationScenario", scenario_id)
        return scenario

    @staticmethod
    def _saved(scenario: SimulationScenario) -> SavedScenario:
        return SavedScenario(
            id=scenario.id,
            company_id=scenario.company_id,
            name=scenario.name,
            description=scenario.description,
            simulation_type=scenario.simulation_type,
            parameters=decode_document(scenario.parameters),
            baseline_values=decode_document(scenario.baseline_values),
            results=decode_document(scenario.results),
            created_at=scenario.created_at,
        )
