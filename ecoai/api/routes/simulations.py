"""
POST   /companies/{company_id}/simulations/growth
POST   /companies/{company_id}/simulations/region-change
POST   /companies/{company_id}/simulations/efficiency
POST   /companies/{company_id}/simulations/custom
POST   /companies/{company_id}/simulations/scenarios   — save a result
GET    /companies/{company_id}/simulations/scenarios   — newest first
GET    /simulations/scenarios/{scenario_id}            — stored snapshot, not recomputed
DELETE /simulations/scenarios/{scenario_id}
"""

from datetime import date
from typing import Callable, List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...simulation import SimulationEngine, SimulationResult
from ..deps import get_db, get_today
from ..schemas import (
    CustomSimulationRequest, EfficiencyRequest, GrowthRequest, RegionChangeRequest,
    SavedScenarioId, SaveScenarioRequest, ScenarioResponse, SimulationResultSchema,
)

router = APIRouter()


@router.post("/companies/{company_id}/simulations/growth", response_model=SimulationResultSchema)
def simulate_growth(
    company_id: UUID,
    body: GrowthRequest,
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    return SimulationEngine(db, today=today).simulate_growth(
        company_id, body.growth_percent, body.months_ahead,
    )


@router.post(
    "/companies/{company_id}/simulations/region-change", response_model=SimulationResultSchema,
)
def simulate_region_change(
    company_id: UUID,
    body: RegionChangeRequest,
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    return SimulationEngine(db, today=today).simulate_region_change(
        company_id, body.from_region, body.to_region,
    )


@router.post("/companies/{company_id}/simulations/efficiency", response_model=SimulationResultSchema)
def simulate_efficiency(
    company_id: UUID,
    body: EfficiencyRequest,
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    return SimulationEngine(db, today=today).simulate_efficiency(company_id, body.efficiency_percent)


@router.post("/companies/{company_id}/simulations/custom", response_model=SimulationResultSchema)
def simulate_custom(
    company_id: UUID,
    body: CustomSimulationRequest,
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    return SimulationEngine(db, today=today).simulate_custom(
        company_id, body.description, body.projected_ai_kwh, body.parameters,
    )


@router.post(
    "/companies/{company_id}/simulations/scenarios", response_model=SavedScenarioId, status_code=201,
)
def save_scenario(company_id: UUID, body: SaveScenarioRequest, db: Session = Depends(get_db)):
    result = SimulationResult(**body.result.model_dump())
    scenario_id = SimulationEngine(db).save_scenario(company_id, result, body.name)
    return SavedScenarioId(id=scenario_id)


@router.get("/companies/{company_id}/simulations/scenarios", response_model=List[ScenarioResponse])
def list_scenarios(company_id: UUID, db: Session = Depends(get_db)):
    return SimulationEngine(db).get_saved_scenarios(company_id)


@router.get("/simulations/scenarios/{scenario_id}", response_model=ScenarioResponse)
def get_scenario(scenario_id: UUID, db: Session = Depends(get_db)):
    return SimulationEngine(db).get_scenario(scenario_id)


@router.delete("/simulations/scenarios/{scenario_id}", status_code=204)
def delete_scenario(scenario_id: UUID, db: Session = Depends(get_db)):
    SimulationEngine(db).delete_scenario(scenario_id)
    return Response(status_code=204)
