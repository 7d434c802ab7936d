"""
GET  /carbon/defaults                               — built-in region table
GET  /companies/{company_id}/carbon/configs         — company overrides
PUT  /companies/{company_id}/carbon/configs         — upsert one override
GET  /companies/{company_id}/carbon/intensity?region=X
POST /companies/{company_id}/carbon/recalculate     — re-derive every emission
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...carbon import CarbonCalculator
from ...companies import CompanyService
from ..deps import get_db
from ..schemas import (
    CarbonConfigRequest, CarbonIntensityResponse, EffectiveIntensityResponse, RecalculationResponse,
)

router = APIRouter()


@router.get("/carbon/defaults", response_model=List[CarbonIntensityResponse])
def default_intensities():
    return CarbonCalculator.get_default_carbon_intensities()


@router.get("/companies/{company_id}/carbon/configs", response_model=List[CarbonIntensityResponse])
def company_configs(company_id: UUID, db: Session = Depends(get_db)):
    CompanyService(db).get_company(company_id)
    return CarbonCalculator(db).get_company_carbon_configs(company_id)


@router.put("/companies/{company_id}/carbon/configs", response_model=CarbonIntensityResponse)
def configure_intensity(company_id: UUID, body: CarbonConfigRequest, db: Session = Depends(get_db)):
    """Existing records keep their stored emissions until /recalculate is called."""
    return CarbonCalculator(db).configure_carbon_intensity(
        company_id, body.region, body.carbon_intensity, body.valid_year,
    )


@router.get("/companies/{company_id}/carbon/intensity", response_model=EffectiveIntensityResponse)
def effective_intensity(
    company_id: UUID,
    region: Optional[str] = Query(None, description="Defaults to the company region"),
    db: Session = Depends(get_db),
):
    company = CompanyService(db).get_company(company_id)
    region = region or company.region
    return EffectiveIntensityResponse(
        region=region,
        carbon_intensity=CarbonCalculator(db).get_effective_carbon_intensity(company_id, region),
    )


@router.post("/companies/{company_id}/carbon/recalculate", response_model=RecalculationResponse)
def recalculate(company_id: UUID, db: Session = Depends(get_db)):
    updated = CarbonCalculator(db).recalculate_emissions(company_id)
    return RecalculationResponse(company_id=company_id, records_updated=updated)
