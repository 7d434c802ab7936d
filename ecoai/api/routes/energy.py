"""
POST   /companies/{company_id}/energy                       — manual entry
POST   /companies/{company_id}/energy/import                — CSV upload
GET    /companies/{company_id}/energy?start_date&end_date   — or ?region=
GET    /companies/{company_id}/energy/attribution-preview   — formula breakdown, nothing stored
DELETE /energy/{usage_id}
"""

import io
from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile
from sqlalchemy.orm import Session

from ...attribution import (
    DEFAULT_COMPANY_AI_PERCENTAGE, DEFAULT_DEPARTMENT_WEIGHT,
    calculate_ai_attribution, explain_attribution,
)
from ...companies import CompanyService
from ...exceptions import NotFoundError
from ...tracking import EnergyTracker
from ..deps import get_db
from ..schemas import (
    AttributionPreview, CsvImportResponse, EnergyUsageCreate, EnergyUsageResponse,
)

router = APIRouter()


@router.post(
    "/companies/{company_id}/energy", response_model=EnergyUsageResponse, status_code=201,
)
def record_energy_usage(company_id: UUID, body: EnergyUsageCreate, db: Session = Depends(get_db)):
    usage = EnergyTracker(db).record_energy_usage(company_id, **body.model_dump())
    return EnergyUsageResponse.from_usage(usage)


@router.post("/companies/{company_id}/energy/import", response_model=CsvImportResponse)
def import_energy_csv(
    company_id: UUID,
    file: UploadFile = File(..., description="date,total_kwh,department_name,region"),
    db: Session = Depends(get_db),
):
    """Rows that fail to parse are skipped; see rows_skipped."""
    try:
        text = file.file.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(400, "CSV file must be UTF-8 encoded")

    stats = EnergyTracker(db).import_from_csv(company_id, io.StringIO(text, newline=""))
    return CsvImportResponse(
        rows_read=stats.rows_read,
        rows_imported=stats.rows_imported,
        rows_skipped=stats.rows_skipped,
        records=[EnergyUsageResponse.from_usage(u) for u in stats.records],
    )


@router.get("/companies/{company_id}/energy", response_model=List[EnergyUsageResponse])
def list_energy_usage(
    company_id: UUID,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    region: Optional[str] = Query(None, description="Filter by region code"),
    db: Session = Depends(get_db),
):
    """All records newest first, unless a date range or region is given."""
    CompanyService(db).get_company(company_id)
    tracker = EnergyTracker(db)

    if start_date is not None or end_date is not None:
        if start_date is None or end_date is None:
            raise HTTPException(400, "start_date and end_date must be given together")
        if end_date < start_date:
            raise HTTPException(400, "end_date must not be before start_date")
        usages = tracker.get_usage_by_date_range(company_id, start_date, end_date)
    elif region:
        usages = tracker.get_usage_by_region(company_id, region)
    else:
        usages = tracker.get_all_usage(company_id)

    return [EnergyUsageResponse.from_usage(u) for u in usages]


@router.get(
    "/companies/{company_id}/energy/attribution-preview", response_model=AttributionPreview,
)
def attribution_preview(
    company_id: UUID,
    total_kwh: Decimal = Query(..., ge=0),
    department_id: Optional[UUID] = Query(None),
    db: Session = Depends(get_db),
):
    companies = CompanyService(db)
    company = companies.get_company(company_id)
    department = None
    if department_id is not None:
        department = companies.get_department(department_id)
        if department.company_id != company_id:
            raise NotFoundError("Department", department_id)

    pct = company.base_ai_percentage
    if pct is None:
        pct = DEFAULT_COMPANY_AI_PERCENTAGE
    weight = department.ai_usage_weight if department is not None else None
    if weight is None:
        weight = DEFAULT_DEPARTMENT_WEIGHT

    ai_kwh = calculate_ai_attribution(total_kwh, pct, weight)
    return AttributionPreview(
        total_kwh=total_kwh,
        company_ai_percentage=pct,
        department_weight=weight,
        ai_kwh=ai_kwh,
        explanation=explain_attribution(total_kwh, pct, weight, ai_kwh),
    )


@router.delete("/energy/{usage_id}", status_code=204)
def delete_energy_usage(usage_id: UUID, db: Session = Depends(get_db)):
    EnergyTracker(db).delete_usage(usage_id)
    return Response(status_code=204)
