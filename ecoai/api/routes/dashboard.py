"""
GET /companies/{company_id}/dashboard          — everything in one call
GET /companies/{company_id}/dashboard/summary  — 30-day KPIs vs previous 30 days
GET /companies/{company_id}/dashboard/regions
"""

from datetime import date
from typing import Callable, List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...companies import CompanyService
from ...dashboard import DashboardService
from ..deps import get_db, get_today
from ..schemas import DashboardResponse, ExecutiveSummaryResponse, RegionBreakdownResponse

router = APIRouter()


@router.get("/companies/{company_id}/dashboard", response_model=DashboardResponse)
def full_dashboard(
    company_id: UUID,
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    return DashboardService(db, today=today).get_full_dashboard(company_id)


@router.get("/companies/{company_id}/dashboard/summary", response_model=ExecutiveSummaryResponse)
def executive_summary(
    company_id: UUID,
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    return DashboardService(db, today=today).get_executive_summary(company_id)


@router.get("/companies/{company_id}/dashboard/regions", response_model=List[RegionBreakdownResponse])
def region_breakdown(company_id: UUID, db: Session = Depends(get_db)):
    CompanyService(db).get_company(company_id)
    return DashboardService(db).get_region_breakdown(company_id)
