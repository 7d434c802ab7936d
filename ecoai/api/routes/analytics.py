"""
GET /companies/{company_id}/analytics/trends?months=6
GET /companies/{company_id}/analytics/forecast?months_ahead=3
GET /companies/{company_id}/analytics/year-over-year
"""

from datetime import date
from typing import Callable, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...analytics import AnalyticsEngine
from ...companies import CompanyService
from ..deps import get_db, get_today
from ..schemas import ForecastPointResponse, TrendPointResponse, YearOverYearResponse

router = APIRouter()


def _engine(company_id: UUID, db: Session, today: Callable[[], date]) -> AnalyticsEngine:
    CompanyService(db).get_company(company_id)
    return AnalyticsEngine(db, today=today)


@router.get("/companies/{company_id}/analytics/trends", response_model=List[TrendPointResponse])
def historical_trends(
    company_id: UUID,
    months: int = Query(6, ge=1, le=60),
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    """One point per calendar month, oldest first, zero-filled."""
    return _engine(company_id, db, today).get_historical_trends(company_id, months)


@router.get("/companies/{company_id}/analytics/forecast", response_model=List[ForecastPointResponse])
def forecast(
    company_id: UUID,
    months_ahead: int = Query(3, ge=1, le=24),
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    return _engine(company_id, db, today).forecast_usage(company_id, months_ahead)


@router.get("/companies/{company_id}/analytics/year-over-year", response_model=YearOverYearResponse)
def year_over_year(
    company_id: UUID,
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    return _engine(company_id, db, today).get_year_over_year_comparison(company_id)
