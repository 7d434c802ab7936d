"""
GET    /companies/{company_id}/alerts                 — evaluated thresholds, most severe first
GET    /companies/{company_id}/alerts/thresholds
PUT    /companies/{company_id}/alerts/thresholds      — upsert one threshold per metric
GET    /companies/{company_id}/alerts/insights
PATCH  /alerts/thresholds/{threshold_id}              — enable / disable
DELETE /alerts/thresholds/{threshold_id}
"""

from datetime import date
from typing import Callable, List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...alerts import AlertsEngine
from ...companies import CompanyService
from ..deps import get_db, get_today
from ..schemas import AlertResponse, InsightResponse, ThresholdActiveRequest, ThresholdRequest

router = APIRouter()


@router.get("/companies/{company_id}/alerts", response_model=List[AlertResponse])
def check_alerts(
    company_id: UUID,
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    """
    Month-to-date value of every active threshold's metric. Includes near
    misses (≥ 80 % of the threshold) that have not triggered yet.
    """
    CompanyService(db).get_company(company_id)
    return AlertsEngine(db, today=today).check_thresholds(company_id)


@router.get("/companies/{company_id}/alerts/thresholds", response_model=List[AlertResponse])
def list_thresholds(company_id: UUID, db: Session = Depends(get_db)):
    CompanyService(db).get_company(company_id)
    return AlertsEngine(db).get_all_thresholds(company_id)


@router.put("/companies/{company_id}/alerts/thresholds", response_model=AlertResponse)
def configure_threshold(company_id: UUID, body: ThresholdRequest, db: Session = Depends(get_db)):
    return AlertsEngine(db).configure_threshold(
        company_id, body.metric_type, body.threshold_value, body.operator, body.alert_message,
    )


@router.get("/companies/{company_id}/alerts/insights", response_model=List[InsightResponse])
def insights(
    company_id: UUID,
    db: Session = Depends(get_db),
    today: Callable[[], date] = Depends(get_today),
):
    return AlertsEngine(db, today=today).get_optimization_suggestions(company_id)


@router.patch("/alerts/thresholds/{threshold_id}", response_model=AlertResponse)
def set_threshold_active(threshold_id: UUID, body: ThresholdActiveRequest, db: Session = Depends(get_db)):
    return AlertsEngine(db).set_threshold_active(threshold_id, body.active)


@router.delete("/alerts/thresholds/{threshold_id}", status_code=204)
def delete_threshold(threshold_id: UUID, db: Session = Depends(get_db)):
    AlertsEngine(db).delete_threshold(threshold_id)
    return Response(status_code=204)
