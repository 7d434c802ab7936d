"""
POST   /companies/{company_id}/departments
GET    /companies/{company_id}/departments
GET    /companies/{company_id}/departments/attribution — stored AI kWh per department
GET    /departments/{department_id}
PUT    /departments/{department_id}
DELETE /departments/{department_id}
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...attribution import AttributionEngine
from ...companies import CompanyService
from ..deps import get_db
from ..schemas import (
    DepartmentBreakdownResponse, DepartmentCreate, DepartmentResponse, DepartmentUpdate,
)

router = APIRouter()


@router.post(
    "/companies/{company_id}/departments", response_model=DepartmentResponse, status_code=201,
)
def create_department(company_id: UUID, body: DepartmentCreate, db: Session = Depends(get_db)):
    return CompanyService(db).create_department(company_id, **body.model_dump())


@router.get("/companies/{company_id}/departments", response_model=List[DepartmentResponse])
def list_departments(company_id: UUID, db: Session = Depends(get_db)):
    return CompanyService(db).list_departments(company_id)


@router.get(
    "/companies/{company_id}/departments/attribution",
    response_model=List[DepartmentBreakdownResponse],
)
def department_attribution(company_id: UUID, db: Session = Depends(get_db)):
    """Largest AI consumer first; every department is listed."""
    return AttributionEngine(db).get_attribution_by_department(company_id)


@router.get("/departments/{department_id}", response_model=DepartmentResponse)
def get_department(department_id: UUID, db: Session = Depends(get_db)):
    return CompanyService(db).get_department(department_id)


@router.put("/departments/{department_id}", response_model=DepartmentResponse)
def update_department(department_id: UUID, body: DepartmentUpdate, db: Session = Depends(get_db)):
    return CompanyService(db).update_department(department_id, **body.model_dump(exclude_unset=True))


@router.delete("/departments/{department_id}", status_code=204)
def delete_department(department_id: UUID, db: Session = Depends(get_db)):
    CompanyService(db).delete_department(department_id)
    return Response(status_code=204)
