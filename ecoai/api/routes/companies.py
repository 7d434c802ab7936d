"""
POST   /companies
GET    /companies
GET    /companies/{company_id}
PUT    /companies/{company_id}
DELETE /companies/{company_id} — removes every record the company owns
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...companies import CompanyService
from ..deps import get_db
from ..schemas import CompanyCreate, CompanyResponse, CompanyUpdate

router = APIRouter()


@router.post("/companies", response_model=CompanyResponse, status_code=201)
def create_company(body: CompanyCreate, db: Session = Depends(get_db)):
    return CompanyService(db).create_company(**body.model_dump())


@router.get("/companies", response_model=List[CompanyResponse])
def list_companies(db: Session = Depends(get_db)):
    return CompanyService(db).list_companies()


@router.get("/companies/{company_id}", response_model=CompanyResponse)
def get_company(company_id: UUID, db: Session = Depends(get_db)):
    return CompanyService(db).get_company(company_id)


@router.put("/companies/{company_id}", response_model=CompanyResponse)
def update_company(company_id: UUID, body: CompanyUpdate, db: Session = Depends(get_db)):
    return CompanyService(db).update_company(company_id, **body.model_dump(exclude_unset=True))


@router.delete("/companies/{company_id}", status_code=204)
def delete_company(company_id: UUID, db: Session = Depends(get_db)):
    CompanyService(db).delete_company(company_id)
    return Response(status_code=204)
