"""
Company and department management.

Plain CRUD over the aggregate root. Deleting a company removes everything it
owns; deleting a department keeps its usage records (department_id is
cleared) so company totals do not change.
"""

import logging
import uuid
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import settings
from .exceptions import NotFoundError
from .models import Company, Department, get_company, get_departments

logger = logging.getLogger("ecoai.companies")

COMPANY_FIELDS = frozenset({
    "name", "industry", "country", "region",
    "base_ai_percentage", "electricity_cost_per_kwh", "currency",
})
DEPARTMENT_FIELDS = frozenset({
    "name", "team", "product", "description", "ai_usage_weight", "employee_count",
})


def _apply(obj: Any, allowed: frozenset, changes: dict) -> None:
    for key, value in changes.items():
        if key not in allowed:
            raise ValueError(f"Unknown field: {key}")
        if value is not None:
            setattr(obj, key, value)


class CompanyService:

    def __init__(self, session: Session) -> None:
        self.session = session

    # ── Companies ────────────────────────────────────────────────────────

    def create_company(
        self,
        name: str,
        region: Optional[str] = None,
        industry: Optional[str] = None,
        country: Optional[str] = None,
        base_ai_percentage: Optional[Decimal] = None,
        electricity_cost_per_kwh: Optional[Decimal] = None,
        currency: Optional[str] = None,
    ) -> Company:
        company = Company(
            name=name,
            industry=industry,
            country=country,
            region=region.strip().upper() if region else None,
            base_ai_percentage=(
                base_ai_percentage if base_ai_percentage is not None
                else settings.DEFAULT_AI_PERCENTAGE
            ),
            electricity_cost_per_kwh=(
                electricity_cost_per_kwh if electricity_cost_per_kwh is not None
                else settings.DEFAULT_COST_PER_KWH
            ),
            currency=currency or settings.DEFAULT_CURRENCY,
        )
        self.session.add(company)
        self.session.flush()
        logger.info("Created company %s (%s)", company.id, name)
        return company

    def get_company(self, company_id: uuid.UUID) -> Company:
        company = get_company(self.session, company_id)
        if company is None:
            raise NotFoundError("Company", company_id)
        return company

    def list_companies(self) -> List[Company]:
        q = select(Company).order_by(Company.created_at, Company.name)
        return list(self.session.execute(q).scalars().all())

    def update_company(self, company_id: uuid.UUID, **changes) -> Company:
        """Only non-None values are applied; existing records keep their derived numbers."""
        company = self.get_company(company_id)
        if changes.get("region"):
            changes["region"] = changes["region"].strip().upper()
        _apply(company, COMPANY_FIELDS, changes)
        self.session.flush()
        return company

    def delete_company(self, company_id: uuid.UUID) -> None:
        self.session.delete(self.get_company(company_id))
        self.session.flush()
        logger.info("Deleted company %s", company_id)

    # ── Departments ──────────────────────────────────────────────────────

    def create_department(
        self,
        company_id: uuid.UUID,
        name: str,
        ai_usage_weight: Optional[Decimal] = None,
        team: Optional[str] = None,
        product: Optional[str] = None,
        description: Optional[str] = None,
        employee_count: Optional[int] = None,
    ) -> Department:
        self.get_company(company_id)
        department = Department(
            company_id=company_id,
            name=name,
            team=team,
            product=product,
            description=description,
            ai_usage_weight=(
                ai_usage_weight if ai_usage_weight is not None
                else settings.DEFAULT_DEPARTMENT_WEIGHT
            ),
            employee_count=employee_count,
        )
        self.session.add(department)
        self.session.flush()
        return department

    def list_departments(self, company_id: uuid.UUID) -> List[Department]:
        self.get_company(company_id)
        return get_departments(self.session, company_id)

    def get_department(self, department_id: uuid.UUID) -> Department:
        department = self.session.get(Department, department_id)
        if department is None:
            raise NotFoundError("Department", department_id)
        return department

    def update_department(self, department_id: uuid.UUID, **changes) -> Department:
        department = self.get_department(department_id)
        _apply(department, DEPARTMENT_FIELDS, changes)
        self.session.flush()
        return department

    def delete_department(self, department_id: uuid.UUID) -> None:
        department = self.get_department(department_id)
        for usage in list(department.energy_usages):
            usage.department = None
        self.session.delete(department)
        self.session.flush()
