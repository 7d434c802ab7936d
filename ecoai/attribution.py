"""
EcoAI — AI Energy Attribution Engine
=====================================
Assigns a share of a company's electricity usage to AI workloads.

    AI_kWh = Total_kWh × Company_AI_Percentage × Department_Weight

Formula-based and explainable: no estimation model, every number can be
traced back to the three factors. Used at record creation (manual entry, CSV
import) and by the sample-data seeder.

Usage:
    engine = AttributionEngine(session)
    ai_kwh = engine.attribute_record(Decimal("1000"), company, department)
    breakdown = engine.get_attribution_by_department(company_id)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.orm import Session

from .models import (
    Company, Department,
    get_company, get_departments, sum_ai_kwh_by_department,
)
from .exceptions import NotFoundError

logger = logging.getLogger("ecoai.attribution")

DEFAULT_COMPANY_AI_PERCENTAGE = Decimal("0.30")
DEFAULT_DEPARTMENT_WEIGHT = Decimal("1")  # no department → whole company share
FOUR_DP = Decimal("0.0001")
HUNDRED = Decimal("100")


@dataclass
class DepartmentBreakdown:
    """AI energy attributed to one department and its share of the total."""
    department_id: uuid.UUID
    department_name: str
    team: Optional[str]
    ai_energy_kwh: Decimal
    percentage: Decimal
    ai_usage_weight: Optional[Decimal]


def calculate_ai_attribution(
    total_kwh: Optional[Decimal],
    company_ai_percentage: Optional[Decimal] = None,
    department_weight: Optional[Decimal] = None,
) -> Decimal:
    """
    AI-attributed kWh, rounded half-up to 4 dp.

    Missing total → 0. Missing company percentage → 0.30. Missing department
    weight → 1.0.
    """
    if total_kwh is None:
        return Decimal("0")

    if company_ai_percentage is None:
        company_ai_percentage = DEFAULT_COMPANY_AI_PERCENTAGE
    if department_weight is None:
        department_weight = DEFAULT_DEPARTMENT_WEIGHT

    ai_kwh = (
        Decimal(total_kwh) * Decimal(company_ai_percentage) * Decimal(department_weight)
    ).quantize(FOUR_DP, ROUND_HALF_UP)

    logger.debug(
        "Attribution: %s kWh × %s × %s = %s AI kWh",
        total_kwh, company_ai_percentage, department_weight, ai_kwh,
    )
    return ai_kwh


def explain_attribution(
    total_kwh: Decimal,
    company_ai_percentage: Decimal,
    department_weight: Decimal,
    result: Decimal,
) -> str:
    """Human-readable breakdown of one attribution calculation."""
    rule = "━" * 30
    return (
        "Attribution Calculation:\n"
        f"{rule}\n"
        f"Total Energy:      {total_kwh:,.2f} kWh\n"
        f"Company AI %:      {company_ai_percentage * HUNDRED:,.1f}%\n"
        f"Department Weight: {department_weight * HUNDRED:,.1f}%\n"
        f"{rule}\n"
        f"Formula: {total_kwh:.2f} × {company_ai_percentage:.4f} × {department_weight:.4f}\n"
        f"AI Energy:         {result:,.2f} kWh\n"
    )


class AttributionEngine:
    """Attribution at ingestion time and per-department rollups."""

    def __init__(self, session: Session):
        self.session = session

    def attribute_record(
        self,
        total_kwh: Optional[Decimal],
        company: Optional[Company],
        department: Optional[Department] = None,
    ) -> Decimal:
        """Attribution using the factors stored on the company / department."""
        if total_kwh is None or company is None:
            return Decimal("0")
        weight = department.ai_usage_weight if department is not None else None
        return calculate_ai_attribution(total_kwh, company.base_ai_percentage, weight)

    def get_attribution_by_department(self, company_id: uuid.UUID) -> List[DepartmentBreakdown]:
        """
        Stored AI kWh summed per department, largest first.

        Sums what was written at ingestion; nothing is re-attributed. Every
        department of the company appears, with zero when it has no records.
        """
        if get_company(self.session, company_id) is None:
            raise NotFoundError("Company", company_id)

        departments = get_departments(self.session, company_id)
        dept_ai_kwh = sum_ai_kwh_by_department(self.session, company_id)
        total_ai_kwh = sum(dept_ai_kwh.values(), Decimal("0"))

        breakdown = []
        for dept in departments:
            ai_kwh = dept_ai_kwh.get(dept.id, Decimal("0"))
            if total_ai_kwh > 0:
                percentage = (ai_kwh / total_ai_kwh).quantize(FOUR_DP, ROUND_HALF_UP) * HUNDRED
            else:
                percentage = Decimal("0")

            breakdown.append(DepartmentBreakdown(
                department_id=dept.id,
                department_name=dept.name,
                team=dept.team,
                ai_energy_kwh=ai_kwh,
                percentage=percentage,
                ai_usage_weight=dept.ai_usage_weight,
            ))

        # sorted() is stable: ties keep department order
        return sorted(breakdown, key=lambda b: b.ai_energy_kwh, reverse=True)
