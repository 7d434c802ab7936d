"""
EcoAI — Energy Tracking (ingestion)

Creates usage records from manual entry and CSV uploads. Every record goes
through the same pipeline:

    total_kwh ──▶ Attribution (AI kWh) ──▶ cost (total × $/kWh) ──▶ persist
                                                                       │
                                              Carbon Calculator ◀──────┘

Derived fields are written once here. CSV rows that fail to parse are logged
at WARNING and skipped; the rest of the file still imports.

CSV layout (header row required, skipped):
    date (YYYY-MM-DD), total_kwh[, department_name[, region]]
"""

import csv
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .attribution import AttributionEngine
from .carbon import CarbonCalculator
from .exceptions import NotFoundError
from .models import (
    Company, DataSource, Department, EnergyUsage, PeriodType,
    find_department_by_name, get_all_usage, get_company,
    get_usage_by_region, get_usage_in_range,
)

logger = logging.getLogger("ecoai.tracking")

TWO_DP = Decimal("0.01")


@dataclass
class ImportStats:
    rows_read: int = 0
    rows_imported: int = 0
    rows_skipped: int = 0
    records: List[EnergyUsage] = field(default_factory=list)


class EnergyTracker:
    """Record creation, listing and deletion for one session."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.attribution = AttributionEngine(session)
        self.carbon = CarbonCalculator(session)

    def _company(self, company_id: uuid.UUID) -> Company:
        company = get_company(self.session, company_id)
        if company is None:
            raise NotFoundError("Company", company_id)
        return company

    def _create(
        self,
        company: Company,
        department: Optional[Department],
        total_kwh: Decimal,
        usage_date: date,
        period_type: PeriodType,
        region: Optional[str],
        currency: Optional[str],
        data_source: DataSource,
    ) -> EnergyUsage:
        usage = EnergyUsage(
            company=company,
            department=department,
            total_kwh=total_kwh,
            usage_date=usage_date,
            period_type=period_type,
            region=region or company.region,
            currency=currency or company.currency,
            data_source=data_source,
            ai_attributed_kwh=self.attribution.attribute_record(total_kwh, company, department),
            cost=(total_kwh * company.electricity_cost_per_kwh).quantize(TWO_DP, ROUND_HALF_UP),
        )
        self.session.add(usage)
        self.session.flush()

        self.carbon.calculate_and_save_emission(usage)
        return usage

    # ── Ingestion ────────────────────────────────────────────────────────

    def record_energy_usage(
        self,
        company_id: uuid.UUID,
        total_kwh: Decimal,
        usage_date: date,
        department_id: Optional[uuid.UUID] = None,
        period_type: Optional[PeriodType] = None,
        region: Optional[str] = None,
        currency: Optional[str] = None,
        data_source: DataSource = DataSource.MANUAL,
    ) -> EnergyUsage:
        company = self._company(company_id)

        department = None
        if department_id is not None:
            department = self.session.get(Department, department_id)
            if department is None or department.company_id != company_id:
                raise NotFoundError("Department", department_id)

        usage = self._create(
            company, department, total_kwh, usage_date,
            period_type or PeriodType.DAILY, region, currency, data_source,
        )
        logger.debug(
            "Recorded %s kWh (%s AI) on %s for company %s",
            total_kwh, usage.ai_attributed_kwh, usage_date, company_id,
        )
        return usage

    def import_from_csv(self, company_id: uuid.UUID, lines: Iterable[str]) -> ImportStats:
        """Import daily records from CSV text. Returns what was imported and skipped."""
        company = self._company(company_id)
        stats = ImportStats()

        reader = csv.reader(lines)
        next(reader, None)  # header

        for line_no, row in enumerate(reader, start=2):
            stats.rows_read += 1
            if len(row) < 2:
                stats.rows_skipped += 1
                continue

            try:
                usage_date = date.fromisoformat(row[0].strip())
                total_kwh = Decimal(row[1].strip())
                if not total_kwh.is_finite() or total_kwh < 0:
                    raise ValueError(f"total_kwh must be a non-negative number, got {row[1].strip()!r}")
            except (ValueError, InvalidOperation) as e:
                logger.warning("CSV row %d skipped: %s", line_no, e)
                stats.rows_skipped += 1
                continue

            department_name = row[2].strip() if len(row) > 2 else ""
            region = row[3].strip() if len(row) > 3 else ""

            department = None
            if department_name:
                department = find_department_by_name(self.session, company_id, department_name)

            try:
                with self.session.begin_nested():
                    usage = self._create(
                        company, department, total_kwh, usage_date,
                        PeriodType.DAILY, region or None, None, DataSource.CSV_IMPORT,
                    )
            except (SQLAlchemyError, ArithmeticError) as e:
                logger.warning("CSV row %d skipped: %s", line_no, e)
                stats.rows_skipped += 1
                continue

            stats.records.append(usage)
            stats.rows_imported += 1

        logger.info(
            "Imported %d energy records from CSV for company %s (%d skipped)",
            stats.rows_imported, company_id, stats.rows_skipped,
        )
        return stats

    # ── Queries ──────────────────────────────────────────────────────────

    def get_usage_by_date_range(
        self, company_id: uuid.UUID, start_date: date, end_date: date,
    ) -> List[EnergyUsage]:
        return get_usage_in_range(self.session, company_id, start_date, end_date)

    def get_all_usage(self, company_id: uuid.UUID) -> List[EnergyUsage]:
        return get_all_usage(self.session, company_id)

    def get_usage_by_region(self, company_id: uuid.UUID, region: str) -> List[EnergyUsage]:
        return get_usage_by_region(self.session, company_id, region)

    def delete_usage(self, usage_id: uuid.UUID) -> None:
        """Deletes the record and its emission."""
        usage = self.session.get(EnergyUsage, usage_id)
        if usage is None:
            raise NotFoundError("EnergyUsage", usage_id)
        self.session.delete(usage)
        self.session.flush()
