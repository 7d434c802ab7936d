"""
EcoAI — Executive Dashboard

One-call aggregation of the KPIs an executive view needs: a 30-day summary
compared with the previous 30 days, department and region breakdowns, and
the trends / forecast / alerts / insights produced by the other engines.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from . import intensity as defaults
from .alerts import Alert, AlertsEngine, Insight
from .analytics import AnalyticsEngine, ForecastPoint, TrendPoint, percent_change
from .attribution import AttributionEngine, DepartmentBreakdown
from .exceptions import NotFoundError
from .models import (
    count_usage_records, get_company, get_departments,
    sum_ai_kwh, sum_co2e_by_region, sum_co2e_kg, sum_kwh_by_region, sum_total_kwh,
)

logger = logging.getLogger("ecoai.dashboard")

SUMMARY_WINDOW_DAYS = 30
TREND_MONTHS = 6
FORECAST_MONTHS = 3

ONE_DP = Decimal("0.1")
TWO_DP = Decimal("0.01")
FOUR_DP = Decimal("0.0001")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


@dataclass
class ExecutiveSummary:
    total_energy_kwh: Decimal
    ai_energy_kwh: Decimal
    ai_percentage: Decimal
    total_co2e_kg: Decimal
    ai_co2e_kg: Decimal
    total_cost: Decimal
    ai_cost: Decimal
    currency: str
    energy_change_percent: Decimal
    carbon_change_percent: Decimal
    cost_change_percent: Decimal
    period_type: str
    department_count: int
    data_point_count: int


@dataclass
class RegionBreakdown:
    region: Optional[str]
    region_name: str
    total_kwh: Decimal
    ai_kwh: Decimal
    co2e_kg: Decimal


@dataclass
class Dashboard:
    summary: ExecutiveSummary
    department_breakdown: List[DepartmentBreakdown]
    trends: List[TrendPoint]
    forecasts: List[ForecastPoint]
    alerts: List[Alert]
    insights: List[Insight]
    region_breakdown: List[RegionBreakdown]


class DashboardService:

    def __init__(self, session: Session, today: Callable[[], date] = date.today) -> None:
        self.session = session
        self.today = today

    def get_executive_summary(self, company_id: uuid.UUID) -> ExecutiveSummary:
        """
        Last 30 days against the 30 days before that.

        Emissions only exist for AI energy, so total and AI CO2e are the same
        number. Change percents follow the year-over-year convention at 1 dp.
        """
        company = get_company(self.session, company_id)
        if company is None:
            raise NotFoundError("Company", company_id)

        now = self.today()
        window_start = now - timedelta(days=SUMMARY_WINDOW_DAYS)
        previous_start = now - timedelta(days=2 * SUMMARY_WINDOW_DAYS)

        total_kwh = sum_total_kwh(self.session, company_id, window_start, now) or ZERO
        ai_kwh = sum_ai_kwh(self.session, company_id, window_start, now) or ZERO
        co2e = sum_co2e_kg(self.session, company_id, window_start, now) or ZERO

        prev_total_kwh = sum_total_kwh(self.session, company_id, previous_start, window_start)
        prev_co2e = sum_co2e_kg(self.session, company_id, previous_start, window_start)

        cost_per_kwh = company.electricity_cost_per_kwh
        if total_kwh > 0:
            ai_percentage = ((ai_kwh / total_kwh).quantize(FOUR_DP, ROUND_HALF_UP) * HUNDRED).quantize(
                ONE_DP, ROUND_HALF_UP,
            )
        else:
            ai_percentage = ZERO

        total_cost = (total_kwh * cost_per_kwh).quantize(TWO_DP, ROUND_HALF_UP)
        prev_cost = prev_total_kwh * cost_per_kwh if prev_total_kwh is not None else ZERO

        return ExecutiveSummary(
            total_energy_kwh=total_kwh,
            ai_energy_kwh=ai_kwh,
            ai_percentage=ai_percentage,
            total_co2e_kg=co2e,
            ai_co2e_kg=co2e,
            total_cost=total_cost,
            ai_cost=(ai_kwh * cost_per_kwh).quantize(TWO_DP, ROUND_HALF_UP),
            currency=company.currency,
            energy_change_percent=percent_change(prev_total_kwh, total_kwh, ONE_DP),
            carbon_change_percent=percent_change(prev_co2e, co2e, ONE_DP),
            cost_change_percent=percent_change(prev_cost, total_cost, ONE_DP),
            period_type="LAST_30_DAYS",
            department_count=len(get_departments(self.session, company_id)),
            data_point_count=count_usage_records(self.session, company_id, window_start, now),
        )

    def get_region_breakdown(self, company_id: uuid.UUID) -> List[RegionBreakdown]:
        co2e_by_region = sum_co2e_by_region(self.session, company_id)
        return [
            RegionBreakdown(
                region=region,
                region_name=defaults.get_region_name(region),
                total_kwh=total_kwh if total_kwh is not None else ZERO,
                ai_kwh=ai_kwh if ai_kwh is not None else ZERO,
                co2e_kg=co2e_by_region.get(region) or ZERO,
            )
            for region, total_kwh, ai_kwh in sum_kwh_by_region(self.session, company_id)
        ]

    def get_full_dashboard(self, company_id: uuid.UUID) -> Dashboard:
        summary = self.get_executive_summary(company_id)
        analytics = AnalyticsEngine(self.session, today=self.today)
        alerts = AlertsEngine(self.session, today=self.today)

        dashboard = Dashboard(
            summary=summary,
            department_breakdown=AttributionEngine(self.session).get_attribution_by_department(company_id),
            trends=analytics.get_historical_trends(company_id, TREND_MONTHS),
            forecasts=analytics.forecast_usage(company_id, FORECAST_MONTHS),
            alerts=alerts.check_thresholds(company_id),
            insights=alerts.get_optimization_suggestions(company_id),
            region_breakdown=self.get_region_breakdown(company_id),
        )
        logger.debug(
            "Dashboard for %s: %d trend points, %d alerts",
            company_id, len(dashboard.trends), len(dashboard.alerts),
        )
        return dashboard
