"""
EcoAI — Analytics & Forecasting
================================
Historical trends, simple growth-rate forecasting and year-over-year
comparison over stored usage records.

Forecasting is deliberately arithmetic, not statistical:
  1. Take the last 6 calendar-month trend points
  2. Growth rate = (avg of second half − avg of first half) / avg of first half
     (5% when the first half is empty)
  3. Compound the 6-month averages by (1 + growth) each month ahead
  4. Confidence band is a fixed ±15% around the projected kWh

Usage:
    analytics = AnalyticsEngine(session)
    trends = analytics.get_historical_trends(company_id, months=6)
    forecast = analytics.forecast_usage(company_id, months_ahead=3)
    yoy = analytics.get_year_over_year_comparison(company_id)
"""

from __future__ import annotations

import calendar
import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from .models import EnergyUsage, get_usage_in_range, sum_ai_kwh, sum_total_kwh

logger = logging.getLogger("ecoai.analytics")

FORECAST_HISTORY_MONTHS = 6
DEFAULT_GROWTH_RATE = Decimal("0.05")
CONFIDENCE_LOW = Decimal("0.85")
CONFIDENCE_HIGH = Decimal("1.15")

TWO_DP = Decimal("0.01")
FOUR_DP = Decimal("0.0001")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


# ─────────────────────────────────────────────
# Calendar helpers
# ─────────────────────────────────────────────

def shift_months(d: date, months: int) -> date:
    """Move a date by whole months, clamping the day to the target month's length."""
    month_index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_label(d: date) -> str:
    """Display label, e.g. 'Oct 2026'."""
    return f"{calendar.month_abbr[d.month]} {d.year}"


def percent_change(old: Optional[Decimal], new: Optional[Decimal], places: Decimal = TWO_DP) -> Decimal:
    """
    (new − old) / old × 100.

    old absent or zero → 100 when new > 0, else 0.
    new absent         → −100.
    The ratio is taken at 4 dp before scaling, then rounded to `places`.
    """
    if old is None or old == 0:
        return Decimal("100") if new is not None and new > 0 else ZERO
    if new is None:
        return Decimal("-100")
    ratio = ((new - old) / old).quantize(FOUR_DP, ROUND_HALF_UP)
    return (ratio * HUNDRED).quantize(places, ROUND_HALF_UP)


# ─────────────────────────────────────────────
# Data classes
# ─────────────────────────────────────────────

@dataclass
class TrendPoint:
    """One calendar month of actuals."""
    date: date
    period: str
    total_energy_kwh: Decimal = ZERO
    ai_energy_kwh: Decimal = ZERO
    co2e_kg: Decimal = ZERO
    cost: Decimal = ZERO


@dataclass
class ForecastPoint:
    """One projected month."""
    date: date
    period: str
    predicted_ai_kwh: Decimal
    predicted_co2e_kg: Decimal
    predicted_cost: Decimal
    confidence_low: Decimal
    confidence_high: Decimal
    is_projection: bool = True


@dataclass
class YearOverYear:
    this_year_ai_kwh: Decimal
    this_year_total_kwh: Decimal
    last_year_ai_kwh: Decimal
    last_year_total_kwh: Decimal
    ai_kwh_change_percent: Decimal
    total_kwh_change_percent: Decimal
    period: str


# ─────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────

class AnalyticsEngine:
    """Read-only aggregation over stored usage and emission records."""

    def __init__(self, session: Session, today: Callable[[], date] = date.today):
        self.session = session
        self.today = today

    def get_historical_trends(self, company_id: uuid.UUID, months: int) -> List[TrendPoint]:
        """
        Monthly totals for the `months` most recent calendar months, oldest
        first. Months without records are emitted as zero points, so the
        result always has exactly `months` entries.
        """
        end_date = self.today()
        start_date = shift_months(end_date, -months)
        usages = get_usage_in_range(self.session, company_id, start_date, end_date)

        by_month: Dict[date, List[EnergyUsage]] = defaultdict(list)
        for usage in usages:
            by_month[month_start(usage.usage_date)].append(usage)

        trends = []
        for i in range(months - 1, -1, -1):
            bucket = month_start(shift_months(end_date, -i))
            month_usages = by_month.get(bucket, [])
            trends.append(TrendPoint(
                date=bucket,
                period=month_label(bucket),
                total_energy_kwh=sum((u.total_kwh for u in month_usages), ZERO),
                ai_energy_kwh=sum((u.ai_attributed_kwh or ZERO for u in month_usages), ZERO),
                co2e_kg=sum(
                    (u.carbon_emission.co2e_kg for u in month_usages if u.carbon_emission is not None),
                    ZERO,
                ),
                cost=sum((u.cost or ZERO for u in month_usages), ZERO),
            ))

        return trends

    def forecast_usage(self, company_id: uuid.UUID, months_ahead: int) -> List[ForecastPoint]:
        """Compounded projection of the recent monthly average. See module docstring."""
        end_date = self.today()
        history_start = shift_months(end_date, -FORECAST_HISTORY_MONTHS)
        if not get_usage_in_range(self.session, company_id, history_start, end_date):
            return []

        history = self.get_historical_trends(company_id, FORECAST_HISTORY_MONTHS)
        n = Decimal(len(history))

        avg_ai_kwh = (sum((p.ai_energy_kwh for p in history), ZERO) / n).quantize(TWO_DP, ROUND_HALF_UP)
        avg_co2e = (sum((p.co2e_kg for p in history), ZERO) / n).quantize(TWO_DP, ROUND_HALF_UP)
        avg_cost = (sum((p.cost for p in history), ZERO) / n).quantize(TWO_DP, ROUND_HALF_UP)

        growth_rate = self._growth_rate(history)
        multiplier = Decimal("1") + growth_rate
        logger.debug("Forecast for %s: growth rate %s over %d months", company_id, growth_rate, len(history))

        forecast_start = month_start(shift_months(end_date, 1))
        current_kwh, current_co2e, current_cost = avg_ai_kwh, avg_co2e, avg_cost

        forecasts = []
        for i in range(months_ahead):
            forecast_date = shift_months(forecast_start, i)

            current_kwh = (current_kwh * multiplier).quantize(TWO_DP, ROUND_HALF_UP)
            current_co2e = (current_co2e * multiplier).quantize(TWO_DP, ROUND_HALF_UP)
            current_cost = (current_cost * multiplier).quantize(TWO_DP, ROUND_HALF_UP)

            forecasts.append(ForecastPoint(
                date=forecast_date,
                period=month_label(forecast_date),
                predicted_ai_kwh=current_kwh,
                predicted_co2e_kg=current_co2e,
                predicted_cost=current_cost,
                confidence_low=(current_kwh * CONFIDENCE_LOW).quantize(TWO_DP, ROUND_HALF_UP),
                confidence_high=(current_kwh * CONFIDENCE_HIGH).quantize(TWO_DP, ROUND_HALF_UP),
            ))

        return forecasts

    @staticmethod
    def _growth_rate(history: List[TrendPoint]) -> Decimal:
        midpoint = len(history) // 2
        first_half = history[:midpoint]
        second_half = history[midpoint:]

        first_avg = (
            sum((p.ai_energy_kwh for p in first_half), ZERO) / Decimal(max(midpoint, 1))
        ).quantize(FOUR_DP, ROUND_HALF_UP)
        second_avg = (
            sum((p.ai_energy_kwh for p in second_half), ZERO) / Decimal(len(second_half))
        ).quantize(FOUR_DP, ROUND_HALF_UP)

        if first_avg > 0:
            return ((second_avg - first_avg) / first_avg).quantize(FOUR_DP, ROUND_HALF_UP)
        return DEFAULT_GROWTH_RATE

    def get_year_over_year_comparison(self, company_id: uuid.UUID) -> YearOverYear:
        """Year-to-date against the same day range one year earlier."""
        today = self.today()
        this_year_start = date(today.year, 1, 1)
        last_year_start = date(today.year - 1, 1, 1)
        last_year_same_day = shift_months(today, -12)

        this_ai = sum_ai_kwh(self.session, company_id, this_year_start, today)
        this_total = sum_total_kwh(self.session, company_id, this_year_start, today)
        last_ai = sum_ai_kwh(self.session, company_id, last_year_start, last_year_same_day)
        last_total = sum_total_kwh(self.session, company_id, last_year_start, last_year_same_day)

        return YearOverYear(
            this_year_ai_kwh=this_ai if this_ai is not None else ZERO,
            this_year_total_kwh=this_total if this_total is not None else ZERO,
            last_year_ai_kwh=last_ai if last_ai is not None else ZERO,
            last_year_total_kwh=last_total if last_total is not None else ZERO,
            ai_kwh_change_percent=percent_change(last_ai, this_ai),
            total_kwh_change_percent=percent_change(last_total, this_total),
            period=f"{today.year} vs {today.year - 1}",
        )
