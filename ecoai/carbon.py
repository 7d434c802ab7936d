"""
EcoAI — Carbon Emission Calculator
===================================
Converts AI-attributed energy into CO2-equivalent mass.

    CO2e_grams = AI_kWh × Carbon_Intensity (gCO2/kWh)
    CO2e_kg    = CO2e_grams / 1000

Carbon intensity resolution (first match wins):
    1. Company-specific CarbonConfig override for the region
    2. Default table (ecoai.intensity), region code upper-cased
    3. Global fallback, 400 gCO2/kWh

The intensity and region used are stored on every emission so historical
numbers stay put when configuration changes. Recalculating after a change is
an explicit bulk call (recalculate_emissions), never automatic.

Usage:
    calc = CarbonCalculator(session)
    emission = calc.calculate_and_save_emission(usage)
    updated = calc.recalculate_emissions(company_id)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from . import intensity as defaults
from .exceptions import NotFoundError
from .models import (
    CarbonConfig, CarbonEmission, EnergyUsage,
    get_carbon_config, get_carbon_configs, get_company,
)

logger = logging.getLogger("ecoai.carbon")

FOUR_DP = Decimal("0.0001")
GRAMS_PER_KG = Decimal("1000")


@dataclass
class CarbonIntensityInfo:
    """One row of carbon intensity configuration (override or default)."""
    region: str
    region_name: str
    carbon_intensity: Decimal
    unit: str = defaults.INTENSITY_UNIT
    valid_year: Optional[int] = defaults.DEFAULTS_VALID_YEAR
    is_default: bool = False


def co2e_from_kwh(ai_kwh: Decimal, carbon_intensity: Decimal) -> tuple[Decimal, Decimal]:
    """(co2e_grams, co2e_kg), both rounded half-up to 4 dp."""
    co2e_grams = (ai_kwh * carbon_intensity).quantize(FOUR_DP, ROUND_HALF_UP)
    co2e_kg = (co2e_grams / GRAMS_PER_KG).quantize(FOUR_DP, ROUND_HALF_UP)
    return co2e_grams, co2e_kg


class CarbonCalculator:
    """Intensity resolution, per-record emission and bulk recalculation."""

    def __init__(self, session: Session):
        self.session = session

    # ── Intensity ────────────────────────────────────────────────────────

    def get_effective_carbon_intensity(
        self, company_id: uuid.UUID, region: Optional[str],
    ) -> Decimal:
        if region:
            override = get_carbon_config(self.session, company_id, region)
            if override is not None:
                return override.carbon_intensity
        return defaults.get_intensity(region)

    # ── Emissions ────────────────────────────────────────────────────────

    def calculate_and_save_emission(self, usage: EnergyUsage) -> Optional[CarbonEmission]:
        """
        Compute CO2e for one usage record and attach it.

        Returns None (and writes nothing) when the record has no AI energy.
        An existing emission on the record is updated in place.
        """
        if usage.ai_attributed_kwh is None:
            return None

        region = usage.region if usage.region else usage.company.region
        carbon_intensity = self.get_effective_carbon_intensity(usage.company_id, region)
        co2e_grams, co2e_kg = co2e_from_kwh(usage.ai_attributed_kwh, carbon_intensity)

        emission = usage.carbon_emission
        if emission is None:
            emission = CarbonEmission(energy_usage=usage)
            self.session.add(emission)

        emission.co2e_grams = co2e_grams
        emission.co2e_kg = co2e_kg
        emission.carbon_intensity_used = carbon_intensity
        emission.region_used = region
        emission.calculated_at = datetime.now(timezone.utc)
        self.session.flush()

        logger.debug(
            "Emission: %s AI kWh × %s gCO2/kWh (%s) = %s kg",
            usage.ai_attributed_kwh, carbon_intensity, region, co2e_kg,
        )
        return emission

    def recalculate_emissions(self, company_id: uuid.UUID) -> int:
        """
        Recompute the emission of every usage record of a company with the
        current configuration. Running it twice gives identical values.
        Returns the number of records that have an emission afterwards.
        """
        if get_company(self.session, company_id) is None:
            raise NotFoundError("Company", company_id)

        usages = self.session.execute(
            select(EnergyUsage).where(EnergyUsage.company_id == company_id)
        ).scalars().all()

        updated = 0
        for usage in usages:
            if self.calculate_and_save_emission(usage) is not None:
                updated += 1

        logger.info("Recalculated %d emissions for company %s", updated, company_id)
        return updated

    # ── Configuration ────────────────────────────────────────────────────

    def configure_carbon_intensity(
        self,
        company_id: uuid.UUID,
        region: str,
        carbon_intensity: Decimal,
        valid_year: Optional[int] = None,
    ) -> CarbonIntensityInfo:
        """Create or overwrite the company's override for a region."""
        if get_company(self.session, company_id) is None:
            raise NotFoundError("Company", company_id)

        config = get_carbon_config(self.session, company_id, region)
        if config is None:
            config = CarbonConfig(company_id=company_id, region=region.strip().upper())
            self.session.add(config)

        config.carbon_intensity = carbon_intensity
        if valid_year is not None:
            config.valid_year = valid_year
        self.session.flush()

        logger.info(
            "Carbon intensity for company %s region %s set to %s",
            company_id, config.region, carbon_intensity,
        )
        return self._config_info(config)

    def get_company_carbon_configs(self, company_id: uuid.UUID) -> List[CarbonIntensityInfo]:
        return [self._config_info(c) for c in get_carbon_configs(self.session, company_id)]

    @staticmethod
    def get_default_carbon_intensities() -> List[CarbonIntensityInfo]:
        return [
            CarbonIntensityInfo(
                region=code,
                region_name=data.name,
                carbon_intensity=data.intensity,
                is_default=True,
            )
            for code, data in defaults.all_defaults().items()
        ]

    @staticmethod
    def _config_info(config: CarbonConfig) -> CarbonIntensityInfo:
        return CarbonIntensityInfo(
            region=config.region,
            region_name=defaults.get_region_name(config.region),
            carbon_intensity=config.carbon_intensity,
            unit=config.unit or defaults.INTENSITY_UNIT,
            valid_year=config.valid_year,
            is_default=False,
        )
