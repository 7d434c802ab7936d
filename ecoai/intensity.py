"""
Default carbon intensity factors by country / grid region.

Values are gCO2/kWh. Sources: IEA and national grid averages; approximations
that vary with time of day and generation mix. Lookups are case-insensitive;
unknown regions fall back to the global average.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional


GLOBAL_FALLBACK_INTENSITY = Decimal("400")  # world average gCO2/kWh
INTENSITY_UNIT = "gCO2/kWh"
DEFAULTS_VALID_YEAR = 2024


@dataclass(frozen=True)
class RegionIntensity:
    code: str
    name: str
    intensity: Decimal


def _region(code: str, name: str, intensity: str) -> RegionIntensity:
    return RegionIntensity(code=code, name=name, intensity=Decimal(intensity))


_TABLE = [
    # High carbon intensity
    _region("IN", "India", "708"),
    _region("AU", "Australia", "656"),
    _region("CN", "China", "555"),
    _region("PL", "Poland", "650"),
    _region("ZA", "South Africa", "900"),

    # Medium
    _region("US", "United States", "386"),
    _region("JP", "Japan", "457"),
    _region("DE", "Germany", "350"),
    _region("UK", "United Kingdom", "233"),
    _region("IT", "Italy", "315"),

    # Low
    _region("EU", "European Union (Avg)", "276"),
    _region("CA", "Canada", "120"),
    _region("FR", "France", "56"),
    _region("SE", "Sweden", "41"),
    _region("NO", "Norway", "26"),

    # Cloud provider regions (approximate, by datacenter location)
    _region("US-EAST", "AWS US East", "380"),
    _region("US-WEST", "AWS US West", "300"),
    _region("EU-WEST", "AWS EU West (Ireland)", "296"),
    _region("EU-NORTH", "AWS EU North (Stockholm)", "45"),
    _region("AP-SOUTH", "AWS Asia Pacific (Mumbai)", "708"),
]

DEFAULT_INTENSITIES: Dict[str, RegionIntensity] = {r.code: r for r in _TABLE}


def lookup(region_code: Optional[str]) -> Optional[RegionIntensity]:
    if not region_code:
        return None
    return DEFAULT_INTENSITIES.get(region_code.strip().upper())


def get_intensity(region_code: Optional[str]) -> Decimal:
    data = lookup(region_code)
    return data.intensity if data is not None else GLOBAL_FALLBACK_INTENSITY


def get_region_name(region_code: Optional[str]) -> str:
    data = lookup(region_code)
    if data is not None:
        return data.name
    return region_code or "Unknown"


def all_defaults() -> Dict[str, RegionIntensity]:
    """Copy of the table in declaration order."""
    return dict(DEFAULT_INTENSITIES)
