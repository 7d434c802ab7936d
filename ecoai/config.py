"""
EcoAI — Service Configuration
Centralises all environment-driven settings with sensible defaults.
"""

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config sourced from environment / .env file."""

    # ── PostgreSQL ───────────────────────────────────────────────────────
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "ecoai"
    DB_USER: str = "ecoai"
    DB_PASSWORD: str = "changeme"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DATABASE_URL: Optional[str] = None  # full override, e.g. sqlite:///./ecoai.db

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    # ── Company defaults ─────────────────────────────────────────────────
    DEFAULT_AI_PERCENTAGE: Decimal = Decimal("0.30")
    DEFAULT_COST_PER_KWH: Decimal = Decimal("0.12")
    DEFAULT_DEPARTMENT_WEIGHT: Decimal = Decimal("0.50")
    DEFAULT_CURRENCY: str = "USD"

    # ── Simulation ───────────────────────────────────────────────────────
    SIMULATION_BASELINE_DAYS: int = 30
    SIMULATION_BASELINE_DEFAULT_KWH: Decimal = Decimal("1000")  # demo fallback when no data
    SIMULATION_DEFAULT_MONTHS: int = 12

    # ── Alerts / insights ────────────────────────────────────────────────
    ALERT_INCLUSION_PERCENT: Decimal = Decimal("80")
    HIGH_VOLUME_AI_KWH: Decimal = Decimal("5000")

    # ── API ──────────────────────────────────────────────────────────────
    CORS_ORIGINS: list[str] = ["*"]
    SEED_ON_STARTUP: bool = False

    # ── Observability ────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
