"""GET /health"""

import logging
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ... import __version__
from ..deps import get_db
from ..schemas import HealthResponse

logger = logging.getLogger("ecoai.api.health")

router = APIRouter()

_start_time = time.monotonic()


@router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    """Health check: verifies DB connectivity."""
    db_ok = False
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as e:
        logger.warning("Health check DB ping failed: %s", e)

    return HealthResponse(
        status="ok" if db_ok else "degraded",
        version=__version__,
        db_connected=db_ok,
        uptime_seconds=round(time.monotonic() - _start_time, 1),
    )
