"""
EcoAI API — Shared Dependencies

FastAPI dependency injection for DB sessions and the reporting clock.
"""

from datetime import date
from typing import Callable, Iterator

from fastapi import Request
from sqlalchemy.orm import Session


def get_db(request: Request) -> Iterator[Session]:
    """One session per request: committed on success, rolled back on error."""
    session = request.app.state.db_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_today() -> Callable[[], date]:
    """Clock used for month-to-date and trailing windows. Overridden in tests."""
    return date.today
