from datetime import date, datetime
from typing import Optional
import pytz

from library_service.config import settings


def local_zone(name: Optional[str] = None):
    """Return the configured pytz zone, or None for server local time."""
    name = name or settings.timezone
    return pytz.timezone(name) if name else None


def now_local() -> datetime:
    """Get current datetime in the configured timezone."""
    zone = local_zone()
    return datetime.now(zone) if zone else datetime.now()


def today() -> date:
    """Logical "today" used for borrow, due and return dates."""
    return now_local().date()


def days_between(start: date, end: date) -> int:
    """Calendar days from start to end (negative when end precedes start)."""
    return (end - start).days
