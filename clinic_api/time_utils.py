# backend/clinic_api/time_utils.py
from datetime import date, datetime, timezone
from typing import Optional

from .errors import InvalidInput


def now_utc() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Naive datetimes are taken as UTC. Every stored timestamp uses this form so
    text ordering in the store matches chronological ordering.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def now_iso() -> str:
    return to_iso(now_utc())


def _parse(raw: str) -> datetime:
    value = raw.strip()
    if value.endswith("Z") or value.endswith("z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def normalize_timestamp(raw, field_name: str) -> str:
    """Parse an ISO-8601 date or datetime and return the canonical timestamp."""
    if isinstance(raw, datetime):
        return to_iso(raw)
    try:
        return to_iso(_parse(str(raw)))
    except (ValueError, OverflowError):
        # OverflowError: valid offset timestamps at the edge of the year range
        raise InvalidInput(f"'{field_name}' must be an ISO-8601 date/time.")


def normalize_date(raw, field_name: str) -> Optional[str]:
    """Return ``YYYY-MM-DD`` for a date or datetime value; empty means None."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, date) and not isinstance(raw, datetime):
        return raw.isoformat()
    return normalize_timestamp(raw, field_name)[:10]
