"""Memory vault unlock policy.

Event media stays sealed until a fixed delay after the event starts.
Pure functions, no I/O.
"""

from datetime import datetime, timedelta, timezone

from privo.config import settings


def as_utc(dt: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo; they are stored as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def unlocks_at(event_date: datetime) -> datetime:
    """Moment the vault for an event opens."""
    return as_utc(event_date) + timedelta(hours=settings.vault_unlock_hours)


def is_unlocked(event_date: datetime, now: datetime | None = None) -> bool:
    """True once now >= event_date + unlock delay (boundary inclusive)."""
    current = as_utc(now) if now is not None else datetime.now(timezone.utc)
    return current >= unlocks_at(event_date)
