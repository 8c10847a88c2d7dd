from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_db(dt: Optional[datetime]) -> Optional[str]:
    """Fixed-width ISO text so lexical order in SQL matches time order."""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat(timespec="microseconds")


def from_db(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value))
