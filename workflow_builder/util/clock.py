from datetime import datetime, UTC
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


def utc_now_iso() -> str:
    """ISO-8601 timestamp, second precision, UTC."""
    return utc_now().isoformat()


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 string; returns None for empty or unparseable values."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def next_updated_at(previous: Optional[str]) -> str:
    """
    Timestamp for a write that must not go backwards relative to `previous`.
    Keeps `previous` when the clock is behind it.
    """
    now = utc_now()
    before = parse_timestamp(previous)
    if before is not None and before > now:
        return previous
    return now.isoformat()
