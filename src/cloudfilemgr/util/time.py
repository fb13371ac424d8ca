from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional

# Tick = 100 nanoseconds, counted from 0001-01-01T00:00:00Z.
TICKS_PER_MICROSECOND: int = 10
_TICKS_EPOCH = datetime(1, 1, 1, tzinfo=timezone.utc)

# Instants that stay representable in every UTC offset (offsets are < 1 day).
_LOCAL_SAFE_MIN = datetime.min.replace(tzinfo=timezone.utc) + timedelta(days=1)
_LOCAL_SAFE_MAX = datetime.max.replace(tzinfo=timezone.utc) - timedelta(days=1)


def now_utc() -> datetime:
    """Return current time as tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Return ``dt`` in UTC. Naive datetimes are taken to be UTC already."""
    if not isinstance(dt, datetime):
        raise TypeError("dt must be a datetime")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def as_local(dt: datetime) -> datetime:
    """Return ``dt`` converted to the host's local timezone."""
    return as_utc(dt).astimezone()


def to_ticks(dt: datetime) -> int:
    """Convert a datetime into a tick count."""
    delta = as_utc(dt) - _TICKS_EPOCH
    micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    return micros * TICKS_PER_MICROSECOND


def from_ticks(ticks: int) -> datetime:
    """Convert a tick count into a tz-aware UTC datetime (microsecond precision)."""
    if ticks < 0:
        raise ValueError("ticks must be non-negative")
    return _TICKS_EPOCH + timedelta(microseconds=ticks // TICKS_PER_MICROSECOND)


def parse_iso8601(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp string into tz-aware UTC datetime.

    Accepts strings like:
      - 2025-01-01T12:34:56Z
      - 2025-01-01T12:34:56.123Z
      - 2025-01-01T12:34:56+09:00
    """
    if not isinstance(value, str) or not value:
        raise ValueError("ISO-8601 value must be a non-empty string")

    s = value.strip()
    # Python's fromisoformat doesn't accept 'Z' in 3.9/3.10, so normalize.
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    return as_utc(datetime.fromisoformat(s))


def parse_upload_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an upload timestamp tag.

    The tag is written as a tick count; ISO-8601 strings are accepted too.
    Returns None for missing or unparsable values.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    s = value.strip()
    if s.isdigit():
        try:
            return from_ticks(int(s))
        except OverflowError:
            return None
    try:
        return parse_iso8601(s)
    except (ValueError, OverflowError):
        return None


def resolve_upload_time(
    metadata: Optional[Mapping[str, str]],
    key: str,
    fallback: datetime,
) -> datetime:
    """
    Return the tagged upload time from ``metadata`` or else ``fallback`` (UTC).

    A tag too close to the edges of the datetime range to be shown in local
    time is treated as unparsable.
    """
    tagged = parse_upload_timestamp((metadata or {}).get(key))
    if tagged is not None and _LOCAL_SAFE_MIN <= tagged <= _LOCAL_SAFE_MAX:
        return tagged
    return as_utc(fallback)
