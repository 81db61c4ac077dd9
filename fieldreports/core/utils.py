"""
Shared utilities.
"""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def round_half_up(value) -> int:
    """
    Round to the nearest integer, halves away from zero.

    The dashboard rounds with Math.round, so 2.5 must become 3 rather
    than Python's banker's-rounded 2.
    """
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def plain_number(value):
    """Drop a trailing .0 from integral floats (150.0 -> 150)."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
