"""Send-time arithmetic for recurring report schedules.

Pure functions: no I/O, no stored state. The only ambient input is the
settings object (default delivery time, strictness), which callers may
override per call.

Monthly cadence clamps the day of month to the target month's length, so
Jan 31 is followed by Feb 29 (leap year) or Feb 28, never by early March.
"""
import logging
from datetime import datetime, time
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from fieldreports.core.config import Settings, settings as default_settings
from fieldreports.core.exceptions import InvalidFrequency, ValidationFailure
from fieldreports.core.models import Frequency
from fieldreports.core.utils import utcnow

logger = logging.getLogger(__name__)

DeliveryTime = Union[time, str, None]

CADENCE_STEPS = {
    Frequency.DAILY: relativedelta(days=+1),
    Frequency.WEEKLY: relativedelta(days=+7),
    Frequency.MONTHLY: relativedelta(months=+1),
}


def parse_delivery_time(value: DeliveryTime, config: Optional[Settings] = None) -> time:
    """
    Normalise a delivery time to a ``datetime.time`` with zero microseconds.

    Accepts a ``time``, an ``"HH:MM"`` / ``"HH:MM:SS"`` string, or None
    (which yields the configured default, 09:00:00 unless overridden).

    Raises:
        ValidationFailure: the string is not a valid time of day
    """
    config = config or default_settings
    if value is None or value == "":
        return config.default_delivery_time.replace(microsecond=0)
    if isinstance(value, time):
        return value.replace(microsecond=0, tzinfo=None)
    if isinstance(value, str):
        for fmt in ("%H:%M:%S", "%H:%M"):
            try:
                return datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
    raise ValidationFailure(f"Invalid delivery time: {value!r} (expected HH:MM[:SS])")


def resolve_frequency(frequency, config: Optional[Settings] = None) -> Frequency:
    """Map a raw frequency value onto the enum, falling back to daily."""
    config = config or default_settings
    try:
        return Frequency(frequency)
    except ValueError:
        if config.strict_enums:
            raise InvalidFrequency(frequency)
        logger.warning(f"Unknown frequency {frequency!r}, falling back to daily")
        return Frequency.DAILY


def cadence_step(frequency, config: Optional[Settings] = None) -> relativedelta:
    return CADENCE_STEPS[resolve_frequency(frequency, config)]


def next_send(
    frequency,
    delivery_time: DeliveryTime = None,
    from_: Optional[datetime] = None,
    config: Optional[Settings] = None,
) -> datetime:
    """
    Next occurrence of a recurring send.

    Advances the calendar date of ``from_`` (default: now, UTC) by one
    cadence step and pins the time of day to ``delivery_time``. The
    anchor's tzinfo is carried over unchanged.

    Args:
        frequency: 'daily', 'weekly' or 'monthly'
        delivery_time: time of day; None means the configured default
        from_: anchor instant
        config: settings override

    Returns:
        Timezone-preserving datetime strictly after ``from_``
    """
    anchor = from_ if from_ is not None else utcnow()
    at = parse_delivery_time(delivery_time, config)
    step = cadence_step(frequency, config)

    target_date = anchor.date() + step
    return datetime.combine(target_date, at, tzinfo=anchor.tzinfo)


def next_send_from_anchor(
    frequency,
    delivery_time: DeliveryTime,
    anchor: datetime,
    config: Optional[Settings] = None,
) -> datetime:
    """
    Same cadence as ``next_send`` but anchored on an explicit last-sent instant.

    Used once a send completes so that a late scheduler tick does not push
    every later send back by the lateness.
    """
    if anchor is None:
        raise ValidationFailure("next_send_from_anchor requires an anchor timestamp")
    return next_send(frequency, delivery_time, anchor, config)


def previous_window_start(frequency, until: datetime, config: Optional[Settings] = None) -> datetime:
    """Start of the reporting window one cadence step before ``until``."""
    return until - cadence_step(frequency, config)


__all__ = [
    "next_send",
    "next_send_from_anchor",
    "parse_delivery_time",
    "resolve_frequency",
    "cadence_step",
    "previous_window_start",
]
