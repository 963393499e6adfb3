"""Time and angle primitives shared by the sun and moon engines."""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta, timezone, tzinfo
from typing import Callable, Optional

import erfa

__all__ = [
    "J1970",
    "J2000",
    "DAY_SECONDS",
    "DAYS_PER_CENTURY",
    "OffsetFunction",
    "round2",
    "to_unix_time",
    "to_julian_date",
    "to_days_since_j2000",
    "from_julian_date",
    "fixed_offset",
    "offset_from_tzinfo",
    "default_offset",
    "in_zone",
]

J1970 = 2440588
J2000 = erfa.DJ00
DAY_SECONDS = erfa.DAYSEC
DAYS_PER_CENTURY = erfa.DJC

# Takes an aware UTC instant, returns seconds east of UTC.
OffsetFunction = Callable[[datetime], int]


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def round2(value: float) -> float:
    """Round *value* to two decimals, halves away from zero."""

    return _round_half_away(value * 100.0) / 100.0


def to_unix_time(instant: datetime) -> float:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError("datetime must be timezone-aware")
    return instant.timestamp()


def to_julian_date(unix_time: float) -> float:
    return unix_time / DAY_SECONDS - 0.5 + J1970


def to_days_since_j2000(unix_time: float) -> float:
    return to_julian_date(unix_time) - J2000


def from_julian_date(j: float) -> datetime:
    """Convert a Julian date to an aware UTC datetime.

    The result is rounded to the nearest whole second so that repeated
    conversions do not drift by truncation.
    """

    seconds = int(_round_half_away((j + 0.5 - J1970) * DAY_SECONDS))
    return datetime.fromtimestamp(seconds, tz=UTC)


def fixed_offset(seconds: int) -> OffsetFunction:
    """Return an offset function that always yields *seconds* east of UTC."""

    def _offset(instant: datetime) -> int:
        return seconds

    return _offset


def offset_from_tzinfo(zone: tzinfo) -> OffsetFunction:
    """Return an offset function backed by a ``tzinfo`` such as ``ZoneInfo``."""

    def _offset(instant: datetime) -> int:
        delta = instant.astimezone(zone).utcoffset()
        return int(delta.total_seconds()) if delta is not None else 0

    return _offset


def default_offset(instant: datetime, tz_offset: Optional[OffsetFunction]) -> OffsetFunction:
    """Fall back to the offset carried by *instant* when none is supplied."""

    if tz_offset is not None:
        return tz_offset
    delta = instant.utcoffset()
    if delta is None:
        raise ValueError("datetime must be timezone-aware")
    return fixed_offset(int(delta.total_seconds()))


def in_zone(instant: datetime, tz_offset: OffsetFunction) -> datetime:
    """Attach the presentation offset to *instant* without moving it."""

    seconds = tz_offset(instant.astimezone(UTC))
    return instant.astimezone(timezone(timedelta(seconds=seconds)))
