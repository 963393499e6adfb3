"""Moon position, distance and rise/set times.

Lunar coordinates use the periodic series of Meeus, *Astronomical Algorithms*
chapter 47. Rise and set are found by sampling the altitude over the local day
and interpolating linearly across each horizon crossing, so the results are
good to a few minutes and may miss visibility windows shorter than the
sampling step.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import UTC, datetime
from typing import Optional, Tuple

import numpy as np

from .coords import altitude, astro_refraction, azimuth, equatorial, sidereal_time
from .lunar_terms import LATITUDE_TERMS, LONGITUDE_DISTANCE_TERMS
from .timeutil import (
    DAYS_PER_CENTURY,
    OffsetFunction,
    default_offset,
    in_zone,
    round2,
    to_days_since_j2000,
    to_unix_time,
)
from .types import (
    EquatorialCoordinate,
    GeoPosition,
    HorizontalCoordinateDistance,
    RiseSetTimes,
)

__all__ = [
    "SCAN_STEP_SECONDS",
    "MOON_ALTITUDE_CORRECTION",
    "eccentricity_factor",
    "fundamental_arguments",
    "moon_ecliptic",
    "moon_coords",
    "moon_position",
    "moon_times",
]

LOGGER = logging.getLogger(__name__)

SCAN_STEP_SECONDS = 900
SCAN_STEPS = 24 * 3600 // SCAN_STEP_SECONDS
# Subtracted from the reported altitude, which is in degrees.
MOON_ALTITUDE_CORRECTION = math.radians(0.133)
MEAN_DISTANCE_KM = 385000.56

_LD_TERMS = np.array(LONGITUDE_DISTANCE_TERMS, dtype=float)
_B_TERMS = np.array(LATITUDE_TERMS, dtype=float)


def _reduce(angle: float) -> float:
    return angle % 360.0


def eccentricity_factor(m: int, E: float) -> float:
    """Scale for a periodic term whose sun-anomaly multiplier is *m*."""

    if m == 0:
        return 1.0
    if m in (1, -1):
        return E
    return E * E


def fundamental_arguments(T: float) -> dict:
    """Mean arguments in degrees for *T* Julian centuries since J2000."""

    T2, T3, T4 = T * T, T ** 3, T ** 4
    return {
        "Lp": _reduce(218.3164477 + 481267.88123421 * T - 0.0015786 * T2 + T3 / 538841 - T4 / 65194000),
        "D": _reduce(297.8501921 + 445267.1114034 * T - 0.0018819 * T2 + T3 / 545868 - T4 / 1130650000),
        "M": _reduce(357.5291092 + 35999.0502909 * T - 0.0001536 * T2 + T3 / 24490000),
        "Mp": _reduce(134.9633964 + 477198.8675055 * T + 0.0087414 * T2 + T3 / 69699 - T4 / 14712000),
        "F": _reduce(93.2720950 + 483202.0175233 * T - 0.0036539 * T2 - T3 / 3526000 + T4 / 863310000),
        "A1": _reduce(119.75 + 131.849 * T),
        "A2": _reduce(53.09 + 479264.29 * T),
        "A3": _reduce(313.45 + 481266.484 * T),
        "E": _reduce(1 - 0.002516 * T - 0.0000074 * T2),
    }


def _term_arguments(terms: np.ndarray, args: dict) -> Tuple[np.ndarray, np.ndarray]:
    multipliers = terms[:, :4]
    angles = np.radians(multipliers @ np.array([args["D"], args["M"], args["Mp"], args["F"]]))
    scale = np.array([eccentricity_factor(int(m), args["E"]) for m in multipliers[:, 1]])
    return angles, scale


def moon_ecliptic(d: float) -> Tuple[float, float, int]:
    """Ecliptic longitude and latitude (degrees) and distance (km) of the moon."""

    args = fundamental_arguments(d / DAYS_PER_CENTURY)
    Lp, Mp, F, A1 = args["Lp"], args["Mp"], args["F"], args["A1"]

    angles, scale = _term_arguments(_LD_TERMS, args)
    sum_l = float(np.sum(_LD_TERMS[:, 4] * np.sin(angles) * scale))
    sum_r = float(np.sum(_LD_TERMS[:, 5] * np.cos(angles) * scale))
    sum_l += (
        3958 * math.sin(math.radians(A1))
        + 1962 * math.sin(math.radians(Lp - F))
        + 318 * math.sin(math.radians(args["A2"]))
    )

    angles, scale = _term_arguments(_B_TERMS, args)
    sum_b = float(np.sum(_B_TERMS[:, 4] * np.sin(angles) * scale))
    sum_b += (
        -2235 * math.sin(math.radians(Lp))
        + 382 * math.sin(math.radians(args["A3"]))
        + 175 * math.sin(math.radians(A1 - F))
        + 175 * math.sin(math.radians(A1 + F))
        + 127 * math.sin(math.radians(Lp - Mp))
        - 115 * math.sin(math.radians(Lp + Mp))
    )

    return Lp + sum_l / 1_000_000, sum_b / 1_000_000, int(MEAN_DISTANCE_KM + sum_r / 1000)


def moon_coords(d: float) -> Tuple[EquatorialCoordinate, int]:
    l, b, distance = moon_ecliptic(d)
    return equatorial(math.radians(l), math.radians(b)), distance


def _geometric(unix_time: float, location: GeoPosition) -> Tuple[float, float, int]:
    lw = math.radians(-location.lon)
    phi = math.radians(location.lat)
    d = to_days_since_j2000(unix_time)
    c, distance = moon_coords(d)
    H = sidereal_time(d, lw) - c.right_ascension
    return azimuth(H, phi, c.declination), altitude(H, phi, c.declination), distance


def _horizontal(unix_time: float, location: GeoPosition) -> HorizontalCoordinateDistance:
    az, h, distance = _geometric(unix_time, location)
    return HorizontalCoordinateDistance(
        azimuth=round2(az),
        altitude=round2(h + astro_refraction(h)),
        distance=distance,
    )


def moon_position(instant: datetime, lat: float, lon: float) -> HorizontalCoordinateDistance:
    """Return azimuth, altitude and distance of the moon at *instant*.

    The refraction term is computed from the altitude in degrees and added to
    it unchanged, so the reported altitude usually sits less than 0.01
    degrees above the geometric one.
    """

    location = GeoPosition(lat=lat, lon=lon)
    return _horizontal(to_unix_time(instant), location)


def _local_midnight(instant: datetime, tz_offset: OffsetFunction) -> float:
    local = in_zone(instant, tz_offset)
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.timestamp()


def _zero_transit(start: float, h0: float, h1: float) -> float:
    return start + int(abs(h0 / (h0 - h1)) * SCAN_STEP_SECONDS)


def moon_times(
    instant: datetime,
    lat: float,
    lon: float,
    tz_offset: Optional[OffsetFunction] = None,
) -> RiseSetTimes:
    """Compute moonrise and moonset on the local calendar day of *instant*.

    The day runs from local midnight, as given by *tz_offset*, for 24 hours.
    When the moon crosses the horizon more than once in the same direction,
    the latest crossing is returned.
    """

    location = GeoPosition(lat=lat, lon=lon)
    zone = default_offset(instant, tz_offset)
    start = _local_midnight(instant, zone)

    times = start + SCAN_STEP_SECONDS * np.arange(SCAN_STEPS + 1)
    heights = np.array([_horizontal(float(t), location).altitude for t in times]) - MOON_ALTITUDE_CORRECTION
    visible = heights > 0

    rise: Optional[datetime] = None
    set_: Optional[datetime] = None
    crossings = np.nonzero(visible[1:] != visible[:-1])[0]
    for idx in crossings:
        crossing = _zero_transit(float(times[idx]), float(heights[idx]), float(heights[idx + 1]))
        when = in_zone(datetime.fromtimestamp(crossing, tz=UTC), zone)
        if visible[idx]:
            set_ = when
        else:
            rise = when

    LOGGER.debug(
        json.dumps(
            {
                "event": "moon_scan",
                "lat": lat,
                "lon": lon,
                "start": datetime.fromtimestamp(start, tz=UTC).isoformat(),
                "crossings": int(crossings.size),
            }
        )
    )
    return RiseSetTimes(rise=rise, set=set_)
