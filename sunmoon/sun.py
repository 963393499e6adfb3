"""Sun position and rise/set/twilight times.

The formulas follow the low-precision solar model of
http://aa.quae.nl/en/reken/zonpositie.html: an equation of centre for the
ecliptic longitude, a fixed obliquity, and an analytic hour-angle solution
around the solar transit for each altitude threshold.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from typing import Dict, Optional, Tuple

from .coords import altitude, azimuth, declination, equatorial, sidereal_time
from .timeutil import (
    J2000,
    OffsetFunction,
    default_offset,
    from_julian_date,
    in_zone,
    round2,
    to_days_since_j2000,
    to_unix_time,
)
from .types import EquatorialCoordinate, GeoPosition, HorizontalCoordinate, RiseSetTimes, SunTimes

__all__ = [
    "SUN_TIME_ANGLES",
    "solar_mean_anomaly",
    "ecliptic_longitude",
    "sun_coords",
    "sun_position",
    "sun_times",
    "sun_time_set",
]

LOGGER = logging.getLogger(__name__)

J0 = 0.0009
PERIHELION = math.radians(102.9372)

# Altitude threshold in degrees -> (rise field, set field) of SunTimes.
SUN_TIME_ANGLES: Dict[float, Tuple[str, str]] = {
    -0.833: ("sunrise", "sunset"),
    -0.3: ("sunrise_end", "sunset_start"),
    -6.0: ("civil_dawn", "civil_dusk"),
    -12.0: ("nautical_dawn", "nautical_dusk"),
    -18.0: ("astro_dawn", "astro_dusk"),
}


def solar_mean_anomaly(d: float) -> float:
    return math.radians(357.5291 + 0.98560028 * d)


def ecliptic_longitude(M: float) -> float:
    # Equation of centre.
    C = math.radians(1.9148 * math.sin(M) + 0.02 * math.sin(2 * M) + 0.0003 * math.sin(3 * M))
    return M + C + PERIHELION + math.pi


def sun_coords(d: float) -> EquatorialCoordinate:
    """Equatorial coordinate of the sun; its ecliptic latitude is taken as zero."""

    return equatorial(ecliptic_longitude(solar_mean_anomaly(d)), 0.0)


def _position(unix_time: float, location: GeoPosition) -> HorizontalCoordinate:
    lw = math.radians(-location.lon)
    phi = math.radians(location.lat)
    d = to_days_since_j2000(unix_time)
    c = sun_coords(d)
    H = sidereal_time(d, lw) - c.right_ascension
    return HorizontalCoordinate(
        azimuth=round2(azimuth(H, phi, c.declination)),
        altitude=round2(altitude(H, phi, c.declination)),
    )


def sun_position(instant: datetime, lat: float, lon: float) -> HorizontalCoordinate:
    """Return the horizontal position of the sun at *instant* for the observer."""

    location = GeoPosition(lat=lat, lon=lon)
    return _position(to_unix_time(instant), location)


def _julian_cycle(d: float, lw: float) -> float:
    return float(round(d - J0 - lw / (2 * math.pi)))


def _approx_transit(Ht: float, lw: float, n: float) -> float:
    return J0 + (Ht + lw) / (2 * math.pi) + n


def _solar_transit_j(ds: float, M: float, L: float) -> float:
    return J2000 + ds + 0.0053 * math.sin(M) - 0.0069 * math.sin(2 * L)


def _hour_angle(h: float, phi: float, dec: float) -> Optional[float]:
    try:
        w = math.acos((math.sin(h) - math.sin(phi) * math.sin(dec)) / (math.cos(phi) * math.cos(dec)))
    except (ValueError, ZeroDivisionError):
        return None
    return None if math.isnan(w) else w


class _TransitSolver:
    """Solar transit of the day nearest an instant and its threshold crossings."""

    def __init__(self, unix_time: float, location: GeoPosition) -> None:
        self.lw = math.radians(-location.lon)
        self.phi = math.radians(location.lat)
        d = to_days_since_j2000(unix_time)
        self.n = _julian_cycle(d, self.lw)
        ds = _approx_transit(0.0, self.lw, self.n)
        self.M = solar_mean_anomaly(ds)
        self.L = ecliptic_longitude(self.M)
        self.dec = declination(self.L, 0.0)
        self.transit = _solar_transit_j(ds, self.M, self.L)

    def crossing(self, angle: float) -> Tuple[Optional[float], Optional[float]]:
        """Return ``(rise, set)`` Julian dates for altitude *angle* in degrees."""

        w = _hour_angle(math.radians(angle), self.phi, self.dec)
        if w is None:
            return None, None
        set_j = _solar_transit_j(_approx_transit(w, self.lw, self.n), self.M, self.L)
        return self.transit - (set_j - self.transit), set_j


def _present(j: Optional[float], tz_offset: OffsetFunction) -> Optional[datetime]:
    if j is None:
        return None
    return in_zone(from_julian_date(j), tz_offset)


def sun_times(
    instant: datetime,
    lat: float,
    lon: float,
    tz_offset: Optional[OffsetFunction] = None,
) -> SunTimes:
    """Compute solar noon, nadir, rise/set and twilight times for a location.

    Parameters
    ----------
    instant:
        Aware datetime; the transit nearest to it at the observer's
        longitude selects the day.
    lat, lon:
        Geographic coordinates in degrees (east-positive longitude).
    tz_offset:
        Function returning the presentation offset in seconds east of UTC.
        Defaults to the offset carried by *instant*.

    Returns
    -------
    SunTimes
        Each event is ``None`` when the sun never reaches its altitude.
    """

    location = GeoPosition(lat=lat, lon=lon)
    zone = default_offset(instant, tz_offset)
    solver = _TransitSolver(to_unix_time(instant), location)

    events: Dict[str, Optional[datetime]] = {
        "solar_noon": _present(solver.transit, zone),
        "nadir": _present(solver.transit - 0.5, zone),
    }
    absent = []
    for angle, (rise_name, set_name) in SUN_TIME_ANGLES.items():
        rise_j, set_j = solver.crossing(angle)
        events[rise_name] = _present(rise_j, zone)
        events[set_name] = _present(set_j, zone)
        if set_j is None:
            absent.append(angle)

    if absent:
        LOGGER.debug(
            json.dumps(
                {"event": "sun_threshold_not_crossed", "lat": lat, "lon": lon, "angles": absent}
            )
        )
    return SunTimes(**events)


def sun_time_set(
    instant: datetime,
    angle: float,
    lat: float,
    lon: float,
    tz_offset: Optional[OffsetFunction] = None,
) -> RiseSetTimes:
    """Rise and set times for a custom sun altitude *angle* in degrees."""

    location = GeoPosition(lat=lat, lon=lon)
    zone = default_offset(instant, tz_offset)
    rise_j, set_j = _TransitSolver(to_unix_time(instant), location).crossing(angle)
    return RiseSetTimes(rise=_present(rise_j, zone), set=_present(set_j, zone))
