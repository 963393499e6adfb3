"""Equatorial and horizontal coordinate transforms shared by sun and moon."""

from __future__ import annotations

import math

import numpy as np

from .types import EquatorialCoordinate

__all__ = [
    "EARTH_OBLIQUITY",
    "sidereal_time",
    "azimuth",
    "altitude",
    "right_ascension",
    "declination",
    "equatorial",
    "astro_refraction",
]

EARTH_OBLIQUITY = math.radians(23.4397)


def sidereal_time(d: float, lw: float) -> float:
    """Local sidereal time in radians for day number *d* and west longitude *lw*."""

    return math.radians(280.16 + 360.9856235 * d) - lw


def azimuth(H: float, phi: float, dec: float) -> float:
    """Azimuth in degrees, 0 at north, from hour angle, latitude and declination."""

    return math.degrees(
        math.atan2(math.sin(H), math.cos(H) * math.sin(phi) - math.tan(dec) * math.cos(phi))
    ) + 180.0


def altitude(H: float, phi: float, dec: float) -> float:
    """Altitude in degrees above the geometric horizon."""

    value = math.sin(phi) * math.sin(dec) + math.cos(phi) * math.cos(dec) * math.cos(H)
    return math.degrees(math.asin(float(np.clip(value, -1.0, 1.0))))


def right_ascension(l: float, b: float) -> float:
    return math.atan2(
        math.sin(l) * math.cos(EARTH_OBLIQUITY) - math.tan(b) * math.sin(EARTH_OBLIQUITY),
        math.cos(l),
    )


def declination(l: float, b: float) -> float:
    return math.asin(
        math.sin(b) * math.cos(EARTH_OBLIQUITY)
        + math.cos(b) * math.sin(EARTH_OBLIQUITY) * math.sin(l)
    )


def equatorial(l: float, b: float) -> EquatorialCoordinate:
    """Equatorial coordinate from ecliptic longitude *l* and latitude *b* (radians)."""

    return EquatorialCoordinate(declination=declination(l, b), right_ascension=right_ascension(l, b))


def astro_refraction(h: float) -> float:
    """Atmospheric refraction term for an altitude *h*.

    The expression is the Saemundsson-style fit used by the moon position and
    is evaluated on *h* as given. The moon passes its altitude in degrees and
    adds the result to that same degree value, which keeps the correction
    below about 0.01 degrees. Below the horizon the term is held at its value
    for ``h = 0``.
    """

    if h < 0:
        h = 0.0
    return 0.0002967 / math.tan(h + 0.00312536 / (h + 0.08901179))
