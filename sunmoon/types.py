"""Value types passed across the public boundary of :mod:`sunmoon`."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "GeoPosition",
    "EquatorialCoordinate",
    "HorizontalCoordinate",
    "HorizontalCoordinateDistance",
    "SunTimes",
    "RiseSetTimes",
]


class GeoPosition(BaseModel):
    """Observer location; out-of-range values fail at construction."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")


@dataclass(frozen=True)
class EquatorialCoordinate:
    """Declination and right ascension, both in radians."""

    declination: float
    right_ascension: float


@dataclass(frozen=True)
class HorizontalCoordinate:
    """Azimuth (from north, clockwise) and altitude in degrees."""

    azimuth: float
    altitude: float


@dataclass(frozen=True)
class HorizontalCoordinateDistance:
    """Horizontal coordinate plus geocentric distance in kilometres."""

    azimuth: float
    altitude: float
    distance: int


@dataclass(frozen=True)
class SunTimes:
    """Named sun events for one day; ``None`` marks an altitude never reached."""

    solar_noon: Optional[datetime] = None
    nadir: Optional[datetime] = None
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None
    sunrise_end: Optional[datetime] = None
    sunset_start: Optional[datetime] = None
    civil_dawn: Optional[datetime] = None
    civil_dusk: Optional[datetime] = None
    nautical_dawn: Optional[datetime] = None
    nautical_dusk: Optional[datetime] = None
    astro_dawn: Optional[datetime] = None
    astro_dusk: Optional[datetime] = None


@dataclass(frozen=True)
class RiseSetTimes:
    rise: Optional[datetime] = None
    set: Optional[datetime] = None
