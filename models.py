"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class BodyQueryParams(BaseModel):
    """Validated query parameters shared by the ``/sun`` and ``/moon`` endpoints."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")
    when: datetime = Field(
        ..., description="Instant (ISO-8601); naive values are interpreted as UTC"
    )
    offset_hours: Optional[float] = Field(
        None,
        description="Fixed offset in hours for local times; defaults to the offset of 'when'",
    )

    @field_validator("offset_hours")
    def validate_offset_hours(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return value
        if not -24.0 <= value <= 24.0:
            raise ValueError("offset_hours must be within ±24 hours")
        return value


class SunResponse(BaseModel):
    """Sun position and event times."""

    ok: bool = True
    status: Literal["ok", "polar_day", "polar_night"] = Field(
        ..., description="Whether the sun rises and sets on this day"
    )
    latitude: float
    longitude: float
    azimuth: float = Field(..., description="Azimuth in degrees, 0 = north")
    altitude: float = Field(..., description="Altitude in degrees")
    solar_noon: Optional[str] = None
    nadir: Optional[str] = None
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    sunrise_end: Optional[str] = None
    sunset_start: Optional[str] = None
    civil_dawn: Optional[str] = None
    civil_dusk: Optional[str] = None
    nautical_dawn: Optional[str] = None
    nautical_dusk: Optional[str] = None
    astro_dawn: Optional[str] = None
    astro_dusk: Optional[str] = None


class MoonResponse(BaseModel):
    """Moon position, distance and rise/set times."""

    ok: bool = True
    latitude: float
    longitude: float
    azimuth: float = Field(..., description="Azimuth in degrees, 0 = north")
    altitude: float = Field(..., description="Refracted altitude in degrees")
    distance_km: int = Field(..., description="Geocentric distance in kilometres")
    moonrise: Optional[str] = None
    moonset: Optional[str] = None


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    version: str


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
    path: Optional[str] = Field(None, description="Request path that failed")
