"""FastAPI application exposing sun and moon computations."""

from __future__ import annotations

import json
import logging
import os
import time
from datetime import UTC, datetime
from typing import Annotated, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from models import BodyQueryParams, ErrorResponse, HealthResponse, MoonResponse, SunResponse
from sunmoon import __version__, fixed_offset, moon_position, moon_times, sun_position, sun_times
from sunmoon.timeutil import OffsetFunction

logging.basicConfig(
    level=os.environ.get("SUNMOON_LOG_LEVEL", "INFO").upper(), format="%(message)s"
)
LOGGER = logging.getLogger("sunmoon-api")

APP_DESCRIPTION = (
    "Sun and moon positions, rise/set and twilight times for any place and instant"
)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("SUNMOON_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

app = FastAPI(
    title="Sunmoon API",
    description=APP_DESCRIPTION,
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _instant(params: BodyQueryParams) -> datetime:
    if params.when.tzinfo is None:
        return params.when.replace(tzinfo=UTC)
    return params.when


def _zone(params: BodyQueryParams) -> Optional[OffsetFunction]:
    if params.offset_hours is None:
        return None
    return fixed_offset(int(round(params.offset_hours * 3600)))


def _format_local(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.isoformat()


def _error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message, path=request.url.path)
    LOGGER.warning(
        json.dumps(
            {"event": "request_failed", "path": request.url.path, "status": status_code, "code": code}
        )
    )
    return JSONResponse(status_code=status_code, content=payload.model_dump())


def _describe_validation_error(error: dict) -> str:
    # Query parameters arrive as ("query", "<name>"); keep just the name.
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "query")
    return f"{field}: {error['msg']}" if field else error["msg"]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = "; ".join(_describe_validation_error(error) for error in exc.errors())
    return _error_response(request, 422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(request, exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(request, 500, "internal_error", "Computation failed")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, version=__version__)


@app.get(
    "/sun",
    response_model=SunResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def sun_endpoint(params: Annotated[BodyQueryParams, Query()]) -> SunResponse:
    start_time = time.perf_counter()
    instant = _instant(params)
    try:
        position = sun_position(instant, params.lat, params.lon)
        times = sun_times(instant, params.lat, params.lon, _zone(params))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    if times.sunrise is not None or times.sunset is not None:
        status = "ok"
    elif times.solar_noon is not None and sun_position(times.solar_noon, params.lat, params.lon).altitude > 0:
        status = "polar_day"
    else:
        status = "polar_night"

    response = SunResponse(
        status=status,
        latitude=params.lat,
        longitude=params.lon,
        azimuth=position.azimuth,
        altitude=position.altitude,
        solar_noon=_format_local(times.solar_noon),
        nadir=_format_local(times.nadir),
        sunrise=_format_local(times.sunrise),
        sunset=_format_local(times.sunset),
        sunrise_end=_format_local(times.sunrise_end),
        sunset_start=_format_local(times.sunset_start),
        civil_dawn=_format_local(times.civil_dawn),
        civil_dusk=_format_local(times.civil_dusk),
        nautical_dawn=_format_local(times.nautical_dawn),
        nautical_dusk=_format_local(times.nautical_dusk),
        astro_dawn=_format_local(times.astro_dawn),
        astro_dusk=_format_local(times.astro_dusk),
    )

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps(
            {
                "event": "sun",
                "lat": params.lat,
                "lon": params.lon,
                "when": instant.isoformat(),
                "status": status,
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response


@app.get(
    "/moon",
    response_model=MoonResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def moon_endpoint(params: Annotated[BodyQueryParams, Query()]) -> MoonResponse:
    start_time = time.perf_counter()
    instant = _instant(params)
    try:
        position = moon_position(instant, params.lat, params.lon)
        times = moon_times(instant, params.lat, params.lon, _zone(params))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    response = MoonResponse(
        latitude=params.lat,
        longitude=params.lon,
        azimuth=position.azimuth,
        altitude=position.altitude,
        distance_km=position.distance,
        moonrise=_format_local(times.rise),
        moonset=_format_local(times.set),
    )

    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(
        json.dumps(
            {
                "event": "moon",
                "lat": params.lat,
                "lon": params.lon,
                "when": instant.isoformat(),
                "duration_ms": round(duration_ms, 3),
            }
        )
    )
    return response
