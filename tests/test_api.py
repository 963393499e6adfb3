from __future__ import annotations

import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="module")
def api_client() -> Iterable[TestClient]:
    from sunmoon_api import app

    with TestClient(app) as client:
        yield client


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["version"]


def test_validation_error(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun",
        params={
            "lat": 95,  # invalid latitude
            "lon": 0,
            "when": "2019-06-21T09:00:00+02:00",
        },
    )
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False
    assert payload["path"] == "/sun"
    assert payload["error"].startswith("lat: ")


def test_invalid_offset_rejected(api_client: TestClient) -> None:
    response = api_client.get(
        "/moon",
        params={"lat": 10, "lon": 10, "when": "2019-06-21T09:00:00Z", "offset_hours": 30},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_sun_endpoint(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun",
        params={"lat": 51.9, "lon": 10.43, "when": "2019-06-21T18:00:00+02:00"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["astro_dawn"] is None
    sunrise = datetime.fromisoformat(payload["sunrise"])
    assert sunrise.utcoffset() == timedelta(hours=2)
    expected = datetime.fromisoformat("2019-06-21T04:59:32+02:00")
    assert abs((sunrise - expected).total_seconds()) <= 120


def test_sun_endpoint_offset_hours(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun",
        params={
            "lat": 51.9,
            "lon": 10.43,
            "when": "2019-06-21T18:00:00+02:00",
            "offset_hours": 0,
        },
    )
    assert response.status_code == 200
    noon = datetime.fromisoformat(response.json()["solar_noon"])
    assert noon.utcoffset() == timedelta(0)


def test_sun_endpoint_polar_day(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun",
        params={"lat": 70.66, "lon": 23.68, "when": "2019-06-21T09:00:00+02:00"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "polar_day"
    assert payload["sunrise"] is None
    assert payload["solar_noon"] is not None


def test_sun_endpoint_polar_night(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun",
        params={"lat": 78.22, "lon": 15.65, "when": "2019-12-21T12:00:00"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "polar_night"
    assert payload["sunset"] is None


def test_moon_endpoint(api_client: TestClient) -> None:
    response = api_client.get(
        "/moon",
        params={"lat": 32.82, "lon": -117.10, "when": "2018-12-21T09:00:00-08:00"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["distance_km"] == pytest.approx(367007, abs=100)
    assert payload["azimuth"] == pytest.approx(329.5, abs=1.0)
    assert payload["moonrise"] is not None
    assert datetime.fromisoformat(payload["moonrise"]).utcoffset() == timedelta(hours=-8)
