from __future__ import annotations

import itertools
import math
import sys
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

import sunmoon.moon as moon
from sunmoon import HorizontalCoordinateDistance, fixed_offset, moon_position, moon_times

GOSLAR = (51.9, 10.43)
SAN_DIEGO = (32.82, -117.10)
HAMMERFEST = (70.66, 23.68)

TZ_GOSLAR_WINTER = timezone(timedelta(hours=1))
TZ_GOSLAR_SUMMER = timezone(timedelta(hours=2))
TZ_SAN_DIEGO_WINTER = timezone(timedelta(hours=-8))
TZ_SAN_DIEGO_SUMMER = timezone(timedelta(hours=-7))


def _around(expected: datetime, measured: Optional[datetime], seconds: float = 120) -> bool:
    return measured is not None and abs((measured - expected).total_seconds()) <= seconds


@pytest.mark.parametrize(
    "when, location, azimuth, altitude, distance",
    [
        (datetime(2018, 12, 21, 9, tzinfo=TZ_GOSLAR_WINTER), GOSLAR, 331.0, -15.3, 368681),
        (datetime(2018, 12, 21, 18, tzinfo=TZ_GOSLAR_WINTER), GOSLAR, 85.7, 20.7, 367007),
        (datetime(2018, 12, 21, 9, tzinfo=TZ_SAN_DIEGO_WINTER), SAN_DIEGO, 329.5, -31.8, 367007),
        (datetime(2018, 12, 21, 18, tzinfo=TZ_SAN_DIEGO_WINTER), SAN_DIEGO, 79.0, 20.9, 365512),
        (datetime(2019, 6, 21, 9, tzinfo=TZ_GOSLAR_SUMMER), GOSLAR, 240.2, -1.1, 402248),
        (datetime(2019, 6, 21, 18, tzinfo=TZ_GOSLAR_SUMMER), GOSLAR, 28.0, -53.2, 402989),
        (datetime(2019, 6, 21, 9, tzinfo=TZ_SAN_DIEGO_SUMMER), SAN_DIEGO, 244.0, 6.6, 402989),
        (datetime(2019, 6, 21, 18, tzinfo=TZ_SAN_DIEGO_SUMMER), SAN_DIEGO, 53.55, -65.4, 403598),
        (datetime(2019, 6, 21, 9, tzinfo=TZ_GOSLAR_SUMMER), HAMMERFEST, 253.98, -14.27, 402248),
    ],
)
def test_moon_position_reference(when, location, azimuth, altitude, distance):
    position = moon_position(when, *location)
    assert position.azimuth == pytest.approx(azimuth, abs=1.0)
    assert position.altitude == pytest.approx(altitude, abs=1.0)
    assert position.distance == pytest.approx(distance, abs=100)
    assert isinstance(position.distance, int)


def test_distance_is_geocentric():
    # Same instant, two observers.
    goslar = moon_position(datetime(2018, 12, 21, 18, tzinfo=TZ_GOSLAR_WINTER), *GOSLAR)
    san_diego = moon_position(datetime(2018, 12, 21, 9, tzinfo=TZ_SAN_DIEGO_WINTER), *SAN_DIEGO)
    assert goslar.distance == san_diego.distance


@pytest.mark.parametrize(
    "lat, lon, day",
    itertools.product((-90.0, -45.0, 0.0, 33.3, 70.0, 90.0), (-180.0, -60.0, 0.0, 120.0, 180.0), (1, 9, 17, 25)),
)
def test_moon_position_ranges(lat: float, lon: float, day: int):
    position = moon_position(datetime(2024, 2, day, 6, tzinfo=UTC), lat, lon)
    assert -360.0 <= position.azimuth <= 360.0
    assert -90.0 <= position.altitude <= 90.0
    assert 356000 <= position.distance <= 407000


@pytest.mark.parametrize(
    "when, location, rise, set_",
    [
        (
            datetime(2018, 12, 21, 9, tzinfo=TZ_GOSLAR_WINTER),
            GOSLAR,
            datetime(2018, 12, 21, 15, 27, tzinfo=TZ_GOSLAR_WINTER),
            datetime(2018, 12, 21, 6, 30, tzinfo=TZ_GOSLAR_WINTER),
        ),
        (
            datetime(2018, 12, 21, 9, tzinfo=TZ_SAN_DIEGO_WINTER),
            SAN_DIEGO,
            datetime(2018, 12, 21, 16, 11, tzinfo=TZ_SAN_DIEGO_WINTER),
            datetime(2018, 12, 21, 5, 32, tzinfo=TZ_SAN_DIEGO_WINTER),
        ),
        (
            datetime(2019, 6, 21, 9, tzinfo=TZ_GOSLAR_SUMMER),
            GOSLAR,
            datetime(2019, 6, 21, 0, 6, tzinfo=TZ_GOSLAR_SUMMER),
            datetime(2019, 6, 21, 8, 51, tzinfo=TZ_GOSLAR_SUMMER),
        ),
        (
            datetime(2019, 6, 21, 9, tzinfo=TZ_SAN_DIEGO_SUMMER),
            SAN_DIEGO,
            datetime(2019, 6, 21, 23, 28, 43, tzinfo=TZ_SAN_DIEGO_SUMMER),
            datetime(2019, 6, 21, 9, 33, 24, tzinfo=TZ_SAN_DIEGO_SUMMER),
        ),
        (
            datetime(2019, 6, 21, 9, tzinfo=TZ_GOSLAR_SUMMER),
            HAMMERFEST,
            datetime(2019, 6, 21, 3, 23, 4, tzinfo=TZ_GOSLAR_SUMMER),
            datetime(2019, 6, 21, 3, 48, 47, tzinfo=TZ_GOSLAR_SUMMER),
        ),
    ],
)
def test_moon_times_reference(when, location, rise, set_):
    times = moon_times(when, *location)
    assert _around(rise, times.rise)
    assert _around(set_, times.set)


def test_moon_times_presented_in_requested_zone():
    when = datetime(2019, 6, 21, 16, tzinfo=UTC)
    times = moon_times(when, *SAN_DIEGO, fixed_offset(-7 * 3600))
    assert times.rise.utcoffset() == timedelta(hours=-7)
    assert _around(datetime(2019, 6, 21, 23, 28, 43, tzinfo=TZ_SAN_DIEGO_SUMMER), times.rise)


def test_moon_times_scan_local_day():
    when = datetime(2019, 6, 21, 9, tzinfo=TZ_SAN_DIEGO_SUMMER)
    times = moon_times(when, *SAN_DIEGO)
    midnight = datetime(2019, 6, 21, tzinfo=TZ_SAN_DIEGO_SUMMER)
    for value in (times.rise, times.set):
        assert midnight <= value <= midnight + timedelta(days=1)


def test_moon_times_short_visibility_window():
    # The moon is up for under half an hour at Hammerfest that morning.
    times = moon_times(datetime(2019, 6, 21, 9, tzinfo=TZ_GOSLAR_SUMMER), *HAMMERFEST)
    assert times.rise < times.set
    assert (times.set - times.rise) < timedelta(minutes=30)


def test_moon_altitude_refraction_in_degrees(monkeypatch: pytest.MonkeyPatch):
    # Below the horizon the term is fixed at about 0.0084, added to degrees.
    monkeypatch.setattr(moon, "_geometric", lambda unix_time, location: (200.0, -5.0, 384400))
    position = moon_position(datetime(2020, 1, 1, tzinfo=UTC), 0.0, 0.0)
    assert position.altitude == -4.99
    assert position.azimuth == 200.0

    monkeypatch.setattr(moon, "_geometric", lambda unix_time, location: (200.0, 30.0, 384400))
    assert moon_position(datetime(2020, 1, 1, tzinfo=UTC), 0.0, 0.0).altitude == 30.0


def test_moon_times_sample_reported_altitude(monkeypatch: pytest.MonkeyPatch):
    # Geometric altitude rising 1 degree per hour through zero at 06:07:30.
    # The reported altitude carries refraction and two-decimal rounding, which
    # moves the interpolated rise ten seconds earlier.
    start = datetime(2020, 1, 1, tzinfo=UTC).timestamp()
    crossing = start + 6 * 3600 + 450

    def _rising(unix_time: float, location):
        return 90.0, (unix_time - crossing) / 3600, 384400

    monkeypatch.setattr(moon, "_geometric", _rising)
    times = moon_times(datetime(2020, 1, 1, 8, tzinfo=UTC), 0.0, 0.0)
    assert _around(datetime(2020, 1, 1, 6, 7, 20, tzinfo=UTC), times.rise, seconds=1)
    assert times.set is None


def _at_altitude(h: float) -> HorizontalCoordinateDistance:
    return HorizontalCoordinateDistance(azimuth=0.0, altitude=h + moon.MOON_ALTITUDE_CORRECTION, distance=384400)


def _fake_altitude(start: float, cycles: float, phase: float, amplitude: float = 10.0):
    def _horizontal(unix_time: float, location):
        angle = 2 * math.pi * cycles * (unix_time - start) / 86400 + phase
        return _at_altitude(amplitude * math.sin(angle))

    return _horizontal


def test_moon_times_keep_latest_crossing(monkeypatch: pytest.MonkeyPatch):
    # Two full cycles in the day: sets near 05:25 and 17:25, rises near 11:25
    # and 23:25. The scan keeps the latest crossing of each kind.
    when = datetime(2020, 1, 1, 12, tzinfo=UTC)
    start = datetime(2020, 1, 1, tzinfo=UTC).timestamp()
    monkeypatch.setattr(moon, "_horizontal", _fake_altitude(start, 2, 0.3))

    times = moon_times(when, 0.0, 0.0)
    assert _around(datetime(2020, 1, 1, 23, 25, 37, tzinfo=UTC), times.rise, seconds=60)
    assert _around(datetime(2020, 1, 1, 17, 25, 37, tzinfo=UTC), times.set, seconds=60)


def test_moon_times_absent_when_always_up(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(moon, "_horizontal", lambda unix_time, location: _at_altitude(25.0))
    times = moon_times(datetime(2020, 1, 1, tzinfo=UTC), 80.0, 0.0)
    assert times.rise is None
    assert times.set is None


def test_moon_times_absent_when_always_down(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(moon, "_horizontal", lambda unix_time, location: _at_altitude(-25.0))
    times = moon_times(datetime(2020, 1, 1, tzinfo=UTC), -80.0, 0.0)
    assert times.rise is None
    assert times.set is None


def test_moon_times_interpolates_crossing(monkeypatch: pytest.MonkeyPatch):
    # Linear altitude through zero at 06:07:30, halfway between two samples.
    start = datetime(2020, 1, 1, tzinfo=UTC).timestamp()
    crossing = start + 6 * 3600 + 450

    def _linear(unix_time: float, location):
        return _at_altitude((unix_time - crossing) / 3600)

    monkeypatch.setattr(moon, "_horizontal", _linear)
    times = moon_times(datetime(2020, 1, 1, 8, tzinfo=UTC), 0.0, 0.0)
    assert _around(datetime(2020, 1, 1, 6, 7, 30, tzinfo=UTC), times.rise, seconds=1)
    assert times.set is None
