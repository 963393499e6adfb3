"""Sun and moon positions, rise/set and twilight times."""

from .moon import moon_position, moon_times
from .sun import SUN_TIME_ANGLES, sun_position, sun_time_set, sun_times
from .timeutil import fixed_offset, offset_from_tzinfo
from .types import (
    GeoPosition,
    HorizontalCoordinate,
    HorizontalCoordinateDistance,
    RiseSetTimes,
    SunTimes,
)

__version__ = "1.0.0"

__all__ = [
    "sun_position",
    "sun_times",
    "sun_time_set",
    "moon_position",
    "moon_times",
    "fixed_offset",
    "offset_from_tzinfo",
    "SUN_TIME_ANGLES",
    "GeoPosition",
    "HorizontalCoordinate",
    "HorizontalCoordinateDistance",
    "RiseSetTimes",
    "SunTimes",
]
