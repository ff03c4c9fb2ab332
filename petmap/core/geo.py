"""
Geographic Primitives Module.

Defines the coordinate and viewport types shared by the map widgets,
along with the range checks applied to every coordinate before rendering.

Coordinates are plain WGS84 latitude/longitude in degrees. No projection
logic lives here; Leaflet handles Web Mercator on the page side.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence, Union

# Defaults used by the portal's map pages
DEFAULT_CENTER = (55.7558, 37.6173)  # Moscow
DEFAULT_ZOOM = 10
PRECISE_ZOOM = 15

LAT_RANGE = (-90.0, 90.0)
LNG_RANGE = (-180.0, 180.0)


class LatLng(NamedTuple):
    """A latitude/longitude pair in degrees."""

    lat: float
    lng: float

    def format(self, precision: int = 6) -> str:
        """
        Formats the coordinate for display.

        Args:
            precision: Number of decimal places.

        Returns:
            str: Text such as "55.755800, 37.617300".
        """
        return f"{self.lat:.{precision}f}, {self.lng:.{precision}f}"


CoordinateLike = Union[LatLng, Sequence[float]]


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """
    Checks that a coordinate is finite and inside WGS84 bounds.

    Args:
        lat: Latitude in degrees.
        lng: Longitude in degrees.

    Returns:
        bool: True if lat is in [-90, 90] and lng is in [-180, 180].
    """
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        return False

    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False

    return (
        LAT_RANGE[0] <= lat <= LAT_RANGE[1] and LNG_RANGE[0] <= lng <= LNG_RANGE[1]
    )


def to_latlng(value: Optional[CoordinateLike]) -> Optional[LatLng]:
    """
    Normalizes a (lat, lng) pair, dict or LatLng into a LatLng.

    Args:
        value: Anything shaped like a coordinate, or None.

    Returns:
        Optional[LatLng]: The coordinate, or None if value is None.

    Raises:
        ValueError: If the value is not a valid coordinate.
    """
    if value is None:
        return None

    if isinstance(value, dict):
        lat, lng = value.get("lat"), value.get("lng")
    else:
        try:
            lat, lng = value
        except (TypeError, ValueError):
            raise ValueError(f"Not a coordinate pair: {value!r}")

    if not is_valid_coordinate(lat, lng):
        raise ValueError(f"Coordinate out of range: ({lat}, {lng})")

    return LatLng(float(lat), float(lng))


@dataclass(frozen=True)
class Viewport:
    """
    Center and zoom of a map.

    Attributes:
        center: Map center.
        zoom: Leaflet zoom level (0 = whole world).
    """

    center: LatLng = LatLng(*DEFAULT_CENTER)
    zoom: int = DEFAULT_ZOOM

    def __post_init__(self):
        """Validates the zoom level and normalizes the center."""
        if self.zoom < 0:
            raise ValueError(f"Zoom must be >= 0, got {self.zoom}")
        object.__setattr__(self, "center", to_latlng(self.center))
