"""
Map Configuration Module.

Settings for the tile provider, the Leaflet assets and the default view.
Values come from environment variables (a .env file is loaded by the
application entry point) and fall back to the portal defaults.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from petmap.core.geo import (
    DEFAULT_CENTER,
    DEFAULT_ZOOM,
    PRECISE_ZOOM,
    is_valid_coordinate,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "PETMAP_"

OSM_TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
OSM_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a>'
)


@dataclass
class MapSettings:
    """
    Configuration for the map widgets.

    Attributes:
        tile_url: Tile URL template with {s}, {z}, {x}, {y} placeholders.
        tile_attribution: Attribution HTML required by the tile provider.
        max_zoom: Highest zoom level the tile provider serves.
        leaflet_version: Leaflet release loaded into the page.
        leaflet_cdn: Base URL of the Leaflet distribution.
        icon_cdn: Base URL of the stock marker images.
        default_center: Center used when nothing better is known.
        default_zoom: Zoom used with the default center.
        precise_zoom: Zoom used once a precise location is known.
    """

    tile_url: str = OSM_TILE_URL
    tile_attribution: str = OSM_ATTRIBUTION
    max_zoom: int = 19
    leaflet_version: str = "1.9.4"
    leaflet_cdn: str = "https://unpkg.com/leaflet@{version}/dist"
    icon_cdn: str = "https://cdnjs.cloudflare.com/ajax/libs/leaflet/1.7.1/images"
    default_center: Tuple[float, float] = DEFAULT_CENTER
    default_zoom: int = DEFAULT_ZOOM
    precise_zoom: int = PRECISE_ZOOM

    def validate(self) -> None:
        """
        Checks the settings for values the map cannot work with.

        Raises:
            ValueError: If a setting is missing or out of range.
        """
        if not self.tile_url.strip():
            raise ValueError("Tile URL must not be empty")
        if not self.tile_attribution.strip():
            raise ValueError("Tile attribution is required by the tile provider")
        if not is_valid_coordinate(*self.default_center):
            raise ValueError(f"Invalid default center: {self.default_center}")
        for name in ("default_zoom", "precise_zoom", "max_zoom"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")

    @property
    def leaflet_base_url(self) -> str:
        """Leaflet distribution URL with the version filled in."""
        return self.leaflet_cdn.format(version=self.leaflet_version).rstrip("/")

    @property
    def leaflet_js_url(self) -> str:
        """URL of leaflet.js."""
        return f"{self.leaflet_base_url}/leaflet.js"

    @property
    def leaflet_css_url(self) -> str:
        """URL of leaflet.css."""
        return f"{self.leaflet_base_url}/leaflet.css"

    def default_icon_urls(self) -> dict:
        """
        Returns the stock marker image URLs.

        Returns:
            dict: Leaflet Icon.Default option names mapped to URLs.
        """
        base = self.icon_cdn.rstrip("/")
        return {
            "iconRetinaUrl": f"{base}/marker-icon-2x.png",
            "iconUrl": f"{base}/marker-icon.png",
            "shadowUrl": f"{base}/marker-shadow.png",
        }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MapSettings":
        """
        Builds settings from PETMAP_* environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            MapSettings: Validated settings.

        Raises:
            ValueError: If a variable cannot be parsed or fails validation.
        """
        env = os.environ if environ is None else environ
        settings = cls()

        string_fields = {
            "TILE_URL": "tile_url",
            "TILE_ATTRIBUTION": "tile_attribution",
            "LEAFLET_VERSION": "leaflet_version",
            "LEAFLET_CDN": "leaflet_cdn",
            "ICON_CDN": "icon_cdn",
        }
        for key, attr in string_fields.items():
            value = env.get(ENV_PREFIX + key)
            if value is not None:
                setattr(settings, attr, value)

        int_fields = {
            "MAX_ZOOM": "max_zoom",
            "DEFAULT_ZOOM": "default_zoom",
            "PRECISE_ZOOM": "precise_zoom",
        }
        for key, attr in int_fields.items():
            value = env.get(ENV_PREFIX + key)
            if value is not None:
                try:
                    setattr(settings, attr, int(value))
                except ValueError:
                    raise ValueError(f"{ENV_PREFIX}{key} must be an integer: {value!r}")

        center = env.get(ENV_PREFIX + "DEFAULT_CENTER")
        if center is not None:
            settings.default_center = _parse_center(center)

        settings.validate()
        logger.debug(f"Map settings loaded: tiles={settings.tile_url}")
        return settings


def _parse_center(value: str) -> Tuple[float, float]:
    """Parses "lat,lng" into a tuple."""
    parts = value.split(",")
    if len(parts) != 2:
        raise ValueError(f"{ENV_PREFIX}DEFAULT_CENTER must be 'lat,lng': {value!r}")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}DEFAULT_CENTER must be 'lat,lng': {value!r}")
