"""
Unit tests for map settings.
"""

import pytest

from petmap.core.config import OSM_ATTRIBUTION, MapSettings


def test_defaults():
    """Defaults point at OpenStreetMap and Leaflet 1.9.4 on unpkg."""
    settings = MapSettings()

    assert "tile.openstreetmap.org" in settings.tile_url
    assert "OpenStreetMap" in settings.tile_attribution
    assert settings.leaflet_js_url == "https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"
    assert (
        settings.leaflet_css_url == "https://unpkg.com/leaflet@1.9.4/dist/leaflet.css"
    )
    assert settings.default_center == (55.7558, 37.6173)
    assert settings.default_zoom == 10
    assert settings.precise_zoom == 15


def test_default_icon_urls():
    """Stock marker images resolve to absolute URLs."""
    urls = MapSettings().default_icon_urls()

    assert set(urls) == {"iconRetinaUrl", "iconUrl", "shadowUrl"}
    assert urls["iconUrl"].endswith("/marker-icon.png")
    assert all(url.startswith("https://") for url in urls.values())


def test_from_env_overrides():
    """PETMAP_* variables override the defaults."""
    settings = MapSettings.from_env(
        {
            "PETMAP_TILE_URL": "https://tiles.example.org/{z}/{x}/{y}.png",
            "PETMAP_DEFAULT_CENTER": "48.85, 2.35",
            "PETMAP_DEFAULT_ZOOM": "12",
            "PETMAP_LEAFLET_VERSION": "1.9.3",
        }
    )

    assert settings.tile_url == "https://tiles.example.org/{z}/{x}/{y}.png"
    assert settings.default_center == (48.85, 2.35)
    assert settings.default_zoom == 12
    assert "leaflet@1.9.3" in settings.leaflet_js_url
    assert settings.tile_attribution == OSM_ATTRIBUTION


def test_from_env_empty_mapping_gives_defaults():
    """An empty environment yields the defaults."""
    assert MapSettings.from_env({}) == MapSettings()


@pytest.mark.parametrize(
    "env",
    [
        {"PETMAP_DEFAULT_ZOOM": "ten"},
        {"PETMAP_DEFAULT_CENTER": "55.0"},
        {"PETMAP_DEFAULT_CENTER": "north,east"},
        {"PETMAP_DEFAULT_CENTER": "95,0"},
        {"PETMAP_TILE_ATTRIBUTION": "  "},
        {"PETMAP_MAX_ZOOM": "-1"},
    ],
)
def test_from_env_rejects_bad_values(env):
    """Unparseable or invalid values raise ValueError."""
    with pytest.raises(ValueError):
        MapSettings.from_env(env)
