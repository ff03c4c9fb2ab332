"""
Unit tests for MapPageBuilder.
"""

import json
import re

import pytest

from petmap.core.config import MapSettings
from petmap.core.geo import LatLng, Viewport
from petmap.core.marker import MapMarker, MarkerCategory
from petmap.gui.widgets.map.map_page_builder import (
    PLACEHOLDER_PATTERN,
    MapPageBuilder,
    to_js,
)


@pytest.fixture
def builder():
    return MapPageBuilder()


@pytest.fixture
def markers():
    return [
        MapMarker(id="a", lat=1.0, lng=2.0, title="Lost cat", category="lost"),
        MapMarker(id="b", lat=3.0, lng=4.0, title="Shelter", popup_content="<i>Open</i>"),
    ]


def test_page_contains_assets_and_attribution(builder, markers):
    """The page loads Leaflet, the web channel and credits OpenStreetMap."""
    settings = MapSettings()
    html = builder.build_html(Viewport(), markers, None, settings)

    assert settings.leaflet_js_url in html
    assert settings.leaflet_css_url in html
    assert "qrc:///qtwebchannel/qwebchannel.js" in html
    assert "openstreetmap.org/copyright" in html
    assert "L.Icon.Default.mergeOptions" in html
    assert "marker-icon-2x.png" in html
    assert PLACEHOLDER_PATTERN.search(html) is None


def test_page_uses_viewport(builder):
    """Initial center and zoom are written into the page."""
    html = builder.build_html(Viewport(LatLng(10.0, 20.0), 7), [], None, MapSettings())

    assert "setView([10.0, 20.0], 7)" in html


def test_page_uses_handle_urls(builder):
    """Asset URLs from the engine handle override the settings."""
    html = builder.build_html(
        Viewport(),
        [],
        None,
        MapSettings(),
        leaflet_js_url="https://cdn.example.org/leaflet.js",
        leaflet_css_url="https://cdn.example.org/leaflet.css",
    )

    assert "https://cdn.example.org/leaflet.js" in html
    assert "https://cdn.example.org/leaflet.css" in html


def test_marker_payload(builder, markers):
    """Each marker carries its id, position and icon options."""
    payload = builder.marker_payload(markers)

    assert payload[0]["id"] == "a"
    assert payload[0]["category"] == MarkerCategory.LOST.value
    assert "#EF4444" in payload[0]["icon"]["html"]
    assert payload[1]["icon"] is None
    assert payload[1]["popup"] == "<i>Open</i>"
    assert payload[0]["popup"] is None


def test_selected_payload(builder):
    """The selection is drawn with the blue icon."""
    assert builder.selected_payload(None) is None

    payload = builder.selected_payload(LatLng(5.0, 6.0))
    assert payload["lat"] == 5.0
    assert "#3B82F6" in payload["icon"]["html"]


def test_marker_text_is_escaped(builder):
    """Marker text cannot close the script tag or inject placeholders."""
    marker = MapMarker(id="x", lat=0.0, lng=0.0, title="</script><b>%ZOOM%</b>")
    html = builder.build_html(Viewport(), [marker], None, MapSettings())

    assert "</script><b>" not in html
    assert "%ZOOM%" in html


def test_to_js_escapes_closing_tags():
    """to_js output stays valid JSON with closing tags escaped."""
    text = to_js({"html": "</div>"})

    assert "</" not in text
    assert json.loads(text) == {"html": "</div>"}


def test_update_scripts(builder, markers):
    """Update scripts call the page's petmap API."""
    assert builder.set_markers_script([]) == "petmap.setMarkers([]);"
    assert builder.set_markers_script(markers).startswith("petmap.setMarkers([{")
    assert builder.set_selected_script(None) == "petmap.setSelected(null);"
    assert (
        builder.set_view_script(Viewport(LatLng(1.0, 2.0), 3))
        == "petmap.setView([1.0, 2.0], 3);"
    )


def test_marker_click_does_not_reach_map(builder, markers):
    """Marker clicks stop propagation before notifying the bridge."""
    html = builder.build_html(Viewport(), markers, None, MapSettings())

    assert re.search(
        r'marker\.on\("click", function \(e\) \{\s*'
        r"L\.DomEvent\.stopPropagation\(e\);\s*"
        r"if \(bridge\) \{\s*bridge\.markerClicked\(m\.id\);",
        html,
    )
    assert re.search(
        r'map\.on\("click", function \(e\) \{\s*'
        r"if \(bridge\) \{\s*bridge\.mapClicked\(e\.latlng\.lat, e\.latlng\.lng\);",
        html,
    )


def test_selected_marker_is_not_clickable(builder):
    """The selection marker never produces marker clicks."""
    html = builder.build_html(Viewport(), [], LatLng(1.0, 2.0), MapSettings())

    assert "interactive: false" in html
