"""
Unit tests for LostFoundMap and MapLegend.
"""

from petmap.core.geo import LatLng
from petmap.core.marker import MarkerCategory
from petmap.gui.widgets.map import LostFoundMap, MapLegend
from petmap.gui.widgets.map.map_legend import DEFAULT_SWATCH_COLOR


def test_lost_report(qtbot, engine_loader):
    """A lost report shows one red marker centered close in."""
    view = LostFoundMap("r1", 55.75, 37.61, "Lost: Rex", True, loader=engine_loader)
    qtbot.addWidget(view)
    qtbot.waitUntil(view.is_ready)

    assert [m.id for m in view.rendered_markers()] == ["r1"]
    assert view.category_of("r1") is MarkerCategory.LOST
    assert view.center() == LatLng(55.75, 37.61)
    assert view.zoom() == 15
    assert view.height_css() == "300px"
    assert view.class_name() == "rounded"


def test_found_report(qtbot, engine_loader):
    """A found report uses the found category."""
    view = LostFoundMap("r2", 10.0, 20.0, "Found: Tom", False, loader=engine_loader)
    qtbot.addWidget(view)
    qtbot.waitUntil(view.is_ready)

    assert view.category_of("r2") is MarkerCategory.FOUND


def test_invalid_report_coordinates(qtbot, engine_loader, map_settings):
    """Out-of-range coordinates give an empty map on the default center."""
    view = LostFoundMap("r3", 95.0, 20.0, "Broken", True, loader=engine_loader)
    qtbot.addWidget(view)
    qtbot.waitUntil(view.is_ready)

    assert view.rendered_markers() == []
    assert view.center() == LatLng(*map_settings.default_center)


def test_legend_colors(qtbot):
    """The legend uses the marker icon colors."""
    legend = MapLegend()
    qtbot.addWidget(legend)

    assert legend.swatch_color(MarkerCategory.LOST) == "#EF4444"
    assert legend.swatch_color(MarkerCategory.FOUND) == "#22C55E"
    assert legend.swatch_color(MarkerCategory.NONE) is None


def test_legend_stock_marker_entry(qtbot):
    """Entries without a glyph color fall back to grey."""
    legend = MapLegend(entries=[(MarkerCategory.NONE, "Other")])
    qtbot.addWidget(legend)

    assert legend.swatch_color(MarkerCategory.NONE) == DEFAULT_SWATCH_COLOR
