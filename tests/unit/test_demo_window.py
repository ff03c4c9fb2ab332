"""
Unit tests for the demo window.
"""

from petmap.app.demo_window import MapDemoWindow, sample_markers


def test_sample_markers_cover_categories():
    categories = {m.category.value for m in sample_markers()}
    assert categories == {"lost", "found", "none"}


def test_demo_window_wires_widgets(qtbot, engine_loader, fake_geolocation, monkeypatch):
    """The demo window shows the sample reports and reacts to marker clicks."""
    monkeypatch.setattr(
        "petmap.gui.widgets.map.location_picker.DeviceGeolocation",
        lambda parent: fake_geolocation,
    )
    window = MapDemoWindow(loader=engine_loader)
    qtbot.addWidget(window)
    qtbot.waitUntil(window.map_view.is_ready)

    assert len(window.map_view.rendered_markers()) == 4
    assert fake_geolocation.request_count == 1

    window.map_view.surface.marker_clicked.emit("found-1")
    assert window.status_label.text() == "Selected report: found-1"

    window.close()
