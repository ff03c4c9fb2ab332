import os
import pathlib
import sys
from dataclasses import replace

import pytest

# Ensure project root is in sys.path
repo_root = pathlib.Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

# Run Qt headless unless a platform is explicitly chosen
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QObject, Signal  # noqa: E402
from PySide6.QtWidgets import QApplication, QWidget  # noqa: E402

from petmap.core.config import MapSettings  # noqa: E402
from petmap.services.engine_loader import EngineHandle, EngineLoader  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """
    Ensure QApplication is instantiated only once.
    """
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


class FakeMapSurface(QWidget):
    """
    Stand-in for MapWebView that records pages and scripts instead of
    running Qt WebEngine.
    """

    map_clicked = Signal(float, float)
    marker_clicked = Signal(str)
    page_ready = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.pages = []
        self.scripts = []

    def load_html(self, html):
        self.pages.append(html)
        self.scripts.clear()

    def run_js(self, script):
        self.scripts.append(script)


class FakeGeolocation(QObject):
    """Geolocation source resolved by hand from tests."""

    position_found = Signal(float, float)
    position_unavailable = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.request_count = 0

    def request_position(self):
        self.request_count += 1

    def succeed(self, lat, lng):
        self.position_found.emit(lat, lng)

    def fail(self, reason="denied"):
        self.position_unavailable.emit(reason)


def make_fake_handle(settings):
    """Builds an EngineHandle whose surfaces are FakeMapSurface widgets."""
    return EngineHandle(
        view_factory=FakeMapSurface,
        settings=settings,
        leaflet_js_url=settings.leaflet_js_url,
        leaflet_css_url=settings.leaflet_css_url,
        default_icon_urls=settings.default_icon_urls(),
    )


@pytest.fixture
def map_settings():
    """Default map settings."""
    return MapSettings()


@pytest.fixture
def engine_loader(qapp, map_settings):
    """
    Provides an EngineLoader that always considers the context interactive
    and loads fake surfaces. load_calls counts actual loads.
    """
    calls = []

    def load(settings):
        calls.append(settings)
        return make_fake_handle(settings)

    loader = EngineLoader(
        load_fn=load, capability_check=lambda: True, settings=map_settings
    )
    loader.load_calls = calls
    return loader


@pytest.fixture
def failing_engine_loader(qapp, map_settings):
    """Provides an EngineLoader whose load always fails."""

    def load(settings):
        raise RuntimeError("engine assets unreachable")

    return EngineLoader(
        load_fn=load, capability_check=lambda: True, settings=map_settings
    )


@pytest.fixture
def headless_engine_loader(qapp, map_settings):
    """Provides an EngineLoader that reports no interactive surface."""
    calls = []

    def load(settings):
        calls.append(settings)
        return make_fake_handle(settings)

    loader = EngineLoader(
        load_fn=load, capability_check=lambda: False, settings=map_settings
    )
    loader.load_calls = calls
    return loader


@pytest.fixture
def fake_geolocation(qapp):
    """Provides a geolocation source resolved manually by the test."""
    return FakeGeolocation()


@pytest.fixture
def fake_surface(qapp):
    """Provides a standalone fake map surface."""
    return FakeMapSurface()


@pytest.fixture
def make_engine_loader(qapp, map_settings):
    """Builds interactive EngineLoaders whose handle uses a given surface factory."""

    def _make(view_factory):
        def load(settings):
            return replace(make_fake_handle(settings), view_factory=view_factory)

        return EngineLoader(
            load_fn=load, capability_check=lambda: True, settings=map_settings
        )

    return _make
