"""
Unit tests for the EngineLoader.
"""

import sys

import pytest

from petmap.core.config import MapSettings
from petmap.core.readiness import EngineLoadError, EngineState
from petmap.services.engine_loader import (
    EngineLoader,
    is_interactive_surface_available,
    load_web_engine,
)


def test_concurrent_requests_share_one_load(qtbot, engine_loader):
    """Two callers before the load completes trigger a single load."""
    first = engine_loader.ensure_ready()
    second = engine_loader.ensure_ready()

    assert first is second
    assert first.state is EngineState.PENDING

    qtbot.waitUntil(lambda: first.is_settled)

    assert first.state is EngineState.READY
    assert len(engine_loader.load_calls) == 1
    assert engine_loader.load_count == 1


def test_later_request_reuses_handle(qtbot, engine_loader):
    """A caller arriving after the load gets the same handle without reloading."""
    readiness = engine_loader.ensure_ready()
    qtbot.waitUntil(lambda: readiness.is_ready)
    handle = readiness.handle

    again = engine_loader.ensure_ready()

    assert again.handle is handle
    assert len(engine_loader.load_calls) == 1


def test_load_is_deferred(engine_loader):
    """ensure_ready returns before the load function runs."""
    engine_loader.ensure_ready()
    assert engine_loader.load_calls == []


def test_headless_context_skips_load(qtbot, headless_engine_loader):
    """Without an interactive surface nothing is loaded and state stays UNSET."""
    readiness = headless_engine_loader.ensure_ready()
    qtbot.wait(10)

    assert readiness.state is EngineState.UNSET
    assert headless_engine_loader.load_calls == []


def test_failure_is_final(qtbot, failing_engine_loader):
    """A failed load settles FAILED with EngineLoadError and is not retried."""
    readiness = failing_engine_loader.ensure_ready()
    qtbot.waitUntil(lambda: readiness.is_settled)

    assert readiness.state is EngineState.FAILED
    assert isinstance(readiness.error, EngineLoadError)
    assert "engine assets unreachable" in str(readiness.error)

    failing_engine_loader.ensure_ready()
    qtbot.wait(10)
    assert failing_engine_loader.load_count == 1


def test_engine_load_error_passes_through(qtbot, qapp):
    """An EngineLoadError raised by the load function is stored as-is."""
    error = EngineLoadError("no webengine")

    def load(settings):
        raise error

    loader = EngineLoader(load_fn=load, capability_check=lambda: True)
    readiness = loader.ensure_ready()
    qtbot.waitUntil(lambda: readiness.is_settled)

    assert readiness.error is error


def test_interactive_surface_with_qapplication(qapp):
    """A QApplication on a displayable platform counts as interactive."""
    expected = qapp.platformName() != "minimal"
    assert is_interactive_surface_available() is expected


def test_load_web_engine_without_webengine(qapp, monkeypatch):
    """A missing Qt WebEngine surfaces as EngineLoadError."""
    monkeypatch.setitem(sys.modules, "petmap.gui.widgets.map.map_web_view", None)

    with pytest.raises(EngineLoadError):
        load_web_engine(MapSettings())
