"""
Mapping Engine Loader Module.

Acquires the mapping engine (Qt WebEngine hosting Leaflet) once per process,
on demand, and only when an interactive rendering surface exists.

All map widgets share a single EngineLoader (see get_engine_loader()). The
first widget to mount triggers the load; every other widget, mounted at the
same time or later, subscribes to the same EngineReadiness and receives the
same EngineHandle. A failed load is final for the process.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from PySide6.QtCore import QCoreApplication, Qt, QTimer
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication, QWidget

from petmap.core.config import MapSettings
from petmap.core.protocols import MapSurface
from petmap.core.readiness import EngineLoadError, EngineReadiness, EngineState

logger = logging.getLogger(__name__)

NON_INTERACTIVE_PLATFORMS = ("minimal",)


@dataclass(frozen=True)
class EngineHandle:
    """
    Result of a successful engine load.

    Attributes:
        view_factory: Creates a map surface widget for a given parent.
        settings: Settings the engine was loaded with.
        leaflet_js_url: Script URL injected into every map page.
        leaflet_css_url: Stylesheet URL injected into every map page.
        default_icon_urls: Stock marker image URLs patched into Leaflet's
            Icon.Default, since the bundled relative paths do not resolve
            inside a page loaded from a string.
    """

    view_factory: Callable[[Optional[QWidget]], MapSurface]
    settings: MapSettings
    leaflet_js_url: str
    leaflet_css_url: str
    default_icon_urls: Dict[str, str] = field(default_factory=dict)

    def create_surface(self, parent: Optional[QWidget] = None) -> MapSurface:
        """
        Creates a new map surface widget.

        Args:
            parent: Parent widget.

        Returns:
            MapSurface: The surface to render the map into.
        """
        return self.view_factory(parent)


def is_interactive_surface_available() -> bool:
    """
    Checks whether widgets can be shown in this process right now.

    Returns:
        bool: True if a QApplication (not just a QCoreApplication) exists and
        its platform plugin can display windows.
    """
    app = QCoreApplication.instance()
    if app is None or not isinstance(app, QApplication):
        return False
    return QGuiApplication.platformName() not in NON_INTERACTIVE_PLATFORMS


def load_web_engine(settings: MapSettings) -> EngineHandle:
    """
    Imports Qt WebEngine and prepares the Leaflet asset locations.

    Args:
        settings: Map settings (asset URLs).

    Returns:
        EngineHandle: Handle creating MapWebView surfaces.

    Raises:
        EngineLoadError: If Qt WebEngine cannot be imported.
    """
    if not QCoreApplication.testAttribute(Qt.ApplicationAttribute.AA_ShareOpenGLContexts):
        logger.warning(
            "AA_ShareOpenGLContexts was not set before QApplication was created; "
            "Qt WebEngine may fail to render"
        )

    try:
        from petmap.gui.widgets.map.map_web_view import MapWebView
    except ImportError as e:
        raise EngineLoadError(f"Qt WebEngine is not available: {e}") from e

    settings.validate()
    icon_urls = settings.default_icon_urls()
    logger.debug(f"Patched default marker icons: {icon_urls['iconUrl']}")

    return EngineHandle(
        view_factory=MapWebView,
        settings=settings,
        leaflet_js_url=settings.leaflet_js_url,
        leaflet_css_url=settings.leaflet_css_url,
        default_icon_urls=icon_urls,
    )


class EngineLoader:
    """
    Memoized, single-flight loader for the mapping engine.

    Attributes:
        settings: Settings passed to the load function.
        readiness: Shared, write-once readiness state.
        load_count: Number of times the load function actually ran.
    """

    def __init__(
        self,
        load_fn: Optional[Callable[[MapSettings], EngineHandle]] = None,
        capability_check: Optional[Callable[[], bool]] = None,
        settings: Optional[MapSettings] = None,
    ) -> None:
        """
        Initializes the EngineLoader.

        Args:
            load_fn: Performs the acquisition. Defaults to load_web_engine.
            capability_check: Tells whether an interactive surface exists.
                Defaults to is_interactive_surface_available.
            settings: Map settings. Defaults to MapSettings().
        """
        self.settings = settings or MapSettings()
        self._load_fn = load_fn or load_web_engine
        self._capability_check = capability_check or is_interactive_surface_available
        self.readiness = EngineReadiness()
        self.load_count = 0

    def ensure_ready(self) -> EngineReadiness:
        """
        Starts the engine load if it has not started yet.

        Never raises. Without an interactive surface the readiness is
        returned untouched (UNSET) and no load is attempted.

        Returns:
            EngineReadiness: The shared readiness; subscribe to it for the
            result.
        """
        if self.readiness.state is not EngineState.UNSET:
            return self.readiness

        if not self._capability_check():
            logger.debug("No interactive surface available, mapping engine not loaded")
            return self.readiness

        self.readiness.mark_pending()
        logger.info("Loading mapping engine...")
        # Defer to the next event loop turn so callers finish mounting first
        QTimer.singleShot(0, self._run_load)
        return self.readiness

    def _run_load(self) -> None:
        """Runs the load function and settles the readiness."""
        self.load_count += 1
        try:
            handle = self._load_fn(self.settings)
        except Exception as e:
            logger.exception("Mapping engine failed to load")
            error = e if isinstance(e, EngineLoadError) else EngineLoadError(str(e))
            self.readiness.reject(error)
            return

        logger.info("Mapping engine ready")
        self.readiness.resolve(handle)


_shared_loader: Optional[EngineLoader] = None


def get_engine_loader() -> EngineLoader:
    """
    Returns the process-wide EngineLoader, creating it on first use.

    Settings are read from the environment when the loader is created.

    Returns:
        EngineLoader: The shared loader.
    """
    global _shared_loader
    if _shared_loader is None:
        _shared_loader = EngineLoader(settings=MapSettings.from_env())
    return _shared_loader
