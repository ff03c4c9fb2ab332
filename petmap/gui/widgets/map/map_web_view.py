"""
Map Web View Module.

Private internal component encapsulating QWebEngineView for map display.
Importing this module imports Qt WebEngine, so only the engine loader
does it, and only once an interactive surface is available.
"""

import logging
from typing import List, Optional

from PySide6.QtCore import Signal
from PySide6.QtWebChannel import QWebChannel
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QVBoxLayout, QWidget

from petmap.gui.widgets.map.map_bridge import MapBridge

logger = logging.getLogger(__name__)


class MapWebView(QWidget):
    """
    Internal widget hosting the Leaflet page.

    Isolates browser-specific logic from MapViewport. Scripts run before the
    page has connected its web channel are queued and flushed on page_ready.

    Signals:
        map_clicked: Map background clicked (lat, lng).
        marker_clicked: Marker clicked (marker id).
        page_ready: Page loaded and bridge connected.
    """

    map_clicked = Signal(float, float)
    marker_clicked = Signal(str)
    page_ready = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        """
        Initializes the MapWebView.

        Args:
            parent: Parent widget.
        """
        super().__init__(parent)
        self._bridge = MapBridge(self)
        self._bridge.map_clicked.connect(self.map_clicked.emit)
        self._bridge.marker_clicked.connect(self.marker_clicked.emit)
        self._bridge.page_ready.connect(self._on_page_ready)

        self._is_page_ready = False
        self._pending_scripts: List[str] = []
        self._setup_ui()

    def _setup_ui(self) -> None:
        """Sets up the web view UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._web_view = QWebEngineView()

        self._channel = QWebChannel(self)
        self._channel.registerObject("bridge", self._bridge)
        self._web_view.page().setWebChannel(self._channel)

        layout.addWidget(self._web_view)

    @property
    def bridge(self) -> MapBridge:
        """The bridge registered on the web channel."""
        return self._bridge

    def load_html(self, html: str) -> None:
        """
        Loads a map page, discarding scripts queued for the previous one.

        Args:
            html: HTML document to display.
        """
        self._is_page_ready = False
        self._pending_scripts.clear()
        self._web_view.setHtml(html)

    def run_js(self, script: str) -> None:
        """
        Runs a script in the page, or queues it until the page is ready.

        Args:
            script: JavaScript source.
        """
        if not self._is_page_ready:
            self._pending_scripts.append(script)
            return
        self._web_view.page().runJavaScript(script)

    def _on_page_ready(self) -> None:
        """Flushes queued scripts once the page reports in."""
        self._is_page_ready = True
        scripts, self._pending_scripts = self._pending_scripts, []
        for script in scripts:
            self._web_view.page().runJavaScript(script)
        logger.debug(f"Map page ready, flushed {len(scripts)} script(s)")
        self.page_ready.emit()
