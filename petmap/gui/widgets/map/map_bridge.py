"""
Map Bridge Module.

Adapter between Leaflet events in the page and Python. Registered on the
QWebChannel as "bridge"; the page calls its slots, and it re-emits plain
Qt signals so nothing outside this module sees engine event objects.
"""

import logging

from PySide6.QtCore import QObject, Signal, Slot

logger = logging.getLogger(__name__)


class MapBridge(QObject):
    """Bridge for communication between the Leaflet page and Python."""

    map_clicked = Signal(float, float)  # (lat, lng)
    marker_clicked = Signal(str)  # marker_id
    page_ready = Signal()
    tile_failed = Signal(str)  # tile URL

    @Slot(float, float)
    def mapClicked(self, lat: float, lng: float) -> None:
        """Called from JavaScript when the map background is clicked."""
        self.map_clicked.emit(lat, lng)

    @Slot(str)
    def markerClicked(self, marker_id: str) -> None:
        """Called from JavaScript when a marker is clicked."""
        self.marker_clicked.emit(str(marker_id))

    @Slot()
    def pageReady(self) -> None:
        """Called from JavaScript once the channel is connected."""
        self.page_ready.emit()

    @Slot(str)
    def tileError(self, url: str) -> None:
        """Called from JavaScript when a tile image fails to load."""
        logger.debug(f"Tile failed to load: {url}")
        self.tile_failed.emit(url)
