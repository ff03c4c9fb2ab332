"""
Lost & Found Map Module.

Single-report map used on a lost/found report's detail page: one marker,
colored by whether the pet was lost or found, centered close in.
"""

from typing import Optional

from PySide6.QtWidgets import QWidget

from petmap.core.geo import PRECISE_ZOOM
from petmap.core.marker import MapMarker, MarkerCategory
from petmap.gui.widgets.map.map_viewport import MapViewport
from petmap.services.engine_loader import EngineLoader

LOST_FOUND_HEIGHT = "300px"


class LostFoundMap(MapViewport):
    """MapViewport preset showing one lost or found report."""

    def __init__(
        self,
        report_id: str,
        latitude: float,
        longitude: float,
        title: str,
        is_lost: bool,
        loader: Optional[EngineLoader] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        """
        Initializes the LostFoundMap.

        Args:
            report_id: Id of the report, used as the marker id.
            latitude: Report latitude. Out-of-range coordinates leave the
                map on the default center with no marker.
            longitude: Report longitude.
            title: Marker tooltip.
            is_lost: True for a lost pet (red marker), False for found (green).
            loader: Engine loader. Defaults to the process-wide loader.
            parent: Parent widget.
        """
        marker = MapMarker(
            id=report_id,
            lat=latitude,
            lng=longitude,
            title=title,
            category=MarkerCategory.LOST if is_lost else MarkerCategory.FOUND,
        )
        super().__init__(
            center=(latitude, longitude) if marker.is_valid() else None,
            zoom=PRECISE_ZOOM,
            markers=[marker],
            height=LOST_FOUND_HEIGHT,
            class_name="rounded",
            loader=loader,
            parent=parent,
        )
