"""
Map Demo Window Module.

Window demonstrating the map widgets:
- A MapViewport with sample lost and found reports and a legend
- A LocationPicker reporting the chosen coordinate
"""

import logging
from typing import List, Optional

from PySide6.QtWidgets import QLabel, QMainWindow, QTabWidget, QVBoxLayout, QWidget

from petmap.core.geo import LatLng
from petmap.core.marker import MapMarker, MarkerCategory
from petmap.gui.widgets.map import LocationPicker, MapLegend, MapViewport
from petmap.services.engine_loader import EngineLoader

logger = logging.getLogger(__name__)


def sample_markers() -> List[MapMarker]:
    """Returns a handful of reports around Moscow."""
    return [
        MapMarker(
            id="lost-1",
            lat=55.7512,
            lng=37.6184,
            title="Lost: ginger cat",
            category=MarkerCategory.LOST,
            popup_content="<b>Ginger cat</b><br>Last seen near the Kremlin",
        ),
        MapMarker(
            id="found-1",
            lat=55.7601,
            lng=37.6455,
            title="Found: beagle",
            category=MarkerCategory.FOUND,
            popup_content="<b>Beagle</b><br>Red collar, very friendly",
        ),
        MapMarker(
            id="lost-2",
            lat=55.7309,
            lng=37.5900,
            title="Lost: grey parrot",
            category=MarkerCategory.LOST,
        ),
        MapMarker(
            id="shelter-1",
            lat=55.7800,
            lng=37.6000,
            title="City shelter",
        ),
    ]


class MapDemoWindow(QMainWindow):
    """Demo window showing MapViewport and LocationPicker."""

    def __init__(self, loader: Optional[EngineLoader] = None) -> None:
        """
        Initializes the demo window.

        Args:
            loader: Engine loader. Defaults to the process-wide loader.
        """
        super().__init__()
        self.setWindowTitle("PetMap Widget Demo")
        self.resize(1000, 700)

        tabs = QTabWidget()
        self.setCentralWidget(tabs)

        # Reports tab
        reports = QWidget()
        reports_layout = QVBoxLayout(reports)
        self.map_view = MapViewport(
            zoom=12,
            markers=sample_markers(),
            height="500px",
            on_marker_click=self._on_marker_clicked,
            loader=loader,
        )
        reports_layout.addWidget(self.map_view)
        reports_layout.addWidget(MapLegend())
        self.status_label = QLabel("Click a marker to open its report")
        reports_layout.addWidget(self.status_label)
        reports_layout.addStretch()
        tabs.addTab(reports, "Reports")

        # Picker tab
        picker_page = QWidget()
        picker_layout = QVBoxLayout(picker_page)
        self.picker = LocationPicker(on_change=self._on_location_changed, loader=loader)
        picker_layout.addWidget(self.picker)
        picker_layout.addStretch()
        tabs.addTab(picker_page, "Pick a location")

    def _on_marker_clicked(self, marker_id: str) -> None:
        """Shows which report was clicked."""
        logger.info(f"Report selected: {marker_id}")
        self.status_label.setText(f"Selected report: {marker_id}")

    def _on_location_changed(self, position: Optional[LatLng]) -> None:
        """Logs the picked location."""
        if position is None:
            logger.info("Location cleared")
        else:
            logger.info(f"Location picked: {position.format()}")

    def closeEvent(self, event) -> None:
        """Detaches the map widgets before the window goes away."""
        self.map_view.dispose()
        self.picker.map_view.dispose()
        super().closeEvent(event)
