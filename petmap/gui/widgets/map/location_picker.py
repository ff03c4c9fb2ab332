"""
Location Picker Module.

Lets a user choose a single coordinate by clicking a map. Wraps a
MapViewport, owns the selected position, and uses a one-shot device
geolocation lookup to choose where the map opens.
"""

import logging
from typing import Callable, Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from petmap.core.config import MapSettings
from petmap.core.geo import CoordinateLike, LatLng, to_latlng
from petmap.core.protocols import GeolocationSource
from petmap.gui.widgets.map.map_viewport import MapViewport
from petmap.services.engine_loader import EngineLoader, get_engine_loader
from petmap.services.geolocation import DeviceGeolocation

logger = logging.getLogger(__name__)

PICKER_HEIGHT = "300px"
PICKER_CLASS_NAME = "rounded"
HINT_TEXT = "Click on the map to choose a location"
CLEAR_TEXT = "Remove marker"

ChangeHandler = Callable[[Optional[LatLng]], None]


class LocationPicker(QWidget):
    """
    Map-based single point selector.

    The selected position lives here; the map only displays it. Every click
    on the map selects the clicked point, and clear() removes it. Each of
    these calls on_change and emits selection_changed exactly once.

    Signals:
        selection_changed: Emitted with a LatLng, or None after clearing.
    """

    selection_changed = Signal(object)

    def __init__(
        self,
        value: Optional[CoordinateLike] = None,
        on_change: Optional[ChangeHandler] = None,
        geolocation: Optional[GeolocationSource] = None,
        loader: Optional[EngineLoader] = None,
        settings: Optional[MapSettings] = None,
        class_name: str = "",
        parent: Optional[QWidget] = None,
    ) -> None:
        """
        Initializes the LocationPicker.

        Args:
            value: Initially selected coordinate. When given, no geolocation
                lookup is made.
            on_change: Called with the new position (or None) on every
                user selection or clear.
            geolocation: Position source. Defaults to DeviceGeolocation.
            loader: Engine loader. Defaults to the process-wide loader.
            settings: Map settings. Defaults to the loader's settings.
            class_name: Style class, exposed as the "class" property for QSS.
            parent: Parent widget.
        """
        super().__init__(parent)

        loader = loader or get_engine_loader()
        self._settings = settings or loader.settings
        self._position: Optional[LatLng] = to_latlng(value)
        self._on_change = on_change
        self.setProperty("class", class_name or "")

        if self._position is not None:
            center, zoom = self._position, self._settings.precise_zoom
        else:
            center, zoom = self._settings.default_center, self._settings.default_zoom

        self._map = MapViewport(
            center=center,
            zoom=zoom,
            selected_position=self._position,
            height=PICKER_HEIGHT,
            class_name=PICKER_CLASS_NAME,
            loader=loader,
            settings=self._settings,
            parent=self,
        )
        self._map.map_clicked.connect(self._on_map_clicked)

        self._setup_ui()
        self._update_selection_ui()

        self._geolocation: Optional[GeolocationSource] = None
        if self._position is None:
            self._request_geolocation(geolocation)

    def _setup_ui(self) -> None:
        """Sets up hint, map, and the coordinate row."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._hint_label = QLabel(HINT_TEXT)
        self._hint_label.setStyleSheet("color: #6B7280;")
        layout.addWidget(self._hint_label)

        layout.addWidget(self._map)

        self._selection_row = QWidget()
        row_layout = QHBoxLayout(self._selection_row)
        row_layout.setContentsMargins(0, 4, 0, 0)

        self._coordinates_label = QLabel()
        self._coordinates_label.setStyleSheet("color: #6B7280;")
        row_layout.addWidget(self._coordinates_label)
        row_layout.addStretch()

        self._clear_button = QPushButton(CLEAR_TEXT)
        self._clear_button.setStyleSheet("color: #DC2626;")
        self._clear_button.clicked.connect(self.clear)
        row_layout.addWidget(self._clear_button)

        layout.addWidget(self._selection_row)

    # --- Geolocation ---

    def _request_geolocation(self, source: Optional[GeolocationSource]) -> None:
        """Asks once for the device position to center the map on."""
        self._geolocation = source or DeviceGeolocation(self)
        self._geolocation.position_found.connect(self._on_position_found)
        self._geolocation.position_unavailable.connect(self._on_position_unavailable)
        self._geolocation.request_position()

    def _on_position_found(self, lat: float, lng: float) -> None:
        """Centers the map on the device position, unless a point was picked."""
        if self._position is not None:
            logger.debug("Device position arrived after a selection, not recentering")
            return
        self._map.set_view(LatLng(lat, lng), self._settings.precise_zoom)

    def _on_position_unavailable(self, reason: str) -> None:
        """Stays on the default center."""
        logger.info(f"Using default map center, device position unavailable: {reason}")

    # --- Selection ---

    def _on_map_clicked(self, lat: float, lng: float) -> None:
        """Selects the clicked point."""
        self._set_position(LatLng(lat, lng))
        self._notify()

    def clear(self) -> None:
        """Removes the selected point. Does nothing if nothing is selected."""
        if self._position is None:
            return
        self._set_position(None)
        self._notify()

    def set_value(self, value: Optional[CoordinateLike]) -> None:
        """
        Selects a point programmatically without calling on_change.

        A non-empty value also centers the map on it.

        Args:
            value: Coordinate to select, or None to clear.
        """
        self._set_position(to_latlng(value))
        if self._position is not None:
            self._map.set_view(self._position, self._settings.precise_zoom)

    def set_change_handler(self, handler: Optional[ChangeHandler]) -> None:
        """Replaces the on_change callback."""
        self._on_change = handler

    def _set_position(self, position: Optional[LatLng]) -> None:
        self._position = position
        self._map.set_selected_position(position)
        self._update_selection_ui()

    def _notify(self) -> None:
        logger.debug(f"Location selection changed: {self._position}")
        self.selection_changed.emit(self._position)
        if self._on_change is not None:
            self._on_change(self._position)

    def _update_selection_ui(self) -> None:
        """Shows the coordinate row only while a point is selected."""
        if self._position is None:
            self._coordinates_label.clear()
            self._selection_row.setVisible(False)
        else:
            self._coordinates_label.setText(self._position.format(6))
            self._selection_row.setVisible(True)

    # --- Accessors ---

    def position(self) -> Optional[LatLng]:
        """The selected coordinate, or None."""
        return self._position

    @property
    def map_view(self) -> MapViewport:
        """The embedded MapViewport."""
        return self._map

    @property
    def geolocation(self) -> Optional[GeolocationSource]:
        """The geolocation source, or None if an initial value was given."""
        return self._geolocation

    @property
    def clear_button(self) -> QPushButton:
        """The "Remove marker" button."""
        return self._clear_button

    @property
    def coordinates_label(self) -> QLabel:
        """Label showing the selected coordinate."""
        return self._coordinates_label
