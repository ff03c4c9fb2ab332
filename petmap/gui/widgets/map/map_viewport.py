"""
Map Viewport Module.

Public map widget: a Leaflet map with a tile layer, category-styled markers
and an optional selected point, shown once the mapping engine is ready.

Until then, and forever if the engine fails to load, the widget shows a
placeholder of the requested height. Map and marker clicks reach callers
as Qt signals and optional callbacks carrying plain values.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Union

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QVBoxLayout, QWidget

from petmap.core.config import MapSettings
from petmap.core.geo import CoordinateLike, LatLng, Viewport, to_latlng
from petmap.core.icons import SELECTED, IconSpec, make_icon
from petmap.core.marker import MapMarker, MarkerCategory, filter_valid_markers
from petmap.core.protocols import MapSurface
from petmap.core.readiness import EngineReadiness, EngineState, Subscription
from petmap.gui.widgets.map.map_page_builder import MapPageBuilder
from petmap.gui.widgets.map.map_placeholder import MapPlaceholder
from petmap.services.engine_loader import EngineHandle, EngineLoader, get_engine_loader

logger = logging.getLogger(__name__)

DEFAULT_HEIGHT = "400px"
DEFAULT_MIN_HEIGHT = 400

MapClickHandler = Callable[[float, float], None]
MarkerClickHandler = Callable[[str], None]

_PIXEL_HEIGHT = re.compile(r"(\d+(?:\.\d+)?)\s*(px)?")


def parse_css_height(height: Union[str, int, None]) -> Optional[int]:
    """
    Converts a CSS height into pixels where that is possible.

    Args:
        height: "300px", "300", 300, or any other CSS length.

    Returns:
        Optional[int]: Pixel height, or None for relative units such as
        "50vh" or "100%".
    """
    if height is None:
        return None
    if isinstance(height, (int, float)):
        return max(0, int(height))

    match = _PIXEL_HEIGHT.fullmatch(str(height).strip().lower())
    if not match:
        return None
    return int(round(float(match.group(1))))


@dataclass(frozen=True)
class RenderedMarker:
    """
    A marker as currently drawn on the map surface.

    Attributes:
        id: Marker id ("selected" for the selection marker).
        position: Coordinate.
        title: Tooltip text.
        category: Category key the icon was made for.
        icon: Icon drawn for the marker.
        popup_content: Popup HTML, or None if no popup is bound.
    """

    id: str
    position: LatLng
    title: str
    category: str
    icon: IconSpec
    popup_content: Optional[str] = None

    @classmethod
    def from_marker(cls, marker: MapMarker) -> "RenderedMarker":
        """Creates the rendered form of a caller marker."""
        return cls(
            id=marker.id,
            position=marker.position,
            title=marker.title,
            category=marker.category.value,
            icon=make_icon(marker.category),
            popup_content=marker.popup_content or None,
        )


class MapViewport(QWidget):
    """
    Interactive map surface with deferred engine initialization.

    Signals:
        map_clicked: Emitted with (lat, lng) for clicks on the map background.
        marker_clicked: Emitted with the marker id for clicks on a marker.
        map_ready: Emitted once the map surface replaced the placeholder.
        map_unavailable: Emitted if the engine failed to load.
    """

    map_clicked = Signal(float, float)
    marker_clicked = Signal(str)
    map_ready = Signal()
    map_unavailable = Signal()

    def __init__(
        self,
        center: Optional[CoordinateLike] = None,
        zoom: Optional[int] = None,
        markers: Optional[Iterable[MapMarker]] = None,
        on_map_click: Optional[MapClickHandler] = None,
        on_marker_click: Optional[MarkerClickHandler] = None,
        selected_position: Optional[CoordinateLike] = None,
        height: Union[str, int] = DEFAULT_HEIGHT,
        class_name: str = "",
        loader: Optional[EngineLoader] = None,
        settings: Optional[MapSettings] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        """
        Initializes the MapViewport and requests the mapping engine.

        Args:
            center: Initial center. Defaults to the configured default center.
            zoom: Initial zoom. Defaults to the configured default zoom.
            markers: Markers to show. Out-of-range markers are skipped.
            on_map_click: Called with (lat, lng) for map background clicks.
            on_marker_click: Called with the marker id for marker clicks.
            selected_position: Coordinate shown with the "selected" icon.
            height: CSS height of the map area.
            class_name: Style class, exposed as the "class" property for QSS.
            loader: Engine loader. Defaults to the process-wide loader.
            settings: Map settings. Defaults to the loader's settings.
            parent: Parent widget.
        """
        super().__init__(parent)

        self._loader = loader or get_engine_loader()
        self._settings = settings or self._loader.settings
        self._builder = MapPageBuilder()

        self._on_map_click = on_map_click
        self._on_marker_click = on_marker_click

        initial_center = to_latlng(center) or LatLng(*self._settings.default_center)
        initial_zoom = self._settings.default_zoom if zoom is None else zoom
        self._viewport = Viewport(initial_center, initial_zoom)
        self._markers: List[MapMarker] = filter_valid_markers(markers or [])
        self._selected: Optional[LatLng] = to_latlng(selected_position)

        self._handle: Optional[EngineHandle] = None
        self._surface: Optional[MapSurface] = None
        self._rendered: List[RenderedMarker] = []
        self._rendered_selected: Optional[RenderedMarker] = None
        self._subscription: Optional[Subscription] = None
        self._disposed = False

        self._setup_ui()
        self.set_height(height)
        self.set_class_name(class_name)
        self._attach_engine()

    def _setup_ui(self) -> None:
        """Sets up the layout with the placeholder in place of the map."""
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(0)

        self._placeholder = MapPlaceholder(parent=self)
        self._layout.addWidget(self._placeholder)

    # --- Engine lifecycle ---

    def _attach_engine(self) -> None:
        """Requests the engine and subscribes to its readiness."""
        readiness = self._loader.ensure_ready()
        if readiness.state is EngineState.UNSET:
            logger.debug("Mapping engine unavailable in this context, showing placeholder")
            return

        subscription = readiness.subscribe(self._on_engine_settled)
        if subscription.active:
            self._subscription = subscription
            self.destroyed.connect(lambda *args: subscription.cancel())

    def _on_engine_settled(self, readiness: EngineReadiness) -> None:
        """Swaps the placeholder for the map, or marks the map unavailable."""
        if self._disposed:
            return

        if not readiness.is_ready:
            logger.warning(f"Map unavailable: {readiness.error}")
            self._show_unavailable()
            return

        try:
            self._mount_surface(readiness.handle)
        except Exception:
            logger.exception("Failed to mount map surface")
            self._unmount_surface()
            self._show_unavailable()
            return

        logger.debug(f"Map mounted with {len(self._rendered)} marker(s)")
        self.map_ready.emit()

    def _mount_surface(self, handle: EngineHandle) -> None:
        """Creates the map surface and renders the current state into it."""
        surface = handle.create_surface(self)
        self._handle = handle
        self._surface = surface
        surface.map_clicked.connect(self._handle_map_click)
        surface.marker_clicked.connect(self._handle_marker_click)

        self._layout.removeWidget(self._placeholder)
        self._placeholder.hide()
        self._layout.addWidget(surface)

        self._render_page()

    def _unmount_surface(self) -> None:
        """Drops a partially mounted surface and puts the placeholder back."""
        surface, self._surface = self._surface, None
        self._handle = None
        self._rendered = []
        self._rendered_selected = None

        if surface is not None:
            self._layout.removeWidget(surface)
            surface.hide()
            surface.deleteLater()

        if self._layout.indexOf(self._placeholder) == -1:
            self._layout.addWidget(self._placeholder)
        self._placeholder.show()

    def _show_unavailable(self) -> None:
        self._placeholder.show_unavailable()
        self.map_unavailable.emit()

    def _render_page(self) -> None:
        """Loads a full page reflecting viewport, markers and selection."""
        html = self._builder.build_html(
            self._viewport,
            self._markers,
            self._selected,
            self._settings,
            leaflet_js_url=self._handle.leaflet_js_url,
            leaflet_css_url=self._handle.leaflet_css_url,
            default_icon_urls=self._handle.default_icon_urls,
        )
        self._surface.load_html(html)
        self._sync_rendered_markers()
        self._sync_rendered_selection()

    def _sync_rendered_markers(self) -> None:
        self._rendered = [RenderedMarker.from_marker(m) for m in self._markers]

    def _sync_rendered_selection(self) -> None:
        if self._selected is None:
            self._rendered_selected = None
        else:
            self._rendered_selected = RenderedMarker(
                id=SELECTED,
                position=self._selected,
                title="",
                category=SELECTED,
                icon=make_icon(SELECTED),
            )

    def dispose(self) -> None:
        """
        Detaches the widget from the engine.

        A load still in flight will no longer touch this widget. Other
        widgets waiting on the same load are unaffected.
        """
        self._disposed = True
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        self._on_map_click = None
        self._on_marker_click = None

    # --- Event handling ---

    def _handle_map_click(self, lat: float, lng: float) -> None:
        """Forwards a background click from the surface."""
        if self._surface is None or self._disposed:
            return
        logger.debug(f"Map clicked at ({lat:.6f}, {lng:.6f})")
        self.map_clicked.emit(lat, lng)
        if self._on_map_click is not None:
            self._on_map_click(lat, lng)

    def _handle_marker_click(self, marker_id: str) -> None:
        """Forwards a marker click from the surface."""
        if self._surface is None or self._disposed:
            return
        if marker_id not in {m.id for m in self._rendered}:
            logger.debug(f"Ignoring click on stale marker {marker_id}")
            return
        logger.debug(f"Marker clicked: {marker_id}")
        self.marker_clicked.emit(marker_id)
        if self._on_marker_click is not None:
            self._on_marker_click(marker_id)

    def set_map_click_handler(self, handler: Optional[MapClickHandler]) -> None:
        """Replaces the map click callback."""
        self._on_map_click = handler

    def set_marker_click_handler(self, handler: Optional[MarkerClickHandler]) -> None:
        """Replaces the marker click callback."""
        self._on_marker_click = handler

    # --- State ---

    def set_markers(self, markers: Iterable[MapMarker]) -> None:
        """
        Replaces every marker on the map.

        Markers outside the coordinate range are skipped. The view is not
        recentered.

        Args:
            markers: The new marker set.
        """
        self._markers = filter_valid_markers(markers)
        if self._surface is None:
            return
        self._surface.run_js(self._builder.set_markers_script(self._markers))
        self._sync_rendered_markers()

    def set_view(self, center: CoordinateLike, zoom: Optional[int] = None) -> None:
        """
        Recenters the map.

        Args:
            center: New center.
            zoom: New zoom, or None to keep the current one.
        """
        self._viewport = Viewport(
            to_latlng(center), self._viewport.zoom if zoom is None else zoom
        )
        if self._surface is not None:
            self._surface.run_js(self._builder.set_view_script(self._viewport))

    def set_selected_position(self, position: Optional[CoordinateLike]) -> None:
        """
        Shows, moves or removes the selected-point marker.

        Args:
            position: Coordinate to mark, or None to remove the marker.
        """
        self._selected = to_latlng(position)
        if self._surface is None:
            return
        self._surface.run_js(self._builder.set_selected_script(self._selected))
        self._sync_rendered_selection()

    def set_height(self, height: Union[str, int]) -> None:
        """
        Applies a CSS height to the map area.

        Pixel heights fix the widget height; relative units leave it
        flexible with a default minimum.

        Args:
            height: CSS height.
        """
        pixels = parse_css_height(height)
        if pixels is None:
            self.setMinimumHeight(DEFAULT_MIN_HEIGHT)
            self.setMaximumHeight(16777215)  # QWIDGETSIZE_MAX
        else:
            self.setFixedHeight(pixels)
        self._height = height

    def set_class_name(self, class_name: str) -> None:
        """Sets the "class" property used by stylesheet selectors."""
        self.setProperty("class", class_name or "")
        self._class_name = class_name or ""

    # --- Accessors ---

    def is_ready(self) -> bool:
        """True once the map surface replaced the placeholder."""
        return self._surface is not None

    @property
    def surface(self) -> Optional[MapSurface]:
        """The map surface, or None while the placeholder is shown."""
        return self._surface

    @property
    def placeholder(self) -> MapPlaceholder:
        """The placeholder widget."""
        return self._placeholder

    @property
    def settings(self) -> MapSettings:
        """Settings the map renders with."""
        return self._settings

    def viewport(self) -> Viewport:
        """Current center and zoom."""
        return self._viewport

    def center(self) -> LatLng:
        """Current center."""
        return self._viewport.center

    def zoom(self) -> int:
        """Current zoom."""
        return self._viewport.zoom

    def height_css(self) -> Union[str, int]:
        """The CSS height this widget was given."""
        return self._height

    def class_name(self) -> str:
        """The style class this widget was given."""
        return self._class_name

    def markers(self) -> List[MapMarker]:
        """Accepted markers (valid coordinates only)."""
        return list(self._markers)

    def rendered_markers(self) -> List[RenderedMarker]:
        """Markers currently drawn on the surface, excluding the selection."""
        return list(self._rendered)

    def selected_position(self) -> Optional[LatLng]:
        """The selected coordinate, or None."""
        return self._selected

    def selected_marker(self) -> Optional[RenderedMarker]:
        """The selection marker currently drawn, or None."""
        return self._rendered_selected

    def category_of(self, marker_id: str) -> Optional[MarkerCategory]:
        """
        Returns the category of a rendered marker.

        Args:
            marker_id: Marker id.

        Returns:
            Optional[MarkerCategory]: Category, or None if not rendered.
        """
        for marker in self._rendered:
            if marker.id == marker_id:
                return MarkerCategory.parse(marker.category)
        return None
