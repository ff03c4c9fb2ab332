"""
Map Widget Package.

Provides the interactive map components. MapWebView is not
exported: importing it pulls in Qt WebEngine, which only the engine loader
may do.
"""

from petmap.gui.widgets.map.location_picker import LocationPicker
from petmap.gui.widgets.map.lost_found_map import LostFoundMap
from petmap.gui.widgets.map.map_legend import MapLegend
from petmap.gui.widgets.map.map_viewport import MapViewport, RenderedMarker

__all__ = [
    "LocationPicker",
    "LostFoundMap",
    "MapLegend",
    "MapViewport",
    "RenderedMarker",
]
