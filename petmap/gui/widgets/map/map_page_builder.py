"""
Map Page Builder Module.

Business logic layer turning map state (viewport, markers, selection) into
a Leaflet HTML page and into the incremental script calls that update it.
Stateless: it knows about Leaflet and QWebChannel, not about widgets.
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from petmap.core.config import MapSettings
from petmap.core.geo import LatLng, Viewport
from petmap.core.icons import SELECTED, make_icon
from petmap.core.marker import MapMarker

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <link rel="stylesheet" href="%LEAFLET_CSS%">
    <script src="%LEAFLET_JS%"></script>
    <script src="qrc:///qtwebchannel/qwebchannel.js"></script>
    <style>
        html, body, #map {
            width: 100%;
            height: 100%;
            margin: 0;
            padding: 0;
        }
        .custom-marker {
            background: transparent;
            border: none;
        }
    </style>
</head>
<body>
    <div id="map"></div>
    <script type="text/javascript">
        var petmap = (function () {
            delete L.Icon.Default.prototype._getIconUrl;
            L.Icon.Default.mergeOptions(%ICON_DEFAULTS%);

            var bridge = null;
            var map = L.map("map").setView(%CENTER%, %ZOOM%);
            L.tileLayer(%TILE_URL%, {
                attribution: %ATTRIBUTION%,
                maxZoom: %MAX_ZOOM%
            }).addTo(map);

            var markerLayer = L.layerGroup().addTo(map);
            var selectedMarker = null;

            function makeIcon(options) {
                return options ? L.divIcon(options) : new L.Icon.Default();
            }

            function setMarkers(markers) {
                markerLayer.clearLayers();
                markers.forEach(function (m) {
                    var marker = L.marker([m.lat, m.lng], {
                        icon: makeIcon(m.icon),
                        title: m.title
                    });
                    marker.on("click", function (e) {
                        L.DomEvent.stopPropagation(e);
                        if (bridge) {
                            bridge.markerClicked(m.id);
                        }
                    });
                    if (m.popup) {
                        marker.bindPopup(m.popup);
                    }
                    markerLayer.addLayer(marker);
                });
            }

            function setSelected(selected) {
                if (selectedMarker) {
                    map.removeLayer(selectedMarker);
                    selectedMarker = null;
                }
                if (selected) {
                    selectedMarker = L.marker([selected.lat, selected.lng], {
                        icon: makeIcon(selected.icon),
                        interactive: false
                    }).addTo(map);
                }
            }

            function setView(center, zoom) {
                map.setView(center, zoom);
            }

            map.on("click", function (e) {
                if (bridge) {
                    bridge.mapClicked(e.latlng.lat, e.latlng.lng);
                }
            });

            map.on("tileerror", function (e) {
                if (bridge && e.tile) {
                    bridge.tileError(e.tile.src || "");
                }
            });

            setMarkers(%MARKERS%);
            setSelected(%SELECTED%);

            if (typeof qt !== "undefined") {
                new QWebChannel(qt.webChannelTransport, function (channel) {
                    bridge = channel.objects.bridge;
                    bridge.pageReady();
                });
            }

            return {
                setMarkers: setMarkers,
                setSelected: setSelected,
                setView: setView
            };
        })();
    </script>
</body>
</html>
"""

PLACEHOLDER_PATTERN = re.compile(r"%[A-Z_]+%")


def to_js(value: Any) -> str:
    """
    Serializes a value as a JavaScript literal safe to embed in a script tag.

    Args:
        value: JSON-serializable value.

    Returns:
        str: JavaScript source.
    """
    return json.dumps(value, ensure_ascii=False).replace("</", "<\\/")


class MapPageBuilder:
    """
    Builds Leaflet pages and update scripts from map state.

    This is a stateless utility class in the business logic layer.
    """

    def marker_payload(self, markers: Iterable[MapMarker]) -> List[Dict[str, Any]]:
        """
        Converts markers into the objects the page script expects.

        Markers must already be validated; no filtering happens here.

        Args:
            markers: Markers to render.

        Returns:
            List[Dict[str, Any]]: One dict per marker with its icon options.
        """
        return [
            {
                "id": marker.id,
                "lat": marker.lat,
                "lng": marker.lng,
                "title": marker.title,
                "category": marker.category.value,
                "icon": make_icon(marker.category).to_options(),
                "popup": marker.popup_content or None,
            }
            for marker in markers
        ]

    def selected_payload(self, position: Optional[LatLng]) -> Optional[Dict[str, Any]]:
        """
        Converts the selected position into the page's selection object.

        Args:
            position: Selected coordinate or None.

        Returns:
            Optional[Dict[str, Any]]: Selection object, or None.
        """
        if position is None:
            return None
        return {
            "lat": position.lat,
            "lng": position.lng,
            "icon": make_icon(SELECTED).to_options(),
        }

    def build_html(
        self,
        viewport: Viewport,
        markers: Iterable[MapMarker],
        selected: Optional[LatLng],
        settings: MapSettings,
        leaflet_js_url: Optional[str] = None,
        leaflet_css_url: Optional[str] = None,
        default_icon_urls: Optional[Dict[str, str]] = None,
    ) -> str:
        """
        Builds the complete map page.

        Args:
            viewport: Initial center and zoom.
            markers: Validated markers to render.
            selected: Selected coordinate, or None.
            settings: Tile provider and asset settings.
            leaflet_js_url: Script URL, defaults to the settings value.
            leaflet_css_url: Stylesheet URL, defaults to the settings value.
            default_icon_urls: Stock marker images, defaults to the settings value.

        Returns:
            str: HTML document for the map surface.
        """
        replacements = {
            "%LEAFLET_CSS%": leaflet_css_url or settings.leaflet_css_url,
            "%LEAFLET_JS%": leaflet_js_url or settings.leaflet_js_url,
            "%ICON_DEFAULTS%": to_js(default_icon_urls or settings.default_icon_urls()),
            "%CENTER%": to_js(list(viewport.center)),
            "%ZOOM%": str(int(viewport.zoom)),
            "%TILE_URL%": to_js(settings.tile_url),
            "%ATTRIBUTION%": to_js(settings.tile_attribution),
            "%MAX_ZOOM%": str(int(settings.max_zoom)),
            "%MARKERS%": to_js(self.marker_payload(markers)),
            "%SELECTED%": to_js(self.selected_payload(selected)),
        }

        # Single pass so placeholder-like text inside marker data stays literal
        return PLACEHOLDER_PATTERN.sub(
            lambda match: replacements.get(match.group(0), match.group(0)),
            PAGE_TEMPLATE,
        )

    def set_markers_script(self, markers: Iterable[MapMarker]) -> str:
        """Returns the script replacing every marker on the page."""
        return f"petmap.setMarkers({to_js(self.marker_payload(markers))});"

    def set_selected_script(self, position: Optional[LatLng]) -> str:
        """Returns the script moving or removing the selected marker."""
        return f"petmap.setSelected({to_js(self.selected_payload(position))});"

    def set_view_script(self, viewport: Viewport) -> str:
        """Returns the script recentering the map."""
        return (
            f"petmap.setView({to_js(list(viewport.center))}, {int(viewport.zoom)});"
        )
