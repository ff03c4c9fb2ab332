"""
Protocol Interfaces for Loose Coupling.

Contracts between the map widgets and the pieces they receive from outside:
the engine-created map surface and the geolocation source. Tests supply
their own implementations of both, so nothing here depends on Qt WebEngine
or Qt Positioning.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MapSurface(Protocol):
    """
    Protocol for the widget that actually draws the map.

    Created by the engine handle once the mapping engine is ready. Besides
    these methods, an implementation exposes three Qt signals:

        map_clicked(float, float): Click on the map background (lat, lng).
        marker_clicked(str): Click on a marker (marker id).
        page_ready(): The page finished loading and accepts scripts.
    """

    map_clicked: Any
    marker_clicked: Any
    page_ready: Any

    def load_html(self, html: str) -> None:
        """Replaces the page with the given HTML document."""
        ...

    def run_js(self, script: str) -> None:
        """Runs a script in the page. Scripts before page_ready are queued."""
        ...


@runtime_checkable
class GeolocationSource(Protocol):
    """
    Protocol for a one-shot device position lookup.

    Signals:
        position_found(float, float): Position resolved (lat, lng).
        position_unavailable(str): Denied, timed out or unsupported.
    """

    position_found: Any
    position_unavailable: Any

    def request_position(self) -> None:
        """Starts the lookup. The result arrives through one of the signals."""
        ...
