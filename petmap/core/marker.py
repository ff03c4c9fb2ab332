"""
Map Marker Data Model.

Represents a point of interest shown on a map: a lost or found pet report,
a shelter, or any other geo-tagged record supplied by a caller.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from petmap.core.geo import LatLng, is_valid_coordinate

logger = logging.getLogger(__name__)


class MarkerCategory(str, Enum):
    """Semantic category of a marker. Drives the marker icon."""

    NONE = "none"
    LOST = "lost"
    FOUND = "found"

    @classmethod
    def parse(cls, value: Any) -> "MarkerCategory":
        """
        Converts loose input into a category.

        Args:
            value: A MarkerCategory, its string value, or None.

        Returns:
            MarkerCategory: The matching category, NONE for anything unknown.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.NONE


@dataclass
class MapMarker:
    """
    A marker to render on a map.

    Attributes:
        id: Identifier, unique within one render.
        lat: Latitude in degrees.
        lng: Longitude in degrees.
        title: Label shown as the marker tooltip.
        category: Semantic category (none, lost, found).
        popup_content: Optional HTML fragment shown in a popup on click.
    """

    id: str
    lat: float
    lng: float
    title: str = ""
    category: MarkerCategory = MarkerCategory.NONE
    popup_content: Optional[str] = None

    def __post_init__(self):
        """Normalizes the id and category."""
        self.id = str(self.id)
        self.category = MarkerCategory.parse(self.category)

    @property
    def position(self) -> LatLng:
        """Returns the marker coordinate."""
        return LatLng(self.lat, self.lng)

    def is_valid(self) -> bool:
        """
        Checks the coordinate range invariant.

        Returns:
            bool: True if the marker can be rendered.
        """
        return is_valid_coordinate(self.lat, self.lng)

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the marker to a JSON-friendly dictionary.

        Returns:
            Dict[str, Any]: Dictionary representation of the marker.
        """
        return {
            "id": self.id,
            "lat": self.lat,
            "lng": self.lng,
            "title": self.title,
            "category": self.category.value,
            "popup_content": self.popup_content,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapMarker":
        """
        Creates a MapMarker from a dictionary.

        Accepts the portal's "type" key ("lost"/"found") as an alias of
        "category", and "popupContent" as an alias of "popup_content".

        Args:
            data: Dictionary containing marker data.

        Returns:
            MapMarker: A new MapMarker instance.
        """
        return cls(
            id=data["id"],
            lat=data["lat"],
            lng=data["lng"],
            title=data.get("title", ""),
            category=data.get("category", data.get("type")),
            popup_content=data.get("popup_content", data.get("popupContent")),
        )


def filter_valid_markers(markers: Iterable[MapMarker]) -> List[MapMarker]:
    """
    Drops markers whose coordinates are out of range, and repeated ids.

    Each rejected marker is logged; the remaining markers keep their order.

    Args:
        markers: Markers supplied by a caller.

    Returns:
        List[MapMarker]: Markers that can be rendered.
    """
    valid = []
    seen = set()
    for marker in markers:
        if marker.id in seen:
            logger.warning(f"Skipping marker {marker.id}: duplicate id")
        elif marker.is_valid():
            seen.add(marker.id)
            valid.append(marker)
        else:
            logger.warning(
                f"Skipping marker {marker.id}: coordinate out of range "
                f"({marker.lat}, {marker.lng})"
            )
    return valid
