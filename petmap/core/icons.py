"""
Marker Icon Factory Module.

Synthesizes marker glyphs per semantic category. Icons are described as
data (IconSpec) rather than loaded from image files; the map page turns
each IconSpec into a Leaflet divIcon.

Pure functions only: no Qt, no I/O, no state.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from petmap.core.marker import MarkerCategory

SELECTED = "selected"

ICON_SIZE = (32, 32)
ICON_ANCHOR = (16, 32)  # Tip of the teardrop
POPUP_ANCHOR = (0, -32)
ICON_CLASS_NAME = "custom-marker"

CATEGORY_COLORS = {
    MarkerCategory.LOST.value: "#EF4444",  # Red
    MarkerCategory.FOUND.value: "#22C55E",  # Green
    SELECTED: "#3B82F6",  # Blue
}

_TEARDROP_STYLE = (
    "background-color: {color}; "
    "width: {width}px; height: {height}px; "
    "border-radius: 50% 50% 50% 0; "
    "transform: rotate(-45deg); "
    "border: 3px solid white; "
    "box-shadow: 0 2px 4px rgba(0,0,0,0.3);"
)


@dataclass(frozen=True)
class IconSpec:
    """
    Immutable description of a marker icon.

    Attributes:
        key: Category key the icon was made for ("default", "lost", ...).
        kind: "default" for the engine's stock marker, "div" for a
            synthesized HTML glyph.
        color: Fill color of the glyph, None for the stock marker.
        html: Inner HTML of the glyph, None for the stock marker.
        class_name: CSS class applied to the icon container.
        icon_size: Width and height in pixels.
        icon_anchor: Pixel offset of the point that sits on the coordinate.
        popup_anchor: Pixel offset popups open from, relative to the anchor.
    """

    key: str
    kind: str
    color: Optional[str] = None
    html: Optional[str] = None
    class_name: str = ""
    icon_size: Tuple[int, int] = ICON_SIZE
    icon_anchor: Tuple[int, int] = ICON_ANCHOR
    popup_anchor: Tuple[int, int] = POPUP_ANCHOR

    @property
    def is_default(self) -> bool:
        """True if the engine's stock marker image should be used."""
        return self.kind == "default"

    def to_options(self) -> Optional[Dict[str, Any]]:
        """
        Returns the Leaflet divIcon options for this icon.

        Returns:
            Optional[Dict[str, Any]]: Options dict, or None for the stock marker.
        """
        if self.is_default:
            return None
        return {
            "className": self.class_name,
            "html": self.html,
            "iconSize": list(self.icon_size),
            "iconAnchor": list(self.icon_anchor),
            "popupAnchor": list(self.popup_anchor),
        }


def _teardrop(key: str, color: str) -> IconSpec:
    width, height = ICON_SIZE
    style = _TEARDROP_STYLE.format(color=color, width=width, height=height)
    return IconSpec(
        key=key,
        kind="div",
        color=color,
        html=f'<div style="{style}"></div>',
        class_name=ICON_CLASS_NAME,
    )


DEFAULT_ICON = IconSpec(key="default", kind="default")

_ICONS = {key: _teardrop(key, color) for key, color in CATEGORY_COLORS.items()}


def make_icon(category: Union[MarkerCategory, str, None] = None) -> IconSpec:
    """
    Returns the icon for a marker category.

    Args:
        category: A MarkerCategory, "selected", or None. Anything else
            gets the default icon.

    Returns:
        IconSpec: The icon description. The same object is returned for
        the same category.
    """
    if isinstance(category, MarkerCategory):
        key = category.value
    elif isinstance(category, str):
        key = category.strip().lower()
    else:
        key = None
    return _ICONS.get(key, DEFAULT_ICON)
