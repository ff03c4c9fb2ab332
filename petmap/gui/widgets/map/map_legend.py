"""
Map Legend Module.

Row of colored swatches explaining marker categories, shown under a map
of lost and found reports.
"""

from typing import Dict, Optional, Sequence, Tuple

from PySide6.QtWidgets import QHBoxLayout, QLabel, QWidget

from petmap.core.icons import make_icon
from petmap.core.marker import MarkerCategory

DEFAULT_ENTRIES = (
    (MarkerCategory.LOST, "Lost"),
    (MarkerCategory.FOUND, "Found"),
)

SWATCH_SIZE = 16
DEFAULT_SWATCH_COLOR = "#9CA3AF"  # Stock marker has no fill color


class MapLegend(QWidget):
    """Legend listing marker categories with their icon colors."""

    def __init__(
        self,
        entries: Sequence[Tuple[MarkerCategory, str]] = DEFAULT_ENTRIES,
        parent: Optional[QWidget] = None,
    ) -> None:
        """
        Initializes the MapLegend.

        Args:
            entries: (category, label) pairs in display order.
            parent: Parent widget.
        """
        super().__init__(parent)
        self._swatches: Dict[MarkerCategory, QLabel] = {}

        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(16)

        for category, label in entries:
            color = make_icon(category).color or DEFAULT_SWATCH_COLOR

            swatch = QLabel()
            swatch.setFixedSize(SWATCH_SIZE, SWATCH_SIZE)
            swatch.setStyleSheet(
                f"background-color: {color}; border-radius: {SWATCH_SIZE // 2}px;"
            )
            swatch.setToolTip(label)
            self._swatches[category] = swatch

            layout.addWidget(swatch)
            layout.addWidget(QLabel(label))

        layout.addStretch()

    def swatch_color(self, category: MarkerCategory) -> Optional[str]:
        """
        Returns the color used for a category's swatch.

        Args:
            category: Marker category.

        Returns:
            Optional[str]: Hex color, or None if the category is not listed.
        """
        if category not in self._swatches:
            return None
        return make_icon(category).color or DEFAULT_SWATCH_COLOR
