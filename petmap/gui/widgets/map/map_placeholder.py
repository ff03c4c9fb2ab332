"""
Map Placeholder Module.

Static stand-in shown where a map will appear, until the mapping engine is
ready, or for good if it failed to load.
"""

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QWidget

LOADING_MESSAGE = "Loading map..."
UNAVAILABLE_MESSAGE = "Map unavailable"

PLACEHOLDER_STYLE = "background-color: #F3F4F6; color: #6B7280; font-size: 11pt;"


class MapPlaceholder(QLabel):
    """
    A QLabel subclass occupying the map's area without any map behavior.

    Mouse input is ignored: clicks on the placeholder do nothing.
    """

    def __init__(
        self, message: str = LOADING_MESSAGE, parent: Optional[QWidget] = None
    ) -> None:
        """
        Initializes the placeholder.

        Args:
            message: Text shown in the middle of the area.
            parent: The parent widget, if any.
        """
        super().__init__(message, parent)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setStyleSheet(PLACEHOLDER_STYLE)

    def show_unavailable(self) -> None:
        """Switches to the permanent "map unavailable" message."""
        self.setText(UNAVAILABLE_MESSAGE)
