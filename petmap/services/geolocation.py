"""
Device Geolocation Module.

One-shot position lookup through Qt Positioning. Used by LocationPicker to
pick an initial map center. Every failure (no positioning backend, denied
permission, timeout, invalid fix) is reported the same way: as
position_unavailable with a short reason, never as an exception.
"""

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Signal
from PySide6.QtPositioning import QGeoPositionInfo, QGeoPositionInfoSource

from petmap.core.geo import is_valid_coordinate

logger = logging.getLogger(__name__)


class DeviceGeolocation(QObject):
    """
    Requests the device position once.

    The request is issued at most once per instance; later calls to
    request_position() are ignored. Create a new instance to ask again.

    Signals:
        position_found: Emitted with (lat, lng) when a fix arrives.
        position_unavailable: Emitted with a reason when no fix is possible.
    """

    position_found = Signal(float, float)
    position_unavailable = Signal(str)

    def __init__(
        self,
        parent: Optional[QObject] = None,
        source_factory: Optional[
            Callable[[QObject], Optional[QGeoPositionInfoSource]]
        ] = None,
    ) -> None:
        """
        Initializes the DeviceGeolocation.

        Args:
            parent: Parent object.
            source_factory: Creates the position source. Defaults to
                QGeoPositionInfoSource.createDefaultSource.
        """
        super().__init__(parent)
        self._source_factory = (
            source_factory or QGeoPositionInfoSource.createDefaultSource
        )
        self._source: Optional[QGeoPositionInfoSource] = None
        self._requested = False
        self._settled = False

    @property
    def requested(self) -> bool:
        """True once request_position() has been called."""
        return self._requested

    def request_position(self) -> None:
        """Starts the lookup. The platform decides the timeout."""
        if self._requested:
            logger.debug("Geolocation already requested, ignoring")
            return
        self._requested = True

        source = self._source_factory(self)
        if source is None:
            self._fail("unsupported")
            return

        self._source = source
        source.positionUpdated.connect(self._on_position_updated)
        source.errorOccurred.connect(self._on_error)
        logger.debug(f"Requesting device position from {source.sourceName()}")
        source.requestUpdate()

    def _on_position_updated(self, info: QGeoPositionInfo) -> None:
        if self._settled:
            return
        coordinate = info.coordinate()
        lat, lng = coordinate.latitude(), coordinate.longitude()
        if not coordinate.isValid() or not is_valid_coordinate(lat, lng):
            self._fail("invalid position")
            return

        self._settled = True
        logger.debug(f"Device position: ({lat:.6f}, {lng:.6f})")
        self.position_found.emit(lat, lng)

    def _on_error(self, error: QGeoPositionInfoSource.Error) -> None:
        self._fail(getattr(error, "name", str(error)))

    def _fail(self, reason: str) -> None:
        if self._settled:
            return
        self._settled = True
        logger.info(f"Device position unavailable: {reason}")
        self.position_unavailable.emit(reason)
