"""
Location Service Module.

Supplies the traveller's current position to the map, either from the
platform positioning backend (Qt Positioning) or from a fixed coordinate
given on the command line.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal, Slot
from PySide6.QtPositioning import QGeoPositionInfo, QGeoPositionInfoSource

from fjordguide.core.geo import Coordinate

logger = logging.getLogger(__name__)

# Minimum interval between position updates, in milliseconds
UPDATE_INTERVAL_MS = 10000


def parse_location_arg(text: str) -> Coordinate:
    """
    Parses a "LAT,LON" command line value.

    Args:
        text: Two comma separated decimal degrees.

    Returns:
        Coordinate: The parsed location.

    Raises:
        ValueError: If the text is malformed or out of range.
    """
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 2:
        raise ValueError(f"Expected LAT,LON but got {text!r}")
    coordinate = Coordinate(float(parts[0]), float(parts[1]))
    if not coordinate.is_valid():
        raise ValueError(f"Location out of range: {text!r}")
    return coordinate


class LocationService(QObject):
    """
    Publishes the user's location.

    Signals:
        location_changed: Emitted with the new location, or None when the
                          position becomes unavailable.
                          Args: (location: Optional[Coordinate])
    """

    location_changed = Signal(object)

    def __init__(
        self,
        fixed_location: Optional[Coordinate] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.fixed_location = fixed_location
        self._location: Optional[Coordinate] = None
        self._source: Optional[QGeoPositionInfoSource] = None

    @property
    def location(self) -> Optional[Coordinate]:
        return self._location

    def start(self) -> bool:
        """
        Starts publishing positions.

        Returns:
            bool: True if a position source is active.
        """
        if self.fixed_location is not None:
            logger.info("Using fixed user location")
            self._publish(self.fixed_location)
            return True

        self._source = QGeoPositionInfoSource.createDefaultSource(self)
        if self._source is None:
            logger.info("No positioning source available on this system")
            return False

        self._source.setUpdateInterval(UPDATE_INTERVAL_MS)
        self._source.positionUpdated.connect(self._on_position_updated)
        self._source.errorOccurred.connect(self._on_error)
        self._source.startUpdates()
        logger.info(f"Positioning started with source '{self._source.sourceName()}'")
        return True

    def stop(self) -> None:
        if self._source is not None:
            self._source.stopUpdates()
            self._source = None

    @Slot(QGeoPositionInfo)
    def _on_position_updated(self, info: QGeoPositionInfo) -> None:
        geo = info.coordinate()
        if not geo.isValid():
            return
        self._publish(Coordinate(geo.latitude(), geo.longitude()))

    def _on_error(self, error: QGeoPositionInfoSource.Error) -> None:
        logger.warning(f"Positioning error: {error}")
        if self._location is not None:
            self._location = None
            self.location_changed.emit(None)

    def _publish(self, location: Coordinate) -> None:
        if location == self._location:
            return
        self._location = location
        self.location_changed.emit(location)
