"""
Point of Interest Store Module.

Owns the user-created POIs: creation, deletion and durable persistence.
The whole collection is stored as one JSON array in a single settings key
and rewritten on every mutation.
"""

import json
import logging
import time
from typing import List, Optional

from PySide6.QtCore import QObject, Signal

from fjordguide.app.constants import (
    SETTINGS_POIS_KEY,
    WINDOW_SETTINGS_APP,
    WINDOW_SETTINGS_KEY,
)
from fjordguide.core.exceptions import PersistenceCorruptionError, ValidationError
from fjordguide.core.geo import Coordinate
from fjordguide.core.poi import PointOfInterest
from fjordguide.core.protocols import SettingsSlot

logger = logging.getLogger(__name__)

POI_ID_PREFIX = "poi_"


def default_settings() -> SettingsSlot:
    """Returns the application's QSettings store."""
    from PySide6.QtCore import QSettings

    return QSettings(WINDOW_SETTINGS_KEY, WINDOW_SETTINGS_APP)


class PoiStore(QObject):
    """
    Repository of user-created points of interest.

    Signals:
        pois_changed: Emitted after every successful create/delete.
                      Args: (pois: List[PointOfInterest])
    """

    pois_changed = Signal(list)

    def __init__(
        self,
        settings: Optional[SettingsSlot] = None,
        key: str = SETTINGS_POIS_KEY,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        Initializes the store and loads the persisted collection.

        Args:
            settings: Durable key-value slot. Defaults to the app QSettings.
            key: Settings key holding the JSON array.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self._settings = settings if settings is not None else default_settings()
        self._key = key
        self._pois: List[PointOfInterest] = []
        self._last_id_ms = 0
        self.reload()

    def __len__(self) -> int:
        return len(self._pois)

    def list(self) -> List[PointOfInterest]:
        """
        Returns the POIs in creation order.

        Returns:
            List[PointOfInterest]: A copy of the collection.
        """
        return list(self._pois)

    def get(self, poi_id: str) -> Optional[PointOfInterest]:
        """Returns the POI with the given id, or None."""
        return next((p for p in self._pois if p.id == poi_id), None)

    def create(
        self, coordinate: Coordinate, title: str, description: str = ""
    ) -> PointOfInterest:
        """
        Creates, persists and returns a new POI.

        Args:
            coordinate: Position of the marker.
            title: Display title; must not be blank.
            description: Optional note.

        Returns:
            PointOfInterest: The stored record.

        Raises:
            ValidationError: If the title is empty or whitespace only.
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("A title is required to save a marker.")

        created_at = time.time()
        poi = PointOfInterest(
            id=self._next_id(created_at),
            coordinate=coordinate,
            title=title,
            description=(description or "").strip(),
            created_at=created_at,
        )
        self._pois.append(poi)
        self._persist()
        logger.info(
            f"Created POI {poi.id} '{poi.title}' at "
            f"({coordinate.latitude:.5f}, {coordinate.longitude:.5f})"
        )
        self.pois_changed.emit(self.list())
        return poi

    def delete(self, poi_id: str) -> bool:
        """
        Deletes a POI. Deleting an unknown id is a no-op.

        Args:
            poi_id: Identifier of the POI to remove.

        Returns:
            bool: True if a record was removed.
        """
        remaining = [p for p in self._pois if p.id != poi_id]
        if len(remaining) == len(self._pois):
            logger.debug(f"Delete ignored, POI {poi_id} not found")
            return False

        self._pois = remaining
        self._persist()
        logger.info(f"Deleted POI {poi_id}")
        self.pois_changed.emit(self.list())
        return True

    def reload(self) -> None:
        """
        Re-reads the collection from the settings slot.

        A missing slot yields an empty collection. A corrupt slot is logged
        and also yields an empty collection; it is overwritten on the next
        successful write.
        """
        try:
            self._pois = self._load()
        except PersistenceCorruptionError as e:
            logger.error(f"Stored POIs are corrupt, starting empty: {e}")
            self._pois = []

        for poi in self._pois:
            self._last_id_ms = max(self._last_id_ms, self._id_millis(poi.id))
        logger.debug(f"Loaded {len(self._pois)} POIs")

    def _load(self) -> List[PointOfInterest]:
        """
        Decodes the persisted collection.

        Raises:
            PersistenceCorruptionError: If the payload cannot be decoded.
        """
        raw = self._settings.value(self._key, None)
        if raw is None or raw == "":
            return []

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise PersistenceCorruptionError(f"Invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise PersistenceCorruptionError(
                f"Expected a JSON array, got {type(data).__name__}"
            )

        pois = []
        seen = set()
        for index, item in enumerate(data):
            try:
                if not isinstance(item, dict):
                    raise ValueError("record is not an object")
                poi = PointOfInterest.from_dict(item)
            except (KeyError, ValueError, TypeError) as e:
                raise PersistenceCorruptionError(
                    f"Invalid POI record at index {index}: {e}"
                ) from e
            if poi.id in seen:
                raise PersistenceCorruptionError(f"Duplicate POI id {poi.id}")
            seen.add(poi.id)
            pois.append(poi)
        return pois

    def _persist(self) -> None:
        """Writes the full collection to the settings slot."""
        payload = json.dumps([p.to_dict() for p in self._pois], ensure_ascii=False)
        self._settings.setValue(self._key, payload)
        self._settings.sync()

    def _next_id(self, created_at: float) -> str:
        """
        Allocates a time-based id that is strictly greater than any issued.

        Args:
            created_at: Creation timestamp in seconds.

        Returns:
            str: The new identifier.
        """
        millis = max(int(created_at * 1000), self._last_id_ms + 1)
        existing = {p.id for p in self._pois}
        while f"{POI_ID_PREFIX}{millis}" in existing:
            millis += 1
        self._last_id_ms = millis
        return f"{POI_ID_PREFIX}{millis}"

    @staticmethod
    def _id_millis(poi_id: str) -> int:
        """Extracts the millisecond component of a generated id (0 if foreign)."""
        if not poi_id.startswith(POI_ID_PREFIX):
            return 0
        try:
            return int(poi_id[len(POI_ID_PREFIX) :])
        except ValueError:
            return 0
