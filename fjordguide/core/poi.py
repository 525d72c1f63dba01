"""
Point of Interest Data Model.

Represents a user-created marker on the map.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict

from fjordguide.core.geo import Coordinate


@dataclass(frozen=True)
class PointOfInterest:
    """
    A user-created, persisted map marker.

    Records are immutable once saved; the only lifecycle change after
    creation is deletion.

    Attributes:
        id: Unique identifier (``poi_<epoch milliseconds>``).
        coordinate: Position of the marker.
        title: Non-empty display title.
        description: Optional free text note.
        created_at: Unix timestamp of creation.
    """

    id: str
    coordinate: Coordinate
    title: str
    description: str = ""
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the POI to a JSON-serializable dictionary.

        Returns:
            Dict[str, Any]: Dictionary representation of the POI.
        """
        return {
            "id": self.id,
            "lat": self.coordinate.latitude,
            "lng": self.coordinate.longitude,
            "title": self.title,
            "description": self.description,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PointOfInterest":
        """
        Creates a PointOfInterest from its dictionary representation.

        Args:
            data: Dictionary produced by :meth:`to_dict`.

        Returns:
            PointOfInterest: A new instance.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a field has the wrong type or the title is empty.
        """
        poi_id = data["id"]
        title = data["title"]
        if not isinstance(poi_id, str) or not poi_id:
            raise ValueError(f"Invalid POI id: {poi_id!r}")
        if not isinstance(title, str) or not title.strip():
            raise ValueError(f"Invalid POI title for {poi_id}")

        description = data.get("description") or ""
        if not isinstance(description, str):
            raise ValueError(f"Invalid POI description for {poi_id}")

        return cls(
            id=poi_id,
            coordinate=Coordinate.from_dict(data),
            title=title,
            description=description,
            created_at=float(data.get("created_at", time.time())),
        )
