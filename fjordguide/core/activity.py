"""
Itinerary Activity Data Model.

Activities are supplied by the host application and are read-only to the
map subsystem.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fjordguide.core.geo import Coordinate


@dataclass(frozen=True)
class Activity:
    """
    A single stop or leg of the fixed itinerary.

    Attributes:
        id: Identifier unique within the itinerary.
        title: Display title.
        location_name: Human readable place name.
        start: Start coordinate (or the only coordinate of a stop).
        end: Optional end coordinate for legs (train, ferry, walk).
        description: Free text description.
        start_time: "HH:MM" local start time.
        end_time: "HH:MM" local end time.
        notes: Optional flag such as 'CRITICAL' or 'DEPARTURE'.
    """

    id: str
    title: str
    location_name: str
    start: Coordinate
    end: Optional[Coordinate] = None
    description: str = ""
    start_time: str = ""
    end_time: str = ""
    notes: str = ""

    @property
    def has_end(self) -> bool:
        """True if the activity is a leg with a distinct end coordinate."""
        return self.end is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Activity":
        """
        Creates an Activity from a dictionary.

        Args:
            data: Dictionary with 'id', 'title', 'location_name', 'start'
                and optionally 'end' ({'lat', 'lng'} dictionaries).

        Returns:
            Activity: A new Activity instance.
        """
        end = data.get("end")
        return cls(
            id=str(data["id"]),
            title=data["title"],
            location_name=data.get("location_name", ""),
            start=Coordinate.from_dict(data["start"]),
            end=Coordinate.from_dict(end) if end else None,
            description=data.get("description", ""),
            start_time=data.get("start_time", ""),
            end_time=data.get("end_time", ""),
            notes=data.get("notes", ""),
        )
