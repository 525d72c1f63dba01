"""
Geographic Value Types.

Provides the immutable coordinate, bounding box and search result types
shared by the parser, the stores and the map view.
"""

from dataclasses import dataclass
from typing import Any, Dict

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0


@dataclass(frozen=True)
class Coordinate:
    """
    WGS84 position in decimal degrees.

    Attributes:
        latitude: Degrees north, [-90, 90].
        longitude: Degrees east, [-180, 180].
    """

    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """
        Checks whether the coordinate lies in the WGS84 range.

        Returns:
            bool: True if both components are finite and in range.
        """
        return (
            MIN_LATITUDE <= self.latitude <= MAX_LATITUDE
            and MIN_LONGITUDE <= self.longitude <= MAX_LONGITUDE
        )

    def to_dict(self) -> Dict[str, float]:
        """Returns the coordinate as a {'lat', 'lng'} dictionary."""
        return {"lat": self.latitude, "lng": self.longitude}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Coordinate":
        """
        Creates a Coordinate from a {'lat', 'lng'} dictionary.

        Args:
            data: Dictionary with 'lat' and 'lng' (or 'lon') keys.

        Returns:
            Coordinate: The parsed coordinate.

        Raises:
            KeyError: If a component is missing.
            ValueError: If a component is not numeric.
        """
        lng = data["lng"] if "lng" in data else data["lon"]
        return cls(latitude=float(data["lat"]), longitude=float(lng))


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned geographic rectangle.

    Attributes:
        west: Minimum longitude.
        south: Minimum latitude.
        east: Maximum longitude.
        north: Maximum latitude.
    """

    west: float
    south: float
    east: float
    north: float

    def contains(self, coordinate: Coordinate) -> bool:
        """Returns True if the coordinate lies inside the box (inclusive)."""
        return (
            self.south <= coordinate.latitude <= self.north
            and self.west <= coordinate.longitude <= self.east
        )

    def center(self) -> Coordinate:
        """Returns the arithmetic center of the box."""
        return Coordinate(
            (self.south + self.north) / 2.0, (self.west + self.east) / 2.0
        )

    def to_viewbox(self) -> str:
        """
        Formats the box as a geocoder viewbox parameter.

        Returns:
            str: "left,top,right,bottom" with two decimals.
        """
        return f"{self.west:.2f},{self.north:.2f},{self.east:.2f},{self.south:.2f}"


# Gudvangen (west) to Flåm / Aurland (east)
FJORD_REGION = BoundingBox(west=6.70, south=60.60, east=7.30, north=61.00)


@dataclass(frozen=True)
class SearchResult:
    """
    A single geocoder hit.

    Attributes:
        id: Identifier assigned by the geocoding service.
        coordinate: Location of the hit.
        display_name: Full, comma separated place description.
    """

    id: str
    coordinate: Coordinate
    display_name: str

    @property
    def short_name(self) -> str:
        """First segment of the display name (e.g. the place itself)."""
        return self.display_name.split(",")[0].strip()
