"""
Map Math Utilities.

Provides Web Mercator (EPSG:3857) conversions used by the map view:
- Coordinate to world pixel conversion (scene space)
- World pixel to coordinate conversion
- Zoom level to view scale conversion
- Visible tile range computation

Scene space is the Web Mercator world at zoom 0: a square of
TILE_SIZE x TILE_SIZE units with (0, 0) at the north-west corner.
A view scale of 2**zoom renders zoom level ``zoom``.
"""

import math
from typing import Iterator, Tuple

from fjordguide.core.geo import Coordinate

TILE_SIZE = 256
MAX_MERCATOR_LATITUDE = 85.05112878


def clamp(value: float, low: float, high: float) -> float:
    """Clamps a value to the closed interval [low, high]."""
    return max(low, min(high, value))


def coordinate_to_world(coordinate: Coordinate) -> Tuple[float, float]:
    """
    Converts a WGS84 coordinate to zoom-0 world pixels.

    Args:
        coordinate: The coordinate to project.

    Returns:
        Tuple[float, float]: (x, y) in [0, TILE_SIZE].
    """
    lat = clamp(coordinate.latitude, -MAX_MERCATOR_LATITUDE, MAX_MERCATOR_LATITUDE)
    x = (coordinate.longitude + 180.0) / 360.0 * TILE_SIZE
    lat_rad = math.radians(lat)
    y = (1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * TILE_SIZE
    return x, y


def world_to_coordinate(x: float, y: float) -> Coordinate:
    """
    Converts zoom-0 world pixels back to a WGS84 coordinate.

    Args:
        x: World x in [0, TILE_SIZE].
        y: World y in [0, TILE_SIZE].

    Returns:
        Coordinate: The unprojected coordinate.
    """
    lon = x / TILE_SIZE * 360.0 - 180.0
    lat = math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * y / TILE_SIZE))))
    return Coordinate(latitude=lat, longitude=lon)


def zoom_to_scale(zoom: float) -> float:
    """Returns the view scale that renders the given zoom level."""
    return 2.0**zoom


def scale_to_zoom(scale: float) -> float:
    """
    Returns the zoom level rendered by the given view scale.

    Raises:
        ValueError: If scale is not positive.
    """
    if scale <= 0:
        raise ValueError("Scale must be positive")
    return math.log2(scale)


def visible_tiles(
    zoom: int, left: float, top: float, right: float, bottom: float
) -> Iterator[Tuple[int, int]]:
    """
    Yields the (x, y) indices of tiles intersecting a world rectangle.

    Args:
        zoom: Integer tile zoom level.
        left: World x of the left edge.
        top: World y of the top edge.
        right: World x of the right edge.
        bottom: World y of the bottom edge.

    Yields:
        Tuple[int, int]: Tile column and row, row-major.
    """
    n = 2**zoom
    tile_world = TILE_SIZE / n
    x0 = int(clamp(math.floor(left / tile_world), 0, n - 1))
    x1 = int(clamp(math.floor(right / tile_world), 0, n - 1))
    y0 = int(clamp(math.floor(top / tile_world), 0, n - 1))
    y1 = int(clamp(math.floor(bottom / tile_world), 0, n - 1))
    for ty in range(y0, y1 + 1):
        for tx in range(x0, x1 + 1):
            yield tx, ty


def tile_world_rect(zoom: int, x: int, y: int) -> Tuple[float, float, float]:
    """
    Returns the world-space placement of a tile.

    Args:
        zoom: Tile zoom level.
        x: Tile column.
        y: Tile row.

    Returns:
        Tuple[float, float, float]: (left, top, size) in world units.
    """
    size = TILE_SIZE / (2**zoom)
    return x * size, y * size, size
