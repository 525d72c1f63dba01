"""
Track Parser Module.

Decodes GPX text into an ordered list of coordinates for the route overlay.

The document is parsed with gpxpy. Points are taken from every track segment
in document order; files without track points fall back to route points.
Elevation, time and other point data are ignored.

A point that gpxpy cannot read (missing or non-numeric ``lat``/``lon``)
rejects the whole file. A point that parses but lies outside the valid
latitude/longitude range is skipped; the file is rejected only when no valid
point remains.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

import gpxpy
import gpxpy.gpx

from fjordguide.core.exceptions import MalformedTrackError
from fjordguide.core.geo import Coordinate
from fjordguide.core.paths import get_resource_path

logger = logging.getLogger(__name__)


def _track_points(gpx: gpxpy.gpx.GPX) -> List[gpxpy.gpx.GPXTrackPoint]:
    return [
        point
        for track in gpx.tracks
        for segment in track.segments
        for point in segment.points
    ]


def _route_points(gpx: gpxpy.gpx.GPX) -> List[gpxpy.gpx.GPXRoutePoint]:
    return [point for route in gpx.routes for point in route.points]


def _valid_coordinates(points: Iterable) -> List[Coordinate]:
    coordinates = []
    for point in points:
        coordinate = Coordinate(point.latitude, point.longitude)
        if coordinate.is_valid():
            coordinates.append(coordinate)
    return coordinates


def parse_gpx(text: str) -> List[Coordinate]:
    """
    Parses GPX text into coordinates, preserving file order.

    Args:
        text: Raw GPX document.

    Returns:
        List[Coordinate]: The path, at least one point long.

    Raises:
        MalformedTrackError: If gpxpy rejects the document or no usable
            point remains.
    """
    if not text or not text.strip():
        raise MalformedTrackError("Track file is empty")

    try:
        gpx = gpxpy.parse(text)
    except (gpxpy.gpx.GPXException, ValueError) as e:
        raise MalformedTrackError(f"Track file is not valid GPX: {e}") from e

    kind = "track"
    points = _track_points(gpx)
    if not points:
        kind = "route"
        points = _route_points(gpx)
    if not points:
        raise MalformedTrackError("Track file contains no track or route points")

    coordinates = _valid_coordinates(points)
    skipped = len(points) - len(coordinates)
    if skipped:
        logger.warning(f"Skipped {skipped} out-of-range {kind} point(s)")

    if not coordinates:
        raise MalformedTrackError(f"None of {len(points)} {kind} points is valid")

    logger.debug(f"Parsed {len(coordinates)} {kind} points")
    return coordinates


def load_track(text: Optional[str]) -> List[Coordinate]:
    """
    Parses a track without letting failures escape.

    A broken or missing track must never block map initialization, so
    MalformedTrackError is logged and an empty path is returned.

    Args:
        text: Raw GPX document, or None if no track is available.

    Returns:
        List[Coordinate]: The path, or an empty list.
    """
    if text is None:
        logger.info("No route track supplied")
        return []
    try:
        return parse_gpx(text)
    except MalformedTrackError as e:
        logger.error(f"Route track could not be loaded: {e}")
        return []


def read_track_resource(name: str) -> Optional[str]:
    """
    Reads a bundled GPX resource.

    Args:
        name: File name inside the resources directory.

    Returns:
        Optional[str]: The file contents, or None if it cannot be read.
    """
    path = Path(get_resource_path(name))
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to read track resource {path}: {e}")
        return None
