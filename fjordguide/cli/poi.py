#!/usr/bin/env python3
"""
Point of Interest CLI.

Provides command-line tools for listing, adding, deleting and exporting the
custom markers saved by the desktop application.

Usage:
    python -m fjordguide.cli.poi list
    python -m fjordguide.cli.poi add --lat 60.8631 --lon 7.1136 --title "Cafe"
    python -m fjordguide.cli.poi delete --id poi_1718000000000
    python -m fjordguide.cli.poi export --output markers.geojson
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List

from fjordguide.core.exceptions import ValidationError
from fjordguide.core.geo import Coordinate
from fjordguide.core.poi import PointOfInterest
from fjordguide.services.poi_store import PoiStore

# Setup logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def open_store(args) -> PoiStore:
    """Opens the app's POI store, or an INI file when --settings-file is given."""
    if not args.settings_file:
        return PoiStore()

    from PySide6.QtCore import QSettings

    settings = QSettings(args.settings_file, QSettings.Format.IniFormat)
    return PoiStore(settings=settings)


def to_geojson(pois: List[PointOfInterest]) -> Dict[str, Any]:
    """
    Converts POIs to a GeoJSON FeatureCollection.

    Args:
        pois: Markers to export.

    Returns:
        Dict[str, Any]: The collection, with [lon, lat] point geometries.
    """
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "id": poi.id,
                "geometry": {
                    "type": "Point",
                    "coordinates": [
                        poi.coordinate.longitude,
                        poi.coordinate.latitude,
                    ],
                },
                "properties": {
                    "title": poi.title,
                    "description": poi.description,
                    "created_at": poi.created_at,
                },
            }
            for poi in pois
        ],
    }


def list_pois(args) -> int:
    """List saved markers."""
    try:
        pois = open_store(args).list()

        if args.json:
            print(json.dumps([p.to_dict() for p in pois], indent=2, ensure_ascii=False))
        else:
            print(f"\nFound {len(pois)} marker(s):\n")
            for p in pois:
                print(f"ID: {p.id}")
                print(f"  Title: {p.title}")
                print(
                    f"  Position: {p.coordinate.latitude:.5f}, "
                    f"{p.coordinate.longitude:.5f}"
                )
                if p.description:
                    print(f"  Note: {p.description}")
                print()

        return 0

    except Exception as e:
        logger.error(f"Failed to list markers: {e}")
        if args.verbose:
            raise
        return 1


def add_poi(args) -> int:
    """Add a marker."""
    try:
        coordinate = Coordinate(args.lat, args.lon)
        if not coordinate.is_valid():
            raise ValidationError(f"Position out of range: {args.lat}, {args.lon}")
        poi = open_store(args).create(coordinate, args.title, args.description)
        print(f"✓ Created marker: {poi.id}")
        print(f"  Title: {poi.title}")
        return 0

    except (ValidationError, ValueError) as e:
        print(f"✗ Error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Failed to add marker: {e}")
        if args.verbose:
            raise
        return 1


def delete_poi(args) -> int:
    """Delete a marker."""
    try:
        store = open_store(args)
        poi = store.get(args.id)
        if poi is None:
            print(f"Marker not found: {args.id}")
            return 1

        if not args.force:
            print(f"About to delete marker: {poi.title} ({args.id})")
            if input("Are you sure? (y/n): ").lower() != "y":
                return 0

        store.delete(args.id)
        print(f"✓ Deleted marker: {args.id}")
        return 0

    except Exception as e:
        logger.error(f"Failed to delete marker: {e}")
        if args.verbose:
            raise
        return 1


def export_pois(args) -> int:
    """Export markers as GeoJSON."""
    try:
        pois = open_store(args).list()
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(to_geojson(pois), f, indent=2, ensure_ascii=False)
        print(f"✓ Exported {len(pois)} marker(s) to {args.output}")
        return 0

    except OSError as e:
        print(f"✗ Error: cannot write {args.output}: {e}")
        return 1
    except Exception as e:
        logger.error(f"Failed to export markers: {e}")
        if args.verbose:
            raise
        return 1


def main():
    parser = argparse.ArgumentParser(
        description="Manage custom map markers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--settings-file",
        help="Read and write markers in this INI file instead of the app settings",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # List
    list_p = subparsers.add_parser("list", help="List markers")
    list_p.add_argument("--json", action="store_true")
    list_p.set_defaults(func=list_pois)

    # Add
    add_p = subparsers.add_parser("add", help="Add a marker")
    add_p.add_argument("--lat", type=float, required=True)
    add_p.add_argument("--lon", type=float, required=True)
    add_p.add_argument("--title", required=True)
    add_p.add_argument("--description", default="")
    add_p.set_defaults(func=add_poi)

    # Delete
    del_p = subparsers.add_parser("delete", help="Delete a marker")
    del_p.add_argument("--id", required=True)
    del_p.add_argument("--force", "-f", action="store_true")
    del_p.set_defaults(func=delete_poi)

    # Export
    export_p = subparsers.add_parser("export", help="Export markers as GeoJSON")
    export_p.add_argument("--output", "-o", required=True)
    export_p.set_defaults(func=export_pois)

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if hasattr(args, "func"):
        sys.exit(args.func(args))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
