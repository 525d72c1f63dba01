"""
Itinerary Loader Module.

Reads the fixed trip itinerary bundled with the application.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from fjordguide.app.constants import ITINERARY_RESOURCE
from fjordguide.core.activity import Activity
from fjordguide.core.paths import get_resource_path

logger = logging.getLogger(__name__)


def parse_itinerary(data: object) -> List[Activity]:
    """
    Converts decoded JSON into activities, skipping invalid entries.

    Args:
        data: A list of activity dictionaries, or a mapping with an
            'activities' list.

    Returns:
        List[Activity]: Activities in file order.
    """
    if isinstance(data, dict):
        data = data.get("activities", [])
    if not isinstance(data, list):
        logger.error(f"Itinerary must be a list, got {type(data).__name__}")
        return []

    activities = []
    for index, item in enumerate(data):
        try:
            activities.append(Activity.from_dict(item))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Skipping itinerary entry {index}: {e}")
    return activities


def load_itinerary(path: Optional[Union[str, Path]] = None) -> List[Activity]:
    """
    Loads the itinerary from a JSON file.

    Args:
        path: File to read. Defaults to the bundled itinerary.

    Returns:
        List[Activity]: The activities, or an empty list if the file is
        missing or unreadable.
    """
    path = Path(path) if path else Path(get_resource_path(ITINERARY_RESOURCE))
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load itinerary from {path}: {e}")
        return []

    activities = parse_itinerary(data)
    logger.info(f"Loaded {len(activities)} itinerary activities from {path.name}")
    return activities
