"""
Application Constants.
Stores default values for UI configuration, map behavior and remote services.
"""

from fjordguide.core.geo import Coordinate
from fjordguide.core.styles import (
    BaseLayerKind,
    LineStyle,
    MarkerStyle,
    TileLayerConfig,
)

# Window Configuration
WINDOW_TITLE = "FjordGuide - Flåm & Aurland"
DEFAULT_WINDOW_WIDTH = 1280
DEFAULT_WINDOW_HEIGHT = 800
WINDOW_SETTINGS_KEY = "FjordGuide"
WINDOW_SETTINGS_APP = "FjordGuide"
SETTINGS_POIS_KEY = "custom_pois"
SETTINGS_GEOMETRY_KEY = "window_geometry"

# Dock Object Names / Titles
DOCK_OBJ_ITINERARY = "ItineraryDock"
DOCK_TITLE_ITINERARY = "Itinerary"

# Bundled resources
ITINERARY_RESOURCE = "itinerary.json"
TRACK_RESOURCE = "flamsbana.gpx"
TRACK_POPUP_TITLE = "Flåm Railway"

# Camera
INITIAL_CENTER = Coordinate(60.8638, 7.1187)
INITIAL_ZOOM = 13
FOCUS_ZOOM = 16
FOCUS_ANIMATION_MS = 1500
SEARCH_ANIMATION_MS = 1000
MIN_ZOOM = 3
MAX_ZOOM = 18

# Base layers
TILE_LAYERS = {
    BaseLayerKind.STANDARD: TileLayerConfig(
        kind=BaseLayerKind.STANDARD,
        url_template="https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
        attribution="&copy; OpenStreetMap contributors",
        max_zoom=18,
        subdomains=("a", "b", "c"),
    ),
    BaseLayerKind.SATELLITE: TileLayerConfig(
        kind=BaseLayerKind.SATELLITE,
        url_template=(
            "https://server.arcgisonline.com/ArcGIS/rest/services/"
            "World_Imagery/MapServer/tile/{z}/{y}/{x}"
        ),
        attribution=(
            "Tiles &copy; Esri &mdash; Source: Esri, i-cubed, USDA, USGS, AEX, "
            "GeoEye, Getmapping, Aerogrid, IGN, IGP, UPR-EGP, "
            "and the GIS User Community"
        ),
        max_zoom=18,
    ),
}
DEFAULT_BASE_LAYER = BaseLayerKind.STANDARD
TILE_CACHE_SIZE = 512
TILE_RETRY_SECONDS = 30.0

# Overlay styles (z-order low -> high: track, legs, itinerary, POIs, user, search)
TRACK_STYLE = LineStyle(color="#FFB347", width=5, opacity=0.8, z=1)
LEG_STYLE = LineStyle(color="#2A5B87", width=4, opacity=0.6, dash=(10, 10), z=2)
ITINERARY_START_STYLE = MarkerStyle(color="#2A5B87", shape="pin", z=10)
ITINERARY_END_STYLE = MarkerStyle(color="#3A7D44", shape="pin", z=10)
POI_STYLE = MarkerStyle(color="#8B5CF6", shape="pin", z=11)
USER_LOCATION_STYLE = MarkerStyle(
    color="#3B82F6", shape="dot", size=16, border_width=3, z=12
)
SEARCH_RESULT_STYLE = MarkerStyle(
    color="#EF4444", shape="dot", size=14, border_width=3, z=13
)

# Geocoder (overridable through environment variables)
DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_USER_AGENT = "FjordGuide/0.3 (offline travel companion)"
DEFAULT_SEARCH_LIMIT = 5
DEFAULT_HTTP_TIMEOUT = 10.0
ENV_GEOCODER_URL = "FJORDGUIDE_GEOCODER_URL"
ENV_USER_AGENT = "FJORDGUIDE_USER_AGENT"
ENV_SEARCH_LIMIT = "FJORDGUIDE_SEARCH_LIMIT"
ENV_HTTP_TIMEOUT = "FJORDGUIDE_HTTP_TIMEOUT"

# UI text
NO_DESCRIPTION_TEXT = "No description"
DELETE_POI_LABEL = "Delete marker"
ADDING_HINT_TEXT = "Tap the map"
END_MARKER_PREFIX = "End: "
STATUS_SEARCH_FAILED = "Search failed: "
STATUS_TRACK_MISSING = "Route track unavailable."
