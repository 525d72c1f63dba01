"""
Map Widget Package.

Provides the slippy-map components organized into separate modules.
"""

from fjordguide.gui.widgets.map.map_graphics_view import MapGraphicsView
from fjordguide.gui.widgets.map.map_popup import MapPopup
from fjordguide.gui.widgets.map.marker_item import MarkerItem
from fjordguide.gui.widgets.map.polyline_item import PolylineItem
from fjordguide.gui.widgets.map.tile_layer_item import TileLayerItem

__all__ = [
    "MapGraphicsView",
    "MapPopup",
    "MarkerItem",
    "PolylineItem",
    "TileLayerItem",
]
