"""
Overlay Style Definitions.

Plain data describing how overlays look. Kept free of Qt types so the
controller can be reasoned about without a graphics stack; the map view
translates these into pens and brushes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple


class BaseLayerKind(Enum):
    """Available background raster maps."""

    STANDARD = "standard"
    SATELLITE = "satellite"


@dataclass(frozen=True)
class TileLayerConfig:
    """
    A raster tile source.

    Attributes:
        kind: Which base layer this is.
        url_template: URL with {z}, {x}, {y} and optional {s} placeholders.
        attribution: Rich-text attribution to display with the map.
        max_zoom: Highest zoom level the service provides.
        subdomains: Values substituted for {s}, round-robin by tile.
    """

    kind: BaseLayerKind
    url_template: str
    attribution: str
    max_zoom: int = 18
    subdomains: Tuple[str, ...] = ()

    def tile_url(self, z: int, x: int, y: int) -> str:
        """
        Builds the URL of one tile.

        Args:
            z: Zoom level.
            x: Tile column.
            y: Tile row.

        Returns:
            str: The tile URL.
        """
        s = self.subdomains[(x + y) % len(self.subdomains)] if self.subdomains else ""
        return self.url_template.format(s=s, z=z, x=x, y=y)


@dataclass(frozen=True)
class MarkerStyle:
    """
    Visual style of a point marker.

    Attributes:
        color: Fill color as hex string.
        shape: 'pin' (teardrop anchored at the tip) or 'dot' (circle).
        size: Diameter in device pixels.
        border_color: Outline color.
        border_width: Outline width in device pixels.
        z: Stacking order among overlays.
    """

    color: str
    shape: str = "pin"
    size: int = 24
    border_color: str = "#FFFFFF"
    border_width: int = 2
    z: float = 10.0


@dataclass(frozen=True)
class LineStyle:
    """
    Visual style of a polyline.

    Attributes:
        color: Stroke color as hex string.
        width: Stroke width in device pixels.
        opacity: Stroke opacity in [0, 1].
        dash: Optional dash pattern in pixels (e.g. (10, 10)).
        z: Stacking order among overlays.
    """

    color: str
    width: float = 4.0
    opacity: float = 1.0
    dash: Optional[Tuple[float, ...]] = None
    z: float = 1.0


@dataclass
class PopupContent:
    """
    Content of the detail popup bound to an overlay.

    Attributes:
        title: Bold heading.
        body: Optional body text.
        action_label: Label of the optional action button.
        on_action: Callback invoked when the action button is clicked.
    """

    title: str
    body: str = ""
    action_label: Optional[str] = None
    on_action: Optional[Callable[[], None]] = None
