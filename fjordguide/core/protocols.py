"""
Protocol Interfaces for Loose Coupling.

Defines the contracts between the map controller and its collaborators
(PEP 544 structural typing), so the controller never depends on a concrete
widget or storage backend.
"""

from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from fjordguide.core.geo import Coordinate
from fjordguide.core.styles import LineStyle, MarkerStyle, PopupContent, TileLayerConfig


@runtime_checkable
class MapSurface(Protocol):
    """
    Interface the controller expects from the interactive map.

    Overlay handles are opaque strings issued by the surface. The surface
    also exposes a ``map_clicked`` Qt signal carrying a Coordinate.
    """

    map_clicked: Any

    def set_view(
        self,
        center: Coordinate,
        zoom: float,
        animate: bool = False,
        duration_ms: int = 0,
    ) -> None:
        """Moves the camera, optionally with a smooth transition."""
        ...

    def set_base_layer(self, config: Optional[TileLayerConfig]) -> None:
        """Replaces the background tile layer (None detaches it)."""
        ...

    def add_marker(
        self,
        coordinate: Coordinate,
        style: MarkerStyle,
        tooltip: str = "",
        popup: Optional[PopupContent] = None,
    ) -> str:
        """Adds a point marker and returns its handle."""
        ...

    def add_polyline(
        self,
        coordinates: Sequence[Coordinate],
        style: LineStyle,
        popup: Optional[PopupContent] = None,
    ) -> str:
        """Adds a polyline and returns its handle."""
        ...

    def remove_overlay(self, handle: str) -> None:
        """Removes a marker or polyline. Unknown handles are ignored."""
        ...

    def open_popup(self, handle: str) -> None:
        """Opens the popup bound to an overlay."""
        ...

    def close_popup(self) -> None:
        """Closes the open popup, if any."""
        ...

    def set_adding_cursor(self, enabled: bool) -> None:
        """Switches the crosshair cursor used while placing a marker."""
        ...


@runtime_checkable
class SettingsSlot(Protocol):
    """
    Minimal durable key-value interface (satisfied by QSettings).
    """

    def value(self, key: str, default: Any = None, type: Any = None) -> Any:
        """Reads a stored value."""
        ...

    def setValue(self, key: str, value: Any) -> None:
        """Writes a value."""
        ...

    def remove(self, key: str) -> None:
        """Deletes a key."""
        ...

    def sync(self) -> None:
        """Flushes pending writes to permanent storage."""
        ...
