"""
Map Graphics View Module.

Provides the MapGraphicsView class, an interactive slippy map built on
QGraphicsView. The scene is the Web Mercator world at zoom 0; the view
transform scales it by 2**zoom. Overlays are addressed by opaque string
handles so callers never hold graphics items directly.
"""

import itertools
import logging
from typing import Dict, List, Optional, Sequence, Union

from PySide6.QtCore import (
    QEasingCurve,
    QPoint,
    QPointF,
    QRectF,
    QSize,
    Qt,
    QVariantAnimation,
    Signal,
)
from PySide6.QtGui import (
    QBrush,
    QColor,
    QMouseEvent,
    QPainter,
    QResizeEvent,
    QTransform,
    QWheelEvent,
)
from PySide6.QtWidgets import QGraphicsScene, QGraphicsView, QWidget

from fjordguide.app.constants import DEFAULT_USER_AGENT, MAX_ZOOM, MIN_ZOOM
from fjordguide.core.geo import Coordinate
from fjordguide.core.map_math import (
    TILE_SIZE,
    clamp,
    coordinate_to_world,
    world_to_coordinate,
    zoom_to_scale,
)
from fjordguide.core.styles import LineStyle, MarkerStyle, PopupContent, TileLayerConfig
from fjordguide.gui.widgets.map.map_popup import MapPopup
from fjordguide.gui.widgets.map.marker_item import PIN_HEIGHT_RATIO, MarkerItem
from fjordguide.gui.widgets.map.polyline_item import PolylineItem
from fjordguide.gui.widgets.map.tile_layer_item import TileLayerItem

logger = logging.getLogger(__name__)

OverlayItem = Union[MarkerItem, PolylineItem]

# Press/release distance (device pixels) below which a gesture is a click
CLICK_THRESHOLD = 4
BACKGROUND_COLOR = "#AAD3DF"


class MapGraphicsView(QGraphicsView):
    """
    Interactive map surface with a raster base layer and vector overlays.

    Signals:
        map_clicked: Emitted when empty map is clicked.
                     Args: (coordinate: Coordinate)
        marker_clicked: Emitted when an overlay is clicked.
                        Args: (handle: str)
        popup_opened: Emitted when an overlay popup is shown.
                      Args: (handle: str)
        zoom_changed: Emitted when the zoom level changes.
                      Args: (zoom: float)
    """

    map_clicked = Signal(object)
    marker_clicked = Signal(str)
    popup_opened = Signal(str)
    zoom_changed = Signal(float)

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        fetch_tiles: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """
        Initializes the MapGraphicsView.

        Args:
            parent: Parent widget.
            fetch_tiles: If False, base layers never hit the network.
            user_agent: User-Agent sent with tile requests.
        """
        super().__init__(parent)

        self.fetch_tiles = fetch_tiles
        self.user_agent = user_agent

        # Camera
        self._center_world = QPointF(TILE_SIZE / 2, TILE_SIZE / 2)
        self._zoom = float(MIN_ZOOM)
        self._applying_camera = False
        self._animation: Optional[QVariantAnimation] = None

        # Layers
        self._tile_layers: Dict[str, TileLayerItem] = {}
        self._active_tile_layer: Optional[TileLayerItem] = None
        self._overlays: Dict[str, OverlayItem] = {}
        self._handle_seq = itertools.count(1)

        # Popup
        self.popup = MapPopup(self.viewport())
        self._popup_anchor: Optional[QPointF] = None
        self._popup_offset = 0

        # Interaction
        self._press_pos: Optional[QPoint] = None
        self._adding_cursor = False

        self.scene = QGraphicsScene(self)
        self.scene.setSceneRect(QRectF(0, 0, TILE_SIZE, TILE_SIZE))
        self.scene.setBackgroundBrush(QBrush(QColor(BACKGROUND_COLOR)))
        self.setScene(self.scene)

        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        self.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.NoAnchor)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.SmartViewportUpdate)

        self._apply_camera()

    def minimumSizeHint(self) -> QSize:
        return QSize(200, 150)

    # --- Camera -------------------------------------------------------

    def camera_center(self) -> Coordinate:
        """Returns the geographic coordinate at the center of the view."""
        return world_to_coordinate(self._center_world.x(), self._center_world.y())

    def zoom_level(self) -> float:
        return self._zoom

    def is_animating(self) -> bool:
        return (
            self._animation is not None
            and self._animation.state() == QVariantAnimation.State.Running
        )

    def set_view(
        self,
        center: Coordinate,
        zoom: float,
        animate: bool = False,
        duration_ms: int = 0,
    ) -> None:
        """
        Moves the camera to a center and zoom level.

        A running transition is stopped first, so the latest request wins.

        Args:
            center: Target center coordinate.
            zoom: Target zoom level (clamped to the supported range).
            animate: Whether to interpolate smoothly.
            duration_ms: Transition length when animating.
        """
        self._stop_animation()
        target_center = QPointF(*coordinate_to_world(center))
        target_zoom = clamp(zoom, MIN_ZOOM, MAX_ZOOM)

        if not animate or duration_ms <= 0:
            self._center_world = target_center
            self._zoom = target_zoom
            self._apply_camera()
            return

        start_center = QPointF(self._center_world)
        start_zoom = self._zoom

        def step(value: float) -> None:
            t = float(value)
            self._center_world = start_center + (target_center - start_center) * t
            self._zoom = start_zoom + (target_zoom - start_zoom) * t
            self._apply_camera()

        animation = QVariantAnimation(self)
        animation.setStartValue(0.0)
        animation.setEndValue(1.0)
        animation.setDuration(duration_ms)
        animation.setEasingCurve(QEasingCurve.Type.InOutCubic)
        animation.valueChanged.connect(step)
        animation.finished.connect(lambda: step(1.0))
        self._animation = animation
        logger.debug(
            f"Animating view to ({center.latitude:.4f}, {center.longitude:.4f}) "
            f"z{target_zoom:g} over {duration_ms} ms"
        )
        animation.start()

    def zoom_in(self) -> None:
        self._zoom_about(None, 1)

    def zoom_out(self) -> None:
        self._zoom_about(None, -1)

    def _stop_animation(self) -> None:
        if self._animation is not None:
            self._animation.stop()
            self._animation.deleteLater()
            self._animation = None

    def _zoom_about(self, anchor: Optional[QPointF], steps: float) -> None:
        """Zooms by whole steps keeping ``anchor`` (scene) fixed on screen."""
        self._stop_animation()
        new_zoom = clamp(round(self._zoom) + steps, MIN_ZOOM, MAX_ZOOM)
        if new_zoom == self._zoom:
            return
        if anchor is not None:
            ratio = zoom_to_scale(self._zoom) / zoom_to_scale(new_zoom)
            self._center_world = anchor + (self._center_world - anchor) * ratio
        self._zoom = new_zoom
        self._apply_camera()

    def _apply_camera(self) -> None:
        """Pushes the logical camera into the view transform."""
        self._applying_camera = True
        try:
            scale = zoom_to_scale(self._zoom)
            self.setTransform(QTransform.fromScale(scale, scale))
            self.centerOn(self._center_world)
        finally:
            self._applying_camera = False
        self._reposition_popup()
        self.zoom_changed.emit(self._zoom)

    def scrollContentsBy(self, dx: int, dy: int) -> None:
        """Tracks user panning so the logical center follows the view."""
        super().scrollContentsBy(dx, dy)
        if not self._applying_camera:
            self._center_world = self.mapToScene(self.viewport().rect().center())
        self._reposition_popup()

    def resizeEvent(self, event: QResizeEvent) -> None:
        super().resizeEvent(event)
        self._apply_camera()

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Zooms one level per wheel notch around the cursor."""
        delta = event.angleDelta().y()
        if delta == 0:
            return
        anchor = self.mapToScene(event.position().toPoint())
        self._zoom_about(anchor, 1 if delta > 0 else -1)
        event.accept()

    # --- Base layer ---------------------------------------------------

    def set_base_layer(self, config: Optional[TileLayerConfig]) -> None:
        """
        Replaces the background tile layer.

        Each tile source keeps its own cache, so switching back and forth
        does not refetch tiles. Exactly one layer is attached at a time.

        Args:
            config: New tile source, or None to show no base layer.
        """
        if self._active_tile_layer is not None:
            if config is not None and self._active_tile_layer.config == config:
                return
            self._active_tile_layer.abort_pending()
            self.scene.removeItem(self._active_tile_layer)
            self._active_tile_layer = None

        if config is None:
            logger.info("Base layer detached")
            return

        layer = self._tile_layers.get(config.kind.value)
        if layer is None or layer.config != config:
            layer = TileLayerItem(
                config, user_agent=self.user_agent, fetch_tiles=self.fetch_tiles
            )
            self._tile_layers[config.kind.value] = layer
        else:
            layer.forget_failures()
        self.scene.addItem(layer)
        self._active_tile_layer = layer
        logger.info(f"Base layer set to {config.kind.value}")

    def base_layer(self) -> Optional[TileLayerConfig]:
        layer = self._active_tile_layer
        return layer.config if layer is not None else None

    def attached_base_layer_count(self) -> int:
        """Returns how many tile layers are currently in the scene."""
        return sum(1 for item in self.scene.items() if isinstance(item, TileLayerItem))

    # --- Overlays -----------------------------------------------------

    def _new_handle(self, prefix: str) -> str:
        return f"{prefix}-{next(self._handle_seq)}"

    def add_marker(
        self,
        coordinate: Coordinate,
        style: MarkerStyle,
        tooltip: str = "",
        popup: Optional[PopupContent] = None,
    ) -> str:
        """
        Adds a point marker.

        Args:
            coordinate: Marker position.
            style: Marker style.
            tooltip: Hover text.
            popup: Optional popup content opened on click.

        Returns:
            str: The overlay handle.
        """
        handle = self._new_handle("marker")
        item = MarkerItem(handle, coordinate, style, tooltip, popup)
        self.scene.addItem(item)
        self._overlays[handle] = item
        return handle

    def add_polyline(
        self,
        coordinates: Sequence[Coordinate],
        style: LineStyle,
        popup: Optional[PopupContent] = None,
    ) -> str:
        """
        Adds a polyline.

        Args:
            coordinates: Vertices in drawing order.
            style: Line style.
            popup: Optional popup content opened on click.

        Returns:
            str: The overlay handle.
        """
        handle = self._new_handle("line")
        item = PolylineItem(handle, coordinates, style, popup)
        self.scene.addItem(item)
        self._overlays[handle] = item
        return handle

    def remove_overlay(self, handle: str) -> None:
        """Removes an overlay. Unknown handles are ignored."""
        item = self._overlays.pop(handle, None)
        if item is None:
            return
        if self.popup.handle == handle:
            self.close_popup()
        self.scene.removeItem(item)

    def clear_overlays(self) -> None:
        for handle in list(self._overlays):
            self.remove_overlay(handle)

    def overlay(self, handle: str) -> Optional[OverlayItem]:
        return self._overlays.get(handle)

    def overlay_handles(self) -> List[str]:
        return list(self._overlays)

    def overlay_count(self) -> int:
        return len(self._overlays)

    def marker_count(self) -> int:
        return sum(
            1 for item in self._overlays.values() if isinstance(item, MarkerItem)
        )

    def polyline_count(self) -> int:
        return sum(
            1 for item in self._overlays.values() if isinstance(item, PolylineItem)
        )

    # --- Popup --------------------------------------------------------

    def open_popup(self, handle: str, anchor: Optional[QPointF] = None) -> None:
        """
        Opens the popup bound to an overlay.

        Args:
            handle: Overlay handle.
            anchor: Scene point to attach to. Defaults to the marker
                position, or the middle vertex of a polyline.
        """
        item = self._overlays.get(handle)
        if item is None or item.popup is None:
            logger.debug(f"No popup to open for {handle}")
            return

        if anchor is None:
            if isinstance(item, MarkerItem):
                anchor = item.pos()
            else:
                path = item.path()
                anchor = path.pointAtPercent(0.5) if not path.isEmpty() else QPointF()

        self._popup_offset = 0
        if isinstance(item, MarkerItem) and anchor == item.pos():
            size = item.style.size
            self._popup_offset = (
                int(size * PIN_HEIGHT_RATIO) if item.is_pin else size // 2
            )

        self._popup_anchor = QPointF(anchor)
        self.popup.show_content(handle, item.popup, self._popup_viewport_pos())
        self.popup_opened.emit(handle)

    def close_popup(self) -> None:
        self._popup_anchor = None
        self.popup.dismiss()

    def popup_handle(self) -> Optional[str]:
        """Returns the handle whose popup is open, if any."""
        return self.popup.handle if self.popup.isVisible() else None

    def _popup_viewport_pos(self) -> QPoint:
        pos = self.mapFromScene(self._popup_anchor)
        return QPoint(pos.x(), pos.y() - self._popup_offset)

    def _reposition_popup(self) -> None:
        if self._popup_anchor is not None and self.popup.isVisible():
            self.popup.move_to(self._popup_viewport_pos())

    # --- Interaction --------------------------------------------------

    def set_adding_cursor(self, enabled: bool) -> None:
        """
        Switches the crosshair shown while a new marker is being placed.

        Hand-drag panning is suspended meanwhile so the cursor sticks.
        """
        self._adding_cursor = enabled
        if enabled:
            self.setDragMode(QGraphicsView.DragMode.NoDrag)
            self.viewport().setCursor(Qt.CursorShape.CrossCursor)
        else:
            self.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)
            self.viewport().unsetCursor()

    def adding_cursor_enabled(self) -> bool:
        return self._adding_cursor

    def mousePressEvent(self, event: QMouseEvent) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            self._press_pos = event.pos()
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        """Distinguishes clicks from drags and dispatches them."""
        press_pos = self._press_pos
        self._press_pos = None
        super().mouseReleaseEvent(event)
        if self._adding_cursor:
            self.viewport().setCursor(Qt.CursorShape.CrossCursor)

        if event.button() != Qt.MouseButton.LeftButton or press_pos is None:
            return
        if (event.pos() - press_pos).manhattanLength() >= CLICK_THRESHOLD:
            return
        self.handle_click(event.pos())

    def overlay_at(self, pos: QPoint) -> Optional[OverlayItem]:
        """Returns the topmost overlay under a viewport position."""
        for item in self.items(pos):
            handle = getattr(item, "handle", None)
            if handle is not None and self._overlays.get(handle) is item:
                return item
        return None

    def handle_click(self, pos: QPoint) -> None:
        """
        Resolves a click at a viewport position.

        Overlays take precedence; a click on empty map closes any popup and
        emits ``map_clicked`` with the geographic coordinate.

        Args:
            pos: Viewport position.
        """
        item = self.overlay_at(pos)
        if item is not None and not self._adding_cursor:
            self.marker_clicked.emit(item.handle)
            if item.popup is not None:
                anchor = None if isinstance(item, MarkerItem) else self.mapToScene(pos)
                self.open_popup(item.handle, anchor)
            return

        scene_pos = self.mapToScene(pos)
        if not self.scene.sceneRect().contains(scene_pos):
            return
        self.close_popup()
        coordinate = world_to_coordinate(scene_pos.x(), scene_pos.y())
        logger.debug(
            f"Map clicked at ({coordinate.latitude:.5f}, {coordinate.longitude:.5f})"
        )
        self.map_clicked.emit(coordinate)

    # --- Teardown -----------------------------------------------------

    def shutdown(self) -> None:
        """Stops animations and network activity and drops all layers."""
        self._stop_animation()
        self.close_popup()
        self.clear_overlays()
        self.set_base_layer(None)
        for layer in self._tile_layers.values():
            layer.abort_pending()
        self._tile_layers.clear()
        logger.debug("MapGraphicsView shut down")
