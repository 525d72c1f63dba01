"""
Map Polyline Item Module.

Provides the PolylineItem class used for the railway track and the
itinerary legs.
"""

import logging
from typing import Optional, Sequence

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QColor, QCursor, QPainterPath, QPainterPathStroker, QPen
from PySide6.QtWidgets import QGraphicsPathItem

from fjordguide.core.geo import Coordinate
from fjordguide.core.map_math import coordinate_to_world
from fjordguide.core.styles import LineStyle, PopupContent

logger = logging.getLogger(__name__)

# Extra device pixels around the stroke that still count as a hit
HIT_TOLERANCE_PX = 6


class PolylineItem(QGraphicsPathItem):
    """
    Geographic polyline drawn with a cosmetic pen.

    The path lives in world coordinates so it scales with the map, while
    the stroke keeps a constant pixel width.
    """

    def __init__(
        self,
        handle: str,
        coordinates: Sequence[Coordinate],
        style: LineStyle,
        popup: Optional[PopupContent] = None,
    ) -> None:
        super().__init__()
        self.handle = handle
        self.style = style
        self.popup = popup
        self.coordinates = list(coordinates)

        color = QColor(style.color)
        color.setAlphaF(max(0.0, min(1.0, style.opacity)))
        pen = QPen(color, style.width)
        pen.setCosmetic(True)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
        if style.dash:
            # Qt dash patterns are in units of the pen width
            pen.setDashPattern([d / style.width for d in style.dash])
        self.setPen(pen)
        self.setZValue(style.z)
        if popup is not None:
            self.setCursor(QCursor(Qt.CursorShape.PointingHandCursor))

        self.setPath(self._build_path())
        logger.debug(f"Created PolylineItem {handle} ({len(self.coordinates)} points)")

    def _build_path(self) -> QPainterPath:
        path = QPainterPath()
        if not self.coordinates:
            return path
        path.moveTo(QPointF(*coordinate_to_world(self.coordinates[0])))
        for coordinate in self.coordinates[1:]:
            path.lineTo(QPointF(*coordinate_to_world(coordinate)))
        return path

    def _view_scale(self) -> float:
        scene = self.scene()
        if scene is None or not scene.views():
            return 1.0
        scale = scene.views()[0].transform().m11()
        return scale if scale > 0 else 1.0

    def shape(self) -> QPainterPath:
        """Returns the stroked outline, widened to the on-screen pen width."""
        stroker = QPainterPathStroker()
        stroker.setWidth((self.style.width + 2 * HIT_TOLERANCE_PX) / self._view_scale())
        stroker.setCapStyle(Qt.PenCapStyle.RoundCap)
        return stroker.createStroke(self.path())
