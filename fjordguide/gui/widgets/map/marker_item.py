"""
Map Marker Item Module.

Provides the MarkerItem class for rendering point overlays on the map.
"""

import logging
from typing import Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QColor, QCursor, QPainter, QPainterPath, QPen
from PySide6.QtWidgets import (
    QGraphicsItem,
    QGraphicsObject,
    QStyleOptionGraphicsItem,
    QWidget,
)

from fjordguide.core.geo import Coordinate
from fjordguide.core.map_math import coordinate_to_world
from fjordguide.core.styles import MarkerStyle, PopupContent

logger = logging.getLogger(__name__)

# Height of a pin relative to its width
PIN_HEIGHT_RATIO = 1.4


class MarkerItem(QGraphicsObject):
    """
    Point marker at a geographic coordinate.

    Markers keep a constant on-screen size regardless of zoom. A 'pin' is
    anchored at its tip, a 'dot' at its center. Markers are not movable;
    clicks are resolved by the owning MapGraphicsView.
    """

    def __init__(
        self,
        handle: str,
        coordinate: Coordinate,
        style: MarkerStyle,
        tooltip: str = "",
        popup: Optional[PopupContent] = None,
    ) -> None:
        """
        Initializes a MarkerItem.

        Args:
            handle: Overlay handle issued by the view.
            coordinate: Geographic position.
            style: Visual style.
            tooltip: Hover text.
            popup: Content shown when the marker is clicked.
        """
        super().__init__()
        self.handle = handle
        self.coordinate = coordinate
        self.style = style
        self.popup = popup
        self._color = QColor(style.color)
        self._border = QColor(style.border_color)

        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIgnoresTransformations, True)
        self.setPos(QPointF(*coordinate_to_world(coordinate)))
        self.setZValue(style.z)
        if tooltip:
            self.setToolTip(tooltip)
        if popup is not None:
            self.setCursor(QCursor(Qt.CursorShape.PointingHandCursor))

        logger.debug(f"Created MarkerItem {handle} ({style.shape}) '{tooltip}'")

    @property
    def is_pin(self) -> bool:
        return self.style.shape == "pin"

    def boundingRect(self) -> QRectF:
        """
        Returns the bounding rectangle in device pixels.

        Returns:
            QRectF: Rect with the anchor at (0, 0).
        """
        size = self.style.size
        margin = self.style.border_width
        if self.is_pin:
            height = size * PIN_HEIGHT_RATIO
            return QRectF(
                -size / 2 - margin,
                -height - margin,
                size + 2 * margin,
                height + 2 * margin,
            )
        half = size / 2 + margin
        return QRectF(-half, -half, 2 * half, 2 * half)

    def shape(self) -> QPainterPath:
        path = QPainterPath()
        path.addRect(self.boundingRect())
        return path

    def _pin_path(self) -> QPainterPath:
        """Builds the teardrop outline with its tip at the origin."""
        size = self.style.size
        radius = size / 2
        height = size * PIN_HEIGHT_RATIO
        center = QPointF(0, -height + radius)

        path = QPainterPath()
        path.moveTo(0, 0)
        path.cubicTo(
            QPointF(-radius * 0.35, -height * 0.35),
            QPointF(-radius, center.y() + radius * 0.6),
            QPointF(-radius, center.y()),
        )
        path.arcTo(QRectF(-radius, -height, size, size), 180, -180)
        path.cubicTo(
            QPointF(radius, center.y() + radius * 0.6),
            QPointF(radius * 0.35, -height * 0.35),
            QPointF(0, 0),
        )
        path.closeSubpath()
        return path

    def paint(
        self,
        painter: QPainter,
        option: QStyleOptionGraphicsItem,
        widget: Optional[QWidget] = None,
    ) -> None:
        """
        Paints the marker as a pin or a dot.

        Args:
            painter: The QPainter to use.
            option: Style options.
            widget: The widget being painted on.
        """
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.setPen(QPen(self._border, self.style.border_width))
        painter.setBrush(QBrush(self._color))

        if self.is_pin:
            painter.drawPath(self._pin_path())
            # Inner dot
            radius = self.style.size / 2
            height = self.style.size * PIN_HEIGHT_RATIO
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(self._border))
            inner = radius / 2.5
            painter.drawEllipse(QPointF(0, -height + radius), inner, inner)
        else:
            half = self.style.size / 2
            painter.drawEllipse(QRectF(-half, -half, self.style.size, self.style.size))
