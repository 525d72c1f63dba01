"""
Tile Layer Item Module.

Provides the TileLayerItem class which paints a slippy-map raster layer
behind all overlays. Tiles are requested lazily for the exposed area only
and kept in a bounded in-memory cache.
"""

import logging
import time
from collections import OrderedDict
from typing import Dict, Optional, Tuple

from PySide6.QtCore import QRectF, QUrl
from PySide6.QtGui import QColor, QPainter, QPixmap
from PySide6.QtNetwork import QNetworkAccessManager, QNetworkReply, QNetworkRequest
from PySide6.QtWidgets import (
    QGraphicsItem,
    QGraphicsObject,
    QStyleOptionGraphicsItem,
    QWidget,
)

from fjordguide.app.constants import (
    DEFAULT_USER_AGENT,
    TILE_CACHE_SIZE,
    TILE_RETRY_SECONDS,
)
from fjordguide.core.map_math import (
    TILE_SIZE,
    clamp,
    scale_to_zoom,
    tile_world_rect,
    visible_tiles,
)
from fjordguide.core.styles import TileLayerConfig

logger = logging.getLogger(__name__)

TileKey = Tuple[int, int, int]

PLACEHOLDER_COLOR = QColor("#E8EEF1")
BASE_LAYER_Z = -100


class TileLayerItem(QGraphicsObject):
    """
    Raster base layer covering the whole Web Mercator world.

    The item spans the zoom-0 world square. At paint time the current view
    scale selects the tile zoom level; missing tiles are fetched with
    QNetworkAccessManager and the exposed area is repainted on arrival.
    """

    def __init__(
        self,
        config: TileLayerConfig,
        user_agent: str = DEFAULT_USER_AGENT,
        fetch_tiles: bool = True,
        cache_size: int = TILE_CACHE_SIZE,
    ) -> None:
        """
        Initializes the tile layer.

        Args:
            config: Tile source description.
            user_agent: User-Agent sent with tile requests.
            fetch_tiles: If False, no network requests are made.
            cache_size: Maximum number of decoded tiles kept in memory.
        """
        super().__init__()
        self.config = config
        self.user_agent = user_agent
        self.fetch_tiles = fetch_tiles
        self.cache_size = cache_size

        self._cache: "OrderedDict[TileKey, QPixmap]" = OrderedDict()
        self._pending: Dict[TileKey, QNetworkReply] = {}
        # Failed tile -> monotonic time of the failure
        self._failed: Dict[TileKey, float] = {}
        self._network: Optional[QNetworkAccessManager] = None

        self.setZValue(BASE_LAYER_Z)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemUsesExtendedStyleOption, True)

    @property
    def cached_tile_count(self) -> int:
        return len(self._cache)

    @property
    def pending_tile_count(self) -> int:
        return len(self._pending)

    def boundingRect(self) -> QRectF:
        return QRectF(0, 0, TILE_SIZE, TILE_SIZE)

    def tile_zoom_for_scale(self, scale: float) -> int:
        """Returns the integer tile zoom level to use at a view scale."""
        if scale <= 0:
            return 0
        return int(clamp(round(scale_to_zoom(scale)), 0, self.config.max_zoom))

    def paint(
        self,
        painter: QPainter,
        option: QStyleOptionGraphicsItem,
        widget: Optional[QWidget] = None,
    ) -> None:
        """
        Paints cached tiles for the exposed area and requests missing ones.

        Args:
            painter: The QPainter to use.
            option: Style options (exposedRect is honoured).
            widget: The widget being painted on.
        """
        exposed = option.exposedRect.intersected(self.boundingRect())
        if exposed.isEmpty():
            return

        zoom = self.tile_zoom_for_scale(painter.worldTransform().m11())
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)

        for x, y in visible_tiles(
            zoom, exposed.left(), exposed.top(), exposed.right(), exposed.bottom()
        ):
            left, top, size = tile_world_rect(zoom, x, y)
            target = QRectF(left, top, size, size)
            pixmap = self._cached(zoom, x, y)
            if pixmap is not None:
                painter.drawPixmap(target, pixmap, QRectF(pixmap.rect()))
            else:
                painter.fillRect(target, PLACEHOLDER_COLOR)
                self._request(zoom, x, y)

    def _cached(self, zoom: int, x: int, y: int) -> Optional[QPixmap]:
        key = (zoom, x, y)
        pixmap = self._cache.get(key)
        if pixmap is not None:
            self._cache.move_to_end(key)
        return pixmap

    def _store(self, key: TileKey, pixmap: QPixmap) -> None:
        self._cache[key] = pixmap
        self._cache.move_to_end(key)
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)

    def _mark_failed(self, key: TileKey) -> None:
        self._failed[key] = time.monotonic()

    def _recently_failed(self, key: TileKey) -> bool:
        """True while a failed tile is still inside its retry delay."""
        failed_at = self._failed.get(key)
        if failed_at is None:
            return False
        if time.monotonic() - failed_at < TILE_RETRY_SECONDS:
            return True
        del self._failed[key]
        return False

    def forget_failures(self) -> None:
        """Lets every previously failed tile be requested again."""
        self._failed.clear()

    def _request(self, zoom: int, x: int, y: int) -> None:
        """Starts an asynchronous download of one tile."""
        key = (zoom, x, y)
        if not self.fetch_tiles or key in self._pending or self._recently_failed(key):
            return

        if self._network is None:
            self._network = QNetworkAccessManager(self)

        url = self.config.tile_url(zoom, x, y)
        request = QNetworkRequest(QUrl(url))
        request.setRawHeader(b"User-Agent", self.user_agent.encode("utf-8"))
        reply = self._network.get(request)
        self._pending[key] = reply
        reply.finished.connect(lambda k=key, r=reply: self._on_tile_finished(k, r))

    def _on_tile_finished(self, key: TileKey, reply: QNetworkReply) -> None:
        """Decodes a finished tile download and repaints its area."""
        self._pending.pop(key, None)
        try:
            if reply.error() != QNetworkReply.NetworkError.NoError:
                if reply.error() != QNetworkReply.NetworkError.OperationCanceledError:
                    logger.debug(f"Tile {key} failed: {reply.errorString()}")
                    self._mark_failed(key)
                return

            pixmap = QPixmap()
            if not pixmap.loadFromData(reply.readAll()):
                logger.debug(f"Tile {key} could not be decoded")
                self._mark_failed(key)
                return

            self._store(key, pixmap)
            left, top, size = tile_world_rect(*key)
            self.update(QRectF(left, top, size, size))
        finally:
            reply.deleteLater()

    def abort_pending(self) -> None:
        """Cancels all in-flight tile requests."""
        for reply in list(self._pending.values()):
            reply.abort()
        self._pending.clear()
