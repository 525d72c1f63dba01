"""
Map Widget Module.

Provides the map panel: the interactive MapGraphicsView plus its toolbar
(search, add-marker toggle, base layer switch, zoom buttons) and the tile
attribution line.
"""

import logging
from typing import List, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QAction, QActionGroup
from PySide6.QtWidgets import QLabel, QToolBar, QVBoxLayout, QWidget

from fjordguide.app.constants import ADDING_HINT_TEXT, DEFAULT_USER_AGENT
from fjordguide.app.map_controller import AddMarkerState
from fjordguide.core.geo import SearchResult
from fjordguide.core.styles import BaseLayerKind, TileLayerConfig
from fjordguide.gui.widgets.map.map_graphics_view import MapGraphicsView
from fjordguide.gui.widgets.search_bar import SearchBar

logger = logging.getLogger(__name__)


class MapWidget(QWidget):
    """
    Map panel hosting the view and its controls.

    The widget holds no map state of its own; it forwards user intent
    through signals and mirrors controller state through its slots.

    Signals:
        add_mode_toggled: The add-marker button was pressed.
        base_layer_requested: Args: (kind: BaseLayerKind)
        search_requested: Args: (query: str)
        result_selected: Args: (result: SearchResult)
    """

    add_mode_toggled = Signal()
    base_layer_requested = Signal(object)
    search_requested = Signal(str)
    result_selected = Signal(object)

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        fetch_tiles: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """
        Initializes the MapWidget.

        Args:
            parent: Parent widget.
            fetch_tiles: Passed to the view; False keeps tiles offline.
            user_agent: User-Agent used for tile requests.
        """
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        # Toolbar
        self.toolbar = QToolBar()
        self.toolbar.setMovable(False)

        self.search_bar = SearchBar()
        self.search_bar.search_requested.connect(self.search_requested)
        self.search_bar.result_selected.connect(self.result_selected)
        self.toolbar.addWidget(self.search_bar)
        self.toolbar.addSeparator()

        self.add_action = QAction("Add Marker", self)
        self.add_action.setCheckable(True)
        self.add_action.setToolTip("Place a custom marker on the map")
        self.add_action.triggered.connect(self._on_add_triggered)
        self.toolbar.addAction(self.add_action)

        self.hint_label = QLabel(ADDING_HINT_TEXT)
        self.hint_label.setStyleSheet(
            "color: #7C3AED; font-weight: bold; padding: 0 6px;"
        )
        self.hint_action = self.toolbar.addWidget(self.hint_label)
        self.hint_action.setVisible(False)
        self.toolbar.addSeparator()

        self.layer_group = QActionGroup(self)
        self.layer_group.setExclusive(True)
        self.standard_action = QAction("Map", self)
        self.satellite_action = QAction("Satellite", self)
        for action, kind in (
            (self.standard_action, BaseLayerKind.STANDARD),
            (self.satellite_action, BaseLayerKind.SATELLITE),
        ):
            action.setCheckable(True)
            action.setData(kind.value)
            self.layer_group.addAction(action)
            self.toolbar.addAction(action)
        self.standard_action.setChecked(True)
        self.layer_group.triggered.connect(self._on_layer_triggered)
        self.toolbar.addSeparator()

        self.zoom_in_action = QAction("+", self)
        self.zoom_in_action.setToolTip("Zoom in")
        self.zoom_out_action = QAction("−", self)
        self.zoom_out_action.setToolTip("Zoom out")
        self.toolbar.addAction(self.zoom_in_action)
        self.toolbar.addAction(self.zoom_out_action)

        layout.addWidget(self.toolbar)

        # Map
        self.view = MapGraphicsView(
            self, fetch_tiles=fetch_tiles, user_agent=user_agent
        )
        self.zoom_in_action.triggered.connect(self.view.zoom_in)
        self.zoom_out_action.triggered.connect(self.view.zoom_out)
        layout.addWidget(self.view, 1)

        # Attribution
        self.attribution_label = QLabel()
        self.attribution_label.setTextFormat(Qt.TextFormat.RichText)
        self.attribution_label.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.attribution_label.setStyleSheet(
            "color: #475569; font-size: 9px; padding: 2px;"
        )
        layout.addWidget(self.attribution_label)

    def _on_add_triggered(self) -> None:
        self.add_mode_toggled.emit()

    def _on_layer_triggered(self, action: QAction) -> None:
        kind = BaseLayerKind(action.data())
        logger.debug(f"Base layer requested: {kind.value}")
        self.base_layer_requested.emit(kind)

    # --- Controller state mirrors -------------------------------------

    def set_add_state(self, state: AddMarkerState) -> None:
        """Updates the add button and hint to match the click-mode."""
        adding = state == AddMarkerState.ADDING
        self.add_action.setChecked(adding)
        self.add_action.setEnabled(state != AddMarkerState.PENDING)
        self.hint_action.setVisible(adding)

    def set_base_layer(self, config: TileLayerConfig) -> None:
        """Checks the matching layer button and shows its attribution."""
        action = (
            self.satellite_action
            if config.kind == BaseLayerKind.SATELLITE
            else self.standard_action
        )
        action.setChecked(True)
        self.attribution_label.setText(config.attribution)

    def set_search_busy(self, busy: bool) -> None:
        self.search_bar.set_busy(busy)

    def set_search_results(self, results: List[SearchResult]) -> None:
        self.search_bar.set_results(results)

    def is_hint_visible(self) -> bool:
        return self.hint_action.isVisible()
