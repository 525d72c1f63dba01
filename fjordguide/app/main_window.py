"""
MainWindow Class.

The application window: the map in the center, the itinerary in a dock,
and the wiring between widgets, the map controller and the services.
"""

from typing import List, Optional

from PySide6.QtCore import QByteArray, Qt, Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QDockWidget, QLabel, QMainWindow

from fjordguide.app.constants import (
    DEFAULT_WINDOW_HEIGHT,
    DEFAULT_WINDOW_WIDTH,
    DOCK_OBJ_ITINERARY,
    DOCK_TITLE_ITINERARY,
    SETTINGS_GEOMETRY_KEY,
    STATUS_SEARCH_FAILED,
    STATUS_TRACK_MISSING,
    TRACK_RESOURCE,
    WINDOW_SETTINGS_APP,
    WINDOW_SETTINGS_KEY,
    WINDOW_TITLE,
)
from fjordguide.app.map_controller import MapViewController
from fjordguide.core.activity import Activity
from fjordguide.core.exceptions import ValidationError
from fjordguide.core.geo import Coordinate
from fjordguide.core.logging_config import get_logger
from fjordguide.gui.dialogs.poi_dialog import PoiDialog
from fjordguide.gui.widgets.itinerary_panel import ItineraryPanel
from fjordguide.gui.widgets.map_widget import MapWidget
from fjordguide.services.geocoding_service import GeocodingClient
from fjordguide.services.itinerary_loader import load_itinerary
from fjordguide.services.location_service import LocationService
from fjordguide.services.poi_store import PoiStore
from fjordguide.services.track_parser import read_track_resource

logger = get_logger(__name__)


class MainWindow(QMainWindow):
    """
    The main application window.

    Owns the map controller and connects it to the map widget, the POI
    dialog, the itinerary panel and the location service. Map logic lives
    in the controller; the window only routes signals.
    """

    def __init__(
        self,
        poi_store: Optional[PoiStore] = None,
        geocoder: Optional[GeocodingClient] = None,
        activities: Optional[List[Activity]] = None,
        track_text: Optional[str] = None,
        location_service: Optional[LocationService] = None,
        fetch_tiles: bool = True,
        search_in_thread: bool = True,
    ) -> None:
        """
        Initializes the window and starts the map.

        Args:
            poi_store: POI repository. Defaults to one backed by QSettings.
            geocoder: Search client. Defaults to the configured geocoder.
            activities: Itinerary. Defaults to the bundled itinerary.
            track_text: GPX text. Defaults to the bundled railway track.
            location_service: Source of the user's location, if any.
            fetch_tiles: Whether base layer tiles are downloaded.
            search_in_thread: Run searches on a worker thread.
        """
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.resize(DEFAULT_WINDOW_WIDTH, DEFAULT_WINDOW_HEIGHT)

        self.poi_store = poi_store if poi_store is not None else PoiStore(parent=self)
        self.geocoder = geocoder if geocoder is not None else GeocodingClient()
        if activities is None:
            activities = load_itinerary()
        if track_text is None:
            track_text = read_track_resource(TRACK_RESOURCE)
        self.location_service = location_service
        self._poi_dialog: Optional[PoiDialog] = None
        self._closed = False

        # Widgets
        self.map_widget = MapWidget(self, fetch_tiles=fetch_tiles)
        self.setCentralWidget(self.map_widget)

        self.itinerary_panel = ItineraryPanel()
        self.itinerary_dock = QDockWidget(DOCK_TITLE_ITINERARY, self)
        self.itinerary_dock.setObjectName(DOCK_OBJ_ITINERARY)
        self.itinerary_dock.setWidget(self.itinerary_panel)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, self.itinerary_dock)

        self.marker_count_label = QLabel()
        self.statusBar().addPermanentWidget(self.marker_count_label)

        # Controller
        self.controller = MapViewController(
            self.map_widget.view,
            self.poi_store,
            geocoder=self.geocoder,
            track_text=track_text,
            search_in_thread=search_in_thread,
            parent=self,
        )
        self._connect_signals()
        self.controller.initialize()

        if not self.controller.track:
            self.statusBar().showMessage(STATUS_TRACK_MISSING, 5000)

        self.itinerary_panel.set_activities(activities)
        self.controller.set_activities(activities)

        if self.location_service is not None:
            self.location_service.location_changed.connect(
                self.controller.set_user_location
            )
            self.location_service.start()

        self._restore_geometry()
        logger.info("MainWindow ready")

    def _connect_signals(self) -> None:
        mw = self.map_widget
        ctrl = self.controller

        mw.add_mode_toggled.connect(ctrl.toggle_adding_mode)
        mw.base_layer_requested.connect(ctrl.set_base_layer)
        mw.search_requested.connect(ctrl.search)
        mw.result_selected.connect(ctrl.select_result)

        ctrl.state_changed.connect(mw.set_add_state)
        ctrl.base_layer_changed.connect(mw.set_base_layer)
        ctrl.searching_changed.connect(mw.set_search_busy)
        ctrl.search_results_changed.connect(mw.set_search_results)
        ctrl.search_failed.connect(self._on_search_failed)
        ctrl.pending_spot_changed.connect(self._on_pending_spot_changed)
        ctrl.markers_rendered.connect(self._on_markers_rendered)

        self.itinerary_panel.focus_requested.connect(ctrl.focus)

    # --- POI creation -------------------------------------------------

    @Slot(object)
    def _on_pending_spot_changed(self, spot: Optional[Coordinate]) -> None:
        if spot is None:
            dialog = self._poi_dialog
            self._poi_dialog = None
            if dialog is not None and dialog.isVisible():
                dialog.accept()
            return

        dialog = PoiDialog(spot, self)
        dialog.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)
        dialog.save_requested.connect(self._on_poi_save_requested)
        dialog.rejected.connect(self.controller.cancel_pending)
        self._poi_dialog = dialog
        dialog.open()

    @Slot(str, str)
    def _on_poi_save_requested(self, title: str, description: str) -> None:
        dialog = self._poi_dialog
        try:
            poi = self.controller.confirm_pending(title, description)
        except ValidationError as e:
            logger.info(f"POI not saved: {e}")
            if dialog is not None:
                dialog.show_error(str(e))
            return
        self.statusBar().showMessage(f"Saved marker '{poi.title}'", 3000)

    # --- Status -------------------------------------------------------

    @Slot(str)
    def _on_search_failed(self, message: str) -> None:
        self.statusBar().showMessage(f"{STATUS_SEARCH_FAILED}{message}", 5000)

    @Slot(int)
    def _on_markers_rendered(self, count: int) -> None:
        self.marker_count_label.setText(f"{count} markers")

    # --- Persistence --------------------------------------------------

    def _restore_geometry(self) -> None:
        from PySide6.QtCore import QSettings

        settings = QSettings(WINDOW_SETTINGS_KEY, WINDOW_SETTINGS_APP)
        geometry = settings.value(SETTINGS_GEOMETRY_KEY)
        if isinstance(geometry, QByteArray) and not geometry.isEmpty():
            self.restoreGeometry(geometry)

    def _save_geometry(self) -> None:
        from PySide6.QtCore import QSettings

        settings = QSettings(WINDOW_SETTINGS_KEY, WINDOW_SETTINGS_APP)
        settings.setValue(SETTINGS_GEOMETRY_KEY, self.saveGeometry())
        settings.sync()

    def closeEvent(self, event: QCloseEvent) -> None:
        """Releases the map and background work before closing."""
        if not self._closed:
            self._closed = True
            logger.info("Closing main window")
            self._save_geometry()
            if self.location_service is not None:
                self.location_service.stop()
            self.controller.dispose()
            self.map_widget.view.shutdown()
        event.accept()
