"""
Map View Controller Module.

Owns the map's interactive state and keeps the rendered overlays in sync
with the itinerary, the POI collection and the user's location. The
controller talks to the map only through the MapSurface interface, so it
can drive the real QGraphicsView or any test double.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from PySide6.QtCore import QObject, QThread, Signal, Slot

from fjordguide.app.constants import (
    DEFAULT_BASE_LAYER,
    DELETE_POI_LABEL,
    END_MARKER_PREFIX,
    FOCUS_ANIMATION_MS,
    FOCUS_ZOOM,
    INITIAL_CENTER,
    INITIAL_ZOOM,
    ITINERARY_END_STYLE,
    ITINERARY_START_STYLE,
    LEG_STYLE,
    NO_DESCRIPTION_TEXT,
    POI_STYLE,
    SEARCH_ANIMATION_MS,
    SEARCH_RESULT_STYLE,
    TILE_LAYERS,
    TRACK_POPUP_TITLE,
    TRACK_STYLE,
    USER_LOCATION_STYLE,
)
from fjordguide.core.activity import Activity
from fjordguide.core.geo import Coordinate, SearchResult
from fjordguide.core.logging_config import get_logger
from fjordguide.core.poi import PointOfInterest
from fjordguide.core.protocols import MapSurface
from fjordguide.core.styles import BaseLayerKind, PopupContent
from fjordguide.services.geocoding_service import GeocodingClient, GeocodingWorker
from fjordguide.services.poi_store import PoiStore
from fjordguide.services.track_parser import load_track

logger = get_logger(__name__)


class AddMarkerState(Enum):
    """Click-mode of the map."""

    IDLE = "idle"
    ADDING = "adding"
    PENDING = "pending"


@dataclass
class MapLayerState:
    """
    Handles of everything the controller has put on the surface.

    ``dynamic`` holds the overlays owned by reconciliation; the track and
    the search marker live outside it.
    """

    dynamic: List[str] = field(default_factory=list)
    dynamic_marker_count: int = 0
    track: Optional[str] = None
    search_marker: Optional[str] = None


class MapViewController(QObject):
    """
    Mediates between the map surface, the POI store and the geocoder.

    Signals:
        state_changed: Click-mode changed. Args: (state: AddMarkerState)
        pending_spot_changed: Pending spot set or cleared.
                              Args: (spot: Optional[Coordinate])
        search_results_changed: Args: (results: List[SearchResult])
        searching_changed: Args: (busy: bool)
        search_failed: Args: (message: str)
        base_layer_changed: Args: (config: TileLayerConfig)
        markers_rendered: Emitted after reconciliation.
                          Args: (rendered_marker_count: int)
    """

    state_changed = Signal(object)
    pending_spot_changed = Signal(object)
    search_results_changed = Signal(list)
    searching_changed = Signal(bool)
    search_failed = Signal(str)
    base_layer_changed = Signal(object)
    markers_rendered = Signal(int)

    # Internal: dispatches a search to the worker thread (token, query)
    _search_requested = Signal(int, str)

    def __init__(
        self,
        surface: MapSurface,
        poi_store: PoiStore,
        geocoder: Optional[GeocodingClient] = None,
        track_text: Optional[str] = None,
        search_in_thread: bool = True,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        Initializes the controller. Nothing is drawn until initialize().

        Args:
            surface: The map to drive.
            poi_store: Store of user-created POIs.
            geocoder: Search client. Search is disabled when None.
            track_text: GPX text of the route overlay, if any.
            search_in_thread: Run searches on a worker QThread. When False
                searches run synchronously on the caller's thread.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self.surface = surface
        self.poi_store = poi_store
        self.geocoder = geocoder
        self.track_text = track_text
        self.search_in_thread = search_in_thread

        self._state = AddMarkerState.IDLE
        self._pending_spot: Optional[Coordinate] = None
        self._activities: List[Activity] = []
        self._user_location: Optional[Coordinate] = None
        self._track: List[Coordinate] = []
        self._layers = MapLayerState()
        self._base_layer_kind = DEFAULT_BASE_LAYER

        self._search_token = 0
        self._searching = False
        self._search_results: List[SearchResult] = []
        self._search_worker: Optional[GeocodingWorker] = None
        self._search_thread: Optional[QThread] = None

        self._initialized = False
        self._connected = False

    # --- Properties ---------------------------------------------------

    @property
    def state(self) -> AddMarkerState:
        return self._state

    @property
    def pending_spot(self) -> Optional[Coordinate]:
        return self._pending_spot

    @property
    def activities(self) -> List[Activity]:
        return list(self._activities)

    @property
    def user_location(self) -> Optional[Coordinate]:
        return self._user_location

    @property
    def track(self) -> List[Coordinate]:
        return list(self._track)

    @property
    def base_layer_kind(self) -> BaseLayerKind:
        return self._base_layer_kind

    @property
    def search_results(self) -> List[SearchResult]:
        return list(self._search_results)

    @property
    def is_searching(self) -> bool:
        return self._searching

    @property
    def search_marker_handle(self) -> Optional[str]:
        return self._layers.search_marker

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # --- Lifecycle ----------------------------------------------------

    def initialize(self) -> None:
        """
        Sets up the map: camera, base layer, track, listeners and markers.

        Calling it twice is a no-op. If any step fails, everything set up
        so far is torn down before the error propagates.
        """
        if self._initialized:
            return
        self._initialized = True
        logger.info("Initializing map view")

        try:
            self.surface.set_view(INITIAL_CENTER, INITIAL_ZOOM)
            self.set_base_layer(self._base_layer_kind)

            self._connected = True
            self.surface.map_clicked.connect(self._on_map_clicked)
            self.poi_store.pois_changed.connect(self._on_pois_changed)

            self._render_track()
            self._start_search_worker()
            self.reconcile()
        except Exception:
            logger.exception("Map initialization failed, tearing down")
            self.dispose()
            raise

    def dispose(self) -> None:
        """
        Releases everything the controller created. Safe to call repeatedly
        and after a partially failed initialize().
        """
        self._stop_search_worker()

        if self._connected:
            self._connected = False
            try:
                self.surface.map_clicked.disconnect(self._on_map_clicked)
            except (RuntimeError, TypeError) as e:
                logger.debug(f"map_clicked already disconnected: {e}")
            try:
                self.poi_store.pois_changed.disconnect(self._on_pois_changed)
            except (RuntimeError, TypeError) as e:
                logger.debug(f"pois_changed already disconnected: {e}")

        if self._initialized:
            self.surface.close_popup()
            self._clear_dynamic_layers()
            if self._layers.track is not None:
                self.surface.remove_overlay(self._layers.track)
            if self._layers.search_marker is not None:
                self.surface.remove_overlay(self._layers.search_marker)
            self.surface.set_base_layer(None)
            self.surface.set_adding_cursor(False)
            logger.info("Map view disposed")

        self._layers = MapLayerState()
        self._state = AddMarkerState.IDLE
        self._pending_spot = None
        self._searching = False
        self._search_results = []
        self._initialized = False

    # --- Add-marker state machine --------------------------------------

    def _set_state(self, state: AddMarkerState) -> None:
        if state == self._state:
            return
        logger.debug(f"Add-marker state {self._state.value} -> {state.value}")
        self._state = state
        self.state_changed.emit(state)

    def toggle_adding_mode(self) -> None:
        """Enters or leaves marker placement. Ignored while a spot is pending."""
        if self._state == AddMarkerState.PENDING:
            logger.debug("Adding mode toggle ignored while a spot is pending")
            return
        entering = self._state == AddMarkerState.IDLE
        self.surface.set_adding_cursor(entering)
        self._set_state(AddMarkerState.ADDING if entering else AddMarkerState.IDLE)

    @Slot(object)
    def _on_map_clicked(self, coordinate: Coordinate) -> None:
        if self._state != AddMarkerState.ADDING:
            return
        self._pending_spot = coordinate
        self.surface.set_adding_cursor(False)
        self._set_state(AddMarkerState.PENDING)
        self.pending_spot_changed.emit(coordinate)

    def confirm_pending(self, title: str, description: str = "") -> PointOfInterest:
        """
        Saves the pending spot as a new POI.

        Args:
            title: Required title.
            description: Optional note.

        Returns:
            PointOfInterest: The created POI.

        Raises:
            RuntimeError: If no spot is pending.
            ValidationError: If the title is blank. The spot stays pending.
        """
        if self._state != AddMarkerState.PENDING or self._pending_spot is None:
            raise RuntimeError("No pending spot to confirm")

        poi = self.poi_store.create(self._pending_spot, title, description)
        self._clear_pending()
        return poi

    def cancel_pending(self) -> None:
        """Discards the pending spot without touching the store."""
        if self._state != AddMarkerState.PENDING:
            return
        logger.debug("Pending spot cancelled")
        self._clear_pending()

    def _clear_pending(self) -> None:
        self._pending_spot = None
        self._set_state(AddMarkerState.IDLE)
        self.pending_spot_changed.emit(None)

    def delete_poi(self, poi_id: str) -> None:
        """Deletes a POI and closes the detail popup."""
        self.surface.close_popup()
        self.poi_store.delete(poi_id)

    # --- Host inputs --------------------------------------------------

    @Slot(list)
    def set_activities(self, activities: Sequence[Activity]) -> None:
        self._activities = list(activities)
        self.reconcile()

    @Slot(object)
    def set_user_location(self, location: Optional[Coordinate]) -> None:
        self._user_location = location
        self.reconcile()

    @Slot(object)
    def focus(self, coordinate: Coordinate) -> None:
        """Flies the camera to a coordinate at street-level zoom."""
        logger.debug(
            f"Focusing on ({coordinate.latitude:.5f}, {coordinate.longitude:.5f})"
        )
        self.surface.set_view(
            coordinate, FOCUS_ZOOM, animate=True, duration_ms=FOCUS_ANIMATION_MS
        )

    # --- Reconciliation -----------------------------------------------

    @Slot(list)
    def _on_pois_changed(self, _pois: list) -> None:
        self.reconcile()

    def _clear_dynamic_layers(self) -> None:
        for handle in self._layers.dynamic:
            self.surface.remove_overlay(handle)
        self._layers.dynamic = []
        self._layers.dynamic_marker_count = 0

    def _add_dynamic_marker(self, coordinate, style, tooltip="", popup=None) -> None:
        handle = self.surface.add_marker(coordinate, style, tooltip, popup)
        self._layers.dynamic.append(handle)
        self._layers.dynamic_marker_count += 1

    def reconcile(self) -> None:
        """
        Rebuilds every dynamic overlay from the current data.

        All previous overlays are removed first, then itinerary markers and
        legs, POI markers and the user-location dot are added in that order.
        """
        if not self._initialized:
            return

        self._clear_dynamic_layers()

        for activity in self._activities:
            self._add_dynamic_marker(
                activity.start,
                ITINERARY_START_STYLE,
                activity.title,
                PopupContent(title=activity.title, body=activity.location_name),
            )
            if activity.end is not None:
                self._add_dynamic_marker(
                    activity.end,
                    ITINERARY_END_STYLE,
                    f"{END_MARKER_PREFIX}{activity.title}",
                    PopupContent(title=f"{END_MARKER_PREFIX}{activity.title}"),
                )
                leg = self.surface.add_polyline(
                    [activity.start, activity.end], LEG_STYLE
                )
                self._layers.dynamic.append(leg)

        for poi in self.poi_store.list():
            self._add_dynamic_marker(
                poi.coordinate, POI_STYLE, poi.title, self._poi_popup(poi)
            )

        if self._user_location is not None:
            self._add_dynamic_marker(self._user_location, USER_LOCATION_STYLE)

        count = self.rendered_marker_count()
        logger.debug(f"Reconciled map: {count} marker(s)")
        self.markers_rendered.emit(count)

    def _poi_popup(self, poi: PointOfInterest) -> PopupContent:
        poi_id = poi.id
        return PopupContent(
            title=poi.title,
            body=poi.description or NO_DESCRIPTION_TEXT,
            action_label=DELETE_POI_LABEL,
            on_action=lambda: self.delete_poi(poi_id),
        )

    def rendered_marker_count(self) -> int:
        """Markers placed by reconciliation, plus one for a rendered track."""
        return self._layers.dynamic_marker_count + (
            1 if self._layers.track is not None else 0
        )

    def _render_track(self) -> None:
        self._track = load_track(self.track_text)
        if not self._track:
            return
        self._layers.track = self.surface.add_polyline(
            self._track, TRACK_STYLE, PopupContent(title=TRACK_POPUP_TITLE)
        )
        logger.info(f"Route track rendered with {len(self._track)} points")

    # --- Base layer ---------------------------------------------------

    def set_base_layer(self, kind: BaseLayerKind) -> None:
        """Switches the background map. Exactly one base layer is attached."""
        config = TILE_LAYERS[kind]
        self._base_layer_kind = kind
        self.surface.set_base_layer(config)
        self.base_layer_changed.emit(config)

    # --- Search -------------------------------------------------------

    def _start_search_worker(self) -> None:
        if self.geocoder is None:
            logger.info("No geocoder configured, search disabled")
            return

        self._search_worker = GeocodingWorker(self.geocoder)
        self._search_worker.results_ready.connect(self._on_search_results)
        self._search_worker.search_failed.connect(self._on_search_failed)

        if self.search_in_thread:
            self._search_thread = QThread()
            self._search_worker.moveToThread(self._search_thread)
            self._search_requested.connect(self._search_worker.run_search)
            self._search_thread.start()
        else:
            self._search_requested.connect(self._search_worker.run_search)

    def _stop_search_worker(self) -> None:
        if self._search_worker is not None:
            try:
                self._search_requested.disconnect(self._search_worker.run_search)
            except (RuntimeError, TypeError) as e:
                logger.debug(f"Search worker already disconnected: {e}")
        if self._search_thread is not None:
            self._search_thread.quit()
            if not self._search_thread.wait(2000):
                logger.warning("Search thread did not quit in time. Terminating...")
                self._search_thread.terminate()
                self._search_thread.wait()
            self._search_thread = None
        self._search_worker = None

    def search(self, query: str) -> Optional[int]:
        """
        Starts a search. Results arrive through search_results_changed.

        Args:
            query: Free text. Blank queries are ignored.

        Returns:
            Optional[int]: The request token, or None if nothing was sent.
        """
        if not query or not query.strip():
            return None
        if self._search_worker is None:
            logger.warning("Search requested but no geocoder is running")
            return None

        self._search_token += 1
        token = self._search_token
        self._search_results = []
        self.search_results_changed.emit([])
        self._set_searching(True)
        logger.debug(f"Search #{token}: {query!r}")
        self._search_requested.emit(token, query.strip())
        return token

    def _set_searching(self, busy: bool) -> None:
        if busy != self._searching:
            self._searching = busy
            self.searching_changed.emit(busy)

    @Slot(int, list)
    def _on_search_results(self, token: int, results: list) -> None:
        if token != self._search_token:
            logger.debug(f"Discarding stale results of search #{token}")
            return
        self._search_results = list(results)
        self._set_searching(False)
        self.search_results_changed.emit(self.search_results)

    @Slot(int, str)
    def _on_search_failed(self, token: int, message: str) -> None:
        if token != self._search_token:
            return
        self.search_failed.emit(message)

    def select_result(self, result: SearchResult) -> None:
        """
        Shows a search result on the map.

        The previous search marker is replaced, the camera flies to the
        result and its popup opens. The result list is cleared.
        """
        if self._layers.search_marker is not None:
            self.surface.remove_overlay(self._layers.search_marker)
            self._layers.search_marker = None

        self.surface.set_view(
            result.coordinate,
            FOCUS_ZOOM,
            animate=True,
            duration_ms=SEARCH_ANIMATION_MS,
        )
        handle = self.surface.add_marker(
            result.coordinate,
            SEARCH_RESULT_STYLE,
            result.short_name,
            PopupContent(title=result.short_name),
        )
        self._layers.search_marker = handle
        self.surface.open_popup(handle)

        self._search_results = []
        self.search_results_changed.emit([])
        logger.info(f"Selected search result '{result.short_name}'")
