"""
Tests for the interactive map view: camera, base layers, overlays, popups
and click dispatch.
"""

from unittest.mock import MagicMock

import pytest
from PySide6.QtCore import QPoint

from fjordguide.app.constants import (
    ITINERARY_START_STYLE,
    MAX_ZOOM,
    MIN_ZOOM,
    SEARCH_RESULT_STYLE,
    TILE_LAYERS,
    TRACK_STYLE,
)
from fjordguide.core.geo import Coordinate
from fjordguide.core.styles import BaseLayerKind, PopupContent
from fjordguide.gui.widgets.map import MapGraphicsView, MarkerItem, PolylineItem
from fjordguide.gui.widgets.map.tile_layer_item import BASE_LAYER_Z, TileLayerItem

FLAM = Coordinate(60.8631, 7.1136)
MYRDAL = Coordinate(60.7353, 7.1226)


@pytest.fixture
def map_view(qtbot):
    """Provides a shown MapGraphicsView that never touches the network."""
    view = MapGraphicsView(fetch_tiles=False)
    view.resize(800, 600)
    qtbot.addWidget(view)
    view.show()
    qtbot.waitExposed(view)
    return view


def center_of(view):
    return view.viewport().rect().center()


# --- Camera -------------------------------------------------------------


def test_set_view_immediate(map_view):
    map_view.set_view(FLAM, 13)
    assert map_view.zoom_level() == 13
    center = map_view.camera_center()
    assert center.latitude == pytest.approx(FLAM.latitude, abs=1e-6)
    assert center.longitude == pytest.approx(FLAM.longitude, abs=1e-6)
    assert map_view.transform().m11() == pytest.approx(2**13)


def test_set_view_clamps_zoom(map_view):
    map_view.set_view(FLAM, 40)
    assert map_view.zoom_level() == MAX_ZOOM
    map_view.set_view(FLAM, 0)
    assert map_view.zoom_level() == MIN_ZOOM


def test_animated_set_view_reaches_target(qtbot, map_view):
    map_view.set_view(FLAM, 13)
    map_view.set_view(MYRDAL, 16, animate=True, duration_ms=50)
    assert map_view.is_animating()
    qtbot.waitUntil(lambda: not map_view.is_animating(), timeout=2000)
    assert map_view.zoom_level() == pytest.approx(16)
    assert map_view.camera_center().latitude == pytest.approx(
        MYRDAL.latitude, abs=1e-6
    )


def test_new_view_request_cancels_running_animation(qtbot, map_view):
    map_view.set_view(FLAM, 13)
    map_view.set_view(MYRDAL, 16, animate=True, duration_ms=5000)
    map_view.set_view(FLAM, 14)
    assert not map_view.is_animating()
    assert map_view.zoom_level() == 14


def test_zoom_buttons_step_one_level(map_view):
    map_view.set_view(FLAM, 13)
    map_view.zoom_in()
    assert map_view.zoom_level() == 14
    map_view.zoom_out()
    map_view.zoom_out()
    assert map_view.zoom_level() == 12


def test_zoom_changed_signal(qtbot, map_view):
    with qtbot.waitSignal(map_view.zoom_changed) as blocker:
        map_view.set_view(FLAM, 10)
    assert blocker.args == [10]


# --- Base layer ---------------------------------------------------------


def test_exactly_one_base_layer_attached(map_view):
    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.STANDARD])
    assert map_view.attached_base_layer_count() == 1

    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.SATELLITE])
    assert map_view.attached_base_layer_count() == 1
    assert map_view.base_layer().kind == BaseLayerKind.SATELLITE

    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.STANDARD])
    assert map_view.attached_base_layer_count() == 1
    assert map_view.base_layer().kind == BaseLayerKind.STANDARD


def test_base_layer_sits_below_overlays(map_view):
    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.STANDARD])
    layer = next(
        item for item in map_view.scene.items() if isinstance(item, TileLayerItem)
    )
    assert layer.zValue() == BASE_LAYER_Z
    assert layer.zValue() < TRACK_STYLE.z


def test_switching_back_reuses_cached_layer(map_view):
    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.STANDARD])
    first = map_view._active_tile_layer
    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.SATELLITE])
    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.STANDARD])
    assert map_view._active_tile_layer is first


def test_reattached_layer_retries_failed_tiles(map_view):
    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.STANDARD])
    standard = map_view._active_tile_layer
    standard._mark_failed((13, 4258, 2335))

    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.SATELLITE])
    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.STANDARD])
    assert map_view._active_tile_layer is standard
    assert not standard._recently_failed((13, 4258, 2335))


def test_detach_base_layer(map_view):
    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.STANDARD])
    map_view.set_base_layer(None)
    assert map_view.attached_base_layer_count() == 0
    assert map_view.base_layer() is None


def test_offline_layer_queues_no_requests(qtbot, map_view):
    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.STANDARD])
    map_view.set_view(FLAM, 13)
    map_view.viewport().repaint()
    assert map_view._active_tile_layer.pending_tile_count == 0


# --- Overlays -----------------------------------------------------------


def test_add_and_remove_overlays(map_view):
    marker = map_view.add_marker(FLAM, ITINERARY_START_STYLE, "Flåm")
    line = map_view.add_polyline([FLAM, MYRDAL], TRACK_STYLE)

    assert marker != line
    assert isinstance(map_view.overlay(marker), MarkerItem)
    assert isinstance(map_view.overlay(line), PolylineItem)
    assert map_view.marker_count() == 1
    assert map_view.polyline_count() == 1

    map_view.remove_overlay(marker)
    assert map_view.overlay(marker) is None
    assert map_view.overlay_count() == 1


def test_remove_unknown_overlay_is_ignored(map_view):
    map_view.remove_overlay("marker-999")
    assert map_view.overlay_count() == 0


def test_handles_are_never_reused(map_view):
    first = map_view.add_marker(FLAM, ITINERARY_START_STYLE)
    map_view.remove_overlay(first)
    second = map_view.add_marker(FLAM, ITINERARY_START_STYLE)
    assert first != second


def test_marker_keeps_constant_screen_size(map_view):
    handle = map_view.add_marker(FLAM, ITINERARY_START_STYLE)
    item = map_view.overlay(handle)
    assert item.flags() & MarkerItem.GraphicsItemFlag.ItemIgnoresTransformations


def test_polyline_pen_is_cosmetic(map_view):
    item = map_view.overlay(map_view.add_polyline([FLAM, MYRDAL], TRACK_STYLE))
    assert item.pen().isCosmetic()
    assert item.pen().color().alphaF() == pytest.approx(TRACK_STYLE.opacity, abs=0.01)


# --- Popup --------------------------------------------------------------


def test_open_and_close_popup(qtbot, map_view):
    map_view.set_view(FLAM, 13)
    handle = map_view.add_marker(
        FLAM, ITINERARY_START_STYLE, popup=PopupContent("Flåm", "Station")
    )
    with qtbot.waitSignal(map_view.popup_opened):
        map_view.open_popup(handle)
    assert map_view.popup_handle() == handle
    assert map_view.popup.title_label.text() == "Flåm"
    assert map_view.popup.body_label.text() == "Station"

    map_view.close_popup()
    assert map_view.popup_handle() is None


def test_popup_action_invokes_callback(map_view):
    callback = MagicMock()
    handle = map_view.add_marker(
        FLAM,
        ITINERARY_START_STYLE,
        popup=PopupContent("Cafe", action_label="Delete marker", on_action=callback),
    )
    map_view.open_popup(handle)
    assert map_view.popup.action_button.isVisible()
    map_view.popup.action_button.click()
    callback.assert_called_once()


def test_removing_overlay_closes_its_popup(map_view):
    handle = map_view.add_marker(
        FLAM, ITINERARY_START_STYLE, popup=PopupContent("Flåm")
    )
    map_view.open_popup(handle)
    map_view.remove_overlay(handle)
    assert map_view.popup_handle() is None


def test_overlay_without_popup_does_not_open(map_view):
    handle = map_view.add_marker(FLAM, SEARCH_RESULT_STYLE)
    map_view.open_popup(handle)
    assert map_view.popup_handle() is None


# --- Clicks -------------------------------------------------------------


def test_click_on_empty_map_emits_coordinate(qtbot, map_view):
    map_view.set_view(FLAM, 13)
    with qtbot.waitSignal(map_view.map_clicked) as blocker:
        map_view.handle_click(center_of(map_view))
    clicked = blocker.args[0]
    assert clicked.latitude == pytest.approx(FLAM.latitude, abs=1e-3)
    assert clicked.longitude == pytest.approx(FLAM.longitude, abs=1e-3)


def test_click_on_marker_opens_popup(qtbot, map_view):
    map_view.set_view(FLAM, 13)
    handle = map_view.add_marker(
        FLAM, SEARCH_RESULT_STYLE, popup=PopupContent("Here")
    )
    with qtbot.assertNotEmitted(map_view.map_clicked):
        with qtbot.waitSignal(map_view.marker_clicked) as blocker:
            map_view.handle_click(center_of(map_view))
    assert blocker.args == [handle]
    assert map_view.popup_handle() == handle


def test_click_on_marker_in_adding_mode_places_spot(qtbot, map_view):
    map_view.set_view(FLAM, 13)
    map_view.add_marker(FLAM, SEARCH_RESULT_STYLE, popup=PopupContent("Here"))
    map_view.set_adding_cursor(True)
    with qtbot.waitSignal(map_view.map_clicked):
        map_view.handle_click(center_of(map_view))
    assert map_view.popup_handle() is None


def test_click_on_map_closes_popup(map_view):
    map_view.set_view(FLAM, 13)
    handle = map_view.add_marker(
        MYRDAL, ITINERARY_START_STYLE, popup=PopupContent("Myrdal")
    )
    map_view.open_popup(handle)
    map_view.handle_click(center_of(map_view))
    assert map_view.popup_handle() is None


def test_mouse_click_dispatches(qtbot, map_view):
    from PySide6.QtCore import Qt

    map_view.set_view(FLAM, 13)
    with qtbot.waitSignal(map_view.map_clicked):
        qtbot.mouseClick(
            map_view.viewport(), Qt.MouseButton.LeftButton, pos=QPoint(400, 300)
        )


def test_adding_cursor_toggle(map_view):
    from PySide6.QtCore import Qt
    from PySide6.QtWidgets import QGraphicsView

    map_view.set_adding_cursor(True)
    assert map_view.adding_cursor_enabled()
    assert map_view.viewport().cursor().shape() == Qt.CursorShape.CrossCursor
    assert map_view.dragMode() == QGraphicsView.DragMode.NoDrag

    map_view.set_adding_cursor(False)
    assert not map_view.adding_cursor_enabled()
    assert map_view.dragMode() == QGraphicsView.DragMode.ScrollHandDrag


def test_shutdown_releases_everything(map_view):
    map_view.set_base_layer(TILE_LAYERS[BaseLayerKind.STANDARD])
    map_view.add_marker(FLAM, ITINERARY_START_STYLE)
    map_view.add_polyline([FLAM, MYRDAL], TRACK_STYLE)
    map_view.shutdown()
    assert map_view.overlay_count() == 0
    assert map_view.attached_base_layer_count() == 0


def test_view_satisfies_map_surface_protocol(map_view):
    from fjordguide.core.protocols import MapSurface

    assert isinstance(map_view, MapSurface)
