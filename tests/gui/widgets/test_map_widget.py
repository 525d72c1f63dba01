"""
Tests for the map panel chrome: toolbar, search bar and attribution.
"""

import pytest
from PySide6.QtCore import Qt

from fjordguide.app.constants import TILE_LAYERS
from fjordguide.app.map_controller import AddMarkerState
from fjordguide.core.geo import Coordinate, SearchResult
from fjordguide.core.styles import BaseLayerKind
from fjordguide.gui.widgets.map import MapGraphicsView
from fjordguide.gui.widgets.map_widget import MapWidget
from fjordguide.gui.widgets.search_bar import SearchBar

RESULTS = [
    SearchResult("1", Coordinate(60.86, 7.11), "Flåm, Aurland, Norway"),
    SearchResult("2", Coordinate(60.73, 7.12), "Myrdal, Aurland, Norway"),
]


@pytest.fixture
def map_widget(qtbot):
    """Provides a MapWidget instance."""
    widget = MapWidget(fetch_tiles=False)
    qtbot.addWidget(widget)
    widget.show()
    qtbot.waitExposed(widget)
    return widget


def test_map_widget_initialization(map_widget):
    assert isinstance(map_widget.view, MapGraphicsView)
    assert map_widget.standard_action.isChecked()
    assert not map_widget.is_hint_visible()


def test_add_button_emits_toggle(qtbot, map_widget):
    with qtbot.waitSignal(map_widget.add_mode_toggled):
        map_widget.add_action.trigger()


def test_add_state_mirrors_controller(map_widget):
    map_widget.set_add_state(AddMarkerState.ADDING)
    assert map_widget.add_action.isChecked()
    assert map_widget.is_hint_visible()

    map_widget.set_add_state(AddMarkerState.PENDING)
    assert not map_widget.add_action.isEnabled()
    assert not map_widget.is_hint_visible()

    map_widget.set_add_state(AddMarkerState.IDLE)
    assert map_widget.add_action.isEnabled()
    assert not map_widget.add_action.isChecked()


def test_layer_buttons_request_kind(qtbot, map_widget):
    with qtbot.waitSignal(map_widget.base_layer_requested) as blocker:
        map_widget.satellite_action.trigger()
    assert blocker.args == [BaseLayerKind.SATELLITE]


def test_set_base_layer_updates_attribution(map_widget):
    config = TILE_LAYERS[BaseLayerKind.SATELLITE]
    map_widget.set_base_layer(config)
    assert map_widget.satellite_action.isChecked()
    assert "Esri" in map_widget.attribution_label.text()


def test_zoom_actions_drive_view(map_widget):
    map_widget.view.set_view(Coordinate(60.86, 7.11), 10)
    map_widget.zoom_in_action.trigger()
    assert map_widget.view.zoom_level() == 11
    map_widget.zoom_out_action.trigger()
    assert map_widget.view.zoom_level() == 10


# --- Search bar ---------------------------------------------------------


@pytest.fixture
def search_bar(qtbot):
    bar = SearchBar()
    qtbot.addWidget(bar)
    bar.show()
    return bar


def test_return_emits_trimmed_query(qtbot, search_bar):
    search_bar.query_edit.setText("  Flåm  ")
    with qtbot.waitSignal(search_bar.search_requested) as blocker:
        qtbot.keyClick(search_bar.query_edit, Qt.Key.Key_Return)
    assert blocker.args == ["Flåm"]


def test_blank_query_not_emitted(qtbot, search_bar):
    search_bar.query_edit.setText("   ")
    with qtbot.assertNotEmitted(search_bar.search_requested):
        qtbot.keyClick(search_bar.query_edit, Qt.Key.Key_Return)


def test_results_dropdown(search_bar):
    search_bar.set_results(RESULTS)
    assert search_bar.result_count() == 2
    assert search_bar.results_list.isVisible()

    search_bar.set_results([])
    assert search_bar.result_count() == 0
    assert not search_bar.results_list.isVisible()


def test_clicking_result_emits_selection(qtbot, search_bar):
    search_bar.set_results(RESULTS)
    item = search_bar.results_list.item(1)
    with qtbot.waitSignal(search_bar.result_selected) as blocker:
        search_bar.results_list.itemClicked.emit(item)
    assert blocker.args == [RESULTS[1]]


def test_busy_indicator(search_bar):
    search_bar.set_busy(True)
    assert search_bar.busy_label.isVisible()
    search_bar.set_busy(False)
    assert not search_bar.busy_label.isVisible()


def test_map_widget_forwards_search(qtbot, map_widget):
    map_widget.search_bar.query_edit.setText("Myrdal")
    with qtbot.waitSignal(map_widget.search_requested) as blocker:
        map_widget.search_bar.query_edit.returnPressed.emit()
    assert blocker.args == ["Myrdal"]
