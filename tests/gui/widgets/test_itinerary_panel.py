"""
Tests for the itinerary panel.
"""

from fjordguide.core.activity import Activity
from fjordguide.core.geo import Coordinate
from fjordguide.gui.widgets.itinerary_panel import ItineraryPanel, format_time_range

FLAM = Coordinate(60.8631, 7.1136)

ACTIVITIES = [
    Activity(
        id="1",
        title="Arrival",
        location_name="Flåm Station",
        start=FLAM,
        start_time="09:00",
        end_time="09:00",
    ),
    Activity(
        id="2",
        title="Railway",
        location_name="Flåm Station",
        start=Coordinate(60.86, 7.11),
        end=Coordinate(60.73, 7.12),
        start_time="10:35",
        end_time="11:30",
        notes="CRITICAL",
    ),
]


def test_format_time_range():
    assert format_time_range(ACTIVITIES[0]) == "09:00"
    assert format_time_range(ACTIVITIES[1]) == "10:35 - 11:30"


def test_lists_activities_in_order(qtbot):
    panel = ItineraryPanel()
    qtbot.addWidget(panel)
    panel.set_activities(ACTIVITIES)
    assert panel.activity_count() == 2
    assert "Arrival" in panel.list_widget.item(0).text()
    assert "Railway" in panel.list_widget.item(1).text()


def test_activating_entry_requests_focus(qtbot):
    panel = ItineraryPanel()
    qtbot.addWidget(panel)
    panel.set_activities(ACTIVITIES)
    with qtbot.waitSignal(panel.focus_requested) as blocker:
        panel.list_widget.itemActivated.emit(panel.list_widget.item(1))
    assert blocker.args == [Coordinate(60.86, 7.11)]
