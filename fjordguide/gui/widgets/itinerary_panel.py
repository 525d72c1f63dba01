"""
Itinerary Panel Widget Module.

Lists the trip's activities in order. Activating an entry asks the map to
focus on where it starts.
"""

from typing import List, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QLabel,
    QListWidget,
    QListWidgetItem,
    QVBoxLayout,
    QWidget,
)

from fjordguide.core.activity import Activity

NOTE_COLORS = {
    "CRITICAL": QColor("#B91C1C"),
    "DEPARTURE": QColor("#1E293B"),
}


def format_time_range(activity: Activity) -> str:
    """Returns 'HH:MM' for point-in-time stops, 'HH:MM - HH:MM' otherwise."""
    if not activity.end_time or activity.end_time == activity.start_time:
        return activity.start_time
    return f"{activity.start_time} - {activity.end_time}"


class ItineraryPanel(QWidget):
    """
    Ordered list of itinerary activities.

    Signals:
        focus_requested: Args: (coordinate: Coordinate)
    """

    focus_requested = Signal(object)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._activities: List[Activity] = []

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        self.header_label = QLabel("<b>Itinerary</b>")
        layout.addWidget(self.header_label)

        self.list_widget = QListWidget()
        self.list_widget.setWordWrap(True)
        self.list_widget.itemActivated.connect(self._on_item_activated)
        layout.addWidget(self.list_widget)

    def set_activities(self, activities: List[Activity]) -> None:
        self._activities = list(activities)
        self.list_widget.clear()
        for index, activity in enumerate(self._activities):
            text = f"{format_time_range(activity)}  {activity.title}"
            if activity.location_name:
                text += f"\n{activity.location_name}"
            item = QListWidgetItem(text)
            item.setData(Qt.ItemDataRole.UserRole, index)
            item.setToolTip(activity.description)
            color = NOTE_COLORS.get(activity.notes)
            if color is not None:
                item.setForeground(color)
            self.list_widget.addItem(item)

    def activity_count(self) -> int:
        return self.list_widget.count()

    def _on_item_activated(self, item: QListWidgetItem) -> None:
        index = item.data(Qt.ItemDataRole.UserRole)
        if index is None or not 0 <= index < len(self._activities):
            return
        self.focus_requested.emit(self._activities[index].start)
