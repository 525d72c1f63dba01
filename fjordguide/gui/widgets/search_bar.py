"""
Search Bar Widget Module.

Provides the place search box floating over the map: a query field, a busy
indicator and a dropdown of results.
"""

from typing import List, Optional

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QVBoxLayout,
    QWidget,
)

from fjordguide.core.geo import SearchResult


class SearchResultItem(QWidget):
    """Two-line result row: short name in bold, full name below."""

    def __init__(self, result: SearchResult, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.result = result

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 4, 6, 4)
        layout.setSpacing(0)

        name_label = QLabel(f"<b>{result.short_name}</b>")
        layout.addWidget(name_label)

        full_label = QLabel(result.display_name)
        full_label.setStyleSheet("color: #64748B; font-size: 10px;")
        full_label.setWordWrap(True)
        layout.addWidget(full_label)

        self.setCursor(Qt.CursorShape.PointingHandCursor)


class SearchBar(QWidget):
    """
    Query field with a result dropdown.

    Signals:
        search_requested: Return pressed with a non-blank query.
                          Args: (query: str)
        result_selected: A result row was chosen.
                         Args: (result: SearchResult)
    """

    search_requested = Signal(str)
    result_selected = Signal(object)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setMaximumWidth(300)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(2)

        row = QHBoxLayout()
        self.query_edit = QLineEdit()
        self.query_edit.setPlaceholderText("Search places in the fjord...")
        self.query_edit.setClearButtonEnabled(True)
        self.query_edit.returnPressed.connect(self._on_return_pressed)
        row.addWidget(self.query_edit)

        self.busy_label = QLabel("Searching…")
        self.busy_label.setStyleSheet("color: #64748B; font-size: 10px;")
        self.busy_label.hide()
        row.addWidget(self.busy_label)
        layout.addLayout(row)

        self.results_list = QListWidget()
        self.results_list.setMaximumHeight(220)
        self.results_list.itemClicked.connect(self._on_item_clicked)
        self.results_list.hide()
        layout.addWidget(self.results_list)

    def _on_return_pressed(self) -> None:
        query = self.query_edit.text().strip()
        if query:
            self.search_requested.emit(query)

    def set_busy(self, busy: bool) -> None:
        self.busy_label.setVisible(busy)

    def set_results(self, results: List[SearchResult]) -> None:
        """Replaces the dropdown contents. An empty list hides it."""
        self.results_list.clear()
        for result in results:
            item = QListWidgetItem()
            item.setData(Qt.ItemDataRole.UserRole, result)
            row = SearchResultItem(result)
            item.setSizeHint(row.sizeHint())
            self.results_list.addItem(item)
            self.results_list.setItemWidget(item, row)
        self.results_list.setVisible(bool(results))

    def result_count(self) -> int:
        return self.results_list.count()

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        result = item.data(Qt.ItemDataRole.UserRole)
        if result is None:
            return
        # Selecting clears the list, so leave the click handler first
        QTimer.singleShot(0, lambda: self.result_selected.emit(result))
