"""
Point of Interest Dialog Module.

Provides the dialog that names a freshly placed map spot before it is
saved as a POI.
"""

from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from fjordguide.core.geo import Coordinate


class PoiDialog(QDialog):
    """
    Collects a title and an optional note for a pending POI.

    The dialog does not save anything itself: Save emits save_requested
    and the owner either accepts the dialog or reports an error through
    show_error().

    Signals:
        save_requested: Args: (title: str, description: str)
    """

    save_requested = Signal(str, str)

    def __init__(
        self, coordinate: Coordinate, parent: Optional[QWidget] = None
    ) -> None:
        """
        Initializes the dialog.

        Args:
            coordinate: The pending spot, shown for reference.
            parent: Parent widget.
        """
        super().__init__(parent)
        self.setWindowTitle("New Marker")
        self.setMinimumWidth(320)
        self.coordinate = coordinate

        main_layout = QVBoxLayout(self)

        self.location_label = QLabel(
            f"{coordinate.latitude:.5f}, {coordinate.longitude:.5f}"
        )
        self.location_label.setStyleSheet("color: #64748B;")
        main_layout.addWidget(self.location_label)

        form = QFormLayout()
        self.title_edit = QLineEdit()
        self.title_edit.setPlaceholderText("e.g. Viewpoint")
        self.title_edit.textChanged.connect(self._on_title_changed)
        form.addRow("Title:", self.title_edit)

        self.description_edit = QTextEdit()
        self.description_edit.setPlaceholderText("Optional note...")
        self.description_edit.setMaximumHeight(80)
        form.addRow("Note:", self.description_edit)
        main_layout.addLayout(form)

        self.error_label = QLabel()
        self.error_label.setStyleSheet("color: #DC2626;")
        self.error_label.setWordWrap(True)
        self.error_label.hide()
        main_layout.addWidget(self.error_label)

        buttons = (
            QDialogButtonBox.StandardButton.Save
            | QDialogButtonBox.StandardButton.Cancel
        )
        self.button_box = QDialogButtonBox(buttons)
        self.button_box.accepted.connect(self._on_save_clicked)
        self.button_box.rejected.connect(self.reject)
        main_layout.addWidget(self.button_box)

        self.save_button = self.button_box.button(QDialogButtonBox.StandardButton.Save)
        self.save_button.setEnabled(False)
        self.title_edit.setFocus()

    @property
    def title(self) -> str:
        return self.title_edit.text()

    @property
    def description(self) -> str:
        return self.description_edit.toPlainText()

    def _on_title_changed(self, text: str) -> None:
        self.save_button.setEnabled(bool(text.strip()))
        self.error_label.hide()

    def _on_save_clicked(self) -> None:
        self.save_requested.emit(self.title, self.description)

    def show_error(self, message: str) -> None:
        """Displays a validation error without closing the dialog."""
        self.error_label.setText(message)
        self.error_label.show()
