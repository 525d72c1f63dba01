"""
Map Popup Module.

A small detail card shown above an overlay. One instance is owned by the
map view and reused; its widgets are created once and only their contents
change, so it is safe to trigger from inside its own button handler.
"""

import logging
from typing import Callable, Optional

from PySide6.QtCore import QPoint, Qt, Signal
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from fjordguide.core.styles import PopupContent

logger = logging.getLogger(__name__)

POPUP_MAX_WIDTH = 260
# Gap between the anchor point and the popup's bottom edge
ANCHOR_GAP = 8


class MapPopup(QFrame):
    """
    Reusable popup card with a title, body text and an optional action.

    Signals:
        closed: Emitted when the popup is hidden by the user or the view.
    """

    closed = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("MapPopup")
        self.setFrameShape(QFrame.Shape.StyledPanel)
        self.setMaximumWidth(POPUP_MAX_WIDTH)
        self.setStyleSheet(
            "#MapPopup { background: white; border: 1px solid #CBD5E1; "
            "border-radius: 6px; }"
        )

        self.handle: Optional[str] = None
        self._action: Optional[Callable[[], None]] = None
        self._anchor = QPoint()

        layout = QVBoxLayout(self)
        layout.setContentsMargins(10, 6, 6, 10)
        layout.setSpacing(4)

        header = QHBoxLayout()
        self.title_label = QLabel()
        self.title_label.setWordWrap(True)
        self.title_label.setStyleSheet("font-weight: bold;")
        header.addWidget(self.title_label, 1)
        self.close_button = QToolButton()
        self.close_button.setText("×")
        self.close_button.setAutoRaise(True)
        self.close_button.clicked.connect(self.dismiss)
        header.addWidget(self.close_button, 0, Qt.AlignmentFlag.AlignTop)
        layout.addLayout(header)

        self.body_label = QLabel()
        self.body_label.setWordWrap(True)
        layout.addWidget(self.body_label)

        self.action_button = QPushButton()
        self.action_button.clicked.connect(self._on_action_clicked)
        layout.addWidget(self.action_button)

        self.hide()

    def show_content(self, handle: str, content: PopupContent, anchor: QPoint) -> None:
        """
        Fills the popup and shows it above an anchor point.

        Args:
            handle: Overlay handle the popup belongs to.
            content: Text and optional action.
            anchor: Viewport position of the overlay.
        """
        self.handle = handle
        self.title_label.setText(content.title)
        self.body_label.setText(content.body)
        self.body_label.setVisible(bool(content.body))

        self._action = content.on_action
        has_action = bool(content.action_label) and content.on_action is not None
        self.action_button.setText(content.action_label or "")
        self.action_button.setVisible(has_action)

        self.adjustSize()
        self.move_to(anchor)
        self.show()
        self.raise_()
        logger.debug(f"Popup opened for {handle}: '{content.title}'")

    def move_to(self, anchor: QPoint) -> None:
        """Positions the popup so its bottom-center sits above the anchor."""
        self._anchor = QPoint(anchor)
        self.move(
            anchor.x() - self.width() // 2, anchor.y() - self.height() - ANCHOR_GAP
        )

    def dismiss(self) -> None:
        """Hides the popup and forgets its owner."""
        if not self.isVisible() and self.handle is None:
            return
        self.hide()
        self.handle = None
        self._action = None
        self.closed.emit()

    def _on_action_clicked(self) -> None:
        action = self._action
        if action is not None:
            action()
