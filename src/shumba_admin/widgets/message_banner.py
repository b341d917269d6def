"""Dismissible success/error banner."""

from typing import Optional
from PyQt6.QtCore import QTimer, pyqtSignal
from PyQt6.QtWidgets import QFrame, QHBoxLayout, QLabel, QPushButton

ERROR_STYLE = "background: #fdecea; color: #8a1c12; border: 1px solid #f5c2bd;"
SUCCESS_STYLE = "background: #e8f5e9; color: #1b5e20; border: 1px solid #b9dfbb;"


class MessageBanner(QFrame):
    """One-line banner; success banners hide themselves after a timeout."""

    dismissed = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 4, 4)

        self._label = QLabel()
        self._label.setWordWrap(True)
        layout.addWidget(self._label, 1)

        close_button = QPushButton("✕")
        close_button.setFixedSize(22, 22)
        close_button.setFlat(True)
        close_button.clicked.connect(self.dismiss)
        layout.addWidget(close_button)

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.dismiss)
        self.hide()

    @property
    def text(self) -> str:
        return self._label.text()

    def show_error(self, text: str):
        self._timer.stop()
        self._show(text, ERROR_STYLE)

    def show_success(self, text: str, timeout_ms: Optional[int] = None):
        self._show(text, SUCCESS_STYLE)
        if timeout_ms:
            self._timer.start(timeout_ms)

    def _show(self, text: str, style: str):
        self.setStyleSheet(style)
        self._label.setText(text)
        self.show()

    def dismiss(self):
        self._timer.stop()
        if self.isHidden():
            return
        self.hide()
        self.dismissed.emit()
