"""Screen status indicator: colored dot, state label and refresh button."""

from typing import Callable, Dict, Optional
from PyQt6.QtWidgets import QWidget, QHBoxLayout, QLabel, QPushButton

from shumba_admin.services.list_controller import ListViewModel, ScreenState

STATE_COLORS: Dict[ScreenState, str] = {
    ScreenState.IDLE: "#8a8a8a",
    ScreenState.LOADING: "#d9a400",
    ScreenState.LOADED: "#2e9e44",
    ScreenState.ERRORED: "#c0392b",
}

STATE_TEXT: Dict[ScreenState, str] = {
    ScreenState.IDLE: "Not loaded",
    ScreenState.LOADING: "Loading...",
    ScreenState.LOADED: "Up to date",
    ScreenState.ERRORED: "Error",
}


class StatusIndicator(QWidget):
    """
    Shows where a list screen is in its fetch cycle.

    Usage:
        indicator = StatusIndicator(on_refresh=controller.refresh, parent=self)
        controller.add_listener(indicator.update_view)
    """

    def __init__(
        self,
        on_refresh: Optional[Callable[[], None]] = None,
        parent=None
    ):
        super().__init__(parent)
        self._on_refresh = on_refresh

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(4)

        self._dot = QLabel("●")
        self._dot.setFixedWidth(12)
        layout.addWidget(self._dot)

        self._label = QLabel()
        layout.addWidget(self._label)

        self.refresh_button = QPushButton("↻ Refresh")
        self.refresh_button.setToolTip("Reload from server")
        self.refresh_button.clicked.connect(self._refresh_clicked)
        layout.addWidget(self.refresh_button)

        self.set_state(ScreenState.IDLE)

    @property
    def text(self) -> str:
        return self._label.text()

    def set_state(self, state: ScreenState, message: Optional[str] = None):
        """Update visual state."""
        self._dot.setStyleSheet(f"color: {STATE_COLORS[state]};")
        self._label.setText(message or STATE_TEXT[state])
        self.refresh_button.setEnabled(state is not ScreenState.LOADING)

    def update_view(self, view: ListViewModel):
        message = view.error.kind if view.state is ScreenState.ERRORED and view.error else None
        self.set_state(view.state, message)

    def _refresh_clicked(self):
        if self._on_refresh is not None:
            self._on_refresh()
