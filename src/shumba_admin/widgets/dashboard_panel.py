"""Dashboard: headline counters for the whole platform."""

import logging
from typing import Dict, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QFrame, QGridLayout, QHBoxLayout, QLabel, QVBoxLayout, QWidget

from shumba_admin.api.errors import AdminApiError, SessionExpired, Unknown
from shumba_admin.core.immediate_task import ImmediateTaskRunner
from shumba_admin.protocols.task_runner import TaskRunner
from shumba_admin.services.dashboard_service import DashboardService, DashboardStats
from shumba_admin.services.list_controller import ScreenState
from shumba_admin.services.session_service import SessionService
from shumba_admin.widgets.message_banner import MessageBanner
from shumba_admin.widgets.status_indicator import StatusIndicator

logger = logging.getLogger(__name__)

CARD_TITLES: Dict[str, str] = {
    "users": "Registered users",
    "questions": "Questions",
    "tests": "Tests taken",
    "passes": "Tests passed",
    "payments": "Payments",
    "bookings": "Bookings",
    "pass_rate": "Pass rate",
    "pass_vs_fail": "Passed / failed",
}


class StatCard(QFrame):
    def __init__(self, title: str, parent=None):
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)
        layout = QVBoxLayout(self)
        self.value_label = QLabel("-")
        self.value_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.value_label.setStyleSheet("font-size: 22px; font-weight: bold;")
        title_label = QLabel(title)
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.value_label)
        layout.addWidget(title_label)

    def set_value(self, value: Optional[object]):
        self.value_label.setText("—" if value is None else str(value))


class DashboardPanel(QWidget):
    """Loads every counter on first show and on refresh."""

    COLUMNS = 4

    def __init__(self, service: DashboardService, session: SessionService,
                 runner: Optional[TaskRunner] = None, parent=None):
        super().__init__(parent)
        self._service = service
        self._session = session
        self._runner = runner or ImmediateTaskRunner()
        self._loaded_once = False
        self.stats: Optional[DashboardStats] = None

        layout = QVBoxLayout(self)
        header = QHBoxLayout()
        header.addWidget(QLabel("<h3>Dashboard</h3>"), 1)
        self.status_indicator = StatusIndicator(on_refresh=self.refresh)
        header.addWidget(self.status_indicator)
        layout.addLayout(header)

        self.banner = MessageBanner()
        layout.addWidget(self.banner)

        grid = QGridLayout()
        self.cards: Dict[str, StatCard] = {}
        for i, (key, title) in enumerate(CARD_TITLES.items()):
            card = StatCard(title)
            self.cards[key] = card
            grid.addWidget(card, i // self.COLUMNS, i % self.COLUMNS)
        layout.addLayout(grid)
        layout.addStretch(1)

    def refresh(self):
        self.status_indicator.set_state(ScreenState.LOADING)
        self._runner.run(self._service.load, on_success=self._on_loaded, on_error=self._on_error)

    def _on_loaded(self, stats: DashboardStats):
        self.stats = stats
        for key in CARD_TITLES:
            self.cards[key].set_value(getattr(stats, key))
        failed = [name for name, did_fail in stats.failed.items() if did_fail]
        if failed:
            self.banner.show_error(f"Some counters could not be loaded: {', '.join(failed)}")
            self.status_indicator.set_state(ScreenState.ERRORED, "Partially loaded")
        else:
            self.banner.dismiss()
            self.status_indicator.set_state(ScreenState.LOADED)

    def _on_error(self, error: Exception):
        if not isinstance(error, AdminApiError):
            logger.error(f"Dashboard load crashed: {error}", exc_info=error)
            error = Unknown(cause=error)
        self.status_indicator.set_state(ScreenState.ERRORED, error.kind)
        self.banner.show_error(error.user_message)
        if isinstance(error, SessionExpired):
            self._session.on_unauthorized()

    def showEvent(self, event):
        super().showEvent(event)
        if not self._loaded_once:
            self._loaded_once = True
            self.refresh()
