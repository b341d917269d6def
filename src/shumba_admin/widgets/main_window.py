"""
Admin console main window.

A sidebar lists the screens (dashboard, one table per registered entity,
settings); the selected screen is shown in a QStackedWidget. Screens are
built lazily the first time they are selected.
"""

import logging
from functools import partial
from typing import Callable, Dict, List, Optional

from PyQt6.QtCore import QTimer, pyqtSignal
from PyQt6.QtWidgets import (
    QHBoxLayout, QLabel, QListWidget, QMainWindow, QPushButton, QStackedWidget,
    QVBoxLayout, QWidget
)

from shumba_admin.api.client import AdminApiClient
from shumba_admin.api.envelope import Record
from shumba_admin.core.background_task import BackgroundTaskManager
from shumba_admin.protocols.admin_config import get_admin_config
from shumba_admin.protocols.task_runner import TaskRunner
from shumba_admin.services.dashboard_service import DashboardService
from shumba_admin.services.entity_registry import EntityConfig, list_entity_configs
from shumba_admin.services.list_controller import ConfirmCallback, RemoteListController
from shumba_admin.services.session_service import SessionService
from shumba_admin.services.settings_service import SettingsService
from shumba_admin.services.statistics import booking_summary, payment_summary
from shumba_admin.widgets.dashboard_panel import DashboardPanel
from shumba_admin.widgets.record_table_browser import RecordTableBrowser, confirm_delete_dialog
from shumba_admin.widgets.settings_panel import SettingsPanel

logger = logging.getLogger(__name__)

SESSION_EXPIRED_NOTICE = "Your session has expired. Please sign in again."


def _payments_summary(records: List[Record]) -> str:
    summary = payment_summary(records)
    return (f"Total: {summary.total}   Approved: {summary.approved}   "
            f"Pending: {summary.pending}   Amount: ${summary.total_amount:,.2f}")


def _bookings_summary(records: List[Record]) -> str:
    summary = booking_summary(records)
    return (f"Total: {summary.total}   Available: {summary.available}   "
            f"Booked: {summary.booked}   Revenue: ${summary.revenue:,.2f}")


SUMMARY_PROVIDERS: Dict[str, Callable[[List[Record]], str]] = {
    "payments": _payments_summary,
    "bookings": _bookings_summary,
}


class AdminMainWindow(QMainWindow):
    """
    Signals:
        logout_requested(): the user signed out
        reauth_required(str): the session expired; carries the notice to show
    """

    logout_requested = pyqtSignal()
    reauth_required = pyqtSignal(str)

    def __init__(
        self,
        client: AdminApiClient,
        session: SessionService,
        runner: Optional[TaskRunner] = None,
        confirm: Optional[ConfirmCallback] = None,
        entities: Optional[List[EntityConfig]] = None,
        parent=None
    ):
        super().__init__(parent)
        self._client = client
        self._session = session
        self._runner = runner or BackgroundTaskManager()
        self._confirm = confirm
        self._entities = entities if entities is not None else list_entity_configs()
        self._redirect_pending = False
        self.controllers: Dict[str, RemoteListController] = {}
        self._screen_factories: List[Callable[[], QWidget]] = []
        self._screens: Dict[int, QWidget] = {}

        self.setWindowTitle("Shumba Wheels Admin")
        self.resize(1200, 780)
        self._setup_ui()
        self._register_screens()
        session.add_unauthorized_listener(self._on_unauthorized)
        self.sidebar.setCurrentRow(0)
        self.show_screen(0)

    def _setup_ui(self):
        central = QWidget()
        layout = QHBoxLayout(central)

        side = QVBoxLayout()
        self.sidebar = QListWidget()
        self.sidebar.setFixedWidth(190)
        self.sidebar.currentRowChanged.connect(self.show_screen)
        side.addWidget(self.sidebar, 1)

        user = self._session.current_user()
        self.user_label = QLabel(user.phone if user else "")
        side.addWidget(self.user_label)
        self.logout_button = QPushButton("Log out")
        self.logout_button.clicked.connect(self.logout)
        side.addWidget(self.logout_button)
        layout.addLayout(side)

        self.stack = QStackedWidget()
        layout.addWidget(self.stack, 1)
        self.setCentralWidget(central)
        self.statusBar().showMessage("Ready")

    def _register_screens(self):
        self._add_screen("Dashboard", lambda: DashboardPanel(
            DashboardService(self._client, self._session), self._session, self._runner))
        for config in self._entities:
            self._add_screen(config.title, partial(self._build_browser, config))
        self._add_screen("Settings", lambda: SettingsPanel(
            SettingsService(self._client, self._session), self._session, self._runner))

    def _add_screen(self, title: str, factory: Callable[[], QWidget]):
        self.sidebar.addItem(title)
        self._screen_factories.append(factory)
        # Placeholder until first shown
        self.stack.addWidget(QWidget())

    def _build_browser(self, config: EntityConfig) -> RecordTableBrowser:
        browser: Optional[RecordTableBrowser] = None

        def confirm(record: Record) -> bool:
            if self._confirm is not None:
                return self._confirm(record)
            return confirm_delete_dialog(browser, config.title, record)

        controller = RemoteListController(
            config, self._client, self._session, runner=self._runner, confirm=confirm,
        )
        self.controllers[config.key] = controller
        browser = RecordTableBrowser(controller, SUMMARY_PROVIDERS.get(config.key))
        return browser

    def screen(self, index: int) -> QWidget:
        """Return the screen at ``index``, building it on first use."""
        if index not in self._screens:
            widget = self._screen_factories[index]()
            placeholder = self.stack.widget(index)
            self.stack.insertWidget(index, widget)
            self.stack.removeWidget(placeholder)
            placeholder.deleteLater()
            self._screens[index] = widget
            logger.debug(f"Built screen {self.sidebar.item(index).text()}")
        return self._screens[index]

    def show_screen(self, index: int):
        if index < 0 or index >= len(self._screen_factories):
            return
        self.stack.setCurrentWidget(self.screen(index))

    def refresh_all(self):
        """Re-fetch every screen that has been built (after signing in again)."""
        user = self._session.current_user()
        self.user_label.setText(user.phone if user else "")
        for controller in self.controllers.values():
            controller.refresh()

    def _on_unauthorized(self):
        if self._redirect_pending:
            return
        self._redirect_pending = True
        self.statusBar().showMessage(SESSION_EXPIRED_NOTICE)
        logger.warning("Session expired; redirecting to sign-in")
        QTimer.singleShot(get_admin_config().redirect_delay_ms, self._redirect_to_login)

    def _redirect_to_login(self):
        self._redirect_pending = False
        self.reauth_required.emit(SESSION_EXPIRED_NOTICE)

    def logout(self):
        logger.info("Signing out")
        self._session.end()
        self.logout_requested.emit()

    def closeEvent(self, event):
        """Cancel in-flight requests before the window goes away."""
        self._runner.cleanup()
        super().closeEvent(event)
