"""
Application entry point.

Reads configuration from the environment, sets up logging, signs the
administrator in and shows the main window.
"""

import logging
import sys
from typing import List, Optional

from PyQt6.QtWidgets import QApplication, QDialog

from shumba_admin import __version__
from shumba_admin.api.client import AdminApiClient
from shumba_admin.core.background_task import BackgroundTaskManager
from shumba_admin.core.log_utils import setup_logging
from shumba_admin.protocols.admin_config import AdminConfig, set_admin_config
from shumba_admin.services.auth_service import AuthService
from shumba_admin.services.session_service import SessionService, SessionStore
from shumba_admin.widgets.login_dialog import LoginDialog
from shumba_admin.widgets.main_window import AdminMainWindow

logger = logging.getLogger(__name__)


class AdminApplication:
    """Wires the shared client, session and windows together."""

    def __init__(self, config: AdminConfig):
        self.config = config
        self.client = AdminApiClient(config)
        self.session = SessionService(SessionStore.for_config(config))
        self.auth = AuthService(self.client, self.session)
        self.tasks = BackgroundTaskManager()
        self.window: Optional[AdminMainWindow] = None

    def sign_in(self, notice: str = "", parent=None) -> bool:
        dialog = LoginDialog(self.auth, self.tasks, notice=notice, parent=parent)
        return dialog.exec() == QDialog.DialogCode.Accepted

    def start(self) -> bool:
        if not self.session.is_authenticated() and not self.sign_in():
            logger.info("Sign-in cancelled")
            return False
        self.window = AdminMainWindow(self.client, self.session, runner=self.tasks)
        self.window.reauth_required.connect(self._on_reauth_required)
        self.window.logout_requested.connect(self._on_logout)
        self.window.show()
        return True

    def _on_reauth_required(self, notice: str):
        if self.sign_in(notice, parent=self.window):
            self.window.refresh_all()
        else:
            self.window.close()

    def _on_logout(self):
        self.window.hide()
        if self.sign_in():
            self.window.refresh_all()
            self.window.show()
        else:
            self.window.close()

    def shutdown(self):
        self.tasks.cleanup()
        self.client.close()


def main(argv: Optional[List[str]] = None) -> int:
    config = AdminConfig.from_env()
    set_admin_config(config)
    log_file = setup_logging(config)
    logger.info(f"shumba-admin {__version__} starting (API {config.api_base_url}, log {log_file})")

    app = QApplication(sys.argv if argv is None else argv)
    app.setOrganizationName(config.settings_organization)
    app.setApplicationName(config.settings_application)

    admin = AdminApplication(config)
    if not admin.start():
        admin.shutdown()
        return 0
    try:
        return app.exec()
    finally:
        admin.shutdown()
        logger.info("shumba-admin stopped")


if __name__ == "__main__":
    sys.exit(main())
