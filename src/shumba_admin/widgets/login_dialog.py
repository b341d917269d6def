"""Administrator sign-in dialog."""

import logging
from typing import Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QDialog, QDialogButtonBox, QFormLayout, QLabel, QLineEdit, QVBoxLayout
)

from shumba_admin.api.errors import AdminApiError, Unknown
from shumba_admin.core.immediate_task import ImmediateTaskRunner
from shumba_admin.protocols.task_runner import TaskRunner
from shumba_admin.services.auth_service import AuthService
from shumba_admin.services.session_service import SessionUser
from shumba_admin.widgets.message_banner import MessageBanner

logger = logging.getLogger(__name__)


class LoginDialog(QDialog):
    """
    Phone number + password form.

    The dialog accepts itself once ``AuthService.login`` succeeds and
    emits ``logged_in`` with the stored session user.
    """

    logged_in = pyqtSignal(object)

    def __init__(self, auth: AuthService, runner: Optional[TaskRunner] = None,
                 notice: str = "", parent=None):
        super().__init__(parent)
        self._auth = auth
        self._runner = runner or ImmediateTaskRunner()
        self._busy = False
        self.user: Optional[SessionUser] = None

        self.setWindowTitle("Shumba Wheels Admin - Sign in")
        self.setModal(True)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("<h2>Admin sign in</h2>"))

        self.banner = MessageBanner()
        layout.addWidget(self.banner)
        if notice:
            self.banner.show_error(notice)

        form = QFormLayout()
        self.phone_input = QLineEdit()
        self.phone_input.setPlaceholderText("e.g. 0771234567")
        self.password_input = QLineEdit()
        self.password_input.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Phone number", self.phone_input)
        form.addRow("Password", self.password_input)
        layout.addLayout(form)

        self.buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self.sign_in_button = self.buttons.button(QDialogButtonBox.StandardButton.Ok)
        self.sign_in_button.setText("Sign in")
        self.buttons.accepted.connect(self.submit)
        self.buttons.rejected.connect(self.reject)
        self.password_input.returnPressed.connect(self.submit)
        layout.addWidget(self.buttons)

    def submit(self):
        if self._busy:
            return
        self._set_busy(True)
        self.banner.dismiss()
        self._runner.run(
            self._auth.login,
            args=(self.phone_input.text(), self.password_input.text()),
            on_success=self._on_success,
            on_error=self._on_error,
        )

    def _set_busy(self, busy: bool):
        self._busy = busy
        self.sign_in_button.setEnabled(not busy)
        self.sign_in_button.setText("Signing in..." if busy else "Sign in")

    def _on_success(self, user: SessionUser):
        self._set_busy(False)
        self.user = user
        logger.info(f"Signed in as {user.phone}")
        self.logged_in.emit(user)
        self.accept()

    def _on_error(self, error: Exception):
        self._set_busy(False)
        if not isinstance(error, AdminApiError):
            logger.error(f"Unexpected login failure: {error}", exc_info=error)
            error = Unknown(cause=error)
        self.password_input.clear()
        self.banner.show_error(error.user_message)
