"""
Settings: admin and user password changes, plan prices, log files.

Every action runs through the task runner and reports back through the
panel's banner; validation errors are shown next to the offending field.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QFormLayout, QGroupBox, QHBoxLayout, QLabel, QLineEdit, QListWidget,
    QListWidgetItem, QPushButton, QScrollArea, QVBoxLayout, QWidget
)

from shumba_admin.api.errors import AdminApiError, SessionExpired, Unknown, ValidationFailed
from shumba_admin.core.immediate_task import ImmediateTaskRunner
from shumba_admin.core.log_utils import LogFileInfo, discover_logs
from shumba_admin.protocols.task_runner import TaskRunner
from shumba_admin.services.session_service import SessionService
from shumba_admin.services.settings_service import SettingsService
from shumba_admin.widgets.message_banner import MessageBanner
from shumba_admin.widgets.no_scroll_spinbox import NoScrollDoubleSpinBox
from shumba_admin.protocols.admin_config import get_admin_config

logger = logging.getLogger(__name__)

FIELD_ERROR_STYLE = "color: #c0392b;"


def _password_input() -> QLineEdit:
    line_edit = QLineEdit()
    line_edit.setEchoMode(QLineEdit.EchoMode.Password)
    return line_edit


class FieldForm(QWidget):
    """QFormLayout rows with an error label under each editor."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._layout = QFormLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self.editors: Dict[str, QWidget] = {}
        self._errors: Dict[str, QLabel] = {}

    def add_field(self, key: str, label: str, editor: QWidget) -> QWidget:
        error_label = QLabel()
        error_label.setStyleSheet(FIELD_ERROR_STYLE)
        error_label.hide()
        cell = QWidget()
        cell_layout = QVBoxLayout(cell)
        cell_layout.setContentsMargins(0, 0, 0, 0)
        cell_layout.addWidget(editor)
        cell_layout.addWidget(error_label)
        self._layout.addRow(label, cell)
        self.editors[key] = editor
        self._errors[key] = error_label
        return editor

    def clear_fields(self):
        while self._layout.rowCount():
            self._layout.removeRow(0)
        self.editors = {}
        self._errors = {}

    def set_field_errors(self, field_errors: Mapping[str, List[str]]):
        for key, label in self._errors.items():
            messages = field_errors.get(key)
            label.setText(" ".join(messages) if messages else "")
            label.setVisible(bool(messages))

    def field_error(self, key: str) -> str:
        return self._errors[key].text()


class SettingsPanel(QWidget):
    def __init__(self, service: SettingsService, session: SessionService,
                 runner: Optional[TaskRunner] = None,
                 log_directory: Optional[Path] = None, parent=None):
        super().__init__(parent)
        self._service = service
        self._session = session
        self._runner = runner or ImmediateTaskRunner()
        self._log_directory = log_directory
        self._loaded_once = False
        self._notice_timeout_ms = get_admin_config().notice_timeout_ms

        outer = QVBoxLayout(self)
        outer.addWidget(QLabel("<h3>Settings</h3>"))
        self.banner = MessageBanner()
        outer.addWidget(self.banner)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        body = QWidget()
        layout = QVBoxLayout(body)
        layout.addWidget(self._build_admin_password_group())
        layout.addWidget(self._build_user_password_group())
        layout.addWidget(self._build_prices_group())
        layout.addWidget(self._build_logs_group())
        layout.addStretch(1)
        scroll.setWidget(body)
        outer.addWidget(scroll, 1)

    # =========================================================================
    # Layout
    # =========================================================================

    def _build_admin_password_group(self) -> QGroupBox:
        group = QGroupBox("Change admin password")
        layout = QVBoxLayout(group)
        self.admin_form = FieldForm()
        self.admin_form.add_field("current_password", "Current password", _password_input())
        self.admin_form.add_field("new_password", "New password", _password_input())
        self.admin_form.add_field("confirm_password", "Confirm new password", _password_input())
        layout.addWidget(self.admin_form)
        self.admin_password_button = QPushButton("Change password")
        self.admin_password_button.clicked.connect(self.change_admin_password)
        layout.addWidget(self.admin_password_button, 0, Qt.AlignmentFlag.AlignRight)
        return group

    def _build_user_password_group(self) -> QGroupBox:
        group = QGroupBox("Reset a user's password")
        layout = QVBoxLayout(group)
        self.user_form = FieldForm()
        self.user_form.add_field("phone_number", "User phone number", QLineEdit())
        self.user_form.add_field("new_password", "New password", _password_input())
        self.user_form.add_field("confirm_password", "Confirm new password", _password_input())
        layout.addWidget(self.user_form)
        self.user_password_button = QPushButton("Reset password")
        self.user_password_button.clicked.connect(self.change_user_password)
        layout.addWidget(self.user_password_button, 0, Qt.AlignmentFlag.AlignRight)
        return group

    def _build_prices_group(self) -> QGroupBox:
        group = QGroupBox("Prices")
        layout = QVBoxLayout(group)
        self.prices_form = FieldForm()
        layout.addWidget(self.prices_form)
        buttons = QHBoxLayout()
        buttons.addStretch(1)
        self.reload_prices_button = QPushButton("Reload")
        self.reload_prices_button.clicked.connect(self.load_prices)
        self.save_prices_button = QPushButton("Save prices")
        self.save_prices_button.clicked.connect(self.save_prices)
        self.save_prices_button.setEnabled(False)
        buttons.addWidget(self.reload_prices_button)
        buttons.addWidget(self.save_prices_button)
        layout.addLayout(buttons)
        return group

    def _build_logs_group(self) -> QGroupBox:
        group = QGroupBox("Log files")
        layout = QVBoxLayout(group)
        self.log_list = QListWidget()
        self.log_list.setMaximumHeight(140)
        layout.addWidget(self.log_list)
        refresh = QPushButton("Refresh list")
        refresh.clicked.connect(self.refresh_logs)
        layout.addWidget(refresh, 0, Qt.AlignmentFlag.AlignRight)
        return group

    # =========================================================================
    # Actions
    # =========================================================================

    def _run(self, target: Callable[..., Any], args, form: Optional[FieldForm],
             on_done: Callable[[Any], None]):
        if form is not None:
            form.set_field_errors({})
        self.banner.dismiss()
        self._runner.run(
            target,
            args=args,
            on_success=on_done,
            on_error=lambda error: self._on_error(error, form),
        )

    def change_admin_password(self):
        editors = self.admin_form.editors
        self._run(
            self._service.change_admin_password,
            (editors["current_password"].text(), editors["new_password"].text(),
             editors["confirm_password"].text()),
            self.admin_form,
            lambda message: self._on_saved(message, self.admin_form),
        )

    def change_user_password(self):
        editors = self.user_form.editors
        self._run(
            self._service.change_user_password,
            (editors["phone_number"].text(), editors["new_password"].text(),
             editors["confirm_password"].text()),
            self.user_form,
            lambda message: self._on_saved(message, self.user_form),
        )

    def load_prices(self):
        self._run(self._service.get_prices, (), None, self._on_prices_loaded)

    def save_prices(self):
        values = {key: editor.value() for key, editor in self.prices_form.editors.items()}
        self._run(self._service.update_prices, (values,), self.prices_form,
                  lambda message: self._on_saved(message, None))

    def _on_prices_loaded(self, prices: Dict[str, Any]):
        self.prices_form.clear_fields()
        for key, value in prices.items():
            if key in ("id", "created_at", "updated_at"):
                continue
            editor = NoScrollDoubleSpinBox()
            try:
                editor.setValue(float(value))
            except (TypeError, ValueError):
                logger.debug(f"Skipping non-numeric price field {key}")
                continue
            self.prices_form.add_field(key, key.replace("_", " ").capitalize(), editor)
        self.save_prices_button.setEnabled(bool(self.prices_form.editors))

    def _on_saved(self, message: str, form: Optional[FieldForm]):
        if form is not None:
            for editor in form.editors.values():
                if isinstance(editor, QLineEdit):
                    editor.clear()
        self.banner.show_success(message, self._notice_timeout_ms)

    def _on_error(self, error: Exception, form: Optional[FieldForm]):
        if not isinstance(error, AdminApiError):
            logger.error(f"Settings action crashed: {error}", exc_info=error)
            error = Unknown(cause=error)
        if isinstance(error, ValidationFailed) and form is not None:
            form.set_field_errors(error.field_errors)
        self.banner.show_error(error.user_message)
        if isinstance(error, SessionExpired):
            self._session.on_unauthorized()

    def refresh_logs(self):
        self.log_list.clear()
        logs: List[LogFileInfo] = discover_logs(self._log_directory)
        for info in logs:
            item = QListWidgetItem(info.display_name)
            item.setToolTip(str(info.path))
            item.setData(Qt.ItemDataRole.UserRole, str(info.path))
            self.log_list.addItem(item)

    def showEvent(self, event):
        super().showEvent(event)
        if not self._loaded_once:
            self._loaded_once = True
            self.load_prices()
            self.refresh_logs()
