"""
Admin console widgets.

Screens render view models published by the service layer and forward
user actions back to it; none of them hold list state of their own.
"""

from .no_scroll_spinbox import NoScrollDoubleSpinBox, NoScrollComboBox
from .status_indicator import StatusIndicator
from .message_banner import MessageBanner
from .pagination_bar import PaginationBar
from .record_form_dialog import RecordFormDialog
from .record_table_browser import RecordTableBrowser, confirm_delete_dialog
from .login_dialog import LoginDialog
from .dashboard_panel import DashboardPanel
from .settings_panel import SettingsPanel
from .main_window import AdminMainWindow

__all__ = [
    "NoScrollDoubleSpinBox",
    "NoScrollComboBox",
    "StatusIndicator",
    "MessageBanner",
    "PaginationBar",
    "RecordFormDialog",
    "RecordTableBrowser",
    "confirm_delete_dialog",
    "LoginDialog",
    "DashboardPanel",
    "SettingsPanel",
    "AdminMainWindow",
]
