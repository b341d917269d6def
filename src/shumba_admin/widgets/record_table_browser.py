"""
Paginated, searchable record table bound to a RemoteListController.

The widget owns no list state: it forwards user actions to the controller
(search, page changes, CRUD) and re-renders whatever ListViewModel the
controller publishes.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLineEdit, QTableWidget, QTableWidgetItem,
    QHeaderView, QAbstractItemView, QLabel, QPushButton, QMessageBox
)
from PyQt6.QtCore import Qt, pyqtSignal

from shumba_admin.api.envelope import Record
from shumba_admin.core.debounce_timer import DebounceTimer
from shumba_admin.protocols.admin_config import get_admin_config
from shumba_admin.services.entity_registry import ColumnDef
from shumba_admin.services.list_controller import ListViewModel, RemoteListController
from shumba_admin.widgets.message_banner import MessageBanner
from shumba_admin.widgets.pagination_bar import PaginationBar
from shumba_admin.widgets.record_form_dialog import RecordFormDialog
from shumba_admin.widgets.status_indicator import StatusIndicator

logger = logging.getLogger(__name__)

SummaryProvider = Callable[[List[Record]], str]


def format_cell(column: ColumnDef, value: Any) -> str:
    """Display text for one cell."""
    if value is None:
        return ""
    if column.key == "is_correct" or isinstance(value, bool):
        truthy = value in (True, 1, "1", "true", "True")
        return "✓ Correct" if truthy else "× Incorrect"
    return str(value)


def confirm_delete_dialog(parent: QWidget, title: str, record: Record) -> bool:
    """Ask the user to confirm a deletion."""
    answer = QMessageBox.question(
        parent,
        f"Delete from {title}",
        "Are you sure you want to delete this record? This cannot be undone.",
        QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        QMessageBox.StandardButton.No,
    )
    return answer == QMessageBox.StandardButton.Yes


class RecordTableBrowser(QWidget):
    """
    One admin screen: search box, toolbar, table, pagination and banners.

    Signals:
        record_selected(object): the selected record, or None
    """

    record_selected = pyqtSignal(object)

    def __init__(
        self,
        controller: RemoteListController,
        summary_provider: Optional[SummaryProvider] = None,
        parent=None
    ):
        super().__init__(parent)
        self.controller = controller
        self.config = controller.config
        self._summary_provider = summary_provider
        self._form: Optional[RecordFormDialog] = None
        self._form_pending = False
        self._row_records: Dict[int, Record] = {}
        self._loaded_once = False

        app_config = get_admin_config()
        self._notice_timeout_ms = app_config.notice_timeout_ms
        self._search_debounce = DebounceTimer(
            app_config.search_debounce_ms, self.controller.search, parent=self
        )

        self._setup_ui()
        self._setup_connections()
        self.controller.add_listener(self.update_view)
        self.update_view(self.controller.view_model)

    def _setup_ui(self):
        """Set up the UI components."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)
        layout.setSpacing(5)

        header = QHBoxLayout()
        title = QLabel(f"<h3>{self.config.title}</h3>")
        header.addWidget(title, 1)
        self.status_indicator = StatusIndicator(on_refresh=self.controller.refresh)
        header.addWidget(self.status_indicator)
        layout.addLayout(header)

        self.banner = MessageBanner()
        self.banner.dismissed.connect(self._on_banner_dismissed)
        layout.addWidget(self.banner)

        self.summary_label = QLabel()
        self.summary_label.setVisible(self._summary_provider is not None)
        layout.addWidget(self.summary_label)

        toolbar = QHBoxLayout()
        self.search_input = QLineEdit()
        fields = ", ".join(self.config.searchable_fields)
        self.search_input.setPlaceholderText(f"Search by {fields}...")
        self.search_input.setClearButtonEnabled(True)
        toolbar.addWidget(self.search_input, 1)

        self.add_button = QPushButton("Add New")
        self.edit_button = QPushButton("Edit")
        self.delete_button = QPushButton("Delete")
        self.toggle_button = QPushButton("Activate / Archive")
        self.add_button.setVisible(self.config.can_create)
        self.edit_button.setVisible(self.config.can_update)
        self.delete_button.setVisible(self.config.can_delete)
        self.toggle_button.setVisible(self.config.key == "apks")
        for button in (self.add_button, self.edit_button, self.toggle_button, self.delete_button):
            toolbar.addWidget(button)
        layout.addLayout(toolbar)

        self.table_widget = QTableWidget()
        self._configure_table()
        layout.addWidget(self.table_widget, 1)

        self.empty_label = QLabel()
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_label.hide()
        layout.addWidget(self.empty_label)

        self.pagination = PaginationBar()
        layout.addWidget(self.pagination)

    def _configure_table(self):
        """Configure table based on column definitions."""
        columns = self.config.columns
        self.table_widget.setColumnCount(len(columns))
        self.table_widget.setHorizontalHeaderLabels([col.name for col in columns])
        self.table_widget.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table_widget.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.table_widget.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        # Rows stay in server order; pagination slices that order
        self.table_widget.setSortingEnabled(False)

        header = self.table_widget.horizontalHeader()
        for i, col in enumerate(columns):
            if col.width:
                header.setSectionResizeMode(i, QHeaderView.ResizeMode.Interactive)
                self.table_widget.setColumnWidth(i, col.width)
            else:
                header.setSectionResizeMode(i, QHeaderView.ResizeMode.Stretch)

    def _setup_connections(self):
        """Connect signals to slots."""
        self.search_input.textChanged.connect(self._search_debounce.trigger)
        self.search_input.returnPressed.connect(self._search_debounce.flush)
        self.pagination.page_requested.connect(self.controller.go_to_page)
        self.table_widget.itemSelectionChanged.connect(self._on_selection_changed)
        self.table_widget.itemDoubleClicked.connect(lambda _item: self.open_edit_form())
        self.add_button.clicked.connect(self.open_create_form)
        self.edit_button.clicked.connect(self.open_edit_form)
        self.delete_button.clicked.connect(self.delete_selected)
        self.toggle_button.clicked.connect(self.toggle_selected)

    # =========================================================================
    # Rendering
    # =========================================================================

    def update_view(self, view: ListViewModel):
        """Render a view model published by the controller."""
        self.status_indicator.update_view(view)
        self.populate_table(view.displayed_records)
        self.pagination.update_view(view)

        self.empty_label.setText(view.empty_message)
        self.empty_label.setVisible(bool(view.empty_message))

        if view.error is not None:
            self.banner.show_error(view.error.user_message)
        elif view.mutation_error is not None and self._form is None:
            self.banner.show_error(view.mutation_error.user_message)
        elif view.success_message:
            self.banner.show_success(view.success_message, self._notice_timeout_ms)
        else:
            self.banner.dismiss()

        if self._summary_provider is not None:
            self.summary_label.setText(self._summary_provider(self.controller.working_collection))

        busy = view.mutating or view.loading
        self.add_button.setEnabled(not busy)
        self.delete_button.setEnabled(not busy and self.selected_record() is not None)
        self.edit_button.setEnabled(not busy and self.selected_record() is not None)
        self.toggle_button.setEnabled(not busy and self.selected_record() is not None)

        self._update_form(view)

    def populate_table(self, records: List[Record]):
        """Populate the table with the records of the current page."""
        columns = self.config.columns
        self.table_widget.setRowCount(len(records))
        self._row_records = {}

        for row, record in enumerate(records):
            self._row_records[row] = record
            for col, column in enumerate(columns):
                table_item = QTableWidgetItem(format_cell(column, record.get(column.key)))
                if col == 0:
                    table_item.setData(Qt.ItemDataRole.UserRole, record.get(self.config.id_field))
                self.table_widget.setItem(row, col, table_item)

    def selected_record(self) -> Optional[Record]:
        rows = {item.row() for item in self.table_widget.selectedItems()}
        if not rows:
            return None
        return self._row_records.get(min(rows))

    def _on_selection_changed(self):
        record = self.selected_record()
        busy = self.controller.view_model.mutating
        for button in (self.edit_button, self.delete_button, self.toggle_button):
            button.setEnabled(record is not None and not busy)
        self.record_selected.emit(record)

    def _on_banner_dismissed(self):
        view = self.controller.view_model
        if view.error is not None or view.mutation_error is not None:
            self.controller.dismiss_error()
        elif view.success_message:
            self.controller.dismiss_success()

    # =========================================================================
    # Actions
    # =========================================================================

    def open_create_form(self):
        if not self.config.can_create:
            return
        self._open_form(None)

    def open_edit_form(self):
        record = self.selected_record()
        if record is None or not self.config.can_update:
            return
        self._open_form(record)

    def _open_form(self, record: Optional[Record]):
        logger.debug(f"[{self.config.key}] opening {'edit' if record else 'create'} form")
        self.controller.clear_field_errors()
        self._form = RecordFormDialog(self.config, record, parent=self)
        self._form.submitted.connect(self._on_form_submitted)
        self._form.finished.connect(self._on_form_closed)
        self._form.open()

    def _on_form_submitted(self, values: Dict[str, Any]):
        form = self._form
        if form is None:
            return
        self._form_pending = True
        if form.record is None:
            sent = self.controller.create(values)
        else:
            sent = self.controller.update(form.record_id, values)
        if not sent:
            self._form_pending = False

    def _update_form(self, view: ListViewModel):
        form = self._form
        if form is None:
            return
        form.update_view(view)
        if self._form_pending and not view.mutating:
            self._form_pending = False
            if view.mutation_error is None and not view.field_errors:
                form.accept()

    def _on_form_closed(self, _result: int):
        self._form = None
        self._form_pending = False

    def delete_selected(self):
        record = self.selected_record()
        if record is None:
            return
        self.controller.delete(record.get(self.config.id_field))

    def toggle_selected(self):
        record = self.selected_record()
        if record is None:
            return
        self.controller.toggle_status(record.get(self.config.id_field))

    def showEvent(self, event):
        """Load on first show."""
        super().showEvent(event)
        if not self._loaded_once:
            self._loaded_once = True
            self.controller.refresh()

    def closeEvent(self, event):
        self.controller.remove_listener(self.update_view)
        super().closeEvent(event)
