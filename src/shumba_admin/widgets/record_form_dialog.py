"""
Create/edit dialog generated from an entity's FieldDefs.

The dialog only collects values and shows errors; the list controller
decides whether a submission is valid and whether it succeeded.
"""

from typing import Any, Dict, Mapping, Optional
from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QCheckBox, QComboBox, QDialog, QDialogButtonBox, QDoubleSpinBox, QFormLayout,
    QLabel, QLineEdit, QPlainTextEdit, QVBoxLayout, QWidget
)

from shumba_admin.api.errors import ValidationFailed
from shumba_admin.services.entity_registry import EntityConfig, FieldDef
from shumba_admin.services.list_controller import ListViewModel
from shumba_admin.widgets.no_scroll_spinbox import NoScrollComboBox, NoScrollDoubleSpinBox

FIELD_ERROR_STYLE = "color: #c0392b;"


def _create_editor(field: FieldDef) -> QWidget:
    if field.kind == "multiline":
        editor = QPlainTextEdit()
        editor.setFixedHeight(80)
        return editor
    if field.kind == "choice":
        editor = NoScrollComboBox()
        editor.addItems(field.choices)
        return editor
    if field.kind == "bool":
        return QCheckBox()
    if field.kind == "number":
        return NoScrollDoubleSpinBox()
    return QLineEdit()


def _read_editor(editor: QWidget) -> Any:
    if isinstance(editor, QPlainTextEdit):
        return editor.toPlainText().strip()
    if isinstance(editor, QComboBox):
        return editor.currentText()
    if isinstance(editor, QCheckBox):
        return editor.isChecked()
    if isinstance(editor, QDoubleSpinBox):
        return editor.value()
    return editor.text().strip()


def _write_editor(editor: QWidget, value: Any) -> None:
    if value is None:
        return
    if isinstance(editor, QPlainTextEdit):
        editor.setPlainText(str(value))
    elif isinstance(editor, QComboBox):
        index = editor.findText(str(value))
        if index < 0:
            editor.addItem(str(value))
            index = editor.count() - 1
        editor.setCurrentIndex(index)
    elif isinstance(editor, QCheckBox):
        editor.setChecked(value in (True, 1, "1", "true", "True"))
    elif isinstance(editor, QDoubleSpinBox):
        try:
            editor.setValue(float(value))
        except (TypeError, ValueError):
            pass
    else:
        editor.setText(str(value))


class RecordFormDialog(QDialog):
    """Form for one record; emits ``submitted`` with the collected values."""

    submitted = pyqtSignal(dict)

    def __init__(self, config: EntityConfig, record: Optional[Mapping[str, Any]] = None,
                 parent=None):
        super().__init__(parent)
        self.config = config
        self.record = dict(record) if record else None
        self.setWindowTitle(f"{'Edit' if record else 'Add'} {config.title.lower()}")
        self.setModal(True)

        self._editors: Dict[str, QWidget] = {}
        self._error_labels: Dict[str, QLabel] = {}

        layout = QVBoxLayout(self)
        form = QFormLayout()
        for field in config.form_fields:
            editor = _create_editor(field)
            error_label = QLabel()
            error_label.setStyleSheet(FIELD_ERROR_STYLE)
            error_label.hide()

            cell = QWidget()
            cell_layout = QVBoxLayout(cell)
            cell_layout.setContentsMargins(0, 0, 0, 0)
            cell_layout.addWidget(editor)
            cell_layout.addWidget(error_label)

            label = field.label + (" *" if field.key in config.required_fields else "")
            form.addRow(label, cell)
            self._editors[field.key] = editor
            self._error_labels[field.key] = error_label
            if self.record:
                _write_editor(editor, self.record.get(field.key))
        layout.addLayout(form)

        self.general_error = QLabel()
        self.general_error.setStyleSheet(FIELD_ERROR_STYLE)
        self.general_error.setWordWrap(True)
        self.general_error.hide()
        layout.addWidget(self.general_error)

        self.buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel
        )
        self.buttons.accepted.connect(self._on_save)
        self.buttons.rejected.connect(self.reject)
        layout.addWidget(self.buttons)

    @property
    def record_id(self) -> Any:
        return self.record.get(self.config.id_field) if self.record else None

    def editor(self, key: str) -> QWidget:
        return self._editors[key]

    def values(self) -> Dict[str, Any]:
        return {key: _read_editor(editor) for key, editor in self._editors.items()}

    def set_values(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            if key in self._editors:
                _write_editor(self._editors[key], value)

    def _on_save(self):
        self.set_field_errors({})
        self.submitted.emit(self.values())

    def set_field_errors(self, field_errors: Mapping[str, list]):
        for key, label in self._error_labels.items():
            messages = field_errors.get(key)
            label.setText(" ".join(messages) if messages else "")
            label.setVisible(bool(messages))
        unplaced = [m for key, msgs in field_errors.items() if key not in self._error_labels for m in msgs]
        self._set_general_error(" ".join(unplaced))

    def _set_general_error(self, text: str):
        self.general_error.setText(text)
        self.general_error.setVisible(bool(text))

    def field_error(self, key: str) -> str:
        return self._error_labels[key].text()

    def update_view(self, view: ListViewModel):
        """Reflect an in-flight or failed submission."""
        save_button = self.buttons.button(QDialogButtonBox.StandardButton.Save)
        save_button.setEnabled(not view.mutating)
        self.set_field_errors(view.field_errors)
        error = view.mutation_error
        if error is not None and not isinstance(error, ValidationFailed):
            self._set_general_error(error.user_message)
