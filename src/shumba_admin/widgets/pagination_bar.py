"""Previous/next page navigation with a page indicator."""

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QWidget, QHBoxLayout, QLabel, QPushButton, QSpinBox

from shumba_admin.services.list_controller import ListViewModel


class PaginationBar(QWidget):
    """Emits ``page_requested`` with a 1-based page; never changes pages itself."""

    page_requested = pyqtSignal(int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._current = 1

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.summary_label = QLabel()
        layout.addWidget(self.summary_label, 1)

        self.prev_button = QPushButton("« Previous")
        self.prev_button.clicked.connect(lambda: self.page_requested.emit(self._current - 1))
        layout.addWidget(self.prev_button)

        self.page_spin = QSpinBox()
        self.page_spin.setMinimum(1)
        self.page_spin.setKeyboardTracking(False)
        self.page_spin.valueChanged.connect(self._on_spin_changed)
        layout.addWidget(self.page_spin)

        self.page_label = QLabel()
        layout.addWidget(self.page_label)

        self.next_button = QPushButton("Next »")
        self.next_button.clicked.connect(lambda: self.page_requested.emit(self._current + 1))
        layout.addWidget(self.next_button)

    def update_view(self, view: ListViewModel):
        self._current = view.current_page
        self.summary_label.setText(view.summary())
        self.page_label.setText(f"of {view.total_pages}")
        self.prev_button.setEnabled(view.has_previous)
        self.next_button.setEnabled(view.has_next)

        self.page_spin.blockSignals(True)
        try:
            self.page_spin.setMaximum(view.total_pages)
            self.page_spin.setValue(view.current_page)
        finally:
            self.page_spin.blockSignals(False)

    def _on_spin_changed(self, value: int):
        if value != self._current:
            self.page_requested.emit(value)
