"""
Wheel-proof editors for record and price forms.

Forms live inside scrollable screens; scrolling past a spinbox or combobox
must not change a price or a status.
"""

from PyQt6.QtWidgets import QComboBox, QDoubleSpinBox
from PyQt6.QtGui import QWheelEvent

MAX_AMOUNT = 1_000_000


class NoScrollDoubleSpinBox(QDoubleSpinBox):
    """Amount editor: two decimals, non-negative, ignores the mouse wheel."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setDecimals(2)
        self.setMinimum(0)
        self.setMaximum(MAX_AMOUNT)

    def wheelEvent(self, event: QWheelEvent):
        """Ignore wheel events to prevent accidental value changes."""
        event.ignore()


class NoScrollComboBox(QComboBox):
    """ComboBox that ignores wheel events to prevent accidental value changes."""

    def wheelEvent(self, event: QWheelEvent):
        event.ignore()
