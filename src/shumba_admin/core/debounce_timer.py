"""Trailing debounce for free-text input (search boxes)."""

from typing import Any, Callable, Optional
from PyQt6.QtCore import QObject, QTimer

_UNSET = object()


class DebounceTimer:
    """
    Trailing debounce that delivers only the most recent value.

    Each trigger() restarts the delay; the handler receives the last value
    passed once delay_ms of inactivity has elapsed.

    Usage:
        self._search_debounce = DebounceTimer(250, controller.search, parent=self)
        self.search_input.textChanged.connect(self._search_debounce.trigger)
    """

    def __init__(self, delay_ms: int, handler: Callable[[Any], None],
                 parent: Optional[QObject] = None):
        self._handler = handler
        self._value: Any = _UNSET
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self._fire)

    @property
    def pending(self) -> bool:
        return self._timer.isActive()

    def trigger(self, value: Any = None):
        """Store value and restart the delay."""
        self._value = value
        self._timer.start()

    def cancel(self):
        """Drop the pending value without calling the handler."""
        self._timer.stop()
        self._value = _UNSET

    def flush(self):
        """Deliver the pending value now, if any."""
        if self._value is _UNSET:
            return
        self._timer.stop()
        self._fire()

    def _fire(self):
        value, self._value = self._value, _UNSET
        if value is not _UNSET:
            self._handler(value)
