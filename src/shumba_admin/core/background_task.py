"""Worker-thread execution of blocking API calls."""

import logging
from typing import Callable, Any, Optional, Set, Tuple
from PyQt6.QtCore import QThread, pyqtSignal

logger = logging.getLogger(__name__)

CLEANUP_WAIT_MS = 200     # Per-task wait when a window closes


class BackgroundTask(QThread):
    """
    Runs one blocking call (an HTTP request) on a worker thread.

    Usage:
        task = BackgroundTask(client.list_records, (path, token))
        task.succeeded.connect(on_success)
        task.failed.connect(on_error)
        task.start()

    After ``cancel()`` neither signal is emitted.
    """

    succeeded = pyqtSignal(object)
    failed = pyqtSignal(Exception)  # The exception itself; callers classify it

    def __init__(self, target: Callable[..., Any], args: Tuple = (), parent=None):
        super().__init__(parent)
        self._call = (target, tuple(args))
        self._cancelled = False

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def run(self):
        target, args = self._call
        try:
            result = target(*args)
        except Exception as e:
            if not self._cancelled:
                self.failed.emit(e)
            return
        if not self._cancelled:
            self.succeeded.emit(result)

    def cancel(self):
        """Suppress both signals from now on."""
        self._cancelled = True


class BackgroundTaskManager:
    """
    Owns the in-flight tasks of one screen.

    Unlike a single-slot runner, a list screen may have a fetch and a
    mutation in flight together, so every started task is tracked until it
    finishes. Ordering between overlapping fetches is the caller's concern
    (the list controller tags fetches with sequence numbers).

    Usage in widget:
        self._tasks = BackgroundTaskManager()
        controller = RemoteListController(config, client, session, runner=self._tasks)

        def closeEvent(self, event):
            self._tasks.cleanup()
            super().closeEvent(event)
    """

    def __init__(self):
        self._tasks: Set[BackgroundTask] = set()

    @property
    def active_count(self) -> int:
        return sum(1 for task in self._tasks if task.isRunning())

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> BackgroundTask:
        """
        Start target on a worker thread.

        Args:
            target: Blocking function to execute
            args: Positional arguments for target
            on_success: Callback for the result (UI thread)
            on_error: Callback for the exception (UI thread)

        Returns:
            The started BackgroundTask
        """
        task = BackgroundTask(target=target, args=args)

        def finish(callback, payload):
            self._tasks.discard(task)
            if callback:
                callback(payload)

        task.succeeded.connect(lambda result: finish(on_success, result))
        task.failed.connect(lambda error: finish(on_error, error))
        task.finished.connect(lambda: self._tasks.discard(task))

        self._tasks.add(task)
        task.start()
        return task

    def cleanup(self):
        """Cancel and wait for every task. Call from closeEvent."""
        for task in list(self._tasks):
            if task.isRunning():
                task.cancel()
                if not task.wait(CLEANUP_WAIT_MS):
                    logger.warning("Background task still running after cleanup wait")
        self._tasks.clear()
