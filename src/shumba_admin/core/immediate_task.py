"""Synchronous task runner for headless use (scripts, tests)."""

from typing import Any, Callable, Optional, Tuple


class ImmediateTaskRunner:
    """Runs the target inline and calls back before returning."""

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        try:
            result = target(*args)
        except Exception as e:
            if on_error:
                on_error(e)
            return
        if on_success:
            on_success(result)

    def cleanup(self) -> None:
        pass


class DeferredTaskRunner:
    """
    Queues calls until ``complete()`` is invoked.

    Lets callers decide the order in which overlapping requests resolve.
    """

    def __init__(self):
        self.pending = []

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        self.pending.append((target, args, on_success, on_error))

    def complete(self, index: int = 0) -> None:
        """Run and resolve the queued call at ``index``."""
        target, args, on_success, on_error = self.pending.pop(index)
        ImmediateTaskRunner().run(target, args, on_success, on_error)

    def complete_all(self) -> None:
        while self.pending:
            self.complete(0)

    def cleanup(self) -> None:
        self.pending.clear()
