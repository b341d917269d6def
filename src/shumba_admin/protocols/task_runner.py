"""Protocol for objects that execute controller work off the UI path."""

from typing import Any, Callable, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class TaskRunner(Protocol):
    """
    Executes ``target(*args)`` and reports back through callbacks.

    Implementations must invoke exactly one of ``on_success``/``on_error``
    per call, on the thread that owns the controller (the UI thread for
    Qt runners). ``on_error`` receives the exception object itself.
    """

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Any:
        ...

    def cleanup(self) -> None:
        ...
