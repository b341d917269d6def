"""
Core utilities.

Pagination arithmetic, task runners and logging helpers with no
knowledge of any particular screen.
"""

from .pagination import total_pages, paginate, clamp_page
from .debounce_timer import DebounceTimer
from .background_task import BackgroundTask, BackgroundTaskManager
from .immediate_task import ImmediateTaskRunner, DeferredTaskRunner
from .log_utils import setup_logging, get_current_log_file_path, discover_logs, LogFileInfo

__all__ = [
    "total_pages",
    "paginate",
    "clamp_page",
    "DebounceTimer",
    "BackgroundTask",
    "BackgroundTaskManager",
    "ImmediateTaskRunner",
    "DeferredTaskRunner",
    "setup_logging",
    "get_current_log_file_path",
    "discover_logs",
    "LogFileInfo",
]
