"""
Configuration and structural protocols.
"""

from .admin_config import AdminConfig, set_admin_config, get_admin_config
from .task_runner import TaskRunner

__all__ = [
    "AdminConfig",
    "set_admin_config",
    "get_admin_config",
    "TaskRunner",
]
