"""
Logging setup and log-file discovery for the admin console.

The application writes one timestamped log file per run into the
configured log directory; the settings panel lists those files.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from shumba_admin.protocols.admin_config import AdminConfig, get_admin_config

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# File handler installed by setup_logging()
_file_handler: Optional[logging.FileHandler] = None


def get_log_dir(config: Optional[AdminConfig] = None) -> Path:
    """Return configured log directory or default."""
    config = config or get_admin_config()
    if config.log_dir:
        return Path(config.log_dir)
    return Path.home() / ".local" / "share" / "shumba_admin" / "logs"


def setup_logging(config: Optional[AdminConfig] = None) -> Path:
    """
    Configure the root logger with a per-run file handler and a console handler.

    Returns:
        Path of the log file for this run
    """
    global _file_handler
    config = config or get_admin_config()
    log_dir = get_log_dir(config)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{config.log_prefix}{int(time.time())}.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(stream_handler)
    _file_handler = file_handler

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    logger.info(f"Logging to {log_file}")
    return log_file


def get_current_log_file_path() -> Optional[str]:
    """Return the file setup_logging() is writing to, if its handler is still attached."""
    if _file_handler is None or _file_handler not in logging.getLogger().handlers:
        return None
    return _file_handler.baseFilename


@dataclass
class LogFileInfo:
    """Information about a discovered log file."""
    path: Path
    is_current: bool = False
    display_name: Optional[str] = None

    def __post_init__(self):
        """Generate display name if not provided."""
        if not self.display_name:
            started = _started_at(self.path)
            label = started.strftime("%Y-%m-%d %H:%M:%S") if started else self.path.name
            self.display_name = f"{label} (current)" if self.is_current else label


def _started_at(path: Path) -> Optional[datetime]:
    """Parse the run timestamp from ``<prefix><epoch>.log``."""
    stamp = path.stem.rsplit("_", 1)[-1]
    if not stamp.isdigit():
        return None
    return datetime.fromtimestamp(int(stamp))


def is_app_log_file(file_path: Path, config: Optional[AdminConfig] = None) -> bool:
    """Check if a file matches the configured log prefix."""
    config = config or get_admin_config()
    return file_path.suffix == ".log" and file_path.name.startswith(config.log_prefix)


def discover_logs(log_directory: Optional[Path] = None,
                  config: Optional[AdminConfig] = None) -> List[LogFileInfo]:
    """
    List application log files, newest first.

    Args:
        log_directory: Directory to search (defaults to configured log directory)
        config: Configuration supplying the log prefix

    Returns:
        List of LogFileInfo objects
    """
    config = config or get_admin_config()
    log_directory = log_directory or get_log_dir(config)
    if not log_directory.exists():
        return []

    current = get_current_log_file_path()
    current_path = Path(current) if current else None
    logs = [
        LogFileInfo(path, is_current=(path == current_path))
        for path in log_directory.glob("*.log")
        if is_app_log_file(path, config)
    ]
    logs.sort(key=lambda info: info.path.name, reverse=True)
    return logs
