"""Application configuration for the admin console.

Provides a single dataclass the rest of the package reads through
``get_admin_config()``; the application entry point installs the
effective instance with ``set_admin_config()``.
"""

import logging
import os
from dataclasses import dataclass, fields
from typing import Dict, Optional

logger = logging.getLogger(__name__)

ENV_PREFIX = "SHUMBA_ADMIN_"

# Environment variable suffix -> dataclass field
_ENV_FIELDS: Dict[str, str] = {
    "API_BASE_URL": "api_base_url",
    "LOGIN_URL": "login_url",
    "TIMEOUT": "request_timeout_s",
    "LOG_DIR": "log_dir",
    "LOG_LEVEL": "log_level",
}


@dataclass
class AdminConfig:
    """Runtime configuration.

    Attributes:
        api_base_url: Base URL every admin endpoint path is joined to
        login_url: Absolute URL of the login endpoint
        request_timeout_s: Single connect/response timeout for HTTP calls
        redirect_delay_ms: Delay before showing the login dialog after a 401
        search_debounce_ms: Idle time before search input is applied
        notice_timeout_ms: Lifetime of transient success banners
        settings_organization: QSettings organization scope
        settings_application: QSettings application scope
        log_dir: Directory for log files (None = per-user default)
        log_prefix: Log file name prefix
        log_level: Root log level name
    """

    api_base_url: str = "https://api.shumbawheels.co.zw/api/admin"
    login_url: str = "https://api.shumbawheels.co.zw/api/login"
    request_timeout_s: float = 10.0
    redirect_delay_ms: int = 1500
    search_debounce_ms: int = 250
    notice_timeout_ms: int = 4000
    settings_organization: str = "ShumbaWheels"
    settings_application: str = "shumba-admin"
    log_dir: Optional[str] = None
    log_prefix: str = "shumba_admin_"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "AdminConfig":
        """Build a config with ``SHUMBA_ADMIN_*`` environment overrides applied."""
        environ = os.environ if environ is None else environ
        types = {f.name: f.type for f in fields(cls)}
        overrides = {}
        for suffix, name in _ENV_FIELDS.items():
            raw = environ.get(f"{ENV_PREFIX}{suffix}")
            if raw is None or raw == "":
                continue
            if types[name] in (float, "float"):
                try:
                    overrides[name] = float(raw)
                except ValueError:
                    logger.warning(f"Ignoring {ENV_PREFIX}{suffix}={raw!r}: not a number")
                continue
            overrides[name] = raw
        return cls(**overrides)


# Global config instance (set by application)
_admin_config: Optional[AdminConfig] = None


def set_admin_config(config: AdminConfig) -> None:
    """Install the process-wide configuration."""
    global _admin_config
    _admin_config = config


def get_admin_config() -> AdminConfig:
    """Return the installed configuration, or defaults if none was set."""
    if _admin_config is None:
        return AdminConfig()
    return _admin_config
