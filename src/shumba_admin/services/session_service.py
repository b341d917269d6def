"""
Session context shared by every screen.

Authentication state lives in persistent settings (``authToken``,
``isAuthenticated``, ``userPhone``, ``userData``). Controllers never touch
that storage directly: they receive a SessionService at construction and
use ``get_token()`` and ``on_unauthorized()``.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from PyQt6.QtCore import QSettings

from shumba_admin.protocols.admin_config import AdminConfig, get_admin_config

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"
FALLBACK_TOKEN_KEYS = ("token", "userToken")
AUTHENTICATED_KEY = "isAuthenticated"
PHONE_KEY = "userPhone"
USER_DATA_KEY = "userData"


@dataclass
class SessionUser:
    """The logged-in administrator."""
    phone: str
    token: str
    data: Optional[Dict[str, Any]] = None


class SessionStore:
    """String key/value view over QSettings."""

    def __init__(self, settings: QSettings):
        self._settings = settings

    @classmethod
    def for_config(cls, config: Optional[AdminConfig] = None) -> "SessionStore":
        config = config or get_admin_config()
        return cls(QSettings(config.settings_organization, config.settings_application))

    def get(self, key: str) -> Optional[str]:
        value = self._settings.value(key, None)
        if value is None:
            return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        self._settings.setValue(key, value)
        self._settings.sync()

    def remove(self, key: str) -> None:
        self._settings.remove(key)
        self._settings.sync()

    def clear(self) -> None:
        self._settings.clear()
        self._settings.sync()


class SessionService:
    """
    Explicit session context injected into controllers and services.

    Listeners registered with ``add_unauthorized_listener`` are called when
    any request is answered with 401; the main window uses this to schedule
    the redirect to the login dialog.
    """

    def __init__(self, store: SessionStore):
        self._store = store
        self._unauthorized_listeners: List[Callable[[], None]] = []

    def get_token(self) -> Optional[str]:
        """Return the bearer token, checking the legacy keys as fallback."""
        for key in (TOKEN_KEY,) + FALLBACK_TOKEN_KEYS:
            token = self._store.get(key)
            if token:
                return token
        return None

    def is_authenticated(self) -> bool:
        return self.current_user() is not None

    def current_user(self) -> Optional[SessionUser]:
        """Return the stored user when token, phone and flag are all present."""
        token = self.get_token()
        phone = self._store.get(PHONE_KEY)
        flagged = (self._store.get(AUTHENTICATED_KEY) or "").lower() == "true"
        if not (token and phone and flagged):
            return None

        data = None
        raw = self._store.get(USER_DATA_KEY)
        if raw:
            try:
                data = json.loads(raw)
            except ValueError:
                logger.warning("Stored userData is not valid JSON; ignoring it")
        return SessionUser(phone=phone, token=token, data=data)

    def start(self, token: str, phone: str, user_data: Optional[Dict[str, Any]] = None) -> SessionUser:
        """Persist a fresh login."""
        self._store.set(AUTHENTICATED_KEY, "true")
        self._store.set(PHONE_KEY, phone)
        self._store.set(TOKEN_KEY, token)
        self._store.set(USER_DATA_KEY, json.dumps(user_data or {}))
        logger.info(f"Session started for {phone}")
        return SessionUser(phone=phone, token=token, data=user_data or {})

    def end(self) -> None:
        """Log out: clear all stored session state."""
        self._store.clear()
        logger.info("Session ended")

    def add_unauthorized_listener(self, callback: Callable[[], None]) -> None:
        self._unauthorized_listeners.append(callback)

    def on_unauthorized(self) -> None:
        """Drop the rejected token and notify listeners."""
        logger.warning("Server rejected the session token (401)")
        for key in (TOKEN_KEY,) + FALLBACK_TOKEN_KEYS:
            self._store.remove(key)
        self._store.remove(AUTHENTICATED_KEY)
        for callback in list(self._unauthorized_listeners):
            callback()
