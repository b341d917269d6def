"""Administrator login and logout."""

import logging

from shumba_admin.api.client import AdminApiClient
from shumba_admin.api.errors import (
    InvalidCredentials,
    ServerError,
    SessionExpired,
    ValidationFailed,
)
from shumba_admin.services.session_service import SessionService, SessionUser

logger = logging.getLogger(__name__)


def _is_success(payload: dict) -> bool:
    # Any 2xx reaching here counts, matching the backend's loose contract;
    # an explicit false flag still wins.
    if payload.get("success") in (False, "false"):
        return False
    if payload.get("status") in ("error", "failed"):
        return False
    return True


class AuthService:
    """Turns phone/password credentials into a stored session."""

    def __init__(self, client: AdminApiClient, session: SessionService):
        self._client = client
        self._session = session

    def login(self, phone_number: str, password: str) -> SessionUser:
        """
        Authenticate and persist the session.

        Raises:
            ValidationFailed: a credential is blank (nothing is sent) or the
                server rejected the input (422)
            InvalidCredentials: the server answered 401
            ServerError: the server reported failure in the response body
            NetworkUnreachable: no response
        """
        phone_number = (phone_number or "").strip()
        password = (password or "").strip()
        missing = {}
        if not phone_number:
            missing["phone_number"] = ["Phone number is required."]
        if not password:
            missing["password"] = ["Password is required."]
        if missing:
            raise ValidationFailed(missing, "Please enter both phone number and password")

        try:
            payload = self._client.login(phone_number, password)
        except SessionExpired as e:
            raise InvalidCredentials(status_code=401) from e

        if not _is_success(payload):
            message = payload.get("message") or payload.get("error")
            logger.warning(f"Login rejected for {phone_number}: {message}")
            raise ServerError(message or "Login failed. Please check your credentials.")

        token = payload.get("token") or payload.get("access_token") or ""
        user_data = payload.get("user") or payload.get("data") or {}
        if not isinstance(user_data, dict):
            user_data = {}
        return self._session.start(token, phone_number, user_data)

    def logout(self) -> None:
        self._session.end()
