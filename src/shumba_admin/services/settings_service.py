"""Password changes and price settings."""

import logging
from typing import Any, Dict, Mapping

from shumba_admin.api.client import AdminApiClient
from shumba_admin.api.errors import AuthRequired, FieldErrors, ValidationFailed
from shumba_admin.services.session_service import SessionService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _check_new_password(errors: FieldErrors, new_password: str, confirm_password: str) -> None:
    if not new_password:
        errors["new_password"] = ["New password is required."]
    elif len(new_password) < MIN_PASSWORD_LENGTH:
        errors["new_password"] = [f"Password must be at least {MIN_PASSWORD_LENGTH} characters."]
    if new_password != confirm_password:
        errors["confirm_password"] = ["Passwords do not match."]


class SettingsService:
    def __init__(self, client: AdminApiClient, session: SessionService):
        self._client = client
        self._session = session

    def _token(self) -> str:
        token = self._session.get_token()
        if not token:
            raise AuthRequired()
        return token

    def change_admin_password(self, current_password: str, new_password: str,
                              confirm_password: str) -> str:
        errors: FieldErrors = {}
        if not current_password:
            errors["current_password"] = ["Current password is required."]
        _check_new_password(errors, new_password, confirm_password)
        if errors:
            raise ValidationFailed(errors)

        user = self._session.current_user()
        message = self._client.post_json("/change-admin-password", self._token(), {
            "phone_number": user.phone if user else "",
            "current_password": current_password,
            "new_password": new_password,
            "new_password_confirmation": confirm_password,
        })
        logger.info("Admin password changed")
        return message or "Password changed successfully."

    def change_user_password(self, phone_number: str, new_password: str,
                             confirm_password: str) -> str:
        errors: FieldErrors = {}
        phone_number = (phone_number or "").strip()
        if not phone_number:
            errors["phone_number"] = ["Phone number is required."]
        _check_new_password(errors, new_password, confirm_password)
        if errors:
            raise ValidationFailed(errors)

        message = self._client.post_json("/change-user-password", self._token(), {
            "phone_number": phone_number,
            "new_password": new_password,
            "new_password_confirmation": confirm_password,
        })
        logger.info(f"Password changed for user {phone_number}")
        return message or "User password changed successfully."

    def get_prices(self) -> Dict[str, Any]:
        payload = self._client.get_json("/get-prices", self._token())
        if isinstance(payload, Mapping):
            data = payload.get("data", payload)
            if isinstance(data, Mapping):
                return dict(data)
            if isinstance(data, list) and data and isinstance(data[0], Mapping):
                return dict(data[0])
        return {}

    def update_prices(self, prices: Mapping[str, Any]) -> str:
        errors: FieldErrors = {}
        cleaned: Dict[str, float] = {}
        for name, value in prices.items():
            try:
                amount = float(value)
            except (TypeError, ValueError):
                errors[name] = ["Enter a valid amount."]
                continue
            if amount < 0:
                errors[name] = ["Amount cannot be negative."]
                continue
            cleaned[name] = amount
        if errors:
            raise ValidationFailed(errors)

        message = self._client.post_json("/price", self._token(), cleaned)
        logger.info(f"Prices updated: {sorted(cleaned)}")
        return message or "Prices updated successfully."
