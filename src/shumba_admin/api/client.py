"""
HTTP client for the Shumba Wheels admin REST API.

One instance is shared by every screen. It is stateless apart from the
underlying ``requests.Session``: the bearer token is passed per call by the
caller (taken from the session context), so the client never reads ambient
storage.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from shumba_admin.api.envelope import Record, check_write_result, unwrap_collection
from shumba_admin.api.errors import (
    AuthRequired,
    NetworkUnreachable,
    Unknown,
    classify_http_error,
)
from shumba_admin.protocols.admin_config import AdminConfig, get_admin_config

logger = logging.getLogger(__name__)


def _safe_json(resp: requests.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


class AdminApiClient:
    """Thin JSON client; raises ``AdminApiError`` subclasses on failure."""

    def __init__(
        self,
        config: Optional[AdminConfig] = None,
        *,
        session: Optional[requests.Session] = None,
    ):
        config = config or get_admin_config()
        if not config.api_base_url:
            raise ValueError("api_base_url is required")

        self._base_url = config.api_base_url.rstrip("/")
        self._login_url = config.login_url
        self._timeout = float(config.request_timeout_s)
        self._headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._session.close()

    def url_for(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    # --------------------------------------------------
    # Transport
    # --------------------------------------------------

    def _send(self, method: str, url: str, *, token: Optional[str] = None,
              body: Optional[Mapping[str, Any]] = None) -> Any:
        headers = dict(self._headers)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = self._session.request(
                method,
                url,
                json=dict(body) if body is not None else None,
                headers=headers,
                timeout=self._timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.error(f"{method} {url} failed without response: {e}")
            raise NetworkUnreachable() from e
        except requests.RequestException as e:
            logger.error(f"{method} {url} could not be sent: {e}")
            raise Unknown(str(e) or None, cause=e) from e

        payload = _safe_json(resp)
        if resp.status_code >= 400:
            error = classify_http_error(resp.status_code, payload)
            logger.error(f"{method} {url} -> {resp.status_code} ({error.kind})")
            raise error

        logger.debug(f"{method} {url} -> {resp.status_code}")
        return payload

    def _authed(self, method: str, path: str, token: Optional[str],
                body: Optional[Mapping[str, Any]] = None) -> Any:
        if not token:
            raise AuthRequired()
        return self._send(method, self.url_for(path), token=token, body=body)

    # --------------------------------------------------
    # Collections
    # --------------------------------------------------

    def list_records(self, path: str, token: Optional[str]) -> List[Record]:
        """Fetch a full collection (the API has no server-side paging)."""
        records = unwrap_collection(self._authed("GET", path, token))
        logger.info(f"Fetched {len(records)} records from {path}")
        return records

    def create_record(self, path: str, token: Optional[str],
                      fields: Mapping[str, Any], method: str = "POST") -> str:
        message = check_write_result(self._authed(method, path, token, fields))
        logger.info(f"Created record via {path}")
        return message

    def update_record(self, path: str, token: Optional[str],
                      fields: Mapping[str, Any], method: str = "POST") -> str:
        message = check_write_result(self._authed(method, path, token, fields))
        logger.info(f"Updated record via {path}")
        return message

    def delete_record(self, path: str, token: Optional[str], method: str = "DELETE") -> str:
        message = check_write_result(self._authed(method, path, token))
        logger.info(f"Deleted record via {path}")
        return message

    # --------------------------------------------------
    # Misc endpoints (counters, settings)
    # --------------------------------------------------

    def get_json(self, path: str, token: Optional[str]) -> Any:
        return self._authed("GET", path, token)

    def post_json(self, path: str, token: Optional[str], body: Mapping[str, Any]) -> str:
        return check_write_result(self._authed("POST", path, token, body))

    # --------------------------------------------------
    # Login (unauthenticated)
    # --------------------------------------------------

    def login(self, phone_number: str, password: str) -> Dict[str, Any]:
        """Post credentials; returns the decoded body (``{}`` when empty)."""
        logger.info(f"Logging in as {phone_number}")
        payload = self._send(
            "POST",
            self._login_url,
            body={"phone_number": phone_number, "password": password},
        )
        return payload if isinstance(payload, dict) else {}
