"""pytest configuration and fixtures for shumba-admin tests."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtCore import QSettings
from PyQt6.QtWidgets import QApplication

from shumba_admin.api.envelope import check_write_result
from shumba_admin.api.errors import AuthRequired
from shumba_admin.services.session_service import SessionService, SessionStore


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


class FakeApiClient:
    """
    In-memory stand-in for AdminApiClient.

    ``collections`` maps list paths to records; ``failures`` maps a path to
    the exception the next call to it raises. Every call is recorded in
    ``calls`` as ``(operation, path, extra)``.
    """

    def __init__(self, collections=None):
        self.collections = {path: list(records) for path, records in (collections or {}).items()}
        self.failures = {}
        self.write_responses = {}
        self.json_responses = {}
        self.login_response = {}
        self.calls = []

    def _check(self, path, token):
        if not token:
            raise AuthRequired()
        error = self.failures.get(path)
        if error is not None:
            raise error

    def list_records(self, path, token):
        self.calls.append(("list", path, None))
        self._check(path, token)
        return [dict(record) for record in self.collections.get(path, [])]

    def _write(self, operation, path, token, extra):
        self.calls.append((operation, path, extra))
        self._check(path, token)
        return check_write_result(self.write_responses.get(path, {"success": True}))

    def create_record(self, path, token, fields, method="POST"):
        return self._write("create", path, token, (dict(fields), method))

    def update_record(self, path, token, fields, method="POST"):
        return self._write("update", path, token, (dict(fields), method))

    def delete_record(self, path, token, method="DELETE"):
        return self._write("delete", path, token, method)

    def get_json(self, path, token):
        self.calls.append(("get", path, None))
        self._check(path, token)
        return self.json_responses.get(path)

    def post_json(self, path, token, body):
        return self._write("post", path, token, dict(body))

    def login(self, phone_number, password):
        self.calls.append(("login", None, (phone_number, password)))
        error = self.failures.get("login")
        if error is not None:
            raise error
        return self.login_response

    def network_calls(self, operation=None):
        return [call for call in self.calls if operation is None or call[0] == operation]


@pytest.fixture
def fake_client():
    return FakeApiClient()


@pytest.fixture
def session_store(qapp, tmp_path):
    settings = QSettings(str(tmp_path / "session.ini"), QSettings.Format.IniFormat)
    return SessionStore(settings)


@pytest.fixture
def session(session_store):
    return SessionService(session_store)


@pytest.fixture
def logged_in(session):
    session.start("tok-123", "0771234567", {"name": "Admin"})
    return session


def make_records(count, **extra):
    """``count`` records with ids 1..count and a searchable name."""
    return [dict({"id": i, "name": f"Record {i}", "status": "active"}, **extra) for i in range(1, count + 1)]
