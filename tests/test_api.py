"""Tests for the HTTP client, response envelopes and error taxonomy."""

import json

import pytest
import requests


def make_response(status_code, payload=None, url="https://api.test/api/admin/x"):
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response._content = b"" if payload is None else json.dumps(payload).encode("utf-8")
    response.headers["Content-Type"] = "application/json"
    return response


class FakeSession:
    """requests.Session stand-in returning queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.requests.append({
            "method": method, "url": url, "json": json, "headers": headers, "timeout": timeout,
        })
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


@pytest.fixture
def config():
    from shumba_admin.protocols import AdminConfig

    return AdminConfig(
        api_base_url="https://api.test/api/admin/",
        login_url="https://api.test/api/login",
        request_timeout_s=3,
    )


def make_client(config, *responses):
    from shumba_admin.api import AdminApiClient

    session = FakeSession(*responses)
    return AdminApiClient(config, session=session), session


# =========================================================================
# Error classification
# =========================================================================

@pytest.mark.parametrize("status,expected", [
    (401, "SessionExpired"),
    (403, "Forbidden"),
    (404, "NotFound"),
    (409, "Conflict"),
    (500, "ServerError"),
    (502, "ServerError"),
    (418, "ServerError"),
])
def test_classify_http_error_by_status(status, expected):
    from shumba_admin.api import classify_http_error

    error = classify_http_error(status, {"message": "nope"})
    assert error.kind == expected
    assert error.status_code == status


def test_session_expired_always_uses_fixed_message():
    from shumba_admin.api import classify_http_error

    error = classify_http_error(401, {"message": "Unauthenticated."})
    assert error.user_message == "Your session has expired. Please log in again."


def test_server_message_is_preferred_over_default():
    from shumba_admin.api import classify_http_error

    assert classify_http_error(409, {"message": "Phone already taken"}).user_message == "Phone already taken"
    assert classify_http_error(404, None).user_message == "The requested item was not found."


def test_validation_error_map_is_normalized():
    from shumba_admin.api import ValidationFailed, classify_http_error

    error = classify_http_error(422, {
        "message": "The given data was invalid.",
        "errors": {"name": "Name is required.", "phone": ["Too short.", "Must be numeric."]},
    })
    assert isinstance(error, ValidationFailed)
    assert error.field_errors == {
        "name": ["Name is required."],
        "phone": ["Too short.", "Must be numeric."],
    }


@pytest.mark.parametrize("payload", [
    None,
    {"message": "invalid"},
    {"errors": {}},
    {"errors": ["name"]},
    {"errors": {"name": {"nested": "x"}}},
    {"errors": {"name": []}},
    {"errors": {"name": ["ok", 3]}},
])
def test_ambiguous_validation_payload_is_server_error(payload):
    from shumba_admin.api import ServerError, classify_http_error

    assert isinstance(classify_http_error(422, payload), ServerError)


def test_flatten_field_errors():
    from shumba_admin.api import flatten_field_errors

    assert flatten_field_errors({"a": ["x", "y"], "b": ["z"]}) == "x, y, z"


# =========================================================================
# Envelopes
# =========================================================================

def test_unwrap_collection_accepts_envelope_and_bare_list():
    from shumba_admin.api import unwrap_collection

    assert unwrap_collection({"data": [{"id": 1}]}) == [{"id": 1}]
    assert unwrap_collection([{"id": 2}]) == [{"id": 2}]
    assert unwrap_collection({"data": []}) == []


@pytest.mark.parametrize("payload", [None, {"data": {"id": 1}}, {"items": []}, [1, 2], "oops"])
def test_unwrap_collection_rejects_unexpected_shapes(payload):
    from shumba_admin.api import ServerError, unwrap_collection

    with pytest.raises(ServerError):
        unwrap_collection(payload)


def test_check_write_result():
    from shumba_admin.api import ServerError, check_write_result

    assert check_write_result({"success": True, "message": "Saved"}) == "Saved"
    assert check_write_result(None) == ""
    assert check_write_result({"id": 5}) == ""
    with pytest.raises(ServerError) as exc_info:
        check_write_result({"success": False, "message": "Duplicate"})
    assert exc_info.value.user_message == "Duplicate"


@pytest.mark.parametrize("payload,expected", [
    ({"count": 12}, 12),
    ({"total": 7}, 7),
    ({"data": 3}, 3),
    (9, 9),
    ("15", 15),
    ({}, 0),
    (None, 0),
    ({"count": "abc"}, 0),
])
def test_read_count(payload, expected):
    from shumba_admin.api import read_count

    assert read_count(payload) == expected


# =========================================================================
# Client
# =========================================================================

def test_list_records_sends_bearer_token_and_unwraps(config):
    client, session = make_client(config, make_response(200, {"data": [{"id": 1}, {"id": 2}]}))

    records = client.list_records("/users", "tok")

    assert records == [{"id": 1}, {"id": 2}]
    sent = session.requests[0]
    assert sent["method"] == "GET"
    assert sent["url"] == "https://api.test/api/admin/users"
    assert sent["headers"]["Authorization"] == "Bearer tok"
    assert sent["headers"]["Accept"] == "application/json"
    assert sent["timeout"] == 3.0


def test_missing_token_never_sends(config):
    from shumba_admin.api import AuthRequired

    client, session = make_client(config)
    with pytest.raises(AuthRequired):
        client.list_records("/users", None)
    assert session.requests == []


def test_write_methods_use_configured_verbs(config):
    client, session = make_client(
        config,
        make_response(200, {"success": True, "message": "Created"}),
        make_response(200, {"success": True}),
        make_response(204),
    )

    assert client.create_record("/create-user", "tok", {"firstname": "Ann"}) == "Created"
    assert client.update_record("/update-answer/4", "tok", {"answer": "B"}, method="PUT") == ""
    assert client.delete_record("/delete-user/4", "tok", method="POST") == ""

    assert [(r["method"], r["url"]) for r in session.requests] == [
        ("POST", "https://api.test/api/admin/create-user"),
        ("PUT", "https://api.test/api/admin/update-answer/4"),
        ("POST", "https://api.test/api/admin/delete-user/4"),
    ]
    assert session.requests[0]["json"] == {"firstname": "Ann"}
    assert session.requests[2]["json"] is None


def test_error_statuses_raise_taxonomy(config):
    from shumba_admin.api import Conflict, SessionExpired, ValidationFailed

    client, _ = make_client(
        config,
        make_response(401, {"message": "Unauthenticated."}),
        make_response(409, {"message": "Already exists"}),
        make_response(422, {"errors": {"name": ["Required"]}}),
    )

    with pytest.raises(SessionExpired):
        client.list_records("/users", "tok")
    with pytest.raises(Conflict):
        client.create_record("/create-user", "tok", {})
    with pytest.raises(ValidationFailed) as exc_info:
        client.create_record("/create-user", "tok", {})
    assert exc_info.value.field_errors == {"name": ["Required"]}


def test_non_json_error_body_is_server_error(config):
    from shumba_admin.api import ServerError

    response = make_response(500)
    response._content = b"<html>Bad gateway</html>"
    client, _ = make_client(config, response)

    with pytest.raises(ServerError) as exc_info:
        client.get_json("/count-clients", "tok")
    assert exc_info.value.status_code == 500


def test_transport_failures(config):
    from shumba_admin.api import NetworkUnreachable, Unknown

    client, _ = make_client(
        config,
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
        requests.exceptions.InvalidURL("bad url"),
    )

    with pytest.raises(NetworkUnreachable):
        client.list_records("/users", "tok")
    with pytest.raises(NetworkUnreachable):
        client.list_records("/users", "tok")
    with pytest.raises(Unknown):
        client.list_records("/users", "tok")


def test_login_posts_credentials_without_token(config):
    client, session = make_client(config, make_response(200, {"token": "abc", "user": {"id": 1}}))

    payload = client.login("0771234567", "secret")

    assert payload == {"token": "abc", "user": {"id": 1}}
    sent = session.requests[0]
    assert sent["url"] == "https://api.test/api/login"
    assert sent["json"] == {"phone_number": "0771234567", "password": "secret"}
    assert "Authorization" not in sent["headers"]


def test_client_requires_base_url():
    from shumba_admin.api import AdminApiClient
    from shumba_admin.protocols import AdminConfig

    with pytest.raises(ValueError):
        AdminApiClient(AdminConfig(api_base_url=""), session=FakeSession())


def test_close_closes_session(config):
    client, session = make_client(config)
    client.close()
    assert session.closed
