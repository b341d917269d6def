"""Tests for session, auth, search, lookup and the supporting services."""

import pytest

from conftest import FakeApiClient


# =========================================================================
# Configuration
# =========================================================================

def test_config_from_env_overrides():
    from shumba_admin.protocols import AdminConfig

    config = AdminConfig.from_env({
        "SHUMBA_ADMIN_API_BASE_URL": "http://localhost:8000/api/admin",
        "SHUMBA_ADMIN_TIMEOUT": "2.5",
        "SHUMBA_ADMIN_LOG_LEVEL": "DEBUG",
        "SHUMBA_ADMIN_LOG_DIR": "",
        "UNRELATED": "x",
    })
    assert config.api_base_url == "http://localhost:8000/api/admin"
    assert config.request_timeout_s == 2.5
    assert config.log_level == "DEBUG"
    assert config.log_dir is None
    assert config.login_url == AdminConfig().login_url


def test_config_from_env_ignores_bad_timeout(caplog):
    from shumba_admin.protocols import AdminConfig

    config = AdminConfig.from_env({"SHUMBA_ADMIN_TIMEOUT": "ten", "SHUMBA_ADMIN_LOG_LEVEL": "WARNING"})

    assert config.request_timeout_s == AdminConfig().request_timeout_s
    assert config.log_level == "WARNING"
    assert "SHUMBA_ADMIN_TIMEOUT" in caplog.text


def test_global_config_roundtrip():
    from shumba_admin.protocols import AdminConfig, get_admin_config, set_admin_config
    from shumba_admin.protocols import admin_config

    previous = admin_config._admin_config
    try:
        set_admin_config(AdminConfig(search_debounce_ms=5))
        assert get_admin_config().search_debounce_ms == 5
    finally:
        admin_config._admin_config = previous


# =========================================================================
# Search
# =========================================================================

RECORDS = [
    {"id": 1, "firstname": "Tendai", "lastname": "Moyo", "email": "tendai@example.com"},
    {"id": 2, "firstname": "Rudo", "lastname": "Chikwanha", "email": None},
    {"id": 3, "firstname": "Farai", "lastname": "Ndlovu", "email": "farai@example.com"},
]


def _text(record):
    return "\n".join(str(v) for k, v in record.items() if k != "id" and v is not None)


def test_empty_query_is_identity():
    from shumba_admin.services import filter_items

    assert filter_items(RECORDS, "", _text) == RECORDS
    assert filter_items(RECORDS, "   ", _text) == RECORDS


def test_search_is_case_insensitive_and_trimmed():
    from shumba_admin.services import filter_items

    assert [r["id"] for r in filter_items(RECORDS, "  FARAI ", _text)] == [3]
    assert [r["id"] for r in filter_items(RECORDS, "example.com", _text)] == [1, 3]


def test_search_results_are_ordered_subset_without_mutation():
    from shumba_admin.services import filter_items

    snapshot = [dict(r) for r in RECORDS]
    result = filter_items(RECORDS, "ndlovu", _text) + filter_items(RECORDS, "o", _text)
    assert [r["id"] for r in result] == [3, 1, 2, 3]
    assert all(r in RECORDS for r in result)
    assert RECORDS == snapshot


def test_search_missing_field_does_not_match_none():
    from shumba_admin.services import filter_items

    assert filter_items(RECORDS, "none", _text) == []


def test_search_service_reapplies_query_on_update():
    from shumba_admin.services import SearchService

    service = SearchService(RECORDS, _text)
    service.filter("rudo")
    assert [r["id"] for r in service.filtered_items] == [2]

    service.update_items(RECORDS + [{"id": 4, "firstname": "Rudo", "lastname": "Banda"}])
    assert [r["id"] for r in service.filtered_items] == [2, 4]
    assert service.reset() == service.all_items


def test_threshold_matcher_applies_to_numeric_query():
    from shumba_admin.services import filter_items

    exams = [{"score": 40}, {"score": "85"}, {"score": None}, {"score": 90}]

    def at_least(record, n):
        try:
            return float(record["score"]) >= n
        except (TypeError, ValueError):
            return False

    assert filter_items(exams, "80", lambda r: "", at_least) == [{"score": "85"}, {"score": 90}]


# =========================================================================
# Entity registry
# =========================================================================

def test_builtin_entities_are_registered():
    from shumba_admin.services import get_entity_config, list_entity_configs

    keys = {config.key for config in list_entity_configs()}
    assert {"users", "questions", "answers", "categories", "lessons", "notes",
            "signs", "exams", "bookings", "payments", "apks"} <= keys

    assert get_entity_config("exams").read_only
    assert get_entity_config("payments").page_size == 30
    assert get_entity_config("answers").endpoints.update_method == "PUT"
    assert get_entity_config("users").endpoints.delete_method == "POST"
    bookings = get_entity_config("bookings")
    assert not bookings.can_create and bookings.can_update and bookings.can_delete


def test_unknown_entity_raises_key_error():
    from shumba_admin.services import get_entity_config

    with pytest.raises(KeyError):
        get_entity_config("does-not-exist")


def test_endpoint_urls_substitute_id():
    from shumba_admin.services import get_entity_config

    endpoints = get_entity_config("questions").endpoints
    assert endpoints.update_url(7) == "/update-question/7"
    assert endpoints.delete_url("abc") == "/delete-question/abc"


def test_searchable_text_skips_missing_fields():
    from shumba_admin.services import get_entity_config

    users = get_entity_config("users")
    text = users.searchable_text({"firstname": "Ann", "phone": "077", "email": None})
    assert text == "Ann\n077"


def test_register_rejects_bad_page_size():
    from shumba_admin.services import EndpointSet, EntityConfig, register_entity_config

    with pytest.raises(ValueError):
        register_entity_config(EntityConfig(
            key="broken", title="Broken", endpoints=EndpointSet("/x"),
            searchable_fields=("name",), page_size=0,
        ))


# =========================================================================
# Session
# =========================================================================

def test_session_start_and_current_user(session):
    assert not session.is_authenticated()
    session.start("tok", "0771234567", {"name": "Admin"})

    user = session.current_user()
    assert user.phone == "0771234567"
    assert user.token == "tok"
    assert user.data == {"name": "Admin"}
    assert session.get_token() == "tok"


def test_session_reads_legacy_token_keys(session, session_store):
    session_store.set("userToken", "legacy")
    assert session.get_token() == "legacy"
    assert not session.is_authenticated()


def test_session_requires_flag_and_phone(session, session_store):
    session_store.set("authToken", "tok")
    session_store.set("userPhone", "077")
    assert session.current_user() is None
    session_store.set("isAuthenticated", "TRUE")
    assert session.current_user() is not None


def test_corrupt_user_data_is_ignored(session, session_store):
    session.start("tok", "077")
    session_store.set("userData", "{not json")
    assert session.current_user().data is None


def test_unauthorized_clears_token_and_notifies(logged_in, session_store):
    calls = []
    logged_in.add_unauthorized_listener(lambda: calls.append(1))
    session_store.set("token", "old")

    logged_in.on_unauthorized()

    assert calls == [1]
    assert logged_in.get_token() is None
    assert not logged_in.is_authenticated()
    assert session_store.get("userPhone") == "0771234567"


def test_end_clears_everything(logged_in, session_store):
    logged_in.end()
    assert session_store.get("userPhone") is None
    assert logged_in.current_user() is None


# =========================================================================
# Auth
# =========================================================================

def test_login_stores_session(session):
    from shumba_admin.services import AuthService

    client = FakeApiClient()
    client.login_response = {"success": True, "token": "abc", "user": {"role": "admin"}}

    user = AuthService(client, session).login(" 0771234567 ", "secret")

    assert user.token == "abc"
    assert session.current_user().phone == "0771234567"
    assert client.calls == [("login", None, ("0771234567", "secret"))]


def test_login_accepts_access_token_and_data(session):
    from shumba_admin.services import AuthService

    client = FakeApiClient()
    client.login_response = {"access_token": "xyz", "data": {"id": 3}}

    user = AuthService(client, session).login("077", "pw")
    assert user.token == "xyz"
    assert user.data == {"id": 3}


def test_login_blank_credentials_send_nothing(session):
    from shumba_admin.api import ValidationFailed
    from shumba_admin.services import AuthService

    client = FakeApiClient()
    with pytest.raises(ValidationFailed) as exc_info:
        AuthService(client, session).login("", "  ")
    assert exc_info.value.user_message == "Please enter both phone number and password"
    assert set(exc_info.value.field_errors) == {"phone_number", "password"}
    assert client.calls == []


def test_login_401_is_invalid_credentials(session):
    from shumba_admin.api import InvalidCredentials, SessionExpired
    from shumba_admin.services import AuthService

    client = FakeApiClient()
    client.failures["login"] = SessionExpired(status_code=401)
    with pytest.raises(InvalidCredentials) as exc_info:
        AuthService(client, session).login("077", "wrong")
    assert exc_info.value.user_message == "Invalid phone number or password"
    assert not session.is_authenticated()


def test_login_success_false_is_server_error(session):
    from shumba_admin.api import ServerError
    from shumba_admin.services import AuthService

    client = FakeApiClient()
    client.login_response = {"success": False, "message": "Account locked"}
    with pytest.raises(ServerError) as exc_info:
        AuthService(client, session).login("077", "pw")
    assert exc_info.value.user_message == "Account locked"


def test_login_error_status_is_server_error(session):
    from shumba_admin.api import ServerError
    from shumba_admin.services import AuthService

    client = FakeApiClient()
    client.login_response = {"status": "error", "message": "Try again later"}

    with pytest.raises(ServerError):
        AuthService(client, session).login("077", "pw")
    assert not session.is_authenticated()


def test_logout_ends_session(logged_in):
    from shumba_admin.services import AuthService

    AuthService(FakeApiClient(), logged_in).logout()
    assert not logged_in.is_authenticated()


# =========================================================================
# Lookup
# =========================================================================

@pytest.mark.parametrize("key,expected", [
    (None, "Unknown"),
    ("", "Unknown"),
    (42, "42"),
    ("12345678", "12345678"),
    ("9f1c2e7a-44b1-4c0e", "9f1c2e7a…"),
])
def test_fallback_label(key, expected):
    from shumba_admin.services import fallback_label

    assert fallback_label(key) == expected


def test_lookup_resolves_labels(logged_in):
    from shumba_admin.services import LookupService, get_entity_config

    spec = get_entity_config("answers").lookup
    client = FakeApiClient({"/get-questions": [
        {"id": 1, "name": "What does a red light mean?"},
        {"id": 2, "name": ""},
    ]})

    result = LookupService(client, logged_in.get_token).fetch_labels(spec)

    assert result.ok
    assert result.label_for(1) == "What does a red light mean?"
    assert result.label_for("2") == "2"
    enriched = result.enrich({"id": 9, "question_id": 1}, spec)
    assert enriched["question_label"] == "What does a red light mean?"


def test_lookup_failure_is_returned_not_raised(logged_in):
    from shumba_admin.api import NetworkUnreachable
    from shumba_admin.services import LookupService, get_entity_config

    spec = get_entity_config("answers").lookup
    client = FakeApiClient()
    client.failures["/get-questions"] = NetworkUnreachable()

    result = LookupService(client, logged_in.get_token).fetch_labels(spec)

    assert not result.ok
    assert isinstance(result.error, NetworkUnreachable)
    assert result.enrich({"question_id": "abcdef0123456"}, spec)["question_label"] == "abcdef01…"


# =========================================================================
# Dashboard
# =========================================================================

def test_dashboard_loads_counters_and_tolerates_failures(logged_in):
    from shumba_admin.api import ServerError
    from shumba_admin.services import DashboardService

    client = FakeApiClient()
    client.json_responses.update({
        "/count-clients": {"count": 120},
        "/count-questions": {"total": 300},
        "/count-tests": 40,
        "/count-pass": {"data": 30},
        "/count-bookings": {},
    })
    client.failures["/count-payments"] = ServerError()

    stats = DashboardService(client, logged_in).load()

    assert stats.users == 120
    assert stats.questions == 300
    assert stats.tests == 40
    assert stats.passes == 30
    assert stats.bookings == 0
    assert stats.payments is None
    assert stats.failed["payments"] and not stats.failed["users"]
    assert stats.pass_rate == "75%"
    assert stats.pass_vs_fail == "30/10"


def test_dashboard_pass_rate_without_tests():
    from shumba_admin.services import DashboardStats

    assert DashboardStats(tests=0, passes=0).pass_rate == "0%"


def test_dashboard_requires_token(session):
    from shumba_admin.api import AuthRequired
    from shumba_admin.services import DashboardService

    with pytest.raises(AuthRequired):
        DashboardService(FakeApiClient(), session).load()


def test_dashboard_session_expiry_aborts_load(logged_in):
    from shumba_admin.api import SessionExpired
    from shumba_admin.services import DashboardService
    from shumba_admin.services.dashboard_service import COUNT_ENDPOINTS

    client = FakeApiClient()
    for path in COUNT_ENDPOINTS.values():
        client.failures[path] = SessionExpired(status_code=401)

    with pytest.raises(SessionExpired):
        DashboardService(client, logged_in).load()
    assert len(client.calls) == 1


# =========================================================================
# Settings
# =========================================================================

def test_change_admin_password_posts_current_phone(logged_in):
    from shumba_admin.services import SettingsService

    client = FakeApiClient()
    message = SettingsService(client, logged_in).change_admin_password("old-pw", "newpass", "newpass")

    assert message == "Password changed successfully."
    operation, path, body = client.calls[0]
    assert (operation, path) == ("post", "/change-admin-password")
    assert body["phone_number"] == "0771234567"
    assert body["new_password_confirmation"] == "newpass"


def test_change_password_validates_locally(logged_in):
    from shumba_admin.api import ValidationFailed
    from shumba_admin.services import SettingsService

    client = FakeApiClient()
    service = SettingsService(client, logged_in)
    with pytest.raises(ValidationFailed) as exc_info:
        service.change_admin_password("", "abc", "abd")
    assert set(exc_info.value.field_errors) == {"current_password", "new_password", "confirm_password"}

    with pytest.raises(ValidationFailed) as exc_info:
        service.change_user_password(" ", "longenough", "longenough")
    assert set(exc_info.value.field_errors) == {"phone_number"}
    assert client.calls == []


def test_prices_roundtrip(logged_in):
    from shumba_admin.api import ValidationFailed
    from shumba_admin.services import SettingsService

    client = FakeApiClient()
    client.json_responses["/get-prices"] = {"data": [{"id": 1, "theory_test": "15.00"}]}
    service = SettingsService(client, logged_in)

    assert service.get_prices() == {"id": 1, "theory_test": "15.00"}

    with pytest.raises(ValidationFailed) as exc_info:
        service.update_prices({"theory_test": "-1", "lesson": "abc"})
    assert set(exc_info.value.field_errors) == {"theory_test", "lesson"}

    assert service.update_prices({"theory_test": "20"}) == "Prices updated successfully."
    assert client.calls[-1] == ("post", "/price", {"theory_test": 20.0})


# =========================================================================
# Statistics
# =========================================================================

def test_payment_summary():
    from shumba_admin.services import payment_summary

    summary = payment_summary([
        {"status": "paid", "amount": "15.5"},
        {"status": "approved", "amount": 10},
        {"status": "pending", "amount": None},
        {"status": "failed", "amount": "x"},
    ])
    assert (summary.total, summary.approved, summary.pending) == (4, 2, 1)
    assert summary.total_amount == 25.5


def test_booking_summary():
    from shumba_admin.services import booking_summary

    summary = booking_summary([
        {"status": "available", "price": 10},
        {"status": "booked", "price": "12.50"},
        {"status": "booked"},
    ])
    assert (summary.total, summary.available, summary.booked) == (3, 1, 2)
    assert summary.revenue == 22.5
