"""
Error taxonomy for calls against the admin REST API.

Every failure the console can show is one of the classes below. The HTTP
client raises them; list controllers catch them at the task boundary and
store them in view state.
"""

from typing import Any, Dict, List, Mapping, Optional

FieldErrors = Dict[str, List[str]]


class AdminApiError(Exception):
    """Base class for all admin API failures."""

    default_message = "Something went wrong."

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.user_message = message or self.default_message
        self.status_code = status_code
        super().__init__(self.user_message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class AuthRequired(AdminApiError):
    """No token is available; the request was never sent."""
    default_message = "Please log in to continue."


class SessionExpired(AdminApiError):
    default_message = "Your session has expired. Please log in again."


class Forbidden(AdminApiError):
    default_message = "You do not have permission to perform this action."


class NotFound(AdminApiError):
    default_message = "The requested item was not found."


class Conflict(AdminApiError):
    default_message = "This record conflicts with an existing one."


class ValidationFailed(AdminApiError):
    """Field-level validation failure, local or reported by the server (422)."""

    default_message = "Please correct the highlighted fields."

    def __init__(self, field_errors: FieldErrors, message: Optional[str] = None,
                 status_code: Optional[int] = None):
        self.field_errors = field_errors
        super().__init__(message, status_code)


class ServerError(AdminApiError):
    default_message = "Server error. Please try again later."


class NetworkUnreachable(AdminApiError):
    default_message = "No response from server. Please check your internet connection."


class Unknown(AdminApiError):
    """Anything else, including client-side exceptions before the call."""

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class InvalidCredentials(AdminApiError):
    """Login rejected with 401."""
    default_message = "Invalid phone number or password"


_STATUS_ERRORS = {
    401: SessionExpired,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
}


def _server_message(payload: Any) -> Optional[str]:
    if isinstance(payload, Mapping):
        message = payload.get("message") or payload.get("error")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def normalize_field_errors(payload: Any) -> Optional[FieldErrors]:
    """
    Reduce a server ``errors`` map to ``{field: [messages]}``.

    Accepts values that are a single string or a list of strings. Returns
    None when the payload has no usable map or any value has another shape.
    """
    if not isinstance(payload, Mapping):
        return None
    errors = payload.get("errors")
    if not isinstance(errors, Mapping) or not errors:
        return None

    normalized: FieldErrors = {}
    for field, value in errors.items():
        if isinstance(value, str):
            messages = [value]
        elif isinstance(value, list) and value and all(isinstance(v, str) for v in value):
            messages = list(value)
        else:
            return None
        normalized[str(field)] = messages
    return normalized


def classify_http_error(status_code: int, payload: Any = None) -> AdminApiError:
    """Map an HTTP error response to the error taxonomy."""
    message = _server_message(payload)

    if status_code == 422:
        field_errors = normalize_field_errors(payload)
        if field_errors is None:
            return ServerError(message, status_code)
        return ValidationFailed(field_errors, message, status_code)

    error_cls = _STATUS_ERRORS.get(status_code)
    if error_cls is not None:
        # 401 always shows the fixed expiry text
        if error_cls is SessionExpired:
            return SessionExpired(status_code=status_code)
        return error_cls(message, status_code)

    return ServerError(message, status_code)


def flatten_field_errors(field_errors: FieldErrors) -> str:
    """Join all field messages for single-line display."""
    return ", ".join(msg for messages in field_errors.values() for msg in messages)
