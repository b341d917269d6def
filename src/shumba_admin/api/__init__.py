"""
REST API boundary.

HTTP transport, response envelope handling and the error taxonomy shared
by every screen.
"""

from .client import AdminApiClient
from .envelope import Record, unwrap_collection, check_write_result, read_count
from .errors import (
    AdminApiError,
    AuthRequired,
    SessionExpired,
    Forbidden,
    NotFound,
    ValidationFailed,
    Conflict,
    ServerError,
    NetworkUnreachable,
    Unknown,
    InvalidCredentials,
    FieldErrors,
    classify_http_error,
    normalize_field_errors,
    flatten_field_errors,
)

__all__ = [
    "AdminApiClient",
    "Record",
    "unwrap_collection",
    "check_write_result",
    "read_count",
    "AdminApiError",
    "AuthRequired",
    "SessionExpired",
    "Forbidden",
    "NotFound",
    "ValidationFailed",
    "Conflict",
    "ServerError",
    "NetworkUnreachable",
    "Unknown",
    "InvalidCredentials",
    "FieldErrors",
    "classify_http_error",
    "normalize_field_errors",
    "flatten_field_errors",
]
