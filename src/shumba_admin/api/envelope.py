"""Unwrapping of the backend's inconsistent response envelopes."""

from typing import Any, Dict, List, Mapping

from shumba_admin.api.errors import ServerError

Record = Dict[str, Any]


def unwrap_collection(payload: Any) -> List[Record]:
    """
    Return the record list from a ``{"data": [...]}`` envelope or a bare array.

    Raises:
        ServerError: if the payload is neither shape or holds non-object items
    """
    if isinstance(payload, Mapping) and "data" in payload:
        items = payload["data"]
    else:
        items = payload

    if not isinstance(items, list):
        raise ServerError("Unexpected response format from server.")
    if not all(isinstance(item, Mapping) for item in items):
        raise ServerError("Unexpected record format from server.")
    return [dict(item) for item in items]


def check_write_result(payload: Any) -> str:
    """
    Validate a write response and return the server's message, if any.

    Write endpoints answer ``{"success": bool, "message": str}``; some
    answer with the written record or nothing at all, which counts as
    success.

    Raises:
        ServerError: when the server reports ``success: false``
    """
    if not isinstance(payload, Mapping):
        return ""
    message = payload.get("message") or ""
    if payload.get("success") in (False, "false"):
        raise ServerError(message or payload.get("error") or None)
    return message if isinstance(message, str) else ""


def read_count(payload: Any) -> int:
    """Read a counter from ``{count}``, ``{total}``, ``{data}`` or a bare number."""
    if isinstance(payload, Mapping):
        for key in ("count", "total", "data"):
            value = payload.get(key)
            if value:
                payload = value
                break
        else:
            return 0
    if isinstance(payload, bool):
        return 0
    if isinstance(payload, (int, float)):
        return int(payload)
    if isinstance(payload, str) and payload.strip().isdigit():
        return int(payload.strip())
    return 0
