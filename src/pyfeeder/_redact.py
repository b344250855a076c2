"""Redaction of credentials in DEBUG request logs.

Only two shapes reach the log: the flat query ``params`` of a store
request (``auth``) and the JSON body of a request (LINE ``replyToken``,
or a bare integer for store writes).
"""

from __future__ import annotations

from typing import Any

_REDACTED = "<redacted>"
_SENSITIVE_KEYS: frozenset[str] = frozenset({"auth", "authorization", "replytoken"})


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a copy of a JSON-like *value* with credential keys masked."""
    if isinstance(value, dict):
        return {
            key: _REDACTED if str(key).lower() in _SENSITIVE_KEYS else redact_for_log(item, max_string=max_string)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_for_log(item, max_string=max_string) for item in value]
    if isinstance(value, str) and len(value) > max_string:
        return f"{value[:max_string]}...<truncated>"
    return value
