"""Redaction utilities for traffic logging."""

import json

from haven_client.transport.constants import MAX_LOGGED_BODY_CHARS


# Headers that must never appear in logs
SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "cookie",
        "x-api-key",
        "x-auth-token",
        "proxy-authorization",
        "set-cookie",
    }
)

# Body fields whose values are masked in logged JSON payloads
SENSITIVE_BODY_FIELDS = frozenset({"password", "jwt", "token"})

REDACTED_VALUE = "[REDACTED]"


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers for logging.

    Args:
        headers: Original headers dictionary.

    Returns:
        New dictionary with sensitive values replaced by [REDACTED].
    """
    return {
        key: REDACTED_VALUE if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def redact_params(params: dict[str, object] | None) -> dict[str, object] | None:
    """Mask credentials in request parameters before logging them.

    Args:
        params: Request parameters, or None.

    Returns:
        Shallow copy with sensitive values replaced, or None.
    """
    if params is None:
        return None
    return {
        key: REDACTED_VALUE if key.lower() in SENSITIVE_BODY_FIELDS else value
        for key, value in params.items()
    }


def redact_json(value: object) -> object:
    """Mask sensitive fields at any depth of a parsed JSON document."""
    if isinstance(value, dict):
        return {
            key: REDACTED_VALUE
            if isinstance(key, str) and key.lower() in SENSITIVE_BODY_FIELDS
            else redact_json(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_json(item) for item in value]
    return value


def _redact_json_text(text: str) -> str:
    try:
        parsed = json.loads(text)
    except ValueError:
        return text
    return json.dumps(redact_json(parsed), ensure_ascii=False)


def body_preview(body: bytes) -> str:
    """Decode a response body into a bounded, redacted log excerpt.

    JSON bodies have their sensitive fields masked; other bodies are
    logged as text.

    Args:
        body: Raw body bytes.

    Returns:
        Text excerpt, truncated with an ellipsis when too long.
    """
    text = _redact_json_text(body.decode("utf-8", errors="replace"))
    if len(text) > MAX_LOGGED_BODY_CHARS:
        return text[:MAX_LOGGED_BODY_CHARS] + "..."
    return text
