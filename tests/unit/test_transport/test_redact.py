"""Unit tests for traffic log redaction."""

import json

import pytest

from haven_client.transport.constants import MAX_LOGGED_BODY_CHARS
from haven_client.transport.redact import (
    REDACTED_VALUE,
    body_preview,
    redact_headers,
    redact_params,
)


class TestRedaction:
    """Tests for header and parameter redaction."""

    @pytest.mark.unit
    def test_redacts_authorization_any_case(self) -> None:
        """Authorization is redacted regardless of case."""
        for key in ("Authorization", "authorization", "AUTHORIZATION"):
            assert redact_headers({key: "Bearer t"})[key] == REDACTED_VALUE

    @pytest.mark.unit
    def test_keeps_ordinary_headers(self) -> None:
        """Non-sensitive headers pass through."""
        headers = {"Accept": "application/json", "Cookie": "s=1"}

        result = redact_headers(headers)

        assert result == {"Accept": "application/json", "Cookie": REDACTED_VALUE}
        assert headers["Cookie"] == "s=1"

    @pytest.mark.unit
    def test_masks_credentials_in_params(self) -> None:
        """Passwords and tokens are masked in logged bodies."""
        result = redact_params({"email": "a@b.co", "password": "pw", "jwt": "x"})

        assert result == {
            "email": "a@b.co",
            "password": REDACTED_VALUE,
            "jwt": REDACTED_VALUE,
        }

    @pytest.mark.unit
    def test_none_params(self) -> None:
        """Absent params stay absent."""
        assert redact_params(None) is None


class TestBodyPreview:
    """Tests for response body excerpts."""

    @pytest.mark.unit
    def test_short_body_unchanged(self) -> None:
        """Short bodies are logged whole."""
        assert body_preview(b'{"ok": true}') == '{"ok": true}'

    @pytest.mark.unit
    def test_long_body_truncated(self) -> None:
        """Long bodies are cut with an ellipsis."""
        preview = body_preview(b"x" * (MAX_LOGGED_BODY_CHARS + 10))

        assert len(preview) == MAX_LOGGED_BODY_CHARS + 3
        assert preview.endswith("...")

    @pytest.mark.unit
    def test_invalid_utf8_replaced(self) -> None:
        """Undecodable bytes do not break logging."""
        assert "�" in body_preview(b"\xff\xfe")

    @pytest.mark.unit
    def test_login_token_masked(self) -> None:
        """A session token in a login response never reaches the log."""
        body = b'{"isAuthenticated": true, "jwt": "SECRET-JWT"}'

        preview = body_preview(body)

        assert "SECRET-JWT" not in preview
        assert json.loads(preview) == {
            "isAuthenticated": True,
            "jwt": REDACTED_VALUE,
        }

    @pytest.mark.unit
    def test_nested_fields_masked(self) -> None:
        """Sensitive keys are masked inside nested objects and arrays."""
        body = b'{"data": [{"Token": "t1", "name": "a"}], "meta": {"password": "p"}}'

        assert json.loads(body_preview(body)) == {
            "data": [{"Token": REDACTED_VALUE, "name": "a"}],
            "meta": {"password": REDACTED_VALUE},
        }

    @pytest.mark.unit
    def test_non_json_body_logged_as_text(self) -> None:
        """Bodies that are not JSON pass through unchanged."""
        assert body_preview(b"data: hello\n") == "data: hello\n"
