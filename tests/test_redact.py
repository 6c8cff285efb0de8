"""Tests for dogclient.redact."""

from __future__ import annotations

from dogclient.exceptions import (
    BuildError,
    NotFoundError,
    RedactedError,
    TransportError,
)
from dogclient.redact import REDACTED, redact_error, redact_query_credentials, redact_text

API_KEY = "apikey0123456789"
APP_KEY = "appkey9876543210"


def test_redact_text_replaces_every_occurrence():
    text = f"{API_KEY} and {API_KEY} and {APP_KEY}"
    assert redact_text(text, API_KEY, APP_KEY) == "redacted and redacted and redacted"


def test_unchanged_error_is_returned_as_is():
    exc = ValueError("connection refused")
    assert redact_error(exc, API_KEY, APP_KEY) is exc


def test_empty_secret_is_ignored():
    exc = TransportError("connection refused")
    assert redact_error(exc, "", "") is exc


def test_library_error_keeps_type_and_attributes():
    body = f'{{"url": "/api/v1/x?api_key={API_KEY}&application_key={APP_KEY}"}}'
    exc = NotFoundError(404, f"API error 404 Not Found: {body}", body)
    redacted = redact_error(exc, API_KEY, APP_KEY)
    assert redacted is not exc
    assert isinstance(redacted, NotFoundError)
    assert redacted.status_code == 404
    for text in (str(redacted), redacted.message, redacted.body):
        assert API_KEY not in text
        assert APP_KEY not in text
        assert REDACTED in text
    # the original is left alone
    assert API_KEY in str(exc)


def test_foreign_error_becomes_redacted_error():
    exc = ValueError(f"bad url https://x/api?api_key={API_KEY}")
    redacted = redact_error(exc, API_KEY, APP_KEY)
    assert isinstance(redacted, RedactedError)
    assert redacted.original_type == "ValueError"
    assert API_KEY not in str(redacted)


def test_only_present_secret_is_replaced():
    exc = BuildError(f"failed with {APP_KEY}")
    redacted = redact_error(exc, API_KEY, APP_KEY)
    assert str(redacted) == f"failed with {REDACTED}"


def test_query_credentials_blanked_by_name():
    url = f"https://x/api/v1/validate?api_key={API_KEY}&application_key={APP_KEY}&q=1"
    assert redact_query_credentials(url) == (
        "https://x/api/v1/validate?api_key=redacted&application_key=redacted&q=1"
    )


def test_query_credentials_ignores_similar_names():
    text = "?my_api_key=value&application_keys=other"
    assert redact_query_credentials(text) == text
