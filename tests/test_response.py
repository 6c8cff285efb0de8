"""Tests for dogclient.response — status checks and envelope decoding."""

from __future__ import annotations

import json

import httpx
import pytest
from pydantic import BaseModel

from dogclient.exceptions import (
    APIError,
    ApplicationError,
    AuthenticationError,
    ClientError,
    DecodeError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnexpectedStatusError,
    ValidationError,
)
from dogclient.response import StatusEnvelope, handle_response


class _Dashboard(BaseModel):
    id: str = ""
    title: str = ""
    widgets: list[dict] = []


def _response(status_code: int = 200, body: bytes | str = b"", **kwargs) -> httpx.Response:
    if isinstance(body, str):
        body = body.encode()
    return httpx.Response(status_code, content=body, **kwargs)


class TestSuccess:
    def test_decodes_into_model(self):
        body = json.dumps({"id": "abc-123", "title": "Ops", "widgets": [{"id": 1}]})
        result = handle_response(_response(200, body), _Dashboard)
        assert isinstance(result, _Dashboard)
        assert result.id == "abc-123"
        assert result.widgets == [{"id": 1}]

    def test_no_target_returns_none(self):
        assert handle_response(_response(200, '{"status": "ok"}')) is None

    def test_empty_body_is_empty_object(self):
        result = handle_response(_response(200, b""), _Dashboard)
        assert result == _Dashboard()

    def test_empty_body_into_required_fields_fails(self):
        class _Strict(BaseModel):
            id: str

        with pytest.raises(DecodeError):
            handle_response(_response(200, b""), _Strict)

    def test_empty_body_without_target(self):
        assert handle_response(_response(204)) is None

    def test_generic_target(self):
        result = handle_response(_response(200, '{"a": 1, "b": 2}'), dict[str, int])
        assert result == {"a": 1, "b": 2}

    def test_ok_envelope_is_passed_through(self):
        result = handle_response(_response(200, '{"status": "ok", "title": "x"}'), _Dashboard)
        assert result.title == "x"


class TestEnvelope:
    def test_error_status_at_200(self):
        with pytest.raises(ApplicationError) as exc_info:
            handle_response(_response(200, '{"status":"error","error":"boom"}'))
        assert "boom" in str(exc_info.value)
        assert exc_info.value.detail == "boom"
        assert exc_info.value.status_code == 200

    def test_error_status_beats_target(self):
        with pytest.raises(ApplicationError):
            handle_response(_response(200, '{"status":"error","error":"boom"}'), _Dashboard)

    def test_application_error_is_not_an_http_error(self):
        with pytest.raises(ApplicationError) as exc_info:
            handle_response(_response(200, '{"status":"error","error":"boom"}'))
        assert not isinstance(exc_info.value, APIError)

    def test_array_body_is_tolerated(self):
        assert handle_response(_response(200, "[1, 2, 3]"), list[int]) == [1, 2, 3]
        assert handle_response(_response(200, "[]")) is None

    def test_array_into_object_target_fails_at_decode(self):
        with pytest.raises(DecodeError):
            handle_response(_response(200, "[]"), _Dashboard)

    def test_non_string_status_is_tolerated(self):
        result = handle_response(_response(200, '{"status": 0, "title": "t"}'), _Dashboard)
        assert result.title == "t"

    def test_null_error_field(self):
        envelope = StatusEnvelope.model_validate({"status": "ok", "error": None})
        assert envelope.error == ""


class TestDecodeErrors:
    def test_invalid_json(self):
        with pytest.raises(DecodeError):
            handle_response(_response(200, "{not json"))

    def test_invalid_json_without_target(self):
        with pytest.raises(DecodeError):
            handle_response(_response(200, "<html>oops</html>"))

    def test_target_mismatch(self):
        with pytest.raises(DecodeError):
            handle_response(_response(200, '{"id": {"nested": true}}'), _Dashboard)


class TestStatusErrors:
    @pytest.mark.parametrize(
        ("status", "exc_type"),
        [
            (400, ValidationError),
            (401, AuthenticationError),
            (403, AuthenticationError),
            (404, NotFoundError),
            (409, ClientError),
            (422, ValidationError),
            (429, RateLimitError),
            (500, ServerError),
            (503, ServerError),
            (302, UnexpectedStatusError),
        ],
    )
    def test_status_mapping(self, status, exc_type):
        with pytest.raises(exc_type) as exc_info:
            handle_response(_response(status, '{"errors": ["nope"]}'))
        assert exc_info.value.status_code == status

    def test_message_carries_status_line_and_body(self):
        with pytest.raises(NotFoundError) as exc_info:
            handle_response(_response(404, '{"errors": ["Monitor not found"]}'))
        message = str(exc_info.value)
        assert "404 Not Found" in message
        assert "Monitor not found" in message
        assert exc_info.value.body == '{"errors": ["Monitor not found"]}'

    def test_rate_limit_attached(self):
        resp = _response(
            429,
            '{"errors": ["Rate limit exceeded"]}',
            headers={"X-RateLimit-Limit": "100", "X-RateLimit-Remaining": "0"},
        )
        with pytest.raises(RateLimitError) as exc_info:
            handle_response(resp)
        assert exc_info.value.rate_limit.limit == 100
        assert exc_info.value.rate_limit.remaining == 0
