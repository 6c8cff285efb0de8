"""Validate HTTP responses and decode their JSON bodies."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

import httpx
import pydantic
from pydantic import BaseModel, ConfigDict, TypeAdapter, field_validator

from dogclient.exceptions import ApplicationError, DecodeError, error_for_status
from dogclient.ratelimit import RateLimit


class StatusEnvelope(BaseModel):
    """Fields any API response may carry to flag an embedded error."""

    model_config = ConfigDict(extra="ignore")

    status: str = ""
    error: str = ""

    @field_validator("status", "error", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


@lru_cache(maxsize=256)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def status_line(response: httpx.Response) -> str:
    return f"{response.status_code} {response.reason_phrase}".strip()


def raise_for_status(response: httpx.Response) -> None:
    """Raise the status-specific :class:`~dogclient.exceptions.APIError` for non-2xx."""
    if 200 <= response.status_code < 300:
        return
    body = response.text
    raise error_for_status(
        response.status_code,
        f"API error {status_line(response)}: {body}",
        body,
        RateLimit.from_headers(response.headers),
    )


def _check_envelope(parsed: Any, status_code: int) -> None:
    # Some endpoints answer with an array (or fields of another type), which
    # carries no envelope; only a well-formed one is inspected.
    try:
        envelope = StatusEnvelope.model_validate(parsed)
    except pydantic.ValidationError:
        return
    if envelope.status == "error":
        raise ApplicationError(status_code, envelope.error)


def handle_response(response: httpx.Response, response_type: Any = None) -> Any:
    """Return the decoded body of *response*, or raise.

    *response_type* is anything pydantic can validate into (a model class,
    ``list[Model]``, ``dict[str, Any]`` ...). With ``None`` the body is only
    checked for errors and ``None`` is returned.

    An empty body decodes as ``{}``, so a model target only accepts it when
    every field has a default; otherwise a :class:`DecodeError` is raised.
    """
    body = response.read()
    raise_for_status(response)
    if not body:
        body = b"{}"

    try:
        parsed = json.loads(body)
    except ValueError as exc:
        raise DecodeError(f"invalid JSON in response body: {exc}") from exc

    _check_envelope(parsed, response.status_code)

    if response_type is None:
        return None
    try:
        return _adapter(response_type).validate_python(parsed)
    except pydantic.ValidationError as exc:
        raise DecodeError(
            f"cannot decode response into {getattr(response_type, '__name__', response_type)}: {exc}"
        ) from exc
