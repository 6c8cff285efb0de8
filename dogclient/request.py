"""Build authenticated JSON requests against the ``/api`` root."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel
from pydantic_core import PydanticSerializationError, to_json

from dogclient.exceptions import BuildError
from dogclient.redact import redact_error


def api_url(base_url: str, path: str, api_key: str, app_key: str) -> httpx.URL:
    """Join ``base_url + "/api" + path`` and append both keys as query params."""
    url = httpx.URL(base_url + "/api" + path)
    if not url.scheme or not url.host:
        raise httpx.InvalidURL(f"Invalid API base URL: {base_url!r}")
    return url.copy_merge_params({"api_key": api_key, "application_key": app_key})


def encode_body(payload: Any) -> bytes | None:
    """Serialize *payload* to JSON, or return ``None`` when there is nothing to send."""
    if payload is None:
        return None
    if isinstance(payload, BaseModel):
        return payload.model_dump_json(by_alias=True, exclude_none=True).encode()
    return to_json(payload)


def build_request(
    method: str,
    base_url: str,
    path: str,
    payload: Any,
    api_key: str,
    app_key: str,
) -> httpx.Request:
    """Construct a ready-to-send request.

    Any failure is raised as :class:`BuildError` with both keys redacted,
    since the URL carries them in its query string.
    """
    try:
        url = api_url(base_url, path, api_key, app_key)
        body = encode_body(payload)
    except (httpx.InvalidURL, PydanticSerializationError, TypeError, ValueError) as exc:
        error = redact_error(BuildError(f"failed to build request: {exc}"), api_key, app_key)
        raise error from None

    headers = {"Content-Type": "application/json"} if body is not None else {}
    return httpx.Request(method.upper(), url, content=body, headers=headers)
