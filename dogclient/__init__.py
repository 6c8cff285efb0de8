"""dogclient — a retrying, rate-limit aware client for the monitoring HTTP API."""

from __future__ import annotations

from dogclient.backoff import BackoffPolicy, get_backoff
from dogclient.client import DatadogClient
from dogclient.config import ClientConfig, Settings
from dogclient.context import RequestContext
from dogclient.exceptions import (
    APIError,
    ApplicationError,
    AuthenticationError,
    BuildError,
    ClientError,
    DatadogError,
    DecodeError,
    NotFoundError,
    RateLimitError,
    RedactedError,
    RequestCancelledError,
    ServerError,
    TransportError,
    UnexpectedStatusError,
    ValidationError,
)
from dogclient.models import APIResponse, ResponseMetadata, ValidateResponse
from dogclient.ratelimit import RateLimit

__all__ = [
    "DatadogClient",
    "ClientConfig",
    "Settings",
    "BackoffPolicy",
    "get_backoff",
    "RequestContext",
    "APIResponse",
    "ResponseMetadata",
    "ValidateResponse",
    "RateLimit",
    "DatadogError",
    "BuildError",
    "TransportError",
    "RequestCancelledError",
    "DecodeError",
    "ApplicationError",
    "RedactedError",
    "APIError",
    "ClientError",
    "AuthenticationError",
    "NotFoundError",
    "ValidationError",
    "RateLimitError",
    "ServerError",
    "UnexpectedStatusError",
]
