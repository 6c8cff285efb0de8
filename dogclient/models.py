"""Lightweight models returned by the client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from pydantic import BaseModel

from dogclient.ratelimit import RateLimit

T = TypeVar("T")


@dataclass(frozen=True)
class ResponseMetadata:
    """Metadata of the attempt that produced the returned payload."""

    rate_limit: RateLimit = field(default_factory=RateLimit)
    status_code: int = 0
    attempts: int = 1


@dataclass(frozen=True)
class APIResponse(Generic[T]):
    data: T | None
    metadata: ResponseMetadata


class ValidateResponse(BaseModel):
    valid: bool = False
    errors: list[str] = []
