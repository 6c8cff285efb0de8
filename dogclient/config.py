from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from pydantic_settings import BaseSettings

from dogclient.backoff import BackoffPolicy

DEFAULT_HOST = "https://app.datadoghq.com"


class Settings(BaseSettings):
    host: str = DEFAULT_HOST
    api_key: str = ""
    app_key: str = ""
    timeout: float = 30.0
    retry_timeout: float | None = None
    log_format: str = "text"
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "DATADOG_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@dataclass(frozen=True)
class ClientConfig:
    """Immutable connection settings shared by every request of a client.

    ``retry_timeout=None`` leaves the retry ceiling at its default; an
    explicit ``backoff`` policy overrides both.
    """

    api_key: str
    app_key: str
    base_url: str = DEFAULT_HOST
    timeout: float | None = 30.0
    retry_timeout: float | None = None
    backoff: BackoffPolicy | None = None
    retry_notify: Callable[[BaseException, float], None] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    def replace(self, **changes) -> ClientConfig:
        return replace(self, **changes)

    def __repr__(self) -> str:
        # never render credentials
        return (
            f"ClientConfig(base_url={self.base_url!r}, timeout={self.timeout!r}, "
            f"retry_timeout={self.retry_timeout!r}, backoff={self.backoff!r})"
        )
