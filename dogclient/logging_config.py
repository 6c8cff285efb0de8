"""Log formatting for the ``dogclient`` logger hierarchy."""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Iterable

from dogclient.context import get_request_id
from dogclient.config import Settings
from dogclient.redact import redact_query_credentials, redact_text

LOGGER_NAME = "dogclient"

# Attributes present on every LogRecord; anything else was passed via ``extra``.
_STANDARD_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys() | {"message", "taskName"}
)


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with the request ID when one is active."""

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        entry: dict = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.message,
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = "".join(
                traceback.format_exception(*record.exc_info)
            )

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        ts = _timestamp(record).strftime("%Y-%m-%d %H:%M:%S")

        request_id = get_request_id()
        rid_prefix = f"[{request_id[:12]}] " if request_id else ""

        line = f"{ts} {record.levelname:<8} {rid_prefix}{record.name} - {record.message}"

        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + "".join(traceback.format_exception(*record.exc_info))

        return line


class RedactingFilter(logging.Filter):
    """Scrub credentials from every record passing through a handler.

    Removes each of *secrets* plus any credential query parameter value.
    """

    def __init__(self, secrets: Iterable[str]) -> None:
        super().__init__()
        self.secrets = tuple(s for s in secrets if s)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        scrubbed = redact_query_credentials(redact_text(message, *self.secrets))
        if scrubbed != message:
            record.msg = scrubbed
            record.args = None
        return True


class CredentialQueryFilter(logging.Filter):
    """Blank ``api_key``/``application_key`` query values in logged URLs.

    Matches by parameter name, so it needs no knowledge of the keys and one
    instance serves every client in the process.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        scrubbed = redact_query_credentials(message)
        if scrubbed != message:
            record.msg = scrubbed
            record.args = None
        return True


# httpx logs every request URL at INFO, query string included.
CREDENTIAL_LOGGERS = ("httpx",)


def install_credential_filter(logger_names: Iterable[str] = CREDENTIAL_LOGGERS) -> None:
    """Attach a :class:`CredentialQueryFilter` to each named logger once."""
    for name in logger_names:
        logger = logging.getLogger(name)
        if not any(isinstance(f, CredentialQueryFilter) for f in logger.filters):
            logger.addFilter(CredentialQueryFilter())


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    secrets: Iterable[str] = (),
) -> logging.Logger:
    """Attach a stderr handler to the ``dogclient`` logger.

    The root logger is left alone; applications embedding the client keep
    their own configuration.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Replace our own handlers so repeated calls do not duplicate output
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if log_format.lower() == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())
    handler.addFilter(RedactingFilter(secrets))

    logger.addHandler(handler)
    install_credential_filter()
    return logger


def setup_logging_from_settings(settings: Settings | None = None) -> logging.Logger:
    """Configure logging from ``DATADOG_LOG_LEVEL`` / ``DATADOG_LOG_FORMAT``.

    The configured API and application keys are scrubbed from our output.
    """
    settings = settings or Settings()
    return setup_logging(
        settings.log_level,
        settings.log_format,
        secrets=(settings.api_key, settings.app_key),
    )
