"""Scrub API and application keys out of error messages."""

from __future__ import annotations

import re

from dogclient.exceptions import DatadogError, RedactedError

REDACTED = "redacted"

# Query parameters that carry credentials in request URLs.
CREDENTIAL_PARAMS = ("api_key", "application_key")

_CREDENTIAL_QUERY_RE = re.compile(
    r"(?P<name>\b(?:%s)=)[^&\s\"'#]*" % "|".join(CREDENTIAL_PARAMS)
)


def redact_query_credentials(text: str) -> str:
    """Blank the values of credential query parameters appearing in *text*."""
    return _CREDENTIAL_QUERY_RE.sub(rf"\g<name>{REDACTED}", text)


def redact_text(text: str, *secrets: str) -> str:
    """Replace every occurrence of each non-empty secret in *text*."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text


def redact_error(exc: BaseException, *secrets: str) -> BaseException:
    """Return *exc* with *secrets* removed from its message.

    When none of the secrets occur in the message the original exception is
    returned unchanged, so callers keep its type and attributes. Library
    errors are cloned with their type intact; any other exception is replaced
    by a :class:`RedactedError`.
    """
    message = str(exc)
    scrubbed = redact_text(message, *secrets)
    if scrubbed == message:
        return exc

    if isinstance(exc, DatadogError):
        clone = exc.with_message(scrubbed)
        for attr in ("detail", "body"):
            value = getattr(clone, attr, None)
            if isinstance(value, str):
                setattr(clone, attr, redact_text(value, *secrets))
        return clone
    return RedactedError(scrubbed, type(exc).__name__)
