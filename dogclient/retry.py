"""Send requests, retrying transient failures under a backoff policy."""

from __future__ import annotations

import enum
import logging
from typing import Callable

import httpx
from tenacity import RetryCallState, Retrying, retry_if_exception_type

from dogclient.backoff import BackoffPolicy
from dogclient.context import RequestContext
from dogclient.exceptions import (
    APIError,
    RequestCancelledError,
    TransportError,
)
from dogclient.redact import redact_error
from dogclient.response import raise_for_status

logger = logging.getLogger(__name__)

Send = Callable[[httpx.Request], httpx.Response]
RetryNotify = Callable[[BaseException, float], None]


class Outcome(enum.Enum):
    SUCCESS = "success"
    TERMINAL = "terminal"
    RETRY = "retry"


def classify(response: httpx.Response) -> Outcome:
    """Decide whether a response ends the retry loop."""
    status = response.status_code
    if 200 <= status < 300:
        return Outcome.SUCCESS
    # Throttling is transient; every other client error is final.
    if status == 429:
        return Outcome.RETRY
    if 400 <= status < 500:
        return Outcome.TERMINAL
    return Outcome.RETRY


def _attempt(
    send: Send,
    request: httpx.Request,
    context: RequestContext,
    timeout: httpx.Timeout,
) -> httpx.Response:
    context.apply_timeout(request, timeout)
    try:
        return send(request)
    except httpx.TransportError as exc:
        if context.done():
            raise RequestCancelledError(f"request deadline exceeded: {exc}") from exc
        raise TransportError(f"{type(exc).__name__}: {exc}") from exc


def _before_sleep(
    request: httpx.Request,
    notify: RetryNotify | None,
    secrets: tuple[str, ...] = (),
):
    def handler(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        if error is not None:
            # Response bodies may echo the request URL, credentials included.
            error = redact_error(error, *secrets)
        delay = 0.0
        if retry_state.next_action is not None:
            delay = float(retry_state.next_action.sleep)
        logger.warning(
            "Retrying %s %s after %s (attempt %d, delay %.2fs)",
            request.method,
            request.url.path,
            error,
            retry_state.attempt_number,
            delay,
        )
        if notify is None or error is None:
            return
        try:
            notify(error, delay)
        except Exception:
            logger.exception("retry notify callback failed")

    return handler


def send_once(
    send: Send,
    request: httpx.Request,
    *,
    context: RequestContext | None = None,
    timeout: httpx.Timeout | None = None,
) -> tuple[httpx.Response, int]:
    """Perform exactly one attempt; used for requests that must not repeat."""
    context = context or RequestContext()
    context.raise_if_done()
    response = _attempt(send, request, context, timeout or httpx.Timeout(None))
    return response, 1


def send_with_retries(
    send: Send,
    request: httpx.Request,
    policy: BackoffPolicy,
    *,
    context: RequestContext | None = None,
    notify: RetryNotify | None = None,
    timeout: httpx.Timeout | None = None,
    secrets: tuple[str, ...] = (),
) -> tuple[httpx.Response, int]:
    """Send *request* until success, a client error, or policy exhaustion.

    Returns the final response and the number of attempts made. A 2xx or
    non-retryable 4xx response is returned as-is; when the policy gives up
    the last error is raised (:class:`TransportError` or the status-specific
    :class:`APIError`). Errors handed to the log and to *notify* have
    *secrets* scrubbed from them first.
    """
    context = context or RequestContext()
    timeout = timeout or httpx.Timeout(None)

    retrying = Retrying(
        retry=retry_if_exception_type((TransportError, APIError)),
        wait=policy.wait_strategy(),
        stop=policy.stop_strategy(),
        sleep=context.sleep,
        before_sleep=_before_sleep(request, notify, secrets),
        reraise=True,
    )

    for attempt in retrying:
        with attempt:
            context.raise_if_done()
            response = _attempt(send, request, context, timeout)
            if classify(response) is not Outcome.RETRY:
                return response, attempt.retry_state.attempt_number
            response.read()
            response.close()
            raise_for_status(response)
    raise TransportError(
        f"{request.method} {request.url.path}: retries ended without a response"
    )
