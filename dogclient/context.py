"""Per-request deadlines, cancellation and log correlation IDs."""

from __future__ import annotations

import threading
import time
import uuid
from contextvars import ContextVar

import httpx

from dogclient.exceptions import RequestCancelledError

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def generate_request_id() -> str:
    """Return a new 32-character hex request ID."""
    return uuid.uuid4().hex


def get_request_id() -> str:
    """Read the current request ID from the contextvar."""
    return request_id_var.get()


class RequestContext:
    """Deadline and cancellation signal carried by a single logical request.

    Both the network call and the wait between retries are bounded by the
    deadline; setting *cancel_event* from another thread interrupts a wait
    immediately.
    """

    def __init__(
        self,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.deadline = None if timeout is None else time.monotonic() + timeout
        self.cancel_event = cancel_event or threading.Event()

    def cancel(self) -> None:
        self.cancel_event.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or ``None`` without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def done(self) -> bool:
        if self.cancel_event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def raise_if_done(self) -> None:
        if self.cancel_event.is_set():
            raise RequestCancelledError("request cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise RequestCancelledError("request deadline exceeded")

    def sleep(self, seconds: float) -> None:
        """Block for *seconds*, returning early with an error if cancelled."""
        self.raise_if_done()
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self.cancel_event.wait(remaining)
            self.raise_if_done()
            # woke at the deadline without the event being set
            raise RequestCancelledError("request deadline exceeded")
        if self.cancel_event.wait(seconds):
            raise RequestCancelledError("request cancelled")

    def apply_timeout(self, request: httpx.Request, default: httpx.Timeout) -> None:
        """Bound the request's network timeouts by the time left."""
        remaining = self.remaining()
        if remaining is None:
            request.extensions["timeout"] = default.as_dict()
            return
        self.raise_if_done()
        bounded = {
            key: remaining if value is None else min(value, remaining)
            for key, value in default.as_dict().items()
        }
        request.extensions["timeout"] = bounded
