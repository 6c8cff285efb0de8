"""Synchronous HTTP client for the monitoring API."""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from dogclient.backoff import BackoffPolicy, get_backoff
from dogclient.config import DEFAULT_HOST, ClientConfig, Settings
from dogclient.context import RequestContext, generate_request_id, request_id_var
from dogclient.exceptions import AuthenticationError
from dogclient.logging_config import install_credential_filter
from dogclient.models import APIResponse, ResponseMetadata, ValidateResponse
from dogclient.ratelimit import RateLimit
from dogclient.redact import redact_error
from dogclient.request import build_request
from dogclient.response import handle_response
from dogclient.retry import send_once, send_with_retries

logger = logging.getLogger(__name__)

VALIDATE_PATH = "/v1/validate"


class DatadogClient:
    """Client for the monitoring API (backed by ``httpx.Client``).

    The configuration is immutable; use :meth:`with_keys` or
    :meth:`with_base_url` to derive a client with different settings. Derived
    clients share the connection pool of the client they came from, and one
    instance may serve many threads at once.
    """

    def __init__(
        self,
        api_key: str,
        app_key: str,
        *,
        base_url: str | None = None,
        timeout: float | None = 30.0,
        retry_timeout: float | None = None,
        backoff: BackoffPolicy | None = None,
        retry_notify: Callable[[BaseException, float], None] | None = None,
        http_client: httpx.Client | None = None,
        _transport: httpx.BaseTransport | None = None,
    ) -> None:
        if base_url is None:
            base_url = Settings().host or DEFAULT_HOST
        config = ClientConfig(
            api_key=api_key,
            app_key=app_key,
            base_url=base_url,
            timeout=timeout,
            retry_timeout=retry_timeout,
            backoff=backoff,
            retry_notify=retry_notify,
        )
        owns_http = http_client is None
        if http_client is None:
            kwargs: dict[str, Any] = {"timeout": timeout}
            if _transport is not None:
                kwargs["transport"] = _transport
            http_client = httpx.Client(**kwargs)
        install_credential_filter()
        self._init(config, http_client, owns_http)

    def _init(self, config: ClientConfig, http_client: httpx.Client, owns_http: bool) -> None:
        self._config = config
        self._http = http_client
        self._owns_http = owns_http

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> DatadogClient:
        """Build a client from ``DATADOG_*`` environment variables."""
        settings = settings or Settings()
        kwargs.setdefault("base_url", settings.host or DEFAULT_HOST)
        kwargs.setdefault("timeout", settings.timeout)
        kwargs.setdefault("retry_timeout", settings.retry_timeout)
        return cls(settings.api_key, settings.app_key, **kwargs)

    def _derive(self, config: ClientConfig) -> DatadogClient:
        clone = self.__class__.__new__(self.__class__)
        clone._init(config, self._http, owns_http=False)
        return clone

    # -- configuration -------------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def api_key(self) -> str:
        return self._config.api_key

    @property
    def app_key(self) -> str:
        return self._config.app_key

    def with_keys(self, api_key: str, app_key: str) -> DatadogClient:
        """Return a client using new credentials; this one is left untouched."""
        return self._derive(self._config.replace(api_key=api_key, app_key=app_key))

    def with_base_url(self, base_url: str) -> DatadogClient:
        return self._derive(self._config.replace(base_url=base_url))

    def __repr__(self) -> str:
        return f"DatadogClient(base_url={self.base_url!r})"

    # -- context manager -----------------------------------------------------

    def __enter__(self) -> DatadogClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    # -- internal ------------------------------------------------------------

    def _redact(self, exc: BaseException) -> BaseException:
        return redact_error(exc, self._config.api_key, self._config.app_key)

    def _send(
        self,
        request: httpx.Request,
        idempotent: bool,
        context: RequestContext,
    ) -> tuple[httpx.Response, int]:
        timeout = httpx.Timeout(self._config.timeout)
        if not idempotent:
            return send_once(self._http.send, request, context=context, timeout=timeout)
        policy = get_backoff(self._config.backoff, self._config.retry_timeout)
        return send_with_retries(
            self._http.send,
            request,
            policy,
            context=context,
            notify=self._config.retry_notify,
            timeout=timeout,
            secrets=(self._config.api_key, self._config.app_key),
        )

    def _execute(
        self,
        method: str,
        path: str,
        body: Any,
        response_type: Any,
        idempotent: bool,
        context: RequestContext | None,
    ) -> APIResponse:
        config = self._config
        request = build_request(
            method, config.base_url, path, body, config.api_key, config.app_key,
        )
        response, attempts = self._send(request, idempotent, context or RequestContext())
        try:
            data = handle_response(response, response_type)
        finally:
            response.close()
        logger.debug(
            "%s %s -> %d (%d attempt%s)",
            request.method, path, response.status_code, attempts,
            "" if attempts == 1 else "s",
        )
        metadata = ResponseMetadata(
            rate_limit=RateLimit.from_headers(response.headers),
            status_code=response.status_code,
            attempts=attempts,
        )
        return APIResponse(data=data, metadata=metadata)

    # -- public methods ------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        *,
        idempotent: bool,
        body: Any = None,
        response_type: Any = None,
        context: RequestContext | None = None,
    ) -> APIResponse:
        """Send ``method <base_url>/api<path>`` and decode the JSON answer.

        Only requests flagged *idempotent* are retried; any other request is
        attempted exactly once. *response_type* is any type pydantic can
        validate into; without one the body is checked for errors but not
        decoded. Errors never carry the API or application key.
        """
        token = request_id_var.set(generate_request_id())
        try:
            return self._execute(method, path, body, response_type, idempotent, context)
        except Exception as exc:
            redacted = self._redact(exc)
            if redacted is exc:
                raise
            raise redacted from None
        finally:
            request_id_var.reset(token)

    def request_json(
        self,
        method: str,
        path: str,
        body: Any = None,
        response_type: Any = None,
        *,
        idempotent: bool,
        context: RequestContext | None = None,
    ) -> Any:
        """Like :meth:`request` but return only the decoded payload."""
        return self.request(
            method,
            path,
            idempotent=idempotent,
            body=body,
            response_type=response_type,
            context=context,
        ).data

    def get(self, path: str, response_type: Any = None, *, idempotent: bool = True,
            context: RequestContext | None = None) -> APIResponse:
        return self.request("GET", path, idempotent=idempotent,
                            response_type=response_type, context=context)

    def delete(self, path: str, response_type: Any = None, *, idempotent: bool = True,
               context: RequestContext | None = None) -> APIResponse:
        return self.request("DELETE", path, idempotent=idempotent,
                            response_type=response_type, context=context)

    def post(self, path: str, body: Any = None, response_type: Any = None, *,
             idempotent: bool = False, context: RequestContext | None = None) -> APIResponse:
        return self.request("POST", path, idempotent=idempotent, body=body,
                            response_type=response_type, context=context)

    def put(self, path: str, body: Any = None, response_type: Any = None, *,
            idempotent: bool = False, context: RequestContext | None = None) -> APIResponse:
        return self.request("PUT", path, idempotent=idempotent, body=body,
                            response_type=response_type, context=context)

    def validate(self, context: RequestContext | None = None) -> bool:
        """Check whether the API and application keys are accepted.

        A rejected key (401/403) yields ``False``; other failures raise.
        """
        try:
            result = self.get(VALIDATE_PATH, ValidateResponse, context=context).data
        except AuthenticationError as exc:
            logger.info("Credentials rejected (status %d)", exc.status_code)
            return False
        return bool(result and result.valid)
