"""
clients/http_client.py
----------------------

Request executor for the Bohrium service.  :class:`LbgClient` owns the
session state (settings, bearer token, transport), builds request URLs
and headers, drives the bounded retry loop and unwraps every response
through the envelope codec in :mod:`lbg.core.envelope`.

The transport is an ``httpx.Client``.  Pass your own to control
timeouts, proxies or connection pooling; otherwise the client creates
one from :attr:`Settings.http_timeout` and closes it in :meth:`close`.

By default every failure is retried the same way and without delay, up
to ``Settings.retry`` trials.  ``retry_backoff_factor``/``retry_jitter``
add exponential backoff and ``retry_only_transient`` stops retrying on
remote errors that a second trial cannot fix.
"""

from __future__ import annotations

import json
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ValidationError

from lbg.core.config import CLIENT_HEADER, CLIENT_VERSION, Settings
from lbg.core.context import TokenContext
from lbg.core.envelope import decode
from lbg.core.errors import (
    LbgError,
    MalformedLoginResponse,
    MissingCredentials,
    TransportError,
)
from lbg.logging_config import log_call, log_http_request, logger
from lbg.schemas.auth import LoginRequest, LoginResponse

ParamValue = Union[str, int, float, Sequence[Union[str, int, float]]]
ModelT = TypeVar("ModelT", bound=BaseModel)

LOGIN_PATH = "/account/login"

# Remote failures worth another trial when ``retry_only_transient`` is set
RETRY_STATUS = {429}


@dataclass(frozen=True)
class ExecuteResult:
    """Outcome of :meth:`LbgClient.execute`.

    ``payload`` holds the raw ``data`` member of the response envelope,
    untouched.  ``attempts`` is the number of trials actually sent; it is
    ``0`` only when the client is configured with ``retry=0``.
    """

    status_code: int
    payload: bytes
    attempts: int

    def json(self) -> Any:
        """Decode the payload, returning ``None`` when it is empty."""
        if not self.payload:
            return None
        return json.loads(self.payload)

    def parse(self, model: Type[ModelT]) -> ModelT:
        """Validate the payload into ``model``."""
        return model.model_validate_json(self.payload)


def build_url(endpoint: str, path: str, params: Optional[Mapping[str, ParamValue]] = None) -> str:
    """Join ``endpoint`` and ``path`` and append the encoded query.

    Keys are sorted and sequence values repeat the key.  The ``?``
    separator is always present, even when there are no parameters.
    """
    params = params or {}
    pairs: List[Tuple[str, Any]] = []
    for key in sorted(params):
        value = params[key]
        if isinstance(value, (str, bytes, int, float)):
            pairs.append((key, value))
        elif isinstance(value, (list, tuple, set, frozenset)):
            pairs.extend((key, v) for v in value)
        else:
            raise ValueError(
                f"query parameter {key!r} must be a string, number or sequence, not {type(value).__name__}"
            )
    return f"{endpoint.rstrip('/')}/{path.lstrip('/')}?{urlencode(pairs)}"


class LbgClient:
    """Authenticated client for one Bohrium endpoint.

    A client is not meant to be shared between processes, but it may be
    shared between threads: the bearer token is held in a
    :class:`~lbg.core.context.TokenContext` and every request reads it
    once.  Use it as a context manager, or call :meth:`close`, to release
    a transport the client created itself.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings if settings is not None else Settings()
        self._owns_transport = transport is None
        if transport is None:
            transport = httpx.Client(timeout=self._settings.http_timeout)
        self._transport = transport
        self._context = TokenContext()
        self._sleep = sleep

    def __enter__(self) -> "LbgClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            self._transport.close()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def endpoint(self) -> str:
        return self._settings.endpoint

    @property
    def retry(self) -> int:
        return self._settings.retry

    @property
    def email(self) -> str:
        return self._context.email or self._settings.email

    @property
    def is_authenticated(self) -> bool:
        return bool(self._context.get())

    def _build_headers(self, headers: Optional[Mapping[str, str]]) -> httpx.Headers:
        # httpx.Headers copies its input, the caller's mapping is left untouched
        merged = httpx.Headers(headers)
        token = self._context.get()
        if token:
            merged["Authorization"] = f"jwt {token}"
        merged[CLIENT_HEADER] = CLIENT_VERSION
        return merged

    def _request(
        self,
        method: str,
        url: str,
        body: Optional[bytes],
        headers: httpx.Headers,
        attempt: int,
        timeout: Optional[float],
    ) -> Tuple[int, bytes]:
        """Perform a single trial and decode its envelope.

        Errors raised here carry the HTTP status of the response, or
        ``0`` when the transport failed before any response arrived.
        """
        kwargs: dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        start_time = time.monotonic()
        try:
            response = self._transport.request(method, url, content=body, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            duration_ms = (time.monotonic() - start_time) * 1000
            log_http_request(method, url, headers=headers, attempt=attempt, duration_ms=duration_ms, error=str(exc))
            raise TransportError(f"{method} {url} failed: {exc}") from exc
        duration_ms = (time.monotonic() - start_time) * 1000
        log_http_request(method, url, headers=headers, attempt=attempt,
                         status=response.status_code, duration_ms=duration_ms)
        try:
            return response.status_code, decode(response.content)
        except LbgError as exc:
            exc.status_code = response.status_code
            raise

    def _should_retry(self, exc: LbgError) -> bool:
        if not self._settings.retry_only_transient or isinstance(exc, TransportError):
            return True
        return exc.status_code in RETRY_STATUS or exc.status_code >= 500

    def _backoff(self, trial: int) -> float:
        factor = self._settings.retry_backoff_factor
        jitter = self._settings.retry_jitter
        delay = factor * (2 ** (trial - 1)) if factor else 0.0
        if jitter:
            delay += random.uniform(0, jitter)
        return delay

    def execute(
        self,
        method: str,
        path: str,
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, ParamValue]] = None,
        *,
        total_timeout: Optional[float] = None,
    ) -> ExecuteResult:
        """Send a request to ``path`` and unwrap its response envelope.

        :param method: HTTP method
        :param path: path relative to the configured endpoint
        :param body: request body, offered again on every trial
        :param headers: extra headers; the mapping itself is not modified
        :param params: query parameters
        :param total_timeout: seconds available to all trials together
        :raises LbgError: the error of the last trial when every trial failed
        :return: status code and raw ``data`` payload of the first successful trial
        """
        method = method.upper()
        url = build_url(self._settings.endpoint, path, params)
        request_headers = self._build_headers(headers)

        if self.retry == 0:
            logger.warning(json.dumps({
                "event": "http_no_attempt",
                "method": method,
                "url": url,
                "detail": "retry is 0, no request sent",
            }))
            return ExecuteResult(status_code=0, payload=b"", attempts=0)

        deadline = time.monotonic() + total_timeout if total_timeout is not None else None
        last_error: Optional[LbgError] = None
        attempts = 0
        while True:
            timeout: Optional[float] = None
            if deadline is not None:
                timeout = deadline - time.monotonic()
                if timeout <= 0:
                    if last_error is None:
                        last_error = TransportError(
                            f"total timeout of {total_timeout}s exhausted before the first attempt"
                        )
                    self._log_failure(method, url, attempts, last_error)
                    raise last_error
            attempts += 1
            try:
                status_code, payload = self._request(method, url, body, request_headers, attempts, timeout)
            except LbgError as exc:
                last_error = exc
                if attempts >= self.retry or not self._should_retry(exc):
                    self._log_failure(method, url, attempts, exc)
                    raise
                delay = self._backoff(attempts)
                if deadline is not None and time.monotonic() + delay >= deadline:
                    # no budget left for another trial
                    self._log_failure(method, url, attempts, exc)
                    raise
                logger.warning(json.dumps({
                    "event": "http_retry",
                    "method": method,
                    "url": url,
                    "attempt": attempts,
                    "status": exc.status_code,
                    "detail": str(exc),
                }))
                if delay > 0:
                    self._sleep(delay)
                continue
            return ExecuteResult(status_code=status_code, payload=payload, attempts=attempts)

    def _log_failure(self, method: str, url: str, attempts: int, error: LbgError) -> None:
        logger.error(json.dumps({
            "event": "http_error",
            "method": method,
            "url": url,
            "attempts": attempts,
            "status": error.status_code,
            "detail": str(error),
        }))

    @log_call
    def login(self) -> None:
        """Authenticate and store the bearer token for later requests.

        :raises MissingCredentials: if the email or password is empty;
            no request is sent in that case
        :raises MalformedLoginResponse: if the response has no token
        :raises LbgError: any error of :meth:`execute`
        """
        email = self._settings.email
        password = self._settings.password.get_secret_value()
        if not email:
            raise MissingCredentials("email not set")
        if not password:
            raise MissingCredentials("password not set")

        logger.info(json.dumps({
            "event": "login_start",
            "email": email,
            "endpoint": self.endpoint,
        }))
        body = LoginRequest(email=email, password=password).model_dump_json().encode("utf-8")
        result = self.execute("POST", LOGIN_PATH, body, headers={"Content-Type": "application/json"})
        try:
            token = result.parse(LoginResponse).token
        except ValidationError as exc:
            logger.error(json.dumps({
                "event": "login_error",
                "email": email,
                "detail": "token missing from login response",
            }))
            raise MalformedLoginResponse(
                "login response carries no token", status_code=result.status_code
            ) from exc
        self._context.set(token, email)
        logger.info(json.dumps({
            "event": "login_success",
            "email": email,
        }))

    def logout(self) -> None:
        """Forget the bearer token; later requests are sent unauthenticated."""
        self._context.clear()
