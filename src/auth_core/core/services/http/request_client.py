"""Outbound HTTP client with bounded exponential backoff and error normalization."""

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from loguru import logger

from src.auth_core.runtime.config.config_data import (
    RequestClientConfig,
    RetryPolicyConfig,
)

MAX_BACKOFF_MS = 30_000
JITTER_RATIO = 0.3

_DNS_FAILURE_HINTS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo",
    "name resolution",
    "no address associated",
)


class RequestError(Exception):
    """Normalized failure of an outbound request."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        status_text: str | None = None,
        data: Any = None,
        code: str | None = None,
        is_retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text
        self.data = data
        self.code = code
        self.is_retryable = is_retryable

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "status": self.status,
            "status_text": self.status_text,
            "data": self.data,
            "code": self.code,
            "is_retryable": self.is_retryable,
        }

    def __repr__(self) -> str:
        return (
            f"RequestError(message={self.message!r}, status={self.status!r}, "
            f"code={self.code!r}, is_retryable={self.is_retryable!r})"
        )


def calculate_backoff_delay(
    attempt: int,
    base_delay_ms: int,
    rng: Callable[[], float] = random.random,
) -> float:
    """Delay in milliseconds before retry ``attempt`` (1-indexed).

    Grows as ``base * 2**(attempt - 1)`` with up to 30% upward jitter and is
    capped at 30 seconds.
    """
    exponential = base_delay_ms * (2 ** (attempt - 1))
    jitter = 1 + JITTER_RATIO * rng()
    return min(exponential * jitter, MAX_BACKOFF_MS)


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _server_message(data: Any) -> str | None:
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def _transport_code(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return "ETIMEDOUT"
    if isinstance(exc, httpx.ConnectError):
        text = str(exc).lower()
        if any(hint in text for hint in _DNS_FAILURE_HINTS):
            return "ENOTFOUND"
        return "ECONNREFUSED"
    if isinstance(exc, (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError)):
        return "ECONNRESET"
    return "ERR_NETWORK"


def normalize_error(exc: Exception, retry: RetryPolicyConfig) -> RequestError:
    """Convert a failed attempt into a ``RequestError`` judged against ``retry``.

    Anything that is not an httpx transport or status error is terminal.
    """
    if isinstance(exc, RequestError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        data = _parse_body(response)
        status = response.status_code
        return RequestError(
            _server_message(data) or str(exc) or "Request failed",
            status=status,
            status_text=response.reason_phrase,
            data=data,
            code="ERR_BAD_RESPONSE" if status >= 500 else "ERR_BAD_REQUEST",
            is_retryable=status in retry.retryable_status_codes,
        )

    if isinstance(exc, httpx.HTTPError):
        code = _transport_code(exc)
    elif isinstance(exc, httpx.InvalidURL):
        code = "ERR_INVALID_URL"
    else:
        code = None
    return RequestError(
        str(exc) or "Request failed",
        code=code,
        is_retryable=code in retry.retryable_errors,
    )


class RequestClient:
    """Async HTTP wrapper around httpx.

    One attempt by default; with retry enabled, retryable failures are retried
    up to ``max_retries`` more times with jittered exponential backoff. Every
    failure reaches the caller as a ``RequestError``.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        retry: RetryPolicyConfig | None = None,
        config: RequestClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ):
        config = config or RequestClientConfig()
        self._base_url = base_url
        self._default_headers: dict[str, str] = dict(headers or {})
        self._timeout = timeout if timeout is not None else config.timeout_seconds
        self._retry = retry or config.retry
        self._transport = transport
        self._sleep = sleep
        self._rng = rng

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def default_headers(self) -> dict[str, str]:
        return dict(self._default_headers)

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def retry(self) -> RetryPolicyConfig:
        return self._retry

    def set_default_headers(self, headers: dict[str, str]) -> None:
        self._default_headers.update(headers)

    def set_base_url(self, base_url: str) -> None:
        self._base_url = base_url

    def set_timeout(self, timeout: float) -> None:
        self._timeout = timeout

    def _effective_retry(
        self, retry: RetryPolicyConfig | dict[str, Any] | None
    ) -> RetryPolicyConfig:
        if retry is None:
            return self._retry
        if isinstance(retry, RetryPolicyConfig):
            return retry
        return self._retry.model_copy(update=retry)

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        retry: RetryPolicyConfig | dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded response body.

        ``retry`` replaces the instance policy for this call; a dict updates
        only the named fields.
        """
        policy = self._effective_retry(retry)
        max_attempts = policy.max_retries + 1 if policy.enabled else 1
        merged_headers = {**self._default_headers, **(headers or {})}

        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._send(
                    method,
                    url,
                    json=json,
                    params=params,
                    headers=merged_headers,
                    timeout=timeout if timeout is not None else self._timeout,
                )
            except Exception as exc:
                error = normalize_error(exc, policy)

            if not error.is_retryable or attempt >= max_attempts:
                logger.error(
                    "{} {} failed after {} attempt(s): {}",
                    method.upper(),
                    url,
                    attempt,
                    error.message,
                    status=error.status,
                    code=error.code,
                )
                raise error

            delay_ms = calculate_backoff_delay(attempt, policy.retry_delay_ms, self._rng)
            logger.warning(
                "Retrying {} {} in {:.0f}ms (attempt {}/{})",
                method.upper(),
                url,
                delay_ms,
                attempt + 1,
                max_attempts,
                status=error.status,
                code=error.code,
            )
            await self._sleep(delay_ms / 1000)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        json: Any,
        params: dict[str, Any] | None,
        headers: dict[str, str],
        timeout: float,
    ) -> Any:
        async with httpx.AsyncClient(
            base_url=self._base_url, timeout=timeout, transport=self._transport
        ) as client:
            response = await client.request(
                method, url, json=json, params=params, headers=headers
            )
            response.raise_for_status()
            return _parse_body(response)

    async def get(self, url: str, **kwargs: Any) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", url, json=json, **kwargs)

    async def put(self, url: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", url, json=json, **kwargs)

    async def patch(self, url: str, json: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", url, json=json, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", url, **kwargs)
