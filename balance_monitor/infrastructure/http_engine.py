"""
HTTP request engine for vendor balance endpoints.

Issues one outbound request per `execute` call over a shared
`httpx.AsyncClient` and always returns a `RequestResult` envelope: request
failures are reported, never raised. Exactly one outcome is produced per
call (response, error or timeout), and the elapsed wall-clock time is always
reported.

Headers are encoded before anything is sent, so a header value that cannot
go on the wire is reported as `InvalidHeaders`. Any other httpx request
error (redirect loops, undecodable bodies, transport failures) becomes
`NetworkError`.

Connection-establishment failures can optionally be retried with tenacity
(`HTTP_CONNECT_RETRIES`); retries happen inside the same timeout budget.
"""

from __future__ import annotations

import asyncio
import base64
import re
from typing import Dict, Iterable, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from balance_monitor.config import Settings, get_settings
from balance_monitor.domain.errors import (
    HTTPError,
    InvalidHeaders,
    InvalidJSON,
    InvalidURL,
    NetworkError,
    RequestError,
    Timeout,
)
from balance_monitor.domain.models import AuthDescriptor, HeaderEntry, RequestDescriptor, RequestResult
from balance_monitor.utils.logging import get_logger
from balance_monitor.utils.timing import Stopwatch, stopwatch

log = get_logger(__name__)

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/=]+$")


def is_valid_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError):
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.host)


def encode_basic_credentials(api_key: str) -> str:
    """
    Return `api_key` unchanged if it already looks like base64 (no ':' and
    only base64 characters), otherwise base64-encode it.
    """
    if ":" not in api_key and _BASE64_RE.match(api_key):
        return api_key
    return base64.b64encode(api_key.encode("utf-8")).decode("ascii")


def build_auth_value(auth: AuthDescriptor) -> str:
    if auth.type == "Bearer":
        return f"Bearer {auth.api_key}"
    if auth.type == "Basic":
        return f"Basic {encode_basic_credentials(auth.api_key)}"
    return auth.api_key


def build_headers(
    headers: Iterable[HeaderEntry] = (),
    auth: Optional[AuthDescriptor] = None,
    user_agent: str = "BalanceMonitor/1.0",
) -> Dict[str, str]:
    """
    Default headers, overlaid by caller headers, overlaid by the auth header.

    Header entries with an empty key or value are skipped, and an auth
    descriptor without a key adds nothing.
    """
    result: Dict[str, str] = {
        "Content-Type": "application/json",
        "User-Agent": user_agent,
    }
    for entry in headers:
        if entry.key and entry.value:
            result[entry.key] = entry.value

    if auth is not None and auth.api_key:
        result[auth.header_key or "Authorization"] = build_auth_value(auth)
    return result


class RequestEngine:
    """
    Executes `RequestDescriptor`s and wraps every outcome in a `RequestResult`.

    Pass `transport` (e.g. `httpx.MockTransport`) or a preconfigured `client`
    to control I/O in tests. The engine closes only a client it created.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(transport=transport, follow_redirects=True)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RequestEngine":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        await self.aclose()

    async def execute(self, descriptor: RequestDescriptor) -> RequestResult:
        with stopwatch(descriptor.url) as sw:
            if not is_valid_url(descriptor.url):
                return self._failure(InvalidURL(f"Invalid URL: {descriptor.url}"), sw)

            try:
                headers = httpx.Headers(
                    build_headers(descriptor.headers, descriptor.auth, self._settings.http_user_agent)
                )
            except (UnicodeEncodeError, ValueError) as exc:
                return self._failure(InvalidHeaders(f"Invalid request headers: {exc}"), sw)

            timeout_ms = descriptor.timeout_ms or self._settings.http_default_timeout_ms
            try:
                response = await asyncio.wait_for(
                    self._send(descriptor, headers, timeout_ms / 1000.0), timeout=timeout_ms / 1000.0
                )
            except (asyncio.TimeoutError, httpx.TimeoutException):
                return self._failure(Timeout(f"Request timed out after {timeout_ms} ms"), sw)
            except httpx.InvalidURL as exc:
                return self._failure(InvalidURL(f"Invalid URL: {descriptor.url} ({exc})"), sw)
            except httpx.RequestError as exc:
                detail = str(exc) or type(exc).__name__
                return self._failure(NetworkError(f"Network error: {detail}"), sw)

            status_code = response.status_code
            if not 200 <= status_code < 300:
                body = response.text
                return self._failure(HTTPError(f"HTTP {status_code}: {body}", status_code, body), sw)

            try:
                data = response.json()
            except ValueError as exc:
                return self._failure(
                    InvalidJSON(f"Invalid JSON response: {exc}", status_code=status_code), sw
                )

        log.debug(
            f"{descriptor.method} {descriptor.url} -> {status_code} in {sw.elapsed_ms} ms",
            extra={"url": descriptor.url, "status_code": status_code},
        )
        return RequestResult(
            success=True,
            data=data,
            status_code=status_code,
            response_time_ms=sw.elapsed_ms,
        )

    async def test_connection(self, descriptor: RequestDescriptor) -> RequestResult:
        log.info(f"Testing connection: {descriptor.method} {descriptor.url}")
        return await self.execute(descriptor)

    async def _send(
        self,
        descriptor: RequestDescriptor,
        headers: httpx.Headers,
        timeout_s: float,
    ) -> httpx.Response:
        content = (
            descriptor.body.encode("utf-8")
            if descriptor.body and descriptor.method == "POST"
            else None
        )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(0, self._settings.http_connect_retries) + 1),
            wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
            retry=retry_if_exception_type(httpx.ConnectError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._client.request(
                    descriptor.method,
                    descriptor.url,
                    headers=headers,
                    content=content,
                    timeout=timeout_s,
                )
        raise AssertionError("unreachable")  # pragma: no cover

    def _failure(self, error: RequestError, sw: Stopwatch) -> RequestResult:
        log.debug(f"Request failed: {error}", extra={"error_type": type(error).__name__})
        return RequestResult(
            success=False,
            error=str(error),
            error_type=type(error).__name__,
            status_code=error.status_code,
            response_time_ms=sw.elapsed_ms,
        )


__all__ = [
    "RequestEngine",
    "build_auth_value",
    "build_headers",
    "encode_basic_credentials",
    "is_valid_url",
]
