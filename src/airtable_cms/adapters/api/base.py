"""
Shared HTTP utilities for API-backed loaders.

The helper is a thin asynchronous HTTPX wrapper. It opens a client per request,
keeps no state between calls, and translates transport and status failures
into :class:`APIError` with the originating ``httpx`` exception chained.
Retries are opt-in: the default of a single attempt issues exactly one request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Mapping, MutableMapping, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...core.logging import get_logger, log_progress
from ..base import AdapterError

DEFAULT_TIMEOUT = 15.0


class APIError(AdapterError):
    """Raised when an HTTP API call fails."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class BaseAPIClient:
    """
    Base asynchronous HTTP client.

    Parameters
    ----------
    base_url:
        Root URL for the upstream service.
    timeout:
        Request timeout in seconds.
    default_headers:
        Headers automatically attached to every request.
    max_attempts:
        Total attempts for requests failing with a transport error. ``1``
        disables retries.
    transport:
        Optional HTTPX transport, e.g. :class:`httpx.MockTransport` in tests.
    """

    base_url: str
    timeout: float = DEFAULT_TIMEOUT
    default_headers: MutableMapping[str, str] = field(default_factory=dict)
    max_attempts: int = 1
    transport: Optional[httpx.AsyncBaseTransport] = field(default=None, repr=False)
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(
            f"{self.__class__.__module__}.{self.__class__.__name__}",
            extra={"base_url": self.base_url},
        )

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=dict(self.default_headers),
            follow_redirects=True,
            transport=self.transport,
        )

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise APIError(
                f"HTTP {exc.response.status_code} error for {exc.request.method} {exc.request.url}: {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        log_progress(self.logger, "HTTP request", level=logging.DEBUG, extra={"method": method, "url": url})

        @retry(
            retry=retry_if_exception_type(httpx.TransportError),
            wait=wait_exponential(multiplier=1, min=1, max=8),
            stop=stop_after_attempt(max(1, self.max_attempts)),
            reraise=True,
        )
        async def _send() -> httpx.Response:
            async with self._build_client() as client:
                return await client.request(method, url, **kwargs)

        try:
            response = await _send()
        except httpx.HTTPError as exc:
            log_progress(
                self.logger,
                "HTTP error during request",
                level=logging.ERROR,
                extra={"method": method, "url": url, "error": str(exc)},
            )
            raise APIError(f"HTTP error while calling {method} {url}: {exc!r}") from exc

        self._raise_for_status(response)
        log_progress(
            self.logger,
            "HTTP response",
            level=logging.DEBUG,
            extra={"status_code": response.status_code, "url": str(response.url)},
        )
        return response

    async def _get_json(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        response = await self._request("GET", url, params=params, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise APIError(f"Failed to decode JSON from {response.url}: {exc}") from exc
