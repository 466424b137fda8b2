"""
HTTP request capability backed by httpx.

HTTP request nodes consume this as an opaque capability: given a method, URL,
headers and optional body, return the status and body text, or fail at the
network level.
"""

import logging
from collections.abc import Mapping
from typing import Protocol

import httpx
from attrs import frozen

from flowcanvas.exceptions import HttpTransportError

logger = logging.getLogger(__name__)


@frozen
class HttpResponse:
    status_code: int
    reason: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class HttpRequester(Protocol):
    """Capability consumed by HTTP request nodes."""

    async def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: str | None = None,
    ) -> HttpResponse: ...


class HttpxRequester:
    """
    `HttpRequester` issuing each request through a short-lived ``httpx.AsyncClient``.

    Params:
        timeout: Seconds before the request is abandoned
        transport: Optional transport override (e.g. ``httpx.MockTransport``)
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self._transport = transport

    async def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: str | None = None,
    ) -> HttpResponse:
        """
        Send one request and read the whole response body.

        Non-success statuses are returned, not raised.

        Raises:
            HttpTransportError: If no response could be obtained
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method, url, headers=dict(headers), content=body
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise HttpTransportError(str(e) or type(e).__name__) from e
        return HttpResponse(
            status_code=response.status_code,
            reason=response.reason_phrase,
            text=response.text,
        )
