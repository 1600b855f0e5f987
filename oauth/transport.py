"""
Verbose HTTP logging for outbound provider requests.
"""
import logging
import time
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


def _format_headers(headers: httpx.Headers) -> str:
    return "".join(f"{name}: {value}\n" for name, value in headers.multi_items())


class LoggingTransport(httpx.AsyncBaseTransport):
    """Wraps another transport and logs every request/response pair in full"""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport or httpx.AsyncHTTPTransport()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        body = await request.aread()
        logger.debug(
            f"request: {request.method} {request.url}\n"
            f"{_format_headers(request.headers)}\n"
            f"body:\n{body.decode('utf-8', 'replace')}"
        )

        start = time.monotonic()
        try:
            response = await self.transport.handle_async_request(request)
        except httpx.HTTPError as e:
            logger.debug(f"error: {e} in {time.monotonic() - start:.3f}s")
            raise

        # Buffer the body so it can be logged and still handed to the client
        content = await response.aread()
        logger.debug(
            f"response: {response.status_code} in {time.monotonic() - start:.3f}s\n"
            f"body:\n{content.decode('utf-8', 'replace')}"
        )
        return response

    async def aclose(self) -> None:
        await self.transport.aclose()


def build_transport(verbose: bool, transport: Optional[httpx.AsyncBaseTransport] = None) -> Optional[httpx.AsyncBaseTransport]:
    """Pick the transport for provider requests

    Args:
        verbose: Wrap the transport with full request/response logging
        transport: Base transport (None means httpx's default)

    Returns:
        Transport to hand to httpx.AsyncClient, or None for the default
    """
    if verbose:
        return LoggingTransport(transport)
    return transport
