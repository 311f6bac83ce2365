"""Request manager for fetching Hacker News pages.

AsyncRequestManager owns the shared httpx.AsyncClient and turns transport
failures into hncli's TransientException hierarchy. It is safe to use from
many concurrent tasks: the client and its connection pool are shared and
nothing else is mutated per request.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from hncli.common.exceptions import (
    HTMLResponseAssumptionException,
    RequestFailedException,
    RequestTimeoutException,
)
from hncli.settings import (
    CONNECT_TIMEOUT_SECONDS,
    MAX_KEEPALIVE_CONNECTIONS,
    REQUEST_TIMEOUT_SECONDS,
    USER_AGENT,
)

logger = logging.getLogger(__name__)


class AsyncRequestManager:
    """Manages HTTP requests for the async driver.

    This class encapsulates:

    - httpx.AsyncClient lifecycle
    - Fetching a URL as text
    - Mapping httpx errors to TransientException subclasses

    Example::

        async with AsyncRequestManager(timeout=30.0) as manager:
            text = await manager.fetch_text(url)
    """

    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the request manager.

        Args:
            timeout: Overall per-request timeout in seconds.
            connect_timeout: Timeout for establishing a connection, in seconds.
            user_agent: User-Agent header sent with every request.
            transport: Optional httpx transport, used by tests to serve
                canned responses.
        """
        self.timeout = timeout
        self.connect_timeout = connect_timeout

        self._client = httpx.AsyncClient(
            headers={"User-Agent": user_agent},
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
            limits=httpx.Limits(
                max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS
            ),
            follow_redirects=True,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncRequestManager:
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit - closes the client."""
        await self.close()

    async def fetch_text(self, url: str) -> str:
        """GET ``url`` and return the decoded body.

        Args:
            url: Absolute URL to fetch.

        Returns:
            The response body as text.

        Raises:
            RequestTimeoutException: If connecting or reading times out.
            RequestFailedException: If connecting, sending or reading fails.
            HTMLResponseAssumptionException: If server returns 5xx status code.
        """
        logger.debug(f"GET {url}")

        try:
            http_response = await self._client.get(url)
        except httpx.ConnectTimeout:
            raise RequestTimeoutException(
                url=url, timeout_seconds=self.connect_timeout
            )
        except httpx.TimeoutException:
            raise RequestTimeoutException(
                url=url, timeout_seconds=self.timeout
            )
        except httpx.ConnectError as e:
            raise RequestFailedException(url, "connect", e) from e
        except httpx.WriteError as e:
            raise RequestFailedException(url, "send", e) from e
        except httpx.TransportError as e:
            raise RequestFailedException(url, "read", e) from e

        # Check for server errors (5xx status codes)
        if http_response.status_code >= 500:
            raise HTMLResponseAssumptionException(
                status_code=http_response.status_code,
                expected_codes=[200],
                url=url,
            )

        logger.debug(
            f"{http_response.status_code} {url} "
            f"({len(http_response.content)} bytes)"
        )
        return http_response.text
