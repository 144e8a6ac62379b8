"""HTTP transport shared by the blocking and non-blocking client calls."""

import logging

from httpx import AsyncBaseTransport, AsyncClient, BaseTransport, Client, Response

from esclient.utils.http_client import create_http_client, create_sync_http_client

logger = logging.getLogger(__name__)


class HttpTransport:
    """A wrapper around a blocking `httpx.Client` and an `httpx.AsyncClient`.

    Both clients point at the same endpoint and are created lazily on first use,
    so a caller that only ever blocks never opens an async client and vice versa.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        scheme: str = "http",
        connect_timeout: float = 1.0,
        request_timeout: float = 30.0,
        transport: BaseTransport | None = None,
        async_transport: AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = f"{scheme}://{host}:{port}"
        self._connect_timeout = connect_timeout
        self._request_timeout = request_timeout
        self._transport = transport
        self._async_transport = async_transport
        self._client: Client | None = None
        self._async_client: AsyncClient | None = None

    def get_client(self) -> Client:
        """Return the blocking client, creating it if needed."""
        if self._client is None:
            self._client = create_sync_http_client(
                base_url=self.base_url,
                connect_timeout=self._connect_timeout,
                request_timeout=self._request_timeout,
                transport=self._transport,
            )
        return self._client

    def get_async_client(self) -> AsyncClient:
        """Return the async client, creating it if needed."""
        if self._async_client is None:
            self._async_client = create_http_client(
                base_url=self.base_url,
                connect_timeout=self._connect_timeout,
                request_timeout=self._request_timeout,
                transport=self._async_transport,
            )
        return self._async_client

    def request(
        self,
        method: str,
        path: str,
        content: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        """Send a request and block until the response arrives.

        Network failures propagate as `httpx.RequestError`, and a path httpx cannot
        turn into a URL as `httpx.InvalidURL`. The status code is not checked here.
        """
        logger.debug("Sending request", extra={"method": method, "path": path})
        return self.get_client().request(method, path, content=content, headers=headers)

    async def arequest(
        self,
        method: str,
        path: str,
        content: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Response:
        """Send a request without blocking the event loop. See `request`."""
        logger.debug("Sending request", extra={"method": method, "path": path})
        return await self.get_async_client().request(
            method, path, content=content, headers=headers
        )

    def close(self) -> None:
        """Close the blocking client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    async def aclose(self) -> None:
        """Close both clients."""
        self.close()
        if self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None
