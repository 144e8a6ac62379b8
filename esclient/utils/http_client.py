"""Helpers to create the blocking (`httpx.Client`) and asynchronous
(`httpx.AsyncClient`) HTTP clients with common configurations.
"""

from httpx import (
    AsyncBaseTransport,
    AsyncClient,
    BaseTransport,
    Client,
    Limits,
    Timeout,
)

DEFAULT_HEADERS: dict[str, str] = {"Content-Type": "application/json"}


def create_http_client(
    base_url: str = "",
    max_connections: int = 100,
    connect_timeout: float = 1.0,
    request_timeout: float = 30.0,
    pool_timeout: float = 1.0,
    transport: AsyncBaseTransport | None = None,
) -> AsyncClient:
    """Create a new `httpx.AsyncClient` with common configurations.

    Args:
      - `base_url` {str}: The base URL for this client. An empty string sets no base URL.
      - `max_connections` {int}: Max connections of the connection pool.
      - `connect_timeout` {float}: The timeout for establishing a connection to the host.
      - `request_timeout` {float}: The timeout for handling a request to the host.
      - `pool_timeout` {float}: The timeout for acquiring a connection from the pool.
      - `transport` {AsyncBaseTransport | None}: A custom transport, mostly for tests.
    Returns:
      - {AsyncClient}: An async HTTP client.
    """
    return AsyncClient(
        base_url=base_url,
        headers=DEFAULT_HEADERS,
        limits=Limits(max_connections=max_connections),
        timeout=Timeout(request_timeout, connect=connect_timeout, pool=pool_timeout),
        transport=transport,
    )


def create_sync_http_client(
    base_url: str = "",
    max_connections: int = 100,
    connect_timeout: float = 1.0,
    request_timeout: float = 30.0,
    pool_timeout: float = 1.0,
    transport: BaseTransport | None = None,
) -> Client:
    """Create a new blocking `httpx.Client`. Takes the same arguments as
    `create_http_client`.
    """
    return Client(
        base_url=base_url,
        headers=DEFAULT_HEADERS,
        limits=Limits(max_connections=max_connections),
        timeout=Timeout(request_timeout, connect=connect_timeout, pool=pool_timeout),
        transport=transport,
    )
