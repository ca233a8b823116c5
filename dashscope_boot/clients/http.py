from typing import List, Optional, Tuple

import httpx

from dashscope_boot.connection import ResolvedConnection

CONNECT_TIMEOUT = 10.0


def connection_headers(connection: ResolvedConnection) -> List[Tuple[str, str]]:
    """Authorization plus the derived connection headers, one pair per value."""
    headers = [('Authorization', f'Bearer {connection.api_key}')]
    for name, values in connection.headers.items():
        headers.extend((name, value) for value in values)
    return headers


def build_http_client(
    connection: ResolvedConnection,
    read_timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Build the async client every request for one feature goes through.

    `transport` lets tests plug in an `httpx.MockTransport`.
    """
    return httpx.AsyncClient(
        base_url=connection.base_url,
        headers=connection_headers(connection),
        timeout=httpx.Timeout(read_timeout, connect=CONNECT_TIMEOUT),
        transport=transport,
    )
