"""Bounded-timeout reachability and health probes."""

import asyncio
import logging

import httpx

from txkit.errors import TransientNetworkError

logger = logging.getLogger(__name__)


async def fetch(client: httpx.AsyncClient, url: str, timeout: float) -> httpx.Response:
    """
    GET ``url`` under a hard deadline.

    The request is cancelled when the deadline expires. Timeouts and
    transport failures are raised as TransientNetworkError.
    """
    try:
        return await asyncio.wait_for(client.get(url, timeout=timeout), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise TransientNetworkError(f"GET {url} timed out after {timeout}s") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise TransientNetworkError(f"GET {url} failed: {e}") from e


async def ping(client: httpx.AsyncClient, url: str, timeout: float = 1.5) -> bool:
    """Reachable when the endpoint answers with anything but a server error."""
    try:
        response = await fetch(client, url, timeout)
    except TransientNetworkError as e:
        logger.debug(f"Ping failed: {e}")
        return False
    # 4xx still means the service is up
    return response.is_success or response.status_code < 500


async def health(client: httpx.AsyncClient, url: str, timeout: float = 2.0) -> bool:
    """
    Healthy when the endpoint answers 2xx and, if the body is JSON,
    does not report ``is_healthy: false``. A plain 200 counts as healthy.
    """
    try:
        response = await fetch(client, url, timeout)
    except TransientNetworkError as e:
        logger.debug(f"Health check failed: {e}")
        return False
    if not response.is_success:
        return False
    try:
        data = response.json()
    except ValueError:
        return True
    if isinstance(data, dict):
        return data.get("is_healthy") is not False
    return True
