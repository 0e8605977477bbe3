"""
HTTP session factory for generator calls.

All aiohttp usage in argmap goes through ``create_client_session`` so every
request carries an explicit timeout.

Usage:
    from argmap.http_client import create_client_session, timeout_for

    async with create_client_session(timeout_for(45.0)) as session:
        async with session.post(url, json=payload) as resp:
            data = await resp.json()
"""

from __future__ import annotations

import aiohttp
from aiohttp import ClientTimeout

__all__ = [
    "DEFAULT_TIMEOUT",
    "GENERATION_TIMEOUT",
    "timeout_for",
    "create_client_session",
]

# Default timeout for short requests
DEFAULT_TIMEOUT = ClientTimeout(
    total=30,
    connect=10,
    sock_read=20,
)

# Model inference can take tens of seconds for a full diagram
GENERATION_TIMEOUT = ClientTimeout(
    total=45,
    connect=10,
    sock_read=40,
)


def timeout_for(total_seconds: float) -> ClientTimeout:
    """Build a ClientTimeout bounded by ``total_seconds``.

    The connect phase gets at most 10 seconds; reads may use the rest.
    """
    connect = min(10.0, total_seconds)
    return ClientTimeout(total=total_seconds, connect=connect, sock_read=total_seconds)


def create_client_session(
    timeout: ClientTimeout | None = None,
    **kwargs,
) -> aiohttp.ClientSession:
    """Create an aiohttp ClientSession with proper timeout configuration.

    Args:
        timeout: Optional custom timeout. Uses DEFAULT_TIMEOUT if not specified.
        **kwargs: Additional arguments passed to ClientSession.
    """
    if timeout is None:
        timeout = DEFAULT_TIMEOUT
    return aiohttp.ClientSession(timeout=timeout, **kwargs)
