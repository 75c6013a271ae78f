"""
Shared httpx.AsyncClient for outbound Ton.Place API calls.

One pooled client per process, created on first use and closed by the app
lifespan.
"""
import asyncio
from typing import Optional

import httpx

from app import __version__
from app.core.config import settings
from app.core.logging_config import log_info

USER_AGENT = f"tonplace-miniapp/{__version__}"

_client: Optional[httpx.AsyncClient] = None
_client_lock: Optional[asyncio.Lock] = None


def _get_lock() -> asyncio.Lock:
    global _client_lock
    if _client_lock is None:
        _client_lock = asyncio.Lock()
    return _client_lock


def _client_is_usable() -> bool:
    return _client is not None and not _client.is_closed


async def get_http_client() -> httpx.AsyncClient:
    """Return the shared client, creating it if missing or closed."""
    global _client
    if not _client_is_usable():
        async with _get_lock():
            if not _client_is_usable():
                _client = httpx.AsyncClient(
                    timeout=settings.http_timeout_seconds,
                    headers={"User-Agent": USER_AGENT},
                )
                log_info("HTTP client created", timeout=settings.http_timeout_seconds)
    return _client


async def close_http_client():
    global _client
    async with _get_lock():
        if _client_is_usable():
            await _client.aclose()
            log_info("HTTP client closed")
        _client = None
