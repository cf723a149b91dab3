"""Pooled HTTP client shared by the text-to-speech adapters."""

import logging
from typing import Optional

import httpx

from narrator import __version__
from narrator.config import settings

logger = logging.getLogger(__name__)

_client: Optional[httpx.AsyncClient] = None


def _build_client() -> httpx.AsyncClient:
    # One synthesis request in flight per batch slot, plus voice listings
    connections = settings.BATCH_MAX_CONCURRENT + 2
    return httpx.AsyncClient(
        headers={"User-Agent": f"article-narrator/{__version__}"},
        timeout=httpx.Timeout(
            settings.TTS_CHUNK_TIMEOUT,
            connect=10.0,
            pool=30.0,
        ),
        limits=httpx.Limits(
            max_connections=connections,
            max_keepalive_connections=connections,
            keepalive_expiry=60.0,
        ),
    )


async def get_client() -> httpx.AsyncClient:
    """Shared client, created on first use and after ``close_client``."""
    global _client

    if _client is None or _client.is_closed:
        _client = _build_client()
        logger.debug("TTS HTTP client created")
    return _client


async def close_client() -> None:
    """Close the shared client on shutdown."""
    global _client

    client, _client = _client, None
    if client is not None and not client.is_closed:
        await client.aclose()
        logger.debug("TTS HTTP client closed")
