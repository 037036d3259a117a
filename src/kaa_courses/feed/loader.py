"""Load the published snapshot for browsing."""

import asyncio
import logging
import time
from pathlib import Path

import aiohttp

from ..errors import LoadError
from ..storage.models import Snapshot
from ..storage.snapshot import load_snapshot, parse_snapshot

logger = logging.getLogger(__name__)


def cache_busting_params() -> dict[str, str]:
    return {"_": str(int(time.time() * 1000))}


async def fetch_feed(url: str, timeout_seconds: int = 30) -> Snapshot:
    """GET a published snapshot, bypassing any caches."""
    timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    headers = {"Cache-Control": "no-cache", "Pragma": "no-cache"}
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url, params=cache_busting_params(), headers=headers) as response:
                if response.status != 200:
                    raise LoadError(f"HTTP {response.status}")
                text = await response.text(encoding="utf-8")
    except asyncio.TimeoutError as e:
        raise LoadError(f"Timed out loading {url}") from e
    except aiohttp.ClientError as e:
        raise LoadError(f"Cannot load {url}: {e}") from e

    return parse_snapshot(text)


def load_feed(source: str | Path) -> Snapshot:
    """Load from a local snapshot path or an http(s) URL."""
    source_str = str(source)
    if source_str.startswith(("http://", "https://")):
        logger.info(f"Loading courses from {source_str}")
        return asyncio.run(fetch_feed(source_str))
    return load_snapshot(source)
