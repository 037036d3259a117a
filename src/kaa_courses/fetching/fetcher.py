"""Async fetcher for the course site."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime

import aiohttp

from ..config import DEFAULT_USER_AGENT
from ..errors import FetchError
from ..storage.models import FetchStatus


@dataclass
class FetchResult:
    """Result of a fetch operation."""

    status: FetchStatus
    content: bytes | None = None
    error: str | None = None
    status_code: int | None = None
    content_type: str | None = None
    content_disposition: str | None = None
    fetched_at: datetime = field(default_factory=datetime.now)

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.SUCCESS

    def raise_for_status(self, url: str) -> bytes:
        """Return the body, or raise FetchError if the fetch did not succeed."""
        if not self.ok:
            raise FetchError(url, self.error or self.status.value)
        return self.content or b""


class SiteFetcher:
    """Sequential async HTTP client.

    One request at a time; callers sleep between requests themselves.
    """

    def __init__(
        self,
        timeout_seconds: int = 30,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.headers = {
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml",
        }

    async def fetch(self, url: str, params: dict[str, str] | None = None) -> FetchResult:
        """GET a URL and return its raw body."""
        return await self._request("GET", url, params=params)

    async def head(self, url: str) -> FetchResult:
        """HEAD a URL; only the headers are of interest."""
        return await self._request("HEAD", url)

    async def fetch_prefix(self, url: str, length: int) -> FetchResult:
        """GET the first length bytes of a URL with a Range request."""
        return await self._request(
            "GET", url, extra_headers={"Range": f"bytes=0-{length - 1}"}, limit=length
        )

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        extra_headers: dict[str, str] | None = None,
        limit: int | None = None,
    ) -> FetchResult:
        headers = {**self.headers, **(extra_headers or {})}
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(
                    method, url, params=params, headers=headers, allow_redirects=True
                ) as response:
                    content_type = response.headers.get("content-type", "")
                    disposition = response.headers.get("content-disposition")
                    if response.status not in (200, 206):
                        return FetchResult(
                            status=FetchStatus.FAILED,
                            error=f"HTTP {response.status} {response.reason or ''}".strip(),
                            status_code=response.status,
                            content_type=content_type,
                        )

                    if method == "HEAD":
                        content = b""
                    elif limit is not None:
                        content = await response.content.read(limit)
                    else:
                        content = await response.read()

                    return FetchResult(
                        status=FetchStatus.SUCCESS,
                        content=content,
                        status_code=response.status,
                        content_type=content_type,
                        content_disposition=disposition,
                    )

        except asyncio.TimeoutError:
            return FetchResult(status=FetchStatus.TIMEOUT, error="Request timed out")
        except aiohttp.ClientError as e:
            return FetchResult(status=FetchStatus.FAILED, error=str(e))
