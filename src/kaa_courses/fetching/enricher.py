"""Best-effort enrichment of courses from their detail pages."""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime

from ..extraction.detail import DetailPageParser
from ..extraction.encoding import DETAIL_MARKER, decode_html
from ..extraction.links import dedupe_links
from ..feed.deadlines import DEFAULT_TIMEZONE, is_past
from ..storage.models import CourseRecord, EnrichmentResult, EnrichmentStatus
from .fetcher import SiteFetcher
from .probe import AttachmentProbe

logger = logging.getLogger(__name__)


class DetailEnricher:
    """Fetch each course's detail page for credits and attachments.

    Courses are processed one at a time with a fixed pause after every
    detail request. A failure only degrades the affected course.
    """

    def __init__(
        self,
        fetcher: SiteFetcher,
        probe: AttachmentProbe | None = None,
        wait_seconds: float = 0.4,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self.fetcher = fetcher
        self.probe = probe or AttachmentProbe(fetcher)
        self.wait_seconds = wait_seconds
        self.timezone = timezone

    def should_enrich(self, course: CourseRecord, now: datetime | None = None) -> bool:
        """Only courses with a detail page that have not ended yet."""
        return bool(course.detail_url) and not is_past(course.deadline, self.timezone, now)

    async def fetch_details(self, url: str) -> EnrichmentResult:
        """Fetch and parse one detail page. Raises on failure."""
        result = await self.fetcher.fetch(url)
        html = decode_html(result.raise_for_status(url), marker=DETAIL_MARKER)
        page = DetailPageParser(url).parse(html)

        attachments = list(page.confirmed)
        for candidate in page.deferred:
            if await self.probe.verify(candidate.url):
                attachments.append(candidate)
            else:
                logger.debug(f"Discarded unverified attachment {candidate.url}")

        return EnrichmentResult(
            status=EnrichmentStatus.ENRICHED,
            credits=page.credits,
            attachments=dedupe_links(attachments),
        )

    async def enrich(self, course: CourseRecord, now: datetime | None = None) -> EnrichmentResult:
        """Enrich one course; never raises."""
        if not self.should_enrich(course, now):
            return EnrichmentResult(status=EnrichmentStatus.SKIPPED)

        try:
            return await self.fetch_details(course.detail_url)  # type: ignore[arg-type]
        except Exception as e:
            logger.warning(f"Failed to fetch details for {course.title}: {e}")
            return EnrichmentResult(status=EnrichmentStatus.DEGRADED, error=str(e))
        finally:
            await asyncio.sleep(self.wait_seconds)

    async def enrich_all(
        self, courses: list[CourseRecord], now: datetime | None = None
    ) -> list[tuple[CourseRecord, EnrichmentResult]]:
        """Enrich courses sequentially, returning updated copies with their results."""
        enriched = []
        for course in courses:
            result = await self.enrich(course, now)
            updated = replace(
                course,
                credits=result.credits,
                attachments=list(result.attachments),
            )
            enriched.append((updated, result))
        return enriched
