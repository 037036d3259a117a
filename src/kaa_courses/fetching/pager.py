"""Walk the paginated course listing."""

import asyncio
import logging
from dataclasses import replace

from ..extraction.encoding import decode_html
from ..extraction.rows import ListingRowParser
from ..storage.models import CourseRecord
from .fetcher import SiteFetcher

logger = logging.getLogger(__name__)

PAGE_PARAM = "b"


class Pager:
    """Fetch listing pages in order until the listing runs out.

    A page with no rows, or with fewer than min_page_rows rows, is taken to
    be the last one. A failed page fetch raises FetchError.
    """

    def __init__(
        self,
        fetcher: SiteFetcher,
        base_url: str,
        max_pages: int = 200,
        min_page_rows: int = 10,
        wait_seconds: float = 0.3,
    ):
        self.fetcher = fetcher
        self.base_url = base_url
        self.max_pages = max_pages
        self.min_page_rows = min_page_rows
        self.wait_seconds = wait_seconds
        self.parser = ListingRowParser(base_url)

    def page_params(self, page: int) -> dict[str, str] | None:
        """Page 1 is the bare listing URL."""
        if page > 1:
            return {PAGE_PARAM: str(page)}
        return None

    async def fetch_page(self, page: int) -> list[CourseRecord]:
        result = await self.fetcher.fetch(self.base_url, params=self.page_params(page))
        html = decode_html(result.raise_for_status(f"{self.base_url} (page {page})"))
        return self.parser.parse(html)

    async def collect(self) -> list[CourseRecord]:
        """Collect every course from the listing, tagged with its page number."""
        courses: list[CourseRecord] = []

        for page in range(1, self.max_pages + 1):
            page_courses = await self.fetch_page(page)
            if not page_courses:
                logger.info(f"Page {page}: no courses, stopping")
                break

            courses.extend(replace(course, page=page) for course in page_courses)
            logger.info(f"Page {page}: {len(page_courses)} courses")

            if len(page_courses) < self.min_page_rows:
                break

            await asyncio.sleep(self.wait_seconds)

        return courses
