"""Parse course rows from a listing page.

This is the only module that knows the listing table layout. Columns are
read by position, so a layout change on the source site has to be handled
here and nowhere else:

    0 title (an inline anchor doubles as the detail link)
    1 date
    2 time
    3 detail link
    4 registration link
    5 extra links
"""

from bs4 import BeautifulSoup, Tag

from ..storage.models import CourseRecord, Link
from .links import build_link, clean_text, dedupe_links

DETAIL_LABEL = "課程資訊"
REGISTER_LABEL = "線上報名"
EXTRA_LABEL = "相關連結"


class ListingRowParser:
    """Turn listing table rows into CourseRecords."""

    def __init__(self, base_url: str):
        self.base_url = base_url

    def parse(self, html: str) -> list[CourseRecord]:
        """Parse all data rows of a listing page."""
        soup = BeautifulSoup(html, "html.parser")
        rows = soup.select("table tr")[1:]

        courses = []
        for row in rows:
            course = self._parse_row(row)
            if course:
                courses.append(course)
        return courses

    def _parse_row(self, row: Tag) -> CourseRecord | None:
        cells = row.find_all("td")
        if not cells:
            return None

        title_cell = cells[0]
        title = clean_text(title_cell.get_text())
        if not title:
            return None

        date_text = clean_text(self._cell_text(cells, 1))
        time_text = clean_text(self._cell_text(cells, 2))

        detail_href = self._anchor_href(cells, 3) or self._href(title_cell.find("a"))
        detail_link = build_link(
            self._cell_text(cells, 3), detail_href, DETAIL_LABEL, self.base_url
        )
        register_link = build_link(
            self._cell_text(cells, 4),
            self._anchor_href(cells, 4),
            REGISTER_LABEL,
            self.base_url,
        )
        extras = self._extra_links(cells)

        return CourseRecord(
            title=title,
            date=date_text or None,
            # The listing has no separate deadline column; the course date is used.
            deadline=date_text or None,
            time=time_text or None,
            links=dedupe_links([detail_link, register_link, *extras]),
            detail_url=detail_link.url if detail_link else None,
            registration_url=register_link.url if register_link else None,
        )

    def _extra_links(self, cells: list[Tag]) -> list[Link | None]:
        if len(cells) <= 5:
            return []
        return [
            build_link(anchor.get_text(), self._href(anchor), EXTRA_LABEL, self.base_url)
            for anchor in cells[5].find_all("a")
        ]

    def _cell_text(self, cells: list[Tag], index: int) -> str:
        if index >= len(cells):
            return ""
        return cells[index].get_text()

    def _anchor_href(self, cells: list[Tag], index: int) -> str | None:
        if index >= len(cells):
            return None
        return self._href(cells[index].find("a"))

    @staticmethod
    def _href(anchor: Tag | None) -> str | None:
        if anchor is None:
            return None
        href = anchor.get("href")
        return href if isinstance(href, str) else None


def parse_courses(html: str, base_url: str) -> list[CourseRecord]:
    """Parse a listing page into course records."""
    return ListingRowParser(base_url).parse(html)
