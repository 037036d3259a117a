"""Parse credits and attachment links from a course detail page."""

import re
from dataclasses import dataclass, field
from urllib.parse import urlparse

from bs4 import BeautifulSoup, NavigableString, Tag

from ..storage.models import Link
from .links import build_link, clean_text, dedupe_links, to_absolute_url

ATTACHMENT_LABEL = "附件"

DOCUMENT_EXTENSIONS = (
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
    "odt", "ods", "odp", "zip", "rar", "7z",
)
_EXT_GROUP = "|".join(DOCUMENT_EXTENSIONS)

CREDIT_CELL = re.compile(r"總\s*分|總\s*學\s*分")
CREDIT_VALUE = re.compile(r"總\s*(?:學\s*)?分[：:\s]*([0-9]+(?:\.[0-9]+)?)")

# Quoted path or URL inside an onclick handler, e.g. window.open('files/a.pdf')
ONCLICK_FILE = re.compile(
    rf"""['"]([^'"]+?\.(?:{_EXT_GROUP})(?:[?#][^'"]*)?)['"]""", re.IGNORECASE
)
RELATED_FILES_LABEL = re.compile(r"相關檔案|檔案下載|附件下載|相關附件|下載專區|附件")
GENERIC_FILE_LABEL = re.compile(r"檔案|下載|附件|download|file", re.IGNORECASE)

INLINE_TAGS = {"strong", "b", "span", "em", "font", "label", "i", "u", "small"}
PAGE_ROOTS = {"body", "html", "[document]"}
MAX_LABEL_LENGTH = 30


def parse_credits(soup: BeautifulSoup) -> float | int | None:
    """Find the total credits value in the page's table cells."""
    for cell in soup.find_all("td"):
        text = clean_text(cell.get_text(" "))
        if not CREDIT_CELL.search(text):
            continue
        match = CREDIT_VALUE.search(text)
        if not match:
            return None
        value = float(match.group(1))
        return int(value) if value.is_integer() else value
    return None


def is_document_url(url: str) -> bool:
    """Check if the URL path ends in a document extension."""
    path = urlparse(url).path.lower()
    return any(path.endswith(f".{ext}") for ext in DOCUMENT_EXTENSIONS)


@dataclass
class DetailPage:
    """What a detail page yields before any probing.

    confirmed attachments are recognised from the markup alone; deferred
    ones only look like downloads and need a network probe.
    """

    credits: float | int | None = None
    confirmed: list[Link] = field(default_factory=list)
    deferred: list[Link] = field(default_factory=list)


class DetailPageParser:
    """Extract credits and attachments from detail page HTML."""

    def __init__(self, page_url: str):
        self.page_url = page_url

    def parse(self, html: str) -> DetailPage:
        soup = BeautifulSoup(html, "html.parser")
        anchors = soup.find_all("a")

        confirmed = self._document_anchors(anchors)
        confirmed += self._section_anchors(soup)
        confirmed = dedupe_links(confirmed)

        known = {link.url for link in confirmed}
        deferred = []
        for anchor in anchors:
            if not GENERIC_FILE_LABEL.search(clean_text(anchor.get_text())):
                continue
            link = self._link(anchor, anchor.get("href"))
            if link and link.url not in known:
                deferred.append(link)

        return DetailPage(
            credits=parse_credits(soup),
            confirmed=confirmed,
            deferred=dedupe_links(deferred),
        )

    def _document_anchors(self, anchors: list[Tag]) -> list[Link]:
        """Anchors pointing at a document file, directly or via onclick."""
        links = []
        for anchor in anchors:
            href = anchor.get("href")
            absolute = to_absolute_url(href, self.page_url) if isinstance(href, str) else None
            if absolute and is_document_url(absolute):
                links.append(self._link(anchor, absolute))
                continue

            onclick = anchor.get("onclick") or ""
            match = ONCLICK_FILE.search(onclick)
            if match:
                links.append(self._link(anchor, match.group(1)))
        return [link for link in links if link]

    def _section_anchors(self, soup: BeautifulSoup) -> list[Link]:
        """Anchors inside or right after a "related files" label."""
        links = []
        for text_node in soup.find_all(string=RELATED_FILES_LABEL):
            if not isinstance(text_node, NavigableString) or text_node.find_parent("a"):
                continue
            if len(clean_text(text_node)) > MAX_LABEL_LENGTH:
                continue

            container = text_node.parent
            while container is not None and container.name in INLINE_TAGS:
                container = container.parent
            if container is None or container.name in PAGE_ROOTS:
                continue

            scopes = [container]
            following = container.find_next_sibling()
            if following is not None:
                scopes.append(following)
            for scope in scopes:
                for anchor in scope.find_all("a"):
                    links.append(self._link(anchor, anchor.get("href")))
        return [link for link in links if link]

    def _link(self, anchor: Tag, url) -> Link | None:
        if not isinstance(url, str):
            return None
        return build_link(anchor.get_text(), url, ATTACHMENT_LABEL, self.page_url)
