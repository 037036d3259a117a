"""Link normalization shared by the listing and detail parsers."""

import re
from typing import Iterable, Optional
from urllib.parse import urljoin, urlparse

from ..storage.models import Link

WHITESPACE = re.compile(r"\s+")


def clean_text(value: str | None) -> str:
    """Collapse non-breaking spaces and whitespace runs, then trim."""
    if not value:
        return ""
    return WHITESPACE.sub(" ", value.replace("\u00a0", " ")).strip()


def to_absolute_url(url: str | None, base_url: str) -> str | None:
    """Resolve url against base_url; None when absent or not a web URL."""
    if not url or not url.strip():
        return None
    try:
        resolved = urljoin(base_url, url.strip())
        parsed = urlparse(resolved)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return resolved


def build_link(
    label: str | None, url: str | None, fallback_label: str, base_url: str
) -> Optional[Link]:
    """Build a Link, or None when the URL cannot be resolved."""
    absolute = to_absolute_url(url, base_url)
    if not absolute:
        return None
    return Link(label=clean_text(label) or fallback_label, url=absolute)


def dedupe_links(links: Iterable[Optional[Link]]) -> list[Link]:
    """Drop empty entries and repeated URLs, keeping the first occurrence."""
    seen: set[str] = set()
    result = []
    for link in links:
        if link is None or link.url in seen:
            continue
        seen.add(link.url)
        result.append(link)
    return result
