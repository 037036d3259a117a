"""Decide how a document link is previewed."""

import re
from dataclasses import dataclass
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from ..extraction.detail import DOCUMENT_EXTENSIONS

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")
EXTENSION = re.compile(r"\.([a-z0-9]+)$", re.IGNORECASE)
# The course site serves attachments through download.php?b=<id>
DOWNLOAD_SCRIPT = re.compile(r"download\.php\?b=", re.IGNORECASE)


def url_extension(url: str) -> str | None:
    """Lowercased file extension of the URL path, if any."""
    match = EXTENSION.search(urlparse(url).path)
    return match.group(1).lower() if match else None


def is_image_url(url: str) -> bool:
    return url_extension(url) in IMAGE_EXTENSIONS


ARCHIVE_EXTENSIONS = ("zip", "rar", "7z")
VIEWER_EXTENSIONS = tuple(ext for ext in DOCUMENT_EXTENSIONS if ext not in ARCHIVE_EXTENSIONS)


def is_document_link(url: str) -> bool:
    """Downloadable attachments, archives included."""
    return url_extension(url) in DOCUMENT_EXTENSIONS or bool(DOWNLOAD_SCRIPT.search(url))


def is_viewable_document(url: str) -> bool:
    """Documents the external viewer can render; archives are not."""
    return url_extension(url) in VIEWER_EXTENSIONS or bool(DOWNLOAD_SCRIPT.search(url))


def is_previewable(url: str) -> bool:
    return is_image_url(url) or is_viewable_document(url)


@dataclass(frozen=True)
class PreviewTarget:
    """How to show a document: image, viewer, embed or external."""

    mode: str
    src: str


class PreviewSink:
    """Build preview targets, delegating documents to an external viewer."""

    def __init__(self, viewer_endpoint: str = ""):
        self.viewer_endpoint = viewer_endpoint

    def viewer_url(self, url: str) -> str:
        """The viewer endpoint with url added as a query parameter."""
        parts = urlparse(self.viewer_endpoint)
        query = parse_qsl(parts.query, keep_blank_values=True)
        query.append(("url", url))
        return urlunparse(parts._replace(query=urlencode(query)))

    def resolve(self, url: str) -> PreviewTarget:
        if is_image_url(url):
            return PreviewTarget(mode="image", src=url)
        if is_viewable_document(url):
            if self.viewer_endpoint:
                return PreviewTarget(mode="viewer", src=self.viewer_url(url))
            if url_extension(url) == "pdf":
                return PreviewTarget(mode="embed", src=url)
        return PreviewTarget(mode="external", src=url)
