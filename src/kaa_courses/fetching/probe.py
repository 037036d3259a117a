"""Verify that a link which only looks like a download really serves a document."""

import logging
import re

from ..extraction.detail import DOCUMENT_EXTENSIONS
from .fetcher import FetchResult, SiteFetcher

logger = logging.getLogger(__name__)

DOCUMENT_MIME_PREFIXES = (
    "application/pdf",
    "application/msword",
    "application/vnd.ms-",
    "application/vnd.openxmlformats-officedocument",
    "application/vnd.oasis.opendocument",
    "application/zip",
    "application/x-zip-compressed",
    "application/x-rar",
    "application/vnd.rar",
    "application/x-7z-compressed",
)

FILE_SIGNATURES = (
    b"%PDF-",
    b"PK\x03\x04",  # docx, xlsx, pptx, odt, zip
    b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1",  # doc, xls, ppt
    b"Rar!\x1a\x07",
    b"7z\xbc\xaf\x27\x1c",
)

DISPOSITION_FILENAME = re.compile(
    rf"filename\*?=[^;]*\.(?:{'|'.join(DOCUMENT_EXTENSIONS)})\b", re.IGNORECASE
)


def is_document_response(result: FetchResult) -> bool:
    """Decide from headers alone whether a response is a document."""
    content_type = (result.content_type or "").lower()
    if any(content_type.startswith(prefix) for prefix in DOCUMENT_MIME_PREFIXES):
        return True
    return bool(
        result.content_disposition and DISPOSITION_FILENAME.search(result.content_disposition)
    )


def has_document_signature(data: bytes | None) -> bool:
    """Check the leading bytes against known document formats."""
    if not data:
        return False
    head = data.lstrip(b"\r\n\t ")[:16]
    return any(head.startswith(signature) for signature in FILE_SIGNATURES)


class AttachmentProbe:
    """HEAD first, then a small ranged GET if the headers are inconclusive."""

    def __init__(self, fetcher: SiteFetcher, probe_bytes: int = 1024):
        self.fetcher = fetcher
        self.probe_bytes = probe_bytes

    async def verify(self, url: str) -> bool:
        head = await self.fetcher.head(url)
        if head.ok and is_document_response(head):
            return True

        sample = await self.fetcher.fetch_prefix(url, self.probe_bytes)
        if not sample.ok:
            logger.debug(f"Probe failed for {url}: {sample.error}")
            return False
        return is_document_response(sample) or has_document_signature(sample.content)
