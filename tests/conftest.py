"""Shared fixtures: a scripted fetcher and listing page builders."""

from urllib.parse import urlencode

import pytest

from kaa_courses.fetching.fetcher import FetchResult
from kaa_courses.storage.models import FetchStatus

BASE_URL = "https://www.kaa.org.tw/news_class_list.php"


def ok(content: bytes | str = b"", content_type: str = "text/html", disposition: str | None = None):
    if isinstance(content, str):
        content = content.encode("utf-8")
    return FetchResult(
        status=FetchStatus.SUCCESS,
        content=content,
        status_code=200,
        content_type=content_type,
        content_disposition=disposition,
    )


def failed(status_code: int = 500):
    return FetchResult(
        status=FetchStatus.FAILED, error=f"HTTP {status_code}", status_code=status_code
    )


class FakeFetcher:
    """Stands in for SiteFetcher; responses are keyed by full URL."""

    def __init__(self):
        self.pages: dict[str, FetchResult] = {}
        self.heads: dict[str, FetchResult] = {}
        self.prefixes: dict[str, FetchResult] = {}
        self.calls: list[tuple[str, str]] = []

    async def fetch(self, url, params=None):
        key = f"{url}?{urlencode(params)}" if params else url
        self.calls.append(("GET", key))
        return self.pages.get(key, failed(404))

    async def head(self, url):
        self.calls.append(("HEAD", url))
        return self.heads.get(url, failed(405))

    async def fetch_prefix(self, url, length):
        self.calls.append(("RANGE", url))
        return self.prefixes.get(url, failed(404))


def listing_row(title, date="", time="", detail="", register="", extras=()):
    detail_cell = f'<a href="{detail}">課程資訊</a>' if detail else ""
    register_cell = f'<a href="{register}">線上報名</a>' if register else ""
    extra_cell = "".join(f'<a href="{href}">{label}</a>' for label, href in extras)
    return (
        f"<tr><td>{title}</td><td>{date}</td><td>{time}</td>"
        f"<td>{detail_cell}</td><td>{register_cell}</td><td>{extra_cell}</td></tr>"
    )


def listing_page(rows):
    header = "<tr><th>課程名稱</th><th>日期</th><th>時間</th><th>資訊</th><th>報名</th><th>其他</th></tr>"
    return f"<html><body><table>{header}{''.join(rows)}</table></body></html>"


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def make_row():
    return listing_row


@pytest.fixture
def make_page():
    return listing_page


@pytest.fixture
def ok_response():
    return ok


@pytest.fixture
def failed_response():
    return failed
