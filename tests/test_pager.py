"""Tests for listing pagination."""

import pytest

from kaa_courses.errors import FetchError
from kaa_courses.fetching.pager import Pager

BASE_URL = "https://www.kaa.org.tw/news_class_list.php"


def page_url(page):
    return BASE_URL if page == 1 else f"{BASE_URL}?b={page}"


@pytest.fixture
def full_page(make_page, make_row):
    def build(page, count=10):
        return make_page([make_row(f"第{page}頁課程{i}", "2024-06-01") for i in range(count)])

    return build


def make_pager(fetcher, max_pages=200):
    return Pager(fetcher, BASE_URL, max_pages=max_pages, min_page_rows=10, wait_seconds=0)


class TestPager:
    @pytest.mark.asyncio
    async def test_stops_on_empty_page(self, fetcher, ok_response, full_page, make_page):
        fetcher.pages[page_url(1)] = ok_response(full_page(1))
        fetcher.pages[page_url(2)] = ok_response(full_page(2))
        fetcher.pages[page_url(3)] = ok_response(make_page([]))

        courses = await make_pager(fetcher, max_pages=50).collect()

        assert len(courses) == 20
        assert {course.page for course in courses} == {1, 2}
        assert [key for _, key in fetcher.calls] == [page_url(1), page_url(2), page_url(3)]

    @pytest.mark.asyncio
    async def test_short_page_is_last(self, fetcher, ok_response, full_page):
        fetcher.pages[page_url(1)] = ok_response(full_page(1))
        fetcher.pages[page_url(2)] = ok_response(full_page(2, count=4))

        courses = await make_pager(fetcher).collect()

        assert len(courses) == 14
        assert len(fetcher.calls) == 2

    @pytest.mark.asyncio
    async def test_page_ceiling(self, fetcher, ok_response, full_page):
        for page in (1, 2, 3):
            fetcher.pages[page_url(page)] = ok_response(full_page(page))

        courses = await make_pager(fetcher, max_pages=2).collect()

        assert len(courses) == 20
        assert len(fetcher.calls) == 2

    @pytest.mark.asyncio
    async def test_failed_page_is_fatal(self, fetcher, ok_response, full_page, failed_response):
        fetcher.pages[page_url(1)] = ok_response(full_page(1))
        fetcher.pages[page_url(2)] = failed_response(502)

        with pytest.raises(FetchError, match="502"):
            await make_pager(fetcher).collect()

    def test_page_params(self, fetcher):
        pager = make_pager(fetcher)

        assert pager.page_params(1) is None
        assert pager.page_params(4) == {"b": "4"}
