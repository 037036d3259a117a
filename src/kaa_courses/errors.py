"""Exceptions raised by the scraper and the feed loader."""


class CourseFeedError(Exception):
    """Base class for course feed errors."""


class FetchError(CourseFeedError):
    """A page or detail request did not return a successful response."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class EmptyResultError(CourseFeedError):
    """No course records were collected across all pages."""


class LoadError(CourseFeedError):
    """The snapshot could not be read or decoded."""
