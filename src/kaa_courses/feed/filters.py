"""Search, status and credit filters plus sorting over classified courses."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from functools import cmp_to_key
from typing import Callable, Iterable, Mapping, Optional

from .deadlines import DeadlineCategory, EnrichedCourse

DEFAULT_STATUSES = frozenset({DeadlineCategory.DUE_SOON, DeadlineCategory.ACTIVE})
DEFAULT_SORT = "deadline-asc"
SORT_KEYS = ("deadline-asc", "deadline-desc", "date-asc", "date-desc")


@dataclass
class FilterState:
    """Everything the user can change about the course list."""

    query: str = ""
    statuses: set[DeadlineCategory] = field(default_factory=lambda: set(DEFAULT_STATUSES))
    credits_only: bool = False
    sort: str = DEFAULT_SORT

    def set_status(self, category: DeadlineCategory, checked: bool) -> bool:
        """Add or remove a status.

        Removing the last remaining status is refused: the state is left
        unchanged and False is returned so the control can be re-checked.
        """
        if checked:
            self.statuses.add(category)
            return True
        if self.statuses == {category}:
            return False
        self.statuses.discard(category)
        return True

    def toggled(self, category: DeadlineCategory) -> "FilterState":
        """A copy with category flipped, under the same last-status rule."""
        copy = replace(self, statuses=set(self.statuses))
        copy.set_status(category, category not in self.statuses)
        return copy

    @property
    def is_default(self) -> bool:
        return (
            not self.query
            and self.statuses == DEFAULT_STATUSES
            and not self.credits_only
            and self.sort == DEFAULT_SORT
        )

    def reset(self) -> bool:
        """Restore defaults; False when nothing needed resetting."""
        if self.is_default:
            return False
        self.query = ""
        self.statuses = set(DEFAULT_STATUSES)
        self.credits_only = False
        self.sort = DEFAULT_SORT
        return True

    @classmethod
    def from_args(cls, args: Mapping) -> "FilterState":
        """Build from request arguments (q, status, credits, sort).

        args may be a werkzeug MultiDict, which repeats status.
        """
        raw_statuses = args.getlist("status") if hasattr(args, "getlist") else args.get("status")
        if isinstance(raw_statuses, str):
            raw_statuses = [raw_statuses]

        statuses = set()
        for value in raw_statuses or []:
            try:
                statuses.add(DeadlineCategory(value))
            except ValueError:
                continue

        return cls(
            query=(args.get("q") or "").strip(),
            statuses=statuses or set(DEFAULT_STATUSES),
            credits_only=args.get("credits") in ("1", "true", "on"),
            sort=args.get("sort") or DEFAULT_SORT,
        )

    def to_args(self) -> dict[str, object]:
        """Query arguments that reproduce this state."""
        args: dict[str, object] = {}
        if self.query:
            args["q"] = self.query
        args["status"] = sorted(category.value for category in self.statuses)
        if self.credits_only:
            args["credits"] = "1"
        if self.sort != DEFAULT_SORT:
            args["sort"] = self.sort
        return args


def search_text(item: EnrichedCourse) -> str:
    """Lowercased text searched by the free-text query."""
    course = item.course
    links = " ".join(f"{link.label} {link.url}" for link in course.links)
    parts = [
        course.title,
        course.detail_url or "",
        course.time or "",
        links,
        course.date or "",
        course.deadline or "",
    ]
    return "\n".join(parts).lower()


def matches_query(item: EnrichedCourse, query: str) -> bool:
    query = query.strip().lower()
    if not query:
        return True
    return query in search_text(item)


def has_credits(item: EnrichedCourse) -> bool:
    credits = item.course.credits
    try:
        return credits is not None and float(credits) > 0
    except (TypeError, ValueError):
        return False


def _compare_dates(a: Optional[datetime], b: Optional[datetime], ascending: bool) -> int:
    """Compare two optional dates, missing ones last."""
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1
    if a == b:
        return 0
    result = -1 if a < b else 1
    return result if ascending else -result


def _by_deadline(ascending: bool) -> Callable[[EnrichedCourse, EnrichedCourse], int]:
    def compare(a: EnrichedCourse, b: EnrichedCourse) -> int:
        result = _compare_dates(a.deadline_date, b.deadline_date, ascending)
        if result == 0:
            return _compare_dates(a.issued_date, b.issued_date, ascending=False)
        return result

    return compare


def _by_issued(ascending: bool) -> Callable[[EnrichedCourse, EnrichedCourse], int]:
    def compare(a: EnrichedCourse, b: EnrichedCourse) -> int:
        return _compare_dates(a.issued_date, b.issued_date, ascending)

    return compare


COMPARATORS = {
    "deadline-asc": _by_deadline(ascending=True),
    "deadline-desc": _by_deadline(ascending=False),
    "date-asc": _by_issued(ascending=True),
    "date-desc": _by_issued(ascending=False),
}


def sort_courses(courses: Iterable[EnrichedCourse], sort: str) -> list[EnrichedCourse]:
    """Stable sort; unknown keys sort by issued date, newest first."""
    compare = COMPARATORS.get(sort, COMPARATORS["date-desc"])
    return sorted(courses, key=cmp_to_key(compare))


def apply_filters(courses: Iterable[EnrichedCourse], state: FilterState) -> list[EnrichedCourse]:
    """Filter by query, status and credits, then sort."""
    results = [
        item
        for item in courses
        if matches_query(item, state.query)
        and (not state.statuses or item.deadline_category in state.statuses)
        and (not state.credits_only or has_credits(item))
    ]
    return sort_courses(results, state.sort)
