"""Tests for the filter and sort engine."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest
from werkzeug.datastructures import MultiDict

from kaa_courses.feed.deadlines import DeadlineCategory, EnrichedCourse, classify_course
from kaa_courses.feed.filters import (
    DEFAULT_STATUSES,
    FilterState,
    apply_filters,
    sort_courses,
)
from kaa_courses.storage.models import CourseRecord, Link

TODAY = date(2024, 5, 1)
TAIPEI = ZoneInfo("Asia/Taipei")


def classified(title, day=None, credits=None, time=None, links=()):
    course = CourseRecord(
        title=title, date=day, deadline=day, time=time, links=list(links), credits=credits
    )
    return classify_course(course, TODAY)


def manual(title, deadline=None, issued=None):
    """An EnrichedCourse whose deadline and issued dates differ."""
    def at(day):
        return datetime.fromisoformat(day).replace(tzinfo=TAIPEI) if day else None

    return EnrichedCourse(
        course=CourseRecord(title=title),
        issued_date=at(issued),
        deadline_date=at(deadline),
        deadline_category=DeadlineCategory.ACTIVE,
        days_until_deadline=None,
    )


@pytest.fixture
def courses():
    return [
        classified("結構設計實務", "2024-05-03", credits=6, time="09:00-12:00"),
        classified(
            "建築法規講習",
            "2024-06-20",
            links=[Link("線上報名", "https://forms.example.com/Apply")],
        ),
        classified("綠建築概論", "2024-04-01", credits=3),
        classified("消防設備", None),
    ]


def titles(items):
    return [item.course.title for item in items]


class TestStatusToggle:
    def test_defaults(self):
        state = FilterState()

        assert state.statuses == set(DEFAULT_STATUSES)
        assert state.sort == "deadline-asc"
        assert state.is_default

    def test_cannot_remove_last_status(self):
        state = FilterState(statuses={DeadlineCategory.ACTIVE})

        accepted = state.set_status(DeadlineCategory.ACTIVE, False)

        assert accepted is False
        assert state.statuses == {DeadlineCategory.ACTIVE}

    def test_toggle_sequence_never_empties(self):
        state = FilterState()
        sequence = [
            DeadlineCategory.DUE_SOON,
            DeadlineCategory.ACTIVE,
            DeadlineCategory.EXPIRED,
            DeadlineCategory.ACTIVE,
            DeadlineCategory.EXPIRED,
            DeadlineCategory.NO_DEADLINE,
            DeadlineCategory.ACTIVE,
        ]
        for category in sequence:
            state = state.toggled(category)
            assert state.statuses

    def test_toggled_returns_copy(self):
        state = FilterState()

        copy = state.toggled(DeadlineCategory.EXPIRED)

        assert DeadlineCategory.EXPIRED in copy.statuses
        assert DeadlineCategory.EXPIRED not in state.statuses

    def test_reset(self):
        state = FilterState(query="法規", credits_only=True, sort="date-asc")

        assert state.reset() is True
        assert state.is_default
        assert state.reset() is False


class TestArgs:
    def test_from_multidict(self):
        args = MultiDict(
            [("q", " 法規 "), ("status", "expired"), ("status", "bogus"), ("credits", "1"), ("sort", "date-asc")]
        )

        state = FilterState.from_args(args)

        assert state.query == "法規"
        assert state.statuses == {DeadlineCategory.EXPIRED}
        assert state.credits_only is True
        assert state.sort == "date-asc"

    def test_no_valid_status_means_defaults(self):
        state = FilterState.from_args(MultiDict([("status", "bogus")]))

        assert state.statuses == set(DEFAULT_STATUSES)

    def test_round_trip(self):
        state = FilterState(
            query="結構", statuses={DeadlineCategory.EXPIRED}, credits_only=True, sort="date-desc"
        )
        args = MultiDict()
        for key, value in state.to_args().items():
            for item in value if isinstance(value, list) else [value]:
                args.add(key, item)

        assert FilterState.from_args(args) == state


class TestApplyFilters:
    def test_default_state_hides_expired_and_undated(self, courses):
        assert titles(apply_filters(courses, FilterState())) == ["結構設計實務", "建築法規講習"]

    def test_query_is_case_insensitive_over_links(self, courses):
        state = FilterState(query="APPLY")

        assert titles(apply_filters(courses, state)) == ["建築法規講習"]

    def test_query_matches_time_and_date(self, courses):
        assert titles(apply_filters(courses, FilterState(query="09:00"))) == ["結構設計實務"]
        assert titles(apply_filters(courses, FilterState(query="2024-06"))) == ["建築法規講習"]

    def test_status_selection(self, courses):
        state = FilterState(statuses={DeadlineCategory.EXPIRED, DeadlineCategory.NO_DEADLINE})

        assert titles(apply_filters(courses, state)) == ["綠建築概論", "消防設備"]

    def test_credits_only(self, courses):
        state = FilterState(statuses=set(DeadlineCategory), credits_only=True)

        assert titles(apply_filters(courses, state)) == ["綠建築概論", "結構設計實務"]

    def test_no_match_is_empty(self, courses):
        assert apply_filters(courses, FilterState(query="不存在")) == []


class TestSortCourses:
    def test_deadline_ascending_with_missing_last(self):
        items = [
            manual("none", None, "2024-01-01"),
            manual("late", "2024-09-01"),
            manual("early", "2024-05-01"),
        ]

        assert titles(sort_courses(items, "deadline-asc")) == ["early", "late", "none"]
        assert titles(sort_courses(items, "deadline-desc")) == ["late", "early", "none"]

    def test_deadline_ties_broken_by_newest_issued(self):
        items = [
            manual("older", "2024-06-01", "2024-03-01"),
            manual("newer", "2024-06-01", "2024-04-01"),
            manual("undated", "2024-06-01", None),
        ]

        assert titles(sort_courses(items, "deadline-asc")) == ["newer", "older", "undated"]

    def test_issued_date_order(self):
        items = [
            manual("b", issued="2024-02-01"),
            manual("none"),
            manual("a", issued="2024-01-01"),
        ]

        assert titles(sort_courses(items, "date-asc")) == ["a", "b", "none"]
        assert titles(sort_courses(items, "date-desc")) == ["b", "a", "none"]

    def test_unknown_key_sorts_newest_first(self):
        items = [manual("a", issued="2024-01-01"), manual("b", issued="2024-02-01")]

        assert titles(sort_courses(items, "whatever")) == ["b", "a"]
