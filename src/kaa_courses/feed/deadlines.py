"""Deadline parsing and classification in the reference time zone."""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Iterable, Optional
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

from ..storage.models import CourseRecord

DEFAULT_TIMEZONE = "Asia/Taipei"
DEADLINE_SOON_DAYS = 7
END_OF_DAY = time(23, 59, 59)


class DeadlineCategory(Enum):
    DUE_SOON = "due-soon"
    ACTIVE = "active"
    EXPIRED = "expired"
    NO_DEADLINE = "no-deadline"


def parse_date_value(value: str | None, tz_name: str = DEFAULT_TIMEZONE) -> Optional[datetime]:
    """Parse a raw source date.

    Bare YYYY-MM-DD dates (slashes allowed) are anchored to the end of that
    day in the reference zone. Anything else is handed to dateutil, and a
    naive result is placed in the reference zone. Unparseable input gives
    None.
    """
    if not value or not isinstance(value, str):
        return None
    normalized = value.strip().replace("/", "-")
    if not normalized:
        return None

    zone = ZoneInfo(tz_name)
    try:
        if len(normalized) == 10:
            parsed = datetime.combine(date.fromisoformat(normalized), END_OF_DAY, tzinfo=zone)
        else:
            parsed = date_parser.parse(normalized)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=zone)
        # Must be representable in UTC to be compared or converted later.
        parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None
    return parsed


def today_in_zone(tz_name: str = DEFAULT_TIMEZONE, now: datetime | None = None) -> date:
    """The current calendar day in the reference zone."""
    zone = ZoneInfo(tz_name)
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=zone)
    return current.astimezone(zone).date()


def is_past(value: str | None, tz_name: str = DEFAULT_TIMEZONE, now: datetime | None = None) -> bool:
    """Whether a raw date has already passed; unparseable dates never have."""
    parsed = parse_date_value(value, tz_name)
    if parsed is None:
        return False
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=ZoneInfo(tz_name))
    return parsed < current


def classify(
    deadline: datetime | None,
    today: date,
    tz_name: str = DEFAULT_TIMEZONE,
    soon_days: int = DEADLINE_SOON_DAYS,
) -> tuple[DeadlineCategory, Optional[int]]:
    """Category and whole days left, comparing calendar days in the reference zone."""
    if deadline is None:
        return DeadlineCategory.NO_DEADLINE, None

    try:
        days = (deadline.astimezone(ZoneInfo(tz_name)).date() - today).days
    except OverflowError:
        return DeadlineCategory.NO_DEADLINE, None
    if days < 0:
        return DeadlineCategory.EXPIRED, days
    if days <= soon_days:
        return DeadlineCategory.DUE_SOON, days
    return DeadlineCategory.ACTIVE, days


@dataclass(frozen=True)
class EnrichedCourse:
    """A course plus the fields derived from its dates. Never persisted."""

    course: CourseRecord
    issued_date: Optional[datetime]
    deadline_date: Optional[datetime]
    deadline_category: DeadlineCategory
    days_until_deadline: Optional[int]

    def to_dict(self) -> dict[str, Any]:
        data = self.course.to_dict()
        data.update(
            issuedDate=self.issued_date.isoformat() if self.issued_date else None,
            deadlineDate=self.deadline_date.isoformat() if self.deadline_date else None,
            deadlineCategory=self.deadline_category.value,
            daysUntilDeadline=self.days_until_deadline,
        )
        return data


def classify_course(
    course: CourseRecord,
    today: date,
    tz_name: str = DEFAULT_TIMEZONE,
    soon_days: int = DEADLINE_SOON_DAYS,
) -> EnrichedCourse:
    deadline_date = parse_date_value(course.deadline, tz_name)
    category, days = classify(deadline_date, today, tz_name, soon_days)
    return EnrichedCourse(
        course=course,
        issued_date=parse_date_value(course.date, tz_name),
        deadline_date=deadline_date,
        deadline_category=category,
        days_until_deadline=days,
    )


def classify_courses(
    courses: Iterable[CourseRecord],
    today: date | None = None,
    tz_name: str = DEFAULT_TIMEZONE,
    soon_days: int = DEADLINE_SOON_DAYS,
) -> list[EnrichedCourse]:
    """Classify every course against one shared "today"."""
    reference = today or today_in_zone(tz_name)
    return [classify_course(course, reference, tz_name, soon_days) for course in courses]
