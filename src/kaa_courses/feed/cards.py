"""Project classified courses into display cards."""

import re
from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

from ..storage.models import Link
from .deadlines import DEFAULT_TIMEZONE, DeadlineCategory, EnrichedCourse
from .filters import has_credits
from .preview import is_document_link, is_image_url, is_previewable

BADGE_TEXT = {
    DeadlineCategory.DUE_SOON: "即將開課",
    DeadlineCategory.ACTIVE: "尚未開課",
    DeadlineCategory.EXPIRED: "已結束",
    DeadlineCategory.NO_DEADLINE: "尚未排程",
}
UNKNOWN_BADGE = "狀態不明"
MISSING = "尚未提供"
MISSING_TITLE = "未提供課程名稱"
LOAD_FAILED_MESSAGE = "課程載入失敗，請檢查網路或稍後再試。"

REGISTRATION_LABEL = re.compile(r"報名")
REGISTRATION_URL = re.compile(r"register|signup|apply|enroll", re.IGNORECASE)


@dataclass(frozen=True)
class CardLink:
    """One link on a card; role is registration, document or link."""

    label: str
    url: str
    role: str

    @property
    def previewable(self) -> bool:
        return self.role == "document" and is_previewable(self.url)


@dataclass
class CourseCard:
    category: str
    badge: str
    title: str
    primary_url: Optional[str]
    issued_text: str
    issued_datetime: Optional[str]
    countdown: str
    time_text: str
    credit_text: Optional[str] = None
    links: list[CardLink] = field(default_factory=list)
    attachments: list[CardLink] = field(default_factory=list)


def link_role(label: str, url: str) -> str:
    if REGISTRATION_LABEL.search(label) or REGISTRATION_URL.search(url):
        return "registration"
    if is_document_link(url) or is_image_url(url):
        return "document"
    return "link"


def card_links(links: list[Link]) -> list[CardLink]:
    """De-duplicate by URL and tag each link with its role."""
    seen: set[str] = set()
    result = []
    for index, link in enumerate(links):
        if not link.url or link.url in seen:
            continue
        seen.add(link.url)
        label = link.label.strip() or f"連結 {index + 1:02d}"
        result.append(CardLink(label=label, url=link.url, role=link_role(label, link.url)))
    return result


def format_countdown(days: Optional[int]) -> str:
    if days is None:
        return "尚未提供日期"
    if days < 0:
        return f"結束 {abs(days)} 天"
    if days == 0:
        return "今天開課"
    if days == 1:
        return "1 天後開課"
    return f"{days} 天後開課"


def format_credits(value: float | int) -> str:
    if float(value).is_integer():
        return f"{int(value)} 分"
    return f"{float(value):.1f} 分"


def build_card(item: EnrichedCourse) -> CourseCard:
    """Project one classified course into a card."""
    course = item.course
    credit_text = None
    if has_credits(item) and item.deadline_category != DeadlineCategory.EXPIRED:
        credit_text = format_credits(course.credits)  # type: ignore[arg-type]

    primary_url = course.detail_url or (course.links[0].url if course.links else None)

    return CourseCard(
        category=item.deadline_category.value,
        badge=BADGE_TEXT.get(item.deadline_category, UNKNOWN_BADGE),
        title=course.title.strip() or MISSING_TITLE,
        primary_url=primary_url,
        issued_text=course.date or MISSING,
        issued_datetime=course.date,
        countdown=format_countdown(item.days_until_deadline),
        time_text=(course.time or "").strip() or MISSING,
        credit_text=credit_text,
        links=card_links([*course.links, *course.attachments]),
        attachments=card_links(course.attachments),
    )


def status_message(filtered: int, total: int) -> str:
    """The line above the list describing how many courses are shown."""
    if total == 0:
        return "目前尚未取得課程資訊，請稍候重試。"
    if filtered == 0:
        return "沒有符合條件的課程。"
    return f"顯示 {filtered} / {total} 堂課程"


def format_updated_at(value: Optional[str], tz_name: str = DEFAULT_TIMEZONE) -> str:
    if not value:
        return "課程更新：尚未同步"
    try:
        stamp = date_parser.isoparse(value)
        if stamp.tzinfo is not None:
            stamp = stamp.astimezone(ZoneInfo(tz_name))
    except (ValueError, OverflowError):
        return f"課程更新：{value}"
    return f"課程更新：{stamp:%Y/%m/%d %H:%M}"
