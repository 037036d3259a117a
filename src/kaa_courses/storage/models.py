"""Data models for scraped courses."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


def _field(data: dict[str, Any], key: str, types: type | tuple[type, ...]) -> Any:
    """Read an optional JSON field, raising TypeError when it has the wrong type."""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, types):
        raise TypeError(f"{key!r} has unexpected type {type(value).__name__}")
    return value


class FetchStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"


class EnrichmentStatus(Enum):
    ENRICHED = "enriched"
    DEGRADED = "degraded"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Link:
    """A labelled absolute URL."""

    label: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "url": self.url}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Optional["Link"]:
        url = _field(data or {}, "url", str)
        if not url:
            return None
        return cls(label=_field(data, "label", str) or "", url=url)


@dataclass
class CourseRecord:
    """One course row from the listing, optionally enriched from its detail page."""

    title: str
    date: Optional[str] = None
    deadline: Optional[str] = None
    time: Optional[str] = None
    links: list[Link] = field(default_factory=list)
    detail_url: Optional[str] = None
    registration_url: Optional[str] = None
    page: Optional[int] = None
    credits: Optional[float] = None
    attachments: list[Link] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the snapshot's camelCase keys."""
        return {
            "title": self.title,
            "date": self.date,
            "deadline": self.deadline,
            "time": self.time,
            "links": [link.to_dict() for link in self.links],
            "detailUrl": self.detail_url,
            "registrationUrl": self.registration_url,
            "page": self.page,
            "credits": self.credits,
            "attachments": [link.to_dict() for link in self.attachments],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CourseRecord":
        links = [Link.from_dict(item) for item in data.get("links") or []]
        attachments = [Link.from_dict(item) for item in data.get("attachments") or []]
        return cls(
            title=_field(data, "title", str) or "",
            date=_field(data, "date", str),
            deadline=_field(data, "deadline", str),
            time=_field(data, "time", str),
            links=[link for link in links if link],
            detail_url=_field(data, "detailUrl", str),
            registration_url=_field(data, "registrationUrl", str),
            page=_field(data, "page", int),
            credits=_field(data, "credits", (int, float)),
            attachments=[link for link in attachments if link],
        )


@dataclass
class EnrichmentResult:
    """Outcome of detail enrichment for one course."""

    status: EnrichmentStatus
    credits: Optional[float] = None
    attachments: list[Link] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class Snapshot:
    """One full scrape run, as persisted."""

    source: str
    updated_at: str
    courses: list[CourseRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.courses)

    @classmethod
    def create(cls, source: str, courses: list[CourseRecord]) -> "Snapshot":
        """Build a snapshot stamped with the current UTC time."""
        stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return cls(source=source, updated_at=stamp.replace("+00:00", "Z"), courses=courses)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "updatedAt": self.updated_at,
            "total": self.total,
            "courses": [course.to_dict() for course in self.courses],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Snapshot":
        """Build from JSON, accepting the legacy documents/scrapedAt keys."""
        raw_courses = _field(data, "courses", list)
        if raw_courses is None:
            raw_courses = _field(data, "documents", list) or []
        return cls(
            source=_field(data, "source", str) or "",
            updated_at=_field(data, "updatedAt", str) or _field(data, "scrapedAt", str) or "",
            courses=[CourseRecord.from_dict(item) for item in raw_courses],
        )
