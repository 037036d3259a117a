"""Configuration management."""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Load .env file from current working directory
load_dotenv()

DEFAULT_BASE_URL = "https://www.kaa.org.tw/news_class_list.php"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/127.0.0.0 Safari/537.36"
)
DEFAULT_VIEWER_ENDPOINT = "https://docs.google.com/viewer?embedded=true"


@dataclass
class Config:
    """Application configuration."""

    base_url: str = DEFAULT_BASE_URL
    snapshot_path: Path = Path("./data/courses.json")
    max_pages: int = 200
    min_page_rows: int = 10
    page_wait_seconds: float = 0.3
    detail_wait_seconds: float = 0.4
    fetch_timeout_seconds: int = 30
    user_agent: str = DEFAULT_USER_AGENT
    timezone: str = "Asia/Taipei"
    deadline_soon_days: int = 7
    viewer_endpoint: str = DEFAULT_VIEWER_ENDPOINT
    probe_bytes: int = 1024

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file.

        A missing file means defaults. Environment variables take precedence
        over YAML values:
        - KAA_BASE_URL: Listing page of the course site
        - KAA_SNAPSHOT_PATH: Where the JSON snapshot is written and read
        """
        data: dict = {}
        if Path(path).exists():
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

        base_url = os.environ.get("KAA_BASE_URL") or data.get("base_url", DEFAULT_BASE_URL)
        snapshot_path = os.environ.get("KAA_SNAPSHOT_PATH") or data.get(
            "snapshot_path", "./data/courses.json"
        )

        if int(data.get("max_pages", 200)) < 1:
            raise ValueError("max_pages must be at least 1")

        return cls(
            base_url=base_url,
            snapshot_path=Path(snapshot_path).expanduser(),
            max_pages=int(data.get("max_pages", 200)),
            min_page_rows=int(data.get("min_page_rows", 10)),
            page_wait_seconds=float(data.get("page_wait_seconds", 0.3)),
            detail_wait_seconds=float(data.get("detail_wait_seconds", 0.4)),
            fetch_timeout_seconds=int(data.get("fetch_timeout_seconds", 30)),
            user_agent=data.get("user_agent", DEFAULT_USER_AGENT),
            timezone=data.get("timezone", "Asia/Taipei"),
            deadline_soon_days=int(data.get("deadline_soon_days", 7)),
            viewer_endpoint=data.get("viewer_endpoint", DEFAULT_VIEWER_ENDPOINT) or "",
            probe_bytes=int(data.get("probe_bytes", 1024)),
        )
