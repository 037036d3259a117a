"""CLI entry point and main pipeline."""

import asyncio
import logging
import sys
from collections import Counter
from pathlib import Path

import click

from .config import Config
from .errors import CourseFeedError, EmptyResultError
from .feed.cards import build_card, format_updated_at, status_message
from .feed.deadlines import DeadlineCategory, classify_courses
from .feed.filters import SORT_KEYS, FilterState, apply_filters
from .feed.loader import load_feed
from .fetching.enricher import DetailEnricher
from .fetching.fetcher import SiteFetcher
from .fetching.pager import Pager
from .fetching.probe import AttachmentProbe
from .storage.models import Snapshot
from .storage.snapshot import write_snapshot

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class CourseScrapePipeline:
    """Main pipeline: listing pages, detail pages, snapshot."""

    def __init__(self, config: Config, fetcher: SiteFetcher | None = None):
        self.config = config
        self.fetcher = fetcher or SiteFetcher(
            timeout_seconds=config.fetch_timeout_seconds,
            user_agent=config.user_agent,
        )
        self.pager = Pager(
            self.fetcher,
            base_url=config.base_url,
            max_pages=config.max_pages,
            min_page_rows=config.min_page_rows,
            wait_seconds=config.page_wait_seconds,
        )
        self.enricher = DetailEnricher(
            self.fetcher,
            probe=AttachmentProbe(self.fetcher, probe_bytes=config.probe_bytes),
            wait_seconds=config.detail_wait_seconds,
            timezone=config.timezone,
        )

    async def run(self, output: Path | None = None) -> Snapshot:
        """Run the full pipeline and write the snapshot."""
        # Step 1: Walk the listing
        logger.info(f"Scraping course listing at {self.config.base_url}...")
        courses = await self.pager.collect()
        if not courses:
            raise EmptyResultError("No courses were found on the listing pages")
        logger.info(f"Collected {len(courses)} courses")

        # Step 2: Detail pages
        logger.info("Fetching detail pages...")
        enriched = await self.enricher.enrich_all(courses)
        outcomes = Counter(result.status.value for _, result in enriched)
        logger.info(
            "Detail pages: "
            + ", ".join(f"{count} {status}" for status, count in sorted(outcomes.items()))
        )

        # Step 3: Snapshot
        snapshot = Snapshot.create(
            source=self.config.base_url, courses=[course for course, _ in enriched]
        )
        write_snapshot(snapshot, output or self.config.snapshot_path)
        return snapshot


@click.group()
def cli() -> None:
    """KAA Courses - Scrape the course listing and browse it."""
    pass


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--output", "-o", default=None, type=click.Path(), help="Snapshot output path")
@click.option("--max-pages", default=None, type=int, help="Override the page ceiling")
def scrape(config: str, output: str | None, max_pages: int | None) -> None:
    """Scrape all courses and write the JSON snapshot."""
    cfg = Config.from_yaml(config)
    if max_pages is not None:
        cfg.max_pages = max_pages

    pipeline = CourseScrapePipeline(cfg)
    try:
        snapshot = asyncio.run(pipeline.run(Path(output) if output else None))
    except CourseFeedError as e:
        logger.error(f"Scrape failed: {e}")
        sys.exit(1)

    click.echo(f"Saved {snapshot.total} courses to {output or cfg.snapshot_path}")


@cli.command("list")
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--feed-url", default=None, help="Load a published snapshot instead of the local file")
@click.option("--query", "-q", default="", help="Search text")
@click.option(
    "--status",
    "-s",
    multiple=True,
    type=click.Choice([category.value for category in DeadlineCategory]),
    help="Status to include (repeatable)",
)
@click.option("--credits-only", is_flag=True, help="Only courses with credits")
@click.option("--sort", default="deadline-asc", type=click.Choice(SORT_KEYS), help="Sort order")
def list_courses(
    config: str,
    feed_url: str | None,
    query: str,
    status: tuple[str, ...],
    credits_only: bool,
    sort: str,
) -> None:
    """List courses with the same filters as the web interface."""
    cfg = Config.from_yaml(config)
    try:
        snapshot = load_feed(feed_url or cfg.snapshot_path)
    except CourseFeedError as e:
        logger.error(f"Unable to load courses: {e}")
        sys.exit(1)

    state = FilterState(query=query.strip(), credits_only=credits_only, sort=sort)
    if status:
        state.statuses = {DeadlineCategory(value) for value in status}

    courses = classify_courses(
        snapshot.courses, tz_name=cfg.timezone, soon_days=cfg.deadline_soon_days
    )
    results = apply_filters(courses, state)

    click.echo(format_updated_at(snapshot.updated_at, cfg.timezone))
    click.echo(status_message(len(results), len(courses)))
    for item in results:
        card = build_card(item)
        credits = f" [{card.credit_text}]" if card.credit_text else ""
        click.echo(f"\n[{card.badge}] {card.title}{credits}")
        click.echo(f"  {card.issued_text} {card.time_text} - {card.countdown}")
        for link in card.links:
            click.echo(f"  {link.label} ({link.role}): {link.url}")


@cli.command()
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--host", default="127.0.0.1", help="Host to bind")
@click.option("--port", "-p", default=5001, type=int, help="Port to bind")
@click.option("--debug/--no-debug", default=False, help="Enable debug mode")
def web(config: str, host: str, port: int, debug: bool) -> None:
    """Start the web interface."""
    from .web.app import create_app

    app = create_app(config)
    click.echo(f"Starting web interface at http://{host}:{port}")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    cli()
