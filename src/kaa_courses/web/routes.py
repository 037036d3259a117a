"""Flask route handlers."""

import logging
from dataclasses import replace
from pathlib import Path

from flask import Blueprint, abort, current_app, jsonify, render_template, request, send_file

from ..errors import LoadError
from ..feed.cards import (
    BADGE_TEXT,
    LOAD_FAILED_MESSAGE,
    build_card,
    format_updated_at,
    status_message,
)
from ..feed.deadlines import DeadlineCategory, classify_courses
from ..feed.filters import FilterState, apply_filters
from ..feed.preview import PreviewSink
from ..storage.snapshot import load_snapshot

logger = logging.getLogger(__name__)

bp = Blueprint("main", __name__)

SORT_LABELS = {
    "deadline-asc": "開課日期（近到遠）",
    "deadline-desc": "開課日期（遠到近）",
    "date-desc": "課程日期（新到舊）",
    "date-asc": "課程日期（舊到新）",
}


def get_config():
    """Get app config."""
    return current_app.config["APP_CONFIG"]


def load_courses():
    """Load and classify the snapshot; raises LoadError."""
    cfg = get_config()
    snapshot = load_snapshot(cfg.snapshot_path)
    courses = classify_courses(
        snapshot.courses, tz_name=cfg.timezone, soon_days=cfg.deadline_soon_days
    )
    return snapshot, courses


@bp.route("/")
def index():
    """Filterable course list."""
    cfg = get_config()
    state = FilterState.from_args(request.args)

    status_chips = [
        {
            "value": category.value,
            "label": BADGE_TEXT[category],
            "checked": category in state.statuses,
            "args": state.toggled(category).to_args(),
        }
        for category in DeadlineCategory
    ]
    credit_toggle = replace(state, statuses=set(state.statuses), credits_only=not state.credits_only)
    context = dict(
        state=state,
        credit_args=credit_toggle.to_args(),
        status_chips=status_chips,
        sort_labels=SORT_LABELS,
        cards=[],
        error=False,
        updated_at=format_updated_at(None),
    )

    try:
        snapshot, courses = load_courses()
    except LoadError as e:
        logger.error(f"Unable to load courses: {e}")
        context.update(status=LOAD_FAILED_MESSAGE, error=True)
        return render_template("index.html", **context)

    results = apply_filters(courses, state)
    context.update(
        cards=[build_card(item) for item in results],
        status=status_message(len(results), len(courses)),
        updated_at=format_updated_at(snapshot.updated_at, cfg.timezone),
    )
    return render_template("index.html", **context)


@bp.route("/data/courses.json")
def snapshot_data():
    """The raw snapshot, never cached."""
    path = Path(get_config().snapshot_path).resolve()
    if not path.exists():
        abort(404)
    response = send_file(path, mimetype="application/json", max_age=0)
    response.headers["Cache-Control"] = "no-store"
    return response


@bp.route("/api/courses")
def api_courses():
    """Filtered and sorted courses with their derived fields."""
    state = FilterState.from_args(request.args)
    try:
        snapshot, courses = load_courses()
    except LoadError as e:
        logger.error(f"Unable to load courses: {e}")
        return jsonify(error=LOAD_FAILED_MESSAGE), 503

    results = apply_filters(courses, state)
    return jsonify(
        source=snapshot.source,
        updatedAt=snapshot.updated_at,
        total=len(courses),
        filtered=len(results),
        courses=[item.to_dict() for item in results],
    )


@bp.route("/preview")
def preview():
    """Embedded preview of one document."""
    url = request.args.get("url", "").strip()
    if not url.startswith(("http://", "https://")):
        abort(400)

    sink: PreviewSink = current_app.config["PREVIEW_SINK"]
    target = sink.resolve(url)
    title = request.args.get("title", "").strip() or "檔案預覽"
    return render_template("preview.html", target=target, title=title, url=url)
