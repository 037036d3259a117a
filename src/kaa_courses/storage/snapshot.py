"""JSON snapshot persistence."""

import json
import logging
import os
from pathlib import Path

from ..errors import LoadError
from .models import Snapshot

logger = logging.getLogger(__name__)


def write_snapshot(snapshot: Snapshot, path: str | Path) -> Path:
    """Write the snapshot, replacing any previous file at path."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = out_path.with_name(out_path.name + ".tmp")
    tmp_path.write_text(
        json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
    )
    os.replace(tmp_path, out_path)

    logger.info(f"Wrote {snapshot.total} courses to {out_path}")
    return out_path


def parse_snapshot(text: str) -> Snapshot:
    """Decode snapshot JSON text."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(f"Snapshot is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise LoadError("Snapshot must be a JSON object")

    try:
        return Snapshot.from_dict(payload)
    except (AttributeError, TypeError) as e:
        raise LoadError(f"Snapshot has an unexpected shape: {e}") from e


def load_snapshot(path: str | Path) -> Snapshot:
    """Read a snapshot from disk."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise LoadError(f"Cannot read snapshot {path}: {e}") from e
    return parse_snapshot(text)
