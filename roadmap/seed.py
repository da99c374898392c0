"""
Starting state for a workspace with nothing saved yet.

Loads config/seed.yaml (a document in export format). Falls back to a single
empty timeline if the seed file is missing or does not validate.
"""

import logging
from pathlib import Path

import yaml

from roadmap import config, paths
from roadmap.engine import create_timeline
from roadmap.errors import RoadmapError
from roadmap.models import Snapshot
from roadmap.serialization import build_state, parse_document

logger = logging.getLogger(__name__)


def initial_state() -> Snapshot:
    """One empty, active timeline named DEFAULT_TIMELINE_NAME and no teams."""
    return create_timeline(Snapshot(), config.DEFAULT_TIMELINE_NAME)


def _load_yaml(path: Path) -> dict | None:
    """Load YAML, return None on failure."""
    if not path.exists():
        logger.warning("Seed document not found at %s, using defaults", path)
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as exc:
        logger.error("Failed to read seed document %s: %s", path, exc)
        return None


def load_seed(path: Path | None = None) -> Snapshot:
    """Seed snapshot from YAML, or initial_state() when unavailable."""
    if path is None:
        path = paths.seed_path()

    raw = _load_yaml(path)
    if raw is None:
        return initial_state()

    try:
        return build_state(parse_document(raw))
    except RoadmapError as exc:
        logger.error("Seed document %s is invalid: %s", path, exc)
        return initial_state()
