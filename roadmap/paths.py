from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "ROADMAP_HOME"
APP_ENV_DOCUMENT = "ROADMAP_DOCUMENT"
APP_ENV_SEED = "ROADMAP_SEED"


def project_root() -> Path:
    """
    Repository/project root directory.
    Contains roadmap/, config/, tests/.
    """
    return Path(__file__).parent.parent.resolve()


def app_home() -> Path:
    """
    User-writable home for the roadmap store.
    Override with ROADMAP_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".roadmap").resolve()


def data_dir() -> Path:
    d = app_home() / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d


def document_path() -> Path:
    """
    Canonical path of the persisted roadmap document.

    Resolution order:
    1. ROADMAP_DOCUMENT env var (explicit override)
    2. ~/.roadmap/data/roadmap.json (default)
    """
    if os.environ.get(APP_ENV_DOCUMENT):
        return Path(os.environ[APP_ENV_DOCUMENT]).expanduser().resolve()
    return data_dir() / "roadmap.json"


def seed_path() -> Path:
    """Seed document shipped with the project (ROADMAP_SEED overrides)."""
    if os.environ.get(APP_ENV_SEED):
        return Path(os.environ[APP_ENV_SEED]).expanduser().resolve()
    return project_root() / "config" / "seed.yaml"
