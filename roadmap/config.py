"""
Centralized configuration for the roadmap store.

All values that vary by deployment belong here.
Override via environment variables where marked.
"""

import os

# ============================================================
# Calendar
# ============================================================

BASE_YEAR: int = int(os.environ.get("ROADMAP_BASE_YEAR", "2025"))
"""Year whose Q1 is quarter index 0. Shared by every index conversion."""

FIRST_YEAR: int = int(os.environ.get("ROADMAP_FIRST_YEAR", "2025"))
"""First year shown on the default quarter axis."""

LAST_YEAR: int = int(os.environ.get("ROADMAP_LAST_YEAR", "2028"))
"""Last year shown on the default quarter axis (inclusive)."""

QUARTERS_PER_YEAR = 4

# ============================================================
# Store
# ============================================================

DEFAULT_TIMELINE_NAME: str = os.environ.get("ROADMAP_DEFAULT_TIMELINE", "Main Timeline")
"""Name of the timeline created when no document or seed is available."""

HISTORY_LIMIT: int = int(os.environ.get("ROADMAP_HISTORY_LIMIT", "100"))
"""Maximum number of undo steps kept by a workspace."""

# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("ROADMAP_LOG_LEVEL", "INFO")
"""Root log level passed to configure_logging()."""

LOG_JSON: bool | None = (
    None
    if os.environ.get("ROADMAP_LOG_JSON") is None
    else os.environ["ROADMAP_LOG_JSON"].lower() in ("1", "true", "yes")
)
"""Force JSON (true) or human (false) log output. Unset = auto-detect from TTY."""
