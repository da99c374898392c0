"""
Test configuration — ensures repo root is in sys.path + isolation guards.

This allows tests to import the roadmap package without installing it.
Every test runs with ROADMAP_HOME / ROADMAP_DOCUMENT pointed at a temp dir
so nothing ever touches the user's real saved document.
"""

import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import roadmap.*
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from roadmap import engine  # noqa: E402
from roadmap.models import Snapshot  # noqa: E402

# =============================================================================
# ISOLATION GUARD: never read or write the real app home
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point the app home and document path into a per-test temp dir."""
    home = tmp_path / "roadmap-home"
    monkeypatch.setenv("ROADMAP_HOME", str(home))
    monkeypatch.setenv("ROADMAP_DOCUMENT", str(home / "data" / "roadmap.json"))
    monkeypatch.delenv("ROADMAP_SEED", raising=False)
    return home


# =============================================================================
# SNAPSHOT FIXTURES
# =============================================================================


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 4, 5, 6, 7, 891000, tzinfo=UTC)


@pytest.fixture
def empty_snapshot():
    return Snapshot()


@pytest.fixture
def populated():
    """
    Two timelines, two teams, three tasks, all with known ids.

    tl_main (active): Roadmap [Q1-Q2 2025, team_a], Define Goals [Q3 2025, team_a]
    tl_alt:           Stretch [Q1 2025-Q4 2026, team_b]
    """
    snapshot = engine.create_timeline(Snapshot(), "Main Timeline", timeline_id="tl_main")
    snapshot = engine.create_timeline(snapshot, "Aggressive Timeline", timeline_id="tl_alt")
    snapshot = engine.set_active_timeline(snapshot, "tl_main")
    snapshot = engine.create_team(snapshot, "Team A", team_id="team_a")
    snapshot = engine.create_team(snapshot, "Team B", team_id="team_b")
    snapshot = engine.create_task(
        snapshot, "tl_main", "team_a", "Roadmap", 50, "Q1 2025", "Q2 2025", task_id="task_1"
    )
    snapshot = engine.create_task(
        snapshot, "tl_main", "team_a", "Define Goals", 0, "Q3 2025", "Q3 2025", task_id="task_2"
    )
    snapshot = engine.create_task(
        snapshot,
        "tl_alt",
        "team_b",
        "Stretch",
        10,
        "Q1 2025",
        "Q4 2026",
        "indigo",
        task_id="task_3",
    )
    return snapshot


@pytest.fixture
def sample_document():
    """Minimal valid import document."""
    return {
        "scenarios": [
            {
                "name": "Main Timeline",
                "tasks": [
                    {
                        "name": "Roadmap",
                        "swimlane": "Team A",
                        "startQuarter": "Q1 2025",
                        "endQuarter": "Q2 2025",
                        "progress": 50,
                        "color": "blue",
                    },
                    {
                        "name": "Define Goals",
                        "swimlane": "Team A",
                        "startQuarter": "Q3 2025",
                        "endQuarter": "Q3 2025",
                        "progress": 0,
                        "color": "indigo",
                    },
                ],
            }
        ],
        "activeScenario": "Main Timeline",
        "swimlanes": ["Team A"],
        "exportDate": "2025-01-01T00:00:00.000Z",
    }
