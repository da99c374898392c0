"""
Tests for the starting state (seed document + fallback).
"""

from roadmap import config, paths
from roadmap.contracts import enforce_invariants
from roadmap.seed import initial_state, load_seed
from roadmap.selectors import active_timeline


class TestInitialState:
    def test_single_empty_active_timeline(self):
        snapshot = initial_state()
        timeline = active_timeline(snapshot)
        assert timeline.name == config.DEFAULT_TIMELINE_NAME
        assert timeline.task_ids == ()
        assert dict(snapshot.teams) == {}


class TestLoadSeed:
    def test_shipped_seed_loads(self):
        assert paths.seed_path().exists()
        snapshot = load_seed()

        assert [t.name for t in snapshot.ordered_timelines()] == [
            "Main Timeline",
            "Aggressive Timeline",
        ]
        assert [t.name for t in snapshot.ordered_teams()] == ["Pet Fish", "Infrastructure"]
        assert active_timeline(snapshot).name == "Main Timeline"
        assert len(snapshot.tasks) == 5
        assert enforce_invariants(snapshot) == []

    def test_missing_file_falls_back(self, tmp_path, caplog):
        snapshot = load_seed(tmp_path / "absent.yaml")
        assert [t.name for t in snapshot.ordered_timelines()] == [config.DEFAULT_TIMELINE_NAME]
        assert "not found" in caplog.text

    def test_unparsable_yaml_falls_back(self, tmp_path):
        path = tmp_path / "seed.yaml"
        path.write_text("scenarios: [unclosed\n")
        snapshot = load_seed(path)
        assert len(snapshot.timelines) == 1
        assert dict(snapshot.tasks) == {}

    def test_invalid_document_falls_back(self, tmp_path, caplog):
        path = tmp_path / "seed.yaml"
        path.write_text("scenarios: []\nactiveScenario: X\nswimlanes: []\nexportDate: now\n")
        snapshot = load_seed(path)
        assert [t.name for t in snapshot.ordered_timelines()] == [config.DEFAULT_TIMELINE_NAME]
        assert "invalid" in caplog.text

    def test_env_override(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "scenarios:\n"
            "  - name: Custom\n"
            "    tasks: []\n"
            "activeScenario: Custom\n"
            "swimlanes: [Solo]\n"
            'exportDate: "2025-01-01T00:00:00.000Z"\n'
        )
        monkeypatch.setenv("ROADMAP_SEED", str(path))
        snapshot = load_seed()
        assert active_timeline(snapshot).name == "Custom"
        assert [t.name for t in snapshot.ordered_teams()] == ["Solo"]
