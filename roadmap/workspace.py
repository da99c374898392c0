"""
Workspace - a live editing session over the roadmap store.

Holds the current snapshot, undo/redo history, and the optional persistence
collaborator. Every mutation goes through the command engine; the workspace
only decides which snapshot is current and when to save.

Invariants:
- A rejected command changes nothing (snapshot, history, saved document)
- External changes are applied only as a full, re-validated replace
"""

import logging
from collections import deque
from datetime import datetime
from typing import Any

from roadmap import config
from roadmap.engine import (
    Command,
    CreateTask,
    CreateTeam,
    CreateTimeline,
    DeleteTask,
    DeleteTeam,
    DeleteTimeline,
    RenameTeam,
    RenameTimeline,
    SetActiveTimeline,
    UpdateTask,
    apply,
)
from roadmap.errors import RoadmapError
from roadmap.lanes import TeamLayout, layout_timeline
from roadmap.models import Snapshot, TaskColor
from roadmap.observability import OperationContext
from roadmap.persistence import PersistenceService
from roadmap.quarters import Quarter
from roadmap.seed import initial_state, load_seed
from roadmap.serialization import (
    build_state,
    dumps_document,
    export_document,
    import_document,
    loads_document,
    restore_document,
)

logger = logging.getLogger(__name__)


class Workspace:
    """
    Editing session: current snapshot + history + persistence wiring.

    Usage:
        ws = Workspace.open(JsonFilePersistence())
        team_id = ws.create_team("Platform")
        ws.create_task(ws.snapshot.active_timeline_id, team_id, "Migrate", 0, "Q1 2025", "Q2 2025")
        ws.undo()
    """

    def __init__(
        self,
        snapshot: Snapshot | None = None,
        persistence: PersistenceService | None = None,
        history_limit: int | None = None,
    ):
        self._snapshot = snapshot if snapshot is not None else initial_state()
        self._persistence = persistence
        limit = config.HISTORY_LIMIT if history_limit is None else history_limit
        self._undo: deque[Snapshot] = deque(maxlen=max(limit, 0))
        self._redo: list[Snapshot] = []

        if persistence is not None:
            persistence.on_external_change(self.handle_external_change)

    @classmethod
    def open(cls, persistence: PersistenceService | None = None, seed_path=None) -> "Workspace":
        """
        Start a session from the persisted document.

        Missing or invalid documents fall back to the seed. An invalid file
        is backed up first since the next commit overwrites it.
        """
        snapshot = None
        if persistence is not None:
            raw = persistence.load()
            if raw is not None:
                try:
                    snapshot = restore_document(raw)
                except RoadmapError as exc:
                    logger.warning("Saved document is invalid, starting from seed: %s", exc)
                    persistence.backup()
        if snapshot is None:
            snapshot = load_seed(seed_path)
        return cls(snapshot, persistence)

    # ==================== State ====================

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def _commit(self, new_snapshot: Snapshot) -> None:
        if new_snapshot is self._snapshot:
            return
        if self._undo.maxlen:
            self._undo.append(self._snapshot)
        self._redo.clear()
        self._snapshot = new_snapshot
        self._save()

    def _save(self) -> None:
        if self._persistence is not None:
            self._persistence.save(export_document(self._snapshot))

    # ==================== Commands ====================

    def dispatch(self, command: Command) -> Snapshot:
        """Apply a command. On failure the typed error propagates and nothing changes."""
        command_name = type(command).__name__
        with OperationContext():
            try:
                new_snapshot = apply(self._snapshot, command)
            except RoadmapError as exc:
                logger.info("Rejected %s: %s", command_name, exc, extra={"command": command_name})
                raise
            self._commit(new_snapshot)
            logger.info("Applied %s", command_name, extra={"command": command_name})
        return self._snapshot

    def create_timeline(self, name: str) -> str:
        command = CreateTimeline(name=name)
        self.dispatch(command)
        return command.id

    def rename_timeline(self, timeline_id: str, name: str) -> None:
        self.dispatch(RenameTimeline(id=timeline_id, name=name))

    def delete_timeline(self, timeline_id: str) -> None:
        self.dispatch(DeleteTimeline(id=timeline_id))

    def set_active_timeline(self, timeline_id: str) -> None:
        self.dispatch(SetActiveTimeline(id=timeline_id))

    def create_team(self, name: str) -> str:
        command = CreateTeam(name=name)
        self.dispatch(command)
        return command.id

    def rename_team(self, team_id: str, name: str) -> None:
        self.dispatch(RenameTeam(id=team_id, name=name))

    def delete_team(self, team_id: str) -> None:
        self.dispatch(DeleteTeam(id=team_id))

    def create_task(
        self,
        timeline_id: str,
        team_id: str,
        name: str,
        progress: int,
        start_quarter: Quarter | str,
        end_quarter: Quarter | str,
        color: TaskColor | str = TaskColor.BLUE,
    ) -> str:
        command = CreateTask(
            timeline_id=timeline_id,
            team_id=team_id,
            name=name,
            progress=progress,
            start_quarter=start_quarter,
            end_quarter=end_quarter,
            color=color,
        )
        self.dispatch(command)
        return command.id

    def update_task(self, task_id: str, **changes: Any) -> None:
        self.dispatch(UpdateTask(id=task_id, **changes))

    def delete_task(self, task_id: str) -> None:
        self.dispatch(DeleteTask(id=task_id))

    # ==================== History ====================

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self._snapshot)
        self._snapshot = self._undo.pop()
        self._save()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self._snapshot)
        self._snapshot = self._redo.pop()
        self._save()
        return True

    # ==================== Import / Export ====================

    def import_document(self, raw: Any) -> Snapshot:
        """Replace the whole store with a validated document (undoable)."""
        with OperationContext():
            new_snapshot = import_document(self._snapshot, raw)
            self._commit(new_snapshot)
        return self._snapshot

    def import_json(self, text: str | bytes) -> Snapshot:
        with OperationContext():
            new_snapshot = build_state(loads_document(text))
            self._commit(new_snapshot)
            logger.info("Imported JSON document with %d task(s)", len(new_snapshot.tasks))
        return self._snapshot

    def export_document(self, now: datetime | None = None) -> dict[str, Any]:
        return export_document(self._snapshot, now)

    def export_json(self, now: datetime | None = None) -> str:
        return dumps_document(self.export_document(now))

    def handle_external_change(self, document: dict[str, Any]) -> bool:
        """
        Adopt a document another instance saved.

        The document is re-validated; invalid ones are logged and ignored.
        History is cleared since older snapshots no longer describe what is
        stored. Nothing is saved back.
        """
        with OperationContext():
            try:
                new_snapshot = restore_document(document)
            except RoadmapError as exc:
                logger.warning("Ignoring invalid external document: %s", exc)
                return False
            self._snapshot = new_snapshot
            self._undo.clear()
            self._redo.clear()
            logger.info("Reloaded store from external change")
        return True

    # ==================== Display ====================

    def lanes(self, timeline_id: str | None = None) -> list[TeamLayout]:
        """Packed lanes per team for a timeline (active by default)."""
        return layout_timeline(self._snapshot, timeline_id)
