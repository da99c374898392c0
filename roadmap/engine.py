"""
Command Engine - every mutation of the roadmap store.

Each command is a pure function Snapshot -> Snapshot. Validation runs fully
before a new snapshot is assembled, so a failing command leaves the caller's
snapshot exactly as it was.

Enforces invariants:
- Timeline names and team names are unique (normalized, case-insensitive)
- Task names are unique within one timeline, across teams
- Every task is referenced by exactly one timeline and one team
- Deleting a timeline or team deletes its tasks and prunes the other index
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace

from roadmap.errors import FormatError, NotFoundError
from roadmap.models import Snapshot, Task, TaskColor, Team, Timeline, generate_id
from roadmap.quarters import Quarter, coerce_quarter
from roadmap.selectors import (
    task_names_in_timeline,
    team_names,
    timeline_for_task,
    timeline_names,
)
from roadmap.validation import validate_task_fields, validate_team_name, validate_timeline_name

logger = logging.getLogger(__name__)


# =============================================================================
# COMMANDS
# =============================================================================


@dataclass(frozen=True)
class CreateTimeline:
    name: str
    id: str = field(default_factory=lambda: generate_id("timeline"))


@dataclass(frozen=True)
class RenameTimeline:
    id: str
    name: str


@dataclass(frozen=True)
class DeleteTimeline:
    id: str


@dataclass(frozen=True)
class SetActiveTimeline:
    id: str


@dataclass(frozen=True)
class CreateTeam:
    name: str
    id: str = field(default_factory=lambda: generate_id("team"))


@dataclass(frozen=True)
class RenameTeam:
    id: str
    name: str


@dataclass(frozen=True)
class DeleteTeam:
    id: str


@dataclass(frozen=True)
class CreateTask:
    timeline_id: str
    team_id: str
    name: str
    progress: int
    start_quarter: Quarter | str
    end_quarter: Quarter | str
    color: TaskColor | str = TaskColor.BLUE
    id: str = field(default_factory=lambda: generate_id("task"))


@dataclass(frozen=True)
class UpdateTask:
    """Partial update. Fields left as None keep their current value."""

    id: str
    name: str | None = None
    timeline_id: str | None = None
    team_id: str | None = None
    progress: int | None = None
    start_quarter: Quarter | str | None = None
    end_quarter: Quarter | str | None = None
    color: TaskColor | str | None = None


@dataclass(frozen=True)
class DeleteTask:
    id: str


@dataclass(frozen=True)
class ReplaceState:
    snapshot: Snapshot


Command = (
    CreateTimeline
    | RenameTimeline
    | DeleteTimeline
    | SetActiveTimeline
    | CreateTeam
    | RenameTeam
    | DeleteTeam
    | CreateTask
    | UpdateTask
    | DeleteTask
    | ReplaceState
)


# =============================================================================
# HELPERS
# =============================================================================


def _require_timeline(snapshot: Snapshot, timeline_id: str) -> Timeline:
    timeline = snapshot.timelines.get(timeline_id)
    if timeline is None:
        raise NotFoundError("Timeline", timeline_id)
    return timeline


def _require_team(snapshot: Snapshot, team_id: str) -> Team:
    team = snapshot.teams.get(team_id)
    if team is None:
        raise NotFoundError("Team", team_id)
    return team


def _require_task(snapshot: Snapshot, task_id: str) -> Task:
    task = snapshot.tasks.get(task_id)
    if task is None:
        raise NotFoundError("Task", task_id)
    return task


def _ensure_new_id(existing: Mapping[str, object], new_id: str, entity: str) -> None:
    if new_id in existing:
        raise FormatError(f"{entity} id already in use: {new_id}")


def _coerce_color(value: TaskColor | str) -> TaskColor:
    try:
        return TaskColor(value)
    except ValueError:
        raise FormatError(
            f'Task color must be one of {[c.value for c in TaskColor]}, got {value!r}'
        ) from None


def _with_id(ids: tuple[str, ...], target: str) -> tuple[str, ...]:
    return ids if target in ids else ids + (target,)


def _without_ids(ids: tuple[str, ...], targets: set[str]) -> tuple[str, ...]:
    return tuple(i for i in ids if i not in targets)


def _prune(entity, doomed: set[str]):
    if doomed.isdisjoint(entity.task_ids):
        return entity
    return replace(entity, task_ids=_without_ids(entity.task_ids, doomed))


def _remove_tasks(
    snapshot: Snapshot, task_ids: Iterable[str]
) -> tuple[dict[str, Task], dict[str, Timeline], dict[str, Team]]:
    """Drop tasks from the task map and from both inverse indices."""
    doomed = {tid for tid in task_ids if tid in snapshot.tasks}

    tasks = {tid: t for tid, t in snapshot.tasks.items() if tid not in doomed}
    timelines = {tid: _prune(tl, doomed) for tid, tl in snapshot.timelines.items()}
    teams = {tid: _prune(tm, doomed) for tid, tm in snapshot.teams.items()}
    return tasks, timelines, teams


# =============================================================================
# TIMELINE COMMANDS
# =============================================================================


def create_timeline(snapshot: Snapshot, name: str, *, timeline_id: str | None = None) -> Snapshot:
    """Add an empty timeline and make it active."""
    validated = validate_timeline_name(name, timeline_names(snapshot))
    timeline_id = timeline_id or generate_id("timeline")
    _ensure_new_id(snapshot.timelines, timeline_id, "Timeline")

    timeline = Timeline(id=timeline_id, name=validated)
    return snapshot.evolve(
        timelines={**snapshot.timelines, timeline_id: timeline},
        timeline_order=snapshot.timeline_order + (timeline_id,),
        active_timeline_id=timeline_id,
    )


def rename_timeline(snapshot: Snapshot, timeline_id: str, name: str) -> Snapshot:
    timeline = _require_timeline(snapshot, timeline_id)
    validated = validate_timeline_name(name, timeline_names(snapshot, exclude_id=timeline_id))
    return snapshot.evolve(
        timelines={**snapshot.timelines, timeline_id: replace(timeline, name=validated)}
    )


def delete_timeline(snapshot: Snapshot, timeline_id: str) -> Snapshot:
    """Delete a timeline and every task it references."""
    timeline = _require_timeline(snapshot, timeline_id)

    tasks, timelines, teams = _remove_tasks(snapshot, timeline.task_ids)
    del timelines[timeline_id]
    order = tuple(tid for tid in snapshot.timeline_order if tid != timeline_id)

    active = snapshot.active_timeline_id
    if active == timeline_id:
        active = order[0] if order else ""

    logger.debug(
        "Deleted timeline %s with %d task(s); active is now %r",
        timeline_id,
        len(timeline.task_ids),
        active,
    )
    return snapshot.evolve(
        timelines=timelines,
        teams=teams,
        tasks=tasks,
        timeline_order=order,
        active_timeline_id=active,
    )


def set_active_timeline(snapshot: Snapshot, timeline_id: str) -> Snapshot:
    _require_timeline(snapshot, timeline_id)
    return snapshot.evolve(active_timeline_id=timeline_id)


# =============================================================================
# TEAM COMMANDS
# =============================================================================


def create_team(snapshot: Snapshot, name: str, *, team_id: str | None = None) -> Snapshot:
    validated = validate_team_name(name, team_names(snapshot))
    team_id = team_id or generate_id("team")
    _ensure_new_id(snapshot.teams, team_id, "Team")

    team = Team(id=team_id, name=validated)
    return snapshot.evolve(
        teams={**snapshot.teams, team_id: team},
        team_order=snapshot.team_order + (team_id,),
    )


def rename_team(snapshot: Snapshot, team_id: str, name: str) -> Snapshot:
    team = _require_team(snapshot, team_id)
    validated = validate_team_name(name, team_names(snapshot, exclude_id=team_id))
    return snapshot.evolve(teams={**snapshot.teams, team_id: replace(team, name=validated)})


def delete_team(snapshot: Snapshot, team_id: str) -> Snapshot:
    """Delete a team and every task it owns, in every timeline."""
    team = _require_team(snapshot, team_id)

    tasks, timelines, teams = _remove_tasks(snapshot, team.task_ids)
    del teams[team_id]

    logger.debug("Deleted team %s with %d task(s)", team_id, len(team.task_ids))
    return snapshot.evolve(
        timelines=timelines,
        teams=teams,
        tasks=tasks,
        team_order=tuple(tid for tid in snapshot.team_order if tid != team_id),
    )


# =============================================================================
# TASK COMMANDS
# =============================================================================


def create_task(
    snapshot: Snapshot,
    timeline_id: str,
    team_id: str,
    name: str,
    progress: int,
    start_quarter: Quarter | str,
    end_quarter: Quarter | str,
    color: TaskColor | str = TaskColor.BLUE,
    *,
    task_id: str | None = None,
) -> Snapshot:
    """Add a task to a timeline and a team."""
    timeline = _require_timeline(snapshot, timeline_id)
    team = _require_team(snapshot, team_id)

    validated = validate_task_fields(
        name,
        task_names_in_timeline(snapshot, timeline_id),
        progress,
        start_quarter,
        end_quarter,
    )
    start = coerce_quarter(start_quarter)
    end = coerce_quarter(end_quarter)
    task_color = _coerce_color(color)

    task_id = task_id or generate_id("task")
    _ensure_new_id(snapshot.tasks, task_id, "Task")

    task = Task(
        id=task_id,
        name=validated,
        team_id=team_id,
        start_quarter=start,
        end_quarter=end,
        progress=progress,
        color=task_color,
    )
    return snapshot.evolve(
        tasks={**snapshot.tasks, task_id: task},
        timelines={
            **snapshot.timelines,
            timeline_id: replace(timeline, task_ids=_with_id(timeline.task_ids, task_id)),
        },
        teams={**snapshot.teams, team_id: replace(team, task_ids=_with_id(team.task_ids, task_id))},
    )


def update_task(
    snapshot: Snapshot,
    task_id: str,
    *,
    name: str | None = None,
    timeline_id: str | None = None,
    team_id: str | None = None,
    progress: int | None = None,
    start_quarter: Quarter | str | None = None,
    end_quarter: Quarter | str | None = None,
    color: TaskColor | str | None = None,
) -> Snapshot:
    """
    Update some fields of a task, moving it between timelines/teams if asked.

    The name is checked against the destination timeline, excluding the task
    itself.
    """
    task = _require_task(snapshot, task_id)

    current_timeline = timeline_for_task(snapshot, task_id)
    if timeline_id is None:
        if current_timeline is None:
            raise NotFoundError("Timeline", f"<owner of {task_id}>")
        timeline_id = current_timeline.id
    next_timeline = _require_timeline(snapshot, timeline_id)

    current_team = _require_team(snapshot, task.team_id)
    next_team = _require_team(snapshot, team_id if team_id is not None else task.team_id)

    next_start = start_quarter if start_quarter is not None else task.start_quarter
    next_end = end_quarter if end_quarter is not None else task.end_quarter
    next_progress = progress if progress is not None else task.progress
    validated = validate_task_fields(
        name if name is not None else task.name,
        task_names_in_timeline(snapshot, next_timeline.id, exclude_id=task_id),
        next_progress,
        next_start,
        next_end,
    )
    start = coerce_quarter(next_start)
    end = coerce_quarter(next_end)
    task_color = _coerce_color(color) if color is not None else task.color

    updated = replace(
        task,
        name=validated,
        team_id=next_team.id,
        start_quarter=start,
        end_quarter=end,
        progress=next_progress,
        color=task_color,
    )

    timelines = dict(snapshot.timelines)
    if current_timeline is None or current_timeline.id != next_timeline.id:
        if current_timeline is not None:
            timelines[current_timeline.id] = replace(
                current_timeline, task_ids=_without_ids(current_timeline.task_ids, {task_id})
            )
        timelines[next_timeline.id] = replace(
            next_timeline, task_ids=_with_id(next_timeline.task_ids, task_id)
        )

    teams = dict(snapshot.teams)
    if current_team.id != next_team.id:
        teams[current_team.id] = replace(
            current_team, task_ids=_without_ids(current_team.task_ids, {task_id})
        )
        teams[next_team.id] = replace(next_team, task_ids=_with_id(next_team.task_ids, task_id))

    return snapshot.evolve(
        tasks={**snapshot.tasks, task_id: updated},
        timelines=timelines,
        teams=teams,
    )


def delete_task(snapshot: Snapshot, task_id: str) -> Snapshot:
    """Remove a task from the store and both indices. Unknown ids are a no-op."""
    if task_id not in snapshot.tasks:
        return snapshot
    tasks, timelines, teams = _remove_tasks(snapshot, [task_id])
    return snapshot.evolve(tasks=tasks, timelines=timelines, teams=teams)


def replace_state(snapshot: Snapshot, new_snapshot: Snapshot) -> Snapshot:
    """Swap the whole store. new_snapshot must already be consistent."""
    if not isinstance(new_snapshot, Snapshot):
        raise FormatError(f"Expected a Snapshot, got {type(new_snapshot).__name__}")
    return new_snapshot


# =============================================================================
# DISPATCH
# =============================================================================


def apply(snapshot: Snapshot, command: Command) -> Snapshot:
    """Apply one command object and return the resulting snapshot."""
    match command:
        case CreateTimeline(name=name, id=timeline_id):
            return create_timeline(snapshot, name, timeline_id=timeline_id)
        case RenameTimeline(id=timeline_id, name=name):
            return rename_timeline(snapshot, timeline_id, name)
        case DeleteTimeline(id=timeline_id):
            return delete_timeline(snapshot, timeline_id)
        case SetActiveTimeline(id=timeline_id):
            return set_active_timeline(snapshot, timeline_id)
        case CreateTeam(name=name, id=team_id):
            return create_team(snapshot, name, team_id=team_id)
        case RenameTeam(id=team_id, name=name):
            return rename_team(snapshot, team_id, name)
        case DeleteTeam(id=team_id):
            return delete_team(snapshot, team_id)
        case CreateTask():
            return create_task(
                snapshot,
                command.timeline_id,
                command.team_id,
                command.name,
                command.progress,
                command.start_quarter,
                command.end_quarter,
                command.color,
                task_id=command.id,
            )
        case UpdateTask():
            return update_task(
                snapshot,
                command.id,
                name=command.name,
                timeline_id=command.timeline_id,
                team_id=command.team_id,
                progress=command.progress,
                start_quarter=command.start_quarter,
                end_quarter=command.end_quarter,
                color=command.color,
            )
        case DeleteTask(id=task_id):
            return delete_task(snapshot, task_id)
        case ReplaceState(snapshot=new_snapshot):
            return replace_state(snapshot, new_snapshot)
        case _:
            raise FormatError(f"Unknown command: {type(command).__name__}")
