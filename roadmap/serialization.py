"""
Serialization Pipeline - store <-> portable document.

Export walks the snapshot in display order and references everything by
name. Import is all-or-nothing:

1. parse_document: shape validation (pydantic) plus cross-record rules
2. build_state: fresh ids, inverse indices rebuilt from names
3. the new snapshot passes the store invariants before it replaces anything

Task names must be unique across the whole document at user import, which
is stricter than the per-timeline rule enforced while editing. Documents the
store wrote itself (the saved file, another session's save) are restored
with restore_document, which applies the per-timeline rule.
"""

import json
import logging
from collections import Counter
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from roadmap.contracts.invariants import enforce_invariants_strict
from roadmap.contracts.schema import RoadmapDocument, validate_document_shape
from roadmap.engine import replace_state
from roadmap.errors import DuplicateNameError, FormatError, RangeError
from roadmap.models import Snapshot, Task, Team, Timeline, generate_id
from roadmap.quarters import format_label, to_index
from roadmap.selectors import tasks_for_timeline
from roadmap.validation import name_key

logger = logging.getLogger(__name__)

UNASSIGNED_SWIMLANE = "Unassigned"


# =============================================================================
# EXPORT
# =============================================================================


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2025-01-01T00:00:00.000Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def export_document(snapshot: Snapshot, now: datetime | None = None) -> dict[str, Any]:
    """Build the portable document for a snapshot."""
    scenarios = []
    for timeline in snapshot.ordered_timelines():
        tasks = []
        for task in tasks_for_timeline(snapshot, timeline.id):
            team = snapshot.teams.get(task.team_id)
            tasks.append(
                {
                    "name": task.name,
                    "swimlane": team.name if team else UNASSIGNED_SWIMLANE,
                    "startQuarter": format_label(task.start_quarter),
                    "endQuarter": format_label(task.end_quarter),
                    "progress": task.progress,
                    "color": task.color.value,
                }
            )
        scenarios.append({"name": timeline.name, "tasks": tasks})

    active = snapshot.timelines.get(snapshot.active_timeline_id)
    return {
        "scenarios": scenarios,
        "activeScenario": active.name if active else "",
        "swimlanes": [team.name for team in snapshot.ordered_teams()],
        "exportDate": format_timestamp(now or datetime.now(UTC)),
    }


def dumps_document(document: Mapping[str, Any]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def export_filename(now: datetime | None = None) -> str:
    """Download name for an export, e.g. timeline-export-2025-01-01-09-30-00.json."""
    moment = now or datetime.now(UTC)
    return f"timeline-export-{moment:%Y-%m-%d-%H-%M-%S}.json"


# =============================================================================
# IMPORT VALIDATION
# =============================================================================


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "document"
    extra = f" (+{exc.error_count() - 1} more)" if exc.error_count() > 1 else ""
    return f"Invalid import file at {location}: {first.get('msg', 'invalid value')}{extra}"


def _first_duplicate(names: list[str]) -> str | None:
    counts = Counter(name_key(n) for n in names)
    for name in names:
        if counts[name_key(name)] > 1:
            return name
    return None


def _check_document_rules(document: RoadmapDocument, document_wide_task_names: bool) -> None:
    duplicate = _first_duplicate([s.name for s in document.scenarios])
    if duplicate is not None:
        raise DuplicateNameError(
            "Timeline", f'Duplicate scenario name in import file: "{duplicate}"'
        )

    duplicate = _first_duplicate(document.swimlanes)
    if duplicate is not None:
        raise DuplicateNameError(
            "Team", f'Duplicate swimlane name in import file: "{duplicate}"'
        )

    all_tasks = [task for scenario in document.scenarios for task in scenario.tasks]
    for task in all_tasks:
        if to_index(task.start) > to_index(task.end):
            raise RangeError(
                f'Task "{task.name}" ends ({task.end_quarter}) before it starts '
                f"({task.start_quarter})"
            )

    if document_wide_task_names:
        duplicate = _first_duplicate([task.name for task in all_tasks])
        if duplicate is not None:
            raise DuplicateNameError("Task", f'Duplicate task name in import file: "{duplicate}"')
    else:
        for scenario in document.scenarios:
            duplicate = _first_duplicate([task.name for task in scenario.tasks])
            if duplicate is not None:
                raise DuplicateNameError(
                    "Task", f'Duplicate task name in scenario "{scenario.name}": "{duplicate}"'
                )

    if all_tasks and not document.swimlanes:
        raise FormatError("Import file has tasks but declares no swimlanes")


def parse_document(raw: Any, *, document_wide_task_names: bool = True) -> RoadmapDocument:
    """
    Validate an untrusted document.

    With document_wide_task_names=False a task name only has to be unique
    within its own scenario.

    Raises:
        FormatError: Shape violations (wrong types, missing keys, bad labels,
            progress outside 0-100, unknown colors)
        DuplicateNameError: A task, scenario or swimlane name repeats
        RangeError: A task ends before it starts
    """
    if not isinstance(raw, Mapping):
        raise FormatError("Import file is not in the expected format")
    try:
        document = validate_document_shape(dict(raw))
    except ValidationError as exc:
        raise FormatError(_describe_validation_error(exc)) from None

    _check_document_rules(document, document_wide_task_names)
    return document


def loads_document(text: str | bytes) -> RoadmapDocument:
    """Parse JSON text and validate it as a document."""
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise FormatError(f"Import file is not valid JSON: {exc}") from None
    return parse_document(raw)


# =============================================================================
# NORMALIZATION
# =============================================================================


def build_state(document: RoadmapDocument) -> Snapshot:
    """
    Turn a validated document into a fresh snapshot.

    Tasks naming an undeclared swimlane land in the first declared team.
    The active timeline is the one named by activeScenario, else the first.

    Raises:
        InvariantViolation: If the result is inconsistent (never for a
            document that passed parse_document)
    """
    teams: dict[str, Team] = {}
    team_order: list[str] = []
    team_id_by_key: dict[str, str] = {}
    team_tasks: dict[str, list[str]] = {}

    for swimlane in document.swimlanes:
        team_id = generate_id("team")
        team_id_by_key[name_key(swimlane)] = team_id
        team_order.append(team_id)
        teams[team_id] = Team(id=team_id, name=swimlane)
        team_tasks[team_id] = []

    timelines: dict[str, Timeline] = {}
    timeline_order: list[str] = []
    tasks: dict[str, Task] = {}
    active_timeline_id = ""
    active_key = name_key(document.active_scenario)

    for scenario in document.scenarios:
        timeline_id = generate_id("timeline")
        timeline_task_ids = []

        for entry in scenario.tasks:
            team_id = team_id_by_key.get(name_key(entry.swimlane))
            if team_id is None:
                team_id = team_order[0]
                logger.warning(
                    "Task %r references unknown swimlane %r; assigned to %r",
                    entry.name,
                    entry.swimlane,
                    teams[team_id].name,
                )

            task_id = generate_id("task")
            tasks[task_id] = Task(
                id=task_id,
                name=entry.name,
                team_id=team_id,
                start_quarter=entry.start,
                end_quarter=entry.end,
                progress=entry.progress,
                color=entry.color,
            )
            timeline_task_ids.append(task_id)
            team_tasks[team_id].append(task_id)

        timelines[timeline_id] = Timeline(
            id=timeline_id, name=scenario.name, task_ids=tuple(timeline_task_ids)
        )
        timeline_order.append(timeline_id)
        if not active_timeline_id and name_key(scenario.name) == active_key:
            active_timeline_id = timeline_id

    if not active_timeline_id:
        logger.warning(
            "Active scenario %r not found; using %r",
            document.active_scenario,
            document.scenarios[0].name,
        )
        active_timeline_id = timeline_order[0]

    for team_id, task_ids in team_tasks.items():
        teams[team_id] = Team(id=team_id, name=teams[team_id].name, task_ids=tuple(task_ids))

    snapshot = Snapshot(
        timelines=timelines,
        teams=teams,
        tasks=tasks,
        timeline_order=tuple(timeline_order),
        team_order=tuple(team_order),
        active_timeline_id=active_timeline_id,
    )
    enforce_invariants_strict(snapshot)
    return snapshot


def import_document(snapshot: Snapshot, raw: Any) -> Snapshot:
    """
    Validate raw and swap it in for snapshot.

    On any failure the error propagates and the caller keeps snapshot.
    """
    document = parse_document(raw)
    new_snapshot = build_state(document)
    logger.info(
        "Imported document: %d timeline(s), %d team(s), %d task(s)",
        len(new_snapshot.timelines),
        len(new_snapshot.teams),
        len(new_snapshot.tasks),
    )
    return replace_state(snapshot, new_snapshot)


def restore_document(raw: Any) -> Snapshot:
    """
    Rebuild a snapshot from a document the store saved itself.

    Same pipeline as import, but task names are checked per timeline so
    anything the editor allowed reloads unchanged.
    """
    return build_state(parse_document(raw, document_wide_task_names=False))
