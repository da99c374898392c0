"""
Invariants Module — Referential-integrity checks over a store Snapshot.

Invariants verify MEANING, not just shape: every task id resolves, the two
inverse indices agree with Task.team_id and timeline membership, names are
unique where they must be. The command engine preserves these by
construction; the checks exist for imported or hand-built snapshots and for
tests.
"""

from collections import Counter

from roadmap.errors import RoadmapError
from roadmap.models import Snapshot
from roadmap.quarters import to_index
from roadmap.validation import name_key


class InvariantViolation(RoadmapError):
    """Raised when a store invariant is violated."""

    pass


# =============================================================================
# INVARIANT FUNCTIONS
# =============================================================================


def check_order_matches_maps(snapshot: Snapshot) -> None:
    """
    INVARIANT: display orders list every timeline/team exactly once.

    Raises:
        InvariantViolation: If an order and its map disagree
    """
    if sorted(snapshot.timeline_order) != sorted(snapshot.timelines):
        raise InvariantViolation(
            f"Timeline order {list(snapshot.timeline_order)} does not match "
            f"timelines {sorted(snapshot.timelines)}"
        )
    if sorted(snapshot.team_order) != sorted(snapshot.teams):
        raise InvariantViolation(
            f"Team order {list(snapshot.team_order)} does not match teams {sorted(snapshot.teams)}"
        )


def check_active_timeline(snapshot: Snapshot) -> None:
    """
    INVARIANT: the active timeline exists whenever any timeline exists.
    """
    if not snapshot.timelines:
        if snapshot.active_timeline_id:
            raise InvariantViolation(
                f"Active timeline {snapshot.active_timeline_id!r} set but no timelines exist"
            )
        return
    if snapshot.active_timeline_id not in snapshot.timelines:
        raise InvariantViolation(f"Active timeline not found: {snapshot.active_timeline_id!r}")


def check_task_ownership(snapshot: Snapshot) -> None:
    """
    INVARIANT: every task is in exactly one timeline and exactly one team,
    and both indices only reference existing tasks.

    Raises:
        InvariantViolation: On dangling ids or multiple/missing owners
    """
    timeline_refs = Counter(tid for tl in snapshot.timelines.values() for tid in tl.task_ids)
    team_refs = Counter(tid for tm in snapshot.teams.values() for tid in tm.task_ids)

    dangling = sorted((set(timeline_refs) | set(team_refs)) - set(snapshot.tasks))
    if dangling:
        raise InvariantViolation(f"Indices reference missing tasks: {dangling}")

    problems = []
    for task_id, task in snapshot.tasks.items():
        if timeline_refs[task_id] != 1:
            problems.append(f"{task_id}: referenced by {timeline_refs[task_id]} timelines")
        if task.team_id not in snapshot.teams:
            problems.append(f"{task_id}: unknown team {task.team_id}")
        elif task_id not in snapshot.teams[task.team_id].task_ids or team_refs[task_id] != 1:
            problems.append(f"{task_id}: team index disagrees with team_id {task.team_id}")

    if problems:
        raise InvariantViolation(f"Task ownership broken: {problems}")


def check_unique_names(snapshot: Snapshot) -> None:
    """
    INVARIANT: timeline names and team names are unique; task names are
    unique within each timeline.
    """
    duplicates = []
    for label, names in (
        ("Timeline", [t.name for t in snapshot.timelines.values()]),
        ("Team", [t.name for t in snapshot.teams.values()]),
    ):
        counts = Counter(name_key(n) for n in names)
        duplicates.extend(f"{label} '{key}'" for key, n in counts.items() if n > 1)

    for timeline in snapshot.timelines.values():
        counts = Counter(
            name_key(snapshot.tasks[tid].name) for tid in timeline.task_ids if tid in snapshot.tasks
        )
        duplicates.extend(
            f"Task '{key}' in timeline {timeline.id}" for key, n in counts.items() if n > 1
        )

    if duplicates:
        raise InvariantViolation(f"Duplicate names: {duplicates}")


def check_task_fields(snapshot: Snapshot) -> None:
    """
    INVARIANT: progress within [0, 100] and start quarter <= end quarter.
    """
    bad = []
    for task_id, task in snapshot.tasks.items():
        if not 0 <= task.progress <= 100:
            bad.append(f"{task_id}: progress={task.progress}")
        if to_index(task.start_quarter) > to_index(task.end_quarter):
            bad.append(f"{task_id}: start after end")
    if bad:
        raise InvariantViolation(f"Invalid task fields: {bad}")


# =============================================================================
# INVARIANT REGISTRY
# =============================================================================

ALL_INVARIANTS = [
    check_order_matches_maps,
    check_active_timeline,
    check_task_ownership,
    check_unique_names,
    check_task_fields,
]


# =============================================================================
# ENFORCEMENT
# =============================================================================


def enforce_invariants(snapshot: Snapshot) -> list[str]:
    """
    Run all invariants. Returns list of violations.

    Returns:
        List of violation messages. Empty = pass.
    """
    violations = []

    for invariant in ALL_INVARIANTS:
        try:
            invariant(snapshot)
        except InvariantViolation as e:
            violations.append(f"INVARIANT_VIOLATION: {str(e)}")

    return violations


def enforce_invariants_strict(snapshot: Snapshot) -> None:
    """
    Strict enforcement — raises on first violation.

    Raises:
        InvariantViolation: If any invariant fails
    """
    for invariant in ALL_INVARIANTS:
        invariant(snapshot)
