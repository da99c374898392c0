"""
Read-only queries over a Snapshot.
"""

from roadmap.models import Snapshot, Task, Timeline
from roadmap.validation import name_key


def active_timeline(snapshot: Snapshot) -> Timeline | None:
    return snapshot.timelines.get(snapshot.active_timeline_id)


def timeline_for_task(snapshot: Snapshot, task_id: str) -> Timeline | None:
    """The timeline whose task list references task_id, if any."""
    for timeline in snapshot.ordered_timelines():
        if task_id in timeline.task_ids:
            return timeline
    return None


def tasks_for_timeline(snapshot: Snapshot, timeline_id: str) -> list[Task]:
    timeline = snapshot.timelines.get(timeline_id)
    if timeline is None:
        return []
    return [snapshot.tasks[tid] for tid in timeline.task_ids if tid in snapshot.tasks]


def tasks_by_team(snapshot: Snapshot, timeline_id: str | None = None) -> dict[str, list[Task]]:
    """
    Tasks of one timeline (active by default) grouped by team.

    Every team appears, in display order, even with no tasks. Within a team,
    tasks keep the timeline's order.
    """
    if timeline_id is None:
        timeline_id = snapshot.active_timeline_id
    grouped: dict[str, list[Task]] = {team_id: [] for team_id in snapshot.team_order}
    for task in tasks_for_timeline(snapshot, timeline_id):
        grouped.setdefault(task.team_id, []).append(task)
    return grouped


def team_task_counts(snapshot: Snapshot, timeline_id: str | None = None) -> dict[str, int]:
    return {
        team_id: len(tasks) for team_id, tasks in tasks_by_team(snapshot, timeline_id).items()
    }


def timeline_names(snapshot: Snapshot, exclude_id: str | None = None) -> list[str]:
    return [t.name for t in snapshot.ordered_timelines() if t.id != exclude_id]


def team_names(snapshot: Snapshot, exclude_id: str | None = None) -> list[str]:
    return [t.name for t in snapshot.ordered_teams() if t.id != exclude_id]


def task_names_in_timeline(
    snapshot: Snapshot, timeline_id: str, exclude_id: str | None = None
) -> list[str]:
    """Names that a task in timeline_id must not collide with."""
    return [t.name for t in tasks_for_timeline(snapshot, timeline_id) if t.id != exclude_id]


def find_timeline_by_name(snapshot: Snapshot, name: str) -> Timeline | None:
    key = name_key(name)
    for timeline in snapshot.ordered_timelines():
        if name_key(timeline.name) == key:
            return timeline
    return None
