"""
Lane Packing - assign tasks of one team to non-overlapping visual lanes.

Greedy interval colouring over inclusive quarter-index ranges:
1. Sort by (start_index, end_index), ties kept in input order
2. Track the end index of the last task placed in each lane
3. Place each task in the lowest lane whose end is strictly before its start
4. Otherwise open a new lane

For a fixed sort order this uses the minimum number of lanes, and the same
input always yields the same assignment. Pure and side-effect free.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from roadmap.models import Snapshot, Task, Team
from roadmap.quarters import to_index
from roadmap.selectors import tasks_by_team


@dataclass(frozen=True)
class LaneAssignment:
    task: Task
    lane_index: int
    start_index: int
    end_index: int


@dataclass(frozen=True)
class TeamLayout:
    team: Team
    assignments: tuple[LaneAssignment, ...]

    @property
    def lane_count(self) -> int:
        return lane_count(self.assignments)


def pack_lanes(tasks: Iterable[Task]) -> list[LaneAssignment]:
    """
    Assign each task the lowest non-conflicting lane index.

    Returns:
        Assignments in packing order (ascending start, then end).
    """
    intervals = [
        (to_index(task.start_quarter), to_index(task.end_quarter), position, task)
        for position, task in enumerate(tasks)
    ]
    intervals.sort(key=lambda item: (item[0], item[1], item[2]))

    lane_ends: list[int] = []
    assignments: list[LaneAssignment] = []
    for start_index, end_index, _, task in intervals:
        for lane, lane_end in enumerate(lane_ends):
            # adjacency is fine, sharing a quarter is not
            if lane_end < start_index:
                lane_ends[lane] = end_index
                break
        else:
            lane = len(lane_ends)
            lane_ends.append(end_index)

        assignments.append(
            LaneAssignment(task=task, lane_index=lane, start_index=start_index, end_index=end_index)
        )
    return assignments


def lane_count(assignments: Iterable[LaneAssignment]) -> int:
    return max((a.lane_index for a in assignments), default=-1) + 1


def layout_timeline(snapshot: Snapshot, timeline_id: str | None = None) -> list[TeamLayout]:
    """One packed layout per team (display order) for a timeline, active by default."""
    grouped = tasks_by_team(snapshot, timeline_id)
    return [
        TeamLayout(team=snapshot.teams[team_id], assignments=tuple(pack_lanes(tasks)))
        for team_id, tasks in grouped.items()
        if team_id in snapshot.teams
    ]
