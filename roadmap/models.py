"""
Roadmap entities and the immutable store snapshot.

Task owns its identity. Timeline.task_ids and Team.task_ids are id-based
inverse indices over the same tasks; the command engine keeps both in step.
"""

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum
from types import MappingProxyType

from roadmap.quarters import Quarter

# =============================================================================
# ID GENERATION
# =============================================================================


def generate_id(prefix: str = "") -> str:
    """Generate a unique ID with optional prefix."""
    uid = uuid.uuid4().hex[:16]
    if prefix:
        return f"{prefix}_{uid}"
    return uid


# =============================================================================
# ENUMS
# =============================================================================


class TaskColor(StrEnum):
    """Bar color theme for a task."""

    BLUE = "blue"
    INDIGO = "indigo"


# =============================================================================
# ENTITIES
# =============================================================================


@dataclass(frozen=True)
class Task:
    id: str
    name: str
    team_id: str
    start_quarter: Quarter
    end_quarter: Quarter
    progress: int
    color: TaskColor = TaskColor.BLUE

    @property
    def is_complete(self) -> bool:
        return self.progress >= 100


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    task_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class Timeline:
    id: str
    name: str
    task_ids: tuple[str, ...] = ()


# =============================================================================
# SNAPSHOT
# =============================================================================


def _freeze(mapping: Mapping) -> Mapping:
    if isinstance(mapping, MappingProxyType):
        return mapping
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Snapshot:
    """
    The whole store as one immutable value.

    Maps are read-only views keyed by id. timeline_order and team_order give
    display order. active_timeline_id is "" when no timeline exists.
    """

    timelines: Mapping[str, Timeline] = field(default_factory=dict)
    teams: Mapping[str, Team] = field(default_factory=dict)
    tasks: Mapping[str, Task] = field(default_factory=dict)
    timeline_order: tuple[str, ...] = ()
    team_order: tuple[str, ...] = ()
    active_timeline_id: str = ""

    def __post_init__(self):
        object.__setattr__(self, "timelines", _freeze(self.timelines))
        object.__setattr__(self, "teams", _freeze(self.teams))
        object.__setattr__(self, "tasks", _freeze(self.tasks))
        object.__setattr__(self, "timeline_order", tuple(self.timeline_order))
        object.__setattr__(self, "team_order", tuple(self.team_order))

    def evolve(self, **changes) -> "Snapshot":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def ordered_timelines(self) -> list[Timeline]:
        return [self.timelines[tid] for tid in self.timeline_order]

    def ordered_teams(self) -> list[Team]:
        return [self.teams[tid] for tid in self.team_order]
