# Roadmap - quarterly gantt roadmap store
"""
Exports for embedding applications and tests.
"""

from .engine import apply
from .errors import (
    DuplicateNameError,
    FormatError,
    NotFoundError,
    RangeError,
    RequiredFieldError,
    RoadmapError,
)
from .lanes import pack_lanes
from .models import Snapshot, Task, TaskColor, Team, Timeline
from .persistence import JsonFilePersistence
from .quarters import Quarter, format_label, parse_label
from .serialization import export_document, import_document
from .workspace import Workspace

__all__ = [
    "Workspace",
    "Snapshot",
    "Task",
    "Team",
    "Timeline",
    "TaskColor",
    "Quarter",
    "parse_label",
    "format_label",
    "apply",
    "pack_lanes",
    "export_document",
    "import_document",
    "JsonFilePersistence",
    "RoadmapError",
    "FormatError",
    "DuplicateNameError",
    "RequiredFieldError",
    "RangeError",
    "NotFoundError",
]
