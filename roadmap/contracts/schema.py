"""
Schema Module — Pydantic models for the portable roadmap document.

These models define the REQUIRED shape of an exported/imported document.
Everything is referenced by name, not by internal id, so the document can be
diffed and moved between installations.

Shape only: cross-record rules (duplicate names, quarter order, unknown
swimlanes) are checked by roadmap.serialization after shape validation.
"""

from pydantic import BaseModel, Field, field_validator

from roadmap.errors import FormatError
from roadmap.models import TaskColor
from roadmap.quarters import Quarter, format_label, parse_label
from roadmap.validation import normalize_name


def _require_text(value: str) -> str:
    normalized = normalize_name(value)
    if not normalized:
        raise ValueError("must be a non-empty string")
    return normalized


# =============================================================================
# TASK
# =============================================================================


class DocumentTask(BaseModel):
    """Single task inside a scenario."""

    name: str
    swimlane: str
    start_quarter: str = Field(alias="startQuarter")
    end_quarter: str = Field(alias="endQuarter")
    progress: int = Field(strict=True, ge=0, le=100)
    color: TaskColor

    @field_validator("name", "swimlane")
    @classmethod
    def validate_names(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("start_quarter", "end_quarter")
    @classmethod
    def validate_quarter_label(cls, v: str) -> str:
        """Labels must parse; they are stored in canonical "Qn yyyy" form."""
        try:
            return format_label(parse_label(v))
        except FormatError as exc:
            raise ValueError(str(exc)) from None

    @property
    def start(self) -> Quarter:
        return parse_label(self.start_quarter)

    @property
    def end(self) -> Quarter:
        return parse_label(self.end_quarter)


# =============================================================================
# SCENARIO
# =============================================================================


class DocumentScenario(BaseModel):
    """A timeline and its tasks, in display order."""

    name: str
    tasks: list[DocumentTask]

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _require_text(v)


# =============================================================================
# TOP-LEVEL DOCUMENT
# =============================================================================


class RoadmapDocument(BaseModel):
    """
    Roadmap Document — the REQUIRED shape of an import/export file.

    scenarios must be non-empty. Unknown top-level keys are ignored so that
    documents written by newer versions still load.
    """

    scenarios: list[DocumentScenario] = Field(min_length=1)
    active_scenario: str = Field(alias="activeScenario")
    swimlanes: list[str]
    export_date: str = Field(alias="exportDate")

    @field_validator("active_scenario", "export_date")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("swimlanes")
    @classmethod
    def validate_swimlanes(cls, v: list[str]) -> list[str]:
        return [_require_text(name) for name in v]

    def to_dict(self) -> dict:
        """Plain JSON-ready dict using the document's camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# VALIDATION HELPER
# =============================================================================


def validate_document_shape(raw: dict) -> RoadmapDocument:
    """
    Validate a raw mapping against the document schema.

    Raises:
        pydantic.ValidationError: If the document shape is invalid
    """
    return RoadmapDocument.model_validate(raw)
