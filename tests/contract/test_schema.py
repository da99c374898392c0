"""
Contract Tests — Document schema.

Validates that:
- RoadmapDocument accepts exactly the export shape (camelCase keys)
- Shape violations surface as pydantic ValidationError
- to_dict() reproduces the wire format
"""

import pytest
from pydantic import ValidationError

from roadmap.contracts.schema import (
    DocumentScenario,
    DocumentTask,
    RoadmapDocument,
    validate_document_shape,
)
from roadmap.models import TaskColor
from roadmap.quarters import Quarter


def task_payload(**overrides):
    payload = {
        "name": "Roadmap",
        "swimlane": "Team A",
        "startQuarter": "Q1 2025",
        "endQuarter": "Q2 2025",
        "progress": 50,
        "color": "blue",
    }
    payload.update(overrides)
    return payload


class TestDocumentTask:
    """Test DocumentTask schema."""

    def test_valid_task(self):
        task = DocumentTask.model_validate(task_payload())
        assert task.start == Quarter(2025, 1)
        assert task.end == Quarter(2025, 2)
        assert task.color == TaskColor.BLUE

    def test_snake_case_keys_rejected(self):
        payload = task_payload()
        payload["start_quarter"] = payload.pop("startQuarter")
        payload["end_quarter"] = payload.pop("endQuarter")
        with pytest.raises(ValidationError):
            DocumentTask.model_validate(payload)

    def test_names_normalized(self):
        task = DocumentTask.model_validate(task_payload(name="  Road   map ", swimlane=" A "))
        assert task.name == "Road map"
        assert task.swimlane == "A"

    def test_progress_bounds(self):
        DocumentTask.model_validate(task_payload(progress=0))
        DocumentTask.model_validate(task_payload(progress=100))
        with pytest.raises(ValidationError):
            DocumentTask.model_validate(task_payload(progress=101))

    def test_progress_is_strict_integer(self):
        with pytest.raises(ValidationError):
            DocumentTask.model_validate(task_payload(progress="10"))
        with pytest.raises(ValidationError):
            DocumentTask.model_validate(task_payload(progress=10.0))

    def test_missing_field(self):
        payload = task_payload()
        del payload["endQuarter"]
        with pytest.raises(ValidationError):
            DocumentTask.model_validate(payload)

    def test_non_string_label(self):
        with pytest.raises(ValidationError):
            DocumentTask.model_validate(task_payload(startQuarter=2025))


class TestDocumentScenario:
    def test_tasks_required(self):
        with pytest.raises(ValidationError):
            DocumentScenario.model_validate({"name": "Main"})

    def test_tasks_must_be_list(self):
        with pytest.raises(ValidationError):
            DocumentScenario.model_validate({"name": "Main", "tasks": {"a": 1}})

    def test_empty_tasks_allowed(self):
        assert DocumentScenario.model_validate({"name": "Main", "tasks": []}).tasks == []


class TestRoadmapDocument:
    """Test top-level document schema."""

    def test_valid(self, sample_document):
        document = validate_document_shape(sample_document)
        assert isinstance(document, RoadmapDocument)
        assert document.export_date == "2025-01-01T00:00:00.000Z"

    def test_blank_active_scenario(self, sample_document):
        sample_document["activeScenario"] = " "
        with pytest.raises(ValidationError):
            validate_document_shape(sample_document)

    def test_blank_export_date(self, sample_document):
        sample_document["exportDate"] = ""
        with pytest.raises(ValidationError):
            validate_document_shape(sample_document)

    def test_scenarios_non_empty(self, sample_document):
        sample_document["scenarios"] = []
        with pytest.raises(ValidationError):
            validate_document_shape(sample_document)

    def test_to_dict_uses_wire_keys(self, sample_document):
        assert validate_document_shape(sample_document).to_dict() == sample_document

    @pytest.mark.parametrize(
        "wire_key,field_name",
        [("activeScenario", "active_scenario"), ("exportDate", "export_date")],
    )
    def test_snake_case_keys_rejected(self, sample_document, wire_key, field_name):
        sample_document[field_name] = sample_document.pop(wire_key)
        with pytest.raises(ValidationError):
            validate_document_shape(sample_document)
