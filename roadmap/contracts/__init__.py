"""
Contracts Module — validation layers for the roadmap store.

This module provides:
- schema.py: Pydantic models for the portable document shape
- invariants.py: Referential-integrity checks over store snapshots

The import pipeline runs both before a document may replace the store.
"""

from .invariants import (
    ALL_INVARIANTS,
    InvariantViolation,
    enforce_invariants,
    enforce_invariants_strict,
)
from .schema import (
    DocumentScenario,
    DocumentTask,
    RoadmapDocument,
    validate_document_shape,
)

__all__ = [
    # Schema
    "RoadmapDocument",
    "DocumentScenario",
    "DocumentTask",
    "validate_document_shape",
    # Invariants
    "ALL_INVARIANTS",
    "enforce_invariants",
    "enforce_invariants_strict",
    "InvariantViolation",
]
