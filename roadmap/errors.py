"""
Error types for the roadmap store.

Every error is recoverable by the caller: commands and the import pipeline
raise these synchronously and leave the current snapshot untouched.
"""


class RoadmapError(Exception):
    """Base class for all roadmap errors."""

    pass


class FormatError(RoadmapError, ValueError):
    """Raised when external input (labels, documents) is malformed."""

    pass


class DuplicateNameError(RoadmapError, ValueError):
    """Raised when a name collides with an existing one after normalization."""

    field = "name"

    def __init__(self, label: str, message: str | None = None):
        self.label = label
        super().__init__(message or f"{label} name must be unique")


class RequiredFieldError(RoadmapError, ValueError):
    """Raised when a required name is missing or blank."""

    field = "name"

    def __init__(self, label: str, message: str | None = None):
        self.label = label
        super().__init__(message or f"{label} name is required")


class RangeError(RoadmapError, ValueError):
    """Raised for progress values or quarter ranges out of bounds."""

    def __init__(self, message: str, field: str = "quarter_range"):
        self.field = field
        super().__init__(message)


class NotFoundError(RoadmapError, LookupError):
    """Raised when a referenced id does not exist in the snapshot."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")
