"""
Operation context: one id per command or import, visible to every log line.
"""

import contextvars
import uuid
from typing import Optional

_operation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "operation_id", default=None
)


def get_operation_id() -> Optional[str]:
    """Get the current operation ID from context."""
    return _operation_id_var.get()


def set_operation_id(operation_id: str) -> contextvars.Token:
    """Set the operation ID in context. Returns token for reset."""
    return _operation_id_var.set(operation_id)


def generate_operation_id() -> str:
    return f"op-{uuid.uuid4().hex[:16]}"


class OperationContext:
    """
    Context manager for operation-scoped logging.

    Usage:
        with OperationContext() as ctx:
            logger.info("Applying command", extra={"command": "CreateTeam"})

        # Or with an existing ID:
        with OperationContext(operation_id="op-abc123"):
            ...
    """

    def __init__(self, operation_id: Optional[str] = None):
        self.operation_id = operation_id or generate_operation_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "OperationContext":
        self._token = set_operation_id(self.operation_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _operation_id_var.reset(self._token)
