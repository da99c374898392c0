"""
Observability module: structured logging and operation IDs.

Usage:
    from roadmap.observability import get_logger, OperationContext

    logger = get_logger(__name__)

    with OperationContext() as ctx:
        logger.info("Applying command", extra={"command": "DeleteTeam"})
"""

from .context import OperationContext, get_operation_id, set_operation_id
from .logging import (
    HumanFormatter,
    JSONFormatter,
    configure_from_settings,
    configure_logging,
    get_logger,
)

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "configure_from_settings",
    "JSONFormatter",
    "HumanFormatter",
    # Context
    "OperationContext",
    "get_operation_id",
    "set_operation_id",
]
