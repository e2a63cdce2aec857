"""
Domain Models

Strongly typed Pydantic models for runtime API responses.
"""

from .counters import (
    ObjectType,
    CounterRecord,
)
from .state import (
    ServerState,
    OperationalState,
    AdminState,
    CheckResult,
    CheckState,
    ServerStateRecord,
)

__all__ = [
    # Counter models
    "ObjectType",
    "CounterRecord",
    # Server state models
    "ServerState",
    "OperationalState",
    "AdminState",
    "CheckResult",
    "CheckState",
    "ServerStateRecord",
]
