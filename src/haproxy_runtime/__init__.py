"""
HAProxy Runtime API Client

An asyncio client for the HAProxy runtime administration socket:
- Raw command execution over unix:// or tcp:// sockets
- Decoding of 'show stat' counters and 'show servers state'
- Drain-then-maintenance orchestration for a single server
"""

__version__ = "1.0.0"

from .client import RuntimeClient
from .counters import parse_show_stat, encode_stat_row
from .servers_state import parse_show_servers_state
from .maintenance import MaintenanceOrchestrator, MaintenanceOutcome, MaintenanceResult
from .transport import Locator, RuntimeTransport
from .models import (
    ObjectType,
    CounterRecord,
    ServerState,
    OperationalState,
    AdminState,
    CheckResult,
    CheckState,
    ServerStateRecord,
)
from .exceptions import (
    RuntimeApiError,
    ConfigurationError,
    TransportError,
    RuntimeConnectionError,
    CommandWriteError,
    ResponseReadError,
    DecodeError,
    ProtocolVersionError,
    UnsupportedVersionError,
    FieldParseError,
    StateChangeAckError,
)

__all__ = [
    "RuntimeClient",
    "parse_show_stat",
    "encode_stat_row",
    "parse_show_servers_state",
    "MaintenanceOrchestrator",
    "MaintenanceOutcome",
    "MaintenanceResult",
    "Locator",
    "RuntimeTransport",
    "ObjectType",
    "CounterRecord",
    "ServerState",
    "OperationalState",
    "AdminState",
    "CheckResult",
    "CheckState",
    "ServerStateRecord",
    "RuntimeApiError",
    "ConfigurationError",
    "TransportError",
    "RuntimeConnectionError",
    "CommandWriteError",
    "ResponseReadError",
    "DecodeError",
    "ProtocolVersionError",
    "UnsupportedVersionError",
    "FieldParseError",
    "StateChangeAckError",
]
