"""
Exception hierarchy for the HAProxy runtime client.

Every error raised by this package derives from RuntimeApiError and
carries enough context (command, identifiers, raw response) to diagnose
the failure without re-running the command.
"""

from typing import Optional


class RuntimeApiError(Exception):
    """Base class for all runtime API client errors."""
    pass


class ConfigurationError(RuntimeApiError):
    """Raised when a socket locator or setting is invalid."""
    pass


class TransportError(RuntimeApiError):
    """Raised when a command cannot be exchanged with the runtime socket."""

    def __init__(
        self,
        message: str,
        network: Optional[str] = None,
        address: Optional[str] = None,
        command: Optional[str] = None,
    ):
        super().__init__(message)
        self.network = network
        self.address = address
        self.command = command


class RuntimeConnectionError(TransportError, ConnectionError):
    """Raised when dialing the runtime socket fails."""
    pass


class CommandWriteError(TransportError):
    """Raised when the command could not be fully written."""
    pass


class ResponseReadError(TransportError):
    """Raised when the response could not be fully read."""
    pass


class DecodeError(RuntimeApiError):
    """Base class for response decoding failures."""
    pass


class ProtocolVersionError(DecodeError):
    """Raised when 'show servers state' reports an unsupported format version."""

    def __init__(self, version: str):
        super().__init__(f"show servers state version {version!r} is not supported")
        self.version = version


UnsupportedVersionError = ProtocolVersionError


class FieldParseError(DecodeError):
    """Raised when a positional field cannot be decoded as its declared type."""

    def __init__(
        self,
        message: str,
        line: int,
        column: Optional[int] = None,
        field: Optional[str] = None,
        value: Optional[str] = None,
    ):
        super().__init__(f"line {line}: {message}")
        self.line = line
        self.column = column
        self.field = field
        self.value = value


class StateChangeAckError(RuntimeApiError):
    """Raised when a 'set server ... state' command is not acknowledged."""

    def __init__(self, backend: str, server: str, state: str, response: bytes):
        super().__init__(
            f"changing {backend}/{server} to {state} failed with: {response!r}"
        )
        self.backend = backend
        self.server = server
        self.state = state
        self.response = response
