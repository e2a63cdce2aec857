"""
Runtime API transport.

Opens one stream connection per command to the HAProxy runtime socket,
writes the newline-terminated command, reads the response until the
peer closes and releases the connection.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog

from .exceptions import (
    CommandWriteError,
    ConfigurationError,
    ResponseReadError,
    RuntimeConnectionError,
)

logger = structlog.get_logger(__name__)

UNIX_PREFIX = "unix://"
TCP_PREFIX = "tcp://"


@dataclass(frozen=True)
class Locator:
    """Address of a runtime socket, either a filesystem path or host:port."""
    network: str
    address: str
    host: Optional[str] = None
    port: Optional[int] = None

    @classmethod
    def parse(cls, uri: str) -> "Locator":
        """
        Parse a locator URI.

        Args:
            uri: unix://<path> or tcp://<host>:<port>

        Raises:
            ConfigurationError: If the prefix or address is invalid
        """
        if uri.startswith(UNIX_PREFIX):
            path = uri[len(UNIX_PREFIX):]
            if not path:
                raise ConfigurationError(f"address [{uri}] has an empty socket path")
            return cls(network="unix", address=path)

        if uri.startswith(TCP_PREFIX):
            address = uri[len(TCP_PREFIX):]
            host, sep, port = address.rpartition(":")
            if not sep or not host or not port.isdigit():
                raise ConfigurationError(f"address [{uri}] must be tcp://<host>:<port>")
            if not 0 < int(port) <= 65535:
                raise ConfigurationError(f"address [{uri}] has an invalid port")
            # IPv6 literals are written in brackets
            if host.startswith("[") and host.endswith("]"):
                host = host[1:-1]
            return cls(network="tcp", address=address, host=host, port=int(port))

        raise ConfigurationError(f"address [{uri}] must start with unix:// or tcp://")

    def __str__(self) -> str:
        return f"{self.network}://{self.address}"


class RuntimeTransport:
    """
    Single request/response exchange with the runtime socket.

    Holds no connection state between calls, so one instance can be
    shared by concurrent tasks.
    """

    MAX_BUFFER_SIZE = 65536

    def __init__(
        self,
        locator: Locator,
        connect_timeout: Optional[float] = None,
        read_limit: int = 64 * 1024 * 1024,
    ):
        """
        Initialize the transport.

        Args:
            locator: Runtime socket address
            connect_timeout: Dial timeout in seconds, None waits indefinitely
            read_limit: Maximum accepted response size in bytes
        """
        self.locator = locator
        self.connect_timeout = connect_timeout
        self.read_limit = read_limit

    async def _open(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        if self.locator.network == "unix":
            dial = asyncio.open_unix_connection(self.locator.address)
        else:
            dial = asyncio.open_connection(self.locator.host, self.locator.port)
        return await asyncio.wait_for(dial, timeout=self.connect_timeout)

    async def execute(self, command: str) -> bytes:
        """
        Execute a runtime API command and return the raw response.

        Args:
            command: A single command line, without the trailing newline

        Raises:
            RuntimeConnectionError: If the socket cannot be dialed
            CommandWriteError: If the command cannot be fully written
            ResponseReadError: If the response cannot be fully read
        """
        if "\n" in command or "\r" in command:
            raise ValueError("command must be a single line")

        context = {
            "network": self.locator.network,
            "address": self.locator.address,
            "command": command,
        }
        logger.debug("Executing runtime command", **context)

        try:
            reader, writer = await self._open()
        except (OSError, asyncio.TimeoutError) as e:
            raise RuntimeConnectionError(
                f"unable to connect to {self.locator}: {e}", **context
            ) from e

        try:
            try:
                writer.write((command + "\n").encode("utf-8"))
                await writer.drain()
            except OSError as e:
                raise CommandWriteError(f"unable to send command: {command}", **context) from e

            chunks = []
            received = 0
            try:
                while True:
                    chunk = await reader.read(self.MAX_BUFFER_SIZE)
                    if not chunk:
                        break
                    received += len(chunk)
                    if received > self.read_limit:
                        raise ResponseReadError(
                            f"response exceeds {self.read_limit} bytes", **context
                        )
                    chunks.append(chunk)
            except OSError as e:
                raise ResponseReadError(f"unable to read response: {e}", **context) from e
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                # Peer already gone
                pass

        response = b"".join(chunks)
        logger.debug("Runtime command completed", bytes=len(response), **context)
        return response
