"""
HAProxy Runtime API client.

Reference: https://cbonte.github.io/haproxy-dconv/2.6/management.html#9.3

Every call opens a fresh connection to the runtime socket, so a client
can be shared freely between tasks.
"""

import asyncio
from typing import Optional

import structlog

from .core.config import Settings
from .counters import parse_show_stat
from .exceptions import StateChangeAckError
from .maintenance import DEFAULT_POLL_INTERVAL, MaintenanceOrchestrator, MaintenanceResult
from .models.counters import CounterRecord
from .models.state import ServerState, ServerStateRecord
from .servers_state import parse_show_servers_state
from .transport import Locator, RuntimeTransport

logger = structlog.get_logger(__name__)

# A successful 'set server ... state' answers with a single line feed
STATE_CHANGE_ACK = b"\n"


class RuntimeClient:
    """
    Client for the HAProxy runtime administration socket.

    Example:
        client = RuntimeClient("unix:///var/run/haproxy/admin.sock")
        result = await client.server_maintenance("app", "web01", timeout=30)
    """

    def __init__(
        self,
        uri: str,
        connect_timeout: Optional[float] = None,
        read_limit: int = 64 * 1024 * 1024,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """
        Initialize the client.

        Args:
            uri: unix://<path> or tcp://<host>:<port>
            connect_timeout: Dial timeout in seconds, None waits indefinitely
            read_limit: Maximum accepted response size in bytes
            poll_interval: Delay between counter polls while draining

        Raises:
            ConfigurationError: If the locator is invalid
        """
        self.locator = Locator.parse(uri)
        self.transport = RuntimeTransport(
            self.locator,
            connect_timeout=connect_timeout,
            read_limit=read_limit,
        )
        self.poll_interval = poll_interval

    @classmethod
    def from_settings(cls, settings: Settings) -> "RuntimeClient":
        """Create a client from loaded settings."""
        return cls(
            settings.runtime.socket,
            connect_timeout=settings.runtime.connect_timeout,
            read_limit=settings.runtime.read_limit,
            poll_interval=settings.maintenance.poll_interval,
        )

    async def execute(self, command: str) -> bytes:
        """
        Execute a runtime API command.

        Returns:
            The raw response
        """
        return await self.transport.execute(command)

    async def set_server_state(self, backend: str, server: str, state: ServerState) -> None:
        """
        Change the administrative state of a server.

        Sends: set server <backend>/<server> state [ ready | drain | maint ]

        Raises:
            StateChangeAckError: If the response is not a single line feed
        """
        state = ServerState(state)
        response = await self.execute(f"set server {backend}/{server} state {state.value}")

        if response != STATE_CHANGE_ACK:
            raise StateChangeAckError(backend, server, state.value, response)

        logger.info("Server state changed", backend=backend, server=server, state=state.value)

    async def show_servers_state(self, backend: Optional[str] = None) -> list[ServerStateRecord]:
        """
        Get the server state of all backends, or of a single backend.

        Sends: show servers state [<backend>]
        """
        command = "show servers state"
        if backend:
            command = f"{command} {backend}"
        return parse_show_servers_state(await self.execute(command))

    async def show_stat(self) -> list[CounterRecord]:
        """Get the counters of every listener, frontend, backend and server."""
        return parse_show_stat(await self.execute("show stat"))

    async def find_counter(self, backend: str, server: str) -> Optional[CounterRecord]:
        """Get the counters of one server, None if it is not reported."""
        for counters in await self.show_stat():
            if counters.pxname == backend and counters.svname == server:
                return counters
        return None

    async def server_maintenance(
        self,
        backend: str,
        server: str,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> MaintenanceResult:
        """
        Put a server into maintenance after draining it.

        The server is set to drain, then polled until it has no current
        sessions and set to maintenance. If the timeout elapses or the
        cancel event is set first, maintenance is forced regardless of the
        remaining sessions; the result reports this as a forced outcome.
        Without a timeout or cancel event a persistent connection can keep
        the drain waiting forever.
        """
        orchestrator = MaintenanceOrchestrator(self, poll_interval=self.poll_interval)
        return await orchestrator.run(backend, server, timeout=timeout, cancel=cancel)

    def __repr__(self) -> str:
        return f"RuntimeClient({str(self.locator)!r})"
