"""
Drain-then-maintenance orchestration for a single backend server.

The server is first put into drain state, then the session counters are
polled until the server has no current sessions left, at which point it
is put into maintenance. When the caller's deadline passes (or the
cancel event is set) before that happens, maintenance is forced
regardless of the remaining sessions.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

import structlog

from .models.state import ServerState

if TYPE_CHECKING:
    from .client import RuntimeClient

logger = structlog.get_logger(__name__)

DEFAULT_POLL_INTERVAL = 0.01


class MaintenanceOutcome(str, Enum):
    """How a server reached maintenance."""
    DRAINED = "drained"
    FORCED = "forced"


@dataclass(frozen=True)
class MaintenanceResult:
    """Result of a drain-to-maintenance run."""
    backend: str
    server: str
    outcome: MaintenanceOutcome
    polls: int = 0
    last_sessions: Optional[int] = None

    @property
    def forced(self) -> bool:
        """True if maintenance was forced before the drain completed."""
        return self.outcome == MaintenanceOutcome.FORCED


class MaintenanceOrchestrator:
    """
    Drives one server from ready through drain to maintenance.

    The deadline is only observed between polls: a counter read that is
    in flight always completes before the forced maintenance write.
    """

    def __init__(self, client: RuntimeClient, poll_interval: float = DEFAULT_POLL_INTERVAL):
        """
        Initialize the orchestrator.

        Args:
            client: Runtime client used for state changes and counter reads
            poll_interval: Delay between counter polls in seconds
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.client = client
        self.poll_interval = poll_interval

    async def run(
        self,
        backend: str,
        server: str,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> MaintenanceResult:
        """
        Drain a server and put it into maintenance.

        Args:
            backend: Backend (proxy) name
            server: Server name inside the backend
            timeout: Seconds to wait for the drain, None waits forever
            cancel: Optional event that forces maintenance when set

        Returns:
            MaintenanceResult telling whether the drain completed or was forced

        Raises:
            StateChangeAckError: If a state change is not acknowledged
            TransportError: If a command cannot be exchanged
            DecodeError: If the counter table cannot be decoded
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None

        await self.client.set_server_state(backend, server, ServerState.DRAIN)
        logger.info("Server draining", backend=backend, server=server, timeout=timeout)

        polls = 0
        sessions: Optional[int] = None

        while True:
            if await self._wait(deadline, cancel):
                logger.warning(
                    "Drain deadline reached, forcing maintenance",
                    backend=backend,
                    server=server,
                    sessions=sessions,
                    polls=polls,
                )
                await self.client.set_server_state(backend, server, ServerState.MAINT)
                return MaintenanceResult(
                    backend=backend,
                    server=server,
                    outcome=MaintenanceOutcome.FORCED,
                    polls=polls,
                    last_sessions=sessions,
                )

            sessions = await self._current_sessions(backend, server)
            polls += 1

            if sessions == 0:
                await self.client.set_server_state(backend, server, ServerState.MAINT)
                logger.info("Server drained", backend=backend, server=server, polls=polls)
                return MaintenanceResult(
                    backend=backend,
                    server=server,
                    outcome=MaintenanceOutcome.DRAINED,
                    polls=polls,
                    last_sessions=sessions,
                )

    async def _wait(self, deadline: Optional[float], cancel: Optional[asyncio.Event]) -> bool:
        """Wait one poll interval. Returns True if the deadline or cancel fired first."""
        loop = asyncio.get_running_loop()

        delay = self.poll_interval
        if deadline is not None:
            remaining = deadline - loop.time()
            if remaining <= 0:
                return True
            delay = min(delay, remaining)

        if cancel is None:
            await asyncio.sleep(delay)
        else:
            try:
                await asyncio.wait_for(cancel.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass

        if cancel is not None and cancel.is_set():
            return True
        return deadline is not None and loop.time() >= deadline

    async def _current_sessions(self, backend: str, server: str) -> Optional[int]:
        """Current session count of the server, None if its row is absent."""
        counters = await self.client.find_counter(backend, server)
        if counters is None:
            logger.debug("Server not found in counters", backend=backend, server=server)
            return None

        logger.debug("Current sessions", backend=backend, server=server, scur=counters.scur)
        return counters.scur
