"""Tests for the drain-to-maintenance orchestrator."""

import asyncio
from typing import Optional

import pytest

from haproxy_runtime.exceptions import ResponseReadError, StateChangeAckError
from haproxy_runtime.maintenance import (
    MaintenanceOrchestrator,
    MaintenanceOutcome,
    MaintenanceResult,
)
from haproxy_runtime.models.counters import CounterRecord
from haproxy_runtime.models.state import ServerState


class ScriptedClient:
    """
    Stands in for RuntimeClient, reporting a scripted session count.

    Each show_stat() call consumes the next count; the last one repeats.
    A count of None omits the server row.
    """

    def __init__(self, sessions: list[Optional[int]], stat_delay: float = 0.0):
        self.sessions = list(sessions)
        self.stat_delay = stat_delay
        self.calls: list[tuple] = []
        self.fail_state: Optional[ServerState] = None
        self.fail_stat = False

    async def set_server_state(self, backend: str, server: str, state: ServerState) -> None:
        self.calls.append(("set", backend, server, state))
        if state == self.fail_state:
            raise StateChangeAckError(backend, server, state.value, b"No such server.\n")

    async def show_stat(self) -> list[CounterRecord]:
        self.calls.append(("stat-start",))
        if self.stat_delay:
            await asyncio.sleep(self.stat_delay)
        if self.fail_stat:
            raise ResponseReadError("unable to read response: reset", command="show stat")
        scur = self.sessions.pop(0) if len(self.sessions) > 1 else self.sessions[0]
        self.calls.append(("stat-end", scur))

        records = [
            CounterRecord(pxname="app", svname="FRONTEND", scur=40),
            CounterRecord(pxname="other", svname="web01", scur=0),
        ]
        if scur is not None:
            records.append(CounterRecord(pxname="app", svname="web01", scur=scur))
        records.append(CounterRecord(pxname="app", svname="BACKEND", scur=scur or 0))
        return records

    async def find_counter(self, backend: str, server: str) -> Optional[CounterRecord]:
        for counters in await self.show_stat():
            if counters.pxname == backend and counters.svname == server:
                return counters
        return None

    def states(self) -> list[ServerState]:
        return [call[3] for call in self.calls if call[0] == "set"]

    def polls(self) -> int:
        return sum(1 for call in self.calls if call[0] == "stat-start")


class TestMaintenanceOrchestrator:
    """Tests for MaintenanceOrchestrator.run."""

    @pytest.mark.asyncio
    async def test_drains_then_maintenance(self):
        """Sessions 5, 2, 0: one maintenance write after the third poll."""
        client = ScriptedClient([5, 2, 0])
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.001)

        result = await orchestrator.run("app", "web01", timeout=5)

        assert client.calls == [
            ("set", "app", "web01", ServerState.DRAIN),
            ("stat-start",), ("stat-end", 5),
            ("stat-start",), ("stat-end", 2),
            ("stat-start",), ("stat-end", 0),
            ("set", "app", "web01", ServerState.MAINT),
        ]
        assert result == MaintenanceResult(
            backend="app",
            server="web01",
            outcome=MaintenanceOutcome.DRAINED,
            polls=3,
            last_sessions=0,
        )
        assert not result.forced

    @pytest.mark.asyncio
    async def test_drains_without_deadline(self):
        """Without a deadline the loop polls until the drain completes."""
        client = ScriptedClient([1, 1, 1, 1, 0])
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.001)

        result = await orchestrator.run("app", "web01")

        assert result.outcome == MaintenanceOutcome.DRAINED
        assert result.polls == 5
        assert client.states() == [ServerState.DRAIN, ServerState.MAINT]

    @pytest.mark.asyncio
    async def test_deadline_forces_maintenance(self):
        """Sessions stuck at 3: maintenance is forced when the deadline passes."""
        client = ScriptedClient([3])
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.01)

        loop = asyncio.get_running_loop()
        started = loop.time()
        result = await orchestrator.run("app", "web01", timeout=0.1)
        elapsed = loop.time() - started

        assert result.outcome == MaintenanceOutcome.FORCED
        assert result.forced
        assert result.last_sessions == 3
        assert result.polls >= 1
        assert client.states() == [ServerState.DRAIN, ServerState.MAINT]
        assert client.calls[-1] == ("set", "app", "web01", ServerState.MAINT)
        assert elapsed < 1.0

    @pytest.mark.asyncio
    async def test_missing_row_is_never_drained(self):
        """A server absent from the counters only ends by timing out."""
        client = ScriptedClient([None])
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.005)

        result = await orchestrator.run("app", "web01", timeout=0.05)

        assert result.outcome == MaintenanceOutcome.FORCED
        assert result.last_sessions is None
        assert result.polls >= 1
        assert client.states() == [ServerState.DRAIN, ServerState.MAINT]

    @pytest.mark.asyncio
    async def test_row_appears_later(self):
        """A missing row on one poll does not stop later polls from draining."""
        client = ScriptedClient([None, 0])
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.001)

        result = await orchestrator.run("app", "web01", timeout=5)

        assert result.outcome == MaintenanceOutcome.DRAINED
        assert result.polls == 2

    @pytest.mark.asyncio
    async def test_cancel_event_forces_maintenance(self):
        """Setting the cancel event forces maintenance without a zero reading."""
        client = ScriptedClient([7])
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.01)
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, cancel.set)

        result = await orchestrator.run("app", "web01", cancel=cancel)

        assert result.forced
        assert result.last_sessions == 7
        assert client.states() == [ServerState.DRAIN, ServerState.MAINT]

    @pytest.mark.asyncio
    async def test_expired_deadline_forces_before_polling(self):
        """A zero timeout forces maintenance right after the drain write."""
        client = ScriptedClient([0])
        orchestrator = MaintenanceOrchestrator(client)

        result = await orchestrator.run("app", "web01", timeout=0)

        assert result.forced
        assert result.polls == 0
        assert client.polls() == 0
        assert client.states() == [ServerState.DRAIN, ServerState.MAINT]

    @pytest.mark.asyncio
    async def test_in_flight_poll_completes_before_forced_write(self):
        """The deadline never interrupts a counter read in progress."""
        client = ScriptedClient([4], stat_delay=0.1)
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.01)

        result = await orchestrator.run("app", "web01", timeout=0.03)

        assert result.forced
        assert client.calls == [
            ("set", "app", "web01", ServerState.DRAIN),
            ("stat-start",),
            ("stat-end", 4),
            ("set", "app", "web01", ServerState.MAINT),
        ]

    @pytest.mark.asyncio
    async def test_drain_write_failure_aborts(self):
        """A failed drain write is surfaced and nothing else is sent."""
        client = ScriptedClient([0])
        client.fail_state = ServerState.DRAIN
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.001)

        with pytest.raises(StateChangeAckError) as exc_info:
            await orchestrator.run("app", "web01", timeout=1)

        assert exc_info.value.state == "drain"
        assert client.polls() == 0
        assert client.states() == [ServerState.DRAIN]

    @pytest.mark.asyncio
    async def test_poll_failure_aborts_without_forcing(self):
        """A failed counter read aborts without the maintenance write."""
        client = ScriptedClient([3])
        client.fail_stat = True
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.001)

        with pytest.raises(ResponseReadError):
            await orchestrator.run("app", "web01", timeout=1)

        assert client.states() == [ServerState.DRAIN]

    @pytest.mark.asyncio
    async def test_forced_write_failure_is_surfaced(self):
        """The forced path returns whatever the maintenance write produces."""
        client = ScriptedClient([3])
        client.fail_state = ServerState.MAINT
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.005)

        with pytest.raises(StateChangeAckError) as exc_info:
            await orchestrator.run("app", "web01", timeout=0.02)

        assert exc_info.value.state == "maint"

    def test_poll_interval_must_be_positive(self):
        """A zero poll interval is rejected."""
        with pytest.raises(ValueError):
            MaintenanceOrchestrator(ScriptedClient([0]), poll_interval=0)

    @pytest.mark.asyncio
    async def test_sessions_read_through_find_counter(self):
        """Each poll looks the server up with the client's find_counter."""
        client = ScriptedClient([2, 0])
        lookups = []
        find_counter = client.find_counter

        async def recording_find_counter(backend, server):
            lookups.append((backend, server))
            return await find_counter(backend, server)

        client.find_counter = recording_find_counter
        orchestrator = MaintenanceOrchestrator(client, poll_interval=0.001)

        result = await orchestrator.run("app", "web01", timeout=5)

        assert result.outcome == MaintenanceOutcome.DRAINED
        assert lookups == [("app", "web01"), ("app", "web01")]
