"""Shared fixtures for the runtime client tests."""

import pytest
import pytest_asyncio

from runtime_fakes import (
    SAMPLE_STAT_ROW,
    SAMPLE_STATE_ROW,
    SERVERS_STATE_HEADER,
    STAT_HEADER,
    FakeRuntimeServer,
)


@pytest_asyncio.fixture
async def runtime_server():
    """Start a fake runtime API server on a TCP port."""
    server = FakeRuntimeServer()
    server.uri = await server.start_tcp()
    yield server
    await server.stop()


@pytest.fixture
def sample_stat_response() -> bytes:
    return (STAT_HEADER + "\n" + SAMPLE_STAT_ROW + "\n").encode()


@pytest.fixture
def sample_state_response() -> bytes:
    return ("1\n" + SERVERS_STATE_HEADER + "\n" + SAMPLE_STATE_ROW + "\n").encode()
