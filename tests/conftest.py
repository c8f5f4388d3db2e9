"""
Shared fixtures for the probe tests.

Stream tests run against real in-process WebSocket servers bound to an
ephemeral port on localhost; request tests use httpx.MockTransport.
"""

import socket
import threading
from contextlib import asynccontextmanager, contextmanager

import pytest
from websockets.asyncio.server import serve
from websockets.sync.server import serve as serve_sync

from trafficker_probe.config import ProbeSettings
from trafficker_probe.events import RecordingEventSink


@pytest.fixture
def settings():
    """Settings with a short timeout so hanging tests fail fast."""
    return ProbeSettings(
        ws_url="ws://127.0.0.1:1/ws",
        http_url="http://probe.test/api/probe",
        timeout_ms=2000,
    )


@pytest.fixture
def sink():
    return RecordingEventSink()


@pytest.fixture
def ws_server():
    """
    Factory for async WebSocket servers.

    Usage:
        async with ws_server(handler) as url:
            await probe.connect(url)
    """

    @asynccontextmanager
    async def _running(handler, **kwargs):
        async with serve(handler, "127.0.0.1", 0, **kwargs) as server:
            port = next(iter(server.sockets)).getsockname()[1]
            yield f"ws://127.0.0.1:{port}/ws"

    return _running


@pytest.fixture
def threaded_ws_server():
    """Factory for a sync WebSocket server on a background thread (for CLI tests)."""

    @contextmanager
    def _running(handler):
        server = serve_sync(handler, "127.0.0.1", 0)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        try:
            port = server.socket.getsockname()[1]
            yield f"ws://127.0.0.1:{port}/ws"
        finally:
            server.shutdown()
            thread.join(timeout=5.0)

    return _running


@pytest.fixture
def unused_ws_url():
    """A ws:// address on a port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"ws://127.0.0.1:{port}/ws"

