"""WebSocket echo probe and its connection session state machine."""

from .echo_probe import StreamEchoProbe
from .session import (
    ConnectionSession,
    Payload,
    SessionEvent,
    SessionState,
    TERMINAL_STATES,
    transition,
)

__all__ = [
    "StreamEchoProbe",
    "ConnectionSession",
    "Payload",
    "SessionEvent",
    "SessionState",
    "TERMINAL_STATES",
    "transition",
]
