"""
Connection session state and its transition table.

The lifecycle of one WebSocket channel is modelled as an explicit state
machine. `transition` is a pure function; `ConnectionSession.apply` is the
only place session state changes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..exceptions import SessionStateError

Payload = Union[str, bytes]


class SessionState(str, Enum):
    """Lifecycle states of a connection session"""
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    ERRORED = "errored"


class SessionEvent(str, Enum):
    """Lifecycle events that drive a session"""
    HANDSHAKE_OK = "handshake_ok"
    HANDSHAKE_FAILED = "handshake_failed"
    PAYLOAD_RECEIVED = "payload_received"
    TRANSPORT_FAULT = "transport_fault"
    REMOTE_CLOSED = "remote_closed"
    CLOSE_REQUESTED = "close_requested"


TERMINAL_STATES = frozenset({SessionState.CLOSED, SessionState.ERRORED})

_TRANSITIONS = {
    (SessionState.CONNECTING, SessionEvent.HANDSHAKE_OK): SessionState.OPEN,
    (SessionState.CONNECTING, SessionEvent.HANDSHAKE_FAILED): SessionState.ERRORED,
    (SessionState.OPEN, SessionEvent.PAYLOAD_RECEIVED): SessionState.OPEN,
    (SessionState.OPEN, SessionEvent.TRANSPORT_FAULT): SessionState.ERRORED,
    (SessionState.OPEN, SessionEvent.REMOTE_CLOSED): SessionState.CLOSED,
}


def transition(state: SessionState, event: SessionEvent) -> SessionState:
    """
    Compute the state that follows `event` in `state`.

    An explicit close always yields CLOSED. Any other event leaves a
    terminal state unchanged.

    Raises:
        SessionStateError: If the event is undefined for a non-terminal state.
    """
    if event == SessionEvent.CLOSE_REQUESTED:
        return SessionState.CLOSED
    if state in TERMINAL_STATES:
        return state
    try:
        return _TRANSITIONS[(state, event)]
    except KeyError:
        raise SessionStateError(f"Event {event.value} is not valid in state {state.value}")


@dataclass
class ConnectionSession:
    """One bidirectional channel to a target address."""

    address: str
    state: SessionState = SessionState.CONNECTING
    last_sent: Optional[Payload] = None
    last_received: Optional[Payload] = None

    @property
    def is_open(self) -> bool:
        return self.state == SessionState.OPEN

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def apply(self, event: SessionEvent) -> SessionState:
        self.state = transition(self.state, event)
        return self.state
