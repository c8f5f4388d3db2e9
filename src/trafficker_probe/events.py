"""
Probe events and the sinks that receive them.

Both probes report what happens to them (connection opened, payload echoed,
response received, elapsed time, errors) as ProbeEvent notifications. A sink
only observes: nothing it does feeds back into probe state.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol

logger = logging.getLogger(__name__)


class ProbeEventKind(str, Enum):
    """Kinds of notifications emitted by the probes"""
    OPENED = "opened"
    RECEIVED = "received"
    ECHOED = "echoed"
    CLOSED = "closed"
    ERRORED = "errored"
    RESPONSE = "response"
    REQUEST_FAILED = "request_failed"
    ELAPSED = "elapsed"


@dataclass(frozen=True)
class ProbeEvent:
    """A single lifecycle or outcome notification."""

    kind: ProbeEventKind
    address: str
    detail: Any = None
    timestamp: float = field(default_factory=time.time)


class ProbeEventSink(Protocol):
    def emit(self, event: ProbeEvent) -> None: ...


def _describe_payload(payload: Any) -> str:
    if isinstance(payload, (bytes, bytearray)):
        return f"<{len(payload)} bytes>"
    return repr(payload)


class LoggingEventSink:
    """
    Default sink: writes every event to a logger.

    Errors are logged at ERROR level, everything else at INFO.
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def emit(self, event: ProbeEvent) -> None:
        kind = event.kind
        if kind == ProbeEventKind.OPENED:
            self.log.info(f"Connected to {event.address}")
        elif kind == ProbeEventKind.RECEIVED:
            self.log.info(f"Received: {_describe_payload(event.detail)}")
        elif kind == ProbeEventKind.ECHOED:
            self.log.debug(f"Echoed: {_describe_payload(event.detail)}")
        elif kind == ProbeEventKind.CLOSED:
            self.log.info(f"Connection to {event.address} closed")
        elif kind == ProbeEventKind.ERRORED:
            self.log.error(f"Stream error on {event.address}: {event.detail}")
        elif kind == ProbeEventKind.RESPONSE:
            self.log.info(f"Response data: {event.detail!r}")
        elif kind == ProbeEventKind.REQUEST_FAILED:
            self.log.error(f"Request to {event.address} failed: {event.detail}")
        elif kind == ProbeEventKind.ELAPSED:
            self.log.info(f"Request took {event.detail:.2f} ms")


class RecordingEventSink:
    """Sink that keeps every event in memory, in emission order."""

    def __init__(self):
        self.events: List[ProbeEvent] = []

    def emit(self, event: ProbeEvent) -> None:
        self.events.append(event)

    def kinds(self) -> List[ProbeEventKind]:
        return [event.kind for event in self.events]

    def of_kind(self, kind: ProbeEventKind) -> List[ProbeEvent]:
        return [event for event in self.events if event.kind == kind]
