"""
Conformance probes for a WebSocket echo endpoint and a JSON HTTP endpoint.
"""

from .config import ProbeSettings, get_settings
from .events import (
    LoggingEventSink,
    ProbeEvent,
    ProbeEventKind,
    ProbeEventSink,
    RecordingEventSink,
)
from .exceptions import (
    DecodeError,
    EchoMismatchError,
    EchoTimeoutError,
    HttpStatusError,
    InvalidRequestError,
    ProbeConnectionError,
    ProbeError,
    RequestError,
    SessionStateError,
    StreamProbeError,
    TransportError,
    TransportFault,
)
from .request import RequestOutcome, RequestProbe
from .stream import ConnectionSession, SessionState, StreamEchoProbe

__version__ = "0.1.0"

__all__ = [
    "ProbeSettings",
    "get_settings",
    "LoggingEventSink",
    "ProbeEvent",
    "ProbeEventKind",
    "ProbeEventSink",
    "RecordingEventSink",
    "DecodeError",
    "EchoMismatchError",
    "EchoTimeoutError",
    "HttpStatusError",
    "InvalidRequestError",
    "ProbeConnectionError",
    "ProbeError",
    "RequestError",
    "SessionStateError",
    "StreamProbeError",
    "TransportError",
    "TransportFault",
    "RequestOutcome",
    "RequestProbe",
    "ConnectionSession",
    "SessionState",
    "StreamEchoProbe",
]
