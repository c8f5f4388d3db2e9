"""Exception hierarchy for the stream and request probes."""

from typing import Optional


class ProbeError(Exception):
    """Base exception for all probe failures."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.address = address
        self.cause = cause
        super().__init__(message)


class StreamProbeError(ProbeError):
    """Base class for WebSocket echo probe errors."""


class ProbeConnectionError(StreamProbeError, ConnectionError):
    """Raised when the handshake fails or the endpoint is unreachable."""


class TransportFault(StreamProbeError):
    """Raised when an open channel fails after a successful handshake."""


class EchoMismatchError(StreamProbeError):
    """Raised when the payload that came back differs from the one sent."""

    def __init__(self, message: str, expected, received, address: Optional[str] = None):
        self.expected = expected
        self.received = received
        super().__init__(message, address=address)


class EchoTimeoutError(StreamProbeError, TimeoutError):
    """Raised when no payload arrived within the configured wait."""


class SessionStateError(StreamProbeError):
    """Raised for a lifecycle event that is undefined in the current state."""


class RequestError(ProbeError):
    """Base class for request/response probe errors."""


class HttpStatusError(RequestError):
    """The endpoint answered with a status outside the 2xx range."""

    def __init__(self, message: str, status_code: int, address: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message, address=address)


class TransportError(RequestError):
    """No response arrived: refused, unresolvable, reset or timed out."""


class DecodeError(RequestError):
    """A success response whose body is not valid JSON."""


class InvalidRequestError(RequestError, ValueError):
    """The address or body violates the request preconditions."""
