"""
WebSocket echo probe.

Connects to a WebSocket endpoint and bounces every inbound frame back to the
sender unchanged, or sends a payload of its own and checks that the identical
payload comes back.
"""

import asyncio
import logging
from typing import NoReturn, Optional, Tuple

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from ..config import ProbeSettings, get_settings
from ..events import LoggingEventSink, ProbeEvent, ProbeEventKind, ProbeEventSink
from ..exceptions import (
    EchoMismatchError,
    EchoTimeoutError,
    ProbeConnectionError,
    SessionStateError,
    StreamProbeError,
    TransportFault,
)
from .session import ConnectionSession, Payload, SessionEvent, SessionState

logger = logging.getLogger(__name__)


class StreamEchoProbe:
    """
    Echo probe over a single WebSocket connection.

    Usage:
        async with StreamEchoProbe(settings) as probe:
            await probe.verify_round_trip("ping")
            await probe.run()
    """

    def __init__(
        self,
        settings: Optional[ProbeSettings] = None,
        sink: Optional[ProbeEventSink] = None,
    ):
        self.settings = settings or get_settings()
        self.sink = sink or LoggingEventSink(logger)
        self.session: Optional[ConnectionSession] = None
        self._connection: Optional[ClientConnection] = None

    async def connect(self, address: Optional[str] = None) -> ConnectionSession:
        """
        Open a channel to `address` (defaults to the configured ws_url).

        Returns:
            The open ConnectionSession.

        Raises:
            ProbeConnectionError: If the endpoint is unreachable, the address is
                malformed, or the handshake is rejected or times out. No
                session is attached to the probe in that case.
            SessionStateError: If a session is already open.
        """
        if self.session is not None and self.session.is_open:
            raise SessionStateError(
                f"Already connected to {self.session.address}",
                address=self.session.address,
            )

        address = address or self.settings.ws_url
        self.session = None
        self._connection = None

        session = ConnectionSession(address=address)
        logger.debug(f"Connecting to {address}")
        try:
            connection = await connect(
                address, open_timeout=self.settings.timeout_seconds
            )
        except (OSError, asyncio.TimeoutError, ValueError, WebSocketException) as e:
            session.apply(SessionEvent.HANDSHAKE_FAILED)
            error = ProbeConnectionError(
                f"Could not connect to {address}: {e}", address=address, cause=e
            )
            self._emit(ProbeEventKind.ERRORED, address, error)
            raise error from e

        session.apply(SessionEvent.HANDSHAKE_OK)
        self.session = session
        self._connection = connection
        self._emit(ProbeEventKind.OPENED, address)
        return session

    async def send(self, payload: Payload) -> None:
        """Send a payload on the open session and record it as last-sent."""
        connection, session = self._require_open()
        try:
            await connection.send(payload)
        except ConnectionClosed as e:
            self._handle_closed(e)
            raise SessionStateError(
                f"Connection to {session.address} closed before the payload was sent",
                address=session.address,
                cause=e,
            ) from e
        session.last_sent = payload
        # the previous echo no longer matches what is in flight
        session.last_received = None

    async def echo_once(self) -> Optional[Payload]:
        """
        Wait for one inbound payload and bounce it back verbatim.

        Returns:
            The echoed payload, or None if the remote side closed the
            connection gracefully.

        Raises:
            TransportFault: If the connection fails while receiving or sending.
        """
        connection, session = self._require_open()
        payload = await self._receive(connection)
        if payload is None:
            return None

        session.apply(SessionEvent.PAYLOAD_RECEIVED)
        self._emit(ProbeEventKind.RECEIVED, session.address, payload)

        try:
            await connection.send(payload)
        except ConnectionClosed as e:
            self._handle_closed(e)
            return None

        session.last_sent = payload
        session.last_received = payload
        self._emit(ProbeEventKind.ECHOED, session.address, payload)
        return payload

    async def run(self, max_messages: Optional[int] = None) -> int:
        """
        Echo inbound payloads in arrival order until the session leaves OPEN.

        Args:
            max_messages: Stop after this many echoes; None runs until close.

        Returns:
            Number of payloads echoed.
        """
        self._require_open()
        echoed = 0
        while self.session is not None and self.session.is_open:
            if max_messages is not None and echoed >= max_messages:
                break
            if await self.echo_once() is None:
                break
            echoed += 1
        return echoed

    async def verify_round_trip(
        self, payload: Payload, timeout_ms: Optional[float] = None
    ) -> Payload:
        """
        Send `payload` and require the next inbound payload to be identical.

        Args:
            payload: Text or binary payload to send.
            timeout_ms: Maximum wait for the echo; defaults to the configured
                timeout.

        Returns:
            The echoed payload.

        Raises:
            EchoMismatchError: If a different payload came back or the
                connection closed before the echo arrived.
            EchoTimeoutError: If nothing arrived in time.
            TransportFault: If the connection failed.
        """
        await self.send(payload)
        connection, session = self._require_open()

        if timeout_ms is None:
            timeout_ms = self.settings.timeout_ms
        timeout = timeout_ms / 1000.0 if timeout_ms else None

        received = await self._receive(connection, timeout)
        if received is None:
            self._raise_reported(EchoMismatchError(
                f"Connection to {session.address} closed before the echo arrived",
                expected=payload,
                received=None,
                address=session.address,
            ))

        session.apply(SessionEvent.PAYLOAD_RECEIVED)
        if received != payload:
            self._raise_reported(EchoMismatchError(
                f"Echo mismatch on {session.address}: sent {payload!r}, received {received!r}",
                expected=payload,
                received=received,
                address=session.address,
            ))

        session.last_received = received
        self._emit(ProbeEventKind.RECEIVED, session.address, received)
        return received

    async def close(self) -> None:
        """Close the session from any state; it always ends CLOSED."""
        session = self.session
        connection = self._connection
        self._connection = None
        if session is None:
            return

        previous = session.state
        try:
            if connection is not None:
                await connection.close()
        finally:
            session.apply(SessionEvent.CLOSE_REQUESTED)
            if previous != SessionState.CLOSED:
                self._emit(ProbeEventKind.CLOSED, session.address)

    async def _receive(
        self, connection: ClientConnection, timeout: Optional[float] = None
    ) -> Optional[Payload]:
        try:
            if timeout is None:
                return await connection.recv()
            return await asyncio.wait_for(connection.recv(), timeout)
        except asyncio.TimeoutError as e:
            address = self.session.address if self.session else None
            self._raise_reported(EchoTimeoutError(
                f"No payload from {address} within {timeout:.3f}s",
                address=address,
                cause=e,
            ), cause=e)
        except ConnectionClosed as e:
            self._handle_closed(e)
            return None

    def _raise_reported(
        self, error: StreamProbeError, cause: Optional[BaseException] = None
    ) -> NoReturn:
        """Report `error` to the sink, then raise it."""
        self._emit(ProbeEventKind.ERRORED, error.address, error)
        raise error from cause

    def _handle_closed(self, exc: ConnectionClosed) -> None:
        """Move the session to CLOSED on a clean close, or ERRORED and raise."""
        session = self.session
        if isinstance(exc, ConnectionClosedOK):
            session.apply(SessionEvent.REMOTE_CLOSED)
            self._emit(ProbeEventKind.CLOSED, session.address)
            return

        session.apply(SessionEvent.TRANSPORT_FAULT)
        fault = TransportFault(
            f"Connection to {session.address} failed: {exc}",
            address=session.address,
            cause=exc,
        )
        self._emit(ProbeEventKind.ERRORED, session.address, fault)
        raise fault from exc

    def _require_open(self) -> Tuple[ClientConnection, ConnectionSession]:
        session = self.session
        if session is None or self._connection is None:
            raise SessionStateError("Not connected")
        if not session.is_open:
            raise SessionStateError(
                f"Session to {session.address} is {session.state.value}",
                address=session.address,
            )
        return self._connection, session

    def _emit(self, kind: ProbeEventKind, address: str, detail=None) -> None:
        self.sink.emit(ProbeEvent(kind=kind, address=address, detail=detail))

    async def __aenter__(self) -> "StreamEchoProbe":
        if self.session is None or not self.session.is_open:
            await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
