"""
HTTP request/response probe.

Performs exactly one JSON POST against an endpoint, classifies the result and
times it. Every exit path reports the elapsed time to the event sink.
"""

import json
import logging
import time
from typing import Any, Optional

import httpx

from ..config import ProbeSettings, get_settings
from ..events import LoggingEventSink, ProbeEvent, ProbeEventKind, ProbeEventSink
from ..exceptions import (
    DecodeError,
    HttpStatusError,
    InvalidRequestError,
    RequestError,
    TransportError,
)
from .outcome import RequestOutcome

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def validate_address(address: str) -> httpx.URL:
    """
    Check that `address` is an absolute http(s) URL.

    Raises:
        InvalidRequestError: If it is not.
    """
    try:
        url = httpx.URL(address)
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidRequestError(f"Malformed address {address!r}: {e}", address=str(address), cause=e) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidRequestError(
            f"Address must be an absolute http(s) URL, got {address!r}",
            address=address,
        )
    return url


def _elapsed_ms(start: float) -> float:
    return max(0.0, (time.monotonic() - start) * 1000)


class RequestProbe:
    """
    Single-shot JSON request probe.

    Wraps httpx.AsyncClient; failures are returned as failed RequestOutcome
    objects rather than raised, so the caller always gets a duration.

    Usage:
        probe = RequestProbe(settings)
        outcome = await probe.send({"hello": "dsad"})
        if outcome.success:
            print(outcome.response_body, outcome.elapsed_ms)
    """

    def __init__(
        self,
        settings: Optional[ProbeSettings] = None,
        sink: Optional[ProbeEventSink] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the probe.

        Args:
            settings: Target address and timeout; defaults to the environment.
            sink: Receives response, failure and elapsed-time events.
            transport: Optional httpx transport, e.g. httpx.MockTransport.
        """
        self.settings = settings or get_settings()
        self.sink = sink or LoggingEventSink(logger)
        self.transport = transport

    async def send(self, body: Any, address: Optional[str] = None) -> RequestOutcome:
        """
        POST `body` as JSON to `address` and await one JSON response.

        Args:
            body: JSON-serializable request body.
            address: Endpoint URL; defaults to the configured http_url.

        Returns:
            A success outcome with the parsed response body, or a failed
            outcome carrying an HttpStatusError, TransportError or DecodeError.

        Raises:
            InvalidRequestError: If the address is malformed or the body
                cannot be serialized to JSON.
        """
        address = address or self.settings.http_url
        validate_address(address)

        start = time.monotonic()
        outcome: Optional[RequestOutcome] = None
        try:
            try:
                content = json.dumps(body, allow_nan=False)
            except (TypeError, ValueError) as e:
                raise InvalidRequestError(
                    f"Request body is not JSON-serializable: {e}", address=address, cause=e
                ) from e

            try:
                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(self.settings.timeout_seconds),
                    transport=self.transport,
                    follow_redirects=True,
                ) as client:
                    response = await client.post(
                        address, content=content, headers=JSON_HEADERS
                    )
            except httpx.TimeoutException as e:
                outcome = self._failure(
                    address, body, start,
                    TransportError(f"Timed out waiting for {address}: {e}", address=address, cause=e),
                )
                return outcome
            except httpx.DecodingError as e:
                outcome = self._failure(
                    address, body, start,
                    DecodeError(f"Response body from {address} could not be decoded: {e}", address=address, cause=e),
                )
                return outcome
            except httpx.RequestError as e:
                outcome = self._failure(
                    address, body, start,
                    TransportError(f"Request to {address} failed: {e}", address=address, cause=e),
                )
                return outcome

            logger.debug(f"POST {address} -> {response.status_code}")

            if not response.is_success:
                outcome = self._failure(
                    address, body, start,
                    HttpStatusError(
                        f"HTTP error! Status: {response.status_code}",
                        status_code=response.status_code,
                        address=address,
                    ),
                    status_code=response.status_code,
                )
                return outcome

            try:
                data = response.json()
            except ValueError as e:
                outcome = self._failure(
                    address, body, start,
                    DecodeError(f"Response from {address} is not valid JSON: {e}", address=address, cause=e),
                    status_code=response.status_code,
                )
                return outcome

            outcome = RequestOutcome(
                address=address,
                request_body=body,
                success=True,
                elapsed_ms=_elapsed_ms(start),
                response_body=data,
                status_code=response.status_code,
            )
            self._emit(ProbeEventKind.RESPONSE, address, data)
            return outcome
        finally:
            elapsed = outcome.elapsed_ms if outcome is not None else _elapsed_ms(start)
            self._emit(ProbeEventKind.ELAPSED, address, elapsed)

    def _failure(
        self,
        address: str,
        body: Any,
        start: float,
        error: RequestError,
        status_code: Optional[int] = None,
    ) -> RequestOutcome:
        outcome = RequestOutcome(
            address=address,
            request_body=body,
            success=False,
            elapsed_ms=_elapsed_ms(start),
            status_code=status_code,
            error=error,
        )
        self._emit(ProbeEventKind.REQUEST_FAILED, address, error)
        return outcome

    def _emit(self, kind: ProbeEventKind, address: str, detail=None) -> None:
        self.sink.emit(ProbeEvent(kind=kind, address=address, detail=detail))
