"""
Unit tests for RequestProbe behavior.

The HTTP boundary is replaced with httpx.MockTransport; we verify what request
is sent and how each kind of response is classified and timed.
"""

import dataclasses
import json
import logging

import httpx
import pytest

from trafficker_probe.events import ProbeEventKind
from trafficker_probe.exceptions import (
    DecodeError,
    HttpStatusError,
    InvalidRequestError,
    TransportError,
)
from trafficker_probe.request import RequestOutcome, RequestProbe

HELLO = {"hello": "dsad"}


def make_probe(settings, sink, handler):
    return RequestProbe(settings, sink=sink, transport=httpx.MockTransport(handler))


def json_response(status_code=200, data=None):
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=data if data is not None else HELLO)

    return _handler


class TestRequestShape:
    @pytest.mark.asyncio
    async def test_posts_json_body_with_content_type(self, settings, sink):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        probe = make_probe(settings, sink, handler)
        await probe.send(HELLO)

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == settings.http_url
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == HELLO
        assert "cookie" not in request.headers
        assert "authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_explicit_address_overrides_settings(self, settings, sink):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={})

        probe = make_probe(settings, sink, handler)
        outcome = await probe.send(HELLO, "https://other.test/api/sdsad")

        assert seen == ["https://other.test/api/sdsad"]
        assert outcome.address == "https://other.test/api/sdsad"

    @pytest.mark.asyncio
    async def test_redirect_is_followed(self, settings, sink):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/probe":
                return httpx.Response(307, headers={"Location": "/api/moved"})
            return httpx.Response(200, json={"path": request.url.path})

        probe = make_probe(settings, sink, handler)
        outcome = await probe.send(HELLO)

        assert outcome.success
        assert outcome.response_body == {"path": "/api/moved"}

    @pytest.mark.asyncio
    async def test_default_sink_logs_under_request_logger(self, settings, caplog):
        client = RequestProbe(settings, transport=httpx.MockTransport(json_response()))

        with caplog.at_level(logging.INFO, logger="trafficker_probe"):
            await client.send(HELLO)

        assert caplog.records
        assert {record.name for record in caplog.records} == {
            "trafficker_probe.request.request_probe"
        }


class TestSuccess:
    @pytest.mark.asyncio
    async def test_json_response_yields_success_outcome(self, settings, sink):
        probe = make_probe(settings, sink, json_response(200, HELLO))

        outcome = await probe.send(HELLO)

        assert outcome.success is True
        assert outcome.response_body == {"hello": "dsad"}
        assert outcome.status_code == 200
        assert outcome.error is None
        assert outcome.error_kind is None
        assert outcome.elapsed_ms >= 0
        assert outcome.request_body == HELLO
        assert sink.kinds() == [ProbeEventKind.RESPONSE, ProbeEventKind.ELAPSED]
        assert sink.of_kind(ProbeEventKind.RESPONSE)[0].detail == HELLO

    @pytest.mark.asyncio
    async def test_any_2xx_status_is_success(self, settings, sink):
        probe = make_probe(settings, sink, json_response(201, {"id": 7}))

        outcome = await probe.send(HELLO)

        assert outcome.success
        assert outcome.status_code == 201
        assert outcome.raise_for_error() is outcome


class TestFailures:
    @pytest.mark.asyncio
    async def test_404_yields_http_status_error(self, settings, sink):
        probe = make_probe(settings, sink, json_response(404, {"detail": "missing"}))

        outcome = await probe.send(HELLO)

        assert outcome.success is False
        assert isinstance(outcome.error, HttpStatusError)
        assert outcome.error_kind == "HttpStatusError"
        assert outcome.error.status_code == 404
        assert outcome.status_code == 404
        assert outcome.response_body is None
        assert outcome.elapsed_ms >= 0

    @pytest.mark.asyncio
    async def test_server_error_yields_http_status_error(self, settings, sink):
        probe = make_probe(settings, sink, json_response(504, {"error": "timeout"}))

        outcome = await probe.send(HELLO)

        assert outcome.error_kind == "HttpStatusError"
        with pytest.raises(HttpStatusError):
            outcome.raise_for_error()

    @pytest.mark.asyncio
    async def test_non_json_body_yields_decode_error(self, settings, sink):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>not json</html>")

        probe = make_probe(settings, sink, handler)
        outcome = await probe.send(HELLO)

        assert outcome.success is False
        assert isinstance(outcome.error, DecodeError)
        assert outcome.status_code == 200
        assert outcome.response_body is None

    @pytest.mark.asyncio
    async def test_empty_body_yields_decode_error(self, settings, sink):
        probe = make_probe(settings, sink, lambda request: httpx.Response(200))

        outcome = await probe.send(HELLO)

        assert outcome.error_kind == "DecodeError"

    @pytest.mark.asyncio
    async def test_corrupt_content_encoding_yields_decode_error(self, settings, sink):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, headers={"Content-Encoding": "gzip"}, content=b"definitely not gzip"
            )

        client = make_probe(settings, sink, handler)
        outcome = await client.send(HELLO)

        assert outcome.success is False
        assert outcome.error_kind == "DecodeError"
        assert isinstance(outcome.error.cause, httpx.DecodingError)
        assert outcome.response_body is None

    @pytest.mark.asyncio
    async def test_connection_refused_yields_transport_error(self, settings, sink):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        probe = make_probe(settings, sink, handler)
        outcome = await probe.send(HELLO)

        assert outcome.success is False
        assert isinstance(outcome.error, TransportError)
        assert isinstance(outcome.error.cause, httpx.ConnectError)
        assert outcome.status_code is None
        assert outcome.response_body is None

    @pytest.mark.asyncio
    async def test_timeout_yields_transport_error(self, settings, sink):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        probe = make_probe(settings, sink, handler)
        outcome = await probe.send(HELLO)

        assert outcome.error_kind == "TransportError"
        assert "Timed out" in str(outcome.error)

    @pytest.mark.asyncio
    async def test_failure_is_reported_to_sink(self, settings, sink):
        probe = make_probe(settings, sink, json_response(404))

        outcome = await probe.send(HELLO)

        assert sink.kinds() == [ProbeEventKind.REQUEST_FAILED, ProbeEventKind.ELAPSED]
        assert sink.of_kind(ProbeEventKind.REQUEST_FAILED)[0].detail is outcome.error


class TestElapsed:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "handler",
        [
            json_response(200),
            json_response(404),
            lambda request: httpx.Response(200, text="nope"),
        ],
        ids=["success", "http_status", "decode"],
    )
    async def test_elapsed_reported_once_on_every_branch(self, settings, sink, handler):
        probe = make_probe(settings, sink, handler)

        outcome = await probe.send(HELLO)

        elapsed_events = sink.of_kind(ProbeEventKind.ELAPSED)
        assert len(elapsed_events) == 1
        assert elapsed_events[0].detail == outcome.elapsed_ms
        assert elapsed_events[0].detail >= 0

    @pytest.mark.asyncio
    async def test_elapsed_reported_when_body_cannot_be_serialized(self, settings, sink):
        probe = make_probe(settings, sink, json_response(200))

        with pytest.raises(InvalidRequestError):
            await probe.send({"value": object()})

        assert sink.kinds() == [ProbeEventKind.ELAPSED]


class TestPreconditions:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "address",
        ["not a url", "ftp://example.test/api", "/api/relative", "http://"],
    )
    async def test_malformed_address_raises(self, settings, sink, address):
        probe = make_probe(settings, sink, json_response(200))

        with pytest.raises(InvalidRequestError) as exc_info:
            await probe.send(HELLO, address)

        assert isinstance(exc_info.value, ValueError)
        assert sink.events == []

    @pytest.mark.asyncio
    async def test_cyclic_body_raises(self, settings, sink):
        body = {"hello": "dsad"}
        body["self"] = body
        probe = make_probe(settings, sink, json_response(200))

        with pytest.raises(InvalidRequestError):
            await probe.send(body)

    @pytest.mark.asyncio
    async def test_nan_body_raises(self, settings, sink):
        probe = make_probe(settings, sink, json_response(200))

        with pytest.raises(InvalidRequestError):
            await probe.send({"value": float("nan")})


class TestRequestOutcome:
    def test_outcome_is_immutable(self):
        outcome = RequestOutcome(
            address="http://probe.test/api/probe",
            request_body=HELLO,
            success=True,
            elapsed_ms=1.5,
            response_body=HELLO,
            status_code=200,
        )

        with pytest.raises(dataclasses.FrozenInstanceError):
            outcome.success = False
