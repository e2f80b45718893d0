"""Tests for the fire-and-forget invocation dispatcher."""

from __future__ import annotations

import json
import threading

import httpx
import pytest

from anydoor.core.call_site import CallSite, InvocationRequest
from anydoor.services.dispatcher import RemoteInvocationDispatcher


def _request() -> InvocationRequest:
    return InvocationRequest.for_call_site(CallSite("com.A", "foo", ("int",)), '{"id": 5}')


class _Recorder:
    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text="ok")


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


def test_endpoint_targets_loopback_run_path() -> None:
    assert RemoteInvocationDispatcher().endpoint(8080) == "http://127.0.0.1:8080/any_door/run"


@pytest.mark.asyncio
async def test_send_posts_envelope_to_port() -> None:
    recorder = _Recorder()
    errors: list[Exception] = []
    dispatcher = RemoteInvocationDispatcher(transport=httpx.MockTransport(recorder))

    result = dispatcher.send(_request(), 9090, errors.append)
    await dispatcher.aclose()

    assert result is None
    assert errors == []
    assert len(recorder.requests) == 1
    sent = recorder.requests[0]
    assert sent.method == "POST"
    assert str(sent.url) == "http://127.0.0.1:9090/any_door/run"
    assert sent.headers["content-type"] == "application/json"
    assert json.loads(sent.content) == {
        "content": '{"id": 5}',
        "methodName": "foo",
        "className": "com.A",
        "parameterTypes": ["int"],
    }


@pytest.mark.asyncio
async def test_send_does_not_wait_for_the_response() -> None:
    recorder = _Recorder()
    dispatcher = RemoteInvocationDispatcher(transport=httpx.MockTransport(recorder))

    dispatcher.send(_request(), 9090, lambda exc: None)

    assert recorder.requests == []
    await dispatcher.aclose()
    assert len(recorder.requests) == 1


@pytest.mark.asyncio
async def test_connection_refused_reports_once() -> None:
    errors: list[Exception] = []
    dispatcher = RemoteInvocationDispatcher(transport=httpx.MockTransport(_refuse))

    dispatcher.send(_request(), 9090, errors.append)
    await dispatcher.aclose()

    assert len(errors) == 1
    assert "Connection refused" in str(errors[0])


@pytest.mark.asyncio
async def test_error_status_reports_status_code() -> None:
    errors: list[Exception] = []
    dispatcher = RemoteInvocationDispatcher(transport=httpx.MockTransport(_Recorder(status_code=500)))

    dispatcher.send(_request(), 9090, errors.append)
    await dispatcher.aclose()

    assert len(errors) == 1
    assert isinstance(errors[0], httpx.HTTPStatusError)
    assert "500" in str(errors[0])


@pytest.mark.asyncio
async def test_raising_error_callback_is_contained() -> None:
    calls: list[Exception] = []

    def _explode(exc: Exception) -> None:
        calls.append(exc)
        raise RuntimeError("callback bug")

    dispatcher = RemoteInvocationDispatcher(transport=httpx.MockTransport(_refuse))

    dispatcher.send(_request(), 9090, _explode)
    await dispatcher.aclose()

    assert len(calls) == 1


def test_send_without_running_loop_uses_worker_thread() -> None:
    reported = threading.Event()
    errors: list[Exception] = []

    def _on_error(exc: Exception) -> None:
        errors.append(exc)
        reported.set()

    dispatcher = RemoteInvocationDispatcher(transport=httpx.MockTransport(_refuse))

    dispatcher.send(_request(), 9090, _on_error)

    assert reported.wait(timeout=5.0)
    assert len(errors) == 1
    assert "Connection refused" in str(errors[0])
