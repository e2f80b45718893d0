"""Fire-and-forget delivery of invocation requests to the any door server."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Coroutine

import httpx

from ..core.call_site import InvocationRequest

__all__ = ["RemoteInvocationDispatcher", "ErrorCallback", "DEFAULT_HOST", "RUN_PATH"]

LOGGER = logging.getLogger(__name__)
DEFAULT_HOST = "127.0.0.1"
RUN_PATH = "/any_door/run"
_DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=5.0)
_JSON_HEADERS = {"Content-Type": "application/json"}

ErrorCallback = Callable[[Exception], None]


class RemoteInvocationDispatcher:
    """POSTs :class:`InvocationRequest` envelopes without blocking the caller.

    Success is never reported. Any failure (refused connection, timeout,
    non-2xx status) reaches ``on_error`` exactly once.
    """

    def __init__(
        self,
        *,
        host: str = DEFAULT_HOST,
        timeout: httpx.Timeout | float = _DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._host = host
        self._timeout = timeout
        self._transport = transport
        self._tasks: set[asyncio.Task[None]] = set()

    def endpoint(self, port: int) -> str:
        return f"http://{self._host}:{port}{RUN_PATH}"

    def send(self, request: InvocationRequest, port: int, on_error: ErrorCallback) -> None:
        """Schedule the POST on the running loop, or on a worker thread when none runs."""

        coro = self._post(request, port, on_error)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._run_in_thread(coro)
            return
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def aclose(self) -> None:
        """Wait for requests scheduled on the current loop to settle."""

        pending = [task for task in self._tasks if not task.done()]
        if pending:
            LOGGER.debug("Waiting on %d in-flight any door request(s)", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)

    async def _post(self, request: InvocationRequest, port: int, on_error: ErrorCallback) -> None:
        url = self.endpoint(port)
        LOGGER.debug("Dispatching %s#%s to %s", request.class_name, request.method_name, url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, content=request.to_json().encode("utf-8"), headers=_JSON_HEADERS)
                response.raise_for_status()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOGGER.debug("any door request to %s failed: %s", url, exc)
            _report(on_error, exc)
            return
        LOGGER.debug("any door accepted %s#%s (%s)", request.class_name, request.method_name, response.status_code)

    @staticmethod
    def _run_in_thread(coro: Coroutine[Any, Any, None]) -> None:
        thread = threading.Thread(target=asyncio.run, args=(coro,), name="anydoor-dispatch", daemon=True)
        thread.start()


def _report(on_error: ErrorCallback, exc: Exception) -> None:
    try:
        on_error(exc)
    except Exception:
        LOGGER.exception("any door error callback raised")
