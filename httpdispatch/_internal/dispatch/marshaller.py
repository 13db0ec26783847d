"""Delivery of request results to the designated consumption context.

Workers never call callbacks themselves. They post work to a delivery loop,
and the loop runs it on the single context that owns the callbacks (a
dedicated thread, the application's main thread, or an asyncio event loop).
"""

import asyncio
import queue
import sys
import threading
import time
from collections.abc import Callable
from functools import partial
from typing import Protocol

from httpdispatch._internal.dispatch.callback import RequestCallback
from httpdispatch._internal.dispatch.models import FAILURE_STATUS_CODE

DEFAULT_LOOP_THREAD_NAME = "request_helper-main"
EMPTY_SUCCESS_BODY = ""
EMPTY_FAILURE_BODY = "null"

Task = Callable[[], None]

_STOP = object()


class DeliveryLoop(Protocol):
    """Single-consumer context that runs posted tasks in order."""

    def post(self, task: Task) -> None: ...


class _LoopBase:
    _log_prefix = "[httpdispatch:loop]"

    def __init__(self, *, debug: bool = False) -> None:
        self._debug = debug

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"{self._log_prefix} {message}", file=sys.stderr)

    def _run_task(self, task: Task) -> None:
        try:
            task()
        except Exception as e:
            self._log_debug(f"Delivery task raised: {e!r}")


class QueueDeliveryLoop(_LoopBase):
    """Delivery loop backed by an unbounded queue.

    Either call ``start()`` to consume the queue on a dedicated daemon
    thread, or drive it from the owning thread with ``run_pending()`` /
    ``run_until()``. Only one context may consume the queue.
    """

    def __init__(self, *, debug: bool = False) -> None:
        super().__init__(debug=debug)
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._thread: threading.Thread | None = None

    @property
    def thread(self) -> threading.Thread | None:
        """The dedicated consumer thread, if started."""
        return self._thread

    def post(self, task: Task) -> None:
        self._queue.put(task)

    def start(self, name: str = DEFAULT_LOOP_THREAD_NAME) -> None:
        """Consume the queue on a dedicated daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run_forever, name=name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop the dedicated thread after it drains already-posted tasks."""
        thread = self._thread
        if thread is None:
            return
        self._queue.put(_STOP)
        thread.join(timeout)
        self._thread = None

    def _run_forever(self) -> None:
        while True:
            task = self._queue.get()
            if task is _STOP:
                break
            self._run_task(task)

    def run_pending(self, timeout: float = 0.0) -> int:
        """Run queued tasks on the calling thread.

        Args:
            timeout: Seconds to wait for the first task when the queue is empty.

        Returns:
            The number of tasks run.
        """
        thread = self._thread
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            raise RuntimeError("delivery loop is consumed by its own thread")

        ran = 0
        try:
            task = self._queue.get(timeout=timeout) if timeout > 0 else self._queue.get_nowait()
        except queue.Empty:
            return ran
        while True:
            if task is not _STOP:
                self._run_task(task)
                ran += 1
            try:
                task = self._queue.get_nowait()
            except queue.Empty:
                return ran

    def run_until(self, predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
        """Run tasks on the calling thread until ``predicate()`` holds.

        Returns:
            True if the predicate held before the timeout expired.
        """
        deadline = time.monotonic() + timeout
        while not predicate():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self.run_pending(timeout=min(remaining, 0.05))
        return True


class AsyncioDeliveryLoop(_LoopBase):
    """Delivery loop that runs tasks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, *, debug: bool = False) -> None:
        super().__init__(debug=debug)
        self._loop = loop

    def post(self, task: Task) -> None:
        self._loop.call_soon_threadsafe(self._run_task, task)


class CallbackMarshaller:
    """Delivers results to callbacks on a delivery loop.

    Callback errors are converted into ``on_failed(404, message)`` and never
    escape onto the loop or the worker.
    """

    def __init__(self, loop: DeliveryLoop, *, debug: bool = False) -> None:
        self._loop = loop
        self._debug = debug

    @property
    def loop(self) -> DeliveryLoop:
        return self._loop

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[httpdispatch:marshaller] {message}", file=sys.stderr)

    def deliver(self, callback: RequestCallback | None, code: int, body: str | None) -> None:
        """Post the success/failure notification for one request."""
        if callback is None:
            return
        self._loop.post(partial(self._invoke, callback, code, body))

    def notify_finished(self, callback: RequestCallback | None) -> None:
        """Post the terminal notification for one request."""
        if callback is None:
            return
        self._loop.post(partial(self._finish, callback))

    def _invoke(self, callback: RequestCallback, code: int, body: str | None) -> None:
        try:
            if callback.is_request_ok(code):
                callback.on_success(code, body or EMPTY_SUCCESS_BODY)
            else:
                callback.on_failed(code, body or EMPTY_FAILURE_BODY)
        except Exception as e:
            self._log_debug(f"Callback raised, reporting as failure: {e!r}")
            try:
                callback.on_failed(FAILURE_STATUS_CODE, str(e))
            except Exception as inner:
                self._log_debug(f"on_failed raised while reporting callback error: {inner!r}")

    def _finish(self, callback: RequestCallback) -> None:
        try:
            callback.on_finished()
        except Exception as e:
            self._log_debug(f"on_finished raised: {e!r}")
