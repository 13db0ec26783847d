"""Shared test helpers."""

import threading

import pytest

from httpdispatch import DefaultRequestCallback, QueueDeliveryLoop


class RecordingCallback(DefaultRequestCallback):
    """Records every notification together with the thread it ran on."""

    def __init__(self, *, raise_on_success: Exception | None = None) -> None:
        self.events: list[tuple] = []
        self.threads: set[int] = set()
        self._raise_on_success = raise_on_success
        self._lock = threading.Lock()

    def _record(self, event: tuple) -> None:
        with self._lock:
            self.events.append(event)
            self.threads.add(threading.get_ident())

    def on_success(self, code: int, body: str) -> None:
        self._record(("success", code, body))
        if self._raise_on_success is not None:
            raise self._raise_on_success

    def on_failed(self, code: int, message: str) -> None:
        self._record(("failed", code, message))

    def on_finished(self) -> None:
        self._record(("finished",))

    @property
    def finished_count(self) -> int:
        with self._lock:
            return sum(1 for event in self.events if event[0] == "finished")


@pytest.fixture
def recorder() -> RecordingCallback:
    return RecordingCallback()


@pytest.fixture
def loop() -> QueueDeliveryLoop:
    """A delivery loop driven by the test thread."""
    return QueueDeliveryLoop()


@pytest.fixture
def make_recorder():
    """Factory for RecordingCallback instances."""
    return RecordingCallback
