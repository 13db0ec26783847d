"""Callback contract for dispatched requests.

Any object with ``is_request_ok``, ``on_success``, ``on_failed`` and
``on_finished`` can receive results. ``DefaultRequestCallback`` provides the
no-op behaviour and the 2xx policy; ``CallbackAdapter`` builds a callback
from plain functions.
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable


def is_2xx(code: int) -> bool:
    return 200 <= code < 300


@runtime_checkable
class RequestCallback(Protocol):
    """Receives the result of one request on the delivery loop.

    For every dispatched request exactly one of ``on_success`` or
    ``on_failed`` is called, followed by exactly one ``on_finished``.
    """

    def is_request_ok(self, code: int) -> bool: ...

    def on_success(self, code: int, body: str) -> None: ...

    def on_failed(self, code: int, message: str) -> None: ...

    def on_finished(self) -> None: ...


class DefaultRequestCallback:
    """No-op callback with the default "2xx is ok" policy.

    Subclass and override only the methods you need.
    """

    def is_request_ok(self, code: int) -> bool:
        return is_2xx(code)

    def on_success(self, code: int, body: str) -> None:
        pass

    def on_failed(self, code: int, message: str) -> None:
        pass

    def on_finished(self) -> None:
        pass


class CallbackAdapter(DefaultRequestCallback):
    """Callback assembled from optional functions.

    Example:
        dispatcher.get(
            "https://example.com/sub",
            CallbackAdapter(on_success=lambda code, body: print(body)),
        )
    """

    def __init__(
        self,
        *,
        on_success: Callable[[int, str], None] | None = None,
        on_failed: Callable[[int, str], None] | None = None,
        on_finished: Callable[[], None] | None = None,
        is_request_ok: Callable[[int], bool] | None = None,
    ) -> None:
        self._on_success = on_success
        self._on_failed = on_failed
        self._on_finished = on_finished
        self._is_request_ok = is_request_ok

    def is_request_ok(self, code: int) -> bool:
        if self._is_request_ok is not None:
            return self._is_request_ok(code)
        return super().is_request_ok(code)

    def on_success(self, code: int, body: str) -> None:
        if self._on_success is not None:
            self._on_success(code, body)

    def on_failed(self, code: int, message: str) -> None:
        if self._on_failed is not None:
            self._on_failed(code, message)

    def on_finished(self) -> None:
        if self._on_finished is not None:
            self._on_finished()
