"""Fixed-size worker pool for running requests off the caller's thread."""

import sys
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

DEFAULT_POOL_SIZE = 10
DEFAULT_THREAD_NAME = "request_helper-thread"


class WorkerPool:
    """Named thread pool with an unbounded queue.

    ``submit`` never blocks and never rejects. There is no priority and no
    cancellation of in-flight work.
    """

    def __init__(
        self,
        size: int = DEFAULT_POOL_SIZE,
        *,
        name: str = DEFAULT_THREAD_NAME,
        debug: bool = False,
    ) -> None:
        """Initialize the pool.

        Args:
            size: Number of worker threads.
            name: Thread name prefix, for diagnostics.
            debug: Enable debug logging to stderr.
        """
        if size < 1:
            raise ValueError("pool size must be at least 1")
        self._size = size
        self._debug = debug
        self._executor = ThreadPoolExecutor(max_workers=size, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._submitted = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def submitted(self) -> int:
        """Number of tasks accepted so far."""
        with self._lock:
            return self._submitted

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[httpdispatch:pool] {message}", file=sys.stderr)

    def submit(self, task: Callable[[], None]) -> Future:
        """Queue a task for a worker and return immediately."""
        future = self._executor.submit(task)
        with self._lock:
            self._submitted += 1
        future.add_done_callback(self._report_failure)
        return future

    def _report_failure(self, future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            self._log_debug(f"Task raised: {exc!r}")

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work. Only for pools owned by a closed dispatcher."""
        self._executor.shutdown(wait=wait)
