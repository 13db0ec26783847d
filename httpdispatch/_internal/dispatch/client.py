"""Asynchronous request dispatcher."""

import sys
import threading
from functools import partial

import httpx
from pydantic import ValidationError

from httpdispatch._internal.dispatch.callback import DefaultRequestCallback, RequestCallback
from httpdispatch._internal.dispatch.marshaller import (
    CallbackMarshaller,
    DeliveryLoop,
    QueueDeliveryLoop,
)
from httpdispatch._internal.dispatch.models import (
    FAILURE_STATUS_CODE,
    ClientConfig,
    RequestOutcome,
    RequestSpec,
    _flag_env,
    _int_env,
)
from httpdispatch._internal.dispatch.pool import DEFAULT_POOL_SIZE, WorkerPool
from httpdispatch._internal.http import build_request, create_http_client, send_request
from httpdispatch.exceptions import RequestBuildError


class RequestDispatcher:
    """Runs HTTP requests on a worker pool and reports back through callbacks.

    Every request handed to ``get``, ``post`` or ``execute`` produces exactly
    one ``on_success`` or ``on_failed`` followed by one ``on_finished``. For
    requests that reach the pool these run on the delivery loop; requests
    that cannot be built are reported synchronously on the caller's thread.

    Use ``RequestDispatcher.instance()`` for the process-wide dispatcher, or
    construct one directly and pass it to the code that needs it.
    """

    _instance: "RequestDispatcher | None" = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        pool_size: int = DEFAULT_POOL_SIZE,
        delivery_loop: DeliveryLoop | None = None,
        transport: httpx.BaseTransport | None = None,
        debug: bool = False,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            config: Transport options. Defaults to ``ClientConfig()``.
            pool_size: Number of worker threads.
            delivery_loop: Context callbacks run on. Defaults to a
                QueueDeliveryLoop consumed by its own daemon thread.
            transport: Optional httpx transport override.
            debug: Enable debug logging to stderr.
        """
        self._config = config or ClientConfig()
        self._debug = debug
        self._client = create_http_client(self._config, transport=transport)
        self._pool = WorkerPool(pool_size, debug=debug)

        self._owned_loop: QueueDeliveryLoop | None = None
        if delivery_loop is None:
            self._owned_loop = QueueDeliveryLoop(debug=debug)
            self._owned_loop.start()
            delivery_loop = self._owned_loop
        self._marshaller = CallbackMarshaller(delivery_loop, debug=debug)
        self._default_callback = DefaultRequestCallback()

    # =========================================================================
    # Process-wide instance
    # =========================================================================

    @classmethod
    def init(cls, config: ClientConfig | None = None) -> "RequestDispatcher":
        """Create the process-wide dispatcher once.

        Later calls return the existing dispatcher and ignore ``config``.

        Optional environment variables (read on first creation):
            HTTPDISPATCH_POOL_SIZE: Number of worker threads.
            HTTPDISPATCH_DEBUG: Set to "1" to enable debug logging.
            See ClientConfig.from_env for the transport variables, used
            when no config is given.
        """
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls(
                        config or ClientConfig.from_env(),
                        pool_size=_int_env("POOL_SIZE", DEFAULT_POOL_SIZE),
                        debug=_flag_env("DEBUG"),
                    )
        return cls._instance

    @classmethod
    def instance(cls) -> "RequestDispatcher":
        """Return the process-wide dispatcher, creating it if needed."""
        return cls.init()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def http_client(self) -> httpx.Client:
        return self._client

    @property
    def pool(self) -> WorkerPool:
        return self._pool

    @property
    def delivery_loop(self) -> DeliveryLoop:
        return self._marshaller.loop

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._debug:
            print(f"[httpdispatch] {message}", file=sys.stderr)

    # =========================================================================
    # Requests
    # =========================================================================

    def get(self, url: str, callback: RequestCallback | None = None) -> None:
        """Send a GET request without blocking.

        Args:
            url: Request URL. Spaces and line breaks are stripped.
            callback: Receives the result. Optional.
        """
        try:
            spec = RequestSpec(url=url)
        except ValidationError as e:
            self._fail_unbuilt(callback or self._default_callback, e)
            return
        self.execute(spec, callback)

    def post(
        self,
        url: str,
        body: bytes | str,
        callback: RequestCallback | None = None,
        *,
        content_type: str | None = None,
    ) -> None:
        """Send a POST request without blocking.

        Args:
            url: Request URL. Spaces and line breaks are stripped.
            body: Request body; str is encoded as UTF-8.
            callback: Receives the result. Optional.
            content_type: Optional Content-Type header value.
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        try:
            spec = RequestSpec(url=url, method="POST", body=body, content_type=content_type)
        except ValidationError as e:
            self._fail_unbuilt(callback or self._default_callback, e)
            return
        self.execute(spec, callback)

    def execute(self, spec: RequestSpec, callback: RequestCallback | None = None) -> None:
        """Queue a request on the worker pool and return immediately.

        A request that cannot be built is reported to ``callback``
        synchronously and never reaches the pool.
        """
        if callback is None:
            callback = self._default_callback

        try:
            request = build_request(self._client, spec)
        except RequestBuildError as e:
            self._fail_unbuilt(callback, e)
            return

        self._pool.submit(partial(self._run_request, request, callback))

    def execute_sync(self, spec: RequestSpec) -> httpx.Response:
        """Run a request on the calling thread.

        Returns:
            The response, open in streaming mode. Close it when done.

        Raises:
            RequestBuildError: If the request cannot be built.
            TransportError: If the request fails in transport.
        """
        return send_request(self._client, build_request(self._client, spec), self._config)

    def close(self) -> None:
        """Release the pool, the HTTP client and the owned delivery thread.

        Only for dispatchers created directly; the process-wide dispatcher
        lives for the whole process.
        """
        self._pool.shutdown(wait=True)
        self._client.close()
        if self._owned_loop is not None:
            self._owned_loop.stop()

    # =========================================================================
    # Internals
    # =========================================================================

    def _fail_unbuilt(self, callback: RequestCallback, error: Exception) -> None:
        self._log_debug(f"Request not built: {error}")
        try:
            callback.on_failed(FAILURE_STATUS_CODE, str(error))
        except Exception as e:
            self._log_debug(f"on_failed raised: {e!r}")
        finally:
            try:
                callback.on_finished()
            except Exception as e:
                self._log_debug(f"on_finished raised: {e!r}")

    def _run_request(self, request: httpx.Request, callback: RequestCallback) -> None:
        """Worker body: send, read and release the response, then deliver."""
        self._log_debug(f"{request.method} {request.url}")
        try:
            outcome = self._fetch(request)
            self._marshaller.deliver(callback, outcome.status_code, outcome.message)
        finally:
            self._marshaller.notify_finished(callback)

    def _fetch(self, request: httpx.Request) -> RequestOutcome:
        try:
            response = send_request(self._client, request, self._config)
        except Exception as e:
            self._log_debug(f"Request failed: {e}")
            return RequestOutcome.from_error(e)

        try:
            response.read()
            return RequestOutcome(status_code=response.status_code, body=response.text)
        except Exception as e:
            self._log_debug(f"Reading response failed: {e}")
            return RequestOutcome.from_error(e)
        finally:
            response.close()


def init_dispatcher(config: ClientConfig | None = None) -> RequestDispatcher:
    """Create the process-wide dispatcher if it does not exist yet.

    Returns:
        The process-wide RequestDispatcher.
    """
    return RequestDispatcher.init(config)


def get_dispatcher() -> RequestDispatcher:
    """Get the process-wide dispatcher, configured from the environment on first use.

    Returns:
        The process-wide RequestDispatcher.
    """
    return RequestDispatcher.instance()
