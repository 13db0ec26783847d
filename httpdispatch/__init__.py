"""Asynchronous HTTP request dispatch for Python.

Requests run on a fixed worker pool against one shared httpx client, and
results are delivered to callbacks on a single designated context.

Public API:
    RequestDispatcher - The dispatcher (``init``/``instance`` for the shared one)
    init_dispatcher, get_dispatcher - Process-wide dispatcher helpers
    ClientConfig, RequestSpec, RequestOutcome - Models
    RequestCallback, DefaultRequestCallback, CallbackAdapter - Callback contract
    QueueDeliveryLoop, AsyncioDeliveryLoop - Delivery contexts
"""

from httpdispatch._internal.dispatch import (
    AsyncioDeliveryLoop,
    CallbackAdapter,
    ClientConfig,
    DefaultRequestCallback,
    DeliveryLoop,
    QueueDeliveryLoop,
    RequestCallback,
    RequestDispatcher,
    RequestOutcome,
    RequestSpec,
    get_dispatcher,
    init_dispatcher,
)
from httpdispatch._version import __version__
from httpdispatch.exceptions import (
    DispatchConfigError,
    HttpDispatchError,
    RequestBuildError,
    TransportError,
)

__all__ = [
    "__version__",
    "RequestDispatcher",
    "init_dispatcher",
    "get_dispatcher",
    "ClientConfig",
    "RequestSpec",
    "RequestOutcome",
    "RequestCallback",
    "DefaultRequestCallback",
    "CallbackAdapter",
    "DeliveryLoop",
    "QueueDeliveryLoop",
    "AsyncioDeliveryLoop",
    "HttpDispatchError",
    "RequestBuildError",
    "TransportError",
    "DispatchConfigError",
]
