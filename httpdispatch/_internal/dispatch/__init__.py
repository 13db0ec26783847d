"""Request dispatch: worker pool, transport and callback delivery."""

from httpdispatch._internal.dispatch.callback import (
    CallbackAdapter,
    DefaultRequestCallback,
    RequestCallback,
)
from httpdispatch._internal.dispatch.client import (
    RequestDispatcher,
    get_dispatcher,
    init_dispatcher,
)
from httpdispatch._internal.dispatch.marshaller import (
    AsyncioDeliveryLoop,
    CallbackMarshaller,
    DeliveryLoop,
    QueueDeliveryLoop,
)
from httpdispatch._internal.dispatch.models import ClientConfig, RequestOutcome, RequestSpec
from httpdispatch._internal.dispatch.pool import WorkerPool

__all__ = [
    "RequestDispatcher",
    "get_dispatcher",
    "init_dispatcher",
    "RequestCallback",
    "DefaultRequestCallback",
    "CallbackAdapter",
    "CallbackMarshaller",
    "DeliveryLoop",
    "QueueDeliveryLoop",
    "AsyncioDeliveryLoop",
    "ClientConfig",
    "RequestSpec",
    "RequestOutcome",
    "WorkerPool",
]
