"""Public exceptions for httpdispatch."""


class HttpDispatchError(Exception):
    """Base exception for all httpdispatch errors."""


class RequestBuildError(HttpDispatchError):
    """A request could not be built from its spec (malformed URL, bad scheme)."""


class TransportError(HttpDispatchError):
    """Network or IO failure while executing a request.

    The originating httpx exception is available as ``__cause__``.
    """


class DispatchConfigError(HttpDispatchError):
    """Configuration error (malformed env vars, invalid config)."""
