"""Pydantic models for request dispatch.

ClientConfig describes how the shared transport is built, RequestSpec
describes one request and RequestOutcome is the normalized result of
running it.
"""

import os
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from httpdispatch.exceptions import DispatchConfigError

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TIMEOUT_S = 5.0
DEFAULT_MAX_REDIRECTS = 20
FAILURE_STATUS_CODE = 404  # also a genuine HTTP status, see RequestOutcome
ENV_PREFIX = "HTTPDISPATCH_"

# Characters removed from every URL before a request is built.
URL_STRIP_CHARS = (" ", "\n", "\r")


def sanitize_url(url: str) -> str:
    """Remove spaces and line breaks from a URL."""
    for char in URL_STRIP_CHARS:
        url = url.replace(char, "")
    return url


# =============================================================================
# Environment helpers
# =============================================================================


def _float_env(name: str, default: float) -> float:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise DispatchConfigError(f"{ENV_PREFIX}{name} must be a number, got {value!r}") from e


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise DispatchConfigError(f"{ENV_PREFIX}{name} must be an integer, got {value!r}") from e


def _flag_env(name: str, default: bool = False) -> bool:
    value = os.environ.get(ENV_PREFIX + name)
    if value is None:
        return default
    return value == "1"


# =============================================================================
# Client Configuration
# =============================================================================


class ClientConfig(BaseModel):
    """Transport options the shared HTTP client is built from.

    Fields:
        connect_timeout: Seconds to wait for a connection.
        write_timeout: Seconds to wait while sending the request.
        read_timeout: Seconds to wait for response data.
        follow_redirects: Follow 3xx responses.
        follow_ssl_redirects: Also follow redirects that switch between
            http and https. Only meaningful with follow_redirects.
        max_redirects: Redirect hops allowed before giving up.
    """

    connect_timeout: float = Field(default=DEFAULT_TIMEOUT_S, gt=0)
    write_timeout: float = Field(default=DEFAULT_TIMEOUT_S, gt=0)
    read_timeout: float = Field(default=DEFAULT_TIMEOUT_S, gt=0)
    follow_redirects: bool = False
    follow_ssl_redirects: bool = False
    max_redirects: int = Field(default=DEFAULT_MAX_REDIRECTS, ge=0)

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Create a config from environment variables.

        Optional environment variables:
            HTTPDISPATCH_CONNECT_TIMEOUT: Connect timeout in seconds.
            HTTPDISPATCH_WRITE_TIMEOUT: Write timeout in seconds.
            HTTPDISPATCH_READ_TIMEOUT: Read timeout in seconds.
            HTTPDISPATCH_FOLLOW_REDIRECTS: Set to "1" to follow redirects.
            HTTPDISPATCH_FOLLOW_SSL_REDIRECTS: Set to "1" to follow
                redirects across http/https.
            HTTPDISPATCH_MAX_REDIRECTS: Maximum redirect hops.

        Returns:
            A ClientConfig; unset variables keep their defaults.

        Raises:
            DispatchConfigError: If a numeric variable is malformed.
        """
        return cls(
            connect_timeout=_float_env("CONNECT_TIMEOUT", DEFAULT_TIMEOUT_S),
            write_timeout=_float_env("WRITE_TIMEOUT", DEFAULT_TIMEOUT_S),
            read_timeout=_float_env("READ_TIMEOUT", DEFAULT_TIMEOUT_S),
            follow_redirects=_flag_env("FOLLOW_REDIRECTS"),
            follow_ssl_redirects=_flag_env("FOLLOW_SSL_REDIRECTS"),
            max_redirects=_int_env("MAX_REDIRECTS", DEFAULT_MAX_REDIRECTS),
        )


# =============================================================================
# Request / Outcome
# =============================================================================


class RequestSpec(BaseModel):
    """Immutable description of a single HTTP request.

    The URL is sanitized on construction (spaces and line breaks removed).
    """

    url: str
    method: Literal["GET", "POST"] = "GET"
    body: bytes | None = None
    content_type: str | None = None

    model_config = {"frozen": True}

    @field_validator("url", mode="before")
    @classmethod
    def strip_url(cls, v: str) -> str:
        if isinstance(v, str):
            return sanitize_url(v)
        return v


class RequestOutcome(BaseModel):
    """Normalized result of one transport attempt.

    On failure ``status_code`` holds FAILURE_STATUS_CODE and ``error`` the
    failure message, so a real HTTP 404 and an internal failure share a code.
    """

    status_code: int
    body: str | None = None
    error: str | None = None

    model_config = {"frozen": True}

    @property
    def failed(self) -> bool:
        """True when the transport failed rather than returning a response."""
        return self.error is not None

    @classmethod
    def from_error(cls, error: BaseException) -> "RequestOutcome":
        return cls(status_code=FAILURE_STATUS_CODE, error=str(error))

    @property
    def message(self) -> str | None:
        """Text handed to callbacks: the body, or the error message on failure."""
        return self.error if self.failed else self.body
