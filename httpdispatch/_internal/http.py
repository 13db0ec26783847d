"""Shared HTTP client configuration."""

import httpx

from httpdispatch._internal.dispatch.models import ClientConfig, RequestSpec
from httpdispatch._version import __version__
from httpdispatch.exceptions import RequestBuildError, TransportError

ALLOWED_SCHEMES = ("http", "https")


def create_http_client(
    config: ClientConfig,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create the configured HTTP client.

    Redirects are never followed by httpx itself; ``send_request`` applies
    the redirect policy from the config.

    Args:
        config: Timeouts and redirect policy.
        transport: Optional transport override (e.g. httpx.MockTransport).

    Returns:
        Configured httpx.Client instance.
    """
    timeout = httpx.Timeout(
        config.connect_timeout,
        connect=config.connect_timeout,
        read=config.read_timeout,
        write=config.write_timeout,
    )
    return httpx.Client(
        timeout=timeout,
        follow_redirects=False,
        transport=transport,
        headers={"User-Agent": f"httpdispatch/{__version__}"},
    )


def build_request(client: httpx.Client, spec: RequestSpec) -> httpx.Request:
    """Build an httpx request from a spec.

    Raises:
        RequestBuildError: If the URL is malformed, has no host, is not
            http/https, or the headers cannot be encoded.
    """
    try:
        url = httpx.URL(spec.url)
    except httpx.InvalidURL as e:
        raise RequestBuildError(str(e)) from e

    if not url.scheme:
        raise RequestBuildError(
            f"Expected URL scheme 'http' or 'https' but no scheme was found for {spec.url!r}"
        )
    if url.scheme not in ALLOWED_SCHEMES:
        raise RequestBuildError(
            f"Expected URL scheme 'http' or 'https' but was {url.scheme!r}"
        )
    if not url.host:
        raise RequestBuildError(f"Invalid URL host: {spec.url!r}")

    headers = {"Content-Type": spec.content_type} if spec.content_type else None
    try:
        return client.build_request(spec.method, url, content=spec.body, headers=headers)
    except (httpx.InvalidURL, ValueError) as e:
        raise RequestBuildError(str(e)) from e


def send_request(
    client: httpx.Client,
    request: httpx.Request,
    config: ClientConfig,
) -> httpx.Response:
    """Send a request, following redirects as the config allows.

    The returned response is open in streaming mode; the caller closes it.
    A redirect that switches scheme is returned as-is unless
    ``follow_ssl_redirects`` is set.

    Raises:
        TransportError: On any httpx failure or too many redirects.
    """
    hops = 0
    try:
        response = client.send(request, stream=True)
        while config.follow_redirects and response.next_request is not None:
            next_request = response.next_request
            if (
                next_request.url.scheme != response.request.url.scheme
                and not config.follow_ssl_redirects
            ):
                break
            response.close()
            if hops >= config.max_redirects:
                raise TransportError(f"Too many follow-up requests: {hops + 1}")
            hops += 1
            response = client.send(next_request, stream=True)
    except httpx.HTTPError as e:
        raise TransportError(str(e)) from e
    return response
