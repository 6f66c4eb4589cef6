"""
Library transport: requests executed with httpx.

httpx negotiates content compression and proxy authentication. TLS
verification is disabled and redirects are never followed here, the
engine follows them itself so cookies and history see every hop.
"""

import logging
import socket
from typing import Any, Mapping
from urllib.parse import quote

import httpx

from ..exceptions import ResponseParseError
from ..schemas.options import RequestOptions
from ..schemas.response import HTTPResponse, TRANSPORT_FAILURE_CODE, MALFORMED_RESPONSE_CODE
from ..schemas.url import ParsedURL
from .form import flatten_fields
from .response_parser import parse_response
from .timer import Timer

logger = logging.getLogger(__name__)

# Fixed messages for transport failures
DNS_FAILURE_MESSAGE = "cannot resolve host"
GENERIC_FAILURE_MESSAGE = "error occurred"

DNS_FAILURE_HINTS = ("name or service not known", "nodename nor servname", "getaddrinfo failed")


def proxy_url(options: RequestOptions) -> str:
    """
    Proxy URL for httpx, carrying the proxy credentials.

    Example:
        >>> proxy_url(RequestOptions(proxy_server="proxy.local", proxy_port=3128))
        'http://proxy.local:3128'
    """
    scheme, separator, server = options.proxy_server.partition("://")
    if not separator:
        scheme, server = "http", options.proxy_server
    auth = ""
    if options.proxy_username:
        auth = quote(options.proxy_username, safe="")
        if options.proxy_password:
            auth += ":" + quote(options.proxy_password, safe="")
        auth += "@"
    port = f":{options.proxy_port}" if options.proxy_port else ""
    return f"{scheme}://{auth}{server}{port}"


def is_dns_failure(error: BaseException) -> bool:
    """Whether a connection error was caused by host name resolution."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        if isinstance(current, socket.gaierror):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    message = str(error).lower()
    return any(hint in message for hint in DNS_FAILURE_HINTS)


def serialize_response(response: httpx.Response) -> bytes:
    """Rebuild the raw message: status line, header lines and decoded body."""
    head = f"{response.http_version} {response.status_code} {response.reason_phrase}\r\n"
    for name, value in response.headers.raw:
        head += f"{name.decode('latin-1')}: {value.decode('latin-1')}\r\n"
    return head.encode("latin-1") + b"\r\n" + response.content


def serialize_request(request: httpx.Request, http_version: str = "HTTP/1.1") -> str:
    """Request line and headers as they were sent."""
    text = f"{request.method} {request.url.raw_path.decode('ascii')} {http_version}\r\n"
    for name, value in request.headers.raw:
        text += f"{name.decode('latin-1')}: {value.decode('latin-1')}\r\n"
    return text + "\r\n"


class LibraryTransport:
    """
    Transport delegating the exchange to `httpx.Client`.

    Args:
        transport: Optional httpx transport used by every client, tests
            pass an `httpx.MockTransport`
    """

    def __init__(self, transport: httpx.BaseTransport | None = None):
        self._transport = transport

    def client_options(self, parsed_url: ParsedURL, options: RequestOptions, timeout: float) -> dict[str, Any]:
        """Keyword arguments for `httpx.Client`."""
        kwargs: dict[str, Any] = {
            "timeout": timeout,
            "verify": False,
            "follow_redirects": False,
        }
        if options.uses_proxy_for(parsed_url.host):
            kwargs["proxy"] = proxy_url(options)
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    def request_options(
        self,
        options: RequestOptions,
        headers: Mapping[str, str],
        post: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Keyword arguments for `httpx.Client.request`."""
        outgoing = dict(headers)
        lowered = {name.lower() for name in outgoing}
        if options.referer and "referer" not in lowered:
            outgoing["Referer"] = options.referer
        if options.encoding and "accept-encoding" not in lowered:
            outgoing["Accept-Encoding"] = options.encoding

        kwargs: dict[str, Any] = {"method": options.method, "headers": outgoing}
        if post:
            # Plain fields sent as multipart/form-data parts without file names.
            kwargs["method"] = "POST"
            kwargs["files"] = [
                (name, (None, value.encode("utf-8"))) for name, value in flatten_fields(post)
            ]
        elif options.data:
            kwargs["content"] = options.data
        return kwargs

    def send(
        self,
        url: str,
        parsed_url: ParsedURL,
        options: RequestOptions,
        headers: Mapping[str, str],
        post: Mapping[str, Any],
        timer: Timer,
    ) -> HTTPResponse:
        remaining = timer.remaining(options.timeout)
        if remaining <= 0:
            return HTTPResponse.timed_out()

        try:
            with httpx.Client(**self.client_options(parsed_url, options, remaining)) as client:
                response = client.request(url=url, **self.request_options(options, headers, post))
        except httpx.TimeoutException:
            logger.warning("Request to %s timed out", url)
            return HTTPResponse.timed_out()
        except httpx.ConnectError as e:
            logger.warning("Cannot connect to %s: %s", url, e)
            if is_dns_failure(e):
                return HTTPResponse.failure(TRANSPORT_FAILURE_CODE, DNS_FAILURE_MESSAGE)
            return HTTPResponse.failure(TRANSPORT_FAILURE_CODE, GENERIC_FAILURE_MESSAGE)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("HTTP error on %s: %s", url, e)
            return HTTPResponse.failure(TRANSPORT_FAILURE_CODE, GENERIC_FAILURE_MESSAGE)

        request = serialize_request(response.request, response.http_version)
        try:
            result = parse_response(serialize_response(response))
        except ResponseParseError as e:
            logger.warning("Cannot parse response from %s: %s", url, e.detail)
            return HTTPResponse.failure(MALFORMED_RESPONSE_CODE, "malformed response", request)
        result.request = request
        return result

    def __repr__(self) -> str:
        return '<LibraryTransport>'
