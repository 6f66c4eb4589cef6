"""
Socket transport: HTTP/1.0 over a plain or TLS socket.

Every connect, write and read is bounded by what is left of the request
timeout, measured with the engine's timer so the budget is shared by a
whole redirect chain.
"""

import logging
import socket
import ssl
from typing import Any, Mapping

from .. import __version__
from ..exceptions import ResponseParseError
from ..schemas.options import RequestOptions
from ..schemas.response import (
    HTTPResponse,
    INVALID_SCHEME_CODE,
    MALFORMED_RESPONSE_CODE,
)
from ..schemas.url import ParsedURL
from .form import build_query
from .property_bag import PropertyBag
from .response_parser import parse_response
from .timer import Timer
from .transport import basic_credentials

logger = logging.getLogger(__name__)

# Size of each read from the socket
READ_CHUNK_SIZE = 1024

DEFAULT_USER_AGENT = f"http_browser/{__version__}"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class _TimedOut(Exception):
    """The timeout budget ran out during the exchange."""


def unverified_context() -> ssl.SSLContext:
    """TLS context that accepts any certificate."""
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class SocketTransport:
    """
    Transport writing requests directly to a socket.

    Methods for the caller:

    - send(url, parsed_url, options, headers, post, timer)

    """

    def __init__(self, chunk_size: int = READ_CHUNK_SIZE):
        self.chunk_size = chunk_size

    def build_request(
        self,
        url: str,
        parsed_url: ParsedURL,
        options: RequestOptions,
        headers: Mapping[str, str],
        post: Mapping[str, Any],
    ) -> tuple[str, str, tuple[str, int], bytes]:
        """
        Prepare the exchange.

        Returns:
            Tuple of (connection scheme, request head, socket address, body).
            The connection scheme is "proxy" when the request goes through
            the configured proxy.
        """
        outgoing = PropertyBag(headers, case_insensitive=True)
        if "User-Agent" not in outgoing:
            outgoing.set("User-Agent", DEFAULT_USER_AGENT)

        method = options.method
        data = options.data or b""
        if post:
            outgoing.set("Content-Type", FORM_CONTENT_TYPE)
            method = "POST"
            data = build_query(post)
        if isinstance(data, str):
            data = data.encode("utf-8")

        scheme = parsed_url.scheme
        path = parsed_url.request_target
        if options.uses_proxy_for(parsed_url.host):
            scheme = "proxy"
            # The proxy gets the absolute URL on the request line.
            path = url
            if options.proxy_username:
                outgoing.set(
                    "Proxy-Authorization",
                    basic_credentials(options.proxy_username, options.proxy_password or None),
                )
            # Some proxies reject any User-Agent, others require a specific one.
            if options.proxy_user_agent is None:
                outgoing.set("User-Agent", None)
            elif options.proxy_user_agent:
                outgoing.set("User-Agent", options.proxy_user_agent)

        if scheme == "proxy":
            address = (options.proxy_server, options.proxy_port)
        else:
            address = (parsed_url.host, parsed_url.effective_port)
        outgoing.set("Host", parsed_url.host_header)

        # Some servers get confused by Content-Length on GET requests.
        if data or method in ("POST", "PUT"):
            outgoing.set("Content-Length", str(len(data)))

        if parsed_url.user is not None:
            outgoing.set("Authorization", basic_credentials(parsed_url.user, parsed_url.password or ""))

        head = f"{method} {path} HTTP/1.0\r\n"
        for name, value in outgoing.get_all().items():
            head += f"{name}: {str(value).strip()}\r\n"
        head += "\r\n"
        return scheme, head, address, data

    def send(
        self,
        url: str,
        parsed_url: ParsedURL,
        options: RequestOptions,
        headers: Mapping[str, str],
        post: Mapping[str, Any],
        timer: Timer,
    ) -> HTTPResponse:
        if parsed_url.scheme not in ("http", "https"):
            return HTTPResponse.failure(INVALID_SCHEME_CODE, f"invalid schema {parsed_url.scheme}")

        scheme, head, address, data = self.build_request(url, parsed_url, options, headers, post)
        request = head + data.decode("utf-8", errors="replace")

        remaining = timer.remaining(options.timeout)
        if remaining <= 0:
            return HTTPResponse.timed_out(request)

        try:
            sock = self._connect(address, scheme == "https", parsed_url.host, options.context, remaining)
        except TimeoutError:
            return HTTPResponse.timed_out(request)
        except OSError as e:
            # Negative codes keep network errors apart from HTTP status codes.
            code = -abs(e.errno) if e.errno else -1
            error = (e.strerror or str(e)).strip() or "Error opening socket %s:%s" % address
            logger.warning("Cannot connect to %s:%s: %s", address[0], address[1], error)
            return HTTPResponse.failure(code, error, request)

        try:
            with sock:
                raw = self._exchange(sock, head.encode("utf-8") + data, options.timeout, timer)
        except (_TimedOut, TimeoutError):
            logger.warning("Request to %s timed out", url)
            return HTTPResponse.timed_out(request)
        except OSError as e:
            code = -abs(e.errno) if e.errno else -1
            logger.warning("Socket error on %s: %s", url, e)
            return HTTPResponse.failure(code, (e.strerror or str(e)).strip() or "socket error", request)

        try:
            result = parse_response(raw)
        except ResponseParseError as e:
            logger.warning("Cannot parse response from %s: %s", url, e.detail)
            return HTTPResponse.failure(MALFORMED_RESPONSE_CODE, "malformed response", request)
        result.request = request
        return result

    def _connect(
        self,
        address: tuple[str, int],
        tls: bool,
        server_hostname: str,
        context: ssl.SSLContext | None,
        timeout: float,
    ) -> socket.socket:
        sock = socket.create_connection(address, timeout=timeout)
        if not tls:
            return sock
        try:
            return (context or unverified_context()).wrap_socket(sock, server_hostname=server_hostname)
        except BaseException:
            sock.close()
            raise

    def _exchange(self, sock: socket.socket, payload: bytes, timeout: float, timer: Timer) -> bytes:
        """Write the request and read until the peer closes the connection."""
        self._set_budget(sock, timeout, timer)
        sock.sendall(payload)

        chunks: list[bytes] = []
        while True:
            self._set_budget(sock, timeout, timer)
            chunk = sock.recv(self.chunk_size)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)

    def _set_budget(self, sock: socket.socket, timeout: float, timer: Timer) -> None:
        remaining = timer.remaining(timeout)
        if remaining <= 0:
            raise _TimedOut()
        sock.settimeout(remaining)

    def __repr__(self) -> str:
        return '<SocketTransport>'
