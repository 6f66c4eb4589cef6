"""
Request engine: URL state, options, headers, post fields and the
execute / follow-location loop.

Redirects are followed in a bounded loop. Each hop decrements
`max_redirects` and the whole chain shares one timer, so the timeout
budget covers every hop together.
"""

import logging
from typing import Any, Mapping
from urllib.parse import unquote, urljoin, urlsplit

from pydantic import ValidationError

from ..exceptions import URLValidationError
from ..schemas.options import RequestOptions
from ..schemas.response import HTTPResponse, TIMEOUT_CODE, TIMEOUT_MESSAGE
from ..schemas.url import ParsedURL
from .property_bag import PropertyBag
from .timer import Timer
from .transport import Transport
from .transport_library import LibraryTransport

logger = logging.getLogger(__name__)

URL_NOT_SET_MESSAGE = "URL not set yet, request canceled"

SUPPORTED_SCHEMES = ("http", "https")


def parse_url(url: str) -> ParsedURL:
    """
    Validate a URL and split it into its components.

    Args:
        url: Absolute http or https URL

    Returns:
        ParsedURL with the path defaulting to "/"

    Raises:
        URLValidationError: When the scheme is missing or unsupported,
            the host is missing, or the URL cannot be split
    """
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as e:
        raise URLValidationError(f'Invalid URL "{url}": {e}.')

    if not parts.scheme:
        raise URLValidationError(f'Scheme of URL is unknown: "{url}".')
    if parts.scheme.lower() not in SUPPORTED_SCHEMES:
        raise URLValidationError(f'Scheme of URL must be http or https: "{url}".')
    if not parts.hostname:
        raise URLValidationError(f'Host of URL is unknown: "{url}".')

    return ParsedURL(
        scheme=parts.scheme.lower(),
        host=parts.hostname,
        port=port,
        # Cookie matching needs a path, use the root when absent.
        path=parts.path or "/",
        query=parts.query or None,
        fragment=parts.fragment or None,
        user=unquote(parts.username) if parts.username is not None else None,
        password=unquote(parts.password) if parts.password is not None else None,
    )


class RequestEngine:
    """
    Executes HTTP requests and follows redirects.

    The engine owns its options, outgoing headers and post fields. Headers
    and post fields apply to a single hop: they are cleared once the hop
    has been executed, and the hooks rebuild what the next hop needs.

    Methods for the caller:

    - set_url(url) / get_url()
    - get_options() / get_option(key) / set_option(key, value)
    - replace_options(options) / clear_options()
    - headers, post (PropertyBag)
    - execute(url=None)
    - reset()

    Hooks for subclasses:

    - pre_execute()
    - post_execute()

    """
    options_class = RequestOptions

    def __init__(
        self,
        url: str | None = None,
        transport: Transport | None = None,
        options: Mapping[str, Any] | None = None,
        timer: Timer | None = None,
    ):
        self._url: str | None = None
        self.original_url: str | None = None
        self.parsed_url: ParsedURL | None = None
        self.errors: list[str] = []
        self.headers = PropertyBag(case_insensitive=True)
        self.post = PropertyBag()
        self.result: HTTPResponse | None = None
        self._options = self.options_class(**(options or {}))
        self._transport: Transport = transport if transport is not None else LibraryTransport()
        self._timer: Timer | None = timer
        if url:
            self.set_url(url)

    # URL state.
    def set_url(self, url: str) -> "RequestEngine":
        """
        Validate and set the URL to request.

        On failure the current URL is cleared and the error is appended
        to `errors`; nothing is raised.
        """
        try:
            parsed = parse_url(url)
        except URLValidationError as e:
            self._url = None
            self.parsed_url = None
            self.errors.append(e.detail)
            logger.debug("Rejected URL %r: %s", url, e.detail)
            return self

        self._url = url
        if self.original_url is None:
            self.original_url = url
        self.parsed_url = parsed
        return self

    def get_url(self) -> str | None:
        return self._url

    # Transport.
    @property
    def transport(self) -> Transport:
        return self._transport

    def set_transport(self, transport: Transport) -> "RequestEngine":
        self._transport = transport
        return self

    @property
    def timer(self) -> Timer | None:
        return self._timer

    # Options.
    def get_options(self) -> RequestOptions:
        """Return a copy of the options."""
        return self._options.model_copy()

    def get_option(self, key: str, default: Any = None) -> Any:
        return getattr(self._options, key, default)

    def set_option(self, key: str, value: Any) -> "RequestEngine":
        """
        Set one option.

        An invalid value keeps the current one and the reason is appended
        to `errors`; nothing is raised.
        """
        try:
            setattr(self._options, key, value)
        except ValidationError as e:
            detail = e.errors()[0]["msg"] if e.errors() else str(e)
            self.errors.append(f'Invalid value for option "{key}": {detail}.')
            logger.debug("Rejected option %s=%r: %s", key, value, detail)
        return self

    def replace_options(self, options: RequestOptions | Mapping[str, Any] | None) -> "RequestEngine":
        """Replace every option, an empty value restores the defaults."""
        if not options:
            return self.clear_options()
        if isinstance(options, RequestOptions):
            options = options.model_dump()
        self._options = self.options_class(**options)
        return self

    def clear_options(self) -> "RequestEngine":
        self._options = self.options_class()
        return self

    # Execution.
    def execute(self, url: str | None = None) -> HTTPResponse | None:
        """
        Execute the request, following redirects when `follow_location` is set.

        Returns:
            The final response, or None when no valid URL was set
        """
        if url is not None:
            self.set_url(url)
        if self._timer is None:
            self._timer = Timer()
        if self._url is None:
            self.errors.append(URL_NOT_SET_MESSAGE)
            return None

        while True:
            self.pre_execute()
            logger.debug("%s %s", self._options.method, self._url)
            self.result = self._transport.send(
                self._url,
                self.parsed_url,
                self._options,
                self.headers.get_all(),
                self.post.get_all(),
                self._timer,
            )
            self.post_execute()

            if self.result.error:
                self.errors.append(self.result.error)

            if not self._options.follow_location:
                break
            location = self._next_location()
            if location is None:
                break
            logger.debug("Following %s redirect to %s", self.result.code, location)
            self.set_url(location)
            if self._url is None:
                break
        return self.result

    def _next_location(self) -> str | None:
        """
        Decide whether the last response is followed.

        Returns the absolute URL of the next hop, or None when the chain
        stops here. Running out of time turns the response into a
        timeout; running out of redirects returns the 30x as it is.
        """
        result = self.result
        if not result.is_redirect:
            return None
        location = result.header("location")
        if not location:
            self.errors.append(f'Redirect without Location header: "{self._url}".')
            return None
        # A path-only location is relative to the current scheme and host.
        location = urljoin(self._url, location)

        if self._timer.remaining(self._options.timeout) <= 0:
            result.code = TIMEOUT_CODE
            result.error = TIMEOUT_MESSAGE
            self.errors.append(TIMEOUT_MESSAGE)
            return None
        if self._options.max_redirects <= 0:
            return None
        self._options.max_redirects -= 1
        return location

    def pre_execute(self) -> None:
        """Run before every hop."""
        if self._options.user_agent:
            self.headers.set("User-Agent", self._options.user_agent)

    def post_execute(self) -> None:
        """Run after every hop; headers and post fields are consumed."""
        self.post.clear()
        self.headers.clear()

    def reset(self) -> "RequestEngine":
        """Forget the URL state and restart the timer before a new request."""
        self._url = None
        self.original_url = None
        self.parsed_url = None
        if self._timer is not None:
            self._timer.start()
        return self

    def __repr__(self) -> str:
        return '<%s [%s]>' % (self.__class__.__name__, self._url)
