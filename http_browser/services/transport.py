"""
Common interface of the request transports.
"""

import base64
from typing import Any, Mapping, Protocol

from ..schemas.options import RequestOptions
from ..schemas.response import HTTPResponse
from ..schemas.url import ParsedURL
from .timer import Timer


class Transport(Protocol):
    """Performs one request/response exchange, never raising on failure."""

    def send(
        self,
        url: str,
        parsed_url: ParsedURL,
        options: RequestOptions,
        headers: Mapping[str, str],
        post: Mapping[str, Any],
        timer: Timer,
    ) -> HTTPResponse:
        ...


def basic_credentials(user: str, password: str | None) -> str:
    """
    Value of a Basic authorization header.

    Example:
        >>> basic_credentials("joe", "secret")
        'Basic am9lOnNlY3JldA=='
    """
    token = user if password is None else f"{user}:{password}"
    return "Basic " + base64.b64encode(token.encode("utf-8")).decode("ascii")
