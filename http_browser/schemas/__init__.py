"""
Pydantic schemas package.

Exports the option, URL, response and cookie schemas.
"""

from .options import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_REDIRECTS,
    RequestOptions,
    BrowserOptions,
)

from .url import ParsedURL

from .response import (
    TIMEOUT_CODE,
    TIMEOUT_MESSAGE,
    MALFORMED_RESPONSE_CODE,
    INVALID_SCHEME_CODE,
    HTTPResponse,
)

from .cookie import COOKIE_FIELDS, Cookie

__all__ = [
    # Option schemas
    "DEFAULT_TIMEOUT",
    "DEFAULT_MAX_REDIRECTS",
    "RequestOptions",
    "BrowserOptions",
    # URL schemas
    "ParsedURL",
    # Response schemas
    "TIMEOUT_CODE",
    "TIMEOUT_MESSAGE",
    "MALFORMED_RESPONSE_CODE",
    "INVALID_SCHEME_CODE",
    "HTTPResponse",
    # Cookie schemas
    "COOKIE_FIELDS",
    "Cookie",
]
