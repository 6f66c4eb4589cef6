"""
Pydantic schemas for request options.

`RequestOptions` is the explicit configuration owned by a request engine;
`BrowserOptions` adds the switches used by the browser hooks.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Default timeout in seconds, shared by a whole redirect chain
DEFAULT_TIMEOUT = 30.0

# Default number of redirects followed when follow_location is enabled
DEFAULT_MAX_REDIRECTS = 3


class RequestOptions(BaseModel):
    """
    Options for executing a request.

    Extra keys are accepted so callers can carry their own settings
    alongside the known ones.
    """
    model_config = ConfigDict(
        extra="allow",
        validate_assignment=True,
        arbitrary_types_allowed=True,
    )

    method: str = "GET"
    data: str | bytes | None = None
    max_redirects: int = Field(default=DEFAULT_MAX_REDIRECTS, ge=0)
    timeout: float = DEFAULT_TIMEOUT
    context: Any = None
    follow_location: bool = False
    proxy_server: str = ""
    proxy_exceptions: set[str] = {"localhost", "127.0.0.1"}
    proxy_port: int = 8080
    proxy_username: str = ""
    proxy_password: str = ""
    # None strips the User-Agent header on proxied requests, "" keeps it.
    proxy_user_agent: str | None = ""
    user_agent: str | None = None
    referer: str | None = None
    encoding: str = "gzip, deflate"

    @field_validator("method")
    @classmethod
    def upper_method(cls, value: str) -> str:
        return value.upper()

    @field_validator("proxy_exceptions")
    @classmethod
    def lower_proxy_exceptions(cls, value: set[str]) -> set[str]:
        return {host.lower() for host in value}

    def uses_proxy_for(self, host: str) -> bool:
        """Whether a request to `host` should go through the configured proxy."""
        return bool(self.proxy_server) and host.lower() not in self.proxy_exceptions


class BrowserOptions(RequestOptions):
    """Request options plus the cookie, cache and history switches."""
    # Send stored cookies to the site when requesting.
    cookie_send: bool = False
    # Accept and store cookies delivered by the site.
    cookie_receive: bool = False
    # Save every response body to a cache file.
    cache_save: bool = False
    # Append every exchange to the history log.
    history_save: bool = False
