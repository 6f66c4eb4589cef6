"""
Pydantic schema for HTTP responses returned by the transports.

Negative codes are reserved for transport and internal errors so they
never clash with HTTP status codes.
"""

from pydantic import BaseModel


# Reserved codes for internal errors
TIMEOUT_CODE = -1
TRANSPORT_FAILURE_CODE = -1
MALFORMED_RESPONSE_CODE = -1002
INVALID_SCHEME_CODE = -1003

TIMEOUT_MESSAGE = "request timed out"

REDIRECT_CODES = (301, 302, 307)


class HTTPResponse(BaseModel):
    """
    Result of one request/response exchange.

    Attributes:
        request: Raw request text that was sent, for history
        protocol: Protocol version from the status line
        code: Numeric status code, negative for transport errors
        status_message: Reason phrase from the status line
        headers: Lowercased header names to a value, or a list of values
            when the header repeats
        headers_raw: Header lines exactly as received
        body: Message body
        error: Error message when the exchange failed
    """
    request: str | None = None
    protocol: str | None = None
    code: int = 0
    status_message: str = ""
    headers: dict[str, str | list[str]] = {}
    headers_raw: list[str] = []
    body: bytes = b""
    error: str | None = None

    @classmethod
    def failure(cls, code: int, error: str, request: str | None = None) -> "HTTPResponse":
        return cls(code=code, error=error, request=request)

    @classmethod
    def timed_out(cls, request: str | None = None) -> "HTTPResponse":
        return cls.failure(TIMEOUT_CODE, TIMEOUT_MESSAGE, request)

    @property
    def is_redirect(self) -> bool:
        return self.code in REDIRECT_CODES

    @property
    def status_line(self) -> str:
        return f"{self.protocol} {self.code} {self.status_message}"

    def header_values(self, name: str) -> list[str]:
        """All values of a header, in the order they were received."""
        value = self.headers.get(name.lower())
        if value is None:
            return []
        if isinstance(value, list):
            return list(value)
        return [value]

    def header(self, name: str) -> str | None:
        """First value of a header, or None."""
        values = self.header_values(name)
        return values[0] if values else None
