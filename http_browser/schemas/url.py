"""
Pydantic schema for parsed request URLs.
"""

from pydantic import BaseModel


DEFAULT_PORTS = {"http": 80, "https": 443}


class ParsedURL(BaseModel):
    """Components of a validated http or https URL."""
    scheme: str
    host: str
    port: int | None = None
    path: str = "/"
    query: str | None = None
    fragment: str | None = None
    user: str | None = None
    password: str | None = None

    @property
    def default_port(self) -> int:
        return DEFAULT_PORTS.get(self.scheme, 80)

    @property
    def effective_port(self) -> int:
        return self.port if self.port is not None else self.default_port

    @property
    def host_header(self) -> str:
        """Host header value, the port is omitted when it is the scheme default."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        port = self.effective_port
        if port == self.default_port:
            return host
        return f"{host}:{port}"

    @property
    def request_target(self) -> str:
        """Path and query as sent on the request line."""
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path
