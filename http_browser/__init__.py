"""
HTTP Browser - scriptable HTTP client

Executes requests over a raw socket or httpx, follows redirects under a
shared timeout budget, and keeps cookies, cached bodies and a history log
the way a browser would.
"""

import logging

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .services.engine import RequestEngine  # noqa: E402
from .services.browser import Browser  # noqa: E402
from .services.transport_socket import SocketTransport  # noqa: E402
from .services.transport_library import LibraryTransport  # noqa: E402

__all__ = [
    "__version__",
    "RequestEngine",
    "Browser",
    "SocketTransport",
    "LibraryTransport",
]
