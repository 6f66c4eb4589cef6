# Services package

from .response_parser import ResponseParser, parse_response
from .timer import Timer
from .property_bag import PropertyBag
from .form import build_query, flatten_fields
from .transport import Transport, basic_credentials
from .transport_socket import SocketTransport
from .transport_library import LibraryTransport
from .engine import RequestEngine, parse_url
from .cookies import (
    build_cookie_header,
    parse_set_cookie,
    parse_set_cookies,
    select_cookies,
)
from .cookie_store import CookieStore, CsvCookieStore, SqlCookieStore
from .filesystem import ensure_directory, unique_filename
from .cache_service import save_cache
from .history_service import append_history, format_history_entry, save_history
from .browser import Browser, get_user_agent

__all__ = [
    "ResponseParser",
    "parse_response",
    "Timer",
    "PropertyBag",
    "build_query",
    "flatten_fields",
    "Transport",
    "basic_credentials",
    "SocketTransport",
    "LibraryTransport",
    "RequestEngine",
    "parse_url",
    "build_cookie_header",
    "parse_set_cookie",
    "parse_set_cookies",
    "select_cookies",
    "CookieStore",
    "CsvCookieStore",
    "SqlCookieStore",
    "ensure_directory",
    "unique_filename",
    "save_cache",
    "append_history",
    "format_history_entry",
    "save_history",
    "Browser",
    "get_user_agent",
]
