"""
Browser: a request engine with cookies, response cache and history log.

Files are kept in the browser's working directory:

- cookie.csv   stored cookies (when no other cookie store is given)
- history.log  one entry per executed hop
- cache.html   response bodies, saved as cache.html, cache_0.html, ...
"""

import logging
import os
from typing import Any, Mapping

from sqlalchemy.orm import Session

from ..exceptions import BrowserError
from ..schemas.options import BrowserOptions
from .cache_service import save_cache
from .cookie_store import CookieStore, CsvCookieStore
from .cookies import build_cookie_header, parse_set_cookies, select_cookies
from .engine import RequestEngine
from .filesystem import ensure_directory
from .history_service import append_history, format_history_entry, save_history
from .timer import Timer
from .transport import Transport

logger = logging.getLogger(__name__)

USER_AGENTS = {
    "mobile": (
        "Mozilla/5.0 (iPhone; U; CPU iPhone OS 3_0 like Mac OS X; en-us) "
        "AppleWebKit/528.18 (KHTML, like Gecko) Version/4.0 Mobile/7A341 Safari/528.16"
    ),
    "mozilla firefox on windows 7": (
        "Mozilla/5.0 (Windows NT 6.1; WOW64; rv:42.0) Gecko/20100101 Firefox/42.0"
    ),
    "desktop": (
        "Mozilla/5.0 (Windows NT 6.1; WOW64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/47.0.2526.80 Safari/537.36"
    ),
}
USER_AGENTS["mobile browser"] = USER_AGENTS["mobile"]


def get_user_agent(scenario: str | None) -> str | None:
    """
    User agent string for a named scenario.

    Unknown scenarios get the desktop user agent; an empty scenario
    gets None.

    Example:
        >>> get_user_agent("Mobile").startswith("Mozilla/5.0 (iPhone")
        True
        >>> get_user_agent("") is None
        True
    """
    scenario = (scenario or "").strip().lower()
    if not scenario:
        return None
    return USER_AGENTS.get(scenario, USER_AGENTS["desktop"])


class Browser(RequestEngine):
    """
    Request engine with browser-like features.

    Options `cookie_send`, `cookie_receive`, `cache_save` and
    `history_save` switch the features on. When a database session is
    given, history entries are also saved to the `history` table.
    """
    options_class = BrowserOptions

    cookie_filename = "cookie.csv"
    history_filename = "history.log"
    cache_reference_filename = "cache.html"

    def __init__(
        self,
        url: str | None = None,
        cwd: str | None = None,
        transport: Transport | None = None,
        cookie_store: CookieStore | None = None,
        db: Session | None = None,
        options: Mapping[str, Any] | None = None,
        timer: Timer | None = None,
    ):
        super().__init__(url=url, transport=transport, options=options, timer=timer)
        self.cwd = os.path.abspath(cwd or os.getcwd())
        self._cookie_store = cookie_store
        self.db = db
        self.cache_filename: str | None = None

    @classmethod
    def profile(cls, user_agent_scenario: str | None = None, **kwargs: Any) -> "Browser":
        """Browser that sends and receives cookies and follows redirects."""
        instance = cls(**kwargs)
        instance.set_option("cookie_receive", True)
        instance.set_option("cookie_send", True)
        instance.set_option("follow_location", True)
        instance.set_option("user_agent", get_user_agent(user_agent_scenario))
        return instance

    # Working directory.
    def set_cwd(self, directory: str, autocreate: bool = False) -> bool:
        """
        Change the working directory.

        Returns:
            True on success; on failure the reason is appended to `errors`
        """
        try:
            if not os.path.isdir(directory):
                if not autocreate:
                    raise BrowserError(f'Set directory failed, directory not exists: "{directory}".')
                ensure_directory(directory)
            if not os.access(directory, os.W_OK):
                raise BrowserError(f'Set directory failed, directory is not writable: "{directory}".')
        except BrowserError as e:
            self.errors.append(e.detail)
            return False
        self.cwd = os.path.abspath(directory)
        return True

    def get_cwd(self) -> str:
        return self.cwd

    def path_of(self, filename: str) -> str:
        return os.path.join(self.cwd, filename)

    @property
    def cookie_store(self) -> CookieStore:
        if self._cookie_store is None:
            self._cookie_store = CsvCookieStore(self.path_of(self.cookie_filename))
        return self._cookie_store

    # Hooks.
    def pre_execute(self) -> None:
        super().pre_execute()
        if self.get_option("cookie_send"):
            self.cookie_read()

    def post_execute(self) -> None:
        super().post_execute()
        self.cache_filename = None
        if self.get_option("cookie_receive"):
            self.cookie_write()
        if self.get_option("cache_save"):
            self.cache_save()
        if self.get_option("history_save"):
            self.history_save()

    # Cookies.
    def cookie_read(self) -> None:
        """Set the Cookie header from the stored cookies matching the URL."""
        try:
            rows = self.cookie_store.load_all()
        except BrowserError as e:
            self.errors.append(e.detail)
            return
        selected = select_cookies(rows, self.parsed_url.host, self.parsed_url.path)
        logger.debug("Selected %d of %d cookies for %s", len(selected), len(rows), self.parsed_url.host)
        if selected:
            self.headers.set("Cookie", build_cookie_header(selected))

    def cookie_write(self) -> None:
        """Store the cookies delivered with the last response."""
        values = self.result.header_values("set-cookie")
        if not values:
            return
        cookies = parse_set_cookies(values, self.parsed_url.host)
        if not cookies:
            return
        try:
            self.cookie_store.append_rows(cookies)
        except BrowserError as e:
            self.errors.append(e.detail)

    def cookie_clear(self) -> str | None:
        """Drop the stored cookies, returns where the old cookie file was moved."""
        try:
            return self.cookie_store.clear()
        except BrowserError as e:
            self.errors.append(e.detail)
            return None

    # Cache and history.
    def cache_save(self) -> None:
        try:
            self.cache_filename = save_cache(self.result.body, self.path_of(self.cache_reference_filename))
        except BrowserError as e:
            self.errors.append(e.detail)

    def history_save(self) -> None:
        entry = format_history_entry(self.result, self.cache_filename)
        try:
            append_history(self.path_of(self.history_filename), entry)
        except BrowserError as e:
            self.errors.append(e.detail)
        if self.db is None:
            return
        try:
            save_history(
                self.db,
                self.get_url(),
                self.get_option("method"),
                self.result,
                self.cache_filename,
            )
        except BrowserError as e:
            self.errors.append(e.detail)

    def reset(self) -> "Browser":
        self.cache_filename = None
        super().reset()
        return self
