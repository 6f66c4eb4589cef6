"""
Cookie selection and Set-Cookie parsing.

This is a simplified subset of cookie handling: cookies match on domain,
path prefix and expiry only, and the newest row wins for each name.
"""

import logging
import re
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Iterable

from ..schemas.cookie import Cookie

logger = logging.getLogger(__name__)

HTTPONLY_PATTERN = re.compile(r"httponly", re.IGNORECASE)

# Attributes copied from a Set-Cookie header onto the cookie row
COOKIE_ATTRIBUTES = ("domain", "path", "expires")


def parse_cookie_date(value: str) -> datetime | None:
    """
    Parse a cookie expiry date.

    Accepts RFC 1123 dates, the dashed RFC 850 form used by many servers
    and ISO 8601. Returns None when the value cannot be read.

    Example:
        >>> parse_cookie_date("Wed, 01-Jan-2031 00:00:00 GMT").year
        2031
    """
    value = value.strip()
    for candidate in (value, value.replace("-", " ")):
        try:
            parsed = parsedate_to_datetime(candidate)
        except (TypeError, ValueError, IndexError):
            continue
        if parsed is not None:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def is_expired(cookie: Cookie, now: datetime | None = None) -> bool:
    """A cookie without expiry never expires; an unreadable expiry has expired."""
    if not cookie.expires:
        return False
    expires = parse_cookie_date(cookie.expires)
    if expires is None:
        return True
    now = now or datetime.now(timezone.utc)
    return not now < expires


def domain_matches(domain: str, host: str) -> bool:
    """
    Match a cookie domain against a request host.

    A domain with a leading dot matches every host ending with the rest
    of it; otherwise the host must be equal.
    """
    domain = domain.lower()
    host = host.lower()
    if domain.startswith("."):
        return host.endswith(domain[1:])
    return domain == host


def path_matches(cookie_path: str, request_path: str) -> bool:
    return request_path.lower().startswith(cookie_path.lower())


def select_cookies(
    rows: Iterable[Cookie],
    host: str,
    path: str,
    now: datetime | None = None,
) -> dict[str, Cookie]:
    """
    Select the stored cookies that apply to a request.

    Args:
        rows: Every stored cookie row
        host: Request host
        path: Request path
        now: Reference time for expiry, defaults to the current time

    Returns:
        Cookie name to the newest matching row, in first-seen order
    """
    selected: dict[str, Cookie] = {}
    for cookie in rows:
        if not domain_matches(cookie.domain, host):
            continue
        if not path_matches(cookie.path, path):
            continue
        if is_expired(cookie, now):
            continue
        current = selected.get(cookie.name)
        if current is not None and current.created > cookie.created:
            continue
        selected[cookie.name] = cookie
    return selected


def build_cookie_header(cookies: dict[str, Cookie]) -> str:
    """
    Example:
        >>> build_cookie_header({"a": Cookie(domain="x", name="a", value="1")})
        'a=1'
    """
    return "; ".join(f"{cookie.name}={cookie.value}" for cookie in cookies.values())


def parse_set_cookie(header: str, host: str, created: float | None = None) -> Cookie | None:
    """
    Parse one Set-Cookie header value into a cookie row.

    The first `name=value` pair names the cookie, later pairs are
    attributes. Missing attributes default to the request host, the
    root path and a session cookie.

    Returns:
        The cookie, or None when the header has no `name=value` pair
    """
    pairs = [part.strip() for part in header.split(";")]
    name, separator, value = pairs[0].partition("=")
    name = name.strip()
    if not separator or not name:
        logger.debug("Ignoring Set-Cookie without name: %r", header)
        return None

    fields = {
        "domain": host,
        "path": "/",
        "expires": None,
        "httponly": bool(HTTPONLY_PATTERN.search(header)),
        "secure": False,
    }
    for pair in pairs[1:]:
        key, separator, attribute = pair.partition("=")
        key = key.strip().lower()
        if not separator:
            if key == "secure":
                fields["secure"] = True
            continue
        if key in COOKIE_ATTRIBUTES and attribute.strip():
            fields[key] = attribute.strip()

    return Cookie(
        name=name,
        value=value.strip(),
        created=created if created is not None else time.time(),
        **fields,
    )


def parse_set_cookies(headers: Iterable[str], host: str) -> list[Cookie]:
    """Parse every Set-Cookie value, each with its own creation time."""
    cookies = []
    for header in headers:
        cookie = parse_set_cookie(header, host)
        if cookie is not None:
            cookies.append(cookie)
    return cookies
