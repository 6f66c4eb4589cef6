"""
History service for recording request executions.

The history log is an append-only text file in the manner of a web
server access log; records can also be saved to the `history` table.
"""

import logging
import re
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import FileSystemError, HistoryError
from ..models.history import History
from ..schemas.response import HTTPResponse

logger = logging.getLogger(__name__)

LINE_BREAK = re.compile(r"\r\n|\n|\r")


def format_history_entry(
    response: HTTPResponse,
    cache_filename: str | None = None,
    now: datetime | None = None,
) -> str:
    """
    Format one history log entry.

    Args:
        response: The response of the hop
        cache_filename: File the body was cached in, if any
        now: Time of the entry, defaults to the current local time

    Returns:
        The entry text, or an empty string when there is nothing to record
    """
    content = ""
    if response.request is not None:
        content += "REQUEST:\t" + LINE_BREAK.sub("\t", response.request) + "\n"
    if response.protocol is not None:
        content += "RESPONSE:\t" + response.status_line + "\t\t" + "\t".join(response.headers_raw) + "\n"
    if cache_filename is not None:
        content += "CACHE:\t\t" + cache_filename + "\n"
    if not content:
        return ""
    now = now or datetime.now().astimezone()
    return "TIME:\t\t" + now.isoformat(timespec="seconds") + "\n" + content + "\n"


def append_history(filename: str, entry: str) -> None:
    """
    Append an entry to the history log.

    Raises:
        FileSystemError: When the log cannot be written
    """
    if not entry:
        return
    try:
        with open(filename, "a", encoding="utf-8") as f:
            f.write(entry)
    except OSError as e:
        raise FileSystemError(f'Failed to write content to: "{filename}".') from e


def save_history(
    db: Session,
    url: str,
    method: str,
    response: HTTPResponse,
    cache_filename: str | None = None,
) -> History:
    """
    Save a request execution to the history table.

    Args:
        db: Database session
        url: URL of the hop
        method: HTTP method used
        response: The response received
        cache_filename: File the body was cached in, if any

    Returns:
        The created history record

    Raises:
        HistoryError: When the record cannot be committed
    """
    history = History(
        method=method,
        url=url,
        request=response.request,
        protocol=response.protocol,
        status_code=response.code,
        status_message=response.status_message,
        response_headers=response.headers_raw,
        error=response.error,
        cache_filename=cache_filename,
        response_size=len(response.body),
    )
    try:
        db.add(history)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Cannot save history for %s: %s", url, e)
        raise HistoryError() from e
    db.refresh(history)
    return history
