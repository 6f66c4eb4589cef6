"""
History model for storing executed request records.

Each hop of an execution can create a history entry containing the raw
request text, the response status and headers, and the cache file name.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, JSON, Integer
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class History(Base):
    """
    SQLAlchemy model for request execution history.

    Attributes:
        id: Unique identifier for the history entry
        method: HTTP method used
        url: Target URL of this hop
        request: Raw request text that was sent
        protocol: Protocol version of the response
        status_code: Response status code, negative for transport errors
        status_message: Response reason phrase
        response_headers: Header lines exactly as received
        error: Transport error message, if any
        cache_filename: File holding the cached body, if any
        response_size: Response body size in bytes
        executed_at: Timestamp when the request was executed
    """
    __tablename__ = "history"

    id: Mapped[int] = mapped_column(primary_key=True)
    method: Mapped[str] = mapped_column(String(10))
    url: Mapped[str] = mapped_column(Text)
    request: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    protocol: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    status_code: Mapped[int] = mapped_column(Integer)
    status_message: Mapped[str] = mapped_column(String(100), default="")
    response_headers: Mapped[list] = mapped_column(JSON, default=list)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cache_filename: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    response_size: Mapped[int] = mapped_column(Integer, default=0)
    executed_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
