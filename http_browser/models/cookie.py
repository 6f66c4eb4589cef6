"""
Cookie model for the SQL cookie store.

Each row mirrors one `Cookie` schema; rows are only appended, duplicates
are resolved when cookies are selected for a request.
"""

from typing import Optional

from sqlalchemy import String, Text, Boolean, Float
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class CookieRecord(Base):
    """
    SQLAlchemy model for stored cookies.

    Attributes:
        id: Unique identifier for the row
        domain: Cookie domain, a leading dot matches subdomains
        path: Path prefix the cookie applies to
        name: Cookie name
        value: Cookie value
        expires: Expiry date as received, None for session cookies
        httponly: Whether the HttpOnly flag was present
        secure: Whether the Secure flag was present
        created: Creation timestamp, the newest row wins per name
    """
    __tablename__ = "cookies"

    id: Mapped[int] = mapped_column(primary_key=True)
    domain: Mapped[str] = mapped_column(String(255), index=True)
    path: Mapped[str] = mapped_column(String(1000), default="/")
    name: Mapped[str] = mapped_column(String(255))
    value: Mapped[str] = mapped_column(Text, default="")
    expires: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    httponly: Mapped[bool] = mapped_column(Boolean, default=False)
    secure: Mapped[bool] = mapped_column(Boolean, default=False)
    created: Mapped[float] = mapped_column(Float)
