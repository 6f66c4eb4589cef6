"""
Database configuration for the HTTP browser.

Uses SQLite as the default storage backend with SQLAlchemy ORM. The database
holds the optional SQL cookie store and the request history records.
"""

import os
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

# SQLite database URL - file-based storage
DATABASE_URL = os.environ.get("HTTP_BROWSER_DATABASE_URL", "sqlite:///./http_browser.db")

engine = create_engine(
    DATABASE_URL,
    echo=False  # Set to True for SQL query logging
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def init_db(bind=None):
    """
    Initialize the database by creating all tables.

    Args:
        bind: Engine to create the tables on, defaults to the module engine
    """
    # Models register themselves on Base.metadata when imported.
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def get_session():
    """
    Yield a database session and ensure it's closed after use.

    Usage:
        with get_session() as db:
            browser = Browser(db=db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
