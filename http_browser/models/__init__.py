"""
Models package for the HTTP browser.

Exports all SQLAlchemy models for database operations.
"""

from .cookie import CookieRecord
from .history import History

__all__ = [
    "CookieRecord",
    "History",
]
