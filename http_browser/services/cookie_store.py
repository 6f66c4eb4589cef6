"""
Cookie stores: persistence of cookie rows.

Stores only load and append rows; selection happens in `cookies`.
"""

import csv
import logging
import os
from typing import Iterable, Protocol

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import CookieStoreError
from ..models.cookie import CookieRecord
from ..schemas.cookie import COOKIE_FIELDS, Cookie
from .filesystem import unique_filename

logger = logging.getLogger(__name__)


class CookieStore(Protocol):
    """Row store for cookies."""

    def load_all(self) -> list[Cookie]:
        ...

    def append_rows(self, rows: Iterable[Cookie]) -> None:
        ...

    def clear(self) -> str | None:
        ...


class CsvCookieStore:
    """
    Cookie rows in a header-led CSV file.

    Columns follow `COOKIE_FIELDS`. The file is created with its header
    on the first append.
    """

    def __init__(self, filename: str):
        self.filename = filename

    def load_all(self) -> list[Cookie]:
        if not os.path.exists(self.filename):
            return []
        rows = []
        try:
            with open(self.filename, newline="", encoding="utf-8") as f:
                for row in csv.DictReader(f):
                    try:
                        rows.append(Cookie.model_validate(row))
                    except ValidationError as e:
                        logger.warning("Skipping invalid cookie row in %s: %s", self.filename, e)
        except OSError as e:
            raise CookieStoreError(f'Failed to read cookie file: "{self.filename}".') from e
        return rows

    def append_rows(self, rows: Iterable[Cookie]) -> None:
        try:
            create = not os.path.exists(self.filename) or os.path.getsize(self.filename) == 0
            with open(self.filename, "a", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                if create:
                    writer.writerow(COOKIE_FIELDS)
                for cookie in rows:
                    writer.writerow(cookie.to_row())
        except OSError as e:
            raise CookieStoreError(f'Failed to write cookie file: "{self.filename}".') from e

    def clear(self) -> str | None:
        """
        Move the cookie file aside.

        Returns:
            The new name of the old file, or None when there was no file
        """
        if not os.path.exists(self.filename):
            return None
        directory, basename = os.path.split(os.path.abspath(self.filename))
        destination = unique_filename(basename, directory)
        try:
            os.rename(self.filename, destination)
        except OSError as e:
            raise CookieStoreError(f'Failed to clear cookie file: "{self.filename}".') from e
        return destination

    def __repr__(self) -> str:
        return '<CsvCookieStore [%s]>' % (self.filename)


class SqlCookieStore:
    """Cookie rows in the `cookies` table."""

    def __init__(self, db: Session):
        self.db = db

    def load_all(self) -> list[Cookie]:
        try:
            records = self.db.scalars(select(CookieRecord).order_by(CookieRecord.id)).all()
        except SQLAlchemyError as e:
            raise CookieStoreError("Failed to read cookies from database.") from e
        return [Cookie.model_validate(record) for record in records]

    def append_rows(self, rows: Iterable[Cookie]) -> None:
        try:
            self.db.add_all(CookieRecord(**cookie.model_dump()) for cookie in rows)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CookieStoreError("Failed to save cookies to database.") from e

    def clear(self) -> str | None:
        try:
            self.db.execute(delete(CookieRecord))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CookieStoreError("Failed to clear cookies in database.") from e
        return None

    def __repr__(self) -> str:
        return '<SqlCookieStore>'
