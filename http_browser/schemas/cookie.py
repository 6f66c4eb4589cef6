"""
Pydantic schema for cookie rows.

The field order is the column order of persisted cookie tables.
"""

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


COOKIE_FIELDS = ["domain", "path", "name", "value", "expires", "httponly", "secure", "created"]


class Cookie(BaseModel):
    """One stored cookie."""
    domain: str
    path: str = "/"
    name: str
    value: str = ""
    expires: str | None = None
    httponly: bool = False
    secure: bool = False
    created: float = Field(default_factory=time.time)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("expires", mode="before")
    @classmethod
    def empty_expires_is_session(cls, value: Any) -> Any:
        if value == "":
            return None
        return value

    @field_validator("httponly", "secure", mode="before")
    @classmethod
    def empty_flag_is_false(cls, value: Any) -> Any:
        if value is None or value == "":
            return False
        return value

    def to_row(self) -> list[str]:
        """Serialize as a row of strings in column order."""
        return [
            self.domain,
            self.path,
            self.name,
            self.value,
            self.expires or "",
            "1" if self.httponly else "0",
            "1" if self.secure else "0",
            repr(self.created),
        ]
