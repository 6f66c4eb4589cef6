"""
Explicit get/set/replace/clear container for request headers and post fields.
"""

from typing import Any, Iterator, Mapping


class PropertyBag:
    """
    Ordered mapping with explicit accessors.

    Setting a key to None removes it, and replacing everything with an
    empty mapping (or None) clears the bag. When `case_insensitive` is set,
    keys are matched without regard to case while the spelling of the
    last write is kept for output.

        >>> headers = PropertyBag(case_insensitive=True)
        >>> headers.set("User-Agent", "demo")
        >>> headers.get("user-agent")
        'demo'
        >>> headers.set("USER-AGENT", None)
        >>> headers.get_all()
        {}

    """

    def __init__(self, items: Mapping[str, Any] | None = None, case_insensitive: bool = False):
        self._case_insensitive = case_insensitive
        # Maps the transformed key to (original key, value).
        self._store: dict[str, tuple[str, Any]] = {}
        if items:
            self.replace_all(items)

    def _transform(self, key: str) -> str:
        return key.lower() if self._case_insensitive else key

    def get_all(self) -> dict[str, Any]:
        """Return a copy of every key and value."""
        return {key: value for key, value in self._store.values()}

    def get(self, key: str, default: Any = None) -> Any:
        item = self._store.get(self._transform(key))
        return default if item is None else item[1]

    def set(self, key: str, value: Any) -> None:
        """Set one key, a None value removes the key instead."""
        transformed = self._transform(key)
        if value is None:
            self._store.pop(transformed, None)
            return
        # Re-inserting moves a renamed key to the end, like a fresh header.
        self._store.pop(transformed, None)
        self._store[transformed] = (key, value)

    def replace_all(self, items: Mapping[str, Any] | None) -> None:
        self._store = {}
        for key, value in (items or {}).items():
            self.set(key, value)

    def clear(self) -> None:
        self._store = {}

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._transform(key) in self._store

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __bool__(self) -> bool:
        return bool(self._store)

    def __repr__(self) -> str:
        return '<PropertyBag %s>' % (self.get_all())
