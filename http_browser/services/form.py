"""
Form encoding helpers for post fields.

Nested mappings and sequences are flattened into bracketed keys, so
`{"a": {"b": "c"}}` becomes the single field `a[b]=c`.
"""

from typing import Any, Mapping
from urllib.parse import quote


def _children(value: Any) -> Mapping | None:
    if isinstance(value, Mapping):
        return value
    if isinstance(value, (list, tuple)):
        return dict(enumerate(value))
    return None


def flatten_fields(fields: Mapping[str, Any], parent: str = "") -> list[tuple[str, str]]:
    """
    Flatten nested post fields into (name, value) pairs without encoding.

    None values become empty strings.

    Example:
        >>> flatten_fields({"user": {"name": "joe"}, "tags": ["a", "b"]})
        [('user[name]', 'joe'), ('tags[0]', 'a'), ('tags[1]', 'b')]
    """
    pairs: list[tuple[str, str]] = []
    for key, value in fields.items():
        name = f"{parent}[{key}]" if parent else str(key)
        children = _children(value)
        if children is not None:
            pairs.extend(flatten_fields(children, name))
        else:
            pairs.append((name, "" if value is None else str(value)))
    return pairs


def build_query(fields: Mapping[str, Any], parent: str = "") -> str:
    """
    Build a URL-encoded query string from nested post fields.

    Keys with a None value are sent without `=`. Slashes in values are
    left unescaped for readability.

    Example:
        >>> build_query({"q": "a b", "path": "/x/y", "flag": None})
        'q=a%20b&path=/x/y&flag'
    """
    params: list[str] = []
    for key, value in fields.items():
        encoded = quote(str(key), safe="")
        name = f"{parent}[{encoded}]" if parent else encoded
        children = _children(value)
        if children is not None:
            params.append(build_query(children, name))
        elif value is None:
            params.append(name)
        else:
            params.append(f"{name}={quote(str(value), safe='/')}")
    return "&".join(param for param in params if param)
