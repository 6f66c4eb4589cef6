"""
Filesystem helpers for the browser's working directory, cache and history files.
"""

import os
import re
import sys

from ..exceptions import FileSystemError

# Control characters are replaced in file names
CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f]")

# Characters Windows does not allow in file names
WINDOWS_RESERVED = re.compile(r'[:*?"<>|]')


def ensure_directory(path: str, mode: int = 0o775) -> None:
    """
    Create a directory and its parents unless it already exists.

    Raises:
        FileSystemError: When something other than a directory has the
            same name, or the directory cannot be created
    """
    if os.path.isdir(path):
        return
    if os.path.lexists(path):
        something = "link" if os.path.islink(path) else "file" if os.path.isfile(path) else "something"
        raise FileSystemError(
            f'Create directory cancelled, a {something} has same name and exists: "{path}".'
        )
    try:
        os.makedirs(path, mode=mode, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f'Create directory failed: "{path}": {e.strerror or e}.')


def unique_filename(basename: str, directory: str) -> str:
    """
    Return a path in `directory` that does not exist yet.

    When `basename` is taken, a counter is inserted before the extension:
    `cache.html`, `cache_0.html`, `cache_1.html`, ...

    Example:
        >>> unique_filename("cache.html", "/nonexistent")
        '/nonexistent/cache.html'
    """
    basename = CONTROL_CHARACTERS.sub("_", basename)
    if sys.platform.startswith("win"):
        basename = WINDOWS_RESERVED.sub("_", basename)

    destination = os.path.join(directory, basename)
    if not os.path.exists(destination):
        return destination

    name, ext = os.path.splitext(basename)
    counter = 0
    while True:
        destination = os.path.join(directory, f"{name}_{counter}{ext}")
        if not os.path.exists(destination):
            return destination
        counter += 1
