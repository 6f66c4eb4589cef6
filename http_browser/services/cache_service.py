"""
Cache service for saving response bodies to files.
"""

import logging
import os

from ..exceptions import FileSystemError
from .filesystem import unique_filename

logger = logging.getLogger(__name__)


def save_cache(body: bytes, filename: str) -> str | None:
    """
    Save a response body next to `filename` under a unique name.

    Args:
        body: Response body
        filename: Reference file name, a counter suffix is added when taken

    Returns:
        The path written, or None when the body is empty

    Raises:
        FileSystemError: When the file cannot be written
    """
    if not body:
        return None
    destination = unique_filename(os.path.basename(filename), os.path.dirname(filename) or ".")
    try:
        with open(destination, "wb") as f:
            f.write(body)
    except OSError as e:
        raise FileSystemError(f'Failed to write content to: "{destination}".') from e
    logger.debug("Cached %d bytes in %s", len(body), destination)
    return destination
