"""File-size query hooks used at consumption time.

The packer re-reads each file's size when it is about to place it, since the
bucket key is only a rounded approximation. The query is injectable so that
platform-specific strategies can be swapped in without touching the
algorithm. A negative result means "unreadable, skip this file".
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping

logger = logging.getLogger(__name__)

SizeQuery = Callable[[str], int]

UNKNOWN_SIZE = -1


def stat_size(path: str) -> int:
    """Return the size of a file on disk, or -1 if it cannot be read."""
    try:
        return os.stat(path).st_size
    except OSError as e:
        logger.warning("Could not stat %s: %s", path, e)
        return UNKNOWN_SIZE


def mapping_size(sizes: Mapping[str, int]) -> SizeQuery:
    """Build a size query backed by a precomputed path-to-size mapping.

    Paths missing from the mapping report an unknown size.
    """

    def size_of(path: str) -> int:
        return sizes.get(path, UNKNOWN_SIZE)

    return size_of


def query_size(size_of: SizeQuery, path: str) -> int:
    """Call a size query, folding an `OSError` into an unknown size."""
    try:
        return size_of(path)
    except OSError as e:
        logger.warning("Size query failed for %s: %s", path, e)
        return UNKNOWN_SIZE
