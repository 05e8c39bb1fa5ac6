"""Shared value types and size constants."""

from __future__ import annotations

from dataclasses import dataclass

KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB

# Discs say 4.7 GB but hold ~4.38 GiB; round down to leave some room.
SINGLE_LAYER_DVD_BYTES = int(4.3 * GIB)

# Many zip tools misbehave on archives over 4 GiB.
ZIP_MAX_SIZE = 4 * GIB

DEFAULT_BUCKET_GRANULARITY = 100 * MIB


@dataclass(frozen=True)
class FileEntry:
    """A file path and its size in bytes.

    Attributes
    ----------
    path
        File path as given by the caller.
    size
        Size in bytes at enumeration time.
    """

    path: str
    size: int
