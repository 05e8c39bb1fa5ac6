"""Error kinds and result variants for packing operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CapacityExceededError(ValueError):
    """Raised when adding a file would push a set past its capacity.

    Attributes
    ----------
    size
        Total size the set would have reached.
    capacity
        The set's capacity.
    """

    def __init__(self, size: int, capacity: int) -> None:
        self.size = size
        self.capacity = capacity
        super().__init__(f"Current size of {size} is bigger than the max size of {capacity}")


class EmptySetError(IndexError):
    """Raised when popping from a file set with no members."""

    def __init__(self) -> None:
        super().__init__("pop from an empty file set")


class AddOutcome(str, Enum):
    """Result of a non-raising add attempt.

    Attributes
    ----------
    ADDED
        The file was inserted.
    CAPACITY_EXCEEDED
        The file was rejected; the set is unchanged.
    """

    ADDED = "added"
    CAPACITY_EXCEEDED = "capacity_exceeded"


@dataclass(frozen=True)
class SkippedEntry:
    """A file excluded from a packing pass because its size could not be read.

    Attributes
    ----------
    path
        File path.
    bucket_key
        Bucket the file still sits in.
    reason
        Short human-readable reason.
    """

    path: str
    bucket_key: int
    reason: str
