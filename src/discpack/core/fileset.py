"""Capacity-bounded, insertion-ordered set of files."""

from __future__ import annotations

from collections.abc import Iterator

from discpack.core.errors import AddOutcome, CapacityExceededError, EmptySetError
from discpack.core.types import FileEntry


class FileSet:
    """A group of files whose total size never exceeds a capacity.

    Members are kept in insertion order so that `pop` removes the most
    recently added file, which keeps splitting reproducible.

    Parameters
    ----------
    capacity
        Maximum cumulative size in bytes.

    Raises
    ------
    ValueError
        If capacity is negative.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError(f"FileSet capacity must be non-negative: {capacity}")
        self._capacity = capacity
        self._files: dict[str, int] = {}
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        return self._size

    def add(self, path: str, size: int) -> None:
        """Add a file to the set.

        Raises
        ------
        CapacityExceededError
            If the file would push the set past its capacity.
        """
        if self.try_add(path, size) is AddOutcome.CAPACITY_EXCEEDED:
            raise CapacityExceededError(self._size_with(path, size), self._capacity)

    def try_add(self, path: str, size: int) -> AddOutcome:
        """Add a file if there is room, reporting the outcome instead of raising."""
        if self._size_with(path, size) > self._capacity:
            return AddOutcome.CAPACITY_EXCEEDED
        # Re-adding a path moves it to the end and replaces its size.
        self._size -= self._files.pop(path, 0)
        self._files[path] = size
        self._size += size
        return AddOutcome.ADDED

    def _size_with(self, path: str, size: int) -> int:
        return self._size - self._files.get(path, 0) + size

    def pop(self) -> tuple[str, int]:
        """Remove and return the most recently added ``(path, size)``.

        Raises
        ------
        EmptySetError
            If the set has no members.
        """
        if not self._files:
            raise EmptySetError()
        path, size = self._files.popitem()
        self._size -= size
        return path, size

    def file_names(self) -> list[str]:
        return list(self._files)

    def entries(self) -> list[FileEntry]:
        return [FileEntry(path=p, size=s) for p, s in self._files.items()]

    def member_count(self) -> int:
        return len(self._files)

    def total_size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[tuple[str, int]]:
        return iter(list(self._files.items()))

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __repr__(self) -> str:
        return f"FileSet(capacity={self._capacity}, size={self._size}, files={len(self._files)})"

    def __str__(self) -> str:
        size_kb = self._size // 1024
        size_mb = size_kb / 1024.0
        size_gb = size_mb / 1024.0
        lines = [
            f"Files ({len(self._files)}, {self._size} bytes / {size_kb} KB / {size_mb:.2f} MB / {size_gb:.2f} GB):"
        ]
        lines.extend(f"\t{path} ({size})" for path, size in self._files.items())
        return "\n".join(lines) + "\n"
