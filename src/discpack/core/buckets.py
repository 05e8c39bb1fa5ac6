"""Size-bucketed index of files awaiting packing."""

from __future__ import annotations

import logging
import pprint

from discpack.core.types import DEFAULT_BUCKET_GRANULARITY, FileEntry

logger = logging.getLogger(__name__)


def bucket_key_for(size: int, granularity: int) -> int:
    """Round a size down to its bucket floor.

    A file of ~1439 MiB with 100 MiB granularity lands in the 1400 MiB
    bucket. Keys below zero are clamped to bucket 0.

    Parameters
    ----------
    size
        File size in bytes.
    granularity
        Bucket width in bytes.

    Returns
    -------
    int
        Non-negative bucket key.

    Raises
    ------
    ValueError
        If granularity is not positive.
    """
    if granularity <= 0:
        raise ValueError(f"Bucket granularity must be positive: {granularity}")
    key = size - (size % granularity)
    return max(key, 0)


class BucketIndex:
    """Files grouped by rounded-down size.

    Empty buckets never persist: removing the last file from a bucket drops
    the bucket, so `is_empty` doubles as "no files remain".

    Parameters
    ----------
    granularity
        Bucket width in bytes.
    """

    def __init__(self, granularity: int = DEFAULT_BUCKET_GRANULARITY) -> None:
        if granularity <= 0:
            raise ValueError(f"Bucket granularity must be positive: {granularity}")
        self.granularity = granularity
        self._buckets: dict[int, list[FileEntry]] = {}
        self._sorted_keys: list[int] | None = None

    def add(self, path: str, size: int) -> int:
        """Place a file in its bucket and return the bucket key."""
        key = bucket_key_for(size, self.granularity)
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = self._buckets[key] = []
            self._sorted_keys = None
        bucket.append(FileEntry(path=path, size=size))
        logger.debug("Bucketed %s (%d bytes) into %d", path, size, key)
        return key

    def add_entry(self, entry: FileEntry) -> int:
        return self.add(entry.path, entry.size)

    def sorted_bucket_keys(self) -> list[int]:
        """Return bucket keys, largest first."""
        if self._sorted_keys is None:
            self._sorted_keys = sorted(self._buckets, reverse=True)
        return list(self._sorted_keys)

    def is_empty(self) -> bool:
        return not self._buckets

    def files_in(self, bucket_key: int) -> tuple[FileEntry, ...]:
        """Snapshot of a bucket's members in insertion order (empty if absent)."""
        return tuple(self._buckets.get(bucket_key, ()))

    def remove_file(self, bucket_key: int, path: str) -> FileEntry:
        """Remove one file from a bucket, dropping the bucket once empty.

        Raises
        ------
        KeyError
            If the bucket or the path within it does not exist.
        """
        bucket = self._buckets[bucket_key]
        for i, entry in enumerate(bucket):
            if entry.path == path:
                del bucket[i]
                break
        else:
            raise KeyError(path)

        if not bucket:
            del self._buckets[bucket_key]
            self._sorted_keys = None
            logger.debug("Removed bucket %d", bucket_key)
        return entry

    def entries(self) -> list[FileEntry]:
        """All remaining files, largest bucket first."""
        return [e for key in self.sorted_bucket_keys() for e in self._buckets[key]]

    def __len__(self) -> int:
        return sum(len(b) for b in self._buckets.values())

    def __contains__(self, path: object) -> bool:
        return any(e.path == path for b in self._buckets.values() for e in b)

    def dump(self) -> str:
        """Debug rendering of the granularity and bucket contents."""
        data = {key: [e.path for e in self._buckets[key]] for key in self.sorted_bucket_keys()}
        return f"granularity = {self.granularity}\n" + pprint.pformat(data, sort_dicts=False)
