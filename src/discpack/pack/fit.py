"""Best-fit-by-bucket packing of a single file set."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from discpack.core.buckets import BucketIndex
from discpack.core.errors import SkippedEntry
from discpack.core.fileset import FileSet
from discpack.pack.pacing import Pacer, no_pace
from discpack.pack.sizes import SizeQuery, query_size, stat_size

logger = logging.getLogger(__name__)


@dataclass
class FitResult:
    """Outcome of one packing pass.

    Attributes
    ----------
    file_set
        Files placed in this pass.
    skipped
        Files left in the index because their size could not be read.
    """

    file_set: FileSet
    skipped: list[SkippedEntry] = field(default_factory=list)

    @property
    def placed_any(self) -> bool:
        return self.file_set.member_count() > 0


def fit(
    index: BucketIndex,
    target_capacity: int,
    *,
    size_of: SizeQuery = stat_size,
    pace: Pacer = no_pace,
) -> FitResult:
    """Fill one file set as close to `target_capacity` as the heuristic allows.

    Buckets are visited largest first. Within a bucket, files are tried in
    insertion order and the first file that would reach or exceed the target
    ends the scan of that bucket; the pass then drops to the next smaller
    bucket. Every placed file is removed from `index`.

    Parameters
    ----------
    index
        Bucketed files awaiting placement. Mutated.
    target_capacity
        Capacity of the produced set. The set's total stays strictly below it.
    size_of
        Size query used to re-read each file's size before placing it.
    pace
        Called after each placed file and after each bucket.

    Returns
    -------
    FitResult
        The filled set and any files skipped for unreadable sizes.

    Raises
    ------
    ValueError
        If target_capacity is negative.
    """
    file_set = FileSet(target_capacity)
    result = FitResult(file_set=file_set)
    running = 0

    for key in index.sorted_bucket_keys():
        logger.debug("Processing bucket %d", key)
        for entry in index.files_in(key):
            size = query_size(size_of, entry.path)
            if size < 0:
                logger.warning("Skipping %s: size query returned %d", entry.path, size)
                result.skipped.append(SkippedEntry(path=entry.path, bucket_key=key, reason="size unavailable"))
                continue

            if size + running < target_capacity:
                logger.debug("Adding %s (%d bytes), running size %d", entry.path, size, running + size)
                file_set.add(entry.path, size)
                running += size
                index.remove_file(key, entry.path)
            else:
                logger.debug("%s (%d bytes) does not fit; dropping to next bucket", entry.path, size)
                break

            pace()
        pace()

    logger.info("Packed %d files, %d bytes of %d", file_set.member_count(), running, target_capacity)
    return result
