"""Secondary split of packed sets that exceed an archiver's size ceiling."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from discpack.core.errors import CapacityExceededError
from discpack.core.fileset import FileSet
from discpack.pack.mode import SplitStrategy

logger = logging.getLogger(__name__)


@dataclass
class SplitResult:
    """Parts produced by splitting one packed set.

    Attributes
    ----------
    parts
        The original set first, followed by any split-off subsets. A set
        that needed no split yields a single part.
    oversized_parts
        Parts still at or above the secondary capacity.
    """

    parts: list[FileSet]
    oversized_parts: list[FileSet] = field(default_factory=list)

    @property
    def was_split(self) -> bool:
        return len(self.parts) > 1

    @property
    def ok(self) -> bool:
        return not self.oversized_parts


def bisect(file_set: FileSet, secondary_capacity: int) -> FileSet:
    """Move the most recently added half of `file_set` into a new set.

    ``member_count() // 2`` entries are popped in LIFO order into a fresh set
    of capacity `secondary_capacity`. An entry too large for the new set is
    put back and popping stops there.

    Returns
    -------
    FileSet
        The split-off subset (possibly empty).
    """
    if secondary_capacity <= 0:
        raise ValueError(f"Secondary capacity must be positive: {secondary_capacity}")

    subset = FileSet(secondary_capacity)
    to_move = file_set.member_count() // 2
    logger.debug("Moving %d of %d files", to_move, file_set.member_count())

    for _ in range(to_move):
        path, size = file_set.pop()
        try:
            subset.add(path, size)
        except CapacityExceededError:
            logger.warning("%s (%d bytes) does not fit a %d byte part", path, size, secondary_capacity)
            file_set.add(path, size)
            break
    return subset


def split_file_set(
    file_set: FileSet,
    secondary_capacity: int,
    *,
    strategy: SplitStrategy = SplitStrategy.BISECT,
) -> SplitResult:
    """Split a packed set whose total reaches `secondary_capacity`.

    With `SplitStrategy.BISECT` a single bisection is made; it brings both
    halves under the ceiling only when the ceiling is at least about half the
    set's total. `SplitStrategy.ITERATIVE` keeps bisecting any part still at
    or above the ceiling while it has two or more members. Parts that remain
    too large are reported rather than accepted silently.

    Parameters
    ----------
    file_set
        Packed set. Mutated: split-off entries are popped from it.
    secondary_capacity
        Ceiling every part should stay strictly below.
    strategy
        Split strategy.

    Returns
    -------
    SplitResult
        Ordered parts and any that are still oversized.
    """
    if secondary_capacity <= 0:
        raise ValueError(f"Secondary capacity must be positive: {secondary_capacity}")

    if file_set.total_size() < secondary_capacity:
        return SplitResult(parts=[file_set])

    logger.info(
        "Set of %d bytes exceeds the %d byte ceiling; splitting (%s)",
        file_set.total_size(),
        secondary_capacity,
        strategy.value,
    )

    if strategy is SplitStrategy.BISECT:
        subset = bisect(file_set, secondary_capacity)
        parts = [file_set, subset] if subset.member_count() > 0 else [file_set]
    else:
        parts = _split_iteratively(file_set, secondary_capacity)

    oversized = [p for p in parts if p.total_size() >= secondary_capacity]
    for part in oversized:
        logger.warning(
            "Split part of %d files is still %d bytes (ceiling %d)",
            part.member_count(),
            part.total_size(),
            secondary_capacity,
        )
    return SplitResult(parts=parts, oversized_parts=oversized)


def _split_iteratively(file_set: FileSet, secondary_capacity: int) -> list[FileSet]:
    parts: list[FileSet] = []
    pending = [file_set]
    while pending:
        part = pending.pop(0)
        if part.total_size() < secondary_capacity or part.member_count() < 2:
            parts.append(part)
            continue
        subset = bisect(part, secondary_capacity)
        if subset.member_count() == 0:
            parts.append(part)
            continue
        # Re-examine both halves; the original half keeps its position.
        pending[:0] = [part, subset]
    return parts
