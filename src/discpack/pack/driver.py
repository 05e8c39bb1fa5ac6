"""Drive repeated packing passes over a collection of files."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from discpack.config import PackConfig
from discpack.core.buckets import BucketIndex
from discpack.core.errors import SkippedEntry
from discpack.core.fileset import FileSet
from discpack.core.types import FileEntry
from discpack.pack.fit import fit
from discpack.pack.pacing import Pacer, sleep_pacer
from discpack.pack.sizes import SizeQuery, stat_size
from discpack.pack.split import split_file_set

logger = logging.getLogger(__name__)


@dataclass
class PackedSet:
    """One packed set and the archive parts it was divided into.

    Attributes
    ----------
    number
        1-based position in the plan.
    parts
        Parts to archive independently. The first part is the packed set
        itself (after any entries were split off it).
    oversized_parts
        Parts still at or above the secondary capacity after splitting.
    """

    number: int
    parts: list[FileSet]
    oversized_parts: list[FileSet] = field(default_factory=list)

    @property
    def was_split(self) -> bool:
        return len(self.parts) > 1

    def total_size(self) -> int:
        return sum(p.total_size() for p in self.parts)

    def member_count(self) -> int:
        return sum(p.member_count() for p in self.parts)


@dataclass
class PackPlan:
    """Result of packing a whole collection.

    Attributes
    ----------
    sets
        Packed sets in production order.
    skipped
        Files whose size could not be read when they were considered.
    oversized
        Files whose size alone reaches the target capacity; no set can hold them.
    remaining
        Other files left unplaced (set limit reached, or their size changed).
    """

    sets: list[PackedSet] = field(default_factory=list)
    skipped: list[FileEntry] = field(default_factory=list)
    oversized: list[FileEntry] = field(default_factory=list)
    remaining: list[FileEntry] = field(default_factory=list)

    def file_sets(self) -> list[FileSet]:
        """Every archive part, flattened in plan order."""
        return [part for s in self.sets for part in s.parts]

    def unplaced(self) -> list[FileEntry]:
        return [*self.skipped, *self.oversized, *self.remaining]

    def placed_size(self) -> int:
        return sum(s.total_size() for s in self.sets)

    @property
    def complete(self) -> bool:
        return not self.unplaced()


def build_index(entries: Iterable[FileEntry], granularity: int) -> BucketIndex:
    index = BucketIndex(granularity)
    for entry in entries:
        index.add_entry(entry)
    return index


def pack_files(
    entries: Iterable[FileEntry],
    config: PackConfig | None = None,
    *,
    size_of: SizeQuery = stat_size,
    pace: Pacer | None = None,
) -> PackPlan:
    """Pack files into sets until none remain or no further progress is possible.

    Parameters
    ----------
    entries
        Files to pack.
    config
        Capacities, granularity, split strategy and set limit.
    size_of
        Size query used when a file is placed.
    pace
        Pacer between iterations; defaults to one built from
        ``config.pace_interval``.

    Returns
    -------
    PackPlan
        Packed sets plus every file that could not be placed.
    """
    config = config or PackConfig()
    if pace is None:
        pace = sleep_pacer(config.pace_interval)

    index = build_index(entries, config.bucket_granularity)
    return pack_index(index, config, size_of=size_of, pace=pace)


def pack_index(
    index: BucketIndex,
    config: PackConfig,
    *,
    size_of: SizeQuery = stat_size,
    pace: Pacer | None = None,
) -> PackPlan:
    """Pack an already-built index. See `pack_files`."""
    if pace is None:
        pace = sleep_pacer(config.pace_interval)

    plan = PackPlan()
    skipped: dict[str, SkippedEntry] = {}
    number = 0

    while not index.is_empty():
        if config.max_sets is not None and number >= config.max_sets:
            logger.info("Reached the limit of %d sets", config.max_sets)
            break

        result = fit(index, config.target_capacity, size_of=size_of, pace=pace)
        for s in result.skipped:
            skipped[s.path] = s
        if not result.placed_any:
            logger.info("No remaining file fits a %d byte set", config.target_capacity)
            break

        number += 1
        packed = result.file_set
        logger.info("Set #%d:\n%s", number, packed)

        if config.secondary_capacity is not None:
            split = split_file_set(packed, config.secondary_capacity, strategy=config.split_strategy)
            plan.sets.append(PackedSet(number=number, parts=split.parts, oversized_parts=split.oversized_parts))
        else:
            plan.sets.append(PackedSet(number=number, parts=[packed]))

    for entry in index.entries():
        if entry.path in skipped:
            plan.skipped.append(entry)
        elif entry.size >= config.target_capacity:
            logger.warning(
                "%s (%d bytes) is too large for any %d byte set", entry.path, entry.size, config.target_capacity
            )
            plan.oversized.append(entry)
        else:
            plan.remaining.append(entry)

    logger.info(
        "Produced %d sets (%d bytes); %d files unplaced",
        len(plan.sets),
        plan.placed_size(),
        len(plan.unplaced()),
    )
    return plan
