"""Archive every part of a pack plan."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from discpack.archive.naming import next_archive_path
from discpack.archive.sevenzip import DEFAULT_PROGRAM, ArchiveError, SevenZipArchiver
from discpack.core.fileset import FileSet
from discpack.pack.driver import PackPlan

logger = logging.getLogger(__name__)

ArchiverFactory = Callable[..., SevenZipArchiver]


@dataclass(frozen=True)
class ArchiveOutcome:
    """Result of archiving one part.

    Attributes
    ----------
    set_number
        Number used in the archive name.
    part_number
        1-based part within the set.
    path
        Archive path.
    files
        Number of files in the part.
    bytes
        Uncompressed size of the part.
    error
        Failure message, or None on success.
    """

    set_number: int
    part_number: int
    path: Path
    files: int
    bytes: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def archive_plan(
    plan: PackPlan,
    dest: Path,
    *,
    password: str | None = None,
    program: str = DEFAULT_PROGRAM,
    stop_on_error: bool = False,
    archiver_factory: ArchiverFactory | None = None,
) -> list[ArchiveOutcome]:
    """Create one archive per plan part under `dest`.

    Archives are named ``arch<set>-<part>.zip``; set numbers already used in
    `dest` are skipped.

    Parameters
    ----------
    plan
        Plan to archive.
    dest
        Destination directory (created if missing).
    password
        Optional archive password.
    program
        7-Zip executable.
    stop_on_error
        Re-raise the first `ArchiveError` instead of recording it.
    archiver_factory
        Builds the archiver for each part; defaults to `SevenZipArchiver`.

    Returns
    -------
    list[ArchiveOutcome]
        One outcome per part, in plan order.
    """
    factory = archiver_factory or SevenZipArchiver
    dest.mkdir(parents=True, exist_ok=True)
    outcomes: list[ArchiveOutcome] = []
    counter = 1

    for packed in plan.sets:
        _, counter = next_archive_path(dest, counter, 1)
        for part_number, part in enumerate(packed.parts, start=1):
            path, number = next_archive_path(dest, counter, part_number)
            counter = max(counter, number)
            outcomes.append(
                _archive_part(
                    part,
                    path,
                    set_number=number,
                    part_number=part_number,
                    workdir=dest,
                    password=password,
                    program=program,
                    stop_on_error=stop_on_error,
                    archiver_factory=factory,
                )
            )
        counter += 1
    return outcomes


def _archive_part(
    part: FileSet,
    path: Path,
    *,
    set_number: int,
    part_number: int,
    workdir: Path,
    password: str | None,
    program: str,
    stop_on_error: bool,
    archiver_factory: ArchiverFactory,
) -> ArchiveOutcome:
    logger.info("Compressing %d files into '%s'...", part.member_count(), path)
    archiver = archiver_factory(
        archive_path=path,
        files=part.file_names(),
        workdir=workdir,
        program=program,
        password=password,
    )
    error: str | None = None
    try:
        archiver.compress()
    except ArchiveError as e:
        if stop_on_error:
            raise
        logger.error("Archiving '%s' failed: %s", path, e)
        error = str(e)
    return ArchiveOutcome(
        set_number=set_number,
        part_number=part_number,
        path=path,
        files=part.member_count(),
        bytes=part.total_size(),
        error=error,
    )
