"""Archive file naming."""

from __future__ import annotations

from pathlib import Path

ARCHIVE_PREFIX = "arch"


def archive_name(set_number: int, part_number: int, *, suffix: str = ".zip") -> str:
    return f"{ARCHIVE_PREFIX}{set_number}-{part_number}{suffix}"


def next_archive_path(root: Path, set_number: int, part_number: int, *, suffix: str = ".zip") -> tuple[Path, int]:
    """Find the first free ``arch<set>-<part>`` path at or after `set_number`.

    Existing archives from an earlier run are left alone: the set number is
    bumped until the name is unused, so a re-run picks up where the last one
    stopped.

    Returns
    -------
    tuple[Path, int]
        The free path and the set number it uses.
    """
    number = set_number
    path = root / archive_name(number, part_number, suffix=suffix)
    while path.exists():
        number += 1
        path = root / archive_name(number, part_number, suffix=suffix)
    return path, number
