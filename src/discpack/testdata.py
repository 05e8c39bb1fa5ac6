"""Generate random file sets for trying out packing runs."""

from __future__ import annotations

import logging
import random
from pathlib import Path

from discpack.core.types import GIB, MIB, FileEntry

logger = logging.getLogger(__name__)

NUM_FILES = 20
MIN_FILE_SIZE = 30 * MIB
MAX_FILE_SIZE = 1500 * MIB
TOTAL_SIZE = 15 * GIB
CHUNK_SIZE = 1 * MIB


def random_sizes(
    num_files: int,
    *,
    min_size: int,
    max_size: int,
    total_size: int,
    rng: random.Random,
) -> list[int]:
    """Draw up to `num_files` sizes that never exceed `total_size` combined.

    Each size is drawn from ``[min(min_size, left), min(max_size, left))``.
    Drawing stops once the total is used up.
    """
    if min_size < 0 or max_size < min_size:
        raise ValueError(f"Invalid size range: {min_size}..{max_size}")
    sizes: list[int] = []
    left = total_size
    for _ in range(num_files):
        if left <= 0:
            break
        high = min(max_size, left)
        low = min(min_size, left)
        size = low if low == high else rng.randrange(low, high)
        sizes.append(size)
        left -= size
    return sizes


def generate_test_files(
    root: Path,
    *,
    num_files: int = NUM_FILES,
    min_size: int = MIN_FILE_SIZE,
    max_size: int = MAX_FILE_SIZE,
    total_size: int = TOTAL_SIZE,
    chunk_size: int = CHUNK_SIZE,
    seed: int | None = None,
) -> list[FileEntry]:
    """Write ``testFile<n>.dat`` files of random sizes under `root`.

    Existing files with the same names are overwritten.

    Parameters
    ----------
    root
        Output directory (created if missing).
    num_files
        Maximum number of files.
    min_size, max_size
        Bounds for each file's size in bytes.
    total_size
        Upper bound on the combined size.
    chunk_size
        Bytes written per write call.
    seed
        Random seed for reproducible sizes.

    Returns
    -------
    list[FileEntry]
        Created files.
    """
    if chunk_size <= 0:
        raise ValueError(f"Chunk size must be positive: {chunk_size}")
    root.mkdir(parents=True, exist_ok=True)
    rng = random.Random(seed)
    sizes = random_sizes(num_files, min_size=min_size, max_size=max_size, total_size=total_size, rng=rng)

    created: list[FileEntry] = []
    chunk = b"1" * (chunk_size - 1) + b"\n"
    for num, size in enumerate(sizes, start=1):
        path = root / f"testFile{num}.dat"
        logger.info("Writing %s (%d bytes)", path, size)
        with path.open("wb") as f:
            left = size
            while left >= chunk_size:
                f.write(chunk)
                left -= chunk_size
            if left:
                f.write(b"1" * (left - 1) + b"\n")
        created.append(FileEntry(path=str(path), size=size))

    logger.info("Total size: %d", sum(e.size for e in created))
    return created
