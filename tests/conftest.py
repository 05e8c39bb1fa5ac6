"""Shared test fixtures for discpack tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from discpack.config import PackConfig
from discpack.core.buckets import BucketIndex
from discpack.core.types import FileEntry
from discpack.pack.sizes import SizeQuery, mapping_size


@pytest.fixture
def sample_entries() -> list[FileEntry]:
    """Four files matching the granularity-100 walkthrough."""
    return [
        FileEntry(path="a", size=250),
        FileEntry(path="b", size=240),
        FileEntry(path="c", size=50),
        FileEntry(path="d", size=10),
    ]


@pytest.fixture
def sample_index(sample_entries: list[FileEntry]) -> BucketIndex:
    """Index of `sample_entries` with 100-byte buckets."""
    index = BucketIndex(granularity=100)
    for e in sample_entries:
        index.add(e.path, e.size)
    return index


@pytest.fixture
def sample_sizes(sample_entries: list[FileEntry]) -> SizeQuery:
    """Size query answering from `sample_entries`."""
    return mapping_size({e.path: e.size for e in sample_entries})


@pytest.fixture
def small_config() -> PackConfig:
    """Config with byte-scale capacities and no split."""
    return PackConfig(bucket_granularity=100, target_capacity=320, secondary_capacity=None)


@pytest.fixture
def file_tree(tmp_path: Path) -> Path:
    """Create a small directory tree with files of known sizes."""
    root = tmp_path / "data"
    (root / "sub").mkdir(parents=True)
    (root / "a.bin").write_bytes(b"x" * 250)
    (root / "b.bin").write_bytes(b"x" * 240)
    (root / "sub" / "c.bin").write_bytes(b"x" * 50)
    (root / "sub" / "d.bin").write_bytes(b"x" * 10)
    (root / "scratch.tmp").write_bytes(b"x" * 5)
    return root
