"""Deterministic file discovery under one or more root directories."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from discpack.core.types import FileEntry
from discpack.pack.ignore import Excluder, build_excluder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoveryTraceItem:
    """Trace record explaining a discovery decision.

    Attributes
    ----------
    path
        Path relative to its root, POSIX style.
    root
        The root the path was found under.
    is_dir
        True if the entry is a directory.
    decision
        Either 'included' or 'excluded'.
    matched_pattern
        The ignore pattern that excluded the entry, if any.
    matched_source
        Where that pattern came from.
    """

    path: str
    root: str
    is_dir: bool
    decision: str  # "included" or "excluded"
    matched_pattern: str | None
    matched_source: str | None


def discover_files(
    roots: Iterable[Path],
    *,
    recursive: bool = True,
    excluder: Excluder | None = None,
    trace: list[DiscoveryTraceItem] | None = None,
) -> list[FileEntry]:
    """Enumerate files and their sizes under each root.

    Roots are walked in the order given; entries within a directory are
    visited in name order, so the output is deterministic. Symbolic links
    to directories are not followed.

    Parameters
    ----------
    roots
        Directories to search.
    recursive
        If False, only files directly inside each root are returned.
    excluder
        Ignore rules; defaults to the built-in patterns.
    trace
        Optional list to receive discovery decision traces.

    Returns
    -------
    list[FileEntry]
        Discovered files; each path appears once.

    Raises
    ------
    ValueError
        If a root doesn't exist or isn't a directory.
    """
    if excluder is None:
        excluder = build_excluder(ignore=[], ignore_files=[])

    results: list[FileEntry] = []
    seen: set[str] = set()

    def record(root: Path, rel: str, *, is_dir: bool, matched: tuple[str, str] | None) -> None:
        if trace is None:
            return
        trace.append(
            DiscoveryTraceItem(
                path=rel,
                root=str(root),
                is_dir=is_dir,
                decision="excluded" if matched else "included",
                matched_pattern=matched[0] if matched else None,
                matched_source=matched[1] if matched else None,
            )
        )

    def walk_dir(root: Path, abs_dir: Path, rel_dir: str) -> None:
        for entry in sorted(abs_dir.iterdir(), key=lambda p: p.name):
            rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            try:
                is_dir = entry.is_dir() and not entry.is_symlink()
                is_file = entry.is_file()
            except OSError as e:
                raise ValueError(f"Failed to stat path: {entry}") from e

            excluded, rule = excluder.explain(rel, is_dir=is_dir)
            if excluded and rule is not None:
                record(root, rel, is_dir=is_dir, matched=(rule.pattern, rule.source))
                continue

            if is_dir:
                if recursive:
                    walk_dir(root, entry, rel)
                continue
            if not is_file:
                continue

            key = str(entry.resolve())
            if key in seen:
                continue
            seen.add(key)

            size = entry.stat().st_size
            results.append(FileEntry(path=str(entry), size=size))
            record(root, rel, is_dir=False, matched=None)

    for root in roots:
        if not root.exists() or not root.is_dir():
            raise ValueError(f"Root must be an existing directory: {root}")
        logger.info("Processing dir '%s'", root)
        walk_dir(root, root, "")

    logger.info("Discovered %d files", len(results))
    return results
