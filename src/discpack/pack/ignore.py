"""Ignore patterns for file discovery.

Patterns are shell-style globs matched against a path's final component, or
against the whole relative path when the pattern contains a slash. A trailing
``/`` restricts a pattern to directories.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

DEFAULT_IGNORE_PATTERNS: list[str] = [
    "*.tmp",
    "*.bak",
    "*.part",
    "~$*",
    ".git/",
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    "$RECYCLE.BIN/",
    "System Volume Information/",
]

IgnorePattern = tuple[str, str]


@dataclass(frozen=True)
class IgnoreRule:
    """A compiled ignore pattern.

    Attributes
    ----------
    pattern
        Glob without the trailing slash.
    source
        Where the pattern came from (``default``, ``cli``, ``ignore_file:<path>``).
    directory_only
        True if the pattern only matches directories.
    """

    pattern: str
    source: str
    directory_only: bool

    def matches(self, rel_posix: str, *, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if "/" in self.pattern:
            return fnmatchcase(rel_posix, self.pattern.lstrip("/"))
        return fnmatchcase(rel_posix.rsplit("/", 1)[-1], self.pattern)


class Excluder:
    """Ordered set of ignore rules."""

    def __init__(self, patterns: list[IgnorePattern]) -> None:
        self.rules: list[IgnoreRule] = []
        for raw, source in patterns:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            directory_only = line.endswith("/")
            pat = line.rstrip("/")
            if not pat:
                continue
            self.rules.append(IgnoreRule(pattern=pat, source=source, directory_only=directory_only))

    def explain(self, rel_posix: str, *, is_dir: bool) -> tuple[bool, IgnoreRule | None]:
        """Return whether a path is excluded and the first rule that excluded it."""
        for rule in self.rules:
            if rule.matches(rel_posix, is_dir=is_dir):
                return True, rule
        return False, None

    def is_excluded(self, rel_posix: str, *, is_dir: bool) -> bool:
        return self.explain(rel_posix, is_dir=is_dir)[0]


def build_excluder(*, ignore: list[str], ignore_files: list[Path], use_defaults: bool = True) -> Excluder:
    """Build an Excluder from default, file and CLI patterns.

    Parameters
    ----------
    ignore
        CLI-provided ignore patterns.
    ignore_files
        Paths to files with one pattern per line.
    use_defaults
        If True, include `DEFAULT_IGNORE_PATTERNS`.

    Returns
    -------
    Excluder
        Configured excluder instance.
    """
    patterns: list[IgnorePattern] = []
    if use_defaults:
        patterns.extend((p, "default") for p in DEFAULT_IGNORE_PATTERNS)

    for p in ignore_files:
        patterns.extend((line, f"ignore_file:{p}") for line in _read_patterns_file(p))

    patterns.extend((line, "cli") for line in ignore)
    return Excluder(patterns)


def _read_patterns_file(path: Path) -> list[str]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Failed to read ignore file: {path}") from e
    return [line.rstrip("\n") for line in text.splitlines()]
