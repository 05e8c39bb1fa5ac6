"""Thin wrapper around the 7-Zip command line (``7z``).

The archiver is told which files to store and where; success is judged by
scraping 7-Zip's console output, since its exit code alone does not flag
CRC failures or duplicate names. Expected output on success contains
``Everything is Ok``; failures show ``Sub items Errors: N``, ``CRC Failed``,
``System error:`` or ``Error: Duplicate filename: ...``.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PROGRAM = "7z"


class ArchiveMode(str, Enum):
    """7-Zip command letters."""

    ADD = "a"
    DELETE = "d"
    EXTRACT = "e"
    LIST = "l"
    TEST = "t"
    UPDATE = "u"
    EXTRACT_FULL = "x"


class ArchiveType(str, Enum):
    """Archive formats accepted by ``-t``."""

    SEVEN_ZIP = "7z"
    ZIP = "zip"
    GZIP = "gzip"
    BZIP2 = "bzip2"
    TAR = "tar"


# Compression levels for ``-mx`` with zip archives; 0 stores without compressing.
ZIP_COMPRESSION_LEVELS = ("0", "1", "3", "5", "7", "9")


class InvalidArchiveOptionError(ValueError):
    """Raised for an unknown mode, type or compression level."""


class ArchiveError(RuntimeError):
    """Base class for archiving failures.

    Attributes
    ----------
    output
        Console output captured from 7-Zip, if it ran.
    """

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


class NoFilesError(ArchiveError):
    """Raised when there is nothing to archive."""


class ArchiveCommandError(ArchiveError):
    """Raised when 7-Zip cannot be started or exits with a failure status."""


class ArchiveFailedError(ArchiveError):
    """Raised when the output reports item errors, CRC failures or system errors."""


class DuplicateFileError(ArchiveError):
    """Raised when 7-Zip rejects duplicate file names.

    Attributes
    ----------
    duplicates
        Text 7-Zip printed after the duplicate-filename error.
    """

    def __init__(self, message: str, output: str = "", duplicates: str = "") -> None:
        super().__init__(message, output)
        self.duplicates = duplicates


class ArchiveIncompleteError(ArchiveError):
    """Raised when no error was reported but the success line is missing."""


@dataclass(frozen=True)
class OutputReport:
    """Facts scraped from 7-Zip's console output.

    Attributes
    ----------
    item_errors
        Count from ``Sub items Errors: N`` (0 if absent).
    crc_failed
        True if any ``CRC Failed`` line was seen.
    system_error
        True if a ``System error:`` line was seen.
    duplicates
        Text following ``Error: Duplicate filename:``, or None.
    everything_ok
        True if ``Everything is Ok`` was seen.
    """

    item_errors: int
    crc_failed: bool
    system_error: bool
    duplicates: str | None
    everything_ok: bool

    @property
    def failed(self) -> bool:
        return self.item_errors > 0 or self.crc_failed or self.system_error


_ITEM_ERRORS = re.compile(r"Sub items Errors:\s*(\d+)", re.IGNORECASE)
_CRC_FAILED = re.compile(r"CRC Failed", re.IGNORECASE)
_SYSTEM_ERROR = re.compile(r"System error:", re.IGNORECASE)
_DUPLICATE = re.compile(r"Error:\s+Duplicate filename:\s+(.+)", re.IGNORECASE | re.DOTALL)
_EVERYTHING_OK = re.compile(r"Everything is Ok", re.IGNORECASE)


def parse_output(text: str) -> OutputReport:
    """Scrape a 7-Zip console transcript."""
    m = _ITEM_ERRORS.search(text)
    dup = _DUPLICATE.search(text)
    return OutputReport(
        item_errors=int(m.group(1)) if m else 0,
        crc_failed=bool(_CRC_FAILED.search(text)),
        system_error=bool(_SYSTEM_ERROR.search(text)),
        duplicates=dup.group(1).strip() if dup else None,
        everything_ok=bool(_EVERYTHING_OK.search(text)),
    )


def check_output(text: str) -> OutputReport:
    """Parse a transcript and raise if it reports a failure.

    Raises
    ------
    ArchiveFailedError
        On item errors, CRC failures or system errors.
    DuplicateFileError
        On a duplicate-filename error.
    ArchiveIncompleteError
        If no error was seen but ``Everything is Ok`` is missing.
    """
    report = parse_output(text)
    if report.failed:
        raise ArchiveFailedError(
            f"7-Zip reported failures (item errors: {report.item_errors}, "
            f"CRC failed: {report.crc_failed}, system error: {report.system_error})",
            output=text,
        )
    if report.duplicates is not None:
        logger.error("Duplicate files:\n%s", report.duplicates)
        raise DuplicateFileError("7-Zip rejected duplicate file names", output=text, duplicates=report.duplicates)
    if not report.everything_ok:
        raise ArchiveIncompleteError("7-Zip did not report success", output=text)
    return report


@dataclass
class SevenZipArchiver:
    """Build and run a 7-Zip command for one file set.

    Parameters
    ----------
    archive_path
        Archive to create.
    files
        Files to store, in order.
    workdir
        Directory the archive is written under; created if missing. Relative
        paths are resolved against the caller's working directory.
    program
        7-Zip executable name or path.
    password
        Optional archive password.
    """

    archive_path: Path
    files: Sequence[str]
    workdir: Path
    program: str = DEFAULT_PROGRAM
    password: str | None = None
    mode: ArchiveMode = ArchiveMode.ADD
    archive_type: ArchiveType = ArchiveType.ZIP
    compression: str = "0"
    timeout: float | None = None
    extra_args: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.set_mode(self.mode)
        self.set_archive_type(self.archive_type)
        self.set_compression(self.compression)

    def set_mode(self, mode: str | ArchiveMode) -> None:
        try:
            self.mode = ArchiveMode(mode)
        except ValueError as e:
            raise InvalidArchiveOptionError(f"Invalid 7-Zip mode: {mode!r}") from e

    def set_archive_type(self, archive_type: str | ArchiveType) -> None:
        try:
            self.archive_type = ArchiveType(archive_type)
        except ValueError as e:
            raise InvalidArchiveOptionError(f"Invalid archive type: {archive_type!r}") from e

    def set_compression(self, level: str | int) -> None:
        """Set the ``-mx`` level; only zip archives are supported."""
        level = str(level)
        if self.archive_type is not ArchiveType.ZIP and level != "0":
            raise InvalidArchiveOptionError(f"Compression levels are only supported for zip, not {self.archive_type.value}")
        if level not in ZIP_COMPRESSION_LEVELS:
            raise InvalidArchiveOptionError(f"Invalid compression level: {level!r}")
        self.compression = level

    def build_command(self) -> list[str]:
        """Return the argument vector for this archive run.

        Raises
        ------
        NoFilesError
            If there are no files to archive.
        ValueError
            If the archive path is empty.
        """
        if not self.files:
            raise NoFilesError("No files to archive")
        if not str(self.archive_path):
            raise ValueError("Archive path must not be empty")

        cmd = [self.program, self.mode.value, f"-t{self.archive_type.value}", f"-mx{self.compression}"]
        if self.password:
            cmd.append(f"-p{self.password}")
        cmd.extend(self.extra_args)
        cmd.append(str(self.archive_path))
        cmd.extend(str(f) for f in self.files)
        return cmd

    def compress(self) -> str:
        """Run 7-Zip and verify its output.

        Returns
        -------
        str
            Combined stdout/stderr of the 7-Zip run.

        Raises
        ------
        ArchiveError
            If 7-Zip cannot run, exits non-zero or reports a failure.
        """
        cmd = self.build_command()
        if shutil.which(self.program) is None and not Path(self.program).exists():
            raise ArchiveCommandError(f"7-Zip executable not found: {self.program}")

        self.workdir.mkdir(parents=True, exist_ok=True)
        self.archive_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Compression command: %s", " ".join(cmd))

        # Inputs and archive path are relative to the caller's directory.
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ArchiveCommandError(f"Failed to run {self.program}: {e}") from e

        output = proc.stdout or ""
        logger.debug("Command output:\n%s", output)
        if proc.returncode != 0:
            raise ArchiveCommandError(f"{self.program} exited with status {proc.returncode}", output=output)

        check_output(output)
        return output
