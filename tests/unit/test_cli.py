"""Unit tests for the command-line interface."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

import pytest
import yaml
from click.testing import CliRunner

from discpack import __version__
from discpack.archive import runner as runner_mod
from discpack.archive import sevenzip
from discpack.archive.sevenzip import ArchiveFailedError
from discpack.cli import cli, parse_size

pytestmark = pytest.mark.unit


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger("discpack")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


class TestParseSize:
    """Tests for parse_size."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1024", 1024),
            ("1KiB", 1024),
            ("1kb", 1000),
            ("500MB", 500_000_000),
            ("4GiB", 4 * 1024**3),
            ("4.3GiB", int(4.3 * 1024**3)),
            ("100 MiB", 100 * 1024**2),
        ],
    )
    def test_units(self, text: str, expected: int) -> None:
        """Test supported size formats."""
        assert parse_size(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "12XB", "-5MB"])
    def test_invalid(self, text: str) -> None:
        """Test that malformed sizes are rejected."""
        with pytest.raises(ValueError):
            parse_size(text)


class TestPlanCommand:
    """Tests for `discpack plan`."""

    def test_text_output(self, cli_runner: CliRunner, file_tree: Path) -> None:
        """Test the human-readable plan."""
        result = cli_runner.invoke(
            cli, ["plan", str(file_tree), "--target", "320", "--granularity", "100", "--no-split"]
        )
        assert result.exit_code == 0, result.output
        assert "Fileset #1" in result.output
        assert "Fileset #2" in result.output
        assert "Files (3, 310 bytes" in result.output

    def test_json_output(self, cli_runner: CliRunner, file_tree: Path) -> None:
        """Test the JSON overview."""
        result = cli_runner.invoke(
            cli,
            ["--log-level", "ERROR", "plan", str(file_tree), "--target", "320", "--granularity", "100", "--no-split", "--format", "json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["totals"]["sets"] == 2
        assert data["totals"]["bytes"] == 550
        assert data["capacity"]["secondary_bytes"] is None

    def test_yaml_output_with_split(self, cli_runner: CliRunner, file_tree: Path) -> None:
        """Test the YAML overview when sets are split."""
        result = cli_runner.invoke(
            cli,
            [
                "--log-level",
                "ERROR",
                "plan",
                str(file_tree),
                "--target",
                "320",
                "--granularity",
                "100",
                "--secondary",
                "200",
                "--format",
                "yaml",
            ],
        )
        assert result.exit_code == 0, result.output
        data = yaml.safe_load(result.stdout)
        assert data["sets"][0]["split"] is True
        assert len(data["sets"][0]["parts"]) == 2

    def test_strict_fails_on_unplaced(self, cli_runner: CliRunner, file_tree: Path) -> None:
        """Test that --strict turns unplaced files into a failure."""
        result = cli_runner.invoke(
            cli, ["plan", str(file_tree), "--target", "200", "--granularity", "100", "--no-split", "--strict"]
        )
        assert result.exit_code == 1
        assert "Too large" in result.output
        assert "could not be placed" in result.output

    def test_not_strict_succeeds_with_unplaced(self, cli_runner: CliRunner, file_tree: Path) -> None:
        """Test that unplaced files are reported but not fatal by default."""
        result = cli_runner.invoke(
            cli, ["plan", str(file_tree), "--target", "200", "--granularity", "100", "--no-split"]
        )
        assert result.exit_code == 0
        assert "Too large" in result.output

    def test_config_file(self, cli_runner: CliRunner, file_tree: Path, tmp_path: Path) -> None:
        """Test that a config file supplies capacities."""
        cfg = tmp_path / "cfg.yaml"
        cfg.write_text("discpack:\n  target_capacity: 320\n  bucket_granularity: 100\n  secondary_capacity: null\n")
        result = cli_runner.invoke(cli, ["--log-level", "ERROR", "plan", str(file_tree), "--config", str(cfg), "--format", "json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["totals"]["sets"] == 2

    def test_config_log_level_applied(self, cli_runner: CliRunner, file_tree: Path, tmp_path: Path, monkeypatch) -> None:
        """Test that log_level from a config file sets the package logger level."""
        monkeypatch.delenv("DISCPACK_LOG_LEVEL", raising=False)
        cfg = tmp_path / "cfg.yaml"
        cfg.write_text("discpack:\n  target_capacity: 320\n  bucket_granularity: 100\n  log_level: WARNING\n")
        result = cli_runner.invoke(cli, ["plan", str(file_tree), "--config", str(cfg)])
        assert result.exit_code == 0, result.output
        logger = logging.getLogger("discpack")
        assert logger.level == logging.WARNING
        assert all(h.level == logging.WARNING for h in logger.handlers)

    def test_cli_log_level_beats_config(self, cli_runner: CliRunner, file_tree: Path, tmp_path: Path) -> None:
        """Test that --log-level takes precedence over the config file."""
        cfg = tmp_path / "cfg.toml"
        cfg.write_text('[discpack]\ntarget_capacity = 320\nbucket_granularity = 100\nlog_level = "DEBUG"\n')
        result = cli_runner.invoke(cli, ["--log-level", "ERROR", "plan", str(file_tree), "--config", str(cfg)])
        assert result.exit_code == 0, result.output
        assert logging.getLogger("discpack").level == logging.ERROR

    def test_bad_size(self, cli_runner: CliRunner, file_tree: Path) -> None:
        """Test that a malformed size is a usage error."""
        result = cli_runner.invoke(cli, ["plan", str(file_tree), "--target", "lots"])
        assert result.exit_code == 2

    def test_missing_root(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test that a missing root is reported cleanly."""
        result = cli_runner.invoke(cli, ["plan", str(tmp_path / "nope")])
        assert result.exit_code == 1
        assert "Root must be an existing directory" in result.output

    def test_version(self, cli_runner: CliRunner) -> None:
        """Test --version."""
        result = cli_runner.invoke(cli, ["--version"])
        assert __version__ in result.output


class TestArchiveCommand:
    """Tests for `discpack archive` with a fake archiver."""

    def _fake(self, monkeypatch: pytest.MonkeyPatch, *, fail: bool = False) -> list[dict[str, Any]]:
        calls: list[dict[str, Any]] = []

        class FakeArchiver:
            def __init__(self, **kwargs: Any) -> None:
                calls.append(kwargs)

            def compress(self) -> str:
                if fail:
                    raise ArchiveFailedError("CRC Failed")
                return "Everything is Ok"

        monkeypatch.setattr(runner_mod, "SevenZipArchiver", FakeArchiver)
        return calls

    def test_archives_each_part(self, cli_runner: CliRunner, file_tree: Path, tmp_path: Path, monkeypatch) -> None:
        """Test that each set becomes an archive with the password passed through."""
        calls = self._fake(monkeypatch)
        dest = tmp_path / "out"
        result = cli_runner.invoke(
            cli,
            [
                "archive",
                str(file_tree),
                "--dest",
                str(dest),
                "--password",
                "pw",
                "--target",
                "320",
                "--granularity",
                "100",
                "--no-split",
            ],
        )
        assert result.exit_code == 0, result.output
        assert [Path(c["archive_path"]).name for c in calls] == ["arch1-1.zip", "arch2-1.zip"]
        assert all(c["password"] == "pw" for c in calls)
        assert "ok" in result.output

    def test_relative_roots_and_dest(self, cli_runner: CliRunner, file_tree: Path, monkeypatch) -> None:
        """Test that relative roots and --dest are resolved from the current directory."""
        seen: list[list[str]] = []

        def run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            assert "cwd" not in kwargs
            seen.append(cmd)
            archive, inputs = Path(cmd[4]), cmd[5:]
            assert all(Path(p).is_file() for p in inputs)
            archive.touch()
            return subprocess.CompletedProcess(cmd, 0, stdout="Everything is Ok\n")

        monkeypatch.setattr(sevenzip.shutil, "which", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr(sevenzip.subprocess, "run", run)
        monkeypatch.chdir(file_tree.parent)

        args = ["--log-level", "ERROR", "archive", "data", "--dest", "out", "--target", "320", "--granularity", "100", "--no-split"]
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in (file_tree.parent / "out").iterdir()) == ["arch1-1.zip", "arch2-1.zip"]
        assert not (file_tree.parent / "out" / "out").exists()

        rerun = cli_runner.invoke(cli, args)
        assert rerun.exit_code == 0, rerun.output
        assert Path(seen[-1][4]).name == "arch4-1.zip"

    def test_failure_exit_code(self, cli_runner: CliRunner, file_tree: Path, tmp_path: Path, monkeypatch) -> None:
        """Test that a failed archive makes the command fail."""
        self._fake(monkeypatch, fail=True)
        result = cli_runner.invoke(
            cli,
            ["archive", str(file_tree), "--dest", str(tmp_path / "out"), "--target", "320", "--granularity", "100"],
        )
        assert result.exit_code == 1
        assert "archives failed" in result.output


class TestGenerateCommand:
    """Tests for `discpack generate`."""

    def test_generates_files(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Test that files are written under the target directory."""
        out = tmp_path / "gen"
        result = cli_runner.invoke(
            cli,
            ["generate", str(out), "--num", "3", "--min-size", "10", "--max-size", "100", "--total-size", "1KiB", "--seed", "5"],
        )
        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in out.iterdir()) == ["testFile1.dat", "testFile2.dat", "testFile3.dat"]
