"""Command-line interface for discpack."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

import click
import yaml

from discpack import __version__
from discpack.archive.runner import archive_plan
from discpack.archive.sevenzip import DEFAULT_PROGRAM, ArchiveError
from discpack.config import PackConfig, load_config
from discpack.core.types import GIB
from discpack.logging_config import set_level, setup_logging
from discpack.pack.discovery import discover_files
from discpack.pack.driver import PackPlan, pack_files
from discpack.pack.ignore import build_excluder
from discpack.pack.mode import SplitStrategy
from discpack.pack.overview import build_plan_overview
from discpack.testdata import generate_test_files

logger = logging.getLogger(__name__)

SIZE_UNITS = {
    "B": 1,
    "KB": 1000,
    "KIB": 1024,
    "MB": 1000**2,
    "MIB": 1024**2,
    "GB": 1000**3,
    "GIB": 1024**3,
    "TB": 1000**4,
    "TIB": 1024**4,
}

_SIZE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*([A-Za-z]*)$")


def parse_size(text: str) -> int:
    """Parse a size such as ``4.3GiB``, ``500MB`` or ``1048576`` into bytes."""
    m = _SIZE_RE.match(text.strip())
    if not m:
        raise ValueError(f"Invalid size: {text!r} (expected a number with an optional unit, e.g. 4.3GiB)")
    unit = (m.group(2) or "B").upper()
    if unit not in SIZE_UNITS:
        raise ValueError(f"Unknown size unit in {text!r}")
    return int(float(m.group(1)) * SIZE_UNITS[unit])


class SizeParam(click.ParamType):
    name = "size"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> int:
        if isinstance(value, int):
            return value
        try:
            return parse_size(str(value))
        except ValueError as e:
            self.fail(str(e), param, ctx)


SIZE = SizeParam()


def _plan_options(fn: Any) -> Any:
    options = [
        click.argument("roots", nargs=-1, required=True, type=click.Path(path_type=Path)),
        click.option("--recurse/--no-recurse", default=True, show_default=True, help="Recurse into subdirectories"),
        click.option("--config", "config_path", type=click.Path(exists=True, path_type=Path), help="YAML/TOML/JSON config"),
        click.option("--target", type=SIZE, help="Capacity of each set (default: single-layer DVD)"),
        click.option("--secondary", type=SIZE, help="Ceiling for each archive part (default: 4GiB)"),
        click.option("--no-split", is_flag=True, help="Disable the secondary split pass"),
        click.option("--granularity", type=SIZE, help="Bucket width (default: 100MiB)"),
        click.option(
            "--split-strategy",
            type=click.Choice([s.value for s in SplitStrategy]),
            help="How oversized sets are split",
        ),
        click.option("--sets", "max_sets", type=click.IntRange(min=1), help="Stop after N sets"),
        click.option("--pace", "pace_interval", type=click.FloatRange(min=0), help="Seconds to pause between steps"),
        click.option("--ignore", multiple=True, help="Extra ignore pattern (repeatable)"),
        click.option("--strict", is_flag=True, help="Exit non-zero if any file could not be placed"),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _build_config(
    config_path: Path | None,
    *,
    no_split: bool,
    **overrides: Any,
) -> PackConfig:
    if config_path is not None:
        config = load_config(config_path, **overrides)
    else:
        config = PackConfig(**{k: v for k, v in overrides.items() if v is not None})
    if no_split:
        config = config.model_copy(update={"secondary_capacity": None})
    _apply_config_log_level(config)
    return config


def _apply_config_log_level(config: PackConfig) -> None:
    # --log-level on the command line wins over the config file.
    ctx = click.get_current_context(silent=True)
    if ctx is not None and ctx.find_root().params.get("log_level") is not None:
        return
    if "log_level" in config.model_fields_set:
        set_level(config.log_level)


def _make_plan(
    roots: tuple[Path, ...],
    *,
    recurse: bool,
    config_path: Path | None,
    target: int | None,
    secondary: int | None,
    no_split: bool,
    granularity: int | None,
    split_strategy: str | None,
    max_sets: int | None,
    pace_interval: float | None,
    ignore: tuple[str, ...],
) -> tuple[PackConfig, PackPlan]:
    config = _build_config(
        config_path,
        no_split=no_split,
        target_capacity=target,
        secondary_capacity=secondary,
        bucket_granularity=granularity,
        split_strategy=split_strategy,
        max_sets=max_sets,
        pace_interval=pace_interval,
    )
    excluder = build_excluder(ignore=list(ignore), ignore_files=[])
    entries = discover_files(roots, recursive=recurse, excluder=excluder)
    return config, pack_files(entries, config)


def _report_unplaced(plan: PackPlan, *, strict: bool) -> None:
    for label, entries in (("Skipped", plan.skipped), ("Too large", plan.oversized), ("Unplaced", plan.remaining)):
        for entry in entries:
            click.echo(f"{label}: {entry.path} ({entry.size} bytes)", err=True)
    if strict and not plan.complete:
        raise click.ClickException(f"{len(plan.unplaced())} files could not be placed")


@click.group()
@click.version_option(__version__, prog_name="discpack")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (default: config file log_level, else $DISCPACK_LOG_LEVEL or INFO)",
)
@click.option("--log-file", type=click.Path(path_type=Path), help="Append log records to this file")
def cli(log_level: str | None, log_file: Path | None) -> None:
    """Pack files into disc-sized sets and archive them."""
    setup_logging(log_level, log_file=log_file)


@cli.command("plan")
@_plan_options
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json", "yaml"]),
    default="text",
    show_default=True,
    help="Output format",
)
def plan_cmd(fmt: str, strict: bool, **kwargs: Any) -> None:
    """Show how the files under ROOTS would be packed."""
    try:
        config, plan = _make_plan(**kwargs)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if fmt == "text":
        for packed in plan.sets:
            click.echo(f"Fileset #{packed.number} ({packed.total_size() / GIB:.2f} GiB):")
            for part_number, part in enumerate(packed.parts, start=1):
                if packed.was_split:
                    click.echo(f"Part {part_number}:")
                click.echo(str(part), nl=False)
    else:
        overview = build_plan_overview(
            plan,
            target_capacity=config.target_capacity,
            secondary_capacity=config.secondary_capacity,
        )
        if fmt == "json":
            click.echo(json.dumps(overview, indent=2))
        else:
            click.echo(yaml.safe_dump(overview, sort_keys=False))

    _report_unplaced(plan, strict=strict)


@cli.command("archive")
@_plan_options
@click.option("--dest", required=True, type=click.Path(file_okay=False, path_type=Path), help="Archive directory")
@click.option("--password", help="Password to set on each archive")
@click.option("--program", default=DEFAULT_PROGRAM, show_default=True, help="7-Zip executable")
def archive_cmd(dest: Path, password: str | None, program: str, strict: bool, **kwargs: Any) -> None:
    """Pack the files under ROOTS and write one archive per part."""
    try:
        _, plan = _make_plan(**kwargs)
        outcomes = archive_plan(plan, dest, password=password, program=program)
    except (ValueError, ArchiveError) as e:
        raise click.ClickException(str(e)) from e

    for outcome in outcomes:
        status = "ok" if outcome.ok else f"FAILED: {outcome.error}"
        click.echo(f"{outcome.path} ({outcome.files} files, {outcome.bytes} bytes): {status}")

    _report_unplaced(plan, strict=strict)
    failed = [o for o in outcomes if not o.ok]
    if failed:
        raise click.ClickException(f"{len(failed)} of {len(outcomes)} archives failed")


@cli.command("generate")
@click.argument("root", type=click.Path(file_okay=False, path_type=Path))
@click.option("--num", "num_files", type=click.IntRange(min=1), default=20, show_default=True, help="Number of files")
@click.option("--min-size", type=SIZE, default="30MiB", show_default=True, help="Smallest file size")
@click.option("--max-size", type=SIZE, default="1500MiB", show_default=True, help="Largest file size")
@click.option("--total-size", type=SIZE, default="15GiB", show_default=True, help="Combined size limit")
@click.option("--seed", type=int, help="Random seed")
def generate_cmd(root: Path, num_files: int, min_size: int, max_size: int, total_size: int, seed: int | None) -> None:
    """Create random test files under ROOT."""
    try:
        created = generate_test_files(
            root,
            num_files=num_files,
            min_size=min_size,
            max_size=max_size,
            total_size=total_size,
            seed=seed,
        )
    except (ValueError, OSError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Created {len(created)} files ({sum(e.size for e in created)} bytes) in {root}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
