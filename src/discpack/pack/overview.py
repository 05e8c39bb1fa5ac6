"""Serializable overview of a pack plan.

The overview is what `discpack plan --format json|yaml` prints: per-set file
lists and totals plus everything that was left unplaced.
"""

from __future__ import annotations

from typing import Any

from discpack.core.fileset import FileSet
from discpack.core.types import FileEntry, GIB
from discpack.pack.driver import PackPlan


def build_plan_overview(plan: PackPlan, *, target_capacity: int, secondary_capacity: int | None) -> dict[str, Any]:
    """Build a JSON/YAML-friendly summary of a plan.

    Parameters
    ----------
    plan
        Plan produced by `pack_files`.
    target_capacity
        Capacity each set was packed against.
    secondary_capacity
        Split ceiling, or None when splitting was disabled.

    Returns
    -------
    dict[str, Any]
        Overview with capacities, sets and unplaced files.
    """
    return {
        "capacity": {
            "target_bytes": target_capacity,
            "secondary_bytes": secondary_capacity,
        },
        "totals": {
            "sets": len(plan.sets),
            "parts": len(plan.file_sets()),
            "files": sum(s.member_count() for s in plan.sets),
            "bytes": plan.placed_size(),
            "unplaced_files": len(plan.unplaced()),
        },
        "sets": [
            {
                "number": s.number,
                "bytes": s.total_size(),
                "gib": round(s.total_size() / GIB, 3),
                "split": s.was_split,
                "parts": [_part(p, oversized=any(p is o for o in s.oversized_parts)) for p in s.parts],
            }
            for s in plan.sets
        ],
        "unplaced": {
            "skipped": [_entry(e) for e in plan.skipped],
            "oversized": [_entry(e) for e in plan.oversized],
            "remaining": [_entry(e) for e in plan.remaining],
        },
    }


def _part(part: FileSet, *, oversized: bool) -> dict[str, Any]:
    return {
        "files": part.member_count(),
        "bytes": part.total_size(),
        "oversized": oversized,
        "paths": part.file_names(),
    }


def _entry(entry: FileEntry) -> dict[str, Any]:
    return {"path": entry.path, "bytes": entry.size}
