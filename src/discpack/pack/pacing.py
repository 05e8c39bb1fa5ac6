"""Optional pacing between packer iterations.

Pacing only spaces out wall-clock work (e.g. to avoid hammering a shared
filesystem with size queries). It never changes which files are placed.
"""

from __future__ import annotations

import time
from collections.abc import Callable

Pacer = Callable[[], None]


def no_pace() -> None:
    """Default pacer: return immediately."""


def sleep_pacer(interval: float) -> Pacer:
    """Build a pacer that sleeps `interval` seconds per call.

    Raises
    ------
    ValueError
        If interval is negative.
    """
    if interval < 0:
        raise ValueError(f"Pace interval must be non-negative: {interval}")
    if interval == 0:
        return no_pace

    def pace() -> None:
        time.sleep(interval)

    return pace
