"""Split strategy selection."""

from __future__ import annotations

from enum import Enum


class SplitStrategy(str, Enum):
    """How a packed set over the secondary ceiling is divided.

    Attributes
    ----------
    BISECT
        One split: the most recently added half moves into a new set.
    ITERATIVE
        Keep bisecting every part still at or over the ceiling.
    """

    BISECT = "bisect"
    ITERATIVE = "iterative"
