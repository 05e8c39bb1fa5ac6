"""discpack - bucket files into capacity-bounded sets for fixed-size media."""

from __future__ import annotations

__version__ = "2.0.0"
