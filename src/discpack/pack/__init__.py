"""Packing pipeline: fit, split, drive, discover."""
