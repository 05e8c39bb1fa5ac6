"""Archiving step for packed file sets."""
