"""Core data structures: file entries, file sets and the bucket index."""
