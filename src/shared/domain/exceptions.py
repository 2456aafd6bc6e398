"""Cross-module domain exception primitives."""

from __future__ import annotations


class NotFound(Exception):
    """A referenced aggregate does not exist."""
