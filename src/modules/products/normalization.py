"""Canonical forms for product text fields.

Every function here is idempotent: ``f(f(x)) == f(x)``.
"""

from __future__ import annotations

from typing import Optional


def normalize_sku(sku: str) -> str:
    """Trim surrounding whitespace and upper-case (``" abc-1 "`` -> ``"ABC-1"``)."""
    return sku.strip().upper()


def normalize_text(value: str) -> str:
    return value.strip()


def normalize_optional_text(value: Optional[str]) -> str:
    """Trim optional free text; ``None`` becomes the empty string."""
    if value is None:
        return ""
    return value.strip()
