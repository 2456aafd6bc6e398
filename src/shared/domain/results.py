"""Outcome of a command that targets an aggregate by identity.

Commands return an ``Outcome`` instead of mixing booleans and raised
exceptions for "not found".  A missing target yields a falsy outcome
carrying the ``NotFound`` error; business-rule violations are still
raised by the service.

    outcome = service.delete_product(7)
    if not outcome:
        ...  # outcome.error is the ProductNotFound instance
    product = outcome.unwrap()  # raises the carried error when missing
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from shared.domain.exceptions import NotFound

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a success value or a tagged ``NotFound`` (immutable)."""

    value: Optional[T] = None
    error: Optional[NotFound] = None

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def not_found(cls, error: NotFound) -> Outcome[T]:
        return cls(error=error)

    @property
    def is_not_found(self) -> bool:
        return self.error is not None

    def __bool__(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the carried ``NotFound`` if missing."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
