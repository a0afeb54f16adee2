"""Validation protocols for type checking.

Generic validator protocol that can be used for type hints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from constraint_validation.results import ValidationResult

T = TypeVar("T")


@runtime_checkable
class ValidatorProtocol(Protocol[T]):
    """Protocol for synchronous, context-free validators.

    Use this for type hints when accepting any validator of T, including
    hand-written ones that do not build on Validator.
    """

    def __call__(self, value: T) -> ValidationResult[T]:
        """Validate a value."""
        ...

    @property
    def name(self) -> str:
        """Name of this validator."""
        ...
