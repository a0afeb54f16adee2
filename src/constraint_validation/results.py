"""Validation result containers.

ConstraintViolation and ConstraintViolationSet describe what went wrong;
Success and Failure are the two possible outcomes of a validation run.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Set
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Generic, TypeVar, Union

from constraint_validation.path import Path, as_path

__all__ = [
    "ConstraintViolation",
    "ConstraintViolationSet",
    "Failure",
    "Success",
    "ValidationResult",
    "ValidationResultError",
]

T = TypeVar("T")


@dataclass(frozen=True)
class ConstraintViolation:
    """A single violation: a message and the path of the offending value."""

    message: str
    path: Path = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", as_path(self.path))


class ConstraintViolationSet(Set):
    """Immutable set of violations, iterated in the order they were reported.

    Duplicate violations (same message and path) are kept once. Violations
    sharing a path can be looked up through ``by_path``.

    Example:
        violations = result.violations
        for violation in violations.by_path.get(("email",), frozenset()):
            print(violation.message)
    """

    def __init__(self, violations: Iterable[ConstraintViolation] = ()) -> None:
        self._violations: tuple[ConstraintViolation, ...] = tuple(dict.fromkeys(violations))
        self._lookup = frozenset(self._violations)

    def __contains__(self, item: object) -> bool:
        return item in self._lookup

    def __iter__(self) -> Iterator[ConstraintViolation]:
        return iter(self._violations)

    def __len__(self) -> int:
        return len(self._violations)

    def __hash__(self) -> int:
        return self._hash()

    @cached_property
    def by_path(self) -> dict[Path, frozenset[ConstraintViolation]]:
        """Violations grouped by path."""
        grouped: dict[Path, list[ConstraintViolation]] = {}
        for violation in self._violations:
            grouped.setdefault(violation.path, []).append(violation)
        return {path: frozenset(items) for path, items in grouped.items()}

    @property
    def messages(self) -> list[str]:
        """Get the violation messages in order."""
        return [v.message for v in self._violations]

    def __repr__(self) -> str:
        return f"ConstraintViolationSet({list(self._violations)!r})"


class ValidationResultError(Exception):
    """Raised when unwrapping a failed validation result.

    Attributes:
        violations: The full violation set of the failed result.
    """

    def __init__(self, violations: ConstraintViolationSet) -> None:
        self.violations = violations
        details = "; ".join(
            f"{'.'.join(v.path) or '<root>'}: {v.message}" for v in violations
        )
        super().__init__(f"Validation failed with {len(violations)} violation(s): {details}")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful validation, carrying the original value unchanged."""

    value: T

    @property
    def is_valid(self) -> bool:
        return True

    def or_raise(self) -> T:
        """Return the validated value. Never raises."""
        return self.value


@dataclass(frozen=True)
class Failure(Generic[T]):
    """Failed validation, carrying the violations and the original value.

    Equality only considers the violations.
    """

    violations: ConstraintViolationSet
    value: Any = field(default=None, compare=False)

    @property
    def is_valid(self) -> bool:
        return False

    def or_raise(self) -> T:
        """Raise a ValidationResultError carrying the violations.

        Raises:
            ValidationResultError: Always.
        """
        raise ValidationResultError(self.violations)


ValidationResult = Union[Success[T], Failure[T]]
