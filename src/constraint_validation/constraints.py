"""Constraints and the per-run constraint registry.

A Constraint is the outcome of one predicate evaluated against a
Validatable. Unsatisfied constraints are collected by the ConstraintRegistry
of the run, which turns them into violations once the run is over.
"""

from __future__ import annotations

from collections.abc import Awaitable, Iterator
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from constraint_validation.configuration import Configuration
from constraint_validation.events import (
    ObservableMixin,
    ValidationEvent,
    ValidationEventType,
)
from constraint_validation.path import Path, PathBuilder, as_path
from constraint_validation.results import (
    ConstraintViolation,
    ConstraintViolationSet,
    Failure,
    Success,
    ValidationResult,
)

if TYPE_CHECKING:
    from constraint_validation.validatable import Validatable

__all__ = [
    "Constraint",
    "ConstraintRegistry",
    "FirstViolationError",
    "InvalidConstraintConversionError",
    "run_with_constraint_registry",
    "run_with_constraint_registry_async",
]

T = TypeVar("T")


class InvalidConstraintConversionError(ValueError):
    """Raised when a satisfied constraint is converted to a violation."""


class FirstViolationError(Exception):
    """Internal signal stopping a run in fail-fast mode.

    Caught by the validator running the block; it never reaches callers
    of a validator.

    Attributes:
        violation: The violation that stopped the run.
    """

    def __init__(self, violation: ConstraintViolation) -> None:
        self.violation = violation
        super().__init__(f"Validation stopped on first violation: {violation.message}")


class Constraint(Generic[T]):
    """Outcome of a predicate evaluated against a Validatable.

    ``message`` and ``path`` stay mutable until the run is finalized, so
    chained calls made after registration are reflected in the violation.

    Example:
        (
            user.field("age")
            .constrain(lambda age: age >= 18)
            .explain(lambda v: f"Must be an adult, got {v.value}")
            .with_path(lambda p: p.absolute("profile", "age"))
        )
    """

    __slots__ = ("satisfied", "validatable", "message", "path")

    def __init__(self, satisfied: bool, validatable: Validatable[T]) -> None:
        self.satisfied = satisfied
        self.validatable = validatable
        self.message = ""
        self.path: Path = validatable.path()

    def explain(self, message: Callable[[Validatable[T]], str]) -> Constraint[T]:
        """Set the message of an unsatisfied constraint.

        Args:
            message: Called with the bound Validatable; not called if the
                constraint is satisfied.

        Returns:
            Self for method chaining.
        """
        if not self.satisfied:
            self.message = message(self.validatable)
        return self

    otherwise = explain

    def with_path(self, build: Callable[[PathBuilder], Path]) -> Constraint[T]:
        """Override the path of an unsatisfied constraint.

        Args:
            build: Called with a PathBuilder bound to the Validatable; not
                called if the constraint is satisfied.

        Returns:
            Self for method chaining.
        """
        if not self.satisfied:
            self.path = as_path(build(PathBuilder(self.validatable)))
        return self

    def to_violation(self, default_message: str, root_path: Path) -> ConstraintViolation:
        """Convert this unsatisfied constraint into a violation.

        Args:
            default_message: Used when no message was set.
            root_path: Prepended to the constraint path.

        Raises:
            InvalidConstraintConversionError: If the constraint is satisfied.
        """
        if self.satisfied:
            raise InvalidConstraintConversionError(
                "A satisfied constraint cannot be converted to a violation"
            )
        return ConstraintViolation(
            message=self.message or default_message,
            path=(*root_path, *self.path),
        )

    def _key(self) -> tuple[bool, Path, str]:
        return (self.satisfied, self.validatable.path(), self.message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Constraint):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"Constraint(satisfied={self.satisfied}, path={self.path!r}, "
            f"message={self.message!r})"
        )


class ConstraintRegistry(ObservableMixin):
    """Collects the unsatisfied constraints of a single validation run.

    A registry belongs to exactly one run: every Validatable of the run
    shares it, and it is discarded once finalized. It is only written from
    the run's own call stack, so it needs no locking.
    """

    def __init__(self, configuration: Configuration | None = None) -> None:
        self.configuration = configuration or Configuration()
        self._constraints: list[Constraint[Any]] = []
        self._finalized = False

    def register(self, constraint: Constraint[Any]) -> None:
        """Add a constraint if it is unsatisfied.

        Raises:
            RuntimeError: If the registry was already finalized.
        """
        if self._finalized:
            raise RuntimeError("Cannot register constraints on a finalized registry")
        if not constraint.satisfied:
            self._constraints.append(constraint)

    def check_first_violation(self) -> None:
        """Stop the run if fail-fast is enabled and a violation is registered.

        Raises:
            FirstViolationError: When the run must stop.
        """
        if self.configuration.fail_on_first_violation and self._constraints:
            violation = self._to_violation(self._constraints[0])
            self.notify(
                ValidationEvent(
                    event_type=ValidationEventType.FIRST_VIOLATION_ABORTED,
                    source=self,
                    data={"path": violation.path, "message": violation.message},
                )
            )
            raise FirstViolationError(violation)

    def finalize(self, value: T) -> ValidationResult[T]:
        """Turn the registered constraints into a validation result.

        Args:
            value: The root value of the run.

        Returns:
            Success(value) if nothing was registered, otherwise a Failure
            with one violation per distinct registered constraint.
        """
        self._finalized = True
        if not self._constraints:
            return Success(value)

        violations = ConstraintViolationSet(self._to_violation(c) for c in self._constraints)
        for violation in violations:
            self.notify(
                ValidationEvent(
                    event_type=ValidationEventType.CONSTRAINT_VIOLATED,
                    source=self,
                    data={"path": violation.path, "message": violation.message},
                )
            )
        return Failure(violations, value)

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def _to_violation(self, constraint: Constraint[Any]) -> ConstraintViolation:
        return constraint.to_violation(
            self.configuration.default_violation_message,
            self.configuration.root_path,
        )

    def __iter__(self) -> Iterator[Constraint[Any]]:
        return iter(list(self._constraints))

    def __len__(self) -> int:
        return len(self._constraints)

    def __repr__(self) -> str:
        return (
            f"ConstraintRegistry(constraints={len(self._constraints)}, "
            f"finalized={self._finalized})"
        )


def run_with_constraint_registry(
    value: T,
    configuration: Configuration | None,
    block: Callable[[ConstraintRegistry], Any],
) -> ValidationResult[T]:
    """Run ``block`` with a fresh registry and finalize it.

    A fail-fast stop raised by the block ends it early; any other
    exception propagates and no result is produced.
    """
    registry = ConstraintRegistry(configuration)
    try:
        block(registry)
    except FirstViolationError:
        pass
    return registry.finalize(value)


async def run_with_constraint_registry_async(
    value: T,
    configuration: Configuration | None,
    block: Callable[[ConstraintRegistry], Awaitable[Any]],
) -> ValidationResult[T]:
    """Async counterpart of run_with_constraint_registry."""
    registry = ConstraintRegistry(configuration)
    try:
        await block(registry)
    except FirstViolationError:
        pass
    return registry.finalize(value)
