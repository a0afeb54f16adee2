"""Validators orchestrating validation runs.

A validator wraps a block of constraints written against a root
Validatable. Each call starts an isolated run: a fresh ConstraintRegistry
and root node are created, the block is executed, and the registry is
finalized into a ValidationResult.
"""

from __future__ import annotations

import inspect
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import Any, Callable, ClassVar, Generic, TypeVar

from constraint_validation.configuration import Configuration
from constraint_validation.constraints import ConstraintRegistry, FirstViolationError
from constraint_validation.events import (
    ObservableMixin,
    ValidationEvent,
    ValidationEventType,
)
from constraint_validation.results import ValidationResult
from constraint_validation.validatable import Validatable, maybe_await

__all__ = [
    "BaseValidator",
    "ContextualSuspendableValidator",
    "ContextualValidator",
    "SuspendableValidator",
    "Validator",
]

T = TypeVar("T")
C = TypeVar("C")


class BaseValidator(ObservableMixin, ABC, Generic[T]):
    """Abstract base class for validators.

    Holds the validation block and its configuration, both read-only after
    construction, and implements the start and finish of a run. Subclasses
    decide how the block is called (with or without context, sync or async).

    Supports the Observer pattern: observers receive VALIDATION_STARTED and
    VALIDATION_COMPLETED from the validator, and CONSTRAINT_VIOLATED and
    FIRST_VIOLATION_ABORTED from the registry of each run.
    """

    is_suspendable: ClassVar[bool] = False

    def __init__(
        self,
        block: Callable[..., Any],
        configuration: Configuration | None = None,
        *,
        name: str | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            block: The validation block.
            configuration: Options of the runs. Defaults to Configuration().
            name: Name for event reporting. Defaults to the block's name.
        """
        self._block = block
        self._configuration = configuration or Configuration()
        self._name = name or getattr(block, "__name__", "validator")

    @property
    def name(self) -> str:
        """Name of this validator."""
        return self._name

    @property
    def configuration(self) -> Configuration:
        """Configuration applied to top-level runs."""
        return self._configuration

    @abstractmethod
    def validate_nested(self, validatable: Validatable[T], context: Any = None) -> Any:
        """Run the block against a node of an ongoing run.

        No registry is created: constraints land in the registry of
        ``validatable``. Used by ``Validatable.validate_with``.
        """
        ...

    def _start_run(self, value: T) -> tuple[ConstraintRegistry, Validatable[T], float]:
        registry = ConstraintRegistry(self._configuration)
        registry.add_observers(self.observers)

        self.notify(
            ValidationEvent(
                event_type=ValidationEventType.VALIDATION_STARTED,
                source=self,
                data={"value": value, "validator_name": self._name},
            )
        )
        return registry, Validatable(value, registry=registry), time.perf_counter()

    def _finish_run(
        self, registry: ConstraintRegistry, value: T, start_time: float
    ) -> ValidationResult[T]:
        result = registry.finalize(value)
        duration_ms = (time.perf_counter() - start_time) * 1000

        self.notify(
            ValidationEvent(
                event_type=ValidationEventType.VALIDATION_COMPLETED,
                source=self,
                data={
                    "value": value,
                    "validator_name": self._name,
                    "is_valid": result.is_valid,
                    "violations": getattr(result, "violations", ()),
                    "duration_ms": duration_ms,
                },
            )
        )
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self._name!r})"


def _reject_coroutine_function(block: Callable[..., Any], factory: str) -> None:
    if inspect.iscoroutinefunction(block):
        raise TypeError(
            f"{getattr(block, '__name__', block)!r} is a coroutine function, "
            f"use {factory}(...) to validate with it"
        )


def _ensure_completed(result: Any, factory: str) -> None:
    """Refuse block results that still have to be awaited.

    An unawaited block never registers its constraints, so the run would
    wrongly end in a success.
    """
    if inspect.isawaitable(result):
        close = getattr(result, "close", None)
        if close is not None:
            close()
        raise TypeError(
            f"The validation block returned an awaitable, use {factory}(...) to validate with it"
        )


class Validator(BaseValidator[T]):
    """Synchronous validator for values of type T.

    In fail-fast mode the run stops when the block reaches its next
    ``constrain`` after the first violation, not at the violation itself.
    Code of the block between the two still runs, and an exception it
    raises propagates instead of producing a Failure.

    Raises:
        TypeError: If the block is a coroutine function or returns an
            awaitable. Use ``Validator.suspendable`` for those.

    Example:
        @Validator
        def validate_user(user: Validatable[User]) -> None:
            user.field("name").constrain(bool).explain(lambda v: "Name is required")
            user.field("address").validate_with(validate_address)

        result = validate_user(User(name="", address=Address(city="")))
        if not result.is_valid:
            for violation in result.violations:
                print(violation.path, violation.message)
    """

    def __init__(
        self,
        block: Callable[[Validatable[T]], Any],
        configuration: Configuration | None = None,
        *,
        name: str | None = None,
    ) -> None:
        _reject_coroutine_function(block, "Validator.suspendable")
        super().__init__(block, configuration, name=name)

    def __call__(self, value: T) -> ValidationResult[T]:
        """Validate ``value`` in a new run."""
        registry, root, start_time = self._start_run(value)
        try:
            _ensure_completed(self._block(root), "Validator.suspendable")
        except FirstViolationError:
            # Fail-fast stop: finalize with the violations registered so far.
            pass
        return self._finish_run(registry, value, start_time)

    def validate(self, value: T) -> ValidationResult[T]:
        """Validate ``value`` in a new run. Same as calling the validator."""
        return self(value)

    def validate_nested(self, validatable: Validatable[T], context: Any = None) -> None:
        _ensure_completed(self._block(validatable), "Validator.suspendable")

    @classmethod
    def suspendable(
        cls,
        block: Callable[[Validatable[T]], Awaitable[Any]],
        configuration: Configuration | None = None,
        *,
        name: str | None = None,
    ) -> SuspendableValidator[T]:
        """Create a validator whose block is a coroutine function."""
        return SuspendableValidator(block, configuration, name=name)


class ContextualValidator(BaseValidator[T], Generic[C, T]):
    """Synchronous validator receiving a context along with the value.

    Example:
        def validate_order(order: Validatable[Order], catalog: Catalog) -> None:
            order.field("sku").constrain(catalog.contains)

        validate = ContextualValidator(validate_order)
        result = validate(catalog, order)
    """

    def __init__(
        self,
        block: Callable[[Validatable[T], C], Any],
        configuration: Configuration | None = None,
        *,
        name: str | None = None,
    ) -> None:
        _reject_coroutine_function(block, "ContextualValidator.suspendable")
        super().__init__(block, configuration, name=name)

    def __call__(self, context: C, value: T) -> ValidationResult[T]:
        """Validate ``value`` with ``context`` in a new run."""
        registry, root, start_time = self._start_run(value)
        try:
            _ensure_completed(self._block(root, context), "ContextualValidator.suspendable")
        except FirstViolationError:
            pass
        return self._finish_run(registry, value, start_time)

    def validate(self, context: C, value: T) -> ValidationResult[T]:
        """Validate ``value`` with ``context``. Same as calling the validator."""
        return self(context, value)

    def validate_nested(self, validatable: Validatable[T], context: Any = None) -> None:
        _ensure_completed(
            self._block(validatable, context), "ContextualValidator.suspendable"
        )

    @classmethod
    def suspendable(
        cls,
        block: Callable[[Validatable[T], C], Awaitable[Any]],
        configuration: Configuration | None = None,
        *,
        name: str | None = None,
    ) -> ContextualSuspendableValidator[C, T]:
        """Create a contextual validator whose block is a coroutine function."""
        return ContextualSuspendableValidator(block, configuration, name=name)


class SuspendableValidator(BaseValidator[T]):
    """Validator whose block may await, e.g. for lookups in a database.

    Constraints still run one at a time in the order the block reaches
    them. Cancelling the calling task aborts the run without a result.

    Example:
        async def validate_user(user: Validatable[User]) -> None:
            email = user.field("email")
            await email.constrain_async(is_email_available)

        validate = Validator.suspendable(validate_user)
        result = await validate(user)
    """

    is_suspendable: ClassVar[bool] = True

    async def __call__(self, value: T) -> ValidationResult[T]:
        """Validate ``value`` in a new run."""
        registry, root, start_time = self._start_run(value)
        try:
            await maybe_await(self._block(root))
        except FirstViolationError:
            pass
        return self._finish_run(registry, value, start_time)

    async def validate(self, value: T) -> ValidationResult[T]:
        return await self(value)

    async def validate_nested(self, validatable: Validatable[T], context: Any = None) -> None:
        await maybe_await(self._block(validatable))


class ContextualSuspendableValidator(BaseValidator[T], Generic[C, T]):
    """Suspendable validator receiving a context along with the value."""

    is_suspendable: ClassVar[bool] = True

    async def __call__(self, context: C, value: T) -> ValidationResult[T]:
        """Validate ``value`` with ``context`` in a new run."""
        registry, root, start_time = self._start_run(value)
        try:
            await maybe_await(self._block(root, context))
        except FirstViolationError:
            pass
        return self._finish_run(registry, value, start_time)

    async def validate(self, context: C, value: T) -> ValidationResult[T]:
        return await self(context, value)

    async def validate_nested(self, validatable: Validatable[T], context: Any = None) -> None:
        await maybe_await(self._block(validatable, context))
