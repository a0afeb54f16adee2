"""Validatable tree nodes.

A Validatable wraps one value of the validated tree together with its
position in that tree (own path segment and parent). All the nodes of a run
share the run's ConstraintRegistry, which receives every unsatisfied
constraint created through ``constrain``.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar, Union

from constraint_validation.constraints import Constraint, ConstraintRegistry
from constraint_validation.path import Path, PathBuilder, as_path

if TYPE_CHECKING:
    from constraint_validation.validators import BaseValidator

__all__ = ["Validatable"]

T = TypeVar("T")

Predicate = Callable[[T], bool]
AsyncPredicate = Callable[[T], Union[bool, Awaitable[bool]]]

_MISSING = object()


async def maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class Validatable(Generic[T]):
    """A value plus its position in the validated tree.

    Attributes:
        value: The wrapped value (may be None).
        path_segment: Segment this node adds to the path, None for a root.
        parent: The node this one was obtained from, used for paths only.
        registry: The registry of the run this node belongs to.

    Example:
        registry = ConstraintRegistry()
        user = Validatable(User(name="", age=12), registry=registry)

        user.field("name").constrain(bool).explain(lambda v: "Name is required")
        user.field("age").constrain(lambda age: age >= 18)

        registry.finalize(user.value)
    """

    __slots__ = ("value", "path_segment", "parent", "registry")

    def __init__(
        self,
        value: T,
        path_segment: str | None = None,
        parent: Validatable[Any] | None = None,
        registry: ConstraintRegistry | None = None,
    ) -> None:
        self.value = value
        self.path_segment = path_segment
        self.parent = parent
        if registry is None:
            registry = parent.registry if parent is not None else ConstraintRegistry()
        self.registry = registry

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def path(self, build: Callable[[PathBuilder], Path] | None = None) -> Path:
        """Return the path of this node.

        Args:
            build: Optional callable receiving a PathBuilder bound to this
                node, for computing a path derived from it.
        """
        if build is not None:
            return as_path(build(PathBuilder(self)))
        segments: list[str] = []
        node: Validatable[Any] | None = self
        while node is not None:
            if node.path_segment is not None:
                segments.append(node.path_segment)
            node = node.parent
        return tuple(reversed(segments))

    # ------------------------------------------------------------------
    # Constraints
    # ------------------------------------------------------------------

    def constrain(self, predicate: Predicate[T]) -> Constraint[T]:
        """Evaluate ``predicate`` against the value and register the outcome.

        In fail-fast mode the run stops here, before evaluating the
        predicate, when a violation was already registered.
        """
        self.registry.check_first_violation()
        return self._register(bool(predicate(self.value)))

    def constrain_if_not_null(self, predicate: Predicate[T]) -> Constraint[T]:
        """Like ``constrain``, but satisfied without evaluation when the value is None."""
        self.registry.check_first_violation()
        if self.value is None:
            return Constraint(True, self)
        return self._register(bool(predicate(self.value)))

    async def constrain_async(self, predicate: AsyncPredicate[T]) -> Constraint[T]:
        """Like ``constrain``, with a predicate that may return an awaitable."""
        self.registry.check_first_violation()
        return self._register(bool(await maybe_await(predicate(self.value))))

    async def constrain_if_not_null_async(self, predicate: AsyncPredicate[T]) -> Constraint[T]:
        """Like ``constrain_if_not_null``, with a predicate that may return an awaitable."""
        self.registry.check_first_violation()
        if self.value is None:
            return Constraint(True, self)
        return self._register(bool(await maybe_await(predicate(self.value))))

    def _register(self, satisfied: bool) -> Constraint[T]:
        constraint = Constraint(satisfied, self)
        self.registry.register(constraint)
        return constraint

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def child(self, value: Any, path_segment: str) -> Validatable[Any]:
        """Wrap ``value`` as a child of this node under ``path_segment``."""
        return Validatable(value, path_segment, parent=self, registry=self.registry)

    def field(self, name: str) -> Validatable[Any]:
        """Wrap a field of the value as a child node named ``name``.

        Attributes are read with getattr, mappings by key. A None parent
        value or a missing mapping key produce a None child value.
        """
        value = self.value
        if value is None:
            return self.child(None, name)
        if isinstance(value, Mapping):
            return self.child(value.get(name), name)
        field_value = getattr(value, name, _MISSING)
        if field_value is _MISSING:
            raise AttributeError(f"{type(value).__name__!r} object has no field {name!r}")
        return self.child(field_value, name)

    def __iter__(self) -> Iterator[Validatable[Any]]:
        """Lazily wrap each element of the value, with segments "0", "1", ..."""
        if self.value is None:
            return
        for index, item in enumerate(self.value):  # type: ignore[call-overload]
            yield self.child(item, str(index))

    def each(self, block: Callable[[Validatable[Any]], Any]) -> None:
        """Call ``block`` with each element of the value, wrapped."""
        for item in self:
            block(item)

    async def each_async(self, block: Callable[[Validatable[Any]], Any]) -> None:
        """Like ``each``, awaiting ``block`` results one element at a time."""
        for item in self:
            await maybe_await(block(item))

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def validate_with(self, validator: BaseValidator[Any], context: Any = None) -> None:
        """Validate this node with another validator, within the current run.

        The nested validator reuses this node's registry and configuration,
        so its violations are reported under this node's path.

        Args:
            validator: A synchronous validator for the wrapped value.
            context: Passed to contextual validators, ignored otherwise.

        Raises:
            TypeError: If the validator is suspendable.
        """
        if validator.is_suspendable:
            raise TypeError(
                f"{validator!r} is suspendable, use 'await validate_with_async(...)'"
            )
        validator.validate_nested(self, context)

    async def validate_with_async(self, validator: BaseValidator[Any], context: Any = None) -> None:
        """Like ``validate_with``, also accepting suspendable validators."""
        await maybe_await(validator.validate_nested(self, context))

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Validatable):
            return NotImplemented
        return self.path() == other.path() and self.value == other.value

    def __hash__(self) -> int:
        return hash(self.path())

    def __repr__(self) -> str:
        return f"Validatable(value={self.value!r}, path={self.path()!r})"
