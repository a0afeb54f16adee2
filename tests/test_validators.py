"""Tests for Validator, ContextualValidator and composition."""

from __future__ import annotations

import copy
from concurrent.futures import ThreadPoolExecutor

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from constraint_validation import (
    BaseValidator,
    Configuration,
    ConstraintViolation,
    ContextualValidator,
    Failure,
    Success,
    Validatable,
    ValidationResultError,
    Validator,
)
from constraint_validation.protocols import ValidatorProtocol

from .conftest import Address, First, Second, Third, User, messages


class Context:
    pass


# =============================================================================
# Validator Unit Tests
# =============================================================================


class TestValidatorUnit:
    """Unit tests for synchronous validators."""

    def test_base_validator_is_abstract(self) -> None:
        """Test that BaseValidator cannot be instantiated directly."""
        with pytest.raises(TypeError) as exc_info:
            BaseValidator(lambda v: None)  # type: ignore[abstract]

        assert "abstract" in str(exc_info.value).lower()

    def test_satisfied_constraints_succeed(self) -> None:
        """Test that a validation with satisfied constraints returns a success."""
        validate = Validator(lambda v: v.constrain(lambda _: True))

        assert validate(None) == Success(None)

    def test_success_keeps_identity(self) -> None:
        """Test that Success carries the same input instance."""
        value = User(name="Ann")
        validate = Validator(lambda v: v.field("name").constrain(bool))

        result = validate(value)

        assert isinstance(result, Success)
        assert result.value is value

    def test_unsatisfied_constraints_fail(self) -> None:
        """Test that unsatisfied constraints produce the corresponding violations."""
        value = User(name="Ann")
        validate = Validator(
            lambda v: v.constrain(lambda _: False)
            .explain(lambda _: "Bad value")
            .with_path(lambda p: p.absolute("path", "to", "value"))
        )

        result = validate(value)

        assert isinstance(result, Failure)
        assert result.value is value
        assert result.violations == {ConstraintViolation("Bad value", ("path", "to", "value"))}

    def test_root_path_prepended(self) -> None:
        """Test that the configured root path prefixes every violation."""
        validate = Validator(
            lambda v: v.field("name").constrain(lambda _: False),
            Configuration(root_path=("foo", "bar")),
        )

        result = validate(User(name="Ann"))

        assert isinstance(result, Failure)
        assert [v.path for v in result.violations] == [("foo", "bar", "name")]

    def test_default_message_used(self) -> None:
        """Test that the configured default message fills empty messages."""
        validate = Validator(
            lambda v: v.constrain(lambda _: False),
            Configuration(default_violation_message="default"),
        )

        result = validate(User(name="Ann"))

        assert isinstance(result, Failure)
        assert result.violations.messages == ["default"]

    def test_validate_alias(self) -> None:
        """Test that validate() is the same as calling the validator."""
        validate = Validator(lambda v: v.constrain(lambda x: x > 0))

        assert validate.validate(1) == validate(1)
        assert validate.validate(-1) == validate(-1)

    def test_decorator_usage(self) -> None:
        """Test that Validator can decorate a block function."""

        @Validator
        def validate_user(user: Validatable[User]) -> None:
            user.field("name").constrain(bool).explain(lambda _: "Name is required")

        assert validate_user.name == "validate_user"
        assert validate_user(User(name="")).violations.messages == ["Name is required"]  # type: ignore[union-attr]

    def test_or_raise(self) -> None:
        """Test unwrapping results."""
        validate = Validator(lambda v: v.constrain(lambda x: x > 0).explain(lambda _: "negative"))

        assert validate(5).or_raise() == 5
        with pytest.raises(ValidationResultError) as exc_info:
            validate(-5).or_raise()
        assert exc_info.value.violations.messages == ["negative"]

    def test_predicate_exception_propagates(self) -> None:
        """Test that a crashing predicate aborts the run without a result."""
        validate = Validator(lambda v: v.constrain(lambda x: 1 / x > 0))

        with pytest.raises(ZeroDivisionError):
            validate(0)

    def test_name_and_repr(self) -> None:
        """Test name defaults and __repr__ format."""
        validate = Validator(lambda v: None, name="users")

        assert validate.name == "users"
        assert repr(validate) == "Validator(name='users')"
        assert validate.configuration == Configuration()

    def test_protocol_compliance(self) -> None:
        """Test that Validator satisfies ValidatorProtocol."""
        assert isinstance(Validator(lambda v: None), ValidatorProtocol)


# =============================================================================
# Fail-Fast Tests
# =============================================================================


class TestFailFast:
    """Tests for fail_on_first_violation."""

    def test_only_first_violation_reported(self) -> None:
        """Test that the second predicate never runs after a violation."""
        second_executed = False

        def second(_: object) -> bool:
            nonlocal second_executed
            second_executed = True
            return False

        def block(v: Validatable[object]) -> None:
            v.constrain(lambda _: False).explain(lambda _: "first")
            v.constrain(second).explain(lambda _: "second")

        result = Validator(block, Configuration(fail_on_first_violation=True))(None)

        assert isinstance(result, Failure)
        assert result.violations.messages == ["first"]
        assert second_executed is False

    def test_satisfied_constraints_do_not_stop(self) -> None:
        """Test that fail-fast only reacts to violations."""

        def block(v: Validatable[object]) -> None:
            v.constrain(lambda _: True)
            v.constrain(lambda _: False).explain(lambda _: "only")

        result = Validator(block, Configuration(fail_on_first_violation=True))(None)

        assert isinstance(result, Failure)
        assert result.violations.messages == ["only"]

    def test_nested_validators_stop_too(self) -> None:
        """Test that the outer fail-fast configuration applies to nested validators."""
        validate_address = Validator(
            lambda a: [
                a.field("street").constrain(bool).explain(lambda _: "street"),
                a.field("city").constrain(bool).explain(lambda _: "city"),
            ]
        )

        def block(user: Validatable[User]) -> None:
            user.field("address").validate_with(validate_address)
            user.field("name").constrain(bool).explain(lambda _: "name")

        result = Validator(block, Configuration(fail_on_first_violation=True))(
            User(name="", address=Address(street="", city=""))
        )

        assert isinstance(result, Failure)
        assert list(result.violations) == [ConstraintViolation("street", ("address", "street"))]

    def test_code_between_constraints_still_runs(self) -> None:
        """Test that the stop happens at the next constraint, not at the violation."""
        executed: list[str] = []

        def block(v: Validatable[object]) -> None:
            v.constrain(lambda _: False).explain(lambda _: "first")
            executed.append("after violation")
            v.field("missing")

        validate = Validator(block, Configuration(fail_on_first_violation=True))

        with pytest.raises(AttributeError):
            validate(object())
        assert executed == ["after violation"]


# =============================================================================
# Synchronous Block Guard Tests
# =============================================================================


class TestSynchronousBlockGuard:
    """Tests refusing awaitable blocks in synchronous validators."""

    def test_coroutine_function_rejected(self) -> None:
        """Test that a coroutine function can't build a sync validator."""

        async def block(v: Validatable[object]) -> None:
            v.constrain(lambda _: False)

        with pytest.raises(TypeError) as exc_info:
            Validator(block)

        assert "Validator.suspendable" in str(exc_info.value)

    def test_contextual_coroutine_function_rejected(self) -> None:
        """Test that a coroutine function can't build a sync contextual validator."""

        async def block(v: Validatable[object], context: Context) -> None:
            v.constrain(lambda _: False)

        with pytest.raises(TypeError) as exc_info:
            ContextualValidator(block)

        assert "ContextualValidator.suspendable" in str(exc_info.value)

    def test_awaitable_result_rejected(self) -> None:
        """Test that a block returning a coroutine fails instead of succeeding."""

        async def check(v: Validatable[object]) -> None:
            v.constrain(lambda _: False)

        validate = Validator(lambda v: check(v))

        with pytest.raises(TypeError):
            validate(None)

    def test_contextual_awaitable_result_rejected(self) -> None:
        """Test the same guard for contextual validators."""

        async def check(v: Validatable[object], context: Context) -> None:
            v.constrain(lambda _: False)

        validate = ContextualValidator(lambda v, ctx: check(v, ctx))

        with pytest.raises(TypeError):
            validate(Context(), None)

    def test_awaitable_result_rejected_when_nested(self) -> None:
        """Test that composition refuses awaitable block results too."""

        async def check(v: Validatable[object]) -> None:
            v.constrain(lambda _: False)

        nested = Validator(lambda v: check(v))

        with pytest.raises(TypeError):
            Validator(lambda v: v.validate_with(nested))(None)


# =============================================================================
# Composition Tests
# =============================================================================


class TestComposition:
    """Tests for validate_with() composition."""

    def test_nested_violations_reported_in_order(self) -> None:
        """Test that composite validation reports nested violations with outer paths."""
        validate3 = Validator(lambda v: v.constrain(lambda _: False).explain(lambda _: "failure3"))

        def block2(v: Validatable[Second]) -> None:
            v.field("third").validate_with(validate3)
            v.constrain(lambda _: False).explain(lambda _: "failure2")

        def block1(v: Validatable[First]) -> None:
            v.constrain(lambda _: False).explain(lambda _: "failure1")
            v.field("second").validate_with(Validator(block2))

        result = Validator(block1)(First(Second(Third())))

        assert isinstance(result, Failure)
        assert list(result.violations) == [
            ConstraintViolation("failure1", ()),
            ConstraintViolation("failure3", ("second", "third")),
            ConstraintViolation("failure2", ("second",)),
        ]

    def test_contextual_composition(self) -> None:
        """Test that contexts are passed down to nested contextual validators."""
        seen: list[object] = []

        def block3(v: Validatable[Third], context: Context) -> None:
            seen.append(context)
            v.constrain(lambda _: False).explain(lambda _: "failure3")

        validate3 = ContextualValidator(block3)

        def block2(v: Validatable[Second], context: Context) -> None:
            v.field("third").validate_with(validate3, context)
            v.constrain(lambda _: False).explain(lambda _: "failure2")

        def block1(v: Validatable[First], context: Context) -> None:
            v.constrain(lambda _: False).explain(lambda _: "failure1")
            v.field("second").validate_with(ContextualValidator(block2), context)

        context = Context()
        result = ContextualValidator(block1)(context, First(Second(Third())))

        assert isinstance(result, Failure)
        assert result.violations.messages == ["failure1", "failure3", "failure2"]
        assert [v.path for v in result.violations] == [(), ("second", "third"), ("second",)]
        assert seen == [context]

    def test_nested_configuration_ignored(self) -> None:
        """Test that a nested validator reuses the outer registry configuration."""
        inner = Validator(
            lambda v: v.constrain(lambda _: False),
            Configuration(root_path=("inner",), default_violation_message="inner default"),
        )
        outer = Validator(
            lambda v: v.field("address").validate_with(inner),
            Configuration(root_path=("outer",), default_violation_message="outer default"),
        )

        result = outer(User(name="Ann", address=Address(street="", city="")))

        assert isinstance(result, Failure)
        assert list(result.violations) == [
            ConstraintViolation("outer default", ("outer", "address"))
        ]

    def test_suspendable_refused_synchronously(self) -> None:
        """Test that sync composition refuses suspendable validators."""

        async def block(v: Validatable[object]) -> None:
            v.constrain(lambda _: False)

        nested = Validator.suspendable(block)

        with pytest.raises(TypeError):
            Validator(lambda v: v.validate_with(nested))(None)

    def test_each_element(self) -> None:
        """Test validating list elements with indexed paths."""
        validate_tag = Validator(lambda t: t.constrain(lambda s: s.islower()).explain(lambda _: "lower"))

        def block(user: Validatable[User]) -> None:
            user.field("tags").each(lambda tag: tag.validate_with(validate_tag))

        result = Validator(block)(User(name="Ann", tags=["ok", "NOT", "fine", "Bad"]))

        assert isinstance(result, Failure)
        assert [v.path for v in result.violations] == [("tags", "1"), ("tags", "3")]


# =============================================================================
# Contextual Validator Tests
# =============================================================================


class TestContextualValidator:
    """Tests for ContextualValidator entry points."""

    def test_success(self) -> None:
        """Test a contextual validation with satisfied constraints."""
        validate = ContextualValidator(lambda v, ctx: v.constrain(lambda _: True))

        assert validate(Context(), None) == Success(None)

    def test_failure(self) -> None:
        """Test a contextual validation with unsatisfied constraints."""
        value = User(name="Ann")
        validate = ContextualValidator(
            lambda v, ctx: v.constrain(lambda _: False)
            .explain(lambda _: "Bad value")
            .with_path(lambda p: p.absolute("path", "to", "value"))
        )

        result = validate.validate(Context(), value)

        assert isinstance(result, Failure)
        assert result.value is value
        assert result.violations == {ConstraintViolation("Bad value", ("path", "to", "value"))}

    def test_context_reaches_predicates(self) -> None:
        """Test that predicates can use the context."""
        allowed = {"Ann", "Bob"}
        validate = ContextualValidator(
            lambda v, names: v.field("name").constrain(lambda n: n in names)
        )

        assert validate(allowed, User(name="Ann")).is_valid
        assert not validate(allowed, User(name="Eve")).is_valid


# =============================================================================
# Isolation Tests
# =============================================================================


class TestRunIsolation:
    """Tests for independence between runs."""

    def test_sequential_runs_are_independent(self) -> None:
        """Test that a run doesn't inherit violations from a previous one."""
        validate = Validator(lambda v: v.constrain(lambda x: x > 0))

        assert isinstance(validate(-1), Failure)
        assert isinstance(validate(1), Success)

    def test_idempotence_on_equal_values(self) -> None:
        """Test that equal but distinct inputs produce equal failures."""
        validate = Validator(lambda v: v.field("name").constrain(bool).explain(lambda _: "empty"))
        first = User(name="")
        second = copy.deepcopy(first)

        result1 = validate(first)
        result2 = validate(second)

        assert result1 == result2
        assert isinstance(result1, Failure) and isinstance(result2, Failure)
        assert result1.value is first
        assert result2.value is second

    def test_concurrent_runs_are_independent(self) -> None:
        """Test that runs on several threads don't share violations."""
        validate = Validator(
            lambda v: v.each(lambda item: item.constrain(lambda x: x % 2 == 0))
        )
        values = [list(range(n)) for n in range(50)]

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(validate, values))

        for value, result in zip(values, results):
            odd = [(str(i),) for i, x in enumerate(value) if x % 2]
            if odd:
                assert isinstance(result, Failure)
                assert [v.path for v in result.violations] == odd
            else:
                assert isinstance(result, Success)


# =============================================================================
# Property-Based Tests
# =============================================================================


class TestValidatorProperties:
    """Property-based tests for validator runs."""

    @given(outcomes=st.lists(st.tuples(st.booleans(), messages), max_size=10))
    @settings(max_examples=50)
    def test_violations_follow_declaration_order(self, outcomes: list[tuple[bool, str]]) -> None:
        """Property: each unsatisfied constraint yields one violation, in order."""

        def block(v: Validatable[object]) -> None:
            for index, (satisfied, message) in enumerate(outcomes):
                v.child(None, str(index)).constrain(lambda _, s=satisfied: s).explain(
                    lambda _, m=message: m
                )

        result = Validator(block)(None)

        expected = [
            ConstraintViolation(message, (str(i),))
            for i, (satisfied, message) in enumerate(outcomes)
            if not satisfied
        ]
        if expected:
            assert isinstance(result, Failure)
            assert list(result.violations) == expected
        else:
            assert result == Success(None)

    @given(outcomes=st.lists(st.booleans(), min_size=1, max_size=10))
    @settings(max_examples=50)
    def test_fail_fast_keeps_only_first(self, outcomes: list[bool]) -> None:
        """Property: fail-fast reports exactly the first violation, if any."""
        evaluated: list[int] = []

        def block(v: Validatable[object]) -> None:
            for index, satisfied in enumerate(outcomes):
                v.child(None, str(index)).constrain(
                    lambda _, i=index, s=satisfied: evaluated.append(i) or s
                )

        result = Validator(block, Configuration(fail_on_first_violation=True))(None)

        if all(outcomes):
            assert isinstance(result, Success)
            assert evaluated == list(range(len(outcomes)))
        else:
            first = outcomes.index(False)
            assert isinstance(result, Failure)
            assert [v.path for v in result.violations] == [(str(first),)]
            assert evaluated == list(range(first + 1))
