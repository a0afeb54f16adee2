"""Shared fixtures and Hypothesis strategies for tests."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from hypothesis import strategies as st

from constraint_validation import Configuration, ConstraintRegistry, Validatable
from constraint_validation.events import ValidationEvent, ValidationEventType

# -----------------------------------------------------------------------------
# Hypothesis Strategies
# -----------------------------------------------------------------------------

# Strategy for path segments (letters and numbers only)
segments = st.text(
    min_size=1,
    max_size=20,
    alphabet=st.characters(whitelist_categories=("L", "N")),
)

# Strategy for whole paths
paths = st.lists(segments, max_size=5).map(tuple)

# Strategy for messages
messages = st.text(min_size=1, max_size=200)

# Strategy for non-blank default messages
default_messages = st.text(min_size=1, max_size=50).filter(lambda s: s.strip())


# -----------------------------------------------------------------------------
# Test Models
# -----------------------------------------------------------------------------


@dataclass
class Address:
    """Simple nested value."""

    street: str
    city: str


@dataclass
class User:
    """Value with a nested value and a list."""

    name: str
    age: int = 0
    address: Address | None = None
    tags: list[str] = field(default_factory=list)


class Third:
    pass


class Second:
    def __init__(self, third: Third) -> None:
        self.third = third


class First:
    def __init__(self, second: Second) -> None:
        self.second = second


# -----------------------------------------------------------------------------
# Test Observers
# -----------------------------------------------------------------------------


class RecordingObserver:
    """Observer that records all events for testing."""

    def __init__(self) -> None:
        self.events: list[ValidationEvent] = []

    def on_event(self, event: ValidationEvent) -> None:
        self.events.append(event)

    @property
    def event_types(self) -> list[ValidationEventType]:
        return [e.event_type for e in self.events]


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def make_validatable(value: object = None, *segments: str) -> Validatable[object]:
    """Build a chain of nodes with the given segments and return the last one."""
    node: Validatable[object] = Validatable(value)
    for segment in segments:
        node = Validatable(value, segment, parent=node)
    return node


# -----------------------------------------------------------------------------
# Pytest Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def registry() -> ConstraintRegistry:
    """Create a registry with the default configuration."""
    return ConstraintRegistry(Configuration())


@pytest.fixture
def fail_fast_registry() -> ConstraintRegistry:
    """Create a registry stopping on the first violation."""
    return ConstraintRegistry(Configuration(fail_on_first_violation=True))


@pytest.fixture
def recording_observer() -> RecordingObserver:
    """Create a fresh RecordingObserver."""
    return RecordingObserver()
