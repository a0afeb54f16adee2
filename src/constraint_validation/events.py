"""Observer pattern implementation for validation events.

Provides event types, observer protocol, and mixin for adding observer
support to validators and constraint registries.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from contextlib import suppress
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Protocol, runtime_checkable

__all__ = [
    "ValidationEventType",
    "ValidationEvent",
    "ValidationObserver",
    "ObservableMixin",
    "LoggingObserver",
]


class ValidationEventType(Enum):
    """Types of validation events that can be observed."""

    VALIDATION_STARTED = auto()
    """Emitted when a validator starts a run on a root value."""

    CONSTRAINT_VIOLATED = auto()
    """Emitted for each violation when a failed run is finalized."""

    FIRST_VIOLATION_ABORTED = auto()
    """Emitted when fail-fast mode stops a run."""

    VALIDATION_COMPLETED = auto()
    """Emitted when a run is finalized into a result."""


@dataclass
class ValidationEvent:
    """A validation event that can be observed.

    Attributes:
        event_type: The type of event that occurred.
        source: The object that emitted the event (validator or registry).
        data: Event-specific data dictionary.

    Example:
        event = ValidationEvent(
            event_type=ValidationEventType.CONSTRAINT_VIOLATED,
            source=registry,
            data={"path": ("email",), "message": "Invalid format"},
        )
    """

    event_type: ValidationEventType
    source: object
    data: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class ValidationObserver(Protocol):
    """Protocol for validation event observers.

    Example:
        class MetricsObserver:
            def on_event(self, event: ValidationEvent) -> None:
                if event.event_type == ValidationEventType.CONSTRAINT_VIOLATED:
                    metrics.increment("validation.violations")
    """

    def on_event(self, event: ValidationEvent) -> None:
        """Handle a validation event.

        Args:
            event: The validation event to handle.
        """
        ...


class ObservableMixin:
    """Observer support for validators and constraint registries.

    Observers are called in the order they were attached. Attaching the
    same observer twice has no effect, and detaching one that was never
    attached is a no-op.

    Example:
        validator = Validator(check_user)
        validator.add_observer(LoggingObserver())
    """

    _observers: list[ValidationObserver]

    def _attached(self) -> list[ValidationObserver]:
        # Subclasses don't call a mixin __init__, the list is created on first use.
        try:
            return self._observers
        except AttributeError:
            self._observers = []
            return self._observers

    def add_observer(self, observer: ValidationObserver) -> None:
        """Attach an observer to receive validation events."""
        attached = self._attached()
        if observer not in attached:
            attached.append(observer)

    def add_observers(self, observers: Iterable[ValidationObserver]) -> None:
        """Attach several observers, keeping their order."""
        for observer in observers:
            self.add_observer(observer)

    def remove_observer(self, observer: ValidationObserver) -> None:
        """Detach an observer."""
        with suppress(ValueError):
            self._attached().remove(observer)

    def notify(self, event: ValidationEvent) -> None:
        """Send ``event`` to every attached observer.

        Observers attached or detached while the event is dispatched only
        take part in the next one.
        """
        for observer in tuple(self._attached()):
            observer.on_event(event)

    @property
    def observers(self) -> list[ValidationObserver]:
        """Snapshot of the attached observers."""
        return list(self._attached())

    def clear_observers(self) -> None:
        """Detach all observers."""
        self._attached().clear()

class LoggingObserver:
    """Observer writing validation events to a standard library logger.

    Run boundaries are logged at DEBUG, violations and fail-fast aborts at INFO.

    Example:
        validator.add_observer(LoggingObserver(logging.getLogger("app.validation")))
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("constraint_validation")

    def on_event(self, event: ValidationEvent) -> None:
        data = event.data
        if event.event_type == ValidationEventType.VALIDATION_STARTED:
            self._logger.debug("Validation started by %s", data.get("validator_name"))
        elif event.event_type == ValidationEventType.CONSTRAINT_VIOLATED:
            self._logger.info(
                "Constraint violated at %s: %s",
                ".".join(data.get("path", ())) or "<root>",
                data.get("message") or "<no message>",
            )
        elif event.event_type == ValidationEventType.FIRST_VIOLATION_ABORTED:
            self._logger.info("Validation aborted on first violation")
        elif event.event_type == ValidationEventType.VALIDATION_COMPLETED:
            self._logger.debug(
                "Validation by %s completed: valid=%s violations=%d (%.2f ms)",
                data.get("validator_name"),
                data.get("is_valid"),
                len(data.get("violations", ())),
                data.get("duration_ms", 0.0),
            )
