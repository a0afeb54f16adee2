"""Constraint-based validation of nested values with path-tagged violations."""

from constraint_validation.configuration import Configuration, ConfigurationBuilder
from constraint_validation.constraints import (
    Constraint,
    ConstraintRegistry,
    FirstViolationError,
    InvalidConstraintConversionError,
    run_with_constraint_registry,
    run_with_constraint_registry_async,
)
from constraint_validation.events import (
    LoggingObserver,
    ObservableMixin,
    ValidationEvent,
    ValidationEventType,
    ValidationObserver,
)
from constraint_validation.path import Path, PathBuilder
from constraint_validation.protocols import ValidatorProtocol
from constraint_validation.results import (
    ConstraintViolation,
    ConstraintViolationSet,
    Failure,
    Success,
    ValidationResult,
    ValidationResultError,
)
from constraint_validation.rich_observers import (
    RichViolationReportObserver,
    SimpleProgressObserver,
)
from constraint_validation.validatable import Validatable
from constraint_validation.validators import (
    BaseValidator,
    ContextualSuspendableValidator,
    ContextualValidator,
    SuspendableValidator,
    Validator,
)

__all__ = [
    # Paths and tree nodes
    "Path",
    "PathBuilder",
    "Validatable",
    # Configuration
    "Configuration",
    "ConfigurationBuilder",
    # Constraints
    "Constraint",
    "ConstraintRegistry",
    "FirstViolationError",
    "InvalidConstraintConversionError",
    "run_with_constraint_registry",
    "run_with_constraint_registry_async",
    # Validation results
    "ConstraintViolation",
    "ConstraintViolationSet",
    "Failure",
    "Success",
    "ValidationResult",
    "ValidationResultError",
    # Validators
    "BaseValidator",
    "ContextualSuspendableValidator",
    "ContextualValidator",
    "SuspendableValidator",
    "Validator",
    "ValidatorProtocol",
    # Observer pattern
    "LoggingObserver",
    "ObservableMixin",
    "ValidationEvent",
    "ValidationEventType",
    "ValidationObserver",
    # Rich observers
    "RichViolationReportObserver",
    "SimpleProgressObserver",
]

__version__ = "0.1.0"
