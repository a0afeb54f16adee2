"""Validation run configuration.

Provides Configuration, an immutable Pydantic model holding the options
applied when a run's constraints are turned into violations, and a fluent
builder to derive new configurations from existing ones.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from constraint_validation.path import Path

__all__ = ["Configuration", "ConfigurationBuilder"]

DEFAULT_VIOLATION_MESSAGE = "The value is invalid."


class Configuration(BaseModel):
    """Options for a validation run.

    Attributes:
        default_violation_message: Message used for violations whose
            constraint was never explained. Must not be blank.
        root_path: Segments prepended to every violation path.
        fail_on_first_violation: If True, a run stops at its first violation.

    Example:
        config = Configuration(root_path=("payload",), fail_on_first_violation=True)
        strict = config.derive(default_violation_message="Rejected")
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_violation_message: str = DEFAULT_VIOLATION_MESSAGE
    root_path: Path = ()
    fail_on_first_violation: bool = False

    @field_validator("default_violation_message")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("default_violation_message must not be blank")
        return value

    def derive(self, **changes: Any) -> Configuration:
        """Create a new configuration from this one with some options replaced.

        The source configuration is left untouched and the changes are
        validated like any constructor argument.

        Args:
            **changes: Options to override.

        Returns:
            A new Configuration instance.
        """
        return Configuration(**{**self.model_dump(), **changes})

    @classmethod
    def builder(cls, source: Configuration | None = None) -> ConfigurationBuilder:
        """Start a fluent builder, optionally seeded from ``source``."""
        return ConfigurationBuilder(source)


class ConfigurationBuilder:
    """Fluent builder for Configuration.

    Example:
        config = (
            ConfigurationBuilder()
            .default_violation_message("Invalid")
            .root_path("request", "body")
            .fail_on_first_violation()
            .build()
        )
    """

    def __init__(self, source: Configuration | None = None) -> None:
        """Initialize the builder.

        Args:
            source: Configuration to start from. Defaults to the default
                Configuration.
        """
        source = source or Configuration()
        self._default_violation_message = source.default_violation_message
        self._root_path: Path = source.root_path
        self._fail_on_first_violation = source.fail_on_first_violation

    def default_violation_message(self, message: str) -> ConfigurationBuilder:
        """Set the message used for unexplained violations.

        Returns:
            Self for method chaining.
        """
        self._default_violation_message = message
        return self

    def root_path(self, *segments: str) -> ConfigurationBuilder:
        """Set the segments prepended to every violation path.

        Returns:
            Self for method chaining.
        """
        self._root_path = tuple(segments)
        return self

    def fail_on_first_violation(self, enabled: bool = True) -> ConfigurationBuilder:
        """Enable or disable fail-fast mode.

        Returns:
            Self for method chaining.
        """
        self._fail_on_first_violation = enabled
        return self

    def build(self) -> Configuration:
        """Build the Configuration."""
        return Configuration(
            default_violation_message=self._default_violation_message,
            root_path=self._root_path,
            fail_on_first_violation=self._fail_on_first_violation,
        )

    def __repr__(self) -> str:
        return (
            f"ConfigurationBuilder(default_violation_message={self._default_violation_message!r}, "
            f"root_path={self._root_path!r}, fail_on_first_violation={self._fail_on_first_violation})"
        )
