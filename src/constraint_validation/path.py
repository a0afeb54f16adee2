"""Path value type and builder.

A path is an ordered tuple of string segments locating a value inside the
validated tree, e.g. ``("address", "city")`` or ``("items", "0", "sku")``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from constraint_validation.validatable import Validatable

__all__ = ["Path", "PathBuilder", "as_path"]

Path = tuple[str, ...]


def as_path(segments: Iterable[str] | str) -> Path:
    """Normalize ``segments`` to a Path. A bare string is a single segment."""
    if isinstance(segments, str):
        return (segments,)
    return tuple(segments)


class PathBuilder:
    """Compute paths relative to a Validatable.

    Example:
        builder = PathBuilder(validatable)  # validatable at ("user", "email")

        builder.absolute("contact")      # ("contact",)
        builder.relative("login")        # ("user", "login")
        builder.appended("domain")       # ("user", "email", "domain")
    """

    __slots__ = ("_validatable",)

    def __init__(self, validatable: Validatable[Any]) -> None:
        self._validatable = validatable

    def absolute(self, *segments: str) -> Path:
        """Return a path made of the given segments only."""
        return tuple(segments)

    def relative(self, *segments: str) -> Path:
        """Return the parent's path followed by the given segments.

        The given segments take the place of the node's own segment, which
        makes it easy to point at a sibling field. Without a parent this is
        the same as ``absolute``.
        """
        parent = self._validatable.parent
        base = parent.path() if parent is not None else ()
        return (*base, *segments)

    def appended(self, *segments: str) -> Path:
        """Return the node's full path followed by the given segments."""
        return (*self._validatable.path(), *segments)

    def __repr__(self) -> str:
        return f"PathBuilder(path={self._validatable.path()!r})"
