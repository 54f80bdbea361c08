from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

if TYPE_CHECKING:
    from overwire.descriptors import NamedObject
    from overwire.uri import Uri


class ObjectContext(Protocol):
    """Protocol for the resolution surface handed to constructors and loaders."""

    @property
    def base_dir(self) -> Path:
        """Directory against which relative module references resolve."""

    def create(self, value: Any) -> Any:
        """Resolve a value expression into an object."""

    def get(self, name: str) -> NamedObject | None:
        """Return the named object visible from this context, if any."""

    def for_each(self, callback: Callable[[NamedObject], None]) -> None:
        """Visit every visible named object exactly once."""

    def __iter__(self) -> Iterator[NamedObject]:
        """Iterate every visible named object exactly once."""


Constructor: TypeAlias = Callable[[Any, "ObjectContext | None"], Any]
"""Build an object from a tagged value (or a list of same-tagged values)."""

Loader: TypeAlias = Callable[["Uri | list[Uri]", "ObjectContext | None"], Any]
"""Build an object from a parsed URI (or a list of same-protocol URIs)."""
