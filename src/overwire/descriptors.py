"""Declarative descriptors for one context level.

Descriptors are plain data: a type tag bound to a constructor symbol, a URI
protocol bound to a loader symbol, or a named value expression. They are
produced by configuration parsing (see ``overwire.config``) or built directly
in code, and consumed by ``ContextDefinitionBuilder``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

TYPE_FIELD = "_type"
"""Discriminant field selecting the constructor of a tagged value."""

REFERENCE_FIELD = "_ref"
"""Field of ``{"_ref": name}`` values that reference another named object."""


@dataclass(frozen=True, kw_only=True)
class TypeDescriptor:
    """Bind a type tag to a constructor reachable as ``module_ref`` + ``constructor_ref``."""

    type_tag: str
    """Case-sensitive value matched against the ``_type`` field of inputs."""
    module_ref: str
    """Dotted module name, or a file path resolved against the level's base directory."""
    constructor_ref: str
    """Attribute path of the constructor inside the module, e.g. ``types.create_point``."""
    overrides: bool = False
    """Allow shadowing an earlier descriptor with the same tag in the same level."""
    description: str | None = None
    origin: str | None = None
    """File the descriptor was read from, used in error messages."""


@dataclass(frozen=True, kw_only=True)
class ProviderDescriptor:
    """Bind a URI protocol to a loader reachable as ``module_ref`` + ``loader_ref``."""

    scheme: str
    """Case-insensitive URI protocol."""
    module_ref: str
    loader_ref: str
    overrides: bool = False
    description: str | None = None
    origin: str | None = None


@dataclass(kw_only=True)
class NamedObjectDescriptor:
    """Declare a well-known object by name and the value expression that builds it."""

    name: str
    """Case-sensitive object name."""
    value: Any
    """Primitive, tagged value, URI string, ``{"_ref": name}``, or a homogeneous list."""
    private: bool = False
    """Private objects are hidden from listing, but still resolvable by name."""
    overrides: bool = False
    description: str | None = None
    origin: str | None = None
    dependencies: DependencySet | None = field(default=None, compare=False, repr=False)
    """Memoized result of dependency analysis, ``None`` until analyzed."""


@dataclass
class DependencySet:
    """Type tags, URI protocols, and object names that a value expression touches.

    Protocols are stored lower-cased, matching the case-insensitive provider
    registry.
    """

    types: set[str] = field(default_factory=set)
    protocols: set[str] = field(default_factory=set)
    objects: set[str] = field(default_factory=set)

    def add_type(self, type_tag: str) -> None:
        self.types.add(type_tag)

    def add_protocol(self, protocol: str) -> None:
        self.protocols.add(protocol.lower())

    def add_object(self, name: str) -> None:
        self.objects.add(name)

    def update(self, other: DependencySet) -> None:
        """Union ``other`` into this set."""
        self.types.update(other.types)
        self.protocols.update(other.protocols)
        self.objects.update(other.objects)

    def intersects(
        self,
        *,
        types: Iterable[str] = (),
        protocols: Iterable[str] = (),
        objects: Iterable[str] = (),
    ) -> bool:
        """Return true when any of the given keys is a member of this set."""
        return (
            any(type_tag in self.types for type_tag in types)
            or any(protocol.lower() in self.protocols for protocol in protocols)
            or any(name in self.objects for name in objects)
        )

    def __bool__(self) -> bool:
        return bool(self.types or self.protocols or self.objects)


@dataclass(frozen=True)
class NamedObject:
    """A realized named object and the scope that produced it."""

    definition: NamedObjectDescriptor
    value: Any
    scope: str


def is_reference(value: Any) -> bool:
    """Return true when ``value`` is an object reference ``{"_ref": name}``."""
    return (
        isinstance(value, dict)
        and isinstance(value.get(REFERENCE_FIELD), str)
        and TYPE_FIELD not in value
    )
