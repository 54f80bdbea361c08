"""Scoped object contexts: one resolution surface per level.

A ``ScopedContext`` wraps one ``ContextDefinition`` level and links to the
context of the parent level. Type tags and protocols resolve through the
closest level that declares them. Named objects are built lazily and cached
per context; an object inherited from an ancestor is rebuilt at this level
when its dependency set touches something declared by this level or by any
level between it and the declaring ancestor.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

from overwire.definition import ContextDefinition
from overwire.descriptors import REFERENCE_FIELD, NamedObject, NamedObjectDescriptor, is_reference
from overwire.exceptions import (
    OverwireConfigurationError,
    OverwireDependencyCycleError,
    OverwireNamedObjectNotFoundError,
    OverwireUnsupportedProtocolError,
    OverwireUnsupportedTypeError,
)
from overwire.named_objects import NamedObjectRegistry
from overwire.provider_registry import ProviderRegistry, protocol_of
from overwire.symbols import SymbolLoader
from overwire.type_registry import TypeRegistry, is_tagged, type_tag_of
from overwire.uri import Uri

logger = logging.getLogger(__name__)


class ScopedContext:
    """Resolve values and named objects for one level of the context chain.

    Constructors and loaders always receive the requesting context, so nested
    values they create pick up this level's overrides even when the
    constructor itself is declared by an ancestor.

    Args:
        scope_name: Scope recorded on named objects built by this context.
        definition: This level's definition. Its ``parent`` must be the
            definition of ``parent``.
        parent: Context of the parent level, not owned.
        base_dir: Directory for relative module references declared at this
            level. Defaults to the parent's, or the working directory at root.
        symbol_loader: Loader for constructor and loader symbols. Defaults to
            the parent's loader, or a fresh one at root.

    Raises:
        OverwireConfigurationError: If ``definition`` does not extend the parent's.
        OverwireSymbolLoadError: If a local constructor or loader cannot be loaded.

    """

    def __init__(
        self,
        scope_name: str,
        definition: ContextDefinition,
        parent: ScopedContext | None = None,
        base_dir: str | Path | None = None,
        symbol_loader: SymbolLoader | None = None,
    ) -> None:
        expected_parent = parent.definition if parent is not None else None
        if definition.parent is not expected_parent:
            msg = (
                f"Definition of scope '{scope_name}' does not extend the definition "
                "of its parent context."
            )
            raise OverwireConfigurationError(msg)

        self._scope_name = scope_name
        self._definition = definition
        self._parent = parent
        if base_dir is not None:
            self._base_dir = Path(base_dir)
        elif parent is not None:
            self._base_dir = parent.base_dir
        else:
            self._base_dir = Path.cwd()

        if symbol_loader is None:
            symbol_loader = parent.symbol_loader if parent is not None else SymbolLoader()
        self._symbol_loader = symbol_loader

        self._types = TypeRegistry.from_descriptors(
            definition.type_descriptors.values(),
            self._base_dir,
            symbol_loader,
        )
        self._providers = ProviderRegistry.from_descriptors(
            definition.provider_descriptors.values(),
            self._base_dir,
            symbol_loader,
        )
        self._objects = NamedObjectRegistry()
        self._resolving: list[str] = []

    @property
    def scope_name(self) -> str:
        return self._scope_name

    @property
    def definition(self) -> ContextDefinition:
        return self._definition

    @property
    def parent(self) -> ScopedContext | None:
        return self._parent

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def symbol_loader(self) -> SymbolLoader:
        return self._symbol_loader

    def supports_type(self, type_tag: str) -> bool:
        """Return true when this level or an ancestor declares ``type_tag``."""
        return self._type_owner(type_tag) is not None

    def supports_protocol(self, protocol: str) -> bool:
        return self._provider_owner(protocol) is not None

    def create(self, value: Any) -> Any:
        """Resolve a value expression into an object.

        Tagged dicts go to the closest type registry declaring their tag, URI
        strings to the closest provider registry declaring their protocol, and
        ``{"_ref": name}`` to the named object ``name``. Lists are dispatched on
        their first element; other values are returned unchanged.

        Raises:
            OverwireUnsupportedTypeError: If no level declares the type tag.
            OverwireUnsupportedProtocolError: If no level declares the protocol.
            OverwireNonUniformArrayError: If a list mixes tags or protocols.
            OverwireNamedObjectNotFoundError: If a referenced object does not exist.

        """
        if value is None:
            return None

        if isinstance(value, (str, Uri)):
            uri = value if isinstance(value, Uri) else Uri.try_parse(value)
            return value if uri is None else self._provide(uri)

        if isinstance(value, dict):
            if is_tagged(value):
                return self._construct(value)
            if is_reference(value):
                return self._dereference(value[REFERENCE_FIELD])
            return value

        if isinstance(value, list):
            if not value:
                return []
            first = value[0]
            if isinstance(first, Uri) or Uri.is_uri(first):
                return self._provide(value)
            if is_tagged(first):
                return self._construct(value)
            if is_reference(first):
                return [self.create(element) for element in value]
        return value

    def get(self, name: str) -> NamedObject | None:
        """Return the named object visible from this level, or ``None``.

        An object declared at this level is built here. An inherited object is
        returned as the parent resolved it, unless its dependencies intersect the
        declarations of this level or of a level between it and the declaring
        ancestor, in which case its value is rebuilt through this context and
        tagged with this scope.
        """
        cached = self._objects.get(name)
        if cached is not None:
            return cached

        descriptor = self._definition.get_named_object_descriptor(name)
        if descriptor is not None:
            logger.debug("Building named object '%s' in scope '%s'", name, self._scope_name)
            named_object = NamedObject(
                definition=descriptor,
                value=self._build(descriptor),
                scope=self._scope_name,
            )
        else:
            if self._parent is None:
                return None
            inherited = self._parent.get(name)
            if inherited is None:
                return None
            if self._must_rebuild(name, inherited.definition):
                logger.debug(
                    "Rebuilding named object '%s' from scope '%s' in scope '%s'",
                    name,
                    inherited.scope,
                    self._scope_name,
                )
                named_object = NamedObject(
                    definition=inherited.definition,
                    value=self._build(inherited.definition),
                    scope=self._scope_name,
                )
            else:
                named_object = inherited

        self._objects.insert(named_object)
        return named_object

    def for_each(self, callback: Callable[[NamedObject], None]) -> None:
        """Call ``callback`` once per visible name with the closest object."""
        for named_object in self:
            callback(named_object)

    def names(self) -> list[str]:
        """Return every name visible from this level, local names first."""
        names: dict[str, None] = {}
        context: ScopedContext | None = self
        while context is not None:
            for name in context.definition.named_object_descriptors:
                names.setdefault(name, None)
            context = context.parent
        return list(names)

    def materialize(self) -> None:
        """Build every named object declared at this level."""
        for name in self._definition.named_object_descriptors:
            self.get(name)

    def __iter__(self) -> Iterator[NamedObject]:
        for name in self.names():
            named_object = self.get(name)
            if named_object is not None:
                yield named_object

    def __repr__(self) -> str:
        return f"ScopedContext(scope_name={self._scope_name!r}, base_dir={str(self._base_dir)!r})"

    def _must_rebuild(self, name: str, descriptor: NamedObjectDescriptor) -> bool:
        # Overrides of every level between the declaring one and this one count.
        located = self._definition.locate_named_object_descriptor(name)
        owner = located[1] if located is not None else None
        declared = self._definition.declared_keys(until=owner)
        dependencies = descriptor.dependencies
        if dependencies is None:
            return bool(declared)
        return dependencies.intersects(
            types=declared.types,
            protocols=declared.protocols,
            objects=declared.objects,
        )

    def _build(self, descriptor: NamedObjectDescriptor) -> Any:
        if descriptor.name in self._resolving:
            cycle = self._resolving[self._resolving.index(descriptor.name) :]
            raise OverwireDependencyCycleError([*cycle, descriptor.name])

        self._resolving.append(descriptor.name)
        try:
            return self.create(descriptor.value)
        finally:
            self._resolving.pop()

    def _dereference(self, name: str) -> Any:
        named_object = self.get(name)
        if named_object is None:
            raise OverwireNamedObjectNotFoundError(name, self._scope_name)
        return named_object.value

    def _construct(self, value: dict[str, Any] | list[Any]) -> Any:
        type_tag = type_tag_of(value)
        owner = self._type_owner(type_tag)
        if owner is None:
            raise OverwireUnsupportedTypeError(type_tag, self._scope_name)
        return owner._types.create(value, self)

    def _provide(self, value: Uri | list[Any]) -> Any:
        protocol = protocol_of(value)
        owner = self._provider_owner(protocol)
        if owner is None:
            raise OverwireUnsupportedProtocolError(protocol, self._scope_name)
        return owner._providers.provide(value, self)

    def _type_owner(self, type_tag: str) -> ScopedContext | None:
        context: ScopedContext | None = self
        while context is not None:
            if context._types.supports(type_tag):
                return context
            context = context._parent
        return None

    def _provider_owner(self, protocol: str) -> ScopedContext | None:
        context: ScopedContext | None = self
        while context is not None:
            if context._providers.supports(protocol):
                return context
            context = context._parent
        return None
