from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TypeVar

from overwire.dependencies import DependencyAnalyzer
from overwire.descriptors import (
    DependencySet,
    NamedObjectDescriptor,
    ProviderDescriptor,
    TypeDescriptor,
)
from overwire.exceptions import OverwireDuplicateDefinitionError

logger = logging.getLogger(__name__)

DescriptorT = TypeVar("DescriptorT", TypeDescriptor, ProviderDescriptor, NamedObjectDescriptor)


@dataclass(frozen=True, kw_only=True, eq=False)
class ContextDefinition:
    """One level's declared additions and overrides, linked to its parent level.

    Provider descriptors are keyed by lower-cased protocol. The mappings are
    read-only views and preserve declaration order.
    """

    parent: ContextDefinition | None
    type_descriptors: Mapping[str, TypeDescriptor]
    provider_descriptors: Mapping[str, ProviderDescriptor]
    named_object_descriptors: Mapping[str, NamedObjectDescriptor]
    compute_dependencies: bool = True

    def get_type_descriptor(self, type_tag: str) -> TypeDescriptor | None:
        return self.type_descriptors.get(type_tag)

    def get_provider_descriptor(self, protocol: str) -> ProviderDescriptor | None:
        return self.provider_descriptors.get(protocol.lower())

    def get_named_object_descriptor(self, name: str) -> NamedObjectDescriptor | None:
        return self.named_object_descriptors.get(name)

    def find_type_descriptor(self, type_tag: str) -> TypeDescriptor | None:
        """Return the closest descriptor for ``type_tag`` in this level or its ancestors."""
        definition: ContextDefinition | None = self
        while definition is not None:
            descriptor = definition.get_type_descriptor(type_tag)
            if descriptor is not None:
                return descriptor
            definition = definition.parent
        return None

    def find_provider_descriptor(self, protocol: str) -> ProviderDescriptor | None:
        definition: ContextDefinition | None = self
        while definition is not None:
            descriptor = definition.get_provider_descriptor(protocol)
            if descriptor is not None:
                return descriptor
            definition = definition.parent
        return None

    def find_named_object_descriptor(self, name: str) -> NamedObjectDescriptor | None:
        located = self.locate_named_object_descriptor(name)
        return located[0] if located is not None else None

    def locate_named_object_descriptor(
        self,
        name: str,
    ) -> tuple[NamedObjectDescriptor, ContextDefinition] | None:
        """Return the closest descriptor for ``name`` together with its declaring level."""
        definition: ContextDefinition | None = self
        while definition is not None:
            descriptor = definition.get_named_object_descriptor(name)
            if descriptor is not None:
                return descriptor, definition
            definition = definition.parent
        return None

    def declared_keys(self, until: ContextDefinition | None = None) -> DependencySet:
        """Return the keys declared from this level up to, but excluding, ``until``.

        With ``until=None`` the whole chain is collected. Protocols are
        lower-cased.
        """
        declared = DependencySet()
        definition: ContextDefinition | None = self
        while definition is not None and definition is not until:
            declared.types.update(definition.type_descriptors)
            declared.protocols.update(definition.provider_descriptors)
            declared.objects.update(definition.named_object_descriptors)
            definition = definition.parent
        return declared

    @property
    def local_type_tags(self) -> frozenset[str]:
        return frozenset(self.type_descriptors)

    @property
    def local_protocols(self) -> frozenset[str]:
        return frozenset(self.provider_descriptors)

    @property
    def local_object_names(self) -> frozenset[str]:
        return frozenset(self.named_object_descriptors)

    @property
    def has_overrides(self) -> bool:
        """Return true when this level declares anything at all."""
        return bool(
            self.type_descriptors or self.provider_descriptors or self.named_object_descriptors,
        )


class ContextDefinitionBuilder:
    """Merge one level's descriptor lists into a ``ContextDefinition``.

    Each list is scanned in order. The first descriptor of a key is kept; a later
    one replaces it only when it sets ``overrides``, otherwise the build fails.
    With ``compute_dependencies`` the dependency sets of the level's named
    objects are computed against the new definition, which also rejects
    reference cycles.
    """

    def build(
        self,
        parent: ContextDefinition | None,
        type_descriptors: Iterable[TypeDescriptor] = (),
        provider_descriptors: Iterable[ProviderDescriptor] = (),
        named_object_descriptors: Iterable[NamedObjectDescriptor] = (),
        *,
        compute_dependencies: bool = True,
    ) -> ContextDefinition:
        """Build a definition level on top of ``parent``.

        Raises:
            OverwireDuplicateDefinitionError: If a key repeats without ``overrides``.
            OverwireDependencyCycleError: If a named object transitively references
                itself and ``compute_dependencies`` is set.

        """
        definition = ContextDefinition(
            parent=parent,
            type_descriptors=MappingProxyType(
                _merge(type_descriptors, "Object type", lambda descriptor: descriptor.type_tag),
            ),
            provider_descriptors=MappingProxyType(
                _merge(
                    provider_descriptors,
                    "Object provider with protocol",
                    lambda descriptor: descriptor.scheme.lower(),
                ),
            ),
            named_object_descriptors=MappingProxyType(
                _merge(named_object_descriptors, "Named object", lambda descriptor: descriptor.name),
            ),
            compute_dependencies=compute_dependencies,
        )

        if compute_dependencies:
            DependencyAnalyzer(definition).analyze_all()

        logger.debug(
            "Built context definition with %d types, %d providers, %d named objects",
            len(definition.type_descriptors),
            len(definition.provider_descriptors),
            len(definition.named_object_descriptors),
        )
        return definition


def _merge(
    descriptors: Iterable[DescriptorT],
    kind: str,
    key_of: Callable[[DescriptorT], str],
) -> dict[str, DescriptorT]:
    merged: dict[str, DescriptorT] = {}
    for descriptor in descriptors:
        key = key_of(descriptor)
        existing = merged.get(key)
        if existing is not None and not descriptor.overrides:
            raise OverwireDuplicateDefinitionError(kind, key, existing.origin)
        merged[key] = descriptor
    return merged
