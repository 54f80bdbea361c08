"""Static dependency analysis of named-object value expressions.

An object's ``DependencySet`` lists the type tags, URI protocols, and object
names its value touches, with referenced objects flattened in. A child context
compares it against the keys it overrides to decide whether an inherited
object must be rebuilt.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from overwire.descriptors import (
    REFERENCE_FIELD,
    TYPE_FIELD,
    DependencySet,
    NamedObjectDescriptor,
    is_reference,
)
from overwire.exceptions import OverwireDependencyCycleError
from overwire.type_registry import is_tagged
from overwire.uri import Uri

if TYPE_CHECKING:
    from overwire.definition import ContextDefinition

logger = logging.getLogger(__name__)


class DependencyAnalyzer:
    """Compute dependency sets for the named objects of one definition level.

    References resolve the way ``ScopedContext.get`` resolves them: the level's
    own descriptors first, then the parent chain. An ancestor object referencing
    a name this level (or a level in between) redeclares is walked again with
    names resolved from this level, so cycles formed through an override are
    rejected when the level is built. Results are memoized on the descriptors
    of the analyzed level only; ancestor descriptors are read but never written.
    """

    def __init__(self, definition: ContextDefinition) -> None:
        self._definition = definition
        self._stack: list[NamedObjectDescriptor] = []

    def analyze_all(self) -> None:
        """Analyze every local named object of the definition.

        Raises:
            OverwireDependencyCycleError: If an object transitively references itself.

        """
        for descriptor in self._definition.named_object_descriptors.values():
            self.dependencies_of(descriptor, self._definition)

    def dependencies_of(
        self,
        descriptor: NamedObjectDescriptor,
        owner: ContextDefinition,
    ) -> DependencySet:
        """Return the flattened dependencies of ``descriptor`` declared in ``owner``."""
        if descriptor.dependencies is not None:
            return descriptor.dependencies

        dependencies = self._analyze(descriptor, owner)
        if owner is self._definition:
            descriptor.dependencies = dependencies
        return dependencies

    def _analyze(
        self,
        descriptor: NamedObjectDescriptor,
        owner: ContextDefinition,
    ) -> DependencySet:
        for index, visiting in enumerate(self._stack):
            if visiting is descriptor:
                cycle = [entry.name for entry in self._stack[index:]]
                cycle.append(descriptor.name)
                raise OverwireDependencyCycleError(cycle)

        self._stack.append(descriptor)
        try:
            dependencies = DependencySet()
            self._walk(descriptor.value, owner, dependencies)
        finally:
            self._stack.pop()
        return dependencies

    def _walk(self, value: Any, owner: ContextDefinition, dependencies: DependencySet) -> None:
        if isinstance(value, str):
            uri = Uri.try_parse(value)
            if uri is not None:
                dependencies.add_protocol(uri.protocol)
            return

        if isinstance(value, list):
            for element in value:
                self._walk(element, owner, dependencies)
            return

        if not isinstance(value, dict):
            return

        if is_reference(value):
            self._walk_reference(value[REFERENCE_FIELD], owner, dependencies)
            return

        if is_tagged(value):
            dependencies.add_type(value[TYPE_FIELD])
        for key, field_value in value.items():
            if key != TYPE_FIELD:
                self._walk(field_value, owner, dependencies)

    def _walk_reference(
        self,
        name: str,
        owner: ContextDefinition,
        dependencies: DependencySet,
    ) -> None:
        dependencies.add_object(name)
        located = owner.locate_named_object_descriptor(name)
        if located is None:
            # Resolution fails later with OverwireNamedObjectNotFoundError.
            logger.debug("Reference to undeclared named object '%s'", name)
            return

        target, target_owner = located
        target_dependencies = self.dependencies_of(target, target_owner)
        if target_owner is not self._definition:
            shadowed = self._definition.declared_keys(until=target_owner).objects
            if not target_dependencies.objects.isdisjoint(shadowed):
                # Rebuilt below the owner, so its references resolve from this level.
                target_dependencies = self._analyze(target, self._definition)
        dependencies.update(target_dependencies)
