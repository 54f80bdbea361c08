from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING

from overwire.descriptors import NamedObject, NamedObjectDescriptor
from overwire.protocol import ObjectContext

if TYPE_CHECKING:
    from typing_extensions import Self


class NamedObjectRegistry:
    """Case-sensitive map of realized named objects for one scope."""

    def __init__(self) -> None:
        self._objects: dict[str, NamedObject] = {}

    @classmethod
    def from_descriptors(
        cls,
        scope: str,
        descriptors: Iterable[NamedObjectDescriptor],
        context: ObjectContext,
    ) -> Self:
        """Create every descriptor's value through ``context`` and tag it with ``scope``."""
        registry = cls()
        for descriptor in descriptors:
            registry.insert(
                NamedObject(
                    definition=descriptor,
                    value=context.create(descriptor.value),
                    scope=scope,
                ),
            )
        return registry

    def has(self, name: str) -> bool:
        return name in self._objects

    def get(self, name: str) -> NamedObject | None:
        return self._objects.get(name)

    def insert(self, named_object: NamedObject) -> None:
        """Insert ``named_object``, replacing any entry with the same name."""
        self._objects[named_object.definition.name] = named_object

    def for_each(self, callback: Callable[[NamedObject], None]) -> None:
        for named_object in self._objects.values():
            callback(named_object)

    def names(self) -> Iterator[str]:
        return iter(self._objects)

    def __contains__(self, name: object) -> bool:
        return name in self._objects

    def __iter__(self) -> Iterator[NamedObject]:
        return iter(self._objects.values())

    def __len__(self) -> int:
        return len(self._objects)
