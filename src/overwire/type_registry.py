from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Any

from overwire.descriptors import TYPE_FIELD, TypeDescriptor
from overwire.exceptions import (
    OverwireNonUniformArrayError,
    OverwireResolutionError,
    OverwireSymbolLoadError,
    OverwireUnsupportedTypeError,
)
from overwire.protocol import Constructor, ObjectContext
from overwire.symbols import SymbolLoader, accepts_context

if TYPE_CHECKING:
    from typing_extensions import Self


def is_tagged(value: Any) -> bool:
    """Return true when ``value`` is a dict carrying the ``_type`` discriminant."""
    return isinstance(value, dict) and TYPE_FIELD in value


def type_tag_of(value: Any) -> str:
    """Return the type tag of a tagged value or of a non-empty list of tagged values.

    Raises:
        OverwireNonUniformArrayError: If list elements carry different tags.
        OverwireResolutionError: If a value has no ``_type`` property.

    """
    if isinstance(value, list):
        if not value:
            msg = "Cannot determine the type of an empty array."
            raise OverwireResolutionError(msg)
        type_tag = type_tag_of(value[0])
        for element in value[1:]:
            if not is_tagged(element) or element[TYPE_FIELD] != type_tag:
                msg = (
                    f"Property '{TYPE_FIELD}' must be uniform across array elements, "
                    f"expected '{type_tag}' for every element."
                )
                raise OverwireNonUniformArrayError(msg)
        return type_tag

    if not is_tagged(value):
        msg = f"Property '{TYPE_FIELD}' is missing from input {value!r}."
        raise OverwireResolutionError(msg)
    return value[TYPE_FIELD]


class TypeRegistry:
    """Map case-sensitive type tags to constructors.

    A constructor receives the tagged input (a dict, or a list of dicts sharing one
    tag) and, when it declares a second parameter, the ``ObjectContext`` it may use
    to resolve nested values.
    """

    def __init__(self) -> None:
        self._constructors: dict[str, Constructor] = {}
        self._takes_context: dict[str, bool] = {}

    @classmethod
    def from_descriptors(
        cls,
        descriptors: Iterable[TypeDescriptor],
        base_dir: str | Path | None,
        loader: SymbolLoader,
    ) -> Self:
        """Build a registry by loading each descriptor's constructor.

        Raises:
            OverwireSymbolLoadError: If a constructor cannot be loaded.

        """
        registry = cls()
        for descriptor in descriptors:
            try:
                constructor = loader.load_symbol(
                    descriptor.module_ref,
                    descriptor.constructor_ref,
                    base_dir,
                )
            except OverwireSymbolLoadError as error:
                msg = f"Unable to load constructor for type '{descriptor.type_tag}'. {error}"
                raise OverwireSymbolLoadError(msg) from error
            registry.register(descriptor.type_tag, constructor)
        return registry

    def register(self, type_tag: str, constructor: Constructor) -> None:
        """Register a constructor; a later call for the same tag replaces the former."""
        self._constructors[type_tag] = constructor
        self._takes_context[type_tag] = accepts_context(constructor)

    def supports(self, type_tag: str) -> bool:
        return type_tag in self._constructors

    def create(self, value: Any, context: ObjectContext | None = None) -> Any:
        """Construct an object from a tagged value or a list of same-tagged values.

        Raises:
            OverwireUnsupportedTypeError: If the tag is not registered here.
            OverwireNonUniformArrayError: If list elements carry different tags.

        """
        if value is None:
            return None
        if isinstance(value, list) and not value:
            return []

        type_tag = type_tag_of(value)
        constructor = self._constructors.get(type_tag)
        if constructor is None:
            raise OverwireUnsupportedTypeError(type_tag)

        if self._takes_context[type_tag]:
            return constructor(value, context)
        return constructor(value)  # type: ignore[call-arg]

    def type_tags(self) -> Iterator[str]:
        return iter(self._constructors)

    def __contains__(self, type_tag: object) -> bool:
        return type_tag in self._constructors

    def __len__(self) -> int:
        return len(self._constructors)
