from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Any

from overwire.descriptors import ProviderDescriptor
from overwire.exceptions import (
    OverwireNonUniformArrayError,
    OverwireSymbolLoadError,
    OverwireUnsupportedProtocolError,
)
from overwire.protocol import Loader, ObjectContext
from overwire.symbols import SymbolLoader, accepts_context
from overwire.uri import Uri

if TYPE_CHECKING:
    from typing_extensions import Self


def as_uri(value: Uri | str) -> Uri:
    """Return ``value`` as a parsed ``Uri``.

    Raises:
        OverwireUriParseError: If ``value`` is a string that is not a URI.

    """
    if isinstance(value, Uri):
        return value
    return Uri.parse(value)


def protocol_of(value: Uri | str | list[Uri | str]) -> str:
    """Return the lower-cased protocol shared by a URI or a non-empty list of URIs.

    Raises:
        OverwireNonUniformArrayError: If the list mixes protocols.

    """
    if not isinstance(value, list):
        return as_uri(value).protocol.lower()

    protocol = as_uri(value[0]).protocol.lower()
    for element in value[1:]:
        if as_uri(element).protocol.lower() != protocol:
            msg = (
                "Protocol must be the same for all URIs in an array, "
                f"expected '{protocol}' for every element."
            )
            raise OverwireNonUniformArrayError(msg)
    return protocol


class ProviderRegistry:
    """Map case-insensitive URI protocols to loaders.

    A loader receives a parsed ``Uri`` (or a list of ``Uri`` sharing one protocol)
    and, when it declares a second parameter, the requesting ``ObjectContext``.
    """

    def __init__(self) -> None:
        self._loaders: dict[str, Loader] = {}
        self._takes_context: dict[str, bool] = {}

    @classmethod
    def from_descriptors(
        cls,
        descriptors: Iterable[ProviderDescriptor],
        base_dir: str | Path | None,
        loader: SymbolLoader,
    ) -> Self:
        """Build a registry by loading each descriptor's loader function.

        Raises:
            OverwireSymbolLoadError: If a loader cannot be loaded.

        """
        registry = cls()
        for descriptor in descriptors:
            try:
                function = loader.load_symbol(
                    descriptor.module_ref,
                    descriptor.loader_ref,
                    base_dir,
                )
            except OverwireSymbolLoadError as error:
                msg = f"Unable to load provider for protocol '{descriptor.scheme}'. {error}"
                raise OverwireSymbolLoadError(msg) from error
            registry.register(descriptor.scheme, function)
        return registry

    def register(self, scheme: str, loader: Loader) -> None:
        key = scheme.lower()
        self._loaders[key] = loader
        self._takes_context[key] = accepts_context(loader)

    def supports(self, scheme: str) -> bool:
        return scheme.lower() in self._loaders

    def provide(
        self,
        value: Uri | str | list[Uri | str],
        context: ObjectContext | None = None,
    ) -> Any:
        """Load an object from a URI or from a list of same-protocol URIs.

        Strings are parsed first; a list is handed to the loader as one
        ``list[Uri]``.

        Raises:
            OverwireUriParseError: If a string is not a URI.
            OverwireNonUniformArrayError: If list elements use different protocols.
            OverwireUnsupportedProtocolError: If the protocol is not registered here.

        """
        if value is None:
            return None
        if isinstance(value, list) and not value:
            return []

        protocol = protocol_of(value)
        loader = self._loaders.get(protocol)
        if loader is None:
            raise OverwireUnsupportedProtocolError(protocol)

        uris: Uri | list[Uri] = (
            [as_uri(element) for element in value] if isinstance(value, list) else as_uri(value)
        )
        if self._takes_context[protocol]:
            return loader(uris, context)
        return loader(uris)  # type: ignore[call-arg]

    def protocols(self) -> Iterator[str]:
        return iter(self._loaders)

    def __contains__(self, scheme: object) -> bool:
        return isinstance(scheme, str) and scheme.lower() in self._loaders

    def __len__(self) -> int:
        return len(self._loaders)
