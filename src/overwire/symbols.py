"""Load constructor and loader callables named by descriptors.

A descriptor names its callable as ``module_ref`` + ``symbol_ref``. The
``SymbolCatalog`` is consulted first: it is an explicit table of callables
registered in code, and the only way to expose callables that do not live in an
importable module. Otherwise ``module_ref`` is imported, either as a dotted
module name or as a Python file relative to the declaring level's base
directory.
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import inspect
import logging
import sys
from collections.abc import Callable
from inspect import Parameter
from pathlib import Path
from types import ModuleType
from typing import Any

from overwire.exceptions import OverwireSymbolLoadError

logger = logging.getLogger(__name__)

_FILE_SUFFIX = ".py"
_SYMBOL_SEPARATOR = "."
_CONTEXT_ARGUMENT_POSITION = 2


class SymbolCatalog:
    """Explicit table of callables addressable by ``(module_ref, symbol_ref)``."""

    def __init__(self) -> None:
        self._symbols: dict[tuple[str, str], Callable[..., Any]] = {}

    def register(self, module_ref: str, symbol_ref: str, symbol: Callable[..., Any]) -> None:
        """Register ``symbol``; a later call for the same pair replaces the former."""
        self._symbols[module_ref, symbol_ref] = symbol

    def find(self, module_ref: str, symbol_ref: str) -> Callable[..., Any] | None:
        return self._symbols.get((module_ref, symbol_ref))

    def __contains__(self, key: object) -> bool:
        return key in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)


def accepts_context(function: Callable[..., Any]) -> bool:
    """Return true when ``function`` can take a second positional ``context`` argument.

    Constructors and loaders may be declared as ``f(value)`` when they never
    resolve nested values.
    """
    try:
        parameters = tuple(inspect.signature(function).parameters.values())
    except (TypeError, ValueError):
        return True

    positional_count = 0
    for parameter in parameters:
        if parameter.kind is Parameter.VAR_POSITIONAL:
            return True
        if parameter.kind in (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD):
            positional_count += 1
    return positional_count >= _CONTEXT_ARGUMENT_POSITION


def is_file_reference(module_ref: str) -> bool:
    """Return true when ``module_ref`` names a Python file rather than a dotted module."""
    return (
        module_ref.startswith(".")
        or module_ref.endswith(_FILE_SUFFIX)
        or Path(module_ref).is_absolute()
    )


class SymbolLoader:
    """Resolve ``(module_ref, symbol_ref)`` pairs into callables.

    File modules are executed once per resolved path and cached on the loader.
    """

    def __init__(self, catalog: SymbolCatalog | None = None) -> None:
        self.catalog = catalog if catalog is not None else SymbolCatalog()
        self._file_modules: dict[Path, ModuleType] = {}

    def load_symbol(
        self,
        module_ref: str,
        symbol_ref: str,
        base_dir: str | Path | None = None,
    ) -> Callable[..., Any]:
        """Return the callable named by ``symbol_ref`` inside ``module_ref``.

        Raises:
            OverwireSymbolLoadError: If the module cannot be imported, a segment of
                ``symbol_ref`` does not exist, or the target is not callable.

        """
        cataloged = self.catalog.find(module_ref, symbol_ref)
        if cataloged is not None:
            return cataloged

        module = self._load_module(module_ref, base_dir)
        symbol: Any = module
        for segment in symbol_ref.split(_SYMBOL_SEPARATOR):
            if not segment:
                continue
            try:
                symbol = getattr(symbol, segment)
            except AttributeError as error:
                msg = (
                    f"Cannot load function '{symbol_ref}' in module '{module_ref}'. "
                    f"Symbol '{segment}' doesn't exist."
                )
                raise OverwireSymbolLoadError(msg) from error

        if not callable(symbol):
            msg = f"Symbol '{symbol_ref}' in module '{module_ref}' is not callable."
            raise OverwireSymbolLoadError(msg)
        return symbol

    def _load_module(self, module_ref: str, base_dir: str | Path | None) -> ModuleType:
        if not is_file_reference(module_ref):
            try:
                return importlib.import_module(module_ref)
            except ImportError as error:
                msg = f"Cannot load module '{module_ref}': {error}"
                raise OverwireSymbolLoadError(msg) from error

        return self._load_file_module(self._resolve_path(module_ref, base_dir))

    def _resolve_path(self, module_ref: str, base_dir: str | Path | None) -> Path:
        path = Path(module_ref)
        if not path.is_absolute():
            path = Path(base_dir or Path.cwd()) / path
        if path.suffix != _FILE_SUFFIX:
            path = path.with_name(path.name + _FILE_SUFFIX)
        return path.resolve()

    def _load_file_module(self, path: Path) -> ModuleType:
        cached = self._file_modules.get(path)
        if cached is not None:
            return cached

        if not path.is_file():
            msg = f"Cannot load module '{path}': file does not exist."
            raise OverwireSymbolLoadError(msg)

        digest = hashlib.sha1(str(path).encode(), usedforsecurity=False).hexdigest()[:12]
        module_name = f"_overwire_{path.stem}_{digest}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            msg = f"Cannot load module '{path}'."
            raise OverwireSymbolLoadError(msg)

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as error:
            del sys.modules[module_name]
            msg = f"Cannot load module '{path}': {error}"
            raise OverwireSymbolLoadError(msg) from error

        logger.debug("Loaded module file %s as %s", path, module_name)
        self._file_modules[path] = module
        return module
