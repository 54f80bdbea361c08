"""Types every engine declares at global level."""

from __future__ import annotations

from typing import Any

from overwire.descriptors import TypeDescriptor
from overwire.exceptions import OverwireConfigurationError, OverwireSymbolLoadError
from overwire.protocol import ObjectContext
from overwire.symbols import SymbolCatalog, SymbolLoader

BUILTIN_MODULE = "overwire.builtins"
FUNCTION_TYPE = "Function"


class FunctionConstructor:
    """Construct ``{"_type": "Function", "moduleName": ..., "functionName": ...}`` values.

    The value is the referenced callable itself. Relative module names resolve
    against the requesting context's base directory. Inline ``"function"``
    bodies are refused; register the callable in a ``SymbolCatalog`` instead.
    """

    def __init__(self, loader: SymbolLoader) -> None:
        self._loader = loader

    def __call__(self, definition: dict[str, Any], context: ObjectContext | None) -> Any:
        if definition.get("function") is not None:
            msg = (
                "Inline function bodies are not supported for 'Function' objects. "
                "Reference a function by 'moduleName' and 'functionName' instead."
            )
            raise OverwireConfigurationError(msg)

        module_name = definition.get("moduleName")
        function_name = definition.get("functionName")
        if module_name is None or function_name is None:
            msg = "Properties 'moduleName' and 'functionName' must be present for 'Function' objects."
            raise OverwireConfigurationError(msg)

        base_dir = context.base_dir if context is not None else None
        try:
            return self._loader.load_symbol(module_name, function_name, base_dir)
        except OverwireSymbolLoadError as error:
            msg = f"Unable to create function '{function_name}' in module '{module_name}'. {error}"
            raise OverwireSymbolLoadError(msg) from error


def builtin_type_descriptors() -> list[TypeDescriptor]:
    return [
        TypeDescriptor(
            type_tag=FUNCTION_TYPE,
            module_ref=BUILTIN_MODULE,
            constructor_ref="create_function",
            description="Reference a function by module and function name.",
        ),
    ]


def register_builtins(catalog: SymbolCatalog, loader: SymbolLoader) -> None:
    """Expose the builtin constructors through ``catalog``, bound to ``loader``."""
    catalog.register(BUILTIN_MODULE, "create_function", FunctionConstructor(loader))
