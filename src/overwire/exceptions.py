from __future__ import annotations

from collections.abc import Sequence


class OverwireError(Exception):
    """Represent a base class for all overwire-specific failures.

    Catch this type when you want to handle any overwire error path without
    matching each concrete exception class individually.
    """


class OverwireConfigurationError(OverwireError):
    """Signal an invalid level definition detected at build time.

    Raised while building a ``ContextDefinition`` or constructing a
    ``ScopedContext``: malformed descriptor files, missing required descriptor
    fields, or constructor/loader symbols that cannot be loaded.

    The hosting layer should abort registration or serving of the unit
    (application, template, or request) whose definition failed.
    """


class OverwireDuplicateDefinitionError(OverwireConfigurationError):
    """Signal a second descriptor for the same key within one level.

    Raised by ``ContextDefinitionBuilder.build`` when a later descriptor of the
    same kind reuses a type tag, protocol, or object name without setting
    ``overrides=True``.

    Typical fix is setting ``"override": true`` on the later descriptor when
    the shadowing is intended, or renaming it otherwise.
    """

    def __init__(self, kind: str, key: str, origin: str | None = None) -> None:
        self.kind = kind
        self.key = key
        self.origin = origin
        location = f" in file '{origin}'" if origin else ""
        super().__init__(
            f"{kind} '{key}' already exists{location}. "
            "Did you forget to set property 'override' to true?",
        )


class OverwireSymbolLoadError(OverwireConfigurationError):
    """Signal that a descriptor's module or symbol cannot be loaded.

    Raised when a ``moduleName``/``functionName`` pair does not point at an
    importable module and an existing attribute.
    """


class OverwireResolutionError(OverwireError):
    """Signal a failure to resolve one ``create``/``get`` call.

    Resolution errors are fatal to the single call that raised them. Callers
    decide whether the whole request fails.
    """


class OverwireUnsupportedTypeError(OverwireResolutionError):
    """Signal a tagged value whose ``_type`` is not registered in any level."""

    def __init__(self, type_tag: object, scope: str | None = None) -> None:
        self.type_tag = type_tag
        self.scope = scope
        location = f" in scope '{scope}'" if scope else ""
        super().__init__(f"Not supported type: '{type_tag}'{location}.")


class OverwireUnsupportedProtocolError(OverwireResolutionError):
    """Signal a URI whose protocol is not registered in any level."""

    def __init__(self, protocol: str, scope: str | None = None) -> None:
        self.protocol = protocol
        self.scope = scope
        location = f" in scope '{scope}'" if scope else ""
        super().__init__(f"Unsupported protocol '{protocol}'{location}.")


class OverwireNonUniformArrayError(OverwireResolutionError):
    """Signal a list input that mixes type tags or URI protocols.

    Lists handed to ``create`` are dispatched to a single constructor or loader,
    so every element must share the first element's tag or protocol.
    """


class OverwireNamedObjectNotFoundError(OverwireResolutionError):
    """Signal a required named object that no level declares.

    Raised when a value expression references an object (``{"_ref": name}``)
    that cannot be found. ``ScopedContext.get`` itself returns ``None`` instead.
    """

    def __init__(self, name: str, scope: str | None = None) -> None:
        self.name = name
        self.scope = scope
        location = f" from scope '{scope}'" if scope else ""
        super().__init__(f"Named object '{name}' is not found{location}.")


class OverwireUriParseError(OverwireResolutionError, ValueError):
    """Signal a string that does not follow ``<protocol>:/<path>[?k=v[&k=v]*]``."""


class OverwireApplicationNotFoundError(OverwireResolutionError):
    """Signal a lookup of an application instance name that is not registered."""


class OverwireDependencyCycleError(OverwireError):
    """Signal a named object that transitively references itself.

    Raised by dependency analysis while a level is built, and by request-level
    resolution when an unanalyzed request object refers back to itself.

    Attributes:
        cycle: Object names along the reference chain, first and last equal.

    """

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        path = " -> ".join(self.cycle)
        super().__init__(f"Circular reference found between named objects: {path}.")


class OverwireEngineNotSetError(OverwireError):
    """Signal use of ``engine_context`` before an engine is bound.

    Typical fix is calling ``engine_context.set_current(engine)`` during
    process startup before serving requests.
    """
