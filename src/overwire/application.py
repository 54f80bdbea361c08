"""Applications: the application level of the context chain.

An application directory starts with an ``app.json`` listing the type,
provider, and named object files of the application. Files are merged in
order into one definition level; a later file may shadow an entry of an
earlier one only when the entry sets ``"override": true``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from overwire.config import (
    ApplicationConfig,
    RequestTemplateConfig,
    load_named_object_descriptors,
    load_provider_descriptors,
    load_type_descriptors,
    read_config,
)
from overwire.context import ScopedContext
from overwire.definition import ContextDefinition, ContextDefinitionBuilder
from overwire.descriptors import NamedObject
from overwire.exceptions import OverwireResolutionError
from overwire.settings import OverwireSettings
from overwire.templates import RequestTemplate

logger = logging.getLogger(__name__)

APPLICATION_SCOPE = "application"


@dataclass(frozen=True, kw_only=True)
class ApplicationSettings:
    """Everything needed to build an application level."""

    id: str
    base_dir: Path
    definition: ContextDefinition
    description: str | None = None
    allow_per_request_override: bool = True

    @classmethod
    def from_config(
        cls,
        app_config_path: str | Path,
        parent: ContextDefinition,
        settings: OverwireSettings | None = None,
        builder: ContextDefinitionBuilder | None = None,
    ) -> ApplicationSettings:
        """Read ``app.json`` and the files it lists into application settings.

        Raises:
            OverwireConfigurationError: If a file is missing or invalid, or a
                definition repeats without ``override``.
            OverwireDependencyCycleError: If named objects reference each other
                in a cycle.

        """
        settings = settings if settings is not None else OverwireSettings()
        builder = builder if builder is not None else ContextDefinitionBuilder()
        app_config_path = Path(app_config_path)
        base_dir = app_config_path.parent
        config = read_config(app_config_path, ApplicationConfig)

        definition = builder.build(
            parent,
            [
                descriptor
                for file in config.object_types
                for descriptor in load_type_descriptors(base_dir / file)
            ],
            [
                descriptor
                for file in config.object_providers
                for descriptor in load_provider_descriptors(base_dir / file)
            ],
            [
                descriptor
                for file in config.named_objects
                for descriptor in load_named_object_descriptors(base_dir / file)
            ],
            compute_dependencies=True,
        )

        allow_per_request_override = config.allow_per_request_override
        if allow_per_request_override is None:
            allow_per_request_override = settings.allow_per_request_override

        return cls(
            id=config.id,
            base_dir=base_dir,
            definition=definition,
            description=config.description,
            allow_per_request_override=allow_per_request_override,
        )


class Application:
    """An application level context on top of the engine's global context.

    Args:
        parent_context: Global context of the engine.
        settings: Application settings, see ``ApplicationSettings.from_config``.
        eager_named_objects: Build every application named object immediately.

    """

    def __init__(
        self,
        parent_context: ScopedContext,
        settings: ApplicationSettings,
        *,
        eager_named_objects: bool = True,
        builder: ContextDefinitionBuilder | None = None,
    ) -> None:
        self._settings = settings
        self._builder = builder if builder is not None else ContextDefinitionBuilder()
        self._context = ScopedContext(
            APPLICATION_SCOPE,
            settings.definition,
            parent_context,
            settings.base_dir,
        )
        if eager_named_objects:
            self._context.materialize()
        self._default_template: RequestTemplate | None = None
        logger.info("Loaded application '%s' from %s", settings.id, settings.base_dir)

    @property
    def id(self) -> str:
        return self._settings.id

    @property
    def description(self) -> str | None:
        return self._settings.description

    @property
    def settings(self) -> ApplicationSettings:
        return self._settings

    @property
    def base_dir(self) -> Path:
        return self._settings.base_dir

    @property
    def allow_per_request_override(self) -> bool:
        return self._settings.allow_per_request_override

    @property
    def object_context(self) -> ScopedContext:
        return self._context

    @property
    def builder(self) -> ContextDefinitionBuilder:
        return self._builder

    @property
    def default_template(self) -> RequestTemplate:
        """Template without overrides, named after the application id."""
        if self._default_template is None:
            self._default_template = RequestTemplate(
                self.id,
                self,
                None,
                RequestTemplateConfig(application=self.id),
            )
        return self._default_template

    def create(self, value: Any) -> Any:
        return self._context.create(value)

    def get(self, name: str) -> Any:
        """Return the value of a named object, or ``None`` when it does not exist."""
        named_object = self._context.get(name)
        return named_object.value if named_object is not None else None

    def get_named_object(self, name: str) -> NamedObject | None:
        return self._context.get(name)

    def get_function(self, name: str) -> Any:
        """Return a callable named object, or ``None`` when it does not exist.

        Raises:
            OverwireResolutionError: If the object exists but is not callable.

        """
        function = self.get(name)
        if function is not None and not callable(function):
            msg = f"Object '{name}' is not a function."
            raise OverwireResolutionError(msg)
        return function

    def list_named_objects(self) -> list[NamedObject]:
        """Return every visible non-private named object, sorted by name."""
        return sorted(
            (named_object for named_object in self._context if not named_object.definition.private),
            key=lambda named_object: named_object.definition.name,
        )

    def __repr__(self) -> str:
        return f"Application(id={self.id!r}, base_dir={str(self.base_dir)!r})"
