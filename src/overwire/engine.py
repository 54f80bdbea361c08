"""The engine: global level, registered applications, and request contexts."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from overwire.application import Application, ApplicationSettings
from overwire.builtins import builtin_type_descriptors, register_builtins
from overwire.config import RequestOverrides, parse_config
from overwire.context import ScopedContext
from overwire.definition import ContextDefinitionBuilder
from overwire.descriptors import NamedObjectDescriptor, ProviderDescriptor, TypeDescriptor
from overwire.exceptions import OverwireApplicationNotFoundError, OverwireConfigurationError
from overwire.settings import OverwireSettings
from overwire.symbols import SymbolCatalog, SymbolLoader
from overwire.templates import RequestTemplate, RequestTemplateFileLoader, RequestTemplateManager

logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "global"
REQUEST_SCOPE = "request"


class Engine:
    """Own the global context and the applications registered on top of it.

    Engines are independent of each other: each has its own symbol catalog,
    global context, applications, and templates.

    Args:
        settings: Engine-wide settings, read from ``OVERWIRE_*`` env vars by default.
        type_descriptors: Global types declared next to the builtin ones.
        provider_descriptors: Global providers.
        named_object_descriptors: Global named objects.
        catalog: Callables addressable by descriptors without an importable module.

    """

    def __init__(
        self,
        settings: OverwireSettings | None = None,
        *,
        type_descriptors: Iterable[TypeDescriptor] = (),
        provider_descriptors: Iterable[ProviderDescriptor] = (),
        named_object_descriptors: Iterable[NamedObjectDescriptor] = (),
        catalog: SymbolCatalog | None = None,
    ) -> None:
        self._settings = settings if settings is not None else OverwireSettings()
        self._catalog = catalog if catalog is not None else SymbolCatalog()
        self._symbol_loader = SymbolLoader(self._catalog)
        register_builtins(self._catalog, self._symbol_loader)

        self._builder = ContextDefinitionBuilder()
        definition = self._builder.build(
            None,
            [*builtin_type_descriptors(), *type_descriptors],
            provider_descriptors,
            named_object_descriptors,
            compute_dependencies=True,
        )
        self._context = ScopedContext(
            GLOBAL_SCOPE,
            definition,
            None,
            self._settings.base_dir,
            self._symbol_loader,
        )
        self._applications: dict[str, Application] = {}
        self._templates = RequestTemplateManager(
            RequestTemplateFileLoader(eager_named_objects=self._settings.eager_named_objects),
            self.find_application,
        )

    @property
    def settings(self) -> OverwireSettings:
        return self._settings

    @property
    def catalog(self) -> SymbolCatalog:
        return self._catalog

    @property
    def object_context(self) -> ScopedContext:
        return self._context

    @property
    def templates(self) -> RequestTemplateManager:
        return self._templates

    @property
    def application_instance_names(self) -> list[str]:
        """Registered instance names, lower-cased."""
        return list(self._applications)

    def register(
        self,
        app_config_path: str | Path,
        instance_names: str | Iterable[str] | None = None,
    ) -> Application:
        """Load the application described by ``app_config_path`` and register it.

        ``instance_names`` defaults to the application id.

        Raises:
            OverwireConfigurationError: If the application definition is invalid
                or an instance name is already registered.

        """
        settings = ApplicationSettings.from_config(
            app_config_path,
            self._context.definition,
            self._settings,
            self._builder,
        )
        application = Application(
            self._context,
            settings,
            eager_named_objects=self._settings.eager_named_objects,
            builder=self._builder,
        )
        self.register_application(application, instance_names)
        return application

    def register_application(
        self,
        application: Application,
        instance_names: str | Iterable[str] | None = None,
    ) -> None:
        """Register ``application`` under case-insensitive instance names.

        Nothing is registered when any of the names is already taken.

        Raises:
            OverwireConfigurationError: If an instance name is already registered.

        """
        if instance_names is None:
            instance_names = [application.id]
        elif isinstance(instance_names, str):
            instance_names = [instance_names]
        keys = [name.lower() for name in instance_names]

        for key in keys:
            if key in self._applications:
                msg = f"Application instance name '{key}' already exists."
                raise OverwireConfigurationError(msg)

        for key in keys:
            self._applications[key] = application
        logger.info("Registered application '%s' as %s", application.id, ", ".join(keys))

    def find_application(self, instance_name: str) -> Application | None:
        return self._applications.get(instance_name.lower())

    def get_application(self, instance_name: str) -> Application:
        """Return the application registered as ``instance_name``.

        Raises:
            OverwireApplicationNotFoundError: If no application uses that name.

        """
        application = self.find_application(instance_name)
        if application is None:
            msg = f"Application '{instance_name}' is not registered in current engine."
            raise OverwireApplicationNotFoundError(msg)
        return application

    def create_request_context(
        self,
        application_or_template: Application | RequestTemplate | str,
        overrides: RequestOverrides | Mapping[str, Any] | None = None,
    ) -> ScopedContext:
        """Build the request level context for one request.

        A string is an application instance name. Overrides are applied only
        when the application allows per-request override, and their dependency
        sets are not computed.

        Raises:
            OverwireApplicationNotFoundError: If an instance name is not registered.
            OverwireConfigurationError: If ``overrides`` is invalid.

        """
        if isinstance(application_or_template, str):
            application_or_template = self.get_application(application_or_template)
        if isinstance(application_or_template, Application):
            template = application_or_template.default_template
        else:
            template = application_or_template
        application = template.application

        if overrides is None:
            overrides = RequestOverrides()
        elif not isinstance(overrides, RequestOverrides):
            overrides = parse_config(overrides, RequestOverrides)

        if not application.allow_per_request_override:
            if overrides.override_types or overrides.override_providers or overrides.override_objects:
                logger.info(
                    "Ignoring request overrides for application '%s' without per-request override",
                    application.id,
                )
            overrides = RequestOverrides()

        parent_context = template.object_context
        definition = self._builder.build(
            parent_context.definition,
            overrides.type_descriptors(),
            overrides.provider_descriptors(),
            overrides.named_object_descriptors(),
            compute_dependencies=False,
        )
        return ScopedContext(REQUEST_SCOPE, definition, parent_context, application.base_dir)
