"""Request templates: reusable override sets between application and request.

A template file declares ``overrideTypes``, ``overrideProviders`` and
``overrideObjects`` on top of either an application (``"application"``) or
another template (``"base"``, a path relative to the template file).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, cast

from overwire.config import RequestTemplateConfig, read_config
from overwire.context import ScopedContext
from overwire.exceptions import OverwireApplicationNotFoundError, OverwireConfigurationError

if TYPE_CHECKING:
    from overwire.application import Application

logger = logging.getLogger(__name__)

TEMPLATE_SCOPE_PREFIX = "template:"

ApplicationGetter = Callable[[str], "Application | None"]
TemplateGetter = Callable[[str], "RequestTemplate | None"]


class RequestTemplate:
    """A template level context over its base template or its application.

    Relative module references in the template's overrides resolve against the
    application's base directory.
    """

    def __init__(
        self,
        uri: str,
        application: Application,
        base: RequestTemplate | None,
        config: RequestTemplateConfig,
        *,
        eager_named_objects: bool = True,
    ) -> None:
        self._uri = uri
        self._application = application
        self._base = base
        self._config = config

        parent_context = base.object_context if base is not None else application.object_context
        definition = application.builder.build(
            parent_context.definition,
            config.type_descriptors(uri),
            config.provider_descriptors(uri),
            config.named_object_descriptors(uri),
            compute_dependencies=True,
        )
        self._context = ScopedContext(
            f"{TEMPLATE_SCOPE_PREFIX}{uri}",
            definition,
            parent_context,
            application.base_dir,
        )
        if eager_named_objects:
            self._context.materialize()

    @property
    def uri(self) -> str:
        return self._uri

    @property
    def application(self) -> Application:
        return self._application

    @property
    def base(self) -> RequestTemplate | None:
        return self._base

    @property
    def config(self) -> RequestTemplateConfig:
        return self._config

    @property
    def object_context(self) -> ScopedContext:
        return self._context

    def __repr__(self) -> str:
        return f"RequestTemplate(uri={self._uri!r}, application={self._application.id!r})"


class RequestTemplateFileLoader:
    """Load request templates from JSON files, following ``base`` recursively."""

    def __init__(self, *, eager_named_objects: bool = True) -> None:
        self._eager_named_objects = eager_named_objects

    def load(
        self,
        uri: str,
        application_getter: ApplicationGetter,
        base_template_getter: TemplateGetter | None = None,
    ) -> RequestTemplate:
        """Load the template at ``uri`` and its base chain.

        Bases already returned by ``base_template_getter`` are reused instead
        of being loaded again.

        Raises:
            OverwireConfigurationError: If a file is invalid or the base chain
                contains a cycle.
            OverwireApplicationNotFoundError: If the application is not registered.

        """
        return self._load(uri, application_getter, base_template_getter, set())

    def get_application_name(self, uri: str) -> str:
        """Return the application a template applies to without loading it."""
        seen: set[str] = set()
        while True:
            self._check_cycle(uri, seen)
            config = read_config(uri, RequestTemplateConfig)
            if config.base is None:
                return cast("str", config.application)
            uri = _resolve_base(uri, config.base)

    def _load(
        self,
        uri: str,
        application_getter: ApplicationGetter,
        base_template_getter: TemplateGetter | None,
        seen: set[str],
    ) -> RequestTemplate:
        self._check_cycle(uri, seen)
        config = read_config(uri, RequestTemplateConfig)

        base: RequestTemplate | None = None
        if config.base is not None:
            base_uri = _resolve_base(uri, config.base)
            if base_template_getter is not None:
                base = base_template_getter(base_uri)
            if base is None:
                base = self._load(base_uri, application_getter, base_template_getter, seen)
            application = base.application
        else:
            application_name = cast("str", config.application)
            found = application_getter(application_name)
            if found is None:
                msg = f"Application '{application_name}' is not registered in current engine."
                raise OverwireApplicationNotFoundError(msg)
            application = found

        logger.info("Loaded request template %s for application '%s'", uri, application.id)
        return RequestTemplate(
            uri,
            application,
            base,
            config,
            eager_named_objects=self._eager_named_objects,
        )

    @staticmethod
    def _check_cycle(uri: str, seen: set[str]) -> None:
        key = uri.lower()
        if key in seen:
            msg = f"Cycle found in template inheritance. Uri: '{uri}'."
            raise OverwireConfigurationError(msg)
        seen.add(key)


@dataclass
class _TemplateReference:
    template: RequestTemplate
    ref_count: int


class RequestTemplateManager:
    """Cache loaded templates, reference counting every template of a base chain.

    Templates are keyed by resolved absolute path, the same key bases are
    reached under, so one file is loaded once however it is addressed.
    """

    def __init__(
        self,
        loader: RequestTemplateFileLoader,
        application_getter: ApplicationGetter,
    ) -> None:
        self._loader = loader
        self._application_getter = application_getter
        self._cache: dict[str, _TemplateReference] = {}

    def get(self, uri: str) -> RequestTemplate | None:
        """Return a loaded template, or ``None`` when it is not loaded."""
        reference = self._cache.get(_normalize(uri))
        return reference.template if reference is not None else None

    def get_or_load(self, uri: str) -> RequestTemplate:
        uri = _normalize(uri)
        template = self.get(uri)
        if template is None:
            template = self._load(uri)
        return template

    def unload(self, uri: str) -> None:
        """Release one reference on ``uri`` and on each of its bases."""
        uri = _normalize(uri)
        if uri not in self._cache:
            return

        current: str | None = uri
        while current is not None:
            reference = self._cache[current]
            reference.ref_count -= 1
            if reference.ref_count == 0:
                del self._cache[current]
                logger.info("Unloaded request template %s", current)
            base = reference.template.base
            current = base.uri if base is not None else None

    @property
    def loaded_templates(self) -> list[str]:
        return list(self._cache)

    def _load(self, uri: str) -> RequestTemplate:
        template = self._loader.load(uri, self._application_getter, self.get)

        current: RequestTemplate | None = template
        while current is not None:
            reference = self._cache.get(current.uri)
            if reference is None:
                self._cache[current.uri] = _TemplateReference(current, 1)
            else:
                reference.ref_count += 1
            current = current.base
        return template


def _resolve_base(uri: str, base: str) -> str:
    return str((Path(uri).parent / base).resolve())


def _normalize(uri: str) -> str:
    return str(Path(uri).resolve())
