"""Pydantic models for descriptor, application, and request template files.

JSON keys follow the wire names (``typeName``, ``moduleName``,
``functionName``, ``override``, ...); fields are also accepted by their Python
names. Every model converts into the plain descriptors of
``overwire.descriptors`` with the file it was read from as ``origin``.

File layout:
    app.json: ``{"id", "description", "allowPerRequestOverride",
    "objectTypes": [files], "objectProviders": [files], "namedObjects": [files]}``
    type files: ``[{"typeName", "moduleName", "functionName", "override"}]``
    provider files: ``[{"protocol", "moduleName", "functionName", "override"}]``
    named object files: ``[{"name", "value", "private", "override"}]``
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator

from overwire.descriptors import NamedObjectDescriptor, ProviderDescriptor, TypeDescriptor
from overwire.exceptions import OverwireConfigurationError

T = TypeVar("T")


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TypeDescriptorConfig(_WireModel):
    type_name: str = Field(alias="typeName", min_length=1)
    module_name: str = Field(alias="moduleName", min_length=1)
    function_name: str = Field(alias="functionName", min_length=1)
    description: str | None = None
    override: bool = False

    def to_descriptor(self, origin: str | None = None) -> TypeDescriptor:
        return TypeDescriptor(
            type_tag=self.type_name,
            module_ref=self.module_name,
            constructor_ref=self.function_name,
            overrides=self.override,
            description=self.description,
            origin=origin,
        )


class ProviderDescriptorConfig(_WireModel):
    protocol: str = Field(min_length=1)
    module_name: str = Field(alias="moduleName", min_length=1)
    function_name: str = Field(alias="functionName", min_length=1)
    description: str | None = None
    override: bool = False

    def to_descriptor(self, origin: str | None = None) -> ProviderDescriptor:
        return ProviderDescriptor(
            scheme=self.protocol,
            module_ref=self.module_name,
            loader_ref=self.function_name,
            overrides=self.override,
            description=self.description,
            origin=origin,
        )


class NamedObjectDescriptorConfig(_WireModel):
    name: str = Field(min_length=1)
    value: Any
    description: str | None = None
    private: bool = False
    override: bool = False

    def to_descriptor(self, origin: str | None = None) -> NamedObjectDescriptor:
        return NamedObjectDescriptor(
            name=self.name,
            value=self.value,
            private=self.private,
            overrides=self.override,
            description=self.description,
            origin=origin,
        )


class _OverridesModel(_WireModel):
    override_types: list[TypeDescriptorConfig] = Field(default_factory=list, alias="overrideTypes")
    override_providers: list[ProviderDescriptorConfig] = Field(
        default_factory=list,
        alias="overrideProviders",
    )
    override_objects: list[NamedObjectDescriptorConfig] = Field(
        default_factory=list,
        alias="overrideObjects",
    )

    def type_descriptors(self, origin: str | None = None) -> list[TypeDescriptor]:
        return [config.to_descriptor(origin) for config in self.override_types]

    def provider_descriptors(self, origin: str | None = None) -> list[ProviderDescriptor]:
        return [config.to_descriptor(origin) for config in self.override_providers]

    def named_object_descriptors(self, origin: str | None = None) -> list[NamedObjectDescriptor]:
        return [config.to_descriptor(origin) for config in self.override_objects]


class RequestOverrides(_OverridesModel):
    """Per-request type, provider, and named object overrides."""


class RequestTemplateConfig(_OverridesModel):
    """A reusable set of overrides applied on top of an application or a base template."""

    base: str | None = None
    """Path of the base template, relative to this template's file."""
    application: str | None = None
    """Application instance name; required when ``base`` is absent."""
    description: str | None = None

    @model_validator(mode="after")
    def _require_base_or_application(self) -> RequestTemplateConfig:
        if self.base is None and self.application is None:
            msg = 'Property "application" or "base" must be present in request template definition.'
            raise ValueError(msg)
        return self


class ApplicationConfig(_WireModel):
    id: str = Field(min_length=1)
    description: str | None = None
    allow_per_request_override: bool | None = Field(default=None, alias="allowPerRequestOverride")
    """``None`` inherits the engine-wide setting."""
    object_types: list[str] = Field(alias="objectTypes")
    object_providers: list[str] = Field(default_factory=list, alias="objectProviders")
    named_objects: list[str] = Field(alias="namedObjects")


def validate_config(value: Any, schema: Any) -> list[str]:
    """Validate ``value`` against ``schema`` and return readable error lines.

    ``schema`` is any type pydantic can validate, e.g. ``ApplicationConfig`` or
    ``list[TypeDescriptorConfig]``. An empty list means ``value`` is valid.
    """
    try:
        TypeAdapter(schema).validate_python(value)
    except ValidationError as error:
        return [_format_error(detail) for detail in error.errors()]
    return []


def parse_config(value: Any, schema: type[T], origin: str | Path | None = None) -> T:
    """Validate ``value`` against ``schema`` and return the parsed result.

    Raises:
        OverwireConfigurationError: With every validation error and ``origin``.

    """
    try:
        return TypeAdapter(schema).validate_python(value)
    except ValidationError as error:
        location = f" in file '{origin}'" if origin is not None else ""
        errors = "; ".join(_format_error(detail) for detail in error.errors())
        msg = f"Invalid configuration{location}: {errors}"
        raise OverwireConfigurationError(msg) from error


def read_config(path: str | Path, schema: type[T]) -> T:
    """Read a JSON file and parse it against ``schema``.

    Raises:
        OverwireConfigurationError: If the file is missing, not JSON, or invalid.

    """
    path = Path(path)
    try:
        content = json.loads(path.read_text(encoding="utf-8"))
    except OSError as error:
        msg = f"Cannot read configuration file '{path}': {error}"
        raise OverwireConfigurationError(msg) from error
    except json.JSONDecodeError as error:
        msg = f"Cannot parse configuration file '{path}': {error}"
        raise OverwireConfigurationError(msg) from error
    return parse_config(content, schema, path)


def load_type_descriptors(path: str | Path) -> list[TypeDescriptor]:
    configs = read_config(path, list[TypeDescriptorConfig])
    return [config.to_descriptor(str(path)) for config in configs]


def load_provider_descriptors(path: str | Path) -> list[ProviderDescriptor]:
    configs = read_config(path, list[ProviderDescriptorConfig])
    return [config.to_descriptor(str(path)) for config in configs]


def load_named_object_descriptors(path: str | Path) -> list[NamedObjectDescriptor]:
    configs = read_config(path, list[NamedObjectDescriptorConfig])
    return [config.to_descriptor(str(path)) for config in configs]


def _format_error(detail: Any) -> str:
    location = ".".join(str(part) for part in detail["loc"])
    return f"{location}: {detail['msg']}" if location else detail["msg"]
