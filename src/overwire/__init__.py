from overwire.application import Application, ApplicationSettings
from overwire.config import (
    ApplicationConfig,
    NamedObjectDescriptorConfig,
    ProviderDescriptorConfig,
    RequestOverrides,
    RequestTemplateConfig,
    TypeDescriptorConfig,
    load_named_object_descriptors,
    load_provider_descriptors,
    load_type_descriptors,
    parse_config,
    validate_config,
)
from overwire.context import ScopedContext
from overwire.definition import ContextDefinition, ContextDefinitionBuilder
from overwire.dependencies import DependencyAnalyzer
from overwire.descriptors import (
    DependencySet,
    NamedObject,
    NamedObjectDescriptor,
    ProviderDescriptor,
    TypeDescriptor,
)
from overwire.engine import Engine
from overwire.engine_context import EngineContext, engine_context
from overwire.exceptions import (
    OverwireApplicationNotFoundError,
    OverwireConfigurationError,
    OverwireDependencyCycleError,
    OverwireDuplicateDefinitionError,
    OverwireEngineNotSetError,
    OverwireError,
    OverwireNamedObjectNotFoundError,
    OverwireNonUniformArrayError,
    OverwireResolutionError,
    OverwireSymbolLoadError,
    OverwireUnsupportedProtocolError,
    OverwireUnsupportedTypeError,
    OverwireUriParseError,
)
from overwire.named_objects import NamedObjectRegistry
from overwire.protocol import ObjectContext
from overwire.provider_registry import ProviderRegistry
from overwire.settings import OverwireSettings
from overwire.symbols import SymbolCatalog, SymbolLoader
from overwire.templates import RequestTemplate, RequestTemplateFileLoader, RequestTemplateManager
from overwire.type_registry import TypeRegistry
from overwire.uri import Uri

__all__ = [
    "Application",
    "ApplicationConfig",
    "ApplicationSettings",
    "ContextDefinition",
    "ContextDefinitionBuilder",
    "DependencyAnalyzer",
    "DependencySet",
    "Engine",
    "EngineContext",
    "NamedObject",
    "NamedObjectDescriptor",
    "NamedObjectDescriptorConfig",
    "NamedObjectRegistry",
    "ObjectContext",
    "OverwireApplicationNotFoundError",
    "OverwireConfigurationError",
    "OverwireDependencyCycleError",
    "OverwireDuplicateDefinitionError",
    "OverwireEngineNotSetError",
    "OverwireError",
    "OverwireNamedObjectNotFoundError",
    "OverwireNonUniformArrayError",
    "OverwireResolutionError",
    "OverwireSettings",
    "OverwireSymbolLoadError",
    "OverwireUnsupportedProtocolError",
    "OverwireUnsupportedTypeError",
    "OverwireUriParseError",
    "ProviderDescriptor",
    "ProviderDescriptorConfig",
    "ProviderRegistry",
    "RequestOverrides",
    "RequestTemplate",
    "RequestTemplateConfig",
    "RequestTemplateFileLoader",
    "RequestTemplateManager",
    "ScopedContext",
    "SymbolCatalog",
    "SymbolLoader",
    "TypeDescriptor",
    "TypeDescriptorConfig",
    "TypeRegistry",
    "Uri",
    "engine_context",
    "load_named_object_descriptors",
    "load_provider_descriptors",
    "load_type_descriptors",
    "parse_config",
    "validate_config",
]
