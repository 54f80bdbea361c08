from __future__ import annotations

import logging
from pathlib import Path

import pytest

from overwire.application import Application
from overwire.engine import Engine
from overwire.exceptions import (
    OverwireApplicationNotFoundError,
    OverwireConfigurationError,
    OverwireDuplicateDefinitionError,
    OverwireSymbolLoadError,
)
from overwire.settings import OverwireSettings
from overwire.symbols import SymbolCatalog
from tests.helpers import named_object

TYPE_A_PRIME_OVERRIDE = {
    "typeName": "TypeA",
    "moduleName": "../symbols.py",
    "functionName": "factories.create_type_a_prime",
}


class TestRegister:
    def test_registers_under_application_id(self, engine: Engine, data_dir: Path) -> None:
        application = engine.register(data_dir / "app_a" / "app.json")

        assert engine.application_instance_names == ["app-a"]
        assert engine.get_application("app-a") is application
        assert engine.find_application("APP-A") is application

    def test_registers_under_custom_instance_names(self, engine: Engine, data_dir: Path) -> None:
        application = engine.register(data_dir / "app_a" / "app.json", ["Primary", "secondary"])

        assert engine.application_instance_names == ["primary", "secondary"]
        assert engine.get_application("PRIMARY") is application
        assert engine.find_application("app-a") is None

    def test_single_instance_name_string(self, engine: Engine, data_dir: Path) -> None:
        engine.register(data_dir / "app_a" / "app.json", "only")

        assert engine.application_instance_names == ["only"]

    def test_taken_instance_name_rejects_the_whole_registration(
        self,
        engine: Engine,
        app_a: Application,
    ) -> None:
        with pytest.raises(OverwireConfigurationError, match="Application instance name 'app-a' already exists."):
            engine.register_application(app_a, ["fresh", "APP-A"])

        assert engine.application_instance_names == ["app-a"]

    def test_invalid_application_is_not_registered(self, engine: Engine, data_dir: Path) -> None:
        with pytest.raises(OverwireDuplicateDefinitionError):
            engine.register(data_dir / "app_b" / "app.json")

        assert engine.application_instance_names == []

    def test_unknown_instance_name(self, engine: Engine) -> None:
        with pytest.raises(OverwireApplicationNotFoundError, match="'missing' is not registered"):
            engine.get_application("missing")

        assert engine.find_application("missing") is None


class TestGlobalLevel:
    def test_global_objects_are_visible_to_applications(self, settings: OverwireSettings, data_dir: Path) -> None:
        engine = Engine(settings, named_object_descriptors=[named_object("region", "eu")])

        application = engine.register(data_dir / "app_a" / "app.json")
        region = application.get_named_object("region")

        assert region is not None
        assert region.value == "eu"
        assert region.scope == "global"

    def test_function_type_is_builtin(self, engine: Engine) -> None:
        join = engine.object_context.create(
            {"_type": "Function", "moduleName": "os.path", "functionName": "join"},
        )

        assert engine.object_context.supports_type("Function")
        assert join("a", "b") == str(Path("a") / "b")

    def test_function_resolves_catalog_entries(self, settings: OverwireSettings) -> None:
        catalog = SymbolCatalog()
        catalog.register("handlers", "ping", lambda: "pong")
        engine = Engine(settings, catalog=catalog)

        ping = engine.object_context.create({"_type": "Function", "moduleName": "handlers", "functionName": "ping"})

        assert engine.catalog is catalog
        assert ping() == "pong"

    def test_inline_function_body_is_refused(self, engine: Engine) -> None:
        with pytest.raises(OverwireConfigurationError, match="Inline function bodies are not supported"):
            engine.object_context.create({"_type": "Function", "function": "return 1"})

    def test_function_requires_module_and_name(self, engine: Engine) -> None:
        with pytest.raises(OverwireConfigurationError, match="'moduleName' and 'functionName' must be present"):
            engine.object_context.create({"_type": "Function", "moduleName": "os.path"})

    def test_missing_function_is_named(self, engine: Engine) -> None:
        with pytest.raises(OverwireSymbolLoadError, match="Unable to create function 'nothing' in module 'os.path'"):
            engine.object_context.create({"_type": "Function", "moduleName": "os.path", "functionName": "nothing"})

    def test_engines_are_independent(self, settings: OverwireSettings, data_dir: Path) -> None:
        first = Engine(settings)
        second = Engine(settings)

        first.register(data_dir / "app_a" / "app.json")

        assert first.application_instance_names == ["app-a"]
        assert second.application_instance_names == []


class TestCreateRequestContext:
    def test_without_overrides_reuses_application_objects(self, engine: Engine, app_a: Application) -> None:
        context = engine.create_request_context("app-a")

        assert context.scope_name == "request"
        assert context.base_dir == app_a.base_dir
        assert context.get("objectB") is app_a.get_named_object("objectB")

    def test_mapping_overrides_are_applied(self, engine: Engine, app_a: Application) -> None:
        context = engine.create_request_context(
            app_a,
            {
                "overrideTypes": [TYPE_A_PRIME_OVERRIDE],
                "overrideObjects": [{"name": "objectD", "value": "ProtocolA:/def"}],
            },
        )

        object_b = context.get("objectB")
        object_d = context.get("objectD")
        assert object_b is not None
        assert object_d is not None
        assert object_b.value == 2
        assert object_b.scope == "request"
        assert object_d.value == "def"
        assert app_a.get("objectB") == 1
        assert app_a.get("objectD") is None

    def test_request_context_over_template(self, engine: Engine, app_a: Application, data_dir: Path) -> None:
        template = engine.templates.get_or_load(str(data_dir / "app_a" / "templates" / "child.json"))

        context = engine.create_request_context(template, {"overrideObjects": [{"name": "objectA", "value": 10}]})

        assert context.parent is template.object_context
        assert context.get("objectC") is template.object_context.get("objectC")
        object_a = context.get("objectA")
        assert object_a is not None
        assert object_a.value == 10
        assert object_a.scope == "request"

    def test_overrides_are_not_analyzed(self, engine: Engine, app_a: Application) -> None:
        context = engine.create_request_context(app_a, {"overrideObjects": [{"name": "limit", "value": 1}]})

        descriptor = context.definition.get_named_object_descriptor("limit")
        assert descriptor is not None
        assert descriptor.dependencies is None

    def test_invalid_overrides_raise(self, engine: Engine, app_a: Application) -> None:
        with pytest.raises(OverwireConfigurationError):
            engine.create_request_context(app_a, {"overrideObjects": [{"value": 1}]})

    def test_unknown_application_name(self, engine: Engine) -> None:
        with pytest.raises(OverwireApplicationNotFoundError):
            engine.create_request_context("missing")

    def test_overrides_are_ignored_when_not_allowed(
        self,
        data_dir: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        engine = Engine(OverwireSettings(base_dir=data_dir, allow_per_request_override=False))
        application = engine.register(data_dir / "app_a" / "app.json")

        with caplog.at_level(logging.INFO, logger="overwire.engine"):
            context = engine.create_request_context(application, {"overrideTypes": [TYPE_A_PRIME_OVERRIDE]})

        assert context.get("objectA") is application.get_named_object("objectA")
        assert not context.definition.has_overrides
        assert "Ignoring request overrides for application 'app-a'" in caplog.text


class TestSettings:
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("OVERWIRE_ALLOW_PER_REQUEST_OVERRIDE", "false")
        monkeypatch.setenv("OVERWIRE_EAGER_NAMED_OBJECTS", "false")
        monkeypatch.setenv("OVERWIRE_BASE_DIR", str(tmp_path))

        settings = OverwireSettings()

        assert not settings.allow_per_request_override
        assert not settings.eager_named_objects
        assert settings.base_dir == tmp_path

    def test_engine_global_context_uses_base_dir(self, engine: Engine, data_dir: Path) -> None:
        assert engine.object_context.base_dir == data_dir
        assert engine.object_context.scope_name == "global"
