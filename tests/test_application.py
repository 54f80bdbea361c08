from __future__ import annotations

from pathlib import Path

import pytest

from overwire.application import Application, ApplicationSettings
from overwire.engine import Engine
from overwire.exceptions import (
    OverwireConfigurationError,
    OverwireDuplicateDefinitionError,
    OverwireResolutionError,
)
from overwire.settings import OverwireSettings


class TestApplicationSettings:
    def test_reads_files_relative_to_app_json(self, engine: Engine, data_dir: Path) -> None:
        settings = ApplicationSettings.from_config(
            data_dir / "app_a" / "app.json",
            engine.object_context.definition,
        )

        assert settings.id == "app-a"
        assert settings.description == "Application used by the engine tests."
        assert settings.base_dir == data_dir / "app_a"
        assert settings.definition.parent is engine.object_context.definition
        assert settings.definition.local_type_tags == frozenset({"TypeA", "TypeB", "Point"})

    def test_request_override_defaults_to_engine_setting(self, engine: Engine, data_dir: Path) -> None:
        settings = ApplicationSettings.from_config(
            data_dir / "app_a" / "app.json",
            engine.object_context.definition,
            OverwireSettings(base_dir=data_dir, allow_per_request_override=False),
        )

        assert not settings.allow_per_request_override

    def test_duplicate_across_files_names_the_first_file(self, engine: Engine, data_dir: Path) -> None:
        with pytest.raises(OverwireDuplicateDefinitionError) as exc_info:
            ApplicationSettings.from_config(
                data_dir / "app_b" / "app.json",
                engine.object_context.definition,
            )

        assert exc_info.value.kind == "Object type"
        assert exc_info.value.origin == str(data_dir / "app_b" / "types.json")

    def test_missing_listed_file_is_a_configuration_error(self, engine: Engine, tmp_path: Path) -> None:
        app_json = tmp_path / "app.json"
        app_json.write_text(
            '{"id": "broken", "objectTypes": ["absent.json"], "namedObjects": []}',
            encoding="utf-8",
        )

        with pytest.raises(OverwireConfigurationError, match="absent.json"):
            ApplicationSettings.from_config(app_json, engine.object_context.definition)


class TestApplication:
    def test_properties(self, app_a: Application, data_dir: Path) -> None:
        assert app_a.id == "app-a"
        assert app_a.base_dir == data_dir / "app_a"
        assert app_a.allow_per_request_override
        assert app_a.object_context.scope_name == "application"
        assert "app-a" in repr(app_a)

    def test_get_resolves_named_objects(self, app_a: Application) -> None:
        assert app_a.get("objectA") == 1
        assert app_a.get("objectB") == 1
        assert app_a.get("objectC") == "abc"
        assert app_a.get("aliasA") == 1
        assert app_a.get("secret") == 7
        assert app_a.get("missing") is None

    def test_later_type_file_overrides_earlier_one(self, app_a: Application) -> None:
        assert app_a.get("origin") == {"x": 0, "y": 0}

    def test_get_named_object_carries_scope(self, app_a: Application) -> None:
        named = app_a.get_named_object("aliasA")

        assert named is not None
        assert named.scope == "application"
        assert named.definition.value == {"_ref": "objectA"}

    def test_create_uses_application_types(self, app_a: Application) -> None:
        assert app_a.create({"_type": "TypeB", "value": {"_type": "TypeA", "value": 9}}) == 9

    def test_get_function_returns_callable(self, app_a: Application) -> None:
        greeting = app_a.get_function("greeting")

        assert greeting("there") == "hello there"
        assert app_a.get_function("missing") is None

    def test_get_function_rejects_values(self, app_a: Application) -> None:
        with pytest.raises(OverwireResolutionError, match="Object 'objectA' is not a function."):
            app_a.get_function("objectA")

    def test_list_named_objects_hides_private_objects(self, app_a: Application) -> None:
        names = [named.definition.name for named in app_a.list_named_objects()]

        assert names == ["aliasA", "greeting", "objectA", "objectB", "objectC", "origin"]

    def test_default_template_has_no_overrides(self, app_a: Application) -> None:
        template = app_a.default_template

        assert template is app_a.default_template
        assert template.uri == "app-a"
        assert template.base is None
        assert template.object_context.parent is app_a.object_context
        assert not template.object_context.definition.has_overrides
        assert template.object_context.get("objectA") is app_a.get_named_object("objectA")


def test_lazy_application_defers_object_errors(data_dir: Path, tmp_path: Path) -> None:
    (tmp_path / "objects.json").write_text(
        '[{"name": "broken", "value": {"_type": "Unknown"}}, {"name": "fine", "value": 1}]',
        encoding="utf-8",
    )
    app_json = tmp_path / "app.json"
    app_json.write_text(
        '{"id": "lazy", "objectTypes": [], "namedObjects": ["objects.json"]}',
        encoding="utf-8",
    )
    eager = Engine(OverwireSettings(base_dir=data_dir))
    lazy = Engine(OverwireSettings(base_dir=data_dir, eager_named_objects=False))

    with pytest.raises(OverwireResolutionError, match="Not supported type: 'Unknown'"):
        eager.register(app_json)
    application = lazy.register(app_json)

    assert application.get("fine") == 1
    with pytest.raises(OverwireResolutionError):
        application.get("broken")
