"""Tests for configuration models and file loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from overwire.config import (
    ApplicationConfig,
    NamedObjectDescriptorConfig,
    RequestOverrides,
    RequestTemplateConfig,
    TypeDescriptorConfig,
    load_named_object_descriptors,
    load_provider_descriptors,
    load_type_descriptors,
    parse_config,
    read_config,
    validate_config,
)
from overwire.exceptions import OverwireConfigurationError


class TestValidateConfig:
    def test_valid_application_has_no_errors(self) -> None:
        value = {"id": "app", "objectTypes": ["types.json"], "namedObjects": []}

        assert validate_config(value, ApplicationConfig) == []

    def test_missing_required_fields_are_listed(self) -> None:
        errors = validate_config({"id": "app"}, ApplicationConfig)

        assert len(errors) == 2
        assert any(error.startswith("objectTypes") for error in errors)
        assert any(error.startswith("namedObjects") for error in errors)

    def test_list_schema_reports_element_index(self) -> None:
        errors = validate_config(
            [{"typeName": "A", "moduleName": "m", "functionName": "f"}, {"typeName": "B"}],
            list[TypeDescriptorConfig],
        )

        assert errors
        assert all(error.startswith("1.") for error in errors)

    def test_empty_names_are_rejected(self) -> None:
        assert validate_config({"name": "", "value": 1}, NamedObjectDescriptorConfig)


class TestParseConfig:
    def test_wire_names_and_python_names_are_accepted(self) -> None:
        by_alias = parse_config(
            {"typeName": "A", "moduleName": "m", "functionName": "f", "override": True},
            TypeDescriptorConfig,
        )
        by_name = TypeDescriptorConfig(type_name="A", module_name="m", function_name="f")

        assert by_alias.override
        assert by_alias.to_descriptor("types.json").origin == "types.json"
        assert by_name.to_descriptor().type_tag == "A"

    def test_named_object_value_is_kept_verbatim(self) -> None:
        config = parse_config(
            {"name": "point", "value": {"_type": "Point", "x": 1}, "private": True},
            NamedObjectDescriptorConfig,
        )

        descriptor = config.to_descriptor()

        assert descriptor.value == {"_type": "Point", "x": 1}
        assert descriptor.private
        assert not descriptor.overrides
        assert descriptor.dependencies is None

    def test_null_value_is_allowed(self) -> None:
        config = parse_config({"name": "nothing", "value": None}, NamedObjectDescriptorConfig)

        assert config.value is None

    def test_missing_value_is_rejected(self) -> None:
        with pytest.raises(OverwireConfigurationError, match="value"):
            parse_config({"name": "nothing"}, NamedObjectDescriptorConfig)

    def test_error_names_the_origin(self) -> None:
        with pytest.raises(OverwireConfigurationError, match="Invalid configuration in file 'app.json'"):
            parse_config({}, ApplicationConfig, "app.json")

    def test_request_overrides_default_to_empty(self) -> None:
        overrides = parse_config({}, RequestOverrides)

        assert overrides.type_descriptors() == []
        assert overrides.provider_descriptors() == []
        assert overrides.named_object_descriptors() == []

    def test_request_overrides_convert_to_descriptors(self) -> None:
        overrides = parse_config(
            {
                "overrideProviders": [
                    {"protocol": "Doc", "moduleName": "m", "functionName": "load"},
                ],
                "overrideObjects": [{"name": "limit", "value": 5}],
            },
            RequestOverrides,
        )

        (provider,) = overrides.provider_descriptors("request")
        (named,) = overrides.named_object_descriptors("request")
        assert provider.scheme == "Doc"
        assert provider.loader_ref == "load"
        assert provider.origin == "request"
        assert named.name == "limit"
        assert named.value == 5


class TestRequestTemplateConfig:
    def test_application_or_base_is_required(self) -> None:
        with pytest.raises(OverwireConfigurationError, match='"application" or "base" must be present'):
            parse_config({"overrideObjects": []}, RequestTemplateConfig)

    @pytest.mark.parametrize(
        "value",
        [{"application": "app"}, {"base": "base.json"}],
    )
    def test_either_is_enough(self, value: dict[str, str]) -> None:
        assert validate_config(value, RequestTemplateConfig) == []


class TestFiles:
    def test_read_config_reports_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OverwireConfigurationError, match="Cannot read configuration file"):
            read_config(tmp_path / "missing.json", ApplicationConfig)

    def test_read_config_reports_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(OverwireConfigurationError, match="Cannot parse configuration file"):
            read_config(path, ApplicationConfig)

    def test_application_file(self, data_dir: Path) -> None:
        config = read_config(data_dir / "app_a" / "app.json", ApplicationConfig)

        assert config.id == "app-a"
        assert config.allow_per_request_override is None
        assert config.object_types == ["types.json", "types_override.json"]
        assert config.object_providers == ["providers.json"]

    def test_application_providers_default_to_empty(self, data_dir: Path) -> None:
        config = read_config(data_dir / "app_b" / "app.json", ApplicationConfig)

        assert config.object_providers == []

    def test_load_type_descriptors_records_origin(self, data_dir: Path) -> None:
        path = data_dir / "app_a" / "types_override.json"

        (descriptor,) = load_type_descriptors(path)

        assert descriptor.type_tag == "Point"
        assert descriptor.constructor_ref == "create_point"
        assert descriptor.overrides
        assert descriptor.origin == str(path)

    def test_load_provider_descriptors(self, data_dir: Path) -> None:
        (descriptor,) = load_provider_descriptors(data_dir / "app_a" / "providers.json")

        assert descriptor.scheme == "ProtocolA"
        assert descriptor.module_ref == "../symbols.py"

    def test_load_named_object_descriptors_keeps_order(self, data_dir: Path) -> None:
        descriptors = load_named_object_descriptors(data_dir / "app_a" / "objects.json")

        assert [descriptor.name for descriptor in descriptors] == [
            "objectA",
            "objectB",
            "objectC",
            "origin",
            "greeting",
            "aliasA",
            "secret",
        ]
        assert [descriptor.name for descriptor in descriptors if descriptor.private] == ["secret"]

    def test_invalid_descriptor_file_names_the_file(self, tmp_path: Path) -> None:
        path = tmp_path / "types.json"
        path.write_text('[{"typeName": "A"}]', encoding="utf-8")

        with pytest.raises(OverwireConfigurationError, match="types.json"):
            load_type_descriptors(path)
