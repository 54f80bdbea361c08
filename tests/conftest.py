"""Shared pytest fixtures for overwire tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from overwire.application import Application
from overwire.definition import ContextDefinitionBuilder
from overwire.engine import Engine
from overwire.settings import OverwireSettings
from overwire.symbols import SymbolLoader
from tests.helpers import DATA_DIR


@pytest.fixture()
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture()
def builder() -> ContextDefinitionBuilder:
    return ContextDefinitionBuilder()


@pytest.fixture()
def symbol_loader() -> SymbolLoader:
    return SymbolLoader()


@pytest.fixture()
def settings() -> OverwireSettings:
    """Settings rooted at the test data directory."""
    return OverwireSettings(base_dir=DATA_DIR)


@pytest.fixture()
def engine(settings: OverwireSettings) -> Engine:
    return Engine(settings)


@pytest.fixture()
def app_a(engine: Engine, data_dir: Path) -> Application:
    """The ``app-a`` application registered on ``engine``."""
    return engine.register(data_dir / "app_a" / "app.json")
