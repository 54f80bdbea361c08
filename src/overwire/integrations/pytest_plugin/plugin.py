from __future__ import annotations

from collections.abc import Iterator

import pytest

from overwire.engine import Engine
from overwire.engine_context import EngineContext, engine_context
from overwire.settings import OverwireSettings


@pytest.fixture()
def overwire_settings() -> OverwireSettings:
    """Settings for the per-test engine.

    Override this fixture to point ``base_dir`` at test data or to disable
    eager named objects.
    """
    return OverwireSettings()


@pytest.fixture()
def overwire_engine(overwire_settings: OverwireSettings) -> Engine:
    """Create a per-test engine with only the builtin global types.

    The fixture is function-scoped, so registered applications and loaded
    templates are isolated between tests.

    Returns:
        A new ``Engine`` instance.

    """
    return Engine(overwire_settings)


@pytest.fixture()
def overwire_engine_context(overwire_engine: Engine) -> Iterator[EngineContext]:
    """Bind ``overwire_engine`` to the process-wide ``engine_context`` for one test."""
    engine_context.set_current(overwire_engine)
    try:
        yield engine_context
    finally:
        engine_context.reset()
