from __future__ import annotations

from typing import TYPE_CHECKING

from overwire.exceptions import OverwireEngineNotSetError

if TYPE_CHECKING:
    from overwire.engine import Engine


class EngineContext:
    """Hold at most one process-wide engine.

    The binding is process-global for this instance (not task-local or
    thread-local). Code that has an engine at hand should pass it explicitly;
    this holder serves entry points that cannot.
    """

    def __init__(self) -> None:
        self._engine: Engine | None = None

    def set_current(self, engine: Engine) -> None:
        """Bind ``engine``, replacing any engine bound before."""
        self._engine = engine

    def get_current(self) -> Engine:
        """Return the bound engine.

        Raises:
            OverwireEngineNotSetError: If no engine has been bound yet.

        """
        if self._engine is None:
            msg = (
                "Engine is not set for engine_context. "
                "Call engine_context.set_current(engine) before using engine_context."
            )
            raise OverwireEngineNotSetError(msg)
        return self._engine

    def reset(self) -> None:
        """Unbind the current engine, if any."""
        self._engine = None

    @property
    def is_set(self) -> bool:
        return self._engine is not None


engine_context = EngineContext()
