from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OverwireSettings(BaseSettings):
    """Engine-wide settings.

    Env vars:
        OVERWIRE_ALLOW_PER_REQUEST_OVERRIDE: Default for applications that do not
            set ``allowPerRequestOverride``.
        OVERWIRE_BASE_DIR: Base directory of the global level.
        OVERWIRE_EAGER_NAMED_OBJECTS: Build application and template named
            objects when they are loaded instead of on first lookup.
    """

    model_config = SettingsConfigDict(env_prefix="OVERWIRE_", case_sensitive=False)

    allow_per_request_override: bool = True
    base_dir: Path = Field(default_factory=Path.cwd)
    eager_named_objects: bool = True
