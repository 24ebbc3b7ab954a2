"""Engine settings.

MapperSettings is a Pydantic model for type-safe configuration of the
formatting and mapping behavior shared by every node.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class MapperSettings(BaseModel):
    """Settings consumed by value formats and mapping helpers."""

    model_config = ConfigDict(frozen=True)

    date_format: str = "%Y-%m-%d"
    datetime_format: str = "%Y-%m-%d %H:%M:%S"
    time_format: str = "%H:%M"
    enum_property: str = "name"


_settings = MapperSettings()


def get_settings() -> MapperSettings:
    """Return the active settings."""
    return _settings


def configure(**overrides: Any) -> MapperSettings:
    """Validate *overrides* on top of the active settings and activate them.

    Raises:
        pydantic.ValidationError: If an override has the wrong type.
    """
    global _settings
    data = _settings.model_dump()
    data.update(overrides)
    _settings = MapperSettings.model_validate(data)
    return _settings


def reset_settings() -> MapperSettings:
    """Restore default settings."""
    global _settings
    _settings = MapperSettings()
    return _settings
