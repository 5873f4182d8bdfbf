"""Configuration module using Pydantic Settings.

Usage:
    from entitycore.config import EntitySettings

    settings = EntitySettings(each_marker="*")
    registry = TypeRegistry(settings=settings)
"""

from entitycore.config.settings import EntitySettings, default_settings

__all__ = [
    "EntitySettings",
    "default_settings",
]
