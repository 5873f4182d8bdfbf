"""Configuration settings using Pydantic Settings.

Usage:
    from entitycore.config import EntitySettings

    # Load from environment variables (ENTITY_*)
    settings = EntitySettings()

    # Or override with explicit values
    settings = EntitySettings(warn_on_redefinition=True)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EntitySettings(BaseSettings):  # type: ignore[misc]
    """Configuration for the type registry and the aggregator.

    Attributes:
        namespace_separator: Separates namespace and name in ``foo/Fruit``.
        reference_separator: Separates type and field in ``foo/Fruit.Active``.
        each_marker: String accepted in ``from_`` paths as the each-element step.
        warn_on_redefinition: Emit a UserWarning when a type name is redefined.

    Environment Variables:
        ENTITY_NAMESPACE_SEPARATOR
        ENTITY_REFERENCE_SEPARATOR
        ENTITY_EACH_MARKER
        ENTITY_WARN_ON_REDEFINITION
    """

    model_config = SettingsConfigDict(
        env_prefix="ENTITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    namespace_separator: str = Field(default="/", min_length=1)
    reference_separator: str = Field(default=".", min_length=1)
    each_marker: str = Field(default=">", min_length=1)
    warn_on_redefinition: bool = False


@lru_cache(maxsize=1)
def default_settings() -> EntitySettings:
    """Settings loaded once from the environment, shared by default-constructed objects."""
    return EntitySettings()
