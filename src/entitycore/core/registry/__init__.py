"""Type registry: definitions, lookup and reference resolution."""

from entitycore.core.registry.core import (
    EntityRef,
    RegisteredType,
    TypeRegistry,
    get_registry,
    reset_registry,
)

__all__ = [
    "TypeRegistry",
    "RegisteredType",
    "EntityRef",
    "get_registry",
    "reset_registry",
]
