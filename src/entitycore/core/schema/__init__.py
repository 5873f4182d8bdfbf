"""Schema declarations: scalars, enums, fields, keys and entities."""

from entitycore.core.schema.models import (
    EntityDef,
    EnumType,
    FieldDef,
    Hook,
    KeyDef,
    KeyField,
    ScalarType,
    key_field,
)

__all__ = [
    "ScalarType",
    "EnumType",
    "FieldDef",
    "KeyField",
    "KeyDef",
    "EntityDef",
    "Hook",
    "key_field",
]
