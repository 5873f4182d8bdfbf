"""Core functionalities: type references, schema, registry, keys and instances.

Architecture Note:
    core/ holds the type system. The registry is the only stateful piece;
    key prototypes are memoized onto its KeyDefs. Persistence lives in
    storage/, graph building in aggregate/.
"""

from entitycore.core.instance import (
    Instance,
    get_alias,
    get_primary_key,
    is_instance,
    new_instance,
)
from entitycore.core.keys import (
    KeyValue,
    get_key_info,
    is_key_value,
    key_prototype,
    make_key,
    resolve_key_fields,
)
from entitycore.core.registry import TypeRegistry, get_registry, reset_registry
from entitycore.core.schema import (
    EntityDef,
    EnumType,
    FieldDef,
    KeyDef,
    KeyField,
    ScalarType,
    key_field,
)
from entitycore.core.typed import assign_map, assign_value
from entitycore.core.types import PRIMARY, UNSET, LiteralValue, TypeRef, lit, ref

__all__ = [
    # Types
    "TypeRef",
    "LiteralValue",
    "ref",
    "lit",
    "UNSET",
    "PRIMARY",
    "assign_value",
    "assign_map",
    # Schema
    "ScalarType",
    "EnumType",
    "FieldDef",
    "KeyField",
    "KeyDef",
    "EntityDef",
    "key_field",
    # Registry
    "TypeRegistry",
    "get_registry",
    "reset_registry",
    # Keys
    "KeyValue",
    "get_key_info",
    "resolve_key_fields",
    "key_prototype",
    "make_key",
    "is_key_value",
    # Instances
    "Instance",
    "new_instance",
    "get_alias",
    "get_primary_key",
    "is_instance",
]
