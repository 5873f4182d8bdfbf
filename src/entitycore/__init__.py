"""entitycore: typed domain entities, keys and nested graph aggregation.

Usage:
    from decimal import Decimal
    from entitycore import (
        EACH, EntityDef, FieldDef, KeyDef, LocalGateway,
        aggregate, get_registry, ref,
    )

    registry = get_registry()
    registry.define_scalar("foo/StringId", "")
    registry.define_scalar("foo/Money", Decimal("0.00"))
    registry.define_entity(EntityDef(
        name="foo/Fruit",
        fields=[FieldDef("Fruit", ref("foo/StringId"))],
        primary=["Fruit"],
        keys={"all": KeyDef("all", [])},
        gateway=LocalGateway(),
    ))

    graph = aggregate({}, to="foo/Fruit", key_val=("all", {}), set_name="fruits")
    graph = aggregate(graph, to="foo/Nutrition", from_=["fruits", EACH, "Fruit"])
"""

__version__ = "0.1.0"

# Aggregation
from entitycore.aggregate import (
    EACH,
    AggregateSpec,
    JoinContext,
    MergePolicy,
    aggregate,
)

# Configuration
from entitycore.config import EntitySettings

# Core primitives
from entitycore.core import (
    PRIMARY,
    EntityDef,
    EnumType,
    FieldDef,
    Instance,
    KeyDef,
    KeyField,
    KeyValue,
    LiteralValue,
    ScalarType,
    TypeRef,
    TypeRegistry,
    get_alias,
    get_primary_key,
    get_registry,
    is_key_value,
    key_field,
    lit,
    make_key,
    new_instance,
    ref,
    reset_registry,
)

# Errors
from entitycore.errors import EntityError

# Storage
from entitycore.storage import (
    NULL_GATEWAY,
    Gateway,
    LocalGateway,
    NullGateway,
    delete_instance,
    read_entity,
    write_instance,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "TypeRef",
    "LiteralValue",
    "ref",
    "lit",
    "PRIMARY",
    "ScalarType",
    "EnumType",
    "FieldDef",
    "KeyField",
    "KeyDef",
    "EntityDef",
    "key_field",
    "TypeRegistry",
    "get_registry",
    "reset_registry",
    "KeyValue",
    "make_key",
    "is_key_value",
    "Instance",
    "new_instance",
    "get_alias",
    "get_primary_key",
    # Storage
    "Gateway",
    "NullGateway",
    "NULL_GATEWAY",
    "LocalGateway",
    "read_entity",
    "write_instance",
    "delete_instance",
    # Aggregation
    "aggregate",
    "AggregateSpec",
    "JoinContext",
    "MergePolicy",
    "EACH",
    # Config
    "EntitySettings",
    # Errors
    "EntityError",
]
