"""Key resolver: typed key prototypes and key value construction.

A key field either belongs to the key's own entity or references a field of
another entity (``foo/Fruit.Active``). The typed prototype of a key takes
each field's value from whichever entity it references. It is computed on
first use and kept on the KeyDef; a failed resolution is not kept, so a
retry succeeds once the referenced entity is defined.

Usage:
    key = make_key("foo/Fruit", "primary", {"Fruit": "Banana"})
    key.unique      # True
    dict(key)       # {"Fruit": "Banana"}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from entitycore.core.keys.models import KeyValue
from entitycore.core.registry import EntityRef, TypeRegistry, get_registry
from entitycore.core.schema.models import EntityDef, KeyDef
from entitycore.core.typed import assign_value
from entitycore.errors import (
    KeyNotFound,
    KeyValueRequired,
    UnknownEntity,
    UnresolvableKeyArgument,
    UnresolvableKeyField,
)

logger = logging.getLogger(__name__)


def get_key_info(
    entity: EntityRef, key_name: str, *, registry: TypeRegistry | None = None
) -> KeyDef:
    """Look up a key definition of an entity.

    Raises:
        UnknownEntity: If the entity is not registered.
        KeyNotFound: If the entity has no key of that name.
    """
    definition = (registry or get_registry()).find_entity(entity)
    key_info = definition.keys.get(key_name)
    if key_info is None:
        raise KeyNotFound("Key not found", entity=definition.name, key=key_name)
    return key_info


def resolve_key_fields(
    entity: EntityDef, key_info: KeyDef, *, registry: TypeRegistry | None = None
) -> dict[str, Any]:
    """Compute the typed prototype of a key without memoizing it.

    Local fields are typed from ``entity``'s prototype, referenced fields
    from the referenced entity's prototype.

    Raises:
        UnresolvableKeyField: On the first field whose entity or field cannot
            be found. Nothing is kept in that case.
    """
    registry = registry or get_registry()
    typed: dict[str, Any] = {}
    for key_field in key_info.key_fields:
        if key_field.is_local:
            source = entity.prototype
        else:
            try:
                source = registry.find_entity(key_field.entity).prototype  # type: ignore[arg-type]
            except UnknownEntity as e:
                raise UnresolvableKeyField(
                    "Cannot resolve key field",
                    entity=entity.name,
                    key=key_info.name,
                    field=key_field.name,
                ) from e
        if key_field.field not in source:
            raise UnresolvableKeyField(
                "Cannot resolve key field",
                entity=entity.name,
                key=key_info.name,
                field=key_field.name,
            )
        typed[key_field.name] = source[key_field.field]
    return typed


def key_prototype(
    entity: EntityRef, key_name: str, *, registry: TypeRegistry | None = None
) -> Mapping[str, Any]:
    """Typed prototype of a key, resolved once and then served from the KeyDef.

    Raises:
        KeyNotFound: If the entity has no such key.
        UnresolvableKeyField: If a field cannot be resolved yet.
    """
    registry = registry or get_registry()
    definition = registry.find_entity(entity)
    key_info = get_key_info(definition, key_name, registry=registry)
    if key_info.typed_prototype is not None:
        return key_info.typed_prototype

    typed = resolve_key_fields(definition, key_info, registry=registry)
    with registry.lock:
        if key_info.typed_prototype is None:
            key_info.typed_prototype = MappingProxyType(typed)
            logger.debug("Resolved key %s of %s", key_name, definition.name)
    return key_info.typed_prototype


def make_key(
    entity: EntityRef,
    key_name: str,
    values: Mapping[str, Any] | None,
    *,
    registry: TypeRegistry | None = None,
) -> KeyValue:
    """Make a key value holding exactly the key's fields.

    Each field takes the supplied value when present, typed through the key
    prototype, and otherwise its declared default (None unless declared).
    Supplied values that are not key fields are ignored, so an instance can
    be passed to build a key over its own fields.

    Args:
        entity: Entity the key belongs to.
        key_name: Name of the key.
        values: Field values; an empty mapping yields all defaults.
        registry: Registry to resolve against. Defaults to the global one.

    Returns:
        The KeyValue.

    Raises:
        KeyValueRequired: If values is None.
        UnresolvableKeyArgument: If values is not a mapping.
        KeyNotFound: If the entity has no such key.
        UnresolvableKeyField: If the key's prototype cannot be resolved yet.
        TypeMismatch: If a supplied value does not fit its field's type.
    """
    registry = registry or get_registry()
    definition = registry.find_entity(entity)
    if values is None:
        raise KeyValueRequired("key value cannot be None", entity=definition.name, key=key_name)
    if not isinstance(values, Mapping):
        raise UnresolvableKeyArgument(
            "key value must be a mapping", entity=definition.name, key=key_name, value=values
        )
    key_info = get_key_info(definition, key_name, registry=registry)
    typed = key_prototype(definition, key_name, registry=registry)

    data = key_info.defaults()
    for name in data:
        if name in values:
            data[name] = assign_value(typed[name], values[name], field=name)

    return KeyValue(
        entity=definition.name,
        key_name=key_info.name,
        data=MappingProxyType(data),
        prototype=typed,
        unique=key_info.unique,
    )


def is_key_value(value: Any) -> bool:
    """Check whether value was built by ``make_key`` rather than being a plain mapping."""
    return isinstance(value, KeyValue)
