"""Read, write and delete instances through their entity's gateway.

Usage:
    write_instance(new_instance("foo/Fruit", {"Fruit": "Banana"}))
    banana = read_entity(make_key("foo/Fruit", "primary", {"Fruit": "Banana"}))
    fruits = read_entity(make_key("foo/Fruit", "all", {}))
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from entitycore.core.instance import Instance, new_instance
from entitycore.core.keys import KeyValue
from entitycore.core.registry import TypeRegistry, get_registry
from entitycore.core.schema import EntityDef
from entitycore.errors import KeyValueRequired, NonUniqueResult, NotAnInstance
from entitycore.storage.null import NULL_GATEWAY
from entitycore.storage.protocol import Gateway

logger = logging.getLogger(__name__)


def gateway_for(entity: EntityDef) -> Gateway:
    """The gateway bound to an entity, or the null gateway when none is bound."""
    return entity.gateway if entity.gateway is not None else NULL_GATEWAY


def _as_instance(entity: EntityDef, row: Mapping[str, Any], key_name: str) -> Instance:
    if isinstance(row, Instance) and row.entity.name == entity.name:
        return row if row.key == key_name else replace(row, key=key_name)
    return new_instance(entity, row, key=key_name)


def read_entity(
    key_value: KeyValue, *, registry: TypeRegistry | None = None
) -> Instance | list[Instance] | None:
    """Read the instance(s) matching a key value.

    Rows returned by the gateway as plain mappings become instances tagged
    with the key name.

    Returns:
        For a unique key, the instance or None. Otherwise a list, empty on a miss.

    Raises:
        KeyValueRequired: If key_value is not a KeyValue.
        NonUniqueResult: If the gateway returns several rows for a unique key.
    """
    if not isinstance(key_value, KeyValue):
        raise KeyValueRequired("read requires a key value from make_key", arg=key_value)
    entity = (registry or get_registry()).find_entity(key_value.entity)
    result = gateway_for(entity).read_by_key(key_value.key_name, key_value)
    logger.debug("Read %s by %s: %r", entity.name, key_value.key_name, dict(key_value))

    if result is None:
        return None if key_value.unique else []
    if isinstance(result, Mapping):
        instance = _as_instance(entity, result, key_value.key_name)
        return instance if key_value.unique else [instance]

    instances = [_as_instance(entity, row, key_value.key_name) for row in result]
    if not key_value.unique:
        return instances
    if len(instances) > 1:
        raise NonUniqueResult(
            "Unique key matched several instances",
            entity=entity.name,
            key=key_value.key_name,
            count=len(instances),
        )
    return instances[0] if instances else None


def _require_instance(instance: Any) -> Instance:
    if not isinstance(instance, Instance):
        raise NotAnInstance("Not an entity instance", arg=instance)
    return instance


def write_instance(instance: Instance) -> int:
    """Write an instance to its entity's gateway. Returns the affected count.

    Raises:
        NotAnInstance: If the argument was not made by new_instance or a read.
    """
    instance = _require_instance(instance)
    return gateway_for(instance.entity).write(instance)


def delete_instance(instance: Instance) -> int:
    """Delete an instance from its entity's gateway. Returns the affected count.

    Raises:
        NotAnInstance: If the argument was not made by new_instance or a read.
    """
    instance = _require_instance(instance)
    return gateway_for(instance.entity).delete(instance)
