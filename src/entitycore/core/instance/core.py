"""Instance construction and identity helpers."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from entitycore.core.instance.models import Instance
from entitycore.core.keys.models import KeyValue
from entitycore.core.registry import EntityRef, TypeRegistry, get_registry
from entitycore.core.typed import assign_map
from entitycore.errors import PrimaryKeyUnavailable


def new_instance(
    entity: EntityRef,
    values: Mapping[str, Any] | None = None,
    *,
    key: str | None = None,
    registry: TypeRegistry | None = None,
) -> Instance:
    """Make an instance of an entity.

    Fields not in ``values`` keep their default; values that are not fields
    of the entity are ignored.

    Raises:
        UnknownEntity: If the entity is not registered.
        TypeMismatch: If a value does not fit its field's type.
    """
    definition = (registry or get_registry()).find_entity(entity)
    data = dict(definition.prototype)
    if values:
        data = assign_map(definition.type_prototype, data, values)
    return Instance(entity=definition, data=MappingProxyType(data), key=key)


def get_alias(target: EntityRef | Instance, *, registry: TypeRegistry | None = None) -> str:
    """Map key for placing an entity's instances: its alias, else its unqualified name."""
    if isinstance(target, Instance):
        return target.entity.alias_name
    return (registry or get_registry()).find_entity(target).alias_name


def get_primary_key(instance: Any) -> KeyValue:
    """Primary key value of an instance.

    Raises:
        PrimaryKeyUnavailable: If the argument is not an Instance.
    """
    if not isinstance(instance, Instance):
        raise PrimaryKeyUnavailable("Primary key not set", instance=instance)
    return instance.primary


def is_instance(value: Any) -> bool:
    return isinstance(value, Instance)
