"""Type registry: process-wide catalog of scalars, enums and entities.

Usage:
    registry = get_registry()
    registry.define_scalar("foo/Money", Decimal("0.00"))
    registry.define_enum("foo/Active", {"y": 1, "n": 0}, "y")
    registry.define_entity(EntityDef(...))

    registry.enum_value("foo/Active", "n")  # 0
    registry.resolve_value(ref("foo/Money"))  # Decimal("0.00")
"""

from __future__ import annotations

import logging
import threading
import warnings
from collections.abc import Mapping
from typing import Any

from entitycore.config import EntitySettings, default_settings
from entitycore.core.schema.models import EntityDef, EnumType, KeyDef, KeyField, ScalarType
from entitycore.core.types import PRIMARY, UNSET, LiteralValue, TypeRef
from entitycore.errors import (
    InvalidDeclaration,
    InvalidEntityName,
    InvalidEnum,
    InvalidTypeName,
    NotAnEnum,
    PrimaryFieldMismatch,
    UnknownEntity,
    UnknownEnumSymbol,
    UnknownEnumValue,
    UnresolvedReference,
)

logger = logging.getLogger(__name__)

RegisteredType = ScalarType | EnumType | EntityDef
EntityRef = str | TypeRef | EntityDef
"""Anything that identifies an entity: its name, a TypeRef, or the EntityDef itself."""

_HOOKS = ("create", "mutate", "join", "destroy")


def _ref_name(ref: Any) -> Any:
    if isinstance(ref, TypeRef):
        return ref.name
    if isinstance(ref, (EntityDef, ScalarType, EnumType)):
        return ref.name
    return ref


class TypeRegistry:
    """Catalog of scalar, enum and entity definitions keyed by namespaced name.

    Written during schema loading, read-mostly afterwards. The only later
    mutation is memoization of key prototypes, which goes through ``lock``.
    Redefining a name replaces the previous definition.
    """

    def __init__(self, settings: EntitySettings | None = None) -> None:
        """Initialize empty registry.

        Args:
            settings: Naming and warning configuration. Defaults to environment settings.
        """
        self.settings = settings or default_settings()
        self.lock = threading.RLock()
        self._types: dict[str, RegisteredType] = {}

    def __contains__(self, name: object) -> bool:
        return _ref_name(name) in self._types

    def __len__(self) -> int:
        return len(self._types)

    def is_namespaced(self, name: Any) -> bool:
        """Check for a ``namespace/name`` identifier with both parts present."""
        if not isinstance(name, str):
            return False
        namespace, sep, local = name.partition(self.settings.namespace_separator)
        return bool(namespace and sep and local) and self.settings.namespace_separator not in local

    def _store(self, name: str, definition: RegisteredType) -> None:
        with self.lock:
            if name in self._types:
                logger.debug("Redefining %s", name)
                if self.settings.warn_on_redefinition:
                    warnings.warn(f"Type {name} redefined", stacklevel=3)
            self._types[name] = definition

    def get(self, name: EntityRef) -> RegisteredType | None:
        """Get any registered definition by name, None if absent."""
        return self._types.get(_ref_name(name))

    def clear(self) -> None:
        """Remove all definitions."""
        with self.lock:
            self._types.clear()

    # Definitions

    def define_scalar(self, name: str, exemplar: Any) -> ScalarType:
        """Register a scalar type whose exemplar value conveys its shape.

        The exemplar may itself be a TypeRef to an already registered type.

        Raises:
            InvalidTypeName: If name is not namespaced.
        """
        if not self.is_namespaced(name):
            raise InvalidTypeName("Not a name-spaced identifier", name=name)
        scalar = ScalarType(name=name, exemplar=self.resolve_value(exemplar))
        self._store(name, scalar)
        logger.debug("Defined scalar %s = %r", name, scalar.exemplar)
        return scalar

    def define_enum(self, name: str, mapping: Mapping[str, Any], default: str) -> EnumType:
        """Register an enum mapping symbolic tags to values.

        Raises:
            InvalidTypeName: If name is not namespaced.
            InvalidEnum: If default is not one of the mapping's tags.
        """
        if not self.is_namespaced(name):
            raise InvalidTypeName("Not a name-spaced identifier", name=name)
        if default not in mapping:
            raise InvalidEnum("Default value not valid", enum=name, default=default)
        enum = EnumType(name=name, mapping=dict(mapping), default=default)
        self._store(name, enum)
        logger.debug("Defined enum %s with tags %s", name, list(mapping))
        return enum

    def define_entity(self, entity: EntityDef) -> EntityDef:
        """Validate and register an entity definition.

        Field types and defaults are resolved now, so referenced scalars and
        enums must already be registered. Cross-entity key fields are resolved
        later, on first use of the key.

        Returns:
            The registered definition, with prototypes and the primary key filled in.

        Raises:
            InvalidEntityName: If the name is not namespaced.
            InvalidDeclaration: On duplicate fields, empty primary key, bad alias,
                non-callable hooks, malformed key fields or an explicitly
                declared primary key.
            PrimaryFieldMismatch: If a primary field is not a declared field.
            UnresolvedReference: If a field type names an unknown type.
        """
        if not self.is_namespaced(entity.name):
            raise InvalidEntityName("name must be name-spaced", name=entity.name)

        field_names = entity.field_names
        if len(set(field_names)) != len(field_names):
            raise InvalidDeclaration("Duplicate field name", entity=entity.name, fields=field_names)
        if not entity.primary:
            raise InvalidDeclaration("primary key is empty", entity=entity.name)
        missing = [f for f in entity.primary if f not in field_names]
        if missing:
            raise PrimaryFieldMismatch(
                "primary fields not in declared fields",
                entity=entity.name,
                primary=list(entity.primary),
                fields=field_names,
            )
        if entity.alias is not None and (not isinstance(entity.alias, str) or not entity.alias):
            raise InvalidDeclaration("alias must be a non-empty string", alias=entity.alias)
        for hook_name in _HOOKS:
            hook = getattr(entity, hook_name)
            if hook is not None and not callable(hook):
                raise InvalidDeclaration("not a function", entity=entity.name, hook=hook_name)
        # type_prototype is only filled in here, so a primary key present on an
        # unregistered definition was declared by the caller
        if PRIMARY in entity.keys and not entity.type_prototype:
            raise InvalidDeclaration("primary key is implicit", entity=entity.name, key=PRIMARY)
        for key in entity.keys.values():
            key.parse_fields(self.settings)

        prototype: dict[str, Any] = {}
        type_prototype: dict[str, Any] = {}
        for f in entity.fields:
            type_value = self.resolve_value(f.type)
            type_prototype[f.name] = type_value
            prototype[f.name] = type_value if f.default is UNSET else self.resolve_value(f.default)

        primary_key = KeyDef(
            name=PRIMARY,
            fields=[KeyField(name=f, field=f) for f in entity.primary],
            unique=True,
            cached=True,
        )
        entity.prototype = prototype
        entity.type_prototype = type_prototype
        entity.local_name = entity.name.rsplit(self.settings.namespace_separator, 1)[-1]
        declared = {name: key for name, key in entity.keys.items() if name != PRIMARY}
        entity.keys = {PRIMARY: primary_key, **declared}

        self._store(entity.name, entity)
        logger.debug("Defined entity %s with keys %s", entity.name, list(entity.keys))
        return entity

    # Lookup

    def resolve_value(self, ref: Any) -> Any:
        """Resolve a field type or default to a concrete value.

        A TypeRef to a scalar yields its exemplar, to an enum its default
        value, to an entity a default instance. A LiteralValue is unwrapped.
        Anything else is returned unchanged.

        Raises:
            UnresolvedReference: If a TypeRef names no registered type.
        """
        if isinstance(ref, LiteralValue):
            return ref.value
        if not isinstance(ref, TypeRef):
            return ref
        definition = self._types.get(ref.name)
        if definition is None:
            raise UnresolvedReference("Unresolved reference", ref=ref.name)
        if isinstance(definition, ScalarType):
            return definition.exemplar
        if isinstance(definition, EnumType):
            return definition.default_value
        # Late import to avoid circular dependency
        from entitycore.core.instance import new_instance

        return new_instance(definition, registry=self)

    def find_entity(self, ref: EntityRef) -> EntityDef:
        """Find an entity definition.

        Raises:
            UnknownEntity: If ref is None, unknown, or names a non-entity type.
        """
        if ref is None:
            raise UnknownEntity("entity cannot be None", entity=None)
        if isinstance(ref, EntityDef):
            return ref
        definition = self._types.get(_ref_name(ref))
        if not isinstance(definition, EntityDef):
            raise UnknownEntity("Not a type or unknown", entity=_ref_name(ref))
        return definition

    def find_enum(self, ref: str | TypeRef | EnumType) -> EnumType:
        """Find an enum definition.

        Raises:
            NotAnEnum: If ref does not name a registered enum.
        """
        if isinstance(ref, EnumType):
            return ref
        definition = self._types.get(_ref_name(ref))
        if not isinstance(definition, EnumType):
            raise NotAnEnum("Not an enum", enum=_ref_name(ref))
        return definition

    def enum_value(self, enum_ref: str | TypeRef | EnumType, tag: str) -> Any:
        """Return the value mapped to ``tag``.

        Raises:
            NotAnEnum: If enum_ref is not an enum.
            UnknownEnumSymbol: If tag is not one of the enum's tags.
        """
        enum = self.find_enum(enum_ref)
        if tag not in enum.mapping:
            raise UnknownEnumSymbol("Unknown enum symbol", enum=enum.name, sym=tag)
        return enum.mapping[tag]

    def enum_tag(self, enum_ref: str | TypeRef | EnumType, value: Any) -> str:
        """Return the tag mapped to ``value``.

        Raises:
            NotAnEnum: If enum_ref is not an enum.
            UnknownEnumValue: If no tag maps to value.
        """
        enum = self.find_enum(enum_ref)
        tag = enum.tag_for(value)
        if tag is None:
            raise UnknownEnumValue("Unknown enum value", enum=enum.name, value=value)
        return tag

    def entities(self) -> list[EntityDef]:
        """All registered entity definitions, in definition order."""
        return [d for d in self._types.values() if isinstance(d, EntityDef)]


# Module-level registry instance
_registry = TypeRegistry()


def get_registry() -> TypeRegistry:
    """Access the global type registry.

    Returns:
        The process-wide TypeRegistry instance.
    """
    return _registry


def reset_registry(settings: EntitySettings | None = None) -> TypeRegistry:
    """Replace the global registry with an empty one.

    Args:
        settings: Settings for the new registry. Defaults to environment settings.

    Returns:
        The new global registry.
    """
    global _registry
    _registry = TypeRegistry(settings=settings)
    return _registry
