"""Typed failures raised by the registry, key resolver, storage and aggregator.

Every error carries a ``kind`` naming the failure and a ``context`` dict with
the offending entity/key/field, so callers can branch on either the class or
the kind string.

Usage:
    try:
        make_key("foo/Fruit", "by-colour", {})
    except KeyNotFound as e:
        print(e.kind, e.context["key"])
"""

from __future__ import annotations

from typing import Any


class EntityError(Exception):
    """Base class for all entitycore failures."""

    kind = "EntityError"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context: dict[str, Any] = context

    def __str__(self) -> str:
        message = super().__str__()
        if not self.context:
            return message
        details = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"{message} ({details})"


# Schema definition


class InvalidTypeName(EntityError):
    """A type name is not a namespaced identifier such as ``foo/Money``."""

    kind = "InvalidTypeName"


class InvalidEntityName(InvalidTypeName):
    kind = "InvalidEntityName"


class InvalidEnum(EntityError):
    """Enum default tag is missing from its mapping."""

    kind = "InvalidEnum"


class PrimaryFieldMismatch(EntityError):
    """A primary key field is not one of the declared fields."""

    kind = "PrimaryFieldMismatch"


class InvalidDeclaration(EntityError):
    """Malformed entity, field or key declaration."""

    kind = "InvalidDeclaration"


# Lookup


class UnresolvedReference(EntityError):
    """A TypeRef names a type that is not registered."""

    kind = "UnresolvedReference"


class UnknownEntity(EntityError):
    kind = "UnknownEntity"


class NotAnEnum(EntityError):
    kind = "NotAnEnum"


class UnknownEnumSymbol(EntityError):
    kind = "UnknownEnumSymbol"


class UnknownEnumValue(EntityError):
    kind = "UnknownEnumValue"


# Keys


class KeyNotFound(EntityError):
    kind = "KeyNotFound"


class UnresolvableKeyField(EntityError):
    """A key field could not be typed from its entity or referenced entity.

    Not cached: a later attempt succeeds once the referenced entity exists.
    """

    kind = "UnresolvableKeyField"


class KeyValueRequired(EntityError):
    kind = "KeyValueRequired"


class TypeMismatch(EntityError):
    """Value cannot be assigned to a field of the prototype's type."""

    kind = "TypeMismatch"


# Instances and storage


class NotAnInstance(EntityError):
    kind = "NotAnInstance"


class PrimaryKeyUnavailable(EntityError):
    kind = "PrimaryKeyUnavailable"


class NonUniqueResult(EntityError):
    """A gateway returned several instances for a unique key."""

    kind = "NonUniqueResult"


class UnsupportedQuery(EntityError):
    """An in-memory gateway cannot evaluate a key without a query function."""

    kind = "UnsupportedQuery"


# Aggregation


class InvalidGraph(EntityError):
    kind = "InvalidGraph"


class InvalidPath(EntityError):
    kind = "InvalidPath"


class MissingSetName(EntityError):
    kind = "MissingSetName"


class UnresolvableKeyArgument(EntityError):
    kind = "UnresolvableKeyArgument"


class IllegalMergeSpecifier(EntityError):
    kind = "IllegalMergeSpecifier"
