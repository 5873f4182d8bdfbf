"""Core type definitions for entitycore.

Field types and defaults are written either as a reference to a registered
type or as a literal value:

    FieldDef("Fruit", ref("foo/StringId"))
    FieldDef("ShelfLife", ref("foo/NumDays"), default=1)
    FieldDef("Notes", lit(""))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final


@dataclass(frozen=True, slots=True)
class TypeRef:
    """Reference to a scalar, enum or entity registered under ``name``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class LiteralValue:
    """A value used as-is, never looked up in the registry."""

    value: Any


TypeSpec = TypeRef | LiteralValue | Any
"""Anything accepted where a field type or default is declared."""


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()
"""Marks a field declared without an explicit default."""

PRIMARY: Final = "primary"
"""Name of the key every entity has over its primary fields."""


def ref(name: str) -> TypeRef:
    """Shorthand for ``TypeRef(name)``."""
    return TypeRef(name)


def lit(value: Any) -> LiteralValue:
    """Shorthand for ``LiteralValue(value)``."""
    return LiteralValue(value)
