"""Key value model.

A KeyValue is a read-only mapping of key field names to values that also
carries its identity: owning entity, key name, typed prototype and
uniqueness. That identity is what distinguishes a key value from an
arbitrary dict when it reaches the aggregator or a gateway.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any


def _freeze(value: Any) -> Hashable:
    """Hashable stand-in for a key field value; equal values freeze equally."""
    if isinstance(value, Mapping):
        return frozenset((name, _freeze(item)) for name, item in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(item) for item in value)
    if isinstance(value, Hashable):
        return value
    return repr(value)


@dataclass(frozen=True, slots=True, eq=False)
class KeyValue(Mapping[str, Any]):
    """Typed value of a named key, as returned by ``make_key``."""

    entity: str
    key_name: str
    data: Mapping[str, Any]
    prototype: Mapping[str, Any]
    unique: bool

    def __getitem__(self, name: str) -> Any:
        return self.data[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, KeyValue):
            return (
                self.entity == other.entity
                and self.key_name == other.key_name
                and dict(self.data) == dict(other.data)
            )
        if isinstance(other, Mapping):
            return dict(self.data) == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.entity, self.key_name, _freeze(self.data)))

    def __repr__(self) -> str:
        return f"KeyValue({self.entity}:{self.key_name} {dict(self.data)!r})"
