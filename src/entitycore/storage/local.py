"""Local in-memory gateway implementation.

Dict-based storage keyed by primary key, suitable for single-process use
and testing.

Keys are evaluated by field equality: a stored instance matches when every
non-None field of the key value equals the instance's field of the same
name. Keys whose fields are not plain fields of the stored entity (renamed
or cross-entity fields, ranges) need a query function.

Usage:
    fruit_store = LocalGateway()
    supplier_store = LocalGateway(queries={
        "by-fruit": lambda rows, key: [...],
    })
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from entitycore.core.types import PRIMARY
from entitycore.errors import NotAnInstance, UnsupportedQuery
from entitycore.storage.protocol import ReadResult

if TYPE_CHECKING:
    from entitycore.core.instance import Instance
    from entitycore.core.keys import KeyValue

QueryFn = Callable[[list["Instance"], "KeyValue"], ReadResult]
"""Evaluates a key against all stored rows, in insertion order."""


def _require_instance(instance: Any) -> Instance:
    # Late import to avoid circular dependency
    from entitycore.core.instance import Instance

    if not isinstance(instance, Instance):
        raise NotAnInstance("Not an entity instance", arg=instance)
    return instance


class LocalGateway:
    """Simple in-memory gateway using a dict.

    Structure:
        _rows[primary_key_value] = instance

    Args:
        queries: Query functions by key name, overriding equality matching.
    """

    def __init__(self, queries: Mapping[str, QueryFn] | None = None):
        """Initialize empty local gateway.

        Args:
            queries: Query functions by key name.
        """
        self._rows: dict[KeyValue, Instance] = {}
        self._queries: dict[str, QueryFn] = dict(queries or {})

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Instance]:
        return iter(list(self._rows.values()))

    def register_query(self, key_name: str, query: QueryFn) -> None:
        """Add or replace the query function for a key."""
        self._queries[key_name] = query

    def rows(self) -> list[Instance]:
        """All stored instances, in insertion order."""
        return list(self._rows.values())

    def read_by_key(self, key_name: str, key_value: KeyValue) -> ReadResult:
        """Read instances matching a key value.

        Returns:
            The single match (or None) for a unique key, otherwise a list.

        Raises:
            UnsupportedQuery: If a non-None key field is not a stored field
                and no query function is registered for the key.
        """
        query = self._queries.get(key_name)
        if query is not None:
            return query(self.rows(), key_value)

        if key_name == PRIMARY:
            return self._rows.get(key_value)

        criteria = {name: value for name, value in key_value.items() if value is not None}
        matches = [row for row in self._rows.values() if self._matches(row, criteria, key_value)]
        if key_value.unique:
            return matches[0] if matches else None
        return matches

    def _matches(self, row: Instance, criteria: dict[str, Any], key_value: KeyValue) -> bool:
        for name, value in criteria.items():
            if name not in row:
                raise UnsupportedQuery(
                    "Key field is not a stored field; register a query function",
                    entity=key_value.entity,
                    key=key_value.key_name,
                    field=name,
                )
            if row[name] != value:
                return False
        return True

    def write(self, instance: Instance) -> int:
        """Insert or replace an instance by its primary key. Returns 1."""
        instance = _require_instance(instance)
        self._rows[instance.primary] = instance
        return 1

    def delete(self, instance: Instance) -> int:
        """Delete an instance by its primary key. Returns 1 if it existed, else 0."""
        instance = _require_instance(instance)
        return 1 if self._rows.pop(instance.primary, None) is not None else 0

    def clear(self) -> None:
        self._rows.clear()
