"""Aggregation models: join specifications, merge policies and join context."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from entitycore.core.registry import EntityRef


class MergePolicy(Enum):
    """How a freshly read array combines with an array already at ``set_name``."""

    REPLACE = "replace"
    """Fresh array wins outright. Default."""

    PRIMARY_KEY = "primary"
    """Union of both arrays by primary key; the fresh element wins on collision."""


MergeFn = Callable[[str, list[Any], list[Any]], list[Any]]
"""Custom merge: (instance_name, current array, fresh array) -> merged array."""

KeyValFn = Callable[[Any, Any, "JoinContext"], Any]
"""Computes a key argument from (parent node, join source value, context)."""


@dataclass(frozen=True, slots=True)
class JoinContext:
    """What a key_val function is told about the join being performed."""

    key: str
    key_val: Any
    entity: str
    set_name: str | None
    instance_name: str


@dataclass(frozen=True, slots=True)
class AggregateSpec:
    """Declarative join from a location in a graph to a target entity.

    Attributes:
        to: Entity being joined. Mandatory.
        from_: Path to the join source. None or empty seeds the root.
        key_val: Key argument: None (primary key from the source), a key name,
            a (key name, values) pair, a KeyValue, a mapping, or a function.
        instance_name: Map key for joined instances. Defaults to the target's
            alias or unqualified name.
        set_name: Map key for the array a non-unique key produces.
        merge: None, a MergePolicy or its value, or a MergeFn.
        must_join: Drop matched array elements whose join found nothing.
        for_each: Called once per write; its return value replaces what it
            was given. At the root (``from_`` of length 0 or 1) it gets the
            written instance or array, deeper down each matched element.
    """

    to: EntityRef
    from_: Sequence[Any] | None = None
    key_val: Any = None
    instance_name: str | None = None
    set_name: str | None = None
    merge: MergePolicy | str | MergeFn | None = None
    must_join: bool = False
    for_each: Callable[[Any], Any] | None = None


Graph = dict[str, Any]
"""Root of a nested structure: maps holding instances, maps or arrays of maps."""

GraphNode = Mapping[str, Any] | list[Any] | Any
