"""Graph aggregation: extend a nested structure by joining to an entity.

The structure root is always a map. A unique key places one instance (or
None) under ``instance_name``; a non-unique key places an array of maps,
each holding one instance under ``instance_name``, under ``set_name``.

Usage:
    graph = aggregate({}, to="foo/Fruit", key_val={"Fruit": "Strawberry"})
    graph = aggregate(
        graph,
        to="foo/Supplier",
        from_=["Fruit"],
        key_val="by-fruit",
        instance_name="Supplier",
        set_name="suppliers",
    )
    graph = aggregate(
        graph,
        to="foo/Fruit",
        from_=["suppliers", EACH, "Supplier"],
        key_val="by-supplier",
        set_name="fruits",
    )
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from entitycore.aggregate.merge_strategies import resolve_merge
from entitycore.aggregate.models import AggregateSpec, Graph, JoinContext, MergeFn
from entitycore.aggregate.path import EachElement, JoinPath, compile_path, transform
from entitycore.core.keys import KeyValue, get_key_info, make_key
from entitycore.core.registry import TypeRegistry, get_registry
from entitycore.core.schema import EntityDef
from entitycore.core.types import PRIMARY
from entitycore.errors import InvalidGraph, InvalidPath, MissingSetName, UnresolvableKeyArgument
from entitycore.storage.operations import read_entity

logger = logging.getLogger(__name__)


def declared_key_name(key_val: Any) -> str:
    """Key name a key argument names before it is evaluated.

    A (name, values) pair or KeyValue names its key, a string is a key name,
    anything else means the primary key.
    """
    if isinstance(key_val, KeyValue):
        return key_val.key_name
    if isinstance(key_val, str):
        return key_val
    if _is_pair(key_val):
        return key_val[0]
    return PRIMARY


def _is_pair(value: Any) -> bool:
    return isinstance(value, tuple) and len(value) == 2 and isinstance(value[0], str)


class _Join:
    """One aggregate call: resolves keys, reads and writes at each matched parent."""

    def __init__(
        self,
        spec: AggregateSpec,
        target: EntityDef,
        path: JoinPath,
        merge: MergeFn,
        registry: TypeRegistry,
    ):
        self.spec = spec
        self.target = target
        self.path = path
        self.merge = merge
        self.registry = registry
        self.key_name = declared_key_name(spec.key_val)
        self.instance_name = spec.instance_name or target.alias_name
        # Elements can only be dropped from an array the path passes through
        self.droppable = spec.must_join and any(isinstance(s, EachElement) for s in path.steps)
        self.context = JoinContext(
            key=self.key_name,
            key_val=spec.key_val,
            entity=target.name,
            set_name=spec.set_name,
            instance_name=self.instance_name,
        )

    def key_value(self, form: Any, parent: Any, source: Any, *, call: bool = True) -> KeyValue:
        """Turn a key argument into a KeyValue for the target entity."""
        target, registry = self.target, self.registry
        if form is None:
            return make_key(target, PRIMARY, source, registry=registry)
        if isinstance(form, KeyValue):
            if form.entity == target.name:
                return form
            return make_key(target, form.key_name, form, registry=registry)
        if isinstance(form, str):
            return make_key(target, form, source, registry=registry)
        if _is_pair(form):
            return make_key(target, form[0], form[1], registry=registry)
        if isinstance(form, Mapping):
            return make_key(target, self.key_name, form, registry=registry)
        if call and callable(form):
            return self.key_value(form(parent, source, self.context), parent, source, call=False)
        raise UnresolvableKeyArgument(
            "Illegal key argument", key_val=form, source=source, target=target.name
        )

    def visit(self, parent: Any) -> tuple[Any, bool]:
        if not isinstance(parent, dict):
            raise InvalidPath(
                "Join location is not a map", arg=self.spec.from_, node=type(parent).__name__
            )
        if self.path.is_seed:
            owner, source = None, None
        else:
            owner, source = parent, parent.get(self.path.source)

        key_value = self.key_value(self.spec.key_val, owner, source)
        logger.debug(
            "Joining %s by %s at %s", self.target.name, key_value.key_name, self.spec.from_
        )
        result = read_entity(key_value, registry=self.registry)

        updated = dict(parent)
        if key_value.unique:
            slot = self.instance_name
            joined = result
            updated[slot] = joined
            unjoined = joined is None
        else:
            set_name = self.spec.set_name
            if set_name is None:
                raise MissingSetName(
                    "non-unique key requires a set-name",
                    entity=self.target.name,
                    key=key_value.key_name,
                )
            slot = set_name
            fresh = [{self.instance_name: instance} for instance in result or []]
            joined = self.merge(self.instance_name, parent.get(set_name), fresh)
            if self.spec.must_join:
                joined = [e for e in joined if _child(e, self.instance_name) is not None]
            updated[set_name] = joined
            unjoined = not joined

        if self.droppable and unjoined:
            return updated, True
        if self.spec.for_each is not None:
            # At the root the written value itself is rewritten, deeper down the matched element
            if self.path.steps:
                updated = self.spec.for_each(updated)
            else:
                updated[slot] = self.spec.for_each(updated[slot])
        return updated, False


def _child(element: Any, instance_name: str) -> Any:
    return element.get(instance_name) if isinstance(element, Mapping) else None


def aggregate(
    data: Graph,
    spec: AggregateSpec | None = None,
    /,
    *,
    registry: TypeRegistry | None = None,
    **options: Any,
) -> Graph:
    """Join a target entity into a (possibly empty) graph.

    Takes either an AggregateSpec or its fields as keyword options. The input
    graph is not modified: maps and arrays along the join path are copied, so
    a failed call leaves the caller's graph as it was.

    Args:
        data: Root map of the graph being built.
        spec: The join. When omitted, built from ``options``.
        registry: Registry to resolve against. Defaults to the global one.
        **options: AggregateSpec fields, when spec is omitted.

    Returns:
        The new root map.

    Raises:
        InvalidGraph: If data is not a map.
        InvalidPath: If ``from_`` has an unsupported shape or meets the wrong node kind.
        UnknownEntity: If the target is not registered.
        KeyNotFound: If the key named by ``key_val`` does not exist.
        MissingSetName: If a non-unique key is used without ``set_name``.
        UnresolvableKeyArgument: If ``key_val`` is not an accepted form.
        IllegalMergeSpecifier: If ``merge`` is not an accepted form.
    """
    if spec is None:
        spec = AggregateSpec(**options)
    elif options:
        raise TypeError("Pass either an AggregateSpec or keyword options, not both")
    if not isinstance(data, dict):
        raise InvalidGraph("data must be a map", found=type(data).__name__)

    registry = registry or get_registry()
    target = registry.find_entity(spec.to)
    key_info = get_key_info(target, declared_key_name(spec.key_val), registry=registry)
    if not key_info.unique and spec.set_name is None:
        raise MissingSetName(
            "non-unique key requires a set-name", entity=target.name, key=key_info.name
        )
    merge = resolve_merge(spec.merge)
    path = compile_path(spec.from_, registry.settings.each_marker)

    join = _Join(spec, target, path, merge, registry)
    result, _ = transform(data, path.steps, join.visit)
    return result
