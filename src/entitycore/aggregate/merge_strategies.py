"""Pure functions for merge strategies.

Stateless functions combining the array already held at ``set_name`` with
the array a non-unique join has just read. Each element is a map holding
one instance under ``instance_name``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from entitycore.aggregate.models import MergeFn, MergePolicy
from entitycore.core.instance import Instance
from entitycore.core.keys import KeyValue
from entitycore.errors import IllegalMergeSpecifier, InvalidGraph, PrimaryKeyUnavailable


def merge_replace(instance_name: str, current: list[Any] | None, fresh: list[Any]) -> list[Any]:
    """Fresh array wins outright."""
    return fresh


def _element_primary(instance_name: str, element: Any) -> KeyValue:
    instance = element.get(instance_name) if isinstance(element, dict) else None
    if not isinstance(instance, Instance):
        raise PrimaryKeyUnavailable(
            "Primary key unavailable", instance_name=instance_name, element=element
        )
    return instance.primary


def merge_by_primary_key(
    instance_name: str, current: list[Any] | None, fresh: list[Any]
) -> list[Any]:
    """Union of current and fresh elements by the primary key of their instance.

    Current elements keep their position, replaced by the fresh element on a
    primary key collision. Fresh elements with new keys follow in order.

    Args:
        instance_name: Map key holding the instance within each element.
        current: Array already in the graph, or None.
        fresh: Array just read.

    Returns:
        Merged array.

    Raises:
        InvalidGraph: If current is neither None nor an array.
        PrimaryKeyUnavailable: If an element holds no instance.
    """
    if current is None:
        current = []
    if not isinstance(current, list):
        raise InvalidGraph("Expected an array to merge into", found=type(current).__name__)

    merged: dict[KeyValue, Any] = {}
    for element in current:
        merged[_element_primary(instance_name, element)] = element
    for element in fresh:
        merged[_element_primary(instance_name, element)] = element
    return list(merged.values())


def _checked(merge: MergeFn) -> MergeFn:
    def merge_custom(instance_name: str, current: list[Any], fresh: list[Any]) -> list[Any]:
        result = merge(instance_name, current, fresh)
        if not isinstance(result, list):
            raise IllegalMergeSpecifier(
                "Merge function must return an array", merge=merge, result=result
            )
        return result

    return merge_custom


def resolve_merge(spec: MergePolicy | str | Callable[..., Any] | None) -> MergeFn:
    """Get the merge function for a merge specifier.

    Args:
        spec: None (replace), a MergePolicy, its string value, or a function
            of (instance_name, current, fresh).

    Returns:
        Merge function. Custom functions are wrapped to check they return an array.

    Raises:
        IllegalMergeSpecifier: If spec is none of the accepted forms.
    """
    if spec is None:
        return merge_replace
    if isinstance(spec, str) and not isinstance(spec, MergePolicy):
        try:
            spec = MergePolicy(spec)
        except ValueError as e:
            raise IllegalMergeSpecifier("Illegal merge specifier", arg=spec) from e
    if isinstance(spec, MergePolicy):
        strategies: dict[MergePolicy, MergeFn] = {
            MergePolicy.REPLACE: merge_replace,
            MergePolicy.PRIMARY_KEY: merge_by_primary_key,
        }
        return strategies[spec]
    if callable(spec):
        return _checked(spec)
    raise IllegalMergeSpecifier("Illegal merge specifier", arg=spec)
