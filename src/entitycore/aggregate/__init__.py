"""Graph aggregation: join specifications, paths, merge strategies."""

from entitycore.aggregate.aggregator import aggregate, declared_key_name
from entitycore.aggregate.merge_strategies import (
    merge_by_primary_key,
    merge_replace,
    resolve_merge,
)
from entitycore.aggregate.models import (
    AggregateSpec,
    Graph,
    JoinContext,
    MergeFn,
    MergePolicy,
)
from entitycore.aggregate.path import (
    EACH,
    DescendKey,
    EachElement,
    JoinPath,
    compile_path,
    transform,
)

__all__ = [
    "aggregate",
    "declared_key_name",
    # Models
    "AggregateSpec",
    "JoinContext",
    "MergePolicy",
    "MergeFn",
    "Graph",
    # Paths
    "EACH",
    "DescendKey",
    "EachElement",
    "JoinPath",
    "compile_path",
    "transform",
    # Merge strategies
    "merge_replace",
    "merge_by_primary_key",
    "resolve_merge",
]
