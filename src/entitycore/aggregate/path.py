"""Path compiler and copy-on-write walker for nested graphs.

A ``from_`` path such as ``["suppliers", EACH, "Supplier"]`` compiles to a
JoinPath: the steps leading to each parent node (``DescendKey("suppliers")``,
``EachElement()``) and the source field read from that parent
(``"Supplier"``). The walker visits every parent the steps address and
rebuilds only the maps and arrays along the way, leaving the input intact.

Accepted shapes:
    None or []            seed the root; no source field
    [field]               source read from the root
    [k, ..., field]       three or more steps, last one a field
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Final

from entitycore.errors import InvalidPath


@dataclass(frozen=True, slots=True)
class DescendKey:
    """Step into the value under ``name`` of a map."""

    name: str


@dataclass(frozen=True, slots=True)
class EachElement:
    """Repeat the remaining steps for every element of an array."""

    def __repr__(self) -> str:
        return "EACH"


EACH: Final = EachElement()

Step = DescendKey | EachElement

Visit = Callable[[Any], tuple[Any, bool]]
"""Rewrites a parent node; returns (new node, drop from enclosing array)."""


@dataclass(frozen=True, slots=True)
class JoinPath:
    """Compiled ``from_`` path."""

    steps: tuple[Step, ...] = ()
    source: str | None = None

    @property
    def is_seed(self) -> bool:
        return self.source is None

    @property
    def depth(self) -> int:
        """Length of the path as written: 0 to seed, 1 for a root field."""
        if self.source is None:
            return 0
        return len(self.steps) + 1


def _is_each(step: Any, each_marker: str) -> bool:
    return isinstance(step, EachElement) or (isinstance(step, str) and step == each_marker)


def compile_path(from_: Sequence[Any] | None, each_marker: str = ">") -> JoinPath:
    """Compile a ``from_`` path.

    Args:
        from_: Sequence of map keys and each-element markers.
        each_marker: String also accepted as the each-element marker.

    Returns:
        The compiled JoinPath.

    Raises:
        InvalidPath: On any shape other than those accepted.
    """
    if from_ is None:
        return JoinPath()
    if isinstance(from_, (str, bytes)) or not isinstance(from_, Sequence):
        raise InvalidPath("Illegal 'from' argument", arg=from_)

    elements = list(from_)
    if not elements:
        return JoinPath()
    if len(elements) == 2:
        raise InvalidPath("Illegal 'from' argument", arg=from_)

    *leading, source = elements
    if not isinstance(source, str) or _is_each(source, each_marker):
        raise InvalidPath("'from' must end with a field name", arg=from_)

    steps: list[Step] = []
    for index, element in enumerate(leading):
        if _is_each(element, each_marker):
            if index == 0:
                raise InvalidPath("'from' must start at a root field", arg=from_)
            if isinstance(steps[-1], EachElement):
                raise InvalidPath("Arrays cannot directly contain arrays", arg=from_)
            steps.append(EACH)
        elif isinstance(element, str):
            steps.append(DescendKey(element))
        else:
            raise InvalidPath("Illegal path step", arg=from_, step=element)
    return JoinPath(steps=tuple(steps), source=source)


def transform(node: Any, steps: tuple[Step, ...], visit: Visit) -> tuple[Any, bool]:
    """Apply ``visit`` at every node the steps address, copying on write.

    A missing map key addresses nothing. An array element whose visit asks
    to be dropped is removed from the nearest enclosing array.

    Returns:
        (new node, drop) where drop propagates up to an enclosing array.

    Raises:
        InvalidPath: If a step meets a node of the wrong kind.
    """
    if not steps:
        return visit(node)

    step, rest = steps[0], steps[1:]
    if isinstance(step, EachElement):
        if not isinstance(node, list):
            raise InvalidPath("Expected an array", step=step, node=type(node).__name__)
        kept = []
        for element in node:
            new_element, drop = transform(element, rest, visit)
            if not drop:
                kept.append(new_element)
        return kept, False

    if not isinstance(node, dict):
        raise InvalidPath("Expected a map", step=step.name, node=type(node).__name__)
    child = node.get(step.name)
    if child is None:
        return node, False
    new_child, drop = transform(child, rest, visit)
    updated = dict(node)
    updated[step.name] = new_child
    return updated, drop
