"""Pure folds over blueprint trees.

Each walk threads an accumulator through the tree and returns
``(node, acc)``. A node whose children were replaced is rebuilt with
``dataclasses.replace``; untouched subtrees are returned as-is.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import fields, replace
from typing import Any, TypeVar

from rulecheck.blueprint.nodes import Node

T = TypeVar("T")
N = TypeVar("N", bound=Node)

Visit = Callable[[Node, T], tuple[Node, T]]


def _is_node_tuple(value: Any) -> bool:
    return isinstance(value, tuple) and bool(value) and all(isinstance(v, Node) for v in value)


def children(node: Node) -> Iterator[Node]:
    """Yield the direct child nodes of ``node`` in field order."""
    for f in fields(node):  # type: ignore[arg-type]
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif _is_node_tuple(value):
            yield from value


def _walk_children(node: N, acc: T, walk: Callable[[Node, T], tuple[Node, T]]) -> tuple[N, T]:
    changes: dict[str, Any] = {}
    for f in fields(node):  # type: ignore[arg-type]
        value = getattr(node, f.name)
        if isinstance(value, Node):
            new_value, acc = walk(value, acc)
            if new_value is not value:
                changes[f.name] = new_value
        elif _is_node_tuple(value):
            items: list[Node] = []
            for item in value:
                new_item, acc = walk(item, acc)
                items.append(new_item)
            if any(new is not old for new, old in zip(items, value)):
                changes[f.name] = tuple(items)
    if changes:
        return replace(node, **changes), acc  # type: ignore[type-var]
    return node, acc


def prewalk(node: Node, acc: T, fun: Visit[T]) -> tuple[Node, T]:
    """Visit ``node`` before its descendants."""
    node, acc = fun(node, acc)
    return _walk_children(node, acc, lambda child, a: prewalk(child, a, fun))


def postwalk(node: Node, acc: T, fun: Visit[T]) -> tuple[Node, T]:
    """Visit ``node`` after its descendants."""
    node, acc = _walk_children(node, acc, lambda child, a: postwalk(child, a, fun))
    return fun(node, acc)


def update(node: N, fun: Callable[[Node], Node]) -> N:
    """Map ``fun`` over every node, parents first."""
    result, _ = prewalk(node, None, lambda n, acc: (fun(n), acc))
    return result  # type: ignore[return-value]


def reduce(node: Node, acc: T, fun: Callable[[Node, T], T]) -> T:
    """Fold ``fun`` over the tree in pre-order without rebuilding anything."""
    acc = fun(node, acc)
    for child in children(node):
        acc = reduce(child, acc, fun)
    return acc
