"""Flatten a blueprint into the (node, error) pairs it carries."""

from __future__ import annotations

from typing import NamedTuple

from rulecheck.blueprint.nodes import Node
from rulecheck.blueprint.walker import reduce
from rulecheck.models.errors import Diagnostic


class ErrorPair(NamedTuple):
    """A diagnostic together with the node it is attached to."""

    node: Node
    error: Diagnostic


def error_pairs(tree: Node) -> list[ErrorPair]:
    """Return every error in the tree, in pre-order, paired with its node.

    Nodes without errors contribute nothing but are still descended into.
    """

    def collect(node: Node, acc: tuple[ErrorPair, ...]) -> tuple[ErrorPair, ...]:
        if not node.errors:
            return acc
        return acc + tuple(ErrorPair(node, error) for error in node.errors)

    return list(reduce(tree, (), collect))


def error_messages(tree: Node) -> list[str]:
    return [pair.error.message for pair in error_pairs(tree)]
