"""Expectations: assertions that a specific diagnostic was produced.

An :class:`Expectation` is built with :func:`bad_value` and called with the
flattened ``(node, error)`` pairs of a pipeline run. It matches on node
kind, producing phase, exact message, an optional node check and an
optional line constraint.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from rulecheck.blueprint.flatten import ErrorPair
from rulecheck.blueprint.nodes import Node
from rulecheck.pipeline.phase import PhaseSpec, phase_name


class NodeCheck(ABC):
    """Extra condition a matching node must satisfy."""

    @abstractmethod
    def __call__(self, node: Node) -> bool: ...


@dataclass(frozen=True)
class FieldEquals(NodeCheck):
    """Every named attribute must equal its expected value; missing attributes read as None."""

    fields: Mapping[str, Any] = field(default_factory=dict)

    def __call__(self, node: Node) -> bool:
        return all(getattr(node, key, None) == value for key, value in self.fields.items())


@dataclass(frozen=True)
class Predicate(NodeCheck):
    fn: Callable[[Node], bool]

    def __call__(self, node: Node) -> bool:
        return bool(self.fn(node))


@dataclass(frozen=True)
class Expectation:
    """An expected diagnostic from ``rule`` on a ``node_kind`` node."""

    rule: str
    node_kind: type[Node]
    message: str
    lines: tuple[int, ...] | None = None
    check: NodeCheck | None = None

    @property
    def location_text(self) -> str:
        if self.lines is None:
            return "(at any line number)"
        if len(self.lines) == 1:
            return f"(from line #{self.lines[0]})"
        return "(from lines #" + ", #".join(str(n) for n in self.lines) + ")"

    @property
    def banner(self) -> str:
        return (
            f"\nExpected {self.node_kind.__name__} node with error {self.location_text}:"
            f"\n---\n{self.message}\n---"
        )

    def matches(self, pair: ErrorPair) -> bool:
        node, error = pair
        if type(node) is not self.node_kind:
            return False
        if error.phase != self.rule or error.message != self.message:
            return False
        if self.check is not None and not self.check(node):
            return False
        if self.lines is None:
            return True
        return all(error.has_line(line) for line in self.lines)

    def __call__(self, pairs: Sequence[ErrorPair]) -> None:
        if not pairs:
            raise AssertionError(f"No errors were found.\n{self.banner}")
        if not any(self.matches(pair) for pair in pairs):
            found = "\n  ".join(pair.error.message for pair in pairs)
            raise AssertionError(
                f"Could not find error.\n{self.banner}\n\n"
                f"  Did find these errors...\n  ---\n  {found}\n  ---"
            )


def bad_value(
    rule: PhaseSpec | str,
    node_kind: type[Node],
    message: str,
    line: int | Sequence[int] | None = None,
    check: NodeCheck | None = None,
) -> Expectation:
    """Expect ``rule`` to have reported ``message`` on a ``node_kind`` node.

    ``line`` may be a single line, a non-empty sequence of lines that must
    all be present among the diagnostic's locations, or None to ignore
    locations entirely.
    """
    lines: tuple[int, ...] | None
    if line is None:
        lines = None
    elif isinstance(line, int):
        lines = (line,)
    else:
        lines = tuple(line)
        if not lines:
            raise ValueError("line must be an int, a non-empty sequence of ints, or None")
    return Expectation(
        rule=phase_name(rule), node_kind=node_kind, message=message, lines=lines, check=check
    )
