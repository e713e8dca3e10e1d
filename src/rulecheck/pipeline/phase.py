"""Phase base class and the outcomes a phase can return."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, ClassVar, TypeAlias

from rulecheck.blueprint.nodes import Blueprint, Node
from rulecheck.models.errors import Diagnostic, SourceLocation


class PhaseStatus(StrEnum):
    OK = "ok"
    JUMP = "jump"
    INSERT = "insert"
    ERROR = "error"


class Phase(ABC):
    """A single named step of a pipeline.

    Subclasses set ``name``; when they don't, the dotted qualified class
    name is used. Options from the pipeline entry arrive as keyword
    arguments and are kept on ``self.options``.
    """

    name: ClassVar[str] = ""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("name"):
            cls.name = f"{cls.__module__}.{cls.__qualname__}"

    def __init__(self, **options: Any) -> None:
        self.options = options

    @abstractmethod
    def run(self, blueprint: Blueprint) -> PhaseResult: ...

    @classmethod
    def error(
        cls,
        node: Node | None,
        message: str,
        extra_locations: Iterable[SourceLocation] = (),
    ) -> Diagnostic:
        """Build a diagnostic attributed to this phase, located at ``node``."""
        locations: list[SourceLocation] = []
        if node is not None and node.source_location is not None:
            locations.append(node.source_location)
        locations.extend(extra_locations)
        return Diagnostic(phase=cls.name, message=message, locations=tuple(locations))


PhaseSpec: TypeAlias = "type[Phase] | tuple[type[Phase], Mapping[str, Any]]"


def phase_class(spec: PhaseSpec) -> type[Phase]:
    if isinstance(spec, tuple):
        return spec[0]
    return spec


def phase_name(phase: PhaseSpec | str) -> str:
    """Name of a phase given as a class, a ``(class, options)`` entry, or a name."""
    if isinstance(phase, str):
        return phase
    return phase_class(phase).name


@dataclass(frozen=True)
class PhaseResult:
    """What a phase hands back to the pipeline runner."""

    status: PhaseStatus
    result: Blueprint | None = None
    destination: type[Phase] | None = None
    phases: Sequence[PhaseSpec] = ()
    reason: str | None = None

    @classmethod
    def ok(cls, result: Blueprint) -> PhaseResult:
        return cls(PhaseStatus.OK, result)

    @classmethod
    def jump(cls, result: Blueprint, destination: type[Phase]) -> PhaseResult:
        """Skip ahead to ``destination``; halts the run if it is not pending."""
        return cls(PhaseStatus.JUMP, result, destination=destination)

    @classmethod
    def insert(cls, result: Blueprint, phases: Sequence[PhaseSpec]) -> PhaseResult:
        """Run ``phases`` immediately after the current one."""
        return cls(PhaseStatus.INSERT, result, phases=tuple(phases))

    @classmethod
    def error(cls, reason: str) -> PhaseResult:
        return cls(PhaseStatus.ERROR, reason=reason)
