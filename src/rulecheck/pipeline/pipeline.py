"""Ordered phase sequences and the runner that threads a blueprint through them."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from rulecheck.blueprint.nodes import Blueprint
from rulecheck.models.schema import Schema
from rulecheck.pipeline import document, validation
from rulecheck.pipeline import schema as schema_phases
from rulecheck.pipeline.phase import Phase, PhaseSpec, PhaseStatus, phase_class, phase_name

logger = logging.getLogger("rulecheck.pipeline")


class PipelineError(Exception):
    """Base class for pipeline construction and execution failures."""


class UnknownPhaseError(PipelineError):
    """Raised when a positional operation names a phase the pipeline lacks."""

    def __init__(self, phase: str, available: list[str]) -> None:
        self.phase = phase
        self.available = available
        super().__init__(
            f"Phase '{phase}' is not in the pipeline. Available: {', '.join(available)}"
        )


class PhaseFailedError(PipelineError):
    """Raised when a phase returns an error outcome."""

    def __init__(self, phase: str, reason: str | None) -> None:
        self.phase = phase
        self.reason = reason
        super().__init__(f"Phase '{phase}' failed: {reason}")


class DocumentOptions(BaseModel):
    """Options accepted by :meth:`Pipeline.for_document`."""

    operation_name: str | None = None
    jump_phases: bool = True
    filename: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Outcome of :meth:`Pipeline.run`.

    ``status`` is ``ok`` when every phase ran and ``jump`` when a phase
    jumped to a destination that was no longer pending. ``pipeline`` holds
    the phases left unexecuted.
    """

    status: PhaseStatus
    result: Any
    pipeline: Pipeline


class Pipeline:
    """An immutable, ordered sequence of phase specs.

    A spec is either a phase class or a ``(phase class, options)`` tuple.
    Positional operations look phases up by name.
    """

    def __init__(self, phases: Iterable[PhaseSpec] = ()) -> None:
        self._phases: tuple[PhaseSpec, ...] = tuple(phases)

    # -- standard pipelines -------------------------------------------------

    @classmethod
    def for_document(
        cls, schema: Schema, options: Mapping[str, Any] | DocumentOptions | None = None
    ) -> Pipeline:
        """Parse, bind to ``schema``, validate and render a selection document."""
        if isinstance(options, DocumentOptions):
            opts = options
        else:
            opts = DocumentOptions.model_validate(dict(options or {}))
        return cls(
            [
                (document.Parse, {"filename": opts.filename}),
                (document.CurrentOperation, {"operation_name": opts.operation_name}),
                (document.AttachSchema, {"schema": schema}),
                validation.FieldsOnCorrectType,
                validation.KnownArgumentNames,
                validation.ProvidedNonNullArguments,
                (validation.ValidationResult, {"jump_phases": opts.jump_phases}),
                document.DocumentResult,
            ]
        )

    @classmethod
    def for_schema(cls, prototype: Schema | None = None, filename: str | None = None) -> Pipeline:
        """Parse a YAML schema source, build it over ``prototype`` and validate it."""
        return cls(
            [
                (schema_phases.SchemaParse, {"filename": filename}),
                (schema_phases.BuildSchema, {"prototype": prototype}),
                schema_phases.TypeReferencesExist,
                schema_phases.ObjectTypesHaveFields,
                schema_phases.QueryTypeExists,
                schema_phases.SchemaResult,
            ]
        )

    # -- sequence protocol --------------------------------------------------

    @property
    def phases(self) -> tuple[PhaseSpec, ...]:
        return self._phases

    @property
    def names(self) -> list[str]:
        return [phase_name(p) for p in self._phases]

    def __iter__(self) -> Iterator[PhaseSpec]:
        return iter(self._phases)

    def __len__(self) -> int:
        return len(self._phases)

    def __contains__(self, phase: object) -> bool:
        return self._find(phase_name(phase)) is not None  # type: ignore[arg-type]

    def __add__(self, other: Pipeline | Iterable[PhaseSpec]) -> Pipeline:
        return Pipeline(self._phases + tuple(other))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Pipeline) and self._phases == other._phases

    def __repr__(self) -> str:
        return f"Pipeline({self.names!r})"

    # -- positional operations ---------------------------------------------

    def _find(self, name: str) -> int | None:
        for i, spec in enumerate(self._phases):
            if phase_name(spec) == name:
                return i
        return None

    def index(self, phase: PhaseSpec | str) -> int:
        name = phase_name(phase)
        idx = self._find(name)
        if idx is None:
            raise UnknownPhaseError(name, available=self.names)
        return idx

    def upto(self, phase: PhaseSpec | str) -> Pipeline:
        """Phases up to and including ``phase``."""
        return Pipeline(self._phases[: self.index(phase) + 1])

    def before(self, phase: PhaseSpec | str) -> Pipeline:
        """Phases up to but excluding ``phase``."""
        return Pipeline(self._phases[: self.index(phase)])

    def from_phase(self, phase: PhaseSpec | str) -> Pipeline:
        """``phase`` and everything after it."""
        return Pipeline(self._phases[self.index(phase) :])

    def without(self, phase: PhaseSpec | str) -> Pipeline:
        idx = self.index(phase)
        return Pipeline(self._phases[:idx] + self._phases[idx + 1 :])

    def insert_before(self, phase: PhaseSpec | str, additional: Iterable[PhaseSpec]) -> Pipeline:
        idx = self.index(phase)
        return Pipeline(self._phases[:idx] + tuple(additional) + self._phases[idx:])

    def insert_after(self, phase: PhaseSpec | str, additional: Iterable[PhaseSpec]) -> Pipeline:
        idx = self.index(phase) + 1
        return Pipeline(self._phases[:idx] + tuple(additional) + self._phases[idx:])

    def reject(self, pattern: str | re.Pattern[str]) -> Pipeline:
        """Drop every phase whose name matches ``pattern`` (``re.search``)."""
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return Pipeline(p for p in self._phases if not regex.search(phase_name(p)))

    # -- execution ------------------------------------------------------------

    def run(self, input: Any) -> RunResult:
        """Run every phase in order, honouring jump and insert outcomes.

        Raises :class:`PhaseFailedError` when a phase reports an error.
        """
        pending = list(self._phases)
        result = input
        while pending:
            spec = pending.pop(0)
            cls = phase_class(spec)
            options = dict(spec[1]) if isinstance(spec, tuple) else {}
            logger.debug("Running phase %s", cls.name)
            outcome = cls(**options).run(result)

            if outcome.status is PhaseStatus.ERROR:
                raise PhaseFailedError(cls.name, outcome.reason)
            result = outcome.result

            if outcome.status is PhaseStatus.INSERT:
                pending = list(outcome.phases) + pending
            elif outcome.status is PhaseStatus.JUMP:
                target = _destination_name(outcome.destination)
                idx = next((i for i, p in enumerate(pending) if phase_name(p) == target), None)
                if idx is None:
                    logger.info("Phase %s jumped out of the pipeline (to %s)", cls.name, target)
                    return RunResult(PhaseStatus.JUMP, result, Pipeline(pending))
                logger.info("Phase %s jumped to %s", cls.name, target)
                pending = pending[idx:]

        return RunResult(PhaseStatus.OK, result, Pipeline())


def _destination_name(destination: type[Phase] | None) -> str:
    return destination.name if destination is not None else ""


def run_document(
    schema: Schema, source: str, options: Mapping[str, Any] | None = None
) -> Blueprint:
    """Run the full document pipeline and return the resulting blueprint."""
    return Pipeline.for_document(schema, options).run(source).result
