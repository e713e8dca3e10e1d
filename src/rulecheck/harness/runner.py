"""Run a document through the pre-validation pipeline plus the rules under test."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Final

from rulecheck.models.schema import Schema
from rulecheck.pipeline.phase import PhaseSpec
from rulecheck.pipeline.pipeline import Pipeline, RunResult
from rulecheck.pipeline.schema import BuildSchema
from rulecheck.pipeline.validation import ValidationResult

SCHEMA_MODE: Final = "schema"

Options = Mapping[str, Any] | str | None


def pre_validation_pipeline(schema: Schema, options: Options) -> Pipeline:
    """The standard phases that must run before the rules under test.

    In schema mode that is everything up to and including the schema build.
    In document mode it is everything up to the validation result, with all
    ``Validation`` phases removed so only the rules under test report.
    """
    if isinstance(options, str):
        if options != SCHEMA_MODE:
            raise TypeError(
                f"options must be a mapping, None or {SCHEMA_MODE!r}, got {options!r}"
            )
        return Pipeline.for_schema(schema).upto(BuildSchema)
    return (
        Pipeline.for_document(schema, options)
        .upto(ValidationResult)
        .reject("Validation")
    )


def run(
    schema: Schema, rules: Sequence[PhaseSpec], document: str, options: Options = None
) -> RunResult:
    pipeline = pre_validation_pipeline(schema, options) + rules
    return pipeline.run(document)
