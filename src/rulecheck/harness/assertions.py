"""Assertion entry points for testing validation rules."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

from rulecheck.blueprint.flatten import ErrorPair, error_pairs
from rulecheck.blueprint.nodes import Node
from rulecheck.harness.expectations import Expectation, NodeCheck, bad_value
from rulecheck.harness.runner import Options, run
from rulecheck.models.schema import Schema
from rulecheck.pipeline.loading import load_schema
from rulecheck.pipeline.phase import PhaseSpec
from rulecheck.settings import Settings

# A checker fails by raising AssertionError or by returning False.
ErrorChecker = Callable[[Sequence[ErrorPair]], object]

Expectations = ErrorChecker | Sequence[ErrorChecker]


class ConfigurationError(Exception):
    """Raised when the harness is used without required configuration."""


_default_schemas: dict[Path, Schema] = {}


def default_schema() -> Schema:
    """The schema named by ``RULECHECK_DEFAULT_SCHEMA``, loaded once per path."""
    path = Settings().default_schema
    if path is None:
        raise ConfigurationError(
            "No default schema configured; set RULECHECK_DEFAULT_SCHEMA to a YAML schema file"
        )
    path = path.resolve()
    if path not in _default_schemas:
        _default_schemas[path] = load_schema(path)
    return _default_schemas[path]


def reset_default_schema() -> None:
    """Forget loaded default schemas (for tests that rewrite the schema file)."""
    _default_schemas.clear()


def _pairs(
    schema: Schema, rules: Sequence[PhaseSpec], document: str, options: Options
) -> list[ErrorPair]:
    # Only the result is inspected; a jump out of the pipeline still carries it.
    return error_pairs(run(schema, rules, document, options).result)


def assert_valid(
    schema: Schema, rules: Sequence[PhaseSpec], document: str, options: Options = None
) -> None:
    formatted_errors = [pair.error.message for pair in _pairs(schema, rules, document, options)]
    if formatted_errors:
        raise AssertionError(
            "Expected no errors, found:\n  ---\n  " + "\n  ".join(formatted_errors) + "\n  ---"
        )


def assert_invalid(
    schema: Schema,
    rules: Sequence[PhaseSpec],
    document: str,
    options: Options,
    expectations: Expectations,
) -> None:
    pairs = _pairs(schema, rules, document, options)
    checkers = [expectations] if callable(expectations) else list(expectations)
    for checker in checkers:
        if checker(pairs) is False:
            raise AssertionError(f"Error checker {checker!r} rejected the errors found")


def assert_passes_rule(rule: PhaseSpec, document: str, options: Options = None) -> None:
    assert_valid(default_schema(), [rule], document, options)


def assert_fails_rule(
    rule: PhaseSpec, document: str, options: Options, expectations: Expectations
) -> None:
    assert_invalid(default_schema(), [rule], document, options, expectations)


def assert_passes_rule_with_schema(
    schema: Schema, rule: PhaseSpec, document: str, options: Options = None
) -> None:
    assert_valid(schema, [rule], document, options)


def assert_fails_rule_with_schema(
    schema: Schema, rule: PhaseSpec, document: str, options: Options, expectations: Expectations
) -> None:
    assert_invalid(schema, [rule], document, options, expectations)


class RuleHarness:
    """Binds one rule (and optionally a schema) for a group of tests.

    Usage::

        harness = RuleHarness(FieldsOnCorrectType)
        harness.assert_fails(
            "{ unknown }",
            harness.bad_value(Field, 'Cannot query field "unknown" on type "Query".', 1),
        )
    """

    def __init__(self, rule: PhaseSpec, schema: Schema | None = None) -> None:
        self.rule = rule
        self._schema = schema

    @property
    def schema(self) -> Schema:
        return self._schema if self._schema is not None else default_schema()

    def bad_value(
        self,
        node_kind: type[Node],
        message: str,
        line: int | Sequence[int] | None = None,
        check: NodeCheck | None = None,
    ) -> Expectation:
        return bad_value(self.rule, node_kind, message, line, check)

    def assert_passes(self, document: str, options: Options = None) -> None:
        assert_valid(self.schema, [self.rule], document, options)

    def assert_fails(
        self, document: str, expectations: Expectations, options: Options = None
    ) -> None:
        assert_invalid(self.schema, [self.rule], document, options, expectations)
