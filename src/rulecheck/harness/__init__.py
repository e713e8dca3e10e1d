"""Assertion harness for validation rules run through a phase pipeline."""

from rulecheck.blueprint.flatten import ErrorPair, error_pairs
from rulecheck.harness.assertions import (
    ConfigurationError,
    ErrorChecker,
    RuleHarness,
    assert_fails_rule,
    assert_fails_rule_with_schema,
    assert_invalid,
    assert_passes_rule,
    assert_passes_rule_with_schema,
    assert_valid,
    default_schema,
    reset_default_schema,
)
from rulecheck.harness.expectations import Expectation, FieldEquals, NodeCheck, Predicate, bad_value
from rulecheck.harness.runner import SCHEMA_MODE, pre_validation_pipeline, run

__all__ = [
    "SCHEMA_MODE",
    "ConfigurationError",
    "ErrorChecker",
    "ErrorPair",
    "Expectation",
    "FieldEquals",
    "NodeCheck",
    "Predicate",
    "RuleHarness",
    "assert_fails_rule",
    "assert_fails_rule_with_schema",
    "assert_invalid",
    "assert_passes_rule",
    "assert_passes_rule_with_schema",
    "assert_valid",
    "bad_value",
    "default_schema",
    "error_pairs",
    "pre_validation_pipeline",
    "reset_default_schema",
    "run",
]
