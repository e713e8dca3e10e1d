"""pytest plugin: fixtures for rule tests.

Registered through the ``pytest11`` entry point, so installing rulecheck
makes ``default_schema`` and ``rule_harness`` available to every suite.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

pytest.register_assert_rewrite("rulecheck.harness")

from rulecheck.harness.assertions import RuleHarness  # noqa: E402
from rulecheck.harness.assertions import default_schema as _default_schema  # noqa: E402
from rulecheck.models.schema import Schema  # noqa: E402
from rulecheck.pipeline.phase import PhaseSpec  # noqa: E402


@pytest.fixture
def default_schema() -> Schema:
    """The schema configured with ``RULECHECK_DEFAULT_SCHEMA``."""
    return _default_schema()


@pytest.fixture
def rule_harness() -> Callable[..., RuleHarness]:
    """Factory binding a rule (and optionally a schema) into a :class:`RuleHarness`."""

    def _make(rule: PhaseSpec, schema: Schema | None = None) -> RuleHarness:
        return RuleHarness(rule, schema)

    return _make
