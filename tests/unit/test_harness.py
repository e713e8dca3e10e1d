"""Tests for the rule assertion harness."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from rulecheck.blueprint.nodes import Argument, Blueprint, Field, Node, TypeDefinition
from rulecheck.blueprint.walker import update
from rulecheck.harness import (
    SCHEMA_MODE,
    ConfigurationError,
    ErrorPair,
    FieldEquals,
    RuleHarness,
    assert_fails_rule,
    assert_fails_rule_with_schema,
    assert_invalid,
    assert_passes_rule,
    assert_passes_rule_with_schema,
    assert_valid,
    bad_value,
    default_schema,
    pre_validation_pipeline,
    reset_default_schema,
    run,
)
from rulecheck.models.schema import Schema
from rulecheck.pipeline.loading import load_schema
from rulecheck.pipeline.phase import Phase, PhaseResult, PhaseStatus
from rulecheck.pipeline.schema import ObjectTypesHaveFields
from rulecheck.pipeline.validation import (
    FieldsOnCorrectType,
    KnownArgumentNames,
    ProvidedNonNullArguments,
)


class MyRule(Phase):
    """Reports every field literally named ``field``."""

    name = "Test.MyRule"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        return PhaseResult.ok(update(blueprint, self._handle_node))

    def _handle_node(self, node: Node) -> Node:
        if isinstance(node, Field) and node.name == "field":
            return node.put_error(self.error(node, "Bad field."))
        return node


class CopyCat(MyRule):
    """Same message as MyRule, different phase."""

    name = "Test.CopyCat"


class TestRun:
    def test_pre_validation_document_phases(self, schema: Schema) -> None:
        assert pre_validation_pipeline(schema, None).names == [
            "Document.Parse",
            "Document.CurrentOperation",
            "Document.Schema",
        ]

    def test_pre_validation_schema_phases(self, schema: Schema) -> None:
        assert pre_validation_pipeline(schema, SCHEMA_MODE).names == ["Schema.Parse", "Schema"]

    def test_rules_run_after_standard_phases(self, schema: Schema) -> None:
        result = run(schema, [MyRule], "{ field }")
        assert result.status is PhaseStatus.OK
        (field,) = result.result.operations[0].selections
        assert field.parent_type == "Query"
        assert [e.message for e in field.errors] == ["Bad field."]

    def test_syntax_error_still_yields_result(self, schema: Schema) -> None:
        result = run(schema, [MyRule], "{ field")
        assert result.status is PhaseStatus.JUMP
        assert result.result.errors[0].phase == "Document.Parse"

    def test_unknown_mode_string_is_rejected(self, schema: Schema) -> None:
        with pytest.raises(TypeError, match="options must be a mapping, None or 'schema'"):
            run(schema, [MyRule], "{ field }", "document")


class TestAssertValid:
    def test_passes(self, schema: Schema) -> None:
        assert_valid(schema, [MyRule], "{ name }")

    def test_fails_with_listing(self, schema: Schema) -> None:
        with pytest.raises(AssertionError) as exc_info:
            assert_valid(schema, [MyRule], "{\n  field\n  name\n}")
        assert "Expected no errors, found:\n  ---\n  Bad field.\n  ---" in str(exc_info.value)

    def test_earlier_phase_errors_count(self, schema: Schema) -> None:
        with pytest.raises(AssertionError, match="Must provide a valid operation name"):
            assert_valid(schema, [MyRule], "query A { name }\nquery B { name }")

    def test_options_are_forwarded(self, schema: Schema) -> None:
        assert_valid(
            schema, [MyRule], "query A { name }\nquery B { name }", {"operation_name": "A"}
        )


class TestAssertInvalid:
    def test_single_expectation(self, schema: Schema) -> None:
        expectation = bad_value(MyRule, Field, "Bad field.", 1)
        assert_invalid(schema, [MyRule], "{ field }", None, expectation)

    def test_every_expectation_must_hold(self, schema: Schema) -> None:
        document = "{\n  field\n  dog(id: 1) {\n    field\n  }\n}"
        expectations = [
            bad_value(MyRule, Field, "Bad field.", 2),
            bad_value(MyRule, Field, "Bad field.", 4),
        ]
        assert_invalid(schema, [MyRule], document, None, expectations)
        with pytest.raises(AssertionError, match="Could not find error"):
            assert_invalid(
                schema,
                [MyRule],
                document,
                None,
                expectations + [bad_value(MyRule, Field, "Bad field.", 3)],
            )

    def test_plain_function_checker(self, schema: Schema) -> None:
        seen: list[str] = []

        def checker(pairs: Sequence[ErrorPair]) -> bool:
            seen.extend(pair.error.message for pair in pairs)
            return True

        assert_invalid(schema, [FieldsOnCorrectType], "{ meow }", None, checker)
        assert seen == ['Cannot query field "meow" on type "Query".']

    def test_checker_returning_false_fails(self, schema: Schema) -> None:
        with pytest.raises(AssertionError, match="rejected the errors found"):
            assert_invalid(schema, [MyRule], "{ field }", None, lambda pairs: len(pairs) == 2)

    def test_mixed_checkers(self, schema: Schema) -> None:
        checkers = [bad_value(MyRule, Field, "Bad field.", 1), lambda pairs: len(pairs) == 1]
        assert_invalid(schema, [MyRule], "{ field }", None, checkers)

    def test_no_errors(self, schema: Schema) -> None:
        with pytest.raises(AssertionError, match="No errors were found"):
            assert_invalid(schema, [MyRule], "{ name }", None, bad_value(MyRule, Field, "m"))

    def test_phase_identity_is_checked(self, schema: Schema) -> None:
        expectation = bad_value(MyRule, Field, "Bad field.", 1)
        with pytest.raises(AssertionError, match="Could not find error"):
            assert_invalid(schema, [CopyCat], "{ field }", None, expectation)

    def test_node_check(self, schema: Schema) -> None:
        expectation = bad_value(
            ProvidedNonNullArguments,
            Field,
            'Field "dog" argument "id" of type "ID!" is required but not provided.',
            1,
            FieldEquals({"name": "dog", "alias": "pet"}),
        )
        document = "{ pet: dog { name } }"
        assert_invalid(schema, [ProvidedNonNullArguments], document, None, expectation)

    def test_argument_nodes(self, schema: Schema) -> None:
        assert_invalid(
            schema,
            [KnownArgumentNames],
            "{\n  dog(id: 1,\n      size: 2) { name }\n}",
            None,
            bad_value(
                KnownArgumentNames,
                Argument,
                'Unknown argument "size" on field "dog" of type "Query".',
                3,
            ),
        )


class TestDefaultSchemaHelpers:
    def test_default_schema_from_settings(self) -> None:
        loaded = default_schema()
        assert loaded.field("Dog", "barkVolume") is not None
        assert default_schema() is loaded

    def test_missing_configuration(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RULECHECK_DEFAULT_SCHEMA", raising=False)
        with pytest.raises(ConfigurationError, match="RULECHECK_DEFAULT_SCHEMA"):
            default_schema()

    def test_reset_reloads(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        path = tmp_path / "schema.yaml"
        path.write_text("types:\n  Query:\n    fields:\n      a: Int\n", encoding="utf-8")
        monkeypatch.setenv("RULECHECK_DEFAULT_SCHEMA", str(path))
        assert default_schema().field("Query", "a") is not None
        path.write_text("types:\n  Query:\n    fields:\n      b: Int\n", encoding="utf-8")
        assert default_schema().field("Query", "b") is None
        reset_default_schema()
        assert default_schema().field("Query", "b") is not None

    def test_passes_rule(self) -> None:
        assert_passes_rule(FieldsOnCorrectType, "{ dog(id: 1) { name } }")

    def test_fails_rule(self) -> None:
        assert_fails_rule(
            MyRule,
            "{ field }",
            None,
            bad_value(MyRule, Field, "Bad field.", 1),
        )

    def test_fails_rule_with_unknown_field(self) -> None:
        assert_fails_rule(
            FieldsOnCorrectType,
            "{\n  dog(id: 1) {\n    meow\n  }\n}",
            None,
            [bad_value(FieldsOnCorrectType, Field, 'Cannot query field "meow" on type "Dog".', 3)],
        )

    def test_other_validation_rules_are_excluded(self) -> None:
        # The missing argument would be reported by ProvidedNonNullArguments.
        assert_passes_rule(FieldsOnCorrectType, "{ dog { name } }")


class TestWithSchema:
    SCHEMA = "types:\n  Query:\n    fields:\n      field: String\n"

    def test_passes_with_schema(self) -> None:
        assert_passes_rule_with_schema(load_schema(self.SCHEMA), FieldsOnCorrectType, "{ field }")

    def test_fails_with_schema(self) -> None:
        assert_fails_rule_with_schema(
            load_schema(self.SCHEMA),
            FieldsOnCorrectType,
            "{ dog }",
            None,
            bad_value(FieldsOnCorrectType, Field, 'Cannot query field "dog" on type "Query".', 1),
        )


class TestSchemaMode:
    def test_fails_on_schema_source(self, schema: Schema) -> None:
        source = "types:\n  Query:\n    fields:\n      a: Int\n  Empty: {}\n"
        assert_fails_rule_with_schema(
            schema,
            ObjectTypesHaveFields,
            source,
            SCHEMA_MODE,
            bad_value(
                ObjectTypesHaveFields,
                TypeDefinition,
                'Object type "Empty" must define one or more fields.',
                5,
            ),
        )

    def test_passes_on_schema_source(self, schema: Schema) -> None:
        source = "types:\n  Extra:\n    fields:\n      a: Int\n"
        assert_passes_rule_with_schema(schema, ObjectTypesHaveFields, source, SCHEMA_MODE)


class TestRuleHarness:
    def test_bound_rule(self) -> None:
        harness = RuleHarness(MyRule)
        harness.assert_passes("{ name }")
        harness.assert_fails("{ field }", harness.bad_value(Field, "Bad field.", 1))

    def test_bound_schema(self) -> None:
        harness = RuleHarness(FieldsOnCorrectType, load_schema(TestWithSchema.SCHEMA))
        harness.assert_passes("{ field }")
        harness.assert_fails(
            "{ name }",
            [harness.bad_value(Field, 'Cannot query field "name" on type "Query".')],
        )

    def test_schema_defaults_to_configured(self) -> None:
        assert RuleHarness(MyRule).schema is default_schema()

    def test_failure_reports_rule(self) -> None:
        harness = RuleHarness(MyRule)
        with pytest.raises(AssertionError) as exc_info:
            harness.assert_fails("{ field }", harness.bad_value(Field, "Other.", 1))
        assert "Did find these errors" in str(exc_info.value)
        assert "Bad field." in str(exc_info.value)


class UnknownField(Phase):
    name = "Test.UnknownField"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        return PhaseResult.ok(
            update(
                blueprint,
                lambda node: node.put_error(self.error(node, "Unknown field"))
                if isinstance(node, Field)
                else node,
            )
        )


class TestUnknownFieldScenario:
    def test_matches_on_line_one(self) -> None:
        assert_fails_rule(
            UnknownField, "{ field }", None, bad_value(UnknownField, Field, "Unknown field", 1)
        )

    def test_wrong_line_reports_found_message(self) -> None:
        with pytest.raises(AssertionError) as exc_info:
            assert_fails_rule(
                UnknownField, "{ field }", None, bad_value(UnknownField, Field, "Unknown field", 2)
            )
        message = str(exc_info.value)
        assert "Could not find error." in message
        assert "(from line #2)" in message
        assert "Did find these errors...\n  ---\n  Unknown field\n  ---" in message
