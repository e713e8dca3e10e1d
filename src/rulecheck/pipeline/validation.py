"""Document validation rules.

Each rule is a phase that walks the blueprint and attaches diagnostics to
the offending nodes. Rules rely on the schema bindings made by
``Document.Schema`` and skip anything that could not be bound.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from rulecheck.blueprint.flatten import error_pairs
from rulecheck.blueprint.nodes import Blueprint, Field, Node
from rulecheck.blueprint.walker import update
from rulecheck.pipeline.document import DocumentResult
from rulecheck.pipeline.phase import Phase, PhaseResult

logger = logging.getLogger("rulecheck.pipeline.validation")


class FieldsOnCorrectType(Phase):
    """Every selected field must exist on its parent type."""

    name = "Document.Validation.FieldsOnCorrectType"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        return PhaseResult.ok(update(blueprint, self._handle_node))

    def _handle_node(self, node: Node) -> Node:
        if isinstance(node, Field) and node.parent_type is not None and node.schema_node is None:
            return node.put_error(
                self.error(node, f'Cannot query field "{node.name}" on type "{node.parent_type}".')
            )
        return node


class KnownArgumentNames(Phase):
    """Arguments given to a field must be declared by that field."""

    name = "Document.Validation.KnownArgumentNames"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        return PhaseResult.ok(update(blueprint, self._handle_node))

    def _handle_node(self, node: Node) -> Node:
        if not isinstance(node, Field) or node.schema_node is None:
            return node
        arguments = []
        for argument in node.arguments:
            if argument.schema_node is None:
                argument = argument.put_error(
                    self.error(
                        argument,
                        f'Unknown argument "{argument.name}" on field "{node.name}" '
                        f'of type "{node.parent_type}".',
                    )
                )
            arguments.append(argument)
        if all(new is old for new, old in zip(arguments, node.arguments)):
            return node
        return replace(node, arguments=tuple(arguments))


class ProvidedNonNullArguments(Phase):
    """Arguments declared non-null must be provided."""

    name = "Document.Validation.ProvidedNonNullArguments"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        return PhaseResult.ok(update(blueprint, self._handle_node))

    def _handle_node(self, node: Node) -> Node:
        if not isinstance(node, Field) or node.schema_node is None:
            return node
        provided = {arg.name for arg in node.arguments}
        for required in node.schema_node.required_arguments:
            if required.name not in provided:
                node = node.put_error(
                    self.error(
                        node,
                        f'Field "{node.name}" argument "{required.name}" of type '
                        f'"{required.type}" is required but not provided.',
                    )
                )
        return node


class ValidationResult(Phase):
    """Stop a document with validation errors from going further.

    With ``jump_phases`` (the default) an invalid document jumps to
    ``Document.Result``.
    """

    name = "Document.Validation.Result"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        errors = error_pairs(blueprint)
        if errors:
            logger.info("Document failed validation with %d error(s)", len(errors))
            if self.options.get("jump_phases", True):
                return PhaseResult.jump(blueprint, DocumentResult)
        return PhaseResult.ok(blueprint)
