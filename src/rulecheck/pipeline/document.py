"""Document phases: parse, operation selection, schema binding and result rendering."""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from rulecheck.blueprint.flatten import error_pairs
from rulecheck.blueprint.nodes import Blueprint, Field, Operation
from rulecheck.language.errors import DocumentSyntaxError
from rulecheck.language.parser import parse
from rulecheck.models.errors import Diagnostic
from rulecheck.models.schema import Schema, TypeDef
from rulecheck.pipeline.phase import Phase, PhaseResult


def render_errors(blueprint: Blueprint) -> list[dict[str, Any]]:
    """Render every error in the tree in the ``{message, locations}`` wire shape."""
    return [_render(pair.error) for pair in error_pairs(blueprint)]


def _render(error: Diagnostic) -> dict[str, Any]:
    return {
        "message": error.message,
        "locations": [loc.model_dump(include={"line", "column"}) for loc in error.locations],
    }


class Parse(Phase):
    """Turn document source into a blueprint.

    A syntax error is recorded on an otherwise empty blueprint and the run
    jumps straight to :class:`DocumentResult`.
    """

    name = "Document.Parse"

    def run(self, blueprint: Blueprint | str) -> PhaseResult:
        if isinstance(blueprint, Blueprint):
            return PhaseResult.ok(blueprint)
        try:
            return PhaseResult.ok(parse(blueprint, self.options.get("filename")))
        except DocumentSyntaxError as exc:
            locations = (exc.location,) if exc.location is not None else ()
            error = Diagnostic(phase=self.name, message=exc.message, locations=locations)
            return PhaseResult.jump(Blueprint(input=blueprint, errors=(error,)), DocumentResult)


class CurrentOperation(Phase):
    """Mark the operation to run, chosen by ``operation_name`` when there are several."""

    name = "Document.CurrentOperation"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        operation_name: str | None = self.options.get("operation_name")
        operations = blueprint.operations
        if operation_name is None:
            if len(operations) == 1:
                current = replace(operations[0], current=True)
                return PhaseResult.ok(replace(blueprint, operations=(current,)))
            message = "Must provide a valid operation name if query contains multiple operations."
            return PhaseResult.ok(blueprint.put_error(self.error(None, message)))

        matched = False
        updated: list[Operation] = []
        for operation in operations:
            if operation.name == operation_name and not matched:
                matched = True
                operation = replace(operation, current=True)
            updated.append(operation)
        if not matched:
            return PhaseResult.ok(
                blueprint.put_error(
                    self.error(None, f'Must provide an operation named "{operation_name}".')
                )
            )
        return PhaseResult.ok(replace(blueprint, operations=tuple(updated)))


class AttachSchema(Phase):
    """Bind operations, fields and arguments to their schema definitions."""

    name = "Document.Schema"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        schema: Schema = self.options["schema"]
        operations = tuple(self._bind_operation(op, schema) for op in blueprint.operations)
        return PhaseResult.ok(replace(blueprint, operations=operations, schema=schema))

    def _bind_operation(self, operation: Operation, schema: Schema) -> Operation:
        root = schema.root_type(operation.type)
        selections = tuple(self._bind_field(f, root, schema) for f in operation.selections)
        return replace(operation, schema_node=root, selections=selections)

    def _bind_field(self, field: Field, parent: TypeDef | None, schema: Schema) -> Field:
        if parent is None:
            return field
        field_def = parent.fields.get(field.name)
        if field_def is None:
            return replace(field, parent_type=parent.name)
        arguments = tuple(
            replace(arg, schema_node=field_def.arguments.get(arg.name)) for arg in field.arguments
        )
        child_type = schema.lookup_type(field_def.type)
        selections = tuple(self._bind_field(f, child_type, schema) for f in field.selections)
        return replace(
            field,
            parent_type=parent.name,
            schema_node=field_def,
            arguments=arguments,
            selections=selections,
        )


class DocumentResult(Phase):
    """Render the errors gathered so far onto ``blueprint.result``."""

    name = "Document.Result"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        errors = render_errors(blueprint)
        return PhaseResult.ok(replace(blueprint, result={"errors": errors} if errors else {}))
