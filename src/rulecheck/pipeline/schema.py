"""Schema phases: read a YAML schema source, build a :class:`Schema`, validate it.

Source layout::

    schema:                 # optional, defaults to query: Query
      query: Query
      mutation: Mutation
    types:
      Query:
        fields:
          dog:
            type: Dog
            arguments:
              name: String!
      Dog:
        fields:
          name: String
      Color:
        kind: enum
        values: [RED, GREEN]
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from ruamel.yaml.error import YAMLError

from rulecheck.blueprint.nodes import (
    Blueprint,
    FieldDefinition,
    InputValueDefinition,
    Node,
    SchemaDeclaration,
    TypeDefinition,
)
from rulecheck.blueprint.walker import update
from rulecheck.language.errors import YAMLSafetyError
from rulecheck.language.loader import SourceMap, TrackedLoader
from rulecheck.models.errors import Diagnostic, SourceLocation
from rulecheck.models.schema import ArgumentDef, FieldDef, Schema, TypeDef, TypeKind, named_type
from rulecheck.pipeline.document import render_errors
from rulecheck.pipeline.phase import Phase, PhaseResult


class SchemaParse(Phase):
    """Load YAML schema source into definition nodes.

    Unreadable YAML is recorded on an empty blueprint and the run jumps to
    :class:`SchemaResult`. Structural problems are recorded on the nodes
    they concern and parsing continues.
    """

    name = "Schema.Parse"

    def run(self, blueprint: Blueprint | str) -> PhaseResult:
        if isinstance(blueprint, Blueprint):
            return PhaseResult.ok(blueprint)
        source = blueprint
        filename = self.options.get("filename")
        try:
            raw, source_map = TrackedLoader().load_string(source, filename=filename)
        except YAMLSafetyError as exc:
            error = Diagnostic(phase=self.name, message=str(exc))
            return PhaseResult.jump(Blueprint(input=source, errors=(error,)), SchemaResult)
        except YAMLError as exc:
            error = Diagnostic(
                phase=self.name,
                message=f"Invalid YAML: {getattr(exc, 'problem', None) or exc}",
                locations=_mark_locations(exc, filename),
            )
            return PhaseResult.jump(Blueprint(input=source, errors=(error,)), SchemaResult)

        root_errors: list[Diagnostic] = []
        raw_types = raw.get("types", {})
        if not isinstance(raw_types, dict):
            root_errors.append(self.error(None, "'types' must be a YAML mapping"))
            raw_types = {}

        types = tuple(
            self._parse_type(str(name), data, source_map) for name, data in raw_types.items()
        )
        return PhaseResult.ok(
            Blueprint(
                input=source,
                types=types,
                schema_declaration=self._parse_declaration(raw.get("schema"), source_map),
                errors=tuple(root_errors),
            )
        )

    def _parse_declaration(self, data: Any, source_map: SourceMap) -> SchemaDeclaration:
        location = source_map.get("schema")
        if data is None:
            return SchemaDeclaration()
        if not isinstance(data, dict):
            declaration = SchemaDeclaration(source_location=location)
            return declaration.put_error(self.error(declaration, "'schema' must be a YAML mapping"))
        declaration = SchemaDeclaration(source_location=source_map.get("schema.query") or location)
        query = data.get("query", "Query")
        if not isinstance(query, str):
            declaration = declaration.put_error(
                self.error(declaration, "'schema.query' must be a string")
            )
            query = "Query"
        mutation = data.get("mutation")
        if mutation is not None and not isinstance(mutation, str):
            declaration = declaration.put_error(
                self.error(declaration, "'schema.mutation' must be a string")
            )
            mutation = None
        return replace(declaration, query=query, mutation=mutation)

    def _parse_type(self, name: str, data: Any, source_map: SourceMap) -> TypeDefinition:
        path = f"types.{name}"
        node = TypeDefinition(name=name, source_location=source_map.get(path))
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return node.put_error(self.error(node, f'Type "{name}" must be a YAML mapping'))

        raw_kind = data.get("kind", TypeKind.OBJECT.value)
        try:
            kind = TypeKind(raw_kind)
        except ValueError:
            node = node.put_error(self.error(node, f'Unknown kind "{raw_kind}" for type "{name}"'))
            kind = TypeKind.OBJECT

        raw_fields = data.get("fields") or {}
        if not isinstance(raw_fields, dict):
            node = node.put_error(
                self.error(node, f'Fields of type "{name}" must be a YAML mapping')
            )
            raw_fields = {}
        fields = tuple(
            self._parse_field(
                name, str(field_name), value, f"{path}.fields.{field_name}", source_map
            )
            for field_name, value in raw_fields.items()
        )
        values = data.get("values") or []
        if not isinstance(values, list):
            node = node.put_error(self.error(node, f'Values of type "{name}" must be a YAML list'))
            values = []
        description = data.get("description")
        if description is not None and not isinstance(description, str):
            node = node.put_error(
                self.error(node, f'Description of type "{name}" must be a string')
            )
            description = None
        return replace(
            node,
            type_kind=kind,
            fields=fields,
            values=tuple(str(v) for v in values),
            description=description,
        )

    def _parse_field(
        self, type_name: str, name: str, data: Any, path: str, source_map: SourceMap
    ) -> FieldDefinition:
        location = source_map.get(path)
        if isinstance(data, str):
            return FieldDefinition(name=name, type=data, source_location=location)
        node = FieldDefinition(name=name, type="", source_location=location)
        if not isinstance(data, dict) or not isinstance(data.get("type"), str):
            return node.put_error(
                self.error(node, f'Field "{type_name}.{name}" must declare a type')
            )
        raw_arguments = data.get("arguments") or {}
        if not isinstance(raw_arguments, dict):
            node = node.put_error(
                self.error(node, f'Arguments of field "{type_name}.{name}" must be a YAML mapping')
            )
            raw_arguments = {}
        arguments = tuple(
            self._parse_argument(
                str(arg_name), arg_data, f"{path}.arguments.{arg_name}", source_map
            )
            for arg_name, arg_data in raw_arguments.items()
        )
        description = data.get("description")
        if description is not None and not isinstance(description, str):
            node = node.put_error(
                self.error(node, f'Description of field "{type_name}.{name}" must be a string')
            )
            description = None
        return replace(node, type=data["type"], arguments=arguments, description=description)

    def _parse_argument(
        self, name: str, data: Any, path: str, source_map: SourceMap
    ) -> InputValueDefinition:
        if isinstance(data, dict):
            data = data.get("type")
        node = InputValueDefinition(
            name=name,
            type=data if isinstance(data, str) else "",
            source_location=source_map.get(path),
        )
        if not isinstance(data, str):
            return node.put_error(self.error(node, f'Argument "{name}" must declare a type'))
        return node


def _mark_locations(exc: YAMLError, filename: str | None) -> tuple[SourceLocation, ...]:
    mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
    if mark is None:
        return ()
    return (SourceLocation(line=mark.line + 1, column=mark.column + 1, file=filename),)


class BuildSchema(Phase):
    """Compile definition nodes into a :class:`Schema`, layered over ``prototype``."""

    name = "Schema"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        prototype: Schema | None = self.options.get("prototype")
        types: dict[str, TypeDef] = dict(prototype.types) if prototype else {}
        for definition in blueprint.types:
            types[definition.name] = TypeDef(
                name=definition.name,
                kind=definition.type_kind,
                fields={f.name: _field_def(f) for f in definition.fields},
                values=list(definition.values),
                description=definition.description,
            )
        declaration = blueprint.schema_declaration or SchemaDeclaration()
        schema = Schema(
            types=types, query_type=declaration.query, mutation_type=declaration.mutation
        )
        return PhaseResult.ok(replace(blueprint, schema=schema))


def _field_def(definition: FieldDefinition) -> FieldDef:
    return FieldDef(
        name=definition.name,
        type=definition.type,
        arguments={a.name: ArgumentDef(name=a.name, type=a.type) for a in definition.arguments},
        description=definition.description,
    )


class TypeReferencesExist(Phase):
    """Field and argument types must name a declared or built-in type."""

    name = "Schema.Validation.TypeReferencesExist"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        schema = blueprint.schema or Schema()

        def check(node: Node) -> Node:
            if isinstance(node, FieldDefinition):
                referrer = "field"
            elif isinstance(node, InputValueDefinition):
                referrer = "argument"
            else:
                return node
            if not node.type or schema.lookup_type(node.type) is not None:
                return node
            return node.put_error(
                self.error(
                    node,
                    f'Unknown type "{named_type(node.type)}" '
                    f'referenced by {referrer} "{node.name}".',
                )
            )

        return PhaseResult.ok(update(blueprint, check))


class ObjectTypesHaveFields(Phase):
    name = "Schema.Validation.ObjectTypesHaveFields"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        def check(node: Node) -> Node:
            if (
                isinstance(node, TypeDefinition)
                and node.type_kind is TypeKind.OBJECT
                and not node.fields
            ):
                return node.put_error(
                    self.error(node, f'Object type "{node.name}" must define one or more fields.')
                )
            return node

        return PhaseResult.ok(update(blueprint, check))


class QueryTypeExists(Phase):
    """The declared root operation types must be object types."""

    name = "Schema.Validation.QueryTypeExists"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        declaration = blueprint.schema_declaration or SchemaDeclaration()
        schema = blueprint.schema or Schema()
        roots = [("Query", declaration.query)]
        if declaration.mutation:
            roots.append(("Mutation", declaration.mutation))
        for label, type_name in roots:
            type_def = schema.lookup_type(type_name)
            if type_def is None or type_def.kind is not TypeKind.OBJECT:
                message = f'{label} root type "{type_name}" must be a defined object type.'
                declaration = declaration.put_error(self.error(declaration, message))
        return PhaseResult.ok(replace(blueprint, schema_declaration=declaration))


class SchemaResult(Phase):
    name = "Schema.Result"

    def run(self, blueprint: Blueprint) -> PhaseResult:
        errors = render_errors(blueprint)
        return PhaseResult.ok(replace(blueprint, result={"errors": errors} if errors else {}))
