"""Selection documents: graphql-core parsing converted into blueprint trees.

Only the executable subset the blueprint models is accepted: query and
mutation operations built from fields, aliases and arguments. Anything
else graphql-core can parse (fragments, directives, variable definitions,
object values, type system definitions) is rejected with a
:class:`DocumentSyntaxError` at the offending node.
"""

from __future__ import annotations

from graphql import GraphQLSyntaxError
from graphql import parse as parse_graphql
from graphql.language import (
    ArgumentNode,
    BooleanValueNode,
    EnumValueNode,
    FieldNode,
    FloatValueNode,
    IntValueNode,
    Lexer,
    ListValueNode,
    NullValueNode,
    OperationDefinitionNode,
    SelectionSetNode,
    Source,
    StringValueNode,
    TokenKind,
    ValueNode,
    VariableNode,
)
from graphql.language import Node as AstNode

from rulecheck.blueprint.nodes import Argument, Blueprint, Field, Operation, Value, ValueKind
from rulecheck.language.errors import DocumentSyntaxError
from rulecheck.models.errors import SourceLocation
from rulecheck.models.schema import OperationType

_MAX_DOCUMENT_SIZE = 1_000_000  # characters
_MAX_DEPTH = 32

_OPENING = {TokenKind.BRACE_L, TokenKind.PAREN_L, TokenKind.BRACKET_L}
_CLOSING = {TokenKind.BRACE_R, TokenKind.PAREN_R, TokenKind.BRACKET_R}

_OPERATION_TYPES = {t.value: t for t in OperationType}


class Parser:
    """Convert graphql-core syntax trees into :class:`Blueprint` nodes."""

    def __init__(self, source: str, filename: str | None = None) -> None:
        if len(source) > _MAX_DOCUMENT_SIZE:
            raise DocumentSyntaxError(
                f"Document exceeds maximum size "
                f"({len(source):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )
        self._source = source
        self._filename = filename

    def _loc(self, line: int, column: int) -> SourceLocation:
        return SourceLocation(line=line, column=column, file=self._filename)

    def _node_loc(self, node: AstNode) -> SourceLocation | None:
        if node.loc is None:
            return None
        token = node.loc.start_token
        return self._loc(token.line, token.column)

    def _unsupported(self, node: AstNode, what: str | None = None) -> DocumentSyntaxError:
        label = what or node.kind.replace("_", " ")
        return DocumentSyntaxError(f"Unsupported {label}", self._node_loc(node))

    # -- reading -------------------------------------------------------------

    def _check_depth(self) -> None:
        """Reject bracket nesting deeper than the converters can recurse."""
        lexer = Lexer(Source(self._source))
        depth = 0
        token = lexer.advance()
        while token.kind is not TokenKind.EOF:
            if token.kind in _OPENING:
                depth += 1
                if depth > _MAX_DEPTH:
                    raise DocumentSyntaxError(
                        f"Document exceeds maximum nesting depth ({_MAX_DEPTH})",
                        self._loc(token.line, token.column),
                    )
            elif token.kind in _CLOSING:
                depth -= 1
            token = lexer.advance()

    def parse_document(self) -> Blueprint:
        try:
            self._check_depth()
            document = parse_graphql(Source(self._source, self._filename or "GraphQL request"))
        except GraphQLSyntaxError as exc:
            location = None
            if exc.locations:
                location = self._loc(exc.locations[0].line, exc.locations[0].column)
            raise DocumentSyntaxError(exc.message, location) from exc
        operations = []
        for definition in document.definitions:
            if not isinstance(definition, OperationDefinitionNode):
                raise self._unsupported(definition)
            operations.append(self._operation(definition))
        return Blueprint(input=self._source, operations=tuple(operations))

    # -- conversion ----------------------------------------------------------

    def _operation(self, node: OperationDefinitionNode) -> Operation:
        operation_type = _OPERATION_TYPES.get(node.operation.value)
        if operation_type is None:
            raise self._unsupported(node, f"{node.operation.value} operation")
        if node.variable_definitions:
            raise self._unsupported(node.variable_definitions[0])
        if node.directives:
            raise self._unsupported(node.directives[0])
        return Operation(
            type=operation_type,
            name=node.name.value if node.name else None,
            selections=self._selections(node.selection_set),
            source_location=self._node_loc(node),
        )

    def _selections(self, selection_set: SelectionSetNode | None) -> tuple[Field, ...]:
        if selection_set is None:
            return ()
        fields: list[Field] = []
        for selection in selection_set.selections:
            if not isinstance(selection, FieldNode):
                raise self._unsupported(selection)
            fields.append(self._field(selection))
        return tuple(fields)

    def _field(self, node: FieldNode) -> Field:
        if node.directives:
            raise self._unsupported(node.directives[0])
        return Field(
            name=node.name.value,
            alias=node.alias.value if node.alias else None,
            arguments=tuple(self._argument(arg) for arg in node.arguments or ()),
            selections=self._selections(node.selection_set),
            source_location=self._node_loc(node),
        )

    def _argument(self, node: ArgumentNode) -> Argument:
        return Argument(
            name=node.name.value,
            value=self._value(node.value),
            source_location=self._node_loc(node),
        )

    def _value(self, node: ValueNode) -> Value:
        loc = self._node_loc(node)
        match node:
            case VariableNode():
                return Value(ValueKind.VARIABLE, node.name.value, source_location=loc)
            case IntValueNode():
                return Value(ValueKind.INT, int(node.value), source_location=loc)
            case FloatValueNode():
                return Value(ValueKind.FLOAT, float(node.value), source_location=loc)
            case StringValueNode():
                return Value(ValueKind.STRING, node.value, source_location=loc)
            case BooleanValueNode():
                return Value(ValueKind.BOOLEAN, node.value, source_location=loc)
            case NullValueNode():
                return Value(ValueKind.NULL, source_location=loc)
            case EnumValueNode():
                return Value(ValueKind.ENUM, node.value, source_location=loc)
            case ListValueNode():
                items = tuple(self._value(item) for item in node.values)
                return Value(ValueKind.LIST, items=items, source_location=loc)
        raise self._unsupported(node)


def parse(source: str, filename: str | None = None) -> Blueprint:
    """Parse ``source`` into a blueprint of operations."""
    return Parser(source, filename).parse_document()
