"""Immutable blueprint nodes. Phases never mutate a node; they return an updated copy."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, Self

from rulecheck.models.errors import Diagnostic, SourceLocation
from rulecheck.models.schema import ArgumentDef, FieldDef, OperationType, Schema, TypeDef, TypeKind


class Node:
    """Behaviour shared by every blueprint node.

    Concrete nodes are frozen dataclasses that declare ``errors`` and
    ``source_location`` as their last two fields.
    """

    errors: tuple[Diagnostic, ...]
    source_location: SourceLocation | None

    @property
    def kind(self) -> str:
        return type(self).__name__

    def put_error(self, error: Diagnostic) -> Self:
        """Return a copy of this node with ``error`` appended."""
        return replace(self, errors=self.errors + (error,))  # type: ignore[type-var]


class ValueKind(StrEnum):
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOLEAN = "boolean"
    NULL = "null"
    ENUM = "enum"
    VARIABLE = "variable"
    LIST = "list"


# -- document nodes ------------------------------------------------------------


@dataclass(frozen=True)
class Value(Node):
    """An input value literal, variable reference, or list of values."""

    value_kind: ValueKind
    value: Any = None
    items: tuple[Value, ...] = ()
    errors: tuple[Diagnostic, ...] = ()
    source_location: SourceLocation | None = None


@dataclass(frozen=True)
class Argument(Node):
    name: str
    value: Value
    schema_node: ArgumentDef | None = field(default=None, compare=False, repr=False)
    errors: tuple[Diagnostic, ...] = ()
    source_location: SourceLocation | None = None


@dataclass(frozen=True)
class Field(Node):
    """A selected field, optionally aliased, with arguments and sub-selections."""

    name: str
    alias: str | None = None
    arguments: tuple[Argument, ...] = ()
    selections: tuple[Field, ...] = ()
    parent_type: str | None = None
    schema_node: FieldDef | None = field(default=None, compare=False, repr=False)
    errors: tuple[Diagnostic, ...] = ()
    source_location: SourceLocation | None = None

    @property
    def response_key(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True)
class Operation(Node):
    type: OperationType = OperationType.QUERY
    name: str | None = None
    selections: tuple[Field, ...] = ()
    current: bool = False
    schema_node: TypeDef | None = field(default=None, compare=False, repr=False)
    errors: tuple[Diagnostic, ...] = ()
    source_location: SourceLocation | None = None


# -- schema definition nodes -----------------------------------------------------


@dataclass(frozen=True)
class InputValueDefinition(Node):
    name: str
    type: str
    errors: tuple[Diagnostic, ...] = ()
    source_location: SourceLocation | None = None


@dataclass(frozen=True)
class FieldDefinition(Node):
    name: str
    type: str
    arguments: tuple[InputValueDefinition, ...] = ()
    description: str | None = None
    errors: tuple[Diagnostic, ...] = ()
    source_location: SourceLocation | None = None


@dataclass(frozen=True)
class TypeDefinition(Node):
    name: str
    type_kind: TypeKind = TypeKind.OBJECT
    fields: tuple[FieldDefinition, ...] = ()
    values: tuple[str, ...] = ()
    description: str | None = None
    errors: tuple[Diagnostic, ...] = ()
    source_location: SourceLocation | None = None


@dataclass(frozen=True)
class SchemaDeclaration(Node):
    """Root operation type names; ``source_location`` is None when implicit."""

    query: str = "Query"
    mutation: str | None = None
    errors: tuple[Diagnostic, ...] = ()
    source_location: SourceLocation | None = None


# -- root ------------------------------------------------------------------------


@dataclass(frozen=True)
class Blueprint(Node):
    """Root of the tree that a pipeline run threads through its phases."""

    input: str = field(default="", repr=False)
    operations: tuple[Operation, ...] = ()
    types: tuple[TypeDefinition, ...] = ()
    schema_declaration: SchemaDeclaration | None = None
    schema: Schema | None = field(default=None, compare=False, repr=False)
    result: dict[str, Any] | None = field(default=None, compare=False)
    errors: tuple[Diagnostic, ...] = ()
    source_location: SourceLocation | None = None

    def current_operation(self) -> Operation | None:
        for operation in self.operations:
            if operation.current:
                return operation
        return None
