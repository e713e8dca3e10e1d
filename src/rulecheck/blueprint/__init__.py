"""Blueprint trees: the node structure every pipeline phase reads and rewrites."""

from rulecheck.blueprint.flatten import ErrorPair, error_messages, error_pairs
from rulecheck.blueprint.nodes import (
    Argument,
    Blueprint,
    Field,
    FieldDefinition,
    InputValueDefinition,
    Node,
    Operation,
    SchemaDeclaration,
    TypeDefinition,
    Value,
    ValueKind,
)
from rulecheck.blueprint.walker import children, postwalk, prewalk, reduce, update

__all__ = [
    "Argument",
    "Blueprint",
    "ErrorPair",
    "Field",
    "FieldDefinition",
    "InputValueDefinition",
    "Node",
    "Operation",
    "SchemaDeclaration",
    "TypeDefinition",
    "Value",
    "ValueKind",
    "children",
    "error_messages",
    "error_pairs",
    "postwalk",
    "prewalk",
    "reduce",
    "update",
]
