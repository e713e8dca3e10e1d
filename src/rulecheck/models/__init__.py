"""Pydantic domain models for rulecheck."""

from rulecheck.models.errors import Diagnostic, SourceLocation
from rulecheck.models.schema import (
    BUILTIN_SCALARS,
    ArgumentDef,
    FieldDef,
    OperationType,
    Schema,
    TypeDef,
    TypeKind,
    is_non_null,
    named_type,
)

__all__ = [
    "BUILTIN_SCALARS",
    "ArgumentDef",
    "Diagnostic",
    "FieldDef",
    "OperationType",
    "Schema",
    "SourceLocation",
    "TypeDef",
    "TypeKind",
    "is_non_null",
    "named_type",
]
