"""Schema types that documents are validated against."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class TypeKind(StrEnum):
    OBJECT = "object"
    SCALAR = "scalar"
    ENUM = "enum"


class OperationType(StrEnum):
    QUERY = "query"
    MUTATION = "mutation"


def named_type(ref: str) -> str:
    """Strip list and non-null wrappers: ``[Dog!]!`` -> ``Dog``."""
    return ref.replace("[", "").replace("]", "").replace("!", "").strip()


def is_non_null(ref: str) -> bool:
    return ref.strip().endswith("!")


class ArgumentDef(BaseModel):
    """An argument accepted by a field."""

    name: str
    type: str


class FieldDef(BaseModel):
    """A field declared on an object type."""

    name: str
    type: str
    arguments: dict[str, ArgumentDef] = Field(default_factory=dict)
    description: str | None = None

    @property
    def required_arguments(self) -> list[ArgumentDef]:
        return [arg for arg in self.arguments.values() if is_non_null(arg.type)]


class TypeDef(BaseModel):
    """A named type: object with fields, enum with values, or scalar."""

    name: str
    kind: TypeKind = TypeKind.OBJECT
    fields: dict[str, FieldDef] = Field(default_factory=dict)
    values: list[str] = Field(default_factory=list)
    description: str | None = None


BUILTIN_SCALARS: dict[str, TypeDef] = {
    name: TypeDef(name=name, kind=TypeKind.SCALAR)
    for name in ("String", "Int", "Float", "Boolean", "ID")
}


class Schema(BaseModel):
    """A compiled schema: named types plus the root operation types."""

    types: dict[str, TypeDef] = Field(default_factory=dict)
    query_type: str = "Query"
    mutation_type: str | None = None

    def lookup_type(self, name: str) -> TypeDef | None:
        """Resolve a type name (wrappers allowed), falling back to built-in scalars."""
        bare = named_type(name)
        return self.types.get(bare) or BUILTIN_SCALARS.get(bare)

    def root_type(self, operation_type: OperationType) -> TypeDef | None:
        if operation_type is OperationType.MUTATION:
            return self.lookup_type(self.mutation_type) if self.mutation_type else None
        return self.lookup_type(self.query_type)

    def field(self, type_name: str, field_name: str) -> FieldDef | None:
        type_def = self.lookup_type(type_name)
        if type_def is None:
            return None
        return type_def.fields.get(field_name)
