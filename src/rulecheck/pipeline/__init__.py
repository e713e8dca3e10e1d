"""Phase pipelines: documents and schemas are processed by ordered phase sequences."""

from rulecheck.pipeline.document import AttachSchema, CurrentOperation, DocumentResult, Parse
from rulecheck.pipeline.loading import SchemaLoadError, load_schema
from rulecheck.pipeline.phase import Phase, PhaseResult, PhaseStatus, phase_name
from rulecheck.pipeline.pipeline import (
    DocumentOptions,
    PhaseFailedError,
    Pipeline,
    PipelineError,
    RunResult,
    UnknownPhaseError,
    run_document,
)
from rulecheck.pipeline.schema import (
    BuildSchema,
    ObjectTypesHaveFields,
    QueryTypeExists,
    SchemaParse,
    SchemaResult,
    TypeReferencesExist,
)
from rulecheck.pipeline.validation import (
    FieldsOnCorrectType,
    KnownArgumentNames,
    ProvidedNonNullArguments,
    ValidationResult,
)

__all__ = [
    "AttachSchema",
    "BuildSchema",
    "CurrentOperation",
    "DocumentOptions",
    "DocumentResult",
    "FieldsOnCorrectType",
    "KnownArgumentNames",
    "ObjectTypesHaveFields",
    "Parse",
    "Phase",
    "PhaseFailedError",
    "PhaseResult",
    "PhaseStatus",
    "Pipeline",
    "PipelineError",
    "ProvidedNonNullArguments",
    "QueryTypeExists",
    "RunResult",
    "SchemaLoadError",
    "SchemaParse",
    "SchemaResult",
    "TypeReferencesExist",
    "UnknownPhaseError",
    "ValidationResult",
    "load_schema",
    "phase_name",
    "run_document",
]
