"""Load a YAML schema source through the full schema pipeline."""

from __future__ import annotations

import logging
from pathlib import Path

from rulecheck.blueprint.flatten import error_pairs
from rulecheck.models.errors import Diagnostic
from rulecheck.models.schema import Schema
from rulecheck.pipeline.pipeline import Pipeline

logger = logging.getLogger("rulecheck.pipeline")


class SchemaLoadError(Exception):
    """Raised when a schema source produces diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic], source_name: str | None = None) -> None:
        self.diagnostics = diagnostics
        self.source_name = source_name
        where = f" in {source_name}" if source_name else ""
        lines = "\n".join(f"  {d}" for d in diagnostics)
        super().__init__(f"Schema has {len(diagnostics)} error(s){where}:\n{lines}")


def load_schema(
    source: str | Path,
    *,
    prototype: Schema | None = None,
    filename: str | None = None,
) -> Schema:
    """Build a :class:`Schema` from YAML text or a YAML file path."""
    if isinstance(source, Path):
        filename = filename or str(source)
        source = source.read_text(encoding="utf-8")
    blueprint = Pipeline.for_schema(prototype, filename=filename).run(source).result
    diagnostics = [pair.error for pair in error_pairs(blueprint)]
    if diagnostics:
        logger.warning(
            "Schema %s rejected with %d error(s)", filename or "<string>", len(diagnostics)
        )
        raise SchemaLoadError(diagnostics, filename)
    return blueprint.schema
