"""Structured diagnostics with source position tracking."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SourceLocation(BaseModel):
    """Points to a position in document or schema source (1-indexed)."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int
    file: str | None = None

    def __str__(self) -> str:
        prefix = f"{self.file}:" if self.file else ""
        return f"{prefix}{self.line}:{self.column}"


class Diagnostic(BaseModel):
    """An error attached to a node by the phase that produced it."""

    model_config = ConfigDict(frozen=True)

    phase: str
    message: str
    locations: tuple[SourceLocation, ...] = ()

    def has_line(self, line: int) -> bool:
        return any(loc.line == line for loc in self.locations)

    def __str__(self) -> str:
        where = f"{self.locations[0].line}:{self.locations[0].column}" if self.locations else "-"
        return f"{where} [{self.phase}] {self.message}"
