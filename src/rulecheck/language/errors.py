"""Error types raised while reading documents and schema sources."""

from __future__ import annotations

from rulecheck.models.errors import SourceLocation


class DocumentSyntaxError(Exception):
    """Raised on malformed or unsupported document source."""

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location


class YAMLSafetyError(Exception):
    """Raised when YAML input violates safety constraints.

    Distinct from parse errors: these indicate potentially malicious input
    (anchor expansion, excessive nesting, oversized documents).
    """
