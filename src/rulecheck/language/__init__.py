"""Source readers: the selection document parser and the tracked YAML loader."""

from rulecheck.language.errors import DocumentSyntaxError, YAMLSafetyError
from rulecheck.language.loader import SourceMap, TrackedLoader
from rulecheck.language.parser import Parser, parse

__all__ = [
    "DocumentSyntaxError",
    "Parser",
    "SourceMap",
    "TrackedLoader",
    "YAMLSafetyError",
    "parse",
]
