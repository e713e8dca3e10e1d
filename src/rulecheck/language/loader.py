"""YAML loader with position tracking for schema sources."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from rulecheck.language.errors import YAMLSafetyError
from rulecheck.models.errors import SourceLocation

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

_MAX_DOCUMENT_SIZE = 1_000_000  # characters
_MAX_NODE_COUNT = 20_000
_MAX_DEPTH = 20

# Anchor definitions (&name) at line start or after whitespace/sequence
# indicators. Quoted strings are not excluded.
_ANCHOR_RE = re.compile(r"(?:^|[\s\-:])&(\w+)", re.MULTILINE)


@dataclass
class SourceMap:
    """Maps dotted YAML key paths (``types.Dog.fields.name``) to source positions."""

    _positions: dict[str, SourceLocation] = field(default_factory=dict)

    def add(self, path: str, location: SourceLocation) -> None:
        self._positions[path] = location

    def get(self, path: str) -> SourceLocation | None:
        return self._positions.get(path)

    @property
    def paths(self) -> list[str]:
        return list(self._positions.keys())


class TrackedLoader:
    """YAML loader that records the line/column of every mapping key and list item.

    Uses ruamel.yaml, which keeps position info on each parsed container.
    """

    def __init__(self) -> None:
        self._yaml = YAML()
        self._yaml.preserve_quotes = True
        self._yaml.max_depth = _MAX_DEPTH

    @staticmethod
    def _check_yaml_safety(content: str) -> None:
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise YAMLSafetyError(
                f"YAML document exceeds maximum size "
                f"({len(content):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )
        if _ANCHOR_RE.search(content):
            raise YAMLSafetyError("YAML anchors/aliases are not supported in schema sources")

    @staticmethod
    def _check_node_count(data: Any, limit: int = _MAX_NODE_COUNT) -> None:
        count = 0
        stack: list[Any] = [data]
        while stack:
            node = stack.pop()
            count += 1
            if count > limit:
                raise YAMLSafetyError(f"YAML document exceeds maximum node count ({limit:,})")
            if isinstance(node, dict):
                stack.extend(node.values())
            elif isinstance(node, list):
                stack.extend(node)

    def load(self, path: Path) -> tuple[dict[str, Any], SourceMap]:
        """Load a YAML file and return the parsed dict plus its source map."""
        with path.open("r", encoding="utf-8") as handle:
            content = handle.read()
        return self.load_string(content, filename=str(path))

    def load_string(
        self, content: str, filename: str | None = None
    ) -> tuple[dict[str, Any], SourceMap]:
        """Load YAML from a string.

        Raises ``YAMLSafetyError`` on unsafe input and ruamel's ``YAMLError``
        on malformed input.
        """
        self._check_yaml_safety(content)
        data = self._yaml.load(content)
        if data is None:
            return {}, SourceMap()
        self._check_node_count(data)
        source_map = SourceMap()
        self._extract_positions(data, filename, "", source_map)
        return self._to_plain_dict(data), source_map

    def _extract_positions(
        self,
        data: Any,
        filename: str | None,
        prefix: str,
        source_map: SourceMap,
    ) -> None:
        if isinstance(data, CommentedMap):
            for key in data:
                key_path = f"{prefix}.{key}" if prefix else str(key)
                try:
                    position = data.lc.key(key)
                except (AttributeError, KeyError, TypeError):
                    position = (data.lc.line, data.lc.col)
                if position:
                    line, col = position
                    source_map.add(
                        key_path, SourceLocation(line=line + 1, column=col + 1, file=filename)
                    )
                self._extract_positions(data[key], filename, key_path, source_map)
        elif isinstance(data, CommentedSeq):
            for i, item in enumerate(data):
                item_path = f"{prefix}[{i}]"
                try:
                    position = data.lc.item(i)
                except (AttributeError, KeyError, TypeError):
                    position = None
                if position:
                    line, col = position
                    source_map.add(
                        item_path, SourceLocation(line=line + 1, column=col + 1, file=filename)
                    )
                self._extract_positions(item, filename, item_path, source_map)

    def _to_plain_dict(self, data: Any) -> dict[str, Any]:
        if isinstance(data, dict):
            return {str(k): self._to_plain_value(v) for k, v in data.items()}
        return {}

    def _to_plain_value(self, data: Any) -> Any:
        if isinstance(data, dict):
            return {str(k): self._to_plain_value(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self._to_plain_value(item) for item in data]
        return data
