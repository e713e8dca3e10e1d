"""Tests for the tracked YAML loader and its safety limits."""

from __future__ import annotations

from pathlib import Path

import pytest

from rulecheck.language.errors import YAMLSafetyError
from rulecheck.language.loader import _MAX_DOCUMENT_SIZE, _MAX_NODE_COUNT, TrackedLoader


class TestPositions:
    def test_key_positions(self, loader: TrackedLoader, schema_path: Path) -> None:
        _, source_map = loader.load(schema_path)
        dog = source_map.get("types.Dog")
        assert dog is not None
        assert (dog.line, dog.column) == (26, 3)
        name = source_map.get("types.Dog.fields.name")
        assert name is not None
        assert (name.line, name.column) == (28, 7)

    def test_file_name_is_recorded(self, loader: TrackedLoader, schema_path: Path) -> None:
        _, source_map = loader.load(schema_path)
        location = source_map.get("schema.query")
        assert location is not None
        assert location.file == str(schema_path)
        assert location.line == 2

    def test_sequence_items(self, loader: TrackedLoader) -> None:
        _, source_map = loader.load_string("values:\n  - A\n  - B\n")
        item = source_map.get("values[1]")
        assert item is not None
        assert item.line == 3

    def test_plain_data(self, loader: TrackedLoader, schema_path: Path) -> None:
        raw, _ = loader.load(schema_path)
        assert raw["types"]["Color"]["values"] == ["BROWN", "BLACK", "WHITE"]
        assert type(raw["types"]) is dict

    def test_unknown_path(self, loader: TrackedLoader) -> None:
        _, source_map = loader.load_string("a: 1\n")
        assert source_map.get("b") is None
        assert source_map.paths == ["a"]


class TestAnchorRejection:
    """Schema sources never need anchors/aliases; reject them entirely."""

    def test_billion_laughs_rejected(self, loader: TrackedLoader) -> None:
        yaml = (
            "a: &a ['lol','lol','lol','lol','lol']\n"
            "b: &b [*a,*a,*a,*a,*a]\n"
            "c: &c [*b,*b,*b,*b,*b]\n"
        )
        with pytest.raises(YAMLSafetyError, match="anchors/aliases"):
            loader.load_string(yaml)

    def test_anchor_in_sequence(self, loader: TrackedLoader) -> None:
        yaml = "items:\n  - &item1 foo\n  - *item1\n"
        with pytest.raises(YAMLSafetyError, match="anchors/aliases"):
            loader.load_string(yaml)

    def test_ampersand_inside_word_allowed(self, loader: TrackedLoader) -> None:
        raw, _ = loader.load_string("key: R&D\n")
        assert raw["key"] == "R&D"


class TestLimits:
    def test_oversized_document_rejected(self, loader: TrackedLoader) -> None:
        yaml = "key: " + "x" * (_MAX_DOCUMENT_SIZE + 1) + "\n"
        with pytest.raises(YAMLSafetyError, match="maximum size"):
            loader.load_string(yaml)

    def test_excessive_node_count_rejected(self, loader: TrackedLoader) -> None:
        yaml = "\n".join(f"k{i}: v{i}" for i in range(_MAX_NODE_COUNT + 1))
        with pytest.raises(YAMLSafetyError, match="node count"):
            loader.load_string(yaml)

    def test_empty_document(self, loader: TrackedLoader) -> None:
        raw, source_map = loader.load_string("")
        assert raw == {}
        assert source_map.paths == []
