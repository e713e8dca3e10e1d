"""Shared test fixtures for rulecheck."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from rulecheck.language.loader import TrackedLoader
from rulecheck.models.schema import Schema
from rulecheck.pipeline.loading import load_schema

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SCHEMA_PATH = FIXTURES_DIR / "schema.yaml"

os.environ.setdefault("RULECHECK_DEFAULT_SCHEMA", str(SCHEMA_PATH))


@pytest.fixture
def loader() -> TrackedLoader:
    return TrackedLoader()


@pytest.fixture(scope="session")
def schema() -> Schema:
    """The dog/human fixture schema."""
    return load_schema(SCHEMA_PATH)


@pytest.fixture
def schema_path() -> Path:
    return SCHEMA_PATH
