"""
Shared pytest fixtures.

Canonical documents are rebuilt for every test so a test can modify its copy
freely.
"""

import logging

import pytest

from domain.models import CanonicalRecord
from domain.validation import SchemaValidator
from tests.fakes import make_interval_document, make_minimal_document


@pytest.fixture
def schema_validator() -> SchemaValidator:
    return SchemaValidator()


@pytest.fixture
def minimal_document() -> dict:
    """The smallest valid canonical record."""
    return make_minimal_document()


@pytest.fixture
def interval_document() -> dict:
    """Cycling workout: warmup, 3 x (work, recovery), cooldown."""
    return make_interval_document()


@pytest.fixture
def interval_record(interval_document) -> CanonicalRecord:
    return CanonicalRecord.model_validate(interval_document)


@pytest.fixture
def test_logger() -> logging.Logger:
    """Logger collaborator for components under test; captured by caplog."""
    return logging.getLogger("tests.conversion")
