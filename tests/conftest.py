"""Pytest configuration and shared fixtures."""

import pytest

from tests.indexer import RecordingIndexer


@pytest.fixture
def indexer() -> RecordingIndexer:
    return RecordingIndexer()
