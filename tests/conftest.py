"""Test configuration and fixtures for the BeatSaver cacher test suite."""

import os

# Force test-safe defaults before any other imports
os.environ.setdefault('ENV', 'TEST')

import pytest

from beatsaver_cacher.cacher_logging import metrics
from tests.factories import build_map, diff_payload


@pytest.fixture
def make_map():
    """Factory for catalog entries; keyword arguments override the JSON payload."""
    return build_map


@pytest.fixture
def make_diff():
    return diff_payload


@pytest.fixture(autouse=True)
def reset_metrics():
    """Keep the process-wide metrics collector isolated per test."""
    metrics.reset()
    yield
    metrics.reset()
