"""
tests/golden/conftest.py
========================
Shared fixtures for the golden transcript suite.
"""
import os

import pytest

from scribefix.evaluation import parse_golden_file

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "..", "fixtures", "golden")
GOLDEN_FILE = os.path.join(FIXTURES_DIR, "samples.md")


@pytest.fixture(scope="session")
def golden_samples():
    if not os.path.exists(GOLDEN_FILE):
        pytest.skip(f"Golden samples not found: {GOLDEN_FILE}")
    return parse_golden_file(GOLDEN_FILE)
