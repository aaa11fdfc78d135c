"""
Configuration for pytest: put the project root on the import path and
provide shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add the parent directory to Python path so we can import sequence, vector, etc.
sys.path.insert(0, str(Path(__file__).parent.parent))

from sequence import Sequence
from vector import Vector


def _realize(value):
    if isinstance(value, (Sequence, Vector)):
        return [_realize(x) for x in value]
    return value


@pytest.fixture
def realize():
    """Fixture turning nested Sequences into nested lists."""
    return _realize


@pytest.fixture
def call_counter():
    """Fixture providing an identity function that counts its calls."""

    class Counter:
        def __init__(self):
            self.calls = 0

        def __call__(self, x):
            self.calls += 1
            return x

    return Counter()
