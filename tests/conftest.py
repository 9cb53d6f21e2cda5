"""
Configuration for pytest to set up the proper import paths and shared fixtures.
"""

import sys
from pathlib import Path
import pytest


# Add the parent directory to Python path so we can import lazy, iterators, etc.
parent_dir = Path(__file__).parent.parent
sys.path.insert(0, str(parent_dir))

# Import after path setup
from utils import clear_performance_metrics


class CallTracker:
    """Wraps a function and records every argument it was called with"""

    def __init__(self, fn=lambda x: x):
        self.fn = fn
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args[0] if len(args) == 1 else args)
        return self.fn(*args)

    @property
    def count(self):
        return len(self.calls)


@pytest.fixture
def tracker():
    """Factory fixture producing CallTracker instances."""
    return CallTracker


@pytest.fixture
def collect():
    """Force a sequence with each() and return the delivered values as a list."""
    def _collect(sequence):
        out = []
        sequence.each(out.append)
        return out
    return _collect


@pytest.fixture(autouse=True)
def clean_metrics():
    """Start every test with an empty performance log."""
    clear_performance_metrics()
    yield
    clear_performance_metrics()
