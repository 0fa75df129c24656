"""
Shared fixtures for stormcell tests.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast, isolated tests")
    config.addinivalue_line("markers", "integration: tests that run the tick loop")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FixedRandom:
    """Random source that always returns the same value and lowest choices."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value

    def randrange(self, start, stop=None):
        return 0 if stop is None else start

    def uniform(self, a, b):
        return a


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fixed_random():
    """Factory: fixed_random(0.9) never branches, fixed_random(0.1) always does."""
    return FixedRandom


@pytest.fixture
def clock_factory():
    """Factory for independent clocks within one test."""
    return FakeClock
