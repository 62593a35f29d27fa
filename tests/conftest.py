"""
Pytest configuration for tinytry tests.

Every test starts from an empty ambient error slot and no running handler.
"""

import pytest

from tinytry.ambient import clear_last_error
from tinytry.restart import current_scope


class Counter:
    """Mutable call counter shared between a test and its blocks."""

    def __init__(self) -> None:
        self.count = 0

    def __call__(self) -> int:
        self.count += 1
        return self.count


@pytest.fixture(autouse=True)
def clean_ambient_state():
    clear_last_error()
    yield
    assert current_scope() is None, "a handler scope leaked out of the test"
    clear_last_error()


@pytest.fixture
def counter() -> Counter:
    return Counter()
