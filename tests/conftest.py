"""Shared fixtures for the bank ledger tests."""

import os
import tempfile
from datetime import datetime, timedelta

import pytest

from bank_ledger.utils import sequential_ids


class FakeClock:
    """Clock that advances a fixed step on every reading."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 9, 0, 0),
                 step: timedelta = timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current += self.step
        return now


@pytest.fixture
def clock():
    """A deterministic clock starting 2024-01-01 09:00."""
    return FakeClock()


@pytest.fixture
def id_factory():
    """Sequential TXN-000001 style ids."""
    return sequential_ids()


@pytest.fixture
def temp_db_path():
    """Create a temporary database file."""
    fd, path = tempfile.mkstemp(suffix='.db')
    os.close(fd)
    yield path
    if os.path.exists(path):
        os.unlink(path)
