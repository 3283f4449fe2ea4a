import datetime as dt
import os
import sys

import pytest

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

import zenith_tui as zt  # noqa: E402


class FakeClock:
    """Callable wall clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or dt.datetime(2024, 3, 14, 9, 0, 0, tzinfo=dt.timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += dt.timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def temp_db_path(tmp_path):
    """Return a unique SQLite path per test to avoid cross-test contamination."""
    return tmp_path / "zenith.db"


@pytest.fixture
def db():
    store = zt.TaskDB(':memory:')
    try:
        yield store
    finally:
        store.close()
