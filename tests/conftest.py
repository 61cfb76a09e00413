import itertools
from dataclasses import dataclass, field
from typing import Any

import pytest

from bubbletrack.state.store import ActivityStore
from bubbletrack.storage import MemoryStorage
from bubbletrack.surface.bounds import BoundsTracker

T0 = 1_700_000_000_000  # epoch ms


@dataclass
class FakeClock:
    now: int = T0

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@dataclass
class FakeDB:
    fetchone_results: list[Any] = field(default_factory=list)
    executed: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def fetchone(self, query: str, params=None):
        self.executed.append((query, tuple(params or ())))
        if self.fetchone_results:
            return self.fetchone_results.pop(0)
        return None

    def execute(self, query: str, params=None) -> None:
        self.executed.append((query, tuple(params or ())))


class FakePGManager:
    '''Stands in for PGManager: every `with PGManager(url)` yields the same FakeDB.'''

    _pool = None

    def __init__(self, db: FakeDB):
        self._db = db

    def __call__(self, *args, **kwargs):
        return self._db


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def ids():
    counter = itertools.count(1)
    return lambda: f'act-{next(counter)}'


@pytest.fixture()
def store(storage, clock, ids) -> ActivityStore:
    return ActivityStore(storage, clock=clock, id_factory=ids)


@pytest.fixture()
def tracker() -> BoundsTracker:
    return BoundsTracker()


@pytest.fixture()
def fake_db() -> FakeDB:
    return FakeDB()
