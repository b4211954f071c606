"""Shared fixtures: in-memory storage, a controllable grant set, a fake clock."""

from typing import List, Tuple

import pytest

from srbtranslit.app.injection import Injector
from srbtranslit.app.notifications import LoggingNotifier
from srbtranslit.app.permissions import GrantSet
from srbtranslit.app.service import TranslitService
from srbtranslit.app.storage import container
from srbtranslit.app.storage.backends import MemoryStore
from srbtranslit.app.storage.container import StoreContainer
from srbtranslit.app.tabs import Tab, TabRegistry
from srbtranslit.app.translit import Direction
from srbtranslit.app.utils import config


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingInjector(Injector):
    """Records requested runs without touching any document."""

    def __init__(self):
        self.calls: List[Tuple[int, Direction]] = []

    async def run(self, tab: Tab, direction: Direction) -> None:
        self.calls.append((tab.id, direction))


@pytest.fixture(autouse=True)
def fresh_globals():
    config._config = None
    container.reset_stores()
    yield
    config._config = None
    container.reset_stores()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def stores(memory_store):
    return StoreContainer(backend=memory_store)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def grants():
    # Denies every request unless a test sets .prompt
    return GrantSet()


@pytest.fixture
def notifier():
    return LoggingNotifier()


@pytest.fixture
def injector():
    return RecordingInjector()


@pytest.fixture
def tabs():
    return TabRegistry()


@pytest.fixture
def service(grants, stores, tabs, notifier, injector, clock):
    return TranslitService(
        grants,
        stores=stores,
        tabs=tabs,
        notifier=notifier,
        injector=injector,
        clock=clock,
    )
