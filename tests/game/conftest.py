from unittest.mock import AsyncMock

import pytest

from jacobs_office.events import EventLog
from jacobs_office.jobs import CatalogObject
from jacobs_office.models import Job
from jacobs_office.state import MoodStore, PhaseState, Session, SpeechStore, Wallet
from jacobs_office.world import WorldState

_CATALOG = [
    CatalogObject("printer", "Printer", ("ELECTRONIC", "METALLIC")),
    CatalogObject("plant", "Office Plant", ("ORGANIC",)),
    CatalogObject("cabinet", "Filing Cabinet", ("PAPER", "METALLIC", "HEAVY")),
    CatalogObject("front-door", "Front Door", ("WOODEN",)),
]


class FakeClock:
    """Monotonic clock in seconds, advanced by hand."""

    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def catalog() -> list[CatalogObject]:
    return list(_CATALOG)


@pytest.fixture
def job() -> Job:
    return Job(
        id="paper-filing-cabinet",
        title="SORT THE FILING CABINET",
        description="I NEED THE FILING CABINET SORTED.",
        objectHints=["Filing Cabinet"],
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def events() -> EventLog:
    return EventLog()


@pytest.fixture
def world() -> WorldState:
    w = WorldState()
    w.register_object("printer-1", "Printer", ["ELECTRONIC", "METALLIC"], catalog_id="printer")
    w.register_object("coffee-1", "Coffee Machine", ["ELECTRONIC", "HOT"], ["UNPOWERED"], catalog_id="coffee-machine")
    w.register_object("door-1", "Front Door", ["WOODEN"], catalog_id="front-door")
    return w


@pytest.fixture
def mood() -> MoodStore:
    return MoodStore()


@pytest.fixture
def speech(clock: FakeClock) -> SpeechStore:
    return SpeechStore(clock)


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def wallet() -> Wallet:
    return Wallet()


@pytest.fixture
def phase() -> PhaseState:
    return PhaseState(phase_duration=120, game_start_minutes=540)
