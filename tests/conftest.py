from __future__ import annotations

from datetime import datetime

import pytest

from passwordgame.engine import RepairEngine
from passwordgame.errors import InjectionError, ObserveError
from passwordgame.facts.base import FactBoundary, FactProviders
from passwordgame.facts.celestial import FixedClock
from passwordgame.policy import Policy
from passwordgame.solvers.registry import SolverLibrary
from passwordgame.state import ConstraintState

NOW = datetime(2026, 10, 16, 14, 5)


class FakeSurface:
    """In-memory game surface: reveals one more rule per poll."""

    def __init__(self, rules=()):
        self.rules = list(rules)
        self.shown = 0
        self.text = ""
        self.pushes: list[str] = []
        self.failing_pushes = 0
        self.failing_reads = 0

    def poll(self):
        if self.shown < len(self.rules):
            self.shown += 1
        return self.rules[: self.shown]

    def set_text(self, text):
        if self.failing_pushes:
            self.failing_pushes -= 1
            raise InjectionError("keyboard unavailable")
        self.text = text
        self.pushes.append(text)

    def read_text(self):
        if self.failing_reads:
            self.failing_reads -= 1
            raise ObserveError("field not visible")
        return self.text


class StubVideos:
    def __init__(self, table=None):
        self.table = dict(table or {})
        self.calls: list[int] = []

    def video_for(self, seconds):
        self.calls.append(seconds)
        return self.table.get(seconds)


class StubGeo:
    def __init__(self, country):
        self.country = country

    def country_at(self, lat, lon):
        return self.country


class StubChess:
    def __init__(self, move):
        self.move = move

    def best_move(self, fen):
        return self.move


class StubWordle:
    def __init__(self, word):
        self.word = word
        self.days = []

    def answer(self, day):
        self.days.append(day)
        return self.word


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def providers(clock):
    return FactProviders(
        videos=StubVideos({755: "dQw4w9WgXcQ"}),
        geo=StubGeo("United States"),
        chess=StubChess("Qxf7#"),
        wordle=StubWordle("crane"),
        clock=clock,
    )


@pytest.fixture
def library(providers):
    lib = SolverLibrary(providers, boundary=FactBoundary(timeout=2.0, retries=0), time_limit=10.0)
    yield lib
    lib.close()


@pytest.fixture
def engine(library):
    return RepairEngine(library, Policy())


@pytest.fixture
def state():
    return ConstraintState()


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def make_surface():
    return FakeSurface
