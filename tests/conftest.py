from __future__ import annotations

import heapq
import itertools
from typing import Callable

import pytest

from config import Settings
from context import AppContext
from drafts import DraftStore


class FakeCall:
    def __init__(self, fn: Callable[[], None]):
        self._fn = fn
        self.fired = False
        self.cancelled = False

    @property
    def pending(self) -> bool:
        return not (self.fired or self.cancelled)

    def run(self) -> None:
        if not self.pending:
            return
        self.fired = True
        self._fn()

    def cancel(self) -> None:
        if self.pending:
            self.cancelled = True


class FakeScheduler:
    """Manual clock: callbacks run only when the test advances time."""

    def __init__(self) -> None:
        self.now = 0
        self._queue: list[tuple[int, int, FakeCall]] = []
        self._seq = itertools.count()

    def schedule(self, delay_ms: int, fn: Callable[[], None]) -> FakeCall:
        call = FakeCall(fn)
        heapq.heappush(self._queue, (self.now + delay_ms, next(self._seq), call))
        return call

    def cancel(self, call) -> None:
        if call is not None:
            call.cancel()

    @property
    def pending(self) -> list[FakeCall]:
        return [c for _, _, c in self._queue if c.pending]

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, call = heapq.heappop(self._queue)
            self.now = due
            call.run()
        self.now = target


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def id_factory() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"d{next(counter)}"


@pytest.fixture
def clock() -> Callable[[], str]:
    counter = itertools.count(0)
    return lambda: f"2024-05-01T12:00:{next(counter):02d}+00:00"


@pytest.fixture
def store(id_factory) -> DraftStore:
    return DraftStore(id_factory=id_factory)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(state_path=str(tmp_path / "state.json"), autosave_delay_ms=600)


@pytest.fixture
def ctx(settings, scheduler, id_factory, clock) -> AppContext:
    return AppContext.open(settings, scheduler, id_factory=id_factory, clock=clock)
