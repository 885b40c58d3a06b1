"""Fact provider capabilities and the timeout boundary around them.

Providers are narrow, read-only lookups that return a value or ``None`` for
"not found". The core never calls them directly: every call goes through
`FactBoundary.call`, which bounds it with a timeout, retries timeouts with
exponential backoff, caches answers, and converts provider faults into a
"not found" result so nothing is raised into the reconciliation loop.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Hashable, Optional, Protocol

from passwordgame.facts.celestial import LunarCalculator, SystemClock

logger = logging.getLogger(__name__)

__all__ = [
    "VideoProvider",
    "GeoProvider",
    "ChessProvider",
    "WordleProvider",
    "CelestialProvider",
    "Clock",
    "FactProviders",
    "Lookup",
    "FactResult",
    "FactBoundary",
]


class VideoProvider(Protocol):
    def video_for(self, seconds: int) -> Optional[str]: ...


class GeoProvider(Protocol):
    def country_at(self, lat: float, lon: float) -> Optional[str]: ...


class ChessProvider(Protocol):
    def best_move(self, fen: str) -> Optional[str]: ...


class WordleProvider(Protocol):
    def answer(self, day: date) -> Optional[str]: ...


class CelestialProvider(Protocol):
    def moon_phase(self, moment: datetime) -> Optional[str]: ...


class Clock(Protocol):
    def now(self) -> datetime: ...


@dataclass(slots=True)
class FactProviders:
    """The fact capabilities available to solvers. Any of them may be absent."""

    videos: Optional[VideoProvider] = None
    geo: Optional[GeoProvider] = None
    chess: Optional[ChessProvider] = None
    wordle: Optional[WordleProvider] = None
    celestial: Optional[CelestialProvider] = field(default_factory=LunarCalculator)
    clock: Clock = field(default_factory=SystemClock)


class Lookup(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"


@dataclass(frozen=True, slots=True)
class FactResult:
    status: Lookup
    value: Any = None
    detail: str = ""

    @property
    def found(self) -> bool:
        return self.status is Lookup.FOUND


class FactBoundary:
    """Runs each provider call on its own daemon thread with a bounded wait.

    A call that exceeds `timeout` is abandoned and retried up to `retries`
    more times, sleeping `backoff * 2**attempt` in between. An abandoned
    worker may still finish in the background but never keeps the process
    alive.
    """

    def __init__(
        self,
        *,
        timeout: float = 5.0,
        retries: int = 2,
        backoff: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        if retries < 0:
            raise ValueError("retries must be >= 0")
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self._sleep = sleep
        self._cache: dict[Hashable, Any] = {}

    def _attempt(self, name: str, fn: Callable[..., Any], args: tuple) -> dict[str, Any]:
        outcome: dict[str, Any] = {}

        def target() -> None:
            try:
                outcome["value"] = fn(*args)
            except Exception as exc:
                outcome["error"] = exc

        worker = threading.Thread(target=target, name=f"fact-lookup-{name}", daemon=True)
        worker.start()
        worker.join(self.timeout)
        return outcome

    def call(self, name: str, fn: Callable[..., Any], *args: Any) -> FactResult:
        key = (name, args)
        if key in self._cache:
            return FactResult(Lookup.FOUND, self._cache[key])

        for attempt in range(self.retries + 1):
            outcome = self._attempt(name, fn, args)
            if "error" in outcome:
                exc = outcome["error"]
                logger.warning("Fact lookup %s%r failed: %s", name, args, exc)
                return FactResult(Lookup.NOT_FOUND, detail=f"provider error: {exc}")
            if "value" not in outcome:
                logger.warning(
                    "Fact lookup %s%r timed out after %.2fs (attempt %d/%d)",
                    name,
                    args,
                    self.timeout,
                    attempt + 1,
                    self.retries + 1,
                )
                if attempt < self.retries:
                    self._sleep(self.backoff * 2**attempt)
                continue

            value = outcome["value"]
            if value is None:
                logger.info("Fact lookup %s%r found nothing", name, args)
                return FactResult(Lookup.NOT_FOUND, detail="not found")
            self._cache[key] = value
            return FactResult(Lookup.FOUND, value)

        return FactResult(
            Lookup.TIMEOUT,
            detail=f"timed out {self.retries + 1} time(s) after {self.timeout:.2f}s",
        )

    def close(self) -> None:
        """Forget cached answers. Abandoned workers are daemons and need no shutdown."""
        self._cache.clear()
