"""Push the ledger text to the surface and keep the two in agreement."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from passwordgame.errors import InjectionError, ObserveError, SynchronizationError
from passwordgame.io.surface import InputSink, TextObserver
from passwordgame.state import ConstraintState

logger = logging.getLogger(__name__)

__all__ = ["SyncReport", "Synchronizer"]


@dataclass(frozen=True, slots=True)
class SyncReport:
    """What one `Synchronizer.sync` call did.

    Attributes:
        pushed: The text was (re)sent to the sink.
        drift: The observed text differed from the ledger before this call.
        attempts: Boundary attempts used, including the successful one.
    """

    pushed: bool
    drift: bool
    attempts: int


class Synchronizer:
    """One-way sync from `ConstraintState.text` to the surface.

    A new text revision is always pushed; flag-only revisions are not. Otherwise the surface is read back;
    if it drifted (the user typed, an event fired) the ledger text is pushed
    again. The ledger is never modified here.
    """

    def __init__(
        self,
        sink: InputSink,
        observer: TextObserver,
        *,
        retries: int = 3,
        backoff: float = 0.05,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.sink = sink
        self.observer = observer
        self.retries = retries
        self.backoff = backoff
        self._sleep = sleep
        self._pushed_revision: Optional[int] = None

    def sync(self, state: ConstraintState) -> SyncReport:
        text, revision = state.text, state.text_revision
        last_error: Optional[Exception] = None
        for attempt in range(self.retries + 1):
            try:
                return self._sync_once(text, revision, attempt + 1)
            except (InjectionError, ObserveError) as exc:
                last_error = exc
                wait = self.backoff * 2**attempt
                logger.warning(
                    "Sync attempt %d failed: %s (retrying in %.2fs)", attempt + 1, exc, wait
                )
                if attempt < self.retries:
                    self._sleep(wait)
        raise SynchronizationError(
            f"Failed to synchronize revision {revision} after {self.retries + 1} attempts"
        ) from last_error

    def _sync_once(self, text: str, revision: int, attempts: int) -> SyncReport:
        if revision != self._pushed_revision:
            self.sink.set_text(text)
            self._pushed_revision = revision
            logger.debug("Pushed revision %d", revision)
            return SyncReport(pushed=True, drift=False, attempts=attempts)

        observed = self.observer.read_text()
        if observed == text:
            return SyncReport(pushed=False, drift=False, attempts=attempts)
        logger.warning("Surface drifted from revision %d: %r != %r", revision, observed, text)
        self.sink.set_text(text)
        return SyncReport(pushed=True, drift=True, attempts=attempts)
