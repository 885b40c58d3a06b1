"""
Strategies for fact-backed families.

`resolve` fetches the external answer through the `FactBoundary` and returns
the rule with its answers attached; `propose` then places an answer like any
token rule. Provider gaps and timeouts come back as `Infeasible` values.
"""

from __future__ import annotations

import logging

from passwordgame.data import MOON_EMOJIS
from passwordgame.facts.base import FactBoundary, FactProviders, FactResult, Lookup
from passwordgame.rules import library as rules_lib
from passwordgame.rules.base import TokenRule
from passwordgame.scan import letters
from passwordgame.solvers.base import (
    Infeasible,
    InfeasibleKind,
    TokenSolver,
    removal_candidates,
)

logger = logging.getLogger(__name__)

SACRIFICE_POOL = "ghijklmnopqrstuwyz"


def _infeasible(rule, result: FactResult) -> Infeasible:
    if result.status is Lookup.TIMEOUT:
        return Infeasible(rule, result.detail, InfeasibleKind.TIMEOUT)
    return Infeasible(rule, result.detail or "not found", InfeasibleKind.NOT_FOUND)


class FactSolver(TokenSolver):
    """Base for solvers whose rule answers come from a provider."""

    PROVIDER: str = ""

    def __init__(self, providers: FactProviders, boundary: FactBoundary):
        self.providers = providers
        self.boundary = boundary

    def resolve(self, rule, text, context=None):
        if not rule.needs_facts:
            return rule
        provider = getattr(self.providers, self.PROVIDER, None) if self.PROVIDER else None
        if self.PROVIDER and provider is None:
            return Infeasible(
                rule, f"no {self.PROVIDER} provider configured", InfeasibleKind.NOT_FOUND
            )
        result = self._lookup(rule, provider)
        if not result.found:
            logger.warning("Could not resolve %s: %s", rule.describe(), result.detail)
            return _infeasible(rule, result)
        logger.info("Resolved %s -> %s", rule.describe(), list(result.value))
        return rule.with_answers(result.value)

    def _lookup(self, rule, provider) -> FactResult:
        raise NotImplementedError


class WordleSolver(FactSolver):
    FAMILIES = (rules_lib.WordleAnswer,)
    PROVIDER = "wordle"

    def _lookup(self, rule, provider):
        today = self.providers.clock.now().date()
        result = self.boundary.call("wordle", provider.answer, today)
        if result.found:
            return FactResult(Lookup.FOUND, (str(result.value).strip().lower(),))
        return result


class MoonPhaseSolver(FactSolver):
    FAMILIES = (rules_lib.MoonPhaseMatch,)
    PROVIDER = "celestial"

    def _lookup(self, rule, provider):
        moment = self.providers.clock.now()
        result = self.boundary.call("moon_phase", provider.moon_phase, moment)
        if result.found:
            emojis = MOON_EMOJIS.get(result.value)
            if emojis is None:
                return FactResult(Lookup.NOT_FOUND, detail=f"unknown moon phase {result.value!r}")
            return FactResult(Lookup.FOUND, emojis)
        return result


class CountrySolver(FactSolver):
    FAMILIES = (rules_lib.CountryName,)
    PROVIDER = "geo"

    def _lookup(self, rule, provider):
        result = self.boundary.call("country", provider.country_at, rule.lat, rule.lon)
        if result.found:
            name = str(result.value).strip().lower()
            return FactResult(Lookup.FOUND, tuple(dict.fromkeys((name.replace(" ", ""), name))))
        return result


class ChessSolver(FactSolver):
    FAMILIES = (rules_lib.ChessBestMove,)
    PROVIDER = "chess"

    def _lookup(self, rule, provider):
        result = self.boundary.call("chess", provider.best_move, rule.fen)
        if result.found:
            return FactResult(Lookup.FOUND, (str(result.value).strip(),))
        return result


class VideoSolver(FactSolver):
    """Find a video of the requested length, allowing one second either way."""

    FAMILIES = (rules_lib.VideoDurationMatch,)
    PROVIDER = "videos"

    def _lookup(self, rule, provider):
        timed_out = None
        for seconds in (rule.seconds, rule.seconds - 1, rule.seconds + 1):
            if seconds < 0:
                continue
            result = self.boundary.call("video", provider.video_for, seconds)
            if result.found:
                return FactResult(Lookup.FOUND, (str(result.value).strip(),))
            if result.status is Lookup.TIMEOUT:
                timed_out = result
        return timed_out or FactResult(
            Lookup.NOT_FOUND, detail=f"no video of {rule.seconds}s (+-1s)"
        )


class TimeSolver(FactSolver):
    FAMILIES = (rules_lib.CurrentTime,)

    def _lookup(self, rule, provider):
        now = self.providers.clock.now()
        hour = now.hour % 12 or 12
        return FactResult(Lookup.FOUND, (f"{hour}:{now.minute:02d}",))


class SacrificeSolver(FactSolver):
    """Choose the sacrificed letters, then strip them from the password."""

    FAMILIES = (rules_lib.SacrificeLetters,)

    def resolve(self, rule, text, context=None):
        if not rule.needs_facts:
            return rule
        peers = context.peers if context is not None else ()
        protected = context.protected if context is not None else frozenset()
        lowered = text.lower()
        wanted = "".join(
            tok.lower() for peer in peers if isinstance(peer, TokenRule) for tok in peer.tokens()
        )

        absent = [c for c in SACRIFICE_POOL if c not in lowered]
        picks = [c for c in absent if c not in wanted]
        picks += [c for c in absent if c not in picks]
        # Letters that appear only outside protected spans can still be removed
        locked = {ch.lower() for ch, i in letters(text) if i in protected}
        picks += [c for c in SACRIFICE_POOL if c not in picks and c not in locked]
        if len(picks) < rule.count:
            return Infeasible(rule, "not enough letters left to sacrifice")
        chosen = tuple(picks[: rule.count])
        logger.info("Sacrificing letters %s", ", ".join(chosen))
        return rule.with_answers(chosen)

    def _propose(self, text, rule, context):
        offending = [i for ch, i in letters(text) if ch.lower() in rule.answers]
        return removal_candidates(
            text, offending, context.protected, "sacrificed letters"
        ) or Infeasible(rule, "sacrificed letters already absent")
