"""
Solver contracts.

- Solver: one repair strategy for one or more rule families. `propose` never
  mutates anything; it returns a `SolveOutcome` describing ranked candidate
  texts (best first), that the rule already holds, or why it cannot help.
- Fact-backed families also implement `resolve`, which attaches the external
  answers to a rule before it can be proposed for.

Helpers at the bottom (`join`, `place_tokens`, `drop_indices`, ...) are the
shared building blocks of the strategies in this package.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Iterable, Optional, Sequence, Union

from passwordgame.data import ROMAN_LETTERS
from passwordgame.rules.base import Rule, Span, TokenRule
from passwordgame.rules.library import ForbiddenLetters, NoLetters, SacrificeLetters

logger = logging.getLogger(__name__)

__all__ = [
    "CandidateEdit",
    "Edits",
    "AlreadySatisfied",
    "InfeasibleKind",
    "Infeasible",
    "SolveOutcome",
    "SolveContext",
    "Solver",
    "TokenSolver",
    "join",
    "place_tokens",
    "protected_spans",
    "drop_indices",
    "removal_candidates",
    "banned_letters",
]


@dataclass(frozen=True, slots=True)
class CandidateEdit:
    text: str
    rule_id: str
    rationale: str


@dataclass(frozen=True, slots=True)
class Edits:
    candidates: tuple[CandidateEdit, ...]


@dataclass(frozen=True, slots=True)
class AlreadySatisfied:
    pass


class InfeasibleKind(Enum):
    STRATEGY = "strategy"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"


@dataclass(frozen=True, slots=True)
class Infeasible:
    """A solver could not produce any edit for `rule`.

    Attributes:
        rule: The rule that could not be served.
        reason: Human-readable explanation.
        kind: STRATEGY (no edit exists under the strategy), NOT_FOUND (an
            external fact has no answer) or TIMEOUT (the fact lookup timed out).
    """

    rule: Rule
    reason: str
    kind: InfeasibleKind = InfeasibleKind.STRATEGY

    @property
    def retryable(self) -> bool:
        return self.kind is InfeasibleKind.TIMEOUT


SolveOutcome = Union[Edits, AlreadySatisfied, Infeasible]


@dataclass(frozen=True, slots=True)
class SolveContext:
    """What a strategy may know about the rest of the ledger.

    Attributes:
        protected: Code-point indices covered by anchors of satisfied rules.
        peers: The other active rules, in discovery order.
        search_cap: Iteration bound for search strategies.
        max_candidates: How many ranked candidates to return at most.
    """

    protected: frozenset[int] = frozenset()
    peers: tuple[Rule, ...] = ()
    search_cap: int = 500
    max_candidates: int = 6


class Solver:
    """Base class for repair strategies.

    Subclasses list the rule classes they serve in `FAMILIES` and implement
    `_propose`, returning `(text, rationale)` pairs or an `Infeasible`.
    """

    FAMILIES: ClassVar[tuple[type[Rule], ...]] = ()

    def propose(
        self, text: str, rule: Rule, context: Optional[SolveContext] = None
    ) -> SolveOutcome:
        context = context or SolveContext()
        if rule.validate(text):
            return AlreadySatisfied()
        if rule.needs_facts:
            return Infeasible(
                rule, "external facts are not resolved", InfeasibleKind.NOT_FOUND
            )

        proposed = self._propose(text, rule, context)
        if isinstance(proposed, Infeasible):
            logger.debug("%s: %s", rule.describe(), proposed.reason)
            return proposed

        seen = {text}
        candidates = []
        for candidate, rationale in proposed:
            if candidate in seen:
                continue
            seen.add(candidate)
            candidates.append(CandidateEdit(candidate, rule.rule_id, rationale))
            if len(candidates) >= context.max_candidates:
                break
        if not candidates:
            return Infeasible(rule, "strategy produced no new text")
        return Edits(tuple(candidates))

    def _propose(
        self, text: str, rule: Rule, context: SolveContext
    ) -> Union[Iterable[tuple[str, str]], Infeasible]:
        raise NotImplementedError

    def resolve(
        self, rule: Rule, text: str, context: Optional[SolveContext] = None
    ) -> Union[Rule, Infeasible]:
        """Attach external facts to `rule`. Identity for self-contained families."""
        return rule


class TokenSolver(Solver):
    """Place one of the rule's tokens (or a fixed list) into the text."""

    TOKENS: ClassVar[tuple[str, ...]] = ()

    def tokens_for(self, rule: Rule, context: SolveContext) -> Sequence[str]:
        if self.TOKENS:
            return self.TOKENS
        assert isinstance(rule, TokenRule)
        return rule.tokens()

    def _propose(self, text, rule, context):
        tokens = [tok for tok in self.tokens_for(rule, context) if tok]
        if not tokens:
            return Infeasible(rule, "no token to place")
        return place_tokens(text, tokens, context.protected)


# ---------- Helpers ----------


def _fuses(left: str, right: str) -> bool:
    if not left or not right:
        return False
    a, b = left[-1], right[0]
    digit = "0" <= a <= "9" and "0" <= b <= "9"
    roman = a in ROMAN_LETTERS and b in ROMAN_LETTERS
    return digit or roman


def join(*parts: str, sep: str = " ") -> str:
    """Concatenate `parts`, inserting `sep` where digits or numerals would merge."""
    out = ""
    for part in parts:
        if _fuses(out, part):
            out += sep
        out += part
    return out


def protected_spans(protected: Iterable[int]) -> list[Span]:
    """Group protected indices into maximal contiguous spans."""
    spans: list[Span] = []
    for idx in sorted(protected):
        if spans and spans[-1][1] == idx:
            spans[-1] = (spans[-1][0], idx + 1)
        else:
            spans.append((idx, idx + 1))
    return spans


def place_tokens(
    text: str, tokens: Sequence[str], protected: Iterable[int] = ()
) -> list[tuple[str, str]]:
    """Candidates placing each token at the end, the start, then around protected spans."""
    spots = [("append", len(text)), ("prepend", 0)]
    for start, end in protected_spans(protected):
        spots.append((f"insert before {start}", start))
        spots.append((f"insert after {end}", end))

    out = []
    for where, pos in spots:
        for token in tokens:
            out.append((join(text[:pos], token, text[pos:]), f"{where}: {token!r}"))
    return out


def drop_indices(text: str, indices: Iterable[int]) -> str:
    drop = set(indices)
    return "".join(ch for i, ch in enumerate(text) if i not in drop)


def removal_candidates(
    text: str, offending: Sequence[int], protected: frozenset[int], what: str
) -> Union[list[tuple[str, str]], None]:
    """Delete offending characters: unprotected ones first, then all of them."""
    if not offending:
        return None
    free = [i for i in offending if i not in protected]
    out = []
    if free:
        out.append((drop_indices(text, free), f"remove {len(free)} unprotected {what}"))
    out.append((drop_indices(text, offending), f"remove all {len(offending)} {what}"))
    return out


def banned_letters(peers: Iterable[Rule]) -> Optional[frozenset[str]]:
    """Lowercase letters the peers forbid; None when letters are forbidden outright."""
    banned: set[str] = set()
    for peer in peers:
        if isinstance(peer, NoLetters):
            return None
        if isinstance(peer, ForbiddenLetters):
            banned.update(peer.letters)
        elif isinstance(peer, SacrificeLetters):
            banned.update(peer.answers)
    return frozenset(banned)
