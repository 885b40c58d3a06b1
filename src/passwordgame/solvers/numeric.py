"""
Strategies for the numeric families.

Digit sums and atomic number sums are repaired in two moves: remove (or lower)
unprotected contributors while the total is above target, then append a minimal
multiset of tokens covering the deficit, chosen by the CP-SAT fill model in
`passwordgame.model.build`.
"""

from __future__ import annotations

import logging
from math import prod
from typing import Optional

from passwordgame.data import ROMAN_LETTERS
from passwordgame.model.build import solve_fill
from passwordgame.rules import library as rules_lib
from passwordgame.scan import (
    MAX_ROMAN,
    digits,
    elements,
    int_to_roman,
    non_numeral_elements,
    roman_numerals,
)
from passwordgame.solvers.base import (
    Infeasible,
    Solver,
    banned_letters,
    drop_indices,
    join,
    place_tokens,
)

logger = logging.getLogger(__name__)

DIGIT_TOKENS = tuple((str(d), d) for d in range(9, 0, -1))


class FillSolver(Solver):
    def __init__(self, time_limit: Optional[float] = 2.0, fill_solutions: int = 2):
        self.time_limit = time_limit
        self.fill_solutions = fill_solutions

    def _fill(self, deficit, tokens):
        return solve_fill(
            deficit, tokens, max_solutions=self.fill_solutions, time_limit=self.time_limit
        )


class DigitSumSolver(FillSolver):
    FAMILIES = (rules_lib.DigitSum,)

    def _propose(self, text, rule, context):
        found = digits(text)
        current = sum(d for d, _ in found)
        locked = sum(d for d, i in found if i in context.protected)
        if locked > rule.target:
            return Infeasible(
                rule, f"protected digits alone sum to {locked} > {rule.target}"
            )

        free = sorted(
            ((d, i) for d, i in found if d and i not in context.protected), reverse=True
        )
        if current > rule.target:
            return self._lower(text, free, current - rule.target)

        fills = self._fill(rule.target - current, DIGIT_TOKENS)
        if not fills:
            return Infeasible(rule, f"no digits sum to {rule.target - current}")
        out = []
        for fill in fills:
            token = "".join(fill)
            out.append((join(text, token), f"append digits {token}"))
            out.append((join(token, text), f"prepend digits {token}"))
        return out

    @staticmethod
    def _lower(text, free, excess):
        # a) delete the largest digits that fit into the excess, lower one more
        chars = list(text)
        removed = []
        remaining = excess
        leftover = []
        for d, i in free:
            if d <= remaining:
                removed.append(i)
                remaining -= d
            else:
                leftover.append((d, i))
        if remaining:
            d, i = min(leftover)
            chars[i] = str(d - remaining)
        removal = drop_indices("".join(chars), removed)

        # b) lower digits in place, largest first, keeping the length
        chars = list(text)
        remaining = excess
        for d, i in free:
            step = min(d, remaining)
            chars[i] = str(d - step)
            remaining -= step
            if not remaining:
                break

        return [
            (removal, f"remove digits to shed {excess}"),
            ("".join(chars), f"lower digits in place by {excess}"),
        ]


def _factor_plans(value: int) -> list[list[int]]:
    """Ways to write `value` as a product of numeral-sized factors, fewest first."""
    if value == 1:
        return [[]]
    plans = []
    if value <= MAX_ROMAN:
        plans.append([value])

    # greedy: peel off the largest divisor that is still a valid numeral
    greedy = []
    rest = value
    while rest > 1:
        divisor = next(
            (d for d in range(min(rest, MAX_ROMAN), 1, -1) if rest % d == 0), None
        )
        if divisor is None:
            return plans
        greedy.append(divisor)
        rest //= divisor
    plans.append(greedy)

    primes = []
    rest = value
    p = 2
    while p * p <= rest:
        while rest % p == 0:
            primes.append(p)
            rest //= p
        p += 1
    if rest > 1:
        primes.append(rest)
    if all(f <= MAX_ROMAN for f in primes):
        plans.append(primes)

    unique = []
    for plan in plans:
        if sorted(plan) not in [sorted(u) for u in unique]:
            unique.append(plan)
    return unique


class RomanProductSolver(Solver):
    FAMILIES = (rules_lib.RomanNumeralProduct,)

    def _propose(self, text, rule, context):
        found = roman_numerals(text)

        def is_locked(start, length):
            return any(i in context.protected for i in range(start, start + length))

        locked = [(v, s, n) for v, s, n in found if is_locked(s, n)]
        free = [(v, s, n) for v, s, n in found if not is_locked(s, n)]

        if rule.target == 0:
            if locked:
                return Infeasible(rule, "protected numerals keep the product above 0")
            drop = [i for _, s, n in free for i in range(s, s + n)]
            return [(drop_indices(text, drop), "remove every numeral")]

        base = prod(v for v, _, _ in locked)
        if rule.target % base:
            return Infeasible(
                rule, f"protected numerals multiply to {base}, which does not divide {rule.target}"
            )
        rest = rule.target // base

        # reuse free numerals that divide what is left, largest first
        reused = []
        share = rest
        for v, s, n in sorted(free, reverse=True):
            if share % v == 0:
                reused.append((v, s, n))
                share //= v
        plans = [(reused, share)]
        if reused:
            plans.append(([], rest))

        out = []
        for keep, remaining in plans:
            kept_spans = {(s, n) for _, s, n in keep}
            drop = [
                i for _, s, n in free if (s, n) not in kept_spans for i in range(s, s + n)
            ]
            trimmed = drop_indices(text, drop)
            for factors in _factor_plans(remaining):
                numerals = [int_to_roman(f) for f in factors]
                if not numerals and not locked and not keep:
                    numerals = ["I"]
                candidate = join(trimmed, " ".join(numerals)) if numerals else trimmed
                label = "reuse %d, append %s" % (len(keep), numerals or "nothing")
                out.append((candidate, label))
        if not out:
            return Infeasible(rule, f"{rest} has a prime factor above {MAX_ROMAN}")
        return out


class AtomicSumSolver(FillSolver):
    FAMILIES = (rules_lib.AtomicNumberSum,)

    def _propose(self, text, rule, context):
        found = elements(text)
        current = sum(z for _, z, _ in found)

        # Numeral letters stay: removing them would change roman numerals
        removable = sorted(
            (
                (z, symbol, index)
                for symbol, z, index in found
                if symbol[0] not in ROMAN_LETTERS
                and not any(i in context.protected for i in range(index, index + len(symbol)))
            ),
            reverse=True,
        )
        drop = []
        for z, symbol, index in removable:
            if current <= rule.target:
                break
            if current - z >= rule.target:
                drop.extend(range(index, index + len(symbol)))
                current -= z
        if current > rule.target:
            return Infeasible(
                rule, f"cannot shed atomic numbers below {current} (target {rule.target})"
            )
        trimmed = drop_indices(text, drop)
        if current == rule.target:
            return [(trimmed, "remove elements")]

        banned = banned_letters(context.peers)
        if banned is None:
            return Infeasible(rule, "letters are forbidden, no element can be added")
        tokens = sorted(
            (
                (symbol, z)
                for symbol, z in non_numeral_elements()
                if not banned & set(symbol.lower())
            ),
            key=lambda t: -t[1],
        )
        fills = self._fill(rule.target - current, tokens)
        if not fills:
            return Infeasible(rule, f"no elements sum to {rule.target - current}")
        return [
            (join(trimmed, "".join(fill)), f"append elements {'+'.join(fill)}")
            for fill in fills
        ]


class LeapYearSolver(Solver):
    FAMILIES = (rules_lib.LeapYear,)

    def _propose(self, text, rule, context):
        return place_tokens(text, ("0", "2000"), context.protected)
