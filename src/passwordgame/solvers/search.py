"""Best-first search over password lengths for the length-dependent families."""

from __future__ import annotations

import logging

from passwordgame.glyphs import glyph_len
from passwordgame.rules import library as rules_lib
from passwordgame.scan import is_prime
from passwordgame.solvers.base import Infeasible, Solver

logger = logging.getLogger(__name__)

PAD = "-"


class LengthSearchSolver(Solver):
    """Grow the password to a length L that suits every length rule.

    Targets are tried in increasing L (the smallest change first). When an
    `includes_length` rule is active the decimal L is appended; when a
    `prime_length` rule is active only prime L are considered. Candidates that
    keep every peer valid rank first.
    """

    FAMILIES = (rules_lib.IncludesLength, rules_lib.PrimeLength)

    def _propose(self, text, rule, context):
        active = (rule,) + context.peers
        with_token = any(isinstance(r, rules_lib.IncludesLength) for r in active)
        need_prime = any(isinstance(r, rules_lib.PrimeLength) for r in active)
        base = glyph_len(text)

        clean = []
        broken = []
        for step in range(1, context.search_cap + 1):
            length = base + step
            if need_prime and not is_prime(length):
                continue
            token = str(length) if with_token else ""
            pad = length - base - len(token)
            if pad < 0:
                continue
            candidate = text + PAD * pad + token
            if not rule.validate(candidate):
                continue
            failing = sum(not peer.validate(candidate) for peer in context.peers)
            entry = (candidate, f"length {length}: pad {pad}, token {token!r}")
            if failing:
                broken.append((failing, step, entry))
            else:
                clean.append(entry)
                if len(clean) >= context.max_candidates:
                    break

        if not clean and not broken:
            return Infeasible(
                rule, f"no suitable length within {context.search_cap} of {base}"
            )
        logger.debug(
            "Length search from %d: %d clean, %d with regressions", base, len(clean), len(broken)
        )
        return clean + [entry for _, _, entry in sorted(broken)]
