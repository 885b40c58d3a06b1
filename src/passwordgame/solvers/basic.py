"""Strategies for the basic families: length bounds, character classes, removal."""

from __future__ import annotations

from passwordgame.data import FIRE
from passwordgame.glyphs import split_glyphs
from passwordgame.rules import library as rules_lib
from passwordgame.scan import letters
from passwordgame.solvers.base import (
    Infeasible,
    Solver,
    TokenSolver,
    banned_letters,
    join,
    removal_candidates,
)

FILLERS = ("z", "-")


class MinLengthSolver(Solver):
    FAMILIES = (rules_lib.MinLength,)

    def _propose(self, text, rule, context):
        deficit = rule.length - len(split_glyphs(text))
        banned = banned_letters(context.peers)
        fillers = FILLERS
        if banned is None or FILLERS[0] in banned:
            fillers = tuple(reversed(FILLERS))
        return [(text + filler * deficit, f"append {deficit} x {filler!r}") for filler in fillers]


class MaxLengthSolver(Solver):
    FAMILIES = (rules_lib.MaxLength,)

    def _propose(self, text, rule, context):
        glyphs = split_glyphs(text)
        excess = len(glyphs) - rule.length
        starts = []
        pos = 0
        for glyph in glyphs:
            starts.append(pos)
            pos += len(glyph)

        keep = list(range(len(glyphs)))
        dropped = 0
        for g in reversed(range(len(glyphs))):
            if dropped == excess:
                break
            span = range(starts[g], starts[g] + len(glyphs[g]))
            if any(i in context.protected for i in span):
                continue
            keep.remove(g)
            dropped += 1

        out = []
        if dropped == excess:
            out.append(("".join(glyphs[g] for g in keep), f"drop {excess} unprotected glyphs"))
        out.append(("".join(glyphs[: rule.length]), f"truncate to {rule.length} glyphs"))
        return out


class CharacterClassSolver(TokenSolver):
    """Tokens per family for the character-class rules."""

    FAMILIES = (
        rules_lib.ContainsDigit,
        rules_lib.ContainsUppercase,
        rules_lib.ContainsSpecial,
    )
    BY_FAMILY = {
        rules_lib.ContainsDigit: ("0", "9"),
        rules_lib.ContainsUppercase: ("Z", "Q"),
        rules_lib.ContainsSpecial: ("!", "#"),
    }

    def tokens_for(self, rule, context):
        return self.BY_FAMILY[type(rule)]


class SubstringSolver(TokenSolver):
    FAMILIES = (rules_lib.ContainsSubstring, rules_lib.CaptchaToken)


class EndsWithDigitSolver(Solver):
    FAMILIES = (rules_lib.EndsWithDigit,)

    def _propose(self, text, rule, context):
        return [(join(text, d), f"append {d!r}") for d in ("0", "9")]


class EndsWithWordSolver(Solver):
    FAMILIES = (rules_lib.EndsWithWord,)

    def _propose(self, text, rule, context):
        word = rule.word
        out = []
        for k in range(min(len(word), len(text)) - 1, 0, -1):
            if text.endswith(word[:k]):
                out.append((text + word[k:], f"complete {word!r} from its first {k} chars"))
                break
        out.append((join(text, word), f"append {word!r}"))
        return out


class LetterRemovalSolver(Solver):
    FAMILIES = (rules_lib.NoLetters, rules_lib.ForbiddenLetters)

    def _propose(self, text, rule, context):
        if isinstance(rule, rules_lib.ForbiddenLetters):
            offending = [i for ch, i in letters(text) if ch.lower() in rule.letters]
        else:
            offending = [i for _, i in letters(text)]
        return removal_candidates(text, offending, context.protected, "letters") or Infeasible(
            rule, "no letters to remove"
        )


class NoFireSolver(Solver):
    FAMILIES = (rules_lib.NoFire,)

    def _propose(self, text, rule, context):
        return [(text.replace(FIRE, ""), "put out the fire")]


class AlwaysSatisfiedSolver(Solver):
    FAMILIES = (rules_lib.SkipRule, rules_lib.FinalCheck)

    def _propose(self, text, rule, context):
        return Infeasible(rule, "rule has no repair strategy")
