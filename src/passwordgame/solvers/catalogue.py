"""Strategies for rules satisfied by a token from a fixed catalogue."""

from __future__ import annotations

from passwordgame.data import EGG, STRENGTH
from passwordgame.rules import library as rules_lib
from passwordgame.scan import MAX_ROMAN, int_to_roman, non_numeral_elements
from passwordgame.solvers.base import Infeasible, Solver, TokenSolver, banned_letters


class MonthSolver(TokenSolver):
    FAMILIES = (rules_lib.ContainsMonth,)

    def tokens_for(self, rule, context):
        return sorted(rule.tokens(), key=len)


class ListedTokenSolver(TokenSolver):
    FAMILIES = (rules_lib.ContainsSponsor, rules_lib.ContainsAffirmation, rules_lib.HexColor)

    def tokens_for(self, rule, context):
        tokens = list(rule.tokens())
        if isinstance(rule, rules_lib.HexColor):
            tokens.append("#" + rule.hex)
        return tokens


class RomanNumeralSolver(TokenSolver):
    FAMILIES = (rules_lib.ContainsRomanNumeral,)

    def tokens_for(self, rule, context):
        tokens = []
        for peer in context.peers:
            if isinstance(peer, rules_lib.RomanNumeralProduct) and 1 <= peer.target <= MAX_ROMAN:
                tokens.append(int_to_roman(peer.target))
        return tokens + ["X", "I"]


class ElementSymbolSolver(TokenSolver):
    """Place an element symbol that cannot be mistaken for a roman numeral."""

    FAMILIES = (rules_lib.ElementSymbol,)
    PREFERRED = ("He", "Be", "Ne")

    def tokens_for(self, rule, context):
        banned = banned_letters(context.peers)
        if banned is None:
            return ()
        symbols = [s for s in self.PREFERRED] + [s for s, _ in non_numeral_elements()]
        return [
            s
            for s in dict.fromkeys(symbols)
            if len(s) >= rule.min_letters and not banned & set(s.lower())
        ][:3]


class EggSolver(Solver):
    FAMILIES = (rules_lib.ContainsEgg,)

    def _propose(self, text, rule, context):
        return [(EGG + text, "prepend egg"), (text + EGG, "append egg")]


class StrengthSolver(Solver):
    FAMILIES = (rules_lib.StrengthGlyphs,)

    def _propose(self, text, rule, context):
        missing = rule.count - text.count(STRENGTH)
        if missing <= 0:
            return Infeasible(rule, "enough strength glyphs already")
        return [
            (text + STRENGTH * missing, f"append {missing} strength glyphs"),
            (STRENGTH * missing + text, f"prepend {missing} strength glyphs"),
        ]
