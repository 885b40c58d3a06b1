from __future__ import annotations

from . import library as rules_lib
from .base import Rule

# Recognition order: specific families first, generic ones last.
RULE_CLASSES: list[type[Rule]] = [
    # ---------- Game rules ----------
    rules_lib.MinLength,
    rules_lib.ContainsDigit,
    rules_lib.ContainsUppercase,
    rules_lib.ContainsSpecial,
    rules_lib.DigitSum,
    rules_lib.ContainsMonth,
    rules_lib.RomanNumeralProduct,
    rules_lib.ContainsRomanNumeral,
    rules_lib.ContainsSponsor,
    rules_lib.CaptchaToken,
    rules_lib.WordleAnswer,
    rules_lib.ElementSymbol,
    rules_lib.MoonPhaseMatch,
    rules_lib.CountryName,
    rules_lib.LeapYear,
    rules_lib.ChessBestMove,
    rules_lib.ContainsEgg,
    rules_lib.AtomicNumberSum,
    rules_lib.NoFire,
    rules_lib.StrengthGlyphs,
    rules_lib.ContainsAffirmation,
    rules_lib.VideoDurationMatch,
    rules_lib.SacrificeLetters,
    rules_lib.HexColor,
    rules_lib.IncludesLength,
    rules_lib.PrimeLength,
    rules_lib.SkipRule,
    rules_lib.CurrentTime,
    rules_lib.FinalCheck,
    # ---------- Generic rules ----------
    rules_lib.MaxLength,
    rules_lib.EndsWithDigit,
    rules_lib.EndsWithWord,
    rules_lib.NoLetters,
    rules_lib.ForbiddenLetters,
    rules_lib.ContainsSubstring,
]

assert len({cls.ID for cls in RULE_CLASSES}) == len(
    RULE_CLASSES
), "Duplicate rule id in RULE_CLASSES"

# Map stable rule IDs -> rule classes
RULES_BY_ID: dict[str, type[Rule]] = {cls.ID: cls for cls in RULE_CLASSES}


def list_rule_ids() -> list[str]:
    """Return the stable IDs for all registered rules."""
    return [cls.ID for cls in RULE_CLASSES]


def get_rule_class(rule_id: str) -> type[Rule]:
    try:
        return RULES_BY_ID[rule_id]
    except KeyError as e:
        known = ", ".join(sorted(RULES_BY_ID))
        raise KeyError(f"Unknown rule id '{rule_id}'. Known: {known}") from e
