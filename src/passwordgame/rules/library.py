from __future__ import annotations

import re
from dataclasses import dataclass
from math import prod

from passwordgame.data import (
    AFFIRMATIONS,
    EGG,
    FIRE,
    MONTHS,
    SPONSORS,
    STRENGTH,
)
from passwordgame.glyphs import glyph_len
from passwordgame.rules.base import FactRule, Rule, Span, TokenRule
from passwordgame.scan import (
    digit_runs,
    digits,
    elements,
    is_leap_year,
    is_prime,
    letters,
    roman_numerals,
)


def _p(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


COORDS_RE = re.compile(r"(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)")
HEX_RE = re.compile(r"#?\b([0-9a-fA-F]{6})\b")
FEN_RE = re.compile(
    r"((?:[pnbrqkPNBRQK1-8]+/){7}[pnbrqkPNBRQK1-8]+"
    r"(?:\s+[wb](?:\s+(?:-|[KQkq]+))?(?:\s+(?:-|[a-h][36]))?(?:\s+\d+\s+\d+)?)?)"
)
DURATION_RES = (
    (_p(r"(\d+)\s*minutes?,?\s*(?:and\s+)?(\d+)\s*seconds?"), lambda m: 60 * int(m[1]) + int(m[2])),
    (_p(r"\b(\d+):([0-5]\d)\b"), lambda m: 60 * int(m[1]) + int(m[2])),
    (_p(r"(\d+)\s*minutes?"), lambda m: 60 * int(m[1])),
    (_p(r"(\d+)\s*seconds?"), lambda m: int(m[1])),
)
NUMBER_WORDS = {"one": 1, "two": 2, "three": 3, "four": 4}


def _split_list(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    parts = re.split(r"\s*(?:\||,|/|\bor\b|\band\b)\s*", raw.strip().rstrip(".!"))
    return tuple(p.strip().lower() for p in parts if p.strip())


def _tail(match: re.Match[str]) -> str:
    return match.string[match.end() :]


# ---------- Basic constraints ----------


@dataclass(frozen=True, slots=True)
class MinLength(Rule):
    ID = "min_length"
    PATTERN = _p(r"\bat least (\d+) characters?")

    length: int

    @classmethod
    def from_match(cls, match, raw):
        return cls(int(match.group(1)))

    def validate(self, text: str) -> bool:
        return glyph_len(text) >= self.length


@dataclass(frozen=True, slots=True)
class MaxLength(Rule):
    ID = "max_length"
    PATTERN = _p(r"\bat most (\d+) characters?")

    length: int

    @classmethod
    def from_match(cls, match, raw):
        return cls(int(match.group(1)))

    def validate(self, text: str) -> bool:
        return glyph_len(text) <= self.length


@dataclass(frozen=True, slots=True)
class ContainsDigit(Rule):
    ID = "contains_digit"
    PATTERN = _p(r"\binclude an? (?:number|digit)\b")

    def validate(self, text: str) -> bool:
        return bool(digits(text))


@dataclass(frozen=True, slots=True)
class ContainsUppercase(Rule):
    ID = "contains_uppercase"
    PATTERN = _p(r"\buppercase letter\b")

    def validate(self, text: str) -> bool:
        return any("A" <= ch <= "Z" for ch in text)


@dataclass(frozen=True, slots=True)
class ContainsSpecial(Rule):
    ID = "contains_special"
    PATTERN = _p(r"\bspecial character\b")

    def validate(self, text: str) -> bool:
        return any(not (ch.isascii() and ch.isalnum()) for ch in text)


@dataclass(frozen=True, slots=True)
class EndsWithDigit(Rule):
    ID = "ends_with_digit"
    PATTERN = _p(r"\bmust end (?:in|with) an? (?:digit|number)\b")

    def validate(self, text: str) -> bool:
        return bool(text) and "0" <= text[-1] <= "9"

    def anchors(self, text: str) -> list[Span]:
        return [(len(text) - 1, len(text))] if self.validate(text) else []


@dataclass(frozen=True, slots=True)
class EndsWithWord(Rule):
    ID = "ends_with_word"
    PATTERN = _p(r'\bmust end (?:in|with) (?:the word\s+"?([A-Za-z0-9]+)"?|"([^"]+)")')

    word: str

    @classmethod
    def from_match(cls, match, raw):
        return cls(match.group(1) or match.group(2))

    def validate(self, text: str) -> bool:
        return text.endswith(self.word)

    def anchors(self, text: str) -> list[Span]:
        return [(len(text) - len(self.word), len(text))] if self.validate(text) else []


@dataclass(frozen=True, slots=True)
class NoLetters(Rule):
    ID = "no_letters"
    PATTERN = _p(r"\bmust (?:contain no|not contain any) letters\b")

    def validate(self, text: str) -> bool:
        return not letters(text)


@dataclass(frozen=True, slots=True)
class ForbiddenLetters(Rule):
    ID = "forbidden_letters"
    PATTERN = _p(r"\bmust not (?:contain|include|use) the letters?\b(.*)")

    letters: tuple[str, ...]

    @classmethod
    def from_match(cls, match, raw):
        found = tuple(dict.fromkeys(re.findall(r"\b([a-z])\b", match.group(1).lower())))
        if not found:
            raise ValueError("no letters listed")
        return cls(found)

    def validate(self, text: str) -> bool:
        lowered = text.lower()
        return not any(letter in lowered for letter in self.letters)


# ---------- Catalogue constraints ----------


@dataclass(frozen=True, slots=True)
class ContainsSubstring(TokenRule):
    ID = "contains_substring"
    PATTERN = _p(r'\bmust (?:contain|include) "([^"]+)"')
    CASE_SENSITIVE = True

    token: str

    @classmethod
    def from_match(cls, match, raw):
        return cls(match.group(1))

    def tokens(self) -> tuple[str, ...]:
        return (self.token,)


@dataclass(frozen=True, slots=True)
class ContainsMonth(TokenRule):
    ID = "contains_month"
    PATTERN = _p(r"\bmonth of the year\b")

    def tokens(self) -> tuple[str, ...]:
        return MONTHS


@dataclass(frozen=True, slots=True)
class ContainsRomanNumeral(Rule):
    ID = "contains_roman_numeral"
    PATTERN = _p(r"\binclude an? roman numeral\b")

    def validate(self, text: str) -> bool:
        return bool(roman_numerals(text))


@dataclass(frozen=True, slots=True)
class ContainsSponsor(TokenRule):
    ID = "contains_sponsor"
    PATTERN = _p(r"\bone of our sponsors\b(?:\s*:\s*(.+))?")

    sponsors: tuple[str, ...] = SPONSORS

    @classmethod
    def from_match(cls, match, raw):
        listed = _split_list(match.group(1))
        return cls(listed) if listed else cls()

    def tokens(self) -> tuple[str, ...]:
        return self.sponsors


@dataclass(frozen=True, slots=True)
class CaptchaToken(TokenRule):
    ID = "captcha_token"
    PATTERN = _p(r"\binclude this captcha\b[\s:]*([a-z0-9]+)?")
    CASE_SENSITIVE = True

    token: str

    @classmethod
    def from_match(cls, match, raw):
        if not match.group(1):
            raise ValueError("captcha token missing")
        return cls(match.group(1))

    def tokens(self) -> tuple[str, ...]:
        return (self.token,)


@dataclass(frozen=True, slots=True)
class ElementSymbol(Rule):
    ID = "element_symbol"
    PATTERN = _p(r"\b(?:(\w+)[ -]letter )?symbol from the periodic table\b")

    min_letters: int = 1

    @classmethod
    def from_match(cls, match, raw):
        word = (match.group(1) or "").lower()
        if not word:
            return cls()
        if word.isdigit():
            return cls(int(word))
        return cls(NUMBER_WORDS[word])

    def validate(self, text: str) -> bool:
        return bool(self.anchors(text))

    def anchors(self, text: str) -> list[Span]:
        for symbol, _, index in elements(text):
            if len(symbol) >= self.min_letters:
                return [(index, index + len(symbol))]
        return []


@dataclass(frozen=True, slots=True)
class ContainsAffirmation(TokenRule):
    ID = "contains_affirmation"
    PATTERN = _p(r"\bfollowing affirmations\b(?:\s*:\s*(.+))?")

    affirmations: tuple[str, ...] = AFFIRMATIONS

    @classmethod
    def from_match(cls, match, raw):
        listed = _split_list(match.group(1))
        return cls(listed) if listed else cls()

    def tokens(self) -> tuple[str, ...]:
        spaceless = tuple(a.replace(" ", "") for a in self.affirmations)
        return tuple(dict.fromkeys(spaceless + self.affirmations))


@dataclass(frozen=True, slots=True)
class HexColor(TokenRule):
    ID = "hex_color"
    PATTERN = _p(r"\bthis colou?r in hex\b")

    hex: str

    @classmethod
    def from_match(cls, match, raw):
        found = HEX_RE.search(_tail(match)) or HEX_RE.search(match.string)
        if found is None:
            raise ValueError("hex colour missing")
        return cls(found.group(1).lower())

    def tokens(self) -> tuple[str, ...]:
        return (self.hex,)


@dataclass(frozen=True, slots=True)
class ContainsEgg(TokenRule):
    ID = "contains_egg"
    PATTERN = _p(r"\bthis (?:is )?my chicken paul\b")
    CASE_SENSITIVE = True

    def tokens(self) -> tuple[str, ...]:
        return (EGG,)


@dataclass(frozen=True, slots=True)
class NoFire(Rule):
    ID = "no_fire"
    PATTERN = _p(r"\bpassword is on fire\b")

    def validate(self, text: str) -> bool:
        return FIRE not in text


@dataclass(frozen=True, slots=True)
class StrengthGlyphs(Rule):
    ID = "strength_glyphs"
    PATTERN = _p(r"\bnot strong enough\b")

    count: int = 3

    def validate(self, text: str) -> bool:
        return text.count(STRENGTH) >= self.count

    def anchors(self, text: str) -> list[Span]:
        spans = []
        start = text.find(STRENGTH)
        while start >= 0:
            spans.append((start, start + len(STRENGTH)))
            start = text.find(STRENGTH, start + len(STRENGTH))
        return spans


# ---------- Numeric constraints ----------


@dataclass(frozen=True, slots=True)
class DigitSum(Rule):
    ID = "digit_sum"
    PATTERN = _p(r"\bdigits in your password must add up to (\d+)")

    target: int

    @classmethod
    def from_match(cls, match, raw):
        return cls(int(match.group(1)))

    def validate(self, text: str) -> bool:
        return sum(d for d, _ in digits(text)) == self.target

    def anchors(self, text: str) -> list[Span]:
        if not self.validate(text):
            return []
        return [(i, i + 1) for d, i in digits(text) if d]


@dataclass(frozen=True, slots=True)
class RomanNumeralProduct(Rule):
    ID = "roman_numeral_product"
    PATTERN = _p(r"\broman numerals in your password (?:should|must) multiply to (\d+)")

    target: int

    @classmethod
    def from_match(cls, match, raw):
        return cls(int(match.group(1)))

    def validate(self, text: str) -> bool:
        values = [value for value, _, _ in roman_numerals(text)]
        return (prod(values) if values else 0) == self.target

    def anchors(self, text: str) -> list[Span]:
        if not self.validate(text):
            return []
        return [(start, start + length) for _, start, length in roman_numerals(text)]


@dataclass(frozen=True, slots=True)
class AtomicNumberSum(Rule):
    ID = "atomic_number_sum"
    PATTERN = _p(r"\batomic numbers that add up to (\d+)")

    target: int

    @classmethod
    def from_match(cls, match, raw):
        return cls(int(match.group(1)))

    def validate(self, text: str) -> bool:
        return sum(z for _, z, _ in elements(text)) == self.target

    def anchors(self, text: str) -> list[Span]:
        if not self.validate(text):
            return []
        return [(index, index + len(symbol)) for symbol, _, index in elements(text)]


@dataclass(frozen=True, slots=True)
class LeapYear(Rule):
    ID = "leap_year"
    PATTERN = _p(r"\binclude a leap year\b")

    def validate(self, text: str) -> bool:
        return bool(self.anchors(text))

    def anchors(self, text: str) -> list[Span]:
        for value, start, length in digit_runs(text):
            if is_leap_year(value):
                return [(start, start + length)]
        return []


# ---------- Length search constraints ----------


@dataclass(frozen=True, slots=True)
class IncludesLength(Rule):
    ID = "includes_length"
    PATTERN = _p(r"\binclude the length of your password\b")

    def validate(self, text: str) -> bool:
        return str(glyph_len(text)) in text

    def anchors(self, text: str) -> list[Span]:
        token = str(glyph_len(text))
        idx = text.rfind(token)
        return [(idx, idx + len(token))] if idx >= 0 else []


@dataclass(frozen=True, slots=True)
class PrimeLength(Rule):
    ID = "prime_length"
    PATTERN = _p(r"\blength of your password must be a prime\b")

    def validate(self, text: str) -> bool:
        return is_prime(glyph_len(text))


# ---------- Fact-backed constraints ----------


@dataclass(frozen=True, slots=True)
class WordleAnswer(FactRule):
    ID = "wordle_answer"
    PATTERN = _p(r"\btoday's wordle answer\b")


@dataclass(frozen=True, slots=True)
class MoonPhaseMatch(FactRule):
    ID = "moon_phase_match"
    PATTERN = _p(r"\bphase of the moon\b")
    CASE_SENSITIVE = True


@dataclass(frozen=True, slots=True)
class CountryName(FactRule):
    ID = "country_name"
    PATTERN = _p(r"\bname of this country\b")

    lat: float
    lon: float

    @classmethod
    def from_match(cls, match, raw):
        found = COORDS_RE.search(_tail(match)) or COORDS_RE.search(match.string)
        if found is None:
            raise ValueError("coordinates missing")
        lat, lon = float(found.group(1)), float(found.group(2))
        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            raise ValueError(f"coordinates out of range: {lat}, {lon}")
        return cls(lat, lon)


@dataclass(frozen=True, slots=True)
class ChessBestMove(FactRule):
    ID = "chess_best_move"
    PATTERN = _p(r"\bbest move in algebraic chess notation\b")
    CASE_SENSITIVE = True

    fen: str

    @classmethod
    def from_match(cls, match, raw):
        found = FEN_RE.search(match.string)
        if found is None:
            raise ValueError("board position (FEN) missing")
        return cls(found.group(1).strip())


@dataclass(frozen=True, slots=True)
class VideoDurationMatch(FactRule):
    ID = "video_duration_match"
    PATTERN = _p(r"\byoutube video of this exact length\b")
    CASE_SENSITIVE = True

    seconds: int

    @classmethod
    def from_match(cls, match, raw):
        tail = _tail(match)
        for pattern, to_seconds in DURATION_RES:
            found = pattern.search(tail)
            if found is not None:
                return cls(to_seconds(found))
        raise ValueError("video length missing")

    def tokens(self) -> tuple[str, ...]:
        return tuple(f"youtu.be/{video_id}" for video_id in self.answers)

    def validate(self, text: str) -> bool:
        return bool(self.anchors(text))

    def anchors(self, text: str) -> list[Span]:
        for video_id in self.answers:
            for url in (f"youtu.be/{video_id}", f"youtube.com/watch?v={video_id}"):
                idx = text.find(url)
                if idx >= 0:
                    return [(idx, idx + len(url))]
        return []


@dataclass(frozen=True, slots=True)
class CurrentTime(FactRule):
    ID = "current_time"
    PATTERN = _p(r"\binclude the current time\b")
    CASE_SENSITIVE = True


@dataclass(frozen=True, slots=True)
class SacrificeLetters(FactRule):
    """Pick `count` letters that may no longer appear.

    The chosen letters are the rule's answers: either listed in the rule text
    ("Sacrificed: q, j") or picked by the solver when the rule is resolved.
    """

    ID = "sacrifice_letters"
    PATTERN = _p(r"\bsacrifice must be made\b")

    count: int = 2

    @classmethod
    def from_match(cls, match, raw):
        tail = _tail(match)
        found = re.search(r"\bpick (\w+) letters\b", tail, re.IGNORECASE)
        count = 2
        if found is not None:
            word = found.group(1).lower()
            count = int(word) if word.isdigit() else NUMBER_WORDS[word]
        chosen = re.search(r"\bsacrificed\s*:\s*(.+)$", tail, re.IGNORECASE)
        if chosen is None:
            return cls(count)
        picked = tuple(dict.fromkeys(re.findall(r"\b([a-z])\b", chosen.group(1).lower())))
        if len(picked) != count:
            raise ValueError(f"expected {count} sacrificed letters, got {picked}")
        return cls(count, answers=picked)

    def validate(self, text: str) -> bool:
        lowered = text.lower()
        return len(self.answers) == self.count and not any(
            letter in lowered for letter in self.answers
        )

    def anchors(self, text: str) -> list[Span]:
        return []


# ---------- Trivial constraints ----------


@dataclass(frozen=True, slots=True)
class SkipRule(Rule):
    ID = "skip_rule"
    PATTERN = _p(r"\bskip this one\b")

    def validate(self, text: str) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class FinalCheck(Rule):
    ID = "final_check"
    PATTERN = _p(r"\bis this your final password\b")

    def validate(self, text: str) -> bool:
        return True
