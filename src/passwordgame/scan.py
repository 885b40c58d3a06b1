"""Scanners that locate numeric features inside a password.

All positions are code-point indices into the scanned string.
"""

from __future__ import annotations

import re
from functools import lru_cache

from passwordgame.data import ATOMIC_NUMBERS, ELEMENTS, ROMAN_LETTERS

__all__ = [
    "digits",
    "letters",
    "digit_runs",
    "roman_numerals",
    "roman_to_int",
    "int_to_roman",
    "elements",
    "is_leap_year",
    "is_prime",
    "non_numeral_elements",
]

ROMAN_RE = re.compile(r"M{0,4}(?:CM|CD|D?C{0,3})(?:XC|XL|L?X{0,3})(?:IX|IV|V?I{0,3})")
DIGIT_RUN_RE = re.compile(r"[0-9]+")

_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}
_ROMAN_TABLE = (
    (1000, "M"),
    (900, "CM"),
    (500, "D"),
    (400, "CD"),
    (100, "C"),
    (90, "XC"),
    (50, "L"),
    (40, "XL"),
    (10, "X"),
    (9, "IX"),
    (5, "V"),
    (4, "IV"),
    (1, "I"),
)
MAX_ROMAN = 4999


def digits(text: str) -> list[tuple[int, int]]:
    """Return (digit, index) for every ASCII digit."""
    return [(int(ch), i) for i, ch in enumerate(text) if "0" <= ch <= "9"]


def letters(text: str) -> list[tuple[str, int]]:
    """Return (letter, index) for every ASCII letter."""
    return [(ch, i) for i, ch in enumerate(text) if ch.isascii() and ch.isalpha()]


def digit_runs(text: str) -> list[tuple[int, int, int]]:
    """Return (value, start, length) for every maximal run of digits."""
    return [
        (int(m.group(0)), m.start(), m.end() - m.start())
        for m in DIGIT_RUN_RE.finditer(text)
    ]


def roman_to_int(numeral: str) -> int:
    total = 0
    for i, ch in enumerate(numeral):
        value = _ROMAN_VALUES[ch]
        if i + 1 < len(numeral) and _ROMAN_VALUES[numeral[i + 1]] > value:
            total -= value
        else:
            total += value
    return total


def int_to_roman(value: int) -> str:
    if not 1 <= value <= MAX_ROMAN:
        raise ValueError(f"Roman numerals cover 1..{MAX_ROMAN}, got {value}")
    out = []
    for amount, numeral in _ROMAN_TABLE:
        count, value = divmod(value, amount)
        out.append(numeral * count)
    return "".join(out)


def roman_numerals(text: str) -> list[tuple[int, int, int]]:
    """Return (value, start, length) for every maximal uppercase roman numeral."""
    return [
        (roman_to_int(m.group(0)), m.start(), m.end() - m.start())
        for m in ROMAN_RE.finditer(text)
        if m.group(0)
    ]


def elements(text: str) -> list[tuple[str, int, int]]:
    """Return (symbol, atomic_number, index) for element symbols in `text`.

    Symbols are case-sensitive. A two-letter symbol wins over a one-letter
    symbol starting at the same index ("Fe" is iron, not fluorine).
    """
    found: list[tuple[str, int, int]] = []
    for i, ch in enumerate(text):
        pair = text[i : i + 2]
        if len(pair) == 2 and pair in ATOMIC_NUMBERS:
            found.append((pair, ATOMIC_NUMBERS[pair], i))
        elif ch in ATOMIC_NUMBERS:
            found.append((ch, ATOMIC_NUMBERS[ch], i))
    return found


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


@lru_cache(maxsize=4096)
def is_prime(n: int) -> bool:
    if n <= 1:
        return False
    limit = int(n**0.5)
    for k in range(2, limit + 1):
        if n % k == 0:
            return False
    return True


def non_numeral_elements() -> list[tuple[str, int]]:
    """Element symbols that cannot be read as (part of) a roman numeral."""
    return [
        (symbol, ATOMIC_NUMBERS[symbol])
        for symbol in ELEMENTS
        if symbol[0] not in ROMAN_LETTERS
    ]
