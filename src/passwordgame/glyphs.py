"""Glyph splitting and the accepted character set of the rendering surface.

Python strings index code points, but the game counts what the user sees: an
emoji ZWJ sequence such as the weight lifter is a single glyph. Lengths are
therefore measured in glyphs while edits keep working on code-point indices.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import Iterable

from passwordgame.data import GAME_GLYPHS

__all__ = ["split_glyphs", "glyph_len", "Alphabet", "DEFAULT_ALPHABET"]

ZWJ = "\u200d"
_EXTENDERS = frozenset(
    [ZWJ, "\ufe0e", "\ufe0f"] + [chr(cp) for cp in range(0x1F3FB, 0x1F400)]
)


def split_glyphs(text: str) -> list[str]:
    """Split `text` into user-perceived glyphs.

    Variation selectors, skin-tone modifiers and combining marks attach to the
    preceding glyph; a zero-width joiner also pulls in the character after it.
    """
    glyphs: list[str] = []
    joined = False
    for ch in text:
        if glyphs and (joined or ch in _EXTENDERS or unicodedata.combining(ch)):
            glyphs[-1] += ch
            joined = ch == ZWJ
        else:
            glyphs.append(ch)
            joined = False
    return glyphs


def glyph_len(text: str) -> int:
    return len(split_glyphs(text))


@dataclass(frozen=True, slots=True)
class Alphabet:
    """Characters the external surface accepts.

    Attributes:
        extra_glyphs: Non-ASCII glyphs allowed on top of printable ASCII.
    """

    extra_glyphs: tuple[str, ...] = GAME_GLYPHS
    _extra_points: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        points = frozenset(ch for glyph in self.extra_glyphs for ch in glyph)
        object.__setattr__(self, "_extra_points", points)

    def accepts(self, text: str) -> bool:
        return all(" " <= ch <= "~" or ch in self._extra_points for ch in text)

    def rejected(self, text: str) -> list[str]:
        return sorted({ch for ch in text if not self.accepts(ch)})

    @classmethod
    def with_glyphs(cls, glyphs: Iterable[str]) -> "Alphabet":
        return cls(extra_glyphs=tuple(glyphs))


DEFAULT_ALPHABET = Alphabet()
