"""Fixed catalogues used by rules and solvers."""

from __future__ import annotations

__all__ = [
    "MONTHS",
    "SPONSORS",
    "AFFIRMATIONS",
    "ELEMENTS",
    "ATOMIC_NUMBERS",
    "ROMAN_LETTERS",
    "EGG",
    "FIRE",
    "STRENGTH",
    "MOON_EMOJIS",
    "GAME_GLYPHS",
]

MONTHS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

SPONSORS = ("pepsi", "starbucks", "shell")

AFFIRMATIONS = ("i am loved", "i am worthy", "i am enough")

# Periodic table in atomic number order
ELEMENTS = tuple(
    """
    H He
    Li Be B C N O F Ne
    Na Mg Al Si P S Cl Ar
    K Ca Sc Ti V Cr Mn Fe Co Ni Cu Zn Ga Ge As Se Br Kr
    Rb Sr Y Zr Nb Mo Tc Ru Rh Pd Ag Cd In Sn Sb Te I Xe
    Cs Ba La Ce Pr Nd Pm Sm Eu Gd Tb Dy Ho Er Tm Yb Lu
    Hf Ta W Re Os Ir Pt Au Hg Tl Pb Bi Po At Rn
    Fr Ra Ac Th Pa U Np Pu Am Cm Bk Cf Es Fm Md No Lr
    Rf Db Sg Bh Hs Mt Ds Rg Cn Nh Fl Mc Lv Ts Og
    """.split()
)

ATOMIC_NUMBERS = {symbol: z for z, symbol in enumerate(ELEMENTS, start=1)}

ROMAN_LETTERS = frozenset("IVXLCDM")

EGG = "\U0001F95A"
FIRE = "\U0001F525"
STRENGTH = "\U0001F3CB\uFE0F\u200D\u2642\uFE0F"

# Phase name -> emojis the game accepts for it
MOON_EMOJIS = {
    "new": ("\U0001F311", "\U0001F31A"),
    "waxing_crescent": ("\U0001F312", "\U0001F318"),
    "first_quarter": ("\U0001F313", "\U0001F317", "\U0001F31B", "\U0001F31C"),
    "waxing_gibbous": ("\U0001F314", "\U0001F316"),
    "full": ("\U0001F315", "\U0001F31D"),
    "waning_gibbous": ("\U0001F314", "\U0001F316"),
    "last_quarter": ("\U0001F313", "\U0001F317", "\U0001F31B", "\U0001F31C"),
    "waning_crescent": ("\U0001F312", "\U0001F318"),
}

GAME_GLYPHS = tuple(
    [EGG, FIRE, STRENGTH]
    + sorted({e for emojis in MOON_EMOJIS.values() for e in emojis})
)
