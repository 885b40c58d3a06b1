import pytest

from passwordgame.data import EGG, FIRE, GAME_GLYPHS, MOON_EMOJIS, STRENGTH
from passwordgame.glyphs import Alphabet, glyph_len, split_glyphs
from passwordgame.rules import library as rules_lib
from passwordgame.rules.base import validate
from passwordgame.scan import (
    digit_runs,
    elements,
    int_to_roman,
    is_leap_year,
    is_prime,
    non_numeral_elements,
    roman_numerals,
    roman_to_int,
)


# ---------- scanners ----------


def test_roman_numerals_are_maximal_uppercase_runs():
    assert roman_numerals("abXXXVcd") == [(35, 2, 4)]
    assert [v for v, _, _ in roman_numerals("V VII")] == [5, 7]
    assert roman_numerals("xxv") == []


@pytest.mark.parametrize("value", [1, 4, 9, 14, 35, 40, 90, 400, 1994, 4999])
def test_roman_conversion_is_inverse(value):
    assert roman_to_int(int_to_roman(value)) == value


def test_int_to_roman_rejects_out_of_range():
    with pytest.raises(ValueError):
        int_to_roman(0)


def test_two_letter_symbols_win_over_one_letter():
    assert elements("Fe") == [("Fe", 26, 0)]
    assert [s for s, _, _ in elements("HeH")] == ["He", "H"]


def test_non_numeral_elements_avoid_roman_letters():
    symbols = [s for s, _ in non_numeral_elements()]
    assert "He" in symbols
    assert not any(s[0] in "IVXLCDM" for s in symbols)


def test_digit_runs_and_leap_years():
    assert digit_runs("a12b3") == [(12, 1, 2), (3, 4, 1)]
    assert is_leap_year(2000) and is_leap_year(2024) and is_leap_year(0)
    assert not is_leap_year(1900) and not is_leap_year(2023)


def test_is_prime():
    assert [n for n in range(20) if is_prime(n)] == [2, 3, 5, 7, 11, 13, 17, 19]


# ---------- glyphs ----------


def test_strength_emoji_counts_as_one_glyph():
    assert split_glyphs("a" + STRENGTH) == ["a", STRENGTH]
    assert glyph_len(STRENGTH * 3) == 3


def test_alphabet_accepts_ascii_and_game_glyphs_only():
    alphabet = Alphabet()
    assert alphabet.accepts("abc 123 !#" + EGG + STRENGTH)
    assert not alphabet.accepts("café")
    assert alphabet.rejected("café") == ["é"]
    assert not Alphabet(extra_glyphs=()).accepts(EGG)


# ---------- rule predicates ----------


@pytest.mark.parametrize(
    "rule, good, bad",
    [
        (rules_lib.MinLength(5), "abcde", "abcd"),
        (rules_lib.MaxLength(3), "abc", "abcd"),
        (rules_lib.ContainsDigit(), "a1", "ab"),
        (rules_lib.ContainsUppercase(), "aB", "ab"),
        (rules_lib.ContainsSpecial(), "a!", "a1"),
        (rules_lib.EndsWithDigit(), "ab1", "1ab"),
        (rules_lib.EndsWithWord("done"), "I am done", "done!"),
        (rules_lib.NoLetters(), "12-!", "12a"),
        (rules_lib.ForbiddenLetters(("q", "x")), "abc", "aXe"),
        (rules_lib.ContainsSubstring("CAT"), "xCATx", "xcatx"),
        (rules_lib.ContainsMonth(), "inMAYday", "inmaday"),
        (rules_lib.ContainsRomanNumeral(), "aXb", "axb"),
        (rules_lib.ContainsSponsor(), "Pepsi!", "coke"),
        (rules_lib.CaptchaToken("2bx8e"), "a2bx8e", "a2BX8E"),
        (rules_lib.ElementSymbol(2), "He", "H"),
        (rules_lib.ContainsAffirmation(), "Iamloved", "I am lost"),
        (rules_lib.HexColor("1a2b3c"), "#1A2B3C", "1a2b3"),
        (rules_lib.ContainsEgg(), "a" + EGG, "a"),
        (rules_lib.NoFire(), "abc", "a" + FIRE),
        (rules_lib.StrengthGlyphs(), STRENGTH * 3, STRENGTH * 2),
        (rules_lib.DigitSum(25), "99a7", "99a8"),
        (rules_lib.RomanNumeralProduct(35), "V VII", "XXV"),
        (rules_lib.AtomicNumberSum(3), "HeH", "He"),
        (rules_lib.LeapYear(), "y2024", "y2023"),
        (rules_lib.IncludesLength(), "abc4", "abc5"),
        (rules_lib.PrimeLength(), "abcde", "abcd"),
        (rules_lib.SkipRule(), "", None),
        (rules_lib.FinalCheck(), "", None),
    ],
    ids=lambda value: getattr(value, "rule_id", None),
)
def test_rule_predicates(rule, good, bad):
    assert validate(rule, good)
    if bad is not None:
        assert not validate(rule, bad)


def test_roman_product_of_no_numerals_is_zero():
    assert rules_lib.RomanNumeralProduct(0).validate("abc")
    assert not rules_lib.RomanNumeralProduct(1).validate("abc")


def test_fact_rules_need_answers_until_resolved():
    rule = rules_lib.WordleAnswer()
    assert rule.needs_facts
    assert not rule.validate("crane")

    resolved = rule.with_answers(["crane"])
    assert not resolved.needs_facts
    assert resolved == rule
    assert resolved.validate("xCRANEx")


def test_video_rule_accepts_short_and_long_urls():
    rule = rules_lib.VideoDurationMatch(754).with_answers(["dQw4w9WgXcQ"])
    assert rule.validate("a youtu.be/dQw4w9WgXcQ")
    assert rule.validate("youtube.com/watch?v=dQw4w9WgXcQ")
    assert not rule.validate("youtu.be/dqw4w9wgxcq")


def test_sacrifice_requires_chosen_letters_to_be_absent():
    rule = rules_lib.SacrificeLetters(2, answers=("q", "j"))
    assert rule.validate("abc")
    assert not rule.validate("aQc")
    assert not rules_lib.SacrificeLetters(2).validate("abc")


def test_anchors_locate_dependencies():
    assert rules_lib.ContainsSubstring("CAT").anchors("xCATx") == [(1, 4)]
    assert rules_lib.EndsWithDigit().anchors("ab1") == [(2, 3)]
    assert rules_lib.DigitSum(3).anchors("a1b2") == [(1, 2), (3, 4)]
    assert rules_lib.DigitSum(4).anchors("a1b2") == []
    assert rules_lib.LeapYear().anchors("y2024z") == [(1, 5)]


def test_describe_and_params():
    rule = rules_lib.MinLength(5)
    assert rule.rule_id == "min_length"
    assert rule.params == {"length": 5}
    assert rule.describe() == "min_length(length=5)"
    assert rules_lib.ContainsDigit().describe() == "contains_digit"


def test_game_glyphs_are_the_ones_rules_produce():
    moons = {emoji for emojis in MOON_EMOJIS.values() for emoji in emojis}
    assert set(GAME_GLYPHS) == {EGG, FIRE, STRENGTH} | moons
