import pytest

from passwordgame.errors import ParseError, ParseErrorKind
from passwordgame.rules import library as rules_lib
from passwordgame.rules.parse import normalize, parse
from passwordgame.rules.registry import RULE_CLASSES, get_rule_class, list_rule_ids

CASES = [
    ("Your password must be at least 5 characters.", rules_lib.MinLength(5)),
    ("Your password must include a number.", rules_lib.ContainsDigit()),
    ("Your password must include an uppercase letter.", rules_lib.ContainsUppercase()),
    ("Your password must include a special character.", rules_lib.ContainsSpecial()),
    ("The digits in your password must add up to 25.", rules_lib.DigitSum(25)),
    ("Your password must include a month of the year.", rules_lib.ContainsMonth()),
    ("Your password must include a roman numeral.", rules_lib.ContainsRomanNumeral()),
    ("Your password must include one of our sponsors:", rules_lib.ContainsSponsor()),
    (
        "The roman numerals in your password should multiply to 35.",
        rules_lib.RomanNumeralProduct(35),
    ),
    ("Your password must include this CAPTCHA: 2bx8e", rules_lib.CaptchaToken("2bx8e")),
    ("Your password must include today's Wordle answer.", rules_lib.WordleAnswer()),
    (
        "Your password must include a two letter symbol from the periodic table.",
        rules_lib.ElementSymbol(2),
    ),
    (
        "Your password must include the current phase of the moon as an emoji.",
        rules_lib.MoonPhaseMatch(),
    ),
    (
        "Your password must include the name of this country. 48.8584, 2.2945",
        rules_lib.CountryName(48.8584, 2.2945),
    ),
    ("Your password must include a leap year.", rules_lib.LeapYear()),
    (
        "Your password must include the best move in algebraic chess notation. "
        "6k1/5ppp/8/8/8/8/5PPP/3R2K1 w - - 0 1",
        rules_lib.ChessBestMove("6k1/5ppp/8/8/8/8/5PPP/3R2K1 w - - 0 1"),
    ),
    (
        "This is my chicken Paul. He hasn't hatched yet, please put him in your password.",
        rules_lib.ContainsEgg(),
    ),
    (
        "The elements in your password must have atomic numbers that add up to 200.",
        rules_lib.AtomicNumberSum(200),
    ),
    ("Oh no! Your password is on fire. Quick, put it out!", rules_lib.NoFire()),
    ("Your password is not strong enough", rules_lib.StrengthGlyphs()),
    (
        "Your password must contain one of the following affirmations: "
        "I am loved | I am worthy | I am enough",
        rules_lib.ContainsAffirmation(("i am loved", "i am worthy", "i am enough")),
    ),
    (
        "Your password must include a YouTube video of this exact length: 12 minutes 34 seconds",
        rules_lib.VideoDurationMatch(754),
    ),
    (
        "A sacrifice must be made. Pick 2 letters that you will no longer be able to use.",
        rules_lib.SacrificeLetters(2),
    ),
    ("Your password must include this color in hex. #1a2b3c", rules_lib.HexColor("1a2b3c")),
    ("Your password must include the length of your password.", rules_lib.IncludesLength()),
    ("The length of your password must be a prime number.", rules_lib.PrimeLength()),
    ("Uhhh let's skip this one.", rules_lib.SkipRule()),
    ("Your password must include the current time.", rules_lib.CurrentTime()),
    ("Is this your final password?", rules_lib.FinalCheck()),
    ("Your password must be at most 12 characters.", rules_lib.MaxLength(12)),
    ("Your password must end with a digit.", rules_lib.EndsWithDigit()),
    ('Your password must end with the word "done".', rules_lib.EndsWithWord("done")),
    ("Your password must contain no letters.", rules_lib.NoLetters()),
    (
        "Your password must not contain the letters q, x.",
        rules_lib.ForbiddenLetters(("q", "x")),
    ),
    ('Your password must contain "CAT".', rules_lib.ContainsSubstring("CAT")),
]


@pytest.mark.parametrize("raw, expected", CASES, ids=[rule.rule_id for _, rule in CASES])
def test_parse_recognises_family_and_parameters(raw, expected):
    rule = parse(raw)
    assert type(rule) is type(expected)
    assert rule == expected


def test_every_registered_family_has_a_parse_case():
    covered = {rule.rule_id for _, rule in CASES}
    assert covered == set(list_rule_ids())


def test_registry_ids_are_unique_and_lookup_works():
    assert len(list_rule_ids()) == len(RULE_CLASSES)
    assert get_rule_class("digit_sum") is rules_lib.DigitSum
    with pytest.raises(KeyError, match="Known:"):
        get_rule_class("does_not_exist")


def test_unrecognized_text_raises():
    with pytest.raises(ParseError) as info:
        parse("Your password must dance.")
    assert info.value.kind is ParseErrorKind.UNRECOGNIZED
    assert info.value.raw == "Your password must dance."


@pytest.mark.parametrize(
    "raw, family",
    [
        ("Your password must include the name of this country.", "country_name"),
        ("Your password must include this CAPTCHA:", "captcha_token"),
        ("Your password must include this color in hex.", "hex_color"),
        ("Your password must include a YouTube video of this exact length.", "video_duration_match"),
    ],
)
def test_matching_family_with_bad_parameters_is_malformed(raw, family):
    with pytest.raises(ParseError) as info:
        parse(raw)
    assert info.value.kind is ParseErrorKind.MALFORMED_PARAMETERS
    assert info.value.family == family


def test_disabled_family_is_unrecognized():
    raw = "Your password must be at least 5 characters."
    with pytest.raises(ParseError) as info:
        parse(raw, {"min_length": False})
    assert info.value.kind is ParseErrorKind.UNRECOGNIZED


def test_typographic_quotes_are_normalised():
    assert normalize("must   contain “CAT”") == 'must contain "CAT"'
    assert parse("Your password must contain “CAT”.") == rules_lib.ContainsSubstring("CAT")


def test_sacrifice_with_listed_letters_is_resolved_at_parse_time():
    rule = parse("A sacrifice must be made. Pick 2 letters. Sacrificed: q, j")
    assert rule.answers == ("q", "j")
    assert not rule.needs_facts


def test_video_durations_in_clock_notation():
    rule = parse("Your password must include a YouTube video of this exact length: 3:25")
    assert rule == rules_lib.VideoDurationMatch(205)
