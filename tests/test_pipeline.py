from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from passwordgame.engine import Status
from passwordgame.errors import SynchronizationError
from passwordgame.pipeline import play, solve, solve_excel
from passwordgame.policy import Policy

RULES_PATH = Path(__file__).resolve().parents[1] / "data" / "rules.txt"

MIN5 = "Your password must be at least 5 characters."
DIGIT_END = "Your password must end with a digit."


def _game_rules():
    return [line.strip() for line in RULES_PATH.read_text(encoding="utf-8").splitlines() if line.strip()]


def test_first_nine_game_rules(providers):
    session = solve(_game_rules(), providers=providers)
    assert session.ok, session.result
    assert session.rounds == 9
    assert all(entry.rule.validate(session.text) for entry in session.rules)


def test_unparseable_rules_are_skipped(providers):
    session = solve([MIN5, "Your password must dance."], providers=providers)
    assert session.ok
    assert session.skipped == ("Your password must dance.",)
    assert [entry.rule.rule_id for entry in session.rules] == ["min_length"]


def test_disabled_families_are_skipped(providers):
    families = dict(Policy().families, min_length=False)
    session = solve([MIN5, DIGIT_END], policy=Policy(families=families), providers=providers)
    assert session.skipped == (MIN5,)
    assert session.text == "0"


def test_solve_stops_at_first_failure(providers):
    session = solve(
        ['Your password must contain "CAT".', "Your password must contain no letters.", MIN5],
        providers=providers,
    )
    assert session.status is Status.UNSATISFIABLE
    assert session.rounds == 2
    assert session.text == "CAT"
    assert len(session.rules) == 2


def test_initial_text_is_kept_when_valid(providers):
    session = solve([MIN5], providers=providers, initial_text="hello world")
    assert session.text == "hello world"
    assert session.result.cycles == 0


def test_play_reveals_rules_until_none_are_new(make_surface, providers):
    surface = make_surface([MIN5, DIGIT_END])
    session = play(surface, surface, surface, providers=providers)
    assert session.ok
    assert session.rounds == 2
    assert surface.text == "zzzzz0"
    assert surface.pushes == ["zzzzz", "zzzzz0"]


def test_play_propagates_sync_failure(make_surface, providers):
    surface = make_surface([MIN5])
    surface.failing_pushes = 10
    with pytest.raises(SynchronizationError):
        play(surface, surface, surface, policy=Policy(sync_retries=0), providers=providers)


def test_solve_excel_writes_ledger_copy(tmp_path, providers):
    path = tmp_path / "game.xlsx"
    wb = Workbook()
    ws = wb.active
    ws.title = "Rules"
    for raw in (MIN5, DIGIT_END):
        ws.append((raw,))
    wb.save(path)

    session = solve_excel(
        input_path=str(path), sheet_name="Rules", providers=providers, save=True
    )
    assert session.text == "zzzzz0"

    solved = load_workbook(tmp_path / "game_solved.xlsx")
    rows = list(solved["Ledger"].iter_rows(values_only=True))
    assert rows[-1][:2] == ("password", "zzzzz0")
    assert load_workbook(path).sheetnames == ["Rules"]


@pytest.mark.parametrize(
    "rules",
    [
        _game_rules(),
        [
            MIN5,
            "This is my chicken Paul. He hasn't hatched yet, please put him in your password.",
            "Your password is not strong enough",
        ],
    ],
    ids=["game", "glyphs"],
)
def test_every_pushed_text_is_typeable(make_surface, providers, rules):
    surface = make_surface(rules)
    session = play(surface, surface, surface, providers=providers)
    assert session.ok, session.result
    alphabet = Policy().alphabet
    assert surface.pushes
    for text in surface.pushes:
        assert alphabet.accepts(text)
        assert all(ch.isprintable() for ch in text if ch.isascii())
