import time

import pytest

from conftest import StubVideos
from passwordgame.data import EGG
from passwordgame.engine import RepairEngine, Status
from passwordgame.facts.base import FactBoundary
from passwordgame.glyphs import Alphabet
from passwordgame.policy import Policy
from passwordgame.rules import library as rules_lib
from passwordgame.solvers.base import InfeasibleKind
from passwordgame.solvers.registry import SolverLibrary
from passwordgame.state import ConstraintState


def _reveal(engine, state, *rules):
    for rule in rules:
        engine.add_rule(state, rule)
    return engine.reconcile(state)


def test_single_rule_is_repaired(engine, state):
    result = _reveal(engine, state, rules_lib.MinLength(5))
    assert result.ok
    assert result.text == state.text == "zzzzz"
    assert result.cycles == 1
    assert state.all_satisfied()


def test_new_rule_keeps_earlier_ones(engine, state):
    _reveal(engine, state, rules_lib.MinLength(5))
    result = _reveal(engine, state, rules_lib.EndsWithDigit())
    assert result.ok
    assert state.text == "zzzzz0"


def test_reconcile_without_pending_rules_is_a_no_op(engine, state):
    _reveal(engine, state, rules_lib.MinLength(5))
    revision = state.revision
    result = engine.reconcile(state)
    assert result.ok and result.cycles == 0
    assert state.revision == revision


def test_contradiction_is_unsatisfiable_and_restores_text(engine, state):
    _reveal(engine, state, rules_lib.ContainsSubstring("CAT"))
    assert state.text == "CAT"

    result = _reveal(engine, state, rules_lib.NoLetters())
    assert result.status is Status.UNSATISFIABLE
    assert result.text == state.text == "CAT"
    assert result.conflict == (rules_lib.ContainsSubstring("CAT"), rules_lib.NoLetters())


def test_conflict_is_shrunk_to_the_clashing_rules(engine, state):
    _reveal(engine, state, rules_lib.MinLength(3), rules_lib.ContainsSubstring("CAT"))
    result = _reveal(engine, state, rules_lib.NoLetters())
    assert result.status is Status.UNSATISFIABLE
    assert rules_lib.MinLength(3) not in result.conflict
    assert set(result.conflict) == {rules_lib.ContainsSubstring("CAT"), rules_lib.NoLetters()}


def test_conflict_shrinking_can_be_disabled(library, state):
    engine = RepairEngine(library, Policy(shrink_conflicts=False))
    _reveal(engine, state, rules_lib.MinLength(3), rules_lib.ContainsSubstring("CAT"))
    result = _reveal(engine, state, rules_lib.NoLetters())
    assert len(result.conflict) == 3


def test_unsupported_glyphs_are_never_applied(engine):
    state = ConstraintState(alphabet=Alphabet(extra_glyphs=()))
    result = _reveal(engine, state, rules_lib.ContainsEgg())
    assert not result.ok
    assert state.text == ""
    assert EGG not in state.text


def test_missing_fact_is_infeasible(providers, state):
    providers.videos = StubVideos()
    library = SolverLibrary(providers, boundary=FactBoundary(timeout=2.0, retries=0))
    engine = RepairEngine(library)
    try:
        result = _reveal(engine, state, rules_lib.VideoDurationMatch(754))
    finally:
        library.close()
    assert result.status is Status.INFEASIBLE
    assert result.conflict == (rules_lib.VideoDurationMatch(754),)
    assert result.infeasible[0].kind is InfeasibleKind.NOT_FOUND
    assert not result.retryable


class SlowWordle:
    def answer(self, day):
        time.sleep(0.5)
        return "crane"


def test_fact_timeout_is_retryable(providers, state):
    providers.wordle = SlowWordle()
    sleeps = []
    boundary = FactBoundary(timeout=0.05, retries=1, backoff=0.01, sleep=sleeps.append)
    library = SolverLibrary(providers, boundary=boundary)
    engine = RepairEngine(library)
    try:
        result = _reveal(engine, state, rules_lib.WordleAnswer())
    finally:
        library.close()
    assert result.status is Status.INFEASIBLE
    assert result.infeasible[0].kind is InfeasibleKind.TIMEOUT
    assert result.retryable
    assert sleeps == [pytest.approx(0.01)]


def test_fact_rules_are_resolved_in_the_loop(engine, state):
    result = _reveal(engine, state, rules_lib.WordleAnswer(), rules_lib.CurrentTime())
    assert result.ok
    assert "crane" in state.text.lower()
    assert "2:05" in state.text
    assert state.rules[0].rule.answers == ("crane",)


def test_one_edit_can_satisfy_several_rules(engine, state):
    result = _reveal(engine, state, rules_lib.ContainsDigit(), rules_lib.LeapYear())
    assert result.ok
    assert state.all_satisfied()


def test_cycle_budget_bounds_the_loop(library, state):
    engine = RepairEngine(library, Policy(max_cycles=1))
    result = _reveal(
        engine, state, rules_lib.MinLength(5), rules_lib.EndsWithDigit(), rules_lib.ContainsUppercase()
    )
    assert result.status is Status.UNSATISFIABLE
    assert result.cycles == 1
    assert state.text == ""


@pytest.mark.parametrize("order", ["newest_first", "oldest_first"])
def test_both_conflict_orders_converge(library, order):
    engine = RepairEngine(library, Policy(conflict_order=order))
    state = ConstraintState()
    result = _reveal(
        engine,
        state,
        rules_lib.MinLength(5),
        rules_lib.ContainsDigit(),
        rules_lib.ContainsUppercase(),
        rules_lib.DigitSum(12),
    )
    assert result.ok
    assert all(entry.rule.validate(state.text) for entry in state.rules)


def test_regressing_edit_is_undone_when_it_leads_nowhere(engine, state):
    _reveal(engine, state, rules_lib.RomanNumeralProduct(5))
    assert state.text == "V"

    # every placement of "X" adds a numeral, which the product rule then cannot absorb
    result = _reveal(engine, state, rules_lib.ContainsSubstring("X"))
    assert result.status is Status.UNSATISFIABLE
    assert rules_lib.ContainsSubstring("X") in result.conflict
    assert set(result.conflict) == {
        rules_lib.RomanNumeralProduct(5),
        rules_lib.ContainsSubstring("X"),
    }
    assert result.text == state.text == "V"


def test_readding_an_active_rule_changes_nothing(engine, state):
    _reveal(engine, state, rules_lib.MinLength(5), rules_lib.EndsWithDigit())
    text, revision = state.text, state.revision
    flags = [entry.satisfied for entry in state.rules]

    assert engine.add_rule(state, rules_lib.MinLength(5)) == 0
    result = engine.reconcile(state)

    assert result.ok and result.cycles == 0
    assert len(state.rules) == 2
    assert state.text == text
    assert state.revision == revision
    assert [entry.satisfied for entry in state.rules] == flags
