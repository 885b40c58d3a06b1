import pytest

from passwordgame.errors import InjectionError, SynchronizationError
from passwordgame.rules import library as rules_lib
from passwordgame.state import ConstraintState
from passwordgame.sync import Synchronizer


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def synchronizer(surface, sleeps):
    return Synchronizer(surface, surface, retries=3, backoff=0.05, sleep=sleeps.append)


def test_new_revision_is_pushed_once(synchronizer, surface):
    state = ConstraintState(text="zzzzz")
    first = synchronizer.sync(state)
    second = synchronizer.sync(state)
    assert first.pushed and not first.drift
    assert not second.pushed and not second.drift
    assert surface.pushes == ["zzzzz"]


def test_drift_is_overwritten(synchronizer, surface):
    state = ConstraintState(text="zzzzz")
    synchronizer.sync(state)
    surface.text = "zzzzz typed by hand"

    report = synchronizer.sync(state)
    assert report.pushed and report.drift
    assert surface.text == "zzzzz"
    assert state.text == "zzzzz"


def test_changed_text_is_pushed(synchronizer, surface):
    state = ConstraintState(text="a")
    synchronizer.sync(state)
    state.set_text("ab")
    assert synchronizer.sync(state).pushed
    assert surface.pushes == ["a", "ab"]


def test_transient_failures_back_off(synchronizer, surface, sleeps):
    surface.failing_pushes = 2
    report = synchronizer.sync(ConstraintState(text="abc"))
    assert report.pushed
    assert report.attempts == 3
    assert sleeps == [pytest.approx(0.05), pytest.approx(0.1)]


def test_read_failures_are_retried(synchronizer, surface, sleeps):
    state = ConstraintState(text="abc")
    synchronizer.sync(state)
    surface.failing_reads = 1
    report = synchronizer.sync(state)
    assert not report.pushed
    assert report.attempts == 2
    assert sleeps == [pytest.approx(0.05)]


def test_exhausted_retries_raise(surface, sleeps):
    synchronizer = Synchronizer(surface, surface, retries=1, backoff=0.05, sleep=sleeps.append)
    surface.failing_pushes = 5
    with pytest.raises(SynchronizationError) as info:
        synchronizer.sync(ConstraintState(text="abc"))
    assert isinstance(info.value.__cause__, InjectionError)
    assert sleeps == [pytest.approx(0.05)]
    assert surface.pushes == []


def test_flag_changes_do_not_repush(synchronizer, surface):
    state = ConstraintState(text="zzzzz")
    state.add_rule(rules_lib.MinLength(5))
    synchronizer.sync(state)

    revision = state.revision
    state.mark(0, True)
    assert state.revision > revision

    report = synchronizer.sync(state)
    assert not report.pushed
    assert surface.pushes == ["zzzzz"]
