import threading

import pytest

from passwordgame.facts.base import FactBoundary, Lookup


def test_found_answers_are_cached():
    calls = []

    def lookup(x):
        calls.append(x)
        return x * 2

    boundary = FactBoundary(timeout=1.0, retries=0)
    assert boundary.call("double", lookup, 3).value == 6
    assert boundary.call("double", lookup, 3).value == 6
    assert calls == [3]


def test_none_is_not_found():
    result = FactBoundary(timeout=1.0, retries=0).call("nothing", lambda: None)
    assert result.status is Lookup.NOT_FOUND
    assert result.detail == "not found"


def test_provider_errors_become_not_found():
    def broken():
        raise RuntimeError("service down")

    result = FactBoundary(timeout=1.0, retries=2).call("broken", broken)
    assert result.status is Lookup.NOT_FOUND
    assert "service down" in result.detail


def test_abandoned_lookup_runs_on_a_daemon_thread():
    release = threading.Event()
    sleeps = []
    boundary = FactBoundary(timeout=0.05, retries=1, backoff=0.5, sleep=sleeps.append)
    try:
        result = boundary.call("stuck", release.wait)
        assert result.status is Lookup.TIMEOUT
        assert sleeps == [pytest.approx(0.5)]

        # a hung worker must not keep the interpreter alive at exit
        stuck = [t for t in threading.enumerate() if t.name == "fact-lookup-stuck"]
        assert len(stuck) == 2
        assert all(t.daemon for t in stuck)
    finally:
        release.set()


@pytest.mark.parametrize("kwargs", [{"timeout": 0}, {"retries": -1}])
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        FactBoundary(**kwargs)
