import warnings
from pathlib import Path

import pytest

from passwordgame.errors import PolicyWarning
from passwordgame.io.policy import load_policy, policy_from_mapping
from passwordgame.policy import Policy, normalize_families
from passwordgame.rules.registry import list_rule_ids

DEFAULT_POLICY = Path(__file__).resolve().parents[1] / "policies" / "default.yaml"


def test_default_policy_file_loads_cleanly():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        policy = load_policy(str(DEFAULT_POLICY))
    assert policy == Policy()
    assert set(policy.families) == set(list_rule_ids())


def test_no_path_gives_defaults():
    assert load_policy(None) == Policy()


def test_sections_map_onto_fields():
    policy = policy_from_mapping(
        {
            "engine": {"max_cycles": 10, "conflict_order": "oldest_first"},
            "solvers": {"time_limit": None},
            "facts": {"timeout": 1, "retries": 0},
            "sync": {"backoff": 0.5},
            "alphabet": {"extra_glyphs": ["*"]},
        }
    )
    assert policy.max_cycles == 10
    assert policy.conflict_order == "oldest_first"
    assert policy.time_limit is None
    assert policy.fact_timeout == 1 and policy.fact_retries == 0
    assert policy.sync_backoff == 0.5
    assert policy.alphabet.extra_glyphs == ("*",)


def test_wrong_types_raise():
    with pytest.raises(TypeError, match="engine.max_cycles"):
        policy_from_mapping({"engine": {"max_cycles": "ten"}})
    with pytest.raises(TypeError):
        policy_from_mapping({"solvers": {"search_cap": True}})
    with pytest.raises(TypeError):
        policy_from_mapping({"alphabet": {"extra_glyphs": "abc"}})
    with pytest.raises(ValueError):
        policy_from_mapping(["not", "a", "mapping"])


def test_bad_values_raise():
    with pytest.raises(ValueError, match="conflict_order"):
        policy_from_mapping({"engine": {"conflict_order": "random"}})
    with pytest.raises(ValueError):
        Policy(max_cycles=0)
    with pytest.raises(ValueError):
        Policy(sync_retries=-1)


def test_unknown_sections_and_keys_warn():
    with pytest.warns(PolicyWarning, match="unknown policy section 'ui'"):
        policy_from_mapping({"ui": {}})
    with pytest.warns(PolicyWarning, match="unknown key 'colour'"):
        policy_from_mapping({"engine": {"colour": "red"}})


def test_rule_families_are_strict_booleans():
    with pytest.warns(PolicyWarning):
        families = normalize_families({"min_length": False, "bogus": True})
    assert families["min_length"] is False
    assert families["max_length"] is True
    assert "bogus" not in families

    with pytest.raises(TypeError, match="min_length"):
        normalize_families({"min_length": "yes"})
