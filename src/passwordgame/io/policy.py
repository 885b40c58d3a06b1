"""YAML policy loader.

Assumptions (strict):
- The file is YAML; every top-level section is optional:
    engine:   max_cycles, conflict_order, shrink_conflicts
    solvers:  search_cap, max_candidates, time_limit
    facts:    timeout, retries, backoff
    sync:     retries, backoff
    alphabet: extra_glyphs (list of strings)
    rules:    rule_id -> bool
- Values are type-checked; wrong types raise TypeError, bad values ValueError.
- Unknown sections and keys are ignored with a PolicyWarning.
"""

from __future__ import annotations

import warnings
from typing import Any, Dict, Optional

from yaml import safe_load

from passwordgame.errors import PolicyWarning
from passwordgame.policy import Policy, normalize_families

# section -> key -> (Policy field, accepted types)
_SECTIONS: Dict[str, Dict[str, tuple[str, tuple[type, ...]]]] = {
    "engine": {
        "max_cycles": ("max_cycles", (int,)),
        "conflict_order": ("conflict_order", (str,)),
        "shrink_conflicts": ("shrink_conflicts", (bool,)),
    },
    "solvers": {
        "search_cap": ("search_cap", (int,)),
        "max_candidates": ("max_candidates", (int,)),
        "time_limit": ("time_limit", (int, float, type(None))),
    },
    "facts": {
        "timeout": ("fact_timeout", (int, float)),
        "retries": ("fact_retries", (int,)),
        "backoff": ("fact_backoff", (int, float)),
    },
    "sync": {
        "retries": ("sync_retries", (int,)),
        "backoff": ("sync_backoff", (int, float)),
    },
}


def _warn(msg: str) -> None:
    warnings.warn(msg, PolicyWarning, stacklevel=3)


def _section_values(name: str, section: Any) -> Dict[str, Any]:
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"Policy section '{name}' must be a mapping.")
    spec = _SECTIONS[name]
    values: Dict[str, Any] = {}
    for key, val in section.items():
        if key not in spec:
            _warn(f"Ignoring unknown key '{key}' in policy section '{name}'")
            continue
        field_name, types = spec[key]
        # bool is an int subclass; only accept it where bool is expected
        if not isinstance(val, types) or (isinstance(val, bool) and bool not in types):
            raise TypeError(
                f"Policy value for '{name}.{key}' must be "
                f"{' or '.join(t.__name__ for t in types)}, got {type(val).__name__}."
            )
        values[field_name] = val
    return values


def policy_from_mapping(data: Any) -> Policy:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Policy document must be a mapping of sections.")

    kwargs: Dict[str, Any] = {}
    for name, section in data.items():
        if name in _SECTIONS:
            kwargs.update(_section_values(name, section))
        elif name == "alphabet":
            kwargs.update(_alphabet(section))
        elif name == "rules":
            kwargs["families"] = normalize_families(section or {})
        else:
            _warn(f"Ignoring unknown policy section '{name}'")
    return Policy(**kwargs)


def _alphabet(section: Any) -> Dict[str, Any]:
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError("Policy section 'alphabet' must be a mapping.")
    for key in section:
        if key != "extra_glyphs":
            _warn(f"Ignoring unknown key '{key}' in policy section 'alphabet'")
    glyphs = section.get("extra_glyphs")
    if glyphs is None:
        return {}
    if not isinstance(glyphs, list) or not all(isinstance(g, str) and g for g in glyphs):
        raise TypeError("Policy value for 'alphabet.extra_glyphs' must be a list of strings.")
    return {"extra_glyphs": tuple(glyphs)}


def load_policy(path: Optional[str]) -> Policy:
    """Load a policy from YAML at `path`; None gives the defaults."""
    if path is None:
        return Policy()
    with open(path, "r", encoding="utf-8") as stream:
        parsed = safe_load(stream)
    return policy_from_mapping(parsed)
