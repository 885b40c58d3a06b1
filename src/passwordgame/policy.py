"""Engine policy and the boolean rule-family map.

The family map is:
    rule_id -> enabled (bool)

Constraints/assumptions:
- Values **must be booleans**; any other type raises.
- Missing known families default to **True** (enabled) and warn.
- Unknown keys are ignored and warn.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from passwordgame.data import GAME_GLYPHS
from passwordgame.errors import PolicyWarning
from passwordgame.glyphs import Alphabet
from passwordgame.rules import registry

__all__ = ["CONFLICT_ORDERS", "Policy", "normalize_families", "all_enabled"]

CONFLICT_ORDERS = ("newest_first", "oldest_first")

essential_rules = tuple(registry.list_rule_ids())


def all_enabled() -> Dict[str, bool]:
    return {rid: True for rid in essential_rules}


def normalize_families(raw: Mapping[str, Any]) -> Dict[str, bool]:
    """Extract a strict rule_id -> bool map from the `rules:` section."""
    if not isinstance(raw, Mapping):
        raise ValueError("Policy 'rules' section must be a mapping of rule id -> bool.")

    enabled_map: Dict[str, bool] = {}

    unknown = [k for k in raw.keys() if k not in essential_rules]
    for k in sorted(unknown):
        warnings.warn(
            f"Ignoring unknown policy rule id: '{k}'",
            PolicyWarning,
            stacklevel=2,
        )

    for rid in essential_rules:
        if rid in raw:
            val = raw[rid]
            if not isinstance(val, bool):
                raise TypeError(
                    f"Policy value for '{rid}' must be a boolean, got {type(val).__name__}."
                )
            enabled_map[rid] = val
        else:
            enabled_map[rid] = True  # default ON
            warnings.warn(
                f"Policy does not specify rule '{rid}'; defaulting to True (enabled)",
                PolicyWarning,
                stacklevel=2,
            )

    return enabled_map


@dataclass(frozen=True, slots=True)
class Policy:
    """Tunable knobs of a session.

    Attributes:
        max_cycles: Reconciliation cycle budget.
        conflict_order: "newest_first" or "oldest_first".
        shrink_conflicts: Shrink failing rule sets to a minimal conflict.
        search_cap: Iteration bound of the length search.
        max_candidates: Ranked candidates kept per proposal.
        time_limit: CP-SAT time limit in seconds (None for no limit).
        fact_timeout, fact_retries, fact_backoff: Fact boundary settings.
        sync_retries, sync_backoff: Synchronizer settings.
        extra_glyphs: Non-ASCII glyphs the surface accepts.
        families: rule_id -> enabled.
    """

    max_cycles: int = 64
    conflict_order: str = "newest_first"
    shrink_conflicts: bool = True
    search_cap: int = 500
    max_candidates: int = 6
    time_limit: float | None = 2.0
    fact_timeout: float = 5.0
    fact_retries: int = 2
    fact_backoff: float = 0.1
    sync_retries: int = 3
    sync_backoff: float = 0.05
    extra_glyphs: tuple[str, ...] = GAME_GLYPHS
    families: Mapping[str, bool] = field(default_factory=all_enabled)

    def __post_init__(self):
        if self.conflict_order not in CONFLICT_ORDERS:
            raise ValueError(
                f"conflict_order must be one of {CONFLICT_ORDERS}, got '{self.conflict_order}'"
            )
        for name in ("max_cycles", "search_cap", "max_candidates"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        for name in ("fact_retries", "sync_retries"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")

    @property
    def alphabet(self) -> Alphabet:
        return Alphabet.with_glyphs(self.extra_glyphs)
