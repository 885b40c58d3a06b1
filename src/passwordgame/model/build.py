"""Model assembly and solving for the token fill problem.

Given a target value and candidate (token, value) pairs, find a minimal
multiset of tokens whose values sum exactly to the target:
  1) create count variables N[t] (see `variables.create_counts`),
  2) add the sum constraint  sum_t N[t] * value[t] == target,
  3) minimize the number of tokens (see `objective.minimize_token_count`).

Solving is single-worker with a fixed seed so the same inputs always yield
the same multiset.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model

from passwordgame.model.objective import minimize_token_count
from passwordgame.model.variables import create_counts

logger = logging.getLogger(__name__)

__all__ = ["build_fill_model", "solve_fill", "SEED"]

SEED = 17

Tokens = Sequence[Tuple[str, int]]


def build_fill_model(
    *, target: int, tokens: Tokens, max_count: Optional[int] = None
) -> Tuple[cp_model.CpModel, Dict[int, Any], int]:
    """Build the fill model.

    Returns
    -------
    model : cp_model.CpModel
    counts : Dict[int, IntVar]
        Token index -> count variable.
    max_count : int
        The bound actually used for every count.
    """
    if target < 0:
        raise ValueError(f"target must be >= 0, got {target}")
    values = [value for _, value in tokens]
    if any(value <= 0 for value in values):
        raise ValueError("token values must be positive")
    if max_count is None:
        max_count = target // min(values) + 1 if values else 0

    model = cp_model.CpModel()
    counts = create_counts(model, tokens, max_count)
    model.Add(sum(var * value for (_, value), var in zip(tokens, counts.values())) == target)
    minimize_token_count(model, counts, max_count)
    return model, counts, max_count


def _exclude(model: cp_model.CpModel, counts: Dict[int, Any], found: Dict[int, int], tag: int) -> None:
    # At least one count must differ from the solution already found
    differs = []
    for t, var in counts.items():
        b = model.NewBoolVar(f"differs_{tag}_{t}")
        model.Add(var != found[t]).OnlyEnforceIf(b)
        model.Add(var == found[t]).OnlyEnforceIf(b.Not())
        differs.append(b)
    model.AddBoolOr(differs)


def solve_fill(
    target: int,
    tokens: Tokens,
    *,
    max_count: Optional[int] = None,
    max_solutions: int = 1,
    time_limit: Optional[float] = 2.0,
) -> List[List[str]]:
    """Return up to `max_solutions` token lists summing to `target`, best first.

    Each list holds tokens in catalogue order, repeated by their count. An
    empty result means no combination exists (or none was found in time).
    """
    if target == 0:
        return [[]]
    if not tokens:
        return []

    model, counts, _ = build_fill_model(target=target, tokens=tokens, max_count=max_count)
    results: List[List[str]] = []
    for n in range(max_solutions):
        solver = cp_model.CpSolver()
        solver.parameters.num_workers = 1
        solver.parameters.random_seed = SEED
        if time_limit is not None:
            solver.parameters.max_time_in_seconds = float(time_limit)
        status = solver.Solve(model)
        logger.debug("Fill target=%d solution %d: %s", target, n, solver.status_name(status))
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            break
        found = {t: int(solver.Value(var)) for t, var in counts.items()}
        results.append([tokens[t][0] for t in counts for _ in range(found[t])])
        _exclude(model, counts, found, n)
    return results
