"""
Decision variable construction for the token fill model.

One integer variable per candidate token: how many copies of that token are
appended to the password.
"""

from __future__ import annotations

from typing import Any, Dict, Sequence

from ortools.sat.python import cp_model


def create_counts(
    model: cp_model.CpModel, tokens: Sequence[tuple[str, int]], max_count: int
) -> Dict[int, Any]:
    """
    Create the decision variables N[t] in [0, max_count] giving the number of
    copies of token t.

    Parameters
    ----------
    model : cp_model.CpModel
        The CP-SAT model to which variables are attached.
    tokens : Sequence[(str, int)]
        Candidate (token, value) pairs.
    max_count : int
        Upper bound for every count.

    Returns
    -------
    Dict[int, IntVar-like]
        Mapping token index -> IntVar.
    """
    counts: Dict[int, Any] = {}
    for t, (token, _) in enumerate(tokens):
        counts[t] = model.NewIntVar(0, max_count, f"count_{t}_{token}")
    return counts
