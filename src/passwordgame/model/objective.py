"""Objectives for models."""

from __future__ import annotations

from typing import Any, Dict

from ortools.sat.python import cp_model


def minimize_token_count(
    model: cp_model.CpModel, counts: Dict[int, Any], max_count: int
) -> None:
    """Set objective to minimize the number of appended tokens.

    Among multisets of equal size, tokens listed earlier are preferred.
    """
    n = len(counts)
    weight = max_count * n * n + 1
    model.Minimize(sum(var * (weight + t) for t, var in counts.items()))
