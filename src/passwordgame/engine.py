"""Incremental repair of the password against every revealed rule.

Each reconciliation cycle runs

    Validating -> Solving -> Applying -> Verifying -> {Idle | Backtracking}

1) re-validate every rule and refresh its satisfaction flag,
2) ask the solver of one unsatisfied rule (by conflict order) for ranked edits,
3) apply the first edit that breaks no satisfied rule, or remember the edit
   with the fewest regressions as a fallback,
4) repeat until every rule holds or no unvisited edit is left.

When the cycle after a regressing edit finds nothing to apply, that edit is
undone and the search goes on from the text before it.

Texts already visited during a reconciliation are never applied again, and the
number of cycles is bounded, so the loop always terminates. On failure the text
is restored and the failing rule set is shrunk to a subset-minimal conflict by
deletion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from passwordgame.policy import Policy
from passwordgame.rules.base import Rule
from passwordgame.solvers.base import (
    AlreadySatisfied,
    CandidateEdit,
    Infeasible,
    SolveContext,
)
from passwordgame.solvers.registry import SolverLibrary
from passwordgame.state import ConstraintState

logger = logging.getLogger(__name__)

__all__ = ["Status", "ReconcileResult", "RepairEngine"]


class Status(Enum):
    SATISFIED = "satisfied"
    UNSATISFIABLE = "unsatisfiable"
    INFEASIBLE = "infeasible"


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Outcome of one `RepairEngine.reconcile` call.

    Attributes:
        status: SATISFIED, UNSATISFIABLE or INFEASIBLE.
        text: The ledger text after the call (restored on failure).
        cycles: Number of edits applied.
        conflict: Rules that cannot hold together (empty on success).
        infeasible: Solver refusals seen in the last cycle.
    """

    status: Status
    text: str
    cycles: int
    conflict: tuple[Rule, ...] = ()
    infeasible: tuple[Infeasible, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status is Status.SATISFIED

    @property
    def retryable(self) -> bool:
        return any(inf.retryable for inf in self.infeasible)


class RepairEngine:
    def __init__(self, library: SolverLibrary, policy: Optional[Policy] = None):
        self.library = library
        self.policy = policy or Policy()

    def add_rule(self, state: ConstraintState, rule: Rule) -> int:
        before = len(state.rules)
        index = state.add_rule(rule)
        if len(state.rules) > before:
            logger.info("Rule #%d revealed: %s", index, rule.describe())
        return index

    def reconcile(self, state: ConstraintState) -> ReconcileResult:
        start = state.text
        result = self._run(state)
        if result.ok:
            logger.info(
                "Reconciled %d rules in %d edits: %r", len(state.rules), result.cycles, state.text
            )
            return result

        state.set_text(start)
        self._validate_all(state)
        conflict = result.conflict
        if result.status is Status.UNSATISFIABLE and self.policy.shrink_conflicts:
            conflict = self._shrink_conflict(state, conflict)
        logger.warning(
            "Reconciliation %s after %d edits; conflict: %s",
            result.status.value,
            result.cycles,
            ", ".join(rule.describe() for rule in conflict),
        )
        return ReconcileResult(
            status=result.status,
            text=state.text,
            cycles=result.cycles,
            conflict=conflict,
            infeasible=result.infeasible,
        )

    # ---------- one reconciliation, without restore ----------

    def _run(self, state: ConstraintState) -> ReconcileResult:
        visited = {state.text}
        # (text before, rule index) of each regressing edit still in place
        trail: list[tuple[str, int]] = []
        regressed = False
        applied = 0
        for _ in range(self.policy.max_cycles):
            self._validate_all(state)
            pending = state.unsatisfied_indices()
            if not pending:
                return ReconcileResult(Status.SATISFIED, state.text, applied)

            choice, refusals, settled = self._solve_cycle(state, pending, visited)
            if choice is None and settled:
                continue
            if choice is None:
                if trail:
                    previous, culprit = trail.pop()
                    logger.info(
                        "Dead end after the regressing edit for #%d; back to %r",
                        culprit,
                        previous,
                    )
                    state.set_text(previous)
                    continue
                if len(refusals) == len(pending) and not regressed:
                    return ReconcileResult(
                        Status.INFEASIBLE,
                        state.text,
                        applied,
                        conflict=tuple(inf.rule for inf in refusals),
                        infeasible=tuple(refusals),
                    )
                return ReconcileResult(
                    Status.UNSATISFIABLE,
                    state.text,
                    applied,
                    conflict=tuple(entry.rule for entry in state.rules),
                    infeasible=tuple(refusals),
                )

            index, edit, broken = choice
            if broken:
                trail.append((state.text, index))
                regressed = True
            visited.add(edit.text)
            state.set_text(edit.text)
            applied += 1

        self._validate_all(state)
        if state.all_satisfied():
            return ReconcileResult(Status.SATISFIED, state.text, applied)
        logger.warning("Cycle budget of %d spent", self.policy.max_cycles)
        return ReconcileResult(
            Status.UNSATISFIABLE,
            state.text,
            applied,
            conflict=tuple(entry.rule for entry in state.rules),
        )

    def _solve_cycle(
        self, state: ConstraintState, pending: list[int], visited: set[str]
    ) -> tuple[Optional[tuple[int, CandidateEdit, int]], list[Infeasible], int]:
        refusals: list[Infeasible] = []
        settled = 0
        fallback: Optional[tuple[int, CandidateEdit, int]] = None

        for index in self._order(pending):
            rule = state.rules[index].rule
            context = self._context(state, index)

            if rule.needs_facts:
                resolved = self.library.resolve(rule, state.text, context)
                if isinstance(resolved, Infeasible):
                    refusals.append(resolved)
                    continue
                state.attach_facts(index, resolved)
                rule = resolved

            outcome = self.library.propose(state.text, rule, context)
            if isinstance(outcome, AlreadySatisfied):
                state.mark(index, True)
                settled += 1
                continue
            if isinstance(outcome, Infeasible):
                refusals.append(outcome)
                continue

            satisfied = [i for i in state.satisfied_indices() if i != index]
            for candidate in outcome.candidates:
                if not state.alphabet.accepts(candidate.text):
                    logger.debug("Skip %r: unsupported characters", candidate.rationale)
                    continue
                if candidate.text in visited:
                    logger.debug("Skip %r: text already visited", candidate.rationale)
                    continue
                if not rule.validate(candidate.text):
                    logger.debug("Skip %r: does not satisfy %s", candidate.rationale, rule.rule_id)
                    continue
                broken = [
                    i for i in satisfied if not state.rules[i].rule.validate(candidate.text)
                ]
                if not broken:
                    logger.info(
                        "Apply %s for #%d %s -> %r",
                        candidate.rationale,
                        index,
                        rule.rule_id,
                        candidate.text,
                    )
                    return (index, candidate, 0), refusals, settled
                logger.debug(
                    "Candidate %r breaks rules %s", candidate.rationale, broken
                )
                if fallback is None or len(broken) < fallback[2]:
                    fallback = (index, candidate, len(broken))

        if fallback is not None:
            index, candidate, count = fallback
            logger.info(
                "No clean edit; applying %s for #%d with %d regression(s) -> %r",
                candidate.rationale,
                index,
                count,
                candidate.text,
            )
            return fallback, refusals, settled
        return None, refusals, settled

    def _order(self, pending: list[int]) -> list[int]:
        if self.policy.conflict_order == "oldest_first":
            return list(pending)
        newest = max(pending)
        return [newest] + [i for i in pending if i != newest]

    def _context(self, state: ConstraintState, index: int) -> SolveContext:
        protected: set[int] = set()
        for i in state.satisfied_indices():
            if i == index:
                continue
            for start, end in state.rules[i].rule.anchors(state.text):
                protected.update(range(start, end))
        peers = tuple(entry.rule for i, entry in enumerate(state.rules) if i != index)
        return SolveContext(
            protected=frozenset(protected),
            peers=peers,
            search_cap=self.policy.search_cap,
            max_candidates=self.policy.max_candidates,
        )

    @staticmethod
    def _validate_all(state: ConstraintState) -> None:
        for index, entry in enumerate(state.rules):
            state.mark(index, entry.rule.validate(state.text))

    # ---------- conflict extraction ----------

    def _fails(self, text: str, rules: list[Rule], state: ConstraintState) -> bool:
        scratch = ConstraintState(text=text, alphabet=state.alphabet)
        for rule in rules:
            scratch.add_rule(rule)
        return not self._run(scratch).ok

    def _shrink_conflict(
        self, state: ConstraintState, conflict: tuple[Rule, ...]
    ) -> tuple[Rule, ...]:
        # Greedy deletion: drop each rule and keep it dropped if the rest still fails
        core = list(conflict)
        for rule in conflict:
            trial = [r for r in core if r is not rule]
            if self._fails(state.text, trial, state):
                core = trial
        return tuple(core)
