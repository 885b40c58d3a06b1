from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from passwordgame.engine import ReconcileResult, RepairEngine, Status
from passwordgame.errors import ParseError
from passwordgame.facts.base import FactProviders
from passwordgame.io.excel import copy_excel_file, load_rule_texts, save_ledger
from passwordgame.io.policy import load_policy
from passwordgame.io.surface import InputSink, RuleSource, TextObserver
from passwordgame.policy import Policy
from passwordgame.rules.parse import parse
from passwordgame.solvers.registry import SolverLibrary
from passwordgame.state import ConstraintState, RuleEntry
from passwordgame.sync import Synchronizer

logger = logging.getLogger(__name__)

__all__ = ["SessionResult", "build_engine", "solve", "play", "solve_excel"]


@dataclass(frozen=True, slots=True)
class SessionResult:
    text: str
    status: Status
    rules: tuple[RuleEntry, ...]
    skipped: tuple[str, ...]
    result: Optional[ReconcileResult]
    rounds: int

    @property
    def ok(self) -> bool:
        return self.status is Status.SATISFIED


def build_engine(
    policy: Optional[Policy] = None, providers: Optional[FactProviders] = None
) -> RepairEngine:
    policy = policy or Policy()
    return RepairEngine(SolverLibrary.from_policy(policy, providers), policy)


def _reveal(
    engine: RepairEngine, state: ConstraintState, raw: str, skipped: list[str]
) -> bool:
    """Parse `raw` and add it to the ledger; unparseable texts are skipped."""
    try:
        rule = parse(raw, engine.policy.families)
    except ParseError as exc:
        logger.warning("Skipping rule text: %s", exc)
        skipped.append(raw)
        return False
    engine.add_rule(state, rule)
    return True


def _session(
    state: ConstraintState,
    skipped: list[str],
    result: Optional[ReconcileResult],
    rounds: int,
) -> SessionResult:
    return SessionResult(
        text=state.text,
        status=result.status if result is not None else Status.SATISFIED,
        rules=tuple(state.rules),
        skipped=tuple(skipped),
        result=result,
        rounds=rounds,
    )


def solve(
    rule_texts: Iterable[str],
    *,
    policy: Optional[Policy] = None,
    providers: Optional[FactProviders] = None,
    initial_text: str = "",
) -> SessionResult:
    """Reveal rules one at a time, reconciling after each, as the game does.

    Stops at the first reconciliation that fails; later rules would never be
    revealed in a real game.
    """
    engine = build_engine(policy, providers)
    state = ConstraintState(text=initial_text, alphabet=engine.policy.alphabet)
    skipped: list[str] = []
    result: Optional[ReconcileResult] = None
    rounds = 0
    try:
        for raw in rule_texts:
            if not _reveal(engine, state, raw, skipped):
                continue
            rounds += 1
            result = engine.reconcile(state)
            if not result.ok:
                break
    finally:
        engine.library.close()
    return _session(state, skipped, result, rounds)


def play(
    source: RuleSource,
    sink: InputSink,
    observer: TextObserver,
    *,
    policy: Optional[Policy] = None,
    providers: Optional[FactProviders] = None,
    max_rounds: int = 100,
) -> SessionResult:
    """Poll the surface for rules, reconcile, push the text, repeat.

    The session ends when a poll reveals no new rule, when a reconciliation
    fails, or after `max_rounds`. SynchronizationError propagates.
    """
    engine = build_engine(policy, providers)
    state = ConstraintState(alphabet=engine.policy.alphabet)
    synchronizer = Synchronizer(
        sink,
        observer,
        retries=engine.policy.sync_retries,
        backoff=engine.policy.sync_backoff,
    )
    seen: set[str] = set()
    skipped: list[str] = []
    result: Optional[ReconcileResult] = None
    rounds = 0
    try:
        for rounds in range(1, max_rounds + 1):
            fresh = [raw for raw in source.poll() if raw not in seen]
            if not fresh and rounds > 1:
                synchronizer.sync(state)
                logger.info("No new rules after round %d", rounds - 1)
                rounds -= 1
                break
            for raw in fresh:
                seen.add(raw)
                _reveal(engine, state, raw, skipped)

            result = engine.reconcile(state)
            report = synchronizer.sync(state)
            logger.info(
                "Round %d: %s, %d rules, pushed=%s drift=%s",
                rounds,
                result.status.value,
                len(state.rules),
                report.pushed,
                report.drift,
            )
            if not result.ok:
                break
    finally:
        engine.library.close()
    return _session(state, skipped, result, rounds)


def solve_excel(
    *,
    input_path: str,
    sheet_name: str,
    column: int = 1,
    start: int = 1,
    policy_path: Optional[str] = None,
    providers: Optional[FactProviders] = None,
    save: bool = False,
    ledger_sheet: str = "Ledger",
) -> SessionResult:
    """Load rule texts from Excel, solve, and optionally write the ledger to a copy."""
    rule_texts = load_rule_texts(input_path, sheet_name, column=column, start=start)
    policy = load_policy(policy_path)

    session = solve(rule_texts, policy=policy, providers=providers)

    if save:
        output_path = copy_excel_file(input_path, "_solved")
        save_ledger(output_path, ledger_sheet, session)

    return session
