from __future__ import annotations

import logging
from typing import Optional

from passwordgame.facts.base import FactBoundary, FactProviders
from passwordgame.policy import Policy
from passwordgame.rules.base import Rule
from passwordgame.rules.registry import RULE_CLASSES

from . import basic, catalogue, lookup, numeric, search
from .base import SolveContext, SolveOutcome, Solver

logger = logging.getLogger(__name__)

__all__ = ["SolverLibrary"]


class SolverLibrary:
    """Maps every rule family to exactly one solver.

    Construction fails when a family registered in `RULE_CLASSES` has no
    solver, or when two solvers claim the same family.
    """

    def __init__(
        self,
        providers: Optional[FactProviders] = None,
        *,
        boundary: Optional[FactBoundary] = None,
        time_limit: Optional[float] = 2.0,
    ):
        self.providers = providers or FactProviders()
        self.boundary = boundary or FactBoundary()
        solvers: list[Solver] = [
            basic.MinLengthSolver(),
            basic.MaxLengthSolver(),
            basic.CharacterClassSolver(),
            basic.SubstringSolver(),
            basic.EndsWithDigitSolver(),
            basic.EndsWithWordSolver(),
            basic.LetterRemovalSolver(),
            basic.NoFireSolver(),
            basic.AlwaysSatisfiedSolver(),
            catalogue.MonthSolver(),
            catalogue.ListedTokenSolver(),
            catalogue.RomanNumeralSolver(),
            catalogue.ElementSymbolSolver(),
            catalogue.EggSolver(),
            catalogue.StrengthSolver(),
            numeric.DigitSumSolver(time_limit),
            numeric.RomanProductSolver(),
            numeric.AtomicSumSolver(time_limit),
            numeric.LeapYearSolver(),
            search.LengthSearchSolver(),
            lookup.WordleSolver(self.providers, self.boundary),
            lookup.MoonPhaseSolver(self.providers, self.boundary),
            lookup.CountrySolver(self.providers, self.boundary),
            lookup.ChessSolver(self.providers, self.boundary),
            lookup.VideoSolver(self.providers, self.boundary),
            lookup.TimeSolver(self.providers, self.boundary),
            lookup.SacrificeSolver(self.providers, self.boundary),
        ]

        self._by_family: dict[type[Rule], Solver] = {}
        for solver in solvers:
            for family in solver.FAMILIES:
                if family in self._by_family:
                    raise ValueError(
                        f"Rule family '{family.ID}' claimed by both "
                        f"{type(self._by_family[family]).__name__} and {type(solver).__name__}"
                    )
                self._by_family[family] = solver

        missing = [cls.ID for cls in RULE_CLASSES if cls not in self._by_family]
        if missing:
            raise ValueError(f"No solver registered for rule families: {', '.join(missing)}")

    @classmethod
    def from_policy(
        cls, policy: Policy, providers: Optional[FactProviders] = None
    ) -> "SolverLibrary":
        boundary = FactBoundary(
            timeout=policy.fact_timeout,
            retries=policy.fact_retries,
            backoff=policy.fact_backoff,
        )
        return cls(providers, boundary=boundary, time_limit=policy.time_limit)

    def solver_for(self, rule: Rule) -> Solver:
        try:
            return self._by_family[type(rule)]
        except KeyError as e:
            raise KeyError(f"No solver for rule family '{rule.rule_id}'") from e

    def propose(
        self, text: str, rule: Rule, context: Optional[SolveContext] = None
    ) -> SolveOutcome:
        return self.solver_for(rule).propose(text, rule, context)

    def resolve(self, rule: Rule, text: str, context: Optional[SolveContext] = None):
        return self.solver_for(rule).resolve(rule, text, context)

    def close(self) -> None:
        self.boundary.close()
