"""Exception types shared across passwordgame.

Solver and reconciliation failures are *values* (see `solvers.base.Infeasible`
and `engine.ReconcileResult`); the classes here cover rule parsing, the
boundary collaborators and configuration warnings.
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "ParseErrorKind",
    "ParseError",
    "InjectionError",
    "ObserveError",
    "SynchronizationError",
    "PolicyWarning",
]


class ParseErrorKind(Enum):
    UNRECOGNIZED = "unrecognized"
    MALFORMED_PARAMETERS = "malformed_parameters"


class ParseError(ValueError):
    """Raised when a rule text cannot be turned into a typed rule.

    Attributes:
        kind: UNRECOGNIZED when no enabled family matches, MALFORMED_PARAMETERS
            when a family matches but its parameters cannot be extracted.
        raw: The rule text as received.
        family: The matching family id, if any.
    """

    def __init__(
        self, kind: ParseErrorKind, raw: str, *, family: str | None = None, detail: str = ""
    ):
        self.kind = kind
        self.raw = raw
        self.family = family
        self.detail = detail
        msg = f"{kind.value}: {raw!r}"
        if family:
            msg += f" (family '{family}')"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class InjectionError(RuntimeError):
    """The input sink could not replace the surface content."""


class ObserveError(RuntimeError):
    """The rendered text could not be read back."""


class SynchronizationError(RuntimeError):
    """Boundary retries were exhausted while synchronizing the surface."""


class PolicyWarning(UserWarning):
    pass
