"""
Minimal rule contracts.

- Rule: an immutable, parsed rule. Subclasses are frozen dataclasses whose fields
  are the parameters extracted from the rule text.
- TokenRule: a rule satisfied by the presence of one of a few tokens.
- FactRule: a TokenRule whose tokens ("answers") come from an external fact and
  are attached after parsing. Answers do not take part in equality, so a
  resolved rule still equals the rule that was revealed.

`validate` must stay pure and total: no IO, no solver calls.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from typing import Any, ClassVar

__all__ = ["Rule", "TokenRule", "FactRule", "Span", "validate"]

Span = tuple[int, int]


@dataclass(frozen=True, slots=True)
class Rule:
    """Base class for all password rules.

    Design notes
    ------------
    - `ID` (class var): stable, policy-facing identifier. **Required** for every
      rule class.
    - `PATTERN` (class var): compiled, case-insensitive recogniser run against the
      normalised rule text.
    - `from_match` builds an instance from the pattern match; it raises
      `ValueError` when the parameters are missing or malformed.
    """

    ID: ClassVar[str]
    PATTERN: ClassVar[re.Pattern[str]]

    @classmethod
    def from_match(cls, match: re.Match[str], raw: str) -> "Rule":
        return cls()

    def validate(self, text: str) -> bool:
        raise NotImplementedError

    def anchors(self, text: str) -> list[Span]:
        """Spans of `text` this rule currently depends on."""
        return []

    @property
    def rule_id(self) -> str:
        rid = getattr(self.__class__, "ID", None)
        if not isinstance(rid, str) or not rid:
            raise ValueError(
                f"Rule class {self.__class__.__name__} must define a non-empty ID"
            )
        return rid

    @property
    def params(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name) for f in dataclasses.fields(self) if f.compare
        }

    @property
    def needs_facts(self) -> bool:
        return False

    def describe(self) -> str:
        if not self.params:
            return self.rule_id
        args = ", ".join(f"{k}={v!r}" for k, v in self.params.items())
        return f"{self.rule_id}({args})"


@dataclass(frozen=True, slots=True)
class TokenRule(Rule):
    CASE_SENSITIVE: ClassVar[bool] = False

    def tokens(self) -> tuple[str, ...]:
        raise NotImplementedError

    def _fold(self, text: str) -> str:
        return text if self.CASE_SENSITIVE else text.lower()

    def validate(self, text: str) -> bool:
        haystack = self._fold(text)
        return any(self._fold(tok) in haystack for tok in self.tokens() if tok)

    def anchors(self, text: str) -> list[Span]:
        haystack = self._fold(text)
        for tok in self.tokens():
            if not tok:
                continue
            idx = haystack.find(self._fold(tok))
            if idx >= 0:
                return [(idx, idx + len(tok))]
        return []


@dataclass(frozen=True, slots=True)
class FactRule(TokenRule):
    answers: tuple[str, ...] = field(default=(), compare=False, kw_only=True)

    def tokens(self) -> tuple[str, ...]:
        return self.answers

    @property
    def needs_facts(self) -> bool:
        return not self.answers

    def with_answers(self, answers) -> "FactRule":
        return dataclasses.replace(self, answers=tuple(answers))

    def describe(self) -> str:
        base = Rule.describe(self)
        return f"{base} answers={list(self.answers)}" if self.answers else base


def validate(rule: Rule, text: str) -> bool:
    """Pure predicate: does `text` satisfy `rule`?"""
    return bool(rule.validate(text))
