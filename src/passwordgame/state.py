"""Module with the in-memory ledger of a password game session"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import NamedTuple

from passwordgame.glyphs import DEFAULT_ALPHABET, Alphabet
from passwordgame.rules.base import Rule

logger = logging.getLogger(__name__)

__all__ = ["RuleEntry", "Snapshot", "ConstraintState"]


@dataclass(slots=True)
class RuleEntry:
    """Class to represent one revealed rule and its status

    Attributes:
        rule: The parsed rule
        satisfied: Whether the rule held the last time it was checked
        checked_revision: The ledger revision of that check (-1 if never checked)
    """

    rule: Rule
    satisfied: bool = False
    checked_revision: int = -1


class Snapshot(NamedTuple):
    text: str
    revision: int


@dataclass(slots=True)
class ConstraintState:
    """Authoritative session ledger.

    Attributes:
        text: The current candidate password
        rules: Revealed rules in discovery order (append-only)
        revision: Bumped on every text change and every satisfaction flip
        text_revision: Revision at which `text` last changed
        alphabet: Characters the rendering surface accepts
    """

    text: str = ""
    rules: list[RuleEntry] = field(default_factory=list)
    revision: int = 0
    text_revision: int = 0
    alphabet: Alphabet = DEFAULT_ALPHABET

    def __post_init__(self):
        if not self.alphabet.accepts(self.text):
            raise ValueError(
                f"Initial text contains unsupported characters: {self.alphabet.rejected(self.text)}"
            )

    def index_of(self, rule: Rule) -> int | None:
        for idx, entry in enumerate(self.rules):
            if entry.rule == rule:
                return idx
        return None

    def add_rule(self, rule: Rule) -> int:
        """Append `rule` unsatisfied; adding an equal rule again is a no-op."""
        existing = self.index_of(rule)
        if existing is not None:
            logger.debug("Rule %s already active at #%d", rule.describe(), existing)
            return existing
        self.rules.append(RuleEntry(rule))
        return len(self.rules) - 1

    def attach_facts(self, index: int, rule: Rule) -> None:
        """Swap in a resolved copy of the rule at `index`."""
        current = self.rules[index].rule
        if rule != current:
            raise ValueError(
                f"Resolved rule {rule.describe()} does not match #{index} {current.describe()}"
            )
        self.rules[index].rule = rule

    def mark(self, index: int, satisfied: bool) -> None:
        entry = self.rules[index]
        if entry.satisfied != satisfied:
            entry.satisfied = satisfied
            self.revision += 1
        entry.checked_revision = self.revision

    def set_text(self, text: str) -> None:
        if not self.alphabet.accepts(text):
            raise ValueError(
                f"Text contains unsupported characters: {self.alphabet.rejected(text)}"
            )
        if text == self.text:
            return
        self.text = text
        self.revision += 1
        self.text_revision = self.revision

    def is_stale(self, index: int) -> bool:
        return self.rules[index].checked_revision < self.text_revision

    def all_satisfied(self) -> bool:
        return all(
            entry.satisfied and not self.is_stale(idx)
            for idx, entry in enumerate(self.rules)
        )

    def satisfied_indices(self) -> list[int]:
        return [idx for idx, entry in enumerate(self.rules) if entry.satisfied]

    def unsatisfied_indices(self) -> list[int]:
        return [idx for idx, entry in enumerate(self.rules) if not entry.satisfied]

    def snapshot(self) -> Snapshot:
        return Snapshot(self.text, self.revision)
