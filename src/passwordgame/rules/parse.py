"""Turn displayed rule text into typed rules."""

from __future__ import annotations

import logging
import re
from typing import Mapping

from passwordgame.errors import ParseError, ParseErrorKind
from passwordgame.rules.base import Rule
from passwordgame.rules.registry import RULE_CLASSES

logger = logging.getLogger(__name__)

__all__ = ["normalize", "parse"]

_TRANSLATION = str.maketrans(
    {
        "\u2018": "'",
        "\u2019": "'",
        "\u201a": "'",
        "\u201c": '"',
        "\u201d": '"',
        "\u201e": '"',
        "\u2013": "-",
        "\u2014": "-",
        "\u00a0": " ",
    }
)


def normalize(raw: str) -> str:
    """Fold typographic punctuation and collapse whitespace; case is preserved."""
    return re.sub(r"\s+", " ", raw.translate(_TRANSLATION)).strip()


def parse(raw: str, families: Mapping[str, bool] | None = None) -> Rule:
    """Recognise the family of `raw` and extract its parameters.

    `families` maps rule ids to enabled flags; disabled or missing-from-catalogue
    families are reported as UNRECOGNIZED.
    """
    text = normalize(raw)
    for cls in RULE_CLASSES:
        match = cls.PATTERN.search(text)
        if match is None:
            continue
        if families is not None and not families.get(cls.ID, True):
            logger.debug("Family '%s' matched but is disabled by policy", cls.ID)
            continue
        try:
            rule = cls.from_match(match, raw)
        except (ValueError, KeyError) as exc:
            raise ParseError(
                ParseErrorKind.MALFORMED_PARAMETERS, raw, family=cls.ID, detail=str(exc)
            ) from exc
        logger.debug("Parsed %r as %s", raw, rule.describe())
        return rule
    raise ParseError(ParseErrorKind.UNRECOGNIZED, raw)
