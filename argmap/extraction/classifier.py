"""
Keyword classification of candidate lines.

The classifier answers three questions with the active ``RuleTable``:
whether a line is an argument at all, what type/strength it has, and which
of the following lines attach to it as detail children.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from argmap.extraction.models import ArgumentType, Framework
from argmap.extraction.rules import DEFAULT_RULE_TABLE, RuleTable, contains_any


@dataclass(frozen=True)
class Classification:
    """Type, framework and strength assigned to one line."""

    type: ArgumentType
    framework: Optional[Framework]
    strength: int


class ArgumentClassifier:
    """Assigns type, framework and strength to lines using a rule table."""

    def __init__(self, rules: RuleTable | None = None):
        self.rules = rules or DEFAULT_RULE_TABLE

    def section_framework(self, header: str) -> Framework:
        """Framework for a section, from its header text."""
        return self.rules.match_framework(header)

    def section_type(self, header: str) -> ArgumentType:
        if contains_any(header, self.rules.header.opposing_keywords):
            return ArgumentType.OPPOSING
        return ArgumentType.NEUTRAL

    def is_argument(self, line: str) -> bool:
        return len(line) > self.rules.argument_min_length

    def classify(self, line: str, framework: Optional[Framework] = None) -> Classification:
        """Classify a level-2 argument line; ``framework`` comes from its section."""
        return Classification(
            type=self.rules.match_type(line),
            framework=framework,
            strength=self.rules.score_strength(line),
        )

    def classify_detail(self, line: str) -> Optional[ArgumentType]:
        """Detail type for a look-ahead line, or None if it is not a detail."""
        detail = self.rules.detail
        if len(line) <= detail.min_length or not contains_any(line, detail.keywords):
            return None
        if contains_any(line, detail.counter_keywords):
            return ArgumentType.COUNTERARGUMENT
        return ArgumentType.EVIDENCE

    def collect_details(self, following: Sequence[str]) -> list[tuple[str, ArgumentType]]:
        """Detail children from the lines after an argument.

        Examines at most ``detail.lookahead`` lines and stops at the first one
        that is not a detail. The caller skips the returned lines.
        """
        details = []
        for line in following[: self.rules.detail.lookahead]:
            detail_type = self.classify_detail(line)
            if detail_type is None:
                break
            details.append((line, detail_type))
        return details


__all__ = ["Classification", "ArgumentClassifier"]
