"""
Keyword rule tables for argument extraction.

Every classification decision the extractor makes is driven by an ordered
table of ``KeywordRule`` entries (predicate → outcome) instead of hard-coded
branches, so precedence is visible and testable:

- ``type_rules``: argument type for a level-2 line (first match wins)
- ``framework_rules``: framework for a section header, evaluated in
  ascending ``priority`` (ethical families, then practical/stakeholder,
  then domain families)
- ``strength``: base score plus additive keyword adjustments, clamped
- ``header`` / ``detail``: segmentation and look-ahead predicates

All keyword matching is case-insensitive substring matching.

Tables can be replaced from YAML::

    framework_rules:
      - outcome: legal
        priority: 5
        family: domain
        keywords: [legal, justice, law]

Sections missing from the YAML keep their built-in defaults.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import yaml

from argmap.exceptions import RuleTableError
from argmap.extraction.models import MAX_STRENGTH, MIN_STRENGTH, ArgumentType, Framework

logger = logging.getLogger(__name__)


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    """True if any keyword occurs in ``text`` (case-insensitive substring)."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


@dataclass(frozen=True)
class KeywordRule:
    """A single predicate → outcome entry.

    Attributes:
        outcome: Value produced when the rule matches (an enum value string).
        keywords: Lowercase substrings; the rule matches if any is present.
        priority: Lower values are evaluated first. Ties keep table order.
        family: Informational grouping (e.g. "ethical", "domain").
    """

    outcome: str
    keywords: tuple[str, ...]
    priority: int = 0
    family: str = ""

    def matches(self, text: str) -> bool:
        return contains_any(text, self.keywords)


@dataclass(frozen=True)
class StrengthAdjustment:
    """Additive strength change applied once when any keyword matches."""

    delta: int
    keywords: tuple[str, ...]
    name: str = ""

    def matches(self, text: str) -> bool:
        return contains_any(text, self.keywords)


@dataclass(frozen=True)
class StrengthRules:
    base: int = 3
    minimum: int = MIN_STRENGTH
    maximum: int = MAX_STRENGTH
    adjustments: tuple[StrengthAdjustment, ...] = ()

    def score(self, text: str) -> int:
        value = self.base
        for adjustment in self.adjustments:
            if adjustment.matches(text):
                value += adjustment.delta
        return max(self.minimum, min(self.maximum, value))


@dataclass(frozen=True)
class HeaderRules:
    """Segmentation predicates.

    A header candidate contains a colon, none of ``excluded_keywords`` and is
    shorter than ``max_length``. Lines starting with a marker are dropped.
    """

    excluded_keywords: tuple[str, ...] = ("example", "study", "research", "however")
    max_length: int = 150
    markers: tuple[str, ...] = ("SUMMARY:", "DETAILED ANALYSIS:")
    opposing_keywords: tuple[str, ...] = ("counterargument", "opposing")


@dataclass(frozen=True)
class DetailRules:
    """Look-ahead predicates for level-3 detail children."""

    min_length: int = 15
    lookahead: int = 2
    keywords: tuple[str, ...] = (
        "example",
        "evidence",
        "study",
        "research",
        "however",
        "but",
        "furthermore",
        "additionally",
    )
    counter_keywords: tuple[str, ...] = ("however", "but")
    strength: int = 3


DEFAULT_TYPE_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("counterargument", ("however", "but", "critics", "opposing"), priority=0),
    KeywordRule("supporting", ("support", "benefit", "advantage", "positive"), priority=1),
    KeywordRule("evidence", ("evidence", "study", "research", "data"), priority=2),
)

# Ethical lenses outrank practical ones, which outrank domain ones. A header
# such as "Individual Rights vs Collective Good" therefore maps to rule-based.
DEFAULT_FRAMEWORK_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("consequence-based", ("utilitarian", "greatest good"), 0, "ethical"),
    KeywordRule("rule-based", ("deontological", "duty", "rights"), 1, "ethical"),
    KeywordRule("character-based", ("virtue", "character"), 2, "ethical"),
    KeywordRule("practical", ("practical", "implementation"), 3, "practical"),
    KeywordRule("stakeholder", ("stakeholder", "impact"), 4, "stakeholder"),
    KeywordRule("legal", ("legal", "justice", "law"), 5, "domain"),
    KeywordRule("emotional", ("emotional", "psychological"), 6, "domain"),
    KeywordRule("economic", ("economic", "financial"), 7, "domain"),
    KeywordRule("social", ("social", "community"), 8, "domain"),
    KeywordRule("individual", ("individual", "personal"), 9, "domain"),
    KeywordRule("collective", ("collective", "public"), 10, "domain"),
)

DEFAULT_STRENGTH_RULES = StrengthRules(
    adjustments=(
        StrengthAdjustment(+1, ("clearly", "obviously", "undoubtedly", "proven"), "certainty"),
        StrengthAdjustment(-1, ("might", "could", "possibly", "perhaps"), "hedging"),
        StrengthAdjustment(+1, ("research", "study", "data", "evidence"), "evidentiary"),
    )
)


@dataclass(frozen=True)
class RuleTable:
    """The complete, ordered rule configuration for one extractor."""

    type_rules: tuple[KeywordRule, ...] = DEFAULT_TYPE_RULES
    default_type: ArgumentType = ArgumentType.NEUTRAL
    framework_rules: tuple[KeywordRule, ...] = DEFAULT_FRAMEWORK_RULES
    default_framework: Framework = Framework.CONTEXTUAL
    strength: StrengthRules = DEFAULT_STRENGTH_RULES
    header: HeaderRules = field(default_factory=HeaderRules)
    detail: DetailRules = field(default_factory=DetailRules)
    argument_min_length: int = 20

    def __post_init__(self) -> None:
        for rule in self.type_rules:
            _coerce(ArgumentType, rule.outcome, "type_rules")
        for rule in self.framework_rules:
            _coerce(Framework, rule.outcome, "framework_rules")

    def ordered(self, rules: Sequence[KeywordRule]) -> list[KeywordRule]:
        # sorted() is stable, so equal priorities keep table order
        return sorted(rules, key=lambda r: r.priority)

    def match_type(self, text: str) -> ArgumentType:
        for rule in self.ordered(self.type_rules):
            if rule.matches(text):
                return ArgumentType(rule.outcome)
        return self.default_type

    def match_framework(self, text: str) -> Framework:
        for rule in self.ordered(self.framework_rules):
            if rule.matches(text):
                return Framework(rule.outcome)
        return self.default_framework

    def score_strength(self, text: str) -> int:
        return self.strength.score(text)

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str = "<dict>") -> RuleTable:
        """Build a table from plain data, keeping defaults for missing sections."""
        if not isinstance(data, dict):
            raise RuleTableError(source, "top-level value must be a mapping")
        table = cls()
        changes: dict[str, Any] = {}
        try:
            if "type_rules" in data:
                changes["type_rules"] = _parse_rules(data["type_rules"])
            if "default_type" in data:
                changes["default_type"] = ArgumentType(data["default_type"])
            if "framework_rules" in data:
                changes["framework_rules"] = _parse_rules(data["framework_rules"])
            if "default_framework" in data:
                changes["default_framework"] = Framework(data["default_framework"])
            if "strength" in data:
                changes["strength"] = _parse_strength(data["strength"], table.strength)
            if "header" in data:
                changes["header"] = _replace_with(table.header, data["header"])
            if "detail" in data:
                changes["detail"] = _replace_with(table.detail, data["detail"])
            if "argument_min_length" in data:
                changes["argument_min_length"] = int(data["argument_min_length"])
            return replace(table, **changes)
        except RuleTableError:
            raise
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise RuleTableError(source, str(e)) from e


def _coerce(enum_cls, value: str, section: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise RuleTableError(section, f"unknown outcome {value!r}") from None


def _keywords(values: Any) -> tuple[str, ...]:
    if isinstance(values, str) or not isinstance(values, (list, tuple)):
        raise TypeError("keywords must be a list of strings")
    return tuple(str(v).lower() for v in values)


def _parse_rules(entries: Any) -> tuple[KeywordRule, ...]:
    if not isinstance(entries, list):
        raise TypeError("rule list expected")
    rules = []
    for position, entry in enumerate(entries):
        rules.append(
            KeywordRule(
                outcome=str(entry["outcome"]),
                keywords=_keywords(entry["keywords"]),
                priority=int(entry.get("priority", position)),
                family=str(entry.get("family", "")),
            )
        )
    return tuple(rules)


def _parse_strength(data: dict[str, Any], defaults: StrengthRules) -> StrengthRules:
    adjustments = defaults.adjustments
    if "adjustments" in data:
        adjustments = tuple(
            StrengthAdjustment(
                delta=int(a["delta"]),
                keywords=_keywords(a["keywords"]),
                name=str(a.get("name", "")),
            )
            for a in data["adjustments"]
        )
    return StrengthRules(
        base=int(data.get("base", defaults.base)),
        minimum=int(data.get("minimum", defaults.minimum)),
        maximum=int(data.get("maximum", defaults.maximum)),
        adjustments=adjustments,
    )


def _replace_with(instance, data: dict[str, Any]):
    changes = {}
    for key, value in data.items():
        current = getattr(instance, key)  # AttributeError for unknown keys
        changes[key] = _keywords(value) if isinstance(current, tuple) else type(current)(value)
    return replace(instance, **changes)


def load_rule_table(path: str | Path) -> RuleTable:
    """Load a rule table from a YAML file."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RuleTableError(str(path), f"cannot read file: {e}") from e
    except yaml.YAMLError as e:
        raise RuleTableError(str(path), f"invalid YAML: {e}") from e
    table = RuleTable.from_dict(data or {}, source=str(path))
    logger.info(f"Loaded keyword rule table from {path}")
    return table


DEFAULT_RULE_TABLE = RuleTable()


def resolve_rule_table(path: Optional[str | Path] = None) -> RuleTable:
    """Rule table from ``path``, else ``ARGMAP_RULES_FILE``, else the built-in defaults."""
    from argmap.config import get_rules_file

    source = path or get_rules_file()
    if source:
        return load_rule_table(source)
    return DEFAULT_RULE_TABLE


__all__ = [
    "contains_any",
    "KeywordRule",
    "StrengthAdjustment",
    "StrengthRules",
    "HeaderRules",
    "DetailRules",
    "RuleTable",
    "DEFAULT_TYPE_RULES",
    "DEFAULT_FRAMEWORK_RULES",
    "DEFAULT_STRENGTH_RULES",
    "DEFAULT_RULE_TABLE",
    "load_rule_table",
    "resolve_rule_table",
]
