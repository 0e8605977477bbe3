"""
Argument-structure extraction.

Turns free-form analysis text into a typed, hierarchical ``ArgumentTree``:

    root (level 0)
    └── section per header candidate (level 1, framework from the header)
        └── argument per qualifying line (level 2, type + strength)
            └── detail from look-ahead lines (level 3, evidence/counterargument)

Usage:
    from argmap.extraction import parse_arguments

    tree = parse_arguments(response_text)
    if tree is None:
        ...  # show raw text only
"""

from argmap.extraction.builder import DEFAULT_ROOT_LABEL, ROOT_ID, TreeBuilder, parse_arguments
from argmap.extraction.classifier import ArgumentClassifier, Classification
from argmap.extraction.cleaning import clean_response
from argmap.extraction.models import ArgumentNode, ArgumentTree, ArgumentType, Framework
from argmap.extraction.rules import (
    DEFAULT_RULE_TABLE,
    KeywordRule,
    RuleTable,
    load_rule_table,
    resolve_rule_table,
)
from argmap.extraction.segmenter import Section, SectionSegmenter

__all__ = [
    "ArgumentClassifier",
    "ArgumentNode",
    "ArgumentTree",
    "ArgumentType",
    "Classification",
    "DEFAULT_ROOT_LABEL",
    "DEFAULT_RULE_TABLE",
    "Framework",
    "KeywordRule",
    "ROOT_ID",
    "RuleTable",
    "Section",
    "SectionSegmenter",
    "TreeBuilder",
    "clean_response",
    "load_rule_table",
    "parse_arguments",
    "resolve_rule_table",
]
