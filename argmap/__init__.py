"""
argmap: argument-structure extraction and diagram synthesis

Turns free-form multi-perspective analysis text into a typed, hierarchical
argument tree, and manages a per-session flowchart diagram through detail
levels with validated expand/simplify rewrites.

EXTRACTION:
- Header detection, keyword-rule classification and look-ahead details
- Ordered, YAML-loadable keyword rule tables
- Immutable trees, null on unparseable input

DIAGRAMS:
- DSL validation (header, definitions, references, preservation)
- Level cache with idempotent replay, bounded [-2, 10]
- One in-flight generator request per session, newer requests supersede

Public names are imported lazily, so ``import argmap`` stays cheap.
"""

from __future__ import annotations

import importlib
from typing import Any

from argmap.__version__ import __version__

_EXPORT_MAP = {
    'AnalysisMessage': ('argmap.session', 'AnalysisMessage'),
    'AnalysisService': ('argmap.generation.analysis', 'AnalysisService'),
    'AnalysisSession': ('argmap.session', 'AnalysisSession'),
    'ArgmapError': ('argmap.exceptions', 'ArgmapError'),
    'ArgumentClassifier': ('argmap.extraction.classifier', 'ArgumentClassifier'),
    'ArgumentNode': ('argmap.extraction.models', 'ArgumentNode'),
    'ArgumentTree': ('argmap.extraction.models', 'ArgumentTree'),
    'ArgumentType': ('argmap.extraction.models', 'ArgumentType'),
    'ChatCompletionClient': ('argmap.generation.client', 'ChatCompletionClient'),
    'DiagramDocument': ('argmap.diagram.controller', 'DiagramDocument'),
    'DiagramEnhancementController': ('argmap.diagram.controller', 'DiagramEnhancementController'),
    'DiagramFailure': ('argmap.diagram.controller', 'DiagramFailure'),
    'DiagramOutcome': ('argmap.diagram.controller', 'DiagramOutcome'),
    'DiagramSyntaxValidator': ('argmap.diagram.validator', 'DiagramSyntaxValidator'),
    'DiagramType': ('argmap.diagram.prompts', 'DiagramType'),
    'FailureKind': ('argmap.diagram.controller', 'FailureKind'),
    'Framework': ('argmap.extraction.models', 'Framework'),
    'GeneratorSettings': ('argmap.config', 'GeneratorSettings'),
    'IdentifierAllocator': ('argmap.diagram.identifiers', 'IdentifierAllocator'),
    'LLMDiagramGenerator': ('argmap.diagram.generator', 'LLMDiagramGenerator'),
    'RuleTable': ('argmap.extraction.rules', 'RuleTable'),
    'SectionSegmenter': ('argmap.extraction.segmenter', 'SectionSegmenter'),
    'TreeBuilder': ('argmap.extraction.builder', 'TreeBuilder'),
    'ValidationResult': ('argmap.diagram.validator', 'ValidationResult'),
    'clean_response': ('argmap.extraction.cleaning', 'clean_response'),
    'configure_logging': ('argmap.logging_config', 'configure_logging'),
    'load_rule_table': ('argmap.extraction.rules', 'load_rule_table'),
    'parse_arguments': ('argmap.extraction.builder', 'parse_arguments'),
    'render_tree': ('argmap.diagram.renderer', 'render_tree'),
}


def __getattr__(name: str) -> Any:
    """Lazily import public symbols to avoid heavy import side effects."""
    try:
        module_name, attr_name = _EXPORT_MAP[name]
    except KeyError as exc:
        raise AttributeError(f"module 'argmap' has no attribute {name!r}") from exc
    module = importlib.import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))


__all__ = [
    "__version__",
    # Extraction
    "ArgumentClassifier",
    "ArgumentNode",
    "ArgumentTree",
    "ArgumentType",
    "Framework",
    "RuleTable",
    "SectionSegmenter",
    "TreeBuilder",
    "clean_response",
    "load_rule_table",
    "parse_arguments",
    # Diagrams
    "DiagramDocument",
    "DiagramEnhancementController",
    "DiagramFailure",
    "DiagramOutcome",
    "DiagramSyntaxValidator",
    "DiagramType",
    "FailureKind",
    "IdentifierAllocator",
    "LLMDiagramGenerator",
    "ValidationResult",
    "render_tree",
    # Generation
    "AnalysisService",
    "ChatCompletionClient",
    "GeneratorSettings",
    # Sessions
    "AnalysisMessage",
    "AnalysisSession",
    # Infrastructure
    "ArgmapError",
    "configure_logging",
]
