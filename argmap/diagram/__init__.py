"""
Diagram synthesis and level management.

- ``validator``: DSL well-formedness and content preservation checks
- ``controller``: per-session level cache with expand/simplify requests
- ``generator``: generator protocol and the chat-model implementation
- ``renderer``: direct rendering of argument trees
"""

from argmap.diagram.controller import (
    DiagramDocument,
    DiagramEnhancementController,
    DiagramFailure,
    DiagramOutcome,
    FailureKind,
)
from argmap.diagram.generator import DiagramGenerator, EnhancementRequest, LLMDiagramGenerator
from argmap.diagram.identifiers import DEFAULT_ALPHABET, FULL_ALPHABET, IdentifierAllocator
from argmap.diagram.prompts import DiagramType, EnhancementDirection
from argmap.diagram.renderer import render_tree
from argmap.diagram.validator import (
    DiagramSyntaxValidator,
    ValidationResult,
    extract_diagram_code,
    validate_diagram,
)

__all__ = [
    "DEFAULT_ALPHABET",
    "FULL_ALPHABET",
    "DiagramDocument",
    "DiagramEnhancementController",
    "DiagramFailure",
    "DiagramGenerator",
    "DiagramOutcome",
    "DiagramSyntaxValidator",
    "DiagramType",
    "EnhancementDirection",
    "EnhancementRequest",
    "FailureKind",
    "IdentifierAllocator",
    "LLMDiagramGenerator",
    "ValidationResult",
    "extract_diagram_code",
    "render_tree",
    "validate_diagram",
]
