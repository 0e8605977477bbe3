"""
Prompt construction for diagram generation and enhancement.

Three request shapes go to the generator:

- base: a fresh diagram for a topic (level 0)
- expand: the basis diagram reproduced verbatim plus new nodes (level > 0)
- simplify: the basis collapsed to a handful of core nodes (level < 0)
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from argmap.diagram.identifiers import DEFAULT_ALPHABET

MAX_SIMPLIFIED_NODES = 8
EXPAND_MIN_NODES = 4
EXPAND_MAX_NODES = 6


class DiagramType(str, Enum):
    """Kinds of diagram the generator can be asked for."""

    ARGUMENT_FLOW = "argument-flow"
    STAKEHOLDER_ANALYSIS = "stakeholder-analysis"
    DECISION_TREE = "decision-tree"
    PROCESS_FLOW = "process-flow"


class EnhancementDirection(str, Enum):
    EXPAND = "expand"
    SIMPLIFY = "simplify"

    @classmethod
    def for_level(cls, level: int) -> "EnhancementDirection":
        if level == 0:
            raise ValueError("level 0 is the base diagram, not an enhancement")
        return cls.EXPAND if level > 0 else cls.SIMPLIFY


def _identifier_range(alphabet: str) -> str:
    return f"{alphabet[0]} through {alphabet[-1]}"


SYNTAX_REFERENCE = """DIAGRAM SYNTAX:

graph TD
    subgraph "Analysis Phase"
        A[Initial Assessment] --> B{Decision}
        B -->|Yes| C[Action]
        B -->|No| D((Outcome))
    end
    D -.-> A

Node shapes:
- A[Rectangle] - Process/Action
- B{Diamond} - Decision
- C((Circle)) - Outcome
- D(Rounded) - Entity or stakeholder

Arrow types:
- --> direct relationship
- -.-> indirect relationship
- ==> strong relationship
- --x blocking relationship"""


def base_system_prompt(alphabet: str = DEFAULT_ALPHABET) -> str:
    return f"""You are an expert at creating detailed, interconnected Mermaid diagrams for complex analysis. Generate Mermaid diagram code that shows relationships, dependencies, and connections between concepts.

CRITICAL REQUIREMENTS:
1. ALWAYS return VALID Mermaid syntax starting with "graph TD"
2. Name every node with a single uppercase letter, {_identifier_range(alphabet)}, used in order
3. Define each node on its own line before or alongside its connections
4. Use subgraphs to group related concepts
5. Use different node shapes and arrow types for different relationships

{SYNTAX_REFERENCE}

RESPONSE FORMAT:
Return ONLY the Mermaid code, starting with ```mermaid and ending with ```.
Do NOT include explanations."""


def base_user_prompt(topic: str, diagram_type: DiagramType, alphabet: str = DEFAULT_ALPHABET) -> str:
    max_nodes = len(alphabet)
    min_nodes = min(10, max_nodes)
    return f"""Create a detailed Mermaid {DiagramType(diagram_type).value} diagram for: {topic}

Requirements:
- Show {min_nodes}-{max_nodes} interconnected nodes
- Include feedback loops and cross-references
- Use subgraphs to group related concepts
- Include decision points, processes, stakeholders, and outcomes"""


def expand_prompt(basis: str, new_identifiers: Sequence[str], topic: str = "") -> str:
    """Ask for the basis reproduced verbatim plus nodes named ``new_identifiers``."""
    if not new_identifiers:
        raise ValueError("expand_prompt requires at least one new identifier")
    low = min(EXPAND_MIN_NODES, len(new_identifiers))
    high = len(new_identifiers)
    count = f"{low}-{high}" if low != high else f"{high}"
    about = f" about: {topic}" if topic else ""
    return f"""Expand the following Mermaid diagram{about}

EXISTING DIAGRAM:
```mermaid
{basis.strip()}
```

Rules:
1. Reproduce EVERY existing line exactly as written. Do not rename, reword or remove any node or connection.
2. Append {count} new nodes that add detail, using only these identifiers in order: {", ".join(new_identifiers)}
3. Place the new nodes in 1-2 new subgraphs
4. Connect every new node to at least one existing node

Return ONLY the complete Mermaid code, starting with ```mermaid and ending with ```."""


def simplify_prompt(
    basis: str,
    max_nodes: int = MAX_SIMPLIFIED_NODES,
    alphabet: str = DEFAULT_ALPHABET,
    topic: str = "",
) -> str:
    """Ask for the basis collapsed to at most ``max_nodes`` core nodes."""
    names = alphabet[:max_nodes]
    about = f" about: {topic}" if topic else ""
    return f"""Simplify the following Mermaid diagram{about}

EXISTING DIAGRAM:
```mermaid
{basis.strip()}
```

Rules:
1. Keep at most {max_nodes} core nodes capturing the main ideas
2. Rename the kept nodes sequentially starting from {names[0]}: {", ".join(names)}
3. Merge or drop minor nodes and keep only the essential connections
4. Start with "graph TD"

Return ONLY the Mermaid code, starting with ```mermaid and ending with ```."""


__all__ = [
    "MAX_SIMPLIFIED_NODES",
    "EXPAND_MIN_NODES",
    "EXPAND_MAX_NODES",
    "DiagramType",
    "EnhancementDirection",
    "SYNTAX_REFERENCE",
    "base_system_prompt",
    "base_user_prompt",
    "expand_prompt",
    "simplify_prompt",
]
