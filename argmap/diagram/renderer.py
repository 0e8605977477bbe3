"""
Argument tree rendering to diagram DSL.

Renders the structure extracted from analysis text directly, without a
generator call. Node shape and edge style follow the argument type; colour
classes follow the framework when one is set, otherwise the type.
"""

from __future__ import annotations

import re

from argmap.extraction.models import ArgumentNode, ArgumentTree, ArgumentType, Framework

DEFAULT_MAX_LABEL = 40

TYPE_STYLES = {
    ArgumentType.SUPPORTING: "fill:#dcfce7,stroke:#16a34a,stroke-width:2px,color:#000",
    ArgumentType.OPPOSING: "fill:#fef2f2,stroke:#dc2626,stroke-width:2px,color:#000",
    ArgumentType.COUNTERARGUMENT: "fill:#fef2f2,stroke:#dc2626,stroke-width:2px,color:#000",
    ArgumentType.EVIDENCE: "fill:#fefce8,stroke:#ca8a04,stroke-width:2px,color:#000",
    ArgumentType.NEUTRAL: "fill:#f8fafc,stroke:#64748b,stroke-width:2px,color:#000",
}

FRAMEWORK_STYLES = {
    Framework.CONSEQUENCE_BASED: "fill:#fed7aa,stroke:#ea580c,stroke-width:2px,color:#000",
    Framework.RULE_BASED: "fill:#dbeafe,stroke:#2563eb,stroke-width:2px,color:#000",
    Framework.CHARACTER_BASED: "fill:#e9d5ff,stroke:#9333ea,stroke-width:2px,color:#000",
}

_UNSAFE_ID = re.compile(r"[^A-Za-z0-9_]")


def sanitize_id(node_id: str) -> str:
    """Make a node id usable as a DSL identifier (``section-1`` -> ``section_1``)."""
    return _UNSAFE_ID.sub("_", node_id)


def class_name(value: str) -> str:
    return sanitize_id(value)


def truncate(text: str, max_length: int = DEFAULT_MAX_LABEL) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def escape_label(text: str) -> str:
    return text.replace('"', "#quot;").replace("\n", "<br/>")


def node_shape(node: ArgumentNode, label: str) -> str:
    if node.type in (ArgumentType.OPPOSING, ArgumentType.COUNTERARGUMENT):
        return f'{{"{label}"}}'
    if node.type is ArgumentType.EVIDENCE:
        return f'(("{label}"))'
    return f'["{label}"]'


def connection_style(node: ArgumentNode) -> str:
    if node.type is ArgumentType.SUPPORTING:
        return "-->|supports|"
    if node.type in (ArgumentType.OPPOSING, ArgumentType.COUNTERARGUMENT):
        return "-.->|opposes|"
    if node.type is ArgumentType.EVIDENCE:
        return "-->|evidence|"
    return "-->"


def node_class(node: ArgumentNode) -> str:
    """Framework colouring wins when the framework has a style of its own."""
    if node.framework is not None and node.framework in FRAMEWORK_STYLES:
        return class_name(node.framework.value)
    return class_name(node.type.value)


def render_tree(tree: ArgumentTree, max_label: int = DEFAULT_MAX_LABEL) -> str:
    """Render ``tree`` as ``graph TD`` DSL text.

    Nodes are emitted in pre-order, each followed by the edge from its
    parent, then one ``class`` assignment per node.
    """
    lines = ["graph TD"]
    for kind, style in [*TYPE_STYLES.items(), *FRAMEWORK_STYLES.items()]:
        lines.append(f"  classDef {class_name(kind.value)} {style}")
    lines.append("")

    for node in tree.iter_nodes():
        node_id = sanitize_id(node.id)
        label = escape_label(truncate(node.text, max_label))
        lines.append(f"  {node_id}{node_shape(node, label)}")
        if node.parent is not None:
            lines.append(f"  {sanitize_id(node.parent)} {connection_style(node)} {node_id}")

    lines.append("")
    for node in tree.iter_nodes():
        lines.append(f"  class {sanitize_id(node.id)} {node_class(node)}")

    return "\n".join(lines)


__all__ = [
    "DEFAULT_MAX_LABEL",
    "sanitize_id",
    "truncate",
    "escape_label",
    "node_shape",
    "connection_style",
    "node_class",
    "render_tree",
]
