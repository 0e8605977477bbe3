"""
Argument tree data model.

Trees are immutable once built: nodes are frozen dataclasses whose children
are tuples. The builder assembles nodes in a flat arena and freezes them in a
single pass (see ``argmap.extraction.builder``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from argmap.serialization import compact_dict

MIN_STRENGTH = 1
MAX_STRENGTH = 5


class ArgumentType(str, Enum):
    """Role of a node in the argument structure.

    Inherits from ``str`` so values compare equal to their JSON form::

        assert ArgumentType.EVIDENCE == "evidence"
    """

    SUPPORTING = "supporting"
    OPPOSING = "opposing"
    NEUTRAL = "neutral"
    EVIDENCE = "evidence"
    COUNTERARGUMENT = "counterargument"


class Framework(str, Enum):
    """Analytical lens attributed to a section and inherited by its arguments."""

    CONSEQUENCE_BASED = "consequence-based"
    RULE_BASED = "rule-based"
    CHARACTER_BASED = "character-based"
    PRACTICAL = "practical"
    STAKEHOLDER = "stakeholder"
    LEGAL = "legal"
    EMOTIONAL = "emotional"
    ECONOMIC = "economic"
    SOCIAL = "social"
    INDIVIDUAL = "individual"
    COLLECTIVE = "collective"
    CONTEXTUAL = "contextual"


@dataclass(frozen=True)
class ArgumentNode:
    """One node of an argument tree.

    Attributes:
        id: Identifier unique within the tree ("root", "section-1", "arg-2", ...).
        text: Source line (section nodes drop the header colon).
        type: Structural role of the node.
        level: Depth; root is 0, sections 1, arguments 2, details 3.
        framework: Lens inherited from the enclosing section, if any.
        strength: Keyword-derived confidence in [1, 5], if scored.
        parent: Id of the parent node; None for the root.
        children: Child nodes in text order.
    """

    id: str
    text: str
    type: ArgumentType
    level: int
    framework: Optional[Framework] = None
    strength: Optional[int] = None
    parent: Optional[str] = None
    children: tuple[ArgumentNode, ...] = ()

    def __post_init__(self) -> None:
        if self.level < 0:
            raise ValueError(f"level must be non-negative, got {self.level}")
        if self.strength is not None and not MIN_STRENGTH <= self.strength <= MAX_STRENGTH:
            raise ValueError(f"strength must be in [{MIN_STRENGTH}, {MAX_STRENGTH}], got {self.strength}")
        for child in self.children:
            if child.level != self.level + 1:
                raise ValueError(
                    f"child {child.id} at level {child.level} under {self.id} at level {self.level}"
                )
            if child.parent != self.id:
                raise ValueError(f"child {child.id} names parent {child.parent}, expected {self.id}")

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self) -> Iterator[ArgumentNode]:
        """Yield this node and all descendants in pre-order (text order)."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        """JSON form; ``framework``, ``strength`` and ``parent`` are omitted when unset."""
        return compact_dict(
            [
                ("id", self.id),
                ("text", self.text),
                ("type", self.type),
                ("framework", self.framework),
                ("strength", self.strength),
                ("children", list(self.children)),
                ("parent", self.parent),
                ("level", self.level),
            ],
            optional=("framework", "strength", "parent"),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArgumentNode:
        framework = data.get("framework")
        return cls(
            id=data["id"],
            text=data["text"],
            type=ArgumentType(data["type"]),
            level=int(data["level"]),
            framework=Framework(framework) if framework else None,
            strength=data.get("strength"),
            parent=data.get("parent"),
            children=tuple(cls.from_dict(c) for c in data.get("children", [])),
        )


def count_nodes(node: ArgumentNode) -> int:
    """1 + the node count of every child subtree."""
    return 1 + sum(count_nodes(child) for child in node.children)


def deepest_level(node: ArgumentNode) -> int:
    """Level of the deepest node in the subtree rooted at ``node``."""
    if not node.children:
        return node.level
    return max(deepest_level(child) for child in node.children)


@dataclass(frozen=True)
class ArgumentTree:
    """An immutable argument tree with precomputed totals.

    Built wholesale from one analysis response; never mutated afterwards.
    """

    root_node: ArgumentNode
    total_nodes: int
    max_depth: int
    _index: dict[str, ArgumentNode] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[str, ArgumentNode] = {}
        for node in self.root_node.walk():
            if node.id in index:
                raise ValueError(f"duplicate node id: {node.id}")
            index[node.id] = node
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_root(cls, root: ArgumentNode) -> ArgumentTree:
        return cls(root_node=root, total_nodes=count_nodes(root), max_depth=deepest_level(root))

    def __len__(self) -> int:
        return self.total_nodes

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def get(self, node_id: str) -> Optional[ArgumentNode]:
        return self._index.get(node_id)

    def parent_of(self, node: ArgumentNode) -> Optional[ArgumentNode]:
        if node.parent is None:
            return None
        return self._index.get(node.parent)

    def iter_nodes(self) -> Iterator[ArgumentNode]:
        return self.root_node.walk()

    def nodes_at_level(self, level: int) -> list[ArgumentNode]:
        return [n for n in self.iter_nodes() if n.level == level]

    @property
    def sections(self) -> tuple[ArgumentNode, ...]:
        return self.root_node.children

    def to_dict(self) -> dict[str, Any]:
        return {
            "rootNode": self.root_node.to_dict(),
            "totalNodes": self.total_nodes,
            "maxDepth": self.max_depth,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArgumentTree:
        """Rebuild a tree from its JSON form, recomputing totals."""
        return cls.from_root(ArgumentNode.from_dict(data["rootNode"]))


__all__ = [
    "MIN_STRENGTH",
    "MAX_STRENGTH",
    "ArgumentType",
    "Framework",
    "ArgumentNode",
    "ArgumentTree",
    "count_nodes",
    "deepest_level",
]
