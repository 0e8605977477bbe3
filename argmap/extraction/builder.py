"""
Argument tree construction.

``TreeBuilder`` assembles nodes in a flat arena (records addressed by integer
handles, parents and children stored as handles) and freezes the arena into an
immutable ``ArgumentTree`` once the whole input has been consumed.

Parsing is all-or-nothing at the public boundary: ``parse_arguments`` returns
``None`` if anything goes wrong, never a partially built tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from argmap.exceptions import ExtractionError
from argmap.extraction.classifier import ArgumentClassifier
from argmap.extraction.models import ArgumentNode, ArgumentTree, ArgumentType, Framework
from argmap.extraction.rules import RuleTable, resolve_rule_table
from argmap.extraction.segmenter import Section, SectionSegmenter
from argmap.logging_config import log_function

logger = logging.getLogger(__name__)

ROOT_ID = "root"
DEFAULT_ROOT_LABEL = "Ethical Analysis"


@dataclass
class _NodeRecord:
    id: str
    text: str
    type: ArgumentType
    level: int
    parent: Optional[int] = None
    framework: Optional[Framework] = None
    strength: Optional[int] = None
    children: list[int] = field(default_factory=list)


class _NodeArena:
    """Flat node storage used while a tree is under construction."""

    def __init__(self) -> None:
        self._records: list[_NodeRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def add(self, record: _NodeRecord) -> int:
        handle = len(self._records)
        if record.parent is not None:
            parent = self._records[record.parent]
            if record.level != parent.level + 1:
                raise ExtractionError(
                    f"node {record.id} at level {record.level} cannot attach to level {parent.level}"
                )
            parent.children.append(handle)
        self._records.append(record)
        return handle

    def record(self, handle: int) -> _NodeRecord:
        return self._records[handle]

    def freeze(self, handle: int = 0) -> ArgumentNode:
        """Convert the subtree at ``handle`` into immutable nodes."""
        record = self._records[handle]
        parent_id = self._records[record.parent].id if record.parent is not None else None
        return ArgumentNode(
            id=record.id,
            text=record.text,
            type=record.type,
            level=record.level,
            framework=record.framework,
            strength=record.strength,
            parent=parent_id,
            children=tuple(self.freeze(child) for child in record.children),
        )


class TreeBuilder:
    """Builds an ``ArgumentTree`` from one analysis response.

    A builder holds no per-parse state, so one instance can serve many
    concurrent parses.
    """

    def __init__(self, rules: RuleTable | None = None, root_label: str = DEFAULT_ROOT_LABEL):
        self.rules = rules if rules is not None else resolve_rule_table()
        self.root_label = root_label
        self.segmenter = SectionSegmenter(self.rules.header)
        self.classifier = ArgumentClassifier(self.rules)

    def build(self, text: str) -> ArgumentTree:
        """Build a tree, raising on any internal error."""
        if not isinstance(text, str):
            raise ExtractionError(f"expected text, got {type(text).__name__}")

        arena = _NodeArena()
        root = arena.add(_NodeRecord(ROOT_ID, self.root_label, ArgumentType.NEUTRAL, level=0))
        counter = _Counter()

        for section in self.segmenter.segment(text):
            self._add_section(arena, root, section, counter)

        tree = ArgumentTree.from_root(arena.freeze(root))
        logger.debug(
            f"Built argument tree: {tree.total_nodes} nodes, depth {tree.max_depth}, "
            f"{len(tree.sections)} sections"
        )
        return tree

    def parse(self, text: str) -> Optional[ArgumentTree]:
        """Build a tree, or return None if the input cannot be structured."""
        try:
            return self.build(text)
        except Exception as e:
            logger.warning(f"Argument extraction failed: {type(e).__name__}: {e}")
            return None

    def _add_section(self, arena: _NodeArena, root: int, section: Section, counter: _Counter) -> None:
        framework = self.classifier.section_framework(section.title)
        section_handle = arena.add(
            _NodeRecord(
                id=f"section-{counter.next()}",
                text=section.title,
                type=self.classifier.section_type(section.title),
                level=1,
                parent=root,
                framework=framework,
            )
        )

        lines = section.lines
        i = 0
        while i < len(lines):
            line = lines[i]
            i += 1
            if not self.classifier.is_argument(line):
                continue

            verdict = self.classifier.classify(line, framework)
            arg_handle = arena.add(
                _NodeRecord(
                    id=f"arg-{counter.next()}",
                    text=line,
                    type=verdict.type,
                    level=2,
                    parent=section_handle,
                    framework=verdict.framework,
                    strength=verdict.strength,
                )
            )

            details = self.classifier.collect_details(lines[i:])
            for detail_text, detail_type in details:
                arena.add(
                    _NodeRecord(
                        id=f"detail-{counter.next()}",
                        text=detail_text,
                        type=detail_type,
                        level=3,
                        parent=arg_handle,
                        framework=framework,
                        strength=self.rules.detail.strength,
                    )
                )
            i += len(details)


class _Counter:
    def __init__(self) -> None:
        self._value = 0

    def next(self) -> int:
        self._value += 1
        return self._value


@log_function(level="DEBUG")
def parse_arguments(
    text: str,
    rules: RuleTable | None = None,
    root_label: str = DEFAULT_ROOT_LABEL,
) -> Optional[ArgumentTree]:
    """Extract an argument tree from analysis text.

    Returns None when the text cannot be structured; callers should then show
    the raw text without a structured view.
    """
    try:
        builder = TreeBuilder(rules, root_label=root_label)
    except Exception as e:
        logger.warning(f"Could not prepare argument extraction: {e}")
        return None
    return builder.parse(text)


__all__ = ["ROOT_ID", "DEFAULT_ROOT_LABEL", "TreeBuilder", "parse_arguments"]
