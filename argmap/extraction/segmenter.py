"""
Section segmentation of raw analysis text.

Splits a response into trimmed, non-empty lines, drops the structural marker
lines ("SUMMARY:", "DETAILED ANALYSIS:") and groups the remaining lines under
the header candidate that precedes them. Lines that appear before the first
header have no section to belong to and are discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from argmap.extraction.rules import HeaderRules, contains_any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Section:
    """A header candidate and the body lines routed to it."""

    header: str
    lines: tuple[str, ...] = ()

    @property
    def title(self) -> str:
        """Header text with its first colon removed."""
        return self.header.replace(":", "", 1).strip()


class SectionSegmenter:
    """Splits text into ordered lines and sections.

    Example:
        >>> segmenter = SectionSegmenter()
        >>> [s.title for s in segmenter.segment("Intro\\nRisks:\\nA real risk here.")]
        ['Risks']
    """

    def __init__(self, rules: HeaderRules | None = None):
        self.rules = rules or HeaderRules()
        self._markers = tuple(m.lower() for m in self.rules.markers)

    def split_lines(self, text: str) -> list[str]:
        """Non-empty trimmed lines in order, with marker lines removed."""
        lines = []
        for raw in text.split("\n"):
            line = raw.strip()
            if not line or self.is_marker(line):
                continue
            lines.append(line)
        return lines

    def is_marker(self, line: str) -> bool:
        return line.lower().startswith(self._markers)

    def is_header(self, line: str) -> bool:
        """Header candidate: has a colon, no excluded keyword, and is short."""
        return (
            ":" in line
            and not contains_any(line, self.rules.excluded_keywords)
            and len(line) < self.rules.max_length
        )

    def segment(self, text: str) -> list[Section]:
        """Group lines under their preceding header candidate."""
        sections: list[Section] = []
        header: str | None = None
        body: list[str] = []
        discarded = 0

        for line in self.split_lines(text):
            if self.is_header(line):
                if header is not None:
                    sections.append(Section(header, tuple(body)))
                header, body = line, []
            elif header is None:
                discarded += 1
            else:
                body.append(line)

        if header is not None:
            sections.append(Section(header, tuple(body)))
        if discarded:
            logger.debug(f"Discarded {discarded} line(s) preceding the first section header")
        return sections


__all__ = ["Section", "SectionSegmenter"]
