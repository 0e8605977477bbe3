"""
Diagram DSL validation.

The generator is an opaque string producer with no guarantee of syntactic
correctness, so every diagram is checked here before it is cached or shown.

Grammar (line oriented):

    graph TD
    subgraph "<name>"
        <ID><shape-open><label><shape-close>
        <ID> --> <ID>
        <ID> -->|<label>| <ID>
    end

Shapes: ``[...]`` process, ``{...}`` decision, ``((...))`` outcome,
``(...)`` entity. Arrows: ``-->`` direct, ``-.->`` indirect, ``==>`` strong,
``--x`` blocking.

Validation never raises; it returns a ``ValidationResult`` carrying a reason.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from argmap.diagram.identifiers import DEFAULT_ALPHABET
from argmap.extraction.cleaning import clean_response

logger = logging.getLogger(__name__)

REASON_EMPTY = "diagram text is empty"
REASON_NO_HEADER = "missing 'graph' or 'flowchart' header"
REASON_EDGES_ONLY = "connections exist without any node definitions"
REASON_NOT_PRESERVED = "expanded diagram does not preserve existing node definitions"

_HEADER_TOKEN = re.compile(r"\b(graph|flowchart)\b")
_ARROW = r"(?:-\.->|-->|==>|--x)"
_NODE_DEFINITION = re.compile(r"^([A-Z])(\(\(|\[|\{|\()")
_INLINE_DEFINITION = re.compile(r"(?<![A-Za-z0-9_])([A-Z])(\(\(|\[|\{|\()")
_REFERENCE_BEFORE_ARROW = re.compile(rf"(?<![A-Za-z0-9_])([A-Z])\s*{_ARROW}")
_REFERENCE_AFTER_ARROW = re.compile(rf"{_ARROW}\s*(?:\|[^|]*\|\s*)?([A-Z])(?![A-Za-z0-9_])")
_MERMAID_FENCE = re.compile(r"```mermaid[ \t]*\n(.*?)\n?```", re.DOTALL)
_ANY_FENCE = re.compile(r"```[A-Za-z]*[ \t]*\n(.*?)\n?```", re.DOTALL)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one diagram.

    Attributes:
        valid: Whether the diagram passed.
        reason: Why it failed (None when valid).
        defined: Identifiers with a node definition.
        referenced: Identifiers adjacent to a connection arrow.
        warnings: Non-fatal findings (e.g. identifiers outside the alphabet).
    """

    valid: bool
    reason: str | None = None
    defined: frozenset[str] = frozenset()
    referenced: frozenset[str] = frozenset()
    warnings: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.valid

    @property
    def node_count(self) -> int:
        return len(self.defined)


def _is_structural(line: str) -> bool:
    return (
        line.startswith(("graph", "flowchart", "subgraph"))
        or line == "end"
    )


def extract_diagram_code(response: str) -> str:
    """Pull DSL text out of a generator response.

    Prefers a ```mermaid fenced block, then any fenced block, then the raw
    text. Reasoning tags are stripped first.
    """
    text = clean_response(response or "")
    for fence in (_MERMAID_FENCE, _ANY_FENCE):
        match = fence.search(text)
        if match:
            return match.group(1).strip()
    return text.strip()


def node_definition_lines(text: str) -> list[str]:
    """Trimmed node-definition lines, in order."""
    lines = []
    for raw in text.splitlines():
        line = raw.strip()
        if line and not _is_structural(line) and _NODE_DEFINITION.match(line):
            lines.append(line)
    return lines


class DiagramSyntaxValidator:
    """Checks generated diagrams for well-formedness.

    Args:
        alphabet: Letters generated diagrams are expected to use. Identifiers
            outside it produce warnings, not failures.
        strict: Also require every referenced identifier to be defined
            (definitions anywhere on a line count in strict mode).
    """

    def __init__(self, alphabet: str = DEFAULT_ALPHABET, strict: bool = False):
        self.alphabet = alphabet
        self.strict = strict

    def scan(self, text: str) -> tuple[frozenset[str], frozenset[str], frozenset[str]]:
        """Return (defined, referenced, inline-defined) identifier sets."""
        defined: set[str] = set()
        referenced: set[str] = set()
        inline: set[str] = set()
        for raw in text.splitlines():
            line = raw.strip()
            if not line or _is_structural(line):
                continue
            match = _NODE_DEFINITION.match(line)
            if match:
                defined.add(match.group(1))
            inline.update(m.group(1) for m in _INLINE_DEFINITION.finditer(line))
            referenced.update(m.group(1) for m in _REFERENCE_BEFORE_ARROW.finditer(line))
            referenced.update(m.group(1) for m in _REFERENCE_AFTER_ARROW.finditer(line))
        return frozenset(defined), frozenset(referenced), frozenset(inline)

    def validate(self, text: str | None) -> ValidationResult:
        if text is None or not text.strip():
            return ValidationResult(False, REASON_EMPTY)
        if not _HEADER_TOKEN.search(text):
            return ValidationResult(False, REASON_NO_HEADER)

        defined, referenced, inline = self.scan(text)
        warnings = self._warnings(defined | referenced)

        if referenced and not defined:
            return ValidationResult(False, REASON_EDGES_ONLY, defined, referenced, warnings)

        if self.strict:
            undefined = sorted(referenced - (defined | inline))
            if undefined:
                reason = f"undefined node references: {', '.join(undefined)}"
                return ValidationResult(False, reason, defined, referenced, warnings)

        return ValidationResult(True, None, defined, referenced, warnings)

    def check_preservation(self, basis: str, candidate: str) -> ValidationResult:
        """Validate ``candidate`` and require every basis node definition verbatim."""
        result = self.validate(candidate)
        if not result.valid:
            return result
        present = {line.strip() for line in candidate.splitlines()}
        missing = [line for line in node_definition_lines(basis) if line not in present]
        if missing:
            logger.debug(f"Expansion dropped {len(missing)} node definition(s): {missing[:3]}")
            return ValidationResult(
                False,
                REASON_NOT_PRESERVED,
                result.defined,
                result.referenced,
                result.warnings + (f"missing definitions: {len(missing)}",),
            )
        return result

    def _warnings(self, identifiers: frozenset[str]) -> tuple[str, ...]:
        warnings = []
        outside = sorted(i for i in identifiers if i not in self.alphabet)
        if outside:
            warnings.append(
                f"identifiers outside {self.alphabet[0]}-{self.alphabet[-1]}: {', '.join(outside)}"
            )
        if len(identifiers) > len(self.alphabet):
            warnings.append(f"{len(identifiers)} identifiers exceed capacity {len(self.alphabet)}")
        return tuple(warnings)


def validate_diagram(text: str | None, strict: bool = False) -> ValidationResult:
    """Validate with the default alphabet."""
    return DiagramSyntaxValidator(strict=strict).validate(text)


__all__ = [
    "REASON_EMPTY",
    "REASON_NO_HEADER",
    "REASON_EDGES_ONLY",
    "REASON_NOT_PRESERVED",
    "ValidationResult",
    "DiagramSyntaxValidator",
    "extract_diagram_code",
    "node_definition_lines",
    "validate_diagram",
]
