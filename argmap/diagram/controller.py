"""
Per-session diagram level management.

The controller owns one ``DiagramDocument``: a topic, a lazily populated
cache of level -> DSL text, and the level currently displayed. Level 0 is the
base generation; positive levels expand it, negative levels simplify it.

State machine:

    Empty --generate_base--> Level0 --set_level(L)--> LevelL
      ^                        ^  |                     |
      |                        |  +----- cache hit -----+
      +------- reset ----------+

A failed generation or validation leaves the document exactly as it was:
nothing is cached and the last displayed diagram stays visible. Failures are
reported as ``DiagramFailure`` values, never raised.

Only one generator request per session is in flight. A request for a
different level cancels the pending one before its result can touch the
cache; a repeat request for the pending level joins it.

Usage:
    controller = DiagramEnhancementController(LLMDiagramGenerator(client))
    outcome = await controller.generate_base("AI in healthcare")
    outcome = await controller.increase_detail()
    if outcome.failure and outcome.failure.retryable:
        outcome = await controller.regenerate()
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Hashable, Optional

from argmap.config import DEFAULT_TIMEOUT_SECONDS, MAX_DETAIL_LEVEL, MIN_DETAIL_LEVEL
from argmap.diagram.generator import DiagramGenerator, EnhancementRequest
from argmap.diagram.identifiers import DEFAULT_ALPHABET, IdentifierAllocator
from argmap.diagram.prompts import (
    EXPAND_MAX_NODES,
    MAX_SIMPLIFIED_NODES,
    DiagramType,
    EnhancementDirection,
)
from argmap.diagram.validator import DiagramSyntaxValidator, extract_diagram_code
from argmap.exceptions import (
    ArgmapError,
    DiagramStateError,
    DiagramSyntaxError,
    IdentifierSpaceExhaustedError,
)
from argmap.logging_config import LogContext, get_logger

logger = get_logger(__name__)


class FailureKind(str, Enum):
    """Classification of a failed generation at the controller boundary."""

    GENERATION_UNAVAILABLE = "generation-unavailable"
    SYNTAX_INVALID = "syntax-invalid"


@dataclass(frozen=True)
class DiagramFailure:
    kind: FailureKind
    message: str
    level: int

    @property
    def retryable(self) -> bool:
        """Only transport-level failures are worth retrying with the same request."""
        return self.kind is FailureKind.GENERATION_UNAVAILABLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "level": self.level,
            "retryable": self.retryable,
        }


@dataclass(frozen=True)
class DiagramOutcome:
    """Result of one controller operation.

    Attributes:
        level: The level that was requested.
        current_level: The level displayed after the operation.
        diagram: The diagram displayed after the operation (None before any success).
        from_cache: The result was served from the level cache.
        failure: Set when generation or validation failed.
        superseded: A newer request cancelled this one before it finished.
        rejected: The requested level was out of range; nothing changed.
    """

    level: int
    current_level: int
    diagram: Optional[str]
    from_cache: bool = False
    failure: Optional[DiagramFailure] = None
    superseded: bool = False
    rejected: bool = False

    @property
    def ok(self) -> bool:
        return self.failure is None and not self.superseded and not self.rejected


@dataclass
class DiagramDocument:
    """A topic's diagram at every detail level visited so far."""

    topic: str
    diagram_type: DiagramType = DiagramType.ARGUMENT_FLOW
    levels: dict[int, str] = field(default_factory=dict)
    current_level: int = 0

    def has_level(self, level: int) -> bool:
        return level in self.levels

    def store(self, level: int, text: str, replace: bool = False) -> None:
        """Cache ``text`` for ``level``. The base level is written once."""
        if not MIN_DETAIL_LEVEL <= level <= MAX_DETAIL_LEVEL:
            raise DiagramStateError("store diagram", f"level {level} is out of range")
        if level == 0 and 0 in self.levels:
            raise DiagramStateError("store diagram", "base level is already set")
        if level in self.levels and not replace:
            raise DiagramStateError("store diagram", f"level {level} is already cached")
        self.levels[level] = text

    @property
    def displayed(self) -> Optional[str]:
        return self.levels.get(self.current_level)

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic": self.topic,
            "diagramType": self.diagram_type.value,
            "currentLevel": self.current_level,
            "levels": {str(level): text for level, text in sorted(self.levels.items())},
        }


class DiagramEnhancementController:
    """Manages one session's diagram across detail levels.

    Args:
        generator: Source of diagram text.
        validator: Checks generated text; defaults to a non-strict validator.
        topic: Optional topic, so ``set_level`` can run before ``generate_base``.
        diagram_type: Kind of diagram to request.
        session_id: Included in log context.
        timeout_seconds: Bound on each generator call.
        alphabet: Identifiers available to expansions.
        max_simplified_nodes: Node ceiling requested for negative levels.
    """

    def __init__(
        self,
        generator: DiagramGenerator,
        validator: DiagramSyntaxValidator | None = None,
        topic: str | None = None,
        diagram_type: DiagramType = DiagramType.ARGUMENT_FLOW,
        session_id: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        alphabet: str = DEFAULT_ALPHABET,
        max_simplified_nodes: int = MAX_SIMPLIFIED_NODES,
    ):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.generator = generator
        self.validator = validator if validator is not None else DiagramSyntaxValidator(alphabet)
        self.session_id = session_id
        self.timeout_seconds = timeout_seconds
        self.alphabet = alphabet
        self.max_simplified_nodes = max_simplified_nodes
        self._topic = topic
        self._diagram_type = DiagramType(diagram_type)
        self._document: Optional[DiagramDocument] = None
        self._active: Optional[asyncio.Future] = None
        self._active_key: Optional[Hashable] = None

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def document(self) -> Optional[DiagramDocument]:
        return self._document

    @property
    def topic(self) -> Optional[str]:
        return self._topic

    @property
    def current_level(self) -> int:
        return self._document.current_level if self._document else 0

    @property
    def displayed_diagram(self) -> Optional[str]:
        return self._document.displayed if self._document else None

    @property
    def cached_levels(self) -> list[int]:
        return sorted(self._document.levels) if self._document else []

    @property
    def busy(self) -> bool:
        return self._active is not None and not self._active.done()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def generate_base(
        self,
        topic: str,
        diagram_type: DiagramType | None = None,
    ) -> DiagramOutcome:
        """Generate (or replay) the level-0 diagram for ``topic``.

        A new topic or diagram type starts a new document once generation
        succeeds; until then the previous document stays displayed.
        """
        if not topic or not topic.strip():
            raise DiagramStateError("generate diagram", "topic is empty")
        diagram_type = DiagramType(diagram_type or self._diagram_type)

        doc = self._document
        if doc and doc.topic == topic and doc.diagram_type == diagram_type and doc.has_level(0):
            self._cancel_pending()
            doc.current_level = 0
            return self._outcome(0, from_cache=True)

        if doc is None:
            # Nothing displayed yet, so a retry should target this topic
            self._topic = topic
            self._diagram_type = diagram_type
        return await self._submit(
            ("base", topic, diagram_type),
            0,
            lambda: self._generate_base(topic, diagram_type),
        )

    async def set_level(self, level: int) -> DiagramOutcome:
        """Display ``level``, generating it only if it has never been cached."""
        if not MIN_DETAIL_LEVEL <= level <= MAX_DETAIL_LEVEL:
            logger.info(
                "Rejected out-of-range detail level",
                requested=level,
                allowed=f"[{MIN_DETAIL_LEVEL}, {MAX_DETAIL_LEVEL}]",
                session_id=self.session_id,
            )
            return self._outcome(level, rejected=True)

        doc = self._document
        if doc and doc.has_level(level):
            self._cancel_pending()
            doc.current_level = level
            logger.debug(
                "Detail level served from cache", detail_level=level, session_id=self.session_id
            )
            return self._outcome(level, from_cache=True)

        if self._topic is None:
            raise DiagramStateError("set detail level", "no topic; call generate_base first")

        if level == 0:
            topic, diagram_type = self._topic, self._diagram_type
            return await self._submit(
                ("base", topic, diagram_type),
                0,
                lambda: self._generate_base(topic, diagram_type),
            )
        return await self._submit(("level", level), level, lambda: self._enhance_level(level))

    async def increase_detail(self) -> DiagramOutcome:
        return await self.set_level(self.current_level + 1)

    async def decrease_detail(self) -> DiagramOutcome:
        return await self.set_level(self.current_level - 1)

    async def regenerate(self) -> DiagramOutcome:
        """Request the current level again, replacing its cache entry on success.

        At level 0 this produces a new document; cached enhancements of the
        old base are discarded with it.
        """
        if self._topic is None:
            raise DiagramStateError("regenerate diagram", "no topic; call generate_base first")
        level = self.current_level
        if level == 0 or self._document is None:
            topic, diagram_type = self._topic, self._diagram_type
            return await self._submit(
                ("regenerate", 0),
                0,
                lambda: self._generate_base(topic, diagram_type, replace=True),
            )
        return await self._submit(
            ("regenerate", level),
            level,
            lambda: self._enhance_level(level, replace=True),
        )

    def reset(self) -> None:
        """Discard the document and cancel any pending request."""
        self._cancel_pending()
        self._document = None
        self._topic = None
        logger.debug("Diagram session reset", session_id=self.session_id)

    # ------------------------------------------------------------------
    # Request serialization
    # ------------------------------------------------------------------

    def _cancel_pending(self) -> None:
        if self._active is not None and not self._active.done():
            logger.debug("Cancelling superseded diagram request", request=self._active_key)
            self._active.cancel()
        self._active = None
        self._active_key = None

    async def _submit(
        self,
        key: Hashable,
        level: int,
        work: Callable[[], Awaitable[DiagramOutcome]],
    ) -> DiagramOutcome:
        if self.busy and self._active_key == key:
            logger.debug("Joining pending diagram request", request=key)
            return await self._wait(self._active, level, shielded=True)

        self._cancel_pending()
        task = asyncio.ensure_future(work())
        self._active = task
        self._active_key = key
        return await self._wait(task, level, shielded=False)

    async def _wait(self, task: asyncio.Future, level: int, shielded: bool) -> DiagramOutcome:
        try:
            return await (asyncio.shield(task) if shielded else task)
        except asyncio.CancelledError:
            # Cancelling a joiner leaves the shielded task running
            if task.cancelled() and (shielded or task is not self._active):
                return self._outcome(level, superseded=True)
            raise
        finally:
            if self._active is task and task.done():
                self._active = None
                self._active_key = None

    async def _call_generator(self, request: Awaitable[str], level: int) -> str | DiagramFailure:
        try:
            return await asyncio.wait_for(request, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            message = f"generator timed out after {self.timeout_seconds:.0f}s"
        except DiagramSyntaxError as e:
            return self._failure(level, FailureKind.SYNTAX_INVALID, e.reason)
        except ArgmapError as e:
            message = e.message
        except Exception as e:
            logger.exception("Unexpected generator error", error=type(e).__name__)
            message = f"{type(e).__name__}: {e}"
        return self._failure(level, FailureKind.GENERATION_UNAVAILABLE, message)

    # ------------------------------------------------------------------
    # Work units (run inside the session's single task)
    # ------------------------------------------------------------------

    async def _generate_base(
        self, topic: str, diagram_type: DiagramType, replace: bool = False
    ) -> DiagramOutcome:
        with LogContext(session_id=self.session_id, detail_level=0):
            logger.info("Generating base diagram", diagram_type=diagram_type.value)
            raw = await self._call_generator(self.generator.generate(topic, diagram_type), 0)
            if isinstance(raw, DiagramFailure):
                return self._outcome(0, failure=raw)

            code = extract_diagram_code(raw)
            result = self.validator.validate(code)
            if not result.valid:
                return self._outcome(
                    0, failure=self._failure(0, FailureKind.SYNTAX_INVALID, result.reason)
                )
            for warning in result.warnings:
                logger.warning(f"Base diagram: {warning}")

            document = DiagramDocument(topic=topic, diagram_type=diagram_type)
            document.store(0, code)
            if replace and self._document is not None:
                logger.info("Base diagram regenerated", discarded_levels=self.cached_levels)
            self._document = document
            self._topic = topic
            self._diagram_type = diagram_type
            logger.info("Cached base diagram", nodes=result.node_count)
            return self._outcome(0)

    async def _enhance_level(self, level: int, replace: bool = False) -> DiagramOutcome:
        with LogContext(session_id=self.session_id, detail_level=level):
            document = self._document
            if document is None or not document.has_level(0):
                base = await self._generate_base(self._topic, self._diagram_type)
                if not base.ok:
                    return self._outcome(level, failure=base.failure)
                document = self._document

            basis_level = self._basis_level(document, level)
            basis = document.levels[basis_level]
            direction = EnhancementDirection.for_level(level)

            try:
                identifiers = self._identifiers_for(basis, direction)
            except IdentifierSpaceExhaustedError as e:
                return self._outcome(
                    level, failure=self._failure(level, FailureKind.SYNTAX_INVALID, e.message)
                )

            request = EnhancementRequest(
                topic=document.topic,
                diagram_type=document.diagram_type,
                basis=basis,
                basis_level=basis_level,
                target_level=level,
                direction=direction,
                new_identifiers=tuple(identifiers),
                max_nodes=self.max_simplified_nodes,
            )
            logger.info("Requesting enhancement", direction=direction.value, basis_level=basis_level)
            raw = await self._call_generator(self.generator.enhance(request), level)
            if isinstance(raw, DiagramFailure):
                return self._outcome(level, failure=raw)

            code = extract_diagram_code(raw)
            if direction is EnhancementDirection.EXPAND:
                result = self.validator.check_preservation(basis, code)
            else:
                result = self.validator.validate(code)
            if not result.valid:
                return self._outcome(
                    level, failure=self._failure(level, FailureKind.SYNTAX_INVALID, result.reason)
                )
            for warning in result.warnings:
                logger.warning(f"Level {level} diagram: {warning}")
            if (
                direction is EnhancementDirection.SIMPLIFY
                and result.node_count > self.max_simplified_nodes
            ):
                logger.warning(
                    f"Simplified diagram has {result.node_count} nodes",
                    requested_max=self.max_simplified_nodes,
                )

            document.store(level, code, replace=replace)
            document.current_level = level
            logger.info("Cached diagram level", nodes=result.node_count)
            return self._outcome(level)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _basis_level(document: DiagramDocument, level: int) -> int:
        """Nearest cached level between 0 and ``level`` (exclusive), on the same side."""
        if level > 0:
            candidates = [k for k in document.levels if 0 <= k < level]
            return max(candidates, default=0)
        candidates = [k for k in document.levels if level < k <= 0]
        return min(candidates, default=0)

    def _identifiers_for(self, basis: str, direction: EnhancementDirection) -> list[str]:
        if direction is EnhancementDirection.SIMPLIFY:
            return []
        defined, referenced, inline = self.validator.scan(basis)
        allocator = IdentifierAllocator(self.alphabet, used=defined | referenced | inline)
        return allocator.allocate_up_to(EXPAND_MAX_NODES, minimum=1)

    def _failure(self, level: int, kind: FailureKind, message: str | None) -> DiagramFailure:
        failure = DiagramFailure(kind=kind, message=message or kind.value, level=level)
        logger.warning(
            f"Diagram generation failed: {failure.message}", kind=kind.value, detail_level=level
        )
        return failure

    def _outcome(
        self,
        level: int,
        from_cache: bool = False,
        failure: Optional[DiagramFailure] = None,
        superseded: bool = False,
        rejected: bool = False,
    ) -> DiagramOutcome:
        return DiagramOutcome(
            level=level,
            current_level=self.current_level,
            diagram=self.displayed_diagram,
            from_cache=from_cache,
            failure=failure,
            superseded=superseded,
            rejected=rejected,
        )


__all__ = [
    "FailureKind",
    "DiagramFailure",
    "DiagramOutcome",
    "DiagramDocument",
    "DiagramEnhancementController",
]
