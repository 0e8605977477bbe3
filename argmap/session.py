"""
Analysis conversation state.

An ``AnalysisSession`` holds one scenario's conversation. Each assistant
turn owns the argument tree extracted from it; the session lazily owns one
diagram controller for the scenario. ``reset()`` discards all of it.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from argmap.diagram.controller import DiagramEnhancementController
from argmap.diagram.generator import DiagramGenerator
from argmap.diagram.prompts import DiagramType
from argmap.exceptions import DiagramStateError
from argmap.extraction.builder import parse_arguments
from argmap.extraction.models import ArgumentTree
from argmap.extraction.rules import RuleTable
from argmap.generation.analysis import AnalysisService
from argmap.logging_config import LogContext, get_logger
from argmap.serialization import compact_dict

logger = get_logger(__name__)

_SUMMARY = re.compile(r"SUMMARY:\s*(.*?)(?=DETAILED ANALYSIS:|$)", re.DOTALL)
_DETAILED = re.compile(r"DETAILED ANALYSIS:\s*(.*)", re.DOTALL)


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


def split_summary(content: str) -> tuple[str, str]:
    """Split analysis text into (summary, detailed analysis).

    Without markers the summary is the first 200 characters and the detail is
    the whole text.
    """
    summary = _SUMMARY.search(content)
    detailed = _DETAILED.search(content)
    return (
        summary.group(1).strip() if summary else content[:200] + "...",
        detailed.group(1).strip() if detailed else content,
    )


@dataclass
class AnalysisMessage:
    """One conversation turn; assistant turns may carry an argument tree."""

    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    argument_tree: Optional[ArgumentTree] = None

    @property
    def summary(self) -> str:
        return split_summary(self.content)[0]

    @property
    def detailed(self) -> str:
        return split_summary(self.content)[1]

    def as_chat(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}

    def to_dict(self) -> dict[str, Any]:
        return compact_dict(
            [
                ("role", self.role),
                ("content", self.content),
                ("timestamp", self.timestamp),
                ("argumentTree", self.argument_tree),
            ],
            optional=("argumentTree",),
        )


class AnalysisSession:
    """A scenario conversation with its argument trees and diagram.

    Args:
        analysis: Service producing analysis text.
        diagram_generator: Source for the scenario diagram; without one,
            ``diagram`` raises ``DiagramStateError``.
        rules: Keyword rule table for extraction (defaults to the configured table).
        session_id: Log context identifier; generated when omitted.
        diagram_type: Kind of diagram to request for the scenario.
    """

    def __init__(
        self,
        analysis: AnalysisService,
        diagram_generator: DiagramGenerator | None = None,
        rules: RuleTable | None = None,
        session_id: str | None = None,
        diagram_type: DiagramType = DiagramType.ARGUMENT_FLOW,
    ):
        self.analysis = analysis
        self.diagram_generator = diagram_generator
        self.rules = rules
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.diagram_type = diagram_type
        self.scenario: Optional[str] = None
        self.messages: list[AnalysisMessage] = []
        self._diagram: Optional[DiagramEnhancementController] = None

    @property
    def has_analysis(self) -> bool:
        return self.scenario is not None and any(
            m.role is MessageRole.ASSISTANT for m in self.messages
        )

    @property
    def latest_tree(self) -> Optional[ArgumentTree]:
        for message in reversed(self.messages):
            if message.argument_tree is not None:
                return message.argument_tree
        return None

    @property
    def diagram(self) -> DiagramEnhancementController:
        """The scenario's diagram controller, created on first use."""
        if self.diagram_generator is None:
            raise DiagramStateError("open diagram", "no diagram generator configured")
        if self.scenario is None:
            raise DiagramStateError("open diagram", "no scenario analyzed yet")
        if self._diagram is None:
            self._diagram = DiagramEnhancementController(
                self.diagram_generator,
                topic=self.scenario,
                diagram_type=self.diagram_type,
                session_id=self.session_id,
            )
        return self._diagram

    def record_response(self, content: str) -> AnalysisMessage:
        """Append an assistant turn, extracting its argument tree."""
        tree = parse_arguments(content, self.rules)
        if tree is None:
            logger.info("Response kept without argument structure", chars=len(content))
        else:
            logger.debug("Argument tree extracted", nodes=tree.total_nodes, depth=tree.max_depth)
        message = AnalysisMessage(MessageRole.ASSISTANT, content, argument_tree=tree)
        self.messages.append(message)
        return message

    async def analyze(self, scenario: str) -> AnalysisMessage:
        """Start a new conversation about ``scenario``."""
        if not scenario or not scenario.strip():
            raise ValueError("scenario must not be empty")
        self.reset()
        self.scenario = scenario.strip()
        self.messages.append(AnalysisMessage(MessageRole.USER, self.scenario))
        with LogContext(session_id=self.session_id):
            logger.info("Requesting analysis", scenario_chars=len(self.scenario))
            content = await self.analysis.analyze(self.scenario)
            return self.record_response(content)

    async def follow_up(self, question: str) -> AnalysisMessage:
        """Ask a follow-up question in the current conversation."""
        if not self.has_analysis:
            raise ValueError("no analysis in this session; call analyze() first")
        self.messages.append(AnalysisMessage(MessageRole.USER, question))
        with LogContext(session_id=self.session_id):
            logger.info("Requesting follow-up", turn=len(self.messages))
            content = await self.analysis.follow_up([m.as_chat() for m in self.messages])
            return self.record_response(content)

    def reset(self) -> None:
        """Discard the conversation, its argument trees and the diagram."""
        if self._diagram is not None:
            self._diagram.reset()
        self._diagram = None
        self.scenario = None
        self.messages = []

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "scenario": self.scenario,
            "messages": [m.to_dict() for m in self.messages],
            "diagram": self._diagram.document.to_dict()
            if self._diagram is not None and self._diagram.document is not None
            else None,
        }


__all__ = ["MessageRole", "AnalysisMessage", "AnalysisSession", "split_summary"]
