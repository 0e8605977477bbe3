"""
Diagram generator collaborators.

The controller depends only on the ``DiagramGenerator`` protocol: a topic (or
a basis diagram plus a direction) goes in, opaque text comes out. Fenced-block
extraction and validation happen in the controller, never here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from argmap.diagram.identifiers import DEFAULT_ALPHABET
from argmap.diagram.prompts import (
    MAX_SIMPLIFIED_NODES,
    DiagramType,
    EnhancementDirection,
    base_system_prompt,
    base_user_prompt,
    expand_prompt,
    simplify_prompt,
)
from argmap.generation.client import ChatCompletionClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnhancementRequest:
    """Everything the generator needs to rewrite a basis diagram.

    Attributes:
        topic: Subject of the diagram.
        diagram_type: Kind of diagram the basis was generated as.
        basis: DSL text the rewrite starts from.
        basis_level: Detail level of ``basis``.
        target_level: Detail level being requested.
        direction: Expand or simplify.
        new_identifiers: Identifiers reserved for new nodes (expand only).
        max_nodes: Node ceiling for simplified diagrams.
    """

    topic: str
    diagram_type: DiagramType
    basis: str
    basis_level: int
    target_level: int
    direction: EnhancementDirection
    new_identifiers: tuple[str, ...] = ()
    max_nodes: int = MAX_SIMPLIFIED_NODES


@runtime_checkable
class DiagramGenerator(Protocol):
    """Anything that can produce diagram text."""

    async def generate(self, topic: str, diagram_type: DiagramType) -> str:
        ...

    async def enhance(self, request: EnhancementRequest) -> str:
        ...


class LLMDiagramGenerator:
    """Diagram generator backed by a chat-completions model."""

    def __init__(self, client: ChatCompletionClient, alphabet: str = DEFAULT_ALPHABET):
        self.client = client
        self.alphabet = alphabet

    @property
    def model(self) -> str:
        return self.client.settings.diagram_model

    async def _ask(self, user_prompt: str) -> str:
        settings = self.client.settings
        return await self.client.complete_prompt(
            user_prompt,
            self.model,
            system=base_system_prompt(self.alphabet),
            temperature=settings.diagram_temperature,
            max_tokens=settings.diagram_max_tokens,
        )

    async def generate(self, topic: str, diagram_type: DiagramType = DiagramType.ARGUMENT_FLOW) -> str:
        logger.debug(f"Requesting {DiagramType(diagram_type).value} diagram for topic ({len(topic)} chars)")
        return await self._ask(base_user_prompt(topic, diagram_type, self.alphabet))

    async def enhance(self, request: EnhancementRequest) -> str:
        if request.direction is EnhancementDirection.EXPAND:
            prompt = expand_prompt(request.basis, request.new_identifiers, request.topic)
        else:
            prompt = simplify_prompt(request.basis, request.max_nodes, self.alphabet, request.topic)
        logger.debug(
            f"Requesting {request.direction.value} from level {request.basis_level} "
            f"to level {request.target_level}"
        )
        return await self._ask(prompt)


__all__ = ["DiagramGenerator", "EnhancementRequest", "LLMDiagramGenerator"]
