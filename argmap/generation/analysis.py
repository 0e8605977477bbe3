"""
Analysis text collaborator.

Produces the free-form multi-perspective analysis that the extraction
package turns into argument trees. Perspectives are chosen per scenario by
a short preliminary request; a fixed set is used when that request fails or
returns too few.
"""

from __future__ import annotations

from typing import Sequence

from argmap.exceptions import ArgmapError
from argmap.extraction.cleaning import clean_response
from argmap.generation.client import ChatCompletionClient, Message
from argmap.logging_config import get_logger

logger = get_logger(__name__)

FALLBACK_PERSPECTIVES = (
    "Immediate Consequences vs Long-term Implications",
    "Individual Rights vs Collective Good",
    "Practical Implementation vs Idealistic Goals",
    "Stakeholder Impact Analysis",
)
MIN_PERSPECTIVES = 3
MAX_PERSPECTIVES = 6

_FORMATTING_RULES = """CRITICAL FORMATTING RULES:
- Use ONLY plain text - NO markdown formatting whatsoever
- NO asterisks, NO hashtags, NO bullet points, NO numbered lists
- NO bold, NO italics, NO headers
- Use simple paragraph breaks and colons for structure"""

PERSPECTIVE_PROMPT = """Analyze this scenario and identify 4-6 most relevant analytical perspectives that would be meaningful for examining this specific case. Do not use generic philosophical frameworks unless they are truly relevant.

Scenario: {scenario}

Return ONLY a simple list of 4-6 perspective names, one per line, no formatting:"""

FOLLOW_UP_SYSTEM = f"""You are a professional AI ethics analyst. Provide thoughtful, balanced responses to follow-up questions.

{_FORMATTING_RULES}

Continue the conversation with the same analytical rigor as before."""


def build_analysis_system_prompt(perspectives: Sequence[str]) -> str:
    """System prompt requesting SUMMARY / DETAILED ANALYSIS with one section per perspective."""
    structure = "\n\n".join(
        f"{perspective}:\n[Analysis from this specific perspective]" for perspective in perspectives
    )
    return f"""You are a professional AI ethics analyst. When presented with any topic, provide a comprehensive examination using perspectives that are specifically relevant to that topic.

{_FORMATTING_RULES}

REQUIRED RESPONSE STRUCTURE:

SUMMARY:
[Provide a 2-3 sentence executive summary of the key tensions and considerations specific to this topic]

DETAILED ANALYSIS:

{structure}

Critical Counterarguments:
[Challenge each major position with opposing views]

Areas of Complexity:
[Gray areas, edge cases, and nuanced considerations specific to this topic]

Synthesis:
[Balanced conclusion highlighting key trade-offs and questions for further consideration]

Remember: Use ONLY plain text with paragraph breaks."""


def parse_perspectives(response: str) -> list[str]:
    """Split a perspective list response into at most MAX_PERSPECTIVES names."""
    names = [
        line.strip()
        for line in clean_response(response).splitlines()
        if line.strip() and "Scenario:" not in line
    ]
    return names[:MAX_PERSPECTIVES]


class AnalysisService:
    """Requests analysis text for scenarios and follow-up questions."""

    def __init__(
        self,
        client: ChatCompletionClient,
        temperature: float = 0.7,
        max_tokens: int = 6000,
        follow_up_max_tokens: int = 2500,
    ):
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.follow_up_max_tokens = follow_up_max_tokens

    @property
    def model(self) -> str:
        return self.client.settings.analysis_model

    async def perspectives(self, scenario: str) -> list[str]:
        try:
            response = await self.client.complete_prompt(
                PERSPECTIVE_PROMPT.format(scenario=scenario),
                self.model,
                temperature=0.4,
                max_tokens=400,
            )
        except ArgmapError as e:
            logger.warning("Perspective selection failed, using defaults", error=e.message)
            return list(FALLBACK_PERSPECTIVES)

        names = parse_perspectives(response)
        if len(names) < MIN_PERSPECTIVES:
            logger.info("Too few perspectives returned, using defaults", returned=len(names))
            return list(FALLBACK_PERSPECTIVES)
        logger.debug("Perspectives selected", count=len(names))
        return names

    async def analyze(self, scenario: str) -> str:
        """Initial analysis of a scenario, with reasoning tags removed."""
        perspectives = await self.perspectives(scenario)
        messages: list[Message] = [
            {"role": "system", "content": build_analysis_system_prompt(perspectives)},
            {"role": "user", "content": f"Analyze this topic: {scenario}"},
        ]
        raw = await self.client.complete(
            messages, self.model, temperature=self.temperature, max_tokens=self.max_tokens
        )
        return clean_response(raw)

    async def follow_up(self, history: Sequence[Message]) -> str:
        """Continue a conversation; ``history`` holds prior user/assistant turns."""
        messages: list[Message] = [{"role": "system", "content": FOLLOW_UP_SYSTEM}, *history]
        raw = await self.client.complete(
            messages,
            self.model,
            temperature=self.temperature,
            max_tokens=self.follow_up_max_tokens,
        )
        return clean_response(raw)


__all__ = [
    "FALLBACK_PERSPECTIVES",
    "PERSPECTIVE_PROMPT",
    "FOLLOW_UP_SYSTEM",
    "AnalysisService",
    "build_analysis_system_prompt",
    "parse_perspectives",
]
