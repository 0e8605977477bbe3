"""
Generator and extraction configuration.

Settings are frozen dataclasses validated on construction, with environment
variable overrides resolved by ``GeneratorSettings.from_env()``.

Environment variables:
    ARGMAP_API_KEY / GROQ_API_KEY      API key for the chat-completions endpoint
    ARGMAP_BASE_URL                    OpenAI-compatible base URL
    ARGMAP_DIAGRAM_MODEL               model used for diagram generation
    ARGMAP_ANALYSIS_MODEL              model used for analysis text
    ARGMAP_TIMEOUT_SECONDS             bound on a single generator call
    ARGMAP_CIRCUIT_FAILURE_THRESHOLD   consecutive failures before the circuit opens
    ARGMAP_CIRCUIT_COOLDOWN_SECONDS    seconds before an open circuit retries
    ARGMAP_RULES_FILE                  YAML keyword rule table for extraction
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_DIAGRAM_MODEL = "llama-3.3-70b-versatile"
DEFAULT_ANALYSIS_MODEL = "deepseek-r1-distill-llama-70b"
DEFAULT_TIMEOUT_SECONDS = 45.0

# Detail level bounds for diagram documents
MIN_DETAIL_LEVEL = -2
MAX_DETAIL_LEVEL = 10


@dataclass(frozen=True)
class GeneratorSettings:
    """Connection and behavior settings for the external text generator.

    Attributes:
        api_key: Bearer token for the chat-completions endpoint.
        base_url: OpenAI-compatible API root (no trailing ``/chat/completions``).
        diagram_model: Model name for diagram generation and enhancement.
        analysis_model: Model name for free-form analysis.
        timeout_seconds: Upper bound for one generator call, including retries
            inside the HTTP session.
        diagram_temperature: Sampling temperature for diagram requests.
        diagram_max_tokens: Completion budget for diagram requests.
        circuit_failure_threshold: Consecutive failures before the circuit opens.
        circuit_cooldown_seconds: Time an open circuit waits before allowing a trial call.
    """

    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    diagram_model: str = DEFAULT_DIAGRAM_MODEL
    analysis_model: str = DEFAULT_ANALYSIS_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    diagram_temperature: float = 0.3
    diagram_max_tokens: int = 3000
    circuit_failure_threshold: int = 3
    circuit_cooldown_seconds: float = 60.0

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.diagram_max_tokens < 1:
            raise ValueError("diagram_max_tokens must be at least 1")
        if not 0.0 <= self.diagram_temperature <= 2.0:
            raise ValueError("diagram_temperature must be between 0 and 2")
        if self.circuit_failure_threshold < 1:
            raise ValueError("circuit_failure_threshold must be at least 1")
        if self.circuit_cooldown_seconds <= 0:
            raise ValueError("circuit_cooldown_seconds must be positive")
        if not self.base_url:
            raise ValueError("base_url must not be empty")

    @property
    def chat_completions_url(self) -> str:
        return self.base_url.rstrip("/") + "/chat/completions"

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def with_overrides(self, **overrides) -> GeneratorSettings:
        """Create new settings with the given fields replaced.

        ``None`` values are ignored so CLI flags can be passed straight through.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> GeneratorSettings:
        """Build settings from environment variables, falling back to defaults."""
        settings = cls(
            api_key=os.environ.get("ARGMAP_API_KEY") or os.environ.get("GROQ_API_KEY", ""),
            base_url=os.environ.get("ARGMAP_BASE_URL") or DEFAULT_BASE_URL,
            diagram_model=os.environ.get("ARGMAP_DIAGRAM_MODEL") or DEFAULT_DIAGRAM_MODEL,
            analysis_model=os.environ.get("ARGMAP_ANALYSIS_MODEL") or DEFAULT_ANALYSIS_MODEL,
        )
        return settings.with_overrides(
            timeout_seconds=_get_env_float("ARGMAP_TIMEOUT_SECONDS"),
            circuit_failure_threshold=_get_env_int("ARGMAP_CIRCUIT_FAILURE_THRESHOLD"),
            circuit_cooldown_seconds=_get_env_float("ARGMAP_CIRCUIT_COOLDOWN_SECONDS"),
        )


def _get_env_int(name: str) -> Optional[int]:
    """Get an integer from environment variable, or None if not set/invalid."""
    value = os.environ.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {name}: {value!r}, using default")
        return None


def _get_env_float(name: str) -> Optional[float]:
    """Get a float from environment variable, or None if not set/invalid."""
    value = os.environ.get(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid float for {name}: {value!r}, using default")
        return None


def get_rules_file() -> Optional[str]:
    """Path of a YAML rule table override, if configured."""
    return os.environ.get("ARGMAP_RULES_FILE") or None


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_DIAGRAM_MODEL",
    "DEFAULT_ANALYSIS_MODEL",
    "DEFAULT_TIMEOUT_SECONDS",
    "MIN_DETAIL_LEVEL",
    "MAX_DETAIL_LEVEL",
    "GeneratorSettings",
    "get_rules_file",
]
