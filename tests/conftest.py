"""
Shared pytest fixtures for the argmap test suite.

Provides a scriptable fake diagram generator, sample analysis text and
sample diagrams, and resets process-wide state (circuit breakers, log
context) around every test.
"""

import asyncio
from typing import Optional, Union

import pytest

from argmap.diagram.generator import EnhancementRequest
from argmap.diagram.prompts import DiagramType, EnhancementDirection
from argmap.logging_config import clear_context
from argmap.resilience import reset_all_circuit_breakers


# ============================================================================
# Sample Data
# ============================================================================

BASE_DIAGRAM = """graph TD
    subgraph "Core Question"
        A[Initial Assessment]
        B{Adopt the policy?}
        C((Public outcome))
        D(Affected citizens)
    end
    A --> B
    B -->|Yes| C
    B -.-> D
    D ==> A"""

SIMPLIFIED_DIAGRAM = """graph TD
    A[Core question]
    B((Main outcome))
    A --> B"""

SAMPLE_ANALYSIS = """SUMMARY:
Congestion pricing trades individual convenience for collective benefit.

DETAILED ANALYSIS:

Utilitarian Analysis:
This clearly benefits society through measurable welfare gains.
However critics argue it ignores individual rights.
Research from Stockholm shows a twenty percent traffic reduction.

Stakeholder Impact:
Commuters from outer districts might bear a disproportionate cost.
Local businesses could see fewer casual visitors downtown.

Critical Counterarguments:
Opposing voices stress that tolls act as a regressive tax on workers.
"""

ScriptedResult = Union[str, BaseException]


def fenced(code: str) -> str:
    """Wrap DSL text the way chat models usually return it."""
    return f"Here is the diagram:\n```mermaid\n{code}\n```\nLet me know if you need changes."


def expand_diagram(basis: str, identifiers) -> str:
    """A well-behaved expansion: basis verbatim plus one subgraph of new nodes."""
    lines = [basis, '    subgraph "Further Detail"']
    for identifier in identifiers:
        lines.append(f"        {identifier}[Detail {identifier}]")
    lines.append("    end")
    for identifier in identifiers:
        lines.append(f"    A --> {identifier}")
    return "\n".join(lines)


class FakeDiagramGenerator:
    """Scriptable stand-in for the LLM diagram generator.

    ``base_results`` are consumed in order (the last one repeats); entries
    may be strings or exceptions to raise. ``enhance_results`` maps target
    levels to a string or exception; unmapped levels get a well-formed
    expansion or simplification of the basis. ``delay`` makes every call
    sleep first so tests can race requests.
    """

    def __init__(
        self,
        base_results: Optional[list] = None,
        enhance_results: Optional[dict] = None,
        delay: float = 0.0,
    ):
        self.base_results: list = list(base_results or [fenced(BASE_DIAGRAM)])
        self.enhance_results: dict = dict(enhance_results or {})
        self.delay = delay
        self.generate_calls: list[tuple[str, DiagramType]] = []
        self.enhance_calls: list[EnhancementRequest] = []
        self.completed: list[str] = []

    @property
    def total_calls(self) -> int:
        return len(self.generate_calls) + len(self.enhance_calls)

    async def _respond(self, result: ScriptedResult, label: str) -> str:
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(result, BaseException):
            raise result
        self.completed.append(label)
        return result

    async def generate(self, topic: str, diagram_type: DiagramType) -> str:
        self.generate_calls.append((topic, diagram_type))
        result = self.base_results[0] if len(self.base_results) == 1 else self.base_results.pop(0)
        return await self._respond(result, "base")

    async def enhance(self, request: EnhancementRequest) -> str:
        self.enhance_calls.append(request)
        result = self.enhance_results.get(request.target_level)
        if result is None:
            if request.direction is EnhancementDirection.EXPAND:
                result = fenced(expand_diagram(request.basis, request.new_identifiers))
            else:
                result = fenced(SIMPLIFIED_DIAGRAM)
        return await self._respond(result, f"level {request.target_level}")


# ============================================================================
# Autouse Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """Reset all circuit breakers before and after each test.

    Breakers live in a process-wide registry keyed by host, so one test's
    failures would otherwise open the circuit for the next.
    """
    reset_all_circuit_breakers()
    yield
    reset_all_circuit_breakers()


@pytest.fixture(autouse=True)
def clean_log_context():
    """Clear structured log context around each test."""
    clear_context()
    yield
    clear_context()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep developer environment variables out of configuration tests."""
    for name in (
        "ARGMAP_API_KEY",
        "GROQ_API_KEY",
        "ARGMAP_BASE_URL",
        "ARGMAP_DIAGRAM_MODEL",
        "ARGMAP_ANALYSIS_MODEL",
        "ARGMAP_TIMEOUT_SECONDS",
        "ARGMAP_CIRCUIT_FAILURE_THRESHOLD",
        "ARGMAP_CIRCUIT_COOLDOWN_SECONDS",
        "ARGMAP_RULES_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# Shared Fixtures
# ============================================================================


@pytest.fixture
def base_diagram() -> str:
    return BASE_DIAGRAM


@pytest.fixture
def sample_analysis() -> str:
    return SAMPLE_ANALYSIS


@pytest.fixture
def fake_generator() -> FakeDiagramGenerator:
    """Generator that always succeeds immediately."""
    return FakeDiagramGenerator()


@pytest.fixture
def slow_generator() -> FakeDiagramGenerator:
    """Generator whose calls take long enough to be superseded."""
    return FakeDiagramGenerator(delay=0.05)


@pytest.fixture
def make_generator():
    """Factory for scripted generators: ``make_generator(base_results=[...])``."""
    return FakeDiagramGenerator


@pytest.fixture
def fence():
    return fenced


@pytest.fixture
def simplified_diagram() -> str:
    return SIMPLIFIED_DIAGRAM
