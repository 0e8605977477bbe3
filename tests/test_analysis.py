"""Tests for the analysis text service."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from argmap.config import GeneratorSettings
from argmap.exceptions import GenerationUnavailableError
from argmap.generation.analysis import (
    FALLBACK_PERSPECTIVES,
    FOLLOW_UP_SYSTEM,
    AnalysisService,
    build_analysis_system_prompt,
    parse_perspectives,
)


@pytest.fixture
def client():
    mock = MagicMock()
    mock.settings = GeneratorSettings(api_key="k", analysis_model="analysis-model")
    mock.complete_prompt = AsyncMock(
        return_value="Economic Efficiency\nEquity\nUrban Mobility\nEnvironmental Impact"
    )
    mock.complete = AsyncMock(return_value="<think>plan</think>SUMMARY:\nText")
    return mock


class TestParsePerspectives:
    """Tests for parse_perspectives."""

    def test_one_per_line(self):
        assert parse_perspectives("A\n\nB\n C \n") == ["A", "B", "C"]

    def test_caps_count(self):
        assert len(parse_perspectives("\n".join(str(i) for i in range(10)))) == 6

    def test_drops_echoed_scenario(self):
        assert parse_perspectives("Scenario: x\nA\nB") == ["A", "B"]


class TestSystemPrompt:
    """Tests for the analysis system prompt."""

    def test_sections_in_order(self):
        prompt = build_analysis_system_prompt(["Equity", "Mobility"])
        assert prompt.index("SUMMARY:") < prompt.index("DETAILED ANALYSIS:")
        assert prompt.index("Equity:") < prompt.index("Mobility:")
        assert prompt.index("Mobility:") < prompt.index("Critical Counterarguments:")


class TestAnalysisService:
    """Tests for AnalysisService."""

    @pytest.mark.asyncio
    async def test_perspectives(self, client):
        names = await AnalysisService(client).perspectives("tolls")
        assert names == ["Economic Efficiency", "Equity", "Urban Mobility", "Environmental Impact"]
        assert client.complete_prompt.call_args.args[1] == "analysis-model"

    @pytest.mark.asyncio
    async def test_perspectives_fallback_on_error(self, client):
        client.complete_prompt.side_effect = GenerationUnavailableError("api", "HTTP 500", 500)
        assert await AnalysisService(client).perspectives("tolls") == list(FALLBACK_PERSPECTIVES)

    @pytest.mark.asyncio
    async def test_perspectives_fallback_when_too_few(self, client):
        client.complete_prompt.return_value = "Only One\nTwo"
        assert await AnalysisService(client).perspectives("tolls") == list(FALLBACK_PERSPECTIVES)

    @pytest.mark.asyncio
    async def test_analyze(self, client):
        result = await AnalysisService(client).analyze("tolls")

        assert result == "SUMMARY:\nText"
        messages = client.complete.call_args.args[0]
        assert messages[0]["role"] == "system"
        assert "Urban Mobility:" in messages[0]["content"]
        assert messages[1] == {"role": "user", "content": "Analyze this topic: tolls"}
        assert client.complete.call_args.kwargs["max_tokens"] == 6000

    @pytest.mark.asyncio
    async def test_analyze_propagates_errors(self, client):
        client.complete.side_effect = GenerationUnavailableError("api", "timeout")
        with pytest.raises(GenerationUnavailableError):
            await AnalysisService(client).analyze("tolls")

    @pytest.mark.asyncio
    async def test_follow_up(self, client):
        history = [
            {"role": "user", "content": "tolls"},
            {"role": "assistant", "content": "analysis"},
            {"role": "user", "content": "what about cyclists?"},
        ]
        await AnalysisService(client).follow_up(history)

        messages = client.complete.call_args.args[0]
        assert messages[0] == {"role": "system", "content": FOLLOW_UP_SYSTEM}
        assert messages[1:] == history
        assert client.complete.call_args.kwargs["max_tokens"] == 2500
