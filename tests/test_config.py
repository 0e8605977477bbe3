"""Tests for generator settings."""

import pytest

from argmap.config import (
    DEFAULT_BASE_URL,
    DEFAULT_DIAGRAM_MODEL,
    GeneratorSettings,
    get_rules_file,
)


class TestGeneratorSettings:
    """Tests for GeneratorSettings validation."""

    def test_defaults(self):
        settings = GeneratorSettings()
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.timeout_seconds == 45.0
        assert not settings.has_api_key

    def test_chat_completions_url(self):
        settings = GeneratorSettings(base_url="https://example.test/v1/")
        assert settings.chat_completions_url == "https://example.test/v1/chat/completions"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("timeout_seconds", 0),
            ("diagram_max_tokens", 0),
            ("diagram_temperature", 2.5),
            ("circuit_failure_threshold", 0),
            ("circuit_cooldown_seconds", -1),
            ("base_url", ""),
        ],
    )
    def test_rejects_invalid(self, field, value):
        with pytest.raises(ValueError):
            GeneratorSettings(**{field: value})

    def test_with_overrides_ignores_none(self):
        settings = GeneratorSettings().with_overrides(diagram_model=None, timeout_seconds=10)
        assert settings.diagram_model == DEFAULT_DIAGRAM_MODEL
        assert settings.timeout_seconds == 10


class TestFromEnv:
    """Tests for environment overrides."""

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ARGMAP_API_KEY", "secret")
        monkeypatch.setenv("ARGMAP_DIAGRAM_MODEL", "small-model")
        monkeypatch.setenv("ARGMAP_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("ARGMAP_CIRCUIT_FAILURE_THRESHOLD", "5")

        settings = GeneratorSettings.from_env()

        assert settings.api_key == "secret"
        assert settings.diagram_model == "small-model"
        assert settings.timeout_seconds == 12.5
        assert settings.circuit_failure_threshold == 5

    def test_groq_key_fallback(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "groq-secret")
        assert GeneratorSettings.from_env().api_key == "groq-secret"

    def test_invalid_number_uses_default(self, monkeypatch, caplog):
        monkeypatch.setenv("ARGMAP_TIMEOUT_SECONDS", "soon")
        assert GeneratorSettings.from_env().timeout_seconds == 45.0
        assert "ARGMAP_TIMEOUT_SECONDS" in caplog.text

    def test_rules_file(self, monkeypatch):
        assert get_rules_file() is None
        monkeypatch.setenv("ARGMAP_RULES_FILE", "/etc/argmap/rules.yaml")
        assert get_rules_file() == "/etc/argmap/rules.yaml"
