"""Tests for the exception hierarchy."""

import pytest

from argmap.exceptions import (
    APIKeyError,
    ArgmapError,
    CircuitOpenError,
    ConfigurationError,
    DiagramError,
    DiagramStateError,
    DiagramSyntaxError,
    ExternalServiceError,
    ExtractionError,
    GenerationUnavailableError,
    IdentifierSpaceExhaustedError,
    InfrastructureError,
    RuleTableError,
)


class TestHierarchy:
    """Every package error is an ArgmapError."""

    @pytest.mark.parametrize(
        "error,parent",
        [
            (ExtractionError("x"), ArgmapError),
            (RuleTableError("rules.yaml", "bad"), ArgmapError),
            (DiagramSyntaxError("bad"), DiagramError),
            (DiagramStateError("op", "why"), DiagramError),
            (IdentifierSpaceExhaustedError(15), DiagramError),
            (APIKeyError("groq"), ConfigurationError),
            (GenerationUnavailableError("groq", "down"), ExternalServiceError),
            (ExternalServiceError("groq", "down"), InfrastructureError),
            (CircuitOpenError("c", 1.0), InfrastructureError),
        ],
    )
    def test_parents(self, error, parent):
        assert isinstance(error, parent)
        assert isinstance(error, ArgmapError)


class TestMessages:
    """Tests for messages and details."""

    def test_str_includes_details(self):
        error = ArgmapError("failed", {"level": 2})
        assert str(error) == "failed (details: {'level': 2})"

    def test_str_without_details(self):
        assert str(ArgmapError("failed")) == "failed"

    def test_syntax_error_preview_truncated(self):
        error = DiagramSyntaxError("no header", level=1, preview="x" * 150)
        assert error.details["preview"] == "x" * 100 + "..."
        assert error.level == 1

    def test_generation_unavailable_status(self):
        error = GenerationUnavailableError("api.groq.com", "HTTP 429", status_code=429)
        assert error.status_code == 429
        assert "api.groq.com" in error.message

    def test_identifier_exhaustion(self):
        error = IdentifierSpaceExhaustedError(15, requested=3)
        assert error.details == {"capacity": 15, "requested": 3}

    def test_circuit_open_message(self):
        assert "Retry in 2.5s" in CircuitOpenError("generator:x", 2.5).message
