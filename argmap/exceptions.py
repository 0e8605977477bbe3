"""
Custom exception types for argmap.

This module defines the exception hierarchy used throughout the package.
Using specific exception types enables:
- Targeted except blocks at the controller and CLI boundaries
- Structured details for logging
- A clean split between "retry later" and "do not retry" failures

Note that most public entry points do NOT raise these: tree extraction returns
``None`` on failure and diagram validation returns a ``ValidationResult``.
The exceptions travel between internal layers and are classified where they
cross the diagram controller boundary.
"""

from __future__ import annotations

from typing import Any


class ArgmapError(Exception):
    """Base exception for all argmap errors.

    All custom exceptions in argmap inherit from this class so callers can
    catch every package-specific error with a single handler.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


# ============================================================================
# Extraction Errors
# ============================================================================


class ExtractionError(ArgmapError):
    """Raised inside the tree builder when input cannot be structured.

    Never escapes ``parse_arguments``; it is converted into a ``None`` tree.
    """

    pass


class RuleTableError(ArgmapError):
    """Raised when a keyword rule table is malformed."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Invalid rule table from {source}: {reason}",
            {"source": source, "reason": reason},
        )
        self.source = source
        self.reason = reason


# ============================================================================
# Diagram Errors
# ============================================================================


class DiagramError(ArgmapError):
    """Base exception for diagram-related errors."""

    pass


class DiagramSyntaxError(DiagramError):
    """Raised when generator output fails DSL validation."""

    def __init__(self, reason: str, level: int | None = None, preview: str | None = None):
        details: dict[str, Any] = {"reason": reason}
        if level is not None:
            details["level"] = level
        if preview:
            details["preview"] = preview[:100] + "..." if len(preview) > 100 else preview
        super().__init__(f"Diagram failed validation: {reason}", details)
        self.reason = reason
        self.level = level


class DiagramStateError(DiagramError):
    """Raised when a controller operation is invoked in an invalid state."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Cannot {operation}: {reason}",
            {"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason


class IdentifierSpaceExhaustedError(DiagramError):
    """Raised when the diagram identifier alphabet has no letters left."""

    def __init__(self, capacity: int, requested: int = 1):
        super().__init__(
            f"Identifier space exhausted: requested {requested}, capacity {capacity}",
            {"capacity": capacity, "requested": requested},
        )
        self.capacity = capacity
        self.requested = requested


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(ArgmapError):
    """Raised when a component's configuration is missing or invalid."""

    def __init__(self, component: str, reason: str):
        super().__init__(
            f"Configuration error in {component}: {reason}",
            {"component": component, "reason": reason},
        )
        self.component = component
        self.reason = reason


class APIKeyError(ConfigurationError):
    """Raised when no API key is configured for the generator service."""

    def __init__(self, provider: str):
        super().__init__(provider, "missing or invalid API key")
        self.provider = provider


# ============================================================================
# Infrastructure Errors
# ============================================================================


class InfrastructureError(ArgmapError):
    """Base exception for infrastructure-related errors."""

    pass


class ExternalServiceError(InfrastructureError):
    """Raised when an external service call fails."""

    def __init__(self, service: str, reason: str, status_code: int | None = None):
        super().__init__(
            f"External service '{service}' failed: {reason}",
            {"service": service, "reason": reason, "status_code": status_code},
        )
        self.service = service
        self.reason = reason
        self.status_code = status_code


class GenerationUnavailableError(ExternalServiceError):
    """Raised when the text generator cannot produce a response.

    Covers transport errors, non-success HTTP statuses, undecodable bodies,
    empty completions and timeouts. Callers may retry.
    """

    pass


class CircuitOpenError(InfrastructureError):
    """Raised when attempting to use an open circuit."""

    def __init__(self, circuit_name: str, cooldown_remaining: float):
        super().__init__(
            f"Circuit breaker '{circuit_name}' is open. Retry in {cooldown_remaining:.1f}s",
            {"circuit_name": circuit_name, "cooldown_remaining": cooldown_remaining},
        )
        self.circuit_name = circuit_name
        self.cooldown_remaining = cooldown_remaining


__all__ = [
    "ArgmapError",
    "ExtractionError",
    "RuleTableError",
    "DiagramError",
    "DiagramSyntaxError",
    "DiagramStateError",
    "IdentifierSpaceExhaustedError",
    "ConfigurationError",
    "APIKeyError",
    "InfrastructureError",
    "ExternalServiceError",
    "GenerationUnavailableError",
    "CircuitOpenError",
]
