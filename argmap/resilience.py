"""
Circuit breaker for generator calls.

A failing generator service should fail fast instead of making every level
change wait for a full timeout. Breakers are shared per service name through
a small thread-safe registry.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator

from argmap.exceptions import CircuitOpenError

logger = logging.getLogger(__name__)

_circuit_breakers: dict[str, "CircuitBreaker"] = {}
_circuit_breakers_lock = threading.Lock()


def get_circuit_breaker(
    name: str,
    failure_threshold: int = 3,
    cooldown_seconds: float = 60.0,
) -> "CircuitBreaker":
    """
    Get or create a named circuit breaker from the global registry (thread-safe).

    Args:
        name: Unique identifier for the guarded service (e.g., "generator:groq")
        failure_threshold: Failures before opening circuit
        cooldown_seconds: Seconds before attempting recovery

    Returns:
        CircuitBreaker instance (shared if already exists)
    """
    with _circuit_breakers_lock:
        if name not in _circuit_breakers:
            _circuit_breakers[name] = CircuitBreaker(
                name=name,
                failure_threshold=failure_threshold,
                cooldown_seconds=cooldown_seconds,
            )
            logger.debug(f"Created circuit breaker: {name}")
        return _circuit_breakers[name]


def reset_all_circuit_breakers() -> None:
    """Reset all global circuit breakers (thread-safe). Useful for testing."""
    with _circuit_breakers_lock:
        for cb in _circuit_breakers.values():
            cb.reset()
        count = len(_circuit_breakers)
    logger.info(f"Reset {count} circuit breakers")


def get_circuit_breaker_status() -> dict[str, Any]:
    """Get status of all registered circuit breakers (thread-safe)."""
    with _circuit_breakers_lock:
        return {
            name: {"status": cb.get_status(), "failures": cb.failures}
            for name, cb in _circuit_breakers.items()
        }


@dataclass
class CircuitBreaker:
    """
    Circuit breaker for one external service.

    States:
    - CLOSED: Normal operation, requests allowed
    - OPEN: After failure threshold, requests blocked
    - HALF-OPEN: After cooldown, one trial request allowed; success closes it

    Usage:
        breaker = get_circuit_breaker("generator:groq")
        async with breaker.protected_call():
            text = await post_completion(...)
    """

    name: str = "circuit"
    failure_threshold: int = 3
    cooldown_seconds: float = 60.0

    _failures: int = field(default=0, repr=False)
    _open_at: float = field(default=0.0, repr=False)

    @property
    def failures(self) -> int:
        return self._failures

    @property
    def is_open(self) -> bool:
        return self._open_at > 0.0

    def record_failure(self) -> bool:
        """Record a failure. Returns True if the circuit just opened."""
        self._failures += 1
        if self._failures >= self.failure_threshold and self._open_at == 0.0:
            self._open_at = time.time()
            logger.warning(f"Circuit breaker '{self.name}' OPEN after {self._failures} failures")
            return True
        return False

    def record_success(self) -> None:
        """Record a success. Closes an open (half-open) circuit."""
        if self._open_at > 0.0:
            logger.info(f"Circuit breaker '{self.name}' CLOSED")
        self._open_at = 0.0
        self._failures = 0

    def cooldown_remaining(self) -> float:
        if self._open_at == 0.0:
            return 0.0
        return max(0.0, self.cooldown_seconds - (time.time() - self._open_at))

    def can_proceed(self) -> bool:
        """True when the circuit is closed or its cooldown has elapsed."""
        if self._open_at == 0.0:
            return True
        return self.cooldown_remaining() == 0.0

    def get_status(self) -> str:
        """Get circuit status: 'closed', 'open', or 'half-open'."""
        if self._open_at == 0.0:
            return "closed"
        if self.cooldown_remaining() == 0.0:
            return "half-open"
        return "open"

    def reset(self) -> None:
        self._failures = 0
        self._open_at = 0.0

    @asynccontextmanager
    async def protected_call(self) -> AsyncGenerator[None, None]:
        """
        Async context manager for circuit-breaker-protected calls.

        Raises:
            CircuitOpenError: If the circuit is open
        """
        if not self.can_proceed():
            raise CircuitOpenError(self.name, self.cooldown_remaining())

        try:
            yield
            self.record_success()
        except asyncio.CancelledError:
            # Superseded requests are not service failures
            raise
        except Exception as e:
            logger.debug(f"Circuit breaker '{self.name}' recorded failure: {type(e).__name__}: {e}")
            self.record_failure()
            raise


__all__ = [
    "CircuitBreaker",
    "get_circuit_breaker",
    "reset_all_circuit_breakers",
    "get_circuit_breaker_status",
]
