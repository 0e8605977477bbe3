"""
OpenAI-compatible chat-completions client.

Every failure mode of the remote service (transport errors, timeouts,
non-200 statuses, malformed or empty completions, an open circuit) surfaces
as ``GenerationUnavailableError`` so callers have one retryable error type.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional
from urllib.parse import urlparse

import aiohttp

from argmap.config import GeneratorSettings
from argmap.exceptions import APIKeyError, CircuitOpenError, GenerationUnavailableError
from argmap.http_client import create_client_session, timeout_for
from argmap.logging_config import get_logger
from argmap.resilience import CircuitBreaker, get_circuit_breaker

logger = get_logger(__name__)

Message = dict[str, str]


class ChatCompletionClient:
    """Thin async client for ``POST {base_url}/chat/completions``.

    A fresh aiohttp session is opened per call, bounded by the configured
    timeout. Calls are guarded by a circuit breaker shared by every client
    pointing at the same host.
    """

    def __init__(self, settings: GeneratorSettings | None = None):
        self.settings = settings if settings is not None else GeneratorSettings.from_env()
        host = urlparse(self.settings.base_url).netloc or self.settings.base_url
        self.service = host
        self.breaker: CircuitBreaker = get_circuit_breaker(
            f"generator:{host}",
            failure_threshold=self.settings.circuit_failure_threshold,
            cooldown_seconds=self.settings.circuit_cooldown_seconds,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }

    async def complete(
        self,
        messages: list[Message],
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ) -> str:
        """Request one completion and return its text content.

        Raises:
            APIKeyError: No API key is configured.
            GenerationUnavailableError: The service could not produce content.
        """
        if not self.settings.has_api_key:
            raise APIKeyError(self.service)

        payload: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        timeout = timeout_for(timeout_seconds or self.settings.timeout_seconds)
        try:
            async with self.breaker.protected_call():
                async with create_client_session(timeout) as session:
                    async with session.post(
                        self.settings.chat_completions_url,
                        json=payload,
                        headers=self._headers(),
                    ) as response:
                        if response.status != 200:
                            body = await response.text()
                            raise GenerationUnavailableError(
                                self.service,
                                f"HTTP {response.status}: {body[:200]}",
                                status_code=response.status,
                            )
                        data = await response.json()
                content = _extract_content(data)
                if not content:
                    raise GenerationUnavailableError(self.service, "empty completion")
        except CircuitOpenError as e:
            raise GenerationUnavailableError(self.service, str(e)) from e
        except asyncio.TimeoutError as e:
            logger.warning("Generator request timed out", service=self.service)
            raise GenerationUnavailableError(self.service, "request timed out") from e
        except aiohttp.ClientError as e:
            logger.warning("Generator transport error", service=self.service, error=type(e).__name__)
            raise GenerationUnavailableError(self.service, f"transport error: {e}") from e
        except ValueError as e:
            # Body declared as JSON but not decodable
            logger.warning("Generator returned malformed JSON", service=self.service)
            raise GenerationUnavailableError(self.service, f"malformed response: {e}") from e

        logger.debug("Completion received", model=model, chars=len(content))
        return content

    async def complete_prompt(
        self,
        prompt: str,
        model: str,
        system: Optional[str] = None,
        **kwargs: Any,
    ) -> str:
        """Convenience wrapper for a single user prompt with optional system message."""
        messages: list[Message] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return await self.complete(messages, model, **kwargs)


def _extract_content(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


__all__ = ["ChatCompletionClient", "Message"]
