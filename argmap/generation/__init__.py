"""Clients for the external text generation service."""

from argmap.generation.analysis import AnalysisService
from argmap.generation.client import ChatCompletionClient

__all__ = ["AnalysisService", "ChatCompletionClient"]
