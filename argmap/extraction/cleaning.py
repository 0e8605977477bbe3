"""Normalization of raw generator responses before extraction."""

from __future__ import annotations

import re

_THINK_BLOCK = re.compile(r"<think>.*?</think>", re.IGNORECASE | re.DOTALL)
_THINK_TAG = re.compile(r"</?think>", re.IGNORECASE)
_BLANK_RUNS = re.compile(r"\n\s*\n\s*\n")


def clean_response(content: str) -> str:
    """Remove reasoning blocks emitted by some models and collapse blank runs.

    >>> clean_response("<think>plan</think>\\nSUMMARY:\\n\\n\\n\\nText")
    'SUMMARY:\\n\\nText'
    """
    cleaned = _THINK_BLOCK.sub("", content)
    cleaned = _THINK_TAG.sub("", cleaned)
    cleaned = _BLANK_RUNS.sub("\n\n", cleaned)
    return cleaned.strip()


__all__ = ["clean_response"]
