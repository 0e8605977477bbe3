"""
Bounded node identifier space for generated diagrams.

Generated diagrams name nodes with single uppercase letters. The usable
alphabet is a hard capacity: an allocator hands out letters in sequence and
raises ``IdentifierSpaceExhaustedError`` instead of silently reusing or
inventing identifiers.
"""

from __future__ import annotations

import string
from typing import Iterable

from argmap.exceptions import IdentifierSpaceExhaustedError

# Letters generation prompts may use (15 nodes)
DEFAULT_ALPHABET = "ABCDEFGHIJKLMNO"
# Every identifier the DSL grammar can express
FULL_ALPHABET = string.ascii_uppercase


class IdentifierAllocator:
    """Allocates identifiers from a fixed alphabet, continuing a sequence.

    Identifiers already in use are reserved, and allocation continues after
    the highest reserved letter so new nodes extend the existing sequence
    rather than filling gaps.

    Example:
        >>> alloc = IdentifierAllocator(used=["A", "B", "D"])
        >>> alloc.allocate_many(2)
        ['E', 'F']
    """

    def __init__(self, alphabet: str = DEFAULT_ALPHABET, used: Iterable[str] = ()):
        if not alphabet or len(set(alphabet)) != len(alphabet):
            raise ValueError("alphabet must be non-empty with unique letters")
        self.alphabet = alphabet
        self._used: set[str] = set()
        self._cursor = 0
        for identifier in used:
            self.reserve(identifier)

    @property
    def capacity(self) -> int:
        return len(self.alphabet)

    @property
    def remaining(self) -> int:
        return self.capacity - self._cursor

    @property
    def used(self) -> frozenset[str]:
        return frozenset(self._used)

    def reserve(self, identifier: str) -> None:
        """Mark an identifier as taken; identifiers outside the alphabet are ignored."""
        position = self.alphabet.find(identifier)
        if len(identifier) != 1 or position < 0:
            return
        self._used.add(identifier)
        self._cursor = max(self._cursor, position + 1)

    def allocate(self) -> str:
        if self._cursor >= self.capacity:
            raise IdentifierSpaceExhaustedError(self.capacity)
        identifier = self.alphabet[self._cursor]
        self._cursor += 1
        self._used.add(identifier)
        return identifier

    def allocate_many(self, count: int) -> list[str]:
        """Allocate ``count`` identifiers, all or nothing."""
        if count < 0:
            raise ValueError("count must be non-negative")
        if count > self.remaining:
            raise IdentifierSpaceExhaustedError(self.capacity, requested=count)
        return [self.allocate() for _ in range(count)]

    def allocate_up_to(self, preferred: int, minimum: int = 1) -> list[str]:
        """Allocate ``preferred`` identifiers, or as many as remain if at least ``minimum``."""
        count = min(preferred, self.remaining)
        if count < minimum:
            raise IdentifierSpaceExhaustedError(self.capacity, requested=minimum)
        return self.allocate_many(count)

    def is_valid(self, identifier: str) -> bool:
        return len(identifier) == 1 and identifier in self.alphabet


__all__ = ["DEFAULT_ALPHABET", "FULL_ALPHABET", "IdentifierAllocator"]
