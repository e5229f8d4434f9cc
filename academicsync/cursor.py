"""
Forward-only reader over the text fragments of a rendered document.

The PDF exports have a rigid (but undocumented) column order. Instead of
indexing fragments by fixed offsets, parsers walk them with a cursor and
assert fixed headers/footers with ``expect`` so that a layout change fails
immediately with the exact position that broke.

A cursor belongs to one extraction call and is thrown away afterwards.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from academicsync.errors import MalformedContentError


class TokenCursor:
    def __init__(self, tokens: Iterable[str]) -> None:
        self.tokens: tuple[str, ...] = tuple(tokens)
        self._i = 0

    @property
    def position(self) -> int:
        return self._i

    def at_end(self) -> bool:
        return self._i >= len(self.tokens)

    def peek(self) -> Optional[str]:
        """
        Return the current token without advancing (None past the end).
        """
        if self.at_end():
            return None
        return self.tokens[self._i]

    def consume(self) -> str:
        """
        Return the current token and advance.
        """
        if self.at_end():
            raise MalformedContentError(
                f"Unexpected end of content at index {self._i}",
                index=self._i,
                content=self.tokens,
            )
        token = self.tokens[self._i]
        self._i += 1
        return token

    def expect(self, expected: Sequence[str]) -> None:
        """
        Consume len(expected) tokens, each one must equal its literal.
        """
        for literal in expected:
            index = self._i
            actual = self.consume()
            if actual != literal:
                raise MalformedContentError(
                    f"Invalid content at index {index}: expected {literal!r}, got {actual!r}",
                    index=index,
                    expected=literal,
                    actual=actual,
                    content=self.tokens,
                )
