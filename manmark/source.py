"""Pull-based character reader with lookahead and injected sub-sources."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TextIO

LOOKAHEAD_CAPACITY = 4


@dataclass
class _SubSource:
    text: str
    offset: int = 0
    bounded: bool = False


class CharacterSource:
    """Read characters one at a time from a text stream.

    Characters can be returned with `pushback`, and finite strings can be
    layered in front of the stream with `inject` or `isolated`. Only
    characters read from the underlying stream advance `line` and `column`.

    Args:
        stream: Text stream to read from.

    Examples:
        source = CharacterSource(io.StringIO("ab"))
        source.next()  # "a"
        source.pushback("a")
        source.next()  # "a"
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._lookahead: list[str] = []
        self._sub_sources: list[_SubSource] = []
        self.line = 1
        self.column = 0

    @property
    def position(self) -> tuple[int, int]:
        return self.line, self.column

    def next(self) -> str | None:
        """Return the next character, or None at end of input."""
        if self._lookahead:
            return self._lookahead.pop()

        while self._sub_sources:
            sub_source = self._sub_sources[-1]
            if sub_source.offset < len(sub_source.text):
                sub_source.offset += 1
                return sub_source.text[sub_source.offset - 1]
            if sub_source.bounded:
                return None
            self._sub_sources.pop()

        ch = self._stream.read(1)
        if not ch:
            return None

        if ch == "\n":
            self.line += 1
            self.column = 0
        else:
            self.column += 1
        return ch

    def pushback(self, ch: str) -> None:
        """Return `ch` to the front of the stream."""
        assert len(self._lookahead) < LOOKAHEAD_CAPACITY, "lookahead buffer overflow"
        self._lookahead.append(ch)

    def inject(self, text: str, bounded: bool = False) -> _SubSource:
        """Read `text` before anything remaining in the underlying stream.

        A `bounded` sub-source reports end of input once `text` is used up
        instead of falling through to the stream.
        """
        sub_source = _SubSource(text, bounded=bounded)
        self._sub_sources.append(sub_source)
        return sub_source

    @contextmanager
    def isolated(self, text: str) -> Iterator[None]:
        """Read only `text` while the context is active.

        Once `text` is used up, `next` reports end of input until the context
        exits, after which reading resumes where it left off.

        Examples:
            with source.isolated("cell"):
                ...
        """
        sub_source = self.inject(text, bounded=True)
        try:
            yield
        finally:
            while self._sub_sources:
                if self._sub_sources.pop() is sub_source:
                    break
