"""Roff output helpers."""

from __future__ import annotations

from typing import TextIO


class RoffEmitter:
    """Write raw text and macro lines to an output stream."""

    def __init__(self, sink: TextIO):
        self._sink = sink

    def write(self, text: str) -> None:
        self._sink.write(text)

    def macro(self, name: str, *args: str) -> None:
        """Write a macro line such as ``.PP`` or ``.RS 4``."""
        line = " ".join((f".{name}", *args))
        self._sink.write(f"{line}\n")
