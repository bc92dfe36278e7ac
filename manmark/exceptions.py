"""Package-specific exception types."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Grammar violations detected while converting markup to roff.

    Each member's value is the human-readable description used in error
    messages.
    """

    # Preamble
    EXPECTED_PREAMBLE = "expected a preamble of the form name(section)"
    EXPECTED_SECTION = "expected a manual section in parentheses"
    INVALID_SECTION = "manual section must start with a number from 1 to 9"
    UNEXPECTED_CHARACTER = "unexpected character"
    EXPECTED_MANUAL_SECTION = "unterminated manual section"
    TOO_MANY_PREAMBLE_FIELDS = "too many quoted fields in preamble (at most two)"
    UNCLOSED_EXTRA_PREAMBLE_FIELD = "unclosed quoted field in preamble"

    # Block structure
    INDENT_TOO_LARGE = "indentation may only increase by one tab at a time"
    EXPECTED_SPACE = "expected a space"
    EXPECTED_TWO_SPACES = "expected two spaces to continue a list item"
    INVALID_HEADING = "expected a space after heading marker"
    HEADING_LEVEL_TOO_HIGH = "only # and ## headings are supported"
    TABS_REQUIRED_FOR_INDENTATION = "tabs are required for indentation"
    EXPECTED_FORMATTING_AT_START_OF_PARAGRAPH = (
        "bold or underline formatting left open at end of paragraph"
    )

    # Inline text
    CANNOT_NEST_INLINE_FORMATTING = "bold and underline formatting cannot be nested"
    EXPLICIT_LINE_BREAK_NOT_ALLOWED = "explicit line break cannot precede an empty line"

    # Literal blocks
    INVALID_LITERAL_BEGINNING = "literal block must open with ``` followed by a newline"
    INVALID_LITERAL_ENDING = "literal block must close with ``` followed by a newline"
    CANNOT_DEDENT_IN_LITERAL_BLOCK = "cannot dedent inside a literal block"

    # Tables
    TABLES_CANNOT_BE_INDENTED = "tables cannot be indented"
    EXPECTED_EQUAL_COLUMNS = "every table row must have the same number of cells"
    NO_PREVIOUS_ROW_TO_INFER_ALIGNMENT = "no previous row to inherit cell alignment from"
    EXPECTED_SPACE_OR_NEWLINE = "expected a space or newline after cell alignment"
    ILLEGAL_CELL_CONTENTS = "table cells cannot contain T{ or T}"
    EXPECTED_PIPE_OR_COLON = "expected | or : to start a table row or cell"
    CANNOT_START_TABLE_WITHOUT_STARTING_ROW = "table cell declared before any row"

    UNEXPECTED_EOF = "unexpected end of input"

    @property
    def description(self) -> str:
        return self.value


class ManmarkError(ValueError):
    """Base class for errors raised by manmark."""


class ParseError(ManmarkError):
    """Raised when the input violates the markup grammar.

    Args:
        kind: The violated rule.
        line: One-based line where the violation was detected.
        column: Column where the violation was detected.
    """

    def __init__(self, kind: ErrorKind, line: int = 0, column: int = 0):
        self.kind = kind
        self.line = line
        self.column = column
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if self.line:
            return f"line {self.line}, column {self.column}: {self.kind.description}"
        return self.kind.description


class ConvertFileError(ManmarkError):
    """Raised when converting a file fails."""
