"""Single-pass conversion of manual-page markup to roff."""

from __future__ import annotations

import io
import logging
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import TextIO

from . import dates
from .constants import (
    ALNUM,
    BULLET_HEADER,
    CELL_CLOSE,
    CELL_OPEN,
    CELL_SEPARATOR,
    NAME_CHARACTERS,
    NUMBERED_HEADER,
    PREAMBLE_WHITESPACE,
    TABLE_STYLES,
)
from .emitter import RoffEmitter
from .exceptions import ConvertFileError, ErrorKind, ParseError
from .filesystem import collect_file_stat, enforce_file_size, get_max_file_size, safe_read
from .models import Alignment, Cell, Format, FormatState, ListType, Preamble, Row, Table
from .source import CharacterSource

logger = logging.getLogger(__name__)


class Parser:
    """Convert markup read from `stream` into roff written to `sink`.

    The parser never builds a document tree: every construct is written out
    as soon as it is recognised. The first grammar violation raises
    `ParseError`; output written up to that point is left in `sink`.

    Args:
        sink: Stream receiving roff output.
        stream: Stream providing markup.
        timestamp: Unix timestamp used for the header date. When None, the
            date comes from `today`.
        today: Callable returning the current day.
    """

    def __init__(
        self,
        sink: TextIO,
        stream: TextIO,
        timestamp: int | None = None,
        today: Callable[[], date] = dates.today,
    ):
        self.source = CharacterSource(stream)
        self.out = RoffEmitter(sink)
        self.timestamp = timestamp
        self.today = today
        self.indent = 0
        self.indent_handled = False
        self.format = FormatState()
        self._block_handlers: dict[str, Callable[[str], None]] = {
            ";": self._parse_comment,
            "#": self._parse_hash,
            "-": self._parse_dash,
            ".": self._parse_dot,
            "`": self._parse_literal,
            "[": self._parse_table,
            "|": self._parse_table,
            "]": self._parse_table,
            " ": self._reject_space,
            "\n": self._parse_paragraph_break,
        }

    def _error(self, kind: ErrorKind) -> ParseError:
        line, column = self.source.position
        return ParseError(kind, line, column)

    def _next(self) -> str | None:
        return self.source.next()

    def _push(self, ch: str) -> None:
        self.source.pushback(ch)

    def _peek(self) -> str | None:
        ch = self._next()
        if ch is not None:
            self._push(ch)
        return ch

    # Preamble

    def parse_preamble(self) -> Preamble:
        """Parse the ``name(section) "extra" "extra"`` line and write ``.TH``."""
        name: list[str] = []
        ch = self._next()
        while ch is not None and ch in NAME_CHARACTERS:
            name.append(ch)
            ch = self._next()

        if not name:
            raise self._error(ErrorKind.EXPECTED_PREAMBLE)
        if ch != "(":
            raise self._error(ErrorKind.EXPECTED_SECTION)

        section = self._parse_section()

        extras: list[str] = []
        while True:
            ch = self._next()
            if ch is None or ch == "\n":
                break
            if ch in PREAMBLE_WHITESPACE:
                continue
            if ch != '"':
                raise self._error(ErrorKind.UNEXPECTED_CHARACTER)
            if len(extras) == 2:
                raise self._error(ErrorKind.TOO_MANY_PREAMBLE_FIELDS)
            extras.append(self._parse_extra())

        preamble = Preamble(name="".join(name), section=section, extras=tuple(extras))
        self._write_header(preamble)
        return preamble

    def _parse_section(self) -> str:
        section: list[str] = []
        while True:
            ch = self._next()
            if ch is None:
                raise self._error(ErrorKind.EXPECTED_MANUAL_SECTION)
            if ch in ALNUM:
                section.append(ch)
                continue
            if ch != ")":
                raise self._error(ErrorKind.UNEXPECTED_CHARACTER)
            if not section:
                raise self._error(ErrorKind.EXPECTED_SECTION)

            text = "".join(section)
            digits = text[: len(text) - len(text.lstrip("0123456789"))]
            if not digits or not 1 <= int(digits) <= 9:
                raise self._error(ErrorKind.INVALID_SECTION)
            return text

    def _parse_extra(self) -> str:
        extra = ['"']
        while True:
            ch = self._next()
            if ch is None or ch == "\n":
                raise self._error(ErrorKind.UNCLOSED_EXTRA_PREAMBLE_FIELD)
            extra.append(ch)
            if ch == '"':
                return "".join(extra)

    def _write_header(self, preamble: Preamble) -> None:
        if self.timestamp is not None:
            day = dates.date_from_timestamp(self.timestamp)
        else:
            day = self.today()

        header = f'.TH "{preamble.name}" "{preamble.section}" "{dates.format_date(day)}"'
        for extra in preamble.extras:
            header += f" {extra}"
        self.out.write(f"{header}\n")

    # Document body

    def parse_document(self) -> None:
        """Convert the document body until the input is exhausted."""
        self.indent = 0
        while True:
            if self.indent_handled:
                self.indent_handled = False
            else:
                self._parse_indent()
            ch = self._next()
            if ch is None:
                break
            handler = self._block_handlers.get(ch, self._parse_plain)
            handler(ch)

        if self.format.is_open:
            raise self._error(ErrorKind.EXPECTED_FORMATTING_AT_START_OF_PARAGRAPH)

    def _read_indent(self) -> int | None:
        """Consume leading tabs and return the line's depth.

        Returns None for an empty line inside an indented block, which keeps
        the current depth.
        """
        depth = 0
        ch = self._next()
        while ch == "\t":
            depth += 1
            ch = self._next()

        if ch is not None:
            self._push(ch)
            if ch == "\n" and self.indent != 0:
                return None
        return depth

    def _parse_indent(self) -> None:
        depth = self._read_indent()
        if depth is None:
            return
        if depth > self.indent + 1:
            raise self._error(ErrorKind.INDENT_TOO_LARGE)
        for _ in range(self.indent - depth):
            self.out.macro("RE")
        if depth == self.indent + 1:
            self.out.macro("RS", "4")
        self.indent = depth

    def _parse_comment(self, _: str) -> None:
        if self._next() != " ":
            raise self._error(ErrorKind.EXPECTED_SPACE)
        while True:
            ch = self._next()
            if ch is None or ch == "\n":
                return

    def _parse_hash(self, ch: str) -> None:
        if self.indent == 0:
            self._parse_heading()
        else:
            self._parse_plain(ch)

    def _parse_dash(self, _: str) -> None:
        self._parse_list(ListType.BULLET)

    def _parse_dot(self, ch: str) -> None:
        following = self._next()
        if following == " ":
            self._push(following)
            self._parse_list(ListType.NUMBERED)
            return
        if following is not None:
            self._push(following)
        self._parse_plain(ch)

    def _reject_space(self, _: str) -> None:
        raise self._error(ErrorKind.TABS_REQUIRED_FOR_INDENTATION)

    def _parse_paragraph_break(self, _: str) -> None:
        if self.format.is_open:
            raise self._error(ErrorKind.EXPECTED_FORMATTING_AT_START_OF_PARAGRAPH)
        self.out.macro("PP")

    def _parse_plain(self, ch: str) -> None:
        self._push(ch)
        self._parse_text()

    def _parse_heading(self) -> None:
        level = 1
        while True:
            ch = self._next()
            if ch == "#":
                level += 1
            elif ch == " ":
                break
            else:
                raise self._error(ErrorKind.INVALID_HEADING)

        if level == 1:
            self.out.write(".SH ")
        elif level == 2:
            self.out.write(".SS ")
        else:
            raise self._error(ErrorKind.HEADING_LEVEL_TOO_HIGH)

        while True:
            ch = self._next()
            if ch is None:
                return
            self.out.write(ch)
            if ch == "\n":
                return

    # Inline text

    def _parse_text(self) -> None:
        """Write one run of inline text up to and including its newline."""
        last = " "
        first = True
        while True:
            ch = self._next()
            if ch is None:
                return

            if ch == "\\":
                escaped = self._next()
                if escaped is None:
                    raise self._error(ErrorKind.UNEXPECTED_EOF)
                if escaped == "\\":
                    self.out.write("\\e")
                elif escaped == "`":
                    self.out.write("\\`")
                else:
                    self.out.write(escaped)
            elif ch == "*":
                self._toggle_format(Format.BOLD)
            elif ch == "_":
                following = self._next()
                if following is None:
                    self.out.write("_")
                    return
                if last not in ALNUM or (self.format.underline and following not in ALNUM):
                    self._toggle_format(Format.UNDERLINE)
                else:
                    self.out.write("_")
                self._push(following)
            elif ch == "+":
                if self._parse_line_break():
                    # The next output line starts fresh.
                    last = "\n"
                    first = True
                    continue
            elif ch == "\n":
                self.out.write("\n")
                return
            elif ch in ".'":
                if first:
                    self.out.write(f"\\&{ch}\\&")
                else:
                    last = ch
                    self.out.write(f"{ch}\\&")
            elif ch in "!?":
                last = ch
                self.out.write(f"{ch}\\&")
            else:
                last = ch
                self.out.write(ch)
            first = False

    def _toggle_format(self, style: Format) -> None:
        if style is Format.BOLD:
            if self.format.underline:
                raise self._error(ErrorKind.CANNOT_NEST_INLINE_FORMATTING)
            self.out.write("\\fR" if self.format.bold else "\\fB")
            self.format.bold = not self.format.bold
        else:
            if self.format.bold:
                raise self._error(ErrorKind.CANNOT_NEST_INLINE_FORMATTING)
            self.out.write("\\fR" if self.format.underline else "\\fI")
            self.format.underline = not self.format.underline

    def _parse_line_break(self) -> bool:
        """Handle a ``+``; return True when it completed a ``++`` line break."""
        second = self._next()
        if second != "+":
            self.out.write("+")
            if second is not None:
                self._push(second)
            return False

        newline = self._next()
        if newline != "\n":
            self.out.write("+")
            if newline is not None:
                self._push(newline)
            self._push(second)
            return False

        following = self._next()
        if following == "\n":
            raise self._error(ErrorKind.EXPLICIT_LINE_BREAK_NOT_ALLOWED)
        if following is not None:
            self._push(following)
        self.out.write("\n.br\n")
        return True

    # Lists

    def _parse_list(self, list_type: ListType) -> None:
        if self._next() != " ":
            raise self._error(ErrorKind.EXPECTED_SPACE)
        self.out.macro("PD", "0")
        number = self._write_list_header(list_type, 1)
        self._parse_text()

        while True:
            self._parse_indent()
            ch = self._next()
            if ch is None:
                return
            if ch == " ":
                if self._next() != " ":
                    raise self._error(ErrorKind.EXPECTED_TWO_SPACES)
                self._parse_text()
            elif ch == ".":
                if self._next() != " ":
                    raise self._error(ErrorKind.EXPECTED_SPACE)
                number = self._write_list_header(list_type, number)
                self._parse_text()
            else:
                # The tabs of this line were already consumed above.
                self.out.macro("PD")
                self._push(ch)
                self.indent_handled = True
                return

    def _write_list_header(self, list_type: ListType, number: int) -> int:
        if list_type is ListType.BULLET:
            self.out.write(f"{BULLET_HEADER}\n")
            return number
        self.out.write(NUMBERED_HEADER.format(n=number) + "\n")
        return number + 1

    # Literal blocks

    def _parse_literal(self, _: str) -> None:
        if self._next() != "`" or self._next() != "`" or self._next() != "\n":
            raise self._error(ErrorKind.INVALID_LITERAL_BEGINNING)
        self.out.macro("nf")
        self.out.macro("RS", "4")

        stops = 0
        check_indent = True
        while True:
            if check_indent:
                depth = self._read_indent()
                if self._peek() is None:
                    raise self._error(ErrorKind.UNEXPECTED_EOF)
                if depth is not None:
                    if depth < self.indent:
                        raise self._error(ErrorKind.CANNOT_DEDENT_IN_LITERAL_BLOCK)
                    self.out.write("\t" * (depth - self.indent))
                check_indent = False

            ch = self._next()
            if ch is None:
                raise self._error(ErrorKind.UNEXPECTED_EOF)

            if ch == "`":
                stops += 1
                if stops == 3:
                    if self._next() != "\n":
                        raise self._error(ErrorKind.INVALID_LITERAL_ENDING)
                    self.out.macro("fi")
                    self.out.macro("RE")
                    return
                continue

            self.out.write("`" * stops)
            stops = 0
            if ch in ".'":
                self.out.write(f"\\&{ch}")
            elif ch == "\\":
                escaped = self._next()
                if escaped is None:
                    raise self._error(ErrorKind.UNEXPECTED_EOF)
                self.out.write("\\\\" if escaped == "\\" else escaped)
            else:
                if ch == "\n":
                    check_indent = True
                self.out.write(ch)

    # Tables

    def _parse_table(self, style: str) -> None:
        if self.indent != 0:
            raise self._error(ErrorKind.TABLES_CANNOT_BE_INDENTED)

        table = Table(style=style)
        self._push("|")
        while True:
            ch = self._next()
            if ch is None or ch == "\n":
                break

            if ch == "|":
                self._start_row(table)
            elif ch == ":":
                if table.current_row is None:
                    raise self._error(ErrorKind.CANNOT_START_TABLE_WITHOUT_STARTING_ROW)
                table.current_row.cells.append(Cell())
            elif ch == " ":
                table.current_row.cells[-1].contents = self._read_cell_text()
                continue
            else:
                raise self._error(ErrorKind.EXPECTED_PIPE_OR_COLON)

            marker = self._next()
            if marker is None:
                break
            cell = table.current_row.cells[-1]
            if marker == " ":
                cell.alignment = self._inherited_alignment(table)
            else:
                alignment = Alignment.from_marker(marker)
                if alignment is None:
                    raise self._error(ErrorKind.UNEXPECTED_CHARACTER)
                cell.alignment = alignment
            cell.contents = self._read_cell_text()

        self._check_columns(table)
        self._write_table(table)

    def _start_row(self, table: Table) -> None:
        self._check_columns(table)
        table.rows.append(Row(cells=[Cell()]))

    def _check_columns(self, table: Table) -> None:
        if len(table.rows) < 2:
            return
        if len(table.current_row.cells) != len(table.rows[0].cells):
            raise self._error(ErrorKind.EXPECTED_EQUAL_COLUMNS)

    def _inherited_alignment(self, table: Table) -> Alignment:
        previous = table.previous_row
        if previous is None:
            raise self._error(ErrorKind.NO_PREVIOUS_ROW_TO_INFER_ALIGNMENT)
        column = len(table.current_row.cells) - 1
        if column < len(previous.cells):
            return previous.cells[column].alignment
        return Alignment.LEFT

    def _read_cell_text(self) -> str:
        ch = self._next()
        if ch is None or ch == "\n":
            return ""
        if ch != " ":
            raise self._error(ErrorKind.EXPECTED_SPACE_OR_NEWLINE)

        text: list[str] = []
        while True:
            ch = self._next()
            if ch is None or ch == "\n":
                break
            text.append(ch)

        contents = "".join(text)
        if CELL_OPEN in contents or CELL_CLOSE in contents:
            raise self._error(ErrorKind.ILLEGAL_CELL_CONTENTS)
        return contents

    def _write_table(self, table: Table) -> None:
        logger.debug(f"Writing table with {len(table.rows)} rows")
        self.out.macro("TS")
        self.out.write(TABLE_STYLES[table.style])
        for index, row in enumerate(table.rows):
            codes = " ".join(cell.alignment.value for cell in row.cells)
            terminator = "." if index == len(table.rows) - 1 else ""
            self.out.write(f"{codes}{terminator}\n")

        for row in table.rows:
            self.out.write(f"{CELL_OPEN}\n")
            for index, cell in enumerate(row.cells):
                if index:
                    self.out.write(CELL_SEPARATOR)
                with self.source.isolated(cell.contents):
                    self._parse_text()
                if self.format.is_open:
                    raise self._error(ErrorKind.EXPECTED_FORMATTING_AT_START_OF_PARAGRAPH)
            self.out.write(f"\n{CELL_CLOSE}\n")

        self.out.macro("TE")
        self.out.macro("sp", "1")


def generate(
    output: TextIO,
    source: TextIO,
    timestamp: int | None = None,
    today: Callable[[], date] = dates.today,
    preamble: bool = True,
) -> None:
    """Convert markup from `source` and write roff to `output`.

    Args:
        output: Stream receiving roff output.
        source: Stream providing markup, starting with the preamble line.
        timestamp: Unix timestamp that fixes the header date, for reproducible
            output. When None, `today` supplies the date.
        today: Callable returning the current day.
        preamble: Whether `source` starts with a preamble line. Set to False
            to convert a bare document body.

    Raises:
        ParseError: If the markup violates the grammar. Output may already
            have been written to `output`.

    Examples:
        generate(sys.stdout, open("ls.1.scd"), timestamp=0)
    """
    parser = Parser(output, source, timestamp=timestamp, today=today)
    if preamble:
        parser.parse_preamble()
    parser.parse_document()


def render(
    text: str,
    timestamp: int | None = None,
    today: Callable[[], date] = dates.today,
    preamble: bool = True,
) -> str:
    """Convert a markup string and return the roff output.

    Raises:
        ParseError: If the markup violates the grammar.

    Examples:
        render("test(8)\\n", timestamp=0)  # '.TH "test" "8" "1970-01-01"\\n'
        render("hello++\\nworld\\n", preamble=False)  # "hello\\n.br\\nworld\\n"
    """
    output = io.StringIO()
    generate(output, io.StringIO(text), timestamp=timestamp, today=today, preamble=preamble)
    return output.getvalue()


def convert_file(
    filepath: Path,
    timestamp: int | None = None,
    max_file_size: int | None = None,
) -> str:
    """Convert a markup file and return the roff output.

    Args:
        filepath: Path to the markup file.
        timestamp: Optional Unix timestamp fixing the header date.
        max_file_size: Maximum accepted file size in bytes; defaults to the
            environment override or the built-in limit.

    Returns:
        str: The rendered roff document.

    Raises:
        ConvertFileError: If the file cannot be read, is too large, is not
            valid UTF-8, or contains a grammar violation.

    Examples:
        roff = convert_file(Path("ls.1.scd"), timestamp=0)
    """
    try:
        limit = get_max_file_size() if max_file_size is None else max_file_size
    except ValueError as error:
        raise ConvertFileError(str(error)) from error
    if limit <= 0:
        raise ConvertFileError("`max_file_size` must be a positive integer")

    try:
        stat_result = collect_file_stat(filepath)
        enforce_file_size(stat_result, limit, filepath)
        with safe_read(filepath) as file:
            content = file.read()
    except UnicodeDecodeError as error:
        error_message = f"Invalid UTF-8 sequence in {filepath}: {error}"
        raise ConvertFileError(error_message) from error
    except IOError as error:
        raise ConvertFileError(str(error)) from error

    logger.debug(f"Read {len(content)} characters from {filepath}")

    try:
        return render(content, timestamp=timestamp)
    except ParseError as error:
        error_message = f"{filepath}:{error.line}:{error.column}: {error.kind.description}"
        raise ConvertFileError(error_message) from error
