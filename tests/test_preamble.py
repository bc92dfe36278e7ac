from __future__ import annotations

import io
from datetime import date

import pytest

from manmark import ErrorKind, ParseError, Preamble, render
from manmark.parser import Parser


def _preamble(text: str) -> Preamble:
    parser = Parser(io.StringIO(), io.StringIO(text), timestamp=0)
    return parser.parse_preamble()


def test_writes_the_header():
    assert render("test(8)\n", timestamp=0) == '.TH "test" "8" "1970-01-01"\n'


def test_preserves_dashes():
    assert render("test-manual(8)\n", timestamp=0) == '.TH "test-manual" "8" "1970-01-01"\n'


def test_accepts_subsection():
    assert render("test(3posix)\n", timestamp=0) == '.TH "test" "3posix" "1970-01-01"\n'


def test_handles_extra_footer_field():
    output = render('test-manual(8) "Footer"\n', timestamp=0)
    assert output == '.TH "test-manual" "8" "1970-01-01" "Footer"\n'


def test_handles_both_extra_fields():
    output = render('test-manual(8) "Footer" "Header"\n', timestamp=0)
    assert output == '.TH "test-manual" "8" "1970-01-01" "Footer" "Header"\n'


def test_emits_empty_footer():
    output = render('test-manual(8) "" "Header"\n', timestamp=0)
    assert output == '.TH "test-manual" "8" "1970-01-01" "" "Header"\n'


def test_accepts_preamble_without_trailing_newline():
    assert render("test(1)", timestamp=0) == '.TH "test" "1" "1970-01-01"\n'


def test_returns_parsed_preamble():
    preamble = _preamble('ls(1) "GNU" "User Commands"\n')
    assert preamble == Preamble(name="ls", section="1", extras=('"GNU"', '"User Commands"'))


@pytest.mark.parametrize(
    ("timestamp", "expected"),
    [
        (0, "1970-01-01"),
        (86399, "1970-01-01"),
        (86400, "1970-01-02"),
        (951782400, "2000-02-29"),
        (1700000000, "2023-11-14"),
    ],
)
def test_uses_reference_timestamp(timestamp: int, expected: str):
    assert render("test(8)\n", timestamp=timestamp) == f'.TH "test" "8" "{expected}"\n'


def test_uses_injected_clock_without_timestamp():
    output = render("test(8)\n", today=lambda: date(2024, 2, 29))
    assert output == '.TH "test" "8" "2024-02-29"\n'


def test_timestamp_takes_precedence_over_clock():
    output = render("test(8)\n", timestamp=0, today=lambda: date(2024, 2, 29))
    assert output == '.TH "test" "8" "1970-01-01"\n'


def test_header_precedes_body():
    output = render("test(8)\n\n# NAME\n", timestamp=0)
    assert output == '.TH "test" "8" "1970-01-01"\n.PP\n.SH NAME\n'


@pytest.mark.parametrize(
    ("text", "kind"),
    [
        ("", ErrorKind.EXPECTED_PREAMBLE),
        ("(8)\n", ErrorKind.EXPECTED_PREAMBLE),
        ("!!!!(8)\n", ErrorKind.EXPECTED_PREAMBLE),
        ("test\n", ErrorKind.EXPECTED_SECTION),
        ("test()\n", ErrorKind.EXPECTED_SECTION),
        ("test(hello)\n", ErrorKind.INVALID_SECTION),
        ("test(100)\n", ErrorKind.INVALID_SECTION),
        ("test(100hello)\n", ErrorKind.INVALID_SECTION),
        ("test(0)\n", ErrorKind.INVALID_SECTION),
        ("test(8 hello)\n", ErrorKind.UNEXPECTED_CHARACTER),
        ("test(8) footer\n", ErrorKind.UNEXPECTED_CHARACTER),
        ("test(8", ErrorKind.EXPECTED_MANUAL_SECTION),
        ('test(8) "a" "b" "c"\n', ErrorKind.TOO_MANY_PREAMBLE_FIELDS),
        ('test(8) "footer\n', ErrorKind.UNCLOSED_EXTRA_PREAMBLE_FIELD),
        ('test(8) "footer', ErrorKind.UNCLOSED_EXTRA_PREAMBLE_FIELD),
    ],
)
def test_rejects_invalid_preambles(text: str, kind: ErrorKind):
    with pytest.raises(ParseError) as excinfo:
        render(text, timestamp=0)

    assert excinfo.value.kind is kind


def test_error_reports_position():
    with pytest.raises(ParseError) as excinfo:
        render("test(8 hello)\n", timestamp=0)

    assert excinfo.value.line == 1
    assert excinfo.value.column == 7
    assert "unexpected character" in str(excinfo.value)
