from __future__ import annotations

import pytest

from manmark import ErrorKind, ParseError, render


def _body(text: str) -> str:
    return render(text, preamble=False)


def _error_kind(text: str) -> ErrorKind:
    with pytest.raises(ParseError) as excinfo:
        _body(text)
    return excinfo.value.kind


def test_plain_text_is_copied():
    assert _body("hello world\n") == "hello world\n"


def test_indents_indented_text():
    output = _body("Not indented\n\tIndented one level\n")
    assert output == "Not indented\n.RS 4\nIndented one level\n.RE\n"


def test_dedents_following_indented_text():
    output = _body("Not indented\n\tIndented one level\nNot indented\n")
    assert output == "Not indented\n.RS 4\nIndented one level\n.RE\nNot indented\n"


def test_allows_multi_step_dedents():
    output = _body("Not indented\n\tIndented one level\n\t\tIndented two levels\nNot indented\n")
    assert output == (
        "Not indented\n"
        ".RS 4\n"
        "Indented one level\n"
        ".RS 4\n"
        "Indented two levels\n"
        ".RE\n"
        ".RE\n"
        "Not indented\n"
    )


def test_disallows_multi_step_indents():
    text = "Not indented\n\tIndented one level\n\t\t\tIndented three levels\nNot indented\n"
    assert _error_kind(text) is ErrorKind.INDENT_TOO_LARGE


def test_empty_line_keeps_indentation():
    assert _body("\tone\n\n\ttwo\n") == ".RS 4\none\n.PP\ntwo\n.RE\n"


def test_closes_open_indentation_at_end_of_input():
    assert _body("\tx\n\t\ty\n") == ".RS 4\nx\n.RS 4\ny\n.RE\n.RE\n"


def test_ignores_comments():
    output = render("test(8)\n\n; comment\n\nHello world!\n", timestamp=0)
    assert output == '.TH "test" "8" "1970-01-01"\n.PP\n.PP\nHello world!\\&\n'


def test_comment_requires_space():
    assert _error_kind("test\n\n;comment\n") is ErrorKind.EXPECTED_SPACE


def test_emits_section_heading():
    assert _body("# HEADER\n") == ".SH HEADER\n"


def test_emits_subsection_heading():
    assert _body("## HEADER\n") == ".SS HEADER\n"


def test_heading_text_is_copied_verbatim():
    assert _body("# Foo. *bar*\n") == ".SH Foo. *bar*\n"


def test_rejects_third_level_heading():
    assert _error_kind("### invalid heading\n") is ErrorKind.HEADING_LEVEL_TOO_HIGH


def test_heading_requires_space():
    assert _error_kind("#invalid heading\n") is ErrorKind.INVALID_HEADING


def test_indented_hash_is_text():
    assert _body("\t# not a heading\n") == ".RS 4\n# not a heading\n.RE\n"


def test_leading_dot_is_text():
    assert _body(".hidden\n") == "\\&.\\&hidden\n"


def test_rejects_space_indentation():
    assert _error_kind("    indented\n") is ErrorKind.TABS_REQUIRED_FOR_INDENTATION


def test_blank_line_starts_paragraph():
    assert _body("one\n\ntwo\n") == "one\n.PP\ntwo\n"


def test_paragraph_break_rejects_open_formatting():
    kind = _error_kind("*bold\n\nnext\n")
    assert kind is ErrorKind.EXPECTED_FORMATTING_AT_START_OF_PARAGRAPH


def test_formatting_may_span_lines():
    assert _body("*bold\ntext*\n") == "\\fBbold\ntext\\fR\n"


def test_rejects_indented_tables():
    assert _error_kind("\t[[ cell\n") is ErrorKind.TABLES_CANNOT_BE_INDENTED


def test_full_page():
    text = (
        'ls(1) "coreutils"\n'
        "\n"
        "# NAME\n"
        "\n"
        "ls - list directory contents\n"
        "\n"
        "# OPTIONS\n"
        "\n"
        "*-a*\n"
        "\tDo not ignore entries starting with .\n"
    )
    assert render(text, timestamp=0) == (
        '.TH "ls" "1" "1970-01-01" "coreutils"\n'
        ".PP\n"
        ".SH NAME\n"
        ".PP\n"
        "ls - list directory contents\n"
        ".PP\n"
        ".SH OPTIONS\n"
        ".PP\n"
        "\\fB-a\\fR\n"
        ".RS 4\n"
        "Do not ignore entries starting with .\\&\n"
        ".RE\n"
    )
