from __future__ import annotations

import pytest

from manmark import ErrorKind, ParseError, render


def _body(text: str) -> str:
    return render(text, preamble=False)


def _error_kind(text: str) -> ErrorKind:
    with pytest.raises(ParseError) as excinfo:
        _body(text)
    return excinfo.value.kind


def test_numbered_list():
    output = _body(". one\n. two\n. three\n\nafter\n")
    assert output == (
        ".PD 0\n"
        ".IP 1. 4\n"
        "one\n"
        ".IP 2. 4\n"
        "two\n"
        ".IP 3. 4\n"
        "three\n"
        ".PD\n"
        ".PP\n"
        "after\n"
    )


def test_bullet_list_item():
    assert _body("- *bold* item\n") == ".PD 0\n.IP \\(bu 4\n\\fBbold\\fR item\n"


def test_bullet_list_continues_with_dot():
    assert _body("- a\n. b\n") == ".PD 0\n.IP \\(bu 4\na\n.IP \\(bu 4\nb\n"


def test_continuation_lines():
    output = _body("- item\n  continued\n\nx\n")
    assert output == ".PD 0\n.IP \\(bu 4\nitem\ncontinued\n.PD\n.PP\nx\n"


def test_new_bullet_starts_new_list():
    output = _body("- one\n- two\n")
    assert output == ".PD 0\n.IP \\(bu 4\none\n.PD\n.PD 0\n.IP \\(bu 4\ntwo\n"


def test_list_ends_before_text():
    assert _body("- a\nplain\n") == ".PD 0\n.IP \\(bu 4\na\n.PD\nplain\n"


def test_indented_list():
    output = _body("text\n\t- a\nb\n")
    assert output == "text\n.RS 4\n.PD 0\n.IP \\(bu 4\na\n.RE\n.PD\nb\n"


def test_text_after_indented_list_keeps_depth():
    output = _body("\t- a\n\tfoo\n\tbar\n")
    assert output == ".RS 4\n.PD 0\n.IP \\(bu 4\na\n.PD\nfoo\nbar\n.RE\n"


def test_text_indented_below_list_opens_one_scope():
    output = _body("\t- a\n\t\tmore\n")
    assert output == ".RS 4\n.PD 0\n.IP \\(bu 4\na\n.RS 4\n.PD\nmore\n.RE\n.RE\n"


def test_bullet_requires_space():
    assert _error_kind("-no space\n") is ErrorKind.EXPECTED_SPACE


def test_continuation_requires_two_spaces():
    assert _error_kind("- a\n text\n") is ErrorKind.EXPECTED_TWO_SPACES


def test_item_marker_requires_space():
    assert _error_kind("- a\n.x\n") is ErrorKind.EXPECTED_SPACE
