#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from conftest import INT, located, ref, var
from c2d_ast import CompoundStmt, RawComment, SourceFile, SourceLocation
from c2d_comments import CommentPrinter, first_comment, gap_text, is_trailing, split_lines
from c2d_output import OutputStack


def test_split_lines_trims_each_line():
    assert split_lines("  a \n\tb\r\n") == ["a", "b", ""]
    assert split_lines("") == [""]


def test_first_comment():
    assert first_comment("x; // note") == "// note"
    assert first_comment("x; /* a */ // b") == "/* a */ // b"
    assert first_comment("x;") == ""


def test_trailing_markers():
    assert is_trailing(RawComment("///< after"))
    assert is_trailing(RawComment("//!< after"))
    assert not is_trailing(RawComment("/// before"))


def test_gap_text_requires_same_file_and_no_macro():
    source, loc = located("abcdef")
    other = SourceFile("other.cpp", "abcdef")

    assert gap_text(loc(1), loc(4)) == "bcd"
    assert gap_text(loc(1), SourceLocation(other, 4)) is None
    assert gap_text(SourceLocation(source, 1, is_macro=True), loc(4)) is None
    assert gap_text(None, loc(4)) is None
    assert gap_text(loc(4), loc(1)) is None


def test_gap_without_locations_prints_one_newline():
    out = OutputStack()
    printer = CommentPrinter(out)

    assert printer.print_gap(None, None, "next") == "next"
    assert out.getvalue() == "\n"


def test_gap_keeps_comment_and_blank_line():
    _, loc = located("a; // one\n\n    b;")
    out = OutputStack()
    out.indent()
    CommentPrinter(out).print_gap(loc(1), loc(15))

    assert out.getvalue() == " // one\n\n"


def test_gap_reindents_comment_lines():
    _, loc = located("a;\n  // two\n  b;")
    out = OutputStack()
    out.indent()
    CommentPrinter(out).print_gap(loc(1), loc(13))

    assert out.getvalue() == "\n    // two\n"


def test_compound_statement_keeps_comments(render_stmt):
    text = "{\n    a; // one\n\n    b;\n}"
    _, loc = located(text)
    a = var("a")
    b = var("b")
    first = ref(a)
    first.begin, first.end = loc(6), loc(7)
    second = ref(b)
    second.begin, second.end = loc(21), loc(22)
    block = CompoundStmt([first, second], lbrace=loc(0), rbrace=loc(24))

    assert render_stmt(block) == "{\n    a; // one\n\n    b;\n}"


def test_declaration_comments(translate):
    documented = var("x", INT, comment=RawComment("/// the x"))
    trailing = var("y", INT, comment=RawComment("///< the y"))
    code = translate([documented, trailing]).code

    assert "\n/// the x\nint x;\n\n" in code
    assert "\nint y;\t///< the y\n\n" in code
