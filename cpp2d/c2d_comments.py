#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from typing import List, Optional

from c2d_ast import Decl, RawComment, SourceLocation
from c2d_output import OutputStack

TRAILING_MARKERS = ("///<", "//!<", "/**<", "/*!<")


def trim(s: str) -> str:
    return s.strip("\r\n\t ")


def split_lines(text: str) -> List[str]:
    """Split on '\\n' and trim every line. Always returns at least one element."""
    return [trim(line) for line in text.split("\n")]


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n")


def is_trailing(comment: RawComment) -> bool:
    return comment.text.startswith(TRAILING_MARKERS)


def gap_text(start: Optional[SourceLocation], end: Optional[SourceLocation]) -> Optional[str]:
    """
    Source text between two locations, or None when it cannot be recovered
    (missing location, macro expansion, locations in different files).
    """
    if start is None or end is None:
        return None
    if start.is_macro or end.is_macro:
        return None
    if start.file is not end.file:
        return None
    if end.offset < start.offset:
        return None
    return start.file.text[start.offset:end.offset]


def first_comment(line: str) -> str:
    """Part of the line from the first `//` or `/*`, or "" if there is none."""
    positions = [p for p in (line.find("//"), line.find("/*")) if p >= 0]
    if not positions:
        return ""
    return line[min(positions):]


class CommentPrinter:
    """
    Carries source comments and blank lines over to the D output.

    Gaps between consecutive statements (or parameters) are scanned for
    comments; declaration comments attached by the front end are printed
    before or after the declaration.
    """

    def __init__(self, out: OutputStack):
        self.out = out

    def print_gap(
            self,
            start: Optional[SourceLocation],
            end: Optional[SourceLocation],
            next_start: Optional[SourceLocation] = None,
    ) -> Optional[SourceLocation]:
        """
        Print the comments found in [start, end) and return `next_start`,
        the position the next gap starts from.

        The first line keeps only its comment part (the rest belongs to the
        previous statement); the last line is the indentation of the next
        statement and is dropped. Without usable locations a single newline
        is printed.
        """
        text = gap_text(start, end)
        if text is None:
            self.out.write("\n")
            return next_start

        lines = split_lines(text)
        lines.pop()
        if not lines:
            self.out.write("\n")
            return next_start

        lines[0] = first_comment(lines[0])
        if lines[0]:
            self.out.write(" " + lines[0])
        self.out.write("\n")
        for line in lines[1:]:
            if line:
                self.out.write(self.out.indent_str() + line)
            self.out.write("\n")
        return next_start

    def print_before(self, decl: Decl) -> None:
        comment = decl.comment
        self.out.write("\n" + self.out.indent_str())
        if comment is not None and not is_trailing(comment):
            self.out.write(normalize_newlines(comment.text) + "\n" + self.out.indent_str())

    def print_after(self, decl: Decl) -> None:
        comment = decl.comment
        if comment is not None and is_trailing(comment):
            self.out.write("\t" + comment.text)
