#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

import io
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List

from c2d_internal_error import InternalCompilerError


@dataclass
class Capture:
    """Text collected by `OutputStack.captured()`, available once the block exits."""
    text: str = ""


@dataclass
class OutputStack:
    """
    Stack of text sinks with indentation tracking.

    Renderers write to the top sink. Pushing a sink lets a caller render a
    subtree, inspect the resulting text and decide whether to keep it.
    While `enabled` is False all writes are discarded.
    """
    indent_level: int = 0
    indent_unit: str = "    "  # 4 spaces
    enabled: bool = True
    _sinks: List[io.StringIO] = field(default_factory=lambda: [io.StringIO()], repr=False)

    def write(self, text: str) -> None:
        if self.enabled:
            self._sinks[-1].write(text)

    def push(self) -> None:
        self._sinks.append(io.StringIO())

    def pop(self) -> str:
        if len(self._sinks) <= 1:
            raise InternalCompilerError("[ICE-0060] output buffer stack underflow")
        return self._sinks.pop().getvalue()

    @contextmanager
    def captured(self) -> Iterator[Capture]:
        """
        Redirect writes into a fresh sink for the duration of the block.
        The collected text is stored on the yielded Capture; it is not
        forwarded to the enclosing sink.
        """
        capture = Capture()
        depth = len(self._sinks)
        self.push()
        try:
            yield capture
        finally:
            if len(self._sinks) != depth + 1:
                raise InternalCompilerError("[ICE-0060] unbalanced output buffer stack")
            capture.text = self.pop()

    @property
    def depth(self) -> int:
        return len(self._sinks)

    def indent(self) -> None:
        self.indent_level += 1

    def dedent(self) -> None:
        assert self.indent_level > 0, "dedent below zero"
        self.indent_level -= 1

    def indent_str(self, level: int | None = None) -> str:
        if level is None:
            level = self.indent_level
        return self.indent_unit * max(level, 0)

    def getvalue(self) -> str:
        return self._sinks[0].getvalue()
