#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

# c2d_internal_error.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from c2d_ast import SourceLocation

ICE_CODE = re.compile(r"\[(ICE-\d{4})\]")


@dataclass(frozen=True)
class ICELocation:
    filename: Optional[str]
    location: Optional[SourceLocation]

    @staticmethod
    def of_node(node) -> Optional["ICELocation"]:
        """Where `node` starts, or None for nodes the front end did not locate (types)."""
        begin = getattr(node, "begin", None)
        if begin is None:
            return None
        return ICELocation(filename=begin.file.path, location=begin)

    def describe(self) -> str:
        if self.location is None:
            return f"{self.filename}"
        return f"{self.filename}:{self.location.line}:{self.location.column}"


class InternalCompilerError(RuntimeError):
    """
    ICE = translator bug, or a tree breaking what the front end guarantees
    (unknown enumerator, malformed macro marker).
    Unsupported C++ constructs are not ICEs; they become Diagnostics.
    """

    def __init__(self, message: str, loc: ICELocation | None = None):
        super().__init__(message)
        self.message = message
        self.loc = loc

    @property
    def code(self) -> str:
        match = ICE_CODE.search(self.message)
        return match.group(1) if match else "ICE-9999"

    def format(self) -> str:
        message = self.message
        if ICE_CODE.search(message) is None:
            message = f"[{self.code}] {message}"
        if self.loc and self.loc.filename:
            return f"{self.loc.describe()}: internal compiler error: {message}"
        return f"internal compiler error: {message}"
