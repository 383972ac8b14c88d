#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from typing import Optional

from c2d_ast import Node


DIAGNOSTIC_CODE_FAMILIES = {
    "TRN": [
        "TRN-0010",  # non-public base class
        "TRN-0020",  # implicit copy constructor on a class
        "TRN-0030",  # abstract method in a struct
        "TRN-0031",  # virtual method in a struct
        "TRN-0040",  # explicit default constructor in a struct
        "TRN-0100",  # unsupported declaration
        "TRN-0101",  # unsupported statement
        "TRN-0102",  # unsupported type
    ],
    "ICE": [
        "ICE-0010",  # unknown builtin type kind
        "ICE-0020",  # unknown linkage language
        "ICE-0030",  # unknown template argument kind
        "ICE-0040",  # unknown function template kind
        "ICE-0050",  # unknown record kind
        "ICE-0060",  # output buffer stack underflow
        "ICE-0070",  # specialization arity mismatch
        "ICE-0080",  # function body is not a block
        "ICE-0090",  # malformed macro marker
    ],
}


@dataclass
class Diagnostic:
    kind: str  # "error" or "warning"
    message: str
    filename: Optional[str] = None  # file path

    # Primary location (start of the node)
    line: Optional[int] = None
    column: Optional[int] = None

    # Optional end of the node (exclusive)
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    # Return the one-line header
    def format(self) -> str:
        loc = ""
        if self.filename is not None:
            loc += f"{os.path.abspath(str(self.filename))}"
        if self.line is not None:
            loc += f":{self.line}"
            if self.column is not None:
                loc += f":{self.column}"
        if loc:
            loc += ": "
        return f"{loc}{self.kind}: {self.message}"


def diag_from_node(
        kind: str,
        message: str,
        *,
        node: Optional[Node],
) -> Diagnostic:
    filename = line = column = end_line = end_column = None
    begin = getattr(node, "begin", None)
    if begin is not None:
        filename = begin.file.path
        line = begin.line
        column = begin.column
        if node.end is not None:
            end_line = node.end.line
            end_column = node.end.column
    return Diagnostic(
        kind=kind,
        message=message,
        filename=filename,
        line=line,
        column=column,
        end_line=end_line,
        end_column=end_column,
    )
