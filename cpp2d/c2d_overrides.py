#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from c2d_ast import Decl, FunctionDecl, Stmt
from c2d_types import TypeNode

# An override renders a node in place of the default handling. It receives the
# printer and the node; whatever it writes to the printer's output is the
# node's rendering (writing nothing suppresses the node).
Renderer = Callable[[object, object], None]


def suppress(printer, node) -> None:
    """Override that prints nothing."""
    return None


class OverrideTable:
    """
    Per-node rendering overrides, one registry per node category.

    Decls and stmts are keyed by node identity; types are keyed by value.
    The table also indexes free operator functions by the canonical spelling
    of the record they should be printed into (see c2d_matchers).
    """

    def __init__(self):
        self._decls: Dict[int, Tuple[Decl, Renderer]] = {}
        self._stmts: Dict[int, Tuple[Stmt, Renderer]] = {}
        self._types: Dict[TypeNode, Renderer] = {}
        self._left_operators: Dict[str, List[FunctionDecl]] = {}
        self._right_operators: Dict[str, List[FunctionDecl]] = {}

    # --- registration ---

    def register_decl(self, decl: Decl, renderer: Renderer = suppress) -> None:
        # the node is kept alive so that its id() is not reused
        self._decls[id(decl)] = (decl, renderer)

    def register_stmt(self, stmt: Stmt, renderer: Renderer = suppress) -> None:
        self._stmts[id(stmt)] = (stmt, renderer)

    def register_type(self, t: TypeNode, renderer: Renderer = suppress) -> None:
        self._types[t] = renderer

    def add_free_operator(self, record_spelling: str, decl: FunctionDecl, *, right: bool = False) -> None:
        index = self._right_operators if right else self._left_operators
        index.setdefault(record_spelling, []).append(decl)

    # --- lookup ---

    def lookup_decl(self, decl: Decl) -> Optional[Renderer]:
        entry = self._decls.get(id(decl))
        return entry[1] if entry is not None else None

    def lookup_stmt(self, stmt: Stmt) -> Optional[Renderer]:
        entry = self._stmts.get(id(stmt))
        return entry[1] if entry is not None else None

    def lookup_type(self, t: TypeNode) -> Optional[Renderer]:
        return self._types.get(t)

    def left_operators(self, record_spelling: str) -> List[FunctionDecl]:
        return list(self._left_operators.get(record_spelling, ()))

    def right_operators(self, record_spelling: str) -> List[FunctionDecl]:
        return list(self._right_operators.get(record_spelling, ()))

    def __len__(self) -> int:
        return len(self._decls) + len(self._stmts) + len(self._types)
