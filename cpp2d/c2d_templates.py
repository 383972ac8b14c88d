#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Sequence

from c2d_ast import (
    NamedDecl,
    NonTypeTemplateParmDecl,
    TemplateTemplateParmDecl,
    TemplateTypeParmDecl,
)
from c2d_types import TemplateArgument, TemplateArgumentKind, TemplateTypeParmType

if TYPE_CHECKING:
    from c2d_printer import DPrinter


class RenameTable:
    """Template parameter identity -> replacement identifier."""

    def __init__(self):
        self._names: Dict[int, str] = {}

    def register(self, param: NamedDecl, name: str) -> None:
        self._names[id(param)] = name

    def lookup(self, param: NamedDecl) -> Optional[str]:
        return self._names.get(id(param))

    def __len__(self) -> int:
        return len(self._names)


def disambiguate(name: str, taken: Sequence[str]) -> str:
    """Append '_' to `name` until it is not in `taken`."""
    while name in taken:
        name += "_"
    return name


class TemplateMachinery:
    """
    Template parameter lists, specialization bindings and template
    arguments, rendered into the printer's output.

    D spells a specialization as a constrained parameter list:
    `class Foo(T : int)`, `class Foo(T : U_[], U_)`. Extra parameters of a
    partial specialization whose name collides with a primary parameter are
    renamed for as long as the specialization is being printed.
    """

    def __init__(self, printer: "DPrinter"):
        self.printer = printer
        self.rename_stack: List[RenameTable] = []
        self.args_stack: List[List[NamedDecl]] = []

    # --- scopes ---

    @contextmanager
    def specialization_scope(self, extra_params: Optional[List[NamedDecl]]) -> Iterator[RenameTable]:
        """
        Push the parameters of a (partial) specialization and an empty rename
        table; both are discarded when the specialization has been printed.
        """
        table = RenameTable()
        self.rename_stack.append(table)
        self.args_stack.append(list(extra_params or ()))
        try:
            yield table
        finally:
            self.args_stack.pop()
            self.rename_stack.pop()

    def renamed(self, param: NamedDecl) -> Optional[str]:
        for table in reversed(self.rename_stack):
            name = table.lookup(param)
            if name is not None:
                return name
        return None

    def param_name(self, param: NamedDecl) -> str:
        renamed = self.renamed(param)
        return renamed if renamed is not None else param.name

    # --- parameter lists ---

    def print_parameter_list(self, params: List[NamedDecl], preceding: str = "") -> None:
        """`(A, B = int, int N = 3)`; `preceding` is printed first when not empty."""
        p = self.printer
        p.out.write("(")
        first = True
        if preceding:
            p.out.write(preceding)
            first = False
        for param in params:
            if not first:
                p.out.write(", ")
            first = False
            p.print_decl(param)
            self._print_default(param)
        p.out.write(")")

    def _print_default(self, param: NamedDecl) -> None:
        p = self.printer
        if isinstance(param, TemplateTypeParmDecl) and param.default is not None:
            p.out.write(" = ")
            p.print_type(param.default)
        elif isinstance(param, NonTypeTemplateParmDecl) and param.default is not None:
            p.out.write(" = ")
            p.print_stmt(param.default)
        elif isinstance(param, TemplateTemplateParmDecl) and param.default is not None:
            p.out.write(" = ")
            self.print_argument(param.default)

    def print_specialization_binding(
            self,
            primary_params: List[NamedDecl],
            args: List[TemplateArgument],
            extra_params: Optional[List[NamedDecl]],
            preceding: str = "",
            *,
            node=None,
    ) -> None:
        """
        `(P1 : A1, P2 : A2, E1, E2)`: every primary parameter bound to its
        argument, followed by the extra parameters of a partial specialization.
        """
        p = self.printer
        if len(args) != len(primary_params):
            p.ice(
                f"[ICE-0070] specialization has {len(args)} arguments for "
                f"{len(primary_params)} template parameters",
                node=node,
            )

        if extra_params and self.rename_stack:
            taken = [param.name for param in primary_params]
            table = self.rename_stack[-1]
            for param in extra_params:
                if param.name and param.name in taken:
                    new_name = disambiguate(param.name + "_", taken + [x.name for x in extra_params])
                    table.register(param, new_name)
                    taken.append(new_name)

        parts_written = 0
        p.out.write("(")
        if preceding:
            p.out.write(preceding)
            parts_written += 1
        for param, arg in zip(primary_params, args):
            if parts_written:
                p.out.write(", ")
            p.print_decl(param)
            p.out.write(" : ")
            self.print_argument(arg)
            parts_written += 1
        for param in extra_params or ():
            if parts_written:
                p.out.write(", ")
            p.print_decl(param)
            parts_written += 1
        p.out.write(")")

    # --- arguments ---

    def print_argument(self, arg: TemplateArgument) -> None:
        p = self.printer
        kind = arg.kind
        if kind is TemplateArgumentKind.NULL:
            return
        if kind is TemplateArgumentKind.DECLARATION:
            p.out.write(p.names.mangle_type(arg.decl) if arg.decl is not None else "")
        elif kind is TemplateArgumentKind.INTEGRAL:
            p.out.write(str(arg.integral))
        elif kind is TemplateArgumentKind.NULLPTR:
            p.out.write("null")
        elif kind is TemplateArgumentKind.TYPE:
            p.print_type(arg.type)
        elif kind is TemplateArgumentKind.EXPRESSION:
            p.print_stmt(arg.expr)
        elif kind is TemplateArgumentKind.TEMPLATE:
            p.out.write(p.names.mangle_type(arg.decl))
        elif kind is TemplateArgumentKind.PACK:
            for index, item in enumerate(arg.pack):
                if index:
                    p.out.write(", ")
                self.print_argument(item)
        else:
            p.ice(f"[ICE-0030] unknown template argument kind '{kind}'")

    def print_argument_list(self, args: Sequence[TemplateArgument]) -> None:
        """`!(a, b)`"""
        p = self.printer
        with p.out.captured() as text:
            for index, arg in enumerate(args):
                if index:
                    p.out.write(", ")
                self.print_argument(arg)
        p.out.write("!(" + text.text + ")")

    # --- template type parameters ---

    def type_parm_name(self, t: TemplateTypeParmType) -> str:
        """
        Name of a template type parameter type that carries no declaration,
        found by depth and index among the specialization parameters in scope.
        """
        if t.identifier is None:
            if t.depth >= len(self.args_stack):
                return f"/* getDepth : {t.depth}*/"
            params = self.args_stack[t.depth]
            if t.index >= len(params):
                return f"/* getIndex : {t.index}*/"
            param = params[t.index]
            if not param.name:
                return "cant_find_name"
            return self.param_name(param)
        return t.identifier
