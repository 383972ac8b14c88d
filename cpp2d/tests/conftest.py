#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from c2d_ast import (
    ClassTemplateDecl,
    CompoundStmt,
    DeclRefExpr,
    FunctionDecl,
    RecordDecl,
    SourceFile,
    SourceLocation,
    TagKind,
    TranslationUnitDecl,
    VarDecl,
)
from c2d_context import LogLevel, TranslationContext
from c2d_driver import translate_unit
from c2d_printer import DPrinter
from c2d_types import BuiltinType, TemplateArgument, TemplateSpecializationType

INT = BuiltinType("int")
BOOL = BuiltinType("bool")
VOID = BuiltinType("void")
DOUBLE = BuiltinType("double")
CHAR = BuiltinType("char")


def make_record(name: str, tag: TagKind = TagKind.STRUCT, decls=None, **kwargs) -> RecordDecl:
    return RecordDecl(name, tag=tag, decls=list(decls or []), **kwargs)


def ref(decl, t=None) -> DeclRefExpr:
    """DeclRefExpr to `decl`, typed with the declaration's own type by default."""
    return DeclRefExpr(decl, type=t if t is not None else getattr(decl, "type", None))


def var(name: str, t=INT, **kwargs) -> VarDecl:
    return VarDecl(name, type=t, **kwargs)


def std_template(qual_name: str, *args: TemplateArgument) -> TemplateSpecializationType:
    """Specialization of a std class template, e.g. std_template("std::vector", of_type(INT))."""
    short = qual_name.rsplit("::", 1)[-1]
    templated = RecordDecl(short, tag=TagKind.CLASS, qualified_name=qual_name)
    template = ClassTemplateDecl(short, qualified_name=qual_name, templated=templated)
    return TemplateSpecializationType(template, tuple(args))


def function(name: str, return_type=VOID, params=None, stmts=None, **kwargs) -> FunctionDecl:
    body = CompoundStmt(list(stmts)) if stmts is not None else None
    return FunctionDecl(name, return_type=return_type, params=list(params or []), body=body, **kwargs)


def located(text: str, path: str = "main.cpp"):
    """Source file plus a factory of locations in it: loc(offset)."""
    source = SourceFile(path, text)

    def loc(offset: int) -> SourceLocation:
        return SourceLocation(source, offset)

    return source, loc


def has_error_code(diagnostics, code: str) -> bool:
    """Check if any diagnostic contains the given code.

    Args:
        diagnostics: List of Diagnostic objects
        code: Code string like "TRN-0010" or "[TRN-0010]"

    Returns:
        True if any diagnostic message contains the code
    """
    if not code.startswith("["):
        code = f"[{code}]"
    return any(code in d.message for d in diagnostics)


@pytest.fixture
def context() -> TranslationContext:
    return TranslationContext(log_level=LogLevel.SILENT)


@pytest.fixture
def printer(context: TranslationContext) -> DPrinter:
    return DPrinter(context)


@pytest.fixture
def render_type(printer: DPrinter):
    """Render a type with the shared printer and return the text."""

    def _render(t) -> str:
        with printer.out.captured() as text:
            printer.print_type(t)
        return text.text

    return _render


@pytest.fixture
def render_stmt(printer: DPrinter):
    """Render a statement or expression with the shared printer and return the text."""

    def _render(stmt) -> str:
        with printer.out.captured() as text:
            printer.print_stmt(stmt)
        return text.text

    return _render


@pytest.fixture
def render_decl(printer: DPrinter):
    """Render a declaration with the shared printer and return the text."""

    def _render(decl) -> str:
        with printer.out.captured() as text:
            printer.print_decl(decl)
        return text.text

    return _render


@pytest.fixture
def translate(context: TranslationContext):
    """Translate a unit made of the given top-level declarations.

    Usage:
        def test_something(translate):
            result = translate([make_record("S", decls=[...])])
            assert "struct S" in result.code
    """

    def _translate(decls, includes=(), main_file=None):
        tu = TranslationUnitDecl(list(decls), main_file)
        return translate_unit(tu, includes=includes, context=context)

    return _translate
