#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from conftest import BOOL, DOUBLE, INT, has_error_code, make_record, ref, std_template, var
from c2d_ast import (
    BinaryOperator,
    BreakStmt,
    CaseStmt,
    CatchStmt,
    CompoundStmt,
    ContinueStmt,
    DeclStmt,
    DefaultStmt,
    DoStmt,
    ForRangeStmt,
    ForStmt,
    GotoStmt,
    IfStmt,
    IntegerLiteral,
    NullStmt,
    ReturnStmt,
    SwitchStmt,
    TagKind,
    TryStmt,
    UnaryOperator,
    WhileStmt,
)
from c2d_types import AutoType, LValueReferenceType, RecordType, TemplateArgument


def test_return(render_stmt):
    assert render_stmt(ReturnStmt()) == "return"
    assert render_stmt(ReturnStmt(IntegerLiteral(0))) == "return 0"


def test_compound(render_stmt):
    block = CompoundStmt([ReturnStmt(IntegerLiteral(0))])
    assert render_stmt(block) == "{\n    return 0;\n}"


def test_compound_statements_without_semicolon(render_stmt):
    inner = CompoundStmt([])
    block = CompoundStmt([inner, NullStmt()])
    assert render_stmt(block) == "{\n    {\n    }\n    \n}"


def test_if_else(render_stmt):
    x = var("x", BOOL)
    stmt = IfStmt(ref(x), ReturnStmt(IntegerLiteral(1)), ReturnStmt(IntegerLiteral(0)))
    assert render_stmt(stmt) == "if(x)\n    return 1;\nelse \n    return 0;"


def test_else_if_stays_on_one_line(render_stmt):
    a, b = var("a", BOOL), var("b", BOOL)
    nested = IfStmt(ref(b), ReturnStmt(IntegerLiteral(2)))
    stmt = IfStmt(ref(a), ReturnStmt(IntegerLiteral(1)), nested)
    assert render_stmt(stmt) == "if(a)\n    return 1;\nelse if(b)\n    return 2;"


def test_if_with_block(render_stmt):
    x = var("x", BOOL)
    stmt = IfStmt(ref(x), CompoundStmt([BreakStmt()]))
    assert render_stmt(stmt) == "if(x)\n{\n    break;\n}"


def test_empty_body_becomes_braces(render_stmt):
    x = var("x", BOOL)
    assert render_stmt(WhileStmt(ref(x), NullStmt())) == "while(x)\n    {}"


def test_loops(render_stmt):
    i = var("i", INT, init=IntegerLiteral(0))
    cond = BinaryOperator("<", ref(i), IntegerLiteral(10))
    inc = UnaryOperator("++", ref(i), is_postfix=True)
    loop = ForStmt(DeclStmt([i]), cond, inc, CompoundStmt([ContinueStmt()]))
    assert render_stmt(loop) == "for(int i = 0; i < 10; i++)\n{\n    continue;\n}"

    c = var("c", BOOL)
    assert render_stmt(DoStmt(CompoundStmt([]), ref(c))) == "do\n{\n}while(c)"


def test_for_with_several_declarations(render_stmt):
    i = var("i", INT, init=IntegerLiteral(0))
    j = var("j", INT, init=IntegerLiteral(1))
    loop = ForStmt(DeclStmt([i, j]), None, None, CompoundStmt([]))
    assert render_stmt(loop) == "for(int i = 0, j = 1; ; )\n{\n}"


def test_several_declarations_are_split(render_stmt):
    i = var("i", INT)
    j = var("j", DOUBLE)
    block = CompoundStmt([DeclStmt([i, j])])
    assert render_stmt(block) == "{\n    int i;\n    double j;\n}"


def test_switch(render_stmt):
    x = var("x")
    body = CompoundStmt([CaseStmt(IntegerLiteral(1), BreakStmt()), DefaultStmt(BreakStmt())])
    expected = "switch(x)\n{\n    case 1:\n        break;\n    default:\n        break;\n}"
    assert render_stmt(SwitchStmt(ref(x), body)) == expected


def test_try_catch(render_stmt):
    error = var("e", RecordType(make_record("Exception", TagKind.CLASS)))
    stmt = TryStmt(CompoundStmt([]), [CatchStmt(error, CompoundStmt([])), CatchStmt(None, CompoundStmt([]))])
    assert render_stmt(stmt) == "try\n{\n}\ncatch(Exception_ e)\n{\n}\ncatch\n{\n}"


def test_foreach(render_stmt):
    item = var("item", LValueReferenceType(AutoType()))
    items = var("items", RecordType(make_record("List", TagKind.CLASS)))
    loop = ForRangeStmt(item, ref(items), CompoundStmt([]))
    assert render_stmt(loop) == "foreach(ref  item; items)\n{\n}"


def test_foreach_over_unordered_map(render_stmt):
    umap = std_template("std::unordered_map", TemplateArgument.of_type(INT), TemplateArgument.of_type(DOUBLE))
    pair = var("kv", AutoType())
    loop = ForRangeStmt(pair, ref(var("table", umap)), CompoundStmt([]))
    assert render_stmt(loop) == "foreach( kv; table.byKeyValue)\n{\n}"


def test_unsupported_statement_placeholder(printer, render_stmt):
    block = CompoundStmt([GotoStmt("end")])
    assert render_stmt(block) == "{\n    /*GotoStmt Stmt*/;\n}"
    assert has_error_code(printer.diagnostics, "TRN-0101")


def test_statement_override(printer, render_stmt):
    hidden = ReturnStmt(IntegerLiteral(1))
    printer.overrides.register_stmt(hidden)
    assert render_stmt(CompoundStmt([hidden])) == "{\n    ;\n}"
