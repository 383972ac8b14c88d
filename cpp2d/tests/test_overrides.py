#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from conftest import BOOL, INT, function, make_record, var
from c2d_ast import (
    ClassTemplateSpecializationDecl,
    LinkageSpecDecl,
    MethodDecl,
    NamespaceDecl,
    ParmVarDecl,
    TagKind,
    TranslationUnitDecl,
    walk_decls,
)
from c2d_matchers import collect_overrides, operator_param_key
from c2d_overrides import OverrideTable, suppress
from c2d_types import BuiltinType, LValueReferenceType, RecordType, TemplateArgument


def _hash_specialization(point):
    call = MethodDecl("operator()", return_type=INT, overloaded_operator="()")
    return ClassTemplateSpecializationDecl(
        "hash",
        decls=[call],
        template_args=[TemplateArgument.of_type(RecordType(point))],
    )


def test_decl_overrides_are_keyed_by_identity():
    table = OverrideTable()
    a = var("a")
    b = var("a")
    table.register_decl(a)

    assert table.lookup_decl(a) is suppress
    assert table.lookup_decl(b) is None
    assert len(table) == 1


def test_type_overrides_are_keyed_by_value():
    table = OverrideTable()
    table.register_type(INT)

    assert table.lookup_type(RecordType(make_record("S"))) is None
    assert table.lookup_type(BuiltinType("int")) is suppress


def test_std_hash_specialization_is_suppressed():
    point = make_record("Point")
    spec = _hash_specialization(point)
    tu = TranslationUnitDecl([point, NamespaceDecl("std", decls=[spec])])

    table = collect_overrides(tu)
    assert table.lookup_decl(spec) is suppress
    assert table.lookup_decl(point) is None


def test_hash_outside_std_is_kept():
    spec = _hash_specialization(make_record("Point"))
    tu = TranslationUnitDecl([NamespaceDecl("mine", decls=[spec])])

    assert collect_overrides(tu).lookup_decl(spec) is None


def test_free_operators_are_suppressed_and_indexed():
    point = make_record("Point")
    const_ref = LValueReferenceType(RecordType(point, is_const=True))
    plus = function(
        "operator+",
        RecordType(point),
        [ParmVarDecl("a", type=const_ref), ParmVarDecl("b", type=INT)],
        [],
        overloaded_operator="+",
    )
    less = function(
        "operator<",
        BOOL,
        [ParmVarDecl("a", type=const_ref), ParmVarDecl("b", type=const_ref)],
        [],
        overloaded_operator="<",
    )
    tu = TranslationUnitDecl([point, plus, less])

    table = collect_overrides(tu)
    assert table.lookup_decl(plus) is suppress
    assert table.lookup_decl(less) is suppress
    assert table.left_operators("struct Point") == [plus, less]
    assert table.right_operators("int") == [plus]
    # both operands are Point: indexed once, on the left
    assert table.right_operators("struct Point") == []


def test_operator_param_key_strips_reference_and_const():
    point = make_record("Point", TagKind.CLASS)
    param = ParmVarDecl("p", type=LValueReferenceType(RecordType(point, is_const=True)))
    assert operator_param_key(param) == "class Point"


def test_member_operators_are_not_collected():
    point = make_record("Point")
    method = MethodDecl("operator==", return_type=BOOL, overloaded_operator="==", parent=point)
    point.decls.append(method)
    tu = TranslationUnitDecl([point])

    table = collect_overrides(tu)
    assert table.lookup_decl(method) is None
    assert table.left_operators("struct Point") == []


def test_existing_table_is_extended():
    table = OverrideTable()
    keep = var("keep")
    table.register_decl(keep)

    assert collect_overrides(TranslationUnitDecl([]), table) is table
    assert table.lookup_decl(keep) is suppress


def test_walk_decls_enters_namespaces_and_linkage_blocks():
    point = make_record("Point", decls=[var("hidden")])
    inner = var("inner")
    block = LinkageSpecDecl("C", [inner])
    ns = NamespaceDecl("geo", decls=[point, block])

    # record members are not at namespace scope
    assert walk_decls([ns]) == [ns, point, block, inner]


def test_free_operators_in_nested_namespace_are_collected():
    point = make_record("Point")
    minus = function(
        "operator-",
        RecordType(point),
        [ParmVarDecl("a", type=RecordType(point))],
        [],
        overloaded_operator="-",
    )
    tu = TranslationUnitDecl([NamespaceDecl("geo", decls=[point, NamespaceDecl("ops", decls=[minus])])])

    table = collect_overrides(tu)
    assert table.lookup_decl(minus) is suppress
    assert table.left_operators("struct Point") == [minus]
