#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from conftest import DOUBLE, INT, make_record, std_template
from c2d_ast import EnumDecl, TagKind, TypedefDecl
from c2d_semantic import Semantic, classify, is_std_array, is_std_unordered_map
from c2d_types import (
    AutoType,
    EnumType,
    FunctionProtoType,
    PointerType,
    RecordType,
    TemplateArgument,
    TypedefType,
)


def test_builtins_are_values():
    assert classify(INT) is Semantic.VALUE
    assert classify(DOUBLE) is Semantic.VALUE


@pytest.mark.parametrize(
    "tag, expected",
    [
        (TagKind.CLASS, Semantic.REFERENCE),
        (TagKind.STRUCT, Semantic.REFERENCE),
        (TagKind.UNION, Semantic.VALUE),
    ],
)
def test_records_by_tag(tag, expected):
    assert classify(RecordType(make_record("R", tag))) is expected


def test_enum_and_pointer_are_values():
    assert classify(EnumType(EnumDecl("E"))) is Semantic.VALUE
    assert classify(PointerType(RecordType(make_record("C", TagKind.CLASS)))) is Semantic.VALUE


def test_function_type_is_reference():
    assert classify(FunctionProtoType(INT, (INT,))) is Semantic.REFERENCE


def test_auto_as_written_is_value():
    assert classify(AutoType()) is Semantic.VALUE


def test_typedef_is_looked_through():
    alias = TypedefDecl("Handle", underlying=RecordType(make_record("Impl", TagKind.CLASS)))
    assert classify(TypedefType(alias)) is Semantic.REFERENCE


def test_value_containers_take_precedence_over_class_rule():
    vector = std_template("std::vector", TemplateArgument.of_type(INT))
    assert classify(vector) is Semantic.VALUE


def test_unordered_map_is_assoc_array():
    umap = std_template("std::unordered_map", TemplateArgument.of_type(INT), TemplateArgument.of_type(DOUBLE))
    assert classify(umap) is Semantic.ASSOC_ARRAY
    assert is_std_unordered_map(umap)


def test_std_array_is_value():
    array = std_template("std::array", TemplateArgument.of_type(INT), TemplateArgument.of_integral(3))
    assert classify(array) is Semantic.VALUE
    assert is_std_array(array)


def test_unknown_template_specialization_is_reference():
    widget = std_template("lib::Widget", TemplateArgument.of_type(INT))
    assert classify(widget) is Semantic.REFERENCE


def test_classification_is_deterministic():
    umap = std_template("std::unordered_map", TemplateArgument.of_type(INT), TemplateArgument.of_type(DOUBLE))
    results = {classify(umap) for _ in range(5)}
    assert results == {Semantic.ASSOC_ARRAY}
