#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from conftest import INT, located, make_record, var
from c2d_ast import DeclRefExpr, TagKind, TypedefDecl
from c2d_names import ImportSet, NameResolver, include_to_module, mangle_name


@pytest.mark.parametrize("name", ["version", "out", "in", "ref", "debug", "function", "Exception"])
def test_reserved_words_get_underscore(name):
    assert mangle_name(name) == name + "_"


def test_ordinary_names_are_unchanged():
    assert mangle_name("value") == "value"
    assert mangle_name("version_") == "version_"


@pytest.mark.parametrize(
    "include, module",
    [
        ("foo/Bar.hpp", "foo.bar"),
        ("util.h", "util"),
        ("a\\b\\C.h", "a.b.c"),
        ("plain", "plain"),
    ],
)
def test_include_to_module(include, module):
    assert include_to_module(include) == module


def test_import_set_deduplicates():
    imports = ImportSet()
    imports.add("std.bitmanip", "bitfields")
    imports.add("std.bitmanip", "bitfields")
    imports.add("std.range.primitives", "popFront")

    assert len(imports) == 2
    assert imports.symbols("std.bitmanip") == {"bitfields"}
    assert list(imports) == ["std.bitmanip", "std.range.primitives"]


def test_remapped_type_imports_its_module():
    resolver = NameResolver([])
    vector = make_record("vector", TagKind.CLASS, qualified_name="std::vector")

    assert resolver.mangle_type(vector) == "vector"
    assert "cpp_std" in resolver.imports
    assert resolver.imports.symbols("cpp_std") == {"std::vector"}


def test_remapped_type_without_module_imports_nothing():
    resolver = NameResolver([])
    string = make_record("string", TagKind.CLASS, qualified_name="std::string")

    assert resolver.mangle_type(string) == "string"
    assert len(resolver.imports) == 0


def test_declaration_from_include_imports_module():
    _, loc = located("struct Point {};", path="/src/geo/point.h")
    point = make_record("Point", begin=loc(0))
    resolver = NameResolver(["geo/point.h"])

    assert resolver.mangle_type(point) == "Point"
    assert resolver.imports.symbols("geo.point") == {"Point"}


def test_include_must_match_at_path_separator():
    _, loc = located("struct Point {};", path="/src/xgeo/point.h")
    point = make_record("Point", begin=loc(0))
    resolver = NameResolver(["geo/point.h"])

    resolver.mangle_type(point)
    assert len(resolver.imports) == 0


def test_include_matching_is_case_sensitive():
    resolver = NameResolver(["Geo/Point.h"])
    resolver.include_file("/src/geo/point.h", "Point")
    assert len(resolver.imports) == 0


def test_no_import_inside_macro():
    resolver = NameResolver([])
    resolver.in_macro = True
    alias = TypedefDecl("int32_t", underlying=INT)

    assert resolver.mangle_type(alias) == "int32_t"
    assert len(resolver.imports) == 0


def test_mangle_var_escapes_and_names_anonymous():
    resolver = NameResolver([])
    assert resolver.mangle_var(DeclRefExpr(var("out"))) == "out_"

    anonymous = var("")
    first = resolver.name_of(anonymous)
    assert first == "var0"
    assert resolver.name_of(anonymous) == first
    assert resolver.name_of(var("")) == "var1"
