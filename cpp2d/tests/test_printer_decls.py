#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from conftest import BOOL, INT, function, has_error_code, located, make_record, var
from c2d_ast import (
    AccessSpecifier,
    BaseSpecifier,
    ClassTemplateDecl,
    ClassTemplatePartialSpecializationDecl,
    ClassTemplateSpecializationDecl,
    ConstructExpr,
    EmptyDecl,
    EnumConstantDecl,
    EnumDecl,
    FieldDecl,
    FriendDecl,
    InitStyle,
    IntegerLiteral,
    LinkageSpecDecl,
    NamespaceDecl,
    ParmVarDecl,
    StaticAssertDecl,
    StringLiteral,
    TagKind,
    NonTypeTemplateParmDecl,
    TemplateTemplateParmDecl,
    TemplateTypeParmDecl,
    TypeAliasTemplateDecl,
    TypedefDecl,
    UsingDecl,
    UsingDirectiveDecl,
)
from c2d_internal_error import InternalCompilerError
from c2d_types import BuiltinType, PointerType, RecordType, TemplateArgument, TemplateTypeParmType


def test_struct(translate):
    point = make_record("Point", decls=[FieldDecl("x", type=INT), FieldDecl("y", type=INT)])
    code = translate([point]).code
    assert code == "\nstruct Point\n{\n    int x;\n    int y;\n}\n\n"


def test_forward_declaration_gets_semicolon(translate):
    forward = make_record("Point", is_complete=False)
    assert translate([forward]).code == "\nstruct Point;\n\n"


def test_forward_declaration_of_defined_record_is_skipped(translate):
    point = make_record("Point")
    forward = make_record("Point", is_complete=False, definition=point)
    assert translate([forward, point]).code == "\nstruct Point\n{\n}\n\n"


def test_implicit_record_is_skipped(translate):
    assert translate([make_record("Hidden", is_implicit=True)]).code == ""


def test_visibility_labels(translate):
    members = [
        FieldDecl("a", type=INT, access=AccessSpecifier.PUBLIC),
        FieldDecl("b", type=INT, access=AccessSpecifier.PUBLIC),
        FieldDecl("c", type=INT, access=AccessSpecifier.PRIVATE),
        FieldDecl("d", type=INT, access=AccessSpecifier.PRIVATE),
        FieldDecl("e", type=INT, access=AccessSpecifier.PROTECTED),
    ]
    code = translate([make_record("C", TagKind.CLASS, members)]).code
    expected = (
        "class C\n{\n"
        "public:\n    int a;\n    int b;\n"
        "private:\n    int c;\n    int d;\n"
        "protected:\n    int e;\n"
        "}"
    )
    assert expected in code


def test_struct_labels_only_on_change(translate):
    members = [
        FieldDecl("a", type=INT, access=AccessSpecifier.PUBLIC),
        FieldDecl("b", type=INT, access=AccessSpecifier.PRIVATE),
        FieldDecl("c", type=INT, access=AccessSpecifier.PUBLIC),
    ]
    code = translate([make_record("S", decls=members)]).code
    assert code.count("public:") == 1
    assert code.count("private:") == 1
    assert code.index("private:") < code.index("int b;") < code.index("public:") < code.index("int c;")


def test_bitfields(translate):
    members = [
        FieldDecl("a", type=INT, bit_width=3),
        FieldDecl("b", type=INT, bit_width=4),
        FieldDecl("c", type=INT, bit_width=3),
        FieldDecl("d", type=BOOL),
    ]
    result = translate([make_record("Flags", decls=members)])
    expected = (
        "struct Flags\n{\n"
        "    mixin(bitfields!(\n"
        '    \tint, "a", 3,\n'
        '    \tint, "b", 4,\n'
        '    \tint, "c", 3,\n'
        '    \tuint, "", 6));\n'
        "    bool d;\n"
        "}"
    )
    assert expected in result.code
    assert result.imports.symbols("std.bitmanip") == {"bitfields"}


def test_bitfield_run_filling_a_word(translate):
    members = [FieldDecl("a", type=BuiltinType("unsigned int"), bit_width=32)]
    code = translate([make_record("Word", decls=members)]).code
    assert '\tuint, "a", 32,\n    ));' in code


def test_zero_width_bitfield_run_has_no_padding(translate):
    members = [FieldDecl("", type=INT, bit_width=0), FieldDecl("d", type=BOOL)]
    code = translate([make_record("Z", decls=members)]).code
    assert '\tint, "", 0,\n    ));\n    bool d;' in code
    assert "uint" not in code


def test_reference_field_is_allocated(translate):
    inner = make_record("Inner", TagKind.CLASS)
    members = [FieldDecl("inner", type=RecordType(inner)), FieldDecl("n", type=INT, init=IntegerLiteral(3))]
    code = translate([make_record("Outer", decls=members)]).code
    assert "Inner inner = new Inner;" in code
    assert "int n = 3;" in code


def test_mutable_field(render_decl):
    assert render_decl(FieldDecl("cache", type=INT, is_mutable=True)) == "/*mutable*/int cache"


def test_non_public_base_is_reported(translate):
    base = make_record("Base", TagKind.CLASS)
    derived = make_record(
        "Derived",
        TagKind.CLASS,
        bases=[BaseSpecifier(RecordType(base), AccessSpecifier.PRIVATE)],
    )
    result = translate([derived])
    assert "class Derived : /*private*/ Base\n{" in result.code
    assert has_error_code(result.diagnostics, "TRN-0010")
    assert result.has_errors()


def test_public_bases(translate):
    a = make_record("A", TagKind.CLASS)
    b = make_record("B", TagKind.CLASS)
    derived = make_record("D", TagKind.CLASS, bases=[BaseSpecifier(RecordType(a)), BaseSpecifier(RecordType(b))])
    result = translate([derived])
    assert "class D : A, B\n{" in result.code
    assert not result.has_errors()


def test_variables(render_decl):
    assert render_decl(var("x", INT, init=IntegerLiteral(1))) == "int x = 1"
    assert render_decl(var("count", INT, is_static=True)) == "static int count"
    assert render_decl(var("out", INT)) == "int out_"


def test_direct_initialization(render_decl):
    cls = RecordType(make_record("C", TagKind.CLASS))
    union = RecordType(make_record("U", TagKind.UNION))

    by_call = var("c", cls, init=ConstructExpr([IntegerLiteral(1)], type=cls), init_style=InitStyle.CALL)
    assert render_decl(by_call) == "C c = new C(1)"
    default = var("u", union, init=ConstructExpr([], type=union), init_style=InitStyle.CALL)
    assert render_decl(default) == "U u"
    with_args = var("v", union, init=ConstructExpr([IntegerLiteral(2)], type=union), init_style=InitStyle.LIST)
    assert render_decl(with_args) == "U v = U(2)"


def test_out_of_line_static_member(render_decl):
    definition = var("count", INT, init=IntegerLiteral(0), is_out_of_line=True)
    declaration = var("count", INT, is_static=True, out_of_line_definition=definition)
    assert render_decl(definition) == ""
    assert render_decl(declaration) == "int count = 0"


def test_parameter_default(render_decl):
    assert render_decl(ParmVarDecl("n", type=INT, default_arg=IntegerLiteral(4))) == "int n = 4"


def test_enum(translate):
    color = EnumDecl("Color")
    color.enumerators = [
        EnumConstantDecl("Red", enum_decl=color),
        EnumConstantDecl("Green", init=IntegerLiteral(2), enum_decl=color),
    ]
    assert translate([color]).code == "\nenum Color\n{\n    Red,\n    Green = 2,\n}\n\n"


def test_enum_with_underlying_type(render_decl):
    small = EnumDecl("Small", integer_type=BuiltinType("unsigned char"))
    assert render_decl(small) == "enum Small : ubyte\n{\n    Default\n}"


def test_aliases(render_decl):
    assert render_decl(TypedefDecl("Size", underlying=BuiltinType("unsigned long"))) == "alias Size = ulong"
    param = TemplateTypeParmDecl("T")
    alias = TypeAliasTemplateDecl("Ptr", params=[param], underlying=TemplateTypeParmType(decl=param))
    assert render_decl(alias) == "alias Ptr(T) = T"


def test_class_template(translate):
    t = TemplateTypeParmDecl("T")
    templated = make_record("Foo", decls=[FieldDecl("v", type=TemplateTypeParmType(decl=t))])
    foo = ClassTemplateDecl("Foo", params=[t], templated=templated)
    assert "struct Foo(T)\n{\n    T v;\n}" in translate([foo]).code


def test_template_parameter_defaults(render_decl):
    t = TemplateTypeParmDecl("T", default=INT)
    n = NonTypeTemplateParmDecl("N", type=INT, default=IntegerLiteral(3))
    foo = ClassTemplateDecl("Foo", params=[t, n], templated=make_record("Foo"))
    assert render_decl(foo).startswith("struct Foo(T = int, int N = 3)\n{")


def test_partial_specialization_renames_colliding_parameter(translate):
    t = TemplateTypeParmDecl("T")
    primary = ClassTemplateDecl("Foo", params=[t], templated=make_record("Foo"))
    inner = TemplateTypeParmDecl("T")
    partial = ClassTemplatePartialSpecializationDecl(
        "Foo",
        specialized_template=primary,
        template_args=[TemplateArgument.of_type(PointerType(TemplateTypeParmType(decl=inner)))],
        params=[inner],
    )
    assert "struct Foo(T : T_[], T_)\n{\n}" in translate([primary, partial]).code


def test_explicit_specialization(render_decl):
    t = TemplateTypeParmDecl("T")
    primary = ClassTemplateDecl("Foo", params=[t], templated=make_record("Foo"))
    spec = ClassTemplateSpecializationDecl("Foo", specialized_template=primary,
                                           template_args=[TemplateArgument.of_type(INT)])
    assert render_decl(spec) == "struct Foo(T : int)\n{\n}"


def test_specialization_argument_count_mismatch(render_decl):
    primary = ClassTemplateDecl("Foo", params=[TemplateTypeParmDecl("T")], templated=make_record("Foo"))
    spec = ClassTemplateSpecializationDecl("Foo", specialized_template=primary, template_args=[])
    with pytest.raises(InternalCompilerError) as excinfo:
        render_decl(spec)
    assert "[ICE-0070]" in excinfo.value.message


def test_namespace_is_flattened(translate):
    ns = NamespaceDecl("geo", decls=[var("origin", INT, init=IntegerLiteral(0))])
    code = translate([ns]).code
    assert code.startswith("\n// -> module geo;\n")
    assert "\nint origin = 0;\n\n" in code
    assert code.endswith("// <- module geo end\n\n\n")


def test_declarations_from_other_files_are_skipped(translate):
    main, loc = located("int a; int b;")
    other, other_loc = located("int c;", path="other.h")
    mine = var("a", INT, begin=loc(0))
    theirs = var("c", INT, begin=other_loc(0))
    code = translate([theirs, mine], main_file=main).code
    assert "int a;" in code
    assert "int c" not in code


def test_linkage_spec(translate, render_decl):
    block = LinkageSpecDecl("C", [function("f"), function("g", INT)])
    assert render_decl(block) == "extern (C) \n{\n    void f();\n    int g();\n}"

    single = LinkageSpecDecl("C++", [function("h")], has_braces=False)
    assert render_decl(single) == "extern (C++) void h();"


def test_unknown_linkage_is_internal_error(render_decl):
    with pytest.raises(InternalCompilerError) as excinfo:
        render_decl(LinkageSpecDecl("Fortran", []))
    assert "[ICE-0020]" in excinfo.value.message


def test_friend_using_and_empty(render_decl):
    other = make_record("Other", TagKind.CLASS)
    assert render_decl(FriendDecl(friend_type=RecordType(other))) == "//friend Other"
    assert render_decl(UsingDecl("swap")) == "//using swap"
    assert render_decl(UsingDirectiveDecl(namespace="std")) == ""
    assert render_decl(EmptyDecl()) == ""


def test_static_assert(render_decl):
    check = StaticAssertDecl(cond=IntegerLiteral(1), message=StringLiteral("ok"))
    assert render_decl(check) == 'static assert(1, "ok\\0")'


def test_unsupported_declaration_placeholder(printer, render_decl):
    assert render_decl(TemplateTemplateParmDecl("TT")) == "/*TemplateTemplateParm Decl*/"
    assert has_error_code(printer.diagnostics, "TRN-0100")
    assert not any(d.kind == "error" for d in printer.diagnostics)


def test_declaration_override(printer, render_decl):
    hidden = var("hidden", INT)
    printer.overrides.register_decl(hidden, lambda p, d: p.out.write("replaced"))
    assert render_decl(hidden) == "replaced"
