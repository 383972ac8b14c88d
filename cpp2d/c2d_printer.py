"""
D code renderer.

Walks a parsed and type-checked C++ tree top-down and writes the equivalent
D source into an OutputStack. Every node is first offered to the override
table; otherwise it is rendered by the handler of its kind. Nodes without a
handler are rendered as a placeholder comment and reported as a warning.

The renderer decides WHAT each construct becomes; the supporting modules hold
the tables and bookkeeping:
- c2d_semantic:  value / reference classification of types
- c2d_names:     identifier escaping and imports
- c2d_operators: operator method names and opCmp / opCast synthesis
- c2d_templates: parameter lists and specialization bindings
- c2d_comments:  comments and blank lines between nodes
- c2d_records:   visibility labels and bit-field runs
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from typing import Callable, Iterable, List, NoReturn, Optional, Set

from c2d_ast import (
    AccessSpecDecl, AccessSpecifier, ArraySubscriptExpr, BinaryOperator, BoolLiteral, BreakStmt, CallExpr,
    CaseStmt, CastKind, CatchStmt, CharacterLiteral, ClassTemplateDecl, ClassTemplatePartialSpecializationDecl,
    ClassTemplateSpecializationDecl, CompoundAssignOperator, CompoundStmt, ConditionalOperator, ConstructExpr,
    ConstructorDecl, ContinueStmt, ConversionDecl, CStyleCastExpr, CtorInitializer, Decl, DeclRefExpr, DeclStmt,
    DefaultArgExpr, DefaultInitExpr, DefaultStmt, DeleteExpr, DependentScopeDeclRefExpr, DestructorDecl, DoStmt,
    EmptyDecl, EnumConstantDecl, EnumDecl, Expr, FieldDecl, FloatingLiteral, ForRangeStmt, ForStmt, FriendDecl,
    FunctionDecl, FunctionalCastExpr, FunctionTemplateDecl, IfStmt, ImplicitCastExpr, ImplicitValueInitExpr,
    InitListExpr, InitStyle, IntegerLiteral, LambdaExpr, LinkageSpecDecl, MemberCallExpr, MemberExpr,
    MemberNameKind, MethodDecl, NamespaceAliasDecl, NamespaceDecl, NewExpr, NewInitStyle,
    NonTypeTemplateParmDecl, NullPtrLiteral, NullStmt, OperatorCallExpr, ParenExpr, ParenListExpr, ParmVarDecl,
    PredefinedExpr, RecordDecl, ReturnStmt, StaticAssertDecl, Stmt, StringLiteral, SwitchStmt, TagKind,
    TemplateTypeParmDecl, TemporaryObjectExpr, ThisExpr, ThrowExpr, TranslationUnitDecl, TryStmt,
    TypeAliasDecl, TypeAliasTemplateDecl, TypedefDecl, UnaryExprOrTypeTraitExpr, UnaryOperator,
    UnresolvedConstructExpr, UnresolvedLookupExpr, UsingDecl, UsingDirectiveDecl, VarDecl, WhileStmt,
    WrapperExpr, TemplatedKind,
)
from c2d_comments import CommentPrinter
from c2d_context import TranslationContext
from c2d_diagnostics import Diagnostic, diag_from_node
from c2d_internal_error import ICELocation, InternalCompilerError
from c2d_logger import log_debug, log_error, log_warning
from c2d_names import ImportSet, NameResolver, mangle_name
from c2d_operators import BoolCastMember, ClassInfoMap, OpCmpMember, operator_method
from c2d_output import OutputStack
from c2d_overrides import OverrideTable
from c2d_records import BitfieldRun, VisibilityTracker, closing_entry
from c2d_semantic import Semantic, classify, is_std_array, is_std_unordered_map
from c2d_templates import TemplateMachinery
from c2d_types import (
    AttributedType, AutoType, BuiltinType, ConstantArrayType, DecayedType, DecltypeType, DependentNameType,
    ElaboratedType, EnumType, FunctionProtoType, IncompleteArrayType, InjectedClassNameType,
    LValueReferenceType, MemberPointerType, NestedNameSpecifier, NNSKind, ParenType, PointerType, RecordType,
    RValueReferenceType, SubstTemplateTypeParmType, TemplateSpecializationType, TemplateTypeParmType,
    TypedefType, TypeNode, canonical_spelling, desugar, is_pointer, non_reference, pointee_of,
    record_decl_of, unqualified, with_const,
)

# C++ builtin spelling -> D builtin
BUILTIN_TYPE_NAMES = {
    "void": "void",
    "bool": "bool",
    "char": "char",
    "signed char": "char",
    "unsigned char": "ubyte",
    "short": "short",
    "unsigned short": "ushort",
    "int": "int",
    "unsigned int": "uint",
    "long": "long",
    "unsigned long": "ulong",
    "long long": "long",
    "unsigned long long": "ulong",
    "__int128": "cent",
    "unsigned __int128": "ucent",
    "half": "half",
    "__fp16": "half",
    "float": "float",
    "double": "double",
    "long double": "real",
    "wchar_t": "wchar",
    "char16_t": "wchar",
    "char32_t": "dchar",
    "std::nullptr_t": "nullptr_t",
    "nullptr_t": "nullptr_t",
}

RECORD_KEYWORDS = {
    TagKind.CLASS: "class",
    TagKind.STRUCT: "struct",
    TagKind.UNION: "union",
}

LINKAGE_PREFIXES = {
    "C": "extern (C) ",
    "C++": "extern (C++) ",
}

TRAIT_SUFFIXES = {
    "sizeof": ".sizeof",
    "alignof": ".alignof",
    "vec_step": ".VecStep",
}

CHAR_ESCAPES = {
    0: "\\0",
    ord("\n"): "\\n",
    ord("\t"): "\\t",
    ord("\r"): "\\r",
}

# Marker names planted by the macro pre-expansion of the front end.
MACRO_STMT = "CPP2D_MACRO_STMT"
MACRO_STMT_END = "CPP2D_MACRO_STMT_END"
MACRO_EXPR = "CPP2D_MACRO_EXPR"

_NO_SEMICOLON_DECLS = (
    FunctionDecl,
    NamespaceDecl,
    NamespaceAliasDecl,
    UsingDirectiveDecl,
    EmptyDecl,
    FriendDecl,
    FunctionTemplateDecl,
    EnumDecl,
)

_NO_SEMICOLON_STMTS = (
    ForStmt,
    IfStmt,
    ForRangeStmt,
    WhileStmt,
    CompoundStmt,
    CatchStmt,
    TryStmt,
    NullStmt,
)


def needs_semicolon(node) -> bool:
    """Whether the rendering of `node` must be followed by ';'."""
    if isinstance(node, Decl):
        if type(node) is RecordDecl:
            return not node.is_complete
        return not isinstance(node, _NO_SEMICOLON_DECLS)
    return not isinstance(node, _NO_SEMICOLON_STMTS)


def format_floating(value: float, bits: int) -> str:
    """Shortest round-tripping spelling at the literal's precision, with its D suffix."""
    if bits < 64:
        text, suffix = f"{value:.6g}", "f"
    elif bits > 64:
        text, suffix = f"{value:.18g}", "l"
    else:
        text, suffix = f"{value:.15g}", ""
    if not any(c in text for c in ".eEn"):
        text += ".0"
    return text + suffix


def escape_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _strip_implicit(expr: Optional[Expr]) -> Optional[Expr]:
    while isinstance(expr, (ImplicitCastExpr, WrapperExpr)):
        expr = expr.sub
    return expr


class DPrinter:
    """
    Renders one translation unit to D.

    A DPrinter is single-use: it owns the output stack, the import set and
    the per-record bookkeeping of exactly one translation.
    """

    def __init__(
            self,
            context: TranslationContext | None = None,
            overrides: OverrideTable | None = None,
            includes: Iterable[str] = (),
    ):
        self.context = context or TranslationContext.default()
        self.overrides = overrides if overrides is not None else OverrideTable()
        self.out = OutputStack()
        self.imports = ImportSet()
        self.names = NameResolver(includes, self.imports)
        self.templates = TemplateMachinery(self)
        self.comments = CommentPrinter(self.out)
        self.class_infos = ClassInfoMap()
        self.diagnostics: List[Diagnostic] = []

        # Nesting depth of CPP2D_MACRO_STMT blocks
        self._in_macro = 0

        # `ref` may be printed for references (return and parameter types, foreach)
        self._ref_accepted = False
        self._in_func_args = False
        self._in_for_range_init = False
        self._print_default_value = True
        self._split_multi_line_decl = True
        self._do_print_type = True

        # Set when an implicit function turns out to need its rendering
        self._this_function_useful = False

        # Callees (by id) that must not get the '&' of a function-to-pointer decay
        self._dont_take_ptr: Set[int] = set()

        # Records whose body is being printed, innermost last
        self._records: List[RecordDecl] = []

    # --- Public API ---

    def translate(self, tu: TranslationUnitDecl) -> str:
        self.print_decl(tu)
        return self.out.getvalue()

    def print_decl(self, decl: Decl) -> None:
        renderer = self.overrides.lookup_decl(decl)
        if renderer is not None:
            renderer(self, decl)
            return
        self._dispatch_decl(decl)

    def print_stmt(self, stmt: Optional[Stmt]) -> None:
        if stmt is None:
            return
        renderer = self.overrides.lookup_stmt(stmt)
        if renderer is not None:
            renderer(self, stmt)
            return
        self._dispatch_stmt(stmt)

    def print_type(self, t: TypeNode) -> None:
        """Print `t` with its const qualifier where D needs one."""
        if isinstance(t, AutoType):
            if t.is_const and self.context.port_const:
                self.out.write("const ")
            self.traverse_type(t)
            return
        print_const = t.is_const and (self.context.port_const or isinstance(desugar(t), BuiltinType))
        if print_const:
            self.out.write("const(")
        self.traverse_type(t)
        if print_const:
            self.out.write(")")

    def traverse_type(self, t: TypeNode) -> None:
        """Print `t` ignoring its own const qualifier."""
        renderer = self.overrides.lookup_type(t)
        if renderer is not None:
            renderer(self, t)
            return
        self._dispatch_type(t)

    # --- Diagnostics ---

    def error(self, message: str, *, node=None) -> None:
        diag = diag_from_node("error", message, node=node)
        self.diagnostics.append(diag)
        log_error(self.context, diag.format())

    def warning(self, message: str, *, node=None) -> None:
        diag = diag_from_node("warning", message, node=node)
        self.diagnostics.append(diag)
        log_warning(self.context, diag.format())

    def ice(self, message: str, *, node=None) -> NoReturn:
        raise InternalCompilerError(message, ICELocation.of_node(node))

    # --- Helpers ---

    def _write(self, text: str) -> None:
        self.out.write(text)

    def _indent(self) -> str:
        return self.out.indent_str()

    def _sync_output(self) -> None:
        self.out.enabled = self._in_macro == 0

    def _add_import(self, module: str, symbol: str) -> None:
        if self._in_macro == 0:
            self.imports.add(module, symbol)

    def _semantic_of(self, expr: Optional[Expr]) -> Semantic:
        if expr is None or expr.type is None:
            return Semantic.VALUE
        return classify(expr.type)

    def _current_record(self) -> Optional[RecordDecl]:
        return self._records[-1] if self._records else None

    def _parent_of(self, method: MethodDecl) -> Optional[RecordDecl]:
        return method.parent if method.parent is not None else self._current_record()

    def _print_separated(self, items, print_item: Callable, separator: str = ", ") -> None:
        for index, item in enumerate(items):
            if index:
                self._write(separator)
            print_item(item)

    def _print_call_arguments(self, args: List[Expr]) -> None:
        """`(a, b)`; arguments from the first defaulted one on are dropped."""
        self._write("(")
        for index, arg in enumerate(args):
            if isinstance(arg, DefaultArgExpr):
                break
            if index:
                self._write(", ")
            self.print_stmt(arg)
        self._write(")")

    def _print_qualifier(self, nns: Optional[NestedNameSpecifier]) -> None:
        # Namespaces vanish in D; only type and identifier components are printed.
        if nns is None:
            return
        if nns.prefix is not None:
            self._print_qualifier(nns.prefix)
        if nns.kind is NNSKind.TYPE_SPEC and nns.type is not None:
            self.print_type(nns.type)
            self._write(".")
        elif nns.kind is NNSKind.IDENTIFIER:
            self._write(f"{nns.identifier}.")

    def _unsupported(self, node, category: str, code: str, label: str) -> None:
        self._write(f"/*{label} {category}*/")
        self.warning(f"[{code}] unsupported {category.lower()} kind '{label}'", node=node)

    # ======================================================================
    # Declarations
    # ======================================================================

    def _dispatch_decl(self, decl: Decl) -> None:
        if isinstance(decl, TranslationUnitDecl):
            self._print_translation_unit(decl)
        elif isinstance(decl, NamespaceDecl):
            self._print_namespace(decl)
        elif isinstance(decl, ClassTemplateSpecializationDecl):
            self._print_class_template_specialization(decl)
        elif isinstance(decl, RecordDecl):
            self._print_plain_record(decl)
        elif isinstance(decl, ClassTemplateDecl):
            self._print_class_template(decl)
        elif isinstance(decl, FieldDecl):
            self._print_field(decl)
        elif isinstance(decl, VarDecl):
            self._print_var(decl)
        elif isinstance(decl, ParmVarDecl):
            self._print_parm_var(decl)
        elif isinstance(decl, MethodDecl):
            if not decl.is_out_of_line:
                self._print_function(decl)
        elif isinstance(decl, FunctionDecl):
            self._print_function(decl)
        elif isinstance(decl, FunctionTemplateDecl):
            self._print_function_template(decl)
        elif isinstance(decl, (TypedefDecl, TypeAliasDecl)):
            self._write(f"alias {mangle_name(decl.name)} = ")
            self.print_type(decl.underlying)
        elif isinstance(decl, TypeAliasTemplateDecl):
            self._write(f"alias {mangle_name(decl.name)}")
            self.templates.print_parameter_list(decl.params)
            self._write(" = ")
            self.print_type(decl.underlying)
        elif isinstance(decl, EnumDecl):
            self._print_enum(decl)
        elif isinstance(decl, EnumConstantDecl):
            self._write(mangle_name(decl.name))
            if decl.init is not None:
                self._write(" = ")
                self.print_stmt(decl.init)
        elif isinstance(decl, TemplateTypeParmDecl):
            if decl.name:
                self._write(self.templates.param_name(decl))
        elif isinstance(decl, NonTypeTemplateParmDecl):
            self.print_type(decl.type)
            self._write(" ")
            if decl.name:
                self._write(mangle_name(self.templates.param_name(decl)))
        elif isinstance(decl, LinkageSpecDecl):
            self._print_linkage_spec(decl)
        elif isinstance(decl, FriendDecl):
            self._write("//friend ")
            if decl.friend_type is not None:
                self.traverse_type(decl.friend_type)
            elif decl.friend_decl is not None:
                self.print_decl(decl.friend_decl)
        elif isinstance(decl, UsingDecl):
            self._write(f"//using {decl.name}")
        elif isinstance(decl, (UsingDirectiveDecl, NamespaceAliasDecl, EmptyDecl, AccessSpecDecl)):
            pass
        elif isinstance(decl, StaticAssertDecl):
            self._write("static assert(")
            self.print_stmt(decl.cond)
            if decl.message is not None:
                self._write(", ")
                self.print_stmt(decl.message)
            self._write(")")
        else:
            self._unsupported(decl, "Decl", "TRN-0100", decl.kind_name)

    # --- translation unit and namespaces ---

    def _print_translation_unit(self, tu: TranslationUnitDecl) -> None:
        for decl in tu.decls:
            if tu.main_file is None or decl.begin is None or decl.begin.file is tu.main_file:
                self._print_scope_member(decl)

    def _print_scope_member(self, decl: Decl) -> None:
        with self.out.captured() as text:
            self.print_decl(decl)
        if text.text:
            self.comments.print_before(decl)
            self._write(self._indent() + text.text)
            if needs_semicolon(decl):
                self._write(";")
            self.comments.print_after(decl)
            self._write("\n\n")
        self._sync_output()

    def _print_namespace(self, decl: NamespaceDecl) -> None:
        name = mangle_name(decl.name)
        self._write(f"// -> module {name};\n")
        for member in decl.decls:
            self._print_scope_member(member)
        self._write(f"// <- module {name} end\n")

    def _print_linkage_spec(self, decl: LinkageSpecDecl) -> None:
        prefix = LINKAGE_PREFIXES.get(decl.language)
        if prefix is None:
            self.ice(f"[ICE-0020] unknown linkage language '{decl.language}'", node=decl)
        self._write(prefix)
        if decl.has_braces:
            self._write("\n" + self._indent() + "{\n")
            self.out.indent()
            for member in decl.decls:
                self._write(self._indent())
                self.print_decl(member)
                if needs_semicolon(member):
                    self._write(";")
                self._write("\n")
            self.out.dedent()
            self._write(self._indent() + "}")
        elif decl.decls:
            self.print_decl(decl.decls[0])

    # --- records ---

    def _print_plain_record(self, decl: RecordDecl) -> None:
        if decl.tag is TagKind.CLASS:
            for member in decl.decls:
                if isinstance(member, ConstructorDecl) and member.is_implicit and member.is_copy:
                    self.error(
                        f"[TRN-0020] class '{decl.name}' is copy constructible, which is not D compatible",
                        node=decl,
                    )
                    break
        self._print_record(decl)

    def _print_class_template(self, decl: ClassTemplateDecl) -> None:
        if decl.templated is None:
            return
        self._print_record(decl.templated, lambda: self.templates.print_parameter_list(decl.params))

    def _print_class_template_specialization(self, decl: ClassTemplateSpecializationDecl) -> None:
        if decl.specialization_kind.is_instantiation:
            return
        extra = decl.params if isinstance(decl, ClassTemplatePartialSpecializationDecl) else None
        primary = decl.specialized_template
        primary_params = primary.params if primary is not None else []
        with self.templates.specialization_scope(extra):
            self._print_record(
                decl,
                lambda: self.templates.print_specialization_binding(
                    primary_params, decl.template_args, extra, node=decl),
            )

    def _print_bases(self, decl: RecordDecl) -> None:
        if not decl.bases:
            return
        self._write(" : ")
        for index, base in enumerate(decl.bases):
            if index:
                self._write(", ")
            if base.access is not AccessSpecifier.PUBLIC:
                self.error(
                    f"[TRN-0010] class '{decl.name}' uses {base.access.value} base class protection, "
                    f"which is not supported",
                    node=decl,
                )
                self._write(f"/*{base.access.value}*/ ")
            self.print_type(base.type)

    def _print_record(self, decl: RecordDecl, print_template_params: Optional[Callable[[], None]] = None) -> None:
        if decl.is_implicit:
            return
        if not decl.is_complete and decl.definition is not None:
            return
        keyword = RECORD_KEYWORDS.get(decl.tag)
        if keyword is None:
            self.ice(f"[ICE-0050] unknown record kind '{decl.tag}'", node=decl)

        self._write(f"{keyword} {mangle_name(decl.name)}")
        if print_template_params is not None:
            print_template_params()
        if not decl.is_complete:
            return
        self._print_bases(decl)
        self._write("\n" + self._indent() + "{")
        self.out.indent()
        self._records.append(decl)
        try:
            self._print_members(decl)
            self._print_hoisted_operators(decl)
            self._print_synthesized_members(decl)
        finally:
            self._records.pop()
        self.out.dedent()
        self._write(self._indent() + "}")

    def _close_bitfield_run(self, run: BitfieldRun) -> None:
        self._write("\n" + self._indent() + closing_entry(run.close()))

    def _print_members(self, decl: RecordDecl) -> None:
        run = BitfieldRun()
        visibility = VisibilityTracker(decl.tag)
        for member in decl.decls:
            is_bitfield = isinstance(member, FieldDecl) and member.bit_width is not None
            opens_run = False
            if is_bitfield:
                opens_run = run.add(member.bit_width)
            elif run.active:
                self._close_bitfield_run(run)

            with self.out.captured() as text:
                self.print_decl(member)
            if text.text:
                if self._in_macro == 0:
                    label = visibility.update(member.access)
                    if label is not None:
                        self._write("\n" + self.out.indent_str(self.out.indent_level - 1) + label)
                self.comments.print_before(member)
                if opens_run and self._in_macro == 0:
                    self._write("mixin(bitfields!(\n" + self._indent())
                self._write(text.text)
                if needs_semicolon(member) and not is_bitfield:
                    self._write(";")
                self.comments.print_after(member)
            self._sync_output()
        if run.active:
            self._close_bitfield_run(run)
        self._write("\n")

    def _print_hoisted_operators(self, decl: RecordDecl) -> None:
        """Free operators taking this record, printed as members."""
        spelling = canonical_spelling(RecordType(decl))
        for function in self.overrides.left_operators(spelling):
            self._write(self._indent())
            self._print_function(function, arg_become_this=0)
            self._write("\n")
        for function in self.overrides.right_operators(spelling):
            self._write(self._indent())
            self._print_function(function, arg_become_this=1)
            self._write("\n")

    def _print_synthesized_members(self, decl: RecordDecl) -> None:
        const_suffix = " const" if self.context.port_const else ""
        for member in self.class_infos.synthesize(decl):
            if isinstance(member, OpCmpMember):
                self._write(self._indent() + "int opCmp(ref in ")
                self.print_type(member.other_type)
                self._write(f" other){const_suffix}\n")
                body = "return _opLess(other) ? -1: ((this == other)? 0: 1);"
            elif isinstance(member, BoolCastMember):
                self._write(self._indent() + f"bool opCast(T : bool)(){const_suffix}\n")
                body = "return !_opExclaim();"
            else:
                continue
            self._write(self._indent() + "{\n")
            self._write(self.out.indent_str(self.out.indent_level + 1) + body + "\n")
            self._write(self._indent() + "}\n")

    # --- variables ---

    def _print_field(self, decl: FieldDecl) -> None:
        if decl.name.startswith(MACRO_STMT):
            self._print_stmt_macro(decl.name, decl.init)
            return
        if decl.is_mutable:
            self._write("/*mutable*/")
        if decl.bit_width is not None:
            self._write("\t")
            self.print_type(decl.type)
            self._write(f', "{mangle_name(decl.name)}", {decl.bit_width},')
            self._add_import("std.bitmanip", "bitfields")
        else:
            self.print_type(decl.type)
            self._write(f" {mangle_name(decl.name)}")
        if decl.init is not None:
            self._write(" = ")
            self.print_stmt(decl.init)
        elif classify(decl.type) is Semantic.REFERENCE:
            self._write(" = new ")
            self.print_type(decl.type)

    def _print_var(self, decl: VarDecl) -> None:
        if decl.name.startswith(MACRO_STMT):
            self._print_stmt_macro(decl.name, decl.init)
            return
        if decl.is_out_of_line:
            return
        if decl.out_of_line_definition is not None:
            decl = decl.out_of_line_definition

        var_type = decl.type
        if self._do_print_type:
            if decl.is_static:
                self._write("static ")
            if not decl.is_out_of_line:
                self._print_qualifier(decl.qualifier)
            self.print_type(var_type)
            self._write(" ")
        self._write(mangle_name(self.names.name_of(decl)))

        init = decl.init
        if init is None or self._in_for_range_init:
            return
        if decl.init_style is not InitStyle.COPY and isinstance(init, ConstructExpr):
            if classify(var_type) is not Semantic.REFERENCE:
                if init.args:
                    self._write(" = ")
                    self._print_construct_params(init)
            else:
                self._write(" = new ")
                self._print_construct_params(init)
        else:
            self._write(" = ")
            self.print_stmt(init)

    def _print_construct_params(self, init: ConstructExpr) -> None:
        """`T(args)`, or the argument alone for a copy construction."""
        if len(init.args) == 1 and init.type is not None:
            if init.args[0].type == with_const(init.type):
                self.print_stmt(init.args[0])
                return
        self.print_type(init.type)
        self._write("(")
        semantic = self._semantic_of(init)
        for counter, arg in enumerate(init.args):
            if isinstance(arg, DefaultArgExpr) and (counter != 0 or semantic is not Semantic.VALUE):
                break
            if counter:
                self._write(", ")
            self.print_stmt(arg)
        self._write(")")

    def _print_parm_var(self, decl: ParmVarDecl) -> None:
        self.print_type(decl.type)
        if decl.name:
            self._write(f" {mangle_name(decl.name)}")
        if decl.default_arg is not None:
            if not self._print_default_value:
                self._write("/*")
            self._write(" = ")
            self.print_stmt(decl.default_arg)
            if not self._print_default_value:
                self._write("*/")

    def _print_enum(self, decl: EnumDecl) -> None:
        self._write(f"enum {mangle_name(decl.name)}")
        if decl.integer_type is not None:
            self._write(" : ")
            self.traverse_type(decl.integer_type)
        self._write("\n" + self._indent() + "{\n")
        self.out.indent()
        for enumerator in decl.enumerators:
            self._write(self._indent())
            self.print_decl(enumerator)
            self._write(",\n")
        if not decl.enumerators:
            self._write(self._indent() + "Default\n")
        self.out.dedent()
        self._write(self._indent() + "}")

    # --- functions ---

    def _print_function_template(self, decl: FunctionTemplateDecl) -> None:
        if not isinstance(decl.templated, FunctionDecl):
            self.ice(f"[ICE-0040] function template '{decl.name}' does not describe a function", node=decl)
        self._print_function(decl.templated)

    def _this_semantic(self, decl: FunctionDecl) -> Semantic:
        if not isinstance(decl, MethodDecl) or decl.is_static:
            return Semantic.REFERENCE
        parent = self._parent_of(decl)
        if parent is None:
            return Semantic.REFERENCE
        return classify(RecordType(parent))

    def _print_function(self, decl: FunctionDecl, arg_become_this: int = -1) -> None:
        """
        Print a function, method, constructor, destructor or conversion.

        `arg_become_this` is the index of the parameter that becomes `this`
        when a free operator is printed inside a record (-1 otherwise).
        """
        if decl.is_deleted:
            return
        if decl.is_implicit and decl.body is None:
            return
        if (
                decl.canonical_decl is not None
                and decl.canonical_decl is not decl
                and not (decl.template_kind is TemplatedKind.FUNCTION_TEMPLATE_SPECIALIZATION
                         and decl.is_definition)
        ):
            return

        saved_useful = self._this_function_useful
        with self.out.captured() as printed:
            self._ref_accepted = True
            template_params = self._print_function_begin(decl, arg_become_this)
            if template_params is None:
                self._ref_accepted = False
            else:
                self._print_function_rest(decl, template_params, arg_become_this)
        useful = self._this_function_useful
        self._this_function_useful = saved_useful or useful

        if template_params is None:
            return
        if not decl.is_implicit or useful:
            self._write(printed.text)

    def _print_function_begin(self, decl: FunctionDecl, arg_become_this: int) -> Optional[str]:
        """
        Print everything up to the template parameters. Returns the template
        parameters the name requires (possibly ""), or None when the function
        is not printed at all.
        """
        if isinstance(decl, ConversionDecl):
            self._print_method_attributes(decl)
            self.print_type(decl.conversion_type)
            self._write(" opCast")
            with self.out.captured() as params:
                self._write("T : ")
                self.print_type(decl.conversion_type)
            target = desugar(decl.conversion_type)
            parent = self._parent_of(decl)
            if isinstance(target, BuiltinType) and target.kind == "bool" and parent is not None:
                self.class_infos.record_bool_conversion(parent)
            return params.text

        if isinstance(decl, ConstructorDecl):
            if decl.is_move or decl.body is None:
                return None
            parent = self._parent_of(decl)
            if parent is not None and parent.tag in (TagKind.STRUCT, TagKind.UNION):
                if decl.is_default_ctor and not decl.params:
                    if decl.is_explicit and not decl.is_defaulted:
                        self.error(
                            f"[TRN-0040] struct '{parent.name}' has an explicit default constructor, "
                            f"which is illegal in D; remove it, default it or use a factory method",
                            node=decl,
                        )
                    return None
            elif decl.is_implicit and not decl.is_default_ctor:
                return None
            self._write("this")
            return ""

        if isinstance(decl, DestructorDecl):
            if decl.is_implicit or decl.body is None:
                return None
            self._write("~this")
            return ""

        if isinstance(decl, MethodDecl):
            if not decl.is_pure and decl.body is None:
                return None
            if decl.is_implicit or decl.is_move_assignment:
                return None
            if decl.overloaded_operator == "!=":
                return None
            self._print_method_attributes(decl)

        return self._print_function_name(decl, arg_become_this)

    def _print_method_attributes(self, decl: MethodDecl) -> None:
        if decl.is_static:
            self._write("static ")
        record = self._parent_of(decl)
        if record is None:
            return
        if record.tag is TagKind.CLASS:
            if decl.is_pure:
                self._write("abstract ")
            if decl.is_override:
                self._write("override ")
            if not decl.is_virtual:
                self._write("final ")
        else:
            if decl.is_pure:
                self.error(f"[TRN-0030] struct '{record.name}' has an abstract method, which is forbidden",
                           node=decl)
                self._write("abstract ")
            if decl.is_virtual:
                self.error(f"[TRN-0031] struct '{record.name}' has a virtual method, which is forbidden",
                           node=decl)
                self._write("virtual ")
            if decl.is_override:
                self._write("override ")

    def _print_function_name(self, decl: FunctionDecl, arg_become_this: int) -> Optional[str]:
        if decl.is_implicit:
            return None
        op = decl.overloaded_operator
        if op == "!=":
            return None
        if decl.name == "cpp2d_dummy_variadic":
            return None
        self.print_type(decl.return_type)
        self._write(" ")
        if op is None:
            self._write(mangle_name(decl.name))
            return ""

        left_type = right_type = None
        left_record = right_record = None
        if isinstance(decl, MethodDecl):
            left_record = self._parent_of(decl)
            if left_record is not None:
                left_type = PointerType(RecordType(left_record))
            if decl.params:
                right_type = decl.params[0].type
                right_record = record_decl_of(right_type)
        else:
            if decl.params:
                left_type = decl.params[0].type
                left_record = record_decl_of(left_type)
            if len(decl.params) > 1:
                right_type = decl.params[1].type
                right_record = record_decl_of(right_type)

        nb_args = (1 if arg_become_this == -1 else 0) + len(decl.params)
        method = operator_method(op, nb_args, right=arg_become_this == 1)
        self.class_infos.record_operator(op, left_record, left_type, right_record, right_type)
        log_debug(self.context, f"operator{op} of '{decl.name}' printed as {method.name}")
        self._write(method.name)
        return method.template_params

    def _print_function_rest(self, decl: FunctionDecl, template_params: str, arg_become_this: int) -> None:
        printed = False
        kind = decl.template_kind
        if kind in (TemplatedKind.NON_TEMPLATE, TemplatedKind.MEMBER_SPECIALIZATION):
            pass
        elif kind is TemplatedKind.FUNCTION_TEMPLATE:
            if decl.described_template is not None:
                self.templates.print_parameter_list(decl.described_template.params, template_params)
                printed = True
        elif kind in (TemplatedKind.FUNCTION_TEMPLATE_SPECIALIZATION,
                      TemplatedKind.DEPENDENT_FUNCTION_TEMPLATE_SPECIALIZATION):
            if decl.primary_template is not None:
                self.templates.print_specialization_binding(
                    decl.primary_template.params, decl.template_args, None, template_params, node=decl)
                printed = True
        else:
            self.ice(f"[ICE-0040] unknown function template kind '{kind}'", node=decl)
        if not printed and template_params:
            self._write(f"({template_params})")

        self._write("(")
        self._in_func_args = True
        is_const_method = False
        is_copy_ctor = isinstance(decl, ConstructorDecl) and decl.is_copy
        semantic = self._this_semantic(decl)
        if decl.params:
            is_const_method = self._print_function_params(decl, arg_become_this, is_copy_ctor, semantic)
        self._write(")")
        if isinstance(decl, MethodDecl) and decl.is_const:
            is_const_method = True
        if is_const_method and self.context.port_const:
            self._write(" const")
        self._ref_accepted = False
        self._in_func_args = False
        self._this_function_useful = False

        body = decl.body
        if body is None:
            self._write(";")
            return
        self._write("\n")
        if is_copy_ctor and semantic is Semantic.VALUE:
            arg_become_this = 0

        def start_body() -> None:
            if arg_become_this >= 0:
                param = decl.params[arg_become_this]
                self._write("\n")
                if param.name:
                    self._write(self._indent() + f"alias {param.name} = this;")
            if isinstance(decl, ConstructorDecl):
                self._print_ctor_initializers(decl)

        if isinstance(body, TryStmt):
            self._write(self._indent() + "{\n")
            self.out.indent()
            self._write(self._indent())
            self._print_try(body, start_body)
            self._write("\n")
            self.out.dedent()
            self._write(self._indent() + "}")
        elif isinstance(body, CompoundStmt):
            self._write(self._indent())
            self._print_compound(body, start_body)
        else:
            self.ice(f"[ICE-0080] body of '{decl.name}' is a {type(body).__name__}, not a block", node=decl)

    def _print_function_params(self, decl: FunctionDecl, arg_become_this: int, is_copy_ctor: bool,
                               semantic: Semantic) -> bool:
        """Print the parameters; returns True when the parameter becoming `this` is const."""
        is_const_method = False
        loc_start = decl.lparen.with_offset(1) if decl.lparen is not None else None
        num_param = len(decl.params) + (1 if decl.is_variadic else 0) + (0 if arg_become_this == -1 else -1)
        self.out.indent()
        for index, param in enumerate(decl.params):
            if index == arg_become_this:
                pointee = non_reference(param.type)
                is_const_method = pointee.is_const or desugar(pointee).is_const
                continue
            if num_param != 1:
                loc_start = self.comments.print_gap(loc_start, param.begin, param.end)
                self._write(self._indent())
            if is_copy_ctor and semantic is Semantic.VALUE:
                self._write("this")
            else:
                if index == 0 and semantic is Semantic.VALUE and isinstance(decl, ConstructorDecl):
                    self._print_default_value = False
                self.print_decl(param)
                self._print_default_value = True
            if index < num_param - 1:
                self._write(",")
        if decl.is_variadic:
            if num_param != 1:
                self._write("\n" + self._indent())
            self._write("...")
        with self.out.captured() as comment:
            if decl.rparen is not None:
                self.comments.print_gap(loc_start, decl.rparen)
        self.out.dedent()
        if len(comment.text) > 2:
            self._write(comment.text + self._indent())
        return is_const_method

    def _print_ctor_initializers(self, decl: ConstructorDecl) -> None:
        for init in decl.inits:
            with self.out.captured() as text:
                self._print_ctor_initializer(init)
            # "x = " alone: default initialization is enough
            if text.text and not text.text.endswith("= "):
                self._write("\n" + self._indent() + text.text + ";")

    def _print_ctor_initializer(self, init: CtorInitializer) -> None:
        if init.member is None:
            if init.is_written:
                self._write("super(")
                self.print_stmt(init.init)
                self._write(")")
            return
        if isinstance(init.init, DefaultInitExpr):
            return

        member = init.member
        semantic = classify(member.type)
        self._write(f"{mangle_name(member.name)} = ")
        expr = init.init
        if semantic is Semantic.VALUE:
            arg_count = 0
            if isinstance(expr, ParenListExpr):
                arg_count = len(expr.exprs)
            elif isinstance(expr, ConstructExpr):
                arg_count = len(expr.args)
            if arg_count > 1:
                self.print_type(member.type)
                self._write("(")
            self.print_stmt(expr)
            if arg_count > 1:
                self._write(")")
            return

        self._this_function_useful = True
        if isinstance(expr, ConstructExpr):
            if len(expr.args) == 1:
                arg_type = expr.args[0].type
                if arg_type is not None and unqualified(desugar(arg_type)) == unqualified(desugar(member.type)):
                    self.print_stmt(expr)
                    self._write(".dup()")
                    return
            elif not expr.args and semantic is Semantic.ASSOC_ARRAY:
                return
        self._write("new ")
        self.print_type(member.type)
        self._write("(")
        self.print_stmt(expr)
        self._write(")")

    # --- macros ---

    def _enter_macro(self) -> None:
        self._in_macro += 1
        self.names.in_macro = True

    def _leave_macro(self) -> None:
        if self._in_macro > 0:
            self._in_macro -= 1
        self.names.in_macro = self._in_macro > 0

    def _macro_pair(self, expr: Optional[Expr]) -> BinaryOperator:
        """The `(lhs, rhs)` binary operator a macro marker is made of."""
        paren = _strip_implicit(expr)
        inner = _strip_implicit(paren.sub) if isinstance(paren, ParenExpr) else None
        if not isinstance(inner, BinaryOperator):
            self.ice("[ICE-0090] malformed macro marker", node=expr)
        return inner

    def _macro_name_and_args(self, expr: Optional[Expr]):
        pair = self._macro_pair(expr)
        name = _strip_implicit(pair.lhs)
        args = _strip_implicit(pair.rhs)
        if not isinstance(name, StringLiteral) or not isinstance(args, CallExpr):
            self.ice("[ICE-0090] malformed macro marker", node=expr)
        return name.value, args

    def _print_stmt_macro(self, var_name: str, init: Optional[Expr]) -> None:
        if var_name.startswith(MACRO_STMT_END):
            self._leave_macro()
        elif var_name.startswith(MACRO_STMT):
            macro_name, macro_args = self._macro_name_and_args(init)
            self._write(f"mixin({macro_name}!(")
            self._print_macro_args(macro_args)
            self._write("))")
            self._enter_macro()

    def _print_macro_args(self, macro_args: CallExpr) -> None:
        for index, arg in enumerate(macro_args.args):
            if index:
                self._write(", ")
            self._write("q{")
            if not self._print_special_macro_arg(arg):
                self.print_stmt(arg)
            self._write("}")

    def _print_special_macro_arg(self, arg: Expr) -> bool:
        """`cpp2d_type<T>()` prints T, `cpp2d_name("x")` prints x."""
        if not isinstance(arg, CallExpr):
            return False
        callee = _strip_implicit(arg.callee)
        if not isinstance(callee, DeclRefExpr):
            return False
        name = callee.decl.name
        if name == "cpp2d_type" and callee.template_args:
            self.templates.print_argument(callee.template_args[0])
            return True
        if name == "cpp2d_name" and arg.args:
            literal = _strip_implicit(arg.args[0])
            if isinstance(literal, StringLiteral):
                self._write(literal.value)
                return True
        return False

    # ======================================================================
    # Statements
    # ======================================================================

    def _dispatch_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Expr):
            self._dispatch_expr(stmt)
        elif isinstance(stmt, CompoundStmt):
            self._print_compound(stmt)
        elif isinstance(stmt, DeclStmt):
            self._print_decl_stmt(stmt)
        elif isinstance(stmt, NullStmt):
            pass
        elif isinstance(stmt, IfStmt):
            self._print_if(stmt)
        elif isinstance(stmt, ForStmt):
            self._write("for(")
            self._split_multi_line_decl = False
            self.print_stmt(stmt.init)
            self._split_multi_line_decl = True
            self._write("; ")
            self.print_stmt(stmt.cond)
            self._write("; ")
            self.print_stmt(stmt.inc)
            self._write(")\n")
            self._print_compound_or_not(stmt.body)
        elif isinstance(stmt, ForRangeStmt):
            self._print_for_range(stmt)
        elif isinstance(stmt, WhileStmt):
            self._write("while(")
            self.print_stmt(stmt.cond)
            self._write(")\n")
            self._print_compound_or_not(stmt.body)
        elif isinstance(stmt, DoStmt):
            self._write("do\n")
            self._print_compound_or_not(stmt.body)
            self._write("while(")
            self.print_stmt(stmt.cond)
            self._write(")")
        elif isinstance(stmt, SwitchStmt):
            self._write("switch(")
            self.print_stmt(stmt.cond)
            self._write(")\n" + self._indent())
            self.print_stmt(stmt.body)
        elif isinstance(stmt, CaseStmt):
            self._write("case ")
            self.print_stmt(stmt.lhs)
            self._write(":\n")
            self._print_indented(stmt.sub)
        elif isinstance(stmt, DefaultStmt):
            self._write("default:\n")
            self._print_indented(stmt.sub)
        elif isinstance(stmt, BreakStmt):
            self._write("break")
        elif isinstance(stmt, ContinueStmt):
            self._write("continue")
        elif isinstance(stmt, ReturnStmt):
            self._write("return")
            if stmt.value is not None:
                self._write(" ")
                self.print_stmt(stmt.value)
        elif isinstance(stmt, TryStmt):
            self._print_try(stmt)
        elif isinstance(stmt, CatchStmt):
            self._write("catch")
            if stmt.exception_decl is not None:
                self._write("(")
                self._print_var(stmt.exception_decl)
                self._write(")")
            self._write("\n" + self._indent())
            self.print_stmt(stmt.handler)
        else:
            self._unsupported(stmt, "Stmt", "TRN-0101", type(stmt).__name__)

    def _print_indented(self, stmt: Stmt) -> None:
        self.out.indent()
        self._write(self._indent())
        self.print_stmt(stmt)
        self.out.dedent()

    def _print_compound(self, stmt: CompoundStmt, start_body: Optional[Callable[[], None]] = None) -> None:
        loc_start = stmt.lbrace.with_offset(1) if stmt.lbrace is not None else None
        self._write("{")
        self.out.indent()
        if start_body is not None:
            start_body()
        for child in stmt.stmts:
            loc_start = self.comments.print_gap(loc_start, child.begin, child.end)
            self._write(self._indent())
            self.print_stmt(child)
            if needs_semicolon(child):
                self._write(";")
            self._sync_output()
        self.comments.print_gap(loc_start, stmt.rbrace)
        self.out.dedent()
        self._write(self._indent() + "}")

    def _print_compound_or_not(self, stmt: Stmt) -> None:
        if isinstance(stmt, CompoundStmt):
            self._write(self._indent())
            self.print_stmt(stmt)
            return
        self.out.indent()
        self._write(self._indent())
        if isinstance(stmt, NullStmt):
            self._write("{}")
        self.print_stmt(stmt)
        if needs_semicolon(stmt):
            self._write(";")
        self.out.dedent()

    def _print_try(self, stmt: TryStmt, start_body: Optional[Callable[[], None]] = None) -> None:
        self._write("try\n" + self._indent())
        self._print_compound(stmt.try_block, start_body)
        for handler in stmt.handlers:
            self._write("\n" + self._indent())
            self.print_stmt(handler)

    def _print_if(self, stmt: IfStmt) -> None:
        self._write("if(")
        self.print_stmt(stmt.cond)
        self._write(")\n")
        self._print_compound_or_not(stmt.then)
        if stmt.else_ is None:
            return
        self._write("\n" + self._indent() + "else ")
        if isinstance(stmt.else_, IfStmt):
            self.print_stmt(stmt.else_)
        else:
            self._write("\n")
            self._print_compound_or_not(stmt.else_)

    def _print_for_range(self, stmt: ForRangeStmt) -> None:
        self._write("foreach(")
        self._ref_accepted = True
        self._in_for_range_init = True
        self._print_var(stmt.loop_var)
        self._in_for_range_init = False
        self._ref_accepted = False
        self._write("; ")
        self.print_stmt(stmt.range_init)
        range_type = stmt.range_init.type
        if range_type is not None:
            record = record_decl_of(range_type)
            if (record is not None and "std::unordered_map" in record.qual_name) \
                    or is_std_unordered_map(non_reference(range_type)):
                self._write(".byKeyValue")
        self._write(")\n")
        self._print_compound_or_not(stmt.body)

    def _print_decl_stmt(self, stmt: DeclStmt) -> None:
        if len(stmt.decls) == 1:
            self.print_decl(stmt.decls[0])
        elif self._split_multi_line_decl:
            last = len(stmt.decls) - 1
            for index, decl in enumerate(stmt.decls):
                self.print_decl(decl)
                if index != last:
                    self._write(";\n" + self._indent())
        else:
            # for-init: `int a = 0, b = 1`
            first = True
            for decl in stmt.decls:
                self._do_print_type = first
                if not first:
                    self._write(", ")
                first = False
                self.print_decl(decl)
                if isinstance(decl, RecordDecl):
                    self._write("\n" + self._indent())
                    first = True
                self._do_print_type = True

    # ======================================================================
    # Expressions
    # ======================================================================

    def _dispatch_expr(self, expr: Expr) -> None:
        if isinstance(expr, IntegerLiteral):
            self._write(str(expr.value))
        elif isinstance(expr, FloatingLiteral):
            self._write(format_floating(expr.value, expr.bits))
        elif isinstance(expr, CharacterLiteral):
            self._write("'" + CHAR_ESCAPES.get(expr.value, chr(expr.value)) + "'")
        elif isinstance(expr, StringLiteral):
            self._write('"' + escape_string(expr.value) + '\\0"')
        elif isinstance(expr, BoolLiteral):
            self._write("true" if expr.value else "false")
        elif isinstance(expr, NullPtrLiteral):
            self._write("null")
        elif isinstance(expr, DeclRefExpr):
            self._print_decl_ref(expr)
        elif isinstance(expr, DependentScopeDeclRefExpr):
            self._print_qualifier(expr.qualifier)
            self._write(expr.name)
            if expr.template_args:
                self.templates.print_argument_list(expr.template_args)
        elif isinstance(expr, UnresolvedLookupExpr):
            self._write(mangle_name(expr.name))
            if expr.template_args:
                self.templates.print_argument_list(expr.template_args)
        elif isinstance(expr, MemberExpr):
            self._print_member(expr)
        elif isinstance(expr, MemberCallExpr):
            self.print_stmt(expr.callee)
            self._print_call_arguments(expr.args)
        elif isinstance(expr, CallExpr):
            self._dont_take_ptr.add(id(expr.callee))
            try:
                self.print_stmt(expr.callee)
            finally:
                self._dont_take_ptr.discard(id(expr.callee))
            self._print_call_arguments(expr.args)
        elif isinstance(expr, OperatorCallExpr):
            self._print_operator_call(expr)
        elif isinstance(expr, BinaryOperator):
            self._print_binary(expr)
        elif isinstance(expr, UnaryOperator):
            self._print_unary(expr)
        elif isinstance(expr, ConditionalOperator):
            self.print_stmt(expr.cond)
            self._write("? ")
            self.print_stmt(expr.true_expr)
            self._write(": ")
            self.print_stmt(expr.false_expr)
        elif isinstance(expr, ParenExpr):
            self._print_paren(expr)
        elif isinstance(expr, ImplicitCastExpr):
            self._print_implicit_cast(expr)
        elif isinstance(expr, CStyleCastExpr):
            self._write("cast(")
            self.print_type(expr.written_type)
            self._write(")")
            self.print_stmt(expr.sub)
        elif isinstance(expr, FunctionalCastExpr):
            if classify(expr.written_type) is Semantic.REFERENCE:
                self._write("new ")
            self.print_type(expr.written_type)
            self._write("(")
            self.print_stmt(expr.sub)
            self._write(")")
        elif isinstance(expr, TemporaryObjectExpr):
            self.print_type(expr.type)
            self._write("(")
            self._print_construct(expr)
            self._write(")")
        elif isinstance(expr, ConstructExpr):
            self._print_construct(expr)
        elif isinstance(expr, UnresolvedConstructExpr):
            self.print_type(expr.written_type)
            self._write("(")
            self._print_separated([a for a in expr.args if not isinstance(a, DefaultArgExpr)], self.print_stmt)
            self._write(")")
        elif isinstance(expr, NewExpr):
            self._print_new(expr)
        elif isinstance(expr, DeleteExpr):
            self.print_stmt(expr.argument)
            self._write(" = null")
        elif isinstance(expr, ThisExpr):
            pointee = pointee_of(expr.type) if expr.type is not None else None
            if pointee is not None and classify(pointee) is Semantic.VALUE:
                self._write("(&this)[0..1]")
            else:
                self._write("this")
        elif isinstance(expr, ThrowExpr):
            self._write("throw ")
            self.print_stmt(expr.sub)
        elif isinstance(expr, InitListExpr):
            self._print_init_list(expr)
        elif isinstance(expr, ArraySubscriptExpr):
            self.print_stmt(expr.lhs)
            self._write("[")
            self.print_stmt(expr.rhs)
            self._write("]")
        elif isinstance(expr, LambdaExpr):
            self._print_lambda(expr)
        elif isinstance(expr, UnaryExprOrTypeTraitExpr):
            if expr.argument_type is not None:
                self.print_type(expr.argument_type)
            else:
                self.print_stmt(expr.argument_expr)
            self._write(TRAIT_SUFFIXES.get(expr.trait, ""))
        elif isinstance(expr, DefaultArgExpr):
            self.print_stmt(expr.expr)
        elif isinstance(expr, DefaultInitExpr):
            self.print_stmt(expr.expr)
        elif isinstance(expr, ParenListExpr):
            self._print_separated(expr.exprs, self.print_stmt)
        elif isinstance(expr, ImplicitValueInitExpr):
            pass
        elif isinstance(expr, PredefinedExpr):
            self._write("__PRETTY_FUNCTION__")
        elif isinstance(expr, WrapperExpr):
            self.print_stmt(expr.sub)
        else:
            self._unsupported(expr, "Stmt", "TRN-0101", type(expr).__name__)

    def _print_decl_ref(self, expr: DeclRefExpr) -> None:
        qualifier_type = None
        if expr.qualifier is not None:
            if expr.qualifier.kind is NNSKind.TYPE_SPEC and expr.qualifier.type is not None:
                qualifier_type = unqualified(desugar(expr.qualifier.type))
            self._print_qualifier(expr.qualifier)
        decl = expr.decl
        if isinstance(decl, EnumConstantDecl) and decl.enum_decl is not None:
            enum_type = EnumType(decl.enum_decl)
            if qualifier_type != enum_type:
                self.print_type(enum_type)
                self._write(".")
        if isinstance(decl, NonTypeTemplateParmDecl):
            self._write(mangle_name(self.templates.param_name(decl)))
        else:
            self._write(self.names.mangle_var(expr))
        if expr.template_args:
            self.templates.print_argument_list(expr.template_args)

    def _print_member(self, expr: MemberExpr) -> None:
        base = expr.base
        is_this = base is None or isinstance(base, ThisExpr)
        if not is_this:
            self.print_stmt(base)
        name = expr.member_name
        if expr.name_kind is MemberNameKind.CONVERSION:
            if name and not is_this:
                self._write(".")
            self._write("opCast!(")
            self.print_type(expr.conversion_type)
            self._write(")")
        elif expr.name_kind is MemberNameKind.OPERATOR:
            self._write(f" {name[len('operator'):]} ")
        else:
            if name and not is_this:
                self._write(".")
            self._write(mangle_name(name))
        if expr.template_args:
            self.templates.print_argument_list(expr.template_args)

    def _print_operator_call(self, expr: OperatorCallExpr) -> None:
        op = expr.operator
        args = expr.args
        if op in ("()", "[]"):
            self.print_stmt(args[0])
            self._write(op[0])
            self._print_separated([a for a in args[1:] if not isinstance(a, DefaultArgExpr)], self.print_stmt)
            self._write(op[1])
        elif op == "->":
            self.print_stmt(args[0])
        elif op == "=":
            lhs, rhs = args[0], args[-1]
            # both operands are class references: assignment must copy
            dup = (
                    not is_pointer(rhs.type) and self._semantic_of(rhs) is not Semantic.VALUE
                    and not is_pointer(lhs.type) and self._semantic_of(lhs) is not Semantic.VALUE
            )
            self.print_stmt(lhs)
            self._write(" = ")
            self.print_stmt(rhs)
            if dup:
                self._write(".dup()")
                self._this_function_useful = True
        elif op in ("++", "--"):
            if len(args) == 2:
                self.print_stmt(args[0])
                self._write(op)
            else:
                self._write(op)
                self.print_stmt(args[0])
        else:
            if len(args) == 2:
                self.print_stmt(args[0])
                self._write(f" {op} ")
            else:
                self._write(op)
            self.print_stmt(args[-1])

    def _print_binary(self, expr: BinaryOperator) -> None:
        lhs, rhs, op = expr.lhs, expr.rhs, expr.opcode
        lhs_ptr = is_pointer(lhs.type)
        if isinstance(expr, CompoundAssignOperator):
            if op == "+=" and lhs_ptr:
                self.print_stmt(lhs)
                self._write(".popFrontN(")
                self.print_stmt(rhs)
                self._write(")")
                self._add_import("std.range.primitives", "popFrontN")
                return
        elif op == "+" and lhs_ptr:
            self.print_stmt(lhs)
            self._write("[")
            self.print_stmt(rhs)
            self._write("..$]")
            return

        self.print_stmt(lhs)
        if lhs_ptr and is_pointer(rhs.type) and op in ("==", "!="):
            self._write(" is " if op == "==" else " !is ")
        else:
            self._write(f" {op} ")
        self.print_stmt(rhs)

    def _print_unary(self, expr: UnaryOperator) -> None:
        op = expr.opcode
        operand = expr.operand
        if op == "++" and is_pointer(operand.type):
            self.print_stmt(operand)
            self._write(".popFront")
            self._add_import("std.range.primitives", "popFront")
            return
        if expr.is_postfix:
            self.print_stmt(operand)
            self._write(op)
            return

        pre, post = op, ""
        if op == "&":
            pre, post = "(&", ")[0..1]"
        elif op == "*":
            if isinstance(operand, ThisExpr):
                # (*this) is `this` in D
                self._write("this")
                return
            pre, post = "", "[0]"

        operand_type = operand.type
        if operand_type is None:
            semantic = Semantic.VALUE
        elif isinstance(desugar(operand_type), (PointerType, MemberPointerType)):
            semantic = classify(pointee_of(operand_type))
        else:
            semantic = classify(operand_type)
        show_op = not (semantic is not Semantic.VALUE and op in ("&", "*"))
        if show_op:
            self._write(pre)
        self.print_stmt(operand)
        if show_op:
            self._write(post)

    def _print_paren(self, expr: ParenExpr) -> None:
        sub = expr.sub
        if (
                isinstance(sub, BinaryOperator)
                and sub.opcode == ","
                and isinstance(_strip_implicit(sub.lhs), StringLiteral)
                and _strip_implicit(sub.lhs).value == MACRO_EXPR
        ):
            macro_and_cpp = self._macro_pair(sub.rhs)
            macro_name, macro_args = self._macro_name_and_args(macro_and_cpp.lhs)
            self._write(f"(mixin({macro_name}!(")
            self._print_macro_args(macro_args)
            self._write(")))")
            # the C++ expansion is only visited for the imports it needs
            with self.out.captured():
                self.print_stmt(macro_and_cpp.rhs)
            return
        self._write("(")
        self.print_stmt(sub)
        self._write(")")

    def _print_implicit_cast(self, expr: ImplicitCastExpr) -> None:
        if expr.cast_kind is CastKind.FUNCTION_TO_POINTER_DECAY and id(expr) not in self._dont_take_ptr:
            self._write("&")
        conversion = expr.cast_kind is CastKind.CONSTRUCTOR_CONVERSION
        if conversion:
            if self._semantic_of(expr) is Semantic.REFERENCE:
                self._write("new ")
            self.print_type(expr.type)
            self._write("(")
        self.print_stmt(expr.sub)
        if conversion:
            self._write(")")

    def _print_construct(self, expr: ConstructExpr) -> None:
        braces = expr.is_list_init and not expr.is_std_init_list
        if braces:
            self._write("{")
        for count, arg in enumerate(expr.args):
            if isinstance(arg, DefaultArgExpr) and count != 0:
                break
            if count:
                self._write(", ")
            self.print_stmt(arg)
        if braces:
            self._write("}")

    def _print_new(self, expr: NewExpr) -> None:
        self._write("new ")
        if expr.is_array:
            self.print_type(expr.allocated_type)
            self._write("[")
            self.print_stmt(expr.array_size)
            self._write("]")
        elif expr.init_style is NewInitStyle.NONE:
            self.print_type(expr.allocated_type)
        elif expr.init_style is NewInitStyle.CALL:
            self.print_type(expr.allocated_type)
            self._write("(")
            self.print_stmt(expr.construct)
            self._write(")")
        else:
            self.print_stmt(expr.initializer)

    def _print_init_list(self, expr: InitListExpr) -> None:
        explicit = True
        if len(expr.inits) == 1:
            explicit = not isinstance(expr.inits[0], InitListExpr)
        opening, closing = ("[", "]") if expr.is_array else ("{", "}")
        if explicit:
            self._write(opening + " \n")
        self.out.indent()
        for init in expr.inits:
            with self.out.captured() as text:
                self.print_stmt(init)
            if text.text:
                self._write(self._indent() + text.text)
                if explicit:
                    self._write(",\n")
            self._sync_output()
        self.out.dedent()
        if explicit:
            self._write(self._indent() + closing)

    def _print_lambda(self, expr: LambdaExpr) -> None:
        has_auto = expr.has_explicit_params and any(
            isinstance(p.type, TemplateTypeParmType) for p in expr.params)
        if has_auto:
            self._add_import("cpp_std", "toFunctor")
            self._write("toFunctor!(")
        if expr.explicit_result_type is not None:
            self._write("function ")
            self.print_type(expr.explicit_result_type)
        if expr.has_explicit_params:
            saved = (self._in_func_args, self._ref_accepted)
            self._in_func_args = self._ref_accepted = True
            self._write("(")
            self._print_separated(expr.params, self.print_decl)
            if expr.is_variadic:
                self._write(", ..." if expr.params else "...")
            self._write(")")
            self._in_func_args, self._ref_accepted = saved
        self._write("\n" + self._indent())
        self.print_stmt(expr.body)
        if has_auto:
            self._write(")()")

    # ======================================================================
    # Types
    # ======================================================================

    def _dispatch_type(self, t: TypeNode) -> None:
        if isinstance(t, BuiltinType):
            name = BUILTIN_TYPE_NAMES.get(t.kind)
            if name is None:
                self.ice(f"[ICE-0010] unknown builtin type kind '{t.kind}'")
            self._write(name)
        elif isinstance(t, (PointerType, MemberPointerType)):
            self._print_pointer(t)
        elif isinstance(t, LValueReferenceType):
            self._print_lvalue_reference(t)
        elif isinstance(t, RValueReferenceType):
            self.print_type(t.pointee)
            self._write("/*&&*/")
        elif isinstance(t, RecordType):
            self._print_record_type(t)
        elif isinstance(t, EnumType):
            self._write(mangle_name(t.decl.name))
        elif isinstance(t, TypedefType):
            self._write(self.names.mangle_type(t.decl))
        elif isinstance(t, TemplateSpecializationType):
            self._print_template_specialization_type(t)
        elif isinstance(t, TemplateTypeParmType):
            if t.decl is not None:
                self.print_decl(t.decl)
            else:
                self._write(self.templates.type_parm_name(t))
        elif isinstance(t, SubstTemplateTypeParmType):
            self.print_type(t.replacement)
        elif isinstance(t, ConstantArrayType):
            self.print_type(t.element)
            self._write(f"[{t.size}]")
        elif isinstance(t, IncompleteArrayType):
            self.print_type(t.element)
            self._write("[]")
        elif isinstance(t, FunctionProtoType):
            self.print_type(t.return_type)
            self._write(" function(")
            self._print_separated(t.params, self.print_type)
            if t.is_variadic:
                self._write(", ..." if t.params else "...")
            self._write(")")
        elif isinstance(t, ParenType):
            # parentheses are illegal around D function types
            self.print_type(t.inner)
        elif isinstance(t, AutoType):
            if not self._in_for_range_init:
                self._write("auto")
        elif isinstance(t, DecltypeType):
            self._write("typeof(")
            self.print_stmt(t.expr)
            self._write(")")
        elif isinstance(t, ElaboratedType):
            self._print_qualifier(t.qualifier)
            self.print_type(t.named)
        elif isinstance(t, DependentNameType):
            self._print_qualifier(t.qualifier)
            self._write(t.identifier)
        elif isinstance(t, InjectedClassNameType):
            self.print_type(t.specialization)
        elif isinstance(t, AttributedType):
            self.print_type(t.equivalent)
        elif isinstance(t, DecayedType):
            self.print_type(t.original)
        else:
            self._unsupported(t, "Type", "TRN-0102", t.kind_name)

    def _print_pointer(self, t) -> None:
        pointee = t.pointee
        # function pointers need no marker
        if isinstance(pointee, ParenType) and isinstance(pointee.inner, FunctionProtoType):
            self.traverse_type(pointee.inner)
            return
        self.print_type(pointee)
        if classify(pointee) is Semantic.VALUE:
            self._write("[]")

    def _print_lvalue_reference(self, t: LValueReferenceType) -> None:
        pointee = t.pointee
        value = classify(pointee) is Semantic.VALUE
        if self._ref_accepted:
            if value:
                if not self._in_func_args:
                    self._write("ref ")
                elif not (pointee.is_const or desugar(pointee).is_const):
                    # D can't bind an rvalue to a const ref: const T& is passed by copy
                    self._write("ref ")
            self.print_type(pointee)
        else:
            self.print_type(pointee)
            if value:
                self._write("[]")

    def _print_record_type(self, t: RecordType) -> None:
        decl = t.decl
        if not isinstance(decl, RecordDecl):
            self.ice(f"[ICE-0050] unknown record kind '{type(decl).__name__}'")
        self._write(self.names.mangle_type(decl))
        if isinstance(decl, ClassTemplateSpecializationDecl):
            self.templates.print_argument_list(decl.template_args)

    def _print_template_specialization_type(self, t: TemplateSpecializationType) -> None:
        # std::array<T, N> -> T[N], std::unordered_map<K, V> -> V[K]
        if is_std_array(t) and len(t.args) >= 2:
            self.templates.print_argument(t.args[0])
            self._write("[")
            self.templates.print_argument(t.args[1])
            self._write("]")
            return
        if is_std_unordered_map(t) and len(t.args) >= 2:
            self.templates.print_argument(t.args[1])
            self._write("[")
            self.templates.print_argument(t.args[0])
            self._write("]")
            return
        self._write(self.names.mangle_type(t.template_decl))
        self.templates.print_argument_list(t.args)
