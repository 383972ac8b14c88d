#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from c2d_types import NestedNameSpecifier, RecordType, TemplateArgument, TypeNode

# ==========================
# Source locations
# ==========================


@dataclass(eq=False)
class SourceFile:
    path: str
    text: str = field(default="", repr=False)


@dataclass(frozen=True)
class SourceLocation:
    file: SourceFile
    offset: int
    is_macro: bool = False

    def with_offset(self, delta: int) -> "SourceLocation":
        return SourceLocation(self.file, self.offset + delta, self.is_macro)

    @property
    def line(self) -> int:
        return self.file.text.count("\n", 0, self.offset) + 1

    @property
    def column(self) -> int:
        return self.offset - (self.file.text.rfind("\n", 0, self.offset) + 1) + 1


@dataclass
class RawComment:
    text: str
    begin: Optional[SourceLocation] = None


# ==========================
# Tree definitions
# ==========================
#
# Nodes compare by identity and are keyed by id() wherever per-node
# bookkeeping is needed. `end` is exclusive.


@dataclass(eq=False)
class Node:
    begin: Optional[SourceLocation] = field(default=None, repr=False, kw_only=True)
    end: Optional[SourceLocation] = field(default=None, repr=False, kw_only=True)

    @property
    def kind_name(self) -> str:
        name = type(self).__name__
        for suffix in ("Decl", "Stmt", "Expr"):
            if name.endswith(suffix) and name != suffix:
                return name[: -len(suffix)]
        return name

    @property
    def filename(self) -> Optional[str]:
        return self.begin.file.path if self.begin is not None else None


# --- declarations ---

class AccessSpecifier(Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    NONE = "none"


class TagKind(Enum):
    CLASS = "class"
    STRUCT = "struct"
    UNION = "union"


class TemplatedKind(Enum):
    NON_TEMPLATE = "non_template"
    FUNCTION_TEMPLATE = "function_template"
    MEMBER_SPECIALIZATION = "member_specialization"
    FUNCTION_TEMPLATE_SPECIALIZATION = "function_template_specialization"
    DEPENDENT_FUNCTION_TEMPLATE_SPECIALIZATION = "dependent_function_template_specialization"
    UNKNOWN = "unknown"


class SpecializationKind(Enum):
    EXPLICIT_SPECIALIZATION = "explicit_specialization"
    IMPLICIT_INSTANTIATION = "implicit_instantiation"
    EXPLICIT_INSTANTIATION_DECLARATION = "explicit_instantiation_declaration"
    EXPLICIT_INSTANTIATION_DEFINITION = "explicit_instantiation_definition"

    @property
    def is_instantiation(self) -> bool:
        return self is not SpecializationKind.EXPLICIT_SPECIALIZATION


class InitStyle(Enum):
    COPY = "copy"  # T x = e
    CALL = "call"  # T x(e)
    LIST = "list"  # T x{e}


@dataclass(eq=False)
class Decl(Node):
    access: AccessSpecifier = field(default=AccessSpecifier.NONE, kw_only=True)
    is_implicit: bool = field(default=False, kw_only=True)
    comment: Optional[RawComment] = field(default=None, repr=False, kw_only=True)


@dataclass(eq=False)
class NamedDecl(Decl):
    name: str
    qualified_name: Optional[str] = field(default=None, kw_only=True)
    canonical_decl: Optional["NamedDecl"] = field(default=None, repr=False, kw_only=True)

    @property
    def qual_name(self) -> str:
        return self.qualified_name if self.qualified_name is not None else self.name


@dataclass(eq=False)
class TranslationUnitDecl(Decl):
    decls: List[Decl] = field(default_factory=list)
    main_file: Optional[SourceFile] = None


@dataclass(eq=False)
class NamespaceDecl(NamedDecl):
    decls: List[Decl] = field(default_factory=list)


@dataclass
class BaseSpecifier:
    type: TypeNode
    access: AccessSpecifier = AccessSpecifier.PUBLIC
    is_virtual: bool = False


@dataclass(eq=False)
class RecordDecl(NamedDecl):
    tag: TagKind = TagKind.STRUCT
    decls: List[Decl] = field(default_factory=list)
    bases: List[BaseSpecifier] = field(default_factory=list)
    is_complete: bool = True
    definition: Optional["RecordDecl"] = field(default=None, repr=False)

    def as_type(self) -> RecordType:
        return RecordType(self)


@dataclass(eq=False)
class TemplateTypeParmDecl(NamedDecl):
    default: Optional[TypeNode] = None
    depth: int = 0
    index: int = 0


@dataclass(eq=False)
class NonTypeTemplateParmDecl(NamedDecl):
    type: Optional[TypeNode] = None
    default: Optional["Expr"] = None


@dataclass(eq=False)
class TemplateTemplateParmDecl(NamedDecl):
    default: Optional[TemplateArgument] = None


@dataclass(eq=False)
class ClassTemplateDecl(NamedDecl):
    params: List[NamedDecl] = field(default_factory=list)
    templated: Optional[RecordDecl] = None


@dataclass(eq=False)
class ClassTemplateSpecializationDecl(RecordDecl):
    specialized_template: Optional[ClassTemplateDecl] = field(default=None, repr=False)
    template_args: List[TemplateArgument] = field(default_factory=list)
    specialization_kind: SpecializationKind = SpecializationKind.EXPLICIT_SPECIALIZATION


@dataclass(eq=False)
class ClassTemplatePartialSpecializationDecl(ClassTemplateSpecializationDecl):
    params: List[NamedDecl] = field(default_factory=list)


@dataclass(eq=False)
class FieldDecl(NamedDecl):
    type: TypeNode = None
    init: Optional["Expr"] = None
    bit_width: Optional[int] = None
    is_mutable: bool = False


@dataclass(eq=False)
class VarDecl(NamedDecl):
    type: TypeNode = None
    init: Optional["Expr"] = None
    init_style: InitStyle = InitStyle.COPY
    is_static: bool = False
    qualifier: Optional[NestedNameSpecifier] = None
    is_out_of_line: bool = False
    out_of_line_definition: Optional["VarDecl"] = field(default=None, repr=False)


@dataclass(eq=False)
class ParmVarDecl(NamedDecl):
    type: TypeNode = None
    default_arg: Optional["Expr"] = None


@dataclass(eq=False)
class FunctionDecl(NamedDecl):
    return_type: TypeNode = None
    params: List[ParmVarDecl] = field(default_factory=list)
    body: Optional["Stmt"] = None
    is_variadic: bool = False
    is_deleted: bool = False
    overloaded_operator: Optional[str] = None  # spelling: "==", "()", "+=", ...
    template_kind: TemplatedKind = TemplatedKind.NON_TEMPLATE
    described_template: Optional["FunctionTemplateDecl"] = field(default=None, repr=False)
    primary_template: Optional["FunctionTemplateDecl"] = field(default=None, repr=False)
    template_args: List[TemplateArgument] = field(default_factory=list)
    lparen: Optional[SourceLocation] = field(default=None, repr=False)
    rparen: Optional[SourceLocation] = field(default=None, repr=False)

    @property
    def is_definition(self) -> bool:
        return self.body is not None


@dataclass(eq=False)
class MethodDecl(FunctionDecl):
    parent: Optional[RecordDecl] = field(default=None, repr=False)
    is_static: bool = False
    is_const: bool = False
    is_virtual: bool = False
    is_pure: bool = False
    is_override: bool = False
    is_move_assignment: bool = False
    is_out_of_line: bool = False


@dataclass(eq=False)
class CtorInitializer(Node):
    init: "Expr"
    member: Optional[FieldDecl] = None
    is_written: bool = True


@dataclass(eq=False)
class ConstructorDecl(MethodDecl):
    inits: List[CtorInitializer] = field(default_factory=list)
    is_explicit: bool = False
    is_defaulted: bool = False
    is_copy: bool = False
    is_move: bool = False

    @property
    def is_default_ctor(self) -> bool:
        return all(p.default_arg is not None for p in self.params)


@dataclass(eq=False)
class DestructorDecl(MethodDecl):
    pass


@dataclass(eq=False)
class ConversionDecl(MethodDecl):
    conversion_type: Optional[TypeNode] = None


@dataclass(eq=False)
class FunctionTemplateDecl(NamedDecl):
    params: List[NamedDecl] = field(default_factory=list)
    templated: Optional[Decl] = None


@dataclass(eq=False)
class TypedefDecl(NamedDecl):
    underlying: TypeNode = None


@dataclass(eq=False)
class TypeAliasDecl(NamedDecl):
    underlying: TypeNode = None


@dataclass(eq=False)
class TypeAliasTemplateDecl(NamedDecl):
    params: List[NamedDecl] = field(default_factory=list)
    underlying: TypeNode = None


@dataclass(eq=False)
class EnumConstantDecl(NamedDecl):
    init: Optional["Expr"] = None
    enum_decl: Optional["EnumDecl"] = field(default=None, repr=False)


@dataclass(eq=False)
class EnumDecl(NamedDecl):
    enumerators: List[EnumConstantDecl] = field(default_factory=list)
    integer_type: Optional[TypeNode] = None


@dataclass(eq=False)
class LinkageSpecDecl(Decl):
    language: str = "C"
    decls: List[Decl] = field(default_factory=list)
    has_braces: bool = True


@dataclass(eq=False)
class FriendDecl(Decl):
    friend_type: Optional[TypeNode] = None
    friend_decl: Optional[Decl] = None


@dataclass(eq=False)
class UsingDecl(NamedDecl):
    pass


@dataclass(eq=False)
class UsingDirectiveDecl(Decl):
    namespace: Optional[str] = None


@dataclass(eq=False)
class NamespaceAliasDecl(NamedDecl):
    pass


@dataclass(eq=False)
class EmptyDecl(Decl):
    pass


@dataclass(eq=False)
class AccessSpecDecl(Decl):
    pass


@dataclass(eq=False)
class StaticAssertDecl(Decl):
    cond: "Expr" = None
    message: Optional["Expr"] = None


# --- statements ---

@dataclass(eq=False)
class Stmt(Node):
    pass


@dataclass(eq=False)
class CompoundStmt(Stmt):
    stmts: List[Stmt] = field(default_factory=list)
    lbrace: Optional[SourceLocation] = field(default=None, repr=False)
    rbrace: Optional[SourceLocation] = field(default=None, repr=False)


@dataclass(eq=False)
class DeclStmt(Stmt):
    decls: List[Decl]


@dataclass(eq=False)
class NullStmt(Stmt):
    pass


@dataclass(eq=False)
class IfStmt(Stmt):
    cond: "Expr"
    then: Stmt
    else_: Optional[Stmt] = None


@dataclass(eq=False)
class ForStmt(Stmt):
    init: Optional[Stmt]
    cond: Optional["Expr"]
    inc: Optional["Expr"]
    body: Stmt


@dataclass(eq=False)
class ForRangeStmt(Stmt):
    loop_var: VarDecl
    range_init: "Expr"
    body: Stmt


@dataclass(eq=False)
class WhileStmt(Stmt):
    cond: "Expr"
    body: Stmt


@dataclass(eq=False)
class DoStmt(Stmt):
    body: Stmt
    cond: "Expr"


@dataclass(eq=False)
class SwitchStmt(Stmt):
    cond: "Expr"
    body: Stmt


@dataclass(eq=False)
class CaseStmt(Stmt):
    lhs: "Expr"
    sub: Stmt


@dataclass(eq=False)
class DefaultStmt(Stmt):
    sub: Stmt


@dataclass(eq=False)
class BreakStmt(Stmt):
    pass


@dataclass(eq=False)
class ContinueStmt(Stmt):
    pass


@dataclass(eq=False)
class ReturnStmt(Stmt):
    value: Optional["Expr"] = None


@dataclass(eq=False)
class CatchStmt(Stmt):
    exception_decl: Optional[VarDecl]
    handler: CompoundStmt


@dataclass(eq=False)
class TryStmt(Stmt):
    try_block: CompoundStmt
    handlers: List[CatchStmt] = field(default_factory=list)


@dataclass(eq=False)
class GotoStmt(Stmt):
    label: str


@dataclass(eq=False)
class LabelStmt(Stmt):
    name: str
    sub: Stmt


@dataclass(eq=False)
class AsmStmt(Stmt):
    text: str


# --- expressions ---

class CastKind(Enum):
    FUNCTION_TO_POINTER_DECAY = "function_to_pointer_decay"
    CONSTRUCTOR_CONVERSION = "constructor_conversion"
    LVALUE_TO_RVALUE = "lvalue_to_rvalue"
    OTHER = "other"


class MemberNameKind(Enum):
    IDENTIFIER = "identifier"
    CONVERSION = "conversion"
    OPERATOR = "operator"


class NewInitStyle(Enum):
    NONE = "none"
    CALL = "call"
    LIST = "list"


@dataclass(eq=False)
class Expr(Stmt):
    type: Optional[TypeNode] = field(default=None, kw_only=True)


@dataclass(eq=False)
class IntegerLiteral(Expr):
    value: int


@dataclass(eq=False)
class FloatingLiteral(Expr):
    value: float
    bits: int = 64


@dataclass(eq=False)
class CharacterLiteral(Expr):
    value: int


@dataclass(eq=False)
class StringLiteral(Expr):
    value: str


@dataclass(eq=False)
class BoolLiteral(Expr):
    value: bool


@dataclass(eq=False)
class NullPtrLiteral(Expr):
    pass


@dataclass(eq=False)
class DeclRefExpr(Expr):
    decl: NamedDecl
    qualifier: Optional[NestedNameSpecifier] = None
    template_args: List[TemplateArgument] = field(default_factory=list)


@dataclass(eq=False)
class DependentScopeDeclRefExpr(Expr):
    name: str
    qualifier: Optional[NestedNameSpecifier] = None
    template_args: List[TemplateArgument] = field(default_factory=list)


@dataclass(eq=False)
class UnresolvedLookupExpr(Expr):
    name: str
    template_args: List[TemplateArgument] = field(default_factory=list)


@dataclass(eq=False)
class MemberExpr(Expr):
    base: Optional[Expr]
    member_name: str
    name_kind: MemberNameKind = MemberNameKind.IDENTIFIER
    conversion_type: Optional[TypeNode] = None
    template_args: List[TemplateArgument] = field(default_factory=list)


@dataclass(eq=False)
class CallExpr(Expr):
    callee: Expr
    args: List[Expr] = field(default_factory=list)


@dataclass(eq=False)
class MemberCallExpr(CallExpr):
    pass


@dataclass(eq=False)
class OperatorCallExpr(Expr):
    operator: str
    args: List[Expr] = field(default_factory=list)


@dataclass(eq=False)
class BinaryOperator(Expr):
    opcode: str
    lhs: Expr
    rhs: Expr


@dataclass(eq=False)
class CompoundAssignOperator(BinaryOperator):
    pass


@dataclass(eq=False)
class UnaryOperator(Expr):
    opcode: str
    operand: Expr
    is_postfix: bool = False


@dataclass(eq=False)
class ConditionalOperator(Expr):
    cond: Expr
    true_expr: Expr
    false_expr: Expr


@dataclass(eq=False)
class ParenExpr(Expr):
    sub: Expr


@dataclass(eq=False)
class ImplicitCastExpr(Expr):
    sub: Expr
    cast_kind: CastKind = CastKind.OTHER


@dataclass(eq=False)
class CStyleCastExpr(Expr):
    written_type: TypeNode
    sub: Expr


@dataclass(eq=False)
class StaticCastExpr(CStyleCastExpr):
    pass


@dataclass(eq=False)
class FunctionalCastExpr(Expr):
    written_type: TypeNode
    sub: Expr


@dataclass(eq=False)
class ConstructExpr(Expr):
    args: List[Expr] = field(default_factory=list)
    is_list_init: bool = False
    is_std_init_list: bool = False


@dataclass(eq=False)
class TemporaryObjectExpr(ConstructExpr):
    pass


@dataclass(eq=False)
class UnresolvedConstructExpr(Expr):
    written_type: TypeNode
    args: List[Expr] = field(default_factory=list)


@dataclass(eq=False)
class NewExpr(Expr):
    allocated_type: TypeNode
    is_array: bool = False
    array_size: Optional[Expr] = None
    init_style: NewInitStyle = NewInitStyle.NONE
    construct: Optional[ConstructExpr] = None
    initializer: Optional[Expr] = None


@dataclass(eq=False)
class DeleteExpr(Expr):
    argument: Expr


@dataclass(eq=False)
class ThisExpr(Expr):
    pass


@dataclass(eq=False)
class ThrowExpr(Expr):
    sub: Optional[Expr] = None


@dataclass(eq=False)
class InitListExpr(Expr):
    inits: List[Expr] = field(default_factory=list)
    is_array: bool = False


@dataclass(eq=False)
class ArraySubscriptExpr(Expr):
    lhs: Expr
    rhs: Expr


@dataclass(eq=False)
class LambdaExpr(Expr):
    params: List[ParmVarDecl] = field(default_factory=list)
    body: Optional[CompoundStmt] = None
    explicit_result_type: Optional[TypeNode] = None
    has_explicit_params: bool = False
    is_variadic: bool = False


@dataclass(eq=False)
class UnaryExprOrTypeTraitExpr(Expr):
    trait: str  # "sizeof" or "alignof"
    argument_type: Optional[TypeNode] = None
    argument_expr: Optional[Expr] = None


@dataclass(eq=False)
class DefaultArgExpr(Expr):
    expr: Expr


@dataclass(eq=False)
class DefaultInitExpr(Expr):
    expr: Optional[Expr] = None


@dataclass(eq=False)
class ParenListExpr(Expr):
    exprs: List[Expr] = field(default_factory=list)


@dataclass(eq=False)
class ImplicitValueInitExpr(Expr):
    pass


@dataclass(eq=False)
class PredefinedExpr(Expr):
    pass


@dataclass(eq=False)
class WrapperExpr(Expr):
    """Semantic wrapper with no spelling of its own (cleanups, temporaries)."""
    sub: Expr


@dataclass(eq=False)
class ExprWithCleanups(WrapperExpr):
    pass


@dataclass(eq=False)
class MaterializeTemporaryExpr(WrapperExpr):
    pass


@dataclass(eq=False)
class BindTemporaryExpr(WrapperExpr):
    pass


@dataclass(eq=False)
class SubstNonTypeTemplateParmExpr(WrapperExpr):
    pass


@dataclass(eq=False)
class StmtExpr(Expr):
    """GNU statement expression; has no D rendering."""
    body: CompoundStmt


def walk_decls(decls: List[Decl]) -> List[Any]:
    """
    Flatten namespaces and linkage blocks, yielding every declaration that is
    reachable at namespace scope.
    """
    out: List[Any] = []
    for d in decls:
        out.append(d)
        if isinstance(d, (NamespaceDecl, LinkageSpecDecl)):
            out.extend(walk_decls(d.decls))
    return out
