#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional, Tuple

# ==========================================================
# The C++ type system, as handed over by the front end.
# ==========================================================
#
# Type nodes are frozen and hashable: two structurally equal types compare
# equal. Declarations referenced from a type hash by identity.


@dataclass(frozen=True)
class TypeNode:
    """
    Base class for all C++ types.
    Used only as a common marker; concrete types are dataclasses below.
    """
    is_const: bool = field(default=False, kw_only=True)

    @property
    def kind_name(self) -> str:
        name = type(self).__name__
        return name[:-4] if name.endswith("Type") else name


@dataclass(frozen=True)
class BuiltinType(TypeNode):
    kind: str  # C++ spelling: "int", "unsigned long long", "wchar_t", ...


@dataclass(frozen=True)
class PointerType(TypeNode):
    pointee: TypeNode


@dataclass(frozen=True)
class MemberPointerType(TypeNode):
    pointee: TypeNode
    class_type: Optional[TypeNode] = None


@dataclass(frozen=True)
class LValueReferenceType(TypeNode):
    pointee: TypeNode


@dataclass(frozen=True)
class RValueReferenceType(TypeNode):
    pointee: TypeNode


@dataclass(frozen=True)
class RecordType(TypeNode):
    decl: Any  # RecordDecl


@dataclass(frozen=True)
class EnumType(TypeNode):
    decl: Any  # EnumDecl


@dataclass(frozen=True)
class TypedefType(TypeNode):
    decl: Any  # TypedefDecl or TypeAliasDecl


@dataclass(frozen=True)
class TemplateSpecializationType(TypeNode):
    template_decl: Any  # ClassTemplateDecl, TypeAliasTemplateDecl, ...
    args: Tuple["TemplateArgument", ...] = ()
    desugared: Optional[TypeNode] = None


@dataclass(frozen=True)
class TemplateTypeParmType(TypeNode):
    decl: Any = None  # TemplateTypeParmDecl
    depth: int = 0
    index: int = 0
    identifier: Optional[str] = None


@dataclass(frozen=True)
class SubstTemplateTypeParmType(TypeNode):
    replacement: TypeNode


@dataclass(frozen=True)
class ConstantArrayType(TypeNode):
    element: TypeNode
    size: int


@dataclass(frozen=True)
class IncompleteArrayType(TypeNode):
    element: TypeNode


@dataclass(frozen=True)
class FunctionProtoType(TypeNode):
    return_type: TypeNode
    params: Tuple[TypeNode, ...] = ()
    is_variadic: bool = False


@dataclass(frozen=True)
class ParenType(TypeNode):
    inner: TypeNode


@dataclass(frozen=True)
class AutoType(TypeNode):
    deduced: Optional[TypeNode] = None


@dataclass(frozen=True)
class DecltypeType(TypeNode):
    expr: Any  # Expr


@dataclass(frozen=True)
class ElaboratedType(TypeNode):
    named: TypeNode
    qualifier: Optional["NestedNameSpecifier"] = None


@dataclass(frozen=True)
class DependentNameType(TypeNode):
    identifier: str
    qualifier: Optional["NestedNameSpecifier"] = None


@dataclass(frozen=True)
class InjectedClassNameType(TypeNode):
    specialization: TypeNode


@dataclass(frozen=True)
class AttributedType(TypeNode):
    equivalent: TypeNode


@dataclass(frozen=True)
class DecayedType(TypeNode):
    original: TypeNode


@dataclass(frozen=True)
class VectorType(TypeNode):
    """SIMD vector extension type; has no D rendering."""
    element: TypeNode
    size: int


# --- nested name specifiers ---

class NNSKind(Enum):
    NAMESPACE = "namespace"
    NAMESPACE_ALIAS = "namespace_alias"
    GLOBAL = "global"
    SUPER = "super"
    TYPE_SPEC = "type_spec"
    IDENTIFIER = "identifier"


@dataclass(frozen=True)
class NestedNameSpecifier:
    kind: NNSKind
    prefix: Optional["NestedNameSpecifier"] = None
    type: Optional[TypeNode] = None
    identifier: Optional[str] = None


# --- template arguments ---

class TemplateArgumentKind(Enum):
    NULL = "null"
    TYPE = "type"
    DECLARATION = "declaration"
    NULLPTR = "nullptr"
    INTEGRAL = "integral"
    TEMPLATE = "template"
    EXPRESSION = "expression"
    PACK = "pack"


@dataclass(frozen=True)
class TemplateArgument:
    kind: TemplateArgumentKind
    type: Optional[TypeNode] = None
    decl: Any = None
    integral: Optional[int] = None
    expr: Any = None
    pack: Tuple["TemplateArgument", ...] = ()

    @staticmethod
    def of_type(t: TypeNode) -> "TemplateArgument":
        return TemplateArgument(TemplateArgumentKind.TYPE, type=t)

    @staticmethod
    def of_integral(value: int) -> "TemplateArgument":
        return TemplateArgument(TemplateArgumentKind.INTEGRAL, integral=value)


# --- type queries ---

def desugar(t: TypeNode) -> TypeNode:
    """
    Strip typedefs and other sugar until a structural type is reached.
    Qualifiers of the sugar are not propagated (callers that care about const
    inspect the outer type).
    """
    while True:
        if isinstance(t, TypedefType):
            t = t.decl.underlying
        elif isinstance(t, ElaboratedType):
            t = t.named
        elif isinstance(t, ParenType):
            t = t.inner
        elif isinstance(t, AttributedType):
            t = t.equivalent
        elif isinstance(t, DecayedType):
            t = t.original
        elif isinstance(t, SubstTemplateTypeParmType):
            t = t.replacement
        elif isinstance(t, InjectedClassNameType):
            t = t.specialization
        elif isinstance(t, TemplateSpecializationType) and t.desugared is not None:
            t = t.desugared
        elif isinstance(t, AutoType) and t.deduced is not None:
            t = t.deduced
        else:
            return t


def unqualified(t: TypeNode) -> TypeNode:
    return replace(t, is_const=False) if t.is_const else t


def with_const(t: TypeNode) -> TypeNode:
    return t if t.is_const else replace(t, is_const=True)


def non_reference(t: TypeNode) -> TypeNode:
    d = desugar(t)
    if isinstance(d, (LValueReferenceType, RValueReferenceType)):
        return d.pointee
    return t


def is_pointer(t: Optional[TypeNode]) -> bool:
    return t is not None and isinstance(desugar(t), PointerType)


def pointee_of(t: TypeNode) -> Optional[TypeNode]:
    d = desugar(t)
    if isinstance(d, (PointerType, MemberPointerType, LValueReferenceType, RValueReferenceType)):
        return d.pointee
    return None


def record_decl_of(t: Optional[TypeNode]) -> Any:
    """
    Return the record declaration named by `t`, looking through one level of
    lvalue reference. None if `t` does not name a record.
    """
    if t is None:
        return None
    d = desugar(t)
    if isinstance(d, LValueReferenceType):
        d = desugar(d.pointee)
    if isinstance(d, RecordType):
        return d.decl
    return None


# --- canonical spelling ---

def _spell_argument(arg: TemplateArgument) -> str:
    kind = arg.kind
    if kind is TemplateArgumentKind.TYPE and arg.type is not None:
        return canonical_spelling(arg.type)
    if kind is TemplateArgumentKind.INTEGRAL:
        return str(arg.integral)
    if kind is TemplateArgumentKind.NULLPTR:
        return "nullptr"
    if kind is TemplateArgumentKind.DECLARATION and arg.decl is not None:
        return arg.decl.name
    if kind is TemplateArgumentKind.TEMPLATE and arg.decl is not None:
        return arg.decl.qual_name
    if kind is TemplateArgumentKind.PACK:
        return ", ".join(_spell_argument(a) for a in arg.pack)
    return ""


def _spell_arguments(args) -> str:
    return "<" + ", ".join(_spell_argument(a) for a in args) + ">"


def canonical_spelling(t: TypeNode, *, keep_const: bool = False) -> str:
    """
    Clang-like canonical spelling of a type, e.g. "class std::vector<int>",
    "int *", "const struct Point &".

    The spelling is what container recognition and free-operator indexing
    key on.
    """
    d = desugar(t)
    if d is not t:
        is_const = keep_const and (t.is_const or d.is_const)
        return ("const " if is_const else "") + canonical_spelling(unqualified(d))

    prefix = "const " if keep_const and t.is_const else ""
    if isinstance(d, BuiltinType):
        body = d.kind
    elif isinstance(d, PointerType):
        body = f"{canonical_spelling(d.pointee, keep_const=True)} *"
    elif isinstance(d, MemberPointerType):
        cls = canonical_spelling(d.class_type) if d.class_type is not None else "?"
        body = f"{canonical_spelling(d.pointee, keep_const=True)} {cls}::*"
    elif isinstance(d, LValueReferenceType):
        body = f"{canonical_spelling(d.pointee, keep_const=True)} &"
    elif isinstance(d, RValueReferenceType):
        body = f"{canonical_spelling(d.pointee, keep_const=True)} &&"
    elif isinstance(d, RecordType):
        decl = d.decl
        body = f"{decl.tag.value} {decl.qual_name}"
        spec_args = getattr(decl, "template_args", None)
        if spec_args:
            body += _spell_arguments(spec_args)
    elif isinstance(d, EnumType):
        body = f"enum {d.decl.qual_name}"
    elif isinstance(d, TemplateSpecializationType):
        templated = getattr(d.template_decl, "templated", None)
        tag = templated.tag.value if templated is not None and hasattr(templated, "tag") else "class"
        body = f"{tag} {d.template_decl.qual_name}{_spell_arguments(d.args)}"
    elif isinstance(d, TemplateTypeParmType):
        body = f"type-parameter-{d.depth}-{d.index}"
    elif isinstance(d, ConstantArrayType):
        body = f"{canonical_spelling(d.element, keep_const=True)} [{d.size}]"
    elif isinstance(d, IncompleteArrayType):
        body = f"{canonical_spelling(d.element, keep_const=True)} []"
    elif isinstance(d, FunctionProtoType):
        params = [canonical_spelling(p, keep_const=True) for p in d.params]
        if d.is_variadic:
            params.append("...")
        body = f"{canonical_spelling(d.return_type, keep_const=True)} ({', '.join(params)})"
    elif isinstance(d, AutoType):
        body = "auto"
    elif isinstance(d, DependentNameType):
        body = d.identifier
    elif isinstance(d, VectorType):
        body = f"{canonical_spelling(d.element)} __attribute__((vector_size({d.size})))"
    else:
        body = d.kind_name
    return prefix + body
