#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from c2d_ast import RecordDecl
from c2d_types import (
    LValueReferenceType,
    PointerType,
    RValueReferenceType,
    TypeNode,
    desugar,
    unqualified,
)

# ==========================================================
# Operator names
# ==========================================================

# C++ operator spelling -> D method name, for operators D has no direct
# overload for (or where D merges several C++ operators into one).
OPERATOR_METHOD_NAMES: Dict[str, str] = {
    "==": "opEquals",
    "!": "_opExclaim",
    "()": "opCall",
    "[]": "opIndex",
    "=": "opAssign",
    "<": "_opLess",
    "<=": "_opLessEqual",
    ">": "_opGreater",
    ">=": "_opGreaterEqual",
}

# Post-increment / post-decrement, recognized by their dummy int argument.
POSTFIX_METHOD_NAMES: Dict[str, str] = {
    "++": "_opPostPlusplus",
    "--": "_opPostMinusMinus",
}


@dataclass
class OperatorMethod:
    """D spelling of an overloaded operator: method name plus optional template parameters."""
    name: str
    template_params: str = ""


def operator_method(spelling: str, nb_args: int, right: bool = False) -> OperatorMethod:
    """
    Map an overloaded C++ operator to its D method.

    Args:
        spelling:   C++ operator spelling, e.g. "+", "+=", "[]".
        nb_args:    Operand count, including the implicit object of a method.
        right:      True when the operator is emitted inside the record of its
                    right operand; adds the "Right" suffix.
    """
    suffix = "Right" if right else ""
    if spelling in OPERATOR_METHOD_NAMES:
        return OperatorMethod(OPERATOR_METHOD_NAMES[spelling] + suffix)
    if spelling in POSTFIX_METHOD_NAMES and nb_args == 2:
        return OperatorMethod(POSTFIX_METHOD_NAMES[spelling] + suffix)
    if nb_args == 1:
        return OperatorMethod("opUnary" + suffix, f'string op: "{spelling}"')
    if spelling.endswith("="):
        # compound assignment: "+=" -> opOpAssign!"+"
        return OperatorMethod("opOpAssign", f'string op: "{spelling[:-1]}"')
    return OperatorMethod("opBinary" + suffix, f'string op: "{spelling}"')


# ==========================================================
# Relation bookkeeping
# ==========================================================


def relation_key(t: TypeNode) -> TypeNode:
    """
    Normalize an operand type for relation bookkeeping: a reference or a
    `this` pointer stands for the type it designates, qualifiers and sugar
    (elaborated names, typedefs) are ignored.
    """
    d = desugar(t)
    if isinstance(d, (LValueReferenceType, RValueReferenceType, PointerType)):
        return unqualified(desugar(d.pointee))
    return unqualified(d)


@dataclass
class RelationInfo:
    has_op_less: bool = False
    has_op_equal: bool = False


@dataclass
class ClassInfo:
    relations: Dict[TypeNode, RelationInfo] = field(default_factory=dict)
    has_op_exclaim: bool = False
    has_bool_conv: bool = False
    closed: bool = False

    def relation(self, other: TypeNode) -> RelationInfo:
        key = relation_key(other)
        info = self.relations.get(key)
        if info is None:
            info = RelationInfo()
            self.relations[key] = info
        return info


@dataclass
class OpCmpMember:
    """`int opCmp(ref in <other_type> other)` built from _opLess and opEquals."""
    other_type: TypeNode


@dataclass
class BoolCastMember:
    """`bool opCast(T : bool)()` built from _opExclaim."""
    pass


class ClassInfoMap:
    """Per-record ClassInfo, created lazily and keyed by record identity."""

    def __init__(self):
        self._infos: Dict[int, ClassInfo] = {}

    def get(self, record: RecordDecl) -> ClassInfo:
        key = id(record)
        info = self._infos.get(key)
        if info is None:
            info = ClassInfo()
            self._infos[key] = info
        return info

    def __contains__(self, record: RecordDecl) -> bool:
        return id(record) in self._infos

    def record_operator(
            self,
            spelling: str,
            left_record: Optional[RecordDecl],
            left_type: Optional[TypeNode],
            right_record: Optional[RecordDecl],
            right_type: Optional[TypeNode],
    ) -> None:
        """
        Note the side effects of an overloaded operator on its operands'
        ClassInfo: equality and ordering are recorded on both operands,
        logical not on the left one only.
        """
        if spelling == "==":
            if left_record is not None and right_type is not None:
                self.get(left_record).relation(right_type).has_op_equal = True
            if right_record is not None and left_type is not None:
                self.get(right_record).relation(left_type).has_op_equal = True
        elif spelling == "<":
            if left_record is not None and right_type is not None:
                self.get(left_record).relation(right_type).has_op_less = True
            if right_record is not None and left_type is not None:
                self.get(right_record).relation(left_type).has_op_less = True
        elif spelling == "!":
            if left_record is not None:
                self.get(left_record).has_op_exclaim = True

    def record_bool_conversion(self, record: RecordDecl) -> None:
        self.get(record).has_bool_conv = True

    def synthesize(self, record: RecordDecl) -> List[object]:
        """
        Members to append when closing `record`'s body. The record is marked
        closed: later calls return nothing.
        """
        if id(record) not in self._infos:
            return []
        info = self._infos[id(record)]
        if info.closed:
            return []
        info.closed = True

        members: List[object] = []
        for other, relation in info.relations.items():
            if relation.has_op_less and relation.has_op_equal:
                members.append(OpCmpMember(other))
        if info.has_op_exclaim and not info.has_bool_conv:
            members.append(BoolCastMember())
        return members
