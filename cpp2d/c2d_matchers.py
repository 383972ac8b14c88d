#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

"""
Pre-pass populating the OverrideTable before rendering.

Two families of declarations need special treatment:
- `std::hash<T>` specializations: D uses `toHash`, the specialization is dropped.
- free operator functions: D only has member operators, so they are dropped
  at namespace scope and re-emitted inside the record of their operands.
"""

import re
from typing import Iterator, List

from c2d_ast import (
    ClassTemplateSpecializationDecl,
    Decl,
    FunctionDecl,
    LinkageSpecDecl,
    MethodDecl,
    NamespaceDecl,
    ParmVarDecl,
    RecordDecl,
    TranslationUnitDecl,
    walk_decls,
)
from c2d_overrides import OverrideTable, suppress
from c2d_types import canonical_spelling, non_reference, unqualified

FREE_OPERATOR_NAME = re.compile(r"operator[+\-*^\[(!&|~=/%<>]")


def operator_param_key(param: ParmVarDecl) -> str:
    """Canonical spelling of a parameter type, references and const removed."""
    return canonical_spelling(unqualified(non_reference(param.type)))


def _descendants(decls: List[Decl]) -> Iterator[Decl]:
    for d in decls:
        yield d
        if isinstance(d, (NamespaceDecl, LinkageSpecDecl, RecordDecl)):
            yield from _descendants(d.decls)


def _is_hash_specialization(decl: Decl) -> bool:
    return (
        isinstance(decl, ClassTemplateSpecializationDecl)
        and decl.name == "hash"
        and len(decl.template_args) == 1
        and any(isinstance(m, MethodDecl) and m.overloaded_operator == "()" for m in decl.decls)
    )


def _is_free_operator(decl: Decl) -> bool:
    if not isinstance(decl, FunctionDecl) or isinstance(decl, MethodDecl):
        return False
    if decl.overloaded_operator is None:
        return False
    return FREE_OPERATOR_NAME.match("operator" + decl.overloaded_operator) is not None


def collect_overrides(tu: TranslationUnitDecl, table: OverrideTable = None) -> OverrideTable:
    if table is None:
        table = OverrideTable()

    for decl in walk_decls(tu.decls):
        if isinstance(decl, NamespaceDecl) and decl.name == "std":
            for inner in _descendants(decl.decls):
                if _is_hash_specialization(inner):
                    table.register_decl(inner, suppress)

        if _is_free_operator(decl):
            table.register_decl(decl, suppress)
            if not decl.params:
                continue
            left = operator_param_key(decl.params[0])
            table.add_free_operator(left, decl)
            if len(decl.params) > 1:
                right = operator_param_key(decl.params[1])
                if right != left:
                    table.add_free_operator(right, decl, right=True)
    return table
