#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

"""
Semantic classification of C++ types.

D separates value types (struct, builtins, arrays) from reference types
(class, delegates, associative arrays). Every C++ type is assigned one of
the three behaviours so that the renderer can choose between `[]` suffixes,
`new`, `.dup()` and plain copies.
"""

from enum import Enum
from typing import List, Tuple

from c2d_types import (
    AutoType,
    FunctionProtoType,
    InjectedClassNameType,
    RecordType,
    TemplateSpecializationType,
    TypeNode,
    canonical_spelling,
    desugar,
)


class Semantic(Enum):
    VALUE = "value"
    REFERENCE = "reference"
    ASSOC_ARRAY = "assoc_array"


# Canonical-name prefixes, checked in order. Matching is a literal prefix test
# on the canonical spelling; a typedef to one of these is only recognized if
# the front end canonicalizes it.
SEMANTIC_PREFIXES: List[Tuple[str, Semantic]] = [
    ("class SafeInt<", Semantic.VALUE),
    ("class boost::array<", Semantic.VALUE),
    ("class std::basic_string<", Semantic.VALUE),
    ("class boost::optional<", Semantic.VALUE),
    ("class boost::property_tree::basic_ptree<", Semantic.VALUE),
    ("class std::vector<", Semantic.VALUE),
    ("class std::shared_ptr<", Semantic.VALUE),
    ("class std::scoped_ptr<", Semantic.VALUE),
    ("class std::unordered_map<", Semantic.ASSOC_ARRAY),
]

ARRAY_PREFIXES = ("class std::array<", "class boost::array<")
UNORDERED_MAP_PREFIXES = ("class std::unordered_map<",)


def is_std_array(t: TypeNode) -> bool:
    return canonical_spelling(t).startswith(ARRAY_PREFIXES)


def is_std_unordered_map(t: TypeNode) -> bool:
    return canonical_spelling(t).startswith(UNORDERED_MAP_PREFIXES)


def classify(t: TypeNode) -> Semantic:
    """
    Return the D semantic of `t`.

    Rules, first match wins:
    1. a prefix of the canonical spelling listed in SEMANTIC_PREFIXES;
    2. std::array look-alikes are VALUE;
    3. `auto` as written is a VALUE;
    4. class/struct records and function types are REFERENCE;
    5. everything else is a VALUE.
    """
    name = canonical_spelling(t)
    for prefix, semantic in SEMANTIC_PREFIXES:
        if name.startswith(prefix):
            return semantic
    if name.startswith(ARRAY_PREFIXES):
        return Semantic.VALUE

    if isinstance(t, AutoType):
        return Semantic.VALUE
    d = desugar(t)
    if isinstance(d, RecordType):
        return Semantic.VALUE if d.decl.tag.value == "union" else Semantic.REFERENCE
    if isinstance(d, (TemplateSpecializationType, InjectedClassNameType, FunctionProtoType)):
        return Semantic.REFERENCE
    return Semantic.VALUE
