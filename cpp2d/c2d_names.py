#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from c2d_ast import DeclRefExpr, NamedDecl

# D keywords (and a druntime class) that are ordinary identifiers in C++.
D_RESERVED_WORDS: Set[str] = {
    "version", "out", "in", "ref", "debug", "function", "Exception",
}

# Qualified C++ name -> dotted D path. The last component is the D spelling;
# everything before the last dot is the module to import.
TYPE_REMAP: Dict[str, str] = {
    "boost::optional": "std.typecons.Nullable",
    "std::vector": "cpp_std.vector",
    "std::set": "std.container.rbtree.RedBlackTree",
    "boost::shared_mutex": "core.sync.rwmutex.ReadWriteMutex",
    "boost::mutex": "core.sync.mutex.Mutex",
    "std::allocator": "cpp_std.allocator",
    "time_t": "core.stdc.time.time_t",
    "intptr_t": "core.stdc.stdint.intptr_t",
    "int8_t": "core.stdc.stdint.int8_t",
    "uint8_t": "core.stdc.stdint.uint8_t",
    "int16_t": "core.stdc.stdint.int16_t",
    "uint16_t": "core.stdc.stdint.uint16_t",
    "int32_t": "core.stdc.stdint.int32_t",
    "uint32_t": "core.stdc.stdint.uint32_t",
    "int64_t": "core.stdc.stdint.int64_t",
    "uint64_t": "core.stdc.stdint.uint64_t",
    "SafeInt": "std.experimental.safeint.SafeInt",
    "RedBlackTree": "std.container.rbtree",
    "std::map": "cpp_std.map",
    "std::string": "string",
    "std::ostream": "std.stdio.File",
}


def mangle_name(name: str) -> str:
    """
    Escape an identifier that is reserved in D by appending '_'.
    Applied once; the result is never escaped again.
    """
    if name in D_RESERVED_WORDS:
        return f"{name}_"
    return name


def include_to_module(include: str) -> str:
    """"foo/Bar.hpp" -> "foo.bar"."""
    if include.endswith(".hpp"):
        include = include[:-4]
    elif include.endswith(".h"):
        include = include[:-2]
    return include.lower().replace("/", ".").replace("\\", ".")


def _is_path_suffix(path: str, include: str) -> bool:
    if not include or not path.endswith(include):
        return False
    pos = len(path) - len(include)
    return pos == 0 or path[pos - 1] in "/\\"


class ImportSet:
    """
    Monotonic mapping module -> set of symbols that caused the import.
    The caller renders it as import lines in front of the translated code.
    """

    def __init__(self):
        self._modules: Dict[str, Set[str]] = {}

    def add(self, module: str, symbol: str) -> None:
        self._modules.setdefault(module, set()).add(symbol)

    def __contains__(self, module: str) -> bool:
        return module in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._modules))

    def symbols(self, module: str) -> Set[str]:
        return set(self._modules.get(module, ()))

    def items(self) -> List[Tuple[str, List[str]]]:
        return [(m, sorted(self._modules[m])) for m in sorted(self._modules)]


class NameResolver:
    """
    Turns C++ declarations into D identifiers and records the D modules the
    translated code needs.

    - Remapped library types (TYPE_REMAP) print their D name and import their module.
    - Declarations coming from one of the unit's includes import the module
      derived from that include.
    - Everything else is printed as-is, modulo D reserved words.

    Import registration is suspended while `in_macro` is set.
    """

    def __init__(self, includes: Iterable[str], imports: Optional[ImportSet] = None):
        self.includes: List[str] = sorted(set(includes))
        self.imports = imports if imports is not None else ImportSet()
        self.in_macro = False
        self._anonymous: Dict[int, str] = {}

    def include_file(self, decl_file: Optional[str], symbol: str) -> None:
        """
        Record an import if `decl_file` is one of the unit's includes.
        The first include (in sorted order) that is a path suffix wins.
        """
        if self.in_macro or not decl_file:
            return
        for include in self.includes:
            if _is_path_suffix(decl_file, include):
                self.imports.add(include_to_module(include), symbol)
                break

    def mangle_type(self, decl: NamedDecl) -> str:
        canonical = decl.canonical_decl if decl.canonical_decl is not None else decl
        qual_name = canonical.qual_name

        remapped = TYPE_REMAP.get(qual_name)
        if remapped is not None:
            module, _, d_name = remapped.rpartition(".")
            if module and not self.in_macro:
                self.imports.add(module, qual_name)
            return d_name

        self.include_file(canonical.filename or decl.filename, qual_name)
        return mangle_name(decl.name)

    def mangle_var(self, expr: DeclRefExpr) -> str:
        name = self.name_of(expr.decl)
        self.include_file(expr.decl.filename, name)
        return mangle_name(name)

    def name_of(self, decl: NamedDecl) -> str:
        """Declared name, or a stable `var<N>` for anonymous declarations."""
        if decl.name:
            return decl.name
        key = id(decl)
        if key not in self._anonymous:
            self._anonymous[key] = f"var{len(self._anonymous)}"
        return self._anonymous[key]
