#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from c2d_ast import TranslationUnitDecl
from c2d_context import TranslationContext
from c2d_diagnostics import Diagnostic
from c2d_logger import log_info, log_stage
from c2d_matchers import collect_overrides
from c2d_names import ImportSet
from c2d_overrides import OverrideTable
from c2d_printer import DPrinter


@dataclass
class TranslationResult:
    """
    Output of one translation unit.

    Contains:
      - the D code of the unit's own declarations
      - the modules (and the symbols that caused them) the code needs
      - diagnostics reported while printing
    """
    code: str
    imports: ImportSet = field(default_factory=ImportSet)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)

    def has_warnings(self) -> bool:
        return any(d.kind == "warning" for d in self.diagnostics)

    def error_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.kind == "error")

    def warning_count(self) -> int:
        return sum(1 for d in self.diagnostics if d.kind == "warning")

    def render_imports(self) -> str:
        """One `import m; //sym1 sym2 ` line per module, sorted by module."""
        lines = []
        for module, symbols in self.imports.items():
            lines.append(f"import {module}; //" + "".join(f"{s} " for s in symbols))
        return "\n".join(lines)

    def render(self, module_name: str | None = None) -> str:
        """
        Full D source file: optional module declaration, imports, then the code.
        """
        head = f"module {module_name};\n" if module_name else ""
        imports = self.render_imports()
        if imports:
            head += imports + "\n"
        return head + "\n\n" + self.code


def translate_unit(
        tu: TranslationUnitDecl,
        includes: Iterable[str] = (),
        overrides: OverrideTable | None = None,
        context: TranslationContext | None = None,
) -> TranslationResult:
    """
    Translate one C++ translation unit to D.

      1. Collect overrides (std::hash specializations, free operators),
         unless the caller provides its own table.
      2. Print the unit's declarations with a fresh DPrinter.

    Unsupported constructs end up in the diagnostics; only internal
    consistency violations raise (InternalCompilerError).
    """
    context = context or TranslationContext.default()
    unit = tu.main_file.path if tu.main_file is not None else None

    if overrides is None:
        log_stage(context, "Collecting overrides", unit)
        overrides = collect_overrides(tu)

    log_stage(context, "Printing", unit)
    printer = DPrinter(context, overrides, includes)
    code = printer.translate(tu)

    result = TranslationResult(code=code, imports=printer.imports, diagnostics=list(printer.diagnostics))
    log_info(
        context,
        f"Translated with {result.error_count()} error(s), {result.warning_count()} warning(s), "
        f"{len(result.imports)} import(s)",
    )
    return result
