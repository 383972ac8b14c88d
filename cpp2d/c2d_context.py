"""
Translation context for cross-cutting translator options.

This module defines the TranslationContext dataclass which holds options
that affect more than one part of the translation (rendering, diagnostics,
logging).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Hierarchical logging levels for the translator."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages (default)
    INFO = 10       # General progress messages
    DEBUG = 30      # Detailed diagnostic information


@dataclass
class TranslationContext:
    """
    Holds cross-cutting options that affect multiple translation stages.

    Attributes:
        port_const:             If True, C++ const is carried over to D for every type
                                and `const` is appended to const methods. Otherwise
                                only builtin types keep their const qualifier.
        log_rich_format:        If True, emit logs in rich format: may include log level, timestamps, etc.
        log_level:              Current logging level.
    """
    port_const: bool = False
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @staticmethod
    def default() -> 'TranslationContext':
        """Create a TranslationContext with default settings."""
        return TranslationContext(log_level=LogLevel.WARNING)
