#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from c2d_ast import AccessSpecifier, TagKind

BITFIELD_WORD_SIZES = (8, 16, 32, 64)


def round_up_storage(bits: int) -> int:
    """
    Smallest of 8/16/32/64 holding `bits`; larger totals round up to a
    multiple of 64. An empty run (zero-width separators only) needs no storage.
    """
    if bits <= 0:
        return 0
    for size in BITFIELD_WORD_SIZES:
        if bits <= size:
            return size
    return (bits + 63) // 64 * 64


def padding_width(bits: int) -> int:
    return round_up_storage(bits) - bits


@dataclass
class BitfieldRun:
    """
    Accumulates the widths of consecutive bit-fields so that the run can be
    closed with the padding `std.bitmanip.bitfields` requires.
    """
    total: int = 0
    active: bool = False

    def add(self, width: int) -> bool:
        """Add a bit-field; returns True if it opens a new run."""
        opened = not self.active
        self.active = True
        self.total += width
        return opened

    def close(self) -> int:
        """End the run and return the padding width (0 when none is needed)."""
        padding = padding_width(self.total)
        self.total = 0
        self.active = False
        return padding


def closing_entry(padding: int) -> str:
    if padding == 0:
        return "));"
    return f'\tuint, "", {padding}));'


def default_access(tag: TagKind) -> AccessSpecifier:
    return AccessSpecifier.PRIVATE if tag is TagKind.CLASS else AccessSpecifier.PUBLIC


def effective_access(access: AccessSpecifier) -> AccessSpecifier:
    # members with no access of their own are printed public
    return AccessSpecifier.PUBLIC if access is AccessSpecifier.NONE else access


class VisibilityTracker:
    """
    Tracks the access level in effect while members of one record are
    emitted and tells when a label is needed.
    """

    def __init__(self, tag: TagKind):
        self.current = default_access(tag)

    def update(self, access: AccessSpecifier) -> Optional[str]:
        """Return the label to print before a member with `access`, or None."""
        access = effective_access(access)
        if access is self.current:
            return None
        self.current = access
        return f"{access.value}:"
