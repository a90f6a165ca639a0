"""Rendering of bitmask values into flag-name combinations."""

from __future__ import annotations

from typing import List

from .runs import MASK64
from .table import EncodedTable


def widen(mask: int) -> int:
    """Return ``mask`` as an unsigned 64-bit value."""

    return mask & MASK64


def mstring(table: EncodedTable, mask: int) -> str:
    """Return the display string of ``mask`` according to ``table``.

    A single matching flag is returned bare, several are joined by ``|`` inside
    parentheses in ascending bit order.  Bits the table does not know about are
    rendered as ``Type(0x..)``.  Every mask produces a string.
    """

    mask = widen(mask)
    if mask == 0:
        return table.zero_name

    parts: List[str] = []
    for v, p0, p1 in table.steps():
        if v & mask == 0:
            continue
        mask ^= v
        name = table.name_at(p0, p1)
        if not parts and mask == 0:
            return name
        parts.append(name)
        if mask == 0:
            return "(" + "|".join(parts) + ")"

    remainder = f"{table.type_name}(0x{mask:x})"
    if not parts:
        return remainder
    parts.append(remainder)
    return "(" + "|".join(parts) + ")"


__all__ = ["mstring", "widen"]
