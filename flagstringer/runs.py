"""Normalisation of constants into runs of consecutive bits or values."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

MASK64 = (1 << 64) - 1


def single_bit_set(value: int) -> bool:
    """Return ``True`` when one and only one bit is set in ``value``."""

    return value != 0 and (value & (value - 1)) == 0


@dataclass(frozen=True)
class FlagEntry:
    """A candidate constant for one flag type.

    ``decl_order`` is the position of the declaration in the source and decides
    which name wins when several constants share a bit.
    """

    name: str
    value: int
    decl_order: int = 0

    @classmethod
    def at_bit(cls, name: str, bit: int, decl_order: int = 0) -> "FlagEntry":
        if not 0 <= bit < 64:
            raise ValueError(f"bit position out of range: {bit}")
        return cls(name=name, value=1 << bit, decl_order=decl_order)

    @property
    def in_range(self) -> bool:
        """Whether the value fits a signed or unsigned 64-bit integer."""

        return -(1 << 63) <= self.value <= MASK64

    @property
    def unsigned(self) -> int:
        return self.value & MASK64

    @property
    def bit_position(self) -> Optional[int]:
        value = self.unsigned
        if not single_bit_set(value):
            return None
        return value.bit_length() - 1


Run = Tuple[FlagEntry, ...]


def partition_runs(entries: Iterable[FlagEntry]) -> Tuple[Optional[FlagEntry], List[Run]]:
    """Return the zero-name candidate and the maximal runs of ``entries``.

    Zero-valued entries are removed, the first declared one is kept as the zero
    candidate.  Entries with several bits set, or whose value does not fit in
    64 bits, are dropped.  For entries sharing a bit the earliest declaration
    wins.  Runs are ordered by bit position.
    """

    ordered = sorted(
        (entry for entry in entries if entry.in_range),
        key=lambda entry: (entry.unsigned, entry.decl_order),
    )

    zero: Optional[FlagEntry] = None
    survivors: List[FlagEntry] = []
    for entry in ordered:
        value = entry.unsigned
        if value == 0:
            if zero is None:
                zero = entry
            continue
        if not single_bit_set(value):
            continue
        if survivors and survivors[-1].unsigned == value:
            continue
        survivors.append(entry)

    runs: List[Run] = []
    current: List[FlagEntry] = []
    for entry in survivors:
        if current and entry.unsigned != current[-1].unsigned << 1:
            runs.append(tuple(current))
            current = []
        current.append(entry)
    if current:
        runs.append(tuple(current))
    return zero, runs


def run_bits(run: Sequence[FlagEntry]) -> Tuple[int, int]:
    """Return the first and last bit position covered by ``run``."""

    first = run[0].bit_position
    last = run[-1].bit_position
    assert first is not None and last is not None
    return first, last


MAP_THRESHOLD = 10


class EnumLayout(enum.Enum):
    """How a plain enumeration is rendered, decided by its number of runs."""

    ONE_RUN = "one-run"
    MULTIPLE_RUNS = "multiple-runs"
    MAP = "map"

    @classmethod
    def select(cls, runs: Sequence[Run]) -> "EnumLayout":
        if len(runs) == 1:
            return cls.ONE_RUN
        if len(runs) <= MAP_THRESHOLD:
            return cls.MULTIPLE_RUNS
        return cls.MAP


def split_into_runs(entries: Iterable[FlagEntry]) -> List[Run]:
    """Return runs of consecutive values for a plain enumeration.

    Values are ordered numerically (signed).  For duplicated values the
    earliest declaration keeps the name.
    """

    ordered = sorted(entries, key=lambda entry: (entry.value, entry.decl_order))
    unique: List[FlagEntry] = []
    for entry in ordered:
        if unique and unique[-1].value == entry.value:
            continue
        unique.append(entry)

    runs: List[Run] = []
    current: List[FlagEntry] = []
    for entry in unique:
        if current and entry.value != current[-1].value + 1:
            runs.append(tuple(current))
            current = []
        current.append(entry)
    if current:
        runs.append(tuple(current))
    return runs


__all__ = [
    "MAP_THRESHOLD",
    "MASK64",
    "EnumLayout",
    "FlagEntry",
    "Run",
    "partition_runs",
    "run_bits",
    "single_bit_set",
    "split_into_runs",
]
