"""Serialisation of flag runs into a compact name table.

An :class:`EncodedTable` packs every flag name of one type into a single blob.
``offsets`` holds one entry per step of the decode loop: the UTF-8 byte length
of the next name, or ``0`` to mark the gap between two runs.  For every gap
``skips`` stores how many extra shifts are needed to reach the next run, minus
one.  Tables made of a single run carry no skips at all and are walked without
looking for gap sentinels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from .exceptions import EncodingTooLarge
from .runs import FlagEntry, Run, partition_runs, run_bits

LOGGER = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255

Step = Tuple[int, int, int]


@dataclass(frozen=True)
class EncodedTable:
    """Immutable name table for one flag type."""

    type_name: str
    zero_name: str
    blob: str
    offsets: Tuple[int, ...]
    skips: Tuple[int, ...] = ()
    first_bit: int = 1
    _raw: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "offsets", tuple(self.offsets))
        object.__setattr__(self, "skips", tuple(self.skips))
        object.__setattr__(self, "_raw", self.blob.encode("utf-8"))

    @property
    def has_gaps(self) -> bool:
        return bool(self.skips)

    def name_at(self, start: int, end: int) -> str:
        return self._raw[start:end].decode("utf-8")

    def steps(self) -> Iterator[Step]:
        """Yield ``(bit, start, end)`` for every name in ascending bit order."""

        if self.has_gaps:
            return self._steps_with_gaps()
        return self._steps_contiguous()

    def _steps_contiguous(self) -> Iterator[Step]:
        v = self.first_bit
        p1 = 0
        for o in self.offsets:
            p0 = p1
            p1 += o
            yield v, p0, p1
            v <<= 1

    def _steps_with_gaps(self) -> Iterator[Step]:
        v = self.first_bit
        si = 0
        p1 = 0
        for o in self.offsets:
            if o == 0:
                v <<= self.skips[si] - 1
                si += 1
            else:
                p0 = p1
                p1 += o
                yield v, p0, p1
            v <<= 1


def shift_count(prev: int, nxt: int) -> int:
    """Return how many left shifts ``prev`` needs to meet or exceed ``nxt``."""

    count = 0
    while prev < nxt:
        count += 1
        prev <<= 1
    return count


def encode_runs(runs: Sequence[Run]) -> Tuple[str, List[int], List[int]]:
    """Return the name blob, offsets and skips for ``runs``."""

    names: List[str] = []
    offsets: List[int] = []
    skips: List[int] = []
    for index, run in enumerate(runs):
        for entry in run:
            length = len(entry.name.encode("utf-8"))
            if length > MAX_NAME_LENGTH:
                raise EncodingTooLarge(entry.name, length)
            names.append(entry.name)
            offsets.append(length)
        if index < len(runs) - 1:
            skips.append(shift_count(run[-1].unsigned, runs[index + 1][0].unsigned) - 1)
            offsets.append(0)
    return "".join(names), offsets, skips


def build_table(
    runs: Sequence[Run],
    type_name: str,
    zero: Optional[FlagEntry] = None,
) -> EncodedTable:
    """Build the :class:`EncodedTable` for ``runs``.

    Raises :class:`EncodingTooLarge` when a name exceeds ``MAX_NAME_LENGTH``
    bytes.
    """

    if not runs:
        raise ValueError(f"no single-bit flags for type {type_name}")
    blob, offsets, skips = encode_runs(runs)
    first, _ = run_bits(runs[0])
    zero_name = zero.name if zero is not None else f"{type_name}(0)"
    LOGGER.debug(
        "encoded %s: %d names, %d runs, %d bytes",
        type_name,
        len(offsets) - len(skips),
        len(runs),
        len(blob.encode("utf-8")),
    )
    return EncodedTable(
        type_name=type_name,
        zero_name=zero_name,
        blob=blob,
        offsets=tuple(offsets),
        skips=tuple(skips),
        first_bit=1 << first,
    )


def table_for_entries(entries: Sequence[FlagEntry], type_name: str) -> EncodedTable:
    """Partition ``entries`` and build their table in one step."""

    zero, runs = partition_runs(entries)
    return build_table(runs, type_name, zero)


__all__ = [
    "MAX_NAME_LENGTH",
    "EncodedTable",
    "build_table",
    "encode_runs",
    "shift_count",
    "table_for_entries",
]
