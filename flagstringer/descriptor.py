"""Shared runtime descriptor bundling a name table with its decoder."""

from __future__ import annotations

import enum
from typing import Optional, Sequence

from .cache import CACHE_CAPACITY, BoundedCache, Decoder, cached_mstring
from .decode import mstring
from .runs import FlagEntry
from .table import EncodedTable, table_for_entries


class Strategy(enum.Enum):
    """Fixed renderings of the decoder, chosen once per type."""

    SPECIALIZED = "specialized"
    SPECIALIZED_CACHED = "specialized-cached"
    SHARED = "shared"
    SHARED_CACHED = "shared-cached"

    @classmethod
    def select(cls, *, cached: bool = True, shared: bool = False) -> "Strategy":
        if shared:
            return cls.SHARED_CACHED if cached else cls.SHARED
        return cls.SPECIALIZED_CACHED if cached else cls.SPECIALIZED

    @property
    def cached(self) -> bool:
        return self in (Strategy.SPECIALIZED_CACHED, Strategy.SHARED_CACHED)

    @property
    def shared(self) -> bool:
        return self in (Strategy.SHARED, Strategy.SHARED_CACHED)


class FlagStringer:
    """Callable rendering masks of one flag type.

    Each instance owns its cache, so two types never share memoised strings.
    """

    def __init__(
        self,
        table: EncodedTable,
        *,
        cached: bool = False,
        capacity: int = CACHE_CAPACITY,
        decode: Decoder = mstring,
    ) -> None:
        self.table = table
        self.cache: Optional[BoundedCache] = BoundedCache(capacity) if cached else None
        self._decode = decode

    @property
    def type_name(self) -> str:
        return self.table.type_name

    def mstring(self, mask: int) -> str:
        if self.cache is None:
            return self._decode(self.table, mask)
        return cached_mstring(self.cache, self.table, mask, self._decode)

    __call__ = mstring

    def __repr__(self) -> str:
        return f"FlagStringer({self.table.type_name!r}, cached={self.cache is not None})"


def make_stringer(
    entries: Sequence[FlagEntry],
    type_name: str,
    *,
    cached: bool = True,
    capacity: int = CACHE_CAPACITY,
) -> FlagStringer:
    """Build a :class:`FlagStringer` straight from flag entries."""

    return FlagStringer(table_for_entries(entries, type_name), cached=cached, capacity=capacity)


__all__ = ["FlagStringer", "Strategy", "make_stringer"]
