from __future__ import annotations

from flagstringer.decode import mstring
from flagstringer.descriptor import FlagStringer, Strategy, make_stringer
from flagstringer.table import table_for_entries


def test_strategy_selection() -> None:
    assert Strategy.select() is Strategy.SPECIALIZED_CACHED
    assert Strategy.select(cached=False) is Strategy.SPECIALIZED
    assert Strategy.select(shared=True) is Strategy.SHARED_CACHED
    assert Strategy.select(cached=False, shared=True) is Strategy.SHARED
    assert Strategy.SHARED_CACHED.cached and Strategy.SHARED_CACHED.shared
    assert not Strategy.SPECIALIZED.cached


def test_stringer_matches_plain_decode(gap_entries) -> None:
    stringer = make_stringer(gap_entries, "Gap")
    table = stringer.table

    for mask in range(0, 1 << 13):
        assert stringer(mask) == mstring(table, mask)


def test_uncached_stringer_has_no_cache(days_entries) -> None:
    stringer = make_stringer(days_entries, "Days", cached=False)

    assert stringer.cache is None
    assert stringer.mstring(1 << 0 | 1 << 6) == "(Monday|Sunday)"
    assert repr(stringer) == "FlagStringer('Days', cached=False)"


def test_each_descriptor_owns_its_cache(days_entries, gap_entries) -> None:
    days = make_stringer(days_entries, "Days")
    gap = make_stringer(gap_entries, "Gap")

    days(1 << 2)
    gap(1 << 2)

    assert days.cache is not gap.cache
    assert days.cache.lookup(1 << 2) == "Wednesday"
    assert gap.cache.lookup(1 << 2) == "Two"


def test_cached_descriptor_decodes_once(days_entries) -> None:
    calls = []

    def decode(table, mask):
        calls.append(mask)
        return mstring(table, mask)

    stringer = FlagStringer(table_for_entries(days_entries, "Days"), cached=True, decode=decode)

    assert stringer(5) == stringer(5) == "(Monday|Wednesday)"
    assert calls == [5]


def test_signed_masks_widen_to_64_bits(days_entries) -> None:
    stringer = make_stringer(days_entries, "Days")

    assert stringer(-128) == "Days(0xffffffffffffff80)"
    assert stringer.cache.lookup((1 << 64) - 128) == "Days(0xffffffffffffff80)"
