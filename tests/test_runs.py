from __future__ import annotations

import pytest

from flagstringer.runs import MAP_THRESHOLD, EnumLayout, FlagEntry, partition_runs, single_bit_set, split_into_runs


def _names(runs):
    return [[entry.name for entry in run] for run in runs]


def test_single_bit_set() -> None:
    assert single_bit_set(1)
    assert single_bit_set(1 << 63)
    assert not single_bit_set(0)
    assert not single_bit_set(3)


def test_partition_sorts_and_splits_runs(gap_entries) -> None:
    zero, runs = partition_runs(reversed(gap_entries))

    assert zero is not None and zero.name == "Zero"
    assert _names(runs) == [["Two", "Three"], ["Five", "Six", "Seven", "Eight", "Nine"], ["Eleven"]]


def test_partition_drops_multi_bit_values() -> None:
    entries = [
        FlagEntry("Read", 1, 0),
        FlagEntry("Write", 2, 1),
        FlagEntry("ReadWrite", 3, 2),
        FlagEntry("Exec", 4, 3),
    ]

    zero, runs = partition_runs(entries)

    assert zero is None
    assert _names(runs) == [["Read", "Write", "Exec"]]


def test_partition_first_declared_name_wins() -> None:
    entries = [
        FlagEntry("Alias", 1 << 4, 7),
        FlagEntry("Original", 1 << 4, 2),
        FlagEntry("None_", 0, 5),
        FlagEntry("Nothing", 0, 1),
    ]

    zero, runs = partition_runs(entries)

    assert zero is not None and zero.name == "Nothing"
    assert _names(runs) == [["Original"]]


def test_negative_values_keep_low_64_bits() -> None:
    top = FlagEntry("Top", -(1 << 63), 0)
    everything = FlagEntry("All", -1, 1)

    zero, runs = partition_runs([top, everything])

    assert top.bit_position == 63
    assert everything.bit_position is None
    assert zero is None
    assert _names(runs) == [["Top"]]


def test_at_bit_rejects_out_of_range() -> None:
    with pytest.raises(ValueError):
        FlagEntry.at_bit("Huge", 64)


def test_values_beyond_64_bits_are_dropped() -> None:
    entries = [
        FlagEntry("Big", 1 << 64, 0),
        FlagEntry("Bigger", (1 << 65) | 1, 1),
        FlagEntry("TooNegative", -(1 << 63) - 1, 2),
        FlagEntry("One", 1, 3),
    ]

    zero, runs = partition_runs(entries)

    assert zero is None
    assert _names(runs) == [["One"]]
    assert not entries[0].in_range
    assert FlagEntry("Top", -(1 << 63)).in_range


def test_split_into_runs_for_plain_enums() -> None:
    entries = [
        FlagEntry("Five", 5, 0),
        FlagEntry("MinusOne", -1, 1),
        FlagEntry("Zero", 0, 2),
        FlagEntry("Nought", 0, 3),
        FlagEntry("Six", 6, 4),
    ]

    runs = split_into_runs(entries)

    assert _names(runs) == [["MinusOne", "Zero"], ["Five", "Six"]]
    assert EnumLayout.select(runs) is EnumLayout.MULTIPLE_RUNS
    assert EnumLayout.select(runs[:1]) is EnumLayout.ONE_RUN
    assert EnumLayout.select([runs[0]] * (MAP_THRESHOLD + 1)) is EnumLayout.MAP
