"""Test configuration ensuring the project package is importable."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List

import pytest

ROOT = Path(__file__).resolve().parent.parent
TESTS = ROOT / "tests"

for entry in (str(ROOT), str(TESTS)):
    if entry not in sys.path:
        sys.path.insert(0, entry)

from flagstringer.runs import FlagEntry  # noqa: E402

DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

GAP_BITS = [
    ("Two", 2),
    ("Three", 3),
    ("Five", 5),
    ("Six", 6),
    ("Seven", 7),
    ("Eight", 8),
    ("Nine", 9),
    ("Eleven", 11),
]


@pytest.fixture()
def days_entries() -> List[FlagEntry]:
    return [FlagEntry.at_bit(name, bit, bit) for bit, name in enumerate(DAYS)]


@pytest.fixture()
def gap_entries() -> List[FlagEntry]:
    entries = [FlagEntry(name="Zero", value=0, decl_order=0)]
    for order, (name, bit) in enumerate(GAP_BITS, start=1):
        entries.append(FlagEntry.at_bit(name, bit, order))
    return entries


@pytest.fixture()
def largegap_entries() -> List[FlagEntry]:
    return [
        FlagEntry.at_bit("Seven", 7, 0),
        FlagEntry.at_bit("ThirtyOne", 31, 1),
        FlagEntry.at_bit("SixtyThree", 63, 2),
    ]
