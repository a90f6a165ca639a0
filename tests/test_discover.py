from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from flagstringer.discover import collect_entries, find_entries, iter_source_files
from flagstringer.exceptions import ConstantError

DAYS_SOURCE = textwrap.dedent(
    """
    class Days(int):
        Monday = 1 << 0
        Tuesday = 1 << 1
        Wednesday = Tuesday << 1
        Weekend = Monday | Tuesday
        _hidden = 1 << 9
        label = "days"

        def __str__(self) -> str:
            return Days_string(self)
    """
)

PERM_SOURCE = textwrap.dedent(
    """
    class Perm(int):
        pass

    PermNone: Perm = Perm(0)
    PermRead: Perm = Perm(1 << 2)  # read
    PermWrite = Perm(PermRead << 1)
    PermExec: "Perm" = 0x20  # exec
    other = 1 << 3
    """
)


def _pairs(entries):
    return [(entry.name, entry.value, entry.decl_order) for entry in entries]


def test_class_body_constants_are_folded() -> None:
    entries = find_entries(DAYS_SOURCE, "Days")

    assert _pairs(entries) == [
        ("Monday", 1, 0),
        ("Tuesday", 2, 1),
        ("Wednesday", 4, 2),
        ("Weekend", 3, 3),
    ]


def test_module_level_typed_constants() -> None:
    entries = find_entries(PERM_SOURCE, "Perm")

    assert _pairs(entries) == [
        ("PermNone", 0, 0),
        ("PermRead", 4, 1),
        ("PermWrite", 8, 2),
        ("PermExec", 32, 3),
    ]


def test_trim_prefix_and_line_comment() -> None:
    trimmed = find_entries(PERM_SOURCE, "Perm", trim_prefix="Perm")
    assert [entry.name for entry in trimmed] == ["None", "Read", "Write", "Exec"]

    commented = find_entries(PERM_SOURCE, "Perm", trim_prefix="Perm", line_comment=True)
    assert [entry.name for entry in commented] == ["None", "read", "Write", "exec"]


def test_unresolvable_typed_constant_is_rejected() -> None:
    source = "Mode: Mode = compute()\n"

    with pytest.raises(ConstantError, match="can't handle non-integer constant Mode"):
        find_entries(source, "Mode", filename="mode.py")


def test_collect_entries_scans_directories(tmp_path: Path) -> None:
    (tmp_path / "a_days.py").write_text(DAYS_SOURCE, encoding="utf-8")
    (tmp_path / "b_more.py").write_text(
        "Thursday = Days(1 << 3)\nFriday: Days = 1 << 4\n", encoding="utf-8"
    )
    (tmp_path / "days_string.py").write_text("Saturday = Days(1 << 5)\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("Sunday = Days(1 << 6)\n", encoding="utf-8")

    files = [path.name for path in iter_source_files([tmp_path])]
    found = collect_entries([tmp_path], ["Days", "Other"])

    assert files == ["a_days.py", "b_more.py"]
    assert [entry.name for entry in found["Days"]] == [
        "Monday",
        "Tuesday",
        "Wednesday",
        "Weekend",
        "Thursday",
        "Friday",
    ]
    assert [entry.decl_order for entry in found["Days"]] == [0, 1, 2, 3, 4, 5]
    assert found["Other"] == []
