"""Python source generation for ``<Type>_string`` functions.

Plain enumerations are rendered like the classic stringer: an index table per
run of consecutive values, or a dict when the values are too sparse.

Bitflags have two renderings.  The specialized one declares the name blob,
offsets and skips as module level constants for every type.  The shared one
wraps the same table in a :class:`~flagstringer.descriptor.FlagStringer` value.  Both call the
single decode and cache implementation shipped with this package, so their
output is identical for any mask.
"""

from __future__ import annotations

import keyword
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple, Union

from .cache import CACHE_CAPACITY
from .descriptor import Strategy
from .exceptions import StringerError
from .runs import EnumLayout, FlagEntry, Run, partition_runs, split_into_runs
from .table import EncodedTable, build_table

LOGGER = logging.getLogger(__name__)

HEADER = '# Code generated by "{command}"; DO NOT EDIT.'

_IMPORTS: Dict[Strategy, Sequence[str]] = {
    Strategy.SPECIALIZED: (
        "from flagstringer.decode import mstring",
        "from flagstringer.table import EncodedTable",
    ),
    Strategy.SPECIALIZED_CACHED: (
        "from flagstringer.cache import BoundedCache, cached_mstring",
        "from flagstringer.table import EncodedTable",
    ),
    Strategy.SHARED: (
        "from flagstringer.descriptor import FlagStringer",
        "from flagstringer.table import EncodedTable",
    ),
    Strategy.SHARED_CACHED: (
        "from flagstringer.descriptor import FlagStringer",
        "from flagstringer.table import EncodedTable",
    ),
}

_SPECIALIZED_FUNC = '''

def {type}_string(m: int) -> str:
    return mstring(_{type}_table, m)
'''

_SPECIALIZED_CACHED_FUNC = '''

def {type}_string(m: int) -> str:
    return cached_mstring(_{type}_cache, _{type}_table, m)
'''

_SHARED_FUNC = '''

def {type}_string(m: int) -> str:
    return _{type}_stringer(m)
'''


@dataclass
class GeneratorOptions:
    """Knobs resolved once from the command line."""

    bitflag: bool = False
    cached: bool = True
    shared: bool = False
    capacity: int = CACHE_CAPACITY
    command: str = "flagstringer"

    @property
    def strategy(self) -> Strategy:
        return Strategy.select(cached=self.cached, shared=self.shared)


def int_string(values: Sequence[int]) -> str:
    """Return ``values`` as a Python tuple literal."""

    if len(values) == 1:
        return f"({values[0]},)"
    return "(" + ", ".join(str(v) for v in values) + ")"


def first_bit_literal(table: EncodedTable) -> str:
    return f"1 << {table.first_bit.bit_length() - 1}"


def check_type_name(type_name: str) -> None:
    """Reject type names that cannot be used inside generated identifiers."""

    if not type_name.isidentifier() or keyword.iskeyword(type_name):
        raise StringerError(f"invalid type name {type_name!r}: not a Python identifier")


def _name_and_index(run: Run) -> Tuple[str, List[int]]:
    index = [0]
    for entry in run:
        index.append(index[-1] + len(entry.name))
    return "".join(entry.name for entry in run), index


def _restore(first: int) -> str:
    if first > 0:
        return f"i + {first}"
    if first < 0:
        return f"i - {-first}"
    return "i"


@dataclass
class Generator:
    """Accumulates rendered types and produces a complete module."""

    options: GeneratorOptions = field(default_factory=GeneratorOptions)
    _chunks: List[str] = field(default_factory=list)
    _imports: Set[str] = field(default_factory=set)
    types: List[str] = field(default_factory=list)

    def printf(self, text: str) -> None:
        self._chunks.append(text)

    def generate(
        self, type_name: str, entries: Sequence[FlagEntry]
    ) -> Union[EncodedTable, List[Run]]:
        """Render the string function for ``type_name``.

        Nothing is added to the output when the type cannot be rendered, so the
        caller may keep going with other types.
        """

        check_type_name(type_name)
        if not entries:
            raise StringerError(f"no values defined for type {type_name}")
        if self.options.bitflag:
            return self._generate_bitflag(type_name, entries)
        return self._generate_enum(type_name, entries)

    def _generate_enum(self, type_name: str, entries: Sequence[FlagEntry]) -> List[Run]:
        runs = split_into_runs(entries)
        layout = EnumLayout.select(runs)
        if layout is EnumLayout.ONE_RUN:
            text = self.render_one_run(type_name, runs[0])
        elif layout is EnumLayout.MULTIPLE_RUNS:
            text = self.render_multiple_runs(type_name, runs)
        else:
            text = self.render_map(type_name, runs)
        self.printf(text)
        self.types.append(type_name)
        LOGGER.info("generated %s_string (%s)", type_name, layout.value)
        return runs

    def render_one_run(self, t: str, run: Run) -> str:
        name, index = _name_and_index(run)
        first = run[0].value
        lines = [
            "",
            "",
            f"_{t}_name = {name!r}",
            f"_{t}_index = {int_string(index)}",
            "",
            "",
            f"def {t}_string(i: int) -> str:",
        ]
        if first:
            lines.append(f"    i -= {first}" if first > 0 else f"    i += {-first}")
        lines.append(f"    if i < 0 or i >= len(_{t}_index) - 1:")
        lines.append(f'        return f"{t}({{{_restore(first)}}})"')
        lines.append(f"    return _{t}_name[_{t}_index[i]:_{t}_index[i + 1]]")
        return "\n".join(lines) + "\n"

    def render_multiple_runs(self, t: str, runs: Sequence[Run]) -> str:
        lines = ["", ""]
        body: List[str] = []
        indexes: List[str] = []
        for n, run in enumerate(runs):
            name, index = _name_and_index(run)
            lines.append(f"_{t}_name_{n} = {name!r}")
            if len(run) == 1:
                body.append(f"    if i == {run[0].value}:")
                body.append(f"        return _{t}_name_{n}")
                continue
            indexes.append(f"_{t}_index_{n} = {int_string(index)}")
            first = run[0].value
            body.append(f"    if {first} <= i <= {run[-1].value}:")
            if first:
                body.append(f"        i -= {first}" if first > 0 else f"        i += {-first}")
            body.append(f"        return _{t}_name_{n}[_{t}_index_{n}[i]:_{t}_index_{n}[i + 1]]")
        lines.extend(indexes)
        lines.extend(["", "", f"def {t}_string(i: int) -> str:"])
        lines.extend(body)
        lines.append(f'    return f"{t}({{i}})"')
        return "\n".join(lines) + "\n"

    def render_map(self, t: str, runs: Sequence[Run]) -> str:
        names = "".join(entry.name for run in runs for entry in run)
        lines = ["", "", f"_{t}_name = {names!r}", "", f"_{t}_map = {{"]
        n = 0
        for run in runs:
            for entry in run:
                lines.append(f"    {entry.value}: _{t}_name[{n}:{n + len(entry.name)}],")
                n += len(entry.name)
        lines.extend(
            [
                "}",
                "",
                "",
                f"def {t}_string(i: int) -> str:",
                f"    name = _{t}_map.get(i)",
                "    if name is not None:",
                "        return name",
                f'    return f"{t}({{i}})"',
            ]
        )
        return "\n".join(lines) + "\n"

    def _generate_bitflag(self, type_name: str, entries: Sequence[FlagEntry]) -> EncodedTable:
        zero, runs = partition_runs(entries)
        if not runs:
            raise StringerError(f"no values defined for type {type_name}")
        table = build_table(runs, type_name, zero)

        strategy = self.options.strategy
        if strategy.shared:
            text = self.render_shared(table, cached=strategy.cached)
        else:
            text = self.render_specialized(table, cached=strategy.cached)

        self._imports.update(_IMPORTS[strategy])
        self.printf(text)
        self.types.append(type_name)
        LOGGER.info("generated %s_string (%s)", type_name, strategy.value)
        return table

    def render_specialized(self, table: EncodedTable, *, cached: bool) -> str:
        t = table.type_name
        lines = [
            "",
            "",
            f"_{t}_name = {table.blob!r}",
            f"_{t}_offset = {int_string(table.offsets)}",
        ]
        skips = ""
        if table.has_gaps:
            lines.append(f"_{t}_skips = {int_string(table.skips)}")
            skips = f", _{t}_skips"
        lines.append(
            f"_{t}_table = EncodedTable({t!r}, {table.zero_name!r}, _{t}_name, _{t}_offset{skips}, "
            f"first_bit={first_bit_literal(table)})"
        )
        if cached:
            lines.append(f"_{t}_cache = BoundedCache({self.options.capacity})")
            func = _SPECIALIZED_CACHED_FUNC
        else:
            func = _SPECIALIZED_FUNC
        return "\n".join(lines) + "\n" + func.format(type=t)

    def render_shared(self, table: EncodedTable, *, cached: bool) -> str:
        t = table.type_name
        lines = [
            "",
            "",
            f"_{t}_stringer = FlagStringer(",
            "    EncodedTable(",
            f"        type_name={t!r},",
            f"        zero_name={table.zero_name!r},",
            f"        blob={table.blob!r},",
            f"        offsets={int_string(table.offsets)},",
        ]
        if table.has_gaps:
            lines.append(f"        skips={int_string(table.skips)},")
        lines.append(f"        first_bit={first_bit_literal(table)},")
        lines.append("    ),")
        if cached:
            lines.append("    cached=True,")
            lines.append(f"    capacity={self.options.capacity},")
        lines.append(")")
        return "\n".join(lines) + "\n" + _SHARED_FUNC.format(type=t)

    def format(self) -> str:
        """Return the generated module, checked for syntax errors."""

        out: List[str] = [HEADER.format(command=self.options.command)]
        out.append("")
        out.append("from __future__ import annotations")
        if self._imports:
            out.append("")
            out.extend(sorted(self._imports))
        out.append("".join(self._chunks).rstrip("\n"))
        out.append("")
        out.append("")
        exported = ", ".join(f'"{t}_string"' for t in self.types)
        out.append(f"__all__ = [{exported}]")
        source = "\n".join(out) + "\n"
        try:
            compile(source, "<generated>", "exec")
        except SyntaxError as exc:
            LOGGER.warning("internal error: invalid Python generated: %s", exc)
        return source


__all__ = ["Generator", "GeneratorOptions", "HEADER", "check_type_name", "int_string"]
