"""Compact name tables and renderers for bitflag constants."""

from .cache import CACHE_CAPACITY, BoundedCache, ReadWriteLock, cached_mstring
from .codegen import Generator, GeneratorOptions, check_type_name
from .decode import mstring, widen
from .descriptor import FlagStringer, Strategy, make_stringer
from .exceptions import ConstantError, EncodingTooLarge, ManifestError, StringerError
from .runs import MASK64, EnumLayout, FlagEntry, partition_runs, single_bit_set, split_into_runs
from .table import MAX_NAME_LENGTH, EncodedTable, build_table, shift_count, table_for_entries

__all__ = [
    "CACHE_CAPACITY",
    "BoundedCache",
    "ReadWriteLock",
    "cached_mstring",
    "Generator",
    "GeneratorOptions",
    "check_type_name",
    "mstring",
    "widen",
    "FlagStringer",
    "Strategy",
    "make_stringer",
    "ConstantError",
    "EncodingTooLarge",
    "ManifestError",
    "StringerError",
    "MASK64",
    "EnumLayout",
    "FlagEntry",
    "partition_runs",
    "single_bit_set",
    "split_into_runs",
    "MAX_NAME_LENGTH",
    "EncodedTable",
    "build_table",
    "shift_count",
    "table_for_entries",
]
