"""Loading flag entries from JSON or YAML manifests.

A manifest lists the constants of one or more types without any source code::

    types:
      Gap:
        - {name: Zero, value: 0}
        - {name: Two, bit: 2}
        - {name: Three, value: 0x8}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from .exceptions import ManifestError
from .runs import FlagEntry

LOGGER = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


def _entry_from_mapping(type_name: str, index: int, item: Any) -> FlagEntry:
    if not isinstance(item, Mapping):
        raise ManifestError(f"{type_name}[{index}]: expected a mapping, got {type(item).__name__}")
    name = item.get("name")
    if not isinstance(name, str) or not name:
        raise ManifestError(f"{type_name}[{index}]: missing name")
    if "bit" in item:
        bit = item["bit"]
        if not isinstance(bit, int) or isinstance(bit, bool) or not 0 <= bit < 64:
            raise ManifestError(f"{type_name}[{index}]: bit must be an integer in 0..63")
        return FlagEntry.at_bit(name, bit, index)
    value = item.get("value")
    if isinstance(value, str):
        try:
            value = int(value, 0)
        except ValueError as exc:
            raise ManifestError(f"{type_name}[{index}]: invalid value {value!r}") from exc
    if not isinstance(value, int) or isinstance(value, bool):
        raise ManifestError(f"{type_name}[{index}]: value must be an integer")
    return FlagEntry(name=name, value=value, decl_order=index)


def parse_manifest(data: Any) -> Dict[str, List[FlagEntry]]:
    """Return the flag entries described by an already decoded manifest."""

    if not isinstance(data, Mapping) or not isinstance(data.get("types"), Mapping):
        raise ManifestError("manifest must contain a 'types' mapping")
    result: Dict[str, List[FlagEntry]] = {}
    for type_name, items in data["types"].items():
        if not isinstance(items, list):
            raise ManifestError(f"{type_name}: expected a list of constants")
        result[str(type_name)] = [
            _entry_from_mapping(str(type_name), index, item) for index, item in enumerate(items)
        ]
    return result


def load_manifest(path: Path) -> Dict[str, List[FlagEntry]]:
    """Read ``path`` as JSON or YAML depending on its suffix."""

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ManifestError(f"failed to parse manifest {path}: {exc}") from exc
    result = parse_manifest(data)
    LOGGER.debug("loaded %d types from %s", len(result), path)
    return result


__all__ = ["load_manifest", "parse_manifest"]
