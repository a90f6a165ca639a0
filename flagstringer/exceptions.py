"""Custom exception hierarchy for the bitflag stringer."""

from __future__ import annotations


class StringerError(Exception):
    """Base class for all stringer related errors."""


class EncodingTooLarge(StringerError):
    """Raised when a flag name does not fit in a single offset byte."""

    def __init__(self, name: str, length: int) -> None:
        super().__init__(f"name too long ({length}): {name}")
        self.name = name
        self.length = length


class ConstantError(StringerError):
    """Raised when a typed constant cannot be resolved to an integer."""


class ManifestError(StringerError):
    """Raised when a flag manifest is malformed."""


__all__ = ["StringerError", "EncodingTooLarge", "ConstantError", "ManifestError"]
