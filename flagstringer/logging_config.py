"""Logging setup for the command line tool."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

__all__ = ["configure_logging"]


def configure_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """Configure root logging handlers.

    Existing root handlers are removed so repeated invocations (tests, nested
    CLI calls) do not duplicate output.
    """

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    level = logging.DEBUG if verbose else logging.INFO
    root.setLevel(level)

    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter("flagstringer: %(levelname)s: %(message)s"))
    root.addHandler(stream)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(file_handler)
