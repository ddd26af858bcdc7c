"""
trimws: trim trailing whitespace from text, line by line.

Streams lines through a single-pass trim engine, optionally rewriting files
in place through an atomic temp-file-then-rename swap, and reports how many
bytes were removed.
"""

from ._version import __version__

from .core import ReadError, ReplacementError, TrimError, WriteError
from .engine import RunResult, trim
from .replace import AtomicFileReplacer, replace_in_place
from .batch import TrimOutcome, run_batch
from .main import main  # noqa: F401

__all__ = [
    "__version__",
    "AtomicFileReplacer",
    "ReadError",
    "ReplacementError",
    "RunResult",
    "TrimError",
    "TrimOutcome",
    "WriteError",
    "main",
    "replace_in_place",
    "run_batch",
    "trim",
]
