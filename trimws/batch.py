"""Run the trim engine over many files and collect one outcome per file."""

from __future__ import annotations

import contextlib
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, List, Mapping, Optional, TextIO, Union

import pandas as pd

from .core import TrimError
from .engine import RunResult, trim
from .lines import iter_lines, readlines
from .replace import AtomicFileReplacer

SUMMARY_COLUMNS = [
    "path",
    "status",
    "bytes_saved",
    "lines_trimmed",
    "newlines_dropped",
    "error",
]


@dataclass
class TrimOutcome:
    """Result of trimming one path: either a `RunResult` or the error that stopped it."""

    path: Path
    result: Optional[RunResult] = None
    error: Optional[TrimError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_row(self) -> dict:
        result = self.result or RunResult(bytes_saved=0)
        return {
            "path": str(self.path),
            "status": "trimmed" if self.ok else "failed",
            "bytes_saved": result.bytes_saved,
            "lines_trimmed": result.lines_trimmed,
            "newlines_dropped": result.newlines_dropped,
            "error": "" if self.ok else self.error.describe(include_path=False),
        }


def _as_trim_error(exc: Exception, path: Path) -> TrimError:
    if isinstance(exc, TrimError):
        if exc.path is None:
            exc.path = path
        return exc
    error = TrimError(str(exc), path=path)
    error.__cause__ = exc
    return error


def _resolved(path: Path) -> Path:
    try:
        return path.resolve()
    except (OSError, RuntimeError):
        return path


def _trim_file(
    path: Path,
    in_place: bool,
    suppress_final_newline: bool,
    output: Optional[TextIO],
    visual: Optional[TextIO],
    replacer: AtomicFileReplacer,
    colour: bool,
) -> TrimOutcome:
    try:
        if in_place:
            result = replacer.replace(path, suppress_final_newline)
        else:
            with contextlib.closing(readlines(path)) as lines:
                result = trim(
                    lines,
                    output,
                    visual,
                    suppress_final_newline,
                    colour=colour,
                )
    except (TrimError, OSError) as exc:
        return TrimOutcome(path, error=_as_trim_error(exc, path))
    return TrimOutcome(path, result=result)


def run_batch(
    paths: Iterable[Union[str, Path]],
    in_place: bool,
    suppress_final_newline: bool = False,
    *,
    output: Optional[TextIO] = None,
    visual: Optional[TextIO] = None,
    replacer: Optional[AtomicFileReplacer] = None,
    max_workers: Optional[int] = None,
    colour: bool = True,
) -> Dict[Path, TrimOutcome]:
    """
    Trim every path and map it to its outcome.

    In-place mode processes files concurrently; files are independent and a
    failure only affects its own outcome. Paths that name the same file, such
    as a symlink and its target, are trimmed once and every one of them maps
    to that outcome. Stream mode writes every file to the shared `output`, so
    files run one after another in the given order to keep each file's output
    contiguous.

    Args:
        paths: Files to trim. Repeated paths are processed once.
        in_place: Rewrite the files instead of streaming to `output`.
        suppress_final_newline: Omit the canonical trailing newline.
        output: Sink for stream mode (required there).
        visual: Optional visualization sink for stream mode; ignored in place.
        replacer: Replacer for in-place mode (default: temp files beside sources).
        max_workers: Thread pool size for in-place mode.
        colour: Paint the visualization with ANSI colours.

    Returns:
        dict: One `TrimOutcome` per distinct input path, in first-seen order.
    """
    unique = list(dict.fromkeys(Path(p) for p in paths))
    if not in_place and output is None:
        raise ValueError("output is required unless trimming in place")
    replacer = replacer or AtomicFileReplacer()

    def job(path: Path) -> TrimOutcome:
        return _trim_file(
            path,
            in_place,
            suppress_final_newline,
            output,
            None if in_place else visual,
            replacer,
            colour,
        )

    if not in_place:
        return {path: job(path) for path in unique}

    aliases: Dict[Path, List[Path]] = {}
    for path in unique:
        aliases.setdefault(_resolved(path), []).append(path)
    first_paths = [group[0] for group in aliases.values()]

    if len(first_paths) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(job, first_paths))
    else:
        outcomes = [job(path) for path in first_paths]

    by_path = {}
    for group, outcome in zip(aliases.values(), outcomes):
        for path in group:
            by_path[path] = TrimOutcome(path, outcome.result, outcome.error)
    return {path: by_path[path] for path in unique}


def trim_stream(
    stream: BinaryIO,
    output: TextIO,
    visual: Optional[TextIO] = None,
    suppress_final_newline: bool = False,
    *,
    name: str = "<stdin>",
    colour: bool = True,
) -> TrimOutcome:
    """Trim a binary input stream (normally stdin) into `output`."""
    path = Path(name)
    try:
        result = trim(
            iter_lines(stream, name=name),
            output,
            visual,
            suppress_final_newline,
            colour=colour,
        )
    except (TrimError, OSError) as exc:
        return TrimOutcome(path, error=_as_trim_error(exc, path))
    return TrimOutcome(path, result=result)


def outcomes_table(
    outcomes: Union[Mapping[Path, TrimOutcome], Iterable[TrimOutcome]],
) -> pd.DataFrame:
    """Tabulate outcomes, one row per path, sorted by path."""
    if isinstance(outcomes, Mapping):
        outcomes = outcomes.values()
    rows: List[dict] = [outcome.as_row() for outcome in outcomes]
    table = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
    return table.sort_values("path", kind="stable").reset_index(drop=True)


def write_summary_csv(
    outcomes: Union[Mapping[Path, TrimOutcome], Iterable[TrimOutcome]],
    destination: Union[str, Path],
) -> Path:
    """Write the outcome table as CSV and return the destination path."""
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    outcomes_table(outcomes).to_csv(destination, index=False)
    return destination
