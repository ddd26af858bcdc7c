"""Line sources: split binary streams on LF and decode each line."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from .core import ReadError

ENCODING = "utf-8"


@dataclass(frozen=True)
class Line:
    """One raw input line, without its LF terminator."""

    number: int
    text: str


def iter_lines(
    stream: BinaryIO,
    *,
    name: Optional[str] = None,
    encoding: str = ENCODING,
) -> Iterator[str]:
    """
    Yield the decoded lines of a binary stream.

    Only ``\\n`` separates lines. A ``\\r`` in front of it stays part of the
    line, where it is trailing whitespace like any other. A trailing empty
    segment is not a line, so ``b"abc"`` and ``b"abc\\n"`` both give
    ``["abc"]`` and empty input gives nothing.
    """
    number = 0
    while True:
        try:
            raw = stream.readline()
        except OSError as exc:
            raise ReadError(
                f"Could not read input: {exc}", path=name, line_number=number + 1
            ) from exc
        if not raw:
            return
        number += 1
        if raw.endswith(b"\n"):
            raw = raw[:-1]
        try:
            yield raw.decode(encoding)
        except UnicodeDecodeError as exc:
            raise ReadError(
                f"Line is not valid {encoding}: {exc.reason}",
                path=name,
                line_number=number,
            ) from exc


def readlines(path: Union[str, Path], encoding: str = ENCODING) -> Iterator[str]:
    """Yield the lines of the file at `path`; the file closes with the generator."""
    path = Path(path)
    try:
        handle = path.open("rb")
    except OSError as exc:
        raise ReadError(f"Could not open file: {exc.strerror or exc}", path=path) from exc
    with handle:
        yield from iter_lines(handle, name=str(path), encoding=encoding)
