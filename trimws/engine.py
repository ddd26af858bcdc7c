"""
Streaming trim engine.

Trailing whitespace is removed from every line in a single forward pass.
Newlines are not written eagerly: a run of blank lines only becomes output
once a later non-empty line proves the run is interior. Whatever is still
pending when the input ends is the file's trailing blank lines, and is
dropped.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Optional, TextIO, Tuple

from .core import WriteError, red_padding
from .lines import ENCODING, Line


def _byte_length(text: str) -> int:
    return len(text.encode(ENCODING, errors="surrogatepass"))


@dataclass(frozen=True)
class VisualSpan:
    """A trimmed line together with the length of the span removed from it."""

    number: int
    text: str
    removed: int

    def render(self, colour: bool = True) -> str:
        return f"{self.number:>6}|{self.text}{red_padding(self.removed, colour)}"


@dataclass(frozen=True)
class TrimmedLine:
    number: int
    text: str
    removed: int

    @property
    def is_blank(self) -> bool:
        return not self.text

    def visual_span(self) -> Optional[VisualSpan]:
        if self.removed <= 0:
            return None
        return VisualSpan(self.number, self.text, self.removed)


def trim_line(line: Line) -> TrimmedLine:
    """
    Strip the trailing whitespace of one line.

    ``str.rstrip()`` removes the same suffix as the pattern ``\\s*$``: spaces,
    tabs, carriage returns and the other Unicode whitespace characters.
    ``removed`` counts UTF-8 bytes.
    """
    trimmed = line.text.rstrip()
    removed = _byte_length(line.text[len(trimmed):])
    return TrimmedLine(line.number, trimmed, removed)


class Phase(enum.Enum):
    LEADING = "leading"
    AFTER_CONTENT = "after_content"


@dataclass(frozen=True)
class NewlineBacklog:
    """
    Newlines seen but not yet written.

    While ``LEADING`` no non-empty line has been written and every pending
    newline belongs to a blank line. After content, one of the pending
    newlines is the one that ends the last written line; its fate is decided
    by the canonical terminator rule, not by the backlog.
    """

    phase: Phase = Phase.LEADING
    pending: int = 0

    def blank(self) -> "NewlineBacklog":
        return NewlineBacklog(self.phase, self.pending + 1)

    def content(self) -> Tuple[int, "NewlineBacklog"]:
        """Return the newlines to flush before a non-empty line, and the next state."""
        return self.pending, NewlineBacklog(Phase.AFTER_CONTENT, 1)

    @property
    def has_content(self) -> bool:
        return self.phase is Phase.AFTER_CONTENT

    def discarded(self) -> int:
        """Number of deferred newlines dropped when the input ends in this state."""
        if self.has_content:
            return self.pending - 1
        return self.pending


@dataclass(frozen=True)
class RunResult:
    """
    Summary of one trim run.

    ``bytes_saved`` is the size of the canonical input (each line followed by
    one newline) minus the size of the canonical output (the written content
    plus one terminator when there is content). It does not depend on whether
    the final newline was suppressed.
    """

    bytes_saved: int
    lines_read: int = 0
    lines_trimmed: int = 0
    newlines_dropped: int = 0


def _write(sink: TextIO, text: str) -> None:
    try:
        sink.write(text)
    except OSError as exc:
        raise WriteError(f"Could not write output: {exc}") from exc


def _flush(sink: TextIO) -> None:
    try:
        sink.flush()
    except OSError as exc:
        raise WriteError(f"Could not flush output: {exc}") from exc


def trim(
    lines: Iterable[str],
    output: TextIO,
    visual: Optional[TextIO] = None,
    suppress_final_newline: bool = False,
    *,
    colour: bool = True,
) -> RunResult:
    """
    Trim `lines` and stream the result to `output`.

    Args:
        lines: Raw lines without their LF terminators. Read errors raised
            while iterating abort the run.
        output: Text sink receiving the trimmed content.
        visual: Optional text sink receiving one rendered `VisualSpan` per
            line that lost characters.
        suppress_final_newline: Do not terminate the last line with ``\\n``.
        colour: Paint the visualization filler with ANSI colours.

    Returns:
        RunResult: byte savings and line counters.

    Raises:
        WriteError: If either sink rejects a write or flush.
    """
    backlog = NewlineBacklog()
    removed_total = 0
    lines_read = 0
    lines_trimmed = 0

    for number, raw in enumerate(lines, start=1):
        trimmed = trim_line(Line(number, raw))
        lines_read = number
        removed_total += trimmed.removed
        if trimmed.removed:
            lines_trimmed += 1

        if trimmed.is_blank:
            # might be a trailing blank line; decided once a non-empty line shows up
            backlog = backlog.blank()
        else:
            flush_count, backlog = backlog.content()
            _write(output, "\n" * flush_count + trimmed.text)

        if visual is not None:
            span = trimmed.visual_span()
            if span is not None:
                _write(visual, span.render(colour) + "\n")

    if backlog.has_content and not suppress_final_newline:
        _write(output, "\n")

    _flush(output)
    if visual is not None:
        _flush(visual)

    dropped = backlog.discarded()
    return RunResult(
        bytes_saved=removed_total + dropped,
        lines_read=lines_read,
        lines_trimmed=lines_trimmed,
        newlines_dropped=dropped,
    )
