"""
Core utilities for trimws.

Contains the exception hierarchy and the terminal colour helpers shared by the
engine and the command-line interface.
"""

from __future__ import annotations

import os

_RED = "\033[91m"
_GREEN = "\033[92m"
_YELLOW = "\033[93m"
_RESET = "\033[0m"
_WHITE_ON_RED = "\033[97;41m"


def paint(text, colour_code, enabled=True):
    """
    Wrap text in an ANSI colour sequence.

    Args:
        text (str): Text to colour
        colour_code (str): One of the module colour constants
        enabled (bool): Return the text untouched when False

    Returns:
        str: Coloured (or plain) text
    """
    if not enabled or not text:
        return text
    return f"{colour_code}{text}{_RESET}"


def red(text: str, enabled: bool = True) -> str:
    return paint(text, _RED, enabled)


def green(text: str, enabled: bool = True) -> str:
    return paint(text, _GREEN, enabled)


def yellow(text: str, enabled: bool = True) -> str:
    return paint(text, _YELLOW, enabled)


def red_padding(length: int, enabled: bool = True) -> str:
    """Return `length` underscores, white on red, marking removed whitespace."""
    return paint("_" * length, _WHITE_ON_RED, enabled)


def stream_supports_colour(stream) -> bool:
    """Whether ANSI colour should be used on the given stream."""
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:  # closed stream
        return False


class TrimError(Exception):
    """Base exception class for trimws."""

    def __init__(self, message, *, path=None, line_number=None):
        super().__init__(message)
        self.path = path
        self.line_number = line_number

    def describe(self, include_path: bool = True) -> str:
        """Render the error with its location, for per-file reports."""
        location = "" if self.path is None or not include_path else str(self.path)
        if self.line_number is not None:
            if location:
                location = f"{location}:{self.line_number}"
            else:
                location = f"line {self.line_number}"
        if location:
            return f"{location}: {self}"
        return str(self)


class ReadError(TrimError):
    """Raised when a source cannot be opened, read or decoded."""

    pass


class WriteError(TrimError):
    """Raised when an output or visualization sink rejects bytes."""

    pass


class ReplacementError(TrimError):
    """Raised when copying, creating or renaming the in-place temp file fails."""

    pass
