"""Atomic in-place replacement of files with their trimmed content."""

from __future__ import annotations

import contextlib
import hashlib
import os
import shutil
from pathlib import Path
from typing import Optional, Union

from .core import ReplacementError
from .engine import RunResult, trim
from .lines import ENCODING, readlines

TEMP_SUFFIX = ".trim"


class AtomicFileReplacer:
    """
    Rewrite files through a temp-file-then-rename swap.

    All writing happens at the temp path; the original path only ever sees
    the final ``os.replace``, so it holds either the old content or the
    complete trimmed content. A symlink is followed and its target is the
    file that gets replaced, so the link itself survives.

    Args:
        temp_root: Directory holding the temp files. ``None`` puts each temp
            file next to its source, which keeps the rename on one filesystem.
    """

    def __init__(self, temp_root: Optional[Union[str, Path]] = None) -> None:
        self.temp_root = None if temp_root is None else Path(temp_root)

    def temp_path_for(self, path: Union[str, Path]) -> Path:
        """Deterministic temp path, unique per resolved source path."""
        source = Path(path).resolve()
        digest = hashlib.sha256(os.fsencode(source)).hexdigest()[:16]
        root = self.temp_root if self.temp_root is not None else source.parent
        return root / f".{digest}{TEMP_SUFFIX}"

    def replace(
        self, path: Union[str, Path], suppress_final_newline: bool = False
    ) -> RunResult:
        """
        Trim the file at `path` in place.

        Raises:
            ReplacementError: If the temp file cannot be prepared or renamed.
            ReadError: If the original cannot be read.
            WriteError: If the temp file cannot be written.
        """
        path = Path(path)
        try:
            target = path.resolve()
        except (OSError, RuntimeError) as exc:  # symlink loop
            raise ReplacementError(f"Could not resolve path: {exc}", path=path) from exc
        temp_path = self.temp_path_for(target)

        try:
            if temp_path.exists():
                temp_path.unlink()
            # copies the permission bits along with the bytes
            shutil.copy(path, temp_path)
        except OSError as exc:
            raise ReplacementError(
                f"Could not prepare temporary file {temp_path}: {exc}", path=path
            ) from exc

        try:
            try:
                handle = temp_path.open("w", encoding=ENCODING, newline="")
            except OSError as exc:
                raise ReplacementError(
                    f"Could not open temporary file {temp_path}: {exc}", path=path
                ) from exc
            with handle, contextlib.closing(readlines(path)) as lines:
                result = trim(
                    lines,
                    handle,
                    None,
                    suppress_final_newline,
                )
            try:
                os.replace(temp_path, target)
            except OSError as exc:
                raise ReplacementError(
                    f"Could not move trimmed content into place: {exc}", path=path
                ) from exc
        except BaseException:
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
            raise

        return result


def replace_in_place(
    path: Union[str, Path],
    suppress_final_newline: bool = False,
    *,
    temp_root: Optional[Union[str, Path]] = None,
) -> RunResult:
    """Trim a single file in place; see `AtomicFileReplacer`."""
    return AtomicFileReplacer(temp_root).replace(path, suppress_final_newline)
