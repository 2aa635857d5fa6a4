"""Path normalization utilities.

This module centralizes the project's path rules:

- Use absolute paths when interacting with the filesystem.
- Compare directories by their normalized absolute string (drive letter
  casing normalized on Windows), never by the raw caller-supplied value.
"""

from __future__ import annotations

import os
from pathlib import Path

_DRIVE_PREFIX_LEN = 2


def _normalize_drive_letter(path_str: str) -> str:
    # Normalize drive letter casing on Windows ("c:\\" -> "C:\\").
    if len(path_str) >= _DRIVE_PREFIX_LEN and path_str[1] == ":":
        return path_str[0].upper() + path_str[1:]
    return path_str


def abs_path(path: str | Path) -> Path:
    """Return an absolute path without requiring that it exists."""
    p = Path(path).expanduser()
    try:
        # strict=False avoids exceptions for non-existent paths.
        return p.resolve(strict=False)
    except OSError:
        return p.absolute()


def abs_path_str(path: str | Path) -> str:
    """Absolute, OS-native path string (Windows uses backslashes)."""
    return _normalize_drive_letter(str(abs_path(path)))


def same_path(a: str | Path, b: str | Path) -> bool:
    return abs_path_str(a) == abs_path_str(b)


def directory_is_empty(path: str | Path) -> bool:
    with os.scandir(path) as it:
        return next(it, None) is None
