"""Low-level file operations for the artifact store.

Every helper logs, and turns OSError into IOFailure naming the path and
the attempted operation. Nothing here retries or swallows a failure.
"""

import os
import shutil

from image_conversion.exceptions import IOFailure
from image_conversion.logger import get_logger

_logger = get_logger("file_operations")


def copy_file(src: str, dest: str) -> str:
    """Copy a file to an explicit destination path.

    Args:
        src: Source file path
        dest: Target file path (overwritten if present)

    Returns:
        Target file path

    Raises:
        IOFailure: If copy fails
    """
    _logger.debug("copying file: %s -> %s", src, dest)
    try:
        shutil.copyfile(src, dest)
    except OSError as e:
        _logger.error("copy failed: %s -> %s, error: %s", src, dest, e)
        raise IOFailure(dest, "copy", str(e)) from e
    _logger.debug("copy success: %s -> %s", src, dest)
    return dest


def delete_file(path: str) -> None:
    """Permanently delete a single file.

    Raises:
        IOFailure: If the file is missing or can't be removed
    """
    _logger.debug("deleting file: %s", path)
    try:
        os.unlink(path)
    except OSError as e:
        _logger.error("delete failed: %s -> %s", path, e)
        raise IOFailure(path, "delete", str(e)) from e


def make_directory(path: str) -> None:
    """Create a single directory level (parents must exist)."""
    _logger.debug("creating directory: %s", path)
    try:
        os.mkdir(path)
    except OSError as e:
        _logger.error("mkdir failed: %s -> %s", path, e)
        raise IOFailure(path, "mkdir", str(e)) from e


def remove_directory(path: str) -> None:
    """Remove an empty directory."""
    _logger.debug("removing directory: %s", path)
    try:
        os.rmdir(path)
    except OSError as e:
        _logger.error("rmdir failed: %s -> %s", path, e)
        raise IOFailure(path, "rmdir", str(e)) from e
