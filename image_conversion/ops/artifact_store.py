"""Lifecycle of the temporary workspace and the intermediate artifacts in it.

At most one intermediate artifact is live at a time. A new artifact is
recorded before its predecessor is deleted, so there is never a moment with
no usable artifact on disk. The input image is only ever read.
"""

from __future__ import annotations

import os
import tempfile

from image_conversion.exceptions import ImageConversionError, InvalidTemporaryDirectory, IOFailure
from image_conversion.logger import get_logger
from image_conversion.ops.file_operations import copy_file, delete_file, make_directory, remove_directory
from image_conversion.path_utils import abs_path_str, directory_is_empty, same_path

_logger = get_logger("artifact_store")


class TemporaryArtifactStore:
    """Owns the workspace directory and the live intermediate artifact.

    ``default_directory`` is the directory used when no workspace is
    configured; it is never removed, even when it ends up empty. It defaults
    to the process temp directory, read once here.
    """

    def __init__(self, default_directory: str | None = None) -> None:
        self._default_directory = abs_path_str(default_directory or tempfile.gettempdir())
        self._directory = self._default_directory
        self._input_image: str | None = None
        self._live: str | None = None
        self._finalized = False

    # ---- properties ------------------------------------------------
    @property
    def directory(self) -> str:
        return self._directory

    @property
    def default_directory(self) -> str:
        return self._default_directory

    @property
    def input_image(self) -> str | None:
        return self._input_image

    @property
    def live_artifact(self) -> str | None:
        return self._live

    @property
    def finalized(self) -> bool:
        return self._finalized

    # ---- configuration ---------------------------------------------
    def configure_workspace(self, path: str) -> None:
        """Use ``path`` as the workspace, creating it if needed.

        Raises:
            InvalidTemporaryDirectory: if the directory can't be created or
                isn't writable.
            ImageConversionError: if a conversion already started.
        """
        if self._input_image is not None:
            raise ImageConversionError("workspace can't change once a conversion has started")

        if not os.path.isdir(path):
            try:
                make_directory(path)
            except IOFailure as e:
                raise InvalidTemporaryDirectory.not_creatable(path) from e

        if not os.access(path, os.W_OK):
            raise InvalidTemporaryDirectory.not_writable(path)

        self._directory = abs_path_str(path)
        _logger.debug("workspace configured: %s", self._directory)

    def open(self, input_image: str) -> None:
        """Bind the store to its read-only input and lock the workspace."""
        if self._finalized:
            raise ImageConversionError("conversion result was already saved")
        if self._input_image is None:
            self._input_image = input_image
            _logger.debug("store opened: input=%s workspace=%s", input_image, self._directory)
        elif not same_path(self._input_image, input_image):
            raise ImageConversionError(
                f"store is bound to {self._input_image!r}, can't switch to {input_image!r}"
            )

    # ---- artifacts -------------------------------------------------
    def record_intermediate(self, path: str) -> None:
        """Make ``path`` the live artifact and delete the one it supersedes.

        Raises:
            IOFailure: if ``path`` doesn't exist, or the superseded artifact
                can't be deleted. In the latter case ``path`` is already live.
        """
        if not os.path.isfile(path):
            raise IOFailure(path, "record", "engine output does not exist")
        if self._input_image is not None and same_path(path, self._input_image):
            raise ImageConversionError(f"input image {path!r} can't be recorded as an intermediate artifact")

        previous = self._live
        self._live = path
        _logger.debug("live artifact: %s (supersedes %s)", path, previous)
        if previous is not None and not same_path(previous, path):
            delete_file(previous)

    def finalize(self, destination: str) -> str:
        """Copy the live artifact (or the input, if none) to ``destination``.

        The live artifact is then deleted, and its directory too when it is
        empty and isn't the default directory.
        """
        if self._finalized:
            raise ImageConversionError("conversion result was already saved")

        live = self._live
        if live is None:
            if self._input_image is None:
                raise ImageConversionError("nothing to save: no input image registered")
            copy_file(self._input_image, destination)
            self._finalized = True
            return destination

        copy_file(live, destination)
        self._finalized = True
        self._release(live)
        return destination

    def discard(self) -> None:
        """Delete the live artifact without publishing it."""
        if self._live is None:
            return
        _logger.debug("discarding live artifact: %s", self._live)
        self._release(self._live)

    def _release(self, path: str) -> None:
        delete_file(path)
        self._live = None

        directory = os.path.dirname(path)
        if same_path(directory, self._default_directory):
            return
        try:
            empty = directory_is_empty(directory)
        except OSError as e:
            raise IOFailure(directory, "scan", str(e)) from e
        if empty:
            remove_directory(directory)
