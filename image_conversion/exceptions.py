"""Typed failures raised by the conversion pipeline.

Every public operation either completes or raises one of these; there is no
partial-success return value.
"""

from __future__ import annotations


class ImageConversionError(Exception):
    """Base class for all image_conversion failures."""


class InvalidTemporaryDirectory(ImageConversionError):
    NOT_CREATABLE = "not_creatable"
    NOT_WRITABLE = "not_writable"

    def __init__(self, path: str, reason: str, message: str):
        super().__init__(message)
        self.path = path
        self.reason = reason

    @classmethod
    def not_creatable(cls, path: str) -> InvalidTemporaryDirectory:
        return cls(path, cls.NOT_CREATABLE, f"temporary directory {path!r} does not exist and can't be created")

    @classmethod
    def not_writable(cls, path: str) -> InvalidTemporaryDirectory:
        return cls(path, cls.NOT_WRITABLE, f"temporary directory {path!r} is not writable")


class CouldNotConvert(ImageConversionError):
    """A manipulation group could not be turned into an engine call."""


class UnknownManipulation(CouldNotConvert):
    def __init__(self, manipulation: str):
        super().__init__(f"cannot convert unknown manipulation {manipulation!r}")
        self.manipulation = manipulation


class IOFailure(ImageConversionError):
    """A copy/create/delete/process step on the filesystem failed.

    The original OSError (or engine error) is chained as ``__cause__``.
    """

    def __init__(self, path: str, operation: str, detail: str | None = None):
        msg = f"{operation} failed for {path!r}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.path = path
        self.operation = operation
